import datetime

import pytest

from rail_forms.config_proxy import clear_runtime_settings


@pytest.fixture(autouse=True)
def reset_runtime_settings():
    yield
    clear_runtime_settings()


@pytest.fixture
def birthday():
    return datetime.date(1990, 5, 17)


@pytest.fixture
def country(db):
    from tests.models import Country

    return Country.objects.create(name="Canada", code="CA")


@pytest.fixture
def person(db, country, birthday):
    from tests.models import Person

    return Person.objects.create(
        first_name="Ada",
        last_name="Lovelace",
        gender="f",
        date_of_birth=birthday,
        country=country,
    )
