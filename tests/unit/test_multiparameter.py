"""
Unit tests for multi parameter attribute parsing.
"""

import datetime

import pytest
from django.db import models

from rail_forms.forms.attributes import combine_multiparameter, extract_multiparameter_attributes

pytestmark = pytest.mark.unit


def test_extract_groups_positional_keys():
    regular, groups = extract_multiparameter_attributes(
        {"name": "Ada", "born(1i)": "1990", "born(3i)": "17", "born(2i)": "5"}
    )
    assert regular == {"name": "Ada"}
    assert groups == {"born": {1: "1990", 3: "17", 2: "5"}}


def test_date_field_builds_date():
    value = combine_multiparameter({1: "1990", 2: "5", 3: "17"}, models.DateField())
    assert value == datetime.date(1990, 5, 17)


@pytest.mark.parametrize(
    "parts",
    [
        {1: "1990", 2: "", 3: "17"},
        {1: "1990", 2: "2", 3: "30"},
        {1: "year", 2: "2", 3: "3"},
    ],
)
def test_incomplete_or_impossible_dates_become_none(parts):
    assert combine_multiparameter(parts, models.DateField()) is None


def test_datetime_field_builds_aware_datetime():
    value = combine_multiparameter(
        {1: "2020", 2: "1", 3: "2", 4: "13", 5: "45"}, models.DateTimeField()
    )
    assert value.replace(tzinfo=None) == datetime.datetime(2020, 1, 2, 13, 45)
    assert value.tzinfo is not None


def test_time_field_uses_hour_and_minute():
    value = combine_multiparameter({1: "2000", 2: "1", 3: "1", 4: "8", 5: "30"}, models.TimeField())
    assert value == datetime.time(8, 30)


def test_unknown_field_guesses_from_parts():
    assert combine_multiparameter({1: "2020", 2: "1", 3: "2"}, None) == datetime.date(2020, 1, 2)
    assert isinstance(
        combine_multiparameter({1: "2020", 2: "1", 3: "2", 4: "1"}, None), datetime.datetime
    )
