"""
Typed settings for forms and finders.
"""

from dataclasses import dataclass
from typing import Optional

from ..config_proxy import get_settings_proxy


def _filter_fields(cls, values: dict) -> dict:
    valid_fields = set(cls.__dataclass_fields__.keys())
    return {k: v for k, v in values.items() if k in valid_fields}


@dataclass
class FormSettings:
    """Settings controlling validation and transactional saves."""

    database_alias: Optional[str] = None
    discard_keys_on_rollback: bool = True
    association_error_code: str = "association_error"

    @classmethod
    def from_settings(cls) -> "FormSettings":
        merged = get_settings_proxy().section("form_settings")
        return cls(**_filter_fields(cls, merged))


@dataclass
class FinderSettings:
    """Settings controlling finder pagination."""

    default_page_size: int = 20
    max_page_size: int = 100

    @classmethod
    def from_settings(cls) -> "FinderSettings":
        merged = get_settings_proxy().section("finder_settings")
        return cls(**_filter_fields(cls, merged))
