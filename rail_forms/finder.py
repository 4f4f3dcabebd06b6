"""
Finder: filter and paginate a base queryset.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

import django_filters
from django.db import models

from .core.settings import FinderSettings
from .presenters import Presentable

logger = logging.getLogger(__name__)

LEADING_INTEGER = re.compile(r"^\s*[-+]?\d+")


def _to_int(value: Any) -> int:
    """Leading integer of ``value``, 0 when there is none."""
    if isinstance(value, int):
        return value
    match = LEADING_INTEGER.match(str(value or ""))
    return int(match.group()) if match else 0


@dataclass(frozen=True)
class Filter:
    """Simple filter structure."""

    column: str
    value: Any


class Pager:
    """Offset based pager over a queryset."""

    def __init__(self, size: int, offset: int = 0):
        self.size = size
        self.offset = offset
        self.total_count: Optional[int] = None

    def paginate(self, queryset: models.QuerySet) -> models.QuerySet:
        self.total_count = queryset.count()
        return queryset[self.offset : self.offset + self.size]

    @property
    def current_page(self) -> int:
        return self.offset // self.size + 1

    @property
    def page_count(self) -> Optional[int]:
        if self.total_count is None:
            return None
        return max(1, math.ceil(self.total_count / self.size))

    @property
    def has_next_page(self) -> bool:
        return self.total_count is not None and self.offset + self.size < self.total_count

    @property
    def has_previous_page(self) -> bool:
        return self.offset > 0

    @property
    def next_offset(self) -> Optional[int]:
        return self.offset + self.size if self.has_next_page else None

    @property
    def previous_offset(self) -> Optional[int]:
        return max(0, self.offset - self.size) if self.has_previous_page else None

    def page_info(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "page_count": self.page_count,
            "current_page": self.current_page,
            "per_page": self.size,
            "has_next_page": self.has_next_page,
            "has_previous_page": self.has_previous_page,
        }


def _contains_filterset(model: type[models.Model], column: str) -> type[django_filters.FilterSet]:
    """Build a FilterSet matching ``column`` case-insensitively."""
    meta = type("Meta", (), {"model": model, "fields": []})
    return type(
        f"{model.__name__}FinderFilterSet",
        (django_filters.FilterSet,),
        {
            "value": django_filters.CharFilter(field_name=column, lookup_expr="icontains"),
            "Meta": meta,
        },
    )


class Finder(Presentable):
    """Named filters and optional pagination over a base queryset."""

    def __init__(self, scope: models.QuerySet):
        self.scope = scope
        self.pager: Optional[Pager] = None
        self.filters: dict[str, Filter] = {}
        self.settings = FinderSettings.from_settings()
        self._results: Optional[models.QuerySet] = None
        self._filtering = False

    def filter(self, name: str, column: str, value: Any) -> "Finder":
        """
        Register a named filter; the first registration of a name wins.

        A non-empty value narrows the scope to rows whose column contains it.
        """
        if column and name not in self.filters:
            self.filters[name] = Filter(column, value)
            if value not in (None, ""):
                filterset_class = _contains_filterset(self.scope.model, column)
                filterset = filterset_class(data={"value": value}, queryset=self.scope)
                self.scope = filterset.qs
                self._filtering = True
                self._results = None
        return self

    @property
    def filtering(self) -> bool:
        return self._filtering

    def paginate(self, offset: Any = None, size: Any = None) -> "Finder":
        """Attach a pager when size is positive and offset is not negative."""
        offset = _to_int(offset)
        size = self.settings.default_page_size if size is None else _to_int(size)

        if size > 0 and offset >= 0:
            self.pager = Pager(size=min(size, self.settings.max_page_size), offset=offset)
            self._results = None
        return self

    @property
    def results(self) -> models.QuerySet:
        """The filtered and optionally paginated rows, loaded once."""
        if self._results is None:
            results = self.scope
            if self.pager is not None:
                results = self.pager.paginate(results)
            logger.debug("Loading %s results", self.scope.model.__name__)
            results = results.all()
            len(results)  # evaluate now
            self._results = results
        return self._results

    def find(self) -> models.QuerySet:
        self._results = None
        return self.results
