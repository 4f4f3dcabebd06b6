"""
Attribute and association declarations for forms.

Pass-through attributes forward their reader and writer to the wrapped
model; an optional ``parse`` callable coerces written values first.
Associations expose a reader taking an index and an ``<name>_attributes``
writer for nested mass assignment.
"""

import datetime
import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from django.conf import settings
from django.db import models
from django.utils import timezone

if TYPE_CHECKING:
    from .base import Form

READER = "reader"
WRITER = "writer"

MULTIPARAMETER_PATTERN = re.compile(r"^(?P<name>\w+)\((?P<position>[1-6])i\)$")


class DelegatedAttribute:
    """Descriptor forwarding an attribute to the form's model."""

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        reader: bool = True,
        writer: bool = True,
        parse: Optional[Callable[[Any], Any]] = None,
    ):
        self.name = name
        self.reader = reader
        self.writer = writer
        self.parse = parse

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def __get__(self, form: Optional["Form"], owner: type) -> Any:
        if form is None:
            return self
        if not self.reader:
            raise AttributeError(f"'{self.name}' is write-only on {owner.__name__}")
        return getattr(form.model, self.name)

    def __set__(self, form: "Form", value: Any) -> None:
        if not self.writer:
            raise AttributeError(f"'{self.name}' is read-only on {type(form).__name__}")
        if self.parse is not None:
            value = self.parse(value)
        setattr(form.model, self.name, value)

    def __repr__(self) -> str:
        modes = [mode for mode, on in ((READER, self.reader), (WRITER, self.writer)) if on]
        return f"<DelegatedAttribute {self.name} {'/'.join(modes)}>"


class Association:
    """Descriptor returning the associated form reader for a relation."""

    def __init__(self, form_class: Any, name: Optional[str] = None):
        self.form_class = form_class
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def __get__(self, form: Optional["Form"], owner: type) -> Any:
        if form is None:
            return self

        def reader(index: int = 0) -> "Form":
            return form.associated_form(self.name, form_class=self.form_class, index=index)

        reader.__name__ = self.name
        return reader


class AssociationAttributes:
    """Writer assigning nested attribute mappings to associated forms."""

    def __init__(self, association: str):
        self.association = association

    def __get__(self, form: Optional["Form"], owner: type) -> Any:
        if form is None:
            return self
        return form.associated_forms(self.association)

    def __set__(self, form: "Form", value: Any) -> None:
        if isinstance(value, dict):
            items = sorted(((int(key), attrs) for key, attrs in value.items()), key=lambda i: i[0])
        elif isinstance(value, (list, tuple)):
            items = list(enumerate(value))
        else:
            raise TypeError(
                f"'{self.association}_attributes' expects a list or an index mapping, "
                f"got {type(value).__name__}"
            )

        reader = getattr(form, self.association)
        for index, attributes in items:
            reader(index).assign_attributes(attributes or {})


def normalize_attribute_declarations(attributes) -> list[tuple[str, bool, bool]]:
    """
    Expand attribute declarations to ``(name, reader, writer)`` triples.

    Names delegate both ways; ``{name: ["reader"]}`` style mappings pick
    the directions explicitly.
    """
    declarations = []
    for attribute in attributes:
        if isinstance(attribute, dict):
            for name, modes in attribute.items():
                modes = [modes] if isinstance(modes, str) else list(modes)
                declarations.append((name, READER in modes, WRITER in modes))
        elif isinstance(attribute, str):
            declarations.append((attribute, True, True))
        else:
            raise TypeError("Attribute must be one of: dict, str")
    return declarations


def extract_multiparameter_attributes(
    attributes: dict[str, Any],
) -> tuple[dict[str, Any], dict[str, dict[int, Any]]]:
    """Split ``date_of_birth(1i)`` style keys from regular attributes."""
    regular: dict[str, Any] = {}
    groups: dict[str, dict[int, Any]] = {}
    for key, value in attributes.items():
        match = MULTIPARAMETER_PATTERN.match(str(key))
        if match:
            groups.setdefault(match["name"], {})[int(match["position"])] = value
        else:
            regular[key] = value
    return regular, groups


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def combine_multiparameter(parts: dict[int, Any], field: Optional[models.Field]) -> Any:
    """
    Build a date, datetime or time from positional parts.

    Positions 1-3 are year, month and day, 4-6 hour, minute and second.
    Incomplete or impossible values yield ``None``.
    """
    try:
        values = {position: _to_int(value) for position, value in parts.items()}
        if isinstance(field, models.TimeField):
            if values.get(4) is None or values.get(5) is None:
                return None
            return datetime.time(values[4], values[5], values.get(6) or 0)

        if any(values.get(position) is None for position in (1, 2, 3)):
            return None
        wants_datetime = isinstance(field, models.DateTimeField) or (
            field is None and values.get(4) is not None
        )
        if not wants_datetime:
            return datetime.date(values[1], values[2], values[3])

        combined = datetime.datetime(
            values[1],
            values[2],
            values[3],
            values.get(4) or 0,
            values.get(5) or 0,
            values.get(6) or 0,
        )
        if getattr(settings, "USE_TZ", False):
            combined = timezone.make_aware(combined)
        return combined
    except (TypeError, ValueError):
        return None
