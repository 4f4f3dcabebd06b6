"""
Ordered, field-keyed validation errors.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Optional

from django.core.exceptions import NON_FIELD_ERRORS, ValidationError

BASE = NON_FIELD_ERRORS


@dataclass(frozen=True)
class ErrorEntry:
    """A single validation failure."""

    field: str
    code: Optional[str]
    message: str


def _normalize_field_path(field: Any, prefix: Optional[str] = None) -> Optional[str]:
    """
    Convert backend field identifiers (dotted, double-underscore or list
    index notations) to a dot-separated path. The base key maps to the prefix.
    """
    if field is None or field == BASE:
        return prefix

    segment = str(field)
    segment = segment.replace("__", ".")
    segment = segment.replace("[", ".").replace("]", "")
    segment = segment.replace("..", ".").strip(".")
    if prefix:
        return f"{prefix}.{segment}".strip(".")
    return segment or None


class ErrorSet:
    """
    Ordered multimap from field key to error entries.

    Entries keep their insertion order. The base key (Django's
    ``NON_FIELD_ERRORS``) holds errors that do not belong to a single field.
    """

    def __init__(self, entries=None):
        self._entries: list[ErrorEntry] = list(entries or [])

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> "ErrorSet":
        """Build an ErrorSet from a Django ``ValidationError``, keeping codes."""
        errors = cls()
        if hasattr(error, "error_dict"):
            for field_name, field_errors in error.error_dict.items():
                for field_error in field_errors:
                    for message in field_error.messages:
                        errors.add(field_name, message, code=field_error.code)
            return errors

        for field_error in error.error_list:
            for message in field_error.messages:
                errors.add(BASE, message, code=field_error.code)
        return errors

    def add(self, field: Optional[str], message: str, code: Optional[str] = None) -> ErrorEntry:
        entry = ErrorEntry(field=field or BASE, code=code, message=str(message))
        self._entries.append(entry)
        return entry

    def merge(self, other: "ErrorSet", prefix: Optional[str] = None) -> "ErrorSet":
        """
        Append every entry of ``other``. With a prefix, keys are rewritten as
        ``prefix.field`` and base entries are filed under ``prefix``.
        """
        for entry in other:
            field = entry.field
            if prefix:
                field = _normalize_field_path(entry.field, prefix)
            self._entries.append(ErrorEntry(field=field, code=entry.code, message=entry.message))
        return self

    def clear(self) -> None:
        self._entries.clear()

    def for_field(self, field: str) -> list[ErrorEntry]:
        return [entry for entry in self._entries if entry.field == field]

    def __getitem__(self, field: str) -> list[str]:
        return [entry.message for entry in self.for_field(field)]

    def __contains__(self, field: object) -> bool:
        return any(entry.field == field for entry in self._entries)

    def fields(self) -> list[str]:
        seen: dict[str, None] = {}
        for entry in self._entries:
            seen.setdefault(entry.field, None)
        return list(seen)

    def messages(self) -> list[str]:
        return [entry.message for entry in self._entries]

    def full_messages(self) -> list[str]:
        """Messages prefixed with their field name, base messages left as is."""
        full = []
        for entry in self._entries:
            if entry.field == BASE:
                full.append(entry.message)
            else:
                full.append(f"{entry.field.replace('_', ' ').capitalize()}: {entry.message}")
        return full

    def as_dict(self) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        for entry in self._entries:
            result.setdefault(entry.field, []).append(entry.message)
        return result

    def as_list(self, prefix: Optional[str] = None) -> list[dict[str, Any]]:
        """Flatten entries into ``{"field", "code", "message"}`` dictionaries."""
        return [
            {
                "field": _normalize_field_path(entry.field, prefix),
                "code": entry.code,
                "message": entry.message,
            }
            for entry in self._entries
        ]

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ErrorEntry]:
        return iter(list(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorSet):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"<ErrorSet {self.as_dict()!r}>"
