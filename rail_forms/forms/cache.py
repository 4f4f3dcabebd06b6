"""
Associated form cache.
"""

from typing import TYPE_CHECKING, Callable, Iterator, Optional

if TYPE_CHECKING:
    from .base import Form


class AssociatedFormCache:
    """
    Per-form mapping from ``(relation name, index)`` to an associated form.

    Entries are created on first access and reused afterwards, so repeated
    lookups act on the same form. Entries are never pruned.
    """

    def __init__(self):
        self._by_name: dict[str, list[Optional["Form"]]] = {}
        self._materialized: list["Form"] = []

    def get(self, name: str, index: int = 0) -> Optional["Form"]:
        forms = self._by_name.get(name, [])
        if 0 <= index < len(forms):
            return forms[index]
        return None

    def get_or_create(self, name: str, index: int, factory: Callable[[], "Form"]) -> "Form":
        if index < 0:
            raise IndexError(f"negative index {index} for {name!r}")
        form = self.get(name, index)
        if form is not None:
            return form

        form = factory()
        forms = self._by_name.setdefault(name, [])
        if index >= len(forms):
            forms.extend([None] * (index + 1 - len(forms)))
        forms[index] = form
        self._materialized.append(form)
        return form

    def forms(self) -> list["Form"]:
        """Every materialized form, in materialization order."""
        return list(self._materialized)

    def forms_for(self, name: str) -> list["Form"]:
        return [form for form in self._by_name.get(name, []) if form is not None]

    def names(self) -> list[str]:
        return list(self._by_name)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, tuple) and len(key) == 2:
            return self.get(*key) is not None
        return key in self._by_name

    def __len__(self) -> int:
        return len(self._materialized)

    def __iter__(self) -> Iterator["Form"]:
        return iter(self.forms())
