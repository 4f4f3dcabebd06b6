"""
Model adapter contract consumed by forms.
"""

from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

from ..errors import ErrorSet

T = TypeVar("T")


class TransactionScopeProtocol(Protocol):
    using: Optional[str]
    rollback_requested: bool

    def request_rollback(self) -> None:
        ...

    def track_insert(self, adapter: Any) -> None:
        ...


@runtime_checkable
class ModelAdapter(Protocol):
    """Narrow capability contract a form needs from its backing model."""

    instance: Any

    @property
    def pk(self) -> Any:
        ...

    @property
    def persisted(self) -> bool:
        ...

    def validate(self) -> ErrorSet:
        ...

    def is_valid(self) -> bool:
        ...

    def save(self, scope: Optional[TransactionScopeProtocol] = None) -> bool:
        ...

    def save_or_fail(self, scope: Optional[TransactionScopeProtocol] = None) -> bool:
        ...

    def run_in_transaction(self, block: Callable[[TransactionScopeProtocol], T]) -> T:
        ...

    def resolve_association(self, name: str, index: int = 0) -> Any:
        ...

    def attach_to(self, parent: Any, association: str) -> None:
        """Record the model owning this one through ``association``."""
        ...

    def type_for_attribute(self, name: str) -> Any:
        ...
