"""Core module for Rail Forms: exceptions and typed settings."""

from .exceptions import (
    FormError,
    InvalidAssociationAccess,
    MissingFormClass,
    NoViewContext,
    PersistenceFailure,
    RecordInvalid,
    UnknownAttribute,
)
from .settings import FinderSettings, FormSettings

__all__ = [
    "FormError",
    "InvalidAssociationAccess",
    "MissingFormClass",
    "NoViewContext",
    "PersistenceFailure",
    "RecordInvalid",
    "UnknownAttribute",
    "FinderSettings",
    "FormSettings",
]
