"""
Custom exceptions for form operations.

Validation failures are never raised by the form layer: they are collected
into an ``ErrorSet``. The exceptions below cover programming mistakes
(bad declarations, bad association access) and failures surfaced by the
raising persistence path.
"""

from typing import Any, Optional


class FormError(Exception):
    """Base exception for form operations."""

    default_code = "FORM_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:
        return self.message


class MissingFormClass(FormError):
    """Raised when an association declaration cannot resolve its form class."""

    default_code = "MISSING_FORM_CLASS"

    def __init__(self, association: str, form_class: Any = None):
        super().__init__(
            f"Missing associated form class for '{association}'"
            + (f": {form_class!r} could not be resolved" if form_class else "")
        )
        self.association = association
        self.form_class = form_class


class InvalidAssociationAccess(FormError):
    """Raised when an association is accessed in a way its shape does not allow."""

    default_code = "INVALID_ASSOCIATION_ACCESS"

    def __init__(self, association: str, index: int = 0, reason: Optional[str] = None):
        super().__init__(
            reason
            or f"Trying to access association '{association}' like a collection "
            f"(index {index}) even though it is not one"
        )
        self.association = association
        self.index = index


class UnknownAttribute(FormError, AttributeError):
    """Raised when mass assignment names an attribute the form does not expose."""

    default_code = "UNKNOWN_ATTRIBUTE"

    def __init__(self, form_name: str, attribute: str):
        super().__init__(f"Unknown attribute '{attribute}' for {form_name}")
        self.form_name = form_name
        self.attribute = attribute


class PersistenceFailure(FormError):
    """Raised by the raising save path when the persistence layer fails."""

    default_code = "PERSISTENCE_FAILURE"

    def __init__(self, message: str, model_name: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.model_name = model_name


class RecordInvalid(PersistenceFailure):
    """Raised by the raising save path when the model fails validation."""

    default_code = "RECORD_INVALID"

    def __init__(self, model_name: str, errors: Any):
        details = "; ".join(errors.full_messages()) if errors is not None else ""
        super().__init__(
            f"Validation failed for {model_name}" + (f": {details}" if details else ""),
            model_name=model_name,
        )
        self.errors = errors


class NoViewContext(FormError):
    """Raised when a presenter renders without any bound view."""

    default_code = "NO_VIEW_CONTEXT"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "cannot render without a view context")
