"""
GraphQL error payload helpers for forms.
"""

from typing import Optional

import graphene

from .errors import ErrorSet


class FormError(graphene.ObjectType):
    """
    Structured validation error returned by form mutations.

    Attributes:
        field: Dot separated path of the failing field, null for base errors
        code: Machine readable error code
        message: Human readable description
    """

    field = graphene.String(description="Path of the field the error belongs to")
    code = graphene.String(description="Machine readable error code")
    message = graphene.String(required=True, description="What went wrong")


def build_form_errors(errors: ErrorSet, prefix: Optional[str] = None) -> list[FormError]:
    """Convert an ErrorSet into FormError objects with normalized field paths."""
    return [FormError(**item) for item in errors.as_list(prefix=prefix)]
