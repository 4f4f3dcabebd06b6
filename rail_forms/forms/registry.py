"""
Form class registry.

Every ``Form`` subclass registers itself by class name and by dotted path
so associations can name their target lazily, including forms that refer
to each other.
"""

import logging
from typing import Any

from django.utils.module_loading import import_string

from ..core.exceptions import MissingFormClass

logger = logging.getLogger(__name__)

_FORM_REGISTRY: dict[str, type] = {}


def register_form(form_class: type) -> None:
    dotted = f"{form_class.__module__}.{form_class.__qualname__}"
    previous = _FORM_REGISTRY.get(form_class.__name__)
    if previous is not None and previous is not form_class:
        logger.debug(
            "Form name '%s' now refers to %s (was %s.%s)",
            form_class.__name__,
            dotted,
            previous.__module__,
            previous.__qualname__,
        )
    _FORM_REGISTRY[form_class.__name__] = form_class
    _FORM_REGISTRY[dotted] = form_class


def get_registered_forms() -> dict[str, type]:
    return dict(_FORM_REGISTRY)


def resolve_form_class(association: str, form_class: Any) -> type:
    """
    Resolve an association target to a concrete form class.

    Accepts a form class, a registered class name or a dotted import path.
    """
    from .base import Form

    resolved = form_class
    if isinstance(form_class, str):
        resolved = _FORM_REGISTRY.get(form_class)
        if resolved is None and "." in form_class:
            try:
                resolved = import_string(form_class)
            except ImportError:
                resolved = None

    if not isinstance(resolved, type) or not issubclass(resolved, Form):
        raise MissingFormClass(association, form_class)
    return resolved
