"""
Forms Package

Form objects wrapping one model each, with delegated attributes, lazily
materialized associated forms, aggregated validation and transactional
saves across the whole form tree.

Usage:
    from rail_forms.forms import Form

    class CountryForm(Form):
        class Meta:
            attributes = ["name", "code"]
            associations = {"people": "PersonForm"}
"""

from .attributes import Association, AssociationAttributes, DelegatedAttribute
from .base import Form
from .cache import AssociatedFormCache
from .registry import get_registered_forms, register_form, resolve_form_class

__all__ = [
    "Association",
    "AssociationAttributes",
    "AssociatedFormCache",
    "DelegatedAttribute",
    "Form",
    "get_registered_forms",
    "register_form",
    "resolve_form_class",
]
