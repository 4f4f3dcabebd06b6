"""
Model adapters.

Forms never talk to a model directly for validation, persistence or
association lookups; they go through an adapter implementing the
``ModelAdapter`` contract.

Usage:
    from rail_forms.adapters import get_model_adapter

    adapter = get_model_adapter(person)
    adapter.is_valid()
"""

from typing import Any

from django.db import models

from .base import ModelAdapter, TransactionScopeProtocol
from .django_adapter import DjangoModelAdapter, TransactionScope


def get_model_adapter(model: Any) -> ModelAdapter:
    """Return ``model`` itself when it is an adapter, otherwise wrap it."""
    if isinstance(model, models.Model):
        return DjangoModelAdapter(model)
    if isinstance(model, ModelAdapter):
        return model
    raise TypeError(
        f"Cannot build a model adapter for {type(model).__name__}; "
        "expected a Django model instance or a ModelAdapter"
    )


__all__ = [
    "DjangoModelAdapter",
    "ModelAdapter",
    "TransactionScope",
    "TransactionScopeProtocol",
    "get_model_adapter",
]
