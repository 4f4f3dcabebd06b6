"""
Django model adapter.

Wraps a ``django.db.models.Model`` instance behind the ``ModelAdapter``
contract: validation through ``full_clean``, non-raising and raising saves,
an explicit transaction scope and association resolution.
"""

import logging
from collections.abc import Sequence
from typing import Any, Callable, Optional, TypeVar

from django.core.exceptions import FieldDoesNotExist, ObjectDoesNotExist, ValidationError
from django.db import DatabaseError, IntegrityError, models, router, transaction
from django.db.models.fields.related_descriptors import (
    ForwardManyToOneDescriptor,
    ManyToManyDescriptor,
    ReverseManyToOneDescriptor,
    ReverseOneToOneDescriptor,
)
from django.utils.translation import gettext as _

from ..core.exceptions import InvalidAssociationAccess, PersistenceFailure, RecordInvalid
from ..core.settings import FormSettings
from ..errors import ErrorSet

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionScope:
    """
    Handle passed to blocks run inside ``run_in_transaction``.

    Requesting a rollback marks the surrounding atomic block so that every
    write performed inside it is discarded once the block returns.
    """

    def __init__(self, using: Optional[str] = None, discard_keys: bool = True):
        self.using = using
        self.discard_keys = discard_keys
        self.rollback_requested = False
        self._inserted: list["DjangoModelAdapter"] = []

    def track_insert(self, adapter: "DjangoModelAdapter") -> None:
        self._inserted.append(adapter)

    def request_rollback(self) -> None:
        transaction.set_rollback(True, using=self.using)
        self.rollback_requested = True

    def discard_writes(self) -> None:
        """Forget identities generated by inserts that were rolled back."""
        if not self.discard_keys:
            return
        for adapter in reversed(self._inserted):
            adapter.forget_insert()
        self._inserted.clear()


class DjangoModelAdapter:
    """Adapter exposing a Django model instance to forms."""

    def __init__(self, instance: models.Model):
        self.instance = instance
        self.errors = ErrorSet()
        self.parent: Optional[models.Model] = None
        self.association: Optional[str] = None

    def attach_to(self, parent: models.Model, association: str) -> None:
        """
        Record the model owning this one through ``association``.

        The owner is written before this model, so a key pointing at it may
        still be unset during validation. New members of a many-to-many
        association are added to the owner's relation once inserted.
        """
        self.parent = parent
        self.association = association

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    @property
    def pk(self) -> Any:
        return self.instance.pk

    id = pk

    @property
    def persisted(self) -> bool:
        return not self.instance._state.adding and self.instance.pk is not None

    @property
    def model_name(self) -> str:
        return str(self.instance._meta.verbose_name)

    def type_for_attribute(self, name: str) -> Optional[models.Field]:
        try:
            return self.instance._meta.get_field(name)
        except FieldDoesNotExist:
            return None

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self) -> ErrorSet:
        """Run model validation and return the collected errors."""
        self._sync_related_keys()
        unsaved = self._unsaved_related_fields()
        try:
            self.instance.full_clean(exclude=[field.name for field, related in unsaved])
        except ValidationError as exc:
            self.errors = ErrorSet.from_validation_error(exc)
        else:
            self.errors = ErrorSet()

        # Only the owner is written before this model
        for field, related in unsaved:
            if related is not self.parent:
                self.errors.add(
                    field.name,
                    _("%(name)s must be saved first") % {"name": field.verbose_name},
                    code="unsaved_related",
                )
        return self.errors

    def is_valid(self) -> bool:
        return self.validate().is_empty()

    def _related_key_fields(self):
        for field in self.instance._meta.concrete_fields:
            if field.is_relation and (field.many_to_one or field.one_to_one):
                if field.is_cached(self.instance):
                    yield field, field.get_cached_value(self.instance)

    def _sync_related_keys(self) -> None:
        # Key columns go stale when the related object is saved (or rolled back) after assignment
        for field, related in self._related_key_fields():
            if related is None:
                continue
            key = getattr(related, field.target_field.attname)
            if key is not None and getattr(self.instance, field.attname) != key:
                setattr(self.instance, field.name, related)

    def _unsaved_related_fields(self) -> list[tuple[models.Field, models.Model]]:
        return [
            (field, related)
            for field, related in self._related_key_fields()
            if related is not None and related.pk is None
        ]

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def database_alias(self) -> str:
        alias = FormSettings.from_settings().database_alias
        return alias or router.db_for_write(type(self.instance), instance=self.instance)

    def save(self, scope: Optional[TransactionScope] = None) -> bool:
        """Validate then write the model; report failure instead of raising."""
        if not self.is_valid():
            logger.debug(
                "Not saving %s, validation failed: %s", self.model_name, self.errors.as_dict()
            )
            return False

        try:
            with transaction.atomic(using=self.database_alias()):
                self._write(scope)
        except IntegrityError as exc:
            logger.info("Integrity error while saving %s: %s", self.model_name, exc)
            self.errors.add(None, str(exc), code="integrity_error")
            return False
        return True

    def save_or_fail(self, scope: Optional[TransactionScope] = None) -> bool:
        """Validate then write the model, raising on any failure."""
        if not self.is_valid():
            raise RecordInvalid(self.model_name, self.errors)

        try:
            self._write(scope)
        except DatabaseError as exc:
            raise PersistenceFailure(
                f"Failed to save {self.model_name}: {exc}", model_name=self.model_name
            ) from exc
        return True

    def _write(self, scope: Optional[TransactionScope]) -> None:
        adding = self.instance._state.adding
        self.instance.save(using=self.database_alias())
        logger.debug(
            "%s %s pk=%s", "Inserted" if adding else "Updated", self.model_name, self.instance.pk
        )
        if adding:
            self._link_to_parent()
            if scope is not None:
                scope.track_insert(self)

    def _link_to_parent(self) -> None:
        if self.parent is None or self.parent.pk is None:
            return
        descriptor = getattr(type(self.parent), self.association, None)
        if isinstance(descriptor, ManyToManyDescriptor):
            getattr(self.parent, self.association).add(self.instance)
            logger.debug("Linked %s pk=%s to %s", self.model_name, self.instance.pk, self.association)

    def forget_insert(self) -> None:
        """Return the instance to its unsaved state after a rolled back insert."""
        pk_field = self.instance._meta.pk
        if getattr(pk_field, "db_returning", False):
            self.instance.pk = None
        self.instance._state.adding = True

    def run_in_transaction(self, block: Callable[[TransactionScope], T]) -> T:
        """
        Run ``block`` inside one atomic block of this model's database.

        The block receives a ``TransactionScope``; requesting a rollback
        discards every write and the call still returns the block's result.
        Errors raised by the block roll back and propagate.
        """
        using = self.database_alias()
        scope = TransactionScope(
            using=using,
            discard_keys=FormSettings.from_settings().discard_keys_on_rollback,
        )
        try:
            with transaction.atomic(using=using):
                result = block(scope)
        except Exception:
            logger.info("Transaction on '%s' rolled back after an error", using)
            scope.discard_writes()
            raise

        if scope.rollback_requested:
            logger.info("Transaction on '%s' rolled back on request", using)
            scope.discard_writes()
        return result

    # ------------------------------------------------------------------ #
    # Associations
    # ------------------------------------------------------------------ #

    def resolve_association(self, name: str, index: int = 0) -> Any:
        """
        Return the model behind ``name`` at ``index``.

        To-many relations are indexed into their stored rows; an index past
        the end builds a new related instance, which joins a many-to-many
        relation once it is inserted. To-one relations only accept index 0
        and build a new instance when empty. Any other attribute is read
        as is, indexing into it when it holds a sequence.
        """
        if index < 0:
            raise InvalidAssociationAccess(
                name, index, reason=f"Association index must be positive, got {index}"
            )

        descriptor = getattr(type(self.instance), name, None)

        if isinstance(descriptor, ReverseManyToOneDescriptor):
            rows = self._stored_rows(name)
            if index < len(rows):
                return rows[index]
            return self._build_collection_member(descriptor)

        if isinstance(descriptor, ForwardManyToOneDescriptor):
            self._check_single(name, index)
            related = self._read_to_one(name)
            return related if related is not None else descriptor.field.related_model()

        if isinstance(descriptor, ReverseOneToOneDescriptor):
            self._check_single(name, index)
            related = self._read_to_one(name)
            if related is not None:
                return related
            rel = descriptor.related
            return rel.related_model(**{rel.field.name: self.instance})

        if not hasattr(self.instance, name):
            raise InvalidAssociationAccess(
                name, index, reason=f"'{name}' is not an association of {self.model_name}"
            )
        value = getattr(self.instance, name)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if index >= len(value):
                raise InvalidAssociationAccess(
                    name, index, reason=f"'{name}' has {len(value)} members, no index {index}"
                )
            return value[index]
        self._check_single(name, index)
        return value

    def _check_single(self, name: str, index: int) -> None:
        if index > 0:
            raise InvalidAssociationAccess(name, index)

    def _stored_rows(self, name: str) -> list[models.Model]:
        if self.instance.pk is None or self.instance._state.adding:
            return []
        queryset = getattr(self.instance, name).all()
        if not queryset.ordered:
            queryset = queryset.order_by("pk")
        return list(queryset)

    def _build_collection_member(self, descriptor: ReverseManyToOneDescriptor) -> models.Model:
        rel = descriptor.rel
        if isinstance(descriptor, ManyToManyDescriptor):
            target = rel.related_model if descriptor.reverse else rel.model
            return target()
        return rel.related_model(**{rel.field.name: self.instance})

    def _read_to_one(self, name: str) -> Optional[models.Model]:
        try:
            return getattr(self.instance, name)
        except ObjectDoesNotExist:
            return None

    def __repr__(self) -> str:
        return f"<DjangoModelAdapter {self.instance!r}>"
