"""
Form objects.

A form wraps exactly one model and sits between user input and that model.
Parsing is done through attribute writers: plain attributes are delegated
to the model, custom ones are written as properties on the form and
coerce their input before forwarding it. Nested forms are declared as
associations and are materialized lazily, one form per relation name and
index, then reused for the life of the parent form.

Validation aggregates the model's own errors with one base error per
invalid associated form. Saving writes the model first, then every
materialized associated form in the order it was first accessed, all in
one transaction that is rolled back when any step fails.

Example:
    class PersonForm(Form):
        class Meta:
            attributes = ["first_name", "last_name", {"gender": ["reader"]}]
            associations = {"country": "CountryForm"}

        @property
        def gender_code(self):
            return self.model.gender

        @gender_code.setter
        def gender_code(self, value):
            self.model.gender = (value or "").strip().lower()[:1]

    form = PersonForm(person)
    form.assign_attributes({"first_name": "Ada", "gender_code": "F"})
    if form.save():
        ...
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from django.utils.text import camel_case_to_spaces
from django.utils.translation import gettext as _

from ..adapters import ModelAdapter, TransactionScopeProtocol, get_model_adapter
from ..core.exceptions import InvalidAssociationAccess, MissingFormClass, UnknownAttribute
from ..core.settings import FormSettings
from ..errors import BASE, ErrorSet
from .attributes import (
    Association,
    AssociationAttributes,
    DelegatedAttribute,
    combine_multiparameter,
    extract_multiparameter_attributes,
    normalize_attribute_declarations,
)
from .cache import AssociatedFormCache
from .registry import register_form, resolve_form_class

logger = logging.getLogger(__name__)


class Form:
    """Base form wrapping one model."""

    verbose_name: str = "form"

    _attributes: dict[str, DelegatedAttribute] = {}
    _associations: dict[str, Any] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._attributes = dict(cls._attributes)
        cls._associations = dict(cls._associations)

        if "verbose_name" not in cls.__dict__:
            cls.verbose_name = camel_case_to_spaces(cls.__name__)

        for name, value in list(cls.__dict__.items()):
            if isinstance(value, DelegatedAttribute):
                cls._attributes[name] = value
            elif isinstance(value, Association):
                cls._register_association(name, value)

        meta = cls.__dict__.get("Meta")
        if meta is not None:
            cls.delegate_attributes(*getattr(meta, "attributes", ()))
            for name, form_class in getattr(meta, "associations", {}).items():
                cls.delegate_association(name, to=form_class)

        register_form(cls)

    # @!group Declarations

    @classmethod
    def delegate_attributes(cls, *attributes: Any) -> None:
        """
        Delegate attributes to the model, readers and writers.

        Example:
            PersonForm.delegate_attributes("first_name", {"last_name": ["reader"]})
        """
        for name, reader, writer in normalize_attribute_declarations(attributes):
            cls._check_free_name(name)
            attribute = DelegatedAttribute(name, reader=reader, writer=writer)
            setattr(cls, name, attribute)
            cls._attributes[name] = attribute

    @classmethod
    def delegate_association(cls, association: str, to: Any) -> None:
        """
        Delegate an association to another form class.

        Example:
            CountryForm.delegate_association("people", to="tests.forms.PersonForm")
        """
        cls._check_free_name(association)
        cls._register_association(association, Association(to, association))

    @classmethod
    def _register_association(cls, name: str, association: Association) -> None:
        setattr(cls, name, association)
        writer = f"{name}_attributes"
        if writer not in cls.__dict__:
            setattr(cls, writer, AssociationAttributes(name))
        cls._associations[name] = association.form_class

    @classmethod
    def _check_free_name(cls, name: str) -> None:
        if name.startswith("_") or hasattr(Form, name):
            raise TypeError(f"'{name}' cannot be declared on {cls.__name__}, it is reserved")

    # @!endgroup

    def __init__(self, model: Any):
        self.adapter: ModelAdapter = get_model_adapter(model)
        self._errors = ErrorSet()
        self._associated_forms = AssociatedFormCache()

    @property
    def model(self) -> Any:
        """Underlying model to populate."""
        return self.adapter.instance

    def to_model(self) -> Any:
        return self.model

    @property
    def pk(self) -> Any:
        return self.adapter.pk

    id = pk

    @property
    def persisted(self) -> bool:
        return self.adapter.persisted

    def type_for_attribute(self, name: str) -> Any:
        return self.adapter.type_for_attribute(name)

    @property
    def errors(self) -> ErrorSet:
        return self._errors

    # @!group Attributes assignment

    def assign_attributes(self, attributes: Optional[Mapping]) -> None:
        """
        Assign every attribute through the form's writers.

        Multi parameter keys such as ``date_of_birth(1i)`` are combined into
        one date, datetime or time value first.
        """
        if attributes is None:
            return
        if not isinstance(attributes, Mapping):
            raise TypeError(
                f"When assigning attributes, you must pass a mapping, got {type(attributes).__name__}"
            )

        regular, groups = extract_multiparameter_attributes(dict(attributes))
        for name, value in regular.items():
            self._assign_attribute(str(name), value)
        for name, parts in groups.items():
            self._assign_attribute(name, combine_multiparameter(parts, self.type_for_attribute(name)))

    def _assign_attribute(self, name: str, value: Any) -> None:
        attribute = getattr(type(self), name, None)
        writable = (
            not name.startswith("_")
            and attribute is not None
            and hasattr(attribute, "__set__")
            and not (isinstance(attribute, property) and attribute.fset is None)
            and not (isinstance(attribute, DelegatedAttribute) and not attribute.writer)
        )
        if not writable:
            raise UnknownAttribute(type(self).__name__, name)
        setattr(self, name, value)

    # @!endgroup

    # @!group Associated forms

    def associated_form(self, name: str, form_class: Any = None, index: int = 0) -> "Form":
        """Return the form for ``name`` at ``index``, creating it on first access."""
        if form_class is None:
            form_class = self._associations.get(name)
        if form_class is None:
            raise MissingFormClass(name)
        if index < 0:
            raise InvalidAssociationAccess(
                name, index, reason=f"Association index must be positive, got {index}"
            )

        def create() -> "Form":
            klass = resolve_form_class(name, form_class)
            related = self.adapter.resolve_association(name, index)
            logger.debug(
                "Materialized %s for %s.%s[%d]", klass.__name__, type(self).__name__, name, index
            )
            form = klass(related)
            form.adapter.attach_to(self.model, name)
            return form

        return self._associated_forms.get_or_create(name, index, create)

    def associated_forms(self, name: Optional[str] = None) -> list["Form"]:
        """Materialized associated forms, for one relation or all of them."""
        if name is None:
            return self._associated_forms.forms()
        return self._associated_forms.forms_for(name)

    # @!endgroup

    # @!group Validation

    def validate(self) -> ErrorSet:
        """Rebuild the error set from the model, associated forms and ``clean``."""
        self._errors = ErrorSet()
        self._validate_model()
        self._validate_associated_forms()
        self.clean()
        return self._errors

    def is_valid(self) -> bool:
        return self.validate().is_empty()

    def clean(self) -> None:
        """Hook for form level validation, report problems with ``add_error``."""

    def add_error(self, field: Optional[str], message: str, code: Optional[str] = None) -> None:
        self._errors.add(field or BASE, message, code=code)

    def _validate_model(self) -> None:
        self._errors.merge(self.adapter.validate())

    def _validate_associated_forms(self) -> None:
        code = FormSettings.from_settings().association_error_code
        for form in self._associated_forms.forms():
            if form.is_valid():
                continue
            self._errors.add(
                BASE,
                _("associated %(name)s has some errors") % {"name": form.verbose_name},
                code=code,
            )

    # @!endgroup

    # @!group Persistence

    def save(self) -> bool:
        """Save the whole form tree atomically, returning False on failure."""

        def persist(scope: TransactionScopeProtocol) -> bool:
            saved = self._persist(scope, raising=False)
            if not saved:
                scope.request_rollback()
            return saved

        saved = self.adapter.run_in_transaction(persist)
        logger.debug("%s save %s", type(self).__name__, "succeeded" if saved else "rolled back")
        return saved

    def save_or_fail(self) -> bool:
        """Save the whole form tree atomically, raising on failure."""
        return self.adapter.run_in_transaction(
            lambda scope: self._persist(scope, raising=True)
        )

    def _persist(self, scope: TransactionScopeProtocol, raising: bool) -> bool:
        # Parent first so children can reference its generated key
        if raising:
            saved = self.adapter.save_or_fail(scope=scope)
        else:
            saved = self.adapter.save(scope=scope)

        for form in self._associated_forms.forms():
            if not saved:
                break
            saved = form._persist(scope, raising=raising)
        return saved

    # @!endgroup

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"
