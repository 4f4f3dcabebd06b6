"""
Unit tests for the form tree: associated form caching, validation
aggregation and the save protocol, against in-memory adapters.
"""

import pytest

from rail_forms.config_proxy import configure_settings
from rail_forms.core.exceptions import InvalidAssociationAccess, MissingFormClass, RecordInvalid
from rail_forms.errors import BASE
from rail_forms.forms import AssociatedFormCache, Form
from tests.fakes import FakeAdapter

pytestmark = pytest.mark.unit


class LineForm(Form):
    class Meta:
        attributes = ["sku"]


class OrderForm(Form):
    class Meta:
        attributes = ["reference"]
        associations = {"lines": LineForm, "invoice": "LineForm"}

    def clean(self):
        if getattr(self.model, "reference", None) == "forbidden":
            self.add_error("reference", "Reference is not allowed.", code="forbidden")


def build_order(lines=None, invoice=None, **kwargs):
    journal = []
    lines = [FakeAdapter(name=f"line{i}", journal=journal, **l) for i, l in enumerate(lines or [])]
    invoice = invoice or FakeAdapter(name="invoice", journal=journal)
    invoice.journal = journal
    adapter = FakeAdapter(
        name="order", journal=journal, associations={"lines": lines, "invoice": invoice}, **kwargs
    )
    return OrderForm(adapter), adapter, journal


class TestAssociatedFormCache:
    def test_get_or_create_memoizes(self):
        cache = AssociatedFormCache()
        created = []

        def factory():
            created.append(object())
            return created[-1]

        first = cache.get_or_create("lines", 2, factory)
        second = cache.get_or_create("lines", 2, factory)

        assert first is second
        assert len(created) == 1
        assert cache.get("lines", 0) is None
        assert ("lines", 2) in cache
        assert ("lines", 1) not in cache

    def test_negative_index_never_reads_another_slot(self):
        cache = AssociatedFormCache()
        cache.get_or_create("lines", 0, lambda: "first")

        assert cache.get("lines", -1) is None
        with pytest.raises(IndexError):
            cache.get_or_create("lines", -1, lambda: "other")

    def test_forms_follow_materialization_order(self):
        cache = AssociatedFormCache()
        cache.get_or_create("b", 1, lambda: "b1")
        cache.get_or_create("a", 0, lambda: "a0")
        cache.get_or_create("b", 0, lambda: "b0")

        assert cache.forms() == ["b1", "a0", "b0"]
        assert cache.forms_for("b") == ["b0", "b1"]
        assert cache.names() == ["b", "a"]
        assert len(cache) == 3


class TestAssociatedForms:
    def test_repeated_reads_return_the_same_form(self):
        form, _, _ = build_order(lines=[{}, {}])

        assert form.lines(1) is form.lines(1)
        assert form.lines() is form.lines(0)
        assert form.lines(0) is not form.lines(1)
        assert form.invoice() is form.invoice()

    def test_writes_accumulate_on_the_cached_form(self):
        form, _, _ = build_order(lines=[{"sku": None}])
        form.lines(0).sku = "A-1"
        assert form.lines(0).sku == "A-1"
        assert form.lines(0).model.sku == "A-1"

    def test_associated_form_class_comes_from_declaration(self):
        form, _, _ = build_order(lines=[{}])
        assert isinstance(form.lines(0), LineForm)
        assert isinstance(form.invoice(), LineForm)

    def test_indexing_a_to_one_association_raises(self):
        form, _, _ = build_order()
        with pytest.raises(InvalidAssociationAccess):
            form.invoice(2)

    def test_negative_index_raises_even_after_materialization(self):
        form, _, _ = build_order(lines=[{}])
        with pytest.raises(InvalidAssociationAccess):
            form.lines(-1)

        form.lines(0)
        with pytest.raises(InvalidAssociationAccess):
            form.lines(-1)
        assert form.associated_forms("lines") == [form.lines(0)]

    def test_associated_adapters_know_their_owner(self):
        form, adapter, _ = build_order(lines=[{}])
        assert form.lines(0).adapter.parent == (adapter.instance, "lines")
        assert form.invoice().adapter.parent == (adapter.instance, "invoice")

    def test_undeclared_association_without_class_raises(self):
        form, _, _ = build_order()
        with pytest.raises(MissingFormClass):
            form.associated_form("payments")

    def test_unresolvable_class_raises(self):
        form, _, _ = build_order()
        with pytest.raises(MissingFormClass):
            form.associated_form("lines", form_class="UnknownLineForm", index=0)


class TestValidationAggregation:
    def test_model_errors_are_copied_verbatim(self):
        form, _, _ = build_order(errors={"reference": "This field cannot be blank."})

        assert form.is_valid() is False
        assert form.errors["reference"] == ["This field cannot be blank."]

    def test_invalid_associated_form_adds_one_base_error(self):
        form, _, _ = build_order(lines=[{}])
        form.lines(0).adapter.field_errors = {"sku": "required", "qty": "required"}

        assert form.is_valid() is False
        assert form.errors.fields() == [BASE]
        entries = form.errors.for_field(BASE)
        assert len(entries) == 1
        assert entries[0].code == "association_error"
        assert entries[0].message == "associated line form has some errors"

    def test_untouched_associations_are_not_validated(self):
        invoice = FakeAdapter(name="invoice", errors={"sku": "required"})
        form, _, _ = build_order(invoice=invoice)

        assert form.is_valid() is True
        assert invoice.validate_calls == 0

        form.invoice()
        assert form.is_valid() is False

    def test_validation_is_idempotent(self):
        form, _, _ = build_order(lines=[{}], errors={"reference": "invalid"})
        form.lines(0).adapter.field_errors = {"sku": "required"}

        form.is_valid()
        first = list(form.errors)
        form.is_valid()
        assert list(form.errors) == first
        assert len(form.errors) == 2

    def test_errors_are_rebuilt_after_fixing_the_model(self):
        form, adapter, _ = build_order(errors={"reference": "invalid"})
        assert not form.is_valid()
        adapter.field_errors = {}
        assert form.is_valid()
        assert form.errors.is_empty()

    def test_clean_hook_adds_form_level_errors(self):
        form, _, _ = build_order(reference="forbidden")
        assert not form.is_valid()
        assert form.errors.for_field("reference")[0].code == "forbidden"

    def test_association_error_code_is_configurable(self):
        configure_settings(form_settings={"association_error_code": "nested_invalid"})
        form, _, _ = build_order(lines=[{}])
        form.lines(0).adapter.field_errors = {"sku": "required"}

        form.is_valid()
        assert form.errors.for_field(BASE)[0].code == "nested_invalid"


class TestSaveProtocol:
    def test_saves_parent_then_children_in_materialization_order(self):
        form, adapter, journal = build_order(lines=[{}, {}])
        form.lines(1)
        form.invoice()
        form.lines(0)

        assert form.save() is True
        assert journal == [
            ("save", "order"),
            ("save", "line1"),
            ("save", "invoice"),
            ("save", "line0"),
        ]
        assert adapter.scopes[0].rollback_requested is False

    def test_untouched_associations_are_not_saved(self):
        form, _, journal = build_order(lines=[{}])
        assert form.save() is True
        assert journal == [("save", "order")]

    def test_failed_child_requests_rollback(self):
        form, adapter, journal = build_order(lines=[{}, {}])
        form.lines(0).adapter.save_result = False
        form.lines(1)

        assert form.save() is False
        assert adapter.scopes[0].rollback_requested is True
        assert journal == [("save", "order"), ("save", "line0")]

    def test_failed_parent_skips_children(self):
        form, adapter, journal = build_order(lines=[{}], errors={"reference": "invalid"})
        form.lines(0)

        assert form.save() is False
        assert journal == [("save", "order")]
        assert adapter.scopes[0].rollback_requested is True

    def test_save_does_not_populate_form_errors(self):
        form, _, _ = build_order(errors={"reference": "invalid"})
        assert form.save() is False
        assert form.errors.is_empty()

    def test_save_or_fail_raises_and_rolls_back(self):
        form, adapter, journal = build_order(lines=[{}])
        form.lines(0).adapter.field_errors = {"sku": "required"}

        with pytest.raises(RecordInvalid) as exc_info:
            form.save_or_fail()

        assert exc_info.value.model_name == "line0"
        assert adapter.scopes[0].rollback_requested is True
        assert journal == [("save_or_fail", "order"), ("save_or_fail", "line0")]

    def test_save_or_fail_returns_true_when_everything_saves(self):
        form, _, journal = build_order(lines=[{}])
        form.lines(0)
        assert form.save_or_fail() is True
        assert journal == [("save_or_fail", "order"), ("save_or_fail", "line0")]

    def test_nested_forms_save_depth_first(self):
        journal = []
        grandchild = FakeAdapter(name="grandchild", journal=journal)
        child = FakeAdapter(name="child", journal=journal, associations={"lines": [grandchild]})
        sibling = FakeAdapter(name="sibling", journal=journal)
        root = FakeAdapter(name="root", journal=journal, associations={"lines": [child, sibling]})

        form = OrderForm(root)
        form.lines(0).associated_form("lines", form_class=LineForm)
        form.lines(1)

        assert form.save() is True
        assert journal == [
            ("save", "root"),
            ("save", "child"),
            ("save", "grandchild"),
            ("save", "sibling"),
        ]
