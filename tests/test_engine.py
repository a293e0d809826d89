"""Tests for the validation engine (ObjectValidator / FieldValidator)."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Annotated, Any

import pytest

from fieldcheck.errors import AccessError
from fieldcheck.metadata.declarations import Constraint, ConstraintSet, FieldRef, SizeRule
from fieldcheck.metadata.registry import SchemaRegistry, constrained, rules
from fieldcheck.validation.engine import FieldValidator, ObjectValidator, validate
from fieldcheck.validation.introspection import RegistryIntrospector
from fieldcheck.validation.predicates import ExpressionPredicateEvaluator

REGISTRY = SchemaRegistry()


def check(value: Any, description: str | None = None, **kwargs) -> Any:
    """Validate against the test registry."""
    return ObjectValidator(RegistryIntrospector(REGISTRY), **kwargs).validate(value, description)


# =============================================================================
# Test Types
# =============================================================================


@constrained(registry=REGISTRY)
@dataclass
class Plain:
    name: str = ""


class Unregistered:
    code = ""


@constrained(registry=REGISTRY)
@dataclass
class Coded:
    code: str = field(
        default="",
        metadata=rules(Constraint(allow_empty=False, size=SizeRule(min=1, max=20))),
    )


@constrained(registry=REGISTRY)
@dataclass
class Scored:
    score: Decimal | None = field(
        default=None,
        metadata=rules(Constraint(size=SizeRule(numeric=True, integer_digits=3, fraction_digits=2))),
    )


@constrained(registry=REGISTRY)
@dataclass
class Ranked:
    score: Decimal | None = field(
        default=None,
        metadata=rules(Constraint(size=SizeRule(numeric=True, integer_digits=3))),
    )


@constrained(registry=REGISTRY)
@dataclass
class Noted:
    flag: str = "1"
    note: str = field(
        default="",
        metadata=rules(Constraint(predicate="${flag == '0'}", allow_empty=False)),
    )


@constrained(registry=REGISTRY)
@dataclass
class Restricted:
    flag: str = "1"
    note: str = field(
        default="",
        metadata=rules(
            Constraint(predicate="${flag == '0'}", message="is only allowed when flag is 0")
        ),
    )


@constrained(registry=REGISTRY)
@dataclass
class Address:
    city: str = field(default="", metadata=rules(Constraint(allow_empty=False)))


@constrained(registry=REGISTRY, description="mailing address")
@dataclass
class MailingAddress:
    city: str = field(default="", metadata=rules(Constraint(allow_empty=False)))


@constrained(registry=REGISTRY)
@dataclass
class Customer:
    address: Address | None = field(default=None, metadata=rules(Constraint()))
    mailing: MailingAddress | None = field(default=None, metadata=rules(Constraint()))


@constrained(registry=REGISTRY)
@dataclass
class LineItem:
    sku: str = field(default="", metadata=rules(Constraint(allow_empty=False)))


@constrained(registry=REGISTRY)
@dataclass
class Order:
    lines: list[LineItem] = field(
        default_factory=list,
        metadata=rules(Constraint(allow_empty=False)),
    )


@constrained(registry=REGISTRY, description="Contract")
@dataclass
class Contract:
    contract_no: Annotated[
        str,
        Constraint(description="contract number", allow_empty=False, size=SizeRule(min=1, max=20)),
    ] = ""
    amount: Annotated[
        Decimal | None,
        Constraint(size=SizeRule(numeric=True, integer_digits=16, fraction_digits=2)),
    ] = None


@constrained(registry=REGISTRY)
@dataclass
class Labelled:
    code: str = field(
        default="",
        metadata=rules(
            Constraint(description="contract number", allow_empty=False),
            Constraint(size=SizeRule(max=5)),
        ),
    )


@constrained(registry=REGISTRY)
@dataclass
class DoublyChecked:
    code: str = field(
        default="",
        metadata=rules(
            Constraint(size=SizeRule(max=3)),
            Constraint(predicate="${len(code) != 4}", message="must not have 4 characters"),
        ),
    )


@constrained(registry=REGISTRY)
@dataclass
class Counted:
    qty: int | float | None = field(default=None, metadata=rules(Constraint(size=SizeRule(max=3))))


@constrained(registry=REGISTRY)
@dataclass
class Toggle:
    active: bool = field(default=False, metadata=rules(Constraint(size=SizeRule(max=4))))


@constrained(registry=REGISTRY)
@dataclass
class Shipment:
    country: str = "CN"
    customs_code: str = field(
        default="",
        metadata=rules(Constraint(predicate="${!is_domestic()}", allow_empty=False)),
    )

    def is_domestic(self) -> bool:
        return self.country == "CN"


@constrained(registry=REGISTRY)
@dataclass
class BaseDocument:
    doc_no: str = field(default="", metadata=rules(Constraint(allow_empty=False)))


@constrained(registry=REGISTRY)
@dataclass
class Invoice(BaseDocument):
    total: str = field(default="", metadata=rules(Constraint(allow_empty=False)))


@dataclass
class DraftDocument(BaseDocument):
    pass


@constrained(
    registry=REGISTRY,
    fields={
        "broken": Constraint(allow_empty=False),
        "code": Constraint(allow_empty=False),
    },
)
class Flaky:
    code = ""

    @property
    def broken(self):
        raise RuntimeError("boom")


@constrained(registry=REGISTRY)
@dataclass
class BadPredicate:
    code: str = field(
        default="",
        metadata=rules(Constraint(predicate="${code ==}", allow_empty=False)),
    )
    other: str = field(default="", metadata=rules(Constraint(allow_empty=False)))



@constrained(registry=REGISTRY)
@dataclass
class Tagged:
    tags: list = field(
        default_factory=lambda: ["a"],
        metadata=rules(Constraint(predicate="${tags in roles}", allow_empty=False)),
    )
    roles: set = field(default_factory=lambda: {"a"})
    owner: str = field(default="", metadata=rules(Constraint(allow_empty=False)))


@constrained(registry=REGISTRY)
@dataclass(eq=False)
class Node:
    name: str = field(default="", metadata=rules(Constraint(allow_empty=False)))
    next: "Node | None" = field(default=None, metadata=rules(Constraint()))


# =============================================================================
# Basic Behaviour
# =============================================================================


class TestBasics:
    def test_none_is_valid(self):
        result = check(None)
        assert result.valid
        assert result.error_messages == ()

    def test_no_constrained_fields_is_valid(self):
        result = check(Plain())
        assert result.valid
        assert result.error_messages == ()

    def test_unregistered_type_is_valid(self):
        assert check(Unregistered()).valid

    def test_scalar_top_level_is_valid(self):
        assert check("text").valid

    def test_description_is_kept(self):
        assert check(Coded(code="ok"), "coded").description == "coded"

    def test_display_name_overrides_description(self):
        assert check(Contract(contract_no="C-1"), "ignored").description == "Contract"

    def test_idempotent(self):
        contract = Contract(amount=Decimal("1.234"))
        first = check(contract)
        second = check(contract)
        assert first == second
        assert not first.valid

    def test_module_level_validate_uses_given_registry(self):
        result = validate(Coded(), registry=REGISTRY)
        assert result.error_message == "code must not be empty"


# =============================================================================
# Emptiness
# =============================================================================


class TestEmptiness:
    def test_empty_not_allowed(self):
        result = check(Coded(code=""))
        assert not result.valid
        assert result.error_messages == ("code must not be empty",)

    def test_none_not_allowed(self):
        assert check(Coded(code=None)).error_message == "code must not be empty"

    def test_non_empty_passes(self):
        assert check(Coded(code="ABC")).valid

    def test_empty_allowed_by_default(self):
        assert check(Scored()).valid

    def test_empty_collection_not_allowed(self):
        assert check(Order(lines=[])).error_message == "lines must not be empty"


# =============================================================================
# Size Checks Through the Engine
# =============================================================================


class TestSizes:
    def test_text_too_long(self):
        result = check(Coded(code="x" * 21))
        assert result.error_message == "code length must be between 1 and 20"

    def test_numeric_both_bounds(self):
        result = check(Scored(score=Decimal("1234.5")))
        assert not result.valid
        assert result.error_message == "score length must not exceed <3,2>"

    def test_numeric_integer_bound(self):
        result = check(Ranked(score=Decimal("1234.5")))
        assert not result.valid
        # fraction bound unset: any fraction digit fails first
        assert result.error_message == "score must be an integer"

    def test_numeric_integer_bound_integer_value(self):
        result = check(Ranked(score=Decimal("1234")))
        assert result.error_message == "score integer part must not exceed 3 digits"

    def test_numeric_within_bounds(self):
        assert check(Scored(score=Decimal("123.45"))).valid

    def test_decimal_exponent_is_expanded(self):
        result = check(Ranked(score=Decimal("1E+3")))
        assert result.error_message == "score integer part must not exceed 3 digits"

    def test_number_field_is_promoted_to_numeric(self):
        # max=3 is a text bound; numeric mode ignores it
        assert check(Counted(qty=12345)).valid

    def test_promoted_rule_rejects_fractions(self):
        assert check(Counted(qty=2.5)).error_message == "qty must be an integer"

    def test_integral_float_is_not_an_integer(self):
        assert check(Counted(qty=5.0)).error_message == "qty must be an integer"

    def test_bool_is_measured_as_text(self):
        assert check(Toggle(active=True)).valid
        assert check(Toggle(active=False)).error_message == "active length must not exceed 4"

    def test_annotated_declarations(self):
        result = check(Contract(amount=Decimal("1.234")))
        assert result.error_messages == (
            "contract number must not be empty",
            "amount length must not exceed <16,2>",
        )


# =============================================================================
# Predicates
# =============================================================================


class TestPredicates:
    def test_false_predicate_without_message_passes(self):
        assert check(Noted(flag="1", note="")).valid

    def test_true_predicate_applies_rule(self):
        assert check(Noted(flag="0", note="")).error_message == "note must not be empty"

    def test_false_predicate_with_message_fails(self):
        result = check(Restricted(flag="1", note="anything"))
        assert result.error_message == "note is only allowed when flag is 0"

    def test_false_predicate_with_message_fails_even_when_empty(self):
        assert check(Restricted(flag="1", note="")).error_message == (
            "note is only allowed when flag is 0"
        )

    def test_true_predicate_with_message_passes(self):
        assert check(Restricted(flag="0", note="anything")).valid

    def test_predicate_calls_owner_method(self):
        assert check(Shipment(country="CN")).valid
        assert check(Shipment(country="US")).error_message == "customs_code must not be empty"
        assert check(Shipment(country="US", customs_code="HS-1")).valid

    def test_blank_predicate_skips_rule(self):
        constraint = Constraint(predicate="", allow_empty=False)
        ref = FieldRef("code", ConstraintSet.of([constraint]))
        validator = ObjectValidator(RegistryIntrospector(REGISTRY))
        assert validator.fields.execute(constraint, "code", Coded(code=""), ref).valid

    def test_custom_predicate_evaluator(self):
        class Never:
            def evaluate(self, expression, context):
                return False

        validator = ObjectValidator(RegistryIntrospector(REGISTRY), Never())
        # gate false, no message, empty allowed only while the gate holds
        assert validator.validate(Coded(code="")).valid
        assert validator.validate(Restricted(note="x")).error_message == (
            "note is only allowed when flag is 0"
        )


# =============================================================================
# Labels and Multiple Declarations
# =============================================================================


class TestLabels:
    def test_first_description_labels_every_rule(self):
        result = check(Labelled(code="abcdefg"))
        assert result.error_messages == ("contract number length must not exceed 5",)

    def test_empty_value_reported_once(self):
        result = check(Labelled(code=""))
        assert result.error_messages == ("contract number must not be empty",)

    def test_every_rule_runs(self):
        result = check(DoublyChecked(code="abcd"))
        assert result.error_messages == (
            "code length must not exceed 3",
            "code must not have 4 characters",
        )
        assert result.error_message == (
            "code length must not exceed 3,code must not have 4 characters"
        )

    def test_field_validator_returns_one_result_per_rule(self):
        validator = ObjectValidator(RegistryIntrospector(REGISTRY))
        ref = REGISTRY.get("DoublyChecked").get_field("code")
        results = validator.fields.evaluate(ref.constraints, DoublyChecked(code="ab"), ref)
        assert len(results) == 2
        assert all(r.valid for r in results)


# =============================================================================
# Nesting
# =============================================================================


class TestNesting:
    def test_nested_record(self):
        result = check(Customer(address=Address(city="")))
        assert result.error_message == "address(city must not be empty)"

    def test_nested_display_name_wins(self):
        result = check(Customer(mailing=MailingAddress(city="")))
        assert result.error_message == "mailing address(city must not be empty)"

    def test_nested_valid(self):
        assert check(Customer(address=Address(city="Shanghai"))).valid

    def test_list_element_failure(self):
        order = Order(lines=[LineItem(sku="A"), LineItem(sku=""), LineItem(sku="C")])
        result = check(order)
        assert "[{sku must not be empty}]" in result.error_message
        assert result.error_message == "lines([{sku must not be empty}])"

    def test_list_several_failures(self):
        order = Order(lines=[LineItem(), LineItem(sku="B"), LineItem()])
        assert check(order).error_message == (
            "lines([{sku must not be empty},{sku must not be empty}])"
        )

    def test_top_level_list(self):
        result = check([Coded(code=""), Coded(code="ok")])
        assert result.error_message == "[{code must not be empty}]"

    def test_same_object_twice_is_not_a_cycle(self):
        line = LineItem()
        assert check(Order(lines=[line, line])).error_message == (
            "lines([{sku must not be empty},{sku must not be empty}])"
        )


# =============================================================================
# Inheritance
# =============================================================================


class TestInheritance:
    def test_base_fields_come_first(self):
        names = [ref.name for ref in REGISTRY.get("Invoice").fields]
        assert names == ["doc_no", "total"]

    def test_subclass_checks_base_fields(self):
        assert check(Invoice()).error_messages == (
            "doc_no must not be empty",
            "total must not be empty",
        )

    def test_unregistered_subclass_uses_base_schema(self):
        assert check(DraftDocument()).error_message == "doc_no must not be empty"


# =============================================================================
# Tooling Faults
# =============================================================================


class TestFaults:
    def test_access_error_skips_field(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fieldcheck.validation.engine"):
            result = check(Flaky())
        assert result.error_messages == ("code must not be empty",)
        assert "broken" in caplog.text

    def test_introspector_raises_access_error(self):
        ref = REGISTRY.get("Flaky").get_field("broken")
        with pytest.raises(AccessError) as exc_info:
            RegistryIntrospector(REGISTRY).get(Flaky(), ref)
        assert exc_info.value.field_name == "broken"

    def test_malformed_predicate_skips_field(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fieldcheck.validation.engine"):
            result = check(BadPredicate())
        assert result.error_messages == ("other must not be empty",)
        assert "code" in caplog.text

    def test_unhashable_membership_skips_field(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fieldcheck.validation.engine"):
            result = check(Tagged())
        assert result.error_messages == ("owner must not be empty",)
        assert "tags" in caplog.text

    def test_field_validator_propagates_faults(self):
        predicates = ExpressionPredicateEvaluator()
        introspector = RegistryIntrospector(REGISTRY)
        objects = ObjectValidator(introspector, predicates)
        fields = FieldValidator(introspector, predicates, objects)
        ref = REGISTRY.get("Flaky").get_field("broken")
        with pytest.raises(AccessError):
            fields.evaluate(ref.constraints, Flaky(), ref)


# =============================================================================
# Cycles
# =============================================================================


class TestCycles:
    def test_cycle_is_skipped(self, caplog):
        first = Node(name="a")
        second = Node(name="")
        first.next = second
        second.next = first
        with caplog.at_level(logging.WARNING, logger="fieldcheck.validation.engine"):
            result = check(first)
        assert result.error_message == "next(name must not be empty)"
        assert "cyclic" in caplog.text

    def test_self_reference(self):
        node = Node(name="")
        node.next = node
        assert check(node).error_message == "name must not be empty"

    def test_chain_without_cycle(self):
        chain = Node(name="a", next=Node(name="b", next=Node(name="")))
        assert check(chain).error_message == "next(next(name must not be empty))"
