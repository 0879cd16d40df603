from uuid import uuid4

import pytest

from onboarding.core.exceptions import ValidationError
from onboarding.forms import alt_order, statement
from onboarding.forms.registry import DESCRIPTORS
from onboarding.models.document import DocumentType, FormDocument, OwnerRef
from onboarding.services.forms.conditions import Condition, Operator
from onboarding.services.forms.requirements import (
    CollectionRule,
    RequiredField,
    RequirementContext,
    SignatureSet,
    StepCompleted,
    collect_violations,
    is_missing,
)
from onboarding.services.forms.validator import StepValidator
from onboarding.services.forms.visibility import VisibilityRule, VisibilityRuleSet

RULES = VisibilityRuleSet(
    rules=[
        VisibilityRule("ssn", show_when=(Condition("person_entity", Operator.EQUALS, "Person"),)),
        VisibilityRule("joint_signature", show_when=(Condition("has_joint_owner", Operator.CHECKED),)),
    ],
    step_predicates={4: lambda snapshot: bool(snapshot.get("step_four"))},
)

SIGNATURE = SignatureSet(
    step=1,
    label="Account Owner",
    signature_field="owner_signature",
    printed_name_field="owner_printed_name",
    date_field="owner_date",
)


def context(snapshot, completed=()):
    return RequirementContext(snapshot=snapshot, rules=RULES, completed_steps=frozenset(completed))


@pytest.mark.parametrize(
    "value, expected",
    [(None, True), ("", True), ("   ", True), ([], True), ({}, True), ("x", False), (0, False), (False, False)],
)
def test_is_missing(value, expected):
    assert is_missing(value) is expected


def test_required_field_follows_visibility():
    requirement = RequiredField(1, ("ssn",), "SSN is required")

    assert requirement.violations(context({"person_entity": "Person"})) == ["Step 1: SSN is required"]
    assert requirement.violations(context({"person_entity": "Entity"})) == []
    assert requirement.violations(context({"person_entity": "Person", "ssn": "123-45-6789"})) == []


def test_required_fields_share_one_message():
    requirement = RequiredField(1, ("rr_name", "customer_names"), "RR Name and Customer Names are required")
    assert requirement.violations(context({})) == ["Step 1: RR Name and Customer Names are required"]


def test_requirement_skipped_on_hidden_step():
    requirement = RequiredField(4, ("name",), "Name is required")

    assert requirement.violations(context({})) == []
    assert requirement.violations(context({"step_four": True})) == ["Step 4: Name is required"]


def test_only_if_saved():
    requirement = RequiredField(6, ("contact",), "Contact is required", only_if_saved=True)

    assert requirement.violations(context({})) == []
    assert requirement.violations(context({}, completed=[6])) == ["Step 6: Contact is required"]


@pytest.mark.parametrize(
    "present",
    [("owner_signature",), ("owner_printed_name",), ("owner_date",), ("owner_signature", "owner_date")],
)
def test_partial_signature_set_is_one_violation(present):
    snapshot = {name: "x" for name in present}
    assert SIGNATURE.violations(context(snapshot)) == [
        "Step 1: Account Owner signature, printed name and date must be provided together"
    ]


def test_complete_or_empty_signature_set_passes():
    complete = {"owner_signature": "sig", "owner_printed_name": "Ann", "owner_date": "2024-01-01"}

    assert SIGNATURE.violations(context(complete)) == []
    assert SIGNATURE.violations(context({})) == []


def test_required_signature_set():
    required = SignatureSet(1, "Account Owner", "owner_signature", "owner_printed_name", "owner_date", required=True)
    assert required.violations(context({})) == ["Step 1: Account Owner signature is required"]


def test_hidden_signature_set_is_never_checked():
    joint = SignatureSet(1, "Joint", "joint_signature", "joint_printed_name", "joint_date", required=True)

    assert joint.violations(context({"joint_signature": "sig"})) == []
    assert joint.violations(context({"has_joint_owner": True})) == ["Step 1: Joint signature is required"]


def test_step_completed():
    requirement = StepCompleted(5, "Investment Objectives are required")

    assert requirement.violations(context({})) == ["Step 5: Investment Objectives are required"]
    assert requirement.violations(context({}, completed=[5])) == []


def test_collection_rule():
    requirement = statement.DESCRIPTOR.step(1).requirements[1]
    assert isinstance(requirement, CollectionRule)

    zero_rows = {"financial_rows": [{"row_key": "cash", "value": 0}]}
    funded_rows = {"financial_rows": [{"row_key": "cash", "value": 0}, {"row_key": "stocks", "value": 10.5}]}

    assert requirement.violations(context({})) == ["Step 1: At least one financial amount is required"]
    assert requirement.violations(context(zero_rows)) == ["Step 1: At least one financial amount is required"]
    assert requirement.violations(context(funded_rows)) == []


def test_collect_violations_keeps_declaration_order():
    requirements = [
        RequiredField(1, ("a",), "A is required"),
        StepCompleted(2, "Step two is required"),
        RequiredField(1, ("b",), "B is required"),
    ]
    assert collect_violations(requirements, context({})) == [
        "Step 1: A is required",
        "Step 2: Step two is required",
        "Step 1: B is required",
    ]


SAMPLE_SNAPSHOTS = [
    {},
    {"person_entity": "Entity"},
    {"person_entity": "Person", "employment_status": ["Retired"]},
    {"primary_person_entity": "Entity", "account_types": ["trust"]},
    {"account_types": ["individual"], "initial_source_of_funds": ["Savings"]},
    {"trusted_contact_decline_to_provide": True},
    {"qualified_account": "No", "has_joint_owner": False},
    {"related_to_employee_at_another_broker_dealer": "No"},
]


@pytest.mark.parametrize("document_type", list(DocumentType))
@pytest.mark.parametrize("snapshot", SAMPLE_SNAPSHOTS)
def test_hidden_fields_are_never_required(document_type, snapshot):
    descriptor = DESCRIPTORS[document_type]
    everything_saved = frozenset(range(1, descriptor.total_steps + 1))
    ctx = RequirementContext(snapshot=snapshot, rules=descriptor.rules, completed_steps=everything_saved)

    for requirement in descriptor.requirements:
        if not isinstance(requirement, RequiredField):
            continue
        if not any(ctx.field_visible(field_id) for field_id in requirement.fields):
            assert requirement.violations(ctx) == []


def make_alt_order(**fields) -> FormDocument:
    return FormDocument(
        id=uuid4(),
        document_type=DocumentType.ALT_ORDER,
        owner=OwnerRef(user_id=uuid4()),
        fields=fields,
    )


ACCOUNT_OWNER_SIGNED = {
    "rr_name": "Rep",
    "customer_names": "Ann Smith",
    "account_owner_signature": "sig",
    "account_owner_printed_name": "Ann Smith",
    "account_owner_date": "2024-03-01",
}


def test_joint_owner_partial_signature_reports_one_violation():
    validator = StepValidator(alt_order.DESCRIPTOR)
    document = make_alt_order(**ACCOUNT_OWNER_SIGNED, has_joint_owner=True, joint_account_owner_signature="sig")

    assert validator.completeness_violations(document) == [
        "Step 1: Joint Account Owner signature, printed name and date must be provided together"
    ]


def test_joint_owner_derived_from_customer_names():
    validator = StepValidator(alt_order.DESCRIPTOR)
    document = make_alt_order(**{**ACCOUNT_OWNER_SIGNED, "customer_names": "Ann & Bob Smith"})

    assert validator.completeness_violations(document) == [
        "Step 1: Joint Account Owner signature is required"
    ]


def test_explicit_has_joint_owner_wins_over_customer_names():
    validator = StepValidator(alt_order.DESCRIPTOR)
    document = make_alt_order(
        **{**ACCOUNT_OWNER_SIGNED, "customer_names": "Ann and Bob Smith"}, has_joint_owner=False
    )

    assert validator.completeness_violations(document) == []


def test_qualified_account_requires_certification_text():
    validator = StepValidator(alt_order.DESCRIPTOR)

    document = make_alt_order(**ACCOUNT_OWNER_SIGNED, qualified_account="Yes")
    assert validator.completeness_violations(document) == [
        "Step 1: Qualified account certification text is required"
    ]

    document.fields["qualified_account_certification_text"] = "Certified"
    validator.validate_completeness(document)


def test_validate_completeness_raises_with_all_violations():
    validator = StepValidator(alt_order.DESCRIPTOR)

    with pytest.raises(ValidationError) as exc_info:
        validator.validate_completeness(make_alt_order())

    assert exc_info.value.message == "Alt Order Profile validation failed"
    assert exc_info.value.errors == [
        "Step 1: RR Name and Customer Names are required",
        "Step 1: Account Owner signature is required",
    ]


def test_validate_shape_rejects_bad_payload():
    validator = StepValidator(alt_order.DESCRIPTOR)

    with pytest.raises(ValidationError) as exc_info:
        validator.validate_shape(1, {"qualified_account": "Maybe", "total_concentration": 150})

    assert exc_info.value.message == "Step 1 validation failed"
    locations = {tuple(error["loc"]) for error in exc_info.value.errors}
    assert locations == {("qualified_account",), ("total_concentration",)}


def test_validate_shape_rejects_unknown_step():
    validator = StepValidator(alt_order.DESCRIPTOR)

    with pytest.raises(ValidationError, match="Invalid step number 2"):
        validator.validate_shape(2, {})


def test_value_snapshot_matches_stored_document_snapshot():
    values = {
        "customer_names": "Ann & Bob Smith",
        "signatures": [
            {
                "signature_type": "joint_account_owner",
                "signature_data": "sig",
                "printed_name": "Bob Smith",
                "signature_date": "2024-03-01",
            },
            "not a row",
        ],
    }
    document = FormDocument(
        id=uuid4(),
        document_type=DocumentType.STATEMENT,
        owner=OwnerRef(user_id=uuid4()),
        fields={"customer_names": values["customer_names"]},
        children={"signatures": values["signatures"][:1]},
    )

    snapshot = statement.DESCRIPTOR.snapshot_from_values(values)

    assert snapshot["joint_account_owner_signature"] == "sig"
    assert snapshot["joint_account_owner_printed_name"] == "Bob Smith"
    assert snapshot["joint_account_owner_date"] == "2024-03-01"
    assert snapshot["has_joint_owner"] is True
    assert "has_joint_owner" not in values

    stored = statement.DESCRIPTOR.snapshot(document)
    for key in ("joint_account_owner_signature", "joint_account_owner_date", "has_joint_owner"):
        assert stored[key] == snapshot[key]
