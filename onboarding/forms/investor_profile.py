"""Investor profile: seven steps, two account holders."""

from typing import Any, List, Mapping

from onboarding.forms.shared import signature_sets
from onboarding.models.document import DocumentType, HolderType
from onboarding.schemas.forms.investor_profile import (
    AccountHolderStep,
    AccountRegistrationStep,
    InvestmentObjectivesStep,
    PatriotActStep,
    SignaturesStep,
    TrustedContactStep,
)
from onboarding.services.forms.conditions import Condition, Operator, evaluate
from onboarding.services.forms.descriptor import DocumentTypeDescriptor, StepDefinition
from onboarding.services.forms.requirements import Requirement, RequiredField, StepCompleted
from onboarding.services.forms.visibility import VisibilityRule, VisibilityRuleSet

SECONDARY_HOLDER_STEP = 4
SECONDARY_HOLDER_ACCOUNT_TYPES = ["joint_tenant", "trust"]

HOLDER_COLLECTIONS = ("addresses", "phones", "investment_knowledge", "government_identifications")

TRUSTED_CONTACT_FIELDS = (
    "name",
    "email",
    "home_phone",
    "business_phone",
    "mobile_phone",
    "mailing_address",
    "city",
    "state_province",
    "zip_postal_code",
    "country",
)


def has_secondary_holder(snapshot: Mapping[str, Any]) -> bool:
    """Joint tenancy and trust accounts carry a secondary account holder."""
    return evaluate(
        Condition("account_types", Operator.INCLUDES, SECONDARY_HOLDER_ACCOUNT_TYPES), snapshot
    )


def _account_type_rule(field_id: str, *account_types: str) -> VisibilityRule:
    return VisibilityRule(
        field_id=field_id,
        show_when=(Condition("account_types", Operator.INCLUDES, list(account_types)),),
    )


def _yes(field_id: str, answer_field: str) -> VisibilityRule:
    return VisibilityRule(field_id=field_id, show_when=(Condition(answer_field, Operator.EQUALS, "Yes"),))


def holder_rules(prefix: str) -> List[VisibilityRule]:
    """Conditional fields of one account holder, keyed ``{prefix}_{field}``."""
    person = Condition(f"{prefix}_person_entity", Operator.EQUALS, "Person")
    entity = Condition(f"{prefix}_person_entity", Operator.EQUALS, "Entity")
    employed = Condition(
        f"{prefix}_employment_affiliations", Operator.INCLUDES, ["Employed", "SelfEmployed"]
    )
    return [
        VisibilityRule(f"{prefix}_ssn", show_when=(person,)),
        VisibilityRule(f"{prefix}_date_of_birth", show_when=(person,)),
        VisibilityRule(f"{prefix}_ein", show_when=(entity,)),
        VisibilityRule(f"{prefix}_occupation", show_when=(employed,)),
        VisibilityRule(f"{prefix}_years_employed", show_when=(employed,)),
        VisibilityRule(f"{prefix}_type_of_business", show_when=(employed,)),
        VisibilityRule(f"{prefix}_employer_name", show_when=(employed,)),
        _yes(f"{prefix}_employee_name_and_relationship", f"{prefix}_related_to_employee_advisory"),
        _yes(f"{prefix}_broker_dealer_name", f"{prefix}_employee_of_broker_dealer"),
        _yes(f"{prefix}_broker_dealer_employee_name", f"{prefix}_related_to_employee_broker_dealer"),
        _yes(
            f"{prefix}_broker_dealer_employee_relationship",
            f"{prefix}_related_to_employee_broker_dealer",
        ),
        _yes(f"{prefix}_with_what_firms", f"{prefix}_maintaining_other_accounts"),
        _yes(f"{prefix}_years_of_investment_experience", f"{prefix}_maintaining_other_accounts"),
        _yes(f"{prefix}_affiliation_details", f"{prefix}_affiliated_with_exchange_or_finra"),
        _yes(f"{prefix}_company_names", f"{prefix}_senior_officer_or_10pct_shareholder"),
    ]


def holder_requirements(step: int, prefix: str, label: str) -> List[Requirement]:
    """Completeness of one account holder; only checked once the holder step was saved."""

    def saved(fields, message):
        return RequiredField(step, fields, message, only_if_saved=True)

    return [
        StepCompleted(step, f"{label} information is required"),
        saved((f"{prefix}_name",), f"{label} name is required"),
        saved((f"{prefix}_person_entity",), "Person/Entity selection is required"),
        saved((f"{prefix}_ssn",), "SSN is required for Person"),
        saved((f"{prefix}_date_of_birth",), "Date of Birth is required for Person"),
        saved((f"{prefix}_ein",), "EIN is required for Entity"),
        saved((f"{prefix}_occupation",), "Occupation is required when Employed or Self-Employed"),
        saved(
            (f"{prefix}_employee_name_and_relationship",),
            "Employee Name and Relationship is required when related to employee",
        ),
        saved(
            (f"{prefix}_broker_dealer_employee_name",),
            "Broker Dealer Employee Name is required when related to employee",
        ),
    ]


RULES = VisibilityRuleSet(
    rules=[
        _account_type_rule("other_account_type_text", "other"),
        _account_type_rule("trust_establishment_date", "trust"),
        _account_type_rule("trust_types", "trust"),
        _account_type_rule("joint_are_account_holders_married", "joint_tenant"),
        _account_type_rule("joint_tenancy_state", "joint_tenant"),
        _account_type_rule("joint_number_of_tenants", "joint_tenant"),
        _account_type_rule("joint_tenancy_clauses", "joint_tenant"),
        _account_type_rule("custodial_state_gift_given_1", "custodial"),
        _account_type_rule("custodial_date_gift_given_1", "custodial"),
        _account_type_rule("custodial_state_gift_given_2", "custodial"),
        _account_type_rule("custodial_date_gift_given_2", "custodial"),
        _account_type_rule("tod_individual_agreement_date", "transfer_on_death_individual"),
        _account_type_rule("tod_joint_agreement_date", "transfer_on_death_joint"),
        _account_type_rule("joint_account_owner_signature", *SECONDARY_HOLDER_ACCOUNT_TYPES),
        VisibilityRule(
            "other_source_of_funds_text",
            show_when=(Condition("initial_source_of_funds", Operator.INCLUDES, "Other"),),
        ),
        *holder_rules(HolderType.PRIMARY.value),
        *holder_rules(HolderType.SECONDARY.value),
        *[
            VisibilityRule(
                f"trusted_contact_{name}",
                hide_when=(Condition("trusted_contact_decline_to_provide", Operator.CHECKED),),
            )
            for name in TRUSTED_CONTACT_FIELDS
        ],
    ],
    step_predicates={SECONDARY_HOLDER_STEP: has_secondary_holder},
)


DESCRIPTOR = DocumentTypeDescriptor(
    document_type=DocumentType.INVESTOR_PROFILE,
    label="Profile",
    form_id="Investor-Profile",
    rules=RULES,
    signature_collection="signatures",
    pdf_row_keys={
        "addresses": "address_type",
        "phones": "phone_type",
        "investment_knowledge": "investment_type",
        "investment_values": "investment_type",
    },
    steps=(
        StepDefinition(
            number=1,
            title="Account Registration",
            schema=AccountRegistrationStep,
            requirements=(
                RequiredField(1, ("rr_name", "customer_names"), "RR Name and Customer Names are required"),
                RequiredField(1, ("other_account_type_text",), "Other account type description is required"),
            ),
        ),
        StepDefinition(
            number=2,
            title="Patriot Act Information",
            schema=PatriotActStep,
            requirements=(
                RequiredField(2, ("initial_source_of_funds",), "At least one source of funds is required"),
                RequiredField(2, ("other_source_of_funds_text",), "Other source of funds description is required"),
            ),
        ),
        StepDefinition(
            number=3,
            title="Primary Account Holder",
            schema=AccountHolderStep,
            holder_type=HolderType.PRIMARY,
            collections=HOLDER_COLLECTIONS,
            requirements=tuple(holder_requirements(3, "primary", "Primary Account Holder")),
        ),
        StepDefinition(
            number=SECONDARY_HOLDER_STEP,
            title="Secondary Account Holder",
            schema=AccountHolderStep,
            holder_type=HolderType.SECONDARY,
            collections=HOLDER_COLLECTIONS,
            requirements=tuple(holder_requirements(4, "secondary", "Secondary Account Holder")),
        ),
        StepDefinition(
            number=5,
            title="Investment Objectives",
            schema=InvestmentObjectivesStep,
            collections=("investment_values",),
            requirements=(StepCompleted(5, "Investment Objectives are required"),),
        ),
        StepDefinition(
            number=6,
            title="Trusted Contact",
            schema=TrustedContactStep,
            field_prefix="trusted_contact_",
            requirements=(
                RequiredField(
                    6,
                    ("trusted_contact_name", "trusted_contact_email"),
                    "Trusted Contact name and email are required if not declined",
                    only_if_saved=True,
                ),
            ),
        ),
        StepDefinition(
            number=7,
            title="Signatures",
            schema=SignaturesStep,
            collections=("signatures",),
            requirements=tuple(
                signature_sets(
                    7,
                    ("account_owner", "joint_account_owner", "financial_professional", "supervisor_principal"),
                )
            ),
        ),
    ),
)
