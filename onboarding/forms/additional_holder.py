"""Additional holder: identity step and disclosures step."""

from typing import Any, Mapping, Sequence

from onboarding.models.document import DocumentType
from onboarding.schemas.forms.additional_holder import DisclosuresStep, HolderInformationStep
from onboarding.services.forms.conditions import Condition, Operator
from onboarding.services.forms.descriptor import DocumentTypeDescriptor, StepDefinition
from onboarding.services.forms.requirements import (
    CollectionRule,
    RequiredField,
    SignatureSet,
    is_missing,
)
from onboarding.services.forms.visibility import VisibilityRule, VisibilityRuleSet

GOVERNMENT_ID_FIELDS = ("id_type", "id_number", "country_of_issue", "date_of_issue", "date_of_expiration")

_EMPLOYED = Condition("employment_status", Operator.INCLUDES, ["Employed", "SelfEmployed"])


def _yes(field_id: str, answer_field: str) -> VisibilityRule:
    return VisibilityRule(field_id=field_id, show_when=(Condition(answer_field, Operator.EQUALS, "Yes"),))


def government_ids_complete(rows: Sequence[Mapping[str, Any]]) -> bool:
    """Every government ID row is either empty or fully filled in."""
    for row in rows:
        filled = [not is_missing(row.get(name)) for name in GOVERNMENT_ID_FIELDS]
        if any(filled) and not all(filled):
            return False
    return True


RULES = VisibilityRuleSet(
    rules=[
        VisibilityRule("ssn", show_when=(Condition("person_entity", Operator.EQUALS, "Person"),)),
        VisibilityRule("ein", show_when=(Condition("person_entity", Operator.EQUALS, "Entity"),)),
        VisibilityRule("occupation", show_when=(_EMPLOYED,)),
        VisibilityRule("employer_name", show_when=(_EMPLOYED,)),
        VisibilityRule("years_employed", show_when=(_EMPLOYED,)),
        VisibilityRule("type_of_business", show_when=(_EMPLOYED,)),
        _yes("employee_name", "related_to_employee_at_this_broker_dealer"),
        _yes("relationship", "related_to_employee_at_this_broker_dealer"),
        _yes("broker_dealer_name", "employee_of_another_broker_dealer"),
        _yes("broker_dealer_name2", "related_to_employee_at_another_broker_dealer"),
        _yes("employee_name2", "related_to_employee_at_another_broker_dealer"),
        _yes("relationship2", "related_to_employee_at_another_broker_dealer"),
        _yes("with_what_firms", "maintaining_other_brokerage_accounts"),
        _yes("years_of_investment_experience", "maintaining_other_brokerage_accounts"),
        _yes("what_is_the_affiliation", "affiliated_with_exchange_or_finra"),
        _yes("company_names", "senior_officer_director_shareholder"),
    ]
)


DESCRIPTOR = DocumentTypeDescriptor(
    document_type=DocumentType.ADDITIONAL_HOLDER,
    label="Additional Holder Profile",
    form_id="Additional-Holder",
    rules=RULES,
    pdf_row_keys={"addresses": "address_type", "investment_knowledge": "investment_type"},
    steps=(
        StepDefinition(
            number=1,
            title="Holder Information",
            schema=HolderInformationStep,
            collections=("addresses", "investment_knowledge"),
            requirements=(
                RequiredField(1, ("name",), "Name is required"),
                RequiredField(1, ("person_entity",), "Person/Entity selection is required"),
                RequiredField(1, ("ssn",), "SSN is required when Person is selected"),
                RequiredField(1, ("ein",), "EIN is required when Entity is selected"),
                RequiredField(1, ("occupation",), "Occupation is required when employed"),
                RequiredField(1, ("employer_name",), "Employer Name is required when employed"),
            ),
        ),
        StepDefinition(
            number=2,
            title="Financial Information and Disclosures",
            schema=DisclosuresStep,
            collections=("government_ids",),
            requirements=(
                RequiredField(2, ("employee_name",), "Employee Name is required"),
                RequiredField(2, ("relationship",), "Relationship is required"),
                RequiredField(2, ("broker_dealer_name",), "Broker Dealer Name is required"),
                RequiredField(
                    2,
                    ("broker_dealer_name2", "employee_name2", "relationship2"),
                    "Broker Dealer Name, Employee Name and Relationship are required",
                ),
                RequiredField(2, ("with_what_firms",), "Firm name(s) are required"),
                RequiredField(
                    2, ("years_of_investment_experience",), "Years of Investment Experience is required"
                ),
                RequiredField(2, ("what_is_the_affiliation",), "Affiliation details are required"),
                RequiredField(2, ("company_names",), "Company Name(s) are required"),
                CollectionRule(
                    2,
                    "government_ids",
                    government_ids_complete,
                    "All government ID fields must be completed together",
                ),
                SignatureSet(
                    step=2,
                    label="Account Holder",
                    signature_field="signature",
                    printed_name_field="printed_name",
                    date_field="signature_date",
                    required=True,
                ),
            ),
        ),
    ),
)
