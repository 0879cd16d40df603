"""Statement of financial condition: financial rows, then signatures."""

from typing import Any, Mapping, Sequence

from onboarding.forms.shared import JOINT_OWNER_SIGNATURE_RULE, derive_has_joint_owner, signature_sets
from onboarding.models.document import DocumentType
from onboarding.schemas.forms.statement import FinancialRowsStep, StatementSignaturesStep
from onboarding.services.forms.descriptor import DocumentTypeDescriptor, StepDefinition
from onboarding.services.forms.requirements import CollectionRule, RequiredField
from onboarding.services.forms.visibility import VisibilityRuleSet

SIGNERS = ("account_owner", "joint_account_owner", "financial_professional", "registered_principal")


def has_non_zero_amount(rows: Sequence[Mapping[str, Any]]) -> bool:
    return any((row.get("value") or 0) > 0 for row in rows)


DESCRIPTOR = DocumentTypeDescriptor(
    document_type=DocumentType.STATEMENT,
    label="Statement",
    form_id="Statement-of-Financial-Condition",
    rules=VisibilityRuleSet(rules=[JOINT_OWNER_SIGNATURE_RULE]),
    signature_collection="signatures",
    derive=derive_has_joint_owner,
    conditional_fields=("has_joint_owner",),
    pdf_row_keys={"financial_rows": "row_key"},
    steps=(
        StepDefinition(
            number=1,
            title="Financial Condition",
            schema=FinancialRowsStep,
            collections=("financial_rows",),
            requirements=(
                RequiredField(1, ("rr_name", "customer_names"), "RR Name and Customer Names are required"),
                CollectionRule(
                    1, "financial_rows", has_non_zero_amount, "At least one financial amount is required"
                ),
            ),
        ),
        StepDefinition(
            number=2,
            title="Notes and Signatures",
            schema=StatementSignaturesStep,
            collections=("signatures",),
            requirements=tuple(
                signature_sets(2, SIGNERS, required=("account_owner", "joint_account_owner"))
            ),
        ),
    ),
)
