"""Accredited investor verification (506c): a single step."""

from onboarding.forms.shared import JOINT_OWNER_SIGNATURE_RULE, derive_has_joint_owner, signature_sets
from onboarding.models.document import DocumentType
from onboarding.schemas.forms.accreditation import AccreditationStep
from onboarding.services.forms.descriptor import DocumentTypeDescriptor, StepDefinition
from onboarding.services.forms.requirements import RequiredField
from onboarding.services.forms.visibility import VisibilityRuleSet

SIGNERS = ("account_owner", "joint_account_owner", "financial_professional", "registered_principal")

DESCRIPTOR = DocumentTypeDescriptor(
    document_type=DocumentType.ACCREDITATION,
    label="Accreditation Profile",
    form_id="Accredited-Investor-Verification",
    rules=VisibilityRuleSet(rules=[JOINT_OWNER_SIGNATURE_RULE]),
    derive=derive_has_joint_owner,
    conditional_fields=("has_joint_owner",),
    steps=(
        StepDefinition(
            number=1,
            title="Accredited Investor Verification",
            schema=AccreditationStep,
            requirements=(
                RequiredField(1, ("rr_name", "customer_names"), "RR Name and Customer Names are required"),
                *signature_sets(1, SIGNERS, required=("account_owner", "joint_account_owner")),
            ),
        ),
    ),
)
