"""Alternative investment order: a single step with several field groups."""

from onboarding.forms.shared import JOINT_OWNER_SIGNATURE_RULE, derive_has_joint_owner, signature_sets
from onboarding.models.document import DocumentType
from onboarding.schemas.forms.alt_order import AltOrderStep
from onboarding.services.forms.conditions import Condition, Operator
from onboarding.services.forms.descriptor import DocumentTypeDescriptor, StepDefinition
from onboarding.services.forms.requirements import RequiredField
from onboarding.services.forms.visibility import VisibilityRule, VisibilityRuleSet

SIGNERS = ("account_owner", "joint_account_owner", "financial_professional", "registered_principal")

RULES = VisibilityRuleSet(
    rules=[
        VisibilityRule(
            "qualified_account_certification_text",
            show_when=(Condition("qualified_account", Operator.EQUALS, "Yes"),),
        ),
        JOINT_OWNER_SIGNATURE_RULE,
    ]
)


DESCRIPTOR = DocumentTypeDescriptor(
    document_type=DocumentType.ALT_ORDER,
    label="Alt Order Profile",
    form_id="Alternative-Investment-Order",
    rules=RULES,
    derive=derive_has_joint_owner,
    conditional_fields=("has_joint_owner",),
    steps=(
        StepDefinition(
            number=1,
            title="Alternative Investment Order",
            schema=AltOrderStep,
            requirements=(
                RequiredField(1, ("rr_name", "customer_names"), "RR Name and Customer Names are required"),
                RequiredField(
                    1,
                    ("qualified_account_certification_text",),
                    "Qualified account certification text is required",
                ),
                *signature_sets(1, SIGNERS, required=("account_owner", "joint_account_owner")),
            ),
        ),
    ),
)
