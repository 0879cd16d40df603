"""Rule fragments reused by several document types."""

from typing import Any, Dict, List, Tuple

from onboarding.services.forms.conditions import Condition, Operator
from onboarding.services.forms.requirements import SignatureSet
from onboarding.services.forms.visibility import VisibilityRule

SIGNER_LABELS = {
    "account_owner": "Account Owner",
    "joint_account_owner": "Joint Account Owner",
    "financial_professional": "Financial Professional",
    "registered_principal": "Registered Principal",
    "supervisor_principal": "Supervisor/Principal",
}

JOINT_OWNER_SIGNATURE_RULE = VisibilityRule(
    field_id="joint_account_owner_signature",
    show_when=(Condition("has_joint_owner", Operator.CHECKED),),
)


def derive_has_joint_owner(snapshot: Dict[str, Any]) -> None:
    """Infer a joint owner from "A and B" / "A & B" customer names when not answered."""
    if isinstance(snapshot.get("has_joint_owner"), bool):
        return
    names = snapshot.get("customer_names") or ""
    snapshot["has_joint_owner"] = " and " in names.lower() or " & " in names


def signature_sets(
    step: int,
    signers: Tuple[str, ...],
    required: Tuple[str, ...] = ("account_owner",),
) -> List[SignatureSet]:
    """All-or-nothing signature sets over ``{signer}_signature`` style keys."""
    return [
        SignatureSet(
            step=step,
            label=SIGNER_LABELS[signer],
            signature_field=f"{signer}_signature",
            printed_name_field=f"{signer}_printed_name",
            date_field=f"{signer}_date",
            required=signer in required,
        )
        for signer in signers
    ]
