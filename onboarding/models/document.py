"""Domain aggregate for onboarding form documents.

A ``FormDocument`` is the storage-independent view of one multi-step form.
Both document stores hand these objects to the services, and the services
only ever mutate documents through a store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from onboarding.core.exceptions import ValidationError


class DocumentType(str, Enum):
    """The five onboarding form types sharing the lifecycle engine."""

    INVESTOR_PROFILE = "investor_profile"
    ADDITIONAL_HOLDER = "additional_holder"
    ALT_ORDER = "alt_order"
    ACCREDITATION = "accreditation"
    STATEMENT = "statement"


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class HolderType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class OwnerRef:
    """Owner key of a document: exactly one of a user or a client.

    Attributes:
        user_id: Owning end-user, if the document belongs to a user
        client_id: Owning client, if the document belongs to a client
    """

    user_id: Optional[UUID] = None
    client_id: Optional[UUID] = None

    def validate(self) -> "OwnerRef":
        """Raise ValidationError unless exactly one owner id is set."""
        if self.user_id is not None and self.client_id is not None:
            raise ValidationError("Provide either user_id or client_id, not both")
        if self.user_id is None and self.client_id is None:
            raise ValidationError("Either user_id or client_id is required")
        return self

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "user_id": str(self.user_id) if self.user_id else None,
            "client_id": str(self.client_id) if self.client_id else None,
        }


@dataclass
class StepState:
    """Completion record of a single step."""

    completed: bool
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"completed": self.completed, "updated_at": self.updated_at.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepState":
        updated_at = data["updated_at"]
        if isinstance(updated_at, str):
            updated_at = datetime.fromisoformat(updated_at)
        return cls(completed=bool(data.get("completed")), updated_at=updated_at)


@dataclass
class AccountHolder:
    """Primary or secondary signer attached to an investor profile.

    Attributes:
        id: Holder identifier
        document_id: Parent document
        holder_type: primary or secondary
        fields: Scalar holder attributes
        children: Child collections owned by the holder (addresses, phones, ...)
    """

    id: UUID
    document_id: UUID
    holder_type: HolderType
    fields: Dict[str, Any] = field(default_factory=dict)
    children: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


@dataclass
class FormDocument:
    """A single onboarding form and everything it owns.

    Attributes:
        id: Document identifier, immutable
        document_type: Which of the five form types this is
        owner: Owning user or client
        status: Lifecycle status
        fields: Scalar field values keyed by field name
        step_completion: Step number to completion record
        last_completed_step: Highest step number ever marked completed
        submitted_at: Time of the last transition into submitted
        created_at: Creation time
        updated_at: Last modification time
        children: Document-level child collections keyed by collection name
        account_holders: Holder sub-records keyed by holder type value
    """

    id: UUID
    document_type: DocumentType
    owner: OwnerRef
    status: DocumentStatus = DocumentStatus.DRAFT
    fields: Dict[str, Any] = field(default_factory=dict)
    step_completion: Dict[int, StepState] = field(default_factory=dict)
    last_completed_step: int = 0
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    children: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    account_holders: Dict[str, AccountHolder] = field(default_factory=dict)

    def holder(self, holder_type: HolderType) -> Optional[AccountHolder]:
        return self.account_holders.get(holder_type.value)

    @property
    def completed_steps(self) -> List[int]:
        return sorted(n for n, state in self.step_completion.items() if state.completed)
