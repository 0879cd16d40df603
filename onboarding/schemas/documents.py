"""Request and response bodies of the form document endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from onboarding.models.document import AccountHolder, DocumentStatus, DocumentType, FormDocument, OwnerRef


class OwnerRequest(BaseModel):
    """Owner of the document: exactly one of ``user_id`` and ``client_id``."""

    user_id: UUID | None = None
    client_id: UUID | None = None

    def to_owner(self) -> OwnerRef:
        return OwnerRef(user_id=self.user_id, client_id=self.client_id)


class CreateDocumentRequest(OwnerRequest):
    payload: Dict[str, Any] = Field(default_factory=dict, description="Step 1 values")


class StepUpdateRequest(BaseModel):
    payload: Dict[str, Any] = Field(default_factory=dict, description="Values of the step")


class ReviewRequest(BaseModel):
    approve: bool = Field(..., description="True to approve, False to reject")


class VisibilityRequest(BaseModel):
    values: Dict[str, Any] = Field(default_factory=dict, description="Current form values, flattened")
    field_ids: List[str] | None = Field(default=None, description="Fields to evaluate; defaults to all governed fields")


class StepStateResponse(BaseModel):
    completed: bool
    updated_at: datetime


class AccountHolderResponse(BaseModel):
    id: UUID
    holder_type: str
    fields: Dict[str, Any]
    children: Dict[str, List[Dict[str, Any]]]

    @classmethod
    def from_domain(cls, holder: AccountHolder) -> "AccountHolderResponse":
        return cls(
            id=holder.id,
            holder_type=holder.holder_type.value,
            fields=holder.fields,
            children=holder.children,
        )


class DocumentResponse(BaseModel):
    id: UUID
    document_type: DocumentType
    user_id: UUID | None = None
    client_id: UUID | None = None
    status: DocumentStatus
    fields: Dict[str, Any]
    step_completion: Dict[str, StepStateResponse]
    last_completed_step: int
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    children: Dict[str, List[Dict[str, Any]]]
    account_holders: Dict[str, AccountHolderResponse]

    @classmethod
    def from_domain(cls, document: FormDocument) -> "DocumentResponse":
        return cls(
            id=document.id,
            document_type=document.document_type,
            user_id=document.owner.user_id,
            client_id=document.owner.client_id,
            status=document.status,
            fields=document.fields,
            step_completion={
                str(step): StepStateResponse(completed=state.completed, updated_at=state.updated_at)
                for step, state in sorted(document.step_completion.items())
            },
            last_completed_step=document.last_completed_step,
            submitted_at=document.submitted_at,
            created_at=document.created_at,
            updated_at=document.updated_at,
            children=document.children,
            account_holders={
                key: AccountHolderResponse.from_domain(holder)
                for key, holder in document.account_holders.items()
            },
        )


class ProgressResponse(BaseModel):
    status: DocumentStatus
    last_completed_step: int
    step_completion: Dict[str, StepStateResponse]
    resume_step: int
    total_steps: int


class DocumentListResponse(BaseModel):
    items: List[DocumentResponse]
    total: int
    page: int
    limit: int


class StepCheckResponse(BaseModel):
    step: int
    complete: bool
    violations: List[str]


class VisibilityResponse(BaseModel):
    fields: Dict[str, bool]
    steps: Dict[str, bool]


class PdfGenerationResponse(BaseModel):
    success: bool
    document_id: UUID
    message: Optional[str] = None
