"""Generic lifecycle service shared by every document type."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from onboarding.core.config import settings
from onboarding.core.exceptions import NotFoundError, ValidationError
from onboarding.models.document import DocumentStatus, FormDocument, OwnerRef, StepState
from onboarding.repositories.document_store import DocumentStore
from onboarding.services.forms.completion import StepCompletionTracker, utcnow
from onboarding.services.forms.descriptor import DocumentTypeDescriptor, StepDefinition
from onboarding.services.forms.lifecycle import LifecycleStateMachine
from onboarding.services.forms.resolver import SingletonDocumentResolver
from onboarding.services.forms.validator import StepValidator
from onboarding.services.pdf_service import PdfGenerationService, PdfWebhookClient, build_pdf_payload
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass
class Progress:
    """Where a document stands in its wizard.

    Attributes:
        status: Lifecycle status
        last_completed_step: Highest step ever completed
        step_completion: Step number to completion record
        resume_step: Step the wizard should reopen at
        total_steps: Number of steps of the document type
    """

    status: DocumentStatus
    last_completed_step: int
    step_completion: Dict[int, StepState]
    resume_step: int
    total_steps: int


class DocumentOrchestrator:
    """Create, edit, submit and review documents of one type.

    Everything type-specific comes from the descriptor; the orchestrator
    only sequences the lifecycle, validation, completion and store calls.
    """

    def __init__(
        self,
        descriptor: DocumentTypeDescriptor,
        store: DocumentStore,
        clock: Callable[[], datetime] = utcnow,
        pdf_client: Optional[PdfWebhookClient] = None,
    ):
        """Initialize the orchestrator.

        Args:
            descriptor: Document type description
            store: Persistence collaborator
            clock: Time source for completion marks and submission stamps
            pdf_client: Webhook client; defaults to the configured URL of the type
        """
        self.descriptor = descriptor
        self.store = store
        self.lifecycle = LifecycleStateMachine(label=descriptor.label, clock=clock)
        self.tracker = StepCompletionTracker(clock=clock)
        self.validator = StepValidator(descriptor)
        self.resolver = SingletonDocumentResolver(store, descriptor.document_type, self.lifecycle)
        self.pdf_service = PdfGenerationService(descriptor, client=pdf_client)

    async def _load(self, document_id: UUID) -> FormDocument:
        """Load a document of this orchestrator's type.

        Raises:
            NotFoundError: If the document does not exist or belongs to another type
        """
        document = await self.store.load_document_with_children(document_id)
        if document.document_type != self.descriptor.document_type:
            raise NotFoundError(self.descriptor.label, document_id)
        return document

    async def create_or_update_step1(
        self, owner: OwnerRef, payload: Mapping[str, Any]
    ) -> Tuple[FormDocument, bool]:
        """Save step 1 into the owner's single document, creating it on first use.

        Returns:
            The reloaded document and whether this call created it
        """
        owner.validate()
        definition = self.descriptor.step(1)
        model = self.validator.validate_shape(1, payload)

        document, created = await self.resolver.resolve_for_write(owner)
        await self._apply_step(document, definition, model)

        LOGGER.info(
            "Saved step 1",
            extra={
                "document_id": str(document.id),
                "document_type": self.descriptor.document_type.value,
                "created": created,
            },
        )
        return await self._load(document.id), created

    async def update_step(
        self, document_id: UUID, step: int, payload: Mapping[str, Any]
    ) -> FormDocument:
        """Save one step of an existing document.

        Shape validation runs before anything is written, so a rejected
        payload leaves the stored document untouched. A non-draft document
        is reopened as a draft by the save.
        """
        document = await self._load(document_id)
        definition = self.descriptor.step(step)
        model = self.validator.validate_shape(step, payload)

        await self._apply_step(document, definition, model)

        LOGGER.info(
            f"Saved step {step}",
            extra={"document_id": str(document_id), "document_type": self.descriptor.document_type.value},
        )
        return await self._load(document_id)

    async def _apply_step(
        self, document: FormDocument, definition: StepDefinition, model: BaseModel
    ) -> None:
        self.lifecycle.revert_for_edit(document)

        data = model.model_dump(exclude_unset=True, mode="json")
        collections = {name: data.pop(name) for name in definition.collections if name in data}
        scalars = {f"{definition.field_prefix}{name}": value for name, value in data.items()}

        account_holder_id = None
        if definition.holder_type is not None:
            holder = await self.store.upsert_account_holder(
                document.id, definition.holder_type, scalars
            )
            account_holder_id = holder.id
        else:
            await self.store.update_document_fields(document.id, scalars)

        for name, rows in collections.items():
            await self.store.replace_child_collection(
                document.id, name, list(rows or []), account_holder_id=account_holder_id
            )

        self.tracker.mark_completed(document, definition.number)
        await self.store.update_document_state(document)

    async def submit(self, document_id: UUID) -> FormDocument:
        """Submit a draft after checking the whole document.

        Raises:
            ConflictError: If the document is not a draft
            ValidationError: Listing every completeness violation
        """
        document = await self._load(document_id)
        self.lifecycle.submit(document, self.validator.validate_completeness)
        await self.store.update_document_state(document)

        LOGGER.info(
            "Document submitted",
            extra={"document_id": str(document_id), "document_type": self.descriptor.document_type.value},
        )
        return await self._load(document_id)

    async def review(self, document_id: UUID, approve: bool) -> FormDocument:
        """Record a reviewer decision on a submitted document."""
        document = await self._load(document_id)
        if approve:
            self.lifecycle.approve(document)
        else:
            self.lifecycle.reject(document)
        await self.store.update_document_state(document)

        LOGGER.info(
            "Document reviewed",
            extra={"document_id": str(document_id), "status": document.status.value},
        )
        return await self._load(document_id)

    async def get_progress(self, document_id: UUID) -> Progress:
        document = await self._load(document_id)
        total_steps = self.descriptor.total_steps
        return Progress(
            status=document.status,
            last_completed_step=document.last_completed_step,
            step_completion=document.step_completion,
            resume_step=self.tracker.compute_resume_step(document, total_steps),
            total_steps=total_steps,
        )

    async def delete(self, document_id: UUID) -> None:
        """Delete a draft and everything it owns.

        Raises:
            ConflictError: If the document is not a draft
        """
        document = await self._load(document_id)
        self.lifecycle.ensure_deletable(document)
        await self.store.delete_document(document_id)

    async def get_document(self, document_id: UUID) -> FormDocument:
        return await self._load(document_id)

    async def get_current(self, owner: OwnerRef) -> Optional[FormDocument]:
        return await self.resolver.find_current(owner)

    async def list_documents(
        self,
        owner: OwnerRef,
        status: Optional[DocumentStatus] = None,
        page: int = 1,
        limit: int = settings.default_page_size,
    ) -> Tuple[List[FormDocument], int]:
        """Page of the owner's documents, newest first, and the total count."""
        owner.validate()
        if page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= limit <= settings.max_page_size:
            raise ValidationError(f"limit must be between 1 and {settings.max_page_size}")
        return await self.store.list_documents_by_owner(
            owner,
            self.descriptor.document_type,
            status=status,
            skip=(page - 1) * limit,
            limit=limit,
        )

    def is_field_visible(self, field_id: str, snapshot: Mapping[str, Any]) -> bool:
        return self.descriptor.rules.is_visible(field_id, snapshot)

    def is_step_visible(self, step: int, snapshot: Mapping[str, Any]) -> bool:
        return self.descriptor.rules.is_step_visible(step, snapshot)

    async def check_step(self, document_id: UUID, step: int) -> List[str]:
        """Outstanding requirement messages of one step of a stored document."""
        document = await self._load(document_id)
        return self.validator.check_step(document, step)

    async def build_pdf_payload(self, document_id: UUID) -> Dict[str, Any]:
        document = await self._load(document_id)
        return build_pdf_payload(document, self.descriptor)

    async def generate_pdf(self, document_id: UUID) -> Dict[str, Any]:
        document = await self._load(document_id)
        return await self.pdf_service.execute(document)
