"""Document status machine: draft -> submitted -> approved | rejected."""

from datetime import datetime
from typing import Callable, Optional

from onboarding.core.exceptions import ConflictError
from onboarding.models.document import DocumentStatus, FormDocument
from onboarding.services.forms.completion import utcnow
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


class LifecycleStateMachine:
    """Legal status transitions of a form document.

    Transitions mutate the passed document in memory; persisting the result
    is the caller's job. Editing is always allowed and silently reopens a
    non-draft document, so there is no locked terminal state.
    """

    def __init__(self, label: str = "Document", clock: Callable[[], datetime] = utcnow):
        """Initialize the state machine.

        Args:
            label: Human-readable document type used in conflict messages
            clock: Source of the submission timestamp
        """
        self.label = label
        self._clock = clock

    @staticmethod
    def initial_status() -> DocumentStatus:
        return DocumentStatus.DRAFT

    def revert_for_edit(self, document: FormDocument) -> bool:
        """Put a non-draft document back into draft before it is edited.

        Returns:
            True if the status changed
        """
        if document.status == DocumentStatus.DRAFT:
            return False
        LOGGER.info(
            "Reverting document to draft for edit",
            extra={"document_id": str(document.id), "from_status": document.status.value},
        )
        document.status = DocumentStatus.DRAFT
        return True

    def submit(
        self,
        document: FormDocument,
        completeness_check: Optional[Callable[[FormDocument], None]] = None,
    ) -> FormDocument:
        """Move a complete draft to submitted.

        Args:
            document: Document to submit
            completeness_check: Raises ValidationError listing every violation

        Raises:
            ConflictError: If the document is not a draft
            ValidationError: If the completeness check fails; the document is left untouched
        """
        if document.status != DocumentStatus.DRAFT:
            raise ConflictError(f"{self.label} is not in draft status")

        if completeness_check is not None:
            completeness_check(document)

        document.status = DocumentStatus.SUBMITTED
        document.submitted_at = self._clock()
        return document

    def approve(self, document: FormDocument) -> FormDocument:
        return self._review(document, DocumentStatus.APPROVED)

    def reject(self, document: FormDocument) -> FormDocument:
        return self._review(document, DocumentStatus.REJECTED)

    def _review(self, document: FormDocument, outcome: DocumentStatus) -> FormDocument:
        if document.status != DocumentStatus.SUBMITTED:
            raise ConflictError(
                f"{self.label} must be submitted before it can be {outcome.value}"
            )
        document.status = outcome
        return document

    def ensure_deletable(self, document: FormDocument) -> None:
        if document.status != DocumentStatus.DRAFT:
            raise ConflictError(
                f"Cannot delete a {document.status.value} {self.label.lower()}"
            )
