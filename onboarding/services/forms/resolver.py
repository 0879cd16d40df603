"""One live document per owner and document type."""

from typing import Any, Dict, Optional, Tuple

from onboarding.models.document import DocumentType, FormDocument, OwnerRef
from onboarding.repositories.document_store import DocumentStore
from onboarding.services.forms.lifecycle import LifecycleStateMachine
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


class SingletonDocumentResolver:
    """Finds the owner's current document or creates the first one.

    Lookup-then-branch: the newest document of the owner wins and older
    duplicates, should any exist, are left alone.
    """

    def __init__(
        self,
        store: DocumentStore,
        document_type: DocumentType,
        lifecycle: LifecycleStateMachine,
    ):
        self.store = store
        self.document_type = document_type
        self.lifecycle = lifecycle

    async def find_current(self, owner: OwnerRef) -> Optional[FormDocument]:
        owner.validate()
        return await self.store.find_latest_document_by_owner(owner, self.document_type)

    async def resolve_for_write(
        self,
        owner: OwnerRef,
        initial_fields: Optional[Dict[str, Any]] = None,
    ) -> Tuple[FormDocument, bool]:
        """Document the owner's next write goes to.

        An existing document is reopened as a draft if needed; otherwise a
        new draft is created.

        Args:
            owner: Owning user or client; exactly one must be set
            initial_fields: Fields of a newly created document

        Returns:
            The document and whether it was created by this call
        """
        existing = await self.find_current(owner)
        if existing is not None:
            if self.lifecycle.revert_for_edit(existing):
                await self.store.update_document_state(existing)
            return existing, False

        document = await self.store.create_document(
            self.document_type, owner, dict(initial_fields or {})
        )
        LOGGER.info(
            "Created new document for owner",
            extra={
                "document_id": str(document.id),
                "document_type": self.document_type.value,
                **owner.as_dict(),
            },
        )
        return document, True
