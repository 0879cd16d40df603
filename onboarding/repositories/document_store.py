"""Persistence contract consumed by the form services."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from onboarding.models.document import (
    AccountHolder,
    DocumentStatus,
    DocumentType,
    FormDocument,
    HolderType,
    OwnerRef,
)


class DocumentStore(ABC):
    """Storage collaborator for form documents and everything they own.

    Implementations must keep child rows bound to their parent: deleting a
    document removes its account holders and every child collection row.
    """

    @abstractmethod
    async def find_latest_document_by_owner(
        self, owner: OwnerRef, document_type: DocumentType
    ) -> Optional[FormDocument]:
        """Most recently created document of ``document_type`` for ``owner``."""

    @abstractmethod
    async def create_document(
        self,
        document_type: DocumentType,
        owner: OwnerRef,
        initial_fields: Dict[str, Any],
    ) -> FormDocument:
        """Create a new draft document holding ``initial_fields``."""

    @abstractmethod
    async def update_document_fields(self, document_id: UUID, field_delta: Dict[str, Any]) -> None:
        """Merge ``field_delta`` into the document's scalar fields."""

    @abstractmethod
    async def update_document_state(self, document: FormDocument) -> None:
        """Persist status, step completion, resume point and submitted_at of ``document``."""

    @abstractmethod
    async def upsert_account_holder(
        self,
        document_id: UUID,
        holder_type: HolderType,
        field_delta: Dict[str, Any],
    ) -> AccountHolder:
        """Create the holder on first use, otherwise merge ``field_delta`` into it."""

    @abstractmethod
    async def replace_child_collection(
        self,
        document_id: UUID,
        collection: str,
        rows: List[Dict[str, Any]],
        account_holder_id: Optional[UUID] = None,
    ) -> None:
        """Delete every row of ``collection`` and insert ``rows`` in order."""

    @abstractmethod
    async def load_document_with_children(self, document_id: UUID) -> FormDocument:
        """Full aggregate fetch; raises NotFoundError for unknown ids."""

    @abstractmethod
    async def delete_document(self, document_id: UUID) -> None:
        """Delete the document together with its holders and child rows."""

    @abstractmethod
    async def list_documents_by_owner(
        self,
        owner: OwnerRef,
        document_type: DocumentType,
        status: Optional[DocumentStatus] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[FormDocument], int]:
        """Page of the owner's documents, newest first, plus the total count."""
