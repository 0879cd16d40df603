"""Process-local DocumentStore used with STORAGE_BACKEND=memory and in tests."""

import copy
import uuid
from datetime import datetime, timezone
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from onboarding.core.exceptions import NotFoundError
from onboarding.models.document import (
    AccountHolder,
    DocumentStatus,
    DocumentType,
    FormDocument,
    HolderType,
    OwnerRef,
)
from onboarding.repositories.document_store import DocumentStore
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryDocumentStore(DocumentStore):
    """Keeps documents in a dict and hands out deep copies.

    Callers never share state with the store: every read returns a fresh
    copy and every write goes through one of the contract methods.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._documents: Dict[UUID, FormDocument] = {}
        # Creation order for documents created within the same clock tick
        self._sequence: Dict[UUID, int] = {}
        self._counter = count()

    def _get(self, document_id: UUID) -> FormDocument:
        document = self._documents.get(document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        return document

    def _owned_by(self, document: FormDocument, owner: OwnerRef, document_type: DocumentType) -> bool:
        if document.document_type != document_type:
            return False
        if owner.client_id is not None:
            return document.owner.client_id == owner.client_id
        return document.owner.user_id == owner.user_id

    def _newest_first(self, documents: List[FormDocument]) -> List[FormDocument]:
        return sorted(
            documents,
            key=lambda d: (d.created_at, self._sequence[d.id]),
            reverse=True,
        )

    async def find_latest_document_by_owner(
        self, owner: OwnerRef, document_type: DocumentType
    ) -> Optional[FormDocument]:
        matches = [d for d in self._documents.values() if self._owned_by(d, owner, document_type)]
        if not matches:
            return None
        return copy.deepcopy(self._newest_first(matches)[0])

    async def create_document(
        self,
        document_type: DocumentType,
        owner: OwnerRef,
        initial_fields: Dict[str, Any],
    ) -> FormDocument:
        now = self._clock()
        document = FormDocument(
            id=uuid.uuid4(),
            document_type=document_type,
            owner=owner,
            status=DocumentStatus.DRAFT,
            fields=copy.deepcopy(initial_fields),
            created_at=now,
            updated_at=now,
        )
        self._documents[document.id] = document
        self._sequence[document.id] = next(self._counter)
        LOGGER.info(
            "Created form document",
            extra={"document_id": str(document.id), "document_type": document_type.value},
        )
        return copy.deepcopy(document)

    async def update_document_fields(self, document_id: UUID, field_delta: Dict[str, Any]) -> None:
        document = self._get(document_id)
        if not field_delta:
            return
        document.fields.update(copy.deepcopy(field_delta))
        document.updated_at = self._clock()

    async def update_document_state(self, document: FormDocument) -> None:
        stored = self._get(document.id)
        stored.status = document.status
        stored.step_completion = copy.deepcopy(document.step_completion)
        stored.last_completed_step = document.last_completed_step
        stored.submitted_at = document.submitted_at
        stored.updated_at = self._clock()

    async def upsert_account_holder(
        self,
        document_id: UUID,
        holder_type: HolderType,
        field_delta: Dict[str, Any],
    ) -> AccountHolder:
        document = self._get(document_id)
        holder = document.account_holders.get(holder_type.value)
        if holder is None:
            holder = AccountHolder(
                id=uuid.uuid4(),
                document_id=document_id,
                holder_type=holder_type,
            )
            document.account_holders[holder_type.value] = holder
            LOGGER.info(
                "Created account holder",
                extra={"document_id": str(document_id), "holder_type": holder_type.value},
            )
        holder.fields.update(copy.deepcopy(field_delta))
        document.updated_at = self._clock()
        return copy.deepcopy(holder)

    async def replace_child_collection(
        self,
        document_id: UUID,
        collection: str,
        rows: List[Dict[str, Any]],
        account_holder_id: Optional[UUID] = None,
    ) -> None:
        document = self._get(document_id)
        target = document.children
        if account_holder_id is not None:
            holder = next(
                (h for h in document.account_holders.values() if h.id == account_holder_id),
                None,
            )
            if holder is None:
                raise NotFoundError("AccountHolder", account_holder_id)
            target = holder.children
        target[collection] = copy.deepcopy(list(rows))
        document.updated_at = self._clock()

    async def load_document_with_children(self, document_id: UUID) -> FormDocument:
        return copy.deepcopy(self._get(document_id))

    async def delete_document(self, document_id: UUID) -> None:
        self._get(document_id)
        # Holders and child rows live inside the aggregate and go with it
        del self._documents[document_id]
        del self._sequence[document_id]
        LOGGER.info("Deleted form document", extra={"document_id": str(document_id)})

    async def list_documents_by_owner(
        self,
        owner: OwnerRef,
        document_type: DocumentType,
        status: Optional[DocumentStatus] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[FormDocument], int]:
        matches = [
            d for d in self._documents.values()
            if self._owned_by(d, owner, document_type) and (status is None or d.status == status)
        ]
        ordered = self._newest_first(matches)
        return [copy.deepcopy(d) for d in ordered[skip:skip + limit]], len(ordered)
