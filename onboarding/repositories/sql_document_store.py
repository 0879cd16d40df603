"""DocumentStore backed by the async SQLAlchemy repositories."""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from onboarding.core.exceptions import DatabaseError, NotFoundError
from onboarding.database.models import AccountHolderRecord, FormDocumentRecord
from onboarding.models.document import (
    AccountHolder,
    DocumentStatus,
    DocumentType,
    FormDocument,
    HolderType,
    OwnerRef,
    StepState,
)
from onboarding.repositories.document_store import DocumentStore
from onboarding.repositories.form_document_repository import (
    AccountHolderRepository,
    ChildRowRepository,
    FormDocumentRepository,
)
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _group_rows(rows) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for row in sorted(rows, key=lambda r: r.position):
        grouped[row.collection].append(dict(row.data))
    return dict(grouped)


def record_to_document(record: FormDocumentRecord) -> FormDocument:
    """Map an eagerly loaded FormDocumentRecord to the domain aggregate."""
    document_rows = [row for row in record.child_rows if row.account_holder_id is None]

    holders: Dict[str, AccountHolder] = {}
    for holder_record in record.account_holders:
        holder_rows = [
            row for row in record.child_rows if row.account_holder_id == holder_record.id
        ]
        holders[holder_record.holder_type] = AccountHolder(
            id=holder_record.id,
            document_id=record.id,
            holder_type=HolderType(holder_record.holder_type),
            fields=dict(holder_record.fields or {}),
            children=_group_rows(holder_rows),
        )

    return FormDocument(
        id=record.id,
        document_type=DocumentType(record.document_type),
        owner=OwnerRef(user_id=record.user_id, client_id=record.client_id),
        status=DocumentStatus(record.status),
        fields=dict(record.fields or {}),
        step_completion={
            int(step): StepState.from_dict(state)
            for step, state in (record.step_completion or {}).items()
        },
        last_completed_step=record.last_completed_step,
        submitted_at=record.submitted_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
        children=_group_rows(document_rows),
        account_holders=holders,
    )


class SqlDocumentStore(DocumentStore):
    """Document store over PostgreSQL tables.

    Every SQLAlchemy failure is logged by the repositories and surfaced
    here as DatabaseError.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.documents = FormDocumentRepository(session)
        self.holders = AccountHolderRepository(session)
        self.child_rows = ChildRowRepository(session)

    async def _require_record(self, document_id: UUID) -> FormDocumentRecord:
        record = await self.documents.get_by_id(document_id)
        if record is None:
            raise NotFoundError("Document", document_id)
        return record

    async def find_latest_document_by_owner(
        self, owner: OwnerRef, document_type: DocumentType
    ) -> Optional[FormDocument]:
        try:
            record = await self.documents.find_latest_by_owner(
                document_type.value, user_id=owner.user_id, client_id=owner.client_id
            )
            if record is None:
                return None
            return await self.load_document_with_children(record.id)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to look up document by owner", original_error=e) from e

    async def create_document(
        self,
        document_type: DocumentType,
        owner: OwnerRef,
        initial_fields: Dict[str, Any],
    ) -> FormDocument:
        try:
            record = await self.documents.create(
                document_type=document_type.value,
                user_id=owner.user_id,
                client_id=owner.client_id,
                status=DocumentStatus.DRAFT.value,
                fields=dict(initial_fields),
                step_completion={},
                last_completed_step=0,
            )
            LOGGER.info(
                "Created form document",
                extra={"document_id": str(record.id), "document_type": document_type.value},
            )
            return await self.load_document_with_children(record.id)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to create document", original_error=e) from e

    async def update_document_fields(self, document_id: UUID, field_delta: Dict[str, Any]) -> None:
        if not field_delta:
            return
        try:
            record = await self._require_record(document_id)
            await self.documents.update(document_id, fields={**(record.fields or {}), **field_delta})
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to update document fields", original_error=e) from e

    async def update_document_state(self, document: FormDocument) -> None:
        try:
            await self._require_record(document.id)
            await self.documents.update(
                document.id,
                status=document.status.value,
                step_completion={
                    str(step): state.to_dict() for step, state in document.step_completion.items()
                },
                last_completed_step=document.last_completed_step,
                submitted_at=document.submitted_at,
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to update document state", original_error=e) from e

    async def upsert_account_holder(
        self,
        document_id: UUID,
        holder_type: HolderType,
        field_delta: Dict[str, Any],
    ) -> AccountHolder:
        try:
            await self._require_record(document_id)
            record: Optional[AccountHolderRecord] = await self.holders.get_by_document_and_type(
                document_id, holder_type.value
            )
            if record is None:
                record = await self.holders.create(
                    document_id=document_id,
                    holder_type=holder_type.value,
                    fields=dict(field_delta),
                )
                LOGGER.info(
                    "Created account holder",
                    extra={"document_id": str(document_id), "holder_type": holder_type.value},
                )
            elif field_delta:
                record = await self.holders.update(
                    record.id, fields={**(record.fields or {}), **field_delta}
                )

            return AccountHolder(
                id=record.id,
                document_id=document_id,
                holder_type=holder_type,
                fields=dict(record.fields or {}),
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to save account holder", original_error=e) from e

    async def replace_child_collection(
        self,
        document_id: UUID,
        collection: str,
        rows: List[Dict[str, Any]],
        account_holder_id: Optional[UUID] = None,
    ) -> None:
        try:
            await self._require_record(document_id)
            await self.child_rows.replace_collection(
                document_id, collection, rows, account_holder_id=account_holder_id
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to replace collection {collection}", original_error=e) from e

    async def load_document_with_children(self, document_id: UUID) -> FormDocument:
        try:
            record = await self.documents.get_with_children(document_id)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to load document", original_error=e) from e
        if record is None:
            raise NotFoundError("Document", document_id)
        return record_to_document(record)

    async def delete_document(self, document_id: UUID) -> None:
        try:
            deleted = await self.documents.delete(document_id)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to delete document", original_error=e) from e
        if not deleted:
            raise NotFoundError("Document", document_id)
        LOGGER.info("Deleted form document", extra={"document_id": str(document_id)})

    async def list_documents_by_owner(
        self,
        owner: OwnerRef,
        document_type: DocumentType,
        status: Optional[DocumentStatus] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[FormDocument], int]:
        try:
            records, total = await self.documents.list_by_owner(
                document_type.value,
                user_id=owner.user_id,
                client_id=owner.client_id,
                status=status.value if status else None,
                skip=skip,
                limit=limit,
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to list documents", original_error=e) from e
        return [record_to_document(record) for record in records], total
