from typing import Optional, List, Dict, Any, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from onboarding.repositories.base_repository import BaseRepository
from onboarding.database.models import (
    AccountHolderRecord,
    ChildRowRecord,
    FormDocumentRecord,
)
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


class FormDocumentRepository(BaseRepository[FormDocumentRecord]):
    """Repository for managing FormDocumentRecord rows.

    Inherits from BaseRepository for standard CRUD operations.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, FormDocumentRecord)

    def _owner_clause(self, user_id: Optional[UUID], client_id: Optional[UUID]):
        if client_id is not None:
            return FormDocumentRecord.client_id == client_id
        return FormDocumentRecord.user_id == user_id

    async def find_latest_by_owner(
        self,
        document_type: str,
        user_id: Optional[UUID] = None,
        client_id: Optional[UUID] = None,
    ) -> Optional[FormDocumentRecord]:
        """Most recently created document of a type for a user or client.

        Args:
            document_type: Document type value
            user_id: Owning user, if any
            client_id: Owning client, if any

        Returns:
            The newest matching record, or None
        """
        query = (
            select(FormDocumentRecord)
            .where(FormDocumentRecord.document_type == document_type)
            .where(self._owner_clause(user_id, client_id))
            .order_by(FormDocumentRecord.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_with_children(self, document_id: UUID) -> Optional[FormDocumentRecord]:
        """Fetch a document with its holders and all child rows eagerly loaded."""
        query = (
            select(FormDocumentRecord)
            .where(FormDocumentRecord.id == document_id)
            .options(
                selectinload(FormDocumentRecord.account_holders),
                selectinload(FormDocumentRecord.child_rows),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_owner(
        self,
        document_type: str,
        user_id: Optional[UUID] = None,
        client_id: Optional[UUID] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[FormDocumentRecord], int]:
        """Page of an owner's documents, newest first, with the total count."""
        conditions = [
            FormDocumentRecord.document_type == document_type,
            self._owner_clause(user_id, client_id),
        ]
        if status:
            conditions.append(FormDocumentRecord.status == status)

        query = (
            select(FormDocumentRecord)
            .where(*conditions)
            .options(
                selectinload(FormDocumentRecord.account_holders),
                selectinload(FormDocumentRecord.child_rows),
            )
            .order_by(FormDocumentRecord.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        count_query = select(func.count()).select_from(FormDocumentRecord).where(*conditions)

        result = await self.session.execute(query)
        total = (await self.session.execute(count_query)).scalar_one()
        return list(result.scalars().all()), total


class AccountHolderRepository(BaseRepository[AccountHolderRecord]):
    """Repository for investor profile account holders."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AccountHolderRecord)

    async def get_by_document_and_type(
        self, document_id: UUID, holder_type: str
    ) -> Optional[AccountHolderRecord]:
        query = select(AccountHolderRecord).where(
            AccountHolderRecord.document_id == document_id,
            AccountHolderRecord.holder_type == holder_type,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()


class ChildRowRepository(BaseRepository[ChildRowRecord]):
    """Repository for full-replace child collection rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ChildRowRecord)

    async def replace_collection(
        self,
        document_id: UUID,
        collection: str,
        rows: List[Dict[str, Any]],
        account_holder_id: Optional[UUID] = None,
    ) -> None:
        """Delete all rows of a collection and insert the supplied set.

        Args:
            document_id: Owning document
            collection: Collection name
            rows: Replacement rows, stored in the given order
            account_holder_id: Owning holder for holder-level collections
        """
        try:
            owner_clause = (
                ChildRowRecord.account_holder_id == account_holder_id
                if account_holder_id is not None
                else ChildRowRecord.account_holder_id.is_(None)
            )
            await self.session.execute(
                delete(ChildRowRecord).where(
                    ChildRowRecord.document_id == document_id,
                    ChildRowRecord.collection == collection,
                    owner_clause,
                )
            )
            self.session.add_all(
                ChildRowRecord(
                    document_id=document_id,
                    account_holder_id=account_holder_id,
                    collection=collection,
                    position=position,
                    data=row,
                )
                for position, row in enumerate(rows)
            )
            await self.session.flush()
            await self.session.commit()
            LOGGER.debug(
                "Replaced child collection",
                extra={
                    "document_id": str(document_id),
                    "collection": collection,
                    "row_count": len(rows),
                },
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Error replacing collection {collection} for document {document_id}: {str(e)}",
                exc_info=True
            )
            raise
