"""Dependency injection for the form endpoints.

The document store is chosen by ``STORAGE_BACKEND``: ``sql`` opens one
session per request, ``memory`` shares a single process-wide store.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from onboarding.core.config import settings
from onboarding.core.database import get_async_session
from onboarding.forms.registry import get_descriptor
from onboarding.models.document import DocumentType
from onboarding.repositories.document_store import DocumentStore
from onboarding.repositories.memory_document_store import InMemoryDocumentStore
from onboarding.repositories.sql_document_store import SqlDocumentStore
from onboarding.services.forms.orchestrator import DocumentOrchestrator


@lru_cache(maxsize=1)
def get_memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


def get_document_store(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> DocumentStore:
    """Get the document store for one request.

    Args:
        session: Request-scoped session, unused by the memory backend

    Returns:
        DocumentStore: SQL store bound to the session, or the shared memory store
    """
    if settings.storage_backend == "memory":
        return get_memory_store()
    return SqlDocumentStore(session)


async def get_orchestrator(
    document_type: DocumentType,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> DocumentOrchestrator:
    """Get the orchestrator for the document type named in the path.

    Args:
        document_type: Path parameter selecting the descriptor
        store: Document store from dependency injection

    Returns:
        DocumentOrchestrator: Lifecycle service for that document type
    """
    return DocumentOrchestrator(get_descriptor(document_type), store)
