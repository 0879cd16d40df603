from uuid import uuid4

import pytest

from onboarding.core.exceptions import ValidationError
from onboarding.models.document import DocumentStatus, DocumentType, OwnerRef
from onboarding.services.forms.lifecycle import LifecycleStateMachine
from onboarding.services.forms.resolver import SingletonDocumentResolver


@pytest.fixture
def resolver(store) -> SingletonDocumentResolver:
    return SingletonDocumentResolver(store, DocumentType.STATEMENT, LifecycleStateMachine(label="Statement"))


@pytest.mark.asyncio
async def test_creates_first_document(resolver, owner):
    document, created = await resolver.resolve_for_write(owner, {"rr_name": "Rep"})

    assert created is True
    assert document.status == DocumentStatus.DRAFT
    assert document.fields == {"rr_name": "Rep"}
    assert document.owner == owner


@pytest.mark.asyncio
async def test_returns_existing_document(resolver, owner):
    first, _ = await resolver.resolve_for_write(owner)
    second, created = await resolver.resolve_for_write(owner)

    assert created is False
    assert second.id == first.id


@pytest.mark.asyncio
async def test_reverts_existing_document_to_draft(resolver, store, owner):
    document, _ = await resolver.resolve_for_write(owner)
    document.status = DocumentStatus.APPROVED
    await store.update_document_state(document)

    reopened, created = await resolver.resolve_for_write(owner)

    assert created is False
    assert reopened.status == DocumentStatus.DRAFT
    stored = await store.load_document_with_children(document.id)
    assert stored.status == DocumentStatus.DRAFT


@pytest.mark.asyncio
async def test_newest_duplicate_wins(resolver, store, owner):
    await store.create_document(DocumentType.STATEMENT, owner, {"rr_name": "old"})
    newest = await store.create_document(DocumentType.STATEMENT, owner, {"rr_name": "new"})

    document, created = await resolver.resolve_for_write(owner)

    assert created is False
    assert document.id == newest.id


@pytest.mark.asyncio
async def test_owners_and_types_are_separate(resolver, store, owner):
    await store.create_document(DocumentType.ALT_ORDER, owner, {})
    other_owner = OwnerRef(user_id=uuid4())
    await resolver.resolve_for_write(other_owner)

    assert await resolver.find_current(owner) is None


@pytest.mark.asyncio
async def test_client_owner(resolver, client_owner):
    document, created = await resolver.resolve_for_write(client_owner)

    assert created is True
    assert (await resolver.find_current(client_owner)).id == document.id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "owner_ref, message",
    [
        (OwnerRef(), "Either user_id or client_id is required"),
        (OwnerRef(user_id=uuid4(), client_id=uuid4()), "Provide either user_id or client_id, not both"),
    ],
)
async def test_invalid_owner(resolver, store, owner_ref, message):
    with pytest.raises(ValidationError, match=message):
        await resolver.resolve_for_write(owner_ref)
