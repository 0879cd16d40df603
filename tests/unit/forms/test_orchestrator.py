"""End-to-end lifecycle of documents through the orchestrator and the in-memory store."""

from uuid import uuid4

import pytest

from onboarding.core.exceptions import ConflictError, NotFoundError, ValidationError
from onboarding.forms import accreditation, additional_holder, investor_profile, statement
from onboarding.models.document import DocumentStatus, HolderType, OwnerRef
from onboarding.services.forms.orchestrator import DocumentOrchestrator

HOLDER_STEP_1 = {"rr_name": "Rep", "name": "Ann Smith", "person_entity": "Person"}
HOLDER_SIGNATURE = {"signature": "sig", "printed_name": "Ann Smith", "signature_date": "2024-03-01"}


@pytest.fixture
def holder_forms(store, clock) -> DocumentOrchestrator:
    return DocumentOrchestrator(additional_holder.DESCRIPTOR, store, clock=clock)


@pytest.fixture
def profiles(store, clock) -> DocumentOrchestrator:
    return DocumentOrchestrator(investor_profile.DESCRIPTOR, store, clock=clock)


@pytest.fixture
def statements(store, clock) -> DocumentOrchestrator:
    return DocumentOrchestrator(statement.DESCRIPTOR, store, clock=clock)


@pytest.mark.asyncio
async def test_step1_twice_yields_one_document(holder_forms, owner):
    first, created_first = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)
    second, created_second = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)

    assert created_first is True
    assert created_second is False
    assert second.id == first.id

    documents, total = await holder_forms.list_documents(owner)
    assert total == 1
    assert [document.id for document in documents] == [first.id]


@pytest.mark.asyncio
async def test_step1_marks_completion(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)

    assert document.fields["name"] == "Ann Smith"
    assert document.step_completion[1].completed is True
    assert document.last_completed_step == 1


@pytest.mark.asyncio
async def test_step1_shape_failure_creates_nothing(holder_forms, owner):
    with pytest.raises(ValidationError):
        await holder_forms.create_or_update_step1(owner, {"person_entity": "Robot"})

    assert await holder_forms.get_current(owner) is None


@pytest.mark.asyncio
async def test_step1_rejects_ambiguous_owner(holder_forms):
    with pytest.raises(ValidationError, match="not both"):
        await holder_forms.create_or_update_step1(OwnerRef(user_id=uuid4(), client_id=uuid4()), HOLDER_STEP_1)


@pytest.mark.asyncio
async def test_update_step_writes_only_supplied_fields(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)

    updated = await holder_forms.update_step(document.id, 1, {"ssn": "123-45-6789"})

    assert updated.fields["name"] == "Ann Smith"
    assert updated.fields["ssn"] == "123-45-6789"


@pytest.mark.asyncio
async def test_update_step_is_idempotent(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)
    payload = {**HOLDER_SIGNATURE, "government_ids": [{"id_type": "Passport", "id_number": "X1"}]}

    once = await holder_forms.update_step(document.id, 2, payload)
    twice = await holder_forms.update_step(document.id, 2, payload)

    assert twice.fields == once.fields
    assert twice.children == once.children
    assert twice.last_completed_step == once.last_completed_step == 2


@pytest.mark.asyncio
async def test_shape_failure_leaves_document_untouched(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)
    before = await holder_forms.get_document(document.id)

    with pytest.raises(ValidationError) as exc_info:
        await holder_forms.update_step(
            document.id,
            2,
            {
                "employee_name": "Bob",
                "government_ids": [
                    {"id_type": "Passport", "date_of_issue": "2024-01-01", "date_of_expiration": "2023-01-01"}
                ],
            },
        )

    assert exc_info.value.message == "Step 2 validation failed"
    assert await holder_forms.get_document(document.id) == before


@pytest.mark.asyncio
async def test_update_unknown_document(holder_forms):
    with pytest.raises(NotFoundError):
        await holder_forms.update_step(uuid4(), 1, {})


@pytest.mark.asyncio
async def test_update_invalid_step_number(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)

    with pytest.raises(ValidationError, match="Invalid step number 3"):
        await holder_forms.update_step(document.id, 3, {})


@pytest.mark.asyncio
async def test_ssn_required_for_person_on_submit(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)
    await holder_forms.update_step(document.id, 2, HOLDER_SIGNATURE)

    with pytest.raises(ValidationError) as exc_info:
        await holder_forms.submit(document.id)

    assert "Step 1: SSN is required when Person is selected" in exc_info.value.errors
    stored = await holder_forms.get_document(document.id)
    assert stored.status == DocumentStatus.DRAFT
    assert stored.submitted_at is None

    await holder_forms.update_step(document.id, 1, {"ssn": "123-45-6789"})
    submitted = await holder_forms.submit(document.id)

    assert submitted.status == DocumentStatus.SUBMITTED
    assert submitted.submitted_at is not None
    assert submitted.submitted_at >= stored.updated_at


@pytest.mark.asyncio
async def test_submit_lists_every_violation(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(
        owner, {"person_entity": "Entity", "employment_status": ["Employed"]}
    )
    await holder_forms.update_step(
        document.id,
        2,
        {"affiliated_with_exchange_or_finra": "Yes", "government_ids": [{"id_type": "Passport"}]},
    )

    with pytest.raises(ValidationError) as exc_info:
        await holder_forms.submit(document.id)

    assert exc_info.value.errors == [
        "Step 1: Name is required",
        "Step 1: EIN is required when Entity is selected",
        "Step 1: Occupation is required when employed",
        "Step 1: Employer Name is required when employed",
        "Step 2: Affiliation details are required",
        "Step 2: All government ID fields must be completed together",
        "Step 2: Account Holder signature is required",
    ]


@pytest.mark.asyncio
async def test_submit_requires_draft(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, {**HOLDER_STEP_1, "ssn": "1"})
    await holder_forms.update_step(document.id, 2, HOLDER_SIGNATURE)
    await holder_forms.submit(document.id)

    with pytest.raises(ConflictError, match="not in draft status"):
        await holder_forms.submit(document.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("approve", [True, False])
async def test_edit_reverts_reviewed_document_to_draft(holder_forms, owner, approve):
    document, _ = await holder_forms.create_or_update_step1(owner, {**HOLDER_STEP_1, "ssn": "1"})
    await holder_forms.update_step(document.id, 2, HOLDER_SIGNATURE)
    await holder_forms.submit(document.id)
    reviewed = await holder_forms.review(document.id, approve=approve)
    assert reviewed.status == (DocumentStatus.APPROVED if approve else DocumentStatus.REJECTED)

    edited = await holder_forms.update_step(document.id, 2, {})

    assert edited.status == DocumentStatus.DRAFT


@pytest.mark.asyncio
async def test_step1_on_submitted_document_reopens_it(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, {**HOLDER_STEP_1, "ssn": "1"})
    await holder_forms.update_step(document.id, 2, HOLDER_SIGNATURE)
    await holder_forms.submit(document.id)

    reopened, created = await holder_forms.create_or_update_step1(owner, {"rr_name": "Other Rep"})

    assert created is False
    assert reopened.id == document.id
    assert reopened.status == DocumentStatus.DRAFT
    assert reopened.fields["rr_name"] == "Other Rep"


@pytest.mark.asyncio
async def test_review_requires_submitted(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, HOLDER_STEP_1)

    with pytest.raises(ConflictError):
        await holder_forms.review(document.id, approve=True)


@pytest.mark.asyncio
async def test_progress_and_resume_step(profiles, owner):
    document, _ = await profiles.create_or_update_step1(owner, {"rr_name": "Rep"})
    await profiles.update_step(document.id, 2, {"initial_source_of_funds": ["Savings"]})
    await profiles.update_step(document.id, 1, {"customer_names": "Ann Smith"})

    progress = await profiles.get_progress(document.id)

    assert progress.status == DocumentStatus.DRAFT
    assert progress.last_completed_step == 2
    assert sorted(progress.step_completion) == [1, 2]
    assert progress.resume_step == 3
    assert progress.total_steps == 7


@pytest.mark.asyncio
async def test_delete_draft_only(holder_forms, owner):
    document, _ = await holder_forms.create_or_update_step1(owner, {**HOLDER_STEP_1, "ssn": "1"})
    await holder_forms.update_step(document.id, 2, HOLDER_SIGNATURE)
    await holder_forms.submit(document.id)

    with pytest.raises(ConflictError, match="Cannot delete a submitted"):
        await holder_forms.delete(document.id)

    await holder_forms.update_step(document.id, 2, {})
    await holder_forms.delete(document.id)

    with pytest.raises(NotFoundError):
        await holder_forms.get_document(document.id)
    assert await holder_forms.get_current(owner) is None


@pytest.mark.asyncio
async def test_list_documents_pagination_and_filter(statements, store, owner):
    for _ in range(3):
        await store.create_document(statements.descriptor.document_type, owner, {})

    page_one, total = await statements.list_documents(owner, page=1, limit=2)
    page_two, _ = await statements.list_documents(owner, page=2, limit=2)
    submitted, submitted_total = await statements.list_documents(owner, status=DocumentStatus.SUBMITTED)

    assert total == 3
    assert len(page_one) == 2
    assert len(page_two) == 1
    assert page_one[0].created_at > page_one[1].created_at > page_two[0].created_at
    assert submitted == []
    assert submitted_total == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("page, limit", [(0, 20), (1, 0), (1, 101)])
async def test_list_documents_rejects_bad_paging(statements, owner, page, limit):
    with pytest.raises(ValidationError):
        await statements.list_documents(owner, page=page, limit=limit)


INDIVIDUAL_PROFILE_STEPS = [
    (2, {"initial_source_of_funds": ["Savings"]}),
    (
        3,
        {
            "name": "Ann Smith",
            "person_entity": "Person",
            "ssn": "123-45-6789",
            "date_of_birth": "1980-05-04",
            "employment_affiliations": ["Retired"],
            "addresses": [{"address_type": "legal", "city": "Austin"}],
        },
    ),
    (5, {"investment_values": [{"investment_type": "equities", "value": 1000}]}),
    (6, {"decline_to_provide": True}),
    (
        7,
        {
            "signatures": [
                {
                    "signature_type": "account_owner",
                    "signature_data": "sig",
                    "printed_name": "Ann Smith",
                    "signature_date": "2024-03-01",
                }
            ]
        },
    ),
]


async def fill_profile(profiles, owner, account_types):
    document, _ = await profiles.create_or_update_step1(
        owner, {"rr_name": "Rep", "customer_names": "Ann Smith", "account_types": account_types}
    )
    for step, payload in INDIVIDUAL_PROFILE_STEPS:
        await profiles.update_step(document.id, step, payload)
    return document


@pytest.mark.asyncio
async def test_individual_profile_submits_without_secondary_holder(profiles, owner):
    document = await fill_profile(profiles, owner, ["individual"])

    submitted = await profiles.submit(document.id)

    assert submitted.status == DocumentStatus.SUBMITTED
    primary = submitted.holder(HolderType.PRIMARY)
    assert primary.fields["name"] == "Ann Smith"
    assert primary.children["addresses"] == [{"address_type": "legal", "city": "Austin"}]
    assert submitted.holder(HolderType.SECONDARY) is None
    assert submitted.fields["trusted_contact_decline_to_provide"] is True


@pytest.mark.asyncio
async def test_joint_profile_requires_secondary_holder(profiles, owner):
    document = await fill_profile(profiles, owner, ["joint_tenant"])

    with pytest.raises(ValidationError) as exc_info:
        await profiles.submit(document.id)

    assert exc_info.value.errors == ["Step 4: Secondary Account Holder information is required"]

    await profiles.update_step(document.id, 4, {"name": "Bob Smith", "person_entity": "Entity", "ein": "12-3"})
    submitted = await profiles.submit(document.id)

    assert submitted.status == DocumentStatus.SUBMITTED
    assert submitted.holder(HolderType.SECONDARY).fields["ein"] == "12-3"


@pytest.mark.asyncio
async def test_holder_collections_are_replaced(profiles, owner):
    document, _ = await profiles.create_or_update_step1(owner, {"rr_name": "Rep"})
    await profiles.update_step(
        document.id,
        3,
        {"phones": [{"phone_type": "home", "phone_number": "1"}, {"phone_type": "mobile", "phone_number": "2"}]},
    )

    updated = await profiles.update_step(
        document.id, 3, {"phones": [{"phone_type": "business", "phone_number": "3"}]}
    )

    assert updated.holder(HolderType.PRIMARY).children["phones"] == [
        {"phone_type": "business", "phone_number": "3"}
    ]


@pytest.mark.asyncio
async def test_trusted_contact_required_unless_declined(profiles, owner):
    document = await fill_profile(profiles, owner, ["individual"])
    await profiles.update_step(document.id, 6, {"decline_to_provide": False})

    assert await profiles.check_step(document.id, 6) == [
        "Step 6: Trusted Contact name and email are required if not declined"
    ]


@pytest.mark.asyncio
async def test_statement_requires_a_financial_amount(statements, owner):
    document, _ = await statements.create_or_update_step1(
        owner,
        {
            "rr_name": "Rep",
            "customer_names": "Ann Smith",
            "financial_rows": [{"category": "liquid_non_qualified", "row_key": "cash", "value": 0}],
        },
    )

    assert await statements.check_step(document.id, 1) == [
        "Step 1: At least one financial amount is required"
    ]
    assert await statements.check_step(document.id, 2) == [
        "Step 2: Account Owner signature is required"
    ]


@pytest.mark.asyncio
async def test_documents_are_only_reachable_through_their_own_type(profiles, store, clock, owner):
    profile, _ = await profiles.create_or_update_step1(owner, {"rr_name": "Rep", "account_types": ["individual"]})
    accreditations = DocumentOrchestrator(accreditation.DESCRIPTOR, store, clock=clock)
    signed = {
        "account_owner_signature": "sig",
        "account_owner_printed_name": "Ann Smith",
        "account_owner_date": "2024-03-01",
    }

    with pytest.raises(NotFoundError, match=f"Accreditation Profile with ID {profile.id} not found"):
        await accreditations.update_step(profile.id, 1, signed)
    with pytest.raises(NotFoundError):
        await accreditations.submit(profile.id)
    with pytest.raises(NotFoundError):
        await accreditations.review(profile.id, approve=True)
    with pytest.raises(NotFoundError):
        await accreditations.delete(profile.id)
    with pytest.raises(NotFoundError):
        await accreditations.get_progress(profile.id)
    with pytest.raises(NotFoundError):
        await accreditations.build_pdf_payload(profile.id)

    unchanged = await profiles.get_document(profile.id)
    assert unchanged.status == DocumentStatus.DRAFT
    assert "account_owner_signature" not in unchanged.fields
    with pytest.raises(ValidationError):
        await profiles.submit(profile.id)
