"""Form document endpoints, shared by every document type.

The document type is a path parameter; all routes delegate to the
``DocumentOrchestrator`` built for that type. Application errors are
turned into problem details by the handlers registered in ``main``.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from onboarding.core.config import settings
from onboarding.core.exceptions import NotFoundError
from onboarding.dependencies import get_orchestrator
from onboarding.models.document import DocumentStatus, OwnerRef
from onboarding.schemas.common import ApiResponse
from onboarding.schemas.documents import (
    CreateDocumentRequest,
    DocumentListResponse,
    DocumentResponse,
    PdfGenerationResponse,
    ProgressResponse,
    ReviewRequest,
    StepCheckResponse,
    StepStateResponse,
    StepUpdateRequest,
    VisibilityRequest,
    VisibilityResponse,
)
from onboarding.services.forms.orchestrator import DocumentOrchestrator
from onboarding.utils.logging import get_logger
from onboarding.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()

Orchestrator = Annotated[DocumentOrchestrator, Depends(get_orchestrator)]


@router.post(
    "/{document_type}",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create the owner's document or update its first step",
    operation_id="create_or_update_form_step1",
)
async def create_or_update_step1(
    request: Request,
    response: Response,
    body: CreateDocumentRequest,
    orchestrator: Orchestrator,
) -> ApiResponse:
    """Save step 1. Answers 201 when a document was created, 200 otherwise."""
    document, created = await orchestrator.create_or_update_step1(body.to_owner(), body.payload)
    if not created:
        response.status_code = status.HTTP_200_OK

    return create_api_response(
        data=DocumentResponse.from_domain(document),
        message="Document created" if created else "Step 1 saved",
        request=request,
    )


@router.get(
    "/{document_type}",
    response_model=ApiResponse,
    summary="List the owner's documents",
    operation_id="list_form_documents",
)
async def list_documents(
    request: Request,
    orchestrator: Orchestrator,
    user_id: Optional[UUID] = Query(None),
    client_id: Optional[UUID] = Query(None),
    status_filter: Optional[DocumentStatus] = Query(None, alias="status"),
    page: int = Query(1),
    limit: int = Query(settings.default_page_size),
) -> ApiResponse:
    """List documents newest first; ``page`` is 1-based."""
    documents, total = await orchestrator.list_documents(
        OwnerRef(user_id=user_id, client_id=client_id),
        status=status_filter,
        page=page,
        limit=limit,
    )
    data = DocumentListResponse(
        items=[DocumentResponse.from_domain(document) for document in documents],
        total=total,
        page=page,
        limit=limit,
    )
    return create_api_response(data=data, message="Documents retrieved", request=request)


@router.get(
    "/{document_type}/current",
    response_model=ApiResponse,
    summary="Get the owner's current document",
    operation_id="get_current_form_document",
)
async def get_current_document(
    request: Request,
    orchestrator: Orchestrator,
    user_id: Optional[UUID] = Query(None),
    client_id: Optional[UUID] = Query(None),
) -> ApiResponse:
    owner = OwnerRef(user_id=user_id, client_id=client_id)
    document = await orchestrator.get_current(owner)
    if document is None:
        raise NotFoundError(orchestrator.descriptor.label, user_id or client_id)

    return create_api_response(
        data=DocumentResponse.from_domain(document), message="Document retrieved", request=request
    )


@router.post(
    "/{document_type}/visibility",
    response_model=ApiResponse,
    summary="Evaluate field and step visibility for a set of values",
    operation_id="evaluate_form_visibility",
)
async def evaluate_visibility(
    request: Request,
    body: VisibilityRequest,
    orchestrator: Orchestrator,
) -> ApiResponse:
    """Same rules the validator applies, for the UI to show and hide fields."""
    descriptor = orchestrator.descriptor
    snapshot = descriptor.snapshot_from_values(body.values)

    field_ids = body.field_ids if body.field_ids is not None else descriptor.rules.field_ids
    data = VisibilityResponse(
        fields={field_id: orchestrator.is_field_visible(field_id, snapshot) for field_id in field_ids},
        steps={
            str(step.number): orchestrator.is_step_visible(step.number, snapshot)
            for step in descriptor.steps
        },
    )
    return create_api_response(data=data, message="Visibility evaluated", request=request)


@router.get(
    "/{document_type}/{document_id}",
    response_model=ApiResponse,
    summary="Get a document with its children",
    operation_id="get_form_document",
)
async def get_document(
    request: Request,
    document_id: UUID,
    orchestrator: Orchestrator,
) -> ApiResponse:
    document = await orchestrator.get_document(document_id)
    return create_api_response(
        data=DocumentResponse.from_domain(document), message="Document retrieved", request=request
    )


@router.put(
    "/{document_type}/{document_id}/steps/{step}",
    response_model=ApiResponse,
    summary="Save one step of a document",
    operation_id="update_form_step",
)
async def update_step(
    request: Request,
    document_id: UUID,
    step: int,
    body: StepUpdateRequest,
    orchestrator: Orchestrator,
) -> ApiResponse:
    """Save a step; a submitted or reviewed document goes back to draft."""
    document = await orchestrator.update_step(document_id, step, body.payload)
    return create_api_response(
        data=DocumentResponse.from_domain(document), message=f"Step {step} saved", request=request
    )


@router.get(
    "/{document_type}/{document_id}/steps/{step}/check",
    response_model=ApiResponse,
    summary="List what is still missing in one step",
    operation_id="check_form_step",
)
async def check_step(
    request: Request,
    document_id: UUID,
    step: int,
    orchestrator: Orchestrator,
) -> ApiResponse:
    violations = await orchestrator.check_step(document_id, step)
    data = StepCheckResponse(step=step, complete=not violations, violations=violations)
    return create_api_response(data=data, message="Step checked", request=request)


@router.post(
    "/{document_type}/{document_id}/submit",
    response_model=ApiResponse,
    summary="Submit a draft document",
    operation_id="submit_form_document",
)
async def submit_document(
    request: Request,
    document_id: UUID,
    orchestrator: Orchestrator,
) -> ApiResponse:
    """Submit after the full completeness check; every violation is returned on failure."""
    document = await orchestrator.submit(document_id)
    return create_api_response(
        data=DocumentResponse.from_domain(document), message="Document submitted", request=request
    )


@router.post(
    "/{document_type}/{document_id}/review",
    response_model=ApiResponse,
    summary="Approve or reject a submitted document",
    operation_id="review_form_document",
)
async def review_document(
    request: Request,
    document_id: UUID,
    body: ReviewRequest,
    orchestrator: Orchestrator,
) -> ApiResponse:
    document = await orchestrator.review(document_id, body.approve)
    return create_api_response(
        data=DocumentResponse.from_domain(document),
        message=f"Document {document.status.value}",
        request=request,
    )


@router.get(
    "/{document_type}/{document_id}/progress",
    response_model=ApiResponse,
    summary="Get wizard progress of a document",
    operation_id="get_form_progress",
)
async def get_progress(
    request: Request,
    document_id: UUID,
    orchestrator: Orchestrator,
) -> ApiResponse:
    progress = await orchestrator.get_progress(document_id)
    data = ProgressResponse(
        status=progress.status,
        last_completed_step=progress.last_completed_step,
        step_completion={
            str(step): StepStateResponse(completed=state.completed, updated_at=state.updated_at)
            for step, state in sorted(progress.step_completion.items())
        },
        resume_step=progress.resume_step,
        total_steps=progress.total_steps,
    )
    return create_api_response(data=data, message="Progress retrieved", request=request)


@router.delete(
    "/{document_type}/{document_id}",
    response_model=ApiResponse,
    summary="Delete a draft document",
    operation_id="delete_form_document",
)
async def delete_document(
    request: Request,
    document_id: UUID,
    orchestrator: Orchestrator,
) -> ApiResponse:
    await orchestrator.delete(document_id)
    return create_api_response(
        data={"document_id": str(document_id)}, message="Document deleted", request=request
    )


@router.get(
    "/{document_type}/{document_id}/pdf-payload",
    response_model=ApiResponse,
    summary="Preview the PDF field map of a document",
    operation_id="get_form_pdf_payload",
)
async def get_pdf_payload(
    request: Request,
    document_id: UUID,
    orchestrator: Orchestrator,
) -> ApiResponse:
    payload = await orchestrator.build_pdf_payload(document_id)
    return create_api_response(data=payload, message="PDF payload built", request=request)


@router.post(
    "/{document_type}/{document_id}/generate-pdf",
    response_model=ApiResponse,
    summary="Send a document to the PDF generation webhook",
    operation_id="generate_form_pdf",
)
async def generate_pdf(
    request: Request,
    document_id: UUID,
    orchestrator: Orchestrator,
) -> ApiResponse:
    result = await orchestrator.generate_pdf(document_id)
    LOGGER.info("PDF generation requested", extra={"document_id": str(document_id)})
    data = PdfGenerationResponse(
        success=result["success"],
        document_id=document_id,
        message="PDF generation started",
    )
    return create_api_response(data=data, message="PDF generation requested", request=request)
