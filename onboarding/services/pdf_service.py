"""PDF field projection and the outbound generation webhook."""

import re
from datetime import date, datetime
from typing import Any, Dict, Optional

import httpx
from httpx import HTTPStatusError, RequestError, TimeoutException

from onboarding.core.config import settings
from onboarding.core.exceptions import ConfigurationError, PdfGenerationError
from onboarding.models.document import FormDocument
from onboarding.services.base_service import BaseService
from onboarding.services.forms.descriptor import DocumentTypeDescriptor
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _parse_iso_timestamp(value: str) -> Optional[datetime]:
    if not _ISO_DATE.match(value):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_pdf_value(value: Any) -> Any:
    """Dates and timestamps become ``YYYY-MM-DD``; everything else passes through.

    Strings are only reformatted when the whole value is an ISO date or
    timestamp, so free text that merely starts with a date is kept.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()[:10]
    if isinstance(value, str):
        parsed = _parse_iso_timestamp(value)
        return parsed.date().isoformat() if parsed is not None else value
    if isinstance(value, list):
        return [format_pdf_value(item) for item in value]
    return value


def _is_row_collection(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(row, dict) for row in value)


def build_pdf_payload(document: FormDocument, descriptor: DocumentTypeDescriptor) -> Dict[str, Any]:
    """Flatten a document into the string-keyed map the PDF templates fill from.

    Child rows are keyed by their type column where the descriptor names
    one (``primary_legal_city``), otherwise by 1-based position
    (``investment_values_1_value``).
    """
    snapshot = descriptor.snapshot(document)
    fields: Dict[str, Any] = {}

    for key, value in snapshot.items():
        if key == descriptor.signature_collection:
            # Already flattened into {signature_type}_* keys by the snapshot
            continue
        if not _is_row_collection(value):
            fields[key] = format_pdf_value(value)
            continue

        prefix, collection = "", key
        for holder_key in document.account_holders:
            if key.startswith(f"{holder_key}_"):
                prefix, collection = f"{holder_key}_", key[len(holder_key) + 1:]
                break

        row_key = descriptor.pdf_row_keys.get(collection)
        for index, row in enumerate(value, start=1):
            tag = row.get(row_key) if row_key else None
            base = f"{prefix}{tag}" if tag else f"{key}_{index}"
            for name, cell in row.items():
                if name == row_key:
                    continue
                fields[f"{base}_{name}"] = format_pdf_value(cell)

    return {
        "form_type": descriptor.document_type.value,
        "form_id": descriptor.form_id,
        "document_id": str(document.id),
        "status": document.status.value,
        "created_at": format_pdf_value(document.created_at),
        "updated_at": format_pdf_value(document.updated_at),
        "submitted_at": format_pdf_value(document.submitted_at),
        "fields": fields,
        "conditional_fields": {
            name: bool(snapshot.get(name)) for name in descriptor.conditional_fields
        },
    }


class PdfWebhookClient:
    """Posts a PDF payload to the document type's automation webhook.

    One attempt per call; any failure surfaces as PdfGenerationError.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize webhook client.

        Args:
            url: Webhook endpoint; empty when not configured
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the webhook
        """
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST the payload as JSON.

        Raises:
            ConfigurationError: If no webhook URL is configured
            PdfGenerationError: If the webhook fails or answers with an error status
        """
        if not self.url:
            raise ConfigurationError(
                f"No PDF webhook configured for {payload.get('form_type', 'document')}"
            )

        log_extra = {"form_type": payload.get("form_type"), "document_id": payload.get("document_id")}
        LOGGER.info("Sending PDF generation request", extra=log_extra)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()

        except HTTPStatusError as e:
            LOGGER.error(
                f"PDF webhook returned {e.response.status_code}: {e.response.text}",
                extra={**log_extra, "status_code": e.response.status_code},
            )
            raise PdfGenerationError(
                f"PDF generation failed: {e.response.status_code} {e.response.text}",
                original_error=e,
            ) from e

        except TimeoutException as e:
            LOGGER.error("PDF webhook timed out", exc_info=True, extra=log_extra)
            raise PdfGenerationError("PDF generation timed out", original_error=e) from e

        except RequestError as e:
            LOGGER.error(f"PDF webhook request failed: {str(e)}", exc_info=True, extra=log_extra)
            raise PdfGenerationError(f"PDF generation request failed: {str(e)}", original_error=e) from e

        LOGGER.info("PDF generation request accepted", extra=log_extra)
        return {"success": True}


class PdfGenerationService(BaseService):
    """Projects a loaded document and hands it to the webhook."""

    def __init__(
        self,
        descriptor: DocumentTypeDescriptor,
        client: Optional[PdfWebhookClient] = None,
    ):
        super().__init__()
        self.descriptor = descriptor
        self.client = client or PdfWebhookClient(
            settings.pdf.url_for(descriptor.document_type.value),
            timeout=settings.pdf_webhook_timeout,
        )

    async def run(self, document: FormDocument) -> Dict[str, Any]:
        payload = build_pdf_payload(document, self.descriptor)
        result = await self.client.send(payload)
        return {**result, "document_id": str(document.id)}
