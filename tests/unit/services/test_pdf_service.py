import json
from datetime import date, datetime, timezone

import httpx
import pytest

from onboarding.core.exceptions import ConfigurationError, NotFoundError, PdfGenerationError
from onboarding.forms import additional_holder, alt_order, investor_profile, statement
from onboarding.services.forms.orchestrator import DocumentOrchestrator
from onboarding.services.pdf_service import PdfWebhookClient, build_pdf_payload, format_pdf_value

WEBHOOK_URL = "https://automation.example.com/webhook/pdf"


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2024, 3, 1), "2024-03-01"),
        (datetime(2024, 3, 1, 15, 30, tzinfo=timezone.utc), "2024-03-01"),
        ("2024-03-01T15:30:00+00:00", "2024-03-01"),
        ("2024-03-01", "2024-03-01"),
        ("2024-03-01T15:30:00Z", "2024-03-01"),
        ("2024-05-01 called client about the transfer", "2024-05-01 called client about the transfer"),
        ("2024-13-45", "2024-13-45"),
        ("Ann Smith", "Ann Smith"),
        (12.5, 12.5),
        (None, None),
        (["2024-03-01", "x"], ["2024-03-01", "x"]),
    ],
)
def test_format_pdf_value(value, expected):
    assert format_pdf_value(value) == expected


@pytest.mark.asyncio
async def test_investor_profile_payload(store, clock, owner):
    profiles = DocumentOrchestrator(investor_profile.DESCRIPTOR, store, clock=clock)
    document, _ = await profiles.create_or_update_step1(owner, {"rr_name": "Rep", "account_types": ["individual"]})
    await profiles.update_step(
        document.id,
        3,
        {
            "name": "Ann Smith",
            "date_of_birth": "1980-05-04",
            "addresses": [{"address_type": "legal", "city": "Austin"}],
        },
    )
    await profiles.update_step(
        document.id, 5, {"investment_values": [{"investment_type": "equities", "value": 1000}]}
    )
    await profiles.update_step(
        document.id,
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
    )

    payload = await profiles.build_pdf_payload(document.id)

    assert payload["form_type"] == "investor_profile"
    assert payload["form_id"] == "Investor-Profile"
    assert payload["document_id"] == str(document.id)
    assert payload["status"] == "draft"
    assert payload["created_at"] == "2024-01-01"

    fields = payload["fields"]
    assert fields["rr_name"] == "Rep"
    assert fields["primary_name"] == "Ann Smith"
    assert fields["primary_date_of_birth"] == "1980-05-04"
    assert fields["primary_legal_city"] == "Austin"
    assert fields["equities_value"] == 1000
    assert fields["account_owner_signature"] == "sig"
    assert fields["account_owner_printed_name"] == "Ann Smith"
    assert fields["account_owner_date"] == "2024-03-01"
    assert "signatures" not in fields
    assert "primary_addresses" not in fields


@pytest.mark.asyncio
async def test_statement_payload_keys_rows_and_conditional_fields(store, clock, owner):
    statements = DocumentOrchestrator(statement.DESCRIPTOR, store, clock=clock)
    document, _ = await statements.create_or_update_step1(
        owner,
        {
            "customer_names": "Ann and Bob Smith",
            "financial_rows": [
                {"category": "liquid_non_qualified", "row_key": "cash", "label": "Cash", "value": 2500},
            ],
        },
    )

    payload = await statements.build_pdf_payload(document.id)

    assert payload["fields"]["cash_value"] == 2500
    assert payload["fields"]["cash_label"] == "Cash"
    assert payload["fields"]["has_joint_owner"] is True
    assert payload["conditional_fields"] == {"has_joint_owner": True}


@pytest.mark.asyncio
async def test_rows_without_key_column_are_numbered(store, clock, owner):
    holder_forms = DocumentOrchestrator(additional_holder.DESCRIPTOR, store, clock=clock)
    document, _ = await holder_forms.create_or_update_step1(owner, {"name": "Ann"})
    await holder_forms.update_step(
        document.id,
        2,
        {"government_ids": [{"id_type": "Passport", "id_number": "X1", "date_of_issue": "2020-01-01"}]},
    )

    loaded = await holder_forms.get_document(document.id)
    fields = build_pdf_payload(loaded, additional_holder.DESCRIPTOR)["fields"]

    assert fields["government_ids_1_id_type"] == "Passport"
    assert fields["government_ids_1_date_of_issue"] == "2020-01-01"


@pytest.mark.asyncio
async def test_webhook_client_posts_payload():
    received = {}

    def handler(request: httpx.Request) -> httpx.Response:
        received["url"] = str(request.url)
        received["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    client = PdfWebhookClient(WEBHOOK_URL, transport=httpx.MockTransport(handler))

    result = await client.send({"form_type": "statement", "fields": {"a": 1}})

    assert result == {"success": True}
    assert received["url"] == WEBHOOK_URL
    assert received["body"] == {"form_type": "statement", "fields": {"a": 1}}


@pytest.mark.asyncio
async def test_webhook_error_status():
    client = PdfWebhookClient(
        WEBHOOK_URL, transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    )

    with pytest.raises(PdfGenerationError, match="PDF generation failed: 500 boom"):
        await client.send({"form_type": "statement"})


@pytest.mark.asyncio
async def test_webhook_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = PdfWebhookClient(WEBHOOK_URL, transport=httpx.MockTransport(handler))

    with pytest.raises(PdfGenerationError, match="timed out"):
        await client.send({"form_type": "statement"})


@pytest.mark.asyncio
async def test_webhook_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = PdfWebhookClient(WEBHOOK_URL, transport=httpx.MockTransport(handler))

    with pytest.raises(PdfGenerationError, match="connection refused"):
        await client.send({"form_type": "statement"})


@pytest.mark.asyncio
async def test_webhook_not_configured():
    with pytest.raises(ConfigurationError, match="No PDF webhook configured for statement"):
        await PdfWebhookClient("").send({"form_type": "statement"})


@pytest.mark.asyncio
async def test_generate_pdf_through_orchestrator(store, clock, owner):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        return httpx.Response(202)

    client = PdfWebhookClient(WEBHOOK_URL, transport=httpx.MockTransport(handler))
    statements = DocumentOrchestrator(statement.DESCRIPTOR, store, clock=clock, pdf_client=client)
    document, _ = await statements.create_or_update_step1(owner, {"rr_name": "Rep"})

    result = await statements.generate_pdf(document.id)

    assert result == {"success": True, "document_id": str(document.id)}
    assert len(calls) == 1
    assert calls[0]["form_id"] == "Statement-of-Financial-Condition"
    assert calls[0]["fields"]["rr_name"] == "Rep"


@pytest.mark.asyncio
async def test_generate_pdf_rejects_document_of_another_type(store, clock, owner):
    calls = []
    client = PdfWebhookClient(
        WEBHOOK_URL, transport=httpx.MockTransport(lambda request: calls.append(request) or httpx.Response(200))
    )
    orders = DocumentOrchestrator(alt_order.DESCRIPTOR, store, clock=clock)
    statements = DocumentOrchestrator(statement.DESCRIPTOR, store, clock=clock, pdf_client=client)
    order, _ = await orders.create_or_update_step1(owner, {"rr_name": "Rep"})

    with pytest.raises(NotFoundError):
        await statements.generate_pdf(order.id)

    assert calls == []
