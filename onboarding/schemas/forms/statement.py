"""Step payloads of the statement of financial condition."""

from typing import Literal

from pydantic import Field

from onboarding.schemas.forms.common import SignatureRow, StepPayload

StatementRowCategory = Literal[
    "liquid_non_qualified",
    "liabilities",
    "net_worth",
    "illiquid_non_qualified",
    "liquid_qualified",
    "income_summary",
    "illiquid_qualified",
]
StatementSignatureType = Literal[
    "account_owner", "joint_account_owner", "financial_professional", "registered_principal"
]


class FinancialRow(StepPayload):
    category: StatementRowCategory
    row_key: str = Field(min_length=1)
    label: str | None = None
    value: float = Field(ge=0)
    is_total: bool | None = None


class FinancialRowsStep(StepPayload):
    """Step 1: header and every financial amount."""

    rr_name: str | None = Field(default=None, max_length=200)
    rr_no: str | None = Field(default=None, max_length=50)
    customer_names: str | None = Field(default=None, max_length=300)
    has_joint_owner: bool | None = None
    notes_page1: str | None = Field(default=None, max_length=2000)
    financial_rows: list[FinancialRow] | None = None


class StatementSignatureRow(SignatureRow):
    signature_type: StatementSignatureType


class StatementSignaturesStep(StepPayload):
    """Step 2: notes and signatures."""

    additional_notes: str | None = Field(default=None, max_length=4000)
    signatures: list[StatementSignatureRow] | None = None
