"""Payload of the single-step alternative investment order."""

from datetime import date
from typing import Literal

from pydantic import Field

from onboarding.schemas.forms.common import StepPayload, YesNo

Custodian = Literal["First Clearing", "Direct", "MainStar", "CNB", "Kingdom Trust", "Other"]


class FormSignatures(StepPayload):
    """Signature blocks shared by the alt order and accreditation forms."""

    account_owner_signature: str | None = None
    account_owner_printed_name: str | None = Field(default=None, max_length=120)
    account_owner_date: date | None = None
    joint_account_owner_signature: str | None = None
    joint_account_owner_printed_name: str | None = Field(default=None, max_length=120)
    joint_account_owner_date: date | None = None
    financial_professional_signature: str | None = None
    financial_professional_printed_name: str | None = Field(default=None, max_length=120)
    financial_professional_date: date | None = None
    registered_principal_signature: str | None = None
    registered_principal_printed_name: str | None = Field(default=None, max_length=120)
    registered_principal_date: date | None = None


class AltOrderStep(FormSignatures):
    # Customer / account information
    rr_name: str | None = Field(default=None, max_length=200)
    rr_no: str | None = Field(default=None, max_length=50)
    customer_names: str | None = Field(default=None, max_length=300)
    has_joint_owner: bool | None = None
    proposed_principal_amount: float | None = None
    qualified_account: YesNo | None = None
    qualified_account_certification_text: str | None = Field(default=None, max_length=500)
    solicited_trade: YesNo | None = None
    tax_advantage_purchase: YesNo | None = None

    # Customer order information
    custodian: Custodian | None = None
    name_of_product: str | None = Field(default=None, max_length=200)
    sponsor_issuer: str | None = Field(default=None, max_length=200)
    date_of_ppm: date | None = None
    date_ppm_sent: date | None = None
    existing_illiquid_alt_positions: float | None = None
    existing_illiquid_alt_concentration: float | None = Field(default=None, ge=0, le=100)
    existing_semi_liquid_alt_positions: float | None = None
    existing_semi_liquid_alt_concentration: float | None = Field(default=None, ge=0, le=100)
    existing_tax_advantage_alt_positions: float | None = None
    existing_tax_advantage_alt_concentration: float | None = Field(default=None, ge=0, le=100)
    total_net_worth: float | None = None
    liquid_net_worth: float | None = None
    total_concentration: float | None = Field(default=None, ge=0, le=100)

    # Internal use only
    notes: str | None = Field(default=None, max_length=2000)
    reg_bi_delivery: bool | None = None
    state_registration: bool | None = None
    ai_insight: bool | None = None
    statement_of_financial_condition: bool | None = None
    suitability_received: bool | None = None
