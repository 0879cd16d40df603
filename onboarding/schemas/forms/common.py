"""Shared building blocks of the step payload schemas.

Every field is optional: drafts must save at any stage of completion.
Requirements that depend on other answers are enforced on submit.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

YesNo = Literal["Yes", "No"]
PersonEntity = Literal["Person", "Entity"]
Gender = Literal["Male", "Female"]
MaritalStatus = Literal["Single", "Married", "Divorced", "Domestic Partner", "Widow", "Widowed"]
EmploymentStatus = Literal["Employed", "SelfEmployed", "Retired", "Unemployed", "Student", "Homemaker"]
KnowledgeLevel = Literal["Limited", "Moderate", "Extensive", "None"]
AddressType = Literal["legal", "mailing", "employer"]
PhoneType = Literal["home", "business", "mobile"]
InvestmentType = Literal[
    "commodities_futures",
    "equities",
    "etf",
    "fixed_annuities",
    "fixed_income",
    "fixed_insurance",
    "mutual_funds",
    "options",
    "precious_metals",
    "real_estate",
    "unit_investment_trusts",
    "variable_annuities",
    "leveraged_inverse_etfs",
    "complex_products",
    "alternative_investments",
    "other",
]
TaxBracket = Literal["0 - 15%", "15.1% - 32%", "32.1% - 50%", "50.1% +"]


class StepPayload(BaseModel):
    """Base of every step payload; strings are trimmed, unknown keys dropped."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class AddressRow(StepPayload):
    address_type: AddressType
    address: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=100)
    state_province: str | None = Field(default=None, max_length=100)
    zip_postal_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)
    mailing_same_as_legal: bool | None = None


class PhoneRow(StepPayload):
    phone_type: PhoneType
    phone_number: str | None = Field(default=None, max_length=40)


class InvestmentKnowledgeRow(StepPayload):
    investment_type: InvestmentType
    knowledge_level: KnowledgeLevel | None = None
    since_year: int | None = Field(default=None, ge=1900, le=2100)
    other_investment_label: str | None = Field(default=None, max_length=120)


class GovernmentIdRow(StepPayload):
    """Government identification; either left blank or filled in completely."""

    id_type: str | None = Field(default=None, max_length=50)
    id_number: str | None = Field(default=None, max_length=100)
    country_of_issue: str | None = Field(default=None, max_length=100)
    date_of_issue: date | None = None
    date_of_expiration: date | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "GovernmentIdRow":
        if self.date_of_issue and self.date_of_expiration:
            if self.date_of_expiration <= self.date_of_issue:
                raise ValueError("Expiration date must be after issue date")
        return self


class SignatureRow(StepPayload):
    """One typed signature; the signature type set depends on the form."""

    signature_type: str
    signature_data: str | None = None
    printed_name: str | None = Field(default=None, max_length=120)
    signature_date: date | None = None
