"""Step payloads of the two-step additional holder form."""

from datetime import date

from pydantic import EmailStr, Field

from onboarding.schemas.forms.common import (
    AddressRow,
    EmploymentStatus,
    Gender,
    GovernmentIdRow,
    InvestmentKnowledgeRow,
    KnowledgeLevel,
    MaritalStatus,
    PersonEntity,
    StepPayload,
    TaxBracket,
    YesNo,
)


class HolderInformationStep(StepPayload):
    """Step 1: identity, employment and addresses of the holder."""

    account_registration: str | None = Field(default=None, max_length=200)
    rr_name: str | None = Field(default=None, max_length=200)
    rr_no: str | None = Field(default=None, max_length=50)
    name: str | None = Field(default=None, max_length=120)
    person_entity: PersonEntity | None = None
    ssn: str | None = Field(default=None, max_length=20)
    ein: str | None = Field(default=None, max_length=20)
    holder_participant_role: str | None = Field(default=None, max_length=100)
    email: EmailStr | None = None
    date_of_birth: date | None = None
    position_held: str | None = Field(default=None, max_length=100)
    primary_citizenship: str | None = Field(default=None, max_length=100)
    additional_citizenship: str | None = Field(default=None, max_length=100)
    gender: Gender | None = None
    marital_status: list[MaritalStatus] | None = Field(default=None, max_length=1)
    employment_status: list[EmploymentStatus] | None = Field(default=None, max_length=1)
    occupation: str | None = Field(default=None, max_length=100)
    years_employed: int | None = Field(default=None, ge=0, le=100)
    type_of_business: str | None = Field(default=None, max_length=100)
    employer_name: str | None = Field(default=None, max_length=200)
    overall_investment_knowledge: KnowledgeLevel | None = None

    addresses: list[AddressRow] | None = None
    investment_knowledge: list[InvestmentKnowledgeRow] | None = None


class DisclosuresStep(StepPayload):
    """Step 2: financial profile, disclosures and signature."""

    annual_income_from: float | None = None
    annual_income_to: float | None = None
    net_worth_from: float | None = None
    net_worth_to: float | None = None
    liquid_net_worth_from: float | None = None
    liquid_net_worth_to: float | None = None
    tax_bracket: TaxBracket | None = None

    employee_of_this_broker_dealer: YesNo | None = None
    related_to_employee_at_this_broker_dealer: YesNo | None = None
    employee_name: str | None = Field(default=None, max_length=120)
    relationship: str | None = Field(default=None, max_length=100)
    employee_of_another_broker_dealer: YesNo | None = None
    broker_dealer_name: str | None = Field(default=None, max_length=120)
    related_to_employee_at_another_broker_dealer: YesNo | None = None
    broker_dealer_name2: str | None = Field(default=None, max_length=120)
    employee_name2: str | None = Field(default=None, max_length=120)
    relationship2: str | None = Field(default=None, max_length=100)
    maintaining_other_brokerage_accounts: YesNo | None = None
    with_what_firms: str | None = Field(default=None, max_length=200)
    years_of_investment_experience: int | None = Field(default=None, ge=0, le=100)
    affiliated_with_exchange_or_finra: YesNo | None = None
    what_is_the_affiliation: str | None = Field(default=None, max_length=200)
    senior_officer_director_shareholder: YesNo | None = None
    company_names: str | None = Field(default=None, max_length=500)

    signature: str | None = None
    printed_name: str | None = Field(default=None, max_length=120)
    signature_date: date | None = None

    government_ids: list[GovernmentIdRow] | None = Field(default=None, max_length=2)
