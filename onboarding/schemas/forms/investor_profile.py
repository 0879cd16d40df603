"""Step payloads of the seven-step investor profile."""

from datetime import date
from typing import Literal

from pydantic import EmailStr, Field

from onboarding.schemas.forms.common import (
    AddressRow,
    EmploymentStatus,
    Gender,
    GovernmentIdRow,
    InvestmentKnowledgeRow,
    InvestmentType,
    KnowledgeLevel,
    MaritalStatus,
    PersonEntity,
    PhoneRow,
    SignatureRow,
    StepPayload,
    TaxBracket,
    YesNo,
)

AccountType = Literal[
    "individual",
    "corporation",
    "corporate_pension_profit_sharing",
    "custodial",
    "estate",
    "joint_tenant",
    "limited_liability_company",
    "individual_single_member_llc",
    "sole_proprietorship",
    "transfer_on_death_individual",
    "transfer_on_death_joint",
    "nonprofit_organization",
    "partnership",
    "exempt_organization",
    "trust",
    "other",
]
AdditionalDesignation = Literal["c_corp", "s_corp", "ugma", "utma", "partnership"]
TrustType = Literal[
    "charitable", "living", "irrevocable_living", "family", "revocable", "irrevocable", "testamentary"
]
TenancyClause = Literal[
    "community_property",
    "tenants_by_entirety",
    "community_property_with_rights",
    "joint_tenants_with_rights_of_survivorship",
    "tenants_in_common",
]
RiskExposure = Literal["Low", "Moderate", "Speculation", "High Risk"]
InvestmentObjective = Literal["Income", "Long-Term Growth", "Short-Term Growth"]
LiquidityNeed = Literal["High", "Medium", "Low"]
InvestorSignatureType = Literal[
    "account_owner", "joint_account_owner", "financial_professional", "supervisor_principal"
]


class AccountRegistrationStep(StepPayload):
    """Step 1: account registration, including type-specific details."""

    rr_name: str | None = Field(default=None, max_length=200)
    rr_no: str | None = Field(default=None, max_length=50)
    customer_names: str | None = Field(default=None, max_length=300)
    account_no: str | None = Field(default=None, max_length=50)
    retirement_account: bool | None = None
    retail_account: bool | None = None
    account_types: list[AccountType] | None = None
    additional_designations: list[AdditionalDesignation] | None = None
    other_account_type_text: str | None = Field(default=None, max_length=200)

    trust_establishment_date: date | None = None
    trust_types: list[TrustType] | None = None

    joint_are_account_holders_married: YesNo | None = None
    joint_tenancy_state: str | None = Field(default=None, max_length=100)
    joint_number_of_tenants: int | None = Field(default=None, gt=0)
    joint_tenancy_clauses: list[TenancyClause] | None = None

    custodial_state_gift_given_1: str | None = Field(default=None, max_length=100)
    custodial_date_gift_given_1: date | None = None
    custodial_state_gift_given_2: str | None = Field(default=None, max_length=100)
    custodial_date_gift_given_2: date | None = None

    tod_individual_agreement_date: date | None = None
    tod_joint_agreement_date: date | None = None


class PatriotActStep(StepPayload):
    """Step 2: Patriot Act source of funds."""

    initial_source_of_funds: list[str] | None = None
    other_source_of_funds_text: str | None = Field(default=None, max_length=500)


class AccountHolderStep(StepPayload):
    """Steps 3 and 4: primary or secondary account holder."""

    name: str | None = Field(default=None, max_length=120)
    email: EmailStr | None = None
    person_entity: PersonEntity | None = None
    ssn: str | None = Field(default=None, max_length=20)
    ein: str | None = Field(default=None, max_length=20)
    yes_no_box: YesNo | None = None
    date_of_birth: date | None = None
    specified_adult: YesNo | None = None
    primary_citizenship: str | None = Field(default=None, max_length=100)
    additional_citizenship: str | None = Field(default=None, max_length=100)
    gender: Gender | None = None
    general_investment_knowledge: KnowledgeLevel | None = None
    marital_statuses: list[MaritalStatus] | None = None
    employment_affiliations: list[EmploymentStatus] | None = None

    # Employment
    occupation: str | None = Field(default=None, max_length=100)
    years_employed: int | None = Field(default=None, ge=0)
    type_of_business: str | None = Field(default=None, max_length=100)
    employer_name: str | None = Field(default=None, max_length=200)

    # Financial information
    annual_income_from: float | None = Field(default=None, ge=0)
    annual_income_to: float | None = Field(default=None, ge=0)
    net_worth_from: float | None = Field(default=None, ge=0)
    net_worth_to: float | None = Field(default=None, ge=0)
    liquid_net_worth_from: float | None = Field(default=None, ge=0)
    liquid_net_worth_to: float | None = Field(default=None, ge=0)
    tax_bracket: TaxBracket | None = None

    # Affiliations
    employee_of_advisory_firm: YesNo | None = None
    related_to_employee_advisory: YesNo | None = None
    employee_name_and_relationship: str | None = Field(default=None, max_length=200)
    employee_of_broker_dealer: YesNo | None = None
    broker_dealer_name: str | None = Field(default=None, max_length=120)
    related_to_employee_broker_dealer: YesNo | None = None
    broker_dealer_employee_name: str | None = Field(default=None, max_length=120)
    broker_dealer_employee_relationship: str | None = Field(default=None, max_length=100)
    maintaining_other_accounts: YesNo | None = None
    with_what_firms: str | None = Field(default=None, max_length=200)
    years_of_investment_experience: int | None = Field(default=None, ge=0)
    affiliated_with_exchange_or_finra: YesNo | None = None
    affiliation_details: str | None = Field(default=None, max_length=200)
    senior_officer_or_10pct_shareholder: YesNo | None = None
    company_names: str | None = Field(default=None, max_length=500)

    # Full-replace collections
    addresses: list[AddressRow] | None = None
    phones: list[PhoneRow] | None = None
    investment_knowledge: list[InvestmentKnowledgeRow] | None = None
    government_identifications: list[GovernmentIdRow] | None = Field(default=None, max_length=2)


class InvestmentValueRow(StepPayload):
    investment_type: InvestmentType
    value: float = Field(ge=0)


class InvestmentObjectivesStep(StepPayload):
    """Step 5: objectives, horizon and liquidity."""

    risk_exposure: list[RiskExposure] | None = None
    account_investment_objectives: list[InvestmentObjective] | None = None
    see_attached_statement: bool | None = None
    time_horizon_from: str | None = Field(default=None, max_length=20)
    time_horizon_to: str | None = Field(default=None, max_length=20)
    liquidity_needs: list[LiquidityNeed] | None = None
    investment_values: list[InvestmentValueRow] | None = None


class TrustedContactStep(StepPayload):
    """Step 6: trusted contact person; stored with a ``trusted_contact_`` prefix."""

    decline_to_provide: bool | None = None
    name: str | None = Field(default=None, max_length=120)
    email: EmailStr | None = None
    home_phone: str | None = Field(default=None, max_length=40)
    business_phone: str | None = Field(default=None, max_length=40)
    mobile_phone: str | None = Field(default=None, max_length=40)
    mailing_address: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=100)
    state_province: str | None = Field(default=None, max_length=100)
    zip_postal_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)


class InvestorSignatureRow(SignatureRow):
    signature_type: InvestorSignatureType


class SignaturesStep(StepPayload):
    """Step 7: signatures."""

    signatures: list[InvestorSignatureRow] | None = None
