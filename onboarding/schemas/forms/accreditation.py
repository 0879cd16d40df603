"""Payload of the single-step accredited investor verification."""

from pydantic import Field

from onboarding.schemas.forms.alt_order import FormSignatures


class AccreditationStep(FormSignatures):
    rr_name: str | None = Field(default=None, max_length=200)
    rr_no: str | None = Field(default=None, max_length=50)
    customer_names: str | None = Field(default=None, max_length=300)
    has_joint_owner: bool | None = None
