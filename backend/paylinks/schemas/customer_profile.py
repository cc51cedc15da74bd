"""Customer profile schemas for the processor pass-through API."""

from typing import Any

from pydantic import BaseModel, Field

from paylinks.schemas.payment_link import BillingAddress


class CustomerProfileCreate(BaseModel):
    """Schema for vaulting a card under a processor customer profile."""

    customer_id: str = Field(..., min_length=1, max_length=255)
    card_number: str = Field(..., min_length=12, max_length=19, pattern=r"^\d+$")
    expiration_month: str = Field(..., min_length=1, max_length=2)
    expiration_year: str = Field(..., min_length=2, max_length=4)
    cvv: str | None = Field(default=None, min_length=3, max_length=4)
    billing_address: BillingAddress | None = None


class CustomerProfileUpdate(BaseModel):
    """Schema for updating a processor customer profile.

    Card replacement uses a hosted-fields token and its encryption key, so
    raw card numbers never pass through this endpoint.
    """

    hpf_token: str | None = None
    enc_key: str | None = None
    expiration_month: str | None = None
    expiration_year: str | None = None
    billing_address: BillingAddress | None = None


class CustomerProfileResponse(BaseModel):
    """Schema for a customer profile as reported by the processor."""

    customer_id: str
    masked_card_number: str | None = None
    details: dict[str, Any] | None = None
