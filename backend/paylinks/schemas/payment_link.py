"""PaymentLink schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from paylinks.models.payment_link import PaymentLinkStatus
from paylinks.models.shared import ensure_utc


class PaymentLinkCreate(BaseModel):
    """Schema for creating a payment link."""

    customer_email: EmailStr
    customer_name: str | None = Field(default=None, max_length=255)
    customer_id: str | None = Field(default=None, max_length=255)
    invoice_number: str | None = Field(default=None, max_length=255)
    amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    description: str | None = None
    expires_in_days: int | None = Field(default=None, ge=0, le=3650)
    owner_email: EmailStr | None = None


class PaymentLinkResponse(BaseModel):
    """Schema for payment link response."""

    model_config = ConfigDict(from_attributes=True)

    link_id: str
    customer_email: str
    customer_name: str | None = None
    customer_id: str
    invoice_number: str
    amount: Decimal | None = None
    description: str
    owner_email: str | None = None
    status: PaymentLinkStatus
    created_at: datetime
    expires_at: datetime
    completed_at: datetime | None = None
    email_sent_at: datetime | None = None
    masked_card_number: str | None = None
    processor_customer_id: str | None = None
    payment_url: str | None = None

    @field_validator("created_at", "expires_at", "completed_at", "email_sent_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class PaymentLinkStats(BaseModel):
    """Counts of payment links per status."""

    total: int = 0
    pending: int = 0
    completed: int = 0
    expired: int = 0
    cancelled: int = 0


class PublicPaymentLinkResponse(BaseModel):
    """Fields shown to the customer on the payment form."""

    model_config = ConfigDict(from_attributes=True)

    link_id: str
    customer_name: str | None = None
    customer_email: str
    customer_id: str
    invoice_number: str
    amount: Decimal | None = None
    description: str
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class BillingAddress(BaseModel):
    """Billing address forwarded to the processor as-is."""

    name: str | None = None
    street_address: str | None = None
    street_address2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None


class CardSubmission(BaseModel):
    """Card details submitted from the payment form."""

    card_number: str = Field(..., min_length=12, max_length=19, pattern=r"^\d+$")
    expiration_month: str = Field(..., min_length=1, max_length=2)
    expiration_year: str = Field(..., min_length=2, max_length=4)
    cvv: str | None = Field(default=None, min_length=3, max_length=4)
    billing_address: BillingAddress | None = None


class CardSubmissionResponse(BaseModel):
    """Result of a successful card-on-file submission."""

    link_id: str
    masked_card_number: str
    customer_id: str
