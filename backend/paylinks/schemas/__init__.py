from paylinks.schemas.customer_profile import (
    CustomerProfileCreate,
    CustomerProfileResponse,
    CustomerProfileUpdate,
)
from paylinks.schemas.payment_link import (
    BillingAddress,
    CardSubmission,
    CardSubmissionResponse,
    PaymentLinkCreate,
    PaymentLinkResponse,
    PaymentLinkStats,
    PublicPaymentLinkResponse,
)

__all__ = [
    "BillingAddress",
    "CardSubmission",
    "CardSubmissionResponse",
    "CustomerProfileCreate",
    "CustomerProfileResponse",
    "CustomerProfileUpdate",
    "PaymentLinkCreate",
    "PaymentLinkResponse",
    "PaymentLinkStats",
    "PublicPaymentLinkResponse",
]
