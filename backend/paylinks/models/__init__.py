from paylinks.models.payment_link import PaymentLink, PaymentLinkStatus

__all__ = [
    "PaymentLink",
    "PaymentLinkStatus",
]
