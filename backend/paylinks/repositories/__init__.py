from paylinks.repositories.payment_link_repository import PaymentLinkRepository

__all__ = [
    "PaymentLinkRepository",
]
