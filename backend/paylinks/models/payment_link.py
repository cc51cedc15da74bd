"""PaymentLink model for single-use card-on-file requests."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Numeric, String, Text

from paylinks.core.database import Base
from paylinks.models.shared import ensure_utc


class PaymentLinkStatus(str, Enum):
    """Payment link status enum."""

    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


DEFAULT_DESCRIPTION = "Card on File Request"


class PaymentLink(Base):
    """PaymentLink model - one link a customer follows to put a card on file."""

    __tablename__ = "payment_links"

    link_id = Column(String(16), primary_key=True)

    # Customer details
    customer_email = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=True)
    customer_id = Column(String(255), nullable=False)
    invoice_number = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=True)
    description = Column(Text, nullable=False, default=DEFAULT_DESCRIPTION)
    owner_email = Column(String(255), nullable=True)

    status = Column(
        String(20), nullable=False, default=PaymentLinkStatus.PENDING.value, index=True
    )

    # Set on completion only
    masked_card_number = Column(String(32), nullable=True)
    processor_customer_id = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    email_sent_at = Column(DateTime(timezone=True), nullable=True)

    def is_overdue(self, now: datetime) -> bool:
        """True when the link is still pending but its deadline has been reached."""
        expires_at: datetime = self.expires_at  # type: ignore[assignment]
        return self.status == PaymentLinkStatus.PENDING.value and ensure_utc(expires_at) <= now
