"""Payment link lifecycle service.

Links move ``pending -> completed | expired | cancelled`` and never return to
pending. Expiry is applied lazily: every read first rewrites an overdue
pending link to ``expired`` and persists that before returning it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from paylinks.core.clock import Clock, SystemClock
from paylinks.core.config import settings
from paylinks.core.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from paylinks.core.locks import KeyedLock
from paylinks.models.payment_link import DEFAULT_DESCRIPTION, PaymentLink, PaymentLinkStatus
from paylinks.models.shared import generate_link_id
from paylinks.repositories.payment_link_repository import PaymentLinkRepository

logger = logging.getLogger(__name__)

MAX_LINK_ID_ATTEMPTS = 5

# Matches the Numeric(12, 2) amount column
AMOUNT_QUANTUM = Decimal("0.01")
AMOUNT_LIMIT = Decimal(10) ** 10


class PaymentLinkService:
    """Service for creating payment links and moving them through their lifecycle.

    Mutations of one link run under that link's entry in ``locks`` and land
    in the store as conditional updates on ``status = 'pending'``, so two
    concurrent completions of the same link cannot both succeed.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock | None = None,
        locks: KeyedLock | None = None,
        ttl_days: int | None = None,
        link_id_factory: Callable[[], str] = generate_link_id,
    ):
        self.db = db
        self.repo = PaymentLinkRepository(db)
        self.clock = clock or SystemClock()
        self.locks = locks or KeyedLock()
        self.ttl_days = settings.payment_link_ttl_days if ttl_days is None else ttl_days
        self.link_id_factory = link_id_factory

    def create(
        self,
        customer_email: str | None,
        customer_name: str | None = None,
        customer_id: str | None = None,
        invoice_number: str | None = None,
        amount: Decimal | float | str | None = None,
        description: str | None = None,
        expires_in_days: int | None = None,
        owner_email: str | None = None,
    ) -> PaymentLink:
        """Create a pending payment link.

        ``customer_id`` and ``invoice_number`` default to values derived from
        the generated link ID. ``expires_in_days`` of zero or less produces a
        link that is already due.

        Raises:
            ValidationError: If the customer email is missing, or the amount
                is negative, not a number or does not fit the amount column.
        """
        if not customer_email or not customer_email.strip():
            raise ValidationError("customer_email is required")

        link_amount: Decimal | None = None
        if amount is not None and amount != "":
            try:
                link_amount = Decimal(str(amount))
            except InvalidOperation:
                raise ValidationError(f"Invalid amount: {amount!r}") from None
            if not link_amount.is_finite() or link_amount < 0:
                raise ValidationError("amount must be a non-negative number")
            if link_amount >= AMOUNT_LIMIT:
                raise ValidationError(f"amount must be less than {AMOUNT_LIMIT}")
            if link_amount != link_amount.quantize(AMOUNT_QUANTUM):
                raise ValidationError("amount must have at most 2 decimal places")

        days = self.ttl_days if expires_in_days is None else expires_in_days
        now = self.clock.now()
        expires_at = now + timedelta(days=days)

        link_id = ""
        for _ in range(MAX_LINK_ID_ATTEMPTS):
            link_id = self.link_id_factory()
            link = PaymentLink(
                link_id=link_id,
                customer_email=customer_email.strip(),
                customer_name=customer_name,
                customer_id=customer_id or f"CUST-{link_id}",
                invoice_number=invoice_number or f"INV-{link_id}",
                amount=link_amount,
                description=description or DEFAULT_DESCRIPTION,
                owner_email=owner_email,
                status=PaymentLinkStatus.PENDING.value,
                created_at=now,
                expires_at=expires_at,
            )
            try:
                created = self.repo.put(link)
            except ConflictError:
                logger.warning("Payment link ID %s already taken, generating another", link_id)
                continue
            logger.info("Created payment link %s expiring %s", link_id, expires_at.isoformat())
            return created

        raise ConflictError(link_id)

    def get(self, link_id: str) -> PaymentLink:
        """Get a payment link, expiring it first if its deadline has passed.

        Raises:
            NotFoundError: If no link has this ID.
        """
        key = self._key(link_id)
        with self.locks.hold(key):
            return self._load(key, self.clock.now())

    def list_links(
        self,
        status: PaymentLinkStatus | str | None = None,
        limit: int | None = None,
    ) -> list[PaymentLink]:
        """List payment links newest first, optionally filtered by exact status."""
        if limit is None:
            limit = settings.payment_link_list_limit
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        if status is not None:
            try:
                status = PaymentLinkStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status: {status}") from None

        self.expire_overdue()
        return self.repo.get_all(status=status, limit=limit)

    def stats(self) -> dict[str, int]:
        """Count links per status, after expiring overdue ones."""
        self.expire_overdue()
        counts = self.repo.count_by_status()
        result = {status.value: counts.get(status.value, 0) for status in PaymentLinkStatus}
        result["total"] = sum(counts.values())
        return result

    def complete(
        self,
        link_id: str,
        masked_card_number: str,
        processor_customer_id: str,
    ) -> PaymentLink:
        """Record a successful card submission on a pending link.

        Raises:
            NotFoundError: If no link has this ID.
            InvalidTransitionError: If the link is not pending (including a
                link that just expired or was completed by another caller).
        """
        key = self._key(link_id)
        with self.locks.hold(key):
            now = self.clock.now()
            link = self._load(key, now)
            self._transition(
                link,
                PaymentLinkStatus.COMPLETED,
                {
                    "completed_at": now,
                    "masked_card_number": masked_card_number,
                    "processor_customer_id": processor_customer_id,
                },
            )
            logger.info("Completed payment link %s", key)
            return self._reload(key)

    def cancel(self, link_id: str) -> PaymentLink:
        """Cancel a pending link.

        Raises:
            NotFoundError: If no link has this ID.
            InvalidTransitionError: If the link is not pending.
        """
        key = self._key(link_id)
        with self.locks.hold(key):
            link = self._load(key, self.clock.now())
            self._transition(link, PaymentLinkStatus.CANCELLED, {})
            logger.info("Cancelled payment link %s", key)
            return self._reload(key)

    def mark_email_sent(self, link_id: str) -> PaymentLink:
        """Stamp the time the link was emailed to the customer."""
        key = self._key(link_id)
        with self.locks.hold(key):
            now = self.clock.now()
            self._load(key, now)
            link = self.repo.update(key, {"email_sent_at": now})
            if link is None:
                raise NotFoundError(key)
            return link

    def delete(self, link_id: str) -> bool:
        """Remove a link whatever its status. Returns False if it did not exist."""
        key = self._key(link_id)
        with self.locks.hold(key):
            deleted = self.repo.delete(key)
        if deleted:
            logger.info("Deleted payment link %s", key)
        return deleted

    def expire_overdue(self) -> int:
        """Expire every pending link whose deadline has been reached."""
        count = self.repo.expire_overdue(self.clock.now())
        if count:
            logger.info("Expired %d overdue payment links", count)
        return count

    @staticmethod
    def _key(link_id: str) -> str:
        return link_id.strip().upper()

    def _load(self, key: str, now: datetime) -> PaymentLink:
        link = self.repo.get(key)
        if link is None:
            raise NotFoundError(key)
        if link.is_overdue(now):
            self.repo.compare_and_update(
                key, PaymentLinkStatus.PENDING, {"status": PaymentLinkStatus.EXPIRED.value}
            )
            logger.info("Payment link %s expired", key)
            link = self._reload(key)
        return link

    def _reload(self, key: str) -> PaymentLink:
        link = self.repo.get(key)
        if link is None:
            raise NotFoundError(key)
        return link

    def _transition(
        self,
        link: PaymentLink,
        target: PaymentLinkStatus,
        values: dict[str, object],
    ) -> None:
        key = str(link.link_id)
        if link.status != PaymentLinkStatus.PENDING.value:
            raise InvalidTransitionError(key, str(link.status), target.value)
        updated = self.repo.compare_and_update(
            key, PaymentLinkStatus.PENDING, {"status": target.value, **values}
        )
        if not updated:
            current = self._reload(key)
            raise InvalidTransitionError(key, str(current.status), target.value)
