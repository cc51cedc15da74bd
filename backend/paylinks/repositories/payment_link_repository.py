"""PaymentLink repository for data access."""

from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paylinks.core.errors import ConflictError
from paylinks.models.payment_link import PaymentLink, PaymentLinkStatus


class PaymentLinkRepository:
    """Repository for PaymentLink model.

    Every mutating method commits before returning, so a crash between
    calls leaves the table in the state of the last completed write.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, link_id: str) -> PaymentLink | None:
        """Get a payment link by ID."""
        return self.db.query(PaymentLink).filter(PaymentLink.link_id == link_id).first()

    def scan(self) -> list[PaymentLink]:
        """Snapshot of every stored payment link."""
        return self.db.query(PaymentLink).all()

    def get_all(
        self,
        status: PaymentLinkStatus | str | None = None,
        limit: int = 100,
    ) -> list[PaymentLink]:
        """Get payment links, newest first."""
        query = self.db.query(PaymentLink)
        if status is not None:
            query = query.filter(PaymentLink.status == PaymentLinkStatus(status).value)
        return query.order_by(PaymentLink.created_at.desc()).limit(limit).all()

    def put(self, link: PaymentLink) -> PaymentLink:
        """Insert a new payment link.

        Raises:
            ConflictError: If a link with the same ID already exists.
        """
        link_id = str(link.link_id)
        if self.get(link_id) is not None:
            raise ConflictError(link_id)
        self.db.add(link)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(link_id) from None
        self.db.refresh(link)
        return link

    def update(self, link_id: str, values: dict[str, Any]) -> PaymentLink | None:
        """Merge ``values`` into an existing link."""
        link = self.get(link_id)
        if not link:
            return None
        for key, value in values.items():
            setattr(link, key, value)
        self.db.commit()
        self.db.refresh(link)
        return link

    def compare_and_update(
        self,
        link_id: str,
        expected_status: PaymentLinkStatus,
        values: dict[str, Any],
    ) -> bool:
        """Apply ``values`` only if the link is still in ``expected_status``.

        Returns:
            True if the row was updated, False if it was missing or its status
            had already moved on.
        """
        query = self.db.query(PaymentLink).filter(
            PaymentLink.link_id == link_id,
            PaymentLink.status == expected_status.value,
        )
        if not values:
            return query.count() == 1
        updated = query.update(values, synchronize_session=False)
        self.db.commit()
        self.db.expire_all()
        return int(updated) == 1

    def expire_overdue(self, now: datetime) -> int:
        """Move every pending link whose deadline has been reached to expired."""
        count = (
            self.db.query(PaymentLink)
            .filter(
                PaymentLink.status == PaymentLinkStatus.PENDING.value,
                PaymentLink.expires_at <= now,
            )
            .update({"status": PaymentLinkStatus.EXPIRED.value}, synchronize_session=False)
        )
        self.db.commit()
        self.db.expire_all()
        return int(count)

    def count_by_status(self) -> dict[str, int]:
        """Count payment links grouped by status."""
        rows = (
            self.db.query(PaymentLink.status, func.count(PaymentLink.link_id))
            .group_by(PaymentLink.status)
            .all()
        )
        return {str(status): int(count) for status, count in rows}

    def delete(self, link_id: str) -> bool:
        """Delete a payment link regardless of its status."""
        link = self.get(link_id)
        if not link:
            return False
        self.db.delete(link)
        self.db.commit()
        return True
