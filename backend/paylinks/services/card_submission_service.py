"""Card-on-file submission: vault the card at the processor, then complete the link."""

from __future__ import annotations

import logging

from paylinks.core.errors import InvalidTransitionError
from paylinks.models.payment_link import PaymentLink, PaymentLinkStatus
from paylinks.schemas.payment_link import CardSubmission
from paylinks.services.payment_link_service import PaymentLinkService
from paylinks.services.payment_provider import CardVaultProviderBase

logger = logging.getLogger(__name__)


class CardSubmissionService:
    """Forwards a customer's card to the card vault and completes their link.

    The processor call runs without holding the link's lock; the final
    ``complete`` re-checks the status, so a link completed or cancelled in
    the meantime is reported as an invalid transition.
    """

    def __init__(self, link_service: PaymentLinkService, provider: CardVaultProviderBase):
        self.link_service = link_service
        self.provider = provider

    def submit(self, link_id: str, submission: CardSubmission) -> PaymentLink:
        link = self.link_service.get(link_id)
        if link.status != PaymentLinkStatus.PENDING.value:
            raise InvalidTransitionError(
                str(link.link_id), str(link.status), PaymentLinkStatus.COMPLETED.value
            )

        if submission.billing_address is not None:
            billing_address = submission.billing_address.model_dump(exclude_none=True)
        else:
            billing_address = {"name": link.customer_name} if link.customer_name else None

        result = self.provider.create_customer_profile(
            customer_id=str(link.customer_id),
            card_number=submission.card_number,
            expiration_month=submission.expiration_month,
            expiration_year=submission.expiration_year,
            cvv=submission.cvv,
            billing_address=billing_address,
        )

        try:
            return self.link_service.complete(
                str(link.link_id),
                masked_card_number=result.masked_card_number or "",
                processor_customer_id=result.customer_id,
            )
        except InvalidTransitionError:
            logger.warning(
                "Card vaulted as %s at %s but link %s is no longer pending",
                result.customer_id,
                self.provider.provider_name,
                link.link_id,
            )
            raise
