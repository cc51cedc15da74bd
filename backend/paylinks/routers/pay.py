"""Customer-facing payment link API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from paylinks.core.dependencies import get_card_vault_provider, get_payment_link_service
from paylinks.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
)
from paylinks.models.payment_link import PaymentLinkStatus
from paylinks.schemas.payment_link import (
    CardSubmission,
    CardSubmissionResponse,
    PublicPaymentLinkResponse,
)
from paylinks.services.card_submission_service import CardSubmissionService
from paylinks.services.payment_link_service import PaymentLinkService
from paylinks.services.payment_provider import CardVaultProviderBase

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{link_id}",
    response_model=PublicPaymentLinkResponse,
    summary="Get payment form data",
    responses={
        404: {"description": "Payment link not found"},
        410: {"description": "Payment link is no longer pending"},
    },
)
async def get_payment_form(
    link_id: str,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> PublicPaymentLinkResponse:
    """Return the fields shown on the customer's payment form."""
    try:
        link = service.get(link_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Payment link not found") from None
    if link.status != PaymentLinkStatus.PENDING.value:
        raise HTTPException(status_code=410, detail=f"This link is {link.status}")
    return PublicPaymentLinkResponse.model_validate(link)


@router.post(
    "/{link_id}",
    response_model=CardSubmissionResponse,
    summary="Submit card on file",
    responses={
        404: {"description": "Payment link not found"},
        409: {"description": "Payment link is no longer pending"},
        502: {"description": "Payment processor error"},
        504: {"description": "Payment processor timed out"},
    },
)
def submit_card(
    link_id: str,
    data: CardSubmission,
    service: PaymentLinkService = Depends(get_payment_link_service),
    provider: CardVaultProviderBase = Depends(get_card_vault_provider),
) -> CardSubmissionResponse:
    """Vault the submitted card and complete the payment link.

    Declared without ``async`` so the blocking processor call runs in the
    threadpool instead of on the event loop.
    """
    submission_service = CardSubmissionService(service, provider)
    try:
        link = submission_service.submit(link_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Payment link not found") from None
    except InvalidTransitionError as e:
        raise HTTPException(
            status_code=409, detail=f"This link is already {e.current_status}"
        ) from None
    except UpstreamTimeoutError:
        raise HTTPException(status_code=504, detail="Payment processor timed out") from None
    except UpstreamError as e:
        logger.warning("Card submission for link %s failed: %s", link_id, e)
        raise HTTPException(status_code=502, detail=str(e)) from None

    return CardSubmissionResponse(
        link_id=str(link.link_id),
        masked_card_number=str(link.masked_card_number),
        customer_id=str(link.processor_customer_id),
    )
