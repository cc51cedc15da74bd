"""PaymentLink admin API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from paylinks.core.config import settings
from paylinks.core.dependencies import get_payment_link_service
from paylinks.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from paylinks.models.payment_link import PaymentLink, PaymentLinkStatus
from paylinks.schemas.payment_link import (
    PaymentLinkCreate,
    PaymentLinkResponse,
    PaymentLinkStats,
)
from paylinks.services.payment_link_service import PaymentLinkService

router = APIRouter()


def payment_url(link_id: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/pay/{link_id}"


def _link_to_response(link: PaymentLink) -> PaymentLinkResponse:
    resp = PaymentLinkResponse.model_validate(link)
    resp.payment_url = payment_url(resp.link_id)
    return resp


@router.post(
    "/",
    response_model=PaymentLinkResponse,
    status_code=201,
    summary="Create payment link",
    responses={400: {"description": "Invalid payment link data"}},
)
async def create_payment_link(
    data: PaymentLinkCreate,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkResponse:
    """Create a pending card-on-file payment link."""
    try:
        link = service.create(
            customer_email=data.customer_email,
            customer_name=data.customer_name,
            customer_id=data.customer_id,
            invoice_number=data.invoice_number,
            amount=data.amount,
            description=data.description,
            expires_in_days=data.expires_in_days,
            owner_email=data.owner_email,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return _link_to_response(link)


@router.get(
    "/",
    response_model=list[PaymentLinkResponse],
    summary="List payment links",
)
async def list_payment_links(
    response: Response,
    status: PaymentLinkStatus | None = None,
    limit: int = Query(default=settings.payment_link_list_limit, ge=1, le=1000),
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> list[PaymentLinkResponse]:
    """List payment links, newest first."""
    links = service.list_links(status=status, limit=limit)
    counts = service.stats()
    response.headers["X-Total-Count"] = str(counts[status.value] if status else counts["total"])
    return [_link_to_response(link) for link in links]


@router.get(
    "/stats",
    response_model=PaymentLinkStats,
    summary="Payment link statistics",
)
async def get_payment_link_stats(
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkStats:
    """Count payment links per status."""
    return PaymentLinkStats(**service.stats())


@router.get(
    "/{link_id}",
    response_model=PaymentLinkResponse,
    summary="Get payment link",
    responses={404: {"description": "Payment link not found"}},
)
async def get_payment_link(
    link_id: str,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkResponse:
    """Get a payment link by ID."""
    try:
        link = service.get(link_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Payment link not found") from None
    return _link_to_response(link)


@router.post(
    "/{link_id}/cancel",
    response_model=PaymentLinkResponse,
    summary="Cancel payment link",
    responses={
        404: {"description": "Payment link not found"},
        409: {"description": "Payment link is not pending"},
    },
)
async def cancel_payment_link(
    link_id: str,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkResponse:
    """Cancel a pending payment link."""
    try:
        link = service.cancel(link_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Payment link not found") from None
    except InvalidTransitionError as e:
        raise HTTPException(
            status_code=409, detail=f"Cannot cancel {e.current_status} link"
        ) from None
    return _link_to_response(link)


@router.post(
    "/{link_id}/email_sent",
    response_model=PaymentLinkResponse,
    summary="Mark payment link email as sent",
    responses={404: {"description": "Payment link not found"}},
)
async def mark_payment_link_email_sent(
    link_id: str,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> PaymentLinkResponse:
    """Record that the link was emailed to the customer."""
    try:
        link = service.mark_email_sent(link_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Payment link not found") from None
    return _link_to_response(link)


@router.delete(
    "/{link_id}",
    status_code=204,
    summary="Delete payment link",
    responses={404: {"description": "Payment link not found"}},
)
async def delete_payment_link(
    link_id: str,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> None:
    """Delete a payment link whatever its status."""
    if not service.delete(link_id):
        raise HTTPException(status_code=404, detail="Payment link not found")
