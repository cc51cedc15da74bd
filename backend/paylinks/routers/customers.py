"""Customer profile API endpoints, passed through to the card vault.

Handlers are plain functions: FastAPI runs them in its threadpool while the
blocking processor call is in flight.
"""

from fastapi import APIRouter, Depends, HTTPException

from paylinks.core.dependencies import get_card_vault_provider
from paylinks.core.errors import ProcessorError, UpstreamError, UpstreamTimeoutError
from paylinks.schemas.customer_profile import (
    CustomerProfileCreate,
    CustomerProfileResponse,
    CustomerProfileUpdate,
)
from paylinks.services.payment_provider import CardVaultProviderBase

router = APIRouter()

_UPSTREAM_RESPONSES: dict[int | str, dict[str, str]] = {
    502: {"description": "Payment processor error"},
    504: {"description": "Payment processor timed out"},
}


def _upstream_http_error(exc: UpstreamError) -> HTTPException:
    if isinstance(exc, UpstreamTimeoutError):
        return HTTPException(status_code=504, detail="Payment processor timed out")
    return HTTPException(status_code=502, detail=str(exc))


@router.post(
    "/",
    response_model=CustomerProfileResponse,
    status_code=201,
    summary="Create customer profile",
    responses=_UPSTREAM_RESPONSES,
)
def create_customer_profile(
    data: CustomerProfileCreate,
    provider: CardVaultProviderBase = Depends(get_card_vault_provider),
) -> CustomerProfileResponse:
    """Vault a card under a new customer profile."""
    try:
        result = provider.create_customer_profile(
            customer_id=data.customer_id,
            card_number=data.card_number,
            expiration_month=data.expiration_month,
            expiration_year=data.expiration_year,
            cvv=data.cvv,
            billing_address=(
                data.billing_address.model_dump(exclude_none=True)
                if data.billing_address
                else None
            ),
        )
    except UpstreamError as e:
        raise _upstream_http_error(e) from None
    return CustomerProfileResponse(
        customer_id=result.customer_id,
        masked_card_number=result.masked_card_number,
    )


@router.put(
    "/{customer_id}",
    response_model=CustomerProfileResponse,
    summary="Update customer profile",
    responses=_UPSTREAM_RESPONSES,
)
def update_customer_profile(
    customer_id: str,
    data: CustomerProfileUpdate,
    provider: CardVaultProviderBase = Depends(get_card_vault_provider),
) -> CustomerProfileResponse:
    """Replace the card or billing address of a customer profile."""
    try:
        result = provider.update_customer_profile(
            customer_id=customer_id,
            hpf_token=data.hpf_token,
            enc_key=data.enc_key,
            expiration_month=data.expiration_month,
            expiration_year=data.expiration_year,
            billing_address=(
                data.billing_address.model_dump(exclude_none=True)
                if data.billing_address
                else None
            ),
        )
    except UpstreamError as e:
        raise _upstream_http_error(e) from None
    return CustomerProfileResponse(
        customer_id=result.customer_id,
        masked_card_number=result.masked_card_number,
    )


@router.get(
    "/{customer_id}",
    response_model=CustomerProfileResponse,
    summary="Get customer profile",
    responses={404: {"description": "Customer not found"}, **_UPSTREAM_RESPONSES},
)
def get_customer_profile(
    customer_id: str,
    provider: CardVaultProviderBase = Depends(get_card_vault_provider),
) -> CustomerProfileResponse:
    """Export a customer profile from the card vault."""
    try:
        profile = provider.get_customer_profile(customer_id)
    except ProcessorError:
        raise HTTPException(status_code=404, detail="Customer not found") from None
    except UpstreamError as e:
        raise _upstream_http_error(e) from None
    if profile is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerProfileResponse(
        customer_id=str(profile.get("customer_id", customer_id)),
        masked_card_number=profile.get("credit_card", {}).get("masked_number"),
        details=profile,
    )


@router.delete(
    "/{customer_id}",
    status_code=204,
    summary="Delete customer profile",
    responses=_UPSTREAM_RESPONSES,
)
def delete_customer_profile(
    customer_id: str,
    provider: CardVaultProviderBase = Depends(get_card_vault_provider),
) -> None:
    """Delete a customer profile from the card vault."""
    try:
        provider.delete_customer_profile(customer_id)
    except UpstreamError as e:
        raise _upstream_http_error(e) from None
