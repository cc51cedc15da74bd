"""Inbound webhooks that create payment links automatically."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from paylinks.core.dependencies import get_payment_link_service
from paylinks.core.errors import PaymentLinkError
from paylinks.routers.payment_links import payment_url
from paylinks.services.payment_link_service import PaymentLinkService

logger = logging.getLogger(__name__)

router = APIRouter()

ZOHO_SIGN_SENT_STATUS = "inprogress"


def _find_signer(actions: list[Any]) -> dict[str, Any] | None:
    """First SIGN action with a recipient email that has not been signed yet."""
    for action in actions:
        if (
            isinstance(action, dict)
            and action.get("action_type") == "SIGN"
            and action.get("recipient_email")
            and action.get("action_status") != "COMPLETED"
        ):
            return action
    return None


def _document_name(requests: dict[str, Any]) -> str:
    documents = requests.get("document_ids") or []
    if documents and isinstance(documents[0], dict):
        return documents[0].get("document_name") or "Document"
    return "Document"


@router.post("/zoho-sign", summary="Zoho Sign document webhook")
async def handle_zoho_sign_webhook(
    request: Request,
    service: PaymentLinkService = Depends(get_payment_link_service),
) -> dict[str, Any]:
    """Create a payment link for the signer of a document that was just sent.

    Always answers 200 so Zoho Sign does not retry; the outcome is reported
    in the body. Only ``inprogress`` requests are acted on.
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Zoho Sign webhook with invalid JSON payload")
        return {"received": True, "error": "Invalid JSON payload"}

    requests = payload.get("requests") if isinstance(payload, dict) else None
    if not isinstance(requests, dict) or not requests.get("request_status"):
        return {"received": True}

    request_status = requests["request_status"]
    if request_status != ZOHO_SIGN_SENT_STATUS:
        return {"received": True, "status": request_status}

    signer = _find_signer(requests.get("actions") or [])
    if signer is None:
        return {"received": True, "message": "No signer found"}

    request_id = requests.get("request_id")
    try:
        link = service.create(
            customer_email=str(signer["recipient_email"]),
            customer_name=signer.get("recipient_name"),
            invoice_number=str(request_id) if request_id else None,
            description=f"Card on File - {_document_name(requests)}",
        )
    except PaymentLinkError as e:
        logger.warning("Zoho Sign webhook could not create a payment link: %s", e)
        return {"received": True, "error": str(e)}

    logger.info(
        "Payment link %s created from Zoho Sign request %s", link.link_id, request_id
    )
    return {
        "received": True,
        "payment_link_created": True,
        "link_id": link.link_id,
        "payment_url": payment_url(str(link.link_id)),
    }
