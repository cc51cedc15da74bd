"""PayTrace card vault provider.

PayTrace authenticates with an OAuth password grant:
1. POST /oauth/token returns a bearer token and its lifetime
2. Every API call carries the token in the Authorization header
3. Customer profiles hold the vaulted card; responses only expose a masked number
"""

import json
import logging
from typing import Any

import httpx

from paylinks.core.clock import Clock
from paylinks.core.config import settings
from paylinks.core.errors import (
    ProcessorError,
    UpstreamAuthError,
    UpstreamTimeoutError,
)
from paylinks.services.credential_cache import CredentialCache
from paylinks.services.payment_provider import CardVaultProviderBase, CustomerProfileResult

logger = logging.getLogger(__name__)


class PayTraceProvider(CardVaultProviderBase):
    """PayTrace payment processor client.

    Tokens come from a ``CredentialCache``; one is built around
    ``fetch_access_token`` unless a cache is passed in.
    """

    def __init__(
        self,
        api_url: str | None = None,
        username: str | None = None,
        password: str | None = None,
        integrator_id: str | None = None,
        timeout: float | None = None,
        credentials: CredentialCache | None = None,
        clock: Clock | None = None,
    ):
        self.api_url = (api_url or settings.paytrace_api_url).rstrip("/")
        self.username = username or settings.paytrace_username
        self.password = password or settings.paytrace_password
        self.integrator_id = integrator_id or settings.paytrace_integrator_id
        self.timeout = timeout or settings.paytrace_timeout_seconds
        self.credentials = credentials or CredentialCache(
            self.fetch_access_token,
            clock=clock,
            safety_margin_seconds=settings.paytrace_token_safety_margin_seconds,
            wait_timeout=self.timeout,
        )

    @property
    def provider_name(self) -> str:
        return "paytrace"

    def fetch_access_token(self) -> tuple[str, float]:
        """Request a new OAuth token, returning ``(token, lifetime_seconds)``."""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(
                    f"{self.api_url}/oauth/token",
                    data={
                        "grant_type": "password",
                        "username": self.username,
                        "password": self.password,
                    },
                )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"PayTrace OAuth request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise UpstreamAuthError(f"PayTrace OAuth request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise UpstreamAuthError(f"PayTrace OAuth failed: {resp.text[:500]}")

        data = resp.json()
        token = data.get("access_token")
        if not token:
            raise UpstreamAuthError("PayTrace OAuth response did not include an access token")
        return str(token), float(data.get("expires_in", 0))

    def _post(self, endpoint: str, payload: dict[str, Any], default_error: str) -> dict[str, Any]:
        """POST to a PayTrace API endpoint and return the decoded success body."""
        token = self.credentials.acquire()

        body = dict(payload)
        if self.integrator_id:
            body["integrator_id"] = self.integrator_id

        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(
                    f"{self.api_url}{endpoint}",
                    json=body,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"PayTrace request to {endpoint} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ProcessorError(f"PayTrace request to {endpoint} failed: {e}") from e

        if resp.status_code == 401:
            self.credentials.invalidate()
            raise UpstreamAuthError("PayTrace rejected the access token")

        try:
            data: dict[str, Any] = resp.json()
        except ValueError:
            data = {}

        if not 200 <= resp.status_code < 300 or not data.get("success"):
            if data.get("errors"):
                message = json.dumps(data["errors"])
            else:
                message = data.get("status_message") or default_error
            logger.warning("PayTrace %s failed with status %s", endpoint, resp.status_code)
            raise ProcessorError(message)

        return data

    def create_customer_profile(
        self,
        customer_id: str,
        card_number: str,
        expiration_month: str,
        expiration_year: str,
        cvv: str | None = None,
        billing_address: dict[str, Any] | None = None,
    ) -> CustomerProfileResult:
        """Create a PayTrace customer profile holding the card."""
        payload: dict[str, Any] = {
            "customer_id": customer_id,
            "credit_card": {
                "number": card_number,
                "expiration_month": expiration_month,
                "expiration_year": expiration_year,
            },
        }
        if cvv:
            payload["csc"] = cvv
        if billing_address:
            payload["billing_address"] = billing_address

        data = self._post("/v1/customer/create", payload, "Failed to create customer profile")
        return CustomerProfileResult(
            customer_id=str(data.get("customer_id", customer_id)),
            masked_card_number=data.get("masked_card_number"),
        )

    def update_customer_profile(
        self,
        customer_id: str,
        hpf_token: str | None = None,
        enc_key: str | None = None,
        expiration_month: str | None = None,
        expiration_year: str | None = None,
        billing_address: dict[str, Any] | None = None,
    ) -> CustomerProfileResult:
        """Update a PayTrace customer profile.

        The card is only replaced when both the hosted-fields token and its
        encryption key are given.
        """
        payload: dict[str, Any] = {"customer_id": customer_id}
        if hpf_token and enc_key:
            payload["credit_card"] = {
                "hpf_token": hpf_token,
                "enc_key": enc_key,
                "expiration_month": expiration_month,
                "expiration_year": expiration_year,
            }
        if billing_address:
            payload["billing_address"] = billing_address

        data = self._post("/v1/customer/update", payload, "Failed to update customer profile")
        return CustomerProfileResult(
            customer_id=str(data.get("customer_id", customer_id)),
            masked_card_number=data.get("masked_card_number"),
        )

    def get_customer_profile(self, customer_id: str) -> dict[str, Any] | None:
        """Export a PayTrace customer profile."""
        data = self._post("/v1/customer/export", {"customer_id": customer_id}, "Customer not found")
        customers = data.get("customers") or []
        return customers[0] if customers else None

    def delete_customer_profile(self, customer_id: str) -> None:
        """Delete a PayTrace customer profile."""
        self._post(
            "/v1/customer/delete",
            {"customer_id": customer_id},
            "Failed to delete customer profile",
        )
