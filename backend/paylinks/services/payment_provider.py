"""Card vault provider abstraction.

A card vault stores card details under a customer profile at the payment
processor and hands back only a masked card number.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class CustomerProfileResult:
    """Customer profile result from provider."""

    customer_id: str
    masked_card_number: str | None = None


class CardVaultProviderBase(ABC):
    """Abstract base class for card vault providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass  # pragma: no cover

    @abstractmethod
    def create_customer_profile(
        self,
        customer_id: str,
        card_number: str,
        expiration_month: str,
        expiration_year: str,
        cvv: str | None = None,
        billing_address: dict[str, Any] | None = None,
    ) -> CustomerProfileResult:
        """Vault a card under a new customer profile."""
        pass  # pragma: no cover

    @abstractmethod
    def update_customer_profile(
        self,
        customer_id: str,
        hpf_token: str | None = None,
        enc_key: str | None = None,
        expiration_month: str | None = None,
        expiration_year: str | None = None,
        billing_address: dict[str, Any] | None = None,
    ) -> CustomerProfileResult:
        """Update the card or billing address of an existing profile."""
        pass  # pragma: no cover

    @abstractmethod
    def get_customer_profile(self, customer_id: str) -> dict[str, Any] | None:
        """Export a customer profile, or None if the processor returned none."""
        pass  # pragma: no cover

    @abstractmethod
    def delete_customer_profile(self, customer_id: str) -> None:
        """Delete a customer profile."""
        pass  # pragma: no cover
