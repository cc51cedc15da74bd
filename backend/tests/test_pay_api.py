"""Tests for the customer-facing pay API."""

import threading
import time

import pytest
from fastapi.testclient import TestClient

from paylinks.core.dependencies import get_card_vault_provider, get_clock
from paylinks.core.errors import ProcessorError, UpstreamAuthError, UpstreamTimeoutError
from paylinks.main import app
from tests.conftest import FakeVaultProvider

CARD = {
    "card_number": "4111111111111111",
    "expiration_month": "12",
    "expiration_year": "2030",
    "cvv": "123",
}


@pytest.fixture
def provider() -> FakeVaultProvider:
    return FakeVaultProvider()


@pytest.fixture
def client(clock, provider):
    """Test client with a fake clock and card vault."""
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_card_vault_provider] = lambda: provider
    return TestClient(app)


@pytest.fixture
def link(client: TestClient) -> dict:
    response = client.post(
        "/v1/payment_links/",
        json={
            "customer_email": "jane@example.com",
            "customer_name": "Jane Doe",
            "invoice_number": "INV-2026-0042",
            "amount": "49.99",
            "expires_in_days": 7,
        },
    )
    assert response.status_code == 201
    return response.json()


class TestPaymentForm:
    def test_form_shows_public_fields(self, client: TestClient, link: dict) -> None:
        response = client.get(f"/v1/pay/{link['link_id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["link_id"] == link["link_id"]
        assert data["customer_name"] == "Jane Doe"
        assert data["invoice_number"] == "INV-2026-0042"
        assert "status" not in data
        assert "owner_email" not in data

    def test_form_unknown_link(self, client: TestClient) -> None:
        assert client.get("/v1/pay/NOPE0000").status_code == 404

    def test_form_for_expired_link_is_gone(self, client: TestClient, link: dict, clock) -> None:
        clock.advance(days=7)
        response = client.get(f"/v1/pay/{link['link_id']}")
        assert response.status_code == 410
        assert response.json()["detail"] == "This link is expired"

    def test_form_for_cancelled_link_is_gone(self, client: TestClient, link: dict) -> None:
        client.post(f"/v1/payment_links/{link['link_id']}/cancel")
        response = client.get(f"/v1/pay/{link['link_id']}")
        assert response.status_code == 410
        assert response.json()["detail"] == "This link is cancelled"


class TestSubmitCard:
    def test_submit_completes_link(
        self, client: TestClient, link: dict, provider: FakeVaultProvider
    ) -> None:
        response = client.post(f"/v1/pay/{link['link_id']}", json=CARD)

        assert response.status_code == 200, response.text
        assert response.json() == {
            "link_id": link["link_id"],
            "masked_card_number": "xxxxxxxxxxxx1111",
            "customer_id": link["customer_id"],
        }
        assert provider.created[0]["billing_address"] == {"name": "Jane Doe"}

        admin_view = client.get(f"/v1/payment_links/{link['link_id']}").json()
        assert admin_view["status"] == "completed"
        assert admin_view["masked_card_number"] == "xxxxxxxxxxxx1111"
        assert admin_view["processor_customer_id"] == link["customer_id"]
        assert admin_view["completed_at"] is not None

    def test_second_submission_conflicts(
        self, client: TestClient, link: dict, provider: FakeVaultProvider
    ) -> None:
        client.post(f"/v1/pay/{link['link_id']}", json=CARD)
        response = client.post(f"/v1/pay/{link['link_id']}", json=CARD)

        assert response.status_code == 409
        assert response.json()["detail"] == "This link is already completed"
        assert len(provider.created) == 1

    def test_submit_expired_link(
        self, client: TestClient, link: dict, clock, provider: FakeVaultProvider
    ) -> None:
        clock.advance(days=8)
        response = client.post(f"/v1/pay/{link['link_id']}", json=CARD)
        assert response.status_code == 409
        assert response.json()["detail"] == "This link is already expired"
        assert provider.created == []

    def test_submit_unknown_link(self, client: TestClient) -> None:
        assert client.post("/v1/pay/NOPE0000", json=CARD).status_code == 404

    @pytest.mark.parametrize(
        "card",
        [
            {"expiration_month": "12", "expiration_year": "2030"},
            {**CARD, "card_number": "4111-1111-1111"},
            {**CARD, "card_number": "4111"},
        ],
    )
    def test_malformed_card_rejected(self, client: TestClient, link: dict, card: dict) -> None:
        response = client.post(f"/v1/pay/{link['link_id']}", json=card)
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (ProcessorError("Card declined"), 502),
            (UpstreamAuthError("bad credentials"), 502),
            (UpstreamTimeoutError("slow"), 504),
        ],
    )
    def test_processor_failures(
        self,
        client: TestClient,
        link: dict,
        provider: FakeVaultProvider,
        error: Exception,
        status_code: int,
    ) -> None:
        provider.error = error
        response = client.post(f"/v1/pay/{link['link_id']}", json=CARD)
        assert response.status_code == status_code

        # The link stays open for another attempt
        assert client.get(f"/v1/payment_links/{link['link_id']}").json()["status"] == "pending"


class TestSubmitConcurrency:
    def test_other_requests_served_during_processor_call(
        self, client: TestClient, link: dict, provider: FakeVaultProvider
    ) -> None:
        in_call = threading.Event()
        release = threading.Event()

        def hold_processor() -> None:
            in_call.set()
            release.wait(timeout=5)

        provider.on_create = hold_processor
        results: dict = {}

        # Entering the client shares one event loop between both requests
        with TestClient(app) as shared:

            def submit() -> None:
                results["submit"] = shared.post(f"/v1/pay/{link['link_id']}", json=CARD)

            worker = threading.Thread(target=submit)
            worker.start()
            try:
                assert in_call.wait(timeout=5)

                started = time.monotonic()
                response = shared.get("/")
                elapsed = time.monotonic() - started

                assert response.status_code == 200
                assert elapsed < 2
                assert worker.is_alive()
            finally:
                release.set()
                worker.join(timeout=10)

        assert results["submit"].status_code == 200
