"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from paylinks.core import database as db_module
from paylinks.core.clock import FakeClock
from paylinks.core.database import Base, get_db
from paylinks.core.errors import ProcessorError
from paylinks.core.locks import KeyedLock
from paylinks.main import app
from paylinks.models import PaymentLink  # noqa: F401
from paylinks.services.payment_provider import CardVaultProviderBase, CustomerProfileResult

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=_test_engine
)

# Fixed start time for every FakeClock handed out by the ``clock`` fixture
T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop them after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield

    Base.metadata.drop_all(bind=_test_engine)
    app.dependency_overrides.clear()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def link_locks() -> KeyedLock:
    return KeyedLock()


class FakeVaultProvider(CardVaultProviderBase):
    """In-memory card vault.

    Set ``error`` to make every call raise it, or ``on_create`` to run a hook
    while a card is being vaulted.
    """

    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []
        self.profiles: dict[str, dict[str, Any]] = {}
        self.error: Exception | None = None
        self.on_create: Callable[[], Any] | None = None

    @property
    def provider_name(self) -> str:
        return "fake"

    def create_customer_profile(
        self,
        customer_id: str,
        card_number: str,
        expiration_month: str,
        expiration_year: str,
        cvv: str | None = None,
        billing_address: dict[str, Any] | None = None,
    ) -> CustomerProfileResult:
        self.created.append(
            {
                "customer_id": customer_id,
                "card_number": card_number,
                "expiration_month": expiration_month,
                "expiration_year": expiration_year,
                "cvv": cvv,
                "billing_address": billing_address,
            }
        )
        if self.on_create is not None:
            self.on_create()
        if self.error is not None:
            raise self.error
        masked = "x" * (len(card_number) - 4) + card_number[-4:]
        self.profiles[customer_id] = {
            "customer_id": customer_id,
            "credit_card": {"masked_number": masked},
            "billing_address": billing_address or {},
        }
        return CustomerProfileResult(customer_id=customer_id, masked_card_number=masked)

    def update_customer_profile(
        self,
        customer_id: str,
        hpf_token: str | None = None,
        enc_key: str | None = None,
        expiration_month: str | None = None,
        expiration_year: str | None = None,
        billing_address: dict[str, Any] | None = None,
    ) -> CustomerProfileResult:
        if self.error is not None:
            raise self.error
        profile = self.profiles.get(customer_id)
        if profile is None:
            raise ProcessorError("Customer not found")
        if billing_address:
            profile["billing_address"] = billing_address
        return CustomerProfileResult(
            customer_id=customer_id,
            masked_card_number=profile["credit_card"]["masked_number"],
        )

    def get_customer_profile(self, customer_id: str) -> dict[str, Any] | None:
        if self.error is not None:
            raise self.error
        return self.profiles.get(customer_id)

    def delete_customer_profile(self, customer_id: str) -> None:
        if self.error is not None:
            raise self.error
        if self.profiles.pop(customer_id, None) is None:
            raise ProcessorError("Customer not found")
