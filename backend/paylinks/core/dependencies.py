"""FastAPI dependencies for process-wide components.

Each component is built once per process. Tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from paylinks.core.clock import Clock, SystemClock
from paylinks.core.database import get_db
from paylinks.core.locks import KeyedLock
from paylinks.services.payment_link_service import PaymentLinkService
from paylinks.services.payment_provider import CardVaultProviderBase
from paylinks.services.payment_providers.paytrace import PayTraceProvider


@lru_cache
def get_clock() -> Clock:
    return SystemClock()


@lru_cache
def get_link_locks() -> KeyedLock:
    return KeyedLock()


@lru_cache
def get_card_vault_provider() -> CardVaultProviderBase:
    return PayTraceProvider(clock=get_clock())


def get_payment_link_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    locks: KeyedLock = Depends(get_link_locks),
) -> PaymentLinkService:
    return PaymentLinkService(db, clock=clock, locks=locks)
