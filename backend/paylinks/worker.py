import logging
from typing import Any

from arq import cron
from arq.connections import RedisSettings

from paylinks.core.config import settings
from paylinks.core.database import session_scope
from paylinks.services.payment_link_service import PaymentLinkService

logger = logging.getLogger(__name__)

# Redis connection settings
redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def expire_payment_links_task(ctx: dict[str, Any]) -> int:
    """Background task: move overdue pending payment links to expired.

    Runs hourly as housekeeping. Reads expire overdue links on their own,
    so skipping this task never exposes a stale pending link.
    """
    if not settings.expiry_sweep_enabled:
        return 0
    with session_scope() as db:
        service = PaymentLinkService(db)
        count = service.expire_overdue()
    if count > 0:
        logger.info("Expiry sweep expired %d payment links", count)
    return count


class WorkerSettings:
    functions = [
        expire_payment_links_task,
    ]
    cron_jobs = [
        cron(expire_payment_links_task, minute={0}),  # hourly
    ]
    redis_settings = redis_settings
