"""Bearer token cache for the payment processor API.

Holds at most one credential. When it is missing or about to expire the
first caller fetches a new one while every other caller waits on the same
in-flight request, so one expiry window costs exactly one token fetch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock

from paylinks.core.clock import Clock, SystemClock
from paylinks.core.errors import UpstreamAuthError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

TokenFetcher = Callable[[], tuple[str, float]]


@dataclass(frozen=True)
class CachedCredential:
    """A bearer token and the instant it stops being accepted."""

    token: str
    expires_at: datetime


class CredentialCache:
    """Memoizes a short-lived bearer token obtained through ``fetch_token``.

    Args:
        fetch_token: Returns ``(token, lifetime_seconds)``. May raise
            ``UpstreamAuthError`` or ``UpstreamTimeoutError``; any other
            exception is reported as ``UpstreamAuthError``.
        clock: Time source, defaults to the system clock.
        safety_margin_seconds: A token is refreshed this long before its
            reported expiry so in-flight requests do not race against it.
        wait_timeout: Upper bound in seconds for callers waiting on a refresh
            started by another caller.
    """

    def __init__(
        self,
        fetch_token: TokenFetcher,
        clock: Clock | None = None,
        safety_margin_seconds: float = 60,
        wait_timeout: float | None = None,
    ):
        self._fetch_token = fetch_token
        self.clock = clock or SystemClock()
        self.safety_margin = timedelta(seconds=safety_margin_seconds)
        self.wait_timeout = wait_timeout
        self._credential: CachedCredential | None = None
        self._refresh: Future[str] | None = None
        self._lock = Lock()

    @property
    def credential(self) -> CachedCredential | None:
        return self._credential

    def acquire(self) -> str:
        """Return a token that is valid for at least the safety margin."""
        with self._lock:
            credential = self._credential
            if credential is not None and self._is_fresh(credential):
                return credential.token
            refresh = self._refresh
            leader = refresh is None
            if refresh is None:
                refresh = self._refresh = Future()

        if not leader:
            try:
                return refresh.result(timeout=self.wait_timeout)
            except TimeoutError:
                raise UpstreamTimeoutError("Timed out waiting for access token refresh") from None

        token = ""
        error: BaseException = UpstreamAuthError("Access token refresh was interrupted")
        try:
            token = self._do_refresh(credential)
        except UpstreamError as exc:
            error = exc
            raise
        finally:
            # Waiters must never be left on a future nobody will resolve
            with self._lock:
                self._refresh = None
            if token:
                refresh.set_result(token)
            else:
                refresh.set_exception(error)
        return token

    def invalidate(self) -> None:
        """Forget the cached token, e.g. after the processor rejected it."""
        with self._lock:
            self._credential = None

    def _is_fresh(self, credential: CachedCredential) -> bool:
        return self.clock.now() < credential.expires_at - self.safety_margin

    def _do_refresh(self, previous: CachedCredential | None) -> str:
        try:
            token, lifetime_seconds = self._fetch_token()
        except UpstreamError as exc:
            return self._fallback(previous, exc)
        except Exception as exc:
            return self._fallback(previous, UpstreamAuthError(f"Access token fetch failed: {exc}"))
        if not token:
            return self._fallback(previous, UpstreamAuthError("Access token fetch returned no token"))

        credential = CachedCredential(
            token=token,
            expires_at=self.clock.now() + timedelta(seconds=lifetime_seconds),
        )
        with self._lock:
            self._credential = credential
        logger.info("Refreshed processor access token, valid for %ss", lifetime_seconds)
        return token

    def _fallback(self, previous: CachedCredential | None, exc: UpstreamError) -> str:
        if previous is not None and self.clock.now() < previous.expires_at:
            logger.warning("Access token refresh failed, reusing current token: %s", exc)
            return previous.token
        logger.warning("Access token refresh failed: %s", exc)
        raise exc
