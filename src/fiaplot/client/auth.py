"""
Authentication session for plotting service requests.

A request rejected with HTTP 403 waits on the session while the token is
refreshed by whoever owns it (the host application). The session moves
through three states:

- ``idle``: no refresh outstanding
- ``refreshing``: a refresh was requested; rejected requests queue up
- ``draining``: the refresh finished and queued requests are being released

``draining`` only holds inside :meth:`AuthSession.refresh_succeeded` and
:meth:`AuthSession.refresh_failed`, which release the queue without awaiting,
so callers always observe ``idle`` once either returns. A session also falls
back to ``idle`` when every queued request times out or is cancelled.

Only the first request to queue triggers ``on_refresh_requested``; later ones
join the queue. :meth:`AuthSession.refresh_succeeded` releases every queued
request for a retry, :meth:`AuthSession.refresh_failed` rejects each one with
the error it originally got.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from fiaplot import logger
from fiaplot.exceptions import AuthError


class AuthState(str, Enum):
    """Refresh state; ``DRAINING`` is transient and never seen between awaits."""

    IDLE = "idle"
    REFRESHING = "refreshing"
    DRAINING = "draining"


class AuthSession:
    """Owns the bearer token and the queue of requests awaiting a refresh."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_refresh_requested: Optional[Callable[[], None]] = None,
        dev_mode: bool = False,
        refresh_timeout: Optional[float] = None,
    ) -> None:
        self._token = token
        self._token_provider = token_provider
        self._on_refresh_requested = on_refresh_requested
        self.dev_mode = dev_mode
        self.refresh_timeout = refresh_timeout
        self._state = AuthState.IDLE
        self._queue: List[Tuple[asyncio.Future, BaseException]] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def token(self) -> Optional[str]:
        if self._token_provider is not None:
            return self._token_provider()
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def authorization_header(self) -> Dict[str, str]:
        """Header to attach to the next request; empty in dev mode or without a token."""
        token = None if self.dev_mode else self.token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def wait_for_refresh(self, error: BaseException) -> None:
        """
        Queue a request that was rejected with ``error`` until the token is refreshed.

        Returns once the refresh succeeded, so the caller can retry.

        Raises:
            The original ``error`` if the refresh failed
            AuthError: AUTH_002 if ``refresh_timeout`` elapsed first
        """
        future = asyncio.get_running_loop().create_future()
        entry = (future, error)
        self._queue.append(entry)

        if self._state is AuthState.IDLE:
            self._state = AuthState.REFRESHING
            logger.info("Access token rejected; requesting a token refresh")
            if self._on_refresh_requested is not None:
                self._on_refresh_requested()
        else:
            logger.debug(f"Token refresh already in progress; {len(self._queue)} requests queued")

        try:
            if self.refresh_timeout is None:
                await future
            else:
                try:
                    await asyncio.wait_for(asyncio.shield(future), self.refresh_timeout)
                except asyncio.TimeoutError:
                    future.cancel()
                    raise AuthError(
                        f"Token refresh did not complete within {self.refresh_timeout}s",
                        error_code="AUTH_002",
                        context={"original_error": repr(error)},
                    ) from error
        finally:
            self._leave(entry)

    def _leave(self, entry: Tuple[asyncio.Future, BaseException]) -> None:
        if entry not in self._queue:
            return
        self._queue.remove(entry)
        # the last waiter gave up; the next rejection starts a fresh refresh
        if not self._queue and self._state is AuthState.REFRESHING:
            self._state = AuthState.IDLE
            logger.debug("All queued requests abandoned the token refresh; session is idle")

    def refresh_succeeded(self, token: Optional[str] = None) -> int:
        """Release every queued request for a retry; returns how many were released."""
        if token is not None:
            self._token = token
        return self._drain(reject=False)

    def refresh_failed(self) -> int:
        """Reject every queued request with its original error; returns how many were rejected."""
        return self._drain(reject=True)

    def _drain(self, reject: bool) -> int:
        self._state = AuthState.DRAINING
        waiters, self._queue = self._queue, []
        released = 0
        for future, error in waiters:
            if future.done():
                continue
            if reject:
                future.set_exception(error)
            else:
                future.set_result(None)
            released += 1
        self._state = AuthState.IDLE
        logger.debug(f"Token refresh {'failed' if reject else 'succeeded'}; released {released} queued requests")
        return released


__all__ = ["AuthState", "AuthSession"]
