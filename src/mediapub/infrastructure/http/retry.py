"""Bounded retry around the transport executor with pluggable backoff."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from mediapub.domain.entities.backoff import BackoffPolicy
from mediapub.domain.entities.errors import (
    HttpStatusError,
    TransportError,
    is_server_fault,
)
from mediapub.domain.entities.http import RequestParams, TransportResponse
from mediapub.domain.ports.http import RoundTripPort

log = structlog.get_logger(__name__)


@dataclass
class _RetryState:
    """Mutable per-call retry bookkeeping; discarded when the call ends."""

    tries: int
    retries_left: int


class RetryController:
    """Wraps a round trip and retries server-side faults.

    **Retried:** ``TransportError`` and HTTP 5xx, while retry budget is
    left.  Everything else (success, 4xx, decode errors) ends the call
    after the current attempt, so one ``fetch`` issues at most
    ``retries + 1`` round trips.

    **Backoff:** the policy is validated before the first attempt; an
    invalid policy raises ``ConfigError`` without any request.  Before
    retry *n* the controller sleeps ``schedule(tries + n)`` milliseconds.
    """

    def __init__(
        self,
        roundtrip: RoundTripPort,
        policy: BackoffPolicy | None = None,
    ) -> None:
        self._roundtrip = roundtrip
        self._policy = policy or BackoffPolicy()

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    async def fetch(
        self,
        params: RequestParams,
        policy: BackoffPolicy | None = None,
    ) -> TransportResponse:
        """Issue *params*, retrying server-side faults per *policy*."""
        policy = (policy or self._policy).validated()
        schedule = policy.schedule()
        state = _RetryState(tries=policy.tries, retries_left=policy.retries)

        while True:
            try:
                return await self._roundtrip(params)
            except (TransportError, HttpStatusError) as exc:
                if not is_server_fault(exc) or state.retries_left <= 0:
                    raise
                state.retries_left -= 1
                state.tries += 1
                delay_ms = schedule(state.tries)
                log.info(
                    "http_retry",
                    url=params.url,
                    error=str(exc),
                    attempt=state.tries,
                    retries_left=state.retries_left,
                    delay_ms=delay_ms,
                )
                await asyncio.sleep(delay_ms / 1000)
