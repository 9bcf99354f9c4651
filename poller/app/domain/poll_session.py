"""Poll session: drives repeated status checks for one upload until a terminal state.

The session is an explicit state machine. `tick()` is its single entry point and is
invoked by the scheduler; it makes at most one status check and then either schedules
the next tick, or moves to a terminal state and stops.

Ordering:
  - At most one check is outstanding and at most one tick is pending per session, so a
    stale `processing` answer can never land after a later verdict.
  - The attempt ceiling is the only give-up timer: the tick after `max_attempts` checks
    moves to `error` without a network call.

Cancellation:
  - `cancel()` drops the pending tick. A check already in flight is allowed to finish,
    but its result is discarded and the state is left untouched.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable

from loguru import logger

from poller.app.constants import ErrorReason, RESOLVER_STATUSES, SessionState, TERMINAL_STATES
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import PollerConfig, StatusTransition
from poller.app.ports.scheduler import ScheduledCall, Scheduler
from poller.app.ports.status_client import StatusClient, StatusTransportError

TransitionListener = Callable[[StatusTransition], None]


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class PollSession:
    def __init__(
        self,
        resource_id: str,
        client: StatusClient,
        scheduler: Scheduler,
        config: PollerConfig | None = None,
        *,
        on_transition: TransitionListener | None = None,
    ) -> None:
        if not isinstance(resource_id, str) or not resource_id.strip():
            raise ValueError("resource_id must be a non-empty string")
        self._resource_id = resource_id
        self._client = client
        self._scheduler = scheduler
        self._config = config or PollerConfig()
        self._on_transition = on_transition

        self._state = SessionState.PROCESSING
        self._attempts = 0
        self._pending: ScheduledCall | None = None
        self._in_flight = False
        self._started = False
        self._cancelled = False
        self._error_reason: str | None = None
        self._done = asyncio.Event()

    @property
    def resource_id(self) -> str:
        return self._resource_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def error_reason(self) -> str | None:
        return self._error_reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def has_pending_retry(self) -> bool:
        return self._pending is not None

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    async def start(self) -> None:
        """Publish `processing` and run the first check right away."""
        if self._started:
            raise RuntimeError("poll session already started")
        self._started = True
        _log(
            "session_started",
            public_id=self._resource_id,
            retry_interval_ms=self._config.retry_interval_ms,
            max_attempts=self._config.max_attempts,
        )
        self._publish()
        await self.tick()

    async def tick(self) -> None:
        if self._cancelled or self.is_terminal or self._in_flight or self._pending is not None:
            return

        if self._attempts >= self._config.max_attempts:
            _log("attempts_exhausted", public_id=self._resource_id, attempts=self._attempts)
            self._fail(ErrorReason.ATTEMPTS_EXHAUSTED)
            return

        self._attempts += 1
        attempt = self._attempts
        _log("session_attempt", public_id=self._resource_id, attempt=attempt)

        self._in_flight = True
        try:
            status = await self._client.check_status(self._resource_id)
        except StatusTransportError as exc:
            if self._discard_if_cancelled(attempt):
                return
            logger.bind(
                service_name=SERVICE_NAME,
                event="status_check_failed",
                public_id=self._resource_id,
                attempt=attempt,
            ).warning("status check failed: {}", exc)
            self._fail(ErrorReason.TRANSPORT)
            return
        except Exception:
            if self._discard_if_cancelled(attempt):
                return
            logger.bind(
                service_name=SERVICE_NAME,
                event="status_check_failed",
                public_id=self._resource_id,
                attempt=attempt,
            ).exception("status check raised unexpectedly")
            self._fail(ErrorReason.TRANSPORT)
            return
        finally:
            self._in_flight = False

        if self._discard_if_cancelled(attempt):
            return

        if status not in RESOLVER_STATUSES:
            logger.bind(
                service_name=SERVICE_NAME,
                event="status_check_failed",
                public_id=self._resource_id,
                attempt=attempt,
            ).warning("unexpected status {!r}", status)
            self._fail(ErrorReason.UNEXPECTED_STATUS)
            return

        if status == SessionState.PROCESSING.value:
            self._pending = self._scheduler.call_later(
                self._config.retry_interval_seconds,
                self._on_timer,
            )
            return

        self._transition(SessionState(status))

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._done.set()
        _log(
            "session_cancelled",
            public_id=self._resource_id,
            state=self._state.value,
            attempts=self._attempts,
        )

    async def wait(self) -> SessionState:
        """Block until the session is terminal or cancelled; return the last state."""
        await self._done.wait()
        return self._state

    async def _on_timer(self) -> None:
        self._pending = None
        await self.tick()

    def _discard_if_cancelled(self, attempt: int) -> bool:
        if not self._cancelled:
            return False
        _log("session_result_discarded", public_id=self._resource_id, attempt=attempt)
        return True

    def _fail(self, reason: str) -> None:
        self._error_reason = reason
        self._transition(SessionState.ERROR)

    def _transition(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        _log(
            "session_transition",
            public_id=self._resource_id,
            previous=previous.value,
            state=state.value,
            attempt=self._attempts,
            error_reason=self._error_reason,
        )
        if state in TERMINAL_STATES:
            self._done.set()
        if state != previous:
            self._publish()

    def _publish(self) -> None:
        if self._on_transition is None:
            return
        self._on_transition(
            StatusTransition(
                resource_id=self._resource_id,
                state=self._state,
                attempt=self._attempts,
                error_reason=self._error_reason,
            )
        )
