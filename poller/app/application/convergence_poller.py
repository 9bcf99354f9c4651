from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from poller.app.constants import SessionState, TERMINAL_STATES
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import PollerConfig, StatusTransition
from poller.app.domain.poll_session import PollSession, TransitionListener
from poller.app.ports.scheduler import Scheduler
from poller.app.ports.status_client import StatusClient


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class ConvergencePoller:
    """
    Upload-widget controller: tracks idle/uploading itself and hands polling to one PollSession.

    idle -> uploading -> processing -> terminal; reset() returns to idle from anywhere and
    cancels the active session. A new upload needs a reset first once a session has
    reached a terminal state. Listeners receive every state change of the active session;
    changes coming from a replaced session are ignored.
    """

    def __init__(
        self,
        client: StatusClient,
        scheduler: Scheduler,
        config: PollerConfig | None = None,
    ) -> None:
        self._client = client
        self._scheduler = scheduler
        self._config = config or PollerConfig()
        self._state = SessionState.IDLE
        self._session: PollSession | None = None
        self._listeners: list[TransitionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> PollSession | None:
        return self._session

    @property
    def config(self) -> PollerConfig:
        return self._config

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_upload(self) -> None:
        if self._state != SessionState.IDLE:
            raise RuntimeError(f"cannot begin upload in state {self._state.value}; reset first")
        self._set_state(StatusTransition(resource_id=None, state=SessionState.UPLOADING))

    async def upload_completed(self, resource_id: str) -> PollSession:
        """Start polling for a finished upload. Returns after the first status check."""
        if self._state not in (SessionState.IDLE, SessionState.UPLOADING):
            raise RuntimeError(f"cannot start polling in state {self._state.value}; reset first")

        session = PollSession(
            resource_id,
            self._client,
            self._scheduler,
            self._config,
            on_transition=lambda transition: self._on_session_transition(session, transition),
        )
        self._session = session
        await session.start()
        return session

    def reset(self) -> None:
        session = self._session
        self._session = None
        if session is not None:
            session.cancel()
        if self._state != SessionState.IDLE:
            _log("poller_reset", previous=self._state.value)
            self._set_state(StatusTransition(resource_id=None, state=SessionState.IDLE))

    async def wait(self) -> SessionState:
        """Wait for the active session to finish or be cancelled; return the poller state."""
        session = self._session
        if session is not None:
            await session.wait()
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def _on_session_transition(self, session: PollSession, transition: StatusTransition) -> None:
        if session is not self._session:
            return
        self._set_state(transition)

    def _set_state(self, transition: StatusTransition) -> None:
        self._state = transition.state
        for listener in list(self._listeners):
            try:
                listener(transition)
            except Exception as exc:
                logger.exception("status listener failed: {}", exc)
