"""Unit tests for the PollSession state machine, driven by a manual scheduler."""
from __future__ import annotations

import asyncio

import pytest

from poller.app.constants import ErrorReason, SessionState
from poller.app.domain.models import PollerConfig, StatusTransition
from poller.app.domain.poll_session import PollSession
from poller.app.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler
from poller.app.infrastructure.scheduling.manual_scheduler import ManualScheduler
from tests.conftest import GatedStatusClient, ScriptedStatusClient, transport_error

INTERVAL_S = 3.0
CONFIG = PollerConfig(retry_interval_ms=3000, max_attempts=30)


def _session(client, scheduler, config=CONFIG, transitions=None) -> PollSession:
    return PollSession(
        "kid-safe-platform/abc123",
        client,
        scheduler,
        config,
        on_transition=transitions.append if transitions is not None else None,
    )


@pytest.mark.asyncio
async def test_reaches_approved_on_attempt_three_after_two_intervals():
    client = ScriptedStatusClient(["processing", "processing", "approved"])
    scheduler = ManualScheduler()
    transitions: list[StatusTransition] = []
    session = _session(client, scheduler, transitions=transitions)

    await session.start()
    assert session.state == SessionState.PROCESSING
    assert len(client.calls) == 1

    await scheduler.advance(INTERVAL_S)
    assert session.state == SessionState.PROCESSING
    assert len(client.calls) == 2

    await scheduler.advance(INTERVAL_S)
    assert session.state == SessionState.APPROVED
    assert session.attempts == 3
    assert len(client.calls) == 3

    await scheduler.advance(INTERVAL_S * 10)
    assert len(client.calls) == 3
    assert scheduler.pending == 0
    assert [t.state for t in transitions] == [SessionState.PROCESSING, SessionState.APPROVED]


@pytest.mark.asyncio
async def test_rejected_is_terminal_and_stops_scheduling():
    client = ScriptedStatusClient(["processing", "rejected"])
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    await session.start()
    await scheduler.run_until_idle()

    assert session.state == SessionState.REJECTED
    assert len(client.calls) == 2
    assert await session.wait() == SessionState.REJECTED


@pytest.mark.asyncio
async def test_never_tagged_errors_at_attempt_max_plus_one_after_max_calls():
    max_attempts = 5
    client = ScriptedStatusClient(["processing"])
    scheduler = ManualScheduler()
    transitions: list[StatusTransition] = []
    session = _session(
        client,
        scheduler,
        PollerConfig(retry_interval_ms=3000, max_attempts=max_attempts),
        transitions,
    )

    await session.start()
    for _ in range(max_attempts - 1):
        await scheduler.advance(INTERVAL_S)
        assert session.state == SessionState.PROCESSING

    assert len(client.calls) == max_attempts
    assert session.has_pending_retry

    await scheduler.advance(INTERVAL_S)

    assert session.state == SessionState.ERROR
    assert session.error_reason == ErrorReason.ATTEMPTS_EXHAUSTED
    assert len(client.calls) == max_attempts
    assert scheduler.pending == 0
    assert transitions[-1].error_reason == ErrorReason.ATTEMPTS_EXHAUSTED


@pytest.mark.asyncio
async def test_default_config_gives_up_after_thirty_calls():
    client = ScriptedStatusClient(["processing"])
    scheduler = ManualScheduler()
    session = _session(client, scheduler, PollerConfig())

    await session.start()
    await scheduler.run_until_idle()

    assert session.state == SessionState.ERROR
    assert len(client.calls) == 30
    assert scheduler.now == pytest.approx(30 * 3.0)


@pytest.mark.asyncio
async def test_transport_failure_errors_immediately_without_retry():
    client = ScriptedStatusClient(["processing", transport_error()])
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    await session.start()
    await scheduler.advance(INTERVAL_S)

    assert session.state == SessionState.ERROR
    assert session.error_reason == ErrorReason.TRANSPORT
    assert len(client.calls) == 2
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_unexpected_client_exception_ends_session_in_error():
    client = ScriptedStatusClient(["processing", RuntimeError("boom")])
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    await session.start()
    await scheduler.advance(INTERVAL_S)

    assert session.state == SessionState.ERROR
    assert session.error_reason == ErrorReason.TRANSPORT
    assert not session.in_flight
    assert scheduler.pending == 0
    assert await asyncio.wait_for(session.wait(), timeout=1.0) == SessionState.ERROR


@pytest.mark.asyncio
async def test_unknown_status_value_ends_session_in_error():
    client = ScriptedStatusClient(["processing", "quarantined"])
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    await session.start()
    await scheduler.advance(INTERVAL_S)

    assert session.state == SessionState.ERROR
    assert session.error_reason == ErrorReason.UNEXPECTED_STATUS
    assert len(client.calls) == 2
    assert await asyncio.wait_for(session.wait(), timeout=1.0) == SessionState.ERROR


@pytest.mark.asyncio
async def test_unexpected_exception_after_cancel_is_discarded():
    client = GatedStatusClient(RuntimeError("boom"))
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    task = asyncio.create_task(session.start())
    await client.started.wait()
    session.cancel()
    client.release()
    await task

    assert session.state == SessionState.PROCESSING
    assert session.error_reason is None


@pytest.mark.asyncio
async def test_unexpected_exception_on_real_scheduler_does_not_hang_wait():
    client = ScriptedStatusClient(["processing", RuntimeError("boom")])
    scheduler = AsyncioScheduler()
    session = _session(client, scheduler, config=PollerConfig(retry_interval_ms=0, max_attempts=5))

    await session.start()
    final_state = await asyncio.wait_for(session.wait(), timeout=1.0)
    await scheduler.aclose()

    assert final_state == SessionState.ERROR
    assert session.is_terminal


@pytest.mark.asyncio
async def test_timeout_answer_is_terminal():
    client = ScriptedStatusClient(["timeout"])
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    await session.start()

    assert session.state == SessionState.TIMEOUT
    assert session.is_terminal
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_cancel_mid_delay_never_issues_next_call_or_mutates_state():
    client = ScriptedStatusClient(["processing", "approved"])
    scheduler = ManualScheduler()
    transitions: list[StatusTransition] = []
    session = _session(client, scheduler, transitions=transitions)

    await session.start()
    await scheduler.advance(INTERVAL_S / 2)
    session.cancel()
    await scheduler.advance(INTERVAL_S * 5)

    assert len(client.calls) == 1
    assert session.state == SessionState.PROCESSING
    assert session.cancelled
    assert not session.has_pending_retry
    assert [t.state for t in transitions] == [SessionState.PROCESSING]
    assert await session.wait() == SessionState.PROCESSING


@pytest.mark.asyncio
async def test_cancel_while_in_flight_discards_result():
    client = GatedStatusClient(answer="approved")
    scheduler = ManualScheduler()
    transitions: list[StatusTransition] = []
    session = _session(client, scheduler, transitions=transitions)

    task = asyncio.create_task(session.start())
    await client.started.wait()
    assert session.in_flight

    session.cancel()
    client.release()
    await task

    assert session.state == SessionState.PROCESSING
    assert [t.state for t in transitions] == [SessionState.PROCESSING]
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_cancel_while_in_flight_discards_transport_failure():
    client = GatedStatusClient(answer=transport_error())
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    task = asyncio.create_task(session.start())
    await client.started.wait()
    session.cancel()
    client.release()
    await task

    assert session.state == SessionState.PROCESSING
    assert session.error_reason is None


@pytest.mark.asyncio
async def test_tick_is_noop_while_check_outstanding():
    client = GatedStatusClient(answer="processing")
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    task = asyncio.create_task(session.start())
    await client.started.wait()

    await session.tick()
    assert len(client.calls) == 1

    client.release()
    await task
    assert session.has_pending_retry


@pytest.mark.asyncio
async def test_tick_is_noop_while_retry_pending():
    client = ScriptedStatusClient(["processing"])
    scheduler = ManualScheduler()
    session = _session(client, scheduler)

    await session.start()
    await session.tick()
    await session.tick()

    assert len(client.calls) == 1
    assert scheduler.pending == 1


@pytest.mark.asyncio
async def test_start_twice_raises():
    session = _session(ScriptedStatusClient(["approved"]), ManualScheduler())
    await session.start()
    with pytest.raises(RuntimeError):
        await session.start()


@pytest.mark.asyncio
async def test_independent_sessions_poll_without_interference():
    scheduler = ManualScheduler()
    client_a = ScriptedStatusClient(["processing", "approved"])
    client_b = ScriptedStatusClient(["processing", "processing", "processing", "rejected"])
    session_a = PollSession("a", client_a, scheduler, CONFIG)
    session_b = PollSession("b", client_b, scheduler, CONFIG)

    await session_a.start()
    await session_b.start()
    await scheduler.run_until_idle()

    assert session_a.state == SessionState.APPROVED
    assert session_b.state == SessionState.REJECTED
    assert client_a.calls == ["a", "a"]
    assert client_b.calls == ["b"] * 4


def test_session_requires_resource_id():
    with pytest.raises(ValueError):
        PollSession("", ScriptedStatusClient(["approved"]), ManualScheduler())


@pytest.mark.parametrize(
    "kwargs",
    [
        {"retry_interval_ms": -1},
        {"max_attempts": 0},
        {"retry_interval_ms": 2.5},
    ],
)
def test_poller_config_validation(kwargs):
    with pytest.raises(ValueError):
        PollerConfig(**kwargs)


def test_poller_config_defaults():
    config = PollerConfig()
    assert config.max_attempts == 30
    assert config.retry_interval_seconds == 3.0
