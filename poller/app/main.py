import argparse
import asyncio
import signal
import sys

from loguru import logger

from poller.app.composition import create_poller_dependencies
from poller.app.config.settings import Settings
from poller.app.constants import SessionState
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import StatusTransition

EXIT_CODES = {
    SessionState.APPROVED: 0,
    SessionState.REJECTED: 1,
    SessionState.ERROR: 2,
    SessionState.TIMEOUT: 2,
}
EXIT_CANCELLED = 130


def _log(event: str, **kwargs) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _on_transition(transition: StatusTransition) -> None:
    _log(
        "status_observed",
        public_id=transition.resource_id,
        state=transition.state.value,
        attempt=transition.attempt,
        error_reason=transition.error_reason,
    )


async def run_poller(public_id: str, settings: Settings) -> SessionState:
    dependencies = create_poller_dependencies(settings)
    await dependencies.connect()
    poller = dependencies.poller
    poller.subscribe(_on_transition)

    def request_reset() -> None:
        _log("shutdown_signal", public_id=public_id)
        poller.reset()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_reset)
        except NotImplementedError:
            pass

    try:
        await poller.upload_completed(public_id)
        return await poller.wait()
    finally:
        await dependencies.close()


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll the moderation status of an uploaded asset until it settles")
    parser.add_argument("public_id")
    parser.add_argument("--retry-interval-ms", type=int, default=None)
    parser.add_argument("--max-attempts", type=int, default=None)
    parser.add_argument("--base-url", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    overrides = {
        "retry_interval_ms": args.retry_interval_ms,
        "max_attempts": args.max_attempts,
        "status_api_base_url": args.base_url,
    }
    settings = Settings().model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )
    try:
        final_state = asyncio.run(run_poller(args.public_id, settings))
    except KeyboardInterrupt:
        _log("poller_interrupted")
        return EXIT_CANCELLED
    except Exception as e:
        logger.exception("poller failed: {}", e)
        raise
    _log("poller_finished", public_id=args.public_id, state=final_state.value)
    return EXIT_CODES.get(final_state, EXIT_CANCELLED)


if __name__ == "__main__":
    sys.exit(main())
