"""
Neurio daemon entry point: single-threaded poll loop.

Each poll cycle goes Idle -> Fetching -> Publishing -> Idle:
1. Reset the receive buffer.
2. Stream ``/current-sample`` from the sensor into the buffer.
3. Extract the channel readings and write them to the variable store.
4. Record the outcome in the health file and wait ``poll_interval_s``.

Failures in any step abort only the current cycle; the loop keeps
polling until SIGTERM or SIGINT sets the shutdown event, which is checked
once at the start of every cycle. The signal handler never touches the
buffer, the store or the network.

The only fatal conditions are invalid settings and failing to open the
variable store at startup; both are logged and exit with status 1.

CHANGELOG:
- 2026-03-05: Initial creation (STORY-109)
- 2026-03-06: Command-line flags override environment settings (STORY-110)
- 2026-03-09: Configure logging before loading settings; invalid settings exit 1 (STORY-111)

TODO:
- None
"""

from __future__ import annotations

import argparse
import enum
import logging
import signal
import sys
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import FrameType

import httpx
from pydantic import ValidationError

from neurio.src.buffer import ReceiveBuffer
from neurio.src.config import NeurioSettings
from neurio.src.errors import (
    AllocationFailure,
    ParseFailure,
    SchemaFailure,
    StoreError,
    TransportFailure,
)
from neurio.src.extractor import VARIABLE_NAMES, extract_snapshot, resolve_bindings
from neurio.src.health import HealthWriter
from neurio.src.logging_config import setup_logging
from neurio.src.poller import build_client, fetch_snapshot
from neurio.src.varstore import VarStore

logger = logging.getLogger(__name__)


class CycleOutcome(enum.Enum):
    """How a single poll cycle ended."""

    OK = "ok"
    TRANSPORT_FAILURE = "transport_failure"
    ALLOCATION_FAILURE = "allocation_failure"
    PARSE_FAILURE = "parse_failure"
    SCHEMA_FAILURE = "schema_failure"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass
class PollState:
    """Everything the poll loop owns for the lifetime of the process.

    Built once in :func:`main` and passed explicitly to the loop and to
    the signal handler.

    Attributes:
        url: Sensor current-sample URL.
        auth: Basic auth token, empty for none.
        client: HTTP client reused across polls.
        store: Variable store the readings are written to.
        bindings: Variable name to store handle, resolved at startup.
        buffer: Receive buffer reused across polls.
        shutdown: Set by the signal handler to stop the loop.
    """

    url: str
    auth: str
    client: httpx.Client
    store: VarStore
    bindings: Mapping[str, int]
    buffer: ReceiveBuffer = field(default_factory=ReceiveBuffer)
    shutdown: threading.Event = field(default_factory=threading.Event)


def poll_once(state: PollState) -> CycleOutcome:
    """Run one fetch-parse-publish cycle.

    Expected failures are logged and mapped to a :class:`CycleOutcome`;
    they never propagate.
    """
    state.buffer.reset()

    try:
        received = fetch_snapshot(
            state.client, state.url, state.buffer, auth=state.auth
        )
    except AllocationFailure as exc:
        logger.warning("Poll aborted, allocation failure: %s", exc)
        return CycleOutcome.ALLOCATION_FAILURE
    except TransportFailure:
        # Already logged with full context by the poller.
        return CycleOutcome.TRANSPORT_FAILURE

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Received %d bytes: %s",
            received,
            state.buffer.data.decode("utf-8", errors="replace"),
        )

    try:
        result = extract_snapshot(
            state.buffer.data, state.bindings, state.store.set
        )
    except ParseFailure as exc:
        logger.warning("Poll discarded, parse failure: %s", exc)
        return CycleOutcome.PARSE_FAILURE
    except SchemaFailure as exc:
        logger.warning("Poll discarded, schema failure: %s", exc)
        return CycleOutcome.SCHEMA_FAILURE

    logger.debug(
        "Published %d values (%d skipped)",
        result.published,
        len(result.skipped),
    )
    return CycleOutcome.OK


def run(
    state: PollState,
    interval_s: float,
    health: HealthWriter | None = None,
) -> None:
    """Poll until ``state.shutdown`` is set.

    The shutdown event is checked before every cycle and the inter-poll
    wait returns early when it is set.
    """
    while not state.shutdown.is_set():
        try:
            outcome = poll_once(state)
        except Exception:
            logger.exception("Unexpected error in poll loop")
            outcome = CycleOutcome.UNEXPECTED_ERROR

        if health is not None:
            health.record_cycle(outcome.value, outcome is CycleOutcome.OK)

        state.shutdown.wait(timeout=interval_s)


def _make_signal_handler(
    state: PollState,
) -> Callable[[int, FrameType | None], None]:
    """Build a SIGTERM/SIGINT handler bound to *state*."""

    def _signal_handler(signum: int, _frame: FrameType | None) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, initiating graceful shutdown", sig_name)
        state.shutdown.set()

    return _signal_handler


def build_parser() -> argparse.ArgumentParser:
    """Command-line parser. ``-h`` is handled manually to exit with 1."""
    parser = argparse.ArgumentParser(
        prog="neurio",
        description="Neurio CT sensor interface",
        add_help=False,
    )
    parser.add_argument("-v", dest="verbose", action="store_true", help="verbose mode")
    parser.add_argument("-h", dest="help", action="store_true", help="display this help")
    parser.add_argument("-u", dest="address", metavar="address", help="neurio sensor IP address")
    parser.add_argument("-a", dest="auth", metavar="basic_auth", help="neurio basic auth")
    return parser


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse *argv*, printing usage and exiting with 1 when asked for help
    or when no arguments are given at all."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not argv or args.help:
        parser.print_help(sys.stderr)
        raise SystemExit(1)
    return args


def _settings_overrides(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.address:
        overrides["neurio_address"] = args.address
    if args.auth:
        overrides["neurio_auth"] = args.auth
    if args.verbose:
        overrides["verbose"] = True
    return overrides


def _open_store(settings: NeurioSettings) -> VarStore:
    """Open the variable store and declare the consumption variables.

    Raises:
        SystemExit: With status 1 if the store is unusable.
    """
    try:
        store = VarStore(settings.store_path)
        if settings.declare_vars:
            for name in VARIABLE_NAMES:
                store.declare(name)
    except StoreError:
        logger.exception("Cannot use variable store at %s", settings.store_path)
        raise SystemExit(1) from None
    return store


def main(argv: Sequence[str] | None = None) -> None:
    """Neurio daemon entry point.

    Parses flags, loads settings, opens the variable store, resolves the
    variable bindings, registers signal handlers and runs the poll loop
    until a shutdown signal arrives.
    """
    args = parse_args(sys.argv[1:] if argv is None else argv)

    setup_logging()

    try:
        settings = NeurioSettings(**_settings_overrides(args))
    except ValidationError:
        logger.exception("Invalid Neurio daemon configuration")
        raise SystemExit(1) from None

    if settings.verbose:
        setup_logging(logging.DEBUG)

    store = _open_store(settings)
    bindings = resolve_bindings(store)

    state = PollState(
        url=settings.sensor_url,
        auth=settings.neurio_auth,
        client=build_client(settings.http_timeout_s),
        store=store,
        bindings=bindings,
    )
    health = HealthWriter(settings.health_file_path)

    handler = _make_signal_handler(state)
    signal.signal(signal.SIGTERM, handler)
    signal.signal(signal.SIGINT, handler)

    logger.info(
        "Neurio daemon starting -- polling %s every %ss (timeout %ss), "
        "%d/%d variables bound",
        state.url,
        settings.poll_interval_s,
        settings.http_timeout_s,
        len(bindings),
        len(VARIABLE_NAMES),
    )

    try:
        run(state, settings.poll_interval_s, health)
    finally:
        state.client.close()
        store.close()
        logger.info("Neurio daemon shut down cleanly")


if __name__ == "__main__":
    main()
