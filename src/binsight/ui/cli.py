from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from binsight.app import identify_artifacts, open_property_store, run_notification_pass
from binsight.config import ConfigurationError, configure_logging
from binsight.domain.model import ArtifactLocation
from binsight.domain.time_windows import TimeWindow, parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from types import FrameType

log = logging.getLogger(__name__)


def _timestamp(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 timestamp: {value!r}") from None


def _hours(value: str) -> timedelta:
    hours = float(value)
    if hours < 0:
        raise argparse.ArgumentTypeError("lookback hours must be non-negative")
    return timedelta(hours=hours)


def _seconds(value: str) -> float:
    seconds = float(value)
    if seconds <= 0:
        raise argparse.ArgumentTypeError("deadline must be positive")
    return seconds


def _location(value: str) -> ArtifactLocation:
    try:
        return ArtifactLocation.parse(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid location: {value!r}") from None


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="binsight",
        description="Identify repository artifacts and reconcile service notifications",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    identify = subparsers.add_parser(
        "identify",
        help="Resolve external identities for repository items",
    )
    identify.add_argument(
        "locations",
        nargs="+",
        type=_location,
        metavar="REPO/PATH",
        help="Item or folder to inspect; a bare repository key inspects the whole repository",
    )

    notifications = subparsers.add_parser(
        "notifications",
        help="Reconcile intelligence service notifications onto repository items",
    )
    notifications.add_argument(
        "--start",
        type=_timestamp,
        help="Earliest notification creation time (ISO-8601, UTC unless an offset is given)",
    )
    notifications.add_argument(
        "--end",
        type=_timestamp,
        help="Latest notification creation time; defaults to now",
    )
    notifications.add_argument(
        "--lookback-hours",
        dest="lookback",
        type=_hours,
        help="Cover this many hours before the end (the later of start and lookback wins)",
    )
    notifications.add_argument(
        "--deadline",
        type=_seconds,
        help="Seconds after which unfinished notifications are abandoned",
    )

    args = parser.parse_args(list(argv))
    if args.command == "notifications":
        try:
            args.window = TimeWindow(start=args.start, end=args.end, lookback=args.lookback)
        except ValueError as exc:
            parser.error(str(exc))
    return args


def _identify(locations: Sequence[ArtifactLocation]) -> None:
    store = open_property_store()
    items: list[ArtifactLocation] = []
    for location in locations:
        found = store.iter_locations(location)
        if not found:
            log.warning("No items recorded under %s", location)
        items.extend(found)
    result = identify_artifacts(
        dict.fromkeys(items),
        metadata_reader=store,
        manifest_locator=store,
        writer=store,
    )
    for location, identity in result.identities.items():
        log.info("%s -> %s", location, identity.external_id)


def _reconcile(args: argparse.Namespace) -> None:
    summary = run_notification_pass(args.window, deadline=args.deadline)
    if summary.timed_out:
        log.warning("Notification pass hit its deadline; results are partial")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "identify":
            _identify(args.locations)
        else:
            _reconcile(args)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
