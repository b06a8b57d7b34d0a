"""Command-line entry for eventcal_lite.

Expands one event definition over a query window and prints the occurrences
as JSON, applying the same window and limit policies as the query layer.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import Optional

from . import _init_logging
from .config_loader import Config, load_config
from .event_query import build_payload, expand_events, parse_query_range, sanitize_limit
from .lite_exceptions import LiteQueryValidationError
from .lite_logging import configure_lite_logging
from .meta_loader import (
    META_ALL_DAY,
    META_END,
    META_EXDATES,
    META_RDATES,
    META_RRULE,
    META_START,
    encode_datetime_array,
    rule_from_meta,
)

logger = logging.getLogger(__name__)


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for eventcal_lite CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="eventcal_lite",
        description="Expand a recurring event into concrete occurrences",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m eventcal_lite --start "2024-01-01 09:00:00" --end "2024-01-01 10:00:00" \\
      --rrule "FREQ=WEEKLY;COUNT=4" --range-start 2024-01-01 --range-end 2024-01-31
  python -m eventcal_lite --start "2024-01-01 09:00:00" --rrule "RRULE:FREQ=DAILY" \\
      --exdate "2024-01-02 09:00:00" --range-start 2024-01-01 --range-end 2024-01-07
        """,
    )

    parser.add_argument("--start", required=True, help="Event start (YYYY-MM-DD HH:MM:SS, site timezone)")
    parser.add_argument("--end", help="Event end (YYYY-MM-DD HH:MM:SS, site timezone)")
    parser.add_argument("--rrule", default="", help="Recurrence rule, optionally prefixed RRULE:")
    parser.add_argument("--exdate", action="append", default=[], metavar="DATETIME", help="Exception date (repeatable)")
    parser.add_argument("--rdate", action="append", default=[], metavar="DATETIME", help="Addition date (repeatable)")
    parser.add_argument("--all-day", action="store_true", help="Mark the event as all-day")
    parser.add_argument("--event-id", default="event", help="Identifier echoed in the output")
    parser.add_argument("--range-start", required=True, help="Query window start (ISO8601 or Y-m-d)")
    parser.add_argument("--range-end", required=True, help="Query window end (ISO8601 or Y-m-d)")
    parser.add_argument("--limit", help="Maximum number of occurrences to print")
    parser.add_argument("--timezone", help="Site timezone (overrides config and EVENTCAL_TIMEZONE)")
    parser.add_argument("--config", metavar="PATH", help="Path to a YAML/JSON config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def run(argv: Optional[list[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    args = _create_parser().parse_args(argv)

    config = load_config(args.config)
    if args.timezone:
        config = Config.from_dict({**dataclasses.asdict(config), "timezone": args.timezone})

    _init_logging("DEBUG" if args.debug else config.log_level)
    configure_lite_logging(debug_mode=args.debug, log_level=config.log_level)

    tz = config.tzinfo
    meta = {
        META_START: args.start,
        META_END: args.end,
        META_RRULE: args.rrule,
        META_EXDATES: encode_datetime_array(args.exdate, tz),
        META_RDATES: encode_datetime_array(args.rdate, tz),
        META_ALL_DAY: args.all_day,
    }

    try:
        range_start, range_end = parse_query_range(args.range_start, args.range_end, config)
        limit = sanitize_limit(args.limit, config.max_limit)
    except LiteQueryValidationError as e:
        print(f"error: {e.code}: {e.message}", file=sys.stderr)
        return 2

    rule = rule_from_meta(meta, tz)
    items = expand_events({args.event_id: rule}, range_start, range_end)
    payload = build_payload(range_start, range_end, items, limit)

    logger.debug("Expanded %s into %d occurrences", args.event_id, payload["count"])
    print(json.dumps(payload, indent=2))
    return 0


def main() -> None:
    """Console-script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
