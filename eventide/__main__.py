"""Command-line entry for eventide.

Exercises the calendar core without a UI: list the events visible in a month
grid or a date range, and add, show, update or delete stored events.
Occurrence ids printed by ``list`` are accepted anywhere an id is expected;
they always resolve to the base event.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from typing import Any, Optional

from pydantic import ValidationError

from . import _init_logging
from .calendar.datetime_utils import (
    day_bounds,
    end_of_day,
    format_timestamp,
    month_view_window,
    parse_timestamp,
    start_of_day,
)
from .calendar.models import CalendarEvent, RecurrenceFrequency, RecurrenceRule
from .config_loader import Config, load_config
from .core.config_manager import ConfigManager
from .core.timezone_utils import now_utc
from .domain.event_store import EventStore
from .exceptions import EventideError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def _add_event_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--title", required=required, help="Event title")
    parser.add_argument("--start", required=required, metavar="TIMESTAMP", help="ISO-8601 start")
    parser.add_argument("--end", metavar="TIMESTAMP", help="ISO-8601 end (optional for all-day)")
    parser.add_argument("--description", help="Event description")
    parser.add_argument("--color", help="Display color")
    parser.add_argument(
        "--all-day",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Mark as an all-day event",
    )
    parser.add_argument(
        "--frequency",
        choices=[f.value for f in RecurrenceFrequency],
        help="Recurrence frequency",
    )
    parser.add_argument("--interval", type=int, help="Repeat every N days/weeks/months")
    parser.add_argument(
        "--days",
        metavar="0,2,4",
        help="Comma separated weekdays for weekly rules (0 = Sunday)",
    )
    parser.add_argument("--day-of-month", type=int, help="Day of month for monthly rules")
    parser.add_argument("--until", metavar="DATE", help="Last day of the recurrence (inclusive)")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the eventide CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="eventide",
        description="Eventide - personal calendar core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  eventide list --month 2024-03
  eventide add --title Standup --start 2024-03-04T09:00:00Z --end 2024-03-04T09:15:00Z \\
      --frequency weekly --days 1,2,3,4,5
  eventide delete 1b2c...-occurrence-20240305090000
        """,
    )
    parser.add_argument("--config", metavar="PATH", help="YAML config file (default: ./eventide.yaml)")
    parser.add_argument("--store", metavar="PATH", help="Event store JSON file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List events visible in a period")
    list_parser.add_argument("--month", metavar="YYYY-MM", help="Month grid to show (default: current)")
    list_parser.add_argument("--from", dest="range_start", metavar="DATE", help="First day of range")
    list_parser.add_argument("--to", dest="range_end", metavar="DATE", help="Last day of range")
    list_parser.add_argument("--json", action="store_true", help="Print events as JSON")

    add_parser = sub.add_parser("add", help="Add an event")
    _add_event_fields(add_parser, required=True)

    show_parser = sub.add_parser("show", help="Show the base event behind an id")
    show_parser.add_argument("event_id")

    update_parser = sub.add_parser("update", help="Update the base event behind an id")
    update_parser.add_argument("event_id")
    _add_event_fields(update_parser, required=False)

    delete_parser = sub.add_parser("delete", help="Delete the base event behind an id")
    delete_parser.add_argument("event_id")

    return parser


def _parse_day(value: str) -> date:
    return parse_timestamp(value).date()


def _parse_month(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError as exc:
        raise ValueError(f"Invalid month {value!r}; expected YYYY-MM") from exc


def _resolve_period(args: argparse.Namespace, config: Config) -> tuple[datetime, datetime]:
    """Turn list arguments into an instant range covering whole days."""
    if args.range_start or args.range_end:
        first = _parse_day(args.range_start or args.range_end)
        last = _parse_day(args.range_end or args.range_start)
    else:
        month = _parse_month(args.month) if args.month else now_utc().date()
        first, last = month_view_window(month, config.week_starts_on)
    return day_bounds(first, last)


def _recurrence_from_args(
    args: argparse.Namespace, current: Optional[RecurrenceRule] = None
) -> Optional[dict[str, Any]]:
    """Rule fields given on the command line, merged over ``current`` if any.

    Returns None when no rule option was given.
    """
    fields: dict[str, Any] = {}
    if args.frequency is not None:
        fields["frequency"] = args.frequency
    if args.interval is not None:
        fields["interval"] = args.interval
    if args.days is not None:
        fields["daysOfWeek"] = [int(d) for d in args.days.split(",") if d.strip()]
    if args.day_of_month is not None:
        fields["dayOfMonth"] = args.day_of_month
    if args.until:
        fields["endDate"] = format_timestamp(parse_timestamp(args.until))
    if not fields:
        return None
    if current is None:
        return fields
    return {**current.model_dump(by_alias=True, exclude_none=True), **fields}


def _event_payload(
    args: argparse.Namespace,
    config: Optional[Config],
    current: Optional[CalendarEvent] = None,
) -> dict[str, Any]:
    """Collect the event fields given on the command line as wire keys.

    With ``current`` (an update), recurrence options are merged over its rule.
    """
    payload: dict[str, Any] = {}
    if args.title is not None:
        payload["title"] = args.title
    if args.description is not None:
        payload["description"] = args.description
    if args.color is not None:
        payload["color"] = args.color
    elif config is not None:
        payload["color"] = config.default_color
    if args.all_day is not None:
        payload["allDay"] = args.all_day

    all_day = bool(args.all_day)
    if args.start is not None:
        start = parse_timestamp(args.start)
        if all_day:
            start = start_of_day(start)
        payload["start"] = format_timestamp(start)
        if args.end is None and all_day:
            payload["end"] = format_timestamp(end_of_day(start))
    if args.end is not None:
        end = parse_timestamp(args.end)
        payload["end"] = format_timestamp(end_of_day(end) if all_day else end)

    recurrence = _recurrence_from_args(args, current.recurrence if current else None)
    if recurrence is not None:
        payload["recurrence"] = recurrence
    return payload


def _print_event_line(event: Any) -> None:
    print(f"{event.start}  {event.end}  {event.title}  [{event.id}]")


def _cmd_list(store: EventStore, args: argparse.Namespace, config: Config) -> int:
    view_start, view_end = _resolve_period(args, config)
    result = store.get_events_for_period(view_start, view_end)
    if args.json:
        print(json.dumps([event.to_wire() for event in result.events], indent=2))
    else:
        for event in result.events:
            _print_event_line(event)
    for failure in result.failures:
        print(f"Unable to display event {failure.event_id}: {failure.reason}", file=sys.stderr)
    return EXIT_OK


def _cmd_add(store: EventStore, args: argparse.Namespace, config: Config) -> int:
    payload = _event_payload(args, config)
    if "end" not in payload:
        print("--end is required for timed events", file=sys.stderr)
        return EXIT_FAILURE
    event = store.add_event(payload)
    print(event.id)
    return EXIT_OK


def _cmd_show(store: EventStore, args: argparse.Namespace) -> int:
    event = store.get_event_by_id(args.event_id)
    if event is None:
        print(f"No event {args.event_id}", file=sys.stderr)
        return EXIT_FAILURE
    print(json.dumps(event.to_wire(), indent=2))
    return EXIT_OK


def _cmd_update(store: EventStore, args: argparse.Namespace) -> int:
    current = store.get_event_by_id(args.event_id)
    if current is None:
        print(f"No event {args.event_id}", file=sys.stderr)
        return EXIT_FAILURE
    payload = _event_payload(args, None, current)
    if not payload:
        print("Nothing to update", file=sys.stderr)
        return EXIT_FAILURE
    event = store.update_event(args.event_id, payload)
    if event is None:
        print(f"No event {args.event_id}", file=sys.stderr)
        return EXIT_FAILURE
    print(event.id)
    return EXIT_OK


def _cmd_delete(store: EventStore, args: argparse.Namespace) -> int:
    if not store.delete_event(args.event_id):
        print(f"No event {args.event_id}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Run the eventide CLI and return the process exit code."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    overrides = ConfigManager().load_full_config()
    if args.store:
        overrides["store_path"] = args.store

    _init_logging(overrides.get("log_level"))
    configure_logging(debug_mode=args.debug)

    try:
        config = load_config(args.config, overrides)
        logging.getLogger().setLevel(logging.DEBUG if args.debug else config.log_level)
        store = EventStore(config.store_path, settings=config)

        if args.command == "list":
            return _cmd_list(store, args, config)
        if args.command == "add":
            return _cmd_add(store, args, config)
        if args.command == "show":
            return _cmd_show(store, args)
        if args.command == "update":
            return _cmd_update(store, args)
        return _cmd_delete(store, args)
    except ValidationError as exc:
        print(f"Invalid event: {exc}", file=sys.stderr)
    except (EventideError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
