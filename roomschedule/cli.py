"""
CLI (Command Line Interface).

Quick terminal commands, e.g.:

    roomschedule rooms ARC
    roomschedule rooms ARC --room 1
    roomschedule schedule ARC 105 --free
    roomschedule suggest allison
    roomschedule interactive

Exit codes:
- 0  success, including "nothing found"
- 1  missing input or a failed remote query
- 2  missing/invalid configuration

Note:
- The interactive UI lives in roomschedule/interactive.py
- Connection settings come from the environment (see roomschedule/config.py)
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape

from roomschedule import state as st
from roomschedule.calendar_view import render_event_details, render_free_slots, render_week
from roomschedule.config import Config, ConfigError, load_config
from roomschedule.events import TransformStats, transform_meetings
from roomschedule.logging_setup import configure_logging_if_needed
from roomschedule.lookup import (
    Store,
    building_full_name,
    find_meetings_for_room,
    find_rooms_in_building,
    suggest_buildings,
)
from roomschedule.store import MeetingStore, StoreError

logger = logging.getLogger(__name__)

console = Console()


def _open_store(verbose: bool) -> tuple[Store, Config]:
    """
    Load configuration and build the store client. Raises ConfigError.
    """
    cfg = load_config()
    configure_logging_if_needed("DEBUG" if verbose else cfg.log_level)
    return MeetingStore.from_config(cfg), cfg


def _advise(message: str) -> int:
    console.print(f"[yellow]{escape(message)}[/]")
    return 1


def _fail(message: str) -> int:
    console.print(f"[red]Error:[/] {escape(message)}", highlight=False)
    return 1


def _cmd_rooms(args: argparse.Namespace, store: Store) -> int:
    """
    List the rooms of a building, in natural order.
    """
    building = args.building.strip().upper()
    try:
        rooms = find_rooms_in_building(store, building, args.room)
    except StoreError as e:
        return _fail(str(e))

    if not rooms:
        console.print(st.MSG_NO_ROOMS)
        return 0

    console.print(f"Rooms in {escape(building)}: {len(rooms)}", highlight=False)
    for room in rooms:
        console.print(f"  {escape(room)}", highlight=False)
    return 0


def _cmd_schedule(args: argparse.Namespace, store: Store) -> int:
    """
    Print the weekly calendar for one room.
    """
    building = args.building.strip().upper()
    room = args.room.strip()
    try:
        meetings = find_meetings_for_room(store, building, room)
        name = building_full_name(store, building) if meetings else None
    except StoreError as e:
        return _fail(str(e))

    if not meetings:
        console.print(st.MSG_NO_MEETINGS)
        return 0

    stats = TransformStats()
    events = transform_meetings(meetings, stats=stats)
    label = f"{building} ({name})" if name else building
    render_week(events, console, title=f"Schedule for {label} - {room}")
    render_event_details(events, console)
    if args.free:
        render_free_slots(events, console)
    if stats.dropped:
        logger.info("Skipped %d incomplete or malformed meeting rows", stats.dropped)
    return 0


def _cmd_suggest(args: argparse.Namespace, store: Store, limit: int) -> int:
    """
    Print ranked building suggestions for a partial code or name.
    """
    text = args.text.strip()
    try:
        items = suggest_buildings(store, text, limit=limit)
    except StoreError as e:
        return _fail(str(e))

    if not items:
        console.print("No matching buildings.")
        return 0
    for s in items:
        console.print(f"[bold cyan]{escape(s.building_code)}[/] | {escape(s.full_name)}", highlight=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="roomschedule", description="Campus room schedule lookup")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_rooms = sub.add_parser("rooms", help="List rooms in a building")
    p_rooms.add_argument("building", type=str, help="Building code (e.g. ARC)")
    p_rooms.add_argument("--room", type=str, default=None, help="Only rooms containing this text")

    p_schedule = sub.add_parser("schedule", help="Show the weekly schedule of a room")
    p_schedule.add_argument("building", type=str, help="Building code (e.g. ARC)")
    p_schedule.add_argument("room", type=str, help="Room number (e.g. 105)")
    p_schedule.add_argument("--free", action="store_true", help="Also list open time slots")

    p_suggest = sub.add_parser("suggest", help="Suggest buildings for a partial code or name")
    p_suggest.add_argument("text", type=str, help="Partial building code or name")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def _missing_input(args: argparse.Namespace) -> Optional[str]:
    if args.command in ("rooms", "schedule") and not (args.building or "").strip():
        return st.MSG_MISSING_BUILDING
    if args.command == "schedule" and not (args.room or "").strip():
        return "Please provide a room number."
    if args.command == "suggest" and len((args.text or "").strip()) < st.MIN_SUGGESTION_CHARS:
        return f"Please type at least {st.MIN_SUGGESTION_CHARS} characters."
    return None


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Input problems never reach the network (or even the config)
    problem = _missing_input(args)
    if problem:
        raise SystemExit(_advise(problem))

    try:
        store, cfg = _open_store(args.verbose)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/] {escape(str(e))}", highlight=False)
        raise SystemExit(2)

    if args.command == "rooms":
        raise SystemExit(_cmd_rooms(args, store))
    if args.command == "schedule":
        raise SystemExit(_cmd_schedule(args, store))
    if args.command == "suggest":
        raise SystemExit(_cmd_suggest(args, store, cfg.suggestion_limit))

    if args.command == "interactive":
        from roomschedule.interactive import run_interactive

        run_interactive(store, cfg)
        raise SystemExit(0)

    raise SystemExit(2)
