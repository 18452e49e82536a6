from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from roomschedule import state as st
from roomschedule.calendar_view import render_event_details, render_free_slots, render_week
from roomschedule.config import Config
from roomschedule.events import TransformStats, transform_meetings
from roomschedule.lookup import Store, open_room, run_room_search
from roomschedule.suggest import SuggestionFeed

logger = logging.getLogger(__name__)

console = Console()

ALERT_STYLES = {st.ADVISORY: "yellow", st.ERROR: "red", st.INFO: "cyan"}


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def _show_alert(state: st.SearchState) -> st.SearchState:
    """
    Print the pending alert (if any) once and clear it.
    """
    if state.alert is None:
        return state
    style = ALERT_STYLES.get(state.alert.kind, "white")
    prefix = "Error: " if state.alert.kind == st.ERROR else ""
    _println(f"[{style}]{prefix}{escape(state.alert.message)}[/]")
    return st.dismiss_alert(state)


def run_interactive(store: Store, cfg: Config, timer_factory: Callable[..., Any] = threading.Timer) -> None:
    """
    Interactive menu loop: find a building, pick a room, view its week.
    """
    state = st.SearchState(page_size=cfg.page_size)

    while True:
        _print_header(state)

        choice = _prompt(
            "\n[1] Search building\n"
            "[2] Rooms (pick one to view its schedule)\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            state = _flow_search_building(state, store, cfg, timer_factory)
        elif choice == "2":
            state = _flow_rooms(state, store)
        else:
            _println("Invalid choice.")


def _print_header(state: st.SearchState) -> None:
    _println("\n=== RoomSchedule (interactive) ===")
    if not state.has_searched:
        _println("No building selected yet – use [1] to search.")
        return

    label = state.building
    if state.building_name:
        label = f"{state.building} ({state.building_name})"
    _println(f"Building: {escape(label)} | rooms: {len(state.rooms)}")


def _pick_suggestion(
    state: st.SearchState,
    store: Store,
    text: str,
    cfg: Config,
    timer_factory: Callable[..., Any] = threading.Timer,
) -> st.SearchState:
    """
    Offer ranked building matches for `text` and store the chosen code.
    Falls back to the typed text when nothing is picked.
    """
    feed = SuggestionFeed.from_config(store, cfg, lambda _state: None, initial=state, timer_factory=timer_factory)
    try:
        feed.update(text)
        with console.status("Looking up buildings..."):
            state = feed.wait(cfg.timeout + cfg.debounce_ms / 1000.0)
    finally:
        feed.close()

    if not state.suggestions:
        return st.set_building_input(state, text)

    table = Table(title="Buildings", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Code")
    table.add_column("Name")
    for i, s in enumerate(state.suggestions, start=1):
        table.add_row(str(i), f"[bold cyan]{escape(s.building_code)}[/]", escape(s.full_name))
    console.print(table)

    pick = _prompt("Enter number [blank = use what you typed]: ").strip()
    if pick.isdigit() and 1 <= int(pick) <= len(state.suggestions):
        return st.set_building_input(state, state.suggestions[int(pick) - 1].building_code)
    if pick:
        _println("Out of range – using what you typed.")
    return st.set_building_input(state, text)


def _flow_search_building(
    state: st.SearchState,
    store: Store,
    cfg: Config,
    timer_factory: Callable[..., Any] = threading.Timer,
) -> st.SearchState:
    text = _prompt("Building code or name (e.g. 'ARC' or 'allison'): ").strip()

    if len(text) >= st.MIN_SUGGESTION_CHARS:
        state = _pick_suggestion(state, store, text, cfg, timer_factory)
    else:
        state = st.set_building_input(state, text)

    room = _prompt("Room number filter [blank = all rooms]: ").strip()
    state = st.set_room_input(state, room)

    with console.status("Searching..."):
        state = run_room_search(state, store)
    state = _show_alert(state)

    if state.rooms:
        return _flow_rooms(state, store)
    return state


def _print_room_page(state: st.SearchState) -> list[str]:
    rooms = st.visible_rooms(state)
    pages = st.page_count(state)

    table = Table(title=f"Rooms in {escape(state.building)} (page {state.page + 1}/{pages})", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Room")
    for i, room in enumerate(rooms, start=1):
        table.add_row(str(i), escape(room))
    console.print(table)
    return rooms


def _resolve_room(pick: str, page: list[str], rooms: tuple[str, ...]) -> Optional[str]:
    """
    Map the user's answer to a room: an exact room number wins, otherwise
    a "#" from the current page.
    """
    for room in rooms:
        if room.lower() == pick.lower():
            return room
    if pick.isdigit() and 1 <= int(pick) <= len(page):
        return page[int(pick) - 1]
    return None


def _flow_rooms(state: st.SearchState, store: Store) -> st.SearchState:
    if not state.rooms:
        _println("No rooms to show – search a building first.")
        return state

    while True:
        rooms = _print_room_page(state)

        pick = _prompt("Room number or # to view, [n]ext / [p]rev page, blank = back: ").strip()
        if not pick:
            return state
        if pick.lower() == "n":
            state = st.next_page(state)
            continue
        if pick.lower() == "p":
            state = st.prev_page(state)
            continue

        room = _resolve_room(pick, rooms, state.rooms)
        if room is None:
            _println(f"No room '{escape(pick)}' here.")
            continue

        with console.status("Loading schedule..."):
            state = open_room(state, store, room)
        _show_schedule(state)
        state = _show_alert(state)

        _prompt("\nPress Enter to go back...")


def _show_schedule(state: st.SearchState) -> None:
    if state.loading or not state.meetings:
        return

    stats = TransformStats()
    events = transform_meetings(state.meetings, stats=stats)

    label = state.building
    if state.building_name:
        label = f"{state.building} ({state.building_name})"
    render_week(events, console, title=f"Schedule for {label} - {state.selected_room}")
    render_event_details(events, console)
    render_free_slots(events, console)

    if stats.dropped:
        _println(f"[dim]{stats.dropped} incomplete meeting rows were skipped.[/]")
