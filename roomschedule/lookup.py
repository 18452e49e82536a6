"""
Lookup operations on top of the hosted tables.

    find_rooms_in_building   building (+ optional room filter) -> room numbers
    find_meetings_for_room   building + room -> MeetingRecords
    suggest_buildings        partial text -> ranked BuildingSuggestions
    building_full_name       building code -> full name (or None)

run_room_search() / open_room() run one round trip each through the
SearchState transitions in roomschedule.state.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Protocol

from roomschedule import state as st
from roomschedule.model import BuildingSuggestion, MeetingRecord
from roomschedule.store import StoreError

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5

_DIGITS = re.compile(r"(\d+)")


class Store(Protocol):
    def room_numbers(self, building_code: str, room_filter: Optional[str] = None) -> list[dict[str, Any]]: ...

    def meetings(self, building_code: str, room_number: str) -> list[dict[str, Any]]: ...

    def buildings_matching(self, term: str, limit: Optional[int] = None) -> list[dict[str, Any]]: ...

    def building_by_code(self, building_code: str) -> Optional[dict[str, Any]]: ...


def natural_key(text: str) -> tuple:
    """
    Sort key that orders digit runs numerically: "2" < "9" < "10" < "10A".
    """
    parts = _DIGITS.split(text.lower())
    # split() alternates text/number, starting (and ending) with text
    return tuple((0, int(p), "") if i % 2 else (1, 0, p) for i, p in enumerate(parts) if p)


def find_rooms_in_building(store: Store, building_code: str, room_filter: Optional[str] = None) -> list[str]:
    rows = store.room_numbers(building_code.strip(), room_filter.strip() if room_filter else None)

    rooms: set[str] = set()
    for row in rows:
        value = row.get("room_number")
        if value is None:
            continue
        room = str(value).strip()
        if room:
            rooms.add(room)

    return sorted(rooms, key=natural_key)


def find_meetings_for_room(store: Store, building_code: str, room_number: str) -> list[MeetingRecord]:
    rows = store.meetings(building_code.strip(), room_number.strip())
    return [MeetingRecord.from_row(r) for r in rows]


def building_full_name(store: Store, building_code: str) -> Optional[str]:
    row = store.building_by_code(building_code.strip())
    if not row:
        return None
    name = str(row.get("full_name") or "").strip()
    return name or None


def _suggestion_rank(s: BuildingSuggestion, term: str) -> int:
    if s.building_code.lower().startswith(term):
        return 0
    if s.full_name.lower().startswith(term):
        return 1
    return 2


def rank_suggestions(
    rows: list[dict[str, Any]], term: str, limit: int = DEFAULT_SUGGESTION_LIMIT
) -> list[BuildingSuggestion]:
    """
    Rank building rows for `term`: code prefix first, then name prefix, then
    any other match. sorted() is stable, so ties keep the store order.
    """
    needle = term.strip().lower()
    items = [BuildingSuggestion.from_row(r) for r in rows]
    items = sorted(items, key=lambda s: _suggestion_rank(s, needle))
    return items[:limit]


def suggest_buildings(
    store: Store, partial_text: str, limit: int = DEFAULT_SUGGESTION_LIMIT
) -> list[BuildingSuggestion]:
    term = (partial_text or "").strip()
    if len(term) < st.MIN_SUGGESTION_CHARS:
        return []
    rows = store.buildings_matching(term)
    return rank_suggestions(rows, term, limit)


# ---------------------------------------------------------------------------
# State-driven round trips
# ---------------------------------------------------------------------------


def run_room_search(state: st.SearchState, store: Store) -> st.SearchState:
    """
    Search rooms for state.building / state.room.

    Missing building -> advisory alert, no store call.
    StoreError -> error alert with the message, loading cleared.
    """
    state = st.begin_room_search(state)
    if not state.loading:
        return state

    try:
        rooms = find_rooms_in_building(store, state.building, state.room or None)
        name = building_full_name(store, state.building) if rooms else None
    except StoreError as e:
        return st.search_failed(state, str(e))

    logger.debug("Found %d rooms for %s", len(rooms), state.building)
    return st.rooms_loaded(state, rooms, building_name=name)


def open_room(state: st.SearchState, store: Store, room: str) -> st.SearchState:
    state = st.select_room(state, room)
    try:
        meetings = find_meetings_for_room(store, state.building, room)
    except StoreError as e:
        return st.search_failed(state, str(e))
    return st.meetings_loaded(state, meetings)
