"""
Screen state for the room lookup flow.

All state lives in one frozen SearchState. Every user action is a pure
function  state -> new state, so handlers never share mutable globals and
each transition can be tested without a terminal or a network.

Suggestion requests are tagged with a sequence number; a response is only
applied when it carries the latest number, so a slow stale response can not
overwrite newer results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from roomschedule.model import BuildingSuggestion, MeetingRecord

MIN_SUGGESTION_CHARS = 2

MSG_MISSING_BUILDING = "Please provide a building code."
MSG_NO_ROOMS = "No rooms found for this building."
MSG_NO_MEETINGS = "No classes found for this location."

ADVISORY = "advisory"
ERROR = "error"
INFO = "info"


@dataclass(frozen=True)
class Alert:
    kind: str
    message: str


@dataclass(frozen=True)
class SearchState:
    building: str = ""
    room: str = ""
    building_name: Optional[str] = None

    rooms: tuple[str, ...] = ()
    page: int = 0
    page_size: int = 10

    selected_room: Optional[str] = None
    meetings: tuple[MeetingRecord, ...] = ()

    loading: bool = False
    has_searched: bool = False
    alert: Optional[Alert] = None

    suggestions: tuple[BuildingSuggestion, ...] = ()
    suggestion_seq: int = 0

    # Mirrors the error state so callers can tell it apart from "no results"
    @property
    def failed(self) -> bool:
        return self.alert is not None and self.alert.kind == ERROR


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


def set_building_input(state: SearchState, text: str) -> SearchState:
    return replace(state, building=(text or "").upper())


def set_room_input(state: SearchState, text: str) -> SearchState:
    return replace(state, room=text or "")


def dismiss_alert(state: SearchState) -> SearchState:
    return replace(state, alert=None)


# ---------------------------------------------------------------------------
# Room search
# ---------------------------------------------------------------------------


def begin_room_search(state: SearchState) -> SearchState:
    """
    Validate inputs and enter the loading state.

    With an empty building code the result carries an advisory alert and
    `loading` stays False: the caller must not query the store.
    """
    if not state.building.strip():
        return replace(state, alert=Alert(ADVISORY, MSG_MISSING_BUILDING), loading=False)

    return replace(
        state,
        loading=True,
        has_searched=True,
        alert=None,
        rooms=(),
        page=0,
        selected_room=None,
        meetings=(),
        building_name=None,
    )


def rooms_loaded(state: SearchState, rooms: list[str], building_name: Optional[str] = None) -> SearchState:
    alert = None if rooms else Alert(INFO, MSG_NO_ROOMS)
    return replace(
        state,
        rooms=tuple(rooms),
        page=0,
        loading=False,
        alert=alert,
        building_name=building_name,
    )


def search_failed(state: SearchState, message: str) -> SearchState:
    return replace(state, loading=False, alert=Alert(ERROR, message))


# ---------------------------------------------------------------------------
# Room selection
# ---------------------------------------------------------------------------


def select_room(state: SearchState, room: str) -> SearchState:
    return replace(state, selected_room=room, meetings=(), loading=True, alert=None)


def meetings_loaded(state: SearchState, meetings: list[MeetingRecord]) -> SearchState:
    alert = None if meetings else Alert(INFO, MSG_NO_MEETINGS)
    return replace(state, meetings=tuple(meetings), loading=False, alert=alert)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def page_count(state: SearchState) -> int:
    if not state.rooms:
        return 0
    return (len(state.rooms) + state.page_size - 1) // state.page_size


def _clamp_page(state: SearchState, page: int) -> int:
    last = max(page_count(state) - 1, 0)
    return min(max(page, 0), last)


def next_page(state: SearchState) -> SearchState:
    return replace(state, page=_clamp_page(state, state.page + 1))


def prev_page(state: SearchState) -> SearchState:
    return replace(state, page=_clamp_page(state, state.page - 1))


def visible_rooms(state: SearchState) -> list[str]:
    start = state.page * state.page_size
    return list(state.rooms[start : start + state.page_size])


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def request_suggestions(state: SearchState, text: str) -> tuple[SearchState, int]:
    """
    Issue a new suggestion sequence number for `text`.

    Text shorter than MIN_SUGGESTION_CHARS clears the suggestions; the
    sequence number is still bumped so any in-flight response is ignored.
    """
    seq = state.suggestion_seq + 1
    if len((text or "").strip()) < MIN_SUGGESTION_CHARS:
        return replace(state, suggestion_seq=seq, suggestions=()), seq
    return replace(state, suggestion_seq=seq), seq


def suggestions_loaded(state: SearchState, seq: int, items: list[BuildingSuggestion]) -> SearchState:
    if seq != state.suggestion_seq:
        return state
    return replace(state, suggestions=tuple(items))
