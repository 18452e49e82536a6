"""
Weekly grid rendering for one room.

The grid shows the visible window 08:00-23:00, one column per weekday
(Sunday first, matching the week the events are anchored to).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, time, timedelta
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from roomschedule.model import CalendarEvent

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

DAY_START_HOUR = 8
DAY_END_HOUR = 23


def _weekday_index(dt: datetime) -> int:
    # Sunday = 0 ... Saturday = 6
    return (dt.weekday() + 1) % 7


def event_line(ev: CalendarEvent) -> str:
    bits = [f"{ev.start:%H:%M}-{ev.end:%H:%M}", f"{ev.subject}:{ev.course_number}"]
    if ev.course_title:
        bits.append(ev.course_title)
    if ev.sections:
        bits.append("sec " + ", ".join(ev.sections))
    if ev.instructor:
        bits.append(ev.instructor)
    return " | ".join(bits)


def week_buckets(events: list[CalendarEvent]) -> dict[str, list[CalendarEvent]]:
    """
    Map each day name (Sun..Sat) to its events, sorted by start.
    """
    buckets: dict[str, list[CalendarEvent]] = {name: [] for name in DAY_NAMES}
    for ev in sorted(events, key=lambda e: (e.start, e.end)):
        buckets[DAY_NAMES[_weekday_index(ev.start)]].append(ev)
    return buckets


def free_slots(
    events: list[CalendarEvent],
    day_start: int = DAY_START_HOUR,
    day_end: int = DAY_END_HOUR,
) -> dict[str, list[tuple[time, time]]]:
    """
    Return the open gaps per day inside [day_start, day_end).

    Days without any event are left out; callers treat them as fully free.
    """
    by_day: dict[str, list[CalendarEvent]] = defaultdict(list)
    for ev in events:
        by_day[DAY_NAMES[_weekday_index(ev.start)]].append(ev)

    out: dict[str, list[tuple[time, time]]] = {}
    for name in DAY_NAMES:
        day_events = sorted(by_day.get(name, []), key=lambda e: e.start)
        if not day_events:
            continue

        midnight = datetime.combine(day_events[0].start.date(), time())
        window_start = midnight + timedelta(hours=day_start)
        window_end = midnight + timedelta(hours=day_end)

        gaps: list[tuple[time, time]] = []
        cursor = window_start
        for ev in day_events:
            if ev.start > cursor:
                gaps.append((cursor.time(), min(ev.start, window_end).time()))
            cursor = max(cursor, ev.end)
            if cursor >= window_end:
                break
        if cursor < window_end:
            gaps.append((cursor.time(), window_end.time()))

        out[name] = [(a, b) for a, b in gaps if a < b]
    return out


def render_week(events: list[CalendarEvent], console: Optional[Console] = None, title: str = "") -> None:
    console = console or Console()
    buckets = week_buckets(events)

    days = [d for d in DAY_NAMES if buckets[d]] or DAY_NAMES
    if title:
        # printed on its own line; a table title wraps to the column widths
        console.print(f"[bold]{escape(title)}[/]")
    table = Table(box=box.SIMPLE)
    for day in days:
        table.add_column(day)

    max_len = max(len(buckets[d]) for d in days)
    for r in range(max_len):
        row = []
        for day in days:
            if r < len(buckets[day]):
                ev = buckets[day][r]
                row.append(
                    f"[bold]{ev.start:%H:%M}-{ev.end:%H:%M}[/]\n"
                    f"[cyan]{escape(ev.subject)}:{escape(ev.course_number)}[/]\n"
                    f"{escape(ev.course_title or '')}"
                )
            else:
                row.append("")
        table.add_row(*row)
    console.print(table)


def render_event_details(events: list[CalendarEvent], console: Optional[Console] = None) -> None:
    console = console or Console()
    for name, day_events in week_buckets(events).items():
        for ev in day_events:
            console.print(f"{name}  {event_line(ev)}", markup=False, highlight=False)


def render_free_slots(events: list[CalendarEvent], console: Optional[Console] = None) -> None:
    console = console or Console()
    slots = free_slots(events)
    console.print(f"\nOpen times ({DAY_START_HOUR:02d}:00-{DAY_END_HOUR:02d}:00):")
    for name in DAY_NAMES:
        if name not in slots:
            console.print(f"  {name}: [green]free all day[/]")
            continue
        gaps = slots[name]
        if not gaps:
            console.print(f"  {name}: [red]fully booked[/]")
            continue
        text = ", ".join(f"{a:%H:%M}-{b:%H:%M}" for a, b in gaps)
        console.print(f"  {name}: [green]{text}[/]")
