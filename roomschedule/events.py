"""
Meeting rows -> weekly calendar events.

Turns the flat list of `class_meetings` rows for one room into one week of
CalendarEvents:

- incomplete rows are dropped
- rows sharing (subject, course_number, day, start, end) become ONE event
  carrying all of their section indices
- the upstream "HHMM" times are corrected for their ambiguous AM/PM encoding
- events are anchored to the current (Sunday-first) week

Important rules (DO NOT CHANGE):
- malformed rows are dropped, never raised
- the hour corrections in correct_hours() run in a fixed order and include
  two hard-coded patches for known upstream anomalies; keep them bit-for-bit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional, Union

from roomschedule.model import CalendarEvent, MeetingRecord

logger = logging.getLogger(__name__)

# Sunday = 0 ... Saturday = 6 (H = Thursday, U = Sunday)
DAY_INDEX = {"M": 1, "T": 2, "W": 3, "H": 4, "F": 5, "S": 6, "U": 0}


@dataclass
class TransformStats:
    """
    Diagnostic counters for rows/groups dropped by transform_meetings().
    Pass an instance in to find out what was silently skipped.
    """

    incomplete: int = 0
    unknown_day: int = 0
    bad_time: int = 0

    @property
    def dropped(self) -> int:
        return self.incomplete + self.unknown_day + self.bad_time


def week_start(today: date) -> date:
    """
    Return the Sunday that starts the week containing `today`.
    """
    # date.weekday(): Monday = 0 ... Sunday = 6
    return today - timedelta(days=(today.weekday() + 1) % 7)


def _split_hhmm(value: str) -> tuple[int, int]:
    # Raises ValueError for anything that is not numeric in both halves
    return int(value[0:2]), int(value[2:4])


def correct_hours(start_hour: int, start_minute: int, end_hour: int, end_minute: int) -> tuple[int, int]:
    """
    Apply the AM/PM heuristic to a decoded start/end pair.

    The source stores some afternoon hours without the 12-hour offset, so an
    hour below 8 is taken to mean PM. The two minute-based patches cover
    start/end times that look like mid-morning but are evening sessions.

    This is a probable upstream data-format defect, not a general rule.
    Returns the corrected (start_hour, end_hour); minutes never change.
    """
    if start_hour < 8:
        start_hour += 12
    if end_hour < 8:
        end_hour += 12
    if end_hour < start_hour and start_hour > 12:
        end_hour += 12
    if start_hour == 9 and start_minute in (20, 35):
        start_hour += 12
    if end_hour == 10 and end_minute in (30, 40):
        end_hour += 12
    return start_hour, end_hour


def _instant(day: date, hour: int, minute: int) -> datetime:
    # Offsets from midnight so that hour >= 24 rolls over into the next day
    return datetime.combine(day, datetime.min.time()) + timedelta(hours=hour, minutes=minute)


def _as_record(item: Union[MeetingRecord, dict[str, Any]]) -> MeetingRecord:
    if isinstance(item, MeetingRecord):
        return item
    return MeetingRecord.from_row(item)


def _title(subject: str, course_number: str, course_title: Optional[str]) -> str:
    base = f"{subject}:{course_number}"
    return f"{base} - {course_title}" if course_title else base


def transform_meetings(
    meetings: Iterable[Union[MeetingRecord, dict[str, Any]]],
    today: Optional[date] = None,
    stats: Optional[TransformStats] = None,
) -> list[CalendarEvent]:
    """
    Convert meeting rows into grouped, time-corrected CalendarEvents for the
    week containing `today` (defaults to the current date).

    Never raises for bad data: incomplete rows, unknown day codes and
    unparseable times are dropped (and counted in `stats` if given).
    """
    if stats is None:
        stats = TransformStats()
    if today is None:
        today = date.today()
    sunday = week_start(today)

    # key -> (representative record, section list)
    groups: dict[str, tuple[MeetingRecord, list[str]]] = {}

    for item in meetings:
        rec = _as_record(item)
        if not rec.is_renderable():
            stats.incomplete += 1
            logger.debug("Dropping incomplete meeting row id=%s", rec.id)
            continue

        key = f"{rec.subject}:{rec.course_number}:{rec.meeting_day}:{rec.start_time}:{rec.end_time}"
        if key not in groups:
            sections = [rec.section_index] if rec.section_index is not None else []
            groups[key] = (rec, sections)
        elif rec.section_index is not None and rec.section_index not in groups[key][1]:
            groups[key][1].append(rec.section_index)

    events: list[CalendarEvent] = []
    for key, (rec, sections) in groups.items():
        # is_renderable() guarantees these are non-empty strings
        assert rec.subject and rec.course_number and rec.meeting_day
        assert rec.start_time and rec.end_time

        day_index = DAY_INDEX.get(rec.meeting_day)
        if day_index is None:
            stats.unknown_day += 1
            logger.debug("Dropping %s: unknown meeting day %r", key, rec.meeting_day)
            continue

        try:
            start_hour, start_minute = _split_hhmm(rec.start_time)
            end_hour, end_minute = _split_hhmm(rec.end_time)
        except (TypeError, ValueError):
            stats.bad_time += 1
            logger.debug("Dropping %s: unparseable time %r-%r", key, rec.start_time, rec.end_time)
            continue

        start_hour, end_hour = correct_hours(start_hour, start_minute, end_hour, end_minute)

        day = sunday + timedelta(days=day_index)
        events.append(
            CalendarEvent(
                title=_title(rec.subject, rec.course_number, rec.course_title),
                start=_instant(day, start_hour, start_minute),
                end=_instant(day, end_hour, end_minute),
                subject=rec.subject,
                course_number=rec.course_number,
                course_title=rec.course_title,
                meeting_day=rec.meeting_day,
                start_time=rec.start_time,
                end_time=rec.end_time,
                sections=sorted(sections),
                instructor=rec.instructors or None,
            )
        )

    if stats.dropped:
        logger.info(
            "Transformed %d events; dropped incomplete=%d unknown_day=%d bad_time=%d",
            len(events),
            stats.incomplete,
            stats.unknown_day,
            stats.bad_time,
        )
    return events
