"""
Central data model definitions used across the project.

This module defines the canonical structure of meeting rows, calendar events
and building suggestions so that:
- the store client, the event transformer and the UI layers share field names
- rows coming back from the hosted tables are converted in exactly one place
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, List, Optional, Tuple


@dataclass
class MeetingRecord:
    """
    Represents one row of the `class_meetings` table.

    One row = one section of one course meeting on one weekday in one room.
    start_time / end_time are 4-digit "HHMM" strings with an ambiguous AM/PM
    convention (see roomschedule.events.correct_hours).
    """

    id: int
    created_at: Optional[str] = None
    course_title: Optional[str] = None
    subject: Optional[str] = None
    course_number: Optional[str] = None
    section_index: Optional[str] = None
    instructors: Optional[str] = None
    meeting_day: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    building_code: Optional[str] = None
    room_number: Optional[str] = None
    campus: Optional[str] = None
    credits: Optional[float] = None
    synopsis_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "MeetingRecord":
        """
        Build a record from a store row, ignoring columns we do not know.
        """
        known = {f.name for f in fields(cls)}
        data = {k: v for k, v in row.items() if k in known}
        data.setdefault("id", 0)
        return cls(**data)

    def is_renderable(self) -> bool:
        return all(
            (self.subject, self.course_number, self.meeting_day, self.start_time, self.end_time)
        )


@dataclass
class CalendarEvent:
    """
    One block on the weekly grid.

    Several MeetingRecords sharing (subject, course_number, meeting_day,
    start_time, end_time) collapse into one event; their section indices are
    kept in `sections`.
    """

    title: str
    start: datetime
    end: datetime
    subject: str
    course_number: str
    course_title: Optional[str]
    meeting_day: str
    start_time: str
    end_time: str
    sections: List[str] = field(default_factory=list)
    instructor: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str, str, str]:
        return (self.subject, self.course_number, self.meeting_day, self.start_time, self.end_time)


@dataclass
class BuildingSuggestion:
    """
    A row of the `building_codes` table, offered as an autocomplete candidate.
    """

    building_code: str
    full_name: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "BuildingSuggestion":
        code = "" if row.get("building_code") is None else str(row["building_code"])
        name = "" if row.get("full_name") is None else str(row["full_name"])
        return cls(building_code=code, full_name=name)
