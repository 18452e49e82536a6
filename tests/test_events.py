"""
Unit tests for the meeting -> calendar event transformation.

Covers:
- grouping of sections that share one time slot
- silent dropping of incomplete / malformed rows (with counters)
- the AM/PM hour heuristic, including its two hard-coded patches
- anchoring to the Sunday-first week of `today`
"""

import unittest
from datetime import date, datetime

from roomschedule.events import TransformStats, correct_hours, transform_meetings, week_start
from roomschedule.model import MeetingRecord

# Wednesday; its week runs Sun 2026-10-18 .. Sat 2026-10-24
TODAY = date(2026, 10, 21)


def _row(**overrides):
    row = {
        "id": 1,
        "subject": "CS",
        "course_number": "111",
        "course_title": "Intro to Computer Science",
        "section_index": "01",
        "meeting_day": "M",
        "start_time": "1000",
        "end_time": "1120",
        "instructors": "SMITH, JOHN",
        "building_code": "ARC",
        "room_number": "105",
    }
    row.update(overrides)
    return row


class TestWeekStart(unittest.TestCase):
    def test_midweek_goes_back_to_sunday(self) -> None:
        self.assertEqual(week_start(TODAY), date(2026, 10, 18))

    def test_sunday_is_its_own_week_start(self) -> None:
        self.assertEqual(week_start(date(2026, 10, 18)), date(2026, 10, 18))

    def test_saturday_belongs_to_previous_sunday(self) -> None:
        self.assertEqual(week_start(date(2026, 10, 24)), date(2026, 10, 18))


class TestCorrectHours(unittest.TestCase):
    def test_morning_hours_untouched(self) -> None:
        self.assertEqual(correct_hours(10, 0, 11, 20), (10, 11))

    def test_early_hours_are_pm(self) -> None:
        self.assertEqual(correct_hours(1, 30, 2, 50), (13, 14))

    def test_start_patch_0920(self) -> None:
        start, _ = correct_hours(9, 20, 10, 40)
        self.assertEqual(start, 21)

    def test_start_patch_0935(self) -> None:
        start, _ = correct_hours(9, 35, 10, 55)
        self.assertEqual(start, 21)

    def test_end_patch_1040(self) -> None:
        _, end = correct_hours(9, 20, 10, 40)
        self.assertEqual(end, 22)

    def test_end_patch_1030(self) -> None:
        self.assertEqual(correct_hours(9, 0, 10, 30), (9, 22))

    def test_no_patch_for_other_minutes(self) -> None:
        self.assertEqual(correct_hours(9, 30, 10, 50), (9, 10))

    def test_rollover_guard_after_pm_start(self) -> None:
        # end 07 -> 19 first, still before a 20:00 start -> +12 again
        self.assertEqual(correct_hours(20, 0, 7, 50), (20, 31))

    def test_rollover_guard_needs_afternoon_start(self) -> None:
        # start 12 is not > 12, so the end is only shifted by the <8 rule
        self.assertEqual(correct_hours(12, 0, 11, 0), (12, 11))


class TestTransformMeetings(unittest.TestCase):
    def test_two_sections_same_slot_collapse(self) -> None:
        meetings = [_row(id=1, section_index="01"), _row(id=2, section_index="02")]
        events = transform_meetings(meetings, today=TODAY)

        self.assertEqual(len(events), 1)
        ev = events[0]
        self.assertEqual(ev.sections, ["01", "02"])
        self.assertEqual(ev.start, datetime(2026, 10, 19, 10, 0))
        self.assertEqual(ev.end, datetime(2026, 10, 19, 11, 20))

    def test_sections_sorted_regardless_of_input_order(self) -> None:
        meetings = [_row(section_index="03"), _row(section_index="01"), _row(section_index="02")]
        events = transform_meetings(meetings, today=TODAY)
        self.assertEqual(events[0].sections, ["01", "02", "03"])

    def test_sections_sort_lexically(self) -> None:
        meetings = [_row(section_index="10"), _row(section_index="9")]
        events = transform_meetings(meetings, today=TODAY)
        self.assertEqual(events[0].sections, ["10", "9"])

    def test_null_and_repeated_sections_skipped(self) -> None:
        meetings = [_row(section_index=None), _row(section_index="02"), _row(section_index="02")]
        events = transform_meetings(meetings, today=TODAY)
        self.assertEqual(events[0].sections, ["02"])

    def test_different_slots_stay_separate(self) -> None:
        meetings = [_row(), _row(meeting_day="W"), _row(start_time="1200", end_time="1320")]
        events = transform_meetings(meetings, today=TODAY)
        self.assertEqual(len(events), 3)
        self.assertEqual(len({ev.key for ev in events}), 3)

    def test_incomplete_rows_dropped_and_counted(self) -> None:
        meetings = [
            _row(subject=None),
            _row(course_number=None),
            _row(meeting_day=None),
            _row(start_time=None),
            _row(end_time=""),
            _row(),
        ]
        stats = TransformStats()
        events = transform_meetings(meetings, today=TODAY, stats=stats)

        self.assertEqual(len(events), 1)
        self.assertEqual(stats.incomplete, 5)
        self.assertEqual(stats.dropped, 5)

    def test_unknown_day_dropped_silently(self) -> None:
        stats = TransformStats()
        events = transform_meetings([_row(meeting_day="X")], today=TODAY, stats=stats)
        self.assertEqual(events, [])
        self.assertEqual(stats.unknown_day, 1)

    def test_unparseable_time_dropped(self) -> None:
        stats = TransformStats()
        events = transform_meetings([_row(start_time="ab00")], today=TODAY, stats=stats)
        self.assertEqual(events, [])
        self.assertEqual(stats.bad_time, 1)

    def test_day_codes_map_to_week(self) -> None:
        expected = {
            "U": date(2026, 10, 18),
            "M": date(2026, 10, 19),
            "T": date(2026, 10, 20),
            "W": date(2026, 10, 21),
            "H": date(2026, 10, 22),
            "F": date(2026, 10, 23),
            "S": date(2026, 10, 24),
        }
        meetings = [_row(meeting_day=code) for code in expected]
        events = transform_meetings(meetings, today=TODAY)

        got = {ev.meeting_day: ev.start.date() for ev in events}
        self.assertEqual(got, expected)

    def test_evening_patch_scenario(self) -> None:
        events = transform_meetings([_row(start_time="0920", end_time="1040")], today=TODAY)
        self.assertEqual(events[0].start, datetime(2026, 10, 19, 21, 20))
        self.assertEqual(events[0].end, datetime(2026, 10, 19, 22, 40))

    def test_no_patch_scenario(self) -> None:
        events = transform_meetings([_row(start_time="0930", end_time="1050")], today=TODAY)
        self.assertEqual(events[0].start, datetime(2026, 10, 19, 9, 30))
        self.assertEqual(events[0].end, datetime(2026, 10, 19, 10, 50))

    def test_overflowing_hour_rolls_into_next_day(self) -> None:
        events = transform_meetings([_row(start_time="2000", end_time="0750")], today=TODAY)
        self.assertEqual(events[0].start, datetime(2026, 10, 19, 20, 0))
        self.assertEqual(events[0].end, datetime(2026, 10, 20, 7, 50))

    def test_title_and_instructor(self) -> None:
        events = transform_meetings([_row()], today=TODAY)
        self.assertEqual(events[0].title, "CS:111 - Intro to Computer Science")
        self.assertEqual(events[0].instructor, "SMITH, JOHN")

    def test_title_without_course_title(self) -> None:
        events = transform_meetings([_row(course_title=None, instructors=None)], today=TODAY)
        self.assertEqual(events[0].title, "CS:111")
        self.assertIsNone(events[0].instructor)

    def test_instructor_comes_from_first_row(self) -> None:
        meetings = [_row(instructors="FIRST"), _row(section_index="02", instructors="SECOND")]
        events = transform_meetings(meetings, today=TODAY)
        self.assertEqual(events[0].instructor, "FIRST")

    def test_accepts_meeting_records(self) -> None:
        rec = MeetingRecord.from_row(_row(extra_column="ignored"))
        events = transform_meetings([rec], today=TODAY)
        self.assertEqual(len(events), 1)

    def test_empty_input(self) -> None:
        self.assertEqual(transform_meetings([], today=TODAY), [])


if __name__ == "__main__":
    unittest.main()
