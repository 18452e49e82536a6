"""
Unit tests for the PostgREST client.

requests.Session is mocked: these tests check the query parameters sent for
each lookup and how failures are mapped to StoreError.
"""

import unittest
from unittest import mock

import requests

from roomschedule.store import MeetingStore, StoreError, clean_term, escape_like, ilike_contains, ilike_exact


def _response(status=200, payload=None, text=""):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


class TestCleanTerm(unittest.TestCase):
    def test_strips_reserved_characters(self) -> None:
        self.assertEqual(clean_term(' a(r),c*%" '), "arc")

    def test_none(self) -> None:
        self.assertEqual(clean_term(None), "")


class TestLikePatterns(unittest.TestCase):
    def test_underscore_matches_literally(self) -> None:
        self.assertEqual(ilike_exact("A_C"), "ilike.A\\_C")
        self.assertEqual(ilike_contains("1_"), "ilike.*1\\_*")

    def test_backslash_is_escaped(self) -> None:
        self.assertEqual(escape_like("a\\b"), "a\\\\b")

    def test_plain_terms_unchanged(self) -> None:
        self.assertEqual(ilike_exact(" ARC "), "ilike.ARC")


class TestMeetingStore(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock()
        self.session.headers = {}
        self.store = MeetingStore("https://example.supabase.co/", "anon-key", timeout=5, session=self.session)

    def _params(self):
        _, kwargs = self.session.get.call_args
        return kwargs["params"]

    def test_auth_headers(self) -> None:
        self.assertEqual(self.session.headers["apikey"], "anon-key")
        self.assertEqual(self.session.headers["Authorization"], "Bearer anon-key")

    def test_meetings_query(self) -> None:
        self.session.get.return_value = _response(payload=[{"id": 1}])
        rows = self.store.meetings("ARC", "105")

        self.assertEqual(rows, [{"id": 1}])
        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://example.supabase.co/rest/v1/class_meetings")
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(
            self._params(),
            {"select": "*", "building_code": "ilike.ARC", "room_number": "ilike.105"},
        )

    def test_room_numbers_without_filter(self) -> None:
        self.session.get.return_value = _response(payload=[])
        self.store.room_numbers("arc")
        self.assertEqual(self._params(), {"select": "room_number", "building_code": "ilike.arc"})

    def test_room_numbers_with_filter(self) -> None:
        self.session.get.return_value = _response(payload=[])
        self.store.room_numbers("ARC", "10")
        self.assertEqual(self._params()["room_number"], "ilike.*10*")

    def test_buildings_matching(self) -> None:
        self.session.get.return_value = _response(payload=[])
        self.store.buildings_matching("ar")
        params = self._params()
        self.assertEqual(params["or"], "(building_code.ilike.*ar*,full_name.ilike.*ar*)")
        self.assertNotIn("limit", params)

    def test_building_by_code(self) -> None:
        row = {"building_code": "ARC", "full_name": "Allison Road Classroom"}
        self.session.get.return_value = _response(payload=[row])
        self.assertEqual(self.store.building_by_code("arc"), row)
        self.assertEqual(self._params()["limit"], 1)

    def test_underscore_in_room_is_escaped(self) -> None:
        self.session.get.return_value = _response(payload=[])
        self.store.meetings("ARC", "1_5")
        self.assertEqual(self._params()["room_number"], "ilike.1\\_5")

    def test_building_by_code_missing(self) -> None:
        self.session.get.return_value = _response(payload=[])
        self.assertIsNone(self.store.building_by_code("NOPE"))

    def test_postgrest_error_message(self) -> None:
        self.session.get.return_value = _response(
            status=400, payload={"code": "42P01", "message": 'relation "x" does not exist'}
        )
        with self.assertRaises(StoreError) as ctx:
            self.store.meetings("ARC", "105")
        self.assertEqual(str(ctx.exception), 'relation "x" does not exist')

    def test_http_error_without_json(self) -> None:
        self.session.get.return_value = _response(status=503, text="Service Unavailable")
        with self.assertRaises(StoreError) as ctx:
            self.store.meetings("ARC", "105")
        self.assertEqual(str(ctx.exception), "HTTP 503: Service Unavailable")

    def test_network_error(self) -> None:
        self.session.get.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(StoreError) as ctx:
            self.store.meetings("ARC", "105")
        self.assertIn("connection refused", str(ctx.exception))

    def test_invalid_json(self) -> None:
        self.session.get.return_value = _response(status=200)
        with self.assertRaises(StoreError):
            self.store.meetings("ARC", "105")

    def test_unexpected_shape(self) -> None:
        self.session.get.return_value = _response(payload={"rows": []})
        with self.assertRaises(StoreError):
            self.store.meetings("ARC", "105")


if __name__ == "__main__":
    unittest.main()
