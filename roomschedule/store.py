"""
Read-only client for the hosted tables (Supabase / PostgREST).

Two tables are used:

    class_meetings   one row per subject/section/day/time/room
    building_codes   building_code -> full_name

Every call is a single GET with PostgREST filters, e.g.

    /rest/v1/class_meetings?select=*&building_code=ilike.ARC&room_number=ilike.105

No retries: any failure is raised as StoreError and shown to the user once.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import requests

from roomschedule.config import Config

logger = logging.getLogger(__name__)

MEETINGS_TABLE = "class_meetings"
BUILDINGS_TABLE = "building_codes"

# Characters with a meaning inside PostgREST filter values
_RESERVED = ',()"*%'


class StoreError(Exception):
    """
    A remote query failed (network, HTTP status or malformed body).
    str(err) is the message to show the user.
    """


def clean_term(text: str) -> str:
    """
    Strip whitespace and PostgREST-reserved characters from user input.
    """
    return "".join(ch for ch in (text or "").strip() if ch not in _RESERVED)


def escape_like(value: str) -> str:
    """
    Escape the single-character LIKE wildcard so it matches literally.
    """
    return value.replace("\\", "\\\\").replace("_", "\\_")


def ilike_exact(value: str) -> str:
    return f"ilike.{escape_like(clean_term(value))}"


def ilike_contains(value: str) -> str:
    return f"ilike.*{escape_like(clean_term(value))}*"


class MeetingStore:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            }
        )

    @classmethod
    def from_config(cls, cfg: Config) -> "MeetingStore":
        return cls(cfg.supabase_url, cfg.supabase_key, timeout=cfg.timeout)

    # -----------------------------------------------------------------------
    # Low level
    # -----------------------------------------------------------------------

    def select(self, table: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """
        GET rows from `table` with the given PostgREST query parameters.
        """
        url = f"{self.base_url}/rest/v1/{table}"
        t0 = time.perf_counter()
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("GET %s failed: %r", url, e)
            raise StoreError(str(e) or e.__class__.__name__) from e

        elapsed = time.perf_counter() - t0
        logger.debug("GET %s params=%s status=%d in %.2fs", url, params, resp.status_code, elapsed)

        if not resp.ok:
            message = _error_message(resp)
            logger.warning("GET %s returned HTTP %d: %s", url, resp.status_code, message)
            raise StoreError(message)

        try:
            data = resp.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON from {table}") from e

        if not isinstance(data, list):
            raise StoreError(f"Unexpected response shape from {table}")
        return data

    # -----------------------------------------------------------------------
    # Queries used by roomschedule.lookup
    # -----------------------------------------------------------------------

    def room_numbers(self, building_code: str, room_filter: Optional[str] = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "select": "room_number",
            "building_code": ilike_exact(building_code),
        }
        if room_filter and clean_term(room_filter):
            params["room_number"] = ilike_contains(room_filter)
        return self.select(MEETINGS_TABLE, params)

    def meetings(self, building_code: str, room_number: str) -> list[dict[str, Any]]:
        params = {
            "select": "*",
            "building_code": ilike_exact(building_code),
            "room_number": ilike_exact(room_number),
        }
        return self.select(MEETINGS_TABLE, params)

    def buildings_matching(self, term: str, limit: Optional[int] = None) -> list[dict[str, Any]]:
        pattern = ilike_contains(term)
        params: dict[str, Any] = {
            "select": "building_code,full_name",
            "or": f"(building_code.{pattern},full_name.{pattern})",
        }
        if limit:
            params["limit"] = limit
        return self.select(BUILDINGS_TABLE, params)

    def building_by_code(self, building_code: str) -> Optional[dict[str, Any]]:
        params = {
            "select": "building_code,full_name",
            "building_code": ilike_exact(building_code),
            "limit": 1,
        }
        rows = self.select(BUILDINGS_TABLE, params)
        return rows[0] if rows else None


def _error_message(resp: requests.Response) -> str:
    # PostgREST errors look like {"code": "...", "message": "...", ...}
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}: {(resp.text or '')[:200]}".strip()
