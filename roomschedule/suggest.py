"""
Debounced building suggestions.

Typing fires update() on every change. A Debouncer coalesces bursts into one
fetch per settled pause; each fetch carries the sequence number issued by
state.request_suggestions(), and its result goes through
state.suggestions_loaded(), which ignores anything but the latest request.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from roomschedule import state as st
from roomschedule.config import Config
from roomschedule.lookup import DEFAULT_SUGGESTION_LIMIT, Store, suggest_buildings
from roomschedule.store import StoreError

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Run `callback` once `delay_seconds` after the last trigger().

    A new trigger() replaces the pending timer. It can not recall a callback
    that has already started.
    """

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[..., Any],
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self.delay_seconds = delay_seconds
        self.callback = callback
        self._timer_factory = timer_factory
        self._timer: Optional[Any] = None
        self._lock = threading.Lock()

    def trigger(self, *args: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self._timer_factory(self.delay_seconds, self.callback, args)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Block until the pending callback (if any) has run.
        """
        with self._lock:
            timer = self._timer
        if timer is not None:
            timer.join(timeout)


class SuggestionFeed:
    def __init__(
        self,
        store: Store,
        on_update: Callable[[st.SearchState], None],
        delay_seconds: float = 0.2,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
        initial: Optional[st.SearchState] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self.store = store
        self.on_update = on_update
        self.limit = limit
        self._state = initial or st.SearchState()
        self._lock = threading.Lock()
        self._debouncer = Debouncer(delay_seconds, self._fetch, timer_factory=timer_factory)

    @classmethod
    def from_config(
        cls,
        store: Store,
        cfg: Config,
        on_update: Callable[[st.SearchState], None],
        initial: Optional[st.SearchState] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> "SuggestionFeed":
        return cls(
            store,
            on_update,
            delay_seconds=cfg.debounce_ms / 1000.0,
            limit=cfg.suggestion_limit,
            initial=initial,
            timer_factory=timer_factory,
        )

    @property
    def state(self) -> st.SearchState:
        with self._lock:
            return self._state

    def update(self, text: str) -> int:
        """
        Register new input text; returns the sequence number issued for it.
        """
        with self._lock:
            self._state, seq = st.request_suggestions(self._state, text)
            new_state = self._state

        if len((text or "").strip()) < st.MIN_SUGGESTION_CHARS:
            self._debouncer.cancel()
            self.on_update(new_state)
        else:
            self._debouncer.trigger(text, seq)
        return seq

    def wait(self, timeout: Optional[float] = None) -> st.SearchState:
        """
        Wait for the pending fetch to settle and return the resulting state.
        """
        self._debouncer.wait(timeout)
        return self.state

    def close(self) -> None:
        self._debouncer.cancel()

    def _fetch(self, text: str, seq: int) -> None:
        try:
            items = suggest_buildings(self.store, text, limit=self.limit)
        except StoreError as e:
            logger.warning("Suggestion lookup for %r failed: %s", text, e)
            return

        with self._lock:
            before = self._state
            self._state = st.suggestions_loaded(self._state, seq, items)
            changed = self._state is not before
            new_state = self._state

        if changed:
            self.on_update(new_state)
        else:
            logger.debug("Discarding stale suggestions for %r (seq=%d)", text, seq)
