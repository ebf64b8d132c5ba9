"""
Debounced search-as-you-type over the provider's geocoding operation.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Set

from .models import Coordinates

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3
MIN_QUERY_LENGTH = 2


class SearchState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    QUERYING = "querying"
    SHOWING_SUGGESTIONS = "showing_suggestions"


class SearchCoordinator:
    """
    Turns keystrokes into at most one geocoding lookup per quiet period.

    Every input restarts the debounce timer. When a lookup resolves, its
    result is shown only if no newer query has been issued since; a late
    answer to a superseded query is dropped.
    """

    def __init__(
        self,
        provider,
        on_suggestions: Callable[[List[Coordinates]], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        min_query_length: int = MIN_QUERY_LENGTH,
    ):
        self.provider = provider
        self.on_suggestions = on_suggestions
        self.debounce_seconds = debounce_seconds
        self.min_query_length = min_query_length
        self.state = SearchState.IDLE
        self.suggestions: List[Coordinates] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending_query: Optional[str] = None
        self._issued = 0
        self._lookups: Set[asyncio.Task] = set()

    def on_input(self, text: str) -> None:
        """Handle one keystroke's worth of input. Must run on the event loop."""
        self._cancel_timer()
        # Any newer keystroke supersedes lookups already in flight
        self._issued += 1
        query = (text or "").strip()

        if len(query) < self.min_query_length:
            self._show([])
            return

        loop = asyncio.get_running_loop()
        self._pending_query = query
        self._timer = loop.call_later(self.debounce_seconds, self._fire)
        self.state = SearchState.DEBOUNCING

    def select(self, coordinates: Coordinates) -> Coordinates:
        """Accept a suggestion; pending and in-flight lookups are discarded."""
        self.cancel()
        return coordinates

    def cancel(self) -> None:
        self._cancel_timer()
        self._issued += 1
        self._show([])

    async def wait_idle(self) -> None:
        """Wait for the pending timer (if any) and all in-flight lookups."""
        while self._timer is not None or self._lookups:
            if self._lookups:
                await asyncio.gather(*list(self._lookups), return_exceptions=True)
            else:
                await asyncio.sleep(self.debounce_seconds / 4 or 0.001)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._pending_query = None

    def _fire(self) -> None:
        query = self._pending_query
        self._timer = None
        self._pending_query = None
        if query is None:
            return

        self.state = SearchState.QUERYING
        task = asyncio.get_running_loop().create_task(self._lookup(query, self._issued))
        self._lookups.add(task)
        task.add_done_callback(self._lookups.discard)

    async def _lookup(self, query: str, ticket: int) -> None:
        try:
            results = await self.provider.geocode_by_name(query)
        except Exception as e:
            # Suggestions are best-effort; errors only empty the list
            logger.debug(f"Suggestion lookup for '{query}' failed: {e}")
            results = []

        if ticket != self._issued:
            logger.debug(f"Dropping stale suggestions for '{query}'")
            return

        self._show(results)

    def _show(self, results: List[Coordinates]) -> None:
        self.suggestions = list(results)
        self.state = SearchState.SHOWING_SUGGESTIONS if results else SearchState.IDLE
        self.on_suggestions(self.suggestions)
