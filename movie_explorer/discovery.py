"""
Discovery state machine: which result set is shown, and what the overlay holds.

All operations are coroutines meant to run on a single event loop. Fetches
are never cancelled; a response that has been superseded is recognised on
arrival and dropped.
"""

import dataclasses
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple

from movie_explorer.models import DiscoveryState, Mode, MovieDetail, MovieSummary

logger = logging.getLogger(__name__)

Listener = Callable[[DiscoveryState], None]


class FetchOutcome(Enum):
    COMMITTED = "committed"
    EMPTY = "empty"
    FAILED = "failed"
    STALE = "stale"
    SKIPPED = "skipped"


class Catalog(Protocol):
    async def top_rated(self, limit: int) -> Tuple[Optional[List[MovieSummary]], Optional[str]]: ...

    async def search(self, title: str, page: int, size: int) -> Tuple[Optional[List[MovieSummary]], Optional[str]]: ...

    async def detail(self, movie_id: str) -> Tuple[Optional[MovieDetail], Optional[str]]: ...


async def _settle(label: str, call) -> Tuple[object, Optional[str]]:
    """Awaits a catalog call; an exception becomes error details like any other failure."""
    try:
        return await call()
    except Exception as exc:
        logger.exception("Catalog call for %s raised", label)
        return None, f"Unexpected error: {exc!r}"


class StateStore:
    """Owns the current DiscoveryState and publishes every replacement."""

    def __init__(self, initial: Optional[DiscoveryState] = None):
        self._state = initial or DiscoveryState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> DiscoveryState:
        return self._state

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def update(self, **changes) -> DiscoveryState:
        self._state = dataclasses.replace(self._state, **changes)
        for listener in self._listeners:
            listener(self._state)
        return self._state


class DetailResolver:
    """Opens the overlay on a summary at once, then upgrades it to the full detail."""

    def __init__(self, catalog: Catalog, store: StateStore):
        self.catalog = catalog
        self.store = store

    async def resolve(self, summary: MovieSummary) -> FetchOutcome:
        self.store.update(selected=summary)
        detail, error_details = await _settle(
            f"detail for {summary.id}", lambda: self.catalog.detail(summary.id))

        if error_details is not None:
            # The summary already on screen is the fallback.
            logger.warning("Detail lookup for %s failed: %s", summary.id, error_details)
            return FetchOutcome.FAILED

        selected = self.store.state.selected
        if selected is None or selected.id != summary.id:
            logger.debug("Discarding detail for %s; overlay no longer shows it", summary.id)
            return FetchOutcome.STALE

        self.store.update(selected=detail)
        return FetchOutcome.COMMITTED


class DiscoveryController:
    """Drives the main result list: top rated, search, and their failures.

    Only the most recently issued main-list fetch may commit. Each fetch takes
    a sequence number when it is issued and its response is applied only if
    that number is still the highest one handed out.
    """

    def __init__(self, catalog: Catalog, store: Optional[StateStore] = None,
                 limit: int = 20, page: int = 0):
        self.catalog = catalog
        self.store = store or StateStore()
        self.resolver = DetailResolver(catalog, self.store)
        self.limit = limit
        self.page = page
        self._issued = 0
        self._committed_mode = Mode.IDLE
        self._failed_request: Optional[Callable[[], Awaitable[FetchOutcome]]] = None

    @property
    def state(self) -> DiscoveryState:
        return self.store.state

    async def load_top_rated(self) -> FetchOutcome:
        return await self._fetch(
            "top rated",
            lambda: self.catalog.top_rated(self.limit),
            mode=Mode.TOP,
            query="",
            request=self.load_top_rated,
        )

    async def search(self, text: str) -> FetchOutcome:
        if not text or not text.strip():
            return FetchOutcome.SKIPPED
        return await self._fetch(
            f"search for '{text}'",
            lambda: self.catalog.search(text, self.page, self.limit),
            mode=Mode.SEARCH,
            query=text,
            request=lambda: self.search(text),
        )

    async def retry(self) -> FetchOutcome:
        """Re-issues the last main-list request that failed, if any."""
        if self._failed_request is None:
            return FetchOutcome.SKIPPED
        return await self._failed_request()

    async def select_movie(self, summary: MovieSummary) -> FetchOutcome:
        return await self.resolver.resolve(summary)

    def close_overlay(self) -> None:
        self.store.update(selected=None)

    async def _fetch(self, label: str, call, mode: Mode, query: str, request) -> FetchOutcome:
        self._issued += 1
        seq = self._issued
        self.store.update(mode=Mode.LOADING, error=None)

        results, error_details = await _settle(label, call)

        if seq != self._issued:
            logger.debug("Discarding stale %s response (#%d, latest #%d)", label, seq, self._issued)
            return FetchOutcome.STALE

        if error_details is not None:
            logger.warning("%s failed: %s", label.capitalize(), error_details)
            self._failed_request = request
            self.store.update(mode=self._committed_mode,
                              error=f"Could not load {label}: {error_details}")
            return FetchOutcome.FAILED

        self._failed_request = None
        if not results:
            self._committed_mode = Mode.EMPTY
            self.store.update(mode=Mode.EMPTY, results=(), query=query, error=None)
            return FetchOutcome.EMPTY

        self._committed_mode = mode
        self.store.update(mode=mode, results=tuple(results), query=query, error=None)
        logger.info("Committed %d results for %s", len(results), label)
        return FetchOutcome.COMMITTED
