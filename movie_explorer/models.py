# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

POSTER_UNAVAILABLE = "N/A"
PLOT_UNAVAILABLE = "Plot not available"

@dataclass(frozen=True)
class MovieSummary:
    """A single catalog entry as it appears in a result list."""
    id: str
    title: str
    release_year: Optional[int] = None
    runtime_minutes: Optional[int] = None
    genres: Tuple[str, ...] = ()
    poster_url: Optional[str] = None
    average_rating: Optional[float] = None
    vote_count: Optional[int] = None

    @property
    def has_poster(self) -> bool:
        return bool(self.poster_url) and self.poster_url != POSTER_UNAVAILABLE

    @property
    def imdb_url(self) -> str:
        return f"https://www.imdb.com/title/{self.id}/"

    @property
    def runtime_label(self) -> Optional[str]:
        return f"{self.runtime_minutes} min" if self.runtime_minutes else None

    @property
    def rating_label(self) -> Optional[str]:
        if self.average_rating is None:
            return None
        label = f"{self.average_rating:.1f}"
        if self.vote_count:
            label += f" ({self.vote_count:,} votes)"
        return label

@dataclass(frozen=True)
class MovieDetail(MovieSummary):
    """A summary enriched with plot and credits for the detail overlay."""
    plot_summary: Optional[str] = None
    director: Optional[str] = None
    cast: Optional[str] = None

    @property
    def has_plot(self) -> bool:
        return bool(self.plot_summary) and self.plot_summary != PLOT_UNAVAILABLE

class Mode(Enum):
    IDLE = "idle"
    LOADING = "loading"
    TOP = "top"
    SEARCH = "search"
    EMPTY = "empty"

@dataclass(frozen=True)
class DiscoveryState:
    """A single object to hold the entire discovery state.

    While ``mode`` is LOADING, ``results`` still holds the last committed
    result set. ``selected`` is None when the overlay is closed.
    """
    mode: Mode = Mode.LOADING
    results: Tuple[MovieSummary, ...] = field(default_factory=tuple)
    query: str = ""
    selected: Optional[MovieSummary] = None
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.mode is Mode.LOADING

    @property
    def overlay_open(self) -> bool:
        return self.selected is not None

    @property
    def heading(self) -> str:
        if self.mode is Mode.LOADING:
            return "Loading..."
        if self.mode is Mode.TOP:
            return "Top Rated Movies"
        if self.mode is Mode.SEARCH:
            return f"Search Results ({len(self.results)})"
        if self.mode is Mode.EMPTY:
            return "No movies found"
        return "Movies"
