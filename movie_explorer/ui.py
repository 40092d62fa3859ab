# ui.py
from typing import Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.widgets import (Button, DataTable, Input, Label, Markdown, RichLog,
                             Static)

from movie_explorer.models import DiscoveryState, MovieDetail, MovieSummary

class SearchControls(Static):
    """Widget for the search input and the search / top rated buttons."""
    class SearchRequested(Message):
        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    class TopRatedRequested(Message):
        pass

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Search for movies...", id="search-input")
        yield Button("Search", variant="primary", id="search-button")
        yield Button("Top Rated", id="top-rated-button")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "top-rated-button":
            self.post_message(self.TopRatedRequested())
        else:
            self.post_search_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.post_search_message()

    def post_search_message(self) -> None:
        query = self.query_one(Input).value
        if query.strip():
            self.post_message(self.SearchRequested(query))

    def set_busy(self, busy: bool) -> None:
        self.query_one("#search-button", Button).disabled = busy


class ResultsHeading(Label):
    """Title line above the results table."""
    def update_heading(self, state: DiscoveryState) -> None:
        heading = state.heading
        if state.error:
            heading += "  [red](last refresh failed, press Ctrl+R to retry)[/red]"
        self.update(heading)


class ResultsDisplay(DataTable):
    """Widget for the main results table."""
    class RowSelected(Message):
        def __init__(self, key: str) -> None:
            self.key = key
            super().__init__()

    def on_mount(self) -> None:
        self.add_columns("Title", "Year", "Rating", "Genres")
        self.cursor_type = "row"

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value:
            self.post_message(self.RowSelected(event.row_key.value))

    def update_results(self, results: Sequence[MovieSummary]) -> None:
        self.clear()
        for m in results:
            self.add_row(
                Text(m.title),
                str(m.release_year or ""),
                f"{m.average_rating:.1f}" if m.average_rating is not None else "",
                Text(", ".join(m.genres[:3])),
                key=m.id,
            )
        self.focus()


class MovieOverlay(Static):
    """Overlay showing whatever is known about the selected movie."""
    def compose(self) -> ComposeResult:
        yield Markdown()

    def on_mount(self) -> None:
        self.update_details(None)

    def update_details(self, movie: Optional[MovieSummary]) -> None:
        self.display = movie is not None
        if movie is not None:
            self.query_one(Markdown).update(render_movie(movie))


def render_movie(movie: MovieSummary) -> str:
    """Markdown for the overlay. Detail-only sections appear once the detail has arrived."""
    lines = [f"## {movie.title}", ""]
    if movie.rating_label:
        lines.append(f"- **Rating**: ⭐ {movie.rating_label}")
    if movie.release_year:
        lines.append(f"- **Year**: {movie.release_year}")
    if movie.runtime_label:
        lines.append(f"- **Runtime**: {movie.runtime_label}")
    if movie.genres:
        lines.append(f"- **Genres**: {', '.join(movie.genres)}")
    lines.append(f"- **Poster**: `{movie.poster_url}`" if movie.has_poster else "- **Poster**: 🎬 *no image*")
    lines.append(f"- **IMDb**: `{movie.imdb_url}`")

    if isinstance(movie, MovieDetail):
        if movie.has_plot:
            lines += ["", "### Plot", "", movie.plot_summary]
        if movie.director:
            lines += ["", "### Director", "", movie.director]
        if movie.cast:
            lines += ["", "### Cast", "", movie.cast]

    lines += ["", "*Press Esc to close.*"]
    return "\n".join(lines)


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
