# main.py
import logging

try:
    import pyperclip
except ImportError:
    pyperclip = None

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.reactive import reactive
from textual.widgets import Footer, Header, Input

from movie_explorer.config import Config
from movie_explorer.discovery import DiscoveryController, FetchOutcome, StateStore
from movie_explorer.logging_config import setup_logging
from movie_explorer.models import DiscoveryState, MovieSummary
from movie_explorer.services import CatalogService
from movie_explorer.ui import (LogPane, MovieOverlay, ResultsDisplay,
                               ResultsHeading, SearchControls)

logger = logging.getLogger(__name__)

class MovieExplorerApp(App):
    TITLE = "IMDb Explorer"
    # Priority bindings fire even while the search input has focus.
    BINDINGS = [
        Binding("ctrl+t", "top_rated", "Top Rated", priority=True),
        Binding("ctrl+r", "retry", "Retry", priority=True),
        Binding("t", "top_rated", "Top Rated", show=False),
        Binding("r", "retry", "Retry", show=False),
        ("c", "copy_link", "Copy IMDb Link"),
        ("escape", "close_overlay", "Close"),
        ("d", "toggle_dark", "Toggle dark mode"),
        ("q", "quit", "Quit"),
    ]
    CSS_PATH = "movie_explorer.tcss"

    app_state = reactive(DiscoveryState(), always_update=True)

    def __init__(self, catalog: CatalogService, config: Config):
        super().__init__()
        self.catalog = catalog
        self.config = config
        self.store = StateStore()
        self.controller = DiscoveryController(
            catalog, self.store, limit=config.RESULT_LIMIT, page=config.SEARCH_PAGE)
        self.store.subscribe(self._publish_state)

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-container"):
            with Vertical(id="results-pane"):
                yield SearchControls(id="search-controls")
                yield ResultsHeading(id="results-heading")
                yield ResultsDisplay(id="results-table")
            yield LogPane(id="log", wrap=True, highlight=True, markup=True)
        yield MovieOverlay(id="movie-overlay")
        yield Footer()

    def on_mount(self) -> None:
        log = self.query_one(LogPane)
        self.query_one(Input).focus()
        if pyperclip:
            log.add_message("[green]✅ Clipboard found.[/green]")
        else:
            log.add_message("[yellow]⚠️ 'pyperclip' not installed.[/yellow]")
        self.run_worker(self.check_catalog(), group="health_worker")
        self.action_top_rated()

    def _publish_state(self, state: DiscoveryState) -> None:
        self.app_state = state

    def watch_app_state(self, old_state: DiscoveryState, new_state: DiscoveryState) -> None:
        """Pushes state changes to child widgets."""
        if old_state.results != new_state.results:
            self.query_one(ResultsDisplay).update_results(new_state.results)
        self.query_one(ResultsHeading).update_heading(new_state)
        self.query_one(SearchControls).set_busy(new_state.is_loading)
        self.query_one(MovieOverlay).update_details(new_state.selected)

    # --- Actions ---
    def action_top_rated(self) -> None:
        self.query_one(LogPane).add_message("🏆 Loading top rated movies...")
        self.run_worker(self.perform_top_rated(), group="catalog_worker")

    def action_retry(self) -> None:
        self.run_worker(self.perform_retry(), group="catalog_worker")

    def action_close_overlay(self) -> None:
        if self.app_state.overlay_open:
            self.controller.close_overlay()

    def action_copy_link(self) -> None:
        log = self.query_one(LogPane)
        if not pyperclip:
            log.add_message("[red]❌ 'pyperclip' not installed.[/red]")
            return
        selected = self.app_state.selected
        if selected:
            pyperclip.copy(selected.imdb_url)
            log.add_message(f"📋 Copied IMDb link for '[b]{escape(selected.title)}[/b]'.")
        else:
            log.add_message("[yellow]⚠️ No movie selected.[/yellow]")

    # --- Message Handlers ---
    def on_search_controls_search_requested(self, message: SearchControls.SearchRequested) -> None:
        self.query_one(LogPane).add_message(f"🔎 Searching for '{escape(message.query)}'...")
        self.run_worker(self.perform_search(message.query), group="catalog_worker")

    def on_search_controls_top_rated_requested(self, message: SearchControls.TopRatedRequested) -> None:
        self.action_top_rated()

    def on_results_display_row_selected(self, message: ResultsDisplay.RowSelected) -> None:
        selected = next((m for m in self.app_state.results if m.id == message.key), None)
        if selected:
            self.run_worker(self.perform_select(selected), group="detail_worker")

    # --- Worker Methods ---
    async def check_catalog(self) -> None:
        log = self.query_one(LogPane)
        if await self.catalog.health_check():
            log.add_message(f"[green]✅ Catalog reachable at {self.config.CATALOG_BASE_URL}.[/green]")
        else:
            log.add_message(f"[yellow]⚠️ Catalog at {self.config.CATALOG_BASE_URL} did not report healthy.[/yellow]")

    async def perform_top_rated(self) -> None:
        outcome = await self.controller.load_top_rated()
        self.report(outcome, "top rated movies")

    async def perform_search(self, query: str) -> None:
        outcome = await self.controller.search(query)
        self.report(outcome, f"'{escape(query)}'")

    async def perform_retry(self) -> None:
        log = self.query_one(LogPane)
        outcome = await self.controller.retry()
        if outcome is FetchOutcome.SKIPPED:
            log.add_message("[dim]Nothing to retry.[/dim]")
        else:
            self.report(outcome, "retry")

    async def perform_select(self, summary: MovieSummary) -> None:
        outcome = await self.controller.select_movie(summary)
        if outcome is FetchOutcome.FAILED:
            self.query_one(LogPane).add_message(
                f"[yellow]⚠️ Could not load full details for '[b]{escape(summary.title)}[/b]'; showing what we have.[/yellow]")

    def report(self, outcome: FetchOutcome, what: str) -> None:
        log = self.query_one(LogPane)
        if outcome is FetchOutcome.COMMITTED:
            log.add_message(f"🎬 Showing {len(self.app_state.results)} results for {what}.")
        elif outcome is FetchOutcome.EMPTY:
            log.add_message(f"🤷 No movies found for {what}.")
        elif outcome is FetchOutcome.FAILED:
            log.add_message(f"[red]❌ {escape(self.app_state.error or '')}[/red]")


def main() -> None:
    app_config = Config.from_env()
    setup_logging(app_config.LOG_FILENAME, level=app_config.LOG_LEVEL, log_dir=app_config.LOG_DIR)
    catalog = CatalogService(app_config.CATALOG_BASE_URL, timeout=app_config.REQUEST_TIMEOUT)

    app = MovieExplorerApp(catalog, app_config)
    logger.info("Starting movie explorer against %s", app_config.CATALOG_BASE_URL)
    app.run()


if __name__ == "__main__":
    main()
