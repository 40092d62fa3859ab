# services.py
import logging
import re
from typing import Any, List, Optional, Tuple

import httpx

from movie_explorer.models import MovieDetail, MovieSummary

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"^\D*(\d+)")


class CatalogService:
    """A service to handle interactions with the movie catalog REST API.

    Every fetch returns a ``(payload, error_details)`` tuple; exactly one of
    the two is None.
    """
    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout,
                                 transport=self._transport)

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Tuple[Any, Optional[str]]:
        try:
            async with self._client() as client:
                resp = await client.get(path, params=params)
                resp.raise_for_status()
                return resp.json(), None
        except httpx.TimeoutException:
            logger.error("Catalog request %s timed out after %.0fs", path, self._timeout)
            return None, f"Request timed out after {self._timeout:.0f}s."
        except httpx.HTTPStatusError as exc:
            logger.error("Catalog request %s failed with status %s", path, exc.response.status_code)
            return None, f"Catalog returned HTTP {exc.response.status_code}."
        except httpx.HTTPError as exc:
            logger.error("Catalog request %s failed: %s", path, exc)
            return None, f"Could not reach the catalog: {exc}"
        except ValueError as exc:
            logger.error("Catalog request %s returned malformed JSON: %s", path, exc)
            return None, "Catalog returned a malformed response."

    async def top_rated(self, limit: int) -> Tuple[Optional[List[MovieSummary]], Optional[str]]:
        """Fetches the highest rated movies."""
        data, error_details = await self._get_json("/api/movies/top-rated", {"limit": limit})
        if error_details:
            return None, error_details
        return self._parse_list(data)

    async def search(self, title: str, page: int, size: int) -> Tuple[Optional[List[MovieSummary]], Optional[str]]:
        """Searches movies by title, one fixed-size page at a time."""
        data, error_details = await self._get_json(
            "/api/movies", {"title": title, "page": page, "size": size})
        if error_details:
            return None, error_details
        return self._parse_list(data)

    async def detail(self, movie_id: str) -> Tuple[Optional[MovieDetail], Optional[str]]:
        """Fetches the enriched record for a single movie."""
        data, error_details = await self._get_json(f"/api/movies/{movie_id}")
        if error_details:
            return None, error_details
        if not isinstance(data, dict) or not data.get("tconst"):
            return None, "Catalog returned a malformed movie record."
        try:
            return self._parse_detail(data), None
        except (TypeError, ValueError, KeyError) as exc:
            logger.error("Could not parse movie record %s: %s", movie_id, exc)
            return None, "Catalog returned a malformed movie record."

    async def health_check(self) -> bool:
        """Returns True when the catalog reports itself as up."""
        data, error_details = await self._get_json("/api/movies/health")
        if error_details:
            logger.warning("Catalog health check failed: %s", error_details)
            return False
        return isinstance(data, dict) and data.get("status") == "UP"

    def _parse_list(self, data: Any) -> Tuple[Optional[List[MovieSummary]], Optional[str]]:
        if not isinstance(data, list):
            return None, "Catalog returned a malformed movie list."
        unique_results: dict[str, MovieSummary] = {}
        try:
            for item in data:
                parsed_result = self._parse_summary(item)
                if parsed_result and parsed_result.id not in unique_results:
                    unique_results[parsed_result.id] = parsed_result
        except (TypeError, ValueError, KeyError) as exc:
            logger.error("Could not parse movie list: %s", exc)
            return None, "Catalog returned a malformed movie list."
        return list(unique_results.values()), None

    def _parse_summary(self, item: Any) -> Optional[MovieSummary]:
        """Parses a single raw API item into our MovieSummary data model."""
        if not isinstance(item, dict) or not item.get("tconst"):
            return None
        return MovieSummary(**self._summary_fields(item))

    def _parse_detail(self, item: dict) -> MovieDetail:
        return MovieDetail(
            **self._summary_fields(item),
            plot_summary=_text(item.get("plot")),
            director=_text(item.get("director")),
            cast=_text(item.get("cast")),
        )

    @staticmethod
    def _summary_fields(item: dict) -> dict:
        genres = item.get("genres") or ()
        if isinstance(genres, str):
            genres = genres.split(",")
        return dict(
            id=str(item["tconst"]),
            title=item.get("primaryTitle") or "N/A",
            release_year=_leading_int(item.get("startYear")),
            runtime_minutes=_leading_int(item.get("runtime")),
            genres=tuple(str(g).strip() for g in genres if str(g).strip()),
            poster_url=_text(item.get("poster")),
            average_rating=_optional(float, item.get("averageRating")),
            vote_count=_optional(int, item.get("numVotes")),
        )


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _leading_int(value: Any) -> Optional[int]:
    """'142 min' -> 142, '1994' -> 1994, '\\N' or '' -> None."""
    if value is None:
        return None
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return None
    number = int(match.group(1))
    return number or None


def _optional(convert, value: Any):
    if value is None or value == "":
        return None
    try:
        return convert(value)
    except (TypeError, ValueError):
        return None
