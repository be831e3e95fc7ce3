"""
TMDB Catalog Client

Paginated fetch of TMDB list endpoints (discover/movie, discover/tv,
movie/upcoming, tv/airing_today) normalized into CatalogItem records.
"""

import asyncio
from datetime import date, datetime
from typing import Any, Dict, List, Optional
import httpx

from ..config import get_settings
from ..core.exceptions import UpstreamError
from ..core.logging import get_logger
from ..models.release import CatalogItem, MediaType

logger = get_logger(__name__)
settings = get_settings()


def media_type_for_query(query_type: str) -> Optional[MediaType]:
    """discover/movie, movie/upcoming -> movie; discover/tv, tv/airing_today -> tv."""
    if "movie" in query_type:
        return MediaType.MOVIE
    if "tv" in query_type:
        return MediaType.TV
    return None


def parse_release_date(raw: Any) -> Optional[date]:
    """
    Parse a TMDB date field down to its calendar date.

    Accepts `YYYY-MM-DD` and full ISO timestamps. Returns None for
    empty or unparseable values.
    """
    if not raw or not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def normalize_item(item: Dict[str, Any], media_type: MediaType) -> Optional[CatalogItem]:
    """
    Normalize a raw TMDB result.

    Movies carry `title`/`release_date`, TV shows `name`/`first_air_date`.
    Returns None when the item has no usable date.
    """
    title = item.get("title") or item.get("name") or "Unknown"
    date_field = "release_date" if media_type == MediaType.MOVIE else "first_air_date"
    raw_date = item.get(date_field)

    release_date = parse_release_date(raw_date)
    if release_date is None:
        logger.debug(
            "catalog_item_skipped",
            tmdb_id=item.get("id"),
            title=title,
            raw_date=raw_date,
            reason="missing_date" if not raw_date else "invalid_date",
        )
        return None

    return CatalogItem(
        source_id=item["id"],
        title=title,
        media_type=media_type,
        release_date=release_date,
        overview=item.get("overview"),
        poster_path=item.get("poster_path"),
        popularity=item.get("popularity") or 0.0,
        genre_source_ids=item.get("genre_ids") or [],
    )


class CatalogClient:
    """
    TMDB API client used by the ingestion job.

    Pages are fetched sequentially with a short delay between requests
    to stay under TMDB's rate limits.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        page_delay: Optional[float] = None,
        max_pages: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.tmdb_api_key
        self.base_url = (base_url or settings.tmdb_base_url).rstrip("/")
        self.page_delay = settings.tmdb_page_delay_seconds if page_delay is None else page_delay
        self.max_pages = max_pages or settings.tmdb_max_pages

    async def _get(
        self,
        client: httpx.AsyncClient,
        path: str,
        params: Dict[str, Any],
    ) -> Dict[str, Any]:
        try:
            response = await client.get(
                f"{self.base_url}/{path}",
                params={"api_key": self.api_key, **params},
                timeout=settings.tmdb_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.error("tmdb_request_error", path=path, error=str(e))
            raise UpstreamError("TMDB", str(e)) from e

        if response.status_code != 200:
            logger.error("tmdb_request_failed", path=path, status=response.status_code)
            raise UpstreamError("TMDB", f"{path} returned HTTP {response.status_code}")

        return response.json()

    async def fetch_all(self, query_type: str, params: Optional[Dict[str, Any]] = None) -> List[CatalogItem]:
        """
        Fetch every result page for `query_type` and normalize the items.

        Args:
            query_type: TMDB list path, e.g. "discover/movie"
            params: Query filters (date range, language, sort, vote thresholds)

        Raises:
            UpstreamError: on any failed page; nothing is returned for the batch
        """
        media_type = media_type_for_query(query_type)
        if media_type is None:
            raise ValueError(f"Unsupported query type: {query_type}")

        if not self.api_key:
            logger.warning("tmdb_api_key_not_set")

        params = dict(params or {})
        items: List[CatalogItem] = []
        skipped = 0
        page, total_pages = 1, 1

        logger.info("catalog_fetch_started", query_type=query_type, filters=params)

        async with httpx.AsyncClient() as client:
            while page <= total_pages:
                if page > 1 and self.page_delay:
                    await asyncio.sleep(self.page_delay)

                data = await self._get(client, query_type, {**params, "page": page})

                if page == 1:
                    total_pages = min(data.get("total_pages") or 0, self.max_pages)
                    logger.info(
                        "catalog_total_results",
                        query_type=query_type,
                        total_results=data.get("total_results", 0),
                        total_pages=total_pages,
                    )

                for raw in data.get("results") or []:
                    item = normalize_item(raw, media_type)
                    if item is None:
                        skipped += 1
                    else:
                        items.append(item)

                logger.debug("catalog_page_fetched", query_type=query_type, page=page, total_pages=total_pages)
                page += 1

        logger.info("catalog_fetch_completed", query_type=query_type, items=len(items), skipped=skipped)
        return items

    async def fetch_genres(self, media_type: MediaType) -> List[Dict[str, Any]]:
        """Fetch the TMDB genre list (`[{id, name}]`) for movies or TV."""
        async with httpx.AsyncClient() as client:
            data = await self._get(
                client,
                f"genre/{MediaType(media_type).value}/list",
                {"language": settings.tmdb_language},
            )
        genres = data.get("genres") or []
        logger.info("catalog_genres_fetched", media_type=MediaType(media_type).value, count=len(genres))
        return genres
