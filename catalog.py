# catalog.py
import asyncio
import logging
from typing import Dict, List

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

import crud
from errors import CatalogSyncError
from fetcher import RetryingFetcher
from models import Movie

logger = logging.getLogger(__name__)


class CatalogClient:
    """Read endpoints of the TMDB movie catalog."""

    def __init__(self, fetcher: RetryingFetcher, base_url: str):
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    async def now_playing(self) -> List[dict]:
        response = await self.fetcher.get(f"{self.base_url}/movie/now_playing")
        return response.json().get("results", [])

    async def movie_details(self, movie_id: str) -> dict:
        response = await self.fetcher.get(f"{self.base_url}/movie/{movie_id}")
        return response.json()

    async def movie_credits(self, movie_id: str) -> dict:
        response = await self.fetcher.get(f"{self.base_url}/movie/{movie_id}/credits")
        return response.json()


def normalize_movie(movie_id: str, details: dict, credits: dict) -> dict:
    """Map the combined details + credits payloads onto the Movie columns.

    Values are copied as delivered; only ``tagline`` gets a default since
    TMDB omits or nulls it for many titles. The cast list lives in the
    credits payload (``cast``); a ``casts`` key on details is used when
    credits carry none. A payload without a title is rejected.
    """
    if not details.get("title"):
        raise CatalogSyncError(f"Malformed TMDB response for movie {movie_id}: missing title")
    casts = credits.get("cast")
    if casts is None:
        casts = details.get("casts") or []
    return {
        "id": str(movie_id),
        "title": details.get("title"),
        "overview": details.get("overview"),
        "poster_path": details.get("poster_path"),
        "backdrop_path": details.get("backdrop_path"),
        "genres": details.get("genres"),
        "casts": casts,
        "release_date": details.get("release_date"),
        "original_language": details.get("original_language"),
        "tagline": details.get("tagline") or "",
        "vote_average": details.get("vote_average"),
        "runtime": details.get("runtime"),
    }


class CatalogCache:
    """Returns stored movies, synchronizing each missing one from TMDB once."""

    def __init__(self, client: CatalogClient):
        self.client = client
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    async def resolve(self, db: Session, movie_id: str) -> Movie:
        movie_id = str(movie_id)
        lock = self._locks.setdefault(movie_id, asyncio.Lock())
        self._waiters[movie_id] = self._waiters.get(movie_id, 0) + 1
        try:
            async with lock:
                # a concurrent resolve may have synchronized it while we waited
                movie = await run_in_threadpool(crud.get_movie, db, movie_id)
                if movie:
                    return movie
                return await self._synchronize(db, movie_id)
        finally:
            self._waiters[movie_id] -= 1
            if not self._waiters[movie_id]:
                del self._waiters[movie_id]
                del self._locks[movie_id]

    async def _synchronize(self, db: Session, movie_id: str) -> Movie:
        try:
            details, credits = await asyncio.gather(
                self.client.movie_details(movie_id),
                self.client.movie_credits(movie_id),
            )
        except Exception as e:
            logger.error("TMDB API Error for movie %s: %s", movie_id, e)
            raise CatalogSyncError(f"Failed to fetch movie from TMDB: {e}") from e

        fields = normalize_movie(movie_id, details, credits)
        movie = await run_in_threadpool(crud.create_movie_if_not_exists, db, fields)
        logger.info("Synchronized movie %s (%s) from TMDB", movie.id, movie.title)
        return movie
