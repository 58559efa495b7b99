"""pytest setup: project root on sys.path, in-memory database and a fake TMDB."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401,E402
from catalog import CatalogCache, CatalogClient  # noqa: E402
from config import FetchConfig  # noqa: E402
from database import Base  # noqa: E402
from fetcher import RetryingFetcher  # noqa: E402

TMDB_BASE_URL = "https://tmdb.test/3"

FIGHT_CLUB_DETAILS = {
    "id": 550,
    "title": "Fight Club",
    "overview": "A ticking-time-bomb insomniac and a slippery soap salesman...",
    "poster_path": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
    "backdrop_path": "/hZkgoQYus5vegHoetLkCJzb17zJ.jpg",
    "genres": [{"id": 18, "name": "Drama"}],
    "release_date": "1999-10-15",
    "original_language": "en",
    "tagline": "Mischief. Mayhem. Soap.",
    "vote_average": 8.4,
    "runtime": 139,
}

FIGHT_CLUB_CREDITS = {
    "id": 550,
    "cast": [
        {"id": 819, "name": "Edward Norton", "character": "Narrator"},
        {"id": 287, "name": "Brad Pitt", "character": "Tyler Durden"},
    ],
}

MATRIX_DETAILS = {
    "id": 603,
    "title": "The Matrix",
    "overview": "Set in the 22nd century...",
    "poster_path": "/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
    "backdrop_path": "/fNG7i7RqMErkcqhohV2a6cV1Ehy.jpg",
    "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
    "release_date": "1999-03-30",
    "original_language": "en",
    "vote_average": 8.2,
    "runtime": 136,
}

MATRIX_CREDITS = {"id": 603, "cast": [{"id": 6384, "name": "Keanu Reeves", "character": "Neo"}]}


class FakeTmdb:
    """Serves canned catalog payloads through httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.movies = {
            "550": (FIGHT_CLUB_DETAILS, FIGHT_CLUB_CREDITS),
            "603": (MATRIX_DETAILS, MATRIX_CREDITS),
        }
        self.now_playing = [{"id": 550, "title": "Fight Club"}, {"id": 603, "title": "The Matrix"}]
        # path -> list of status codes to answer with before succeeding
        self.failures = {}

    @property
    def paths(self):
        return [r.url.path for r in self.requests]

    def fail(self, path, *statuses):
        self.failures[path] = list(statuses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        pending = self.failures.get(path)
        if pending:
            return httpx.Response(pending.pop(0), json={"status_message": "failure"})

        if path.endswith("/movie/now_playing"):
            return httpx.Response(200, json={"results": self.now_playing})

        parts = path.rstrip("/").split("/")
        if parts[-1] == "credits":
            movie_id, index = parts[-2], 1
        else:
            movie_id, index = parts[-1], 0
        if movie_id not in self.movies:
            return httpx.Response(404, json={"status_message": "The resource you requested could not be found."})
        return httpx.Response(200, json=self.movies[movie_id][index])


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds):
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def tmdb():
    return FakeTmdb()


@pytest.fixture
def fetcher(tmdb, fake_sleep):
    config = FetchConfig(credential="test-token")
    return RetryingFetcher(config, transport=httpx.MockTransport(tmdb.handler), sleep=fake_sleep)


@pytest.fixture
def catalog_client(fetcher):
    return CatalogClient(fetcher, TMDB_BASE_URL)


@pytest.fixture
def catalog(catalog_client):
    return CatalogCache(catalog_client)
