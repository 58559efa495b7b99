# availability.py
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

import crud
from errors import MovieNotFoundError
from models import Movie


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def list_upcoming_movies(db: Session, now: Optional[datetime] = None) -> List[Movie]:
    """Movies with at least one show at or after ``now``.

    Each movie appears once, ordered by its earliest upcoming show.
    """
    now = now or utc_now()
    movies: Dict[str, Movie] = {}
    for show in crud.list_upcoming_shows(db, now):
        movies.setdefault(show.movie_id, show.movie)
    return list(movies.values())


def get_availability(
    db: Session, movie_id: str, now: Optional[datetime] = None
) -> Tuple[Movie, Dict[str, List[dict]]]:
    now = now or utc_now()
    movie = crud.get_movie(db, str(movie_id))
    if movie is None:
        raise MovieNotFoundError(str(movie_id))

    date_time: Dict[str, List[dict]] = {}
    for show in crud.list_upcoming_shows_for_movie(db, movie.id, now):
        day = show.show_date_time.date().isoformat()
        date_time.setdefault(day, []).append(
            {"time": show.show_date_time, "showId": show.id}
        )
    return movie, date_time
