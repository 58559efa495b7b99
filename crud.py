# crud.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from errors import CatalogSyncError, MovieConflictError, ShowPersistenceError
from models import Movie, Show

logger = logging.getLogger(__name__)

# sqlite, postgres and mysql wordings of a unique/primary key violation
DUPLICATE_KEY_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")


def is_duplicate_key(error: IntegrityError) -> bool:
    text = str(error.orig).lower()
    return any(marker in text for marker in DUPLICATE_KEY_MARKERS)


# Movies
def get_movie(db: Session, movie_id: str) -> Optional[Movie]:
    return db.get(Movie, movie_id)


def create_movie_if_not_exists(db: Session, fields: dict) -> Movie:
    m = get_movie(db, fields["id"])
    if m:
        return m
    m = Movie(**fields)
    db.add(m)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        m = get_movie(db, fields["id"])
        if m is not None:
            # lost the insert race; the winner's row is the movie
            logger.info("Movie %s already created by another writer", fields["id"])
            return m
        if is_duplicate_key(e):
            raise MovieConflictError(fields["id"]) from e
        raise CatalogSyncError(f"Failed to store movie {fields['id']}: {e.orig}") from e
    db.refresh(m)
    return m


# Shows
def bulk_create_shows(db: Session, shows: List[Show]) -> int:
    if not shows:
        return 0
    db.add_all(shows)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise ShowPersistenceError(f"Failed to create {len(shows)} shows: {e}") from e
    return len(shows)


def list_upcoming_shows(db: Session, now: datetime) -> List[Show]:
    return (
        db.query(Show)
        .options(joinedload(Show.movie))
        .filter(Show.show_date_time >= now)
        .order_by(Show.show_date_time, Show.id)
        .all()
    )


def list_upcoming_shows_for_movie(db: Session, movie_id: str, now: datetime) -> List[Show]:
    return (
        db.query(Show)
        .filter(Show.movie_id == movie_id, Show.show_date_time >= now)
        .order_by(Show.show_date_time, Show.id)
        .all()
    )
