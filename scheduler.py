# scheduler.py
import logging
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

import crud
from catalog import CatalogCache
from errors import ScheduleError
from models import Show
from schemas import ShowSlotInput

logger = logging.getLogger(__name__)


def combine_date_time(show_date: str, show_time: str) -> datetime:
    """'2024-05-01' + '14:00' -> datetime(2024, 5, 1, 14, 0), naive UTC.

    Times without an offset are taken as UTC; times with one are converted.
    """
    raw = f"{show_date}T{show_time}"
    try:
        dt = datetime.fromisoformat(raw[:-1] + "+00:00" if raw.endswith("Z") else raw)
    except (TypeError, ValueError):
        raise ScheduleError(f"Invalid show date/time: {raw!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def expand_schedule(movie_id: str, shows_input: Iterable[ShowSlotInput], price: float) -> List[Show]:
    shows = []
    for slot in shows_input:
        for t in slot.time:
            shows.append(
                Show(
                    movie_id=movie_id,
                    show_date_time=combine_date_time(slot.date, t),
                    show_price=price,
                    occupied_seats={},
                )
            )
    return shows


async def create_shows(
    db: Session,
    catalog: CatalogCache,
    movie_id: str,
    shows_input: Iterable[ShowSlotInput],
    price: float,
) -> int:
    movie = await catalog.resolve(db, movie_id)

    shows = expand_schedule(movie.id, shows_input, price)
    if not shows:
        logger.info("No show slots given for movie %s", movie.id)
        return 0

    count = await run_in_threadpool(crud.bulk_create_shows, db, shows)
    logger.info("Created %d shows for movie %s at price %s", count, movie.id, price)
    return count
