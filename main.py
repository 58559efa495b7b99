import logging
from contextlib import asynccontextmanager
from typing import Union

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from availability import get_availability, list_upcoming_movies
from catalog import CatalogCache, CatalogClient
from config import get_settings, setup_logging
from database import Base, engine, get_db
from errors import CinemaError
from fetcher import RetryingFetcher
from scheduler import create_shows
import schemas

settings = get_settings()
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# --------------------------------------------------
# INIT
# --------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    fetcher = RetryingFetcher(settings.fetch_config())
    client = CatalogClient(fetcher, settings.TMDB_BASE_URL)
    app.state.catalog_client = client
    app.state.catalog_cache = CatalogCache(client)
    logger.info("Catalog client ready for %s", settings.TMDB_BASE_URL)
    try:
        yield
    finally:
        await fetcher.aclose()


app = FastAPI(
    title="Cinema Show Scheduling API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------------------------------
# DEPENDENCIES
# --------------------------------------------------
def get_catalog_client(request: Request) -> CatalogClient:
    return request.app.state.catalog_client


def get_catalog_cache(request: Request) -> CatalogCache:
    return request.app.state.catalog_cache


# --------------------------------------------------
# ERRORS
# --------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return JSONResponse(
        status_code=200,
        content=schemas.FailureResponse(message="; ".join(messages)).model_dump(),
    )


def failure(action: str, exc: Exception) -> schemas.FailureResponse:
    if isinstance(exc, CinemaError):
        logger.warning("%s Error: %s", action, exc.message)
        return schemas.FailureResponse(message=exc.message)
    logger.exception("%s Error: %s", action, exc)
    return schemas.FailureResponse(message=str(exc) or exc.__class__.__name__)


# --------------------------------------------------
# ROOT
# --------------------------------------------------
@app.get("/")
def read_root():
    return {"message": "Cinema Show Scheduling API"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return {"success": False, "database": "unavailable"}
    return {"success": True, "database": "ok"}


# --------------------------------------------------
# SHOWS
# --------------------------------------------------
@app.get(
    "/api/show/now-playing",
    response_model=Union[schemas.NowPlayingResponse, schemas.FailureResponse],
)
async def get_now_playing_movies(client: CatalogClient = Depends(get_catalog_client)):
    try:
        movies = await client.now_playing()
    except Exception as e:
        return failure("getNowPlayingMovies", e)
    return schemas.NowPlayingResponse(movies=movies)


@app.post(
    "/api/show/add",
    response_model=Union[schemas.MessageResponse, schemas.FailureResponse],
)
async def add_show(
    payload: schemas.AddShowRequest,
    db: Session = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog_cache),
):
    try:
        await create_shows(db, catalog, payload.movie_id, payload.shows_input, payload.show_price)
    except Exception as e:
        return failure("addShow", e)
    return schemas.MessageResponse(message="Show Added successfully.")


@app.get(
    "/api/show/all",
    response_model=Union[schemas.ShowListResponse, schemas.FailureResponse],
)
def get_shows(db: Session = Depends(get_db)):
    try:
        movies = list_upcoming_movies(db)
        shows = [schemas.MovieRead.model_validate(m) for m in movies]
    except Exception as e:
        return failure("getShows", e)
    return schemas.ShowListResponse(shows=shows)


@app.get(
    "/api/show/{movie_id}",
    response_model=Union[schemas.ShowAvailabilityResponse, schemas.FailureResponse],
)
def get_show(movie_id: str, db: Session = Depends(get_db)):
    try:
        movie, date_time = get_availability(db, movie_id)
        body = schemas.ShowAvailabilityResponse(
            movie=schemas.MovieRead.model_validate(movie),
            dateTime=date_time,
        )
    except Exception as e:
        return failure("getShow", e)
    return body


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
