from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator


# -----------------------------
# Schedule input
# -----------------------------
class ShowSlotInput(BaseModel):
    date: str
    time: List[str] = []


class AddShowRequest(BaseModel):
    movie_id: str = Field(alias="movieId")
    shows_input: List[ShowSlotInput] = Field(default_factory=list, alias="showsInput")
    show_price: float = Field(alias="showPrice")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("movie_id", mode="before")
    @classmethod
    def coerce_movie_id(cls, v):
        # TMDB ids arrive as numbers from most clients
        if isinstance(v, int):
            return str(v)
        return v


# -----------------------------
# Movie
# -----------------------------
class MovieRead(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"), serialization_alias="_id")
    title: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genres: Optional[List[Any]] = None
    casts: Optional[List[Any]] = None
    release_date: Optional[str] = None
    original_language: Optional[str] = None
    tagline: str = ""
    vote_average: Optional[float] = None
    runtime: Optional[int] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# -----------------------------
# Show times
# -----------------------------
class ShowTimeEntry(BaseModel):
    time: datetime
    showId: int

    @field_serializer("time", when_used="json")
    def serialize_time(self, value: datetime) -> str:
        # stored naive UTC; clients get an explicit UTC instant
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(timespec="milliseconds") + "Z"


# -----------------------------
# Response envelopes
# -----------------------------
class FailureResponse(BaseModel):
    success: Literal[False] = False
    message: str


class MessageResponse(BaseModel):
    success: Literal[True] = True
    message: str


class NowPlayingResponse(BaseModel):
    success: Literal[True] = True
    movies: List[Dict[str, Any]]


class ShowListResponse(BaseModel):
    success: Literal[True] = True
    shows: List[MovieRead]


class ShowAvailabilityResponse(BaseModel):
    success: Literal[True] = True
    movie: MovieRead
    dateTime: Dict[str, List[ShowTimeEntry]]
