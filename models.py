# models.py
from sqlalchemy import Column, Integer, String, Float, Text, JSON, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Movie(Base):
    __tablename__ = "movies"

    # catalog (TMDB) identifier, not generated locally
    id = Column(String(50), primary_key=True, index=True)

    title = Column(String(255), nullable=False)
    overview = Column(Text)
    poster_path = Column(String(255))
    backdrop_path = Column(String(255))
    genres = Column(JSON, default=list)
    casts = Column(JSON, default=list)
    release_date = Column(String(20))
    original_language = Column(String(10))
    tagline = Column(String(500), nullable=False, default="")
    vote_average = Column(Float)
    runtime = Column(Integer)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    shows = relationship("Show", back_populates="movie")

    def __repr__(self):
        return f"<Movie(id={self.id!r}, title={self.title!r})>"


class Show(Base):
    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, index=True)
    movie_id = Column(String(50), ForeignKey("movies.id"), nullable=False, index=True)

    # naive UTC
    show_date_time = Column(DateTime, nullable=False, index=True)
    show_price = Column(Float, nullable=False)
    occupied_seats = Column(JSON, nullable=False, default=dict)

    movie = relationship("Movie", back_populates="shows")

    def __repr__(self):
        return f"<Show(id={self.id}, movie_id={self.movie_id!r}, show_date_time={self.show_date_time})>"
