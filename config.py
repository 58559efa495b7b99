# config.py
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parent

load_dotenv(ROOT_DIR / ".env")


@dataclass(frozen=True)
class FetchConfig:
    """Outbound catalog call settings, fixed when the fetcher is built."""

    timeout_ms: int = 15000
    max_retries: int = 3
    initial_backoff_ms: int = 1000
    backoff_multiplier: float = 2
    credential: str = ""


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./cinema.db"

    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_API_KEY: str = ""
    TMDB_TIMEOUT_MS: int = 15000
    TMDB_MAX_RETRIES: int = 3
    TMDB_INITIAL_BACKOFF_MS: int = 1000
    TMDB_BACKOFF_MULTIPLIER: float = 2

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def fetch_config(self) -> FetchConfig:
        return FetchConfig(
            timeout_ms=self.TMDB_TIMEOUT_MS,
            max_retries=self.TMDB_MAX_RETRIES,
            initial_backoff_ms=self.TMDB_INITIAL_BACKOFF_MS,
            backoff_multiplier=self.TMDB_BACKOFF_MULTIPLIER,
            credential=self.TMDB_API_KEY,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
