# seed_from_json.py
import argparse
import asyncio
import json

from pydantic import ValidationError

from catalog import CatalogCache, CatalogClient
from config import get_settings, setup_logging
from database import SessionLocal, engine, Base
from errors import CinemaError
from fetcher import RetryingFetcher
import models  # noqa: F401  registers tables on Base
from scheduler import create_shows
from schemas import AddShowRequest


# -------------------------------------------------------
# RESET DATABASE (DROP EVERYTHING)
# -------------------------------------------------------
def reset_database():
    print("⚠️ WARNING: Dropping ALL tables...")
    Base.metadata.drop_all(bind=engine)
    print("🗑️ All tables dropped.")

    print("📦 Recreating tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tables recreated.\n")


# -------------------------------------------------------
# SEEDER
# -------------------------------------------------------
def load_requests(file_path: str):
    """Read ``{"shows": [{movieId, showPrice, showsInput}, ...]}``.

    Entries that do not validate are reported and skipped.
    """
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    requests = []
    for i, entry in enumerate(data.get("shows", [])):
        try:
            requests.append(AddShowRequest.model_validate(entry))
        except ValidationError as e:
            print(f"❌ Skipping entry #{i}: {e.errors()[0]['msg']}")
    return requests


async def seed_file(file_path: str, catalog: CatalogCache) -> int:
    print(f"🌱 Seeding {file_path}")

    created = 0
    db = SessionLocal()
    try:
        for req in load_requests(file_path):
            try:
                count = await create_shows(db, catalog, req.movie_id, req.shows_input, req.show_price)
            except CinemaError as e:
                print(f"❌ Movie {req.movie_id}: {e.message}")
                continue
            print(f"🎬 Movie {req.movie_id}: {count} shows")
            created += count
    finally:
        db.close()

    print(f"✅ Finished seeding {file_path} ({created} shows)\n")
    return created


async def run(file_path: str):
    settings = get_settings()
    async with RetryingFetcher(settings.fetch_config()) as fetcher:
        catalog = CatalogCache(CatalogClient(fetcher, settings.TMDB_BASE_URL))
        return await seed_file(file_path, catalog)


# -------------------------------------------------------
# MAIN
# -------------------------------------------------------
def main(argv=None):
    parser = argparse.ArgumentParser(description="Schedule shows from a JSON file")
    parser.add_argument("file", help="JSON file with a top-level 'shows' list")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args(argv)

    setup_logging(get_settings().LOG_LEVEL)

    if args.reset:
        reset_database()
    else:
        Base.metadata.create_all(bind=engine)

    asyncio.run(run(args.file))
    print("🎉 Seeding complete.")


if __name__ == "__main__":
    main()
