#!/usr/bin/env python3
"""
Populate the local movie cache with TMDB's popular movies
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


async def populate(pages: int) -> int:
    from streamflix.config import settings
    from streamflix.database import AsyncSessionLocal, engine, init_db
    from streamflix.services.populate_service import PopulateService
    from streamflix.services.tmdb_service import TMDBService

    if not settings.TMDB_API_KEY:
        print("TMDB_API_KEY is not set")
        return 1

    await init_db()
    tmdb = TMDBService(settings.TMDB_API_KEY)
    try:
        async with AsyncSessionLocal() as db:
            result = await PopulateService(db, tmdb).populate_popular(pages)
    finally:
        await tmdb.close()
        await engine.dispose()

    print(f"Stored {result['stored']} movies")
    if result["failed_pages"]:
        print(f"Pages that failed: {result['failed_pages']}")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip())
    parser.add_argument("--pages", type=int, default=5, help="Popular pages to fetch (20 movies each)")
    args = parser.parse_args()
    sys.exit(asyncio.run(populate(args.pages)))


if __name__ == "__main__":
    main()
