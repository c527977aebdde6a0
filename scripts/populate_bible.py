#!/usr/bin/env python3
"""Populate bible_verses for every book, chapter, verse and translation."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import psycopg2
from fastapi import HTTPException

# Ensure the package is importable when the script is run directly.
PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from soapbox_bible.config import get_settings  # noqa: E402
from soapbox_bible.database import Database  # noqa: E402
from soapbox_bible.repositories import VerseRepository  # noqa: E402
from soapbox_bible.services.cache_service import CacheService, close_redis, initialize_redis  # noqa: E402
from soapbox_bible.services.population_service import PopulationDriver  # noqa: E402

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Populate the SoapBox Bible verse store")
    parser.add_argument(
        "--high-priority",
        action="store_true",
        help="Only populate the curated high-priority references",
    )
    parser.add_argument(
        "--translation",
        action="append",
        dest="translations",
        metavar="CODE",
        help="Translation code to populate; repeat for several (default: all)",
    )
    parser.add_argument(
        "--book",
        action="append",
        dest="books",
        metavar="NAME",
        help="Book to populate; repeat for several (default: all)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Records per upsert batch, clamped to 20..1000 (default: POPULATION_BATCH_SIZE)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many records would be written without touching the database",
    )
    return parser.parse_args(argv)


def ensure_table(database: Database) -> None:
    with database.connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT to_regclass('public.bible_verses') AS name;")
            if cur.fetchone()["name"] is None:
                raise RuntimeError("Table bible_verses does not exist. Run migrations before populating.")


def log_verification(repository: VerseRepository) -> None:
    counts = repository.count_by_translation()
    for code, total in counts.items():
        LOGGER.info("  %-5s %d verses", code, total)
    LOGGER.info(
        "Verification: %d verses stored, %d placeholders",
        repository.count(),
        repository.count_placeholders(),
    )


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    settings = get_settings()
    database = Database.from_settings(settings)
    driver = PopulationDriver(VerseRepository(database), batch_size=args.batch_size, settings=settings)

    try:
        if args.dry_run:
            planned = driver.planned_records(args.translations, args.books, args.high_priority)
            LOGGER.info("Dry run enabled; skipping database writes")
            LOGGER.info("Would write %d records in batches of %d", planned, driver.batch_size)
            return 0

        with database:
            ensure_table(database)
            report = driver.run(
                translations=args.translations,
                books=args.books,
                high_priority_only=args.high_priority,
            )
            log_verification(driver.repository)

        initialize_redis(settings)
        CacheService.clear_searches()
        CacheService.clear_verses()
        close_redis()
    except HTTPException as exc:
        LOGGER.error("Invalid arguments: %s", exc.detail)
        return 2
    except (psycopg2.Error, RuntimeError) as exc:
        LOGGER.error("Population aborted: %s", exc)
        return 1

    if report.failed:
        LOGGER.error("%d records could not be written", len(report.failed))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
