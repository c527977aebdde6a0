#!/usr/bin/env python3
"""Replace placeholder rows with authored text for the curated references."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import psycopg2

PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from soapbox_bible.config import get_settings  # noqa: E402
from soapbox_bible.database import Database  # noqa: E402
from soapbox_bible.repositories import VerseRepository  # noqa: E402
from soapbox_bible.seed import load_seed  # noqa: E402
from soapbox_bible.services.cache_service import CacheService, close_redis, initialize_redis  # noqa: E402
from soapbox_bible.services.population_service import PopulationDriver  # noqa: E402
from soapbox_bible.services.verse_text_provider import VerseTextProvider  # noqa: E402
from soapbox_bible.utils.exceptions import SeedDataError  # noqa: E402

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Overwrite placeholder verses with authored text")
    parser.add_argument(
        "--seed-path",
        type=Path,
        default=None,
        help="Alternative authentic verse JSON file (default: packaged asset)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    settings = get_settings()

    try:
        seed = load_seed(args.seed_path)
    except (OSError, SeedDataError) as exc:
        LOGGER.error("Could not load authentic verses: %s", exc)
        return 2

    database = Database.from_settings(settings)
    driver = PopulationDriver(VerseRepository(database), provider=VerseTextProvider(seed), settings=settings)

    try:
        with database:
            report = driver.fix_authentic_verses()
    except psycopg2.Error as exc:
        LOGGER.error("Fix aborted: %s", exc)
        return 1

    initialize_redis(settings)
    CacheService.clear_searches()
    CacheService.clear_verses()
    close_redis()

    LOGGER.info(
        "Replaced %d placeholders (%d before, %d after)",
        report.replaced,
        report.placeholders_before,
        report.placeholders_after,
    )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
