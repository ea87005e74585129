from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from class_attendance.database.bootstrap import apply_seed_sql
from class_attendance.settings import get_settings_module

logger = logging.getLogger("class_attendance.scripts.seed_db")

DATABASE_DIR = Path(__file__).resolve().parents[1] / "database"


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
    logger.info("demo classes, students and teachers seeded into %s", db_config.get("database"))


if __name__ == "__main__":
    main()
