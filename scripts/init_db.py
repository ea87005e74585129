from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from class_attendance.database.bootstrap import apply_schema, list_tables
from class_attendance.settings import get_settings_module

logger = logging.getLogger("class_attendance.scripts.init_db")

DATABASE_DIR = Path(__file__).resolve().parents[1] / "database"


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
    tables = list_tables(db_config)
    logger.info(
        "schema applied to %s@%s:%s/%s (tables=%s)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
