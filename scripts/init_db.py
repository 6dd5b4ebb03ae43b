from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv
from loguru import logger

from config import get_settings_module

from gym_membership.common.log import configure_logging
from gym_membership.database.bootstrap import initialize_database


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    tables = initialize_database(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    logger.info(
        f"applied schema.sql -> {db_config.get('user')}@{db_config.get('host')}:"
        f"{db_config.get('port', 3306)}/{db_config.get('database')} (tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
