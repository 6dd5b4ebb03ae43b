"""Back-fill ``absent`` for everyone who did not check in (cron entry point).

Usage: python scripts/mark_absent.py [YYYY-MM-DD]
"""

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

from gym_membership.common.datetime_utils import parse_iso_date
from gym_membership.common.log import configure_logging
from gym_membership.container import build_container
from gym_membership.core.settings import FacilitySettings


def main(argv: list[str]) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        settings=FacilitySettings.from_module(settings),
    )
    on = parse_iso_date(argv[0]) if argv else None

    result = container.absence_sweeper.run(on)
    if not result.success:
        logger.error(result.message)
        return 1
    logger.info(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
