from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from hims_opd.config import get_settings_module
from hims_opd.database.bootstrap import apply_seed_sql
from hims_opd.main import DATABASE_DIR, configure_logging

logger = logging.getLogger("seed_db")


def main() -> None:
    load_dotenv(override=False)
    configure_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    # Doctors and OPD services only; shifts and ledgers are created through the API.
    apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
    logger.info("Seeded demo master data -> %s", db_config.get("database"))


if __name__ == "__main__":
    main()
