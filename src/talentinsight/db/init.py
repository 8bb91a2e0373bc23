from __future__ import annotations

import logging

from sqlalchemy import inspect

from talentinsight.config import get_settings
from talentinsight.db.base import Base
from talentinsight.db.session import engine
from talentinsight.db import models  # noqa: F401

logger = logging.getLogger(__name__)


def ensure_data_directories() -> None:
    get_settings().data_dir.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = [name for name in Base.metadata.tables if name not in existing]
    if created:
        logger.info("Created tables: %s", ", ".join(sorted(created)))
    return {"created_tables": len(created), "tables": len(Base.metadata.tables)}
