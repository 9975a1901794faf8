from __future__ import annotations
import logging

from sqlalchemy.exc import SQLAlchemyError

from jobhub.db.database import Base, engine
from jobhub.models import warehouse_job  # noqa: F401

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


def try_init_db() -> bool:
    """Create warehouse tables; an unreachable database is logged, searches then skip the warehouse."""
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception("warehouse database unavailable, continuing with live providers only")
        return False
    return True
