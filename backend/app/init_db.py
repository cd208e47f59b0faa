# backend/app/init_db.py
"""Create database tables for every model."""

import logging

from app import models  # noqa: F401  (registers tables on Base.metadata)
from app.database import Base, engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
