"""Startup entry point: logging, MongoDB connection and indexes.

Run with ``python -m bootstrap`` from ``src/`` to verify a deployment's
database before serving traffic.
"""

import asyncio
import logging
import sys

from adapter.mongodb.connection import get_database
from adapter.mongodb.indexes import ensure_all_indexes
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)


async def init_database():
    """Connect and make sure every index exists. Return the database or None."""
    db = await get_database()
    if db is None:
        logger.warning("MongoDB unavailable, skipping index creation")
        return None

    if await ensure_all_indexes(db):
        logger.info("MongoDB indexes verified/created successfully")
    else:
        logger.warning("Failed to create some MongoDB indexes")
    return db


def main() -> int:
    setup_structured_logging()
    db = asyncio.run(init_database())
    return 0 if db is not None else 1


if __name__ == '__main__':
    sys.exit(main())
