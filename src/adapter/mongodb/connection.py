import logging

from pymongo import AsyncMongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

from utils.config import DATABASE_NAME, MONGO_URL

logger = logging.getLogger(__name__)

USERS_COLLECTION_NAME = 'users'

_client_cache = None
_connection_attempted = False
_connection_failed = False


def reset_client():
    global _client_cache, _connection_attempted, _connection_failed
    _client_cache = None
    _connection_attempted = False
    _connection_failed = False


async def get_mongodb_client() -> AsyncMongoClient | None:
    """Cached async client, or None when MongoDB is unreachable.

    A failed first connection is treated as misconfiguration and not retried.
    """
    global _client_cache, _connection_attempted, _connection_failed

    if _client_cache:
        try:
            await _client_cache.admin.command('ping')
            return _client_cache
        except PyMongoError:
            _client_cache = None
            logger.debug("[MONGODB] Cached client failed ping, attempting reconnection...")

    if _connection_failed:
        return None

    if not MONGO_URL:
        logger.error("[MONGODB] MONGO_URL not configured.")
        _connection_failed = True
        return None

    try:
        client = AsyncMongoClient(
            MONGO_URL,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
            maxPoolSize=10,
            minPoolSize=0,
            maxIdleTimeMS=30000,
            waitQueueTimeoutMS=10000,
            retryWrites=True,
            retryReads=True,
            tz_aware=True,
        )
        await client.admin.command('ping')

        is_first_connection = not _connection_attempted
        _connection_attempted = True
        _client_cache = client

        if is_first_connection:
            logger.info(f"[MONGODB] Connected successfully to {DATABASE_NAME}")

        return client
    except (ConnectionFailure, PyMongoError) as e:
        if not _connection_attempted:
            logger.error(f"[MONGODB] Initial connection failed: {str(e)[:200]}")
            _connection_failed = True
        return None


async def get_database():
    """Return the configured database, or None when MongoDB is unreachable."""
    client = await get_mongodb_client()
    if client is None:
        return None
    return client[DATABASE_NAME]
