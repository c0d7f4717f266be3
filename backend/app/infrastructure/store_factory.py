"""Store Factory — builds the configured KeyValueStore at startup.

Invariants:
    - Exactly one store per process, opened in the lifespan and closed on shutdown
    - settings.storage_backend selects the adapter; nothing else branches on it
"""

import logging

from app.config import Settings
from app.core.repository_protocols import KeyValueStore
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.dynamo_store import DynamoKeyValueStore, build_dynamodb_client
from app.infrastructure.sql_store import SqlKeyValueStore

logger = logging.getLogger(__name__)


async def open_store(settings: Settings) -> KeyValueStore:
    """Create the store selected by settings.storage_backend."""
    if settings.storage_backend == "dynamodb":
        client = build_dynamodb_client(
            settings.dynamodb_region, settings.dynamodb_endpoint,
        )
        logger.info(f"Using DynamoDB table {settings.dynamodb_table}")
        return DynamoKeyValueStore(client, settings.dynamodb_table)

    manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.create_tables_on_startup:
        await manager.create_tables()
    logger.info("Using SQL posts table")
    return SqlKeyValueStore(manager)
