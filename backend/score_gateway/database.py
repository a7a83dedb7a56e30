"""
backend/score_gateway/database.py

Purpose:
    MongoDB connection bootstrap and index management for the virtual
    provider configuration store.

Dependencies:
    - motor.motor_asyncio
    - pymongo
    - score_gateway.config
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from score_gateway.config import settings

logger = logging.getLogger("score_gateway.database")

client: AsyncIOMotorClient = None
db: AsyncIOMotorDatabase = None


async def connect_db() -> None:
    global client, db
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        maxPoolSize=25,
        minPoolSize=1,
    )
    db = client[settings.MONGO_DB]
    await _ensure_indexes()


async def close_db() -> None:
    global client
    if client:
        client.close()


async def _ensure_indexes() -> None:
    await db.virtual_provider_configs.create_index(
        [("offer_id", ASCENDING), ("provider_address", ASCENDING)],
        unique=True,
        name="offer_provider_unique",
    )
    logger.info("Indexes ensured for virtual_provider_configs")
