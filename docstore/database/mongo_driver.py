import asyncio
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from docstore.config import MongoConnectionSettings
from docstore.exceptions import MongoConnectionError
from docstore.logging.logger import get_logger
from .base import BaseDatabaseDriver

logger = get_logger("mongo_driver")


class MongoDriver(BaseDatabaseDriver):
    """One motor client for one logical connection."""

    def __init__(self, name: str, config: MongoConnectionSettings, server_selection_timeout_ms: int = 5000):
        self.name = name
        self.config = config
        self.client = AsyncIOMotorClient(
            config.dsn,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
        )
        self._connected = False
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self):
        """Ping the server; the client itself connects lazily."""
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"Connect mongo {self.name} error: {str(e)}")
            raise MongoConnectionError(f"Connect mongo {self.name} failed", detail=str(e)) from e
        self._connected = True
        logger.info(f"Mongo connection '{self.name}' ready (database: {self.config.database})")

    async def ensure_connected(self):
        """Connect once; concurrent callers wait for the first ping."""
        async with self._connect_lock:
            if not self._connected:
                await self.connect()

    async def disconnect(self):
        """Close the client."""
        self.client.close()
        self._connected = False
        logger.info(f"Mongo connection '{self.name}' closed")

    def get_database(self) -> AsyncIOMotorDatabase:
        return self.client[self.config.database]

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        return self.get_database()[name]
