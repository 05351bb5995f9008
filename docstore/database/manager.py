import threading
from typing import Dict, Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from docstore.exceptions import ConfigurationError
from docstore.logging.logger import get_logger
from .mongo_driver import MongoDriver

logger = get_logger("database_manager")


class DatabaseManager:
    """
    Process-wide registry of Mongo drivers, one per logical connection name.

    Drivers are created on first request (thread-safe get-or-create) and
    pinged on first get_client(); close_all() empties the registry.
    """
    _instance = None
    _instance_lock = threading.Lock()

    def __init__(self, settings):
        self.settings = settings
        self._drivers: Dict[str, MongoDriver] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, settings=None):
        with cls._instance_lock:
            if cls._instance is None:
                if settings is None:
                    from docstore.config import settings as app_settings
                    settings = app_settings
                cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        with cls._instance_lock:
            cls._instance = None

    def _resolve_name(self, connection: Optional[str]) -> str:
        return connection or self.settings.MONGO_DEFAULT_CONNECTION

    def get_driver(self, connection: Optional[str] = None) -> MongoDriver:
        """Get or create the driver of a logical connection."""
        name = self._resolve_name(connection)
        with self._lock:
            driver = self._drivers.get(name)
            if driver is None:
                config = self.settings.get_mongo(name)
                if config is None:
                    raise ConfigurationError(f"Mongo connection '{name}' is not configured")
                driver = MongoDriver(
                    name,
                    config,
                    server_selection_timeout_ms=self.settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
                )
                self._drivers[name] = driver
                logger.debug(f"Mongo driver created for connection '{name}'")
        return driver

    async def get_client(self, connection: Optional[str] = None) -> AsyncIOMotorClient:
        """Client of a logical connection, pinged on first use."""
        driver = self.get_driver(connection)
        await driver.ensure_connected()
        return driver.client

    async def get_collection(self, connection: Optional[str], collection: str) -> AsyncIOMotorCollection:
        await self.get_client(connection)
        return self.get_driver(connection).get_collection(collection)

    async def close_all(self) -> None:
        with self._lock:
            drivers = list(self._drivers.values())
            self._drivers.clear()
        for driver in drivers:
            await driver.disconnect()
