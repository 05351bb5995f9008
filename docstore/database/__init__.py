from .manager import DatabaseManager
from .mongo_driver import MongoDriver

__all__ = ["DatabaseManager", "MongoDriver"]
