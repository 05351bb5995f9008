"""
Error taxonomy of the data-access layer.

Store failures (pymongo.errors.PyMongoError) are not wrapped: they reach the
caller unchanged. Zero matches on a read is not an error either, reads return
None instead.
"""

from typing import Any


class RepositoryError(Exception):
    """Base class for docstore errors."""
    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidObjectIdError(RepositoryError, ValueError):
    """A caller supplied id string is not a valid ObjectId."""
    def __init__(self, value: Any):
        super().__init__(f"Invalid object id: {value!r}", detail=value)
        self.value = value


class MissingPrimaryKeyError(RepositoryError):
    """A record needs a primary key value for the operation but has none."""


class ConfigurationError(RepositoryError):
    """Connection settings are missing or unusable."""


class MongoConnectionError(RepositoryError):
    """Connecting to or pinging a Mongo server failed."""
