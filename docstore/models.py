"""
Record base classes.

Model carries the routing capability (which connection, which collection);
Document is the audit mixin with identity and the three timestamps.
"""

from datetime import datetime
from typing import ClassVar, Optional
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


class Model(BaseModel):
    """Base of every record type stored through a repository."""

    __connection__: ClassVar[str] = "default"
    __collection__: ClassVar[str] = ""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    @classmethod
    def get_connection(cls) -> str:
        """Logical connection name the record type lives on."""
        return cls.__connection__

    @classmethod
    def get_collection(cls) -> str:
        """Collection name; defaults to the lower-cased class name."""
        return cls.__collection__ or cls.__name__.lower()


class Document(Model):
    """Audit mixin: identity plus created/updated/deleted timestamps."""

    id: Optional[ObjectId] = Field(default=None, alias="_id")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # None means live; set means soft deleted
    deleted_at: Optional[datetime] = None

    def get_id(self) -> Optional[ObjectId]:
        return self.id

    def set_id(self, id: ObjectId) -> None:
        self.id = id

    def get_created_at(self) -> Optional[datetime]:
        return self.created_at

    def set_created_at(self, t: datetime) -> None:
        self.created_at = t

    def get_updated_at(self) -> Optional[datetime]:
        return self.updated_at

    def set_updated_at(self, t: datetime) -> None:
        self.updated_at = t

    def get_deleted_at(self) -> Optional[datetime]:
        return self.deleted_at

    def set_deleted_at(self, t: Optional[datetime]) -> None:
        self.deleted_at = t

    def is_deleted(self) -> bool:
        return self.deleted_at is not None
