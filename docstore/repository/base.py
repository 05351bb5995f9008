"""
Repository abstract base class and generic MongoDB implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Sequence, Tuple, Type, TypeVar
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from docstore.exceptions import InvalidObjectIdError, MissingPrimaryKeyError
from docstore.logging.logger import get_logger
from docstore.models import Model
from .fields import (
    DEFAULT_PK_FIELD,
    DEFAULT_PK_TAG,
    from_document,
    get_pk_value,
    set_pk_value,
    to_document,
    track_timer,
    utc_now,
)
from .filters import SOFT_DELETE_FIELD, FilterLike, find_options, merge_filter

T = TypeVar("T", bound=Model)

Pipeline = List[dict]

logger = get_logger("repository")


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def insert(self, record: T) -> str:
        """Insert record; returns the assigned id."""
        pass

    @abstractmethod
    async def find(self, id: str, into: Optional[T] = None) -> Optional[T]:
        """Get live record by id, None if missing."""
        pass

    @abstractmethod
    async def get(self, filter: FilterLike = None, target: Optional[list] = None, as_documents: bool = False) -> list:
        """Get all live records matching filter."""
        pass

    @abstractmethod
    async def save(self, record: T) -> bool:
        """Update record by its own primary key."""
        pass

    @abstractmethod
    async def delete(self, id: str) -> int:
        """Soft delete record by id."""
        pass


class MongoRepository(IRepository[T]):
    """
    Generic repository over one Mongo collection.

    Every read, update and non-forced delete goes through merge_filter, so
    soft-deleted documents stay invisible unless a filter asks for them.
    Mutations stamp audit timestamps on the caller's record in place.
    """

    def __init__(self, collection: AsyncIOMotorCollection, model: Type[T]):
        self.collection = collection
        self.model = model
        self.pk_field = ""
        self.pk_tag = ""

    @classmethod
    async def for_model(cls, model: Type[T], manager=None) -> "MongoRepository[T]":
        """Bind a repository to the collection the model type routes to."""
        if manager is None:
            from docstore.database.manager import DatabaseManager
            manager = DatabaseManager.get_instance()
        collection = await manager.get_collection(model.get_connection(), model.get_collection())
        return cls(collection, model)

    # --- Primary key binding ---

    def set_pk(self, field: str, tag: str) -> None:
        """Override the primary key field name and its storage tag."""
        self.pk_field = field
        self.pk_tag = tag

    def get_pk(self) -> Tuple[str, str]:
        """Primary key field name and storage tag, defaults applied."""
        return self.pk_field or DEFAULT_PK_FIELD, self.pk_tag or DEFAULT_PK_TAG

    def get_pk_value(self, record: T) -> Any:
        pk_field, _ = self.get_pk()
        return get_pk_value(record, pk_field)

    def _parse_id(self, id: Any) -> Any:
        _, pk_tag = self.get_pk()
        if pk_tag != DEFAULT_PK_TAG or isinstance(id, ObjectId):
            return id
        if id is None:
            raise InvalidObjectIdError(id)
        try:
            return ObjectId(id)
        except (InvalidId, TypeError) as e:
            raise InvalidObjectIdError(id) from e

    def _set_document(self, record: T) -> dict:
        # _id is immutable, never part of a $set payload
        _, pk_tag = self.get_pk()
        return {"$set": to_document(record, exclude={pk_tag, DEFAULT_PK_TAG})}

    # --- Create ---

    async def insert(self, record: T) -> str:
        """Insert record; returns the assigned id."""
        track_timer(record, True)
        result = await self.collection.insert_one(to_document(record))
        # the store always assigns _id, whatever the bound primary key is
        set_pk_value(record, result.inserted_id)
        logger.debug(f"Inserted {self.model.__name__} {result.inserted_id}")
        return str(result.inserted_id)

    async def insert_many(self, records: Sequence[T]) -> List[str]:
        """Insert records in one batch; returns the assigned ids."""
        if not records:
            return []
        now = utc_now()
        for record in records:
            track_timer(record, True, now)
        result = await self.collection.insert_many([to_document(record) for record in records])
        ids = []
        for record, inserted_id in zip(records, result.inserted_ids):
            set_pk_value(record, inserted_id)
            ids.append(str(inserted_id))
        logger.debug(f"Inserted {len(ids)} {self.model.__name__} records")
        return ids

    # --- Update ---

    async def save(self, record: T) -> bool:
        """Partial update by the record's own primary key; True if modified."""
        pk_value = self.get_pk_value(record)
        if pk_value is None:
            raise MissingPrimaryKeyError(f"{type(record).__name__} has no primary key value")
        track_timer(record, False)
        _, pk_tag = self.get_pk()
        result = await self.collection.update_one({pk_tag: pk_value}, self._set_document(record))
        return result.modified_count > 0

    async def update(self, id: str, record: T) -> int:
        """Partial update by id; returns modified count."""
        _, pk_tag = self.get_pk()
        pk_value = self._parse_id(id)
        track_timer(record, False)
        result = await self.collection.update_one({pk_tag: pk_value}, self._set_document(record))
        return result.modified_count

    async def update_one(self, filter: FilterLike, record: T) -> int:
        """Partial update of the first live match."""
        merged = merge_filter(filter)
        track_timer(record, False)
        result = await self.collection.update_one(merged.filter, self._set_document(record))
        return result.modified_count

    async def update_many(self, filter: FilterLike, record: T) -> int:
        """Partial update of every live match."""
        merged = merge_filter(filter)
        track_timer(record, False)
        result = await self.collection.update_many(merged.filter, self._set_document(record))
        logger.debug(f"Updated {result.modified_count} {self.model.__name__} records")
        return result.modified_count

    async def replace_one(self, filter: FilterLike, record: T) -> int:
        """Replace the first live match with the full record."""
        merged = merge_filter(filter)
        track_timer(record, False)
        # _id survives a replace anyway; a custom primary key must stay in the document
        replacement = to_document(record, exclude={DEFAULT_PK_TAG})
        result = await self.collection.replace_one(merged.filter, replacement)
        return result.modified_count

    # --- Read ---

    async def find(self, id: str, into: Optional[T] = None) -> Optional[T]:
        _, pk_tag = self.get_pk()
        document = await self.collection.find_one({pk_tag: self._parse_id(id), SOFT_DELETE_FIELD: None})
        if document is None:
            return None
        return from_document(self.model, document, into)

    async def find_one(self, filter: FilterLike = None, into: Optional[T] = None) -> Optional[T]:
        """Get first live record matching filter, None if missing."""
        merged = merge_filter(filter)
        document = await self.collection.find_one(merged.filter, **find_options(merged, with_limit=False))
        if document is None:
            return None
        return from_document(self.model, document, into)

    async def get(self, filter: FilterLike = None, target: Optional[list] = None, as_documents: bool = False) -> list:
        """
        Stream every match into target (a new list when None) in cursor order.

        Elements are model instances, or raw documents with as_documents=True.
        """
        if target is None:
            target = []
        merged = merge_filter(filter)
        cursor = self.collection.find(merged.filter, **find_options(merged))
        try:
            async for document in cursor:
                target.append(document if as_documents else from_document(self.model, document))
        finally:
            await cursor.close()
        return target

    async def count(self, filter: FilterLike = None) -> int:
        """Count live records matching filter."""
        merged = merge_filter(filter)
        return await self.collection.count_documents(merged.filter)

    async def aggregate(self, pipeline: Pipeline, with_deleted: bool = False) -> List[dict]:
        """Run an aggregation pipeline over live documents."""
        stages = list(pipeline)
        if not with_deleted:
            stages.insert(0, {"$match": {SOFT_DELETE_FIELD: None}})
        cursor = self.collection.aggregate(stages)
        try:
            return [document async for document in cursor]
        finally:
            await cursor.close()

    # --- Delete ---

    async def delete(self, id: str) -> int:
        """Soft delete one live document by id."""
        _, pk_tag = self.get_pk()
        result = await self.collection.update_one(
            {pk_tag: self._parse_id(id), SOFT_DELETE_FIELD: None},
            {"$set": {SOFT_DELETE_FIELD: utc_now()}},
        )
        logger.debug(f"Soft deleted {self.model.__name__} {id}: {result.modified_count}")
        return result.modified_count

    async def force_delete(self, id: str) -> int:
        """Physically remove one document by id, deleted or not."""
        _, pk_tag = self.get_pk()
        result = await self.collection.delete_one({pk_tag: self._parse_id(id)})
        logger.debug(f"Force deleted {self.model.__name__} {id}: {result.deleted_count}")
        return result.deleted_count

    async def delete_one(self, filter: FilterLike) -> int:
        """Soft delete the first live match."""
        merged = merge_filter(filter)
        result = await self.collection.update_one(merged.filter, {"$set": {SOFT_DELETE_FIELD: utc_now()}})
        return result.modified_count

    async def delete_many(self, filter: FilterLike) -> int:
        """Soft delete every live match."""
        merged = merge_filter(filter)
        result = await self.collection.update_many(merged.filter, {"$set": {SOFT_DELETE_FIELD: utc_now()}})
        logger.debug(f"Soft deleted {result.modified_count} {self.model.__name__} records")
        return result.modified_count

    async def force_delete_one(self, filter: FilterLike) -> int:
        """Physically remove the first live match."""
        merged = merge_filter(filter)
        result = await self.collection.delete_one(merged.filter)
        return result.deleted_count

    async def force_delete_many(self, filter: FilterLike) -> int:
        """Physically remove every live match."""
        merged = merge_filter(filter)
        result = await self.collection.delete_many(merged.filter)
        logger.debug(f"Force deleted {result.deleted_count} {self.model.__name__} records")
        return result.deleted_count
