"""Test config and shared fixtures."""
import mongomock
import pytest

from docstore.config import MongoConnectionSettings, Settings
from docstore.database.manager import DatabaseManager
from docstore.repository import MongoRepository
from sample_models import Sku, Tag, Widget


class AsyncCursor:
    """Awaitable cursor over mongomock results, shaped like motor's."""

    def __init__(self, cursor):
        self._iterator = iter(cursor)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            return next(self._iterator)
        except StopIteration:
            raise StopAsyncIteration

    async def close(self):
        self.closed = True


class AsyncCollection:
    """Motor-style collection facade over an in-memory mongomock collection."""

    def __init__(self, collection):
        self.sync = collection
        self.cursors = []

    async def insert_one(self, document):
        return self.sync.insert_one(document)

    async def insert_many(self, documents):
        return self.sync.insert_many(documents)

    async def update_one(self, filter, update):
        return self.sync.update_one(filter, update)

    async def update_many(self, filter, update):
        return self.sync.update_many(filter, update)

    async def replace_one(self, filter, replacement):
        return self.sync.replace_one(filter, replacement)

    async def delete_one(self, filter):
        return self.sync.delete_one(filter)

    async def delete_many(self, filter):
        return self.sync.delete_many(filter)

    async def find_one(self, filter, **kwargs):
        return self.sync.find_one(filter, **kwargs)

    async def count_documents(self, filter):
        return self.sync.count_documents(filter)

    def find(self, filter, **kwargs):
        cursor = AsyncCursor(self.sync.find(filter, **kwargs))
        self.cursors.append(cursor)
        return cursor

    def aggregate(self, pipeline):
        cursor = AsyncCursor(self.sync.aggregate(pipeline))
        self.cursors.append(cursor)
        return cursor


@pytest.fixture
def mongo_database():
    """Fresh in-memory database per test."""
    client = mongomock.MongoClient()
    yield client["app_db"]
    client.close()


@pytest.fixture
def widget_collection(mongo_database) -> AsyncCollection:
    return AsyncCollection(mongo_database[Widget.get_collection()])


@pytest.fixture
def widget_repository(widget_collection) -> MongoRepository[Widget]:
    return MongoRepository(widget_collection, Widget)


@pytest.fixture
def tag_repository(mongo_database) -> MongoRepository[Tag]:
    return MongoRepository(AsyncCollection(mongo_database[Tag.get_collection()]), Tag)


@pytest.fixture
def sku_repository(mongo_database) -> MongoRepository[Sku]:
    repository = MongoRepository(AsyncCollection(mongo_database[Sku.get_collection()]), Sku)
    repository.set_pk("code", "code")
    return repository


@pytest.fixture
def test_settings() -> Settings:
    """Settings with two logical connections, independent of env and .env."""
    return Settings(
        _env_file=None,
        DATABASE={
            "mongo": {
                "default": MongoConnectionSettings(host="localhost", port=27017, database="app_db"),
                "catalog": MongoConnectionSettings(
                    username="reader",
                    password="p@ss word",
                    host="db1,db2",
                    port=27018,
                    database="catalog",
                    options={"replicaSet": "rs0"},
                ),
            }
        },
    )


@pytest.fixture
async def database_manager(test_settings):
    manager = DatabaseManager(test_settings)
    yield manager
    await manager.close_all()
