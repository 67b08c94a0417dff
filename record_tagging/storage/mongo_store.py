"""
MongoDB store implementations backed by motor
"""
from typing import Any, AsyncIterator, Dict, List, Optional
import logging

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from .collections import Collection, ENTITY_TYPES
from .interface import CatalogStore, EntityStore
from ..config import settings
from ..domain.entities import TaggableEntity
from ..domain.tag import TagDefinition

logger = logging.getLogger(__name__)


def create_database(uri: Optional[str] = None, database: Optional[str] = None) -> AsyncIOMotorDatabase:
    """Create a motor database handle from settings"""
    client = AsyncIOMotorClient(
        uri or settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        tz_aware=True,
    )
    name = database or settings.MONGODB_DATABASE
    logger.info(f"MongoDB client created for database '{name}'")
    return client[name]


def _id_filter(entity_id: str) -> Dict[str, Any]:
    # Documents may be keyed by string ids or ObjectIds
    if ObjectId.is_valid(entity_id):
        return {"_id": {"$in": [entity_id, ObjectId(entity_id)]}}
    return {"_id": entity_id}


class MongoEntityStore(EntityStore):
    """Entity store over the patient, contact and ancillary collections"""

    def __init__(self, database: AsyncIOMotorDatabase, collection_names: Optional[Dict[Collection, str]] = None):
        self.database = database
        self.collection_names = collection_names or {
            Collection.PATIENTS: settings.PATIENTS_COLLECTION,
            Collection.CONTACTS: settings.CONTACTS_COLLECTION,
            Collection.ANCILLARIES: settings.ANCILLARIES_COLLECTION,
        }

    def _collection(self, collection: Collection):
        return self.database[self.collection_names[collection]]

    async def count(self, collection: Collection) -> int:
        return await self._collection(collection).count_documents({})

    async def scan_documents(self, collection: Collection) -> AsyncIterator[Dict[str, Any]]:
        async for document in self._collection(collection).find({}):
            yield document

    async def replace_by_id(self, collection: Collection, entity_id: str, entity: TaggableEntity) -> int:
        document = entity.to_document()
        document.pop("_id", None)
        result = await self._collection(collection).replace_one(_id_filter(entity_id), document)
        return result.matched_count

    async def get_by_id(self, collection: Collection, entity_id: str) -> Optional[TaggableEntity]:
        document = await self._collection(collection).find_one(_id_filter(entity_id))
        if document is None:
            return None
        return ENTITY_TYPES[collection].model_validate(document)

    async def insert(self, collection: Collection, entity: TaggableEntity) -> str:
        result = await self._collection(collection).insert_one(entity.to_document())
        return str(result.inserted_id)


class MongoCatalogStore(CatalogStore):
    """Tag definition catalog with a unique namespace/name index"""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: Optional[str] = None):
        self.collection = database[collection_name or settings.TAG_CATALOG_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("namespace", ASCENDING), ("name", ASCENDING)],
            unique=True,
            name="namespace_name_unique",
        )

    async def scan_all(self) -> List[TagDefinition]:
        documents = await self.collection.find({}).to_list(length=None)
        return [TagDefinition.model_validate(document) for document in documents]

    async def insert(self, definition: TagDefinition) -> bool:
        try:
            await self.collection.insert_one(definition.to_document())
            return True
        except DuplicateKeyError:
            return False

    async def count(self) -> int:
        return await self.collection.count_documents({})
