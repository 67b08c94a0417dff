"""
In-memory store implementations for tests and local runs
"""
from typing import AsyncIterator, Dict, List, Optional
import logging

from .collections import Collection, ENTITY_TYPES
from .interface import CatalogStore, EntityStore
from ..domain.entities import TaggableEntity
from ..domain.tag import TagDefinition

logger = logging.getLogger(__name__)


class InMemoryEntityStore(EntityStore):
    """
    Entity store keeping serialized documents per collection.

    Entities are stored as documents and rebuilt on every read, so callers
    never share instances with the store.
    """

    def __init__(self):
        self._documents: Dict[Collection, Dict[str, dict]] = {collection: {} for collection in Collection}

    async def count(self, collection: Collection) -> int:
        return len(self._documents[collection])

    async def scan_documents(self, collection: Collection) -> AsyncIterator[dict]:
        for document in list(self._documents[collection].values()):
            yield dict(document)

    async def replace_by_id(self, collection: Collection, entity_id: str, entity: TaggableEntity) -> int:
        documents = self._documents[collection]
        if entity_id not in documents:
            logger.debug(f"Replace matched no {collection.value} entity with id {entity_id}")
            return 0
        documents[entity_id] = entity.to_document()
        return 1

    async def get_by_id(self, collection: Collection, entity_id: str) -> Optional[TaggableEntity]:
        document = self._documents[collection].get(entity_id)
        if document is None:
            return None
        return ENTITY_TYPES[collection].model_validate(document)

    async def insert(self, collection: Collection, entity: TaggableEntity) -> str:
        documents = self._documents[collection]
        if entity.entity_id in documents:
            raise ValueError(f"Duplicate {collection.value} id: {entity.entity_id}")
        documents[entity.entity_id] = entity.to_document()
        return entity.entity_id


class InMemoryCatalogStore(CatalogStore):
    """Catalog keyed by case-insensitive namespace:name"""

    def __init__(self, definitions: Optional[List[TagDefinition]] = None):
        self._definitions: Dict[str, TagDefinition] = {}
        for definition in definitions or []:
            self._definitions[definition.identifier.lower()] = definition

    async def scan_all(self) -> List[TagDefinition]:
        return list(self._definitions.values())

    async def insert(self, definition: TagDefinition) -> bool:
        key = definition.identifier.lower()
        if key in self._definitions:
            return False
        self._definitions[key] = definition
        return True

    async def count(self) -> int:
        return len(self._definitions)
