"""
Abstract interfaces for entity and catalog stores
"""
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional

from .collections import Collection, ENTITY_TYPES
from ..domain.entities import TaggableEntity
from ..domain.tag import TagDefinition


class EntityStore(ABC):
    """Abstract base class for entity document stores"""

    @abstractmethod
    async def count(self, collection: Collection) -> int:
        """
        Count entities in a collection

        Args:
            collection: Logical collection

        Returns:
            Number of stored entities
        """
        pass

    @abstractmethod
    def scan_documents(self, collection: Collection) -> AsyncIterator[Dict[str, Any]]:
        """
        Forward cursor over the raw stored documents of a collection

        Documents are yielded undecoded.

        Args:
            collection: Logical collection

        Returns:
            Async iterator of documents
        """
        pass

    async def scan(self, collection: Collection) -> AsyncIterator[TaggableEntity]:
        """Forward cursor over every entity in a collection, decoded"""
        entity_type = ENTITY_TYPES[collection]
        async for document in self.scan_documents(collection):
            yield entity_type.model_validate(document)

    @abstractmethod
    async def replace_by_id(self, collection: Collection, entity_id: str, entity: TaggableEntity) -> int:
        """
        Replace the stored entity with the given id

        No version check is made; the last writer wins.

        Returns:
            Number of matched documents (0 when the entity no longer exists)
        """
        pass

    @abstractmethod
    async def get_by_id(self, collection: Collection, entity_id: str) -> Optional[TaggableEntity]:
        """Fetch one entity, None when missing"""
        pass

    @abstractmethod
    async def insert(self, collection: Collection, entity: TaggableEntity) -> str:
        """
        Insert a new entity

        Returns:
            The stored entity id
        """
        pass


class CatalogStore(ABC):
    """Abstract base class for the tag definition catalog"""

    @abstractmethod
    async def scan_all(self) -> List[TagDefinition]:
        """Return every catalog definition"""
        pass

    @abstractmethod
    async def insert(self, definition: TagDefinition) -> bool:
        """
        Insert a definition

        Returns:
            True if created, False if the namespace/name key already exists
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        pass
