"""
Entity repository that tags on write and filters by tag access on read
"""
from typing import Any, List, Optional
import logging

from .security.access import AccessDecisionEngine
from .security.principal import Principal
from .storage.collections import collection_for, resolve_collection
from .storage.interface import EntityStore
from .tagging.service import TaggingService

logger = logging.getLogger(__name__)


class TaggedEntityRepository:
    """Write path runs the tagging engine; read path runs the access engine"""

    def __init__(
        self,
        store: EntityStore,
        service: TaggingService,
        access_engine: Optional[AccessDecisionEngine] = None,
    ):
        self.store = store
        self.service = service
        self.access_engine = access_engine or AccessDecisionEngine()

    async def create(self, entity: Any, performed_by: Optional[str] = None) -> Any:
        """
        Tag and insert a new entity

        Tagging failures do not block the insert; the entity is stored with
        the tags it already had.
        """
        collection = collection_for(entity)
        tagged = self.service.apply_tags(entity, "create", performed_by)
        try:
            await self.store.insert(collection, tagged)
        except Exception as e:
            logger.error(f"Error creating {collection.value} entity {tagged.entity_id}: {e}")
            raise

        logger.info(f"Created {collection.value} entity with ID: {tagged.entity_id} ({len(tagged.tags)} tags)")
        return tagged

    async def update(self, entity: Any, performed_by: Optional[str] = None) -> Optional[Any]:
        """
        Re-tag and replace an existing entity

        Returns:
            The stored entity, or None when no entity with that id exists
        """
        collection = collection_for(entity)
        tagged = self.service.apply_tags(entity, "update", performed_by)
        try:
            matched = await self.store.replace_by_id(collection, tagged.entity_id, tagged)
        except Exception as e:
            logger.error(f"Error updating {collection.value} entity {tagged.entity_id}: {e}")
            raise

        if matched == 0:
            logger.warning(f"{collection.value} entity not found for update: {tagged.entity_id}")
            return None

        logger.info(f"Updated {collection.value} entity with ID: {tagged.entity_id}")
        return tagged

    async def get_by_id(self, collection_name: str, entity_id: str, principal: Principal) -> Optional[Any]:
        """The entity when it exists and the principal may read it, else None"""
        collection = resolve_collection(collection_name)
        entity = await self.store.get_by_id(collection, entity_id)
        return self.access_engine.sanitize_entity(entity, principal)

    async def list(self, collection_name: str, principal: Principal) -> List[Any]:
        collection = resolve_collection(collection_name)
        entities = [entity async for entity in self.store.scan(collection)]
        visible = self.access_engine.filter_entities(entities, principal)
        logger.debug(f"{principal.display_name} can read {len(visible)}/{len(entities)} {collection.value} entities")
        return visible
