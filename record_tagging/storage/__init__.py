"""
Entity and catalog storage
"""
from .collections import Collection, COLLECTION_SYNONYMS, ENTITY_TYPES, resolve_collection, collection_for
from .interface import EntityStore, CatalogStore
from .memory_store import InMemoryEntityStore, InMemoryCatalogStore

__all__ = [
    'Collection',
    'COLLECTION_SYNONYMS',
    'ENTITY_TYPES',
    'resolve_collection',
    'collection_for',
    'EntityStore',
    'CatalogStore',
    'InMemoryEntityStore',
    'InMemoryCatalogStore',
]
