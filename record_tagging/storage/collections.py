"""
Known entity collections and their accepted names
"""
from enum import Enum
from typing import Dict, Type

from ..domain.entities import AncillaryUser, ContactUser, Patient, TaggableEntity
from ..exceptions import InvalidCollectionError


class Collection(str, Enum):
    """Logical entity collections"""
    PATIENTS = "patients"
    CONTACTS = "contacts"
    ANCILLARIES = "ancillaries"


COLLECTION_SYNONYMS: Dict[str, Collection] = {
    "patients": Collection.PATIENTS,
    "patient": Collection.PATIENTS,
    "contacts": Collection.CONTACTS,
    "contactusers": Collection.CONTACTS,
    "contact_users": Collection.CONTACTS,
    "ancillaries": Collection.ANCILLARIES,
    "ancillaryusers": Collection.ANCILLARIES,
    "ancillary_users": Collection.ANCILLARIES,
}

ENTITY_TYPES: Dict[Collection, Type[TaggableEntity]] = {
    Collection.PATIENTS: Patient,
    Collection.CONTACTS: ContactUser,
    Collection.ANCILLARIES: AncillaryUser,
}


def resolve_collection(name) -> Collection:
    """
    Resolve a collection name (case-insensitive, synonyms allowed)

    Raises:
        InvalidCollectionError: name is not a known collection
    """
    if isinstance(name, Collection):
        return name

    key = (name or "").strip().lower()
    try:
        return COLLECTION_SYNONYMS[key]
    except KeyError:
        raise InvalidCollectionError(name, sorted(COLLECTION_SYNONYMS)) from None


def collection_for(entity: TaggableEntity) -> Collection:
    for collection, entity_type in ENTITY_TYPES.items():
        if isinstance(entity, entity_type):
            return collection
    raise InvalidCollectionError(type(entity).__name__, sorted(COLLECTION_SYNONYMS))
