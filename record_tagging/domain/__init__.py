"""
Domain models: tags, catalog definitions and taggable entities
"""
from .tag import Tag, TagDefinition, utc_now
from .entities import (
    Taggable,
    TaggableEntity,
    Patient,
    AgencyInfo,
    CareManagement,
    EpisodeDiagnosis,
    ContactUser,
    AncillaryUser,
    AssociatedEntity,
)

__all__ = [
    'Tag',
    'TagDefinition',
    'utc_now',
    'Taggable',
    'TaggableEntity',
    'Patient',
    'AgencyInfo',
    'CareManagement',
    'EpisodeDiagnosis',
    'ContactUser',
    'AncillaryUser',
    'AssociatedEntity',
]
