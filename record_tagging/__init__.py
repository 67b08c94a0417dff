"""
Record tagging: rule-based tag evaluation and tag-based access policy
for patient, contact and ancillary records
"""
from .exceptions import TaggingError, InvalidCollectionError
from .tagging import TaggingService, BackfillRunner, RuleRegistry
from .security import AccessDecisionEngine, Principal
from .repository import TaggedEntityRepository

__version__ = "0.1.0"

__all__ = [
    'TaggingError',
    'InvalidCollectionError',
    'TaggingService',
    'BackfillRunner',
    'RuleRegistry',
    'AccessDecisionEngine',
    'Principal',
    'TaggedEntityRepository',
]
