"""
Standard tag catalog definitions and seeding
"""
from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

from ..domain.tag import Tag, TagDefinition, utc_now
from ..storage.interface import CatalogStore
from .models import SeedResult

logger = logging.getLogger(__name__)


SEVEN_YEARS_IN_DAYS = 2555

# Definitions for the tags the standard rules emit most often
STANDARD_TAG_DEFINITIONS: List[Dict[str, Any]] = [
    # Sensitivity
    {
        'namespace': 'sensitivity',
        'name': 'PHI',
        'displayName': 'Protected Health Information',
        'description': 'Contains protected health information as defined by HIPAA',
        'category': 'Data Classification',
        'isSensitive': True,
        'allowedRoles': ['Admin', 'Clinician', 'PHI-Reader'],
        'isAutomatic': True,
        'isMutable': False,
        'retentionDays': SEVEN_YEARS_IN_DAYS,
    },
    {
        'namespace': 'sensitivity',
        'name': 'PII',
        'displayName': 'Personally Identifiable Information',
        'description': 'Contains personally identifiable information (names, emails, phone, etc.)',
        'category': 'Data Classification',
        'isSensitive': True,
        'allowedRoles': ['Admin', 'User', 'PII-Reader'],
        'isAutomatic': True,
        'isMutable': False,
    },
    {
        'namespace': 'sensitivity',
        'name': 'clinical-data',
        'displayName': 'Clinical Data',
        'description': 'Contains clinical care management information',
        'category': 'Data Classification',
        'isSensitive': True,
        'allowedRoles': ['Admin', 'Clinician'],
        'isAutomatic': True,
        'isMutable': False,
    },
    {
        'namespace': 'sensitivity',
        'name': 'diagnosis-data',
        'displayName': 'Diagnosis Data',
        'description': 'Contains diagnosis and medical condition information',
        'category': 'Data Classification',
        'isSensitive': True,
        'allowedRoles': ['Admin', 'Clinician'],
        'isAutomatic': True,
        'isMutable': False,
    },

    # Business
    {
        'namespace': 'business',
        'name': 'home-health',
        'displayName': 'Home Health Agency',
        'description': 'Entity is a home health agency',
        'category': 'Business Intelligence',
        'isAutomatic': True,
    },
    {
        'namespace': 'business',
        'name': 'hospice',
        'displayName': 'Hospice Provider',
        'description': 'Entity is a hospice care provider',
        'category': 'Business Intelligence',
        'isAutomatic': True,
    },
    {
        'namespace': 'business',
        'name': 'has-npi',
        'displayName': 'Has NPI Number',
        'description': 'Entity has a valid National Provider Identifier',
        'category': 'Business Intelligence',
        'isAutomatic': True,
    },

    # Lifecycle
    {
        'namespace': 'lifecycle',
        'name': 'freemium',
        'displayName': 'Freemium Tier',
        'description': 'Entity is on freemium service tier',
        'category': 'Business Intelligence',
        'isAutomatic': True,
    },
    {
        'namespace': 'lifecycle',
        'name': 'premium',
        'displayName': 'Premium Tier',
        'description': 'Entity is on premium service tier',
        'category': 'Business Intelligence',
        'isAutomatic': True,
    },

    # Quality
    {
        'namespace': 'quality',
        'name': 'suspect',
        'displayName': 'Suspect Data Quality',
        'description': 'Data quality issues detected (placeholders, test data, incomplete)',
        'category': 'Data Quality',
        'isAutomatic': True,
    },
    {
        'namespace': 'quality',
        'name': 'verified',
        'displayName': 'Verified Data',
        'description': 'No obvious data quality issues detected',
        'category': 'Data Quality',
        'isAutomatic': True,
    },

    # Access
    {
        'namespace': 'access',
        'name': 'owner',
        'displayName': 'Owner Assignment',
        'description': 'Identifies the owner/responsible party for this entity',
        'category': 'Access Control',
        'isAutomatic': True,
        'valuePattern': r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$',
    },

    # Retention
    {
        'namespace': 'retention',
        'name': '7y',
        'displayName': '7 Year Retention',
        'description': 'Must be retained for 7 years per HIPAA requirements',
        'category': 'Compliance',
        'isAutomatic': True,
        'isMutable': False,
        'retentionDays': SEVEN_YEARS_IN_DAYS,
    },
]


def build_standard_definitions(created_by: str = "system") -> List[TagDefinition]:
    """Materialize STANDARD_TAG_DEFINITIONS with fresh ids and timestamps"""
    now = utc_now()
    return [
        TagDefinition(id=str(uuid.uuid4()), createdBy=created_by, createdAt=now, version=1, **entry)
        for entry in STANDARD_TAG_DEFINITIONS
    ]


async def seed_catalog(catalog_store: CatalogStore, created_by: Optional[str] = None) -> SeedResult:
    """
    Insert the standard definitions into the catalog

    Existing namespace/name keys are skipped. A failing insert is recorded
    and seeding continues with the next definition.

    Args:
        catalog_store: Target catalog
        created_by: Principal recorded on new definitions (defaults to "system")

    Returns:
        SeedResult with created/skipped counts and errors
    """
    definitions = build_standard_definitions(created_by or "system")
    result = SeedResult(total_definitions=len(definitions))

    for definition in definitions:
        try:
            if await catalog_store.insert(definition):
                result.created += 1
                logger.info(f"Created tag definition: {definition.identifier}")
            else:
                result.skipped += 1
                logger.debug(f"Tag definition already exists: {definition.identifier}")
        except Exception as e:
            result.errors.append(f"Failed to create {definition.identifier}: {e}")
            logger.error(f"Failed to create tag definition {definition.identifier}: {e}")

    logger.info(f"Catalog seeding complete: {result.created} created, {result.skipped} skipped, "
                f"{len(result.errors)} errors")
    return result


class TagCatalog:
    """Read-only lookup over a set of catalog definitions"""

    def __init__(self, definitions: Iterable[TagDefinition]):
        self._by_identifier: Dict[str, TagDefinition] = {}
        for definition in definitions:
            self._by_identifier[definition.identifier.lower()] = definition

    def __len__(self) -> int:
        return len(self._by_identifier)

    def find(self, tag: Tag) -> Optional[TagDefinition]:
        """Definition for the tag's namespace:name, ignoring its value and case"""
        return self._by_identifier.get(f"{tag.namespace}:{tag.name}".lower())

    def find_by_identifier(self, identifier: str) -> Optional[TagDefinition]:
        return self._by_identifier.get(identifier.lower())
