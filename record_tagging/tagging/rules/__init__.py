"""
Tagging rule strategies
"""
from typing import List, Optional

from .base import BaseRule
from .patient_phi import PatientPhiRule
from .contact_pii import ContactPiiRule, AncillaryPiiRule
from .business_type import AncillaryBusinessTypeRule
from .lifecycle_stage import LifecycleStageRule
from .ownership import OwnershipRule
from .patient_status import PatientStatusRule
from .data_quality import DataQualityRule


def default_rules(organization_domain: Optional[str] = None) -> List[BaseRule]:
    """The standard rule set, in registration order"""
    return [
        # Priority 1-2: fundamental sensitivity classification
        PatientPhiRule(),
        ContactPiiRule(),
        AncillaryPiiRule(),

        # Priority 10-20: business classification
        AncillaryBusinessTypeRule(),
        LifecycleStageRule(),
        OwnershipRule(organization_domain=organization_domain),

        # Priority 15: derived indicators
        PatientStatusRule(),

        # Priority 50: quality
        DataQualityRule(),
    ]


__all__ = [
    'BaseRule',
    'PatientPhiRule',
    'ContactPiiRule',
    'AncillaryPiiRule',
    'AncillaryBusinessTypeRule',
    'LifecycleStageRule',
    'OwnershipRule',
    'PatientStatusRule',
    'DataQualityRule',
    'default_rules',
]
