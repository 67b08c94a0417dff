"""
Ancillary business type rule
Maps free-text subtypes to the controlled business vocabulary
"""
from typing import Dict, List, Optional, Tuple
import logging

from .base import BaseRule
from ..models import EvaluationContext, EvaluationResult
from ...domain.entities import AncillaryUser
from ...domain.tag import Tag

logger = logging.getLogger(__name__)


# Order matters for partial matches: the first key contained in the subtype wins
SUBTYPE_MAPPING: Dict[str, str] = {
    "Home Health Agency": "home-health",
    "Hospice": "hospice",
    "Physiotherapy Groups": "physiotherapy",
    "Physical Therapy": "physiotherapy",
    "Sleep Study": "sleep-study",
    "Medical Center": "medical-center",
    "Hospitals": "hospital",
    "Housecall": "housecall",
    "Skilled Nursing Facility": "snf",
    "SNF": "snf",
    "Assisted Living": "assisted-living",
    "Memory Care": "memory-care",
    "Rehabilitation": "rehabilitation",
    "DME": "durable-medical-equipment",
    "Durable Medical Equipment": "durable-medical-equipment",
    "Lab": "laboratory",
    "Laboratory": "laboratory",
    "Imaging": "imaging",
    "Radiology": "radiology",
}

EXACT_MATCH_CONFIDENCE = 1.0
PARTIAL_MATCH_CONFIDENCE = 0.85


def match_subtype(subtype: str) -> Optional[Tuple[str, bool]]:
    """
    Look up a subtype in the vocabulary

    Returns:
        (tag name, is_exact) or None when nothing matches
    """
    normalized = subtype.strip().lower()
    for key, tag_name in SUBTYPE_MAPPING.items():
        if key.lower() == normalized:
            return tag_name, True

    for key, tag_name in SUBTYPE_MAPPING.items():
        if key.lower() in normalized:
            return tag_name, False
    return None


class AncillaryBusinessTypeRule(BaseRule):
    """Classifies ancillary entities by business type/subtype"""

    name = "AncillaryBusinessType"
    version = "1.0"
    description = "Classifies ancillary entities by business type/subtype"
    priority = 10

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, AncillaryUser)

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        ancillary: AncillaryUser = context.entity
        tags: List[Tag] = []
        diagnostics: List[str] = []

        if ancillary.entity_subtype and ancillary.entity_subtype.strip():
            subtype = ancillary.entity_subtype.strip()
            match = match_subtype(subtype)
            if match:
                tag_name, exact = match
                metadata = {"originalSubtype": subtype, "category": "ancillary-type"}
                if exact:
                    confidence = EXACT_MATCH_CONFIDENCE
                    diagnostics.append(f"Classified as '{tag_name}' from subtype '{subtype}'")
                else:
                    confidence = PARTIAL_MATCH_CONFIDENCE
                    metadata["matchType"] = "partial"
                    diagnostics.append(f"Classified as '{tag_name}' from partial match in '{subtype}'")
                tags.append(self.create_tag(tag_name, "business", confidence=confidence, metadata=metadata))
            else:
                diagnostics.append(f"Subtype '{subtype}' not in business vocabulary")

            tags.append(self.create_tag("ancillary-service", "business", confidence=1.0,
                                        metadata={"subtype": subtype}))

        if ancillary.entity_type and ancillary.entity_type.strip():
            entity_type = ancillary.entity_type.strip().lower()
            tags.append(self.create_tag(f"entity-type-{entity_type}", "business", confidence=1.0))
            diagnostics.append(f"Tagged with entity type: {entity_type}")

        if ancillary.clinical_services and ancillary.clinical_services.strip():
            tags.append(self.create_tag("provides-clinical-services", "business", confidence=1.0))
            diagnostics.append("Entity provides clinical services")

        if ancillary.services_array:
            count = len(ancillary.services_array)
            tags.append(self.create_tag("multi-service", "business", confidence=1.0,
                                        metadata={"serviceCount": str(count)}))
            diagnostics.append(f"Entity offers {count} service(s)")

        return EvaluationResult.successful(tags, [self.name], diagnostics)
