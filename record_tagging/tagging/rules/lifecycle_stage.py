"""
Lifecycle stage rule
"""
from typing import Dict, List, Tuple
import logging

from .base import BaseRule
from ..models import EvaluationContext, EvaluationResult
from ...domain.entities import AncillaryUser, ContactUser
from ...domain.tag import Tag

logger = logging.getLogger(__name__)


# stage label (case-insensitive) -> (tag name, category)
STAGE_MAPPING: Dict[str, Tuple[str, str]] = {
    "freemium": ("freemium", "tier"),
    "premium": ("premium", "tier"),
    "360 full": ("full-service", "tier"),
    "onboarded": ("onboarded", "status"),
    "engaged": ("engaged", "status"),
    "common patients": ("shared-patients", "relationship"),
    "da direct": ("da-direct", "relationship"),
    "untouched": ("untouched", "status"),
    "targeted": ("targeted", "status"),
    "user": ("active-user", "status"),
    "in sale cycle": ("in-sales", "status"),
    "premium user": ("premium-user", "tier"),
}

HIGH_ENGAGEMENT_STAGES = frozenset({"engaged", "onboarded", "active-user", "in-sales"})


class LifecycleStageRule(BaseRule):
    """Tags entities based on their business lifecycle stage"""

    name = "LifecycleStage"
    version = "1.0"
    description = "Tags entities based on their business lifecycle stage"
    priority = 15

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, (AncillaryUser, ContactUser))

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        entity = context.entity
        tags: List[Tag] = []
        diagnostics: List[str] = []

        if isinstance(entity, AncillaryUser):
            lifecycle_stage = entity.lifecycle_stage
        else:
            lifecycle_stage = entity.contact_lifecycle_stage

        if lifecycle_stage and lifecycle_stage.strip():
            stage = lifecycle_stage.strip()
            mapping = STAGE_MAPPING.get(stage.lower())
            if mapping:
                tag_name, category = mapping
                tags.append(self.create_tag(tag_name, "lifecycle", confidence=1.0, metadata={
                    "originalStage": stage,
                    "category": category,
                }))
                diagnostics.append(f"Lifecycle stage: {tag_name} (from '{stage}')")

                if category == "status":
                    if tag_name in HIGH_ENGAGEMENT_STAGES:
                        tags.append(self.create_tag("high-engagement", "business", confidence=0.9))
                        diagnostics.append("High engagement level detected")
                    elif tag_name == "untouched":
                        tags.append(self.create_tag("no-engagement", "business", confidence=1.0))
                        diagnostics.append("No engagement detected")

                if category == "tier":
                    tags.append(self.create_tag(f"tier-{tag_name}", "access", confidence=1.0))
                    diagnostics.append(f"Access tier: {tag_name}")
            else:
                tags.append(self.create_tag("unknown-lifecycle", "quality", confidence=1.0,
                                            metadata={"value": stage}))
                diagnostics.append(f"Unknown lifecycle stage: '{stage}'")

        if entity.associated_entities:
            count = len(entity.associated_entities)
            tags.append(self.create_tag("has-associations", "relationship", confidence=1.0,
                                        metadata={"count": str(count)}))
            diagnostics.append(f"Has {count} associated entit(ies)")

        return EvaluationResult.successful(tags, [self.name], diagnostics)
