"""
Ownership rule
Owner, team and creator tags consumed by the access decision engine
"""
from typing import List, Optional
import logging

from .base import BaseRule
from ..models import EvaluationContext, EvaluationResult
from ...config import settings
from ...domain.entities import AncillaryUser, ContactUser, Patient
from ...domain.tag import Tag

logger = logging.getLogger(__name__)


class OwnershipRule(BaseRule):
    """Tags entities with owner and team information for access control"""

    name = "Ownership"
    version = "1.0"
    description = "Tags entities with owner and team information for access control"
    priority = 20

    def __init__(self, enabled: bool = True, organization_domain: Optional[str] = None):
        super().__init__(enabled)
        self.organization_domain = (organization_domain or settings.ORGANIZATION_DOMAIN).lower()

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, (Patient, ContactUser, AncillaryUser))

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        entity = context.entity
        tags: List[Tag] = []
        diagnostics: List[str] = []

        owner = entity.contact_owner if isinstance(entity, ContactUser) else None
        created_by = entity.created_by if isinstance(entity, Patient) else None

        if owner and owner.strip():
            owner_email = owner.strip().lower()
            parts = owner_email.split("@")
            if len(parts) == 2 and all(parts):
                username, domain = parts
                tags.append(self.create_tag("owner", "access", confidence=1.0, value=owner_email,
                                            metadata={"username": username, "domain": domain}))
                diagnostics.append(f"Owner: {owner_email}")

                if domain == self.organization_domain:
                    team = domain.split(".")[0]
                    tags.append(self.create_tag(f"team-{team}", "access", confidence=1.0))
                    diagnostics.append(f"Team: {team}")

                    tags.append(self.create_tag(f"assigned-to-{username}", "access", confidence=1.0))
                    diagnostics.append(f"Assigned to: {username}")
            else:
                diagnostics.append(f"Owner '{owner}' is not an email address, skipped")

        if created_by and created_by.strip():
            tags.append(self.create_tag("creator", "access", confidence=1.0, value=created_by,
                                        metadata={"createdBy": created_by}))
            diagnostics.append(f"Created by: {created_by}")

        if context.performed_by and context.performed_by.strip():
            tags.append(self.create_tag("last-modified-by", "access", confidence=1.0,
                                        value=context.performed_by))
            diagnostics.append(f"Last modified by: {context.performed_by}")

        return EvaluationResult.successful(tags, [self.name], diagnostics)
