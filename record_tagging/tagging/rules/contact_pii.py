"""
PII rules for contact and ancillary records
Tag only when at least one genuine identifying field is present
"""
from typing import List, Tuple
import logging

from .base import BaseRule
from .validators import is_valid_value, is_valid_email, is_valid_phone, is_valid_npi
from ..models import EvaluationContext, EvaluationResult
from ...domain.entities import ContactUser, AncillaryUser
from ...domain.tag import Tag

logger = logging.getLogger(__name__)


class ContactPiiRule(BaseRule):
    """Marks contact records containing Personally Identifiable Information"""

    name = "ContactPII"
    version = "1.0"
    description = "Marks contact records containing Personally Identifiable Information"
    priority = 2

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, ContactUser)

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        contact: ContactUser = context.entity
        checks: List[Tuple[str, bool]] = [
            ("firstName", is_valid_value(contact.first_name)),
            ("lastName", is_valid_value(contact.last_name)),
            ("email", is_valid_email(contact.email)),
            ("phone", is_valid_phone(contact.phone_no)),
            ("state", is_valid_value(contact.state)),
            ("city", is_valid_value(contact.city)),
        ]
        pii_fields = [field for field, valid in checks if valid]

        tags: List[Tag] = []
        diagnostics: List[str] = []
        _tag_pii(self, pii_fields, "contact-information", "contact-data", tags, diagnostics)
        return EvaluationResult.successful(tags, [self.name], diagnostics)


class AncillaryPiiRule(BaseRule):
    """Marks ancillary provider records containing identifying information"""

    name = "AncillaryPII"
    version = "1.0"
    description = "Marks ancillary records containing Personally Identifiable Information"
    priority = 2

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, AncillaryUser)

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        ancillary: AncillaryUser = context.entity
        tags: List[Tag] = []
        diagnostics: List[str] = []

        checks: List[Tuple[str, bool]] = [
            ("name", is_valid_value(ancillary.name)),
            ("email", is_valid_email(ancillary.email)),
            ("phone", is_valid_phone(ancillary.phone_no)),
            ("state", is_valid_value(ancillary.state)),
            ("city", is_valid_value(ancillary.city)),
        ]
        pii_fields = [field for field, valid in checks if valid]

        if is_valid_npi(ancillary.entity_npi_number):
            pii_fields.append("npi")
            tags.append(self.create_tag("has-npi", "business", confidence=1.0,
                                        metadata={"npi": ancillary.entity_npi_number}))
            diagnostics.append(f"Found valid NPI: {ancillary.entity_npi_number}")

        _tag_pii(self, pii_fields, "ancillary-information", "ancillary-data", tags, diagnostics)
        return EvaluationResult.successful(tags, [self.name], diagnostics)


def _tag_pii(rule: BaseRule, pii_fields: List[str], pii_type: str, business_tag: str,
             tags: List[Tag], diagnostics: List[str]) -> None:
    if not pii_fields:
        diagnostics.append("No valid PII fields found (may be placeholder data)")
        return

    tags.append(rule.create_tag("PII", "sensitivity", confidence=1.0, metadata={
        "fields": ",".join(pii_fields),
        "fieldCount": str(len(pii_fields)),
        "type": pii_type,
    }))
    diagnostics.append(f"Found PII fields: {', '.join(pii_fields)}")

    tags.append(rule.create_tag(business_tag, "business", confidence=1.0))
    diagnostics.append(f"Tagged as {business_tag.replace('-', ' ')}")
