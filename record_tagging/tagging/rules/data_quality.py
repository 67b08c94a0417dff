"""
Data quality rule
Flags placeholder values, missing fields and test-data name patterns
"""
from typing import List, Optional
import logging

from .base import BaseRule
from .validators import digits_only, is_valid_email, is_valid_phone
from ..models import EvaluationContext, EvaluationResult
from ...domain.entities import AncillaryUser, ContactUser, Patient
from ...domain.tag import Tag

logger = logging.getLogger(__name__)


PLACEHOLDER_EMAILS = frozenset({
    "a@a.com",
    "test@test.com",
    "dummy@dummy.com",
    "example@example.com",
    "a@agmail.com",
    "noemail@example.com",
})

PLACEHOLDER_PHONES = frozenset({
    "0000000000",
    "1111111111",
    "9999999999",
    "+10000000000",
    "+11111111111",
    "10000000000",
    "11111111111",
})

TEST_NAME_FRAGMENTS = ("test", "dummy", "sample")


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def is_placeholder_email(email: Optional[str]) -> bool:
    return email is not None and email.strip().lower() in PLACEHOLDER_EMAILS


def is_placeholder_phone(phone: Optional[str]) -> bool:
    if phone is None:
        return False
    return phone.strip() in PLACEHOLDER_PHONES or digits_only(phone) in PLACEHOLDER_PHONES


class DataQualityRule(BaseRule):
    """Evaluates and tags data quality issues like incomplete data, placeholders, and test data"""

    name = "DataQuality"
    version = "1.0"
    description = "Evaluates and tags data quality issues like incomplete data, placeholders, and test data"
    priority = 50

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, (Patient, ContactUser, AncillaryUser))

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        entity = context.entity
        issues: List[str] = []
        diagnostics: List[str] = []

        def flag(issue: str, message: str) -> None:
            if issue not in issues:
                issues.append(issue)
            diagnostics.append(message)

        if isinstance(entity, (ContactUser, AncillaryUser)):
            if is_placeholder_email(entity.email):
                flag("placeholder-email", f"Detected placeholder email: {entity.email}")
            if is_placeholder_phone(entity.phone_no):
                flag("placeholder-phone", f"Detected placeholder phone: {entity.phone_no}")

        if isinstance(entity, AncillaryUser):
            if entity.entity_npi_number is not None and digits_only(entity.entity_npi_number) == "0000000000":
                flag("placeholder-npi", "Detected placeholder NPI: 0000000000")
            if _is_blank(entity.entity_subtype):
                flag("missing-subtype", "Missing entity subtype")
            if _is_blank(entity.state) and _is_blank(entity.city) and _is_blank(entity.zipcode):
                flag("missing-location", "Missing all location information")

            name = (entity.name or "").lower()
            if any(fragment in name for fragment in TEST_NAME_FRAGMENTS):
                flag("test-name-pattern", f"Detected test name pattern: {name}")

        if isinstance(entity, ContactUser):
            has_valid_email = is_valid_email(entity.email) and not is_placeholder_email(entity.email)
            has_valid_phone = is_valid_phone(entity.phone_no) and not is_placeholder_phone(entity.phone_no)
            if not has_valid_email and not has_valid_phone:
                flag("no-valid-contact-method", "No valid contact method (email or phone)")
            if _is_blank(entity.first_name) or _is_blank(entity.last_name):
                flag("incomplete-name", "Missing first or last name")

            full_name = f"{entity.first_name} {entity.last_name}".lower()
            if any(fragment in full_name for fragment in TEST_NAME_FRAGMENTS):
                flag("test-name-pattern", f"Detected test name pattern: {full_name}")

        tags: List[Tag] = []
        if issues:
            tags.append(self.create_tag("suspect", "quality", confidence=1.0, metadata={
                "issues": ",".join(issues),
                "issueCount": str(len(issues)),
            }))
            diagnostics.append(f"Data quality issues detected: {', '.join(issues)}")
            for issue in issues:
                tags.append(self.create_tag(issue, "quality", confidence=1.0))
        else:
            tags.append(self.create_tag("verified", "quality", confidence=0.8))
            diagnostics.append("No obvious data quality issues detected")

        return EvaluationResult.successful(tags, [self.name], diagnostics)
