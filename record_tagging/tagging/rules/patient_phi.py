"""
Patient PHI rule
Every patient record is Protected Health Information by definition
"""
from typing import List
import logging

from .base import BaseRule
from .validators import is_valid_value
from ..models import EvaluationContext, EvaluationResult
from ...domain.entities import Patient
from ...domain.tag import Tag

logger = logging.getLogger(__name__)


class PatientPhiRule(BaseRule):
    """Marks patient records as PHI and applies the HIPAA retention policy"""

    name = "PatientPHI"
    version = "1.0"
    description = "Marks patient records as containing Protected Health Information (PHI)"
    priority = 1

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, Patient)

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        patient: Patient = context.entity
        agency_info = patient.agency_info
        tags: List[Tag] = []
        diagnostics: List[str] = []

        tags.append(self.create_tag("PHI", "sensitivity", confidence=1.0, metadata={
            "reason": "Patient records inherently contain Protected Health Information",
            "regulation": "HIPAA",
            "category": "healthcare",
        }))
        diagnostics.append("Tagged as PHI: Patient record")

        has_pii_fields = False
        for label, value in (
            ("First Name", agency_info.patient_first_name),
            ("Last Name", agency_info.patient_last_name),
            ("Date of Birth", agency_info.dob),
        ):
            if is_valid_value(value):
                diagnostics.append(f"Found: {label}")
                has_pii_fields = True

        if agency_info.care_management:
            count = len(agency_info.care_management)
            tags.append(self.create_tag("clinical-data", "sensitivity", confidence=1.0,
                                        metadata={"recordCount": str(count)}))
            diagnostics.append(f"Found: {count} care management record(s)")

        if agency_info.episode_diagnoses:
            count = len(agency_info.episode_diagnoses)
            tags.append(self.create_tag("diagnosis-data", "sensitivity", confidence=1.0,
                                        metadata={"recordCount": str(count)}))
            diagnostics.append(f"Found: {count} diagnosis record(s)")

        if has_pii_fields:
            tags.append(self.create_tag("PII", "sensitivity", confidence=1.0,
                                        metadata={"type": "patient-identifiers"}))

        # HIPAA minimum is six years
        tags.append(self.create_tag("7y", "retention", confidence=1.0, metadata={
            "reason": "HIPAA minimum retention requirement",
            "regulation": "HIPAA",
        }))
        diagnostics.append("Applied 7-year retention policy per HIPAA")

        return EvaluationResult.successful(tags, [self.name], diagnostics)
