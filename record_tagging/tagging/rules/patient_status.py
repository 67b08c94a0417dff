"""
Patient status rule
Billing/eligibility flags and care-complexity tiers
"""
from typing import List
import logging

from .base import BaseRule
from ..models import EvaluationContext, EvaluationResult
from ...domain.entities import Patient
from ...domain.tag import Tag

logger = logging.getLogger(__name__)

MULTI_MORBIDITY_THRESHOLD = 3


def care_complexity(care_records: int) -> str:
    if care_records > 10:
        return "high-complexity"
    if care_records > 5:
        return "medium-complexity"
    return "low-complexity"


class PatientStatusRule(BaseRule):
    """Tags patients based on status, eligibility, and billing indicators"""

    name = "PatientStatus"
    version = "1.0"
    description = "Tags patients based on status, eligibility, and billing indicators"
    priority = 15

    def applies_to(self, context: EvaluationContext) -> bool:
        return isinstance(context.entity, Patient)

    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        patient: Patient = context.entity
        agency_info = patient.agency_info
        tags: List[Tag] = []
        diagnostics: List[str] = []

        if agency_info.patient_status and agency_info.patient_status.strip():
            status = agency_info.patient_status.strip().lower()
            tags.append(self.create_tag(f"status-{status}", "business", confidence=1.0,
                                        metadata={"originalStatus": agency_info.patient_status}))
            diagnostics.append(f"Patient status: {status}")

            # "inactive" contains "active", so check it first
            if "inactive" in status or "discharged" in status:
                tags.append(self.create_tag("inactive-patient", "business", confidence=1.0))
                diagnostics.append("Patient is inactive/discharged")
            elif "active" in status:
                tags.append(self.create_tag("active-patient", "business", confidence=1.0))
                diagnostics.append("Patient is active")

        for flag, tag_name, label in (
            (patient.is_billable, "billable", "billable"),
            (patient.is_pg_billable, "pg-billable", "PG billable"),
            (patient.is_eligible, "eligible", "eligible"),
            (patient.is_pg_eligible, "pg-eligible", "PG eligible"),
        ):
            if flag is True:
                tags.append(self.create_tag(tag_name, "business", confidence=1.0))
                diagnostics.append(f"Patient is {label}")

        care_records = len(agency_info.care_management or [])
        if care_records > 0:
            complexity = care_complexity(care_records)
            tags.append(self.create_tag(complexity, "business", confidence=0.9,
                                        metadata={"careRecordCount": str(care_records)}))
            diagnostics.append(f"Care complexity: {complexity} ({care_records} records)")

        diagnosis_count = len(agency_info.episode_diagnoses or [])
        if diagnosis_count > 0:
            tags.append(self.create_tag("has-diagnoses", "business", confidence=1.0,
                                        metadata={"diagnosisCount": str(diagnosis_count)}))
            diagnostics.append(f"Has {diagnosis_count} diagnosis/diagnoses")

            if diagnosis_count >= MULTI_MORBIDITY_THRESHOLD:
                tags.append(self.create_tag("multi-morbidity", "business", confidence=0.85))
                diagnostics.append("Multiple diagnoses detected (multi-morbidity indicator)")

        if agency_info.start_of_care and agency_info.start_of_care.strip():
            tags.append(self.create_tag("has-start-of-care", "business", confidence=1.0))
            diagnostics.append(f"Start of care date: {agency_info.start_of_care}")

        return EvaluationResult.successful(tags, [self.name], diagnostics)
