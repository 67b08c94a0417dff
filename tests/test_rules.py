"""
Unit tests for the tagging rules
"""
import pytest

from record_tagging.domain.entities import AncillaryUser, ContactUser
from record_tagging.tagging.models import EvaluationContext, EvaluationResult
from record_tagging.tagging.rules import (
    AncillaryBusinessTypeRule,
    AncillaryPiiRule,
    BaseRule,
    ContactPiiRule,
    DataQualityRule,
    LifecycleStageRule,
    OwnershipRule,
    PatientPhiRule,
    PatientStatusRule,
)
from record_tagging.tagging.rules.business_type import match_subtype
from record_tagging.tagging.rules.patient_status import care_complexity

from conftest import make_ancillary, make_contact, make_patient


def context_for(entity, performed_by=None, operation="evaluate"):
    return EvaluationContext(
        entity=entity,
        entity_type=type(entity).__name__,
        operation=operation,
        entity_id=entity.entity_id,
        performed_by=performed_by,
        existing_tags=tuple(entity.tags),
    )


def tags_by_identifier(result: EvaluationResult):
    return {tag.identifier: tag for tag in result.tags}


class ExplodingRule(BaseRule):
    name = "Exploding"
    description = "Always fails"
    priority = 5

    def applies_to(self, context):
        return True

    def _evaluate(self, context):
        raise RuntimeError("kaboom")


class TestBaseRule:
    """Test cases for the shared rule wrapper"""

    def test_disabled_rule_returns_empty_success(self, patient):
        rule = PatientPhiRule(enabled=False)
        result = rule.evaluate(context_for(patient))

        assert result.success
        assert result.tags == ()
        assert result.executed_rules == ("PatientPHI",)
        assert "disabled" in result.diagnostics[0]

    def test_not_applicable_rule_returns_empty_success(self, contact):
        result = PatientPhiRule().evaluate(context_for(contact))

        assert result.success
        assert result.tags == ()
        assert "does not apply" in result.diagnostics[0]

    def test_exception_is_contained(self, patient):
        result = ExplodingRule().evaluate(context_for(patient))

        assert not result.success
        assert result.errors == ("Rule 'Exploding' failed: kaboom",)
        assert result.tags == ()

    def test_timing_is_recorded(self, patient):
        result = PatientPhiRule().evaluate(context_for(patient))
        assert "PatientPHI" in result.rule_execution_times
        assert result.rule_execution_times["PatientPHI"] >= 0

    def test_timing_is_recorded_for_failures(self, patient):
        result = ExplodingRule().evaluate(context_for(patient))

        assert not result.success
        assert result.rule_execution_times["Exploding"] >= 0

    def test_created_tags_carry_provenance(self, patient):
        result = PatientPhiRule().evaluate(context_for(patient))
        phi = tags_by_identifier(result)["sensitivity:PHI"]

        assert phi.source == "rule:PatientPHI:1.0"
        assert phi.metadata["rule"] == "PatientPHI"
        assert phi.metadata["version"] == "1.0"

    def test_info(self):
        info = DataQualityRule().info()
        assert info.name == "DataQuality"
        assert info.priority == 50
        assert info.enabled


class TestPatientPhiRule:
    """Test cases for PatientPhiRule"""

    @pytest.fixture
    def rule(self):
        return PatientPhiRule()

    def test_full_patient(self, rule, patient):
        tags = tags_by_identifier(rule.evaluate(context_for(patient)))

        assert tags["sensitivity:PHI"].confidence == 1.0
        assert tags["sensitivity:PHI"].metadata["regulation"] == "HIPAA"
        assert "sensitivity:PII" in tags
        assert tags["sensitivity:clinical-data"].metadata["recordCount"] == "1"
        assert tags["sensitivity:diagnosis-data"].metadata["recordCount"] == "1"
        assert "retention:7y" in tags

    def test_placeholder_identifiers_do_not_produce_pii(self, rule):
        patient = make_patient(agencyInfo={"patientFName": "N/A", "patientLName": "test", "dob": ""})
        tags = tags_by_identifier(rule.evaluate(context_for(patient)))

        assert "sensitivity:PHI" in tags
        assert "retention:7y" in tags
        assert "sensitivity:PII" not in tags
        assert "sensitivity:clinical-data" not in tags


class TestPiiRules:
    """Test cases for ContactPiiRule and AncillaryPiiRule"""

    def test_contact_with_valid_fields(self, contact):
        tags = tags_by_identifier(ContactPiiRule().evaluate(context_for(contact)))

        pii = tags["sensitivity:PII"]
        assert pii.metadata["fields"] == "firstName,lastName,email,phone,state,city"
        assert pii.metadata["fieldCount"] == "6"
        assert "business:contact-data" in tags

    def test_placeholder_contact_has_no_pii(self):
        contact = ContactUser.model_validate({
            "_id": "c-empty", "email": "a@a.com", "phoneNo": "0000000000",
        })
        result = ContactPiiRule().evaluate(context_for(contact))

        assert result.success
        assert result.tags == ()

    def test_ancillary_with_npi(self, ancillary):
        tags = tags_by_identifier(AncillaryPiiRule().evaluate(context_for(ancillary)))

        assert tags["business:has-npi"].metadata["npi"] == "1234567893"
        assert "npi" in tags["sensitivity:PII"].metadata["fields"]
        assert "business:ancillary-data" in tags

    def test_placeholder_ancillary_has_no_pii(self, placeholder_ancillary):
        result = AncillaryPiiRule().evaluate(context_for(placeholder_ancillary))
        assert result.tags == ()


class TestAncillaryBusinessTypeRule:
    """Test cases for AncillaryBusinessTypeRule"""

    @pytest.fixture
    def rule(self):
        return AncillaryBusinessTypeRule()

    def test_exact_match(self, rule, ancillary):
        tags = tags_by_identifier(rule.evaluate(context_for(ancillary)))

        assert tags["business:home-health"].confidence == 1.0
        assert "matchType" not in tags["business:home-health"].metadata
        assert tags["business:ancillary-service"].metadata["subtype"] == "Home Health Agency"
        assert "business:entity-type-agency" in tags

    def test_exact_match_is_case_insensitive(self):
        assert match_subtype("home health agency") == ("home-health", True)

    def test_partial_match(self, rule):
        ancillary = make_ancillary(entitySubtype="Regional Hospice Care")
        tags = tags_by_identifier(rule.evaluate(context_for(ancillary)))

        assert tags["business:hospice"].confidence == 0.85
        assert tags["business:hospice"].metadata["matchType"] == "partial"

    def test_partial_match_follows_vocabulary_order(self):
        assert match_subtype("Hospice and Home Health Agency") == ("home-health", False)

    def test_unknown_subtype(self, rule):
        ancillary = make_ancillary(entitySubtype="Podiatry")
        tags = tags_by_identifier(rule.evaluate(context_for(ancillary)))

        assert "business:ancillary-service" in tags
        assert not any(name.startswith("business:home") for name in tags)

    def test_services(self, rule):
        ancillary = make_ancillary(clinicalServices="Wound care", servicesArray=["PT", "OT", "SLP"])
        tags = tags_by_identifier(rule.evaluate(context_for(ancillary)))

        assert "business:provides-clinical-services" in tags
        assert tags["business:multi-service"].metadata["serviceCount"] == "3"


class TestLifecycleStageRule:
    """Test cases for LifecycleStageRule"""

    @pytest.fixture
    def rule(self):
        return LifecycleStageRule()

    def test_status_stage_with_high_engagement(self, rule, contact):
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))

        assert tags["lifecycle:engaged"].metadata["category"] == "status"
        assert tags["business:high-engagement"].confidence == 0.9

    def test_tier_stage_adds_access_tier(self, rule, ancillary):
        tags = tags_by_identifier(rule.evaluate(context_for(ancillary)))

        assert "lifecycle:premium" in tags
        assert "access:tier-premium" in tags

    def test_untouched_stage(self, rule):
        contact = make_contact(contactLifecycleStage="untouched")
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))
        assert "business:no-engagement" in tags

    def test_unknown_stage(self, rule):
        contact = make_contact(contactLifecycleStage="Dormant")
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))
        assert tags["quality:unknown-lifecycle"].metadata["value"] == "Dormant"

    def test_associations(self, rule):
        contact = make_contact(associatedEntities=[
            {"id": "e-1", "entityType": "Agency", "name": "Sunrise"},
            {"id": "e-2", "entityType": "Practice", "name": "Oak Clinic"},
        ])
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))
        assert tags["relationship:has-associations"].metadata["count"] == "2"


class TestPatientStatusRule:
    """Test cases for PatientStatusRule"""

    @pytest.fixture
    def rule(self):
        return PatientStatusRule()

    def test_active_patient(self, rule, patient):
        tags = tags_by_identifier(rule.evaluate(context_for(patient)))

        assert "business:status-active" in tags
        assert "business:active-patient" in tags
        assert "business:billable" in tags
        assert "business:pg-billable" not in tags
        assert tags["business:low-complexity"].confidence == 0.9
        assert "business:has-diagnoses" in tags
        assert "business:has-start-of-care" in tags

    def test_inactive_is_not_active(self, rule):
        patient = make_patient(agencyInfo={"patientStatus": "Inactive"})
        tags = tags_by_identifier(rule.evaluate(context_for(patient)))

        assert "business:inactive-patient" in tags
        assert "business:active-patient" not in tags

    def test_multi_morbidity(self, rule):
        patient = make_patient(agencyInfo={"episodeDiagnoses": [{"id": str(i)} for i in range(3)]})
        tags = tags_by_identifier(rule.evaluate(context_for(patient)))

        assert tags["business:has-diagnoses"].metadata["diagnosisCount"] == "3"
        assert tags["business:multi-morbidity"].confidence == 0.85

    @pytest.mark.parametrize("records,expected", [
        (1, "low-complexity"),
        (5, "low-complexity"),
        (6, "medium-complexity"),
        (10, "medium-complexity"),
        (11, "high-complexity"),
    ])
    def test_care_complexity_tiers(self, records, expected):
        assert care_complexity(records) == expected


class TestOwnershipRule:
    """Test cases for OwnershipRule"""

    @pytest.fixture
    def rule(self):
        return OwnershipRule(organization_domain="doctoralliance.com")

    def test_internal_owner(self, rule, contact):
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))

        owner = tags["access:owner=jane.doe@doctoralliance.com"]
        assert owner.metadata["username"] == "jane.doe"
        assert owner.metadata["domain"] == "doctoralliance.com"
        assert "access:team-doctoralliance" in tags
        assert "access:assigned-to-jane.doe" in tags

    def test_external_owner_has_no_team(self, rule):
        contact = make_contact(contactOwner="rep@partner.org")
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))

        assert "access:owner=rep@partner.org" in tags
        assert not any(identifier.startswith("access:team-") for identifier in tags)

    def test_owner_without_email_shape_is_skipped(self, rule):
        contact = make_contact(contactOwner="Jane Doe")
        result = rule.evaluate(context_for(contact))
        assert result.tags == ()

    def test_patient_creator_and_modifier(self, rule, patient):
        tags = tags_by_identifier(rule.evaluate(context_for(patient, performed_by="nurse@doctoralliance.com")))

        assert "access:creator=intake@doctoralliance.com" in tags
        assert "access:last-modified-by=nurse@doctoralliance.com" in tags


class TestDataQualityRule:
    """Test cases for DataQualityRule"""

    @pytest.fixture
    def rule(self):
        return DataQualityRule()

    def test_placeholder_contact_details(self, rule, placeholder_ancillary):
        tags = tags_by_identifier(rule.evaluate(context_for(placeholder_ancillary)))

        suspect = tags["quality:suspect"]
        assert suspect.metadata["issueCount"] == "2"
        assert suspect.metadata["issues"] == "placeholder-email,placeholder-phone"
        assert "quality:placeholder-email" in tags
        assert "quality:placeholder-phone" in tags
        assert "quality:verified" not in tags

    def test_clean_entity_is_verified(self, rule, contact):
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))
        assert list(tags) == ["quality:verified"]
        assert tags["quality:verified"].confidence == 0.8

    def test_contact_without_contact_method(self, rule):
        contact = make_contact(email="", phoneNo=None, lastName="")
        tags = tags_by_identifier(rule.evaluate(context_for(contact)))

        assert "quality:no-valid-contact-method" in tags
        assert "quality:incomplete-name" in tags

    def test_ancillary_missing_fields(self, rule):
        ancillary = AncillaryUser.model_validate({
            "_id": "a-2", "name": "Test Agency", "entityNpiNumber": "0000000000",
        })
        tags = tags_by_identifier(rule.evaluate(context_for(ancillary)))
        issues = tags["quality:suspect"].metadata["issues"].split(",")

        assert issues == ["placeholder-npi", "missing-subtype", "missing-location", "test-name-pattern"]
