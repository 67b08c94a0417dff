"""
Unit tests for RuleRegistry and TagMerger
"""
from datetime import timedelta

import pytest

from record_tagging.domain.tag import Tag, utc_now
from record_tagging.tagging.merger import TagMerger
from record_tagging.tagging.registry import RuleRegistry
from record_tagging.tagging.rules import DataQualityRule, PatientPhiRule, PatientStatusRule, LifecycleStageRule


class TestRuleRegistry:
    """Test cases for RuleRegistry"""

    def test_default_order(self):
        registry = RuleRegistry.default()

        assert registry.names == [
            "PatientPHI",
            "ContactPII",
            "AncillaryPII",
            "AncillaryBusinessType",
            "LifecycleStage",
            "PatientStatus",
            "Ownership",
            "DataQuality",
        ]
        assert len(registry) == 8

    def test_equal_priorities_keep_registration_order(self):
        registry = RuleRegistry([PatientStatusRule(), DataQualityRule(), LifecycleStageRule()])
        assert registry.names == ["PatientStatus", "LifecycleStage", "DataQuality"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="PatientPHI"):
            RuleRegistry([PatientPhiRule(), PatientPhiRule()])

    def test_enabled_and_get(self):
        registry = RuleRegistry([PatientPhiRule(enabled=False), DataQualityRule()])

        assert [rule.name for rule in registry.enabled()] == ["DataQuality"]
        assert registry.get("PatientPHI") is not None
        assert registry.get("Missing") is None

    def test_describe(self):
        infos = RuleRegistry.default().describe()
        assert infos[0].name == "PatientPHI"
        assert all(info.version == "1.0" for info in infos)


class TestTagMerger:
    """Test cases for TagMerger"""

    @pytest.fixture
    def merger(self):
        return TagMerger()

    def test_highest_confidence_wins(self, merger):
        low = Tag.create("hospice", "business", "rule:A:1.0", confidence=0.85)
        high = Tag.create("hospice", "business", "rule:B:1.0", confidence=1.0)

        result = merger.deduplicate([low, high])

        assert result == [high]

    def test_absent_confidence_counts_as_certain(self, merger):
        scored = Tag.create("PHI", "sensitivity", "rule:A:1.0", confidence=0.9)
        certain = Tag.create("PHI", "sensitivity", "manual")

        assert merger.deduplicate([scored, certain]) == [certain]

    def test_tie_keeps_first_encountered(self, merger):
        first = Tag.create("verified", "quality", "rule:First:1.0", confidence=0.8)
        second = Tag.create("verified", "quality", "rule:Second:1.0", confidence=0.8)

        result = merger.deduplicate([first, second])

        assert len(result) == 1
        assert result[0].source == "rule:First:1.0"

    def test_first_appearance_order(self, merger):
        a = Tag.create("a", "business", "manual")
        b = Tag.create("b", "business", "manual")
        a_better = Tag.create("a", "business", "manual", confidence=1.0)

        result = merger.deduplicate([a.model_copy(update={"confidence": 0.5}), b, a_better])
        assert [tag.name for tag in result] == ["a", "b"]

    def test_merge_with_existing(self, merger):
        now = utc_now()
        manual = Tag.create("vip", "business", "manual")
        stale = Tag.create("PHI", "sensitivity", "rule:PatientPHI:1.0", confidence=1.0)
        expired = Tag.create("temp", "quality", "manual", expires_at=now - timedelta(days=1))
        fresh = Tag.create("PHI", "sensitivity", "rule:PatientPHI:1.0", confidence=1.0)
        added = Tag.create("7y", "retention", "rule:PatientPHI:1.0")

        merged, added_ids, removed_ids = merger.merge_with_existing([manual, stale, expired], [fresh, added], now)

        assert merged == [manual, fresh, added]
        assert added_ids == ["retention:7y"]
        assert removed_ids == ["quality:temp"]

    def test_same_tag_set_ignores_timestamps(self, merger):
        first = Tag.create("PHI", "sensitivity", "manual")
        later = first.model_copy(update={"created_at": first.created_at + timedelta(minutes=5)})

        assert merger.same_tag_set([first], [later])
        assert not merger.same_tag_set([first], [first.deactivate()])

    def test_remove_expired(self, merger):
        now = utc_now()
        live = Tag.create("a", "business", "manual")
        dead = Tag.create("b", "business", "manual", expires_at=now)

        assert merger.remove_expired([live, dead], now) == [live]
