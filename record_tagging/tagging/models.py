"""
Data models for the tagging engine
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..domain.tag import Tag, utc_now


@dataclass(frozen=True)
class EvaluationContext:
    """Everything a rule may look at for a single evaluation"""
    entity: Any
    entity_type: str
    operation: str
    entity_id: Optional[str] = None
    performed_by: Optional[str] = None
    existing_tags: Tuple[Tag, ...] = ()
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class EvaluationResult:
    """Tags and diagnostics produced by one rule or by a whole evaluation"""
    tags: Tuple[Tag, ...] = ()
    diagnostics: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    executed_rules: Tuple[str, ...] = ()
    rule_execution_times: Dict[str, float] = field(default_factory=dict)  # rule name -> seconds

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def tag_count(self) -> int:
        return len(self.tags)

    @classmethod
    def successful(cls, tags=(), executed_rules=(), diagnostics=()) -> "EvaluationResult":
        return cls(
            tags=tuple(tags),
            executed_rules=tuple(executed_rules),
            diagnostics=tuple(diagnostics),
        )

    @classmethod
    def failed(cls, *errors: str) -> "EvaluationResult":
        return cls(errors=tuple(errors))

    @classmethod
    def merge(cls, *results: "EvaluationResult") -> "EvaluationResult":
        """Concatenate results in order; executed rule names keep first occurrence only"""
        executed: List[str] = []
        timings: Dict[str, float] = {}
        for result in results:
            for name in result.executed_rules:
                if name not in executed:
                    executed.append(name)
            timings.update(result.rule_execution_times)

        return cls(
            tags=tuple(t for r in results for t in r.tags),
            diagnostics=tuple(d for r in results for d in r.diagnostics),
            warnings=tuple(w for r in results for w in r.warnings),
            errors=tuple(e for r in results for e in r.errors),
            executed_rules=tuple(executed),
            rule_execution_times=timings,
        )

    def with_tags(self, tags) -> "EvaluationResult":
        return replace(self, tags=tuple(tags))

    def with_diagnostic(self, message: str) -> "EvaluationResult":
        return replace(self, diagnostics=self.diagnostics + (message,))

    def with_warning(self, message: str) -> "EvaluationResult":
        return replace(self, warnings=self.warnings + (message,))

    def with_error(self, message: str) -> "EvaluationResult":
        return replace(self, errors=self.errors + (message,))


@dataclass(frozen=True)
class TagApplication:
    """Outcome of applying an evaluation to an entity"""
    entity: Any
    evaluation: EvaluationResult
    proposed_tags: Tuple[Tag, ...]
    applied: bool
    changed: bool = False  # tag set differs from the stored one, ignoring timestamps
    added: Tuple[str, ...] = ()    # identifiers new to the entity
    removed: Tuple[str, ...] = ()  # identifiers dropped (expired or inactive)


class RuleInfo(BaseModel):
    """Public description of a registered rule"""
    name: str
    version: str
    description: str
    priority: int
    enabled: bool


class BackfillResult(BaseModel):
    """Summary of one backfill run"""
    collection_name: str
    is_dry_run: bool
    total_entities: int = 0
    processed_entities: int = 0
    successfully_tagged: int = 0
    skipped_entities: int = 0
    failed_entities: int = 0
    total_tags_added: int = 0
    total_tags_removed: int = 0
    tags_by_namespace: Dict[str, int] = Field(default_factory=dict)
    tags_by_name: Dict[str, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    cancelled: bool = False
    duration_seconds: float = 0.0
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None


class ValidationResult(BaseModel):
    """Advisory catalog validation of a tag set"""
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    unknown_tags: List[Tag] = Field(default_factory=list)
    deprecated_tags: List[Tag] = Field(default_factory=list)


class TagUsage(BaseModel):
    tag_identifier: str
    namespace: str
    name: str
    usage_count: int
    percentage: float


class TagStatistics(BaseModel):
    """Tag usage aggregated across all collections"""
    total_tags: int = 0
    total_entities: int = 0
    total_entities_with_tags: int = 0
    tag_count_by_namespace: Dict[str, int] = Field(default_factory=dict)
    tag_count_by_name: Dict[str, int] = Field(default_factory=dict)
    tag_count_by_source: Dict[str, int] = Field(default_factory=dict)
    top_tags: List[TagUsage] = Field(default_factory=list)
    expired_tags: List[Tag] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)


class SeedResult(BaseModel):
    total_definitions: int
    created: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class SystemValidationReport(BaseModel):
    """Health report for rules, catalog and sample evaluations"""
    timestamp: datetime = Field(default_factory=utc_now)
    validated_by: str = "system"
    rule_count: int = 0
    enabled_rule_count: int = 0
    rule_names: List[str] = Field(default_factory=list)
    catalog_tag_count: int = 0
    sample_tag_counts: Dict[str, int] = Field(default_factory=dict)
    sample_rule_counts: Dict[str, int] = Field(default_factory=dict)
    checks: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    healthy: bool = True
