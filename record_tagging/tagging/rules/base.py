"""
Base tagging rule interface
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional
from datetime import datetime
import logging
import time

from ...domain.tag import Tag
from ..models import EvaluationContext, EvaluationResult, RuleInfo

logger = logging.getLogger(__name__)


class BaseRule(ABC):
    """
    Base class for all tagging rules.

    Subclasses implement ``_evaluate`` and return an explicit
    EvaluationResult. ``evaluate`` adds the shared behaviour: short-circuit
    for disabled or non-applicable rules, timing, and containment of
    unexpected exceptions so one faulty rule cannot abort the chain.
    """

    name: str = ""
    version: str = "1.0"
    description: str = ""
    priority: int = 100

    def __init__(self, enabled: bool = True):
        """
        Args:
            enabled: Disabled rules return an empty successful result
        """
        self.enabled = enabled

    @abstractmethod
    def applies_to(self, context: EvaluationContext) -> bool:
        """Cheap pre-filter, usually on the entity type"""
        pass

    @abstractmethod
    def _evaluate(self, context: EvaluationContext) -> EvaluationResult:
        """
        Derive tags for the context entity

        Args:
            context: Evaluation context for a single entity

        Returns:
            EvaluationResult with the derived tags and diagnostics
        """
        pass

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        if not self.enabled:
            return EvaluationResult.successful(
                executed_rules=[self.name],
                diagnostics=[f"Rule '{self.name}' is disabled"],
            )

        if not self.applies_to(context):
            return EvaluationResult.successful(
                executed_rules=[self.name],
                diagnostics=[f"Rule '{self.name}' does not apply to this context"],
            )

        started = time.perf_counter()
        try:
            result = self._evaluate(context)
        except Exception as e:
            logger.exception(f"Rule {self.name} failed for {context.entity_type} {context.entity_id}")
            return EvaluationResult(
                errors=(f"Rule '{self.name}' failed: {e}",),
                rule_execution_times={self.name: time.perf_counter() - started},
            )
        elapsed = time.perf_counter() - started

        executed = result.executed_rules if self.name in result.executed_rules \
            else result.executed_rules + (self.name,)
        return EvaluationResult(
            tags=result.tags,
            diagnostics=result.diagnostics,
            warnings=result.warnings,
            errors=result.errors,
            executed_rules=executed,
            rule_execution_times={self.name: elapsed},
        )

    @property
    def source(self) -> str:
        return f"rule:{self.name}:{self.version}"

    def create_tag(
        self,
        name: str,
        namespace: str,
        confidence: Optional[float] = None,
        value: Optional[str] = None,
        created_by: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Tag:
        """Create a tag stamped with this rule's provenance"""
        effective_metadata = dict(metadata or {})
        effective_metadata["rule"] = self.name
        effective_metadata["version"] = self.version

        return Tag.create(
            name=name,
            namespace=namespace,
            source=self.source,
            confidence=confidence,
            value=value,
            created_by=created_by,
            expires_at=expires_at,
            metadata=effective_metadata,
        )

    def info(self) -> RuleInfo:
        return RuleInfo(
            name=self.name,
            version=self.version,
            description=self.description,
            priority=self.priority,
            enabled=self.enabled,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"
