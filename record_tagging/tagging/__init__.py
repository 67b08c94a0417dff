"""
Tag evaluation engine: rules, registry, merger, orchestrator and backfill
"""
from .models import (
    EvaluationContext,
    EvaluationResult,
    TagApplication,
    RuleInfo,
    BackfillResult,
    ValidationResult,
    TagStatistics,
    TagUsage,
    SeedResult,
    SystemValidationReport,
)
from .rules import BaseRule, default_rules
from .registry import RuleRegistry
from .merger import TagMerger
from .catalog import STANDARD_TAG_DEFINITIONS, TagCatalog, seed_catalog
from .service import TaggingService
from .backfill import BackfillRunner

__all__ = [
    'EvaluationContext',
    'EvaluationResult',
    'TagApplication',
    'RuleInfo',
    'BackfillResult',
    'ValidationResult',
    'TagStatistics',
    'TagUsage',
    'SeedResult',
    'SystemValidationReport',
    'BaseRule',
    'default_rules',
    'RuleRegistry',
    'TagMerger',
    'STANDARD_TAG_DEFINITIONS',
    'TagCatalog',
    'seed_catalog',
    'TaggingService',
    'BackfillRunner',
]
