"""
TaggingService - Main orchestrator for tag evaluation and application
"""
from collections import Counter
from typing import Any, Iterable, List, Optional
import logging
import time

from ..domain.entities import Taggable
from ..domain.tag import Tag, utc_now
from ..storage.collections import Collection
from ..storage.interface import CatalogStore, EntityStore
from .catalog import TagCatalog
from .merger import TagMerger
from .models import (
    EvaluationContext,
    EvaluationResult,
    RuleInfo,
    SystemValidationReport,
    TagApplication,
    TagStatistics,
    TagUsage,
    ValidationResult,
)
from .registry import RuleRegistry

logger = logging.getLogger(__name__)


class TaggingService:
    """
    TaggingService: derives tags for entities and reconciles them with stored tags

    Responsibilities:
    - Run every enabled, applicable rule in priority order
    - Deduplicate tags by identifier, keeping the highest confidence
    - Merge evaluated tags with the tags already on an entity
    - Advisory validation of tags against the catalog
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        merger: Optional[TagMerger] = None,
        catalog_store: Optional[CatalogStore] = None,
    ):
        """
        Initialize TaggingService

        Args:
            registry: Rule registry (defaults to the standard rule set)
            merger: Tag merger
            catalog_store: Tag catalog used by validate_tags; validation is
                skipped with a warning when absent
        """
        self.registry = registry if registry is not None else RuleRegistry.default()
        self.merger = merger if merger is not None else TagMerger()
        self.catalog_store = catalog_store

        logger.info(f"TaggingService initialized with {len(self.registry)} rules: "
                    f"{', '.join(self.registry.names)}")

    def evaluate(self, entity: Any, operation: str = "evaluate",
                 performed_by: Optional[str] = None) -> EvaluationResult:
        """
        Evaluate all rules against an entity

        Pure with respect to storage. A failure of the orchestration itself is
        returned as a failed result instead of being raised.

        Args:
            entity: Entity to evaluate
            operation: create, update, backfill, evaluate or validate
            performed_by: Principal id of the actor

        Returns:
            EvaluationResult with deduplicated tags
        """
        started = time.perf_counter()
        try:
            context = self._create_context(entity, operation, performed_by)

            results: List[EvaluationResult] = []
            for rule in self.registry.enabled():
                try:
                    if not rule.applies_to(context):
                        continue
                except Exception as e:
                    logger.exception(f"Rule {rule.name} failed its applicability check")
                    results.append(EvaluationResult.failed(f"Rule '{rule.name}' failed: {e}"))
                    continue

                results.append(rule.evaluate(context))

            merged = EvaluationResult.merge(*results)
            tags = self.merger.deduplicate(merged.tags)

            elapsed_ms = (time.perf_counter() - started) * 1000
            result = merged.with_tags(tags).with_diagnostic(f"Evaluation completed in {elapsed_ms:.0f}ms")

            logger.info(f"Evaluated {context.entity_type} {context.entity_id}: {len(tags)} tags from "
                        f"{len(result.executed_rules)} rules in {elapsed_ms:.1f}ms")
            if result.errors:
                logger.warning(f"Evaluation of {context.entity_type} {context.entity_id} had errors: "
                               f"{'; '.join(result.errors)}")
            return result

        except Exception as e:
            logger.exception(f"Tag evaluation failed for {type(entity).__name__}")
            return EvaluationResult.failed(f"Evaluation failed: {e}")

    def apply(self, entity: Any, operation: str = "update", performed_by: Optional[str] = None,
              dry_run: bool = False) -> TagApplication:
        """
        Evaluate an entity and compute its merged tag set

        Any evaluation error leaves the entity unchanged. In dry-run mode the
        proposed tags are reported but the entity is returned untouched.

        Returns:
            TagApplication carrying the (possibly new) entity and the evaluation
        """
        evaluation = self.evaluate(entity, operation, performed_by)

        if not isinstance(entity, Taggable):
            return TagApplication(entity=entity, evaluation=evaluation, proposed_tags=(), applied=False)

        existing = list(entity.tags)
        if not evaluation.success:
            logger.warning(f"Skipping tag application for {type(entity).__name__} {entity.entity_id}: "
                           f"{len(evaluation.errors)} rule errors")
            return TagApplication(entity=entity, evaluation=evaluation, proposed_tags=tuple(existing),
                                  applied=False)

        merged, added, removed = self.merger.merge_with_existing(existing, evaluation.tags)
        changed = not self.merger.same_tag_set(existing, merged)

        if dry_run:
            logger.debug(f"Dry run for {type(entity).__name__} {entity.entity_id}: "
                         f"{len(added)} tags would be added, {len(removed)} removed")
            return TagApplication(entity=entity, evaluation=evaluation, proposed_tags=tuple(merged),
                                  applied=False, changed=changed, added=tuple(added), removed=tuple(removed))

        return TagApplication(
            entity=entity.with_tags(merged),
            evaluation=evaluation,
            proposed_tags=tuple(merged),
            applied=True,
            changed=changed,
            added=tuple(added),
            removed=tuple(removed),
        )

    def apply_tags(self, entity: Any, operation: str = "update", performed_by: Optional[str] = None,
                   dry_run: bool = False) -> Any:
        """Evaluate and apply tags, returning the entity to persist"""
        return self.apply(entity, operation, performed_by, dry_run).entity

    async def validate_tags(self, tags: Iterable[Tag]) -> ValidationResult:
        """
        Check tags against the catalog

        Unknown tags make the result invalid; deprecated tags only warn.
        Validation never blocks tagging.
        """
        result = ValidationResult()

        if self.catalog_store is None:
            result.warnings.append("Tag catalog not available, skipping validation")
            return result

        try:
            catalog = TagCatalog(await self.catalog_store.scan_all())

            for tag in tags:
                definition = catalog.find(tag)
                if definition is None:
                    result.is_valid = False
                    result.unknown_tags.append(tag)
                    result.warnings.append(f"Tag '{tag.identifier}' not found in catalog")
                elif definition.is_deprecated:
                    result.deprecated_tags.append(tag)
                    result.warnings.append(
                        f"Tag '{tag.identifier}' is deprecated. Use '{definition.replaced_by}' instead."
                    )
        except Exception as e:
            logger.error(f"Tag validation failed: {e}")
            result.is_valid = False
            result.errors.append(f"Validation error: {e}")

        return result

    def get_available_rules(self) -> List[RuleInfo]:
        return self.registry.describe()

    def cleanup_expired_tags(self, entity: Any) -> Any:
        """Drop expired or inactive tags; returns the same entity when nothing changes"""
        if not isinstance(entity, Taggable):
            return entity

        existing = list(entity.tags)
        valid = self.merger.remove_expired(existing)
        if len(valid) == len(existing):
            return entity

        logger.info(f"Removed {len(existing) - len(valid)} expired tags from {type(entity).__name__}")
        return entity.with_tags(valid)

    async def get_tag_statistics(self, entity_store: EntityStore, top_n: int = 10) -> TagStatistics:
        """
        Aggregate tag usage across all collections

        Args:
            entity_store: Store to scan
            top_n: Number of most used identifiers to report

        Returns:
            TagStatistics; expired tags are listed separately and excluded
            from the counts
        """
        stats = TagStatistics()
        now = utc_now()
        by_identifier: Counter = Counter()
        namespaces: Counter = Counter()
        names: Counter = Counter()
        sources: Counter = Counter()

        for collection in Collection:
            async for entity in entity_store.scan(collection):
                stats.total_entities += 1
                valid_tags = [tag for tag in entity.tags if tag.is_valid(now)]
                stats.expired_tags.extend(tag for tag in entity.tags if tag.is_expired(now))
                if not valid_tags:
                    continue

                stats.total_entities_with_tags += 1
                for tag in valid_tags:
                    stats.total_tags += 1
                    by_identifier[(tag.identifier, tag.namespace, tag.name)] += 1
                    namespaces[tag.namespace] += 1
                    names[tag.name] += 1
                    sources[tag.source] += 1

        stats.tag_count_by_namespace = dict(namespaces)
        stats.tag_count_by_name = dict(names)
        stats.tag_count_by_source = dict(sources)

        ranked = sorted(by_identifier.items(), key=lambda item: (-item[1], item[0][0]))[:top_n]
        for (identifier, namespace, name), count in ranked:
            percentage = count / stats.total_entities_with_tags * 100
            stats.top_tags.append(TagUsage(
                tag_identifier=identifier,
                namespace=namespace,
                name=name,
                usage_count=count,
                percentage=round(percentage, 2),
            ))

        logger.info(f"Tag statistics: {stats.total_tags} tags on {stats.total_entities_with_tags}/"
                    f"{stats.total_entities} entities, {len(stats.expired_tags)} expired")
        return stats

    async def validate_system(
        self,
        entity_store: EntityStore,
        catalog_store: Optional[CatalogStore] = None,
        validated_by: str = "system",
    ) -> SystemValidationReport:
        """
        Run health checks over rules, catalog and one sample entity per collection

        Returns:
            SystemValidationReport; healthy when there are no errors and at
            least one enabled rule
        """
        report = SystemValidationReport(validated_by=validated_by)
        catalog_store = catalog_store or self.catalog_store

        try:
            logger.info("Validating tagging rules...")
            rules = self.get_available_rules()
            report.rule_count = len(rules)
            report.enabled_rule_count = sum(1 for rule in rules if rule.enabled)
            report.rule_names = [rule.name for rule in rules]
            report.checks.append(f"Found {report.rule_count} tagging rules ({report.enabled_rule_count} enabled)")

            logger.info("Validating tag catalog...")
            if catalog_store is None:
                report.warnings.append("Tag catalog not configured")
            else:
                report.catalog_tag_count = await catalog_store.count()
                report.checks.append(f"Tag catalog contains {report.catalog_tag_count} definitions")
                if report.catalog_tag_count == 0:
                    report.warnings.append("Tag catalog is empty - consider seeding it")

            for collection in Collection:
                logger.info(f"Testing {collection.value} tagging...")
                sample = await self._sample(entity_store, collection)
                if sample is None:
                    report.warnings.append(f"No sample {collection.value} entity available for testing")
                    continue

                result = self.evaluate(sample, "validate", validated_by)
                report.sample_tag_counts[collection.value] = result.tag_count
                report.sample_rule_counts[collection.value] = len(result.executed_rules)
                report.checks.append(f"Sample {collection.value} entity generated {result.tag_count} tags "
                                     f"from {len(result.executed_rules)} rules")
                for error in result.errors:
                    report.errors.append(f"Sample {collection.value} evaluation: {error}")

                if collection == Collection.PATIENTS:
                    if any(t.namespace == "sensitivity" and t.name == "PHI" for t in result.tags):
                        report.checks.append("PHI tag correctly applied to patient")
                    else:
                        report.warnings.append("Expected PHI tag not found on patient")
                elif collection == Collection.ANCILLARIES:
                    if any(t.namespace == "business" for t in result.tags):
                        report.checks.append("Business classification tags correctly applied")
                    else:
                        report.warnings.append("No business classification tags found on ancillary")

            report.healthy = not report.errors and report.rule_count > 0 and report.enabled_rule_count > 0
            if not report.healthy:
                report.errors.append("Tagging system has critical issues")

        except Exception as e:
            logger.exception("System validation failed")
            report.errors.append(f"Validation failed: {e}")
            report.healthy = False

        logger.info(f"Validation complete: healthy={report.healthy}, checks={len(report.checks)}, "
                    f"warnings={len(report.warnings)}, errors={len(report.errors)}")
        return report

    # Helper methods

    def _create_context(self, entity: Any, operation: str, performed_by: Optional[str]) -> EvaluationContext:
        if isinstance(entity, Taggable):
            entity_id = entity.entity_id
            existing_tags = tuple(entity.tags)
        else:
            entity_id = None
            existing_tags = ()

        return EvaluationContext(
            entity=entity,
            entity_type=type(entity).__name__,
            operation=operation,
            entity_id=entity_id,
            performed_by=performed_by,
            existing_tags=existing_tags,
        )

    @staticmethod
    async def _sample(entity_store: EntityStore, collection: Collection):
        try:
            async for entity in entity_store.scan(collection):
                return entity
        except Exception as e:
            logger.warning(f"Could not load a sample {collection.value} entity: {e}")
        return None
