"""
Backfill runner
Re-evaluates and re-tags every entity of a stored collection
"""
import asyncio
import logging
import time
from typing import Any, Dict, Optional, Set

from ..config import settings
from ..domain.tag import utc_now
from ..storage.collections import Collection, ENTITY_TYPES, resolve_collection
from ..storage.interface import EntityStore
from .models import BackfillResult, TagApplication
from .service import TaggingService

logger = logging.getLogger(__name__)


class BackfillRunner:
    """
    Applies the rule chain to existing entities in a collection.

    Writes replace the whole document by id without a version check, so a
    concurrent writer updating the same entity between read and write is
    overwritten (last writer wins).
    """

    def __init__(self, service: TaggingService, store: EntityStore):
        self.service = service
        self.store = store

    async def backfill(
        self,
        collection_name: str,
        dry_run: bool = True,
        batch_size: Optional[int] = None,
        performed_by: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
        concurrency: Optional[int] = None,
    ) -> BackfillResult:
        """
        Backfill tags for a collection

        Args:
            collection_name: patients, contacts or ancillaries (synonyms accepted)
            dry_run: Compute and report tags without writing
            batch_size: Progress is logged every batch_size entities
            performed_by: Principal id recorded on the evaluation
            cancel_event: Checked before each entity; a set event stops the run
            concurrency: Number of entities processed at once

        Returns:
            BackfillResult, partial when cancelled

        Raises:
            InvalidCollectionError: Unknown collection name
            ValueError: batch_size or concurrency below 1
        """
        collection = resolve_collection(collection_name)
        batch_size = settings.BACKFILL_BATCH_SIZE if batch_size is None else batch_size
        concurrency = settings.BACKFILL_CONCURRENCY if concurrency is None else concurrency
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        result = BackfillResult(collection_name=collection_name, is_dry_run=dry_run)
        started = time.perf_counter()
        pending: Set[asyncio.Task] = set()

        logger.info(f"Starting backfill for collection '{collection.value}' "
                    f"(dry_run={dry_run}, batch_size={batch_size}, concurrency={concurrency})")

        try:
            result.total_entities = await self.store.count(collection)

            async for document in self.store.scan_documents(collection):
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    logger.warning(f"Backfill of '{collection.value}' cancelled after "
                                   f"{result.processed_entities}/{result.total_entities} entities")
                    break

                work = self._process(document, collection, result, dry_run, batch_size, performed_by)
                if concurrency == 1:
                    await work
                    continue

                pending.add(asyncio.create_task(work))
                if len(pending) >= concurrency:
                    _, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

        except Exception as e:
            logger.exception(f"Backfill failed for collection '{collection.value}'")
            result.errors.append(f"Backfill failed: {e}")

        finally:
            # In-flight writes always complete, including after cancellation
            if pending:
                await asyncio.gather(*pending)

        result.duration_seconds = time.perf_counter() - started
        result.completed_at = utc_now()

        logger.info(f"Backfill completed: {result.processed_entities}/{result.total_entities} entities, "
                    f"{result.successfully_tagged} tagged, {result.skipped_entities} skipped, "
                    f"{result.failed_entities} failed, {result.total_tags_added} tags added "
                    f"in {result.duration_seconds * 1000:.0f}ms")
        return result

    async def _process(
        self,
        document: Dict[str, Any],
        collection: Collection,
        result: BackfillResult,
        dry_run: bool,
        batch_size: int,
        performed_by: Optional[str],
    ) -> None:
        entity_id = str(document["_id"]) if document.get("_id") is not None else None
        try:
            entity = ENTITY_TYPES[collection].model_validate(document)
            application = self.service.apply(entity, "backfill", performed_by, dry_run)

            if not application.evaluation.success:
                result.skipped_entities += 1
                result.warnings.append(
                    f"Skipped {collection.value} {entity_id}: {'; '.join(application.evaluation.errors)}"
                )
                return

            if not dry_run:
                matched = await self.store.replace_by_id(collection, entity_id, application.entity)
                if matched == 0:
                    logger.warning(f"Entity {collection.value} {entity_id} no longer exists, tags not persisted")
                    result.failed_entities += 1
                    result.errors.append(f"Entity {entity_id} not found when persisting tags")
                    return

            self._record(result, application)

        except Exception as e:
            logger.error(f"Failed to tag {collection.value} {entity_id} in backfill: {e}")
            result.failed_entities += 1
            result.errors.append(f"Failed to tag entity {entity_id}: {e}")

        finally:
            result.processed_entities += 1
            if result.processed_entities % batch_size == 0:
                percentage = result.processed_entities * 100.0 / result.total_entities \
                    if result.total_entities else 100.0
                logger.info(f"Backfill progress: {result.processed_entities}/{result.total_entities} "
                            f"({percentage:.1f}%)")

    @staticmethod
    def _record(result: BackfillResult, application: TagApplication) -> None:
        if application.changed:
            result.successfully_tagged += 1
        result.total_tags_added += len(application.added)
        result.total_tags_removed += len(application.removed)

        for tag in application.proposed_tags:
            result.tags_by_namespace[tag.namespace] = result.tags_by_namespace.get(tag.namespace, 0) + 1
            result.tags_by_name[tag.name] = result.tags_by_name.get(tag.name, 0) + 1
