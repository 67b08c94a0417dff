"""Command line entry point for tagging administration against MongoDB"""
import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import List, Optional

from .config import settings
from .storage.mongo_store import MongoCatalogStore, MongoEntityStore, create_database
from .tagging.backfill import BackfillRunner
from .tagging.catalog import seed_catalog
from .tagging.registry import RuleRegistry
from .tagging.service import TaggingService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="record-tagging", description=settings.SERVICE_NAME)
    subparsers = parser.add_subparsers(dest="command", required=True)

    backfill = subparsers.add_parser("backfill", help="Re-evaluate tags for every entity in a collection")
    backfill.add_argument("collection", help="patients, contacts or ancillaries")
    backfill.add_argument("--live", action="store_true", help="Persist tags (default is a dry run)")
    backfill.add_argument("--batch-size", type=int, default=settings.BACKFILL_BATCH_SIZE,
                          help="Log progress every N entities")
    backfill.add_argument("--concurrency", type=int, default=settings.BACKFILL_CONCURRENCY,
                          help="Entities processed at once")
    backfill.add_argument("--actor", default=None, help="Principal recorded as performing the backfill")

    subparsers.add_parser("rules", help="List registered tagging rules")

    seed = subparsers.add_parser("seed-catalog", help="Insert the standard tag definitions")
    seed.add_argument("--actor", default="system")

    stats = subparsers.add_parser("stats", help="Tag usage statistics across all collections")
    stats.add_argument("--top", type=int, default=10, help="Number of most used tags to report")

    validate = subparsers.add_parser("validate-system", help="Run tagging health checks")
    validate.add_argument("--actor", default="system")

    return parser


async def _run_backfill(args, service: TaggingService, database) -> str:
    runner = BackfillRunner(service, MongoEntityStore(database))
    cancel_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except NotImplementedError:
        logger.debug("Signal handlers unavailable; Ctrl-C will abort the backfill")

    result = await runner.backfill(
        args.collection,
        dry_run=not args.live,
        batch_size=args.batch_size,
        performed_by=args.actor,
        cancel_event=cancel_event,
        concurrency=args.concurrency,
    )
    return result.model_dump_json(indent=2)


async def _run(args) -> str:
    if args.command == "rules":
        rules = RuleRegistry.default().describe()
        return json.dumps([rule.model_dump() for rule in rules], indent=2)

    database = create_database()
    catalog_store = MongoCatalogStore(database)
    service = TaggingService(catalog_store=catalog_store)

    if args.command == "backfill":
        return await _run_backfill(args, service, database)

    if args.command == "seed-catalog":
        await catalog_store.ensure_indexes()
        result = await seed_catalog(catalog_store, args.actor)
        return result.model_dump_json(indent=2)

    if args.command == "stats":
        statistics = await service.get_tag_statistics(MongoEntityStore(database), top_n=args.top)
        return statistics.model_dump_json(indent=2)

    if args.command == "validate-system":
        report = await service.validate_system(MongoEntityStore(database), catalog_store, validated_by=args.actor)
        return report.model_dump_json(indent=2)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format=settings.LOG_FORMAT
    )

    args = build_parser().parse_args(argv)
    logger.info(f"Starting {settings.SERVICE_NAME}: {args.command}")

    try:
        output = asyncio.run(_run(args))
    except ValueError as e:
        # InvalidCollectionError and bad numeric options
        print(str(e), file=sys.stderr)
        return 2

    print(output)
    return 0
