"""Command line interface for the Shopify to Wcart migration service."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .exceptions import MigrationError
from .extractors.shopify_extractor import ShopifyExtractor
from .loaders.wcart_loader import WcartPublisher
from .models.mapping import FieldMapping
from .models.migration import DataType, MigrationStatus
from .models.settings import MigrationSettings
from .orchestrator import BatchProcessor
from .services.mapper import FieldMapper
from .storage import CachedRecordRepository, Database, MappingStore, MigrationRunStore

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Shopify to Wcart Migration Tool - Move store data into Wcart"
    )
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("init-db", help="Create the database tables")

    # Fetch from Shopify
    fetch_parser = subparsers.add_parser("fetch", help="Fetch Shopify records into the local cache")
    fetch_parser.add_argument("data_type", help=f"Data type ({', '.join(DataType.ALL)})")

    # Run migration
    run_parser = subparsers.add_parser("run", help="Run a migration and wait for it to finish")
    run_parser.add_argument("data_type", help="Data type to migrate")
    run_parser.add_argument("--store", help="Shopify store the data came from")
    run_parser.add_argument("--batch-size", type=int, help="Items per batch")
    run_parser.add_argument("--dry-run", action="store_true", help="Map items without publishing them")

    # Run status
    status_parser = subparsers.add_parser("status", help="Show a run and its recent log entries")
    status_parser.add_argument("run_id", help="Migration run id")
    status_parser.add_argument("--limit", type=int, default=20, help="Log entries to show")

    # Preview
    preview_parser = subparsers.add_parser("preview", help="Preview mapped records")
    preview_parser.add_argument("data_type", help="Data type to preview")
    preview_parser.add_argument("--limit", type=int, default=5, help="Records to preview")

    # Mappings
    mappings_parser = subparsers.add_parser("mappings", help="Show or replace field mappings")
    mappings_parser.add_argument("data_type", help="Data type")
    mappings_parser.add_argument("--load", metavar="FILE", help="Replace mappings from a JSON file")

    subparsers.add_parser("test-connection", help="Check the Wcart API connection")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    commands = {
        "init-db": run_init_db,
        "fetch": run_fetch,
        "run": run_migration,
        "status": run_status,
        "preview": run_preview,
        "mappings": run_mappings,
        "test-connection": run_test_connection,
    }

    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        settings = MigrationSettings.from_env()
        if args.database_url:
            settings.database_url = args.database_url
        return command(args, settings)
    except MigrationError as e:
        logger.error(str(e))
        return 1


def _open_database(settings: MigrationSettings) -> Database:
    database = Database(settings.database_url)
    database.create_all()
    return database


def run_init_db(args, settings: MigrationSettings) -> int:
    """Create the database tables."""
    _open_database(settings)
    print("Database ready")
    return 0


def run_fetch(args, settings: MigrationSettings) -> int:
    """Fetch Shopify records into the cache."""
    database = _open_database(settings)
    extractor = ShopifyExtractor.from_settings(settings)
    count = extractor.fetch_and_cache(args.data_type, CachedRecordRepository(database))
    print(f"Cached {count} {args.data_type} records")
    return 0


def run_migration(args, settings: MigrationSettings) -> int:
    """Run a migration in-process."""
    if args.batch_size:
        settings.batch_size = args.batch_size
    if args.dry_run:
        settings.dry_run = True

    store = args.store or settings.shopify_store
    if not store:
        print("No Shopify store given (use --store or SHOPIFY_STORE)")
        return 1

    database = _open_database(settings)
    processor = BatchProcessor(
        settings=settings,
        run_store=MigrationRunStore(database),
        mapping_store=MappingStore(database),
        cache=CachedRecordRepository(database),
        publisher=WcartPublisher.from_settings(settings),
    )

    run_id = processor.start_run(store, args.data_type)
    result = processor.process(run_id, args.data_type)

    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE" if result.status == MigrationStatus.COMPLETED else "MIGRATION FAILED")
    print("=" * 60)
    print(f"Run: {result.id}")
    print(f"Status: {result.status.value}")
    print(f"Total Items: {result.total_items}")
    print(f"Succeeded: {result.processed_items}")
    print(f"Failed: {result.failed_items}")
    if result.duration_seconds:
        print(f"Duration: {result.duration_seconds:.2f} seconds")

    return 0 if result.status == MigrationStatus.COMPLETED else 1


def run_status(args, settings: MigrationSettings) -> int:
    """Show a run and its latest log entries."""
    run_store = MigrationRunStore(_open_database(settings))
    run = run_store.get_run(args.run_id)
    logs = run_store.list_recent_logs(args.run_id, args.limit)

    print(json.dumps({
        "run": run.to_dict(),
        "logs": [entry.to_dict() for entry in logs],
    }, indent=2, default=str))
    return 0


def run_preview(args, settings: MigrationSettings) -> int:
    """Preview mapped records."""
    database = _open_database(settings)
    mappings = MappingStore(database).get_mappings(args.data_type)
    records = CachedRecordRepository(database).sample(args.data_type, args.limit)

    if not records:
        print(f"No cached {args.data_type} records")
        return 0

    for item in FieldMapper().preview(records, mappings):
        print(json.dumps(item, indent=2, default=str))
        print("-" * 40)
    return 0


def run_mappings(args, settings: MigrationSettings) -> int:
    """Show or replace the mapping set for a data type."""
    mapping_store = MappingStore(_open_database(settings))

    if args.load:
        with open(args.load) as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("mappings", [])

        try:
            mappings = [FieldMapping.from_dict(item) for item in data]
        except ValueError as e:
            print(f"Invalid mapping file: {e}")
            return 1

        saved = mapping_store.replace_mappings(args.data_type, mappings)
        print(f"Saved {saved} mappings for {args.data_type}")
        return 0

    mappings = mapping_store.get_mappings(args.data_type)
    print(json.dumps([m.to_dict() for m in mappings], indent=2))
    return 0


def run_test_connection(args, settings: MigrationSettings) -> int:
    """Check the configured Wcart API."""
    publisher = WcartPublisher.from_settings(settings)
    try:
        connected = publisher.validate_connection()
    finally:
        publisher.close()

    if connected:
        print("Connection successful")
        return 0
    print("Connection failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
