# taxi_trip_etl/cli.py
"""
Command-line interface for the Taxi Trip ETL pipeline

Usage Examples:
    # Load a trip file using settings from the environment / .env
    taxi-trip-etl --input sample-cab-data.csv

    # Choose where review files go
    taxi-trip-etl --input trips.csv --duplicates-file out/dups.csv --errors-file out/errors.txt

    # Partition and write review files without touching Snowflake
    taxi-trip-etl --input trips.csv --dry-run --output-format json
"""

import argparse
import json
import sys
import traceback
from pathlib import Path

from taxi_trip_etl.config.settings import settings
from taxi_trip_etl.orchestrator.ingestion_pipeline import TripIngestionPipeline, IngestionResult
from taxi_trip_etl.utils.logger import setup_pipeline_logging, get_logger
from taxi_trip_etl.utils.exceptions import PipelineError, ConfigurationError


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Taxi Trip ETL: validate, deduplicate and load a trip file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument('--input', type=Path, help='Trip CSV file to ingest (default: $INPUT_FILE)')
    parser.add_argument('--duplicates-file', type=Path, help='Where to write duplicate records')
    parser.add_argument('--errors-file', type=Path, help='Where to write rejected row messages')
    parser.add_argument(
        '--timezone',
        help='Time zone of the timestamps in the input (default: $SOURCE_TIMEZONE)'
    )

    parser.add_argument('--batch-size', type=int, help='Rows per Snowflake write batch')
    parser.add_argument('--max-workers', type=int, help='Threads used to validate rows')

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )
    parser.add_argument('--log-dir', type=str, help='Directory for log files (default: console only)')

    parser.add_argument('--validate-config', action='store_true', help='Validate configuration and exit')
    parser.add_argument('--status', action='store_true', help='Check pipeline status and exit')
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Partition the file and write review files, but skip the Snowflake load'
    )
    parser.add_argument(
        '--output-format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    return parser.parse_args(argv)


def setup_environment(args) -> None:
    """Configure logging and apply command line overrides to the settings"""
    setup_pipeline_logging(log_level=args.log_level, log_dir=args.log_dir)

    pipeline = settings.pipeline
    if args.input:
        pipeline.input_path = Path(args.input)
    if args.duplicates_file:
        pipeline.duplicates_path = Path(args.duplicates_file)
    if args.errors_file:
        pipeline.errors_path = Path(args.errors_file)
    if args.timezone:
        pipeline.source_timezone = args.timezone
    if args.batch_size:
        pipeline.batch_size = args.batch_size
    if args.max_workers:
        pipeline.max_workers = args.max_workers
    pipeline.log_level = args.log_level


def print_status(status: dict, output_format: str) -> None:
    if output_format == 'json':
        print(json.dumps(status, indent=2, default=str))
        return

    print("=== Pipeline Status ===")
    for key, value in status.items():
        print(f"{key.replace('_', ' ').title()}: {value}")


def print_results(result: IngestionResult, output_format: str) -> None:
    """Print ingestion results"""
    if output_format == 'json':
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print("=== Ingestion Results ===")
    print(f"Status: {result.status}")
    print(f"Input File: {result.input_file}")
    print(f"Rows Read: {result.rows_read:,}")
    print(f"Valid Records: {result.canonical_records:,}")
    print(f"Duplicate Records: {result.duplicate_records:,}")
    print(f"Rejected Records: {result.error_records:,}")
    print(f"Loaded Records: {result.loaded_records:,}")
    print(f"Processing Time: {result.processing_time_seconds:.2f} seconds")

    if result.duplicates_file:
        print(f"Duplicates written to {result.duplicates_file}")
    if result.errors_file:
        print(f"Errors written to {result.errors_file}")


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_arguments(argv)

    try:
        setup_environment(args)
        logger = get_logger(__name__)

        logger.info("Starting Taxi Trip ETL")
        logger.info(f"Arguments: {vars(args)}")

        if args.validate_config:
            if settings.validate(require_sink=not args.dry_run):
                print("✓ Configuration is valid")
                return 0
            print("✗ Configuration is invalid - check required environment variables")
            return 1

        pipeline = TripIngestionPipeline(settings, dry_run=args.dry_run)

        if args.status:
            status = pipeline.get_pipeline_status()
            print_status(status, args.output_format)
            return 0 if status['snowflake_connectivity'] or args.dry_run else 1

        result = pipeline.run()
        print_results(result, args.output_format)
        logger.info("Data processing completed successfully")
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1

    except PipelineError as e:
        print(f"Pipeline Error: {e}", file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        print("\nPipeline interrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.log_level == 'DEBUG':
            traceback.print_exc()
        return 3


if __name__ == '__main__':
    sys.exit(main())
