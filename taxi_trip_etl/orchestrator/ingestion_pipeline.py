# taxi_trip_etl/orchestrator/ingestion_pipeline.py
"""
Main orchestrator for the Taxi Trip ETL pipeline
"""

import concurrent.futures
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from taxi_trip_etl.config.settings import Settings, settings as default_settings
from taxi_trip_etl.extractors.csv_reader import TripFileReader
from taxi_trip_etl.loaders.review_writer import ReviewFileWriter
from taxi_trip_etl.loaders.snowflake_loader import SnowflakeLoader
from taxi_trip_etl.processing.partitioner import TripPartitioner, PartitionResult
from taxi_trip_etl.utils.logger import get_logger, PerformanceLogger, timed_operation
from taxi_trip_etl.utils.exceptions import (
    PipelineError, ConfigurationError, handle_pipeline_exception
)


@dataclass
class IngestionResult:
    """Results from one ingestion run"""
    status: str
    input_file: str
    rows_read: int
    canonical_records: int
    duplicate_records: int
    error_records: int
    loaded_records: int
    processing_time_seconds: float
    duplicates_file: Optional[str] = None
    errors_file: Optional[str] = None
    data_quality_metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TripIngestionPipeline:
    """
    Runs one trip file through the ETL

    1. Read rows from the input file in order
    2. Validate, deduplicate and partition them
    3. Concurrently: bulk-load canonical trips, write the duplicates CSV,
       write the error file

    Rejected rows never stop a run. Failing to read the input or to write
    any output raises a PipelineError.
    """

    def __init__(self, config: Optional[Settings] = None, dry_run: bool = False):
        """
        Args:
            config: Settings to run with; the global settings by default
            dry_run: Partition and write review files but skip Snowflake
        """
        self.logger = get_logger(__name__)
        self.performance_logger = PerformanceLogger(__name__)
        self.settings = config or default_settings
        self.dry_run = dry_run

        if not self.settings.validate(require_sink=not dry_run):
            raise ConfigurationError(
                "Invalid configuration - check input path, time zone and Snowflake credentials"
            )

        self.snowflake_loader = SnowflakeLoader(self.settings.snowflake)
        self.review_writer = ReviewFileWriter()

        self.logger.info("Ingestion pipeline initialized successfully")

    def run(self) -> IngestionResult:
        """
        Process the configured input file end to end

        Returns:
            IngestionResult with partition counts and load statistics

        Raises:
            PipelineError: On any fatal I/O or sink failure
        """
        pipeline_config = self.settings.pipeline
        input_path = pipeline_config.input_path

        try:
            with timed_operation("ingest_trip_file", self.logger) as timer:
                partition_result = self.partition_file(input_path)
                outputs = self.write_outputs(partition_result)

        except PipelineError:
            raise
        except Exception as e:
            error_msg = f"Failed to ingest {input_path}: {e}"
            self.logger.error(error_msg, exc_info=True)
            raise handle_pipeline_exception('run', e, {'input_file': str(input_path)}) from e

        load_stats = outputs.get('load') or {}
        loaded_records = load_stats.get('loaded_records', 0)

        result = IngestionResult(
            status="dry_run" if self.dry_run else "completed",
            input_file=str(input_path),
            rows_read=partition_result.rows_read,
            canonical_records=partition_result.canonical_count,
            duplicate_records=partition_result.duplicate_count,
            error_records=partition_result.error_count,
            loaded_records=loaded_records,
            processing_time_seconds=timer.duration,
            duplicates_file=str(outputs['duplicates']) if outputs.get('duplicates') else None,
            errors_file=str(outputs['errors']) if outputs.get('errors') else None,
            data_quality_metrics=self._generate_quality_metrics(partition_result, loaded_records)
        )

        self.performance_logger.log_data_metrics(
            **partition_result.summary(),
            loaded_records=loaded_records,
            processing_time_seconds=timer.duration
        )
        self.logger.info(f"Ingestion finished: {result.status}")
        return result

    def partition_file(self, input_path: Path) -> PartitionResult:
        """Read and partition every row of the input file"""
        pipeline_config = self.settings.pipeline
        reader = TripFileReader(input_path)
        reader.validate_input()
        self.logger.info("Input file", extra=reader.get_file_metadata())

        partitioner = TripPartitioner(
            source_timezone=pipeline_config.source_timezone,
            progress_interval=pipeline_config.progress_interval,
            max_workers=pipeline_config.max_workers
        )

        with timed_operation("partition_rows", self.logger):
            return partitioner.partition(reader.read_rows())

    def write_outputs(self, result: PartitionResult) -> Dict[str, Any]:
        """
        Hand the finalized partitions to the sink writers

        The three writes read disjoint collections and run concurrently.
        Every write is allowed to finish; the first failure is re-raised.
        """
        pipeline_config = self.settings.pipeline

        tasks: Dict[str, Callable[[], Any]] = {
            'duplicates': lambda: self.review_writer.write_duplicates(
                result.duplicates, pipeline_config.duplicates_path
            ),
            'errors': lambda: self.review_writer.write_errors(
                result.rejections, pipeline_config.errors_path
            ),
        }
        if not self.dry_run:
            tasks['load'] = lambda: self._load_canonical(result)
        else:
            self.logger.info("Dry run: skipping Snowflake load")

        outputs: Dict[str, Any] = {}
        first_error: Optional[Exception] = None

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(tasks)) as executor:
            future_to_task = {executor.submit(task): name for name, task in tasks.items()}

            for future in concurrent.futures.as_completed(future_to_task):
                name = future_to_task[future]
                try:
                    outputs[name] = future.result()
                except Exception as e:
                    self.logger.error(f"Output '{name}' failed: {e}")
                    if first_error is None:
                        first_error = e

        if first_error is not None:
            raise handle_pipeline_exception('write_outputs', first_error)

        return outputs

    def _load_canonical(self, result: PartitionResult) -> Dict[str, Any]:
        if not result.canonical:
            return self.snowflake_loader.load_trips(result.canonical)

        if self.settings.pipeline.create_table:
            self.snowflake_loader.create_trips_table()

        with timed_operation("snowflake_load", self.logger):
            return self.snowflake_loader.load_trips(
                result.canonical, batch_size=self.settings.pipeline.batch_size
            )

    def _generate_quality_metrics(
        self,
        result: PartitionResult,
        loaded_records: int
    ) -> Dict[str, Any]:
        rows = result.rows_read
        metrics = {
            **result.summary(),
            'acceptance_rate': round(result.canonical_count / rows, 4) if rows else 0,
            'duplicate_rate': round(result.duplicate_count / rows, 4) if rows else 0,
            'error_rate': round(result.error_count / rows, 4) if rows else 0,
            'all_canonical_loaded': self.dry_run or loaded_records == result.canonical_count,
        }

        if not self.dry_run and loaded_records:
            metrics['table_row_count'] = self.snowflake_loader.get_table_row_count()

        return metrics

    def get_pipeline_status(self) -> Dict[str, Any]:
        """Configuration and connectivity status"""
        status = {
            'configuration_valid': self.settings.validate(require_sink=not self.dry_run),
            'input_file': str(self.settings.pipeline.input_path),
            'source_timezone': self.settings.pipeline.source_timezone,
            'table_name': self.snowflake_loader.table_name,
            'batch_size': self.settings.pipeline.batch_size,
            'max_workers': self.settings.pipeline.max_workers,
        }
        row_count = None if self.dry_run else self.snowflake_loader.get_table_row_count()
        status['snowflake_connectivity'] = row_count is not None
        status['table_row_count'] = row_count
        return status
