# taxi_trip_etl/utils/logger.py
"""
Centralized logging configuration for the Taxi Trip ETL pipeline
"""

import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict
import json


# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging

    One JSON object per line, with any ``extra`` fields merged in.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_FIELDS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class PipelineLogger:
    """
    Root logger configuration for a pipeline run

    Provides:
    - Console logging (plain text at DEBUG, JSON otherwise)
    - Optional rotating file logs: a main log and an errors-only log
    """

    def __init__(self, log_level: str = "INFO", log_dir: Optional[Path] = None):
        """
        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (optional)
        """
        self.log_level = log_level.upper()
        self.log_dir = Path(log_dir) if log_dir else None
        self._configure_logging()

    def _configure_logging(self) -> None:
        level = getattr(logging, self.log_level, logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        if self.log_level == "DEBUG":
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
        else:
            console_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(console_handler)

        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_dir / 'taxi_trip_etl.log',
                maxBytes=50 * 1024 * 1024,  # 50MB
                backupCount=10,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_dir / 'errors.log',
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(error_handler)

        # The connector logs every request at INFO
        logging.getLogger('snowflake').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)


class PerformanceLogger:
    """
    Stage timing and run metrics logger

    Timings use a monotonic clock; records go to the ``performance.*``
    logger hierarchy so they can be routed separately.
    """

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(f"performance.{logger_name}")
        self.start_times: Dict[str, float] = {}

    def start_operation(self, operation_name: str) -> None:
        self.start_times[operation_name] = time.perf_counter()
        self.logger.info(f"Started operation: {operation_name}")

    def end_operation(self, operation_name: str, **extra_metrics) -> float:
        """
        Stop timing an operation and log its duration

        Returns:
            Duration in seconds, 0.0 if the operation was never started
        """
        started = self.start_times.pop(operation_name, None)
        if started is None:
            self.logger.warning(f"Operation {operation_name} was not started")
            return 0.0

        duration = time.perf_counter() - started
        self.logger.info(
            f"Completed operation: {operation_name}",
            extra={'operation': operation_name, 'duration_seconds': duration, **extra_metrics}
        )
        return duration

    def log_data_metrics(self, **metrics) -> None:
        self.logger.info("Data metrics", extra={'metrics_type': 'data', **metrics})


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module, usually ``get_logger(__name__)``"""
    return logging.getLogger(name)


def setup_pipeline_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Setup logging for the entire pipeline

    Call this once at the start of the process.
    """
    PipelineLogger(log_level=log_level, log_dir=Path(log_dir) if log_dir else None)


class timed_operation:
    """
    Context manager for timing a pipeline stage

    Usage:
        with timed_operation("partition_rows", logger) as timer:
            ...
        print(timer.duration)
    """

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.performance_logger = PerformanceLogger(logger.name)
        self.duration = 0.0

    def __enter__(self):
        self.performance_logger.start_operation(self.operation_name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = self.performance_logger.end_operation(
            self.operation_name,
            success=exc_type is None,
            error_type=exc_type.__name__ if exc_type else None
        )
        return False
