# taxi_trip_etl/processing/partitioner.py
"""
Three-way partitioning of input rows into canonical, duplicate and error sets
"""

import concurrent.futures
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from taxi_trip_etl.models.taxi_trip import TaxiTrip
from taxi_trip_etl.models.rejection import RowRejection, RejectionKind
from taxi_trip_etl.processing.deduplicator import TripDeduplicator
from taxi_trip_etl.processing.trip_validator import (
    TripRecordValidator, ValidationOutcome, MIN_FIELD_COUNT
)
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import ProcessingError


PARALLEL_CHUNK_SIZE = 5000

RawRow = Tuple[int, Sequence[Optional[str]]]


class Partition(Enum):
    CANONICAL = "canonical"
    DUPLICATE = "duplicate"
    ERROR = "error"


@dataclass(frozen=True)
class PartitionResult:
    """Finalized output of one partitioning pass"""
    canonical: Tuple[TaxiTrip, ...]
    duplicates: Tuple[TaxiTrip, ...]
    rejections: Tuple[RowRejection, ...]
    rows_read: int

    @property
    def canonical_count(self) -> int:
        return len(self.canonical)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicates)

    @property
    def error_count(self) -> int:
        return len(self.rejections)

    @property
    def error_messages(self) -> List[str]:
        return [rejection.message for rejection in self.rejections]

    def summary(self) -> Dict[str, Any]:
        unexpected = sum(1 for r in self.rejections if r.kind is RejectionKind.UNEXPECTED)
        return {
            'rows_read': self.rows_read,
            'canonical_records': self.canonical_count,
            'duplicate_records': self.duplicate_count,
            'error_records': self.error_count,
            'unexpected_errors': unexpected,
        }


class TripPartitioner:
    """
    Owns the canonical, duplicate and error collections for one run

    Every row lands in exactly one partition. Nothing a single row does,
    including raising, stops the pass.

    Rows may be validated on a thread pool (``max_workers > 1``); outcomes
    are still applied in file order, so first-write-wins and the order of
    the duplicate and error outputs match the input.
    """

    def __init__(
        self,
        source_timezone: str,
        progress_interval: int = 1000,
        max_workers: int = 1,
        validator: Optional[TripRecordValidator] = None
    ):
        self.validator = validator or TripRecordValidator(source_timezone)
        self.progress_interval = progress_interval
        self.max_workers = max_workers
        self.logger = get_logger(__name__)

        self._deduplicator = TripDeduplicator()
        self._duplicates: List[TaxiTrip] = []
        self._rejections: List[RowRejection] = []
        self._rows_read = 0
        self._result: Optional[PartitionResult] = None

    def evaluate(self, line_number: int, fields: Sequence[Optional[str]]) -> ValidationOutcome:
        """Validate one row without touching any partition"""
        if len(fields) < MIN_FIELD_COUNT:
            return RowRejection(line_number, "not enough fields", RejectionKind.MISSING_FIELDS)
        try:
            return self.validator.validate(fields, line_number)
        except Exception as e:
            self.logger.debug(f"Line {line_number}: unexpected {type(e).__name__}: {e}")
            return RowRejection.unexpected(line_number, str(e) or type(e).__name__)

    def apply(self, outcome: ValidationOutcome) -> Partition:
        """Route a validation outcome to its partition"""
        if self._result is not None:
            raise ProcessingError(
                "Partitioner is finalized; no more rows can be added",
                context={'rows_read': self._rows_read}
            )

        self._rows_read += 1
        if self.progress_interval and self._rows_read % self.progress_interval == 0:
            self.logger.info(f"Processed {self._rows_read} lines...")

        if isinstance(outcome, RowRejection):
            self._rejections.append(outcome)
            return Partition.ERROR

        if self._deduplicator.register(outcome):
            return Partition.CANONICAL

        self._duplicates.append(outcome)
        return Partition.DUPLICATE

    def add_row(self, line_number: int, fields: Sequence[Optional[str]]) -> Partition:
        return self.apply(self.evaluate(line_number, fields))

    def partition(self, rows: Iterable[RawRow]) -> PartitionResult:
        """
        Consume ``(line_number, fields)`` pairs in file order and finalize

        Args:
            rows: Raw rows, typically from TripFileReader.read_rows()

        Returns:
            The finalized PartitionResult
        """
        if self.max_workers > 1:
            self._partition_parallel(rows)
        else:
            for line_number, fields in rows:
                self.add_row(line_number, fields)
        return self.finalize()

    def _partition_parallel(self, rows: Iterable[RawRow]) -> None:
        iterator = iter(rows)
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            while True:
                chunk = list(islice(iterator, PARALLEL_CHUNK_SIZE))
                if not chunk:
                    break
                # map() yields in submission order
                for outcome in executor.map(lambda row: self.evaluate(*row), chunk):
                    self.apply(outcome)

    def finalize(self) -> PartitionResult:
        """Freeze the collections; later calls return the same result"""
        if self._result is None:
            self._result = PartitionResult(
                canonical=tuple(self._deduplicator.canonical_records()),
                duplicates=tuple(self._duplicates),
                rejections=tuple(self._rejections),
                rows_read=self._rows_read
            )
            self.logger.info(
                f"Found {self._result.canonical_count} valid records, "
                f"{self._result.duplicate_count} duplicate records, "
                f"{self._result.error_count} errors"
            )
        return self._result
