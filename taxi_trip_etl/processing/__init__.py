"""Row validation, deduplication and partitioning"""

from .trip_validator import TripRecordValidator, validate_trip_fields, MIN_FIELD_COUNT
from .deduplicator import TripDeduplicator
from .partitioner import TripPartitioner, PartitionResult, Partition

__all__ = [
    'TripRecordValidator', 'validate_trip_fields', 'MIN_FIELD_COUNT', 'TripDeduplicator',
    'TripPartitioner', 'PartitionResult', 'Partition'
]
