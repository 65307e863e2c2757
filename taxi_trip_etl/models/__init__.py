"""Data models"""

from .taxi_trip import (
    TaxiTrip, TripIdentity, StoreAndForwardFlag, FlagDecoding, TRIP_COLUMNS
)
from .rejection import RowRejection, RejectionKind

__all__ = [
    'TaxiTrip', 'TripIdentity', 'StoreAndForwardFlag', 'FlagDecoding', 'TRIP_COLUMNS',
    'RowRejection', 'RejectionKind'
]
