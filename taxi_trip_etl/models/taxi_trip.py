# taxi_trip_etl/models/taxi_trip.py
"""
Data models for taxi trip records
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional


# Sink column order, shared by the bulk load and the duplicates review file
TRIP_COLUMNS = (
    'pickup_time',
    'dropoff_time',
    'passenger_count',
    'trip_distance',
    'store_and_forward_flag',
    'pickup_location_id',
    'dropoff_location_id',
    'fare_amount',
    'tip_amount',
)


@dataclass(frozen=True)
class FlagDecoding:
    """Result of decoding a raw store-and-forward code"""
    value: Optional['StoreAndForwardFlag'] = None
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.value is not None


class StoreAndForwardFlag(Enum):
    """Whether the trip record was held in vehicle memory before sending"""
    YES = "Yes"
    NO = "No"

    @classmethod
    def decode(cls, raw: Optional[str]) -> FlagDecoding:
        """
        Decode a single-character source code (Y/N, any case)

        Args:
            raw: Raw field text, possibly None

        Returns:
            FlagDecoding holding either the flag or the reason it was refused
        """
        code = raw.upper() if isinstance(raw, str) else None
        if code == "Y":
            return FlagDecoding(value=cls.YES)
        if code == "N":
            return FlagDecoding(value=cls.NO)
        return FlagDecoding(reason=f"invalid store_and_fwd_flag value: {raw!r}")


class TripIdentity(NamedTuple):
    """Business identity of a trip; equal identities are duplicates"""
    pickup_time: datetime
    dropoff_time: datetime
    passenger_count: int


@dataclass(frozen=True)
class TaxiTrip:
    """
    Validated, normalized taxi trip record

    Timestamps are timezone-aware UTC instants. Instances are immutable;
    every field is set once by the validator.
    """

    pickup_time: datetime
    dropoff_time: datetime
    passenger_count: int
    trip_distance: Decimal
    store_and_forward_flag: StoreAndForwardFlag
    pickup_location_id: int
    dropoff_location_id: int
    fare_amount: Decimal
    tip_amount: Decimal

    @property
    def identity(self) -> TripIdentity:
        return TripIdentity(self.pickup_time, self.dropoff_time, self.passenger_count)

    @property
    def trip_duration(self) -> timedelta:
        return self.dropoff_time - self.pickup_time

    def to_record(self) -> Dict[str, Any]:
        """Convert trip to an ordered mapping keyed by sink column name"""
        return {
            'pickup_time': self.pickup_time,
            'dropoff_time': self.dropoff_time,
            'passenger_count': self.passenger_count,
            'trip_distance': self.trip_distance,
            'store_and_forward_flag': self.store_and_forward_flag.value,
            'pickup_location_id': self.pickup_location_id,
            'dropoff_location_id': self.dropoff_location_id,
            'fare_amount': self.fare_amount,
            'tip_amount': self.tip_amount,
        }
