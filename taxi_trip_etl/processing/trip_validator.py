# taxi_trip_etl/processing/trip_validator.py
"""
Field parsing and validation for raw taxi trip rows
"""

import re
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence, Union

import pandas as pd

from taxi_trip_etl.models.taxi_trip import TaxiTrip, StoreAndForwardFlag
from taxi_trip_etl.models.rejection import RowRejection, RejectionKind


MIN_FIELD_COUNT = 14
DATETIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"
MAX_TRIP_DURATION = timedelta(hours=24)

# Positions in the fourteen-column source layout
PICKUP_COLUMN = 1
DROPOFF_COLUMN = 2
PASSENGER_COUNT_COLUMN = 3
TRIP_DISTANCE_COLUMN = 4
STORE_AND_FWD_COLUMN = 6
PU_LOCATION_COLUMN = 7
DO_LOCATION_COLUMN = 8
FARE_AMOUNT_COLUMN = 10
TIP_AMOUNT_COLUMN = 13

SMALLINT_MIN = -32768
SMALLINT_MAX = 32767

_TIMESTAMP_PATTERN = re.compile(r"\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2} [AaPp][Mm]")
_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?=[\d,]*\.?\d)(?:\d[\d,]*)?(?:\.\d*)?")

ValidationOutcome = Union[TaxiTrip, RowRejection]


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Parse ``MM/DD/YYYY hh:mm:ss AM/PM``; None when the text does not match"""
    if text is None or not _TIMESTAMP_PATTERN.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError:
        return None


def parse_smallint(text: Optional[str]) -> Optional[int]:
    """Parse a signed 16-bit integer, allowing surrounding whitespace"""
    if text is None:
        return None
    stripped = text.strip()
    if not _INTEGER_PATTERN.fullmatch(stripped):
        return None
    value = int(stripped)
    if not SMALLINT_MIN <= value <= SMALLINT_MAX:
        return None
    return value


def parse_decimal(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse a plain decimal number

    Surrounding whitespace, a leading sign and thousands separators are
    accepted. Exponents, NaN and Infinity are not.
    """
    if text is None:
        return None
    stripped = text.strip()
    if not _DECIMAL_PATTERN.fullmatch(stripped):
        return None
    try:
        return Decimal(stripped.replace(',', ''))
    except InvalidOperation:
        return None


def to_utc(local_time: datetime, source_timezone: str) -> datetime:
    """
    Interpret a naive wall-clock time in ``source_timezone`` and convert to UTC

    Ambiguous times in the DST fall-back hour resolve to standard time.
    Wall times skipped by the spring-forward jump raise.
    """
    localized = pd.Timestamp(local_time).tz_localize(
        source_timezone, ambiguous=False, nonexistent='raise'
    )
    return localized.tz_convert('UTC').to_pydatetime()


class TripRecordValidator:
    """
    Turns one raw row into a TaxiTrip or a RowRejection

    Rules run in a fixed order and the first failing rule decides the
    rejection reason. The validator keeps no state between rows, so one
    instance can be shared across worker threads.
    """

    def __init__(self, source_timezone: str):
        self.source_timezone = source_timezone

    def validate(self, fields: Sequence[Optional[str]], line_number: int) -> ValidationOutcome:
        """
        Validate and normalize one row

        Args:
            fields: Raw field texts in source column order
            line_number: Data row number, used in rejections

        Returns:
            TaxiTrip on success, RowRejection otherwise

        Raises:
            Exception: Only for conditions outside the rule set, such as a
                wall time that does not exist in the source time zone
        """
        def reject(reason: str) -> RowRejection:
            return RowRejection(line_number, reason, RejectionKind.INVALID_FIELD)

        if len(fields) < MIN_FIELD_COUNT:
            return RowRejection(line_number, "not enough fields", RejectionKind.MISSING_FIELDS)

        pickup = parse_timestamp(fields[PICKUP_COLUMN])
        if pickup is None:
            return reject("invalid pickup datetime format")

        dropoff = parse_timestamp(fields[DROPOFF_COLUMN])
        if dropoff is None:
            return reject("invalid dropoff datetime format")

        if dropoff <= pickup:
            return reject("dropoff before or equal to pickup")

        if dropoff - pickup > MAX_TRIP_DURATION:
            return reject("trip duration more than 24 hours")

        passenger_count = parse_smallint(fields[PASSENGER_COUNT_COLUMN])
        if passenger_count is None or passenger_count <= 0:
            return reject("invalid passenger count")

        trip_distance = parse_decimal(fields[TRIP_DISTANCE_COLUMN])
        if trip_distance is None or trip_distance < 0:
            return reject("invalid trip distance")

        pickup_location_id = parse_smallint(fields[PU_LOCATION_COLUMN])
        if pickup_location_id is None:
            return reject("invalid PULocationID")

        dropoff_location_id = parse_smallint(fields[DO_LOCATION_COLUMN])
        if dropoff_location_id is None:
            return reject("invalid DOLocationID")

        fare_amount = parse_decimal(fields[FARE_AMOUNT_COLUMN])
        if fare_amount is None or fare_amount < 0:
            return reject("invalid fare amount")

        tip_amount = parse_decimal(fields[TIP_AMOUNT_COLUMN])
        if tip_amount is None or tip_amount < 0:
            return reject("invalid tip amount")

        # Reported in the unexpected-error category, not as an invalid field
        flag = StoreAndForwardFlag.decode(fields[STORE_AND_FWD_COLUMN])
        if not flag.is_valid:
            return RowRejection.unexpected(line_number, flag.reason)

        return TaxiTrip(
            pickup_time=to_utc(pickup, self.source_timezone),
            dropoff_time=to_utc(dropoff, self.source_timezone),
            passenger_count=passenger_count,
            trip_distance=trip_distance,
            store_and_forward_flag=flag.value,
            pickup_location_id=pickup_location_id,
            dropoff_location_id=dropoff_location_id,
            fare_amount=fare_amount,
            tip_amount=tip_amount,
        )


def validate_trip_fields(
    fields: Sequence[Optional[str]],
    line_number: int,
    source_timezone: str
) -> ValidationOutcome:
    """Validate one row with a throwaway TripRecordValidator"""
    return TripRecordValidator(source_timezone).validate(fields, line_number)
