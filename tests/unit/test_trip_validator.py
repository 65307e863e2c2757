# tests/unit/test_trip_validator.py
"""Tests for TripRecordValidator rules, ordering and normalization."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from taxi_trip_etl.models.taxi_trip import TaxiTrip, StoreAndForwardFlag
from taxi_trip_etl.models.rejection import RowRejection, RejectionKind
from taxi_trip_etl.processing.trip_validator import (
    TripRecordValidator, validate_trip_fields, parse_timestamp, parse_smallint, parse_decimal, to_utc
)


@pytest.fixture
def validator():
    return TripRecordValidator("America/New_York")


class TestFieldParsers:
    """Test the low-level field parsers."""

    def test_parse_timestamp_fixed_format(self):
        assert parse_timestamp("01/01/2020 01:05:09 PM") == datetime(2020, 1, 1, 13, 5, 9)
        assert parse_timestamp("12/31/2019 12:00:00 AM") == datetime(2019, 12, 31, 0, 0, 0)

    @pytest.mark.parametrize("text", [
        "2020-01-01 10:00:00", "01/01/2020 13:00:00 PM", "01/01/2020", "", None, "13/01/2020 01:00:00 AM",
        "1/1/2020 1:00:00 AM", "01/1/2020 01:00:00 AM", "01/01/2020 1:00:00 PM", " 01/01/2020 01:00:00 AM",
    ])
    def test_parse_timestamp_rejects_other_formats(self, text):
        assert parse_timestamp(text) is None

    @pytest.mark.parametrize("text,expected", [
        ("1", 1), (" 4 ", 4), ("+2", 2), ("-3", -3), ("32767", 32767), ("-32768", -32768)
    ])
    def test_parse_smallint_accepts(self, text, expected):
        assert parse_smallint(text) == expected

    @pytest.mark.parametrize("text", ["", "1.0", "abc", "32768", "-32769", "1_0", None])
    def test_parse_smallint_rejects(self, text):
        assert parse_smallint(text) is None

    @pytest.mark.parametrize("text,expected", [
        ("2.50", Decimal("2.50")),
        (" 3 ", Decimal("3")),
        (".5", Decimal("0.5")),
        ("5.", Decimal("5")),
        ("-1.25", Decimal("-1.25")),
        ("1,234.50", Decimal("1234.50")),
    ])
    def test_parse_decimal_accepts(self, text, expected):
        assert parse_decimal(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "1e3", "NaN", "Infinity", "1.2.3", ",5", "-", None])
    def test_parse_decimal_rejects(self, text):
        assert parse_decimal(text) is None

    def test_to_utc_standard_time(self):
        assert to_utc(datetime(2020, 1, 1, 0, 0), "America/New_York") == \
            datetime(2020, 1, 1, 5, 0, tzinfo=timezone.utc)

    def test_to_utc_daylight_time(self):
        assert to_utc(datetime(2020, 7, 1, 12, 0), "America/New_York") == \
            datetime(2020, 7, 1, 16, 0, tzinfo=timezone.utc)

    def test_to_utc_ambiguous_time_resolves_to_standard_time(self):
        # 01:30 happens twice on 2020-11-01; the second (EST, UTC-5) is used
        assert to_utc(datetime(2020, 11, 1, 1, 30), "America/New_York") == \
            datetime(2020, 11, 1, 6, 30, tzinfo=timezone.utc)

    def test_to_utc_nonexistent_time_raises(self):
        with pytest.raises(Exception):
            to_utc(datetime(2020, 3, 8, 2, 30), "America/New_York")


class TestValidRows:
    """Test successful validation and normalization."""

    def test_valid_row_produces_trip(self, validator, make_row):
        outcome = validator.validate(make_row(), 1)

        assert isinstance(outcome, TaxiTrip)
        assert outcome.pickup_time == datetime(2020, 1, 1, 5, 0, tzinfo=timezone.utc)
        assert outcome.dropoff_time == datetime(2020, 1, 1, 5, 15, tzinfo=timezone.utc)
        assert outcome.passenger_count == 1
        assert outcome.trip_distance == Decimal("2.50")
        assert outcome.store_and_forward_flag is StoreAndForwardFlag.NO
        assert outcome.pickup_location_id == 161
        assert outcome.dropoff_location_id == 237
        assert outcome.fare_amount == Decimal("12.50")
        assert outcome.tip_amount == Decimal("2.00")

    def test_identity_matches_parsed_and_normalized_values(self, validator, make_row):
        trip = validator.validate(
            make_row(pickup='07/04/2020 03:00:00 PM', dropoff='07/04/2020 03:40:00 PM', passenger_count='3'),
            1
        )

        assert trip.identity == (
            datetime(2020, 7, 4, 19, 0, tzinfo=timezone.utc),
            datetime(2020, 7, 4, 19, 40, tzinfo=timezone.utc),
            3,
        )

    def test_zero_amounts_are_allowed(self, validator, make_row):
        outcome = validator.validate(
            make_row(trip_distance='0', fare_amount='0.00', tip_amount='0'), 1
        )

        assert isinstance(outcome, TaxiTrip)

    def test_extra_fields_are_ignored(self, validator, make_row):
        outcome = validator.validate(make_row() + ['extra', 'columns'], 1)

        assert isinstance(outcome, TaxiTrip)

    def test_other_timezone(self, make_row):
        outcome = TripRecordValidator("UTC").validate(make_row(), 1)

        assert outcome.pickup_time == datetime(2020, 1, 1, 0, 0, tzinfo=timezone.utc)


class TestRejections:
    """Test each rule's rejection reason."""

    @pytest.mark.parametrize("overrides,reason", [
        ({'pickup': 'not a date'}, "invalid pickup datetime format"),
        ({'pickup': '1/1/2020 1:00:00 AM', 'dropoff': '1/1/2020 1:15:00 AM'}, "invalid pickup datetime format"),
        ({'dropoff': '2020-01-01 00:15'}, "invalid dropoff datetime format"),
        ({'dropoff': '1/01/2020 12:15:00 AM'}, "invalid dropoff datetime format"),
        ({'dropoff': '01/01/2020 12:00:00 AM'}, "dropoff before or equal to pickup"),
        ({'dropoff': '12/31/2019 11:59:59 PM'}, "dropoff before or equal to pickup"),
        ({'dropoff': '01/02/2020 12:00:01 AM'}, "trip duration more than 24 hours"),
        ({'passenger_count': '0'}, "invalid passenger count"),
        ({'passenger_count': '-1'}, "invalid passenger count"),
        ({'passenger_count': '1.5'}, "invalid passenger count"),
        ({'passenger_count': ''}, "invalid passenger count"),
        ({'passenger_count': '40000'}, "invalid passenger count"),
        ({'trip_distance': '-0.1'}, "invalid trip distance"),
        ({'trip_distance': 'abc'}, "invalid trip distance"),
        ({'pu_location_id': 'x'}, "invalid PULocationID"),
        ({'pu_location_id': '99999'}, "invalid PULocationID"),
        ({'do_location_id': ''}, "invalid DOLocationID"),
        ({'fare_amount': '-5.00'}, "invalid fare amount"),
        ({'tip_amount': '-0.01'}, "invalid tip amount"),
    ])
    def test_rule_rejection_reason(self, validator, make_row, overrides, reason):
        outcome = validator.validate(make_row(**overrides), 12)

        assert isinstance(outcome, RowRejection)
        assert outcome.reason == reason
        assert outcome.line_number == 12
        assert outcome.kind is RejectionKind.INVALID_FIELD

    def test_duration_of_exactly_24_hours_is_accepted(self, validator, make_row):
        outcome = validator.validate(
            make_row(pickup='01/01/2020 12:00:00 AM', dropoff='01/02/2020 12:00:00 AM'), 1
        )

        assert isinstance(outcome, TaxiTrip)

    def test_first_failing_rule_wins(self, validator, make_row):
        outcome = validator.validate(make_row(pickup='garbage', fare_amount='-1'), 1)

        assert outcome.reason == "invalid pickup datetime format"

    def test_passenger_rule_before_distance_rule(self, validator, make_row):
        outcome = validator.validate(make_row(passenger_count='0', trip_distance='-1'), 1)

        assert outcome.reason == "invalid passenger count"

    @pytest.mark.parametrize("flag", ["U", "", None, "X"])
    def test_bad_flag_is_unexpected_error(self, validator, make_row, flag):
        fields = make_row()
        fields[6] = flag

        outcome = validator.validate(fields, 4)

        assert isinstance(outcome, RowRejection)
        assert outcome.kind is RejectionKind.UNEXPECTED
        assert outcome.reason.startswith("unexpected error - invalid store_and_fwd_flag value")
        assert outcome.message.startswith("Line 4: unexpected error")

    def test_flag_is_checked_after_amounts(self, validator, make_row):
        outcome = validator.validate(make_row(store_and_fwd_flag='U', tip_amount='-1'), 1)

        assert outcome.reason == "invalid tip amount"
        assert outcome.kind is RejectionKind.INVALID_FIELD

    @pytest.mark.parametrize("flag,expected", [
        ("y", StoreAndForwardFlag.YES), ("Y", StoreAndForwardFlag.YES),
        ("n", StoreAndForwardFlag.NO), ("N", StoreAndForwardFlag.NO),
    ])
    def test_flag_normalization(self, validator, make_row, flag, expected):
        outcome = validator.validate(make_row(store_and_fwd_flag=flag), 1)

        assert outcome.store_and_forward_flag is expected

    def test_short_row_is_missing_fields(self, validator, make_row):
        outcome = validator.validate(make_row()[:13], 3)

        assert outcome == RowRejection(3, "not enough fields", RejectionKind.MISSING_FIELDS)


class TestValidateTripFields:
    """Test the function form of the validator."""

    def test_matches_validator(self, make_row):
        row = make_row(passenger_count='2')

        assert validate_trip_fields(row, 1, "America/New_York") == \
            TripRecordValidator("America/New_York").validate(row, 1)
