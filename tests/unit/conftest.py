# tests/unit/conftest.py
"""
Shared pytest fixtures for the Taxi Trip ETL tests
"""

import csv
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import List

import pytest

from taxi_trip_etl.config.settings import SnowflakeConfig, PipelineConfig, Settings
from taxi_trip_etl.models.taxi_trip import TaxiTrip, StoreAndForwardFlag


SOURCE_HEADER = [
    'VendorID', 'tpep_pickup_datetime', 'tpep_dropoff_datetime', 'passenger_count',
    'trip_distance', 'RatecodeID', 'store_and_fwd_flag', 'PULocationID', 'DOLocationID',
    'payment_type', 'fare_amount', 'extra', 'mta_tax', 'tip_amount',
]

_ROW_KEYS = [
    'vendor_id', 'pickup', 'dropoff', 'passenger_count', 'trip_distance', 'ratecode_id',
    'store_and_fwd_flag', 'pu_location_id', 'do_location_id', 'payment_type',
    'fare_amount', 'extra', 'mta_tax', 'tip_amount',
]

_DEFAULT_ROW = {
    'vendor_id': '2',
    'pickup': '01/01/2020 12:00:00 AM',
    'dropoff': '01/01/2020 12:15:00 AM',
    'passenger_count': '1',
    'trip_distance': '2.50',
    'ratecode_id': '1',
    'store_and_fwd_flag': 'N',
    'pu_location_id': '161',
    'do_location_id': '237',
    'payment_type': '1',
    'fare_amount': '12.50',
    'extra': '0.5',
    'mta_tax': '0.5',
    'tip_amount': '2.00',
}


@pytest.fixture
def make_row():
    """Build a fourteen-field source row; keyword arguments override fields"""
    def _make_row(**overrides) -> List[str]:
        values = {**_DEFAULT_ROW, **overrides}
        return [values[key] for key in _ROW_KEYS]
    return _make_row


@pytest.fixture
def make_trip():
    """Build a TaxiTrip directly, bypassing the validator"""
    def _make_trip(**overrides) -> TaxiTrip:
        values = {
            'pickup_time': datetime(2020, 1, 1, 5, 0, tzinfo=timezone.utc),
            'dropoff_time': datetime(2020, 1, 1, 5, 15, tzinfo=timezone.utc),
            'passenger_count': 1,
            'trip_distance': Decimal('2.50'),
            'store_and_forward_flag': StoreAndForwardFlag.NO,
            'pickup_location_id': 161,
            'dropoff_location_id': 237,
            'fare_amount': Decimal('12.50'),
            'tip_amount': Decimal('2.00'),
        }
        values.update(overrides)
        return TaxiTrip(**values)
    return _make_trip


@pytest.fixture
def write_trip_csv(tmp_path):
    """Write rows under the source header and return the file path"""
    def _write(rows, name: str = "trips.csv") -> Path:
        path = tmp_path / name
        with path.open('w', newline='', encoding='utf-8') as handle:
            writer = csv.writer(handle)
            writer.writerow(SOURCE_HEADER)
            writer.writerows(rows)
        return path
    return _write


@pytest.fixture
def five_row_scenario(make_row):
    """Rows 2 and 4 share an identity, row 3 has an unparseable pickup"""
    return [
        make_row(pickup='01/01/2020 08:00:00 AM', dropoff='01/01/2020 08:20:00 AM'),
        make_row(pickup='01/01/2020 09:00:00 AM', dropoff='01/01/2020 09:30:00 AM', passenger_count='2'),
        make_row(pickup='2020-01-01 10:00:00'),
        make_row(
            pickup='01/01/2020 09:00:00 AM', dropoff='01/01/2020 09:30:00 AM', passenger_count='2',
            fare_amount='99.00', store_and_fwd_flag='Y'
        ),
        make_row(pickup='01/01/2020 11:00:00 AM', dropoff='01/01/2020 11:45:00 AM'),
    ]


@pytest.fixture
def snowflake_config():
    """Create Snowflake configuration for testing"""
    return SnowflakeConfig(
        account="test_account",
        username="test_user",
        password="test_password",
        warehouse="test_warehouse",
        database="test_database",
        schema="test_schema",
        role="test_role",
        table_name="taxi_trips",
        login_timeout=30,
        network_timeout=120
    )


@pytest.fixture
def pipeline_settings(tmp_path, snowflake_config):
    """Settings pointing every output into tmp_path"""
    config = Settings()
    config.snowflake = snowflake_config
    config.pipeline = PipelineConfig(
        input_path=tmp_path / "trips.csv",
        duplicates_path=tmp_path / "duplicates.csv",
        errors_path=tmp_path / "error_records.txt",
        source_timezone="America/New_York",
        batch_size=2,
        progress_interval=1000
    )
    return config


@pytest.fixture
def mock_snowflake_connection():
    """Create a mock Snowflake connection"""
    from unittest.mock import Mock

    connection = Mock()
    cursor = Mock()
    connection.cursor.return_value = cursor
    cursor.execute.return_value = None
    cursor.fetchone.return_value = None
    cursor.close.return_value = None
    connection.close.return_value = None
    return connection
