# taxi_trip_etl/loaders/snowflake_loader.py
"""
Snowflake bulk loader for canonical taxi trips
"""

from typing import Any, Dict, Optional, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone

import pandas as pd
import snowflake.connector
from snowflake.connector.pandas_tools import write_pandas

from taxi_trip_etl.config.settings import SnowflakeConfig
from taxi_trip_etl.models.taxi_trip import TaxiTrip, TRIP_COLUMNS
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import LoaderError


TRIPS_TABLE_DDL = """
    PICKUP_TIME TIMESTAMP_NTZ NOT NULL,
    DROPOFF_TIME TIMESTAMP_NTZ NOT NULL,
    PASSENGER_COUNT SMALLINT NOT NULL,
    TRIP_DISTANCE NUMBER(18, 4) NOT NULL,
    STORE_AND_FORWARD_FLAG VARCHAR(3) NOT NULL,
    PICKUP_LOCATION_ID SMALLINT NOT NULL,
    DROPOFF_LOCATION_ID SMALLINT NOT NULL,
    FARE_AMOUNT NUMBER(18, 4) NOT NULL,
    TIP_AMOUNT NUMBER(18, 4) NOT NULL
"""


def trips_to_dataframe(trips: Sequence[TaxiTrip]) -> pd.DataFrame:
    """
    Build the nine-column load frame

    Timestamps are stored as naive UTC values (TIMESTAMP_NTZ) and column
    names are upper-cased to match unquoted Snowflake identifiers.
    """
    df = pd.DataFrame([trip.to_record() for trip in trips], columns=list(TRIP_COLUMNS))
    for column in ('pickup_time', 'dropoff_time'):
        df[column] = pd.to_datetime(df[column], utc=True).dt.tz_localize(None)
    df.columns = [column.upper() for column in df.columns]
    return df


class SnowflakeLoader:
    """
    Appends canonical trips to the Snowflake trips table

    Loading is a batched, non-transactional append: no upserts, no
    deletes, and batches already written stay written if a later batch
    fails. Every failure is raised as LoaderError.
    """

    def __init__(self, config: SnowflakeConfig):
        self.config = config
        self.logger = get_logger(__name__)

    @property
    def table_name(self) -> str:
        return self.config.table_name.upper()

    @contextmanager
    def get_connection(self):
        """
        Context manager for Snowflake connections

        The connection is closed on every exit path.
        """
        connection = None
        try:
            connection = snowflake.connector.connect(
                account=self.config.account,
                user=self.config.username,
                password=self.config.password,
                warehouse=self.config.warehouse,
                database=self.config.database,
                schema=self.config.schema,
                role=self.config.role,
                login_timeout=self.config.login_timeout,
                network_timeout=self.config.network_timeout
            )
            self.logger.info("Connected to Snowflake successfully")
            yield connection

        except snowflake.connector.errors.Error as e:
            self.logger.error(f"Snowflake operation failed: {e}")
            raise LoaderError(f"Snowflake connection failed: {e}", cause=e) from e

        finally:
            if connection:
                connection.close()
                self.logger.info("Snowflake connection closed")

    def create_trips_table(self) -> bool:
        """
        Create the trips table if it does not exist yet

        Returns:
            True once the table exists

        Raises:
            LoaderError: If the statement fails
        """
        create_table_sql = f"CREATE TABLE IF NOT EXISTS {self.table_name} ({TRIPS_TABLE_DDL})"

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(create_table_sql)
                finally:
                    cursor.close()
        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(f"Failed to create table {self.table_name}: {e}", cause=e) from e

        self.logger.info(f"Successfully created/verified table: {self.table_name}")
        return True

    def load_trips(self, trips: Sequence[TaxiTrip], batch_size: int = 10000) -> Dict[str, Any]:
        """
        Bulk-append trips to the trips table

        Args:
            trips: Canonical trips to load
            batch_size: Number of rows per write_pandas call

        Returns:
            Dictionary with load statistics

        Raises:
            LoaderError: If connecting or any batch write fails
        """
        if not trips:
            self.logger.info("No records to load, skipping Snowflake load")
            return {"status": "skipped", "total_records": 0, "loaded_records": 0, "batches": 0}

        df = trips_to_dataframe(trips)
        total_records = len(df)
        loaded_records = 0
        batches = 0

        self.logger.info(f"Starting to load {total_records} records into {self.table_name}")

        try:
            with self.get_connection() as conn:
                for start in range(0, total_records, batch_size):
                    batch_df = df.iloc[start:start + batch_size]
                    batch_number = start // batch_size + 1

                    success, _, nrows, _ = write_pandas(
                        conn=conn,
                        df=batch_df,
                        table_name=self.table_name,
                        database=self.config.database,
                        schema=self.config.schema,
                        chunk_size=batch_size,
                        compression='gzip',
                        on_error='abort_statement',
                        quote_identifiers=False
                    )

                    if not success:
                        raise LoaderError(
                            f"Batch {batch_number} was rejected by Snowflake",
                            context={'table_name': self.table_name, 'loaded_records': loaded_records}
                        )

                    loaded_records += nrows
                    batches += 1
                    self.logger.info(f"Loaded batch {batch_number}: {nrows} records")

        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(
                f"Failed to load records into {self.table_name}: {e}",
                context={'loaded_records': loaded_records},
                cause=e
            ) from e

        self.logger.info(
            f"Load completed: {loaded_records}/{total_records} records loaded into {self.table_name}"
        )
        return {
            "status": "completed",
            "total_records": total_records,
            "loaded_records": loaded_records,
            "batches": batches,
            "table_name": self.table_name,
            "load_timestamp": datetime.now(timezone.utc).isoformat()
        }

    def get_table_row_count(self) -> Optional[int]:
        """Row count of the trips table, or None if it cannot be read"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(f"SELECT COUNT(*) FROM {self.table_name}")
                    result = cursor.fetchone()
                finally:
                    cursor.close()
            return result[0] if result else 0

        except Exception as e:
            self.logger.warning(f"Failed to get row count for {self.table_name}: {e}")
            return None
