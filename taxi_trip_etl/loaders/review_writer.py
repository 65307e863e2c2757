# taxi_trip_etl/loaders/review_writer.py
"""
Review outputs for duplicate and rejected rows
"""

from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from taxi_trip_etl.models.taxi_trip import TaxiTrip, TRIP_COLUMNS
from taxi_trip_etl.models.rejection import RowRejection
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import LoaderError


DUPLICATES_HEADER = [
    'PickupDateTime',
    'DropoffDateTime',
    'PassengerCount',
    'TripDistance',
    'StoreAndForwardFlag',
    'PULocationID',
    'DOLocationID',
    'FareAmount',
    'TipAmount',
]

REVIEW_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ReviewFileWriter:
    """
    Writes duplicates as CSV and rejections as plain text

    An empty collection writes nothing, so no empty or header-only file
    is ever left behind.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def write_duplicates(self, trips: Sequence[TaxiTrip], path: Path) -> Optional[Path]:
        """
        Write duplicate trips in arrival order

        Returns:
            The written path, or None when there was nothing to write
        """
        if not trips:
            self.logger.info("No duplicate records, skipping duplicates file")
            return None

        df = pd.DataFrame([trip.to_record() for trip in trips], columns=list(TRIP_COLUMNS))
        for column in ('pickup_time', 'dropoff_time'):
            df[column] = [value.strftime(REVIEW_TIMESTAMP_FORMAT) for value in df[column]]
        df.columns = DUPLICATES_HEADER

        path = Path(path)
        try:
            df.to_csv(path, index=False)
        except OSError as e:
            raise LoaderError(f"Failed to write duplicates to {path}: {e}", cause=e) from e

        self.logger.info(f"Duplicates written to {path}", extra={'records': len(df)})
        return path

    def write_errors(self, rejections: Sequence[RowRejection], path: Path) -> Optional[Path]:
        """
        Write one ``Line {n}: {reason}`` message per rejected row

        Returns:
            The written path, or None when there was nothing to write
        """
        if not rejections:
            self.logger.info("No rejected rows, skipping error file")
            return None

        path = Path(path)
        try:
            with path.open('w', encoding='utf-8') as handle:
                for rejection in rejections:
                    handle.write(rejection.message + "\n")
        except OSError as e:
            raise LoaderError(f"Failed to write errors to {path}: {e}", cause=e) from e

        self.logger.info(f"Errors written to {path}", extra={'records': len(rejections)})
        return path
