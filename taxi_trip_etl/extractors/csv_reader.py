# taxi_trip_etl/extractors/csv_reader.py
"""
Raw row extraction from delimited trip files
"""

import csv
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import ExtractionError, handle_pipeline_exception


class TripFileReader:
    """
    Reads a comma-separated trip file with a header row

    Fields may be quoted. The header is skipped and blank lines are
    ignored; the first data row is line 1. Rows are yielded as-is, with
    no check on the number of fields. Undecodable bytes become U+FFFD, so
    a bad byte only affects the row it sits in.
    """

    def __init__(self, file_path: Path, encoding: str = "utf-8-sig"):
        self.file_path = Path(file_path)
        self.encoding = encoding
        self.logger = get_logger(__name__)

    def validate_input(self) -> None:
        """
        Fail fast when the input cannot possibly be read

        Raises:
            ExtractionError: If the path is missing or is not a file
        """
        if not self.file_path.exists():
            raise ExtractionError(
                f"Input file does not exist: {self.file_path}",
                error_code="FILE_NOT_FOUND"
            )
        if not self.file_path.is_file():
            raise ExtractionError(
                f"Input path is not a file: {self.file_path}",
                error_code="NOT_A_FILE"
            )

    def get_file_metadata(self) -> Dict[str, Any]:
        stat = self.file_path.stat()
        return {
            'file_path': str(self.file_path),
            'size_bytes': stat.st_size,
            'size_mb': round(stat.st_size / (1024 * 1024), 2),
        }

    def read_rows(self) -> Iterator[Tuple[int, List[str]]]:
        """
        Yield ``(line_number, fields)`` for every data row in file order

        Raises:
            ExtractionError: If the file cannot be opened or split into fields
        """
        self.validate_input()
        self.logger.info(f"Starting to read {self.file_path}")

        try:
            handle = self.file_path.open('r', newline='', encoding=self.encoding, errors='replace')
        except OSError as e:
            raise handle_pipeline_exception('read_rows', e, {'file_path': str(self.file_path)}) from e

        with handle:
            reader = csv.reader(handle)
            line_number = 0
            try:
                next(reader, None)
                for fields in reader:
                    if not fields:
                        continue
                    line_number += 1
                    yield line_number, fields
            except csv.Error as e:
                raise ExtractionError(
                    f"Failed to read {self.file_path} after line {line_number}: {e}",
                    error_code="READ_ERROR",
                    context={'file_path': str(self.file_path), 'line_number': line_number},
                    cause=e
                ) from e

        self.logger.info(f"Finished reading {line_number} data rows from {self.file_path}")
