# taxi_trip_etl/models/rejection.py
"""
Rejected input rows
"""

from dataclasses import dataclass
from enum import Enum


class RejectionKind(Enum):
    """Why a row ended up in the error output"""
    MISSING_FIELDS = "missing_fields"
    INVALID_FIELD = "invalid_field"
    UNEXPECTED = "unexpected"


UNEXPECTED_ERROR_PREFIX = "unexpected error"


@dataclass(frozen=True)
class RowRejection:
    """A row that failed splitting, validation or parsing"""
    line_number: int
    reason: str
    kind: RejectionKind = RejectionKind.INVALID_FIELD

    @classmethod
    def unexpected(cls, line_number: int, detail: object) -> 'RowRejection':
        return cls(
            line_number=line_number,
            reason=f"{UNEXPECTED_ERROR_PREFIX} - {detail}",
            kind=RejectionKind.UNEXPECTED
        )

    @property
    def message(self) -> str:
        """Line rendered into the error review file"""
        return f"Line {self.line_number}: {self.reason}"
