"""Sink writers"""

from .snowflake_loader import SnowflakeLoader, trips_to_dataframe
from .review_writer import ReviewFileWriter, DUPLICATES_HEADER

__all__ = ['SnowflakeLoader', 'trips_to_dataframe', 'ReviewFileWriter', 'DUPLICATES_HEADER']
