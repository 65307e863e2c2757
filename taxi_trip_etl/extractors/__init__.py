"""Input file extraction"""

from .csv_reader import TripFileReader

__all__ = ['TripFileReader']
