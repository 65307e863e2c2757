"""
Taxi Trip ETL

Single-pass batch pipeline that validates, deduplicates and loads a
delimited taxi trip file into Snowflake, diverting duplicate and invalid
rows to review files.
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"
