"""Pipeline orchestration"""

from .ingestion_pipeline import TripIngestionPipeline, IngestionResult

__all__ = ['TripIngestionPipeline', 'IngestionResult']
