"""Configuration management module"""

from .settings import settings, Settings, SnowflakeConfig, PipelineConfig, is_known_timezone

__all__ = ['settings', 'Settings', 'SnowflakeConfig', 'PipelineConfig', 'is_known_timezone']
