"""
Configuration management for the Taxi Trip ETL pipeline
"""

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def is_known_timezone(tz_name: str) -> bool:
    """Check that pandas can localize timestamps into ``tz_name``"""
    if not tz_name:
        return False
    try:
        pd.Timestamp("2000-01-01").tz_localize(tz_name)
    except Exception:
        return False
    return True


@dataclass
class SnowflakeConfig:
    """Snowflake connection and target table configuration"""
    account: str
    username: str
    password: str
    warehouse: str
    database: str
    schema: str
    role: Optional[str] = None
    table_name: str = "TAXI_TRIPS"
    login_timeout: int = 60
    network_timeout: int = 600

    @classmethod
    def from_env(cls) -> 'SnowflakeConfig':
        """Load Snowflake config from environment variables"""
        return cls(
            account=os.getenv('SNOWFLAKE_ACCOUNT', ''),
            username=os.getenv('SNOWFLAKE_USERNAME', ''),
            password=os.getenv('SNOWFLAKE_PASSWORD', ''),
            warehouse=os.getenv('SNOWFLAKE_WAREHOUSE', 'COMPUTE_WH'),
            database=os.getenv('SNOWFLAKE_DATABASE', 'TAXI_TRIPS_DB'),
            schema=os.getenv('SNOWFLAKE_SCHEMA', 'RAW'),
            role=os.getenv('SNOWFLAKE_ROLE'),
            table_name=os.getenv('SNOWFLAKE_TABLE', 'TAXI_TRIPS'),
            login_timeout=int(os.getenv('SNOWFLAKE_LOGIN_TIMEOUT', '60')),
            network_timeout=int(os.getenv('SNOWFLAKE_NETWORK_TIMEOUT', '600'))
        )


@dataclass
class PipelineConfig:
    """Input/output locations and processing options for one run"""
    input_path: Optional[Path] = None
    duplicates_path: Path = Path("duplicates.csv")
    errors_path: Path = Path("error_records.txt")
    source_timezone: str = "America/New_York"
    batch_size: int = 10000
    max_workers: int = 1
    progress_interval: int = 1000
    create_table: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if self.input_path is not None:
            self.input_path = Path(self.input_path)
        self.duplicates_path = Path(self.duplicates_path)
        self.errors_path = Path(self.errors_path)

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load pipeline config from environment variables"""
        return cls(
            input_path=os.getenv('INPUT_FILE') or None,
            duplicates_path=os.getenv('DUPLICATES_FILE', 'duplicates.csv'),
            errors_path=os.getenv('ERROR_FILE', 'error_records.txt'),
            source_timezone=os.getenv('SOURCE_TIMEZONE', 'America/New_York'),
            batch_size=int(os.getenv('BATCH_SIZE', '10000')),
            max_workers=int(os.getenv('MAX_WORKERS', '1')),
            progress_interval=int(os.getenv('PROGRESS_INTERVAL', '1000')),
            create_table=_env_flag('CREATE_TABLE', 'true'),
            log_level=os.getenv('LOG_LEVEL', 'INFO')
        )


class Settings:
    """
    Main settings class that aggregates all configuration
    """

    def __init__(self):
        self.snowflake = SnowflakeConfig.from_env()
        self.pipeline = PipelineConfig.from_env()

    def validate(self, require_sink: bool = True) -> bool:
        """
        Validate that all required configuration is present

        Args:
            require_sink: Whether Snowflake credentials are required
                (dry runs never connect)

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if require_sink:
            required_snowflake_fields = [
                self.snowflake.account,
                self.snowflake.username,
                self.snowflake.password
            ]
            if not all(required_snowflake_fields):
                return False

        if self.pipeline.input_path is None:
            return False

        if self.pipeline.batch_size <= 0 or self.pipeline.max_workers <= 0:
            return False

        return is_known_timezone(self.pipeline.source_timezone)


# Global settings instance
settings = Settings()
