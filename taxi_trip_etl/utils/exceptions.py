# taxi_trip_etl/utils/exceptions.py
"""
Custom exceptions for the Taxi Trip ETL pipeline

Only run-level failures are raised as exceptions. Per-row problems are
collected as rejections by the partitioner and never escape it.
"""

from typing import Optional, Dict, Any


class PipelineError(Exception):
    """
    Base exception for all fatal pipeline errors

    Carries a machine-readable code and context so the CLI can report
    the failure and pick an exit status.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize pipeline error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        base_msg = f"{self.error_code}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" (Context: {context_str})"
        if self.cause:
            base_msg += f" (Caused by: {self.cause})"
        return base_msg


class ConfigurationError(PipelineError):
    """
    Raised when there are configuration issues

    Examples:
    - Missing Snowflake credentials or input path
    - Unknown source time zone identifier
    """
    pass


class ExtractionError(PipelineError):
    """
    Raised when the input trip file cannot be opened, read or decoded
    """
    pass


class LoaderError(PipelineError):
    """
    Raised during sink operations

    Examples:
    - Snowflake connection failures
    - Table creation or bulk append failures
    - Review file write failures
    """
    pass


class ProcessingError(PipelineError):
    """Raised when the partitioner is used after it has been finalized"""
    pass


def handle_pipeline_exception(
    func_name: str,
    exception: Exception,
    context: Optional[Dict[str, Any]] = None
) -> PipelineError:
    """
    Convert generic exceptions to pipeline-specific exceptions

    Args:
        func_name: Name of the function where error occurred
        exception: Original exception
        context: Additional context information

    Returns:
        Appropriate PipelineError subclass
    """
    if isinstance(exception, PipelineError):
        return exception

    error_context = {
        'function': func_name,
        **(context or {})
    }

    if isinstance(exception, FileNotFoundError):
        return ExtractionError(
            f"File not found in {func_name}: {exception}",
            error_code="FILE_NOT_FOUND",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, PermissionError):
        return ExtractionError(
            f"Permission denied in {func_name}: {exception}",
            error_code="PERMISSION_DENIED",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, UnicodeDecodeError):
        return ExtractionError(
            f"Cannot decode input in {func_name}: {exception}",
            error_code="DECODE_ERROR",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, (ConnectionError, TimeoutError)):
        return LoaderError(
            f"Network error in {func_name}: {exception}",
            error_code="NETWORK_ERROR",
            context=error_context,
            cause=exception
        )

    elif isinstance(exception, OSError):
        return ExtractionError(
            f"I/O error in {func_name}: {exception}",
            error_code="IO_ERROR",
            context=error_context,
            cause=exception
        )

    return PipelineError(
        f"Unexpected error in {func_name}: {exception}",
        error_code="UNKNOWN_ERROR",
        context=error_context,
        cause=exception
    )
