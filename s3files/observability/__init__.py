"""
Observability: structured JSON logging.
"""

from s3files.observability.logging import (
    LogLevel,
    JsonFormatter,
    StructuredLogger,
    setup_logging,
)

__all__ = [
    "LogLevel",
    "JsonFormatter",
    "StructuredLogger",
    "setup_logging",
]
