"""
Constants for the S3 file manager.

Store limits and client defaults centralized here.
"""

from typing import Final

# =============================================================================
# SIZE AND TIME UNITS
# =============================================================================
KB: Final[int] = 1024
MB: Final[int] = 1024 * KB

MINUTE_S: Final[int] = 60
HOUR_S: Final[int] = 60 * MINUTE_S
DAY_S: Final[int] = 24 * HOUR_S

# =============================================================================
# STORE LIMITS (S3 API)
# =============================================================================
MAX_DELETE_BATCH: Final[int] = 1000  # Keys per batch-delete request
MAX_LIST_PAGE: Final[int] = 1000     # Keys per ListObjectsV2 page
MAX_PRESIGN_EXPIRY_S: Final[int] = 7 * DAY_S  # SigV4 upper bound

# =============================================================================
# CLIENT DEFAULTS
# =============================================================================
DEFAULT_URL_EXPIRY_S: Final[int] = HOUR_S
DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"
DEFAULT_STREAM_CHUNK: Final[int] = 1 * MB

# =============================================================================
# TRANSPORT
# =============================================================================
DEFAULT_MAX_POOL_CONNECTIONS: Final[int] = 10
DEFAULT_CONNECT_TIMEOUT_S: Final[int] = 5
DEFAULT_READ_TIMEOUT_S: Final[int] = 60
DEFAULT_MAX_ATTEMPTS: Final[int] = 3

# Error codes the store uses to signal a missing object. GetObject reports
# NoSuchKey; HEAD-style requests only carry the bare status code.
NOT_FOUND_CODES: Final[frozenset[str]] = frozenset({"NoSuchKey", "404", "NotFound"})
