"""
Utility functions for the filesystem library.

This module provides the error taxonomy, path helpers, error mapping with
retry support and logging setup.
"""

from .errors import (
    FilesystemError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from .pathutils import (
    PathValidationResult,
    basename,
    dirname,
    extname,
    is_absolute,
    join_path,
    normalize_path,
    relative_path,
    resolve_path,
    validate_path,
)
from .errormapper import create_error_message, is_retryable_error, map_error, with_retry
from .logging import setup_logging

__all__ = [
    "FilesystemError", "NetworkError", "NotFoundError", "PermissionDeniedError", "StorageError", "ValidationError",
    "PathValidationResult", "basename", "dirname", "extname", "is_absolute", "join_path", "normalize_path",
    "relative_path", "resolve_path", "validate_path",
    "create_error_message", "is_retryable_error", "map_error", "with_retry",
    "setup_logging",
]
