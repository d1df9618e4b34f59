"""
Filesystem abstraction module.

This module provides a filesystem abstraction layer that allows applications
to read from and write to the local disk or an S3 bucket through one
asynchronous interface.
"""

import logging

from Configuration.FilesystemConfig import FilesystemDefaults
from Utils.errors import (
    FilesystemError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)

from .base import FileSystem
from .stats import FileStats
from .local import LocalFileSystem
from .s3 import S3FileSystem
from .registry import (
    create_filesystem,
    create_filesystem_from_env,
    create_filesystem_from_file,
    get_filesystem,
    register_filesystem,
)
from .component import FilesystemComponent

# Library logger stays silent unless the application configures logging
logging.getLogger(FilesystemDefaults.LOGGER_NAME).addHandler(logging.NullHandler())

__all__ = [
    "FileSystem",
    "FileStats",
    "LocalFileSystem",
    "S3FileSystem",
    "FilesystemComponent",
    "create_filesystem",
    "create_filesystem_from_env",
    "create_filesystem_from_file",
    "get_filesystem",
    "register_filesystem",
    "FilesystemError",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "StorageError",
    "ValidationError",
]
