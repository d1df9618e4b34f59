"""
Filesystem error hierarchy.

This module defines the errors raised by every filesystem backend. Backend
specific failures (OSError, botocore ClientError, timeouts) are converted to
these classes by Utils.errormapper.map_error so callers only ever deal with
one taxonomy.
"""

from typing import Any, Optional


class FilesystemError(Exception):
    """
    Base class for all filesystem errors.

    Attributes:
        name: Taxonomy tag of the error (the class name)
        message: Human readable description
        cause: The original backend error, if any
        path: The path involved in the failed operation, if known
        operation: The operation that failed, if known
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Any] = None,
        path: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.name = type(self).__name__
        self.message = message
        self.cause = cause
        self.path = path
        self.operation = operation
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message


class NotFoundError(FilesystemError):
    """The file, directory or object does not exist."""

    def __init__(self, path: str, cause: Optional[Any] = None, operation: Optional[str] = None) -> None:
        super().__init__(f"File not found: {path}", cause=cause, path=path, operation=operation)


class PermissionDeniedError(FilesystemError):
    """The backend refused the operation on the path."""

    def __init__(self, path: str, operation: str, cause: Optional[Any] = None) -> None:
        super().__init__(
            f"Permission denied for {operation} on {path}",
            cause=cause,
            path=path,
            operation=operation,
        )


class StorageError(FilesystemError):
    """Storage backend failure: disk full, quota exceeded, missing bucket, non-empty directory."""

    def __init__(
        self,
        message: str,
        cause: Optional[Any] = None,
        path: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(f"Storage error: {message}", cause=cause, path=path, operation=operation)


class NetworkError(FilesystemError):
    """Transient transport failure: connection problems and timeouts."""

    def __init__(
        self,
        message: str,
        cause: Optional[Any] = None,
        path: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(f"Network error: {message}", cause=cause, path=path, operation=operation)


class ValidationError(FilesystemError):
    """Invalid path or invalid configuration."""

    def __init__(
        self,
        message: str,
        cause: Optional[Any] = None,
        path: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(f"Validation error: {message}", cause=cause, path=path, operation=operation)
