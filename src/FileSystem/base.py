"""
Base filesystem abstraction.

This module defines the abstract base class for filesystem implementations.
Every operation is a coroutine; implementations run their blocking work in a
worker thread through FileSystem._execute, which also applies the configured
timeout, retries retryable failures and maps native errors to the filesystem
error hierarchy.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Callable, IO, List, Optional, Union

from Configuration.Models import ValidatedConfig
from FileSystem.stats import FileStats
from Utils.errormapper import create_error_message, map_error, with_retry
from Utils.errors import FilesystemError, NetworkError, ValidationError


class FileSystem(ABC):
    """
    Abstract base class for filesystem implementations.

    This class defines the interface that all filesystem implementations must follow.
    Paths are '/'-separated and relative to the root of the backend (the base
    directory for the local disk, the bucket and key prefix for S3).
    """

    def __init__(self, config: ValidatedConfig, timeout: float, max_retries: int) -> None:
        """
        Initialize shared adapter state.

        Args:
            config: The validated configuration of the adapter
            timeout: Per-attempt timeout in milliseconds
            max_retries: Retries after the first attempt for retryable failures
        """
        self.config = config
        self.timeout = timeout
        self.max_retries = max_retries
        self.debug = config.common.debug
        self.logger: logging.Logger = config.common.logger

    # ------------------------------------------------------------------
    # Operation contract
    # ------------------------------------------------------------------

    @abstractmethod
    async def read_file(self, path: str, encoding: Optional[str] = None) -> Union[bytes, str]:
        """
        Read the whole content of a file.

        Args:
            path: The path of the file to read
            encoding: Decode the content with this encoding; bytes are returned when None

        Returns:
            The file content

        Raises:
            NotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    async def write_file(self, path: str, data: Union[bytes, str], encoding: str = "utf-8") -> None:
        """
        Create or replace a file.

        Args:
            path: The path of the file to write
            data: The content; str values are encoded with encoding
            encoding: The encoding used for str data (default: "utf-8")
        """
        pass

    @abstractmethod
    async def append_file(self, path: str, data: Union[bytes, str], encoding: str = "utf-8") -> None:
        """Append data to a file, creating it when missing."""
        pass

    @abstractmethod
    async def unlink(self, path: str) -> None:
        """
        Delete a file.

        Raises:
            NotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    async def copy_file(self, src: str, dest: str) -> None:
        """Copy a file, replacing the destination if it exists."""
        pass

    @abstractmethod
    async def rename(self, old_path: str, new_path: str) -> None:
        """Move a file to a new path."""
        pass

    @abstractmethod
    async def readdir(self, path: str) -> List[str]:
        """
        List the entries of a directory.

        Args:
            path: The directory to list

        Returns:
            Sorted names (not paths) of the files and sub-directories
        """
        pass

    @abstractmethod
    async def mkdir(self, path: str, recursive: bool = False) -> None:
        """
        Create a directory.

        Args:
            path: The directory to create
            recursive: Also create missing ancestors
        """
        pass

    @abstractmethod
    async def rmdir(self, path: str, recursive: bool = False) -> None:
        """
        Remove a directory.

        Args:
            path: The directory to remove
            recursive: Remove the directory content as well

        Raises:
            StorageError: If the directory is not empty and recursive is False
        """
        pass

    @abstractmethod
    async def stat(self, path: str) -> FileStats:
        """Get the metadata of a file or directory, following symbolic links."""
        pass

    @abstractmethod
    async def lstat(self, path: str) -> FileStats:
        """Get the metadata of a file or directory without following symbolic links."""
        pass

    @abstractmethod
    async def access(self, path: str, mode: int = os.F_OK) -> None:
        """
        Check that a path is accessible.

        Args:
            path: The path to check
            mode: os.F_OK, os.R_OK, os.W_OK, os.X_OK or a combination

        Raises:
            NotFoundError: If the path does not exist
            PermissionDeniedError: If the requested access is not allowed
        """
        pass

    @abstractmethod
    def create_read_stream(
        self,
        path: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        encoding: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> IO:
        """
        Open a file for streamed reading.

        Nothing is read until the first read call. Reads block the calling
        thread and bypass the timeout and retry policy, so async callers
        should read through asyncio.to_thread.

        Args:
            path: The path of the file to read
            start: First byte to read (default: 0)
            end: Last byte to read, inclusive (default: end of file)
            encoding: Return a text stream with this encoding when set
            chunk_size: Buffer size of the stream

        Returns:
            A readable file-like object
        """
        pass

    @abstractmethod
    def create_write_stream(self, path: str, append: bool = False, encoding: Optional[str] = None) -> IO:
        """
        Open a file for streamed writing.

        The content becomes visible at the path when the stream is closed.
        Leaving a with-block through an exception discards the written data.
        Writes and close block the calling thread like reads do.

        Args:
            path: The path of the file to write
            append: Keep the existing content and write after it
            encoding: Encoding used for str data (default: "utf-8")

        Returns:
            A writable file-like object
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a path exists. Never raises."""
        pass

    @abstractmethod
    async def realpath(self, path: str) -> str:
        """Resolve a path to its canonical form."""
        pass

    # ------------------------------------------------------------------
    # Helpers shared by the implementations
    # ------------------------------------------------------------------

    def _log_debug(self, message: str) -> None:
        if self.debug:
            self.logger.debug(message)

    async def _execute(
        self,
        operation: str,
        path: str,
        func: Callable[..., Any],
        *args: Any,
        log_errors: bool = True,
        retry: bool = True,
    ) -> Any:
        """
        Run a blocking call in a worker thread with timeout, retries and error mapping.

        Args:
            operation: Name of the operation, used in errors and logs
            path: The path the operation works on
            func: The blocking callable
            *args: Arguments passed to func
            log_errors: Log failures at ERROR level
            retry: Retry retryable failures. Operations that are not idempotent pass False,
                since a timed-out attempt may still complete in its worker thread

        Returns:
            The value returned by func

        Raises:
            FilesystemError: Any failure, mapped to the error hierarchy
        """
        timeout_seconds = self.timeout / 1000.0

        async def attempt() -> Any:
            try:
                return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout_seconds)
            except asyncio.TimeoutError as e:
                raise NetworkError(
                    f"{operation} timed out after {self.timeout:g} ms", cause=e, path=path, operation=operation
                ) from e

        def on_retry(error: BaseException, attempt_number: int, delay: float) -> None:
            self.logger.warning(
                f"Retrying {operation} on {path} after attempt {attempt_number} failed "
                f"({type(error).__name__}), waiting {delay:.0f} ms"
            )

        self._log_debug(f"{operation} {path}")
        try:
            max_retries = self.max_retries if retry else 0
            result = await with_retry(attempt, max_retries=max_retries, on_retry=on_retry)
        except FilesystemError as e:
            if log_errors:
                self.logger.error(create_error_message(e, path, operation))
            raise
        except Exception as e:
            if log_errors:
                self.logger.error(create_error_message(e, path, operation))
            raise map_error(e, path, operation) from e

        self._log_debug(f"{operation} {path} completed")
        return result

    @staticmethod
    def _to_bytes(data: Union[bytes, bytearray, memoryview, str], encoding: str, path: str, operation: str) -> bytes:
        """Convert write payloads to bytes."""
        if isinstance(data, str):
            try:
                return data.encode(encoding)
            except (LookupError, UnicodeEncodeError) as e:
                raise ValidationError(
                    f"Cannot encode data as {encoding}: {e}", cause=e, path=path, operation=operation
                ) from e
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        raise ValidationError(
            f"Data must be bytes or str, got {type(data).__name__}", path=path, operation=operation
        )
