"""
Error mapping utilities.

This module converts backend specific failures (OSError from the local disk,
botocore ClientError from S3, asyncio timeouts) into the filesystem error
hierarchy, classifies errors as retryable and provides an async retry helper
with exponential backoff.
"""

import asyncio
import errno
import logging
import random
from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple, TypeVar

from botocore.exceptions import ClientError

from Configuration.FilesystemConfig import RetryPolicy
from Utils.errors import (
    FilesystemError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_FOUND_NAMES = {"ENOENT", "NoSuchKey", "NotFound", "404", "FileNotFoundError", "NotFoundError"}
PERMISSION_NAMES = {
    "EACCES", "EPERM", "AccessDenied", "Forbidden", "403", "PermissionError", "PermissionDeniedError",
}
NETWORK_NAMES = {
    "NetworkError", "TimeoutError", "ECONNREFUSED", "ECONNRESET", "ETIMEDOUT",
    "ConnectionError", "ConnectionRefusedError", "ConnectionResetError",
    "EndpointConnectionError", "ConnectTimeoutError", "ReadTimeoutError", "RequestTimeout",
}
VALIDATION_NAMES = {"EINVAL", "ValidationError", "InvalidArgument", "InvalidBucketName", "KeyTooLongError"}
STORAGE_NAMES = {
    "ENOSPC", "EDQUOT", "ENOTEMPTY", "NoSuchBucket", "BucketNotFound", "QuotaExceeded",
    "EntityTooLarge", "StorageError",
}
BUCKET_LEVEL_NAMES = {"NoSuchBucket", "BucketNotFound"}
THROTTLING_NAMES = {
    "ThrottlingException", "Throttling", "TooManyRequests", "SlowDown",
    "RequestLimitExceeded", "429",
}
UNAVAILABLE_NAMES = {"ServiceUnavailable", "503", "InternalError", "500"}


def _error_fields(error: Any) -> Tuple[str, Optional[str], str]:
    """
    Extract the name, code and lower-cased message of a native error.

    Args:
        error: An exception, or a mapping with 'name'/'code'/'message' keys

    Returns:
        A (name, code, message) tuple
    """
    if isinstance(error, Mapping):
        name = str(error.get("name") or "Error")
        code = error.get("code")
        message = str(error.get("message") or "")
        return name, str(code) if code is not None else None, message.lower()

    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        name = str(details.get("Code") or type(error).__name__)
        return name, str(status) if status is not None else None, str(error).lower()

    name = getattr(error, "name", None) if not isinstance(error, BaseException) else None
    name = name or type(error).__name__
    if isinstance(error, OSError) and error.errno is not None:
        # str(error) embeds the file name, only errno and strerror classify it
        code = errno.errorcode.get(error.errno, str(error.errno))
        return str(name), code, (error.strerror or "").lower()

    code = getattr(error, "code", None) or getattr(error, "error_code", None)
    return str(name), str(code) if code is not None else None, str(error).lower()


def _matches(name: str, code: Optional[str], names: set) -> bool:
    return name in names or (code is not None and code in names)


def map_error(
    error: Any,
    path: Optional[str] = None,
    operation: Optional[str] = None,
) -> FilesystemError:
    """
    Map a native error to the matching filesystem error.

    Classification is checked in a fixed order: not-found, permission,
    network, validation, storage, then the generic FilesystemError. Bucket
    level errors are never treated as not-found. The native error is kept as
    the cause of the returned error.

    Args:
        error: The native error (exception or mapping)
        path: The path involved in the operation
        operation: The operation being performed

    Returns:
        A FilesystemError subclass instance. FilesystemError inputs are returned unchanged.
    """
    if isinstance(error, FilesystemError):
        return error

    name, code, message = _error_fields(error)
    path = path or getattr(error, "filename", None) or "unknown"
    operation = operation or "operation"
    if isinstance(error, Mapping):
        original_message = str(error.get("message") or name)
    else:
        original_message = str(error) or name

    bucket_level = _matches(name, code, BUCKET_LEVEL_NAMES)

    if not bucket_level and (
        _matches(name, code, NOT_FOUND_NAMES)
        or "not found" in message
        or "does not exist" in message
        or "enoent" in message
    ):
        return NotFoundError(path, cause=error, operation=operation)

    if _matches(name, code, PERMISSION_NAMES) or any(
        token in message for token in ("permission denied", "access denied", "eacces", "eperm")
    ):
        return PermissionDeniedError(path, operation, cause=error)

    if _matches(name, code, NETWORK_NAMES) or any(
        token in message for token in ("network", "connection", "timeout", "timed out", "econn")
    ):
        return NetworkError(original_message, cause=error, path=path, operation=operation)

    if _matches(name, code, VALIDATION_NAMES) or any(
        token in message for token in ("invalid", "validation", "einval")
    ):
        return ValidationError(original_message, cause=error, path=path, operation=operation)

    if bucket_level or _matches(name, code, STORAGE_NAMES) or any(
        token in message for token in ("disk full", "no space", "quota", "bucket", "enospc")
    ):
        return StorageError(original_message, cause=error, path=path, operation=operation)

    return FilesystemError(original_message, cause=error, path=path, operation=operation)


def is_retryable_error(error: Any) -> bool:
    """
    Check if an error is worth retrying.

    Network problems, timeouts, throttling and service unavailability are
    retryable. Everything else is not.
    """
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, FilesystemError):
        return False

    name, code, message = _error_fields(error)

    if _matches(name, code, NETWORK_NAMES) or any(
        token in message for token in ("network", "connection", "timeout", "timed out")
    ):
        return True

    if _matches(name, code, THROTTLING_NAMES) or any(
        token in message for token in ("throttl", "rate limit", "too many requests", "slow down")
    ):
        return True

    if _matches(name, code, UNAVAILABLE_NAMES) or "service unavailable" in message:
        return True

    return False


def get_retry_delay(attempt: int, random_fn: Callable[[], float] = random.random) -> float:
    """
    Compute the backoff delay before a retry.

    Args:
        attempt: The attempt that just failed, starting at 1
        random_fn: Source of randomness in [0, 1), injectable for tests

    Returns:
        The delay in milliseconds
    """
    delay = RetryPolicy.BASE_DELAY_MS * (2 ** (attempt - 1))
    jitter = delay * RetryPolicy.JITTER_RATIO
    delay = delay - jitter + random_fn() * 2 * jitter
    return min(delay, RetryPolicy.MAX_DELAY_MS)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    is_retryable: Callable[[Any], bool] = is_retryable_error,
    on_retry: Optional[Callable[[BaseException, int, float], None]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    random_fn: Callable[[], float] = random.random,
) -> T:
    """
    Run an async operation, retrying retryable failures with exponential backoff.

    The operation runs once and is retried at most max_retries more times.
    A non-retryable error, or the last error once retries are exhausted, is
    re-raised unchanged.

    Args:
        operation: Zero-argument coroutine function to run
        max_retries: Number of retries after the first attempt
        is_retryable: Predicate deciding if an error is retried
        on_retry: Called with (error, attempt, delay_ms) before each retry
        sleep: Coroutine used to wait, takes seconds
        random_fn: Source of randomness for the jitter

    Returns:
        The operation result
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as error:
            if attempt > max_retries or not is_retryable(error):
                raise
            delay = get_retry_delay(attempt, random_fn)
            if on_retry is not None:
                on_retry(error, attempt, delay)
            await sleep(delay / 1000.0)
            attempt += 1


def create_error_message(error: Any, path: Optional[str] = None, operation: Optional[str] = None) -> str:
    """Build a one-line description of an error for log output."""
    if isinstance(error, Mapping):
        name = str(error.get("name") or "Error")
        message = str(error.get("message") or "")
    else:
        name = getattr(error, "name", None) or type(error).__name__
        message = str(error)
    return f"[{operation or 'unknown'}] {path or 'unknown'}: {name} - {message}"
