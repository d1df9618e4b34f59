"""
Filesystem constants and defaults.

This module contains the default values applied during configuration
validation, the environment variable names read by the loader, the retry
policy and the S3 tuning constants.
"""


class FilesystemDefaults:
    """Default values applied to unset configuration fields."""

    TIMEOUT_MS: int = 30000
    """Operation timeout in milliseconds. Applies to every backend unless overridden."""
    MAX_RETRIES: int = 3
    """Retries after the first attempt for retryable failures."""
    DEBUG: bool = False
    """Emit per-operation debug log lines."""
    CREATE_MISSING_DIRS: bool = False
    """Create missing parent directories on write/mkdir calls (local backend)."""
    FORCE_PATH_STYLE: bool = False
    """Use path-style S3 addressing (http://host/bucket/key)."""
    S3_PREFIX: str = ""
    """Key prefix prepended to every S3 key."""
    LOGGER_NAME: str = "FileSystem"
    """Name of the package logger used when no logger is configured."""


class FilesystemTypes:
    """Supported backend discriminants."""

    LOCAL: str = "local"
    S3: str = "s3"
    ALL: tuple = (LOCAL, S3)


class EnvironmentVariables:
    """Environment variables read by ConfigLoader.from_env."""

    TYPE = "FILESYSTEM_TYPE"
    LOCAL_BASE_PATH = "FILESYSTEM_LOCAL_BASE_PATH"
    LOCAL_CREATE_MISSING_DIRS = "FILESYSTEM_LOCAL_CREATE_MISSING_DIRS"
    S3_BUCKET = "FILESYSTEM_S3_BUCKET"
    S3_REGION = "FILESYSTEM_S3_REGION"
    S3_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
    S3_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
    S3_ENDPOINT = "FILESYSTEM_S3_ENDPOINT"
    S3_FORCE_PATH_STYLE = "FILESYSTEM_S3_FORCE_PATH_STYLE"
    S3_PREFIX = "FILESYSTEM_S3_PREFIX"
    TIMEOUT = "FILESYSTEM_TIMEOUT"
    MAX_RETRIES = "FILESYSTEM_MAX_RETRIES"
    DEBUG = "FILESYSTEM_DEBUG"


class RetryPolicy:
    """Exponential backoff parameters used by Utils.errormapper.with_retry."""

    BASE_DELAY_MS: float = 100.0
    """Delay before the first retry, doubled on every further attempt."""
    MAX_DELAY_MS: float = 30000.0
    """Upper bound for a single backoff delay."""
    JITTER_RATIO: float = 0.2
    """Random spread applied to each delay (+/- 20%)."""


class S3Tuning:
    """Tuning constants for the S3 backend."""

    DIRECTORY_MARKER_SUFFIX: str = "/"
    """Suffix of the zero-byte objects that stand in for directories."""
    MULTIPART_THRESHOLD: int = 8 * 1024 * 1024
    """Payloads larger than this are uploaded with multipart upload."""
    MULTIPART_PART_SIZE: int = 8 * 1024 * 1024
    """Size of each uploaded part. S3 requires at least 5 MiB for all but the last part."""
    DELETE_BATCH_SIZE: int = 1000
    """Maximum keys per DeleteObjects request."""
    FILE_MODE: int = 0o644
    """Approximated permission bits reported for objects."""
    DIRECTORY_MODE: int = 0o755
    """Approximated permission bits reported for directory prefixes."""


class StreamSettings:
    """Defaults for read/write streams."""

    READ_CHUNK_SIZE: int = 64 * 1024
    """Buffer size used when reading from a stream."""


class BindingKeys:
    """Container keys used by FilesystemComponent."""

    FILESYSTEM_CONFIG = "@components/filesystem/config"
    FILESYSTEM_INSTANCE = "@services/filesystem/instance"
