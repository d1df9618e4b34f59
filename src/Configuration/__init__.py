"""
Initializes the Configuration package.

This module provides centralized access to the filesystem constants, the
configuration models, validation and loading.
"""

# Import constants and defaults
from .FilesystemConfig import (
    BindingKeys,
    EnvironmentVariables,
    FilesystemDefaults,
    FilesystemTypes,
    RetryPolicy,
    S3Tuning,
    StreamSettings,
)

# Import configuration models
from .Models import (
    CommonOptions,
    CommonSettings,
    FilesystemConfig,
    LocalFilesystemConfig,
    LocalOptions,
    LocalSettings,
    S3FilesystemConfig,
    S3Options,
    S3Settings,
    ValidatedConfig,
    ValidatedLocalConfig,
    ValidatedS3Config,
)

# Import validation and loading
from .Validator import ConfigValidationResult, validate_config
from .ConfigLoader import ConfigLoader

__all__ = [
    # Constants
    "BindingKeys",
    "EnvironmentVariables",
    "FilesystemDefaults",
    "FilesystemTypes",
    "RetryPolicy",
    "S3Tuning",
    "StreamSettings",

    # Input models
    "CommonOptions",
    "FilesystemConfig",
    "LocalFilesystemConfig",
    "LocalOptions",
    "S3FilesystemConfig",
    "S3Options",

    # Validated models
    "CommonSettings",
    "LocalSettings",
    "S3Settings",
    "ValidatedConfig",
    "ValidatedLocalConfig",
    "ValidatedS3Config",

    # Validation and loading
    "ConfigValidationResult",
    "validate_config",
    "ConfigLoader",
]
