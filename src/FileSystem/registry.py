"""
Filesystem registry.

This module provides a registry for filesystem implementations and the
factory functions that build a filesystem from a configuration.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, Union

from Configuration.ConfigLoader import ConfigLoader
from Configuration.Validator import validate_config
from FileSystem.base import FileSystem
from FileSystem.local import LocalFileSystem
from FileSystem.s3 import S3FileSystem
from Utils.errors import FilesystemError, ValidationError

# Registry of filesystem implementations
_FILESYSTEM_REGISTRY: Dict[str, Type[FileSystem]] = {}
logger = logging.getLogger(__name__)


def register_filesystem(name: str, fs_class: Type[FileSystem]) -> None:
    """
    Register a filesystem implementation.

    Args:
        name: The name of the filesystem implementation, matched against the configuration type
        fs_class: The filesystem implementation class
    """
    logger.debug(f"Registering filesystem: {name}")
    _FILESYSTEM_REGISTRY[name] = fs_class


def get_filesystem(name: str, **kwargs) -> FileSystem:
    """
    Get a filesystem implementation by name.

    Args:
        name: The name of the filesystem implementation
        **kwargs: Additional arguments to pass to the filesystem constructor

    Returns:
        An instance of the requested filesystem implementation

    Raises:
        ValidationError: If the requested filesystem implementation is not registered
    """
    logger.debug(f"Getting filesystem: {name}")

    if name not in _FILESYSTEM_REGISTRY:
        raise ValidationError(f"Filesystem not registered: {name}")

    fs_class = _FILESYSTEM_REGISTRY[name]
    return fs_class(**kwargs)


def create_filesystem(config: Any, **adapter_kwargs) -> FileSystem:
    """
    Validate a configuration and create the matching filesystem.

    Args:
        config: A configuration mapping or model
        **adapter_kwargs: Extra constructor arguments, e.g. client= for S3

    Returns:
        The filesystem instance

    Raises:
        ValidationError: If the configuration is invalid or the adapter cannot be created
    """
    result = validate_config(config)
    if not result.is_valid:
        message = f"Invalid filesystem configuration: {', '.join(result.errors)}"
        logger.error(message)
        raise ValidationError(message)

    validated = result.config
    try:
        filesystem = get_filesystem(validated.type, config=validated, **adapter_kwargs)
    except FilesystemError:
        raise
    except Exception as e:
        logger.error(f"Failed to create {validated.type} filesystem: {e}")
        raise ValidationError(f"Failed to create {validated.type} filesystem: {e}", cause=e) from e

    logger.info(f"Created {validated.type} filesystem")
    return filesystem


def create_filesystem_from_env(environ: Optional[Mapping[str, str]] = None, **adapter_kwargs) -> FileSystem:
    """
    Create a filesystem from FILESYSTEM_* environment variables.

    Args:
        environ: Variables to read, defaults to os.environ
        **adapter_kwargs: Extra constructor arguments

    Raises:
        ValidationError: If FILESYSTEM_TYPE is missing or the configuration is invalid
    """
    return create_filesystem(ConfigLoader.from_env(environ), **adapter_kwargs)


def create_filesystem_from_file(file_path: Union[str, Path], **adapter_kwargs) -> FileSystem:
    """Create a filesystem from a YAML configuration file."""
    return create_filesystem(ConfigLoader.from_yaml(file_path), **adapter_kwargs)


# Register built-in filesystem implementations
register_filesystem("local", LocalFileSystem)
register_filesystem("s3", S3FileSystem)
