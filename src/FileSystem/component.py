"""
Dependency-injection component for the filesystem.

FilesystemComponent reads the filesystem configuration from a host container,
creates the filesystem and binds it back into the container so other
services can look it up under BindingKeys.FILESYSTEM_INSTANCE. Any container
exposing get(key) and bind(key, value) works.
"""

import logging
from typing import Any, Optional

from Configuration.FilesystemConfig import BindingKeys
from Configuration.Validator import validate_config
from FileSystem.base import FileSystem
from FileSystem.registry import create_filesystem
from Utils.errors import ValidationError

logger = logging.getLogger(__name__)


class FilesystemComponent:
    """Creates the filesystem from container configuration and binds it into the container."""

    def __init__(self, container: Any, **adapter_kwargs) -> None:
        """
        Initialize the component and bind the filesystem.

        Args:
            container: Host container with get(key) and bind(key, value)
            **adapter_kwargs: Extra constructor arguments for the adapter

        Raises:
            ValidationError: If the configuration is missing or invalid
        """
        self.container = container
        self._filesystem: Optional[FileSystem] = None

        config = container.get(BindingKeys.FILESYSTEM_CONFIG)
        if config is None:
            raise ValidationError(f"Filesystem configuration not bound under {BindingKeys.FILESYSTEM_CONFIG}")

        result = validate_config(config)
        if not result.is_valid:
            raise ValidationError(f"Invalid filesystem configuration: {', '.join(result.errors)}")

        self._filesystem = create_filesystem(result.config, **adapter_kwargs)
        container.bind(BindingKeys.FILESYSTEM_INSTANCE, self._filesystem)
        logger.info(f"Bound {result.config.type} filesystem to {BindingKeys.FILESYSTEM_INSTANCE}")

    def get_filesystem(self) -> FileSystem:
        """Get the filesystem created by this component."""
        return self._filesystem
