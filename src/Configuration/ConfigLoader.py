# File: ConfigLoader.py
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from Configuration.FilesystemConfig import EnvironmentVariables, FilesystemTypes
from Utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _parse_number(value: str) -> Union[int, float, str]:
    """Parse a numeric setting; unparsable values are returned as-is so the validator reports them."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


class ConfigLoader:
    """Build raw filesystem configurations from the environment or a YAML file."""

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """
        Build a configuration mapping from environment variables.

        Args:
            environ: Variables to read, defaults to os.environ

        Returns:
            A configuration mapping ready for validate_config

        Raises:
            ValidationError: If FILESYSTEM_TYPE is missing or unknown
        """
        env = os.environ if environ is None else environ

        fs_type = env.get(EnvironmentVariables.TYPE)
        if not fs_type:
            raise ValidationError(f"{EnvironmentVariables.TYPE} environment variable is required")
        if fs_type not in FilesystemTypes.ALL:
            raise ValidationError(
                f'Invalid {EnvironmentVariables.TYPE}: "{fs_type}". Must be "local" or "s3"'
            )

        common: Dict[str, Any] = {}
        if env.get(EnvironmentVariables.TIMEOUT):
            common["timeout"] = _parse_number(env[EnvironmentVariables.TIMEOUT])
        if env.get(EnvironmentVariables.MAX_RETRIES):
            common["max_retries"] = _parse_number(env[EnvironmentVariables.MAX_RETRIES])
        if env.get(EnvironmentVariables.DEBUG):
            common["debug"] = _parse_bool(env[EnvironmentVariables.DEBUG])

        if fs_type == FilesystemTypes.LOCAL:
            local: Dict[str, Any] = {}
            if env.get(EnvironmentVariables.LOCAL_BASE_PATH):
                local["base_path"] = env[EnvironmentVariables.LOCAL_BASE_PATH]
            if env.get(EnvironmentVariables.LOCAL_CREATE_MISSING_DIRS):
                local["create_missing_dirs"] = _parse_bool(env[EnvironmentVariables.LOCAL_CREATE_MISSING_DIRS])
            config = {"type": fs_type, "local": local, "common": common}
        else:
            s3: Dict[str, Any] = {
                "bucket": env.get(EnvironmentVariables.S3_BUCKET, ""),
                "region": env.get(EnvironmentVariables.S3_REGION, ""),
            }
            optional_strings = {
                "access_key_id": EnvironmentVariables.S3_ACCESS_KEY_ID,
                "secret_access_key": EnvironmentVariables.S3_SECRET_ACCESS_KEY,
                "endpoint": EnvironmentVariables.S3_ENDPOINT,
                "prefix": EnvironmentVariables.S3_PREFIX,
            }
            for key, variable in optional_strings.items():
                if env.get(variable):
                    s3[key] = env[variable]
            if env.get(EnvironmentVariables.S3_FORCE_PATH_STYLE):
                s3["force_path_style"] = _parse_bool(env[EnvironmentVariables.S3_FORCE_PATH_STYLE])
            config = {"type": fs_type, "s3": s3, "common": common}

        logger.debug(f"Loaded {fs_type} filesystem configuration from environment")
        return config

    @staticmethod
    def from_yaml(file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a configuration mapping from a YAML file.

        The document may hold the configuration at its root or under a
        top-level 'filesystem' key.

        Raises:
            ValidationError: If the file is missing, unparsable or not a mapping
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                root = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error(f"Filesystem configuration file not found: {file_path}")
            raise ValidationError(f"Configuration file not found: {file_path}", cause=e) from e
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML file {file_path}: {e}")
            raise ValidationError(f"Configuration file {file_path} is not valid YAML", cause=e) from e

        if isinstance(root, dict) and isinstance(root.get("filesystem"), dict):
            root = root["filesystem"]
        if not isinstance(root, dict):
            logger.warning(f"Filesystem configuration {file_path} root is not a dict: {type(root)}")
            raise ValidationError(f"Configuration file {file_path} must contain a mapping")

        logger.info(f"Loaded filesystem configuration from {file_path}")
        return root
