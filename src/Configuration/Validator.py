"""
Filesystem configuration validation.

validate_config turns a raw configuration (usually a dict built by hand, from
YAML or from environment variables) into a fully resolved configuration, or
into the complete list of problems found in it. It never raises for invalid
input, so callers decide whether a bad configuration is fatal.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from Configuration.FilesystemConfig import FilesystemDefaults
from Configuration.Models import (
    CommonSettings,
    FilesystemConfig,
    LocalFilesystemConfig,
    LocalSettings,
    S3Settings,
    ValidatedConfig,
    ValidatedLocalConfig,
    ValidatedS3Config,
)


logger = logging.getLogger(__name__)

_CONFIG_ADAPTER: TypeAdapter = TypeAdapter(FilesystemConfig)


@dataclass
class ConfigValidationResult:
    """Outcome of validate_config."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    config: Optional[ValidatedConfig] = None


def _format_error(error: dict, raw: Any) -> str:
    """Turn one pydantic error entry into a readable message."""
    error_type = error.get("type")

    if error_type == "union_tag_not_found":
        return 'Configuration must specify a type ("local" or "s3")'
    if error_type == "union_tag_invalid":
        tag = raw.get("type") if isinstance(raw, dict) else None
        return f'Invalid type: "{tag}". Must be "local" or "s3"'

    location = list(error.get("loc", ()))
    # Tagged unions prefix the location with the tag value
    if location and isinstance(raw, dict) and location[0] == raw.get("type"):
        location = location[1:]

    where = ".".join(str(part) for part in location) or "config"
    return f"{where}: {error.get('msg')}"


def _resolve(config: Any) -> ValidatedConfig:
    """Apply defaults to a parsed input configuration."""
    common_input = config.common
    common = CommonSettings(
        timeout=common_input.timeout if common_input.timeout is not None else FilesystemDefaults.TIMEOUT_MS,
        max_retries=common_input.max_retries if common_input.max_retries is not None else FilesystemDefaults.MAX_RETRIES,
        debug=common_input.debug if common_input.debug is not None else FilesystemDefaults.DEBUG,
        logger=common_input.logger or logging.getLogger(FilesystemDefaults.LOGGER_NAME),
    )

    if isinstance(config, LocalFilesystemConfig):
        return ValidatedLocalConfig(
            local=LocalSettings(
                base_path=config.local.base_path or os.getcwd(),
                create_missing_dirs=(
                    config.local.create_missing_dirs
                    if config.local.create_missing_dirs is not None
                    else FilesystemDefaults.CREATE_MISSING_DIRS
                ),
            ),
            common=common,
        )

    s3 = config.s3
    return ValidatedS3Config(
        s3=S3Settings(
            bucket=s3.bucket,
            region=s3.region,
            access_key_id=s3.access_key_id or None,
            secret_access_key=s3.secret_access_key or None,
            endpoint=s3.endpoint or None,
            force_path_style=s3.force_path_style if s3.force_path_style is not None else FilesystemDefaults.FORCE_PATH_STYLE,
            prefix=s3.prefix if s3.prefix is not None else FilesystemDefaults.S3_PREFIX,
            timeout=s3.timeout if s3.timeout is not None else common.timeout,
            max_retries=s3.max_retries if s3.max_retries is not None else common.max_retries,
        ),
        common=common,
    )


def validate_config(config: Any) -> ConfigValidationResult:
    """
    Validate a filesystem configuration and fill in defaults.

    Every problem in the configuration is reported, not only the first one.
    Already validated configurations are returned as they are.

    Args:
        config: A configuration mapping, an input model or a validated model

    Returns:
        A ConfigValidationResult. When is_valid is True, config holds the
        resolved configuration; otherwise errors lists every problem found.
    """
    if isinstance(config, (ValidatedLocalConfig, ValidatedS3Config)):
        return ConfigValidationResult(is_valid=True, config=config)

    try:
        parsed = _CONFIG_ADAPTER.validate_python(config)
    except PydanticValidationError as e:
        errors = [_format_error(error, config) for error in e.errors()]
        logger.debug(f"Configuration rejected with {len(errors)} error(s)")
        return ConfigValidationResult(is_valid=False, errors=errors)

    return ConfigValidationResult(is_valid=True, config=_resolve(parsed))
