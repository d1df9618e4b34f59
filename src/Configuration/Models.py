"""
Configuration models for the filesystem backends.

Two families of models live here:

- Input models (LocalFilesystemConfig, S3FilesystemConfig) describe what a
  caller may supply. They form a discriminated union on the 'type' field, so
  a configuration is either a local one or an S3 one, never both.
- Validated models (ValidatedLocalConfig, ValidatedS3Config) carry every
  field resolved to a concrete value. Adapters only accept these.
"""

import logging
import os
from typing import Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from typing_extensions import Annotated

from Configuration.FilesystemConfig import FilesystemDefaults


_INPUT_MODEL_CONFIG = ConfigDict(strict=True, extra="forbid", arbitrary_types_allowed=True)
_VALIDATED_MODEL_CONFIG = ConfigDict(frozen=True, arbitrary_types_allowed=True)


def _fspath(value):
    return os.fspath(value) if isinstance(value, os.PathLike) else value


# A string, or a pathlib.Path converted to one
PathString = Annotated[str, BeforeValidator(_fspath)]


class CommonOptions(BaseModel):
    """Options shared by every backend."""
    model_config = _INPUT_MODEL_CONFIG

    timeout: Optional[float] = Field(None, gt=0, description="Operation timeout in milliseconds.")
    max_retries: Optional[int] = Field(None, ge=0, description="Retries after the first attempt.")
    debug: Optional[bool] = Field(None, description="Log every operation at DEBUG level.")
    logger: Optional[logging.Logger] = Field(None, description="Logger used by the adapter.")


class LocalOptions(BaseModel):
    """Options of the local disk backend."""
    model_config = _INPUT_MODEL_CONFIG

    base_path: Optional[PathString] = Field(None, description="Root directory of all operations.")
    create_missing_dirs: Optional[bool] = Field(None, description="Create missing parent directories.")


class S3Options(BaseModel):
    """Options of the S3 backend."""
    model_config = _INPUT_MODEL_CONFIG

    bucket: str = Field(..., min_length=1, description="Bucket name.")
    region: str = Field(..., min_length=1, description="Bucket region.")
    access_key_id: Optional[str] = Field(None, description="Access key, falls back to the boto3 credential chain.")
    secret_access_key: Optional[str] = Field(None, description="Secret key, falls back to the boto3 credential chain.")
    endpoint: Optional[str] = Field(None, description="Endpoint URL of an S3-compatible service.")
    force_path_style: Optional[bool] = Field(None, description="Use path-style addressing (MinIO and friends).")
    prefix: Optional[str] = Field(None, description="Key prefix acting as a virtual root directory.")
    timeout: Optional[float] = Field(None, gt=0, description="S3 timeout in milliseconds, overrides common.")
    max_retries: Optional[int] = Field(None, ge=0, description="S3 retries, overrides common.")


class LocalFilesystemConfig(BaseModel):
    """Input configuration of a local disk filesystem."""
    model_config = _INPUT_MODEL_CONFIG

    type: Literal["local"]
    local: LocalOptions
    common: CommonOptions = Field(default_factory=CommonOptions)


class S3FilesystemConfig(BaseModel):
    """Input configuration of an S3 filesystem."""
    model_config = _INPUT_MODEL_CONFIG

    type: Literal["s3"]
    s3: S3Options
    common: CommonOptions = Field(default_factory=CommonOptions)


FilesystemConfig = Annotated[
    Union[LocalFilesystemConfig, S3FilesystemConfig],
    Field(discriminator="type"),
]


class CommonSettings(BaseModel):
    """Resolved options shared by every backend."""
    model_config = _VALIDATED_MODEL_CONFIG

    timeout: float = FilesystemDefaults.TIMEOUT_MS
    max_retries: int = FilesystemDefaults.MAX_RETRIES
    debug: bool = FilesystemDefaults.DEBUG
    logger: logging.Logger = Field(default_factory=lambda: logging.getLogger(FilesystemDefaults.LOGGER_NAME))


class LocalSettings(BaseModel):
    """Resolved options of the local disk backend."""
    model_config = _VALIDATED_MODEL_CONFIG

    base_path: str
    create_missing_dirs: bool = FilesystemDefaults.CREATE_MISSING_DIRS


class S3Settings(BaseModel):
    """Resolved options of the S3 backend."""
    model_config = _VALIDATED_MODEL_CONFIG

    bucket: str
    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint: Optional[str] = None
    force_path_style: bool = FilesystemDefaults.FORCE_PATH_STYLE
    prefix: str = FilesystemDefaults.S3_PREFIX
    timeout: float = FilesystemDefaults.TIMEOUT_MS
    max_retries: int = FilesystemDefaults.MAX_RETRIES


class ValidatedLocalConfig(BaseModel):
    """Fully resolved local filesystem configuration."""
    model_config = _VALIDATED_MODEL_CONFIG

    type: Literal["local"] = "local"
    local: LocalSettings
    common: CommonSettings = Field(default_factory=CommonSettings)


class ValidatedS3Config(BaseModel):
    """Fully resolved S3 filesystem configuration."""
    model_config = _VALIDATED_MODEL_CONFIG

    type: Literal["s3"] = "s3"
    s3: S3Settings
    common: CommonSettings = Field(default_factory=CommonSettings)


ValidatedConfig = Union[ValidatedLocalConfig, ValidatedS3Config]
