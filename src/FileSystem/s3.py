"""
S3 filesystem implementation.

This module maps the filesystem operations onto an S3 bucket (or any
S3-compatible service). Object stores have no directories: a directory is
either a zero-byte marker object whose key ends with '/' or simply the common
prefix of other keys. Rename is a copy followed by a delete and append is a
read-modify-write, so neither is atomic.
"""

import os
from typing import Any, Dict, IO, List, Optional, Union

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from Configuration.FilesystemConfig import S3Tuning
from Configuration.Models import ValidatedS3Config
from FileSystem.base import FileSystem
from FileSystem.stats import FileStats
from FileSystem.streams import ReadStream, S3MultipartWriter, check_range, wrap_read_stream
from Utils.errors import (
    FilesystemError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from Utils.pathutils import has_escaping_segments, normalize_path

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_not_found(error: Exception) -> bool:
    if not isinstance(error, ClientError):
        return False
    return str(error.response.get("Error", {}).get("Code")) in _NOT_FOUND_CODES


class S3FileSystem(FileSystem):
    """
    Implementation of FileSystem for S3 buckets.

    Paths are turned into keys by stripping the leading '/' and prepending
    the configured prefix, so the prefix acts as the root directory.
    """

    def __init__(self, config: ValidatedS3Config, client: Any = None) -> None:
        """
        Initialize the S3 file system.

        Args:
            config: The validated S3 configuration
            client: A pre-built S3 client; one is created from config when None
        """
        if not isinstance(config, ValidatedS3Config):
            raise ValidationError(f"S3FileSystem requires a validated S3 configuration, got {type(config).__name__}")
        settings = config.s3
        super().__init__(config, settings.timeout, settings.max_retries)
        self.bucket = settings.bucket

        prefix = normalize_path(settings.prefix).strip("/") if settings.prefix else ""
        self.prefix = "" if prefix in ("", ".") else prefix + "/"

        self.client = client if client is not None else self._create_client(config)
        self._log_debug(f"S3 filesystem on bucket {self.bucket} with prefix '{self.prefix}'")

    @staticmethod
    def _create_client(config: ValidatedS3Config) -> Any:
        """Create the boto3 client. Retries are handled by with_retry, so botocore's own are disabled."""
        settings = config.s3
        options: Dict[str, Any] = {
            "connect_timeout": settings.timeout / 1000.0,
            "read_timeout": settings.timeout / 1000.0,
            "retries": {"total_max_attempts": 1},
        }
        if settings.force_path_style:
            options["s3"] = {"addressing_style": "path"}

        return boto3.client(
            "s3",
            region_name=settings.region,
            endpoint_url=settings.endpoint,
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key,
            config=Config(**options),
        )

    # ------------------------------------------------------------------
    # Key mapping
    # ------------------------------------------------------------------

    def _key(self, path: str, operation: str) -> str:
        """
        Map a path to an object key.

        Raises:
            ValidationError: If path is not a string
            PermissionDeniedError: If the path climbs above the root
        """
        relative = normalize_path(path).lstrip("/")
        if has_escaping_segments(relative):
            raise PermissionDeniedError(path, operation)
        if relative in ("", "."):
            return self.prefix
        return self.prefix + relative

    def _is_root(self, key: str) -> bool:
        return key == self.prefix

    @staticmethod
    def _directory_prefix(key: str) -> str:
        if key == "" or key.endswith(S3Tuning.DIRECTORY_MARKER_SUFFIX):
            return key
        return key + S3Tuning.DIRECTORY_MARKER_SUFFIX

    # ------------------------------------------------------------------
    # Blocking implementations, executed in a worker thread
    # ------------------------------------------------------------------

    def _get(self, key: str) -> bytes:
        body = self.client.get_object(Bucket=self.bucket, Key=key)["Body"]
        try:
            return body.read()
        finally:
            body.close()

    def _get_or_empty(self, key: str) -> bytes:
        try:
            return self._get(key)
        except ClientError as e:
            if _is_not_found(e):
                return b""
            raise

    def _put(self, key: str, data: bytes, path: str) -> None:
        if len(data) <= S3Tuning.MULTIPART_THRESHOLD:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data)
            return
        writer = S3MultipartWriter(self.client, self.bucket, key, path)
        writer.write(data)
        writer.close()

    def _read(self, key: str, encoding: Optional[str]) -> Union[bytes, str]:
        content = self._get(key)
        return content.decode(encoding) if encoding else content

    def _append(self, key: str, data: bytes, path: str) -> None:
        self._put(key, self._get_or_empty(key) + data, path)

    def _delete(self, key: str) -> None:
        self.client.head_object(Bucket=self.bucket, Key=key)
        self.client.delete_object(Bucket=self.bucket, Key=key)

    def _copy(self, src_key: str, dest_key: str) -> None:
        self.client.copy_object(
            Bucket=self.bucket,
            Key=dest_key,
            CopySource={"Bucket": self.bucket, "Key": src_key},
        )

    def _move(self, old_key: str, new_key: str, old_path: str, new_path: str) -> None:
        self._copy(old_key, new_key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=old_key)
        except Exception as e:
            raise StorageError(
                f"Copied {old_path} to {new_path} but could not delete the source; both objects now exist",
                cause=e,
                path=old_path,
                operation="rename",
            ) from e

    def _iter_objects(self, prefix: str, delimiter: Optional[str] = None):
        """Yield every list_objects_v2 page for a prefix."""
        request: Dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        if delimiter:
            request["Delimiter"] = delimiter
        while True:
            response = self.client.list_objects_v2(**request)
            yield response
            if not response.get("IsTruncated"):
                return
            request["ContinuationToken"] = response["NextContinuationToken"]

    def _has_children(self, key: str) -> bool:
        response = self.client.list_objects_v2(
            Bucket=self.bucket, Prefix=self._directory_prefix(key), MaxKeys=1
        )
        return bool(response.get("Contents") or response.get("CommonPrefixes"))

    def _list(self, key: str, path: str) -> List[str]:
        prefix = self._directory_prefix(key)
        names = set()
        found = False
        for page in self._iter_objects(prefix, delimiter=S3Tuning.DIRECTORY_MARKER_SUFFIX):
            for item in page.get("Contents", []):
                found = True
                if item["Key"] != prefix:
                    names.add(item["Key"][len(prefix):])
            for common_prefix in page.get("CommonPrefixes", []):
                found = True
                names.add(common_prefix["Prefix"][len(prefix):].rstrip("/"))

        if not found and not self._is_root(key):
            raise NotFoundError(path, operation="readdir")
        return sorted(name for name in names if name)

    def _make_directory(self, key: str, path: str, recursive: bool) -> None:
        if self._is_root(key):
            return

        relative = key[len(self.prefix):]
        segments = relative.split("/")

        if recursive:
            for index in range(1, len(segments) + 1):
                marker = self.prefix + "/".join(segments[:index]) + S3Tuning.DIRECTORY_MARKER_SUFFIX
                self.client.put_object(Bucket=self.bucket, Key=marker, Body=b"")
            return

        if len(segments) > 1:
            parent_key = self.prefix + "/".join(segments[:-1])
            if not self._has_children(parent_key):
                parent_path = "/" + "/".join(segments[:-1])
                raise NotFoundError(parent_path, operation="mkdir")
        self.client.put_object(Bucket=self.bucket, Key=self._directory_prefix(key), Body=b"")

    def _delete_keys(self, keys: List[str], path: str) -> None:
        for start in range(0, len(keys), S3Tuning.DELETE_BATCH_SIZE):
            batch = keys[start:start + S3Tuning.DELETE_BATCH_SIZE]
            response = self.client.delete_objects(
                Bucket=self.bucket,
                Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
            )
            errors = response.get("Errors") or []
            if errors:
                failed = ", ".join(f"{error.get('Key')} ({error.get('Code')})" for error in errors)
                raise StorageError(f"Failed to delete {len(errors)} object(s): {failed}", path=path, operation="rmdir")

    def _remove_directory(self, key: str, path: str, recursive: bool) -> None:
        prefix = self._directory_prefix(key)

        if recursive:
            keys = [item["Key"] for page in self._iter_objects(prefix) for item in page.get("Contents", [])]
            if not keys:
                raise NotFoundError(path, operation="rmdir")
            self._delete_keys(keys, path)
            return

        response = self.client.list_objects_v2(Bucket=self.bucket, Prefix=prefix, MaxKeys=2)
        keys = [item["Key"] for item in response.get("Contents", [])]
        if not keys:
            raise NotFoundError(path, operation="rmdir")
        if any(existing != prefix for existing in keys):
            raise StorageError(f"Directory not empty: {path}", path=path, operation="rmdir")
        self.client.delete_object(Bucket=self.bucket, Key=prefix)

    def _stat(self, key: str, path: str, operation: str) -> FileStats:
        display_path = normalize_path(path)
        if self._is_root(key):
            return FileStats.for_prefix(display_path)

        try:
            head = self.client.head_object(Bucket=self.bucket, Key=key)
            return FileStats.for_object(display_path, head.get("ContentLength", 0), head["LastModified"])
        except ClientError as e:
            if not _is_not_found(e):
                raise

        marker = self._directory_prefix(key)
        try:
            head = self.client.head_object(Bucket=self.bucket, Key=marker)
            return FileStats.for_prefix(display_path, head.get("LastModified"))
        except ClientError as e:
            if not _is_not_found(e):
                raise

        if self._has_children(key):
            return FileStats.for_prefix(display_path)
        raise NotFoundError(path, operation=operation)

    # ------------------------------------------------------------------
    # FileSystem operations
    # ------------------------------------------------------------------

    async def read_file(self, path: str, encoding: Optional[str] = None) -> Union[bytes, str]:
        key = self._key(path, "read_file")
        return await self._execute("read_file", path, self._read, key, encoding)

    async def write_file(self, path: str, data: Union[bytes, str], encoding: str = "utf-8") -> None:
        key = self._key(path, "write_file")
        payload = self._to_bytes(data, encoding, path, "write_file")
        await self._execute("write_file", path, self._put, key, payload, path)

    async def append_file(self, path: str, data: Union[bytes, str], encoding: str = "utf-8") -> None:
        key = self._key(path, "append_file")
        payload = self._to_bytes(data, encoding, path, "append_file")
        await self._execute("append_file", path, self._append, key, payload, path, retry=False)

    async def unlink(self, path: str) -> None:
        key = self._key(path, "unlink")
        await self._execute("unlink", path, self._delete, key)

    async def copy_file(self, src: str, dest: str) -> None:
        src_key = self._key(src, "copy_file")
        dest_key = self._key(dest, "copy_file")
        await self._execute("copy_file", src, self._copy, src_key, dest_key)

    async def rename(self, old_path: str, new_path: str) -> None:
        old_key = self._key(old_path, "rename")
        new_key = self._key(new_path, "rename")
        await self._execute("rename", old_path, self._move, old_key, new_key, old_path, new_path)

    async def readdir(self, path: str) -> List[str]:
        key = self._key(path, "readdir")
        return await self._execute("readdir", path, self._list, key, path)

    async def mkdir(self, path: str, recursive: bool = False) -> None:
        key = self._key(path, "mkdir")
        await self._execute("mkdir", path, self._make_directory, key, path, recursive)

    async def rmdir(self, path: str, recursive: bool = False) -> None:
        key = self._key(path, "rmdir")
        if self._is_root(key):
            raise PermissionDeniedError(path, "rmdir")
        await self._execute("rmdir", path, self._remove_directory, key, path, recursive)

    async def stat(self, path: str) -> FileStats:
        key = self._key(path, "stat")
        return await self._execute("stat", path, self._stat, key, path, "stat")

    async def lstat(self, path: str) -> FileStats:
        key = self._key(path, "lstat")
        return await self._execute("lstat", path, self._stat, key, path, "lstat")

    async def access(self, path: str, mode: int = os.F_OK) -> None:
        # Object permissions cannot be probed, existence is all that is checked
        key = self._key(path, "access")
        await self._execute("access", path, self._stat, key, path, "access")

    def create_read_stream(
        self,
        path: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        encoding: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> IO:
        key = self._key(path, "create_read_stream")
        check_range(path, start, end)

        def opener():
            request: Dict[str, Any] = {"Bucket": self.bucket, "Key": key}
            if start is not None or end is not None:
                request["Range"] = f"bytes={start or 0}-{'' if end is None else end}"
            return self.client.get_object(**request)["Body"]

        self._log_debug(f"create_read_stream {path}")
        return wrap_read_stream(ReadStream(opener, path, start, end), encoding, chunk_size)

    def create_write_stream(self, path: str, append: bool = False, encoding: Optional[str] = None) -> IO:
        key = self._key(path, "create_write_stream")
        self._log_debug(f"create_write_stream {path}")
        preload = (lambda: self._get_or_empty(key)) if append else None
        return S3MultipartWriter(self.client, self.bucket, key, path, encoding=encoding, preload=preload)

    async def exists(self, path: str) -> bool:
        try:
            key = self._key(path, "exists")
            await self._execute("exists", path, self._stat, key, path, "exists", log_errors=False)
        except FilesystemError:
            return False
        return True

    async def realpath(self, path: str) -> str:
        key = self._key(path, "realpath")
        await self._execute("realpath", path, self._stat, key, path, "realpath")
        return normalize_path(path)
