"""
Local filesystem implementation.

This module provides a filesystem implementation for the local file system.
All paths are confined to the configured base directory.
"""

import errno
import os
import posixpath
import tempfile
from typing import IO, List, Optional, Union

import fsspec

from Configuration.Models import ValidatedLocalConfig
from FileSystem.base import FileSystem
from FileSystem.stats import FileStats
from FileSystem.streams import LocalFileWriter, ReadStream, check_range, wrap_read_stream
from Utils.errors import FilesystemError, PermissionDeniedError, ValidationError
from Utils.pathutils import has_escaping_segments, normalize_path, validate_path


class LocalFileSystem(FileSystem):
    """
    Implementation of FileSystem for the local file system.

    This class provides methods for interacting with the local file system.
    It uses fsspec for listing, copying and recursive removal to ensure
    compatibility with the fsspec API.
    """

    def __init__(self, config: ValidatedLocalConfig) -> None:
        """
        Initialize the local file system.

        Args:
            config: The validated local configuration

        Raises:
            ValidationError: If config is not a local configuration
        """
        if not isinstance(config, ValidatedLocalConfig):
            raise ValidationError(f"LocalFileSystem requires a validated local configuration, got {type(config).__name__}")
        super().__init__(config, config.common.timeout, config.common.max_retries)
        self.fs = fsspec.filesystem("file")
        self.base_path = os.path.abspath(config.local.base_path)
        self.create_missing_dirs = config.local.create_missing_dirs

        if self.create_missing_dirs:
            os.makedirs(self.base_path, exist_ok=True)
        self._real_base_path = os.path.realpath(self.base_path)

        self._log_debug(f"Local filesystem rooted at {self.base_path}")

    def _resolve(self, path: str, operation: str) -> str:
        """
        Turn a filesystem path into an absolute host path under the base directory.

        Raises:
            ValidationError: If the path contains forbidden characters or names
            PermissionDeniedError: If the path leaves the base directory
        """
        result = validate_path(path)
        if not result.is_valid:
            raise ValidationError(f"{result.error}: {path!r}", path=path, operation=operation)

        relative = normalize_path(path).lstrip("/")
        if has_escaping_segments(relative):
            raise PermissionDeniedError(path, operation)

        full_path = self.base_path if relative in ("", ".") else os.path.join(self.base_path, *relative.split("/"))

        real = os.path.realpath(full_path)
        if real != self._real_base_path and not real.startswith(self._real_base_path + os.sep):
            raise PermissionDeniedError(path, operation)
        return full_path

    def _ensure_parent(self, full_path: str) -> None:
        if self.create_missing_dirs:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)

    # ------------------------------------------------------------------
    # Blocking implementations, executed in a worker thread
    # ------------------------------------------------------------------

    @staticmethod
    def _read(full_path: str, encoding: Optional[str]) -> Union[bytes, str]:
        with open(full_path, "rb") as f:
            content = f.read()
        return content.decode(encoding) if encoding else content

    def _write(self, full_path: str, data: bytes) -> None:
        self._ensure_parent(full_path)
        directory = os.path.dirname(full_path)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix=f".{os.path.basename(full_path)}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, full_path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def _append(self, full_path: str, data: bytes) -> None:
        self._ensure_parent(full_path)
        with open(full_path, "ab") as f:
            f.write(data)

    def _copy(self, src_path: str, dest_path: str) -> None:
        if not os.path.isfile(src_path):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), src_path)
        self._ensure_parent(dest_path)
        self.fs.cp_file(src_path, dest_path)

    def _rename(self, old_path: str, new_path: str) -> None:
        self._ensure_parent(new_path)
        os.replace(old_path, new_path)

    def _list(self, full_path: str) -> List[str]:
        info = self.fs.info(full_path)
        if info["type"] != "directory":
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), full_path)
        entries = self.fs.ls(full_path, detail=False)
        return sorted(posixpath.basename(entry.rstrip("/")) for entry in entries)

    def _make_directory(self, full_path: str, recursive: bool) -> None:
        if recursive:
            self.fs.makedirs(full_path, exist_ok=True)
        elif self.create_missing_dirs:
            os.makedirs(full_path)
        else:
            os.mkdir(full_path)

    def _remove_directory(self, full_path: str, recursive: bool) -> None:
        if not recursive:
            os.rmdir(full_path)
            return
        if not os.path.lexists(full_path):
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), full_path)
        if not os.path.isdir(full_path):
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), full_path)
        self.fs.rm(full_path, recursive=True)

    @staticmethod
    def _check_access(full_path: str, mode: int) -> None:
        os.stat(full_path)
        if not os.access(full_path, mode):
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), full_path)

    @staticmethod
    def _realpath(full_path: str) -> str:
        os.stat(full_path)
        return os.path.realpath(full_path)

    # ------------------------------------------------------------------
    # FileSystem operations
    # ------------------------------------------------------------------

    async def read_file(self, path: str, encoding: Optional[str] = None) -> Union[bytes, str]:
        full_path = self._resolve(path, "read_file")
        return await self._execute("read_file", path, self._read, full_path, encoding)

    async def write_file(self, path: str, data: Union[bytes, str], encoding: str = "utf-8") -> None:
        full_path = self._resolve(path, "write_file")
        payload = self._to_bytes(data, encoding, path, "write_file")
        await self._execute("write_file", path, self._write, full_path, payload)

    async def append_file(self, path: str, data: Union[bytes, str], encoding: str = "utf-8") -> None:
        full_path = self._resolve(path, "append_file")
        payload = self._to_bytes(data, encoding, path, "append_file")
        await self._execute("append_file", path, self._append, full_path, payload, retry=False)

    async def unlink(self, path: str) -> None:
        full_path = self._resolve(path, "unlink")
        await self._execute("unlink", path, os.unlink, full_path)

    async def copy_file(self, src: str, dest: str) -> None:
        src_path = self._resolve(src, "copy_file")
        dest_path = self._resolve(dest, "copy_file")
        await self._execute("copy_file", src, self._copy, src_path, dest_path)

    async def rename(self, old_path: str, new_path: str) -> None:
        old_full_path = self._resolve(old_path, "rename")
        new_full_path = self._resolve(new_path, "rename")
        await self._execute("rename", old_path, self._rename, old_full_path, new_full_path)

    async def readdir(self, path: str) -> List[str]:
        full_path = self._resolve(path, "readdir")
        return await self._execute("readdir", path, self._list, full_path)

    async def mkdir(self, path: str, recursive: bool = False) -> None:
        full_path = self._resolve(path, "mkdir")
        await self._execute("mkdir", path, self._make_directory, full_path, recursive)

    async def rmdir(self, path: str, recursive: bool = False) -> None:
        full_path = self._resolve(path, "rmdir")
        if full_path == self.base_path:
            raise PermissionDeniedError(path, "rmdir")
        await self._execute("rmdir", path, self._remove_directory, full_path, recursive)

    async def stat(self, path: str) -> FileStats:
        full_path = self._resolve(path, "stat")
        result = await self._execute("stat", path, os.stat, full_path)
        return FileStats.from_os_stat(normalize_path(path), result)

    async def lstat(self, path: str) -> FileStats:
        full_path = self._resolve(path, "lstat")
        result = await self._execute("lstat", path, os.lstat, full_path)
        return FileStats.from_os_stat(normalize_path(path), result)

    async def access(self, path: str, mode: int = os.F_OK) -> None:
        full_path = self._resolve(path, "access")
        await self._execute("access", path, self._check_access, full_path, mode)

    def create_read_stream(
        self,
        path: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        encoding: Optional[str] = None,
        chunk_size: Optional[int] = None,
    ) -> IO:
        full_path = self._resolve(path, "create_read_stream")
        check_range(path, start, end)

        def opener():
            f = open(full_path, "rb")
            if start:
                f.seek(start)
            return f

        self._log_debug(f"create_read_stream {path}")
        return wrap_read_stream(ReadStream(opener, path, start, end), encoding, chunk_size)

    def create_write_stream(self, path: str, append: bool = False, encoding: Optional[str] = None) -> IO:
        full_path = self._resolve(path, "create_write_stream")
        self._log_debug(f"create_write_stream {path}")
        return LocalFileWriter(full_path, path, append=append, encoding=encoding, create_dirs=self.create_missing_dirs)

    async def exists(self, path: str) -> bool:
        try:
            full_path = self._resolve(path, "exists")
            await self._execute("exists", path, os.stat, full_path, log_errors=False)
        except FilesystemError:
            return False
        return True

    async def realpath(self, path: str) -> str:
        full_path = self._resolve(path, "realpath")
        return await self._execute("realpath", path, self._realpath, full_path)
