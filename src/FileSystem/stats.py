"""
File metadata value object.

FileStats is returned by stat/lstat on every backend. Object stores only know
sizes and modification times, so S3 fills the remaining fields with fixed
approximations.
"""

import os
import stat as stat_module
from dataclasses import dataclass
from datetime import datetime, timezone

from Configuration.FilesystemConfig import S3Tuning


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


@dataclass(frozen=True)
class FileStats:
    """Metadata of a file or directory."""

    path: str
    size: int
    mode: int
    mtime: datetime
    atime: datetime
    ctime: datetime
    birthtime: datetime
    uid: int = 0
    gid: int = 0
    nlink: int = 1
    ino: int = 0
    dev: int = 0

    def is_file(self) -> bool:
        return stat_module.S_ISREG(self.mode)

    def is_directory(self) -> bool:
        return stat_module.S_ISDIR(self.mode)

    def is_symbolic_link(self) -> bool:
        return stat_module.S_ISLNK(self.mode)

    @classmethod
    def from_os_stat(cls, path: str, result: os.stat_result) -> "FileStats":
        """
        Build FileStats from an os.stat_result.

        birthtime falls back to ctime on platforms that do not record
        creation times.
        """
        birth = getattr(result, "st_birthtime", None)
        return cls(
            path=path,
            size=result.st_size,
            mode=result.st_mode,
            mtime=_timestamp(result.st_mtime),
            atime=_timestamp(result.st_atime),
            ctime=_timestamp(result.st_ctime),
            birthtime=_timestamp(birth if birth is not None else result.st_ctime),
            uid=result.st_uid,
            gid=result.st_gid,
            nlink=result.st_nlink,
            ino=result.st_ino,
            dev=result.st_dev,
        )

    @classmethod
    def for_object(cls, path: str, size: int, last_modified: datetime) -> "FileStats":
        """Approximate stats of an S3 object."""
        if last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=timezone.utc)
        return cls(
            path=path,
            size=size,
            mode=stat_module.S_IFREG | S3Tuning.FILE_MODE,
            mtime=last_modified,
            atime=last_modified,
            ctime=last_modified,
            birthtime=last_modified,
        )

    @classmethod
    def for_prefix(cls, path: str, last_modified: datetime = None) -> "FileStats":
        """Approximate stats of an S3 directory (marker object or common prefix)."""
        when = last_modified or datetime.now(timezone.utc)
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return cls(
            path=path,
            size=0,
            mode=stat_module.S_IFDIR | S3Tuning.DIRECTORY_MODE,
            mtime=when,
            atime=when,
            ctime=when,
            birthtime=when,
        )
