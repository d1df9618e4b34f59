"""
Stream objects returned by create_read_stream and create_write_stream.

Streams are synchronous file-like objects. Creating one performs no I/O: the
read stream opens its source on the first read and the writers touch the
backend on the first write or on close. Failures surface from read(),
write() and close() as filesystem errors.
"""

import io
import logging
import os
import tempfile
from typing import Any, Callable, IO, List, Optional, Union

from Configuration.FilesystemConfig import S3Tuning, StreamSettings
from Utils.errormapper import map_error
from Utils.errors import FilesystemError, ValidationError

logger = logging.getLogger(__name__)


def check_range(path: str, start: Optional[int], end: Optional[int]) -> None:
    """
    Validate the byte range of a read stream.

    Raises:
        ValidationError: If start is negative or end is before start
    """
    if start is not None and start < 0:
        raise ValidationError(f"start must be >= 0, got {start}", path=path, operation="create_read_stream")
    if end is not None and end < (start or 0):
        raise ValidationError(
            f"end ({end}) must not be before start ({start or 0})", path=path, operation="create_read_stream"
        )


class ReadStream(io.RawIOBase):
    """
    Lazily opened, optionally byte-ranged binary source.

    The opener is called on the first read and must return a binary object
    with a read(size) method positioned at the start of the range.
    """

    def __init__(self, opener: Callable[[], Any], path: str, start: Optional[int] = None, end: Optional[int] = None):
        super().__init__()
        self._opener = opener
        self._source = None
        self.path = path
        self._remaining = None if end is None else end - (start or 0) + 1

    def readable(self) -> bool:
        return True

    def _open(self) -> None:
        try:
            self._source = self._opener()
        except FilesystemError:
            raise
        except Exception as e:
            raise map_error(e, self.path, "create_read_stream") from e

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self._source is None:
            self._open()

        size = len(buffer)
        if self._remaining is not None:
            size = min(size, self._remaining)
            if size == 0:
                return 0

        try:
            data = self._source.read(size)
        except Exception as e:
            raise map_error(e, self.path, "read") from e

        count = len(data)
        buffer[:count] = data
        if self._remaining is not None:
            self._remaining -= count
        return count

    def close(self) -> None:
        if self.closed:
            return
        source, self._source = self._source, None
        try:
            if source is not None:
                source.close()
        finally:
            super().close()


def wrap_read_stream(raw: ReadStream, encoding: Optional[str] = None, chunk_size: Optional[int] = None) -> IO:
    """Buffer a ReadStream and decode it when an encoding is given."""
    buffered = io.BufferedReader(raw, buffer_size=chunk_size or StreamSettings.READ_CHUNK_SIZE)
    if encoding:
        return io.TextIOWrapper(buffered, encoding=encoding)
    return buffered


class _WriteStream(io.RawIOBase):
    """Common behaviour of the writers: str encoding, abort on failed with-blocks."""

    def __init__(self, path: str, encoding: Optional[str] = None):
        super().__init__()
        self.path = path
        self.encoding = encoding or "utf-8"

    def writable(self) -> bool:
        return True

    def _encode(self, data: Union[bytes, bytearray, memoryview, str]) -> bytes:
        if isinstance(data, str):
            return data.encode(self.encoding)
        return bytes(data)

    def abort(self) -> None:
        """Discard everything written so far and close the stream."""
        raise NotImplementedError

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()


class LocalFileWriter(_WriteStream):
    """
    Writer for the local disk.

    In replace mode the data goes to a temporary file in the target directory
    which atomically replaces the target on close. In append mode the target
    is opened for appending directly.
    """

    def __init__(self, target: str, path: str, append: bool = False, encoding: Optional[str] = None,
                 create_dirs: bool = False):
        super().__init__(path, encoding)
        self.target = target
        self.append = append
        self.create_dirs = create_dirs
        self._file = None
        self._temp_path = None

    def _open(self) -> None:
        directory = os.path.dirname(self.target)
        if self.create_dirs:
            os.makedirs(directory, exist_ok=True)
        if self.append:
            self._file = open(self.target, "ab")
            return
        fd, self._temp_path = tempfile.mkstemp(
            dir=directory, prefix=f".{os.path.basename(self.target)}.", suffix=".tmp"
        )
        self._file = os.fdopen(fd, "wb")

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        payload = self._encode(data)
        try:
            if self._file is None:
                self._open()
            self._file.write(payload)
        except Exception as e:
            raise map_error(e, self.path, "write") from e
        return len(payload)

    def _discard_temp(self) -> None:
        if self._temp_path and os.path.exists(self._temp_path):
            os.remove(self._temp_path)
        self._temp_path = None

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._file is None:
                self._open()
            self._file.close()
            if self._temp_path:
                os.replace(self._temp_path, self.target)
                self._temp_path = None
        except Exception as e:
            self._discard_temp()
            raise map_error(e, self.path, "close") from e
        finally:
            super().close()

    def abort(self) -> None:
        if self.closed:
            return
        try:
            if self._file is not None:
                self._file.close()
            self._discard_temp()
        finally:
            super().close()


class S3MultipartWriter(_WriteStream):
    """
    Writer for S3 objects.

    Data is buffered up to one part. Small objects are stored with a single
    put_object on close; as soon as a full part is buffered a multipart
    upload is started and parts are uploaded as they fill. A failed close
    aborts the multipart upload.
    """

    def __init__(self, client: Any, bucket: str, key: str, path: str, encoding: Optional[str] = None,
                 part_size: int = S3Tuning.MULTIPART_PART_SIZE,
                 preload: Optional[Callable[[], bytes]] = None):
        super().__init__(path, encoding)
        self.client = client
        self.bucket = bucket
        self.key = key
        self.part_size = part_size
        self._preload = preload
        self._buffer = bytearray()
        self._upload_id = None
        self._parts: List[dict] = []

    def _load_existing(self) -> None:
        if self._preload is not None:
            preload, self._preload = self._preload, None
            self._buffer[:0] = preload()

    def _upload_part(self, body: bytes) -> None:
        if self._upload_id is None:
            response = self.client.create_multipart_upload(Bucket=self.bucket, Key=self.key)
            self._upload_id = response["UploadId"]
            logger.debug(f"Started multipart upload {self._upload_id} for {self.key}")
        part_number = len(self._parts) + 1
        response = self.client.upload_part(
            Bucket=self.bucket, Key=self.key, UploadId=self._upload_id, PartNumber=part_number, Body=body
        )
        self._parts.append({"ETag": response["ETag"], "PartNumber": part_number})

    def _flush_full_parts(self) -> None:
        while len(self._buffer) >= self.part_size:
            body = bytes(self._buffer[: self.part_size])
            del self._buffer[: self.part_size]
            self._upload_part(body)

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        payload = self._encode(data)
        try:
            self._load_existing()
            self._buffer.extend(payload)
            self._flush_full_parts()
        except FilesystemError:
            raise
        except Exception as e:
            self._abort_upload()
            raise map_error(e, self.path, "write") from e
        return len(payload)

    def _abort_upload(self) -> None:
        if self._upload_id is None:
            return
        upload_id, self._upload_id = self._upload_id, None
        try:
            self.client.abort_multipart_upload(Bucket=self.bucket, Key=self.key, UploadId=upload_id)
        except Exception as e:
            # The original failure is the one worth reporting
            logger.warning(f"Failed to abort multipart upload {upload_id} for {self.key}: {e}")

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._load_existing()
            self._flush_full_parts()
            if self._upload_id is None:
                self.client.put_object(Bucket=self.bucket, Key=self.key, Body=bytes(self._buffer))
            else:
                if self._buffer:
                    self._upload_part(bytes(self._buffer))
                self.client.complete_multipart_upload(
                    Bucket=self.bucket,
                    Key=self.key,
                    UploadId=self._upload_id,
                    MultipartUpload={"Parts": self._parts},
                )
                self._upload_id = None
        except FilesystemError:
            self._abort_upload()
            raise
        except Exception as e:
            self._abort_upload()
            raise map_error(e, self.path, "close") from e
        finally:
            self._buffer = bytearray()
            super().close()

    def abort(self) -> None:
        if self.closed:
            return
        try:
            self._abort_upload()
        finally:
            self._buffer = bytearray()
            super().close()
