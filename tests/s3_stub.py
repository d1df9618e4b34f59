"""
In-memory stand-in for a boto3 S3 client.

Only the calls used by S3FileSystem are implemented. Failures are raised as
real botocore ClientError instances so error mapping is exercised exactly as
against the service.
"""

import io
from datetime import datetime, timezone
from typing import Dict, List

from botocore.exceptions import ClientError
from botocore.response import StreamingBody


def client_error(code: str, message: str, status: int, operation: str) -> ClientError:
    """Build a ClientError shaped like the ones botocore raises."""
    return ClientError(
        {"Error": {"Code": code, "Message": message}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


class InMemoryS3Client:
    """Single-bucket S3 client backed by a dict."""

    def __init__(self, bucket: str = "test-bucket"):
        self.bucket = bucket
        self.objects: Dict[str, bytes] = {}
        self.modified: Dict[str, datetime] = {}
        self.uploads: Dict[str, Dict[int, bytes]] = {}
        self.aborted_uploads: List[str] = []
        self.calls: List[tuple] = []
        self.failures: Dict[str, List[Exception]] = {}
        self.failing_delete_keys = set()
        self._upload_counter = 0

    # Test helpers

    def fail_next(self, method: str, error: Exception, times: int = 1) -> None:
        """Make the next `times` calls of `method` raise `error`."""
        self.failures.setdefault(method, []).extend([error] * times)

    def call_count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append((method, kwargs))
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)
        bucket = kwargs.get("Bucket")
        if bucket is not None and bucket != self.bucket:
            raise client_error("NoSuchBucket", "The specified bucket does not exist", 404, method)

    def _store(self, key: str, data: bytes) -> None:
        self.objects[key] = bytes(data)
        self.modified[key] = datetime.now(timezone.utc)

    def _missing_key(self, operation: str) -> ClientError:
        return client_error("NoSuchKey", "The specified key does not exist.", 404, operation)

    # Object calls

    def get_object(self, Bucket, Key, Range=None):
        self._record("get_object", Bucket=Bucket, Key=Key, Range=Range)
        if Key not in self.objects:
            raise self._missing_key("GetObject")
        data = self.objects[Key]
        if Range:
            start, _, end = Range[len("bytes="):].partition("-")
            data = data[int(start): int(end) + 1 if end else len(data)]
        return {"Body": StreamingBody(io.BytesIO(data), len(data)), "ContentLength": len(data)}

    def put_object(self, Bucket, Key, Body=b""):
        self._record("put_object", Bucket=Bucket, Key=Key)
        self._store(Key, Body)
        return {"ETag": '"etag"'}

    def head_object(self, Bucket, Key):
        self._record("head_object", Bucket=Bucket, Key=Key)
        if Key not in self.objects:
            raise client_error("404", "Not Found", 404, "HeadObject")
        return {"ContentLength": len(self.objects[Key]), "LastModified": self.modified.get(Key) or datetime.now(timezone.utc)}

    def delete_object(self, Bucket, Key):
        self._record("delete_object", Bucket=Bucket, Key=Key)
        self.objects.pop(Key, None)
        self.modified.pop(Key, None)
        return {}

    def delete_objects(self, Bucket, Delete):
        self._record("delete_objects", Bucket=Bucket, Count=len(Delete["Objects"]))
        deleted, errors = [], []
        for item in Delete["Objects"]:
            key = item["Key"]
            if key in self.failing_delete_keys:
                errors.append({"Key": key, "Code": "AccessDenied", "Message": "Access Denied"})
                continue
            self.objects.pop(key, None)
            self.modified.pop(key, None)
            deleted.append({"Key": key})
        response = {"Deleted": deleted}
        if errors:
            response["Errors"] = errors
        return response

    def copy_object(self, Bucket, Key, CopySource):
        self._record("copy_object", Bucket=Bucket, Key=Key, CopySource=CopySource)
        source = CopySource["Key"]
        if source not in self.objects:
            raise self._missing_key("CopyObject")
        self._store(Key, self.objects[source])
        return {}

    def list_objects_v2(self, Bucket, Prefix="", Delimiter=None, MaxKeys=1000, ContinuationToken=None):
        self._record(
            "list_objects_v2", Bucket=Bucket, Prefix=Prefix, Delimiter=Delimiter,
            MaxKeys=MaxKeys, ContinuationToken=ContinuationToken,
        )
        entries = []
        seen_prefixes = set()
        for key in sorted(self.objects):
            if not key.startswith(Prefix):
                continue
            remainder = key[len(Prefix):]
            if Delimiter and Delimiter in remainder:
                common = Prefix + remainder[: remainder.index(Delimiter) + len(Delimiter)]
                if common not in seen_prefixes:
                    seen_prefixes.add(common)
                    entries.append(("prefix", common))
            else:
                entries.append(("key", key))

        start = int(ContinuationToken) if ContinuationToken else 0
        page = entries[start:start + MaxKeys]
        truncated = start + MaxKeys < len(entries)

        response = {"KeyCount": len(page), "IsTruncated": truncated}
        contents = [
            {"Key": value, "Size": len(self.objects[value]), "LastModified": self.modified.get(value)}
            for kind, value in page if kind == "key"
        ]
        prefixes = [{"Prefix": value} for kind, value in page if kind == "prefix"]
        if contents:
            response["Contents"] = contents
        if prefixes:
            response["CommonPrefixes"] = prefixes
        if truncated:
            response["NextContinuationToken"] = str(start + MaxKeys)
        return response

    # Multipart upload calls

    def create_multipart_upload(self, Bucket, Key):
        self._record("create_multipart_upload", Bucket=Bucket, Key=Key)
        self._upload_counter += 1
        upload_id = f"upload-{self._upload_counter}"
        self.uploads[upload_id] = {}
        return {"UploadId": upload_id}

    def upload_part(self, Bucket, Key, UploadId, PartNumber, Body):
        self._record("upload_part", Bucket=Bucket, Key=Key, UploadId=UploadId, PartNumber=PartNumber)
        self.uploads[UploadId][PartNumber] = bytes(Body)
        return {"ETag": f'"etag-{PartNumber}"'}

    def complete_multipart_upload(self, Bucket, Key, UploadId, MultipartUpload):
        self._record("complete_multipart_upload", Bucket=Bucket, Key=Key, UploadId=UploadId)
        parts = self.uploads.pop(UploadId)
        self._store(Key, b"".join(parts[part["PartNumber"]] for part in MultipartUpload["Parts"]))
        return {}

    def abort_multipart_upload(self, Bucket, Key, UploadId):
        self._record("abort_multipart_upload", Bucket=Bucket, Key=Key, UploadId=UploadId)
        self.uploads.pop(UploadId, None)
        self.aborted_uploads.append(UploadId)
        return {}
