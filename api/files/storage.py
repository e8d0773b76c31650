"""
Storage gateway for the Files API

Thin adapter over one S3 bucket. Every operation waits on a one-time
readiness barrier that verifies (or creates) the bucket before the
first request is served.
"""

import threading
from collections.abc import Iterable, Iterator
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from api.files.models import FileRecord
from core.config import StorageConfig
from core.logger import logger
from core.utils import read_stream

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
NO_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}


class StorageNotReadyError(RuntimeError):
    """Raised when the bucket could not be verified or created"""


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class StorageGateway:
    """
    Exposes exists/upload/download/list/delete against a single bucket.
    Reorder is declared but not supported.
    """

    def __init__(self, s3_client, storage_config: StorageConfig):
        self.s3_client = s3_client
        self.config = storage_config
        self.bucket = storage_config.container_name
        self._ready = False
        self._ready_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._ready

    def ensure_container(self) -> None:
        """
        Verify the bucket exists, creating it if missing.
        Runs at most once successfully; concurrent callers block
        until the first one finishes.
        """
        if self._ready:
            return

        with self._ready_lock:
            if self._ready:
                return
            try:
                self.s3_client.head_bucket(Bucket=self.bucket)
                logger.info("Bucket '%s' already exists.", self.bucket)
            except ClientError as exc:
                if _error_code(exc) not in NO_BUCKET_CODES:
                    raise StorageNotReadyError(
                        f"Unable to verify bucket '{self.bucket}'"
                    ) from exc
                self._create_bucket()
            except BotoCoreError as exc:
                raise StorageNotReadyError(
                    f"Unable to reach storage for bucket '{self.bucket}'"
                ) from exc
            self._ready = True

    def _create_bucket(self) -> None:
        params = {"Bucket": self.bucket}
        region = self.config.region_name
        # us-east-1 rejects an explicit location constraint
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            self.s3_client.create_bucket(**params)
        except ClientError as exc:
            if _error_code(exc) not in {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}:
                raise StorageNotReadyError(
                    f"Unable to create bucket '{self.bucket}'"
                ) from exc
        logger.info("Bucket '%s' created successfully.", self.bucket)

    def exists(self, file_name: str) -> bool:
        """Probe the object's metadata; a not-found response means False"""
        self.ensure_container()
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=file_name)
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_CODES:
                return False
            raise
        return True

    def upload(self, record: FileRecord) -> str:
        """Write the record's content and return the object's absolute URL"""
        self.ensure_container()
        self.s3_client.put_object(
            Bucket=self.bucket,
            Key=record.file_name,
            Body=record.content or b"",
            ContentType=record.content_type or "application/octet-stream",
        )
        logger.info("Uploaded '%s' to bucket '%s'", record.file_name, self.bucket)
        return self.location(record.file_name)

    def location(self, file_name: str) -> str:
        endpoint = self.s3_client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{self.bucket}/{quote(file_name)}"

    def download(self, file_name: str) -> FileRecord:
        """Read the whole object into memory"""
        self.ensure_container()
        response = self.s3_client.get_object(Bucket=self.bucket, Key=file_name)
        body = response["Body"]
        try:
            content = read_stream(body)
        finally:
            body.close()
        return FileRecord(
            file_name=file_name,
            content_type=response.get("ContentType"),
            file_length=response.get("ContentLength", len(content)),
            content=content,
        )

    def list(self) -> Iterator[FileRecord]:
        """
        Lazily yield a summary of every object in the bucket.
        Single pass; call again to enumerate again.
        """
        self.ensure_container()
        paginator = self.s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                # list_objects_v2 does not return content types
                try:
                    head = self.s3_client.head_object(Bucket=self.bucket, Key=key)
                except ClientError as exc:
                    if _error_code(exc) not in NOT_FOUND_CODES:
                        raise
                    logger.info("Skipping '%s', deleted while listing", key)
                    continue
                yield FileRecord(
                    file_name=key,
                    content_type=head.get("ContentType"),
                    file_length=obj.get("Size"),
                )

    def delete(self, file_name: str) -> bool:
        """Delete the object if present; True only when something was removed"""
        if not self.exists(file_name):
            return False
        self.s3_client.delete_object(Bucket=self.bucket, Key=file_name)
        logger.info("Deleted '%s' from bucket '%s'", file_name, self.bucket)
        return True

    def reorder(self, records: Iterable[FileRecord]) -> bool:
        # Objects carry no position attribute to reorder by
        raise NotImplementedError("Re-ordering files is not supported")
