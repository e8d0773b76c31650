import pytest
from fastapi.testclient import TestClient
from botocore.exceptions import ClientError, NoCredentialsError

from api.files.storage import StorageGateway
from core.config import StorageConfig, get_storage_config
from core.deps import get_storage_gateway
from main import app

TEST_BUCKET = "test-bucket"
TEST_ENDPOINT = "http://storage.test"


class MockStreamingBody:
    """Mock botocore StreamingBody"""

    def __init__(self, content: bytes):
        self.content = content
        self.position = 0
        self.closed = False

    def read(self, amt=None):
        if amt is None:
            amt = len(self.content) - self.position
        chunk = self.content[self.position:self.position + amt]
        self.position += len(chunk)
        return chunk

    def close(self):
        self.closed = True


class MockS3Paginator:
    """Mock S3 paginator for list_objects_v2"""

    def __init__(self, client, page_size: int):
        self.client = client
        self.page_size = page_size

    def paginate(self, Bucket: str, **kwargs):
        """Yield pages of object summaries, page_size keys at a time"""
        self.client.check_error("ListObjectsV2")
        keys = sorted(self.client.buckets[Bucket])
        for start in range(0, max(len(keys), 1), self.page_size):
            page = {}
            contents = [
                {"Key": key, "Size": len(self.client.buckets[Bucket][key]["Body"])}
                for key in keys[start:start + self.page_size]
            ]
            if contents:
                page["Contents"] = contents
            yield page


class MockS3Meta:
    endpoint_url = TEST_ENDPOINT


class MockS3Client:
    """Mock S3 client for testing"""

    def __init__(self, page_size: int = 1000):
        self.buckets = {}  # {bucket_name: {key: {"Body": bytes, "ContentType": str}}}
        self.error_mode = None  # For simulating errors
        self.page_size = page_size
        self.calls = []
        self.meta = MockS3Meta()

    def simulate_error(self, error_type: str | None):
        """
        Configure client to raise specific errors

        Args:
            error_type: One of "AccessDenied", "NoCredentialsError", or None to clear
        """
        self.error_mode = error_type

    def check_error(self, operation: str):
        if self.error_mode == "AccessDenied":
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
                operation,
            )
        if self.error_mode == "NoCredentialsError":
            raise NoCredentialsError()

    def put_test_object(self, bucket: str, key: str, body: bytes, content_type: str):
        """Store an object directly, bypassing the error mode"""
        self.buckets.setdefault(bucket, {})[key] = {
            "Body": body,
            "ContentType": content_type,
        }

    def _not_found(self, operation: str, code: str = "404"):
        return ClientError({"Error": {"Code": code, "Message": "Not Found"}}, operation)

    def head_bucket(self, Bucket: str):
        self.calls.append(("head_bucket", Bucket))
        self.check_error("HeadBucket")
        if Bucket not in self.buckets:
            raise self._not_found("HeadBucket")
        return {}

    def create_bucket(self, Bucket: str, **kwargs):
        self.calls.append(("create_bucket", Bucket))
        self.check_error("CreateBucket")
        self.buckets.setdefault(Bucket, {})
        return {"Location": f"/{Bucket}"}

    def head_object(self, Bucket: str, Key: str):
        self.calls.append(("head_object", Key))
        self.check_error("HeadObject")
        obj = self.buckets.get(Bucket, {}).get(Key)
        if obj is None:
            raise self._not_found("HeadObject")
        return {"ContentType": obj["ContentType"], "ContentLength": len(obj["Body"])}

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str):
        self.calls.append(("put_object", Key))
        self.check_error("PutObject")
        self.put_test_object(Bucket, Key, Body, ContentType)
        return {"ETag": '"etag"'}

    def get_object(self, Bucket: str, Key: str):
        self.calls.append(("get_object", Key))
        self.check_error("GetObject")
        obj = self.buckets.get(Bucket, {}).get(Key)
        if obj is None:
            raise self._not_found("GetObject", code="NoSuchKey")
        return {
            "Body": MockStreamingBody(obj["Body"]),
            "ContentType": obj["ContentType"],
            "ContentLength": len(obj["Body"]),
        }

    def delete_object(self, Bucket: str, Key: str):
        self.calls.append(("delete_object", Key))
        self.check_error("DeleteObject")
        # S3 reports success whether or not the key existed
        self.buckets.get(Bucket, {}).pop(Key, None)
        return {}

    def get_paginator(self, operation: str):
        """Return a mock paginator"""
        if operation == "list_objects_v2":
            return MockS3Paginator(self, self.page_size)
        raise NotImplementedError(f"Paginator for {operation} not implemented")


@pytest.fixture(name="storage_config")
def storage_config_fixture():
    """Storage config matching the service defaults: 5 MiB, PDF only"""
    return StorageConfig(
        max_file_size_allowed=5242880,
        supported_types=frozenset({"application/pdf"}),
        container_name=TEST_BUCKET,
    )


@pytest.fixture(name="mock_s3_client")
def mock_s3_client_fixture():
    """Provide a mock S3 client for testing"""
    return MockS3Client()


@pytest.fixture(name="gateway")
def gateway_fixture(mock_s3_client: MockS3Client, storage_config: StorageConfig):
    """Storage gateway backed by the mock S3 client"""
    return StorageGateway(mock_s3_client, storage_config)


@pytest.fixture(name="client")
def client_fixture(gateway: StorageGateway, storage_config: StorageConfig):
    def get_storage_gateway_override():
        return gateway

    def get_storage_config_override():
        return storage_config

    app.dependency_overrides[get_storage_gateway] = get_storage_gateway_override
    app.dependency_overrides[get_storage_config] = get_storage_config_override

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
