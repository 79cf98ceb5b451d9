"""Integration test fixtures: LocalStack S3 and a live Redis."""

from __future__ import annotations

import os
import uuid

import boto3
import pytest
import redis

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REDIS_HOST = os.environ.get("ROLLCALL_REDIS_HOST", "localhost")
BUCKET = "rollcall-imports-inttest"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("s3", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_buckets()
        return True
    except Exception:
        return False


def _redis_available() -> bool:
    try:
        return bool(redis.Redis(host=REDIS_HOST, socket_connect_timeout=1).ping())
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)

skip_no_redis = pytest.mark.skipif(
    not _redis_available(),
    reason="Redis not available",
)


@pytest.fixture(scope="session")
def localstack_s3():
    """S3 client pointing at LocalStack, with the test bucket created."""
    client = boto3.client("s3", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
    client.create_bucket(Bucket=BUCKET)
    return client


@pytest.fixture
def redis_prefix():
    """Unique key prefix per test; keys are deleted afterwards."""
    prefix = f"rollcall:inttest:{uuid.uuid4().hex}"
    yield prefix
    client = redis.Redis(host=REDIS_HOST)
    for key in client.scan_iter(f"{prefix}:*"):
        client.delete(key)
