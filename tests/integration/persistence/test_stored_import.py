"""Integration tests: import from LocalStack S3 into a live Redis roster."""

from __future__ import annotations

import asyncio

from rollcall.core.config import AppSettings
from rollcall.importer.coordinator import ImportCoordinator
from rollcall.importer.sources import StoredFile
from rollcall.models.import_report import ImportOutcome
from rollcall.persistence.redis_backend import RedisRosterStore
from rollcall.persistence.s3_backend import S3FileStore

from tests.integration.conftest import BUCKET, LOCALSTACK_URL, REDIS_HOST, skip_no_localstack, skip_no_redis

ROSTER = "工号,姓名,部门\n001,张三,技术部\n002,李四,销售部\n,王五,人事部\n"


@skip_no_localstack
@skip_no_redis
class TestStoredImport:
    def test_gbk_upload_lands_in_redis(self, localstack_s3, redis_prefix):
        files = S3FileStore(bucket=BUCKET, region="us-east-1", endpoint_url=LOCALSTACK_URL)
        files.write("uploads/roster.csv", ROSTER.encode("gbk"), content_type="text/csv")
        store = RedisRosterStore(host=REDIS_HOST, key_prefix=redis_prefix)
        coordinator = ImportCoordinator(settings=AppSettings(), store=store)

        report = asyncio.run(coordinator.import_file(StoredFile(files, "uploads/roster.csv")))

        assert report.outcome == ImportOutcome.SUCCESS
        assert report.encoding == "gbk"
        assert [p.employee_id for p in store.list_participants()] == ["001", "002", "003"]

    def test_reimport_is_idempotent(self, localstack_s3, redis_prefix):
        files = S3FileStore(bucket=BUCKET, region="us-east-1", endpoint_url=LOCALSTACK_URL)
        files.write("uploads/again.csv", ROSTER.encode("utf-8"))
        store = RedisRosterStore(host=REDIS_HOST, key_prefix=redis_prefix)
        coordinator = ImportCoordinator(settings=AppSettings(), store=store)

        asyncio.run(coordinator.import_file(StoredFile(files, "uploads/again.csv")))
        report = asyncio.run(coordinator.import_file(StoredFile(files, "uploads/again.csv")))

        assert report.outcome == ImportOutcome.NO_NEW_DATA
        assert store.count() == 3
