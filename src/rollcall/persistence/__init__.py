"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from rollcall.core.config import AppSettings
from rollcall.persistence.memory_backend import MemoryRosterStore
from rollcall.persistence.redis_backend import RedisRosterStore
from rollcall.persistence.s3_backend import S3FileStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (roster_store, file_store).
    """
    if settings is None:
        settings = AppSettings()

    if settings.roster_backend == "redis":
        roster_store = RedisRosterStore(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            key_prefix=settings.redis.key_prefix,
            lock_timeout=settings.redis.lock_timeout,
        )
    else:
        roster_store = MemoryRosterStore()

    file_store = S3FileStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    return roster_store, file_store
