"""Redis roster backend implementing IRosterStore.

Participants live in a hash (id -> JSON) with a list holding insertion order.
Batches are written in one MULTI/EXEC transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis
from redis.exceptions import LockError

from rollcall.core.exceptions import RosterStoreError
from rollcall.models.participant import CandidateRecord, Participant, RosterSnapshot

logger = logging.getLogger(__name__)


class RedisRosterStore:
    """Production IRosterStore backed by Redis."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "rollcall:roster", lock_timeout: int = 60) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._hash_key = f"{key_prefix}:participants"
        self._order_key = f"{key_prefix}:order"
        self._lock_key = f"{key_prefix}:lock"
        self._lock_timeout = lock_timeout
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def list_participants(self) -> list[Participant]:
        try:
            ids = self._client.lrange(self._order_key, 0, -1)
            if not ids:
                return []
            payloads = self._client.hmget(self._hash_key, ids)
            return [Participant.model_validate_json(p) for p in payloads if p]
        except Exception as exc:
            raise RosterStoreError(f"Redis roster read failed: {exc}") from exc

    def snapshot(self) -> RosterSnapshot:
        return RosterSnapshot(participants=tuple(self.list_participants()))

    def append_batch(self, records: list[CandidateRecord]) -> list[Participant]:
        created = [Participant.from_candidate(r) for r in records]
        if not created:
            return []
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.hset(self._hash_key, mapping={p.id: p.model_dump_json() for p in created})
            pipe.rpush(self._order_key, *[p.id for p in created])
            pipe.execute()
        except Exception as exc:
            raise RosterStoreError(f"Redis roster append of {len(created)} failed: {exc}") from exc
        return created

    def count(self) -> int:
        try:
            return int(self._client.hlen(self._hash_key))
        except Exception as exc:
            raise RosterStoreError(f"Redis roster count failed: {exc}") from exc

    def remove(self, participant_id: str) -> bool:
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.hdel(self._hash_key, participant_id)
            pipe.lrem(self._order_key, 0, participant_id)
            removed, _ = pipe.execute()
        except Exception as exc:
            raise RosterStoreError(f"Redis roster remove failed for id={participant_id!r}: {exc}") from exc
        return bool(removed)

    def clear(self) -> int:
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.hlen(self._hash_key)
            pipe.delete(self._hash_key, self._order_key)
            removed, _ = pipe.execute()
        except Exception as exc:
            raise RosterStoreError(f"Redis roster clear failed: {exc}") from exc
        return int(removed)

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        """Cross-process writer lock; one import at a time per roster."""
        lock = self._client.lock(
            self._lock_key, timeout=self._lock_timeout, blocking_timeout=self._lock_timeout,
        )
        try:
            acquired = lock.acquire()
        except Exception as exc:
            raise RosterStoreError(f"Redis roster lock failed: {exc}") from exc
        if not acquired:
            raise RosterStoreError(f"Timed out after {self._lock_timeout}s waiting for roster lock")
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                logger.warning("Roster lock %s expired before release", self._lock_key)
