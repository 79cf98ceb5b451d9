"""In-memory backends for unit tests and single-process use."""

from __future__ import annotations

import threading
from contextlib import AbstractContextManager

from rollcall.core.exceptions import FileStoreError
from rollcall.models.participant import CandidateRecord, Participant, RosterSnapshot


class MemoryRosterStore:
    """List-backed IRosterStore."""

    def __init__(self, participants: list[Participant] | None = None) -> None:
        self._participants: list[Participant] = list(participants or [])
        self._lock = threading.RLock()
        self.append_calls = 0

    def snapshot(self) -> RosterSnapshot:
        return RosterSnapshot(participants=tuple(self._participants))

    def append_batch(self, records: list[CandidateRecord]) -> list[Participant]:
        created = [Participant.from_candidate(r) for r in records]
        self._participants.extend(created)
        self.append_calls += 1
        return created

    def list_participants(self) -> list[Participant]:
        return list(self._participants)

    def count(self) -> int:
        return len(self._participants)

    def remove(self, participant_id: str) -> bool:
        before = len(self._participants)
        self._participants = [p for p in self._participants if p.id != participant_id]
        return len(self._participants) < before

    def clear(self) -> int:
        removed = len(self._participants)
        self._participants = []
        return removed

    def write_lock(self) -> AbstractContextManager[None]:
        return self._lock  # type: ignore[return-value]


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def read(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError as exc:
            raise FileStoreError(f"No stored file at {path!r}") from exc

    def size(self, path: str) -> int:
        return len(self.read(path))

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self._files[path] = data
        return path
