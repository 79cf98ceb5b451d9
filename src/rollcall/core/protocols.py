"""Protocol interfaces for all Rollcall abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rollcall.models.participant import CandidateRecord, Participant, RosterSnapshot


# ---------------------------------------------------------------------------
# Roster Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IRosterStore(Protocol):
    """Authoritative participant roster.

    ``append_batch`` succeeds or fails as a whole; the store assigns
    ``id`` and ``created_at``.
    """

    def snapshot(self) -> RosterSnapshot: ...

    def append_batch(self, records: list[CandidateRecord]) -> list[Participant]: ...

    def list_participants(self) -> list[Participant]: ...

    def count(self) -> int: ...

    def remove(self, participant_id: str) -> bool: ...

    def clear(self) -> int: ...

    def write_lock(self) -> AbstractContextManager[None]: ...


# ---------------------------------------------------------------------------
# File Source
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileSource(Protocol):
    """Anything that can hand over an uploaded file's bytes."""

    @property
    def name(self) -> str: ...

    @property
    def size(self) -> int | None: ...

    async def read(self) -> bytes: ...


# ---------------------------------------------------------------------------
# File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible upload storage interface."""

    def read(self, path: str) -> bytes: ...

    def size(self, path: str) -> int: ...

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str: ...
