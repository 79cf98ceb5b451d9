"""Participant roster models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CandidateRecord(BaseModel):
    """A roster entry produced from one input row, not yet committed."""

    employee_id: str
    name: str
    department: Optional[str] = None
    row_number: int = 0  # 1-based, header line is row 1; 0 outside file import

    model_config = {"frozen": True}


class Participant(BaseModel):
    """A committed roster entry. ``id`` and ``created_at`` belong to the store."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    employee_id: str
    name: str
    department: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_candidate(cls, record: CandidateRecord) -> Participant:
        return cls(
            employee_id=record.employee_id,
            name=record.name,
            department=record.department,
        )


class RosterSnapshot(BaseModel):
    """Point-in-time copy of the roster handed out by a store."""

    participants: tuple[Participant, ...] = ()
    taken_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}

    @property
    def size(self) -> int:
        return len(self.participants)
