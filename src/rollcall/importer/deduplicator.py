"""Row validation, identifier synthesis and duplicate rejection.

Everything here is a pure function of (rows, mapping, snapshot index); the
roster store is never touched.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from rollcall.importer.normalize import normalize_cell, normalize_key
from rollcall.models.import_report import (
    Collision,
    DuplicateEntry,
    FieldMapping,
    ParsedRow,
    RejectionReason,
)
from rollcall.models.participant import CandidateRecord, Participant, RosterSnapshot

logger = logging.getLogger(__name__)


class ExistingIndex(BaseModel):
    """Normalized identifiers and names present in the roster when the call started."""

    identifiers: dict[str, Participant] = Field(default_factory=dict)
    names: dict[str, Participant] = Field(default_factory=dict)
    size: int = 0

    model_config = {"frozen": True}

    @classmethod
    def from_snapshot(cls, snapshot: RosterSnapshot) -> ExistingIndex:
        identifiers: dict[str, Participant] = {}
        names: dict[str, Participant] = {}
        for participant in snapshot.participants:
            identifiers.setdefault(normalize_key(participant.employee_id), participant)
            names.setdefault(normalize_key(participant.name), participant)
        return cls(identifiers=identifiers, names=names, size=snapshot.size)


class WorkingIndex:
    """Mutable copy of an ExistingIndex that grows as candidates are accepted."""

    def __init__(self, existing: ExistingIndex) -> None:
        self._existing = existing
        self._identifiers: set[str] = set(existing.identifiers)
        self._names: set[str] = set(existing.names)
        self._reserved: set[str] = set()

    def collision(self, employee_id: str, name: str) -> Collision | None:
        """Identifier is checked before name; the first hit wins."""
        id_key = normalize_key(employee_id)
        if id_key in self._identifiers:
            return Collision(
                reason=RejectionReason.IDENTIFIER_COLLISION,
                value=employee_id,
                holder=self._existing.identifiers.get(id_key),
            )
        name_key = normalize_key(name)
        if name_key in self._names:
            return Collision(
                reason=RejectionReason.NAME_COLLISION,
                value=name,
                holder=self._existing.names.get(name_key),
            )
        return None

    def add(self, employee_id: str, name: str) -> None:
        self._identifiers.add(normalize_key(employee_id))
        self._names.add(normalize_key(name))

    def is_identifier_free(self, employee_id: str) -> bool:
        key = normalize_key(employee_id)
        return key not in self._identifiers and key not in self._reserved

    def reserve(self, employee_id: str) -> None:
        self._reserved.add(normalize_key(employee_id))


def format_identifier(number: int, width: int) -> str:
    return str(number).zfill(width)


class IdentifierSynthesizer:
    """Zero-padded sequential identifiers that skip anything already taken."""

    def __init__(self, index: WorkingIndex, start: int, width: int = 3) -> None:
        self._index = index
        self._counter = start
        self._width = width

    def next(self) -> str:
        while True:
            candidate = format_identifier(self._counter, self._width)
            self._counter += 1
            if self._index.is_identifier_free(candidate):
                self._index.reserve(candidate)
                return candidate


class ValidationResult(BaseModel):
    accepted: list[CandidateRecord] = Field(default_factory=list)
    duplicates: list[DuplicateEntry] = Field(default_factory=list)
    invalid_rows: list[int] = Field(default_factory=list)


def _cell(row: ParsedRow, header: str | None) -> str:
    if header is None:
        return ""
    return normalize_cell(row.cells.get(header, ""))


def validate_rows(
    rows: list[ParsedRow],
    mapping: FieldMapping,
    existing: ExistingIndex,
    counter_start: int | None = None,
    id_width: int = 3,
) -> ValidationResult:
    """Walk rows in order, accepting each one that is valid and new.

    Rows must be processed sequentially: an accepted row is added to the
    working index before the next row is checked, so later duplicates within
    the same file are caught.
    """
    index = WorkingIndex(existing)
    start = counter_start if counter_start is not None else existing.size + 1
    synthesizer = IdentifierSynthesizer(index, start, id_width)
    result = ValidationResult()

    for row in rows:
        name = _cell(row, mapping.name)
        if not name:
            result.invalid_rows.append(row.row_number)
            continue

        employee_id = _cell(row, mapping.employee_id) or synthesizer.next()
        department = _cell(row, mapping.department) or None

        collision = index.collision(employee_id, name)
        if collision is not None:
            logger.debug("Row %d rejected: %s %r", row.row_number, collision.reason, collision.value)
            result.duplicates.append(DuplicateEntry(
                row_number=row.row_number, reason=collision.reason, value=collision.value,
            ))
            continue

        index.add(employee_id, name)
        result.accepted.append(CandidateRecord(
            employee_id=employee_id,
            name=name,
            department=department,
            row_number=row.row_number,
        ))

    return result
