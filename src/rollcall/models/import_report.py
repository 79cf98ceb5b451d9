"""Import pipeline intermediate structures and the final report."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

from rollcall.core.exceptions import FatalCode
from rollcall.models.participant import CandidateRecord, Participant


class EncodingConfidence(StrEnum):
    EXPLICIT = "explicit"  # byte-order mark
    KEYWORD = "keyword"  # a header keyword was recognized
    HEURISTIC = "heuristic"  # character-noise scoring only


class RejectionReason(StrEnum):
    BLANK_NAME = "blank_name"
    IDENTIFIER_COLLISION = "identifier_collision"
    NAME_COLLISION = "name_collision"


class WarningCode(StrEnum):
    POSITIONAL_HEADER_FALLBACK = "positional_header_fallback"
    ENCODING_GUESSED = "encoding_guessed"
    NO_DATA_ROWS = "no_data_rows"
    DUPLICATE_HEADER = "duplicate_header"


class ImportOutcome(StrEnum):
    SUCCESS = "success"
    PARTIAL = "partial"
    NO_NEW_DATA = "no_new_data"
    FATAL = "fatal"


class DecodedText(BaseModel):
    text: str
    encoding: str
    confidence: EncodingConfidence
    score: int = 0


class ParsedRow(BaseModel):
    row_number: int
    cells: dict[str, str] = Field(default_factory=dict)


class ParsedTable(BaseModel):
    headers: list[str]
    rows: list[ParsedRow] = Field(default_factory=list)
    delimiter: str = ","


class FieldMapping(BaseModel):
    """Raw header chosen for each semantic field; ``None`` when unmapped."""

    name: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[str] = None
    positional_fallback: bool = False


class ImportWarning(BaseModel):
    code: WarningCode
    message: str


class DuplicateEntry(BaseModel):
    row_number: int
    reason: RejectionReason
    value: str


class FatalError(BaseModel):
    code: FatalCode
    message: str


class ImportReport(BaseModel):
    """Everything the report consumer needs to render one import."""

    file_name: str = ""
    accepted: list[CandidateRecord] = Field(default_factory=list)
    duplicates: list[DuplicateEntry] = Field(default_factory=list)
    invalid_rows: list[int] = Field(default_factory=list)
    warnings: list[ImportWarning] = Field(default_factory=list)
    fatal: Optional[FatalError] = None
    encoding: Optional[str] = None
    encoding_confidence: Optional[EncodingConfidence] = None
    delimiter: Optional[str] = None

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def outcome(self) -> ImportOutcome:
        if self.fatal is not None:
            return ImportOutcome.FATAL
        if not self.accepted:
            return ImportOutcome.NO_NEW_DATA
        if self.duplicates or self.invalid_rows:
            return ImportOutcome.PARTIAL
        return ImportOutcome.SUCCESS

    def summary(self, sample_size: int = 10) -> dict[str, Any]:
        """Countable categories with a capped sample of offending values."""
        if self.fatal is not None:
            return {
                "outcome": self.outcome.value,
                "error": {"code": self.fatal.code.value, "message": self.fatal.message},
            }
        id_dupes = [d for d in self.duplicates if d.reason == RejectionReason.IDENTIFIER_COLLISION]
        name_dupes = [d for d in self.duplicates if d.reason == RejectionReason.NAME_COLLISION]
        return {
            "outcome": self.outcome.value,
            "accepted": self.accepted_count,
            "duplicates": {
                "count": len(self.duplicates),
                "identifier_collisions": len(id_dupes),
                "name_collisions": len(name_dupes),
                "sample": [d.value for d in self.duplicates[:sample_size]],
            },
            "invalid": {
                "count": len(self.invalid_rows),
                "sample_rows": self.invalid_rows[:sample_size],
            },
            "warnings": [w.message for w in self.warnings],
            "encoding": self.encoding,
            "delimiter": self.delimiter,
        }


class Collision(BaseModel):
    """Which field of a candidate clashed, and the participant already holding it."""

    reason: RejectionReason
    value: str
    holder: Optional[Participant] = None


class AddResult(BaseModel):
    participant: Optional[Participant] = None
    rejection: Optional[Collision] = None

    @property
    def accepted(self) -> bool:
        return self.participant is not None


class RangeResult(BaseModel):
    start: int
    end: int
    created: list[Participant] = Field(default_factory=list)
    conflict: Optional[Collision] = None

    @property
    def accepted(self) -> bool:
        return self.conflict is None
