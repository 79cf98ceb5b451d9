"""ImportCoordinator: file import, single add and bulk range generation.

File import runs encoding -> delimiter -> parse -> header mapping ->
row validation, then commits the accepted rows with one ``append_batch``.
Any stage failure aborts before the roster store is contacted.

Every mutating call holds the store's ``write_lock()`` from snapshot to
append, so two imports can never validate against the same stale snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import PurePath

from rollcall.core.exceptions import (
    FatalCode,
    FileTooLargeError,
    ImportAbortedError,
    InvalidRangeError,
    RosterStoreError,
    UnsupportedExtensionError,
)
from rollcall.core.protocols import IFileSource
from rollcall.importer.base import BaseService
from rollcall.importer.deduplicator import (
    ExistingIndex,
    IdentifierSynthesizer,
    WorkingIndex,
    format_identifier,
    validate_rows,
)
from rollcall.importer.encoding import resolve_encoding
from rollcall.importer.file_parser import parse_table, sniff_delimiter
from rollcall.importer.normalize import normalize_cell
from rollcall.importer.schema_matcher import map_headers
from rollcall.models.import_report import (
    AddResult,
    Collision,
    EncodingConfidence,
    FatalError,
    ImportReport,
    ImportWarning,
    RangeResult,
    RejectionReason,
    WarningCode,
)
from rollcall.models.participant import CandidateRecord

logger = logging.getLogger(__name__)


class ImportCoordinator(BaseService):
    """Entry point for every roster mutation that needs duplicate checking."""

    # ---- file import ----

    def precheck(self, file_name: str, size: int | None) -> None:
        """Reject by extension and size before any bytes are decoded."""
        cfg = self._settings.importer
        allowed = [ext.lower() for ext in cfg.allowed_extensions]
        if PurePath(file_name or "").suffix.lower() not in allowed:
            raise UnsupportedExtensionError(file_name, allowed)
        if size is not None and size > cfg.max_file_bytes:
            raise FileTooLargeError(size, cfg.max_file_bytes)

    async def import_file(self, source: IFileSource) -> ImportReport:
        """Read ``source`` and import it. Always returns a report.

        Size lookup, decoding and the store round trips run in a worker
        thread so a slow store never stalls the event loop.
        """
        name = source.name or ""
        try:
            await asyncio.to_thread(self._precheck_source, source)
        except ImportAbortedError as exc:
            return self._aborted(ImportReport(file_name=name), exc)
        raw = await source.read()
        return await asyncio.to_thread(self.import_bytes, name, raw)

    def _precheck_source(self, source: IFileSource) -> None:
        self.precheck(source.name or "", source.size)

    def import_bytes(self, file_name: str, raw: bytes) -> ImportReport:
        cfg = self._settings.importer
        report = ImportReport(file_name=file_name)
        try:
            self.precheck(file_name, len(raw))

            decoded = resolve_encoding(raw, cfg.encoding_sample_chars)
            report.encoding = decoded.encoding
            report.encoding_confidence = decoded.confidence
            if decoded.confidence == EncodingConfidence.HEURISTIC:
                report.warnings.append(ImportWarning(
                    code=WarningCode.ENCODING_GUESSED,
                    message=f"No known header found; encoding {decoded.encoding} is a best guess",
                ))

            report.delimiter = sniff_delimiter(decoded.text, cfg.sniff_lines)
            table, parse_warnings = parse_table(decoded.text, report.delimiter)
            report.warnings.extend(parse_warnings)

            mapping, mapping_warnings = map_headers(table.headers)
            report.warnings.extend(mapping_warnings)
        except ImportAbortedError as exc:
            return self._aborted(report, exc)

        if not table.rows:
            report.warnings.append(ImportWarning(
                code=WarningCode.NO_DATA_ROWS, message="File has a header but no data rows",
            ))

        try:
            with self._store.write_lock():
                existing = ExistingIndex.from_snapshot(self._store.snapshot())
                result = validate_rows(
                    table.rows, mapping, existing,
                    counter_start=existing.size + 1, id_width=cfg.id_width,
                )
                report.duplicates = result.duplicates
                report.invalid_rows = result.invalid_rows
                if result.accepted:
                    try:
                        self._store.append_batch(result.accepted)
                    except RosterStoreError as exc:
                        logger.exception("Roster append failed for %s", file_name)
                        report.fatal = FatalError(code=FatalCode.STORE_WRITE_FAILED, message=str(exc))
                        return report
                report.accepted = result.accepted
        except RosterStoreError as exc:
            logger.exception("Roster unavailable while importing %s", file_name)
            report.fatal = FatalError(code=FatalCode.STORE_UNAVAILABLE, message=str(exc))
            return report

        logger.info(
            "Imported %s: outcome=%s accepted=%d duplicates=%d invalid=%d encoding=%s delimiter=%r",
            file_name, report.outcome, report.accepted_count, len(report.duplicates),
            len(report.invalid_rows), report.encoding, report.delimiter,
        )
        return report

    def _aborted(self, report: ImportReport, exc: ImportAbortedError) -> ImportReport:
        logger.warning("Import of %s aborted (%s): %s", report.file_name, exc.code, exc)
        report.fatal = FatalError(code=exc.code, message=str(exc))
        return report

    # ---- single record ----

    def add_participant(
        self, employee_id: str | None, name: str | None, department: str | None = None,
    ) -> AddResult:
        """Add one participant unless its identifier or name is already taken."""
        name = normalize_cell(name)
        if not name:
            return AddResult(rejection=Collision(reason=RejectionReason.BLANK_NAME, value=""))

        with self._store.write_lock():
            existing = ExistingIndex.from_snapshot(self._store.snapshot())
            index = WorkingIndex(existing)
            employee_id = normalize_cell(employee_id) or IdentifierSynthesizer(
                index, existing.size + 1, self._settings.importer.id_width,
            ).next()

            collision = index.collision(employee_id, name)
            if collision is not None:
                logger.info(
                    "Rejected %s/%s: %s held by %s", employee_id, name, collision.reason,
                    collision.holder.name if collision.holder else "?",
                )
                return AddResult(rejection=collision)

            created = self._store.append_batch([CandidateRecord(
                employee_id=employee_id, name=name, department=normalize_cell(department) or None,
            )])
        return AddResult(participant=created[0])

    # ---- numeric range ----

    def generate_range(self, start: int, end: int, prefix: str | None = None) -> RangeResult:
        """Create participants numbered ``start``..``end`` inclusive, all or nothing.

        Raises:
            InvalidRangeError: negative bounds, start after end, or too wide.
        """
        cfg = self._settings.generator
        if start < 0 or end < 0:
            raise InvalidRangeError(start, end, "numbers must not be negative")
        if start > end:
            raise InvalidRangeError(start, end, "start is after end")
        if end - start + 1 > cfg.max_span:
            raise InvalidRangeError(start, end, f"at most {cfg.max_span} participants per block")

        prefix = cfg.default_prefix if prefix is None else normalize_cell(prefix)
        width = self._settings.importer.id_width
        candidates = [
            CandidateRecord(employee_id=format_identifier(n, width), name=f"{prefix}{n}")
            for n in range(start, end + 1)
        ]

        with self._store.write_lock():
            index = WorkingIndex(ExistingIndex.from_snapshot(self._store.snapshot()))
            for candidate in candidates:
                collision = index.collision(candidate.employee_id, candidate.name)
                if collision is not None:
                    logger.info("Range %d-%d rejected on %r", start, end, collision.value)
                    return RangeResult(start=start, end=end, conflict=collision)
                index.add(candidate.employee_id, candidate.name)
            created = self._store.append_batch(candidates)

        logger.info("Generated %d participants for range %d-%d", len(created), start, end)
        return RangeResult(start=start, end=end, created=created)
