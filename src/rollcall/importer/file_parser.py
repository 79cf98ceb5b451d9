"""Delimiter sniffing and parsing of decoded text into a header plus rows."""

from __future__ import annotations

import csv
import io
import logging

from rollcall.core.exceptions import NoHeaderRowError
from rollcall.importer.normalize import normalize_cell
from rollcall.models.import_report import ImportWarning, ParsedRow, ParsedTable, WarningCode

logger = logging.getLogger(__name__)

# Priority order; earlier entries win ties.
DELIMITER_CANDIDATES: tuple[str, ...] = (",", "\uff0c", ";", "\t", "|")

QUOTE = '"'


def count_outside_quotes(line: str, delimiter: str) -> int:
    """Count ``delimiter`` occurrences that are not inside a quoted field.

    A doubled quote inside a quoted field is an escaped literal quote.
    """
    count = 0
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < len(line) and line[i + 1] == QUOTE:
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            count += 1
        i += 1
    return count


def sniff_delimiter(text: str, max_lines: int = 5) -> str:
    """Pick the candidate delimiter seen most often in the first non-empty lines."""
    sample = [line for line in text.splitlines() if line.strip()][:max_lines]
    best = DELIMITER_CANDIDATES[0]
    best_count = -1
    for candidate in DELIMITER_CANDIDATES:
        total = sum(count_outside_quotes(line, candidate) for line in sample)
        if total > best_count:
            best, best_count = candidate, total
    return best


def _is_blank(record: list[str]) -> bool:
    return not any(normalize_cell(cell) for cell in record)


def parse_table(text: str, delimiter: str) -> tuple[ParsedTable, list[ImportWarning]]:
    """Split decoded text into the header row and data rows.

    Row numbers are 1-based with the header as row 1. Blank records are
    skipped but still counted. Cells beyond the header width are dropped; a
    repeated header keeps its first column.

    Raises:
        NoHeaderRowError: the text holds no non-blank record.
    """
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, quotechar=QUOTE)
    records = enumerate(reader, start=1)
    warnings: list[ImportWarning] = []

    headers: list[str] | None = None
    header_number = 0
    for number, record in records:
        if not _is_blank(record):
            headers = [normalize_cell(cell) for cell in record]
            header_number = number
            break
    if headers is None:
        raise NoHeaderRowError("File has no header row")

    seen: set[str] = set()
    repeated: list[str] = []
    for header in headers:
        if header and header in seen:
            repeated.append(header)
        seen.add(header)
    if repeated:
        warnings.append(ImportWarning(
            code=WarningCode.DUPLICATE_HEADER,
            message="Repeated headers use their first column: " + ", ".join(repr(h) for h in repeated),
        ))

    rows: list[ParsedRow] = []
    for number, record in records:
        if _is_blank(record):
            continue
        cells: dict[str, str] = {}
        for header, cell in zip(headers, record):
            cells.setdefault(header, cell)
        rows.append(ParsedRow(row_number=number - header_number + 1, cells=cells))

    logger.debug("Parsed %d rows with delimiter %r", len(rows), delimiter)
    return ParsedTable(headers=headers, rows=rows, delimiter=delimiter), warnings
