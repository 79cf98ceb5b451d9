"""String normalization shared by header matching and duplicate detection.

Comparison keys are folded; stored values are only trimmed.
"""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_FULL_WIDTH_SPACE = "\u3000"
_NBSP = "\u00a0"
_BOM = "\ufeff"
_HEADER_QUOTES = "\"'\u201c\u201d\u2018\u2019"


def normalize_cell(value: str | None) -> str:
    """Trim a cell for storage, including non-breaking and full-width spaces."""
    if value is None:
        return ""
    return str(value).replace(_BOM, "").strip()


def normalize_key(value: str | None) -> str:
    """Comparison key: spaces folded, trimmed, whitespace collapsed, case-folded."""
    if value is None:
        return ""
    folded = str(value).replace(_FULL_WIDTH_SPACE, " ").replace(_NBSP, " ")
    return _WHITESPACE_RUN.sub(" ", folded.strip()).casefold()


def normalize_header(value: str | None) -> str:
    if value is None:
        return ""
    cleaned = str(value).lstrip(_BOM).strip().strip(_HEADER_QUOTES)
    return normalize_key(cleaned)
