"""Encoding resolver: turns an uploaded byte buffer into text.

A byte-order mark wins outright. Otherwise every candidate in
``ENCODING_CANDIDATES`` decodes the buffer strictly; a candidate that hits a
decode error is dropped, and the best score among the rest is kept. Earlier
candidates win ties. When no candidate decodes the buffer it is rejected as
unrecognized.

Score = 1000 per recognized header cell on the first line
      + sampled length
      - 10 per replacement character
      - 50 per NUL character

The keyword bonus is counted per header cell on the first line rather than
as a flat 1000 for any alias found anywhere in the sample. Short ASCII aliases
such as "id" or "name" turn up inside wrong-encoding decodings of the body,
while a decoding that splits the header into recognized cells is almost
always the right one.

Header recognition only knows the alias vocabulary in ``schema_matcher``. A
file whose headers are outside it is ranked on character noise alone, which
cannot tell apart two encodings that both decode cleanly (GBK vs. UTF-8 on
short text, for instance). Such results carry ``EncodingConfidence.HEURISTIC``.
"""

from __future__ import annotations

import codecs
import logging
import re

from rollcall.core.exceptions import EmptyFileError, UnrecognizedEncodingError
from rollcall.importer.schema_matcher import count_header_keywords
from rollcall.models.import_report import DecodedText, EncodingConfidence

logger = logging.getLogger(__name__)

BOM_TABLE: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

ENCODING_CANDIDATES: tuple[str, ...] = (
    "utf-8",
    "gbk",
    "gb2312",
    "big5",
    "utf-16-le",
    "utf-16-be",
)

KEYWORD_BONUS = 1000
REPLACEMENT_PENALTY = 10
NUL_PENALTY = 50

_REPLACEMENT = "\ufffd"
_HEADER_SPLIT = re.compile("[,\uff0c;\t|]")


def _has_content(text: str) -> bool:
    return bool(text.replace("\x00", "").strip())


def _first_line(sample: str) -> str:
    for line in sample.splitlines():
        if line.strip():
            return line
    return ""


def header_keyword_hits(sample: str) -> int:
    return count_header_keywords(_HEADER_SPLIT.split(_first_line(sample)))


def score_text(text: str, sample_chars: int = 4096) -> tuple[int, int]:
    """Return ``(score, header_hits)`` for one decoding of the buffer."""
    sample = text[:sample_chars]
    hits = header_keyword_hits(sample)
    score = (
        KEYWORD_BONUS * hits
        + len(sample)
        - REPLACEMENT_PENALTY * sample.count(_REPLACEMENT)
        - NUL_PENALTY * sample.count("\x00")
    )
    return score, hits


def _sniff_bom(raw: bytes) -> DecodedText | None:
    for bom, label in BOM_TABLE:
        if not raw.startswith(bom):
            continue
        text = raw[len(bom):].decode(label, errors="replace")
        if not _has_content(text):
            raise EmptyFileError("File contains only a byte-order mark")
        return DecodedText(text=text, encoding=label, confidence=EncodingConfidence.EXPLICIT)
    return None


def resolve_encoding(raw: bytes, sample_chars: int = 4096) -> DecodedText:
    """Decode ``raw`` with the best-scoring candidate encoding.

    Raises:
        EmptyFileError: nothing but whitespace under every candidate.
        UnrecognizedEncodingError: no candidate could decode the buffer.
    """
    if not raw.strip():
        raise EmptyFileError("File is empty")

    explicit = _sniff_bom(raw)
    if explicit is not None:
        return explicit

    best: DecodedText | None = None
    best_hits = 0
    saw_blank = False
    for label in ENCODING_CANDIDATES:
        try:
            text = raw.decode(label)
        except UnicodeDecodeError as exc:
            logger.debug("Encoding candidate %s rejected at byte %d", label, exc.start)
            continue
        except LookupError:
            logger.warning("Codec %s unavailable, skipping", label)
            continue
        if not _has_content(text):
            saw_blank = True
            continue
        score, hits = score_text(text, sample_chars)
        logger.debug("Encoding candidate %s scored %d (header hits=%d)", label, score, hits)
        if best is None or score > best.score:
            best = DecodedText(
                text=text,
                encoding=label,
                confidence=EncodingConfidence.HEURISTIC,
                score=score,
            )
            best_hits = hits

    if best is None:
        if saw_blank:
            raise EmptyFileError("File contains no text")
        raise UnrecognizedEncodingError("Could not determine the file's text encoding")

    if best_hits:
        best = best.model_copy(update={"confidence": EncodingConfidence.KEYWORD})
    return best
