"""Header mapper: resolves raw header cells to the name / identifier / department fields."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rollcall.core.exceptions import NoNameColumnError
from rollcall.importer.normalize import normalize_header
from rollcall.models.import_report import FieldMapping, ImportWarning, WarningCode

logger = logging.getLogger(__name__)

# Stored already normalized (case-folded, single spaces).
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": (
        "姓名", "name", "用户名", "人员姓名", "名字", "员工姓名", "full name", "participant",
    ),
    "employee_id": (
        "工号", "employeeid", "employee id", "employee_id", "id", "编号", "userid",
        "user id", "user_id", "员工编号", "员工号",
    ),
    "department": (
        "部门", "department", "dept", "事业部", "部门名称", "所属部门",
    ),
}

# Column order assumed when a three-column header matches nothing.
POSITIONAL_ORDER: tuple[str, ...] = ("employee_id", "name", "department")

HEADER_KEYWORDS: frozenset[str] = frozenset(
    alias for aliases in FIELD_ALIASES.values() for alias in aliases
)


def count_header_keywords(cells: Iterable[str]) -> int:
    """How many cells are recognized header keywords once normalized."""
    return sum(1 for cell in cells if normalize_header(cell) in HEADER_KEYWORDS)


def _match_field(field: str, normalized: list[str], headers: list[str]) -> str | None:
    aliases = FIELD_ALIASES[field]
    for raw, norm in zip(headers, normalized):
        if norm and norm in aliases:
            return raw
    return None


def map_headers(headers: list[str]) -> tuple[FieldMapping, list[ImportWarning]]:
    """Map a header row to semantic fields.

    Each field takes the first header, in file order, whose normalized form is
    one of its aliases. A three-column header with no recognizable cell falls
    back to identifier / name / department order.

    Raises:
        NoNameColumnError: no header resolved to ``name``.
    """
    normalized = [normalize_header(h) for h in headers]
    warnings: list[ImportWarning] = []

    resolved = {field: _match_field(field, normalized, headers) for field in FIELD_ALIASES}
    mapping = FieldMapping(**resolved)

    if len(headers) == 3 and not any(resolved.values()):
        mapping = FieldMapping(
            **dict(zip(POSITIONAL_ORDER, headers)), positional_fallback=True,
        )
        warnings.append(ImportWarning(
            code=WarningCode.POSITIONAL_HEADER_FALLBACK,
            message=(
                "Headers not recognized; assuming columns are identifier, name, department: "
                + ", ".join(repr(h) for h in headers)
            ),
        ))
        logger.info("Positional header fallback for %s", headers)

    if mapping.name is None:
        raise NoNameColumnError(headers)
    return mapping, warnings
