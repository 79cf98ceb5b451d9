"""Downloadable roster template."""

from __future__ import annotations

import codecs

TEMPLATE_FILE_NAME = "参与者模板.csv"
TEMPLATE_HEADER = ("工号", "姓名", "部门")
TEMPLATE_ROWS: tuple[tuple[str, str, str], ...] = (
    ("001", "张三", "技术部"),
    ("002", "李四", "销售部"),
    ("003", "王五", "人事部"),
)


def build_template() -> bytes:
    """UTF-8 CSV with a byte-order mark so spreadsheet tools pick the right encoding."""
    lines = [",".join(TEMPLATE_HEADER)] + [",".join(row) for row in TEMPLATE_ROWS]
    return codecs.BOM_UTF8 + ("\r\n".join(lines) + "\r\n").encode("utf-8")
