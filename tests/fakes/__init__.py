"""Shared test doubles: re-export memory backends."""

from __future__ import annotations

from rollcall.persistence.memory_backend import MemoryFileStore, MemoryRosterStore

__all__ = ["MemoryFileStore", "MemoryRosterStore"]
