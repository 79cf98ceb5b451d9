"""Base service with common dependency wiring."""

from __future__ import annotations

import asyncio
from typing import Any

from rollcall.core.config import AppSettings
from rollcall.core.protocols import IRosterStore


class BaseService:
    """Common base for roster services.

    Settings and the roster store are injected at construction time.
    """

    def __init__(self, *, settings: AppSettings, store: IRosterStore) -> None:
        self._settings = settings
        self._store = store

    async def health_check(self) -> dict[str, Any]:
        """Return service health status."""
        return {
            "service": self.__class__.__name__,
            "status": "healthy",
            "environment": self._settings.environment,
            "participants": await asyncio.to_thread(self._store.count),
        }
