"""File sources feeding the import pipeline."""

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath

from pydantic import BaseModel

from rollcall.core.protocols import IFileStore


class RawFile(BaseModel):
    """An already-loaded file. Satisfies IFileSource."""

    name: str
    data: bytes
    declared_size: int | None = None

    @property
    def size(self) -> int:
        return self.declared_size if self.declared_size is not None else len(self.data)

    async def read(self) -> bytes:
        return self.data


class StoredFile:
    """IFileSource over an object in a file store; size is known before reading.

    ``size`` blocks on the store, so callers on an event loop should read it
    from a worker thread."""

    def __init__(self, store: IFileStore, path: str) -> None:
        self._store = store
        self._path = path
        self._size: int | None = None

    @property
    def name(self) -> str:
        return PurePosixPath(self._path).name

    @property
    def size(self) -> int:
        if self._size is None:
            self._size = self._store.size(self._path)
        return self._size

    async def read(self) -> bytes:
        return await asyncio.to_thread(self._store.read, self._path)
