"""Rollcall exception hierarchy."""

from __future__ import annotations

from enum import StrEnum


class FatalCode(StrEnum):
    EMPTY_FILE = "empty_file"
    UNRECOGNIZED_ENCODING = "unrecognized_encoding"
    NO_HEADER_ROW = "no_header_row"
    NO_NAME_COLUMN = "no_name_column"
    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_EXTENSION = "unsupported_extension"
    STORE_WRITE_FAILED = "store_write_failed"
    STORE_UNAVAILABLE = "store_unavailable"


class RollcallError(Exception):
    """Base exception for all Rollcall errors."""


class ImportAbortedError(RollcallError):
    """A pipeline stage failed; the whole import is abandoned before any store write."""

    code: FatalCode = FatalCode.EMPTY_FILE


class EmptyFileError(ImportAbortedError):
    code = FatalCode.EMPTY_FILE


class UnrecognizedEncodingError(ImportAbortedError):
    code = FatalCode.UNRECOGNIZED_ENCODING


class NoHeaderRowError(ImportAbortedError):
    code = FatalCode.NO_HEADER_ROW


class NoNameColumnError(ImportAbortedError):
    """No header could be resolved to the participant name."""

    code = FatalCode.NO_NAME_COLUMN

    def __init__(self, headers: list[str]) -> None:
        self.headers = list(headers)
        listed = ", ".join(repr(h) for h in self.headers) or "(none)"
        super().__init__(f"No name column found among headers: {listed}")


class FileTooLargeError(ImportAbortedError):
    code = FatalCode.FILE_TOO_LARGE

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"File is {size} bytes, limit is {limit} bytes")


class UnsupportedExtensionError(ImportAbortedError):
    code = FatalCode.UNSUPPORTED_EXTENSION

    def __init__(self, file_name: str, allowed: list[str]) -> None:
        self.file_name = file_name
        self.allowed = list(allowed)
        super().__init__(
            f"Unsupported file type for {file_name!r}; expected one of {', '.join(self.allowed)}"
        )


class RosterStoreError(RollcallError):
    """Roster store read or write failed."""


class FileStoreError(RollcallError):
    """Upload file storage operation failed."""


class InvalidRangeError(RollcallError, ValueError):
    """Bulk range request is malformed or too wide."""

    def __init__(self, start: int, end: int, reason: str) -> None:
        self.start = start
        self.end = end
        super().__init__(f"Invalid range {start}-{end}: {reason}")
