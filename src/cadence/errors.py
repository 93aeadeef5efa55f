# src/cadence/errors.py

"""
Error taxonomy.

Every failure an engine operation raises on purpose is a CadenceError with a
stable `kind`. Filesystem failures are not wrapped: OSError from the injected
filesystem propagates unchanged and is classified as ErrorKind.IO by
error_kind().
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    OUT_OF_RANGE = "out_of_range"
    NOT_A_TASK = "not_a_task"
    CONFIG_NOT_FOUND = "config_not_found"
    CONFIG_VALIDATION = "config_validation"
    IO = "io"
    UNKNOWN = "unknown"


class CadenceError(Exception):
    """Base class: a stable kind plus a human-readable message."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": type(self).__name__,
            "kind": self.kind.value,
            "message": self.message,
        }
        cause = self.__cause__
        if cause is not None:
            out["cause"] = {"name": type(cause).__name__, "message": str(cause)}
        return out


class NoteNotFoundError(CadenceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, note_path: str) -> None:
        super().__init__(f"Note not found: {note_path}")
        self.note_path = note_path

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "note_path": self.note_path}


class LineOutOfRangeError(CadenceError):
    kind = ErrorKind.OUT_OF_RANGE

    def __init__(self, line_number: int, line_count: int) -> None:
        super().__init__(f"Line number {line_number} is out of range (1-{line_count})")
        self.line_number = line_number
        self.line_count = line_count


class NotATaskError(CadenceError):
    kind = ErrorKind.NOT_A_TASK

    def __init__(self, line_number: int, line: str) -> None:
        super().__init__(f'Line {line_number} is not a task: "{line}"')
        self.line_number = line_number
        self.line = line


class ConfigNotFoundError(CadenceError):
    kind = ErrorKind.CONFIG_NOT_FOUND

    def __init__(self, vault_path: str) -> None:
        super().__init__(f"No .cadence/config.json found in vault at {vault_path}")
        self.vault_path = vault_path

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "vault_path": self.vault_path}


class ConfigValidationError(CadenceError):
    kind = ErrorKind.CONFIG_VALIDATION

    def __init__(self, message: str, validation_errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.validation_errors = list(validation_errors or [])

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.validation_errors:
            out["validation_errors"] = list(self.validation_errors)
        return out


def error_kind(exc: BaseException) -> ErrorKind:
    """Classify any exception raised by an engine operation."""
    if isinstance(exc, CadenceError):
        return exc.kind
    if isinstance(exc, OSError):
        return ErrorKind.IO
    return ErrorKind.UNKNOWN
