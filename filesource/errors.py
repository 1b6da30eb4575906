"""
Error types raised while reading declarations from disk.

Everything inherits from FileSourceError so the watcher loop can log
and continue on a single except clause.
"""

from __future__ import annotations
from typing import Sequence, Tuple


class FileSourceError(Exception):
    """Base exception for the file source."""
    pass


class DecodeError(FileSourceError):
    """A file could not be turned into a declaration."""

    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(message)


class InvalidDeclaration(DecodeError):
    """A schema recognized the file but its content failed validation."""

    def __init__(self, filename: str, schema: str, reason: str):
        self.schema = schema
        self.reason = reason
        super().__init__(filename, f"{filename}: invalid {schema}: {reason}")


class UnrecognizedDeclaration(DecodeError):
    """No schema recognized the file.

    The message carries the raw content and every schema's rejection
    reason so a broken file can be diagnosed from the log alone.
    """

    def __init__(self, filename: str, content: str, reasons: Sequence[Tuple[str, str]]):
        self.content = content
        self.reasons = tuple(reasons)
        tried = " nor ".join(f"{schema} ({reason})" for schema, reason in self.reasons)
        super().__init__(filename, f"{filename}: read {content!r}, but couldn't parse as neither {tried}")


class ScanError(FileSourceError):
    """Listing a config directory failed outright."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to list config directory {path}: {reason}")


class ExtractionError(FileSourceError):
    """One poll of the watched path produced no declarations."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to read config path {path!r}: {reason}")


class PathNotFound(ExtractionError):
    def __init__(self, path: str):
        super().__init__(path, "path does not exist, ignoring")


class UnsupportedPathType(ExtractionError):
    def __init__(self, path: str, mode: int):
        self.mode = mode
        super().__init__(path, f"path is not a directory or file (mode {mode:o})")
