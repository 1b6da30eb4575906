"""
Poll one config path (a file or a directory of files) and push the full
set of pods it declares to a consumer.

Every successful poll sends exactly one SourceUpdate with SET semantics.
A missing path is the one failure that still sends an update: an empty
one, so the consumer can mark this source as seen.
"""

from __future__ import annotations
import logging, os, stat, threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Tuple

from .decoder import decode_file
from .errors import DecodeError, ExtractionError, PathNotFound, ScanError, UnsupportedPathType
from .scanner import scan_dir
from .schemas import Pod
from .utils import default_hostname, get_logger

logger = get_logger("source")


class Operation(str, Enum):
    SET = "SET"  # complete current state, replaces everything from the same source


class Origin(str, Enum):
    FILE = "file"


@dataclass(frozen=True)
class SourceUpdate:
    pods: Tuple[Pod, ...]
    op: Operation = Operation.SET
    source: Origin = Origin.FILE


@dataclass(frozen=True)
class Extraction:
    """Outcome of one poll: an update to send, an error to report, or both."""

    update: Optional[SourceUpdate] = None
    error: Optional[ExtractionError] = None


class UpdateSink(Protocol):
    def put(self, item: SourceUpdate) -> None: ...


def extract_from_path(path: str, hostname: str | None = None) -> Extraction:
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return Extraction(SourceUpdate(pods=()), PathNotFound(path))
    except OSError as e:
        return Extraction(error=ExtractionError(path, str(e)))

    if stat.S_ISDIR(st.st_mode):
        try:
            pods = scan_dir(path, hostname)
        except ScanError as e:
            return Extraction(error=ExtractionError(path, str(e)))
        return Extraction(SourceUpdate(pods=pods))

    if stat.S_ISREG(st.st_mode):
        try:
            pod = decode_file(path, hostname)
        except (DecodeError, OSError) as e:
            return Extraction(error=ExtractionError(path, str(e)))
        return Extraction(SourceUpdate(pods=(pod,)))

    return Extraction(error=UnsupportedPathType(path, st.st_mode))


class FileSource:
    """Re-reads `path` every `period` seconds and sends the result to `updates`.

    `updates.put` blocks until the consumer takes the update; nothing is
    buffered or dropped, so a stalled consumer stalls polling.
    """

    def __init__(self, path: str, period: float, updates: UpdateSink, hostname: str | None = None):
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.path = path
        self.period = period
        self.updates = updates
        self.hostname = hostname or default_hostname()

    def run_once(self) -> Extraction:
        result = extract_from_path(self.path, self.hostname)
        if result.update is not None:
            self.updates.put(result.update)
        if result.error is not None:
            level = logging.WARNING if isinstance(result.error, PathNotFound) else logging.ERROR
            logger.log(level, str(result.error))
        return result

    def run(self, stop: threading.Event | None = None) -> None:
        """Poll immediately, then every `period` seconds until `stop` is set."""
        stop = stop or threading.Event()
        while not stop.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception(f"Unexpected failure polling {self.path!r}")
            if stop.wait(self.period):
                break

    def start(self, stop: threading.Event | None = None) -> threading.Thread:
        t = threading.Thread(target=self.run, args=(stop,), name=f"filesource:{self.path}", daemon=True)
        t.start()
        return t


def new_source_file(path: str, period: float, updates: UpdateSink,
                    hostname: str | None = None, stop: threading.Event | None = None) -> FileSource:
    source = FileSource(path, period, updates, hostname)
    logger.info(f"Watching path {path!r}")
    source.start(stop)
    return source
