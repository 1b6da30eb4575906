## filesource/scanner.py

from __future__ import annotations
import glob, os, stat
from typing import Tuple

from .decoder import decode_file
from .errors import DecodeError, ScanError
from .schemas import Pod
from .utils import get_logger

logger = get_logger("scanner")


def list_entries(path: str) -> list[str]:
    """Immediate non-hidden entries of `path`, sorted by full path."""
    pattern = os.path.join(glob.escape(path), "[!.]*")
    try:
        return sorted(glob.glob(pattern))
    except (OSError, ValueError) as e:
        raise ScanError(path, f"glob failed: {e}") from e


def scan_dir(path: str, hostname: str | None = None) -> Tuple[Pod, ...]:
    """Get as many pods as possible from a directory.

    Raises ScanError only when the directory could not be listed at all;
    bad entries are logged and skipped.
    """
    pods: list[Pod] = []
    for entry in list_entries(path):
        try:
            st = os.stat(entry)
        except OSError as e:
            logger.debug(f"Can't get metadata for {entry!r}: {e}")
            continue

        if stat.S_ISDIR(st.st_mode):
            logger.debug(f"Not recursing into config path {entry!r}")
        elif stat.S_ISREG(st.st_mode):
            try:
                pods.append(decode_file(entry, hostname))
            except (DecodeError, OSError) as e:
                logger.debug(f"Can't process config file {entry!r}: {e}")
        else:
            logger.debug(f"Config path {entry!r} is not a directory or file: mode {st.st_mode:o}")
    return tuple(pods)
