## filesource/utils.py

from __future__ import annotations
import hashlib, logging, socket
from typing import Iterable, Optional
import yaml

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger("filesource")


def get_logger(name: str | None = None) -> logging.Logger:
    return logger.getChild(name) if name else logger


def configure_logging(level: str | int = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the filesource logger."""
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for h in handlers:
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(h)
    return logger


def md5_hex(parts: Iterable[str]) -> str:
    h = hashlib.md5()
    for p in parts:
        h.update(p.encode())
    return h.hexdigest()


def default_hostname() -> str:
    return socket.gethostname().lower()


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
