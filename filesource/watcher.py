## filesource/watcher.py

from __future__ import annotations
import queue, threading
from .config import load_settings
from .source import SourceUpdate, new_source_file
from .utils import configure_logging, logger


def summarize(update: SourceUpdate) -> str:
    names = ", ".join(p.metadata.name or "?" for p in update.pods) or "<none>"
    return f"{update.op.value} from {update.source.value}: {len(update.pods)} pod(s) [{names}]"


def run(cfg_path: str = "config.yaml", stop: threading.Event | None = None):
    settings = load_settings(cfg_path)
    configure_logging(settings.log_level, settings.log_file)
    stop = stop or threading.Event()
    updates: queue.Queue[SourceUpdate] = queue.Queue(maxsize=1)
    new_source_file(settings.path, settings.poll_seconds, updates,
                    hostname=settings.hostname_override, stop=stop)

    while not stop.is_set():
        try:
            update = updates.get(timeout=settings.poll_seconds)
        except queue.Empty:
            continue
        logger.info(summarize(update))

if __name__ == "__main__":
    run()
