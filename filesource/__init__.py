"""
filesource package: pods declared in files on local disk.
- schemas: manifest (Schema A) and pod (Schema B) models
- decoder: bytes → Pod, manifest first, then pod
- scanner: best-effort read of every file in a directory
- source: per-path poller emitting full SET updates
- config: YAML + environment settings
- watcher: process wiring / debug consumer
"""

__all__ = [
    "schemas",
    "decoder",
    "scanner",
    "source",
    "errors",
    "config",
    "watcher",
    "utils",
]

__version__ = "0.1.0"

# Environment overrides (FILESOURCE_*) may come from a local .env file
from dotenv import load_dotenv

load_dotenv()
