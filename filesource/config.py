## filesource/config.py

from __future__ import annotations
import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .utils import default_hostname, load_yaml

ENV_PATH = "FILESOURCE_PATH"
ENV_POLL_SECONDS = "FILESOURCE_POLL_SECONDS"
ENV_HOSTNAME = "FILESOURCE_HOSTNAME"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1)
    poll_seconds: float = Field(default=20.0, gt=0)
    hostname_override: str = Field(default_factory=default_hostname)
    log_level: str = "INFO"
    log_file: Optional[str] = None


def load_settings(cfg_path: str = "config.yaml") -> Settings:
    """Read the `file_source` section of a YAML config, then apply env overrides.

    A missing config file is fine as long as the environment supplies the path.
    """
    raw = load_yaml(cfg_path) if os.path.exists(cfg_path) else {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {cfg_path} must be a mapping, got {type(raw).__name__}")
    section = raw.get("file_source") or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config file {cfg_path}: file_source must be a mapping, got {type(section).__name__}")
    section = dict(section)
    env = {
        "path": os.getenv(ENV_PATH),
        "poll_seconds": os.getenv(ENV_POLL_SECONDS),
        "hostname_override": os.getenv(ENV_HOSTNAME),
    }
    section.update({k: v for k, v in env.items() if v})
    if section.get("hostname_override"):
        section["hostname_override"] = str(section["hostname_override"]).lower()
    return Settings.model_validate(section)
