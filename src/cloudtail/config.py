"""XDG directory management and configuration for cloudtail."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir
from pydantic import ValidationError

from cloudtail.models import AppConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.toml"


def get_config_dir() -> Path:
    """Get the cloudtail config directory.

    Respects CLOUDTAIL_CONFIG_DIR environment variable if set.
    """
    if override := os.environ.get("CLOUDTAIL_CONFIG_DIR"):
        return Path(override)
    return Path(user_config_dir("cloudtail"))


def load_config() -> AppConfig:
    """Load application config from disk, returning defaults if missing or invalid."""
    path = get_config_dir() / CONFIG_FILE
    if not path.exists():
        return AppConfig()
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text())
        return AppConfig.model_validate(data)
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return AppConfig()


def save_config(config: AppConfig) -> Path:
    """Save application config to disk. Returns the file path."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / CONFIG_FILE
    path.write_bytes(tomli_w.dumps(config.model_dump(mode="json")).encode())
    return path
