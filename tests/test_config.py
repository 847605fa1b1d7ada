"""Tests for configuration persistence."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from cloudtail.config import CONFIG_FILE, get_config_dir, load_config, save_config
from cloudtail.models import AppConfig, DisplayMode

if TYPE_CHECKING:
    from pathlib import Path


class TestConfigDir:
    def test_env_override(self, config_dir: Path) -> None:
        assert get_config_dir() == config_dir


class TestLoadConfig:
    def test_defaults_when_missing(self, config_dir: Path) -> None:
        config = load_config()
        assert config == AppConfig()
        assert not (config_dir / CONFIG_FILE).exists()

    def test_save_and_load(self, config_dir: Path) -> None:
        config = AppConfig(capacity=200, refresh_interval=2.5, display_mode=DisplayMode.RAW, theme="nord")
        path = save_config(config)
        assert path == config_dir / CONFIG_FILE
        assert load_config() == config

    def test_partial_file_fills_defaults(self, config_dir: Path) -> None:
        (config_dir / CONFIG_FILE).write_text('capacity = 42\n\n[colors]\nheader = "red"\n')
        config = load_config()
        assert config.capacity == 42
        assert config.colors.header == "red"
        assert config.refresh_interval == AppConfig().refresh_interval

    def test_invalid_toml_gives_defaults(self, config_dir: Path) -> None:
        (config_dir / CONFIG_FILE).write_text("capacity = [unterminated\n")
        assert load_config() == AppConfig()

    def test_invalid_values_give_defaults(self, config_dir: Path) -> None:
        (config_dir / CONFIG_FILE).write_text("capacity = 0\n")
        assert load_config() == AppConfig()


class TestAppConfig:
    def test_page_height(self) -> None:
        assert AppConfig(display_height=24, reserved_rows=6).page_height == 18

    def test_page_height_never_below_one(self) -> None:
        assert AppConfig(display_height=3, reserved_rows=6).page_height == 1

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(capacity=0)

    def test_fetch_limit_bounded(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(logs_per_fetch=10001)
