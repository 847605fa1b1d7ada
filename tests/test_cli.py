"""Tests for the command line interface."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError, NoCredentialsError
from typer.testing import CliRunner

from cloudtail.cli import _apply_overrides, app
from cloudtail.config import CONFIG_FILE
from cloudtail.models import AppConfig, DisplayMode

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


class TestProfiles:
    def test_lists_profiles(self) -> None:
        with patch("cloudtail.cli.list_profiles", return_value=["dev", "prod"]):
            result = runner.invoke(app, ["profiles"])
        assert result.exit_code == 0
        assert result.output.split() == ["dev", "prod"]

    def test_no_profiles(self) -> None:
        with patch("cloudtail.cli.list_profiles", return_value=[]):
            result = runner.invoke(app, ["profiles"])
        assert result.exit_code == 1


class TestGroups:
    def test_lists_groups(self, config_dir: Path) -> None:
        with (
            patch("cloudtail.cli.create_client", return_value=MagicMock()),
            patch("cloudtail.cli.list_log_groups", return_value=iter(["/ecs/a", "/ecs/b"])) as list_groups,
        ):
            result = runner.invoke(app, ["groups", "/ecs/"])
        assert result.exit_code == 0
        assert result.output.split() == ["/ecs/a", "/ecs/b"]
        assert list_groups.call_args.kwargs["prefix"] == "/ecs/"

    def test_missing_credentials(self, config_dir: Path) -> None:
        with patch("cloudtail.cli.create_client", side_effect=NoCredentialsError()):
            result = runner.invoke(app, ["groups"])
        assert result.exit_code == 1

    def test_api_error(self, config_dir: Path) -> None:
        error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DescribeLogGroups")
        with (
            patch("cloudtail.cli.create_client", return_value=MagicMock()),
            patch("cloudtail.cli.list_log_groups", side_effect=error),
        ):
            result = runner.invoke(app, ["groups"])
        assert result.exit_code == 1


class TestConfigCommand:
    def test_reports_missing_file(self, config_dir: Path) -> None:
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "not created" in result.output

    def test_init_writes_file(self, config_dir: Path) -> None:
        result = runner.invoke(app, ["config", "--init"])
        assert result.exit_code == 0
        assert (config_dir / CONFIG_FILE).exists()


class TestTail:
    def test_rejects_unparseable_since(self, config_dir: Path) -> None:
        with patch("cloudtail.cli.create_client") as create:
            result = runner.invoke(app, ["tail", "grp", "--since", "not a time at all"])
        assert result.exit_code == 2
        create.assert_not_called()

    def test_overrides(self) -> None:
        config = _apply_overrides(AppConfig(), capacity=10, refresh_interval=None, display_mode=DisplayMode.RAW)
        assert config.capacity == 10
        assert config.refresh_interval == AppConfig().refresh_interval
        assert config.display_mode == DisplayMode.RAW

    def test_no_overrides_returns_same_config(self) -> None:
        config = AppConfig()
        assert _apply_overrides(config, capacity=None) is config
