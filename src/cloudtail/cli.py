"""CLI entry point for cloudtail."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from botocore.exceptions import BotoCoreError, ClientError

from cloudtail.aws import create_client, list_log_groups, list_profiles
from cloudtail.config import CONFIG_FILE, get_config_dir, load_config, save_config
from cloudtail.models import DisplayMode
from cloudtail.utils import parse_time

if TYPE_CHECKING:
    from mypy_boto3_logs import CloudWatchLogsClient

    from cloudtail.models import AppConfig

app = typer.Typer(add_completion=False, help="Tail, browse and search AWS CloudWatch Logs.")

_Profile = Annotated[str | None, typer.Option("--profile", help="AWS profile", envvar="AWS_PROFILE")]
_Region = Annotated[str | None, typer.Option("--aws-region", help="AWS region", envvar="AWS_DEFAULT_REGION")]
_EndpointUrl = Annotated[
    str | None, typer.Option("--aws-endpoint-url", help="AWS endpoint URL", envvar="AWS_ENDPOINT_URL")
]

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(log_file: Path | None, verbose: bool) -> None:
    """Send cloudtail's log records somewhere other than the terminal the UI owns."""
    from textual.logging import TextualHandler

    handler: logging.Handler = logging.FileHandler(log_file) if log_file else TextualHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger = logging.getLogger("cloudtail")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.addHandler(handler)


def _client(profile: str | None, region: str | None, endpoint_url: str | None, timeout: float) -> CloudWatchLogsClient:
    try:
        return create_client(region=region, profile=profile, endpoint_url=endpoint_url, timeout=timeout)
    except BotoCoreError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def _apply_overrides(config: AppConfig, **overrides: Any) -> AppConfig:
    """Return a copy of ``config`` with the options given on the command line."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    return config.model_copy(update=updates) if updates else config


@app.command()
def tail(
    log_group: Annotated[str | None, typer.Argument(help="Log group to tail (omit to pick one)")] = None,
    stream_prefix: Annotated[
        str | None, typer.Option("--stream-prefix", help="Only show streams with this name prefix")
    ] = None,
    since: Annotated[
        str | None, typer.Option("--since", "-s", help="Start of the first window (30m, 2h, 1week, or a date)")
    ] = None,
    capacity: Annotated[int | None, typer.Option("--capacity", help="Records kept in memory", min=1)] = None,
    refresh: Annotated[float | None, typer.Option("--refresh", help="Seconds between polls", min=0.5)] = None,
    raw: Annotated[bool, typer.Option("--raw", help="Start in raw mode (no formatting)")] = False,
    literal: Annotated[bool, typer.Option("--literal", help="Treat search patterns as plain text")] = False,
    log_file: Annotated[Path | None, typer.Option("--log-file", help="Write diagnostic logs to this file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Include debug records in the log")] = False,
    profile: _Profile = None,
    aws_region: _Region = None,
    aws_endpoint_url: _EndpointUrl = None,
) -> None:
    """Tail a CloudWatch log group in a terminal UI."""
    config = _apply_overrides(
        load_config(),
        capacity=capacity,
        refresh_interval=refresh,
        display_mode=DisplayMode.RAW if raw else None,
        regex_search=False if literal else None,
    )
    try:
        since_time = parse_time(since) if since else None
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--since") from exc

    _configure_logging(log_file, verbose)
    client = _client(profile, aws_region, aws_endpoint_url, config.api_timeout)

    from cloudtail.app import CloudTailApp

    tail_app = CloudTailApp(config, client, log_group or "", since=since_time, stream_prefix=stream_prefix)
    tail_app.run(mouse=False)


@app.command()
def groups(
    prefix: Annotated[str | None, typer.Argument(help="Log group name prefix")] = None,
    profile: _Profile = None,
    aws_region: _Region = None,
    aws_endpoint_url: _EndpointUrl = None,
) -> None:
    """List CloudWatch log groups."""
    client = _client(profile, aws_region, aws_endpoint_url, load_config().api_timeout)
    try:
        for name in list_log_groups(client, prefix=prefix):
            typer.echo(name)
    except (BotoCoreError, ClientError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


@app.command()
def profiles() -> None:
    """List AWS profiles from the local configuration."""
    names = list_profiles()
    if not names:
        typer.echo("No AWS profiles configured", err=True)
        raise typer.Exit(1)
    for name in names:
        typer.echo(name)


@app.command("config")
def show_config(
    init: Annotated[bool, typer.Option("--init", help="Write the current settings to the config file")] = False,
) -> None:
    """Show the config file location, or create it with --init."""
    if init:
        path = save_config(load_config())
        typer.echo(f"Wrote {path}")
        return
    path = get_config_dir() / CONFIG_FILE
    status = "exists" if path.exists() else "not created, using defaults"
    typer.echo(f"{path} ({status})")


def main() -> None:
    """Entry point for the CLI."""
    app()
