"""AWS CloudWatch Logs operations via boto3."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from cloudtail.errors import SourceUnavailableError
from cloudtail.models import FetchedEvent, FetchKind, FetchRequest, FetchResult

if TYPE_CHECKING:
    from collections.abc import Iterator

    from mypy_boto3_logs import CloudWatchLogsClient
    from mypy_boto3_logs.type_defs import FilteredLogEventTypeDef

logger = logging.getLogger(__name__)


def create_client(
    region: str | None = None,
    profile: str | None = None,
    endpoint_url: str | None = None,
    timeout: float = 10.0,
) -> CloudWatchLogsClient:
    """Create a boto3 CloudWatch Logs client.

    Raises botocore's ProfileNotFound, NoRegionError or NoCredentialsError
    when the session cannot be configured.
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    if session.get_credentials() is None:
        raise NoCredentialsError
    config = Config(connect_timeout=timeout, read_timeout=timeout, retries={"max_attempts": 2})
    return session.client("logs", endpoint_url=endpoint_url, config=config)


def list_profiles() -> list[str]:
    """Return the profile names found in the local AWS config files."""
    return sorted(boto3.Session().available_profiles)


def _ts_to_ms(dt: datetime) -> int:
    """Convert datetime to epoch milliseconds."""
    return int(dt.timestamp() * 1000)


def _ms_to_dt(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def _to_event(event: FilteredLogEventTypeDef) -> FetchedEvent:
    return FetchedEvent(
        timestamp=_ms_to_dt(event.get("timestamp", 0)),
        message=event.get("message", "").rstrip("\n"),
        event_id=event.get("eventId", ""),
    )


def fetch_events(
    client: CloudWatchLogsClient,
    log_group: str,
    start: datetime,
    end: datetime,
    *,
    limit: int,
    next_token: str | None = None,
    stream_prefix: str | None = None,
) -> FetchResult:
    """Fetch one page of events in ``[start, end]`` from a log group."""
    kwargs: dict[str, Any] = {
        "logGroupName": log_group,
        "startTime": _ts_to_ms(start),
        "endTime": _ts_to_ms(end),
        "limit": limit,
    }
    if next_token:
        kwargs["nextToken"] = next_token
    if stream_prefix:
        kwargs["logStreamNamePrefix"] = stream_prefix

    response = client.filter_log_events(**kwargs)
    events = [_to_event(event) for event in response.get("events", [])]
    return FetchResult(events=events, next_token=response.get("nextToken"))


def list_log_groups(client: CloudWatchLogsClient, prefix: str | None = None) -> Iterator[str]:
    """List CloudWatch log groups, yielding names as they arrive."""
    paginator = client.get_paginator("describe_log_groups")
    paginate_kwargs = {}
    if prefix:
        paginate_kwargs["logGroupNamePrefix"] = prefix

    for page in paginator.paginate(**paginate_kwargs):  # type: ignore[arg-type]
        for group in page.get("logGroups", []):
            yield group["logGroupName"]


class CloudWatchSource:
    """Fetches pages of events for one log group.

    Poll windows overlap, so initial and refresh pages drop events whose
    ``eventId`` was already delivered. History pages are passed through.
    ``fetch`` runs in worker threads; the id memory is lock-protected.
    """

    def __init__(
        self,
        client: CloudWatchLogsClient,
        log_group: str,
        *,
        stream_prefix: str | None = None,
        seen_limit: int = 10000,
    ) -> None:
        self._client = client
        self.log_group = log_group
        self._stream_prefix = stream_prefix
        self._seen_limit = seen_limit
        self._seen_ids: set[str] = set()
        self._seen_order: deque[str] = deque()
        self._lock = threading.Lock()

    def fetch(self, request: FetchRequest) -> FetchResult:
        """Run one query. Raises SourceUnavailableError on any AWS failure."""
        try:
            result = fetch_events(
                self._client,
                self.log_group,
                request.start,
                request.end,
                limit=request.limit,
                next_token=request.next_token,
                stream_prefix=self._stream_prefix,
            )
        except (BotoCoreError, ClientError) as exc:
            raise SourceUnavailableError(str(exc)) from exc

        if request.kind == FetchKind.HISTORY:
            return result
        fresh = self._unseen(result.events)
        if len(fresh) < len(result.events):
            logger.debug("Skipped %d already delivered events", len(result.events) - len(fresh))
        return FetchResult(events=fresh, next_token=result.next_token)

    def _unseen(self, events: list[FetchedEvent]) -> list[FetchedEvent]:
        fresh: list[FetchedEvent] = []
        with self._lock:
            for event in events:
                if event.event_id:
                    if event.event_id in self._seen_ids:
                        continue
                    self._seen_ids.add(event.event_id)
                    self._seen_order.append(event.event_id)
                fresh.append(event)
            # Limit memory for seen IDs
            while len(self._seen_order) > self._seen_limit:
                self._seen_ids.discard(self._seen_order.popleft())
        return fresh
