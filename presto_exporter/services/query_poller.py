"""Turns recently completed Presto queries into histogram observations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable

from presto_exporter.core.errors import ValueParseError
from presto_exporter.core.logger import get_logger
from presto_exporter.core.metrics import (
    QUERY_ELAPSED_TIME,
    QUERY_EXECUTION_TIME,
    QUERY_RECORDS_REJECTED,
    MetricRecorder,
)
from presto_exporter.domain.models import QueryDuration, QueryRecord
from presto_exporter.infrastructure.presto.client import (
    PrestoStatsClient,
    decode_query_records,
)
from presto_exporter.services.value_parser import parse_duration, parse_timestamp
from presto_exporter.services.window import ObservationWindow, SeenQueryTracker

logger = get_logger("presto_exporter.query_poller")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QueryPoller:
    name = "query"

    def __init__(
        self,
        client: PrestoStatsClient,
        recorder: MetricRecorder,
        window: ObservationWindow,
        tracker: SeenQueryTracker | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.client = client
        self.recorder = recorder
        self.window = window
        self.tracker = tracker
        self.clock = clock

    def poll_once(self) -> list[QueryDuration]:
        logger.debug("retrieving_query_stats", extra={"url": self.client.url})
        records = decode_query_records(self.client.fetch())
        return self.process(records)

    def process(self, records: Iterable[QueryRecord]) -> list[QueryDuration]:
        """Record every completed query in the window; one bad record never aborts the batch."""
        now = self.clock()
        observed: list[QueryDuration] = []
        for record in records:
            duration = self._to_duration(record, now)
            if duration is None:
                continue
            logger.debug(
                "query_observed",
                extra={
                    "query_id": duration.query_id,
                    "elapsed_seconds": duration.elapsed,
                    "execution_seconds": duration.execution,
                },
            )
            self.recorder.observe(QUERY_ELAPSED_TIME, duration.elapsed)
            self.recorder.observe(QUERY_EXECUTION_TIME, duration.execution)
            observed.append(duration)
        return observed

    def _to_duration(self, record: QueryRecord, now: datetime) -> QueryDuration | None:
        stats = record.query_stats
        if not stats.is_finished:
            return None

        try:
            end_time = parse_timestamp(stats.end_time)
        except ValueParseError as exc:
            self._reject(record, "end_time", stats.end_time, exc)
            return None

        # Older completions belong to a previous poll.
        if not self.window.contains(end_time, now):
            return None

        if self.tracker is not None and not self.tracker.first_sighting(
            record.query_id, end_time, now
        ):
            logger.debug("query_already_observed", extra={"query_id": record.query_id})
            return None

        try:
            elapsed = parse_duration(stats.elapsed_time)
        except ValueParseError as exc:
            self._reject(record, "elapsed_time", stats.elapsed_time, exc)
            return None
        try:
            execution = parse_duration(stats.execution_time)
        except ValueParseError as exc:
            self._reject(record, "execution_time", stats.execution_time, exc)
            return None

        return QueryDuration(query_id=record.query_id, elapsed=elapsed, execution=execution)

    def _reject(self, record: QueryRecord, field: str, value: str, exc: Exception) -> None:
        self.recorder.inc(QUERY_RECORDS_REJECTED)
        logger.error(
            "query_field_parse_failed",
            extra={
                "query_id": record.query_id,
                "field": field,
                "value": value,
                "error": str(exc),
            },
        )
