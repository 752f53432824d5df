from __future__ import annotations

import argparse
import signal
import sys
import threading
from typing import Sequence

from prometheus_client import REGISTRY, CollectorRegistry, start_http_server
from pydantic import ValidationError

from presto_exporter.core.config import Settings
from presto_exporter.core.errors import ConfigurationError
from presto_exporter.core.logger import configure_from_settings, get_logger
from presto_exporter.core.metrics import (
    CLUSTER_POLL_FAILURES,
    QUERY_POLL_FAILURES,
    MetricRecorder,
    build_recorder,
)
from presto_exporter.infrastructure.presto.client import (
    CLUSTER_PATH,
    QUERY_PATH,
    PrestoStatsClient,
)
from presto_exporter.services.cluster_poller import ClusterPoller
from presto_exporter.services.query_poller import QueryPoller
from presto_exporter.services.scheduler import PollLoop
from presto_exporter.services.window import ObservationWindow, SeenQueryTracker
from presto_exporter.shared.utils.retry import Backoff

logger = get_logger("presto_exporter.app")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="presto-exporter",
        description="Export Presto cluster and query statistics to Prometheus",
    )
    parser.add_argument("--presto-http-url", help="Presto HTTP URL (env PRESTO_HTTP_URL)")
    parser.add_argument("--port", type=int, help="port to bind the app to (default 9988)")
    parser.add_argument("--log-level", help="log level to use (default info)")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.presto_http_url is not None:
        overrides["presto_http_url"] = args.presto_http_url
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level is not None:
        overrides["app_log_level"] = args.log_level
    return Settings(**overrides)


def _backoff(settings: Settings, interval: float) -> Backoff | None:
    if not settings.poll_backoff_enabled:
        return None
    return Backoff(
        base_delay=interval,
        max_delay=max(interval, settings.poll_backoff_max_seconds),
        jitter=settings.poll_backoff_jitter,
    )


def _count_failure(recorder: MetricRecorder, name: str):
    def hook(_exc: BaseException) -> None:
        recorder.inc(name)

    return hook


def build_loops(
    settings: Settings,
    recorder: MetricRecorder,
    stop_event: threading.Event,
) -> list[PollLoop]:
    """Wire both pollers; raises ConfigurationError for an unusable URL."""
    if not settings.presto_http_url:
        raise ConfigurationError("presto_http_url is required (--presto-http-url)")

    cluster_client = PrestoStatsClient(
        settings.presto_http_url, CLUSTER_PATH, timeout=settings.http_timeout_seconds
    )
    query_client = PrestoStatsClient(
        settings.presto_http_url, QUERY_PATH, timeout=settings.http_timeout_seconds
    )

    window_seconds = settings.effective_query_window
    if window_seconds < settings.query_poll_interval_seconds:
        logger.warning(
            "query_window_gap",
            extra={
                "window_seconds": window_seconds,
                "poll_interval_seconds": settings.query_poll_interval_seconds,
            },
        )
    tracker = SeenQueryTracker(window_seconds) if settings.query_dedup_enabled else None

    cluster = ClusterPoller(cluster_client, recorder)
    query = QueryPoller(query_client, recorder, ObservationWindow(window_seconds), tracker)

    return [
        PollLoop(
            cluster.name,
            cluster.poll_once,
            settings.cluster_poll_interval_seconds,
            stop_event=stop_event,
            backoff=_backoff(settings, settings.cluster_poll_interval_seconds),
            on_failure=_count_failure(recorder, CLUSTER_POLL_FAILURES),
        ),
        PollLoop(
            query.name,
            query.poll_once,
            settings.query_poll_interval_seconds,
            stop_event=stop_event,
            backoff=_backoff(settings, settings.query_poll_interval_seconds),
            on_failure=_count_failure(recorder, QUERY_POLL_FAILURES),
        ),
    ]


def run(settings: Settings, registry: CollectorRegistry = REGISTRY) -> int:
    try:
        configure_from_settings(settings)
    except ValueError as exc:
        logger.critical("invalid_log_level", extra={"error": str(exc)})
        return 1

    stop_event = threading.Event()
    recorder = build_recorder(settings, registry=registry)
    try:
        loops = build_loops(settings, recorder, stop_event)
    except ConfigurationError as exc:
        logger.critical("invalid_configuration", extra={"error": str(exc)})
        return 1

    start_http_server(settings.port, registry=registry)
    logger.info("presto_exporter_listening", extra={"port": settings.port})

    def _on_signal(signum, frame):  # noqa: ARG001
        logger.info("signal_received", extra={"signal": signum})
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _on_signal)

    for loop in loops:
        loop.start()
    stop_event.wait()
    for loop in loops:
        loop.join(timeout=1.0)
    logger.info("presto_exporter_stopped")
    return 0


def main(argv: Sequence[str] | None = None) -> None:  # pragma: no cover - thin wrapper
    args = parse_args(argv)
    try:
        settings = load_settings(args)
    except ValidationError as exc:
        logger.critical("invalid_settings", extra={"error": str(exc)})
        sys.exit(1)
    sys.exit(run(settings))


if __name__ == "__main__":  # pragma: no cover
    main()
