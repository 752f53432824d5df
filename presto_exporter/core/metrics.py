"""Metric recorder used by the poll loops.

The pollers only see the ``MetricRecorder`` protocol; ``PrometheusRecorder``
is the process-wide implementation handed to prometheus_client's exposition
server. prometheus_client metric objects are thread-safe, so both loops can
write without extra locking; the lock here only guards declaration.
"""

from __future__ import annotations

import threading
from typing import Protocol, Sequence

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from presto_exporter.core.config import Settings
from presto_exporter.shared.metrics import get_counter, get_gauge, get_histogram

RUNNING_QUERIES = "running_queries"
ACTIVE_WORKERS = "active_workers"
QUERY_ELAPSED_TIME = "query_elapsed_time_seconds"
QUERY_EXECUTION_TIME = "query_execution_time_seconds"
CLUSTER_POLL_FAILURES = "cluster_poll_failures_total"
QUERY_POLL_FAILURES = "query_poll_failures_total"
QUERY_RECORDS_REJECTED = "query_records_rejected_total"


class MetricRecorder(Protocol):
    def set_gauge(self, name: str, value: float) -> None: ...

    def observe(self, name: str, value: float) -> None: ...

    def inc(self, name: str, amount: float = 1.0) -> None: ...


class PrometheusRecorder:
    def __init__(
        self,
        registry: CollectorRegistry = REGISTRY,
        namespace: str | None = None,
    ):
        self.registry = registry
        self.namespace = namespace
        self._lock = threading.Lock()
        self._gauges: dict[str, Gauge] = {}
        self._histograms: dict[str, Histogram] = {}
        self._counters: dict[str, Counter] = {}

    def declare_gauge(self, name: str, documentation: str) -> None:
        with self._lock:
            if name not in self._gauges:
                self._gauges[name] = get_gauge(
                    name, documentation, self.namespace, registry=self.registry
                )

    def declare_histogram(
        self,
        name: str,
        documentation: str,
        buckets: Sequence[float] | None = None,
    ) -> None:
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = get_histogram(
                    name,
                    documentation,
                    self.namespace,
                    buckets=buckets,
                    registry=self.registry,
                )

    def declare_counter(self, name: str, documentation: str) -> None:
        with self._lock:
            if name not in self._counters:
                # prometheus_client appends _total itself
                base = name[: -len("_total")] if name.endswith("_total") else name
                self._counters[name] = get_counter(
                    base, documentation, self.namespace, registry=self.registry
                )

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name].set(value)

    def observe(self, name: str, value: float) -> None:
        self._histograms[name].observe(value)

    def inc(self, name: str, amount: float = 1.0) -> None:
        self._counters[name].inc(amount)


def build_recorder(
    settings: Settings, registry: CollectorRegistry = REGISTRY
) -> PrometheusRecorder:
    """Create the recorder and declare every metric the exporter writes."""
    recorder = PrometheusRecorder(registry=registry, namespace=settings.metrics_namespace)

    recorder.declare_gauge(RUNNING_QUERIES, "Number of running queries")
    recorder.declare_gauge(ACTIVE_WORKERS, "Number of active presto workers")

    buckets = settings.query_histogram_buckets
    recorder.declare_histogram(
        QUERY_ELAPSED_TIME, "Duration of query elapsed time in seconds.", buckets
    )
    recorder.declare_histogram(
        QUERY_EXECUTION_TIME, "Duration of query execution time in seconds.", buckets
    )

    recorder.declare_counter(
        CLUSTER_POLL_FAILURES, "Cluster stats polls that failed to fetch or decode"
    )
    recorder.declare_counter(
        QUERY_POLL_FAILURES, "Query stats polls that failed to fetch or decode"
    )
    recorder.declare_counter(
        QUERY_RECORDS_REJECTED,
        "Completed query records skipped because a field failed to parse",
    )
    return recorder
