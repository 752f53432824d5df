import threading

import pytest
from prometheus_client import CollectorRegistry, generate_latest

from presto_exporter.core.config import Settings
from presto_exporter.core.metrics import (
    ACTIVE_WORKERS,
    QUERY_ELAPSED_TIME,
    QUERY_POLL_FAILURES,
    RUNNING_QUERIES,
    PrometheusRecorder,
    build_recorder,
)


def test_declares_exporter_metrics(recorder, registry):
    names = {metric.name for metric in registry.collect()}
    assert {
        "running_queries",
        "active_workers",
        "query_elapsed_time_seconds",
        "query_execution_time_seconds",
        "cluster_poll_failures",
        "query_poll_failures",
        "query_records_rejected",
    } <= names


def test_gauge_last_write_wins(recorder, registry):
    recorder.set_gauge(RUNNING_QUERIES, 5)
    recorder.set_gauge(RUNNING_QUERIES, 2)
    assert registry.get_sample_value("running_queries") == 2


def test_histogram_appends(recorder, registry):
    for value in (0.5, 1.5, 3.0):
        recorder.observe(QUERY_ELAPSED_TIME, value)
    assert registry.get_sample_value("query_elapsed_time_seconds_count") == 3
    assert registry.get_sample_value("query_elapsed_time_seconds_sum") == pytest.approx(5.0)


def test_counter_increment(recorder, registry):
    recorder.inc(QUERY_POLL_FAILURES)
    recorder.inc(QUERY_POLL_FAILURES)
    assert registry.get_sample_value("query_poll_failures_total") == 2


def test_undeclared_name_raises(recorder):
    with pytest.raises(KeyError):
        recorder.set_gauge("blocked_queries", 1)


def test_redeclare_is_noop(registry):
    recorder = PrometheusRecorder(registry=registry)
    recorder.declare_gauge("demo_gauge", "demo")
    recorder.declare_gauge("demo_gauge", "demo")
    recorder.set_gauge("demo_gauge", 1)
    assert registry.get_sample_value("demo_gauge") == 1


def test_namespace_prefix():
    registry = CollectorRegistry()
    recorder = build_recorder(Settings(metrics_namespace="presto"), registry=registry)

    recorder.set_gauge(ACTIVE_WORKERS, 4)

    assert registry.get_sample_value("presto_active_workers") == 4
    assert registry.get_sample_value("active_workers") is None


def test_custom_buckets():
    registry = CollectorRegistry()
    recorder = build_recorder(Settings(query_histogram_buckets=[1, 10, 100]), registry=registry)

    recorder.observe(QUERY_ELAPSED_TIME, 42)

    assert registry.get_sample_value("query_elapsed_time_seconds_bucket", {"le": "10.0"}) == 0
    assert registry.get_sample_value("query_elapsed_time_seconds_bucket", {"le": "100.0"}) == 1


def test_concurrent_writers(recorder, registry):
    def writer():
        for _ in range(500):
            recorder.observe(QUERY_ELAPSED_TIME, 1.0)
            recorder.set_gauge(RUNNING_QUERIES, 1)

    threads = [threading.Thread(target=writer) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert registry.get_sample_value("query_elapsed_time_seconds_count") == 2000


def test_exposition_renders_current_state(recorder, registry):
    recorder.set_gauge(RUNNING_QUERIES, 7)
    body = generate_latest(registry).decode()
    assert "running_queries 7.0" in body
