import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from presto_exporter.core.config import Settings
from presto_exporter.core.metrics import build_recorder

NOW = datetime(2018, 6, 1, 13, 30, 0, tzinfo=timezone.utc)


def presto_ts(moment: datetime) -> str:
    """Format like Presto does: millisecond precision with a Z suffix."""
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def query_record(
    query_id: str = "20180601_132800_00001_abcde",
    end_time: str | None = None,
    elapsed: str = "5.20s",
    execution: str = "4.90s",
    ended_ago: float | None = 30.0,
) -> dict:
    if end_time is None:
        end_time = "" if ended_ago is None else presto_ts(NOW - timedelta(seconds=ended_ago))
    return {
        "queryId": query_id,
        "query": "SELECT 1",
        "queryStats": {
            "elapsedTime": elapsed,
            "createTime": presto_ts(NOW - timedelta(minutes=5)),
            "endTime": end_time,
            "executionTime": execution,
        },
    }


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def settings():
    return Settings(presto_http_url="http://presto:8080", metrics_namespace=None)


@pytest.fixture
def recorder(settings, registry):
    return build_recorder(settings, registry=registry)


@pytest.fixture
def mock_client():
    """Stand-in for PrestoStatsClient returning canned bytes."""
    client = MagicMock()
    client.url = "http://presto:8080/v1/test"
    client.fetch = MagicMock(return_value=b"{}")
    return client


@pytest.fixture
def as_body():
    def _encode(payload) -> bytes:
        return json.dumps(payload).encode()

    return _encode


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_query():
    return query_record


@pytest.fixture
def fmt_ts():
    return presto_ts
