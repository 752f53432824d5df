import pytest
from pydantic import ValidationError

from presto_exporter.domain.models import ClusterSnapshot, QueryDuration, QueryRecord, QueryStats


class TestClusterSnapshot:
    def test_reads_camel_case_keys(self):
        snapshot = ClusterSnapshot.model_validate({"runningQueries": 2, "activeWorkers": 5})
        assert snapshot.running_queries == 2.0
        assert snapshot.active_workers == 5.0

    def test_missing_counters_default_to_zero(self):
        snapshot = ClusterSnapshot.model_validate({})
        assert snapshot.running_queries == 0.0
        assert snapshot.active_workers == 0.0

    def test_snapshot_is_immutable(self):
        snapshot = ClusterSnapshot(running_queries=1, active_workers=1)
        with pytest.raises(ValidationError):
            snapshot.running_queries = 3


class TestQueryRecord:
    def test_nested_stats(self):
        record = QueryRecord.model_validate(
            {
                "queryId": "q1",
                "query": "SELECT 1",
                "queryStats": {"elapsedTime": "1s", "endTime": "", "executionTime": "1s"},
            }
        )
        assert record.query_id == "q1"
        assert record.query_stats.create_time == ""
        assert not record.query_stats.is_finished

    def test_null_end_time_is_unfinished(self):
        stats = QueryStats.model_validate({"endTime": None})
        assert stats.end_time == ""
        assert not stats.is_finished

    def test_missing_stats_block(self):
        record = QueryRecord.model_validate({"queryId": "q2"})
        assert not record.query_stats.is_finished


def test_query_duration_fields():
    duration = QueryDuration(query_id="q1", elapsed=5.2, execution=4.9)
    assert (duration.elapsed, duration.execution) == (5.2, 4.9)


def test_null_record_fields_read_as_empty():
    record = QueryRecord.model_validate({"queryId": None, "query": None, "queryStats": None})
    assert record.query_id == ""
    assert record.query == ""
    assert not record.query_stats.is_finished
