from __future__ import annotations

from presto_exporter.core.logger import get_logger
from presto_exporter.core.metrics import ACTIVE_WORKERS, RUNNING_QUERIES, MetricRecorder
from presto_exporter.domain.models import ClusterSnapshot
from presto_exporter.infrastructure.presto.client import (
    PrestoStatsClient,
    decode_cluster_snapshot,
)

logger = get_logger("presto_exporter.cluster_poller")


class ClusterPoller:
    """Keeps the running-query and active-worker gauges in sync with Presto."""

    name = "cluster"

    def __init__(self, client: PrestoStatsClient, recorder: MetricRecorder):
        self.client = client
        self.recorder = recorder

    def poll_once(self) -> ClusterSnapshot:
        logger.debug("retrieving_cluster_stats", extra={"url": self.client.url})
        snapshot = decode_cluster_snapshot(self.client.fetch())

        logger.debug(
            "cluster_stats",
            extra={
                "running_queries": snapshot.running_queries,
                "active_workers": snapshot.active_workers,
            },
        )
        self.recorder.set_gauge(RUNNING_QUERIES, snapshot.running_queries)
        self.recorder.set_gauge(ACTIVE_WORKERS, snapshot.active_workers)
        return snapshot
