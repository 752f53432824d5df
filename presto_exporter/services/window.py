from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class ObservationWindow:
    """Lookback interval deciding whether a completed query is new enough.

    A query finished at most ``size_seconds`` before ``now`` is counted.
    Keeping the size equal to the poll interval approximates counting each
    completion once; a smaller size leaves gaps, a larger one double counts
    unless a SeenQueryTracker is used.
    """

    size_seconds: float

    def contains(self, end_time: datetime, now: datetime) -> bool:
        return (now - end_time).total_seconds() <= self.size_seconds


class SeenQueryTracker:
    """Remembers query ids already observed so overlapping polls skip them.

    Entries are evicted once their end time is older than
    ``retention_seconds``, so memory stays bounded by the queries completed
    within that span. State lives in memory only.
    """

    def __init__(self, retention_seconds: float):
        self.retention = timedelta(seconds=retention_seconds)
        self._seen: dict[str, datetime] = {}

    def __len__(self) -> int:
        return len(self._seen)

    def first_sighting(self, query_id: str, end_time: datetime, now: datetime) -> bool:
        self._evict(now)
        if query_id in self._seen:
            return False
        self._seen[query_id] = end_time
        return True

    def _evict(self, now: datetime) -> None:
        cutoff = now - self.retention
        stale = [qid for qid, ended in self._seen.items() if ended < cutoff]
        for qid in stale:
            del self._seen[qid]
