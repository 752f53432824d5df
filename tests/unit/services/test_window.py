from datetime import timedelta

from presto_exporter.services.window import ObservationWindow, SeenQueryTracker


class TestObservationWindow:
    def test_recent_completion_inside(self, now):
        assert ObservationWindow(60).contains(now - timedelta(seconds=30), now)

    def test_older_than_window_outside(self, now):
        assert not ObservationWindow(60).contains(now - timedelta(seconds=61), now)

    def test_boundary_is_inclusive(self, now):
        assert ObservationWindow(60).contains(now - timedelta(seconds=60), now)

    def test_future_end_time_counts(self, now):
        # Coordinator clock ahead of ours
        assert ObservationWindow(60).contains(now + timedelta(seconds=5), now)

    def test_window_shorter_than_interval_leaves_gap(self, now):
        """With a 30s window polled every 60s, a query ending 45s before a poll is never seen."""
        window = ObservationWindow(30)
        end_time = now - timedelta(seconds=45)
        previous_poll = now - timedelta(seconds=60)

        assert not window.contains(end_time, now)
        # It finished after the previous poll, so that poll could not see it either.
        assert end_time > previous_poll


class TestSeenQueryTracker:
    def test_first_sighting_only_once(self, now):
        tracker = SeenQueryTracker(retention_seconds=120)
        end = now - timedelta(seconds=10)

        assert tracker.first_sighting("q1", end, now) is True
        assert tracker.first_sighting("q1", end, now + timedelta(seconds=60)) is False
        assert tracker.first_sighting("q2", end, now) is True

    def test_evicts_entries_past_retention(self, now):
        tracker = SeenQueryTracker(retention_seconds=60)
        tracker.first_sighting("old", now - timedelta(seconds=50), now)
        assert len(tracker) == 1

        tracker.first_sighting("new", now + timedelta(seconds=30), now + timedelta(seconds=30))
        assert len(tracker) == 1
