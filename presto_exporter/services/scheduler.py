"""Fixed-interval poll loops, one daemon thread per Presto resource."""

from __future__ import annotations

import threading
from typing import Any, Callable

from presto_exporter.core.errors import PollError
from presto_exporter.core.logger import get_logger
from presto_exporter.shared.utils.retry import Backoff

logger = get_logger("presto_exporter.scheduler")


class PollLoop:
    """Runs ``poll`` forever, sleeping ``interval`` seconds between cycles.

    The sleep follows the cycle and is not shortened by the time the cycle
    took. A failed cycle is logged and retried after the backoff delay (or
    the plain interval when no backoff is configured); the loop itself only
    stops when ``stop_event`` is set.
    """

    def __init__(
        self,
        name: str,
        poll: Callable[[], Any],
        interval: float,
        stop_event: threading.Event | None = None,
        backoff: Backoff | None = None,
        on_failure: Callable[[BaseException], None] | None = None,
    ):
        self.name = name
        self.poll = poll
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.backoff = backoff
        self.on_failure = on_failure
        self.consecutive_failures = 0
        self.cycles = 0
        self._thread: threading.Thread | None = None

    def run(self) -> None:
        logger.info("poll_loop_started", extra={"loop": self.name, "interval": self.interval})
        while not self.stop_event.is_set():
            self.cycles += 1
            delay = self.run_cycle()
            self.stop_event.wait(delay)
        logger.info("poll_loop_stopped", extra={"loop": self.name, "cycles": self.cycles})

    def run_cycle(self) -> float:
        """Execute one poll and return how long to wait before the next one."""
        try:
            self.poll()
        except PollError as exc:
            self._failed(exc)
            logger.error(
                "poll_failed",
                extra={
                    "loop": self.name,
                    "error": str(exc),
                    "consecutive_failures": self.consecutive_failures,
                },
            )
        except Exception as exc:  # noqa: BLE001
            self._failed(exc)
            logger.exception(
                "poll_unexpected_error",
                extra={"loop": self.name, "consecutive_failures": self.consecutive_failures},
            )
        else:
            if self.consecutive_failures:
                logger.info(
                    "poll_recovered",
                    extra={"loop": self.name, "after_failures": self.consecutive_failures},
                )
            self.consecutive_failures = 0
            return self.interval

        if self.backoff is None:
            return self.interval
        return self.backoff.delay(self.consecutive_failures)

    def _failed(self, exc: BaseException) -> None:
        self.consecutive_failures += 1
        if self.on_failure is None:
            return
        try:
            self.on_failure(exc)
        except Exception:  # noqa: BLE001
            logger.exception("poll_failure_hook_error", extra={"loop": self.name})

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name=f"poll-{self.name}", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
