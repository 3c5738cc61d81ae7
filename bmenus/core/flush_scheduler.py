"""Background thread that runs a task at a fixed interval."""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class FlushScheduler:
    """
    Runs a task every interval seconds on a daemon thread.

    The first run happens one interval after start(). Restarting replaces the
    previous schedule. Errors raised by the task are logged and do not stop
    the schedule.
    """

    def __init__(self, task: Callable[[], None], name: str = "usage-flush"):
        self._task = task
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._interval = 0.0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, interval: float) -> None:
        """Start (or restart) the schedule with a new interval in seconds."""
        self.stop()
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event, interval), name=self._name, daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the schedule and wait for the thread to finish."""
        if self._thread is None:
            return
        self._stop_event.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None

    def _run(self, stop_event: threading.Event, interval: float) -> None:
        while not stop_event.wait(interval):
            try:
                self._task()
            except Exception:
                logger.exception("Scheduled %s task failed", self._name)
