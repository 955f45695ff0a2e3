"""Delayed callback scheduling for simulated query latency.

``TimerScheduler`` fires callbacks on daemon timer threads; ``ManualScheduler``
keeps its own clock and only fires callbacks when ``advance()`` is called,
which lets tests step through the processing delay deterministically.
"""
import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    """A callback due at some point in the future.

    Inspectable (``done``, ``cancelled``) and waitable via ``wait()``.
    """

    def __init__(self, callback: Callable[[], None], due: float):
        self.callback = callback
        self.due = due
        self.cancelled = False
        self._finished = threading.Event()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def run(self) -> None:
        """Invoke the callback once, unless cancelled."""
        if self.cancelled or self.done:
            return
        try:
            self.callback()
        finally:
            self._finished.set()

    def cancel(self) -> None:
        self.cancelled = True
        self._finished.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the task has run or been cancelled."""
        return self._finished.wait(timeout)


class TimerScheduler:
    """Runs each callback on a ``threading.Timer`` after ``delay`` seconds"""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback, due=delay)
        timer = threading.Timer(delay, self._run, args=(task,))
        timer.daemon = True
        timer.start()
        return task

    @staticmethod
    def _run(task: ScheduledTask) -> None:
        try:
            task.run()
        except Exception:
            logger.exception("Scheduled callback failed")


class ManualScheduler:
    """Fake-clock scheduler: callbacks run only when the clock is advanced"""

    def __init__(self):
        self.now = 0.0
        self._pending: List[ScheduledTask] = []

    @property
    def pending(self) -> List[ScheduledTask]:
        return [t for t in self._pending if not t.done]

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback, due=self.now + delay)
        self._pending.append(task)
        return task

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every task that became due.

        Tasks run in due order (ties in scheduling order). Returns the number
        of callbacks that ran.
        """
        self.now += seconds
        due = sorted(
            (t for t in self._pending if t.due <= self.now and not t.done),
            key=lambda t: t.due,
        )
        self._pending = [t for t in self._pending if t not in due and not t.done]
        for task in due:
            task.run()
        return len(due)
