"""
Cancellable single-shot scheduling for the hold delay.

ThreadingScheduler runs callbacks on timer threads. ManualScheduler fires
them only when advance() moves its clock, for hosts that drive their own
event loop and for deterministic tests.
"""

import threading
from abc import ABC, abstractmethod


class ScheduledTask(ABC):
    """Handle for a pending callback."""

    @abstractmethod
    def cancel(self):
        """Prevent the callback from running if it has not run yet."""

    @property
    @abstractmethod
    def cancelled(self):
        pass


class Scheduler(ABC):
    """Source of delayed callbacks."""

    @abstractmethod
    def schedule(self, delay, callback):
        """
        Run callback once after delay seconds.

        Returns:
            ScheduledTask handle
        """


class _TimerTask(ScheduledTask):

    def __init__(self, timer):
        self._timer = timer
        self._cancelled = False

    def cancel(self):
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self):
        return self._cancelled


class ThreadingScheduler(Scheduler):
    """Scheduler backed by daemon threading.Timer instances."""

    def schedule(self, delay, callback):
        timer = threading.Timer(max(0.0, delay), callback)
        timer.daemon = True
        task = _TimerTask(timer)
        timer.start()
        return task


class _ManualTask(ScheduledTask):

    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self):
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler whose clock only moves when advance() is called."""

    def __init__(self):
        self.now = 0.0
        self._tasks = []
        self._lock = threading.Lock()

    def schedule(self, delay, callback):
        task = _ManualTask(self.now + max(0.0, delay), callback)
        with self._lock:
            self._tasks.append(task)
        return task

    @property
    def pending(self):
        """Number of scheduled callbacks that are neither fired nor cancelled."""
        with self._lock:
            return sum(1 for t in self._tasks if not t.cancelled)

    def advance(self, seconds):
        """
        Move the clock forward and run every callback that came due.

        Callbacks run in due order on the calling thread.

        Returns:
            number of callbacks run
        """
        self.now += seconds
        with self._lock:
            due = sorted(
                (t for t in self._tasks if t.due <= self.now and not t.cancelled),
                key=lambda t: t.due,
            )
            self._tasks = [t for t in self._tasks if t not in due and not t.cancelled]

        for task in due:
            task.callback()
        return len(due)
