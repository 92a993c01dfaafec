from __future__ import annotations

from typing import Callable, List, Optional


class TaskHandle:
    """Cancellation handle for a scheduled task. Cancelling is just a flag that the scheduler checks."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _RepeatingTask:
    def __init__(self, handle: TaskHandle, interval_ms: float, fn: Callable[[], None]) -> None:
        self.handle = handle
        self.interval_ms = interval_ms
        self.fn = fn
        self.next_ms: Optional[float] = None

    def run_if_due(self, now_ms: float) -> None:
        if self.next_ms is None:
            self.next_ms = now_ms
        if now_ms < self.next_ms:
            return
        # Fixed cadence; missed slots are skipped instead of run back to back.
        while self.next_ms <= now_ms:
            self.next_ms += self.interval_ms
        self.fn()


class _FrameTask:
    def __init__(self, handle: TaskHandle, fn: Callable[[], bool]) -> None:
        self.handle = handle
        self.fn = fn

    def run_if_due(self, now_ms: float) -> None:
        if not self.fn():
            self.handle.cancel()


class Scheduler:
    """
    Cooperative task scheduler driven by the host loop.

    Nothing runs on its own: the host calls ``run_pending(now_ms)`` once per
    displayed frame, and every due task runs to completion on that thread.
    """

    def __init__(self) -> None:
        self._tasks: List[object] = []

    def every(self, interval_ms: float, fn: Callable[[], None], name: str = "repeating") -> TaskHandle:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        handle = TaskHandle(name)
        self._tasks.append(_RepeatingTask(handle, interval_ms, fn))
        return handle

    def each_frame(self, fn: Callable[[], bool], name: str = "frame") -> TaskHandle:
        """Run ``fn`` every pass for as long as it returns a truthy value."""
        handle = TaskHandle(name)
        self._tasks.append(_FrameTask(handle, fn))
        return handle

    def run_pending(self, now_ms: float) -> None:
        for task in list(self._tasks):
            if task.handle.cancelled:
                continue
            task.run_if_due(now_ms)
        self._tasks = [t for t in self._tasks if not t.handle.cancelled]

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.handle.cancel()
        self._tasks = []

    def __len__(self) -> int:
        return sum(1 for t in self._tasks if not t.handle.cancelled)
