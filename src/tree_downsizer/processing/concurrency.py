"""并发控制原语：准入闸门与完成计数器。"""

from __future__ import annotations

import threading
from typing import Optional


class AdmissionGate:
    """容量固定的计数闸门，限制同时在处理中的任务数量。

    acquire 在闸门已满时阻塞调用方（即遍历线程），形成背压。
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak(self) -> int:
        """运行期间同时准入的最大任务数。"""

        with self._lock:
            return self._peak

    def acquire(self) -> None:
        self._semaphore.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        with self._lock:
            if self._in_flight == 0:
                raise RuntimeError("AdmissionGate released more times than acquired")
            self._in_flight -= 1
        self._semaphore.release()


class CompletionTracker:
    """类似 WaitGroup 的计数器：阻塞直到所有已派发任务结束。"""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._pending = 0

    @property
    def pending(self) -> int:
        with self._condition:
            return self._pending

    def add(self, count: int = 1) -> None:
        with self._condition:
            self._pending += count

    def done(self) -> None:
        with self._condition:
            if self._pending == 0:
                raise RuntimeError("CompletionTracker.done() called with no pending tasks")
            self._pending -= 1
            if self._pending == 0:
                self._condition.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """等待计数归零；超时返回 False。"""

        with self._condition:
            return self._condition.wait_for(lambda: self._pending == 0, timeout=timeout)
