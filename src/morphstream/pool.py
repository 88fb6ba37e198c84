"""Checkout/checkin pool for non-reentrant segmenter workers."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Generic, TypeVar


LOGGER = logging.getLogger(__name__)

W = TypeVar("W")


class WorkerLease(Generic[W]):
    """Exclusive claim on one pooled worker until released."""

    def __init__(self, pool: "WorkerPool[W]", worker: W) -> None:
        self._pool = pool
        self._worker = worker
        self._released = False

    @property
    def worker(self) -> W:
        if self._released:
            raise RuntimeError("Worker lease was already released")
        return self._worker

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Return the worker to its pool. Safe to call more than once."""

        self._pool._checkin(self)

    def __enter__(self) -> "WorkerLease[W]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class WorkerPool(Generic[W]):
    """Hands out workers so that no two live leases share one.

    Idle workers are reused; new ones are created on demand up to
    ``max_size`` (unbounded when ``None``). With a bound in place, checkout
    blocks until another lease is released.
    """

    def __init__(self, create_worker: Callable[[], W], *, max_size: int | None = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._create_worker = create_worker
        self._max_size = max_size
        self._idle: list[W] = []
        self._size = 0
        self._leased = 0
        self._condition = threading.Condition()

    @property
    def max_size(self) -> int | None:
        return self._max_size

    @property
    def size(self) -> int:
        with self._condition:
            return self._size

    @property
    def idle_count(self) -> int:
        with self._condition:
            return len(self._idle)

    @property
    def leased_count(self) -> int:
        with self._condition:
            return self._leased

    def checkout(self, timeout: float | None = None) -> WorkerLease[W]:
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._condition:
            while not self._idle and self._max_size is not None and self._size >= self._max_size:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise TimeoutError(f"No worker available within {timeout}s")
                self._condition.wait(remaining)

            if self._idle:
                self._leased += 1
                return WorkerLease(self, self._idle.pop())

            # Reserve the slot, build the worker outside the lock.
            self._size += 1
            self._leased += 1

        try:
            worker = self._create_worker()
        except BaseException:
            with self._condition:
                self._size -= 1
                self._leased -= 1
                self._condition.notify()
            raise

        LOGGER.debug("Created segmenter worker (pool size %d)", self._size)
        return WorkerLease(self, worker)

    def _checkin(self, lease: WorkerLease[W]) -> None:
        with self._condition:
            if lease._released:
                return
            lease._released = True
            self._idle.append(lease._worker)
            self._leased -= 1
            self._condition.notify()
