from __future__ import annotations

import heapq
import itertools

import pytest


class FakeHandle:
    def __init__(self, when: float, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeFuture:
    def __init__(self):
        self._done = False
        self._cancelled = False
        self._result = None
        self._exception = None
        self._callbacks = []

    def add_done_callback(self, callback):
        if self._done:
            callback(self)
        else:
            self._callbacks.append(callback)

    def cancel(self):
        if self._done:
            return False
        self._cancelled = True
        self._finish()
        return True

    def cancelled(self):
        return self._cancelled

    def result(self):
        if self._exception is not None:
            raise self._exception
        return self._result

    def run(self, func, args):
        if self._done:
            return
        try:
            self._result = func(*args)
        except Exception as exc:
            self._exception = exc
        self._finish()

    def _finish(self):
        self._done = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)


class FakeScheduler:
    """Manual clock shaped like an asyncio loop; executor jobs can be held back."""

    def __init__(self):
        self.now = 0.0
        self._heap = []
        self._seq = itertools.count()
        self.hold_jobs = False
        self.held_jobs = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, callback, args)
        heapq.heappush(self._heap, (handle.when, next(self._seq), handle))
        return handle

    def run_in_executor(self, executor, func, *args):
        future = FakeFuture()
        if self.hold_jobs:
            self.held_jobs.append((future, func, args))
        else:
            future.run(func, args)
        return future

    def finish_jobs(self):
        jobs, self.held_jobs = self.held_jobs, []
        for future, func, args in jobs:
            future.run(func, args)

    @property
    def live(self):
        return [h for _, _, h in self._heap if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._heap and self._heap[0][0] <= target:
            when, _, handle = heapq.heappop(self._heap)
            self.now = when
            if not handle.cancelled:
                handle.callback(*handle.args)
        self.now = target


@pytest.fixture
def scheduler():
    return FakeScheduler()
