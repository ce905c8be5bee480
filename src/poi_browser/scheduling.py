from __future__ import annotations

from typing import Any, Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """The slice of ``asyncio.AbstractEventLoop`` used for timers and lookups."""

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle: ...

    def run_in_executor(
        self, executor: Any, func: Callable[..., Any], *args: Any
    ) -> Any: ...


class TimerSlot:
    """At most one pending callback; starting a new one cancels the old."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def start(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(delay, self._fire, callback, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        callback(*args)


class Debouncer:
    def __init__(
        self, scheduler: Scheduler, delay_s: float, callback: Callable[..., Any]
    ) -> None:
        self.delay_s = delay_s
        self._callback = callback
        self._slot = TimerSlot(scheduler)

    @property
    def pending(self) -> bool:
        return self._slot.pending

    def trigger(self, *args: Any) -> None:
        self._slot.start(self.delay_s, self._callback, *args)

    def cancel(self) -> None:
        self._slot.cancel()
