from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol

from rebootlab.core.errors import RemoteError, WaitTimeoutError


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class Clock(Protocol):
    def now(self) -> float:
        ...

    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Monotonic time and blocking sleep."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class Deadline:
    """Absolute deadline fixed once at construction."""

    def __init__(self, clock: Clock, budget: float) -> None:
        self.clock = clock
        self.budget = budget
        self.start = clock.now()
        self.at = self.start + budget

    def elapsed(self) -> float:
        return self.clock.now() - self.start

    def remaining(self) -> float:
        return max(0.0, self.at - self.clock.now())

    def expired(self) -> bool:
        return self.clock.now() > self.at


def await_value(clock: Clock, timeout: float, probe, predicate, interval: float = 5.0, what: str = "value"):
    """Call ``probe`` until ``predicate`` accepts its result or ``timeout`` passes.

    ``RemoteError`` from the probe counts as "not there yet". Returns the
    accepted value; raises ``WaitTimeoutError`` with the last seen value.
    """
    deadline = Deadline(clock, timeout)
    last = None
    while True:
        try:
            last = probe()
        except RemoteError as exc:
            last = exc
        else:
            if predicate(last):
                return last
        if deadline.expired():
            raise WaitTimeoutError(what, deadline.elapsed(), last)
        clock.sleep(min(interval, deadline.remaining()) or interval)
