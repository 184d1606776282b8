"""
Rate Limiting
=============

Poll-driven debounce/throttle for a single-threaded host loop.

The host calls `poll()` once per frame; nothing here spawns threads or
timers. Pending calls are last-write-wins: a newer trigger replaces the
arguments of an older one that has not fired yet.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Hashable, Optional, Tuple
import logging

from .clock import LogicalClock


logger = logging.getLogger(__name__)


class Debouncer:
    """
    Fire `fn` once, `delay_ms` after the LAST trigger.

    Used for full graph rebuilds: a burst of slider moves produces a
    single rebuild with the final arguments.
    """

    def __init__(self, fn: Callable[..., Any], delay_ms: float, clock: Optional[LogicalClock] = None):
        self._fn = fn
        self._delay_ms = delay_ms
        self._clock = clock or LogicalClock.live()
        self._pending: Optional[Tuple[tuple, dict]] = None
        self._due_ms: float = 0.0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, *args, **kwargs):
        self._pending = (args, kwargs)
        self._due_ms = self._clock.now_ms() + self._delay_ms

    def poll(self) -> bool:
        """Fire the pending call if its delay has elapsed."""
        if self._pending is None or self._clock.now_ms() < self._due_ms:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Fire the pending call now, regardless of delay."""
        if self._pending is None:
            return False
        args, kwargs = self._pending
        self._pending = None
        self._fn(*args, **kwargs)
        return True

    def cancel(self):
        self._pending = None


class Throttler:
    """
    Fire `fn` at most once per `interval_ms`, leading and trailing.

    The first trigger fires immediately. Triggers inside the interval
    collapse into one trailing call fired when the interval ends, so the
    final state is always applied.
    """

    def __init__(self, fn: Callable[..., Any], interval_ms: float, clock: Optional[LogicalClock] = None):
        self._fn = fn
        self._interval_ms = interval_ms
        self._clock = clock or LogicalClock.live()
        self._last_fired_ms: Optional[float] = None
        self._trailing: Optional[Tuple[tuple, dict]] = None

    @property
    def pending(self) -> bool:
        return self._trailing is not None

    def trigger(self, *args, **kwargs) -> bool:
        """Returns True when the call fired immediately."""
        now = self._clock.now_ms()
        if self._last_fired_ms is None or now - self._last_fired_ms >= self._interval_ms:
            self._trailing = None
            self._fire(now, args, kwargs)
            return True
        self._trailing = (args, kwargs)
        return False

    def poll(self) -> bool:
        if self._trailing is None:
            return False
        now = self._clock.now_ms()
        if now - self._last_fired_ms < self._interval_ms:
            return False
        args, kwargs = self._trailing
        self._trailing = None
        self._fire(now, args, kwargs)
        return True

    def cancel(self):
        self._trailing = None

    def _fire(self, now: float, args: tuple, kwargs: dict):
        self._last_fired_ms = now
        self._fn(*args, **kwargs)


class SelectionGuard:
    """
    Reject a repeat of the same selection inside `window_ms`.

    A click handler bound twice (map layer and list row) would otherwise
    push the same transition twice.
    """

    def __init__(self, window_ms: float, clock: Optional[LogicalClock] = None):
        self._window_ms = window_ms
        self._clock = clock or LogicalClock.live()
        self._last: Dict[str, Tuple[Hashable, float]] = {}

    def admit(self, action: str, target: Hashable) -> bool:
        now = self._clock.now_ms()
        previous = self._last.get(action)
        if previous is not None:
            last_target, last_ms = previous
            if last_target == target and now - last_ms < self._window_ms:
                logger.debug("Duplicate %s(%r) within %s ms ignored", action, target, self._window_ms)
                return False
        self._last[action] = (target, now)
        return True

    def reset(self):
        self._last.clear()
