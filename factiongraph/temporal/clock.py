"""
Logical Clock for Deterministic Interaction Timing
==================================================

Injectable millisecond clock used by debouncers, throttlers, the
selection guard and double-click detection.

GUARANTEES:
- Rate limiters never read system time directly
- In manual mode time only moves through advance()/set(), so
  interaction sequences replay identically in tests
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List
import time


class ClockError(Exception):
    """Raised when a manual clock is moved backwards."""
    pass


@dataclass
class LogicalClock:
    """
    Injectable clock for deterministic interaction timing.

    MODES:
    ======
    1. LIVE mode: monotonic system time in milliseconds
    2. MANUAL mode: time is whatever advance()/set() made it

    Every read is recorded so a live session's timing can be inspected.
    """
    _ticks: List[float] = field(default_factory=list)
    _is_live: bool = True
    _manual_ms: float = 0.0
    _record: bool = False

    def now_ms(self) -> float:
        """Current logical time in milliseconds."""
        if self._is_live:
            current = time.monotonic() * 1000.0
        else:
            current = self._manual_ms
        if self._record:
            self._ticks.append(current)
        return current

    def is_live(self) -> bool:
        return self._is_live

    def tick_count(self) -> int:
        """Number of recorded reads."""
        return len(self._ticks)

    @property
    def ticks(self) -> List[float]:
        return list(self._ticks)

    def advance(self, delta_ms: float) -> float:
        """Move a manual clock forward."""
        if self._is_live:
            raise ClockError("Cannot advance a live clock")
        if delta_ms < 0:
            raise ClockError(f"Cannot move clock backwards by {delta_ms} ms")
        self._manual_ms += delta_ms
        return self._manual_ms

    def set(self, at_ms: float) -> float:
        if self._is_live:
            raise ClockError("Cannot set a live clock")
        if at_ms < self._manual_ms:
            raise ClockError(f"Cannot move clock back from {self._manual_ms} to {at_ms}")
        self._manual_ms = at_ms
        return self._manual_ms

    @classmethod
    def live(cls, record: bool = False) -> 'LogicalClock':
        """Create clock in LIVE mode (uses system time)."""
        return cls(_is_live=True, _record=record)

    @classmethod
    def manual(cls, start_ms: float = 0.0, record: bool = False) -> 'LogicalClock':
        """Create clock in MANUAL mode starting at `start_ms`."""
        return cls(_is_live=False, _manual_ms=start_ms, _record=record)

    def __repr__(self) -> str:
        mode = "LIVE" if self._is_live else "MANUAL"
        return f"LogicalClock({mode}, ticks={len(self._ticks)})"
