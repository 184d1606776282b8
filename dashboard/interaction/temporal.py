"""
Interaction Contracts

Responsibility:
Define valid user actions and their intent, plus the year playback
control driven by the host frame loop.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from factiongraph.temporal.clock import LogicalClock


class ActionType(Enum):
    """Types of user interaction."""
    # Temporal
    SEEK_YEAR = "seek_year"
    PLAY = "play"
    PAUSE = "pause"
    STEP_YEAR = "step_year"

    # Filters
    SET_VIOLENCE_TYPE = "set_violence_type"
    SET_RELATIONSHIP_FILTER = "set_relationship_filter"
    SET_FACTION_FILTER = "set_faction_filter"
    SET_COUNTRY_SORT = "set_country_sort"

    # Selection
    SELECT_REGION = "select_region"
    SELECT_COUNTRY = "select_country"
    SELECT_FACTION = "select_faction"
    SELECT_EVENT = "select_event"
    SELECT_CONNECTED_FACTION = "select_connected_faction"

    # Graph
    CLICK_NODE = "click_node"
    CLICK_CANVAS = "click_canvas"

    # Navigation
    BACK = "back"
    RESET = "reset"
    ZOOM = "zoom"


@dataclass(frozen=True)
class InteractionRequest:
    """A specific user intent."""
    request_id: str
    action: ActionType
    payload: Dict[str, Any]
    timestamp_ms: float
    source_component: str


@dataclass(frozen=True)
class TemporalControlState:
    """
    State of the year slider.
    Separate from the rendered graph.
    """
    current_year: int
    min_year: int
    max_year: int
    is_playing: bool

    def __post_init__(self):
        if self.min_year > self.max_year:
            raise ValueError("min_year must not exceed max_year")

    @property
    def year_range(self) -> Tuple[int, int]:
        return self.min_year, self.max_year

    def clamp(self, year: int) -> int:
        return max(self.min_year, min(self.max_year, year))

    def next_year(self) -> int:
        """One year forward; wraps to the first year after the last."""
        if self.current_year >= self.max_year:
            return self.min_year
        return self.current_year + 1


class PlaybackControl:
    """
    Play/pause/seek over the year range.

    While playing, poll() advances one year every `interval_ms` and
    returns the new year; otherwise it returns None.
    """

    def __init__(
        self,
        min_year: int,
        max_year: int,
        interval_ms: float = 500,
        clock: Optional[LogicalClock] = None,
        start_year: Optional[int] = None
    ):
        self._clock = clock or LogicalClock.live()
        self._interval_ms = interval_ms
        current = max_year if start_year is None else start_year
        self._state = TemporalControlState(
            current_year=max(min_year, min(max_year, current)),
            min_year=min_year,
            max_year=max_year,
            is_playing=False
        )
        self._last_step_ms = 0.0

    @property
    def state(self) -> TemporalControlState:
        return self._state

    @property
    def year(self) -> int:
        return self._state.current_year

    def play(self):
        if not self._state.is_playing:
            self._state = replace(self._state, is_playing=True)
            self._last_step_ms = self._clock.now_ms()

    def pause(self):
        self._state = replace(self._state, is_playing=False)

    def toggle(self) -> bool:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()
        return self._state.is_playing

    def seek(self, year: int) -> int:
        self._state = replace(self._state, current_year=self._state.clamp(year))
        return self._state.current_year

    def step(self) -> int:
        self._state = replace(self._state, current_year=self._state.next_year())
        return self._state.current_year

    def poll(self) -> Optional[int]:
        if not self._state.is_playing:
            return None
        now = self._clock.now_ms()
        if now - self._last_step_ms < self._interval_ms:
            return None
        self._last_step_ms = now
        return self.step()
