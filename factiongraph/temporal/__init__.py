"""
Temporal & Interaction State Layer
==================================

Time windowing, interaction timing and view-state transitions.

INVARIANTS:
- Window filtering never mutates the event list
- The ViewStateMachine store is the only holder of view state
- All timing reads go through an injectable LogicalClock

Modules:
- window: year / violence-type / region selection, indexed and cached
- clock: live or manual millisecond clock
- ratelimit: debounce, throttle, duplicate-selection guard
- state_machine: world/region/country/faction/event transitions
"""

from .window import EventIndex, faction_events, filter_events, matches
from .clock import ClockError, LogicalClock
from .ratelimit import Debouncer, SelectionGuard, Throttler
from .state_machine import (
    CountryView, EventView, FactionView, RegionView, WorldView, ViewMode,
    ViewModeName, ViewState, ViewStateMachine, StateChange, mode_name
)

__all__ = [
    'EventIndex', 'faction_events', 'filter_events', 'matches',
    'ClockError', 'LogicalClock',
    'Debouncer', 'SelectionGuard', 'Throttler',
    'CountryView', 'EventView', 'FactionView', 'RegionView', 'WorldView',
    'ViewMode', 'ViewModeName', 'ViewState', 'ViewStateMachine',
    'StateChange', 'mode_name',
]
