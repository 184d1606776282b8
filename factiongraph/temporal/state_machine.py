"""
View State Machine
==================

Pure transition functions over an immutable ViewState, plus the one
store allowed to hold the current state.

INVARIANT: every transition is a PURE FUNCTION
(state, arguments) -> Result(new state) | Result(error).
A rejected transition returns a failure and the caller keeps the old
state; nothing here raises during interaction.

MODES:
======
    world --select region--> region --select region (same)--> world
    world|region --select country--> country
    world|region --select faction--> faction
    country|faction|event --select event--> event
    event --back--> the country/faction view that launched it
    country|faction --back--> region (if entered from one) | world
    region --back--> world
    any --window moves--> same mode, country rollup recomputed

Exactly one of selected_region / selected_country_name /
selected_faction_name / selected_event is non-None at a time; each is
derived from the active mode rather than stored beside it.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union
import logging

from ..contracts.base import Error, ErrorCode, Result
from ..contracts.events import ConflictEvent, REGIONS, ViolenceType
from ..core.countries import CountryAggregate, CountrySortMode, summarize_country
from .ratelimit import SelectionGuard
from .window import country_view_events, faction_events, faction_view_events


logger = logging.getLogger(__name__)

ZOOM_MIN = 1.0
ZOOM_MAX = 500.0


# =============================================================================
# MODES (tagged union)
# =============================================================================

class ViewModeName(Enum):
    WORLD = "world"
    REGION = "region"
    COUNTRY = "country"
    FACTION = "faction"
    EVENT = "event"


@dataclass(frozen=True)
class WorldView:
    pass


@dataclass(frozen=True)
class RegionView:
    region: str


@dataclass(frozen=True)
class CountryView:
    """
    Country detail. `country` is rolled up from the windowed events and
    is replaced by refresh_country whenever the window moves.
    """
    country_name: str
    country: CountryAggregate


@dataclass(frozen=True)
class FactionView:
    """
    Faction detail. `events` comes from the raw event list, not the
    windowed graph; the year, violence type and connected-faction
    filters are applied when the panel is derived (panel_events).
    """
    faction_name: str
    events: Tuple[ConflictEvent, ...]


@dataclass(frozen=True)
class EventView:
    event: ConflictEvent
    origin: Union[CountryView, FactionView]


ViewMode = Union[WorldView, RegionView, CountryView, FactionView, EventView]


def mode_name(mode: ViewMode) -> ViewModeName:
    if isinstance(mode, WorldView):
        return ViewModeName.WORLD
    if isinstance(mode, RegionView):
        return ViewModeName.REGION
    if isinstance(mode, CountryView):
        return ViewModeName.COUNTRY
    if isinstance(mode, FactionView):
        return ViewModeName.FACTION
    if isinstance(mode, EventView):
        return ViewModeName.EVENT
    raise TypeError(f"Unhandled view mode: {type(mode).__name__}")


# =============================================================================
# STATE
# =============================================================================

@dataclass(frozen=True)
class ViewState:
    """
    Complete dashboard view state for one session.

    `faction_filter` narrows the events listed in country mode and is
    distinct from `selected_faction_name`, which means "inside faction
    mode".
    """
    mode: ViewMode = field(default_factory=WorldView)
    selected_violence_type: Optional[ViolenceType] = None
    faction_filter: Optional[str] = None
    selected_connected_faction: Optional[str] = None
    country_sort_mode: CountrySortMode = CountrySortMode.CASUALTIES
    previous_mode: Optional[ViewModeName] = None
    previous_region: Optional[str] = None
    zoom_scale: float = 1.0

    def __post_init__(self):
        if self.zoom_scale <= 0:
            raise ValueError("zoom_scale must be positive")

    @property
    def mode_name(self) -> ViewModeName:
        return mode_name(self.mode)

    @property
    def selected_region(self) -> Optional[str]:
        return self.mode.region if isinstance(self.mode, RegionView) else None

    @property
    def selected_country_name(self) -> Optional[str]:
        return self.mode.country_name if isinstance(self.mode, CountryView) else None

    @property
    def selected_country_data(self) -> Optional[CountryAggregate]:
        return self.mode.country if isinstance(self.mode, CountryView) else None

    @property
    def selected_faction_name(self) -> Optional[str]:
        return self.mode.faction_name if isinstance(self.mode, FactionView) else None

    @property
    def selected_event(self) -> Optional[ConflictEvent]:
        return self.mode.event if isinstance(self.mode, EventView) else None

    @property
    def region_scope(self) -> Optional[str]:
        """Region restricting graph and rankings: the active or the remembered one."""
        if isinstance(self.mode, RegionView):
            return self.mode.region
        if isinstance(self.mode, (CountryView, FactionView, EventView)):
            return self.previous_region
        return None


# Keys compared to build StateChange.changed_keys
TRACKED_KEYS: Tuple[str, ...] = (
    "mode_name",
    "selected_region",
    "selected_country_name",
    "selected_country_data",
    "selected_faction_name",
    "selected_event",
    "selected_violence_type",
    "faction_filter",
    "selected_connected_faction",
    "country_sort_mode",
    "zoom_scale",
)

# Changes to these keys require re-rendering the main view
RENDER_KEYS: FrozenSet[str] = frozenset({
    "mode_name", "selected_country_name", "selected_country_data",
    "selected_faction_name", "selected_event",
})


@dataclass(frozen=True)
class StateChange:
    old: ViewState
    new: ViewState
    changed_keys: Tuple[str, ...]

    @property
    def render_required(self) -> bool:
        return any(k in RENDER_KEYS for k in self.changed_keys)

    @staticmethod
    def between(old: ViewState, new: ViewState) -> StateChange:
        changed = tuple(k for k in TRACKED_KEYS if getattr(old, k) != getattr(new, k))
        return StateChange(old=old, new=new, changed_keys=changed)


# =============================================================================
# PURE TRANSITIONS
# =============================================================================

def _invalid(state: ViewState, action: str) -> Result:
    return Result.failure(Error.of(
        ErrorCode.INVALID_STATE_TRANSITION,
        f"{action} not allowed in {state.mode_name.value} mode",
        action=action,
        mode=state.mode_name.value
    ))


def _world(state: ViewState) -> ViewState:
    """World defaults, keeping the cross-mode filters."""
    return ViewState(
        selected_violence_type=state.selected_violence_type,
        country_sort_mode=state.country_sort_mode
    )


def select_region(state: ViewState, region: str) -> Result:
    if region not in REGIONS:
        return Result.failure(Error.of(ErrorCode.REGION_NOT_FOUND, "Unknown region", region=region))
    if isinstance(state.mode, RegionView):
        if state.mode.region == region:
            return Result.success(replace(state, mode=WorldView(), previous_mode=None, previous_region=None))
        return Result.success(replace(state, mode=RegionView(region)))
    if isinstance(state.mode, WorldView):
        return Result.success(replace(state, mode=RegionView(region), previous_mode=ViewModeName.WORLD))
    return _invalid(state, "select_region")


def select_country(state: ViewState, country_name: str, events: Sequence[ConflictEvent]) -> Result:
    """
    Enter country mode. `events` is the currently windowed event list;
    the aggregate is cached in the view and re-rolled by refresh_country
    when the window moves.
    """
    if not isinstance(state.mode, (WorldView, RegionView)):
        return _invalid(state, "select_country")

    matching = [e for e in events if e.country == country_name]
    if not matching:
        return Result.failure(Error.of(
            ErrorCode.COUNTRY_NOT_FOUND, "No events for country", country=country_name
        ))

    return Result.success(replace(
        state,
        mode=CountryView(country_name, summarize_country(country_name, matching)),
        previous_mode=state.mode_name,
        previous_region=state.selected_region,
        faction_filter=None,
        selected_connected_faction=None
    ))


def refresh_country(state: ViewState, events: Sequence[ConflictEvent]) -> Result:
    """
    Recompute the cached country rollup from a new window. Applies to
    country mode and to an event opened from it; other modes are returned
    unchanged. A country with no events left in the window stays selected
    with an empty rollup.
    """
    mode = state.mode
    origin = mode.origin if isinstance(mode, EventView) else mode
    if not isinstance(origin, CountryView):
        return Result.success(state)

    matching = [e for e in events if e.country == origin.country_name]
    refreshed = CountryView(
        origin.country_name,
        summarize_country(origin.country_name, matching, region=origin.country.region)
    )
    if isinstance(mode, EventView):
        return Result.success(replace(state, mode=EventView(mode.event, refreshed)))
    return Result.success(replace(state, mode=refreshed))


def select_faction(state: ViewState, faction_name: str, raw_events: Sequence[ConflictEvent]) -> Result:
    """Enter faction mode; the event list is rescanned from `raw_events`."""
    if not isinstance(state.mode, (WorldView, RegionView)):
        return _invalid(state, "select_faction")

    scanned = faction_events(raw_events, faction_name)
    if not scanned:
        return Result.failure(Error.of(
            ErrorCode.FACTION_NOT_FOUND, "No events for faction", faction=faction_name
        ))

    return Result.success(replace(
        state,
        mode=FactionView(faction_name, tuple(scanned)),
        previous_mode=state.mode_name,
        previous_region=state.selected_region,
        selected_connected_faction=None
    ))


def select_event(state: ViewState, event: ConflictEvent) -> Result:
    # previous_mode is left alone so back() can unwind past the event.
    if isinstance(state.mode, (CountryView, FactionView)):
        return Result.success(replace(state, mode=EventView(event, state.mode)))
    if isinstance(state.mode, EventView):
        return Result.success(replace(state, mode=EventView(event, state.mode.origin)))
    return _invalid(state, "select_event")


def back(state: ViewState) -> Result:
    """
    One level up. In world mode the state is returned unchanged.
    """
    mode = state.mode
    if isinstance(mode, EventView):
        return Result.success(replace(state, mode=mode.origin))
    if isinstance(mode, (CountryView, FactionView)):
        if state.previous_mode is ViewModeName.REGION and state.previous_region is not None:
            return Result.success(replace(
                state,
                mode=RegionView(state.previous_region),
                previous_mode=ViewModeName.WORLD,
                previous_region=None,
                faction_filter=None,
                selected_connected_faction=None
            ))
        return Result.success(_world(state))
    if isinstance(mode, RegionView):
        return Result.success(replace(state, mode=WorldView(), previous_mode=None, previous_region=None))
    return Result.success(state)


def set_violence_type(state: ViewState, violence_type: Optional[ViolenceType]) -> Result:
    return Result.success(replace(state, selected_violence_type=violence_type))


def set_faction_filter(state: ViewState, faction_name: Optional[str]) -> Result:
    if not isinstance(state.mode, CountryView):
        return _invalid(state, "set_faction_filter")
    return Result.success(replace(state, faction_filter=faction_name))


def select_connected_faction(state: ViewState, faction_name: Optional[str]) -> Result:
    if not isinstance(state.mode, FactionView):
        return _invalid(state, "select_connected_faction")
    return Result.success(replace(state, selected_connected_faction=faction_name))


def set_country_sort_mode(state: ViewState, sort_mode: CountrySortMode) -> Result:
    return Result.success(replace(state, country_sort_mode=sort_mode))


def set_zoom(state: ViewState, scale: float) -> Result:
    clamped = max(ZOOM_MIN, min(ZOOM_MAX, scale))
    return Result.success(replace(state, zoom_scale=clamped))


def reset(state: ViewState) -> Result:
    return Result.success(ViewState())


# =============================================================================
# DERIVED VIEWS
# =============================================================================

def panel_events(state: ViewState, year: Optional[int]) -> Tuple[ConflictEvent, ...]:
    """
    Events listed by the active country or faction panel under the
    current filters. Event mode lists the panel it was opened from;
    world and region modes list nothing.
    """
    mode = state.mode.origin if isinstance(state.mode, EventView) else state.mode
    if isinstance(mode, CountryView):
        return tuple(country_view_events(
            mode.country.events, year, state.selected_violence_type, state.faction_filter
        ))
    if isinstance(mode, FactionView):
        return tuple(faction_view_events(
            mode.events, year, state.selected_violence_type, state.selected_connected_faction
        ))
    return ()


# =============================================================================
# STORE
# =============================================================================

Listener = Callable[[StateChange], None]


class ViewStateMachine:
    """
    Holds the current ViewState and applies transitions.

    This is the only place a ViewState is replaced. Listeners receive a
    StateChange for every transition that changed at least one tracked key.
    """

    def __init__(self, initial: Optional[ViewState] = None, guard: Optional[SelectionGuard] = None):
        self._state = initial or ViewState()
        self._guard = guard
        self._listeners: List[Listener] = []

    @property
    def state(self) -> ViewState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Selections (guarded against duplicate clicks)
    # -------------------------------------------------------------------------

    def select_region(self, region: str) -> Result:
        return self._guarded("select_region", region, lambda s: select_region(s, region))

    def select_country(self, country_name: str, events: Sequence[ConflictEvent]) -> Result:
        return self._guarded("select_country", country_name, lambda s: select_country(s, country_name, events))

    def select_faction(self, faction_name: str, raw_events: Sequence[ConflictEvent]) -> Result:
        return self._guarded("select_faction", faction_name, lambda s: select_faction(s, faction_name, raw_events))

    def select_event(self, event: ConflictEvent) -> Result:
        return self._guarded("select_event", event.event_id, lambda s: select_event(s, event))

    # -------------------------------------------------------------------------
    # Everything else
    # -------------------------------------------------------------------------

    def back(self) -> Result:
        """At the world root the result carries the unchanged state."""
        return self._commit("back", back(self._state))

    def refresh_country(self, events: Sequence[ConflictEvent]) -> Result:
        return self._commit("refresh_country", refresh_country(self._state, events))

    def set_violence_type(self, violence_type: Optional[ViolenceType]) -> Result:
        return self._commit("set_violence_type", set_violence_type(self._state, violence_type))

    def set_faction_filter(self, faction_name: Optional[str]) -> Result:
        return self._commit("set_faction_filter", set_faction_filter(self._state, faction_name))

    def select_connected_faction(self, faction_name: Optional[str]) -> Result:
        return self._commit("select_connected_faction", select_connected_faction(self._state, faction_name))

    def set_country_sort_mode(self, sort_mode: CountrySortMode) -> Result:
        return self._commit("set_country_sort_mode", set_country_sort_mode(self._state, sort_mode))

    def set_zoom(self, scale: float) -> Result:
        return self._commit("set_zoom", set_zoom(self._state, scale))

    def reset(self) -> Result:
        if self._guard is not None:
            self._guard.reset()
        return self._commit("reset", reset(self._state))

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _guarded(self, action: str, target, transition: Callable[[ViewState], Result]) -> Result:
        if self._guard is not None and not self._guard.admit(action, target):
            return Result.failure(Error.of(
                ErrorCode.DUPLICATE_SELECTION, "Repeated selection ignored", action=action, target=target
            ))
        return self._commit(action, transition(self._state))

    def _commit(self, action: str, result: Result) -> Result:
        if result.is_failure:
            logger.warning("%s rejected: %s", action, result.error.message)
            return result

        change = StateChange.between(self._state, result.value)
        self._state = result.value
        if change.changed_keys:
            logger.debug("%s: %s -> %s %s", action, change.old.mode_name.value,
                         change.new.mode_name.value, list(change.changed_keys))
            self._notify(change)
        return result

    def _notify(self, change: StateChange):
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("View state listener failed")
