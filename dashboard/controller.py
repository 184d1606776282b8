"""
Dashboard Controller

Responsibility:
Turn InteractionRequests into engine calls, view-state transitions and
renderer updates. Runs entirely on the host's frame loop: the host calls
tick() once per frame and handle() for every user action.

UPDATE PATHS:
=============
1. Full rebuild (debounced): new graph, layout restart + warm-up, render()
2. Focus refresh (throttled): new graph, visibility diff only,
   apply_transition(); used while a focus is active and the node set is
   already laid out
3. Focus click: visibility diff on the current graph, no rebuild
4. Panel refresh (immediate): a year or violence-type change re-rolls the
   open country panel; panel lists are derived from state on demand
"""

from __future__ import annotations
from typing import Callable, Dict, Optional, Tuple
import logging
import math

from factiongraph.config import EngineConfig
from factiongraph.contracts.base import Error, ErrorCode, Result
from factiongraph.contracts.events import ConflictEvent, EventFilter, ViolenceType
from factiongraph.contracts.graph import FactionGraph, RelationshipFilter
from factiongraph.core.countries import CountrySortMode
from factiongraph.core.focus import ClickKind, ClickOutcome, FocusController
from factiongraph.engine import FactionGraphEngine
from factiongraph.layout.forces import ForceConfig, LayoutEngine, WarmupSchedule, ZoneLayout
from factiongraph.temporal.clock import LogicalClock
from factiongraph.temporal.ratelimit import Debouncer, SelectionGuard, Throttler
from factiongraph.temporal.state_machine import (
    StateChange, ViewModeName, ViewState, ViewStateMachine, panel_events
)

from dashboard.interaction.temporal import ActionType, InteractionRequest, PlaybackControl
from dashboard.mapper import GraphViewMapper
from dashboard.visualization.graph import Renderer


logger = logging.getLogger(__name__)

# State keys whose change alters the event window
WINDOW_KEYS = frozenset({"selected_violence_type", "selected_region", "mode_name"})


class DashboardController:
    """
    Wires one dashboard session together.

    OWNS:
    =====
    - ViewStateMachine (the only view-state mutator)
    - FocusController (focus + double-click)
    - PlaybackControl (year slider)
    - Debouncer / Throttler for the two update paths
    """

    def __init__(
        self,
        engine: FactionGraphEngine,
        renderer: Renderer,
        layout: Optional[LayoutEngine] = None,
        clock: Optional[LogicalClock] = None,
        width: float = 1200,
        height: float = 800
    ):
        config: EngineConfig = engine.config
        limits = config.rate_limits
        self._engine = engine
        self._renderer = renderer
        self._layout = layout or ZoneLayout()
        self._clock = clock or LogicalClock.live()
        self._force_config = ForceConfig.from_layout_config(config.layout, width, height)
        self._mapper = GraphViewMapper()

        self._view = ViewStateMachine(guard=SelectionGuard(limits.selection_guard_ms, self._clock))
        self._focus = FocusController(limits.double_click_ms)
        year_range = engine.index.year_range or (0, 0)
        self._playback = PlaybackControl(
            year_range[0], year_range[1], limits.playback_interval_ms, self._clock
        )

        self._rebuild = Debouncer(self._full_rebuild, limits.rebuild_debounce_ms, self._clock)
        self._refresh = Throttler(self._focus_refresh, limits.focus_throttle_ms, self._clock)
        self._warmup = WarmupSchedule(0)

        self._relationship = RelationshipFilter.ALL
        self._graph = FactionGraph.empty()
        self._laid_out: frozenset = frozenset()
        self._rebuild_count = 0

        self._view.subscribe(self._on_state_change)
        self._handlers: Dict[ActionType, Callable[[dict], Result]] = {
            ActionType.SEEK_YEAR: self._seek_year,
            ActionType.PLAY: lambda p: self._ok(self._playback.play()),
            ActionType.PAUSE: lambda p: self._ok(self._playback.pause()),
            ActionType.STEP_YEAR: lambda p: self._ok(self._on_year_changed(self._playback.step())),
            ActionType.SET_VIOLENCE_TYPE: self._set_violence_type,
            ActionType.SET_RELATIONSHIP_FILTER: self._set_relationship,
            ActionType.SET_FACTION_FILTER: lambda p: self._view.set_faction_filter(p.get("faction")),
            ActionType.SET_COUNTRY_SORT: lambda p: self._view.set_country_sort_mode(
                CountrySortMode.parse(p.get("sort"))),
            ActionType.SELECT_REGION: lambda p: self._view.select_region(p.get("region", "")),
            ActionType.SELECT_COUNTRY: lambda p: self._view.select_country(
                p.get("country", ""), self._engine.window(self.current_filter())),
            ActionType.SELECT_FACTION: lambda p: self._view.select_faction(
                p.get("faction", ""), self._engine.events),
            ActionType.SELECT_EVENT: self._select_event,
            ActionType.SELECT_CONNECTED_FACTION: lambda p: self._view.select_connected_faction(
                p.get("faction")),
            ActionType.CLICK_NODE: lambda p: self._outcome(self.click_node(p.get("node_id", ""))),
            ActionType.CLICK_CANVAS: lambda p: self._outcome(self.click_canvas()),
            ActionType.BACK: lambda p: self._view.back(),
            ActionType.RESET: self._reset,
            ActionType.ZOOM: self._set_zoom,
        }

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def view_state(self) -> ViewState:
        return self._view.state

    @property
    def graph(self) -> FactionGraph:
        return self._graph

    @property
    def focus(self) -> FocusController:
        return self._focus

    @property
    def playback(self) -> PlaybackControl:
        return self._playback

    @property
    def warmup(self) -> WarmupSchedule:
        return self._warmup

    @property
    def rebuild_count(self) -> int:
        return self._rebuild_count

    @property
    def rebuild_pending(self) -> bool:
        return self._rebuild.pending

    def current_filter(self) -> EventFilter:
        state = self._view.state
        return EventFilter(
            year=self._playback.year,
            violence_type=state.selected_violence_type,
            region=state.region_scope
        )

    def panel_events(self) -> Tuple[ConflictEvent, ...]:
        """Events the active country or faction panel lists right now."""
        return panel_events(self._view.state, self._playback.year)

    # =========================================================================
    # HOST ENTRY POINTS
    # =========================================================================

    def start(self):
        """Initial synchronous build."""
        self._full_rebuild()

    def tick(self):
        """One host frame: fire due rate-limited calls, playback, warm-up."""
        self._rebuild.poll()
        self._refresh.poll()

        year = self._playback.poll()
        if year is not None:
            self._on_year_changed(year)

        if self._warmup.step(self._layout):
            self._render()

    def handle(self, request: InteractionRequest) -> Result:
        handler = self._handlers.get(request.action)
        if handler is None:
            logger.warning("No handler for %s", request.action)
            return Result.failure(Error.of(
                ErrorCode.INVALID_STATE_TRANSITION, "Unsupported action", action=request.action.value
            ))
        logger.debug("%s from %s: %s", request.action.value, request.source_component, request.payload)
        return handler(request.payload)

    def click_node(self, node_id: str) -> ClickOutcome:
        outcome = self._focus.click_node(self._graph, node_id, self._clock.now_ms())
        if outcome.kind is ClickKind.FOCUSED:
            self._renderer.apply_transition(self._mapper.map_transition(outcome.diff))
        elif outcome.kind is ClickKind.OPEN_DETAIL:
            self._view.select_faction(node_id, self._engine.events)
        return outcome

    def click_canvas(self) -> ClickOutcome:
        outcome = self._focus.click_canvas(self._graph)
        if outcome.kind is ClickKind.CLEARED:
            self._renderer.apply_transition(self._mapper.map_transition(outcome.diff))
        return outcome

    # =========================================================================
    # UPDATE PATHS
    # =========================================================================

    def _on_year_changed(self, year: int):
        self._refresh_country()
        if self._focus.is_active:
            self._refresh.trigger()
        else:
            self._rebuild.trigger()

    def _full_rebuild(self):
        window = self.current_filter()
        self._graph = self._engine.build_graph(window, self._relationship)
        self._rebuild_count += 1

        previous = self._layout.positions()
        self._layout.start(self._graph.nodes, self._graph.edges, self._force_config, previous)
        self._laid_out = self._graph.node_ids
        self._warmup = WarmupSchedule.from_layout_config(self._engine.config.layout)

        self._focus.refresh(self._graph)
        self._render()
        logger.debug("Full rebuild #%d at %s: %d nodes", self._rebuild_count,
                     window.cache_key(), len(self._graph.nodes))

    def _focus_refresh(self):
        graph = self._engine.build_graph(self.current_filter(), self._relationship)
        if not graph.node_ids <= self._laid_out:
            # New factions need positions.
            self._rebuild.trigger()
            return
        self._graph = graph
        diff = self._focus.refresh(graph)
        if not diff.is_noop:
            self._renderer.apply_transition(self._mapper.map_transition(diff))

    def _refresh_country(self):
        """Re-roll the open country panel against the current window."""
        if self._view.state.mode_name not in (ViewModeName.COUNTRY, ViewModeName.EVENT):
            return
        self._view.refresh_country(self._engine.window(self.current_filter()))

    def _render(self):
        state = self._focus.state
        view = self._mapper.map_graph(
            self._graph, self._layout.positions(), state.visible_ids, state.focused_id
        )
        self._renderer.render(view)

    def _on_state_change(self, change: StateChange):
        if WINDOW_KEYS.intersection(change.changed_keys):
            if change.old.region_scope != change.new.region_scope or \
                    change.old.selected_violence_type != change.new.selected_violence_type:
                self._rebuild.trigger()

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _seek_year(self, payload: dict) -> Result:
        raw = payload.get("year", self._playback.year)
        try:
            requested = int(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid year %r ignored", raw)
            return Result.failure(Error.of(ErrorCode.INVALID_STATE_TRANSITION, "Invalid year", year=raw))
        year = self._playback.seek(requested)
        self._on_year_changed(year)
        return Result.success(year)

    def _set_zoom(self, payload: dict) -> Result:
        raw = payload.get("scale", 1.0)
        try:
            scale = float(raw)
        except (TypeError, ValueError):
            scale = math.nan
        if not math.isfinite(scale):
            logger.warning("Invalid zoom scale %r ignored", raw)
            return Result.failure(Error.of(ErrorCode.INVALID_STATE_TRANSITION, "Invalid zoom scale", scale=raw))
        return self._view.set_zoom(scale)

    def _set_violence_type(self, payload: dict) -> Result:
        raw = payload.get("violence_type")
        violence_type = ViolenceType.from_label(raw) if raw else None
        if raw and violence_type is None:
            logger.warning("Unknown violence type %r ignored", raw)
            return Result.failure(Error.of(
                ErrorCode.INVALID_STATE_TRANSITION, "Unknown violence type", violence_type=raw
            ))
        result = self._view.set_violence_type(violence_type)
        if result.is_success:
            self._refresh_country()
        return result

    def _set_relationship(self, payload: dict) -> Result:
        raw = payload.get("relationship", RelationshipFilter.ALL.value)
        for member in RelationshipFilter:
            if member.value == raw:
                self._relationship = member
                self._rebuild.trigger()
                return Result.success(member)
        logger.warning("Unknown relationship filter %r ignored", raw)
        return Result.failure(Error.of(
            ErrorCode.INVALID_STATE_TRANSITION, "Unknown relationship filter", relationship=raw
        ))

    def _select_event(self, payload: dict) -> Result:
        event_id = str(payload.get("event_id", ""))
        event = self._find_context_event(event_id)
        if event is None:
            logger.warning("Event %r not in the current view", event_id)
            return Result.failure(Error.of(ErrorCode.EVENT_NOT_FOUND, "Event not in view", event_id=event_id))
        return self._view.select_event(event)

    def _find_context_event(self, event_id: str) -> Optional[ConflictEvent]:
        for event in self.panel_events():
            if event.event_id == event_id:
                return event
        return None

    def _reset(self, payload: dict) -> Result:
        self._focus.reset()
        self._relationship = RelationshipFilter.ALL
        result = self._view.reset()
        self._rebuild.trigger()
        return result

    @staticmethod
    def _ok(_ignored=None) -> Result:
        return Result.success(True)

    @staticmethod
    def _outcome(outcome: ClickOutcome) -> Result:
        if outcome.error is not None:
            return Result.failure(outcome.error)
        return Result.success(outcome)
