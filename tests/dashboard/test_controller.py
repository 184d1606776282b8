"""
Dashboard Controller Tests
==========================

End-to-end interaction flows on a manual clock with a recording renderer.

FLOWS TESTED:
1. Start renders once and warms the layout up over frames
2. Slider moves without focus debounce into one rebuild
3. Slider moves with focus take the throttled visibility path
4. Click / double click / canvas click
5. View-state selections reach the state machine
6. Slider and violence-type changes re-derive the open country or faction panel
7. Malformed payloads come back as failures
"""

import pytest

from factiongraph.config import EngineConfig, GraphConfig
from factiongraph.contracts.base import ErrorCode
from factiongraph.contracts.events import ConflictEvent, ViolenceType
from factiongraph.core.focus import ClickKind
from factiongraph.engine import FactionGraphEngine
from factiongraph.temporal.clock import LogicalClock
from factiongraph.temporal.state_machine import ViewModeName

from dashboard.controller import DashboardController
from dashboard.interaction.temporal import ActionType, InteractionRequest
from dashboard.visualization.graph import Renderer


EVENTS = [
    ConflictEvent(event_id="1", year=2001, country="Sudan", region="Africa",
                  side_a="Alpha", side_b="Beta", best=10,
                  violence_type=ViolenceType.STATE_BASED),
    ConflictEvent(event_id="2", year=2002, country="Sudan", region="Africa",
                  side_a="Alpha, Gamma", side_b="Beta", best=20,
                  violence_type=ViolenceType.STATE_BASED),
    ConflictEvent(event_id="3", year=2002, country="Chad", region="Africa",
                  side_a="Delta", side_b="Alpha", best=5,
                  violence_type=ViolenceType.NON_STATE),
]


class RecordingRenderer(Renderer):
    def __init__(self):
        self.views = []
        self.transitions = []

    def render(self, view):
        self.views.append(view)

    def apply_transition(self, transition):
        self.transitions.append(transition)


def request(action, **payload):
    return InteractionRequest(
        request_id=f"req_{action.value}",
        action=action,
        payload=payload,
        timestamp_ms=0,
        source_component="test"
    )


@pytest.fixture
def clock():
    return LogicalClock.manual()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def controller(clock, renderer):
    engine = FactionGraphEngine(EVENTS, EngineConfig(graph=GraphConfig(min_participation=1)))
    controller = DashboardController(engine, renderer, clock=clock)
    controller.start()
    return controller


class TestStartup:

    def test_initial_render(self, controller, renderer):
        assert controller.rebuild_count == 1
        assert len(renderer.views) == 1
        assert renderer.views[0].visible_node_ids == frozenset({"Alpha", "Beta", "Gamma", "Delta"})
        assert controller.playback.year == 2002

    def test_warmup_runs_over_frames(self, controller, renderer):
        frames = 0
        while controller.warmup.is_running:
            controller.tick()
            frames += 1
        assert frames == 20
        assert len(renderer.views) == 1 + frames
        controller.tick()
        assert len(renderer.views) == 1 + frames


class TestTimeSlider:

    def test_rebuilds_are_debounced(self, controller, clock):
        for year in (2001, 2002, 2001):
            controller.handle(request(ActionType.SEEK_YEAR, year=year))
            clock.advance(50)
            controller.tick()

        assert controller.rebuild_count == 1
        assert controller.rebuild_pending

        clock.advance(100)
        controller.tick()

        assert controller.rebuild_count == 2
        assert controller.graph.node_ids == frozenset({"Alpha", "Beta"})

    def test_focus_path_updates_visibility_only(self, controller, renderer, clock):
        controller.click_node("Gamma")
        views_before = len(renderer.views)

        controller.handle(request(ActionType.SEEK_YEAR, year=2001))

        assert controller.rebuild_count == 1
        assert len(renderer.views) == views_before
        last = renderer.transitions[-1]
        assert last.focused_id == "Gamma"
        assert last.exited == frozenset({"Alpha", "Beta"})

    def test_focus_path_rebuilds_when_new_nodes_appear(self, controller, clock):
        controller.handle(request(ActionType.SEEK_YEAR, year=2001))
        clock.advance(150)
        controller.tick()
        assert controller.rebuild_count == 2

        controller.click_node("Alpha")
        controller.handle(request(ActionType.SEEK_YEAR, year=2002))
        assert controller.rebuild_pending

        clock.advance(150)
        controller.tick()
        assert controller.rebuild_count == 3
        assert "Gamma" in controller.graph

    def test_playback_steps_through_years(self, controller, clock):
        controller.handle(request(ActionType.PLAY))
        clock.advance(500)
        controller.tick()
        assert controller.playback.year == 2001
        assert controller.rebuild_pending


class TestGraphClicks:

    def test_click_focuses(self, controller, renderer):
        outcome = controller.click_node("Gamma")

        assert outcome.kind is ClickKind.FOCUSED
        transition = renderer.transitions[-1]
        assert transition.exited == frozenset({"Delta"})
        assert controller.focus.state.visible_ids == frozenset({"Gamma", "Alpha", "Beta"})

    def test_double_click_opens_faction_view(self, controller, clock):
        controller.click_node("Gamma")
        clock.advance(300)
        outcome = controller.click_node("Gamma")

        assert outcome.kind is ClickKind.OPEN_DETAIL
        assert controller.view_state.mode_name is ViewModeName.FACTION
        assert controller.view_state.selected_faction_name == "Gamma"

    def test_canvas_click_restores_graph(self, controller, renderer):
        controller.click_node("Delta")
        result = controller.handle(request(ActionType.CLICK_CANVAS))

        assert result.is_success
        assert renderer.transitions[-1].entered == frozenset({"Beta", "Gamma"})
        assert not controller.focus.is_active

    def test_stale_node_click_is_a_failure(self, controller):
        result = controller.handle(request(ActionType.CLICK_NODE, node_id="Omega"))
        assert result.error.code is ErrorCode.FACTION_NOT_FOUND


class TestSelections:

    def test_region_selection_schedules_rebuild(self, controller, clock):
        result = controller.handle(request(ActionType.SELECT_REGION, region="Africa"))

        assert result.is_success
        assert controller.current_filter().region == "Africa"
        assert controller.rebuild_pending

    def test_country_then_event_then_back(self, controller, clock):
        assert controller.handle(request(ActionType.SELECT_COUNTRY, country="Sudan")).is_success
        assert controller.view_state.selected_country_data.total_events == 2

        assert controller.handle(request(ActionType.SELECT_EVENT, event_id="2")).is_success
        assert controller.view_state.selected_event.event_id == "2"

        controller.handle(request(ActionType.BACK))
        assert controller.view_state.mode_name is ViewModeName.COUNTRY

    def test_event_outside_view(self, controller):
        controller.handle(request(ActionType.SELECT_COUNTRY, country="Chad"))
        result = controller.handle(request(ActionType.SELECT_EVENT, event_id="1"))
        assert result.error.code is ErrorCode.EVENT_NOT_FOUND

    def test_violence_type(self, controller):
        assert controller.handle(request(ActionType.SET_VIOLENCE_TYPE, violence_type="Non-state Conflict")).is_success
        assert controller.current_filter().violence_type is ViolenceType.NON_STATE
        assert controller.rebuild_pending

        bad = controller.handle(request(ActionType.SET_VIOLENCE_TYPE, violence_type="Riots"))
        assert bad.is_failure

    def test_relationship_filter(self, controller, clock):
        assert controller.handle(request(ActionType.SET_RELATIONSHIP_FILTER, relationship="allies")).is_success
        clock.advance(150)
        controller.tick()
        assert [e.key for e in controller.graph.edges] == ["Alpha|Gamma"]

        assert controller.handle(request(ActionType.SET_RELATIONSHIP_FILTER, relationship="friends")).is_failure

    def test_back_at_world_is_a_successful_noop(self, controller):
        before = controller.view_state
        result = controller.handle(request(ActionType.BACK))
        assert result.is_success
        assert result.value is before

    def test_zoom_and_sort(self, controller):
        controller.handle(request(ActionType.ZOOM, scale=900))
        controller.handle(request(ActionType.SET_COUNTRY_SORT, sort="count"))
        assert controller.view_state.zoom_scale == 500
        assert controller.view_state.country_sort_mode.value == "count"

    def test_reset(self, controller, clock):
        controller.click_node("Alpha")
        controller.handle(request(ActionType.SELECT_REGION, region="Africa"))
        controller.handle(request(ActionType.RESET))

        assert not controller.focus.is_active
        assert controller.view_state.mode_name is ViewModeName.WORLD
        clock.advance(150)
        controller.tick()
        assert controller.graph.node_ids == frozenset({"Alpha", "Beta", "Gamma", "Delta"})


class TestPanels:

    def test_country_panel_follows_slider_forward(self, controller, clock):
        controller.handle(request(ActionType.SEEK_YEAR, year=2001))
        assert controller.handle(request(ActionType.SELECT_COUNTRY, country="Sudan")).is_success
        assert controller.view_state.selected_country_data.total_events == 1

        controller.handle(request(ActionType.SEEK_YEAR, year=2002))
        clock.advance(150)
        controller.tick()

        country = controller.view_state.selected_country_data
        assert country.total_events == 2
        assert country.total_casualties == 30
        assert controller.handle(request(ActionType.SELECT_EVENT, event_id="2")).is_success

    def test_country_panel_follows_slider_back(self, controller):
        controller.handle(request(ActionType.SELECT_COUNTRY, country="Sudan"))
        controller.handle(request(ActionType.SEEK_YEAR, year=2001))

        assert controller.view_state.selected_country_data.total_events == 1
        assert [e.event_id for e in controller.panel_events()] == ["1"]
        result = controller.handle(request(ActionType.SELECT_EVENT, event_id="2"))
        assert result.error.code is ErrorCode.EVENT_NOT_FOUND

    def test_country_kept_when_nothing_matches(self, controller):
        controller.handle(request(ActionType.SELECT_COUNTRY, country="Sudan"))
        controller.handle(request(ActionType.SEEK_YEAR, year=1990))

        assert controller.playback.year == 2001
        controller.handle(request(ActionType.SET_VIOLENCE_TYPE, violence_type="Non-state Conflict"))

        assert controller.view_state.mode_name is ViewModeName.COUNTRY
        country = controller.view_state.selected_country_data
        assert country.total_events == 0
        assert country.region == "Africa"
        assert controller.panel_events() == ()

    def test_violence_type_rerolls_country(self, controller):
        controller.handle(request(ActionType.SELECT_COUNTRY, country="Chad"))
        assert controller.view_state.selected_country_data.total_events == 1

        controller.handle(request(ActionType.SET_VIOLENCE_TYPE, violence_type="State-based Conflict"))
        assert controller.view_state.selected_country_data.total_events == 0

        controller.handle(request(ActionType.SET_VIOLENCE_TYPE, violence_type=None))
        assert controller.view_state.selected_country_data.total_events == 1

    def test_faction_filter_narrows_country_events(self, controller):
        controller.handle(request(ActionType.SELECT_COUNTRY, country="Sudan"))
        assert [e.event_id for e in controller.panel_events()] == ["1", "2"]

        assert controller.handle(request(ActionType.SET_FACTION_FILTER, faction="Gamma")).is_success
        assert [e.event_id for e in controller.panel_events()] == ["2"]
        assert controller.handle(request(ActionType.SELECT_EVENT, event_id="1")).is_failure

        controller.handle(request(ActionType.SET_FACTION_FILTER, faction=None))
        assert [e.event_id for e in controller.panel_events()] == ["1", "2"]

    def test_event_view_keeps_refreshed_origin(self, controller):
        controller.handle(request(ActionType.SELECT_COUNTRY, country="Sudan"))
        controller.handle(request(ActionType.SELECT_EVENT, event_id="2"))
        controller.handle(request(ActionType.SEEK_YEAR, year=2001))

        assert controller.view_state.mode_name is ViewModeName.EVENT
        assert controller.view_state.selected_event.event_id == "2"
        controller.handle(request(ActionType.BACK))
        assert controller.view_state.selected_country_data.total_events == 1

    def test_faction_panel_follows_slider_and_connected_faction(self, controller):
        assert controller.handle(request(ActionType.SELECT_FACTION, faction="Alpha")).is_success
        assert [e.event_id for e in controller.panel_events()] == ["1", "2", "3"]

        assert controller.handle(request(ActionType.SELECT_CONNECTED_FACTION, faction="Delta")).is_success
        assert [e.event_id for e in controller.panel_events()] == ["3"]

        controller.handle(request(ActionType.SEEK_YEAR, year=2001))
        assert controller.panel_events() == ()

        controller.handle(request(ActionType.SELECT_CONNECTED_FACTION, faction=None))
        assert [e.event_id for e in controller.panel_events()] == ["1"]

    def test_world_mode_lists_nothing(self, controller):
        assert controller.panel_events() == ()


class TestMalformedPayloads:

    @pytest.mark.parametrize("year", ["soon", None, [2001]])
    def test_bad_year(self, controller, year):
        result = controller.handle(request(ActionType.SEEK_YEAR, year=year))
        assert result.error.code is ErrorCode.INVALID_STATE_TRANSITION
        assert controller.playback.year == 2002
        assert not controller.rebuild_pending

    @pytest.mark.parametrize("scale", ["wide", None, float("nan"), float("inf")])
    def test_bad_zoom(self, controller, scale):
        result = controller.handle(request(ActionType.ZOOM, scale=scale))
        assert result.error.code is ErrorCode.INVALID_STATE_TRANSITION
        assert controller.view_state.zoom_scale == 1.0

    def test_non_positive_zoom_clamps(self, controller):
        assert controller.handle(request(ActionType.ZOOM, scale=-2)).is_success
        assert controller.view_state.zoom_scale == 1.0

    def test_numeric_strings_accepted(self, controller):
        assert controller.handle(request(ActionType.SEEK_YEAR, year="2001")).value == 2001
        assert controller.handle(request(ActionType.ZOOM, scale="4")).is_success
        assert controller.view_state.zoom_scale == 4.0
