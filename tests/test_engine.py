"""
Engine Facade Tests
===================

The engine is the read-side entry point shared by the dashboard
controller and the HTTP API.
"""

import pytest

from factiongraph.config import EngineConfig, GraphConfig
from factiongraph.contracts.base import ErrorCode
from factiongraph.contracts.events import ConflictEvent, EventFilter, ViolenceType
from factiongraph.core.countries import CountrySortMode
from factiongraph.engine import FactionGraphEngine


EVENTS = [
    ConflictEvent(event_id="1", year=2001, country="Sudan", region="Africa",
                  side_a="Alpha", side_b="Beta", best=10,
                  violence_type=ViolenceType.STATE_BASED),
    ConflictEvent(event_id="2", year=2002, country="Sudan", region="Africa",
                  side_a="Alpha, Gamma", side_b="Beta", best=20,
                  violence_type=ViolenceType.STATE_BASED),
    ConflictEvent(event_id="3", year=2002, country="Syria", region="Middle East",
                  side_a="Delta", side_b="Civilians", best=50,
                  violence_type=ViolenceType.ONE_SIDED),
]


@pytest.fixture
def engine():
    return FactionGraphEngine(EVENTS, EngineConfig(graph=GraphConfig(min_participation=1)))


class TestGraph:

    def test_default_window_covers_all_years(self, engine):
        assert engine.default_filter() == EventFilter(year=2002)
        assert engine.build_graph().node_ids == frozenset({"Alpha", "Beta", "Gamma", "Delta"})

    def test_windowed_build(self, engine):
        graph = engine.build_graph(EventFilter(year=2002, region="Africa"))
        assert graph.node_ids == frozenset({"Alpha", "Beta", "Gamma"})

    def test_focus(self, engine):
        graph = engine.build_graph()
        assert engine.focus(graph, "Gamma").value == frozenset({"Gamma", "Alpha", "Beta"})
        assert engine.focus(graph, "Omega").error.code is ErrorCode.FACTION_NOT_FOUND

    def test_metrics(self, engine):
        metrics = engine.graph_metrics(engine.build_graph())
        assert metrics.node_count == 4
        assert metrics.isolated_count == 1
        assert metrics.connected_components_count == 2

    def test_connected_factions(self, engine):
        connections = engine.connected_factions(engine.build_graph(), "Alpha")
        assert [c.faction_id for c in connections] == ["Beta", "Gamma"]


class TestData:

    def test_faction_events_ignore_threshold(self):
        engine = FactionGraphEngine(EVENTS)
        assert "Gamma" not in engine.build_graph()
        assert [e.event_id for e in engine.faction_events("Gamma").value] == ["2"]

    def test_faction_events_filters(self, engine):
        assert [e.event_id for e in engine.faction_events("Alpha", year=2001).value] == ["1"]
        assert engine.faction_events("Alpha", violence_type=ViolenceType.ONE_SIDED).value == []

    def test_unknown_faction(self, engine):
        assert engine.faction_events("Civilians").error.code is ErrorCode.FACTION_NOT_FOUND

    def test_countries(self, engine):
        aggregates = engine.country_aggregates()
        assert set(aggregates) == {"Sudan", "Syria"}
        ranked = engine.top_countries(sort_mode=CountrySortMode.COUNT)
        assert [c.name for c in ranked] == ["Sudan", "Syria"]
        assert [c.name for c in engine.top_countries(EventFilter(year=2001))] == ["Sudan"]

    def test_resolver_over_loaded_countries(self, engine):
        assert engine.resolver().resolve("sudan") == "Sudan"
        engine.set_feature_names(["Syrian Arab Republic"])
        assert engine.resolver().resolve("Syria") == "Syrian Arab Republic"


class TestConstruction:

    def test_from_path(self, tmp_path):
        path = tmp_path / "events.csv"
        path.write_text("id,year,country,region,side_a,side_b,best\n1,2010,Peru,Americas,A,B,4\n",
                        encoding="utf-8")
        engine = FactionGraphEngine.from_path(str(path))
        assert engine.event_count == 1
        assert engine.index.year_range == (2010, 2010)

    def test_from_missing_path_is_empty(self, tmp_path):
        engine = FactionGraphEngine.from_path(str(tmp_path / "nope.csv"))
        assert engine.event_count == 0
        assert engine.default_filter() == EventFilter(year=0)

    def test_from_config_without_data_path(self, caplog):
        engine = FactionGraphEngine.from_config(EngineConfig())
        assert engine.event_count == 0
        assert "No data path" in caplog.text
