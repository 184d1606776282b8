"""
Engine Orchestration Module

Single entry point over the loaded event set for the dashboard
controller and the HTTP API.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. The engine holds the event index and nothing interactive;
   view state and focus belong to the caller
3. Every lookup miss comes back as a failed Result, never an exception
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence
import logging

from .config import EngineConfig
from .contracts.base import Error, ErrorCode, Result
from .contracts.events import ConflictEvent, EventFilter, ViolenceType
from .contracts.graph import FactionGraph, RelationshipFilter
from .core.builder import GraphBuilder
from .core.countries import (
    CountryAggregate, CountrySortMode, TOP_COUNTRIES_LIMIT,
    aggregate_by_country, top_countries
)
from .core.focus import compute_focus_set, connected_factions
from .core.topology import FactionTopology, GraphMetrics
from .geo.country_names import CountryNameResolver
from .ingestion.loader import load_events
from .temporal.window import EventIndex


logger = logging.getLogger(__name__)


class FactionGraphEngine:
    """
    Read-side facade over one immutable event set.

    LAYER FLOW:
    ===========
    1. Temporal: EventFilter -> windowed events (indexed, cached)
    2. Core: windowed events -> FactionGraph / CountryAggregate
    3. Topology: FactionGraph -> focus sets, metrics
    """

    def __init__(self, events: Sequence[ConflictEvent] = (), config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._index = EventIndex(events, max_cache_size=self._config.filter_cache_size)
        self._builder = GraphBuilder(self._config.graph)
        self._resolver: Optional[CountryNameResolver] = None

    @classmethod
    def from_path(cls, path: str, config: Optional[EngineConfig] = None) -> FactionGraphEngine:
        """Load events from a CSV/JSON file; a missing file yields an empty engine."""
        result = load_events(path)
        events = result.value if result.is_success else []
        return cls(events, config)

    @classmethod
    def from_config(cls, config: Optional[EngineConfig] = None) -> FactionGraphEngine:
        config = config or EngineConfig.from_env()
        if not config.data_path:
            logger.warning("No data path configured; starting with an empty event set")
            return cls((), config)
        return cls.from_path(config.data_path, config)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def events(self) -> Sequence[ConflictEvent]:
        return self._index.events

    @property
    def event_count(self) -> int:
        return len(self._index.events)

    @property
    def index(self) -> EventIndex:
        return self._index

    def default_filter(self) -> EventFilter:
        """Window covering every loaded year."""
        year_range = self._index.year_range
        return EventFilter(year=year_range[1] if year_range else 0)

    def window(self, window: EventFilter) -> Sequence[ConflictEvent]:
        return self._index.filter(window)

    # =========================================================================
    # GRAPH
    # =========================================================================

    def build_graph(
        self,
        window: Optional[EventFilter] = None,
        relationship: RelationshipFilter = RelationshipFilter.ALL
    ) -> FactionGraph:
        window = window or self.default_filter()
        return self._builder.build_from_events(self._index.filter(window), relationship)

    def focus(self, graph: FactionGraph, faction_id: str) -> Result:
        """Result(frozenset of visible ids) or FACTION_NOT_FOUND."""
        if faction_id not in graph:
            logger.warning("Focus on unknown faction %r", faction_id)
            return Result.failure(Error.of(
                ErrorCode.FACTION_NOT_FOUND, "Faction not in graph", faction=faction_id
            ))
        return Result.success(compute_focus_set(graph.edges, faction_id))

    def connected_factions(self, graph: FactionGraph, faction_id: str):
        return connected_factions(graph, faction_id)

    def graph_metrics(self, graph: FactionGraph) -> GraphMetrics:
        return FactionTopology.from_graph(graph).compute_metrics()

    # =========================================================================
    # FACTIONS & COUNTRIES
    # =========================================================================

    def faction_events(
        self,
        faction_name: str,
        year: Optional[int] = None,
        violence_type: Optional[ViolenceType] = None,
        country: Optional[str] = None
    ) -> Result:
        """Result(list of events) or FACTION_NOT_FOUND when the name never occurs."""
        if not self._index.has_faction(faction_name):
            logger.warning("No events for faction %r", faction_name)
            return Result.failure(Error.of(
                ErrorCode.FACTION_NOT_FOUND, "Faction never appears", faction=faction_name
            ))
        return Result.success(self._index.faction_events(faction_name, year, violence_type, country))

    def country_aggregates(self, window: Optional[EventFilter] = None) -> Dict[str, CountryAggregate]:
        window = window or self.default_filter()
        return aggregate_by_country(self._index.filter(window))

    def top_countries(
        self,
        window: Optional[EventFilter] = None,
        sort_mode: CountrySortMode = CountrySortMode.CASUALTIES,
        limit: int = TOP_COUNTRIES_LIMIT
    ) -> List[CountryAggregate]:
        return top_countries(self.country_aggregates(window).values(), sort_mode, limit)

    def resolver(self) -> CountryNameResolver:
        """Resolver over the loaded country names (built lazily)."""
        if self._resolver is None:
            self._resolver = CountryNameResolver(self._index.countries)
        return self._resolver

    def set_feature_names(self, feature_names: Sequence[str]):
        """Resolve against map feature names instead of the loaded countries."""
        self._resolver = CountryNameResolver(feature_names)
