"""
Core Graph Layer

RESPONSIBILITY: Faction relationship aggregation, graph construction,
focus visibility, country rollups
ALLOWED INPUTS: ConflictEvent tuples, EventFilter windows
OUTPUTS: FactionGraph, VisibilityDiff, CountryAggregate (immutable)

WHAT THIS LAYER MUST NOT DO:
============================
- Parse files or rows (ingestion layer's job)
- Hold view-mode state (temporal.state_machine's job)
- Position nodes (layout collaborator's job)
- Draw anything

BOUNDARY ENFORCEMENT:
=====================
- Every build produces NEW node and edge objects
- Input events are never modified
"""

from .aggregation import (
    AggregationResult, FactionAccumulator, PairAccumulator,
    RelationshipAggregator, aggregate
)
from .builder import GraphBuilder, build
from .countries import (
    CountryAggregate, CountrySortMode, TypeBreakdown,
    aggregate_by_country, summarize_country, top_countries
)
from .focus import (
    ClickKind, ClickOutcome, ConnectedFaction, FocusController, FocusState,
    VisibilityDiff, compute_focus_set, connected_factions
)
from .topology import FactionTopology, GraphMetrics

__all__ = [
    'AggregationResult', 'FactionAccumulator', 'PairAccumulator',
    'RelationshipAggregator', 'aggregate',
    'GraphBuilder', 'build',
    'CountryAggregate', 'CountrySortMode', 'TypeBreakdown',
    'aggregate_by_country', 'summarize_country', 'top_countries',
    'ClickKind', 'ClickOutcome', 'ConnectedFaction', 'FocusController',
    'FocusState', 'VisibilityDiff', 'compute_focus_set', 'connected_factions',
    'FactionTopology', 'GraphMetrics',
]
