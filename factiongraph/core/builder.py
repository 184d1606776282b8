"""
Faction Graph Builder
=====================

Turns aggregated tallies into the node/edge lists consumed by layout
and rendering.

INVARIANT: build(events, window) is a PURE FUNCTION.
Calling it twice with identical arguments yields equal FactionGraphs.
Object identity is NOT preserved across builds.

Steps:
1. Window the events (temporal layer)
2. Aggregate participation and pair tallies
3. Keep factions with participation >= min_participation
4. Keep pairs whose endpoints both survived and that carry any count
5. Size nodes on a clamped square-root scale of casualties
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence
import logging
import math
import time

from ..config import GraphConfig
from ..contracts.events import ConflictEvent, EventFilter
from ..contracts.graph import (
    FactionGraph, FactionNode, RelationshipEdge, RelationshipType,
    RelationshipFilter
)
from ..temporal.window import filter_events
from .aggregation import AggregationResult, RelationshipAggregator


logger = logging.getLogger(__name__)


class GraphBuilder:
    """
    Build FactionGraphs from events.

    GUARANTEES:
    ===========
    1. Deterministic output ordering (nodes by id, edges by endpoint pair)
    2. No edge references a node that was thresholded away
    3. Radius is finite and >= min_radius for every node
    """

    def __init__(self, config: Optional[GraphConfig] = None):
        self._config = config or GraphConfig()
        self._aggregator = RelationshipAggregator()

    @property
    def config(self) -> GraphConfig:
        return self._config

    def build(
        self,
        raw_events: Sequence[ConflictEvent],
        window: EventFilter,
        relationship: RelationshipFilter = RelationshipFilter.ALL
    ) -> FactionGraph:
        """Window `raw_events` and build the graph of the result."""
        return self.build_from_events(filter_events(raw_events, window), relationship)

    def build_from_events(
        self,
        events: Iterable[ConflictEvent],
        relationship: RelationshipFilter = RelationshipFilter.ALL
    ) -> FactionGraph:
        """Build from an already-windowed event subset."""
        started = time.perf_counter()
        tallies = self._aggregator.aggregate(events)

        nodes = self._select_nodes(tallies)
        node_ids = {n.id for n in nodes}
        edges = self._select_edges(tallies, node_ids, relationship)

        logger.debug(
            "Graph built from %d events: %d factions seen, %d nodes, %d edges (%.1f ms)",
            tallies.event_count, len(tallies.factions), len(nodes), len(edges),
            (time.perf_counter() - started) * 1000
        )
        return FactionGraph(nodes=tuple(nodes), edges=tuple(edges))

    # =========================================================================
    # SCALES
    # =========================================================================

    def radius(self, casualties: int) -> float:
        """Clamped square-root scale; never negative or NaN."""
        cfg = self._config
        scaled = math.sqrt(max(casualties, 0)) / cfg.radius_divisor
        return max(cfg.min_radius, min(cfg.max_radius, scaled))

    def edge_value(self, casualties: int) -> float:
        return math.sqrt(max(casualties, 0)) / self._config.edge_value_divisor

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _select_nodes(self, tallies: AggregationResult) -> List[FactionNode]:
        threshold = self._config.min_participation
        nodes = [
            FactionNode(
                id=acc.name,
                country=acc.country,
                region=acc.region,
                participation=acc.participation,
                casualties=acc.casualties,
                radius=self.radius(acc.casualties)
            )
            for acc in tallies.factions.values()
            if acc.participation >= threshold
        ]
        nodes.sort(key=lambda n: n.id)
        return nodes

    def _select_edges(
        self,
        tallies: AggregationResult,
        node_ids: set,
        relationship: RelationshipFilter
    ) -> List[RelationshipEdge]:
        edges = []
        for names in sorted(tallies.pairs):
            pair = tallies.pairs[names]
            if pair.is_empty:
                continue
            first, second = pair.names
            if first not in node_ids or second not in node_ids:
                continue

            classification = RelationshipType.classify(pair.allied_count, pair.opposed_count)
            if not relationship.admits(classification):
                continue

            edges.append(RelationshipEdge(
                faction_a=first,
                faction_b=second,
                allied_count=pair.allied_count,
                opposed_count=pair.opposed_count,
                casualties=pair.casualties,
                classification=classification,
                value=self.edge_value(pair.casualties)
            ))
        return edges


def build(
    raw_events: Sequence[ConflictEvent],
    window: EventFilter,
    min_participation: Optional[int] = None
) -> FactionGraph:
    """Convenience wrapper using default sizing."""
    config = GraphConfig() if min_participation is None else GraphConfig(min_participation=min_participation)
    return GraphBuilder(config).build(raw_events, window)
