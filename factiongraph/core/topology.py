"""
Faction Topology
================

Structural queries over a built FactionGraph using networkx.

ALLOWED:
- Neighborhoods (focus sets)
- Connected components (clusters of interacting factions)
- Structural metrics (density, component count)

The topology never changes the graph it wraps; rebuild it from a new
FactionGraph when the graph changes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Set
import networkx as nx

from ..contracts.graph import FactionGraph, RelationshipEdge


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a faction graph."""
    node_count: int
    edge_count: int
    ally_edge_count: int
    enemy_edge_count: int
    density: float
    connected_components_count: int
    isolated_count: int


class FactionTopology:
    """
    Undirected networkx view of a faction graph.

    Edge attributes carry the relationship classification and counts so
    callers can filter neighborhoods by relationship type.
    """

    def __init__(self):
        self._graph = nx.Graph()

    @classmethod
    def from_graph(cls, graph: FactionGraph) -> FactionTopology:
        topology = cls()
        topology.build_graph(graph)
        return topology

    @classmethod
    def from_edges(cls, edges: Iterable[RelationshipEdge]) -> FactionTopology:
        topology = cls()
        topology._add_edges(edges)
        return topology

    def build_graph(self, graph: FactionGraph) -> None:
        """Replace internal state with the given graph."""
        self._graph = nx.Graph()
        for node in graph.nodes:
            self._graph.add_node(node.id, region=node.region, casualties=node.casualties)
        self._add_edges(graph.edges)

    def _add_edges(self, edges: Iterable[RelationshipEdge]) -> None:
        for edge in edges:
            self._graph.add_edge(
                edge.faction_a,
                edge.faction_b,
                classification=edge.classification.value,
                allied=edge.allied_count,
                opposed=edge.opposed_count,
                casualties=edge.casualties
            )

    def has_node(self, faction_id: str) -> bool:
        return self._graph.has_node(faction_id)

    def neighbors(self, faction_id: str) -> FrozenSet[str]:
        """Ids one edge away from `faction_id` (empty if absent)."""
        if not self._graph.has_node(faction_id):
            return frozenset()
        return frozenset(self._graph.neighbors(faction_id))

    def closed_neighborhood(self, faction_id: str) -> FrozenSet[str]:
        """The node itself plus its direct neighbors."""
        return frozenset({faction_id}) | self.neighbors(faction_id)

    def edge_attributes(self, first: str, second: str) -> Optional[dict]:
        if not self._graph.has_edge(first, second):
            return None
        return dict(self._graph.edges[first, second])

    def get_connected_components(self) -> List[Set[str]]:
        """Disjoint clusters of factions, largest first."""
        if self._graph.number_of_nodes() == 0:
            return []
        components = [set(c) for c in nx.connected_components(self._graph)]
        components.sort(key=lambda c: (-len(c), min(c)))
        return components

    def compute_metrics(self) -> GraphMetrics:
        if self._graph.number_of_nodes() == 0:
            return GraphMetrics(0, 0, 0, 0, 0.0, 0, 0)

        classifications = [
            data.get("classification") for _, _, data in self._graph.edges(data=True)
        ]
        return GraphMetrics(
            node_count=self._graph.number_of_nodes(),
            edge_count=self._graph.number_of_edges(),
            ally_edge_count=classifications.count("ally"),
            enemy_edge_count=classifications.count("enemy"),
            density=nx.density(self._graph),
            connected_components_count=nx.number_connected_components(self._graph),
            isolated_count=nx.number_of_isolates(self._graph)
        )
