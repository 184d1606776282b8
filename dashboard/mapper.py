"""
Engine to View Mapper

Converts engine graphs into renderable views.

MAPPING BOUNDARY:
=================
This is the ONLY place where FactionGraph objects become view objects.

MAPPING RULES:
==============
1. Preserve engine ordering (nodes by id, edges by endpoint pair)
2. Nodes without a position are placed at the canvas origin, never dropped
3. Visibility comes from the focus controller, never recomputed here
"""

from __future__ import annotations
from typing import Dict, FrozenSet, Optional, Tuple
import hashlib
import math

from factiongraph.contracts.graph import FactionGraph, FactionNode, RelationshipEdge, RelationshipType
from factiongraph.core.focus import VisibilityDiff

from dashboard.visualization.graph import (
    EDGE_COLORS, REGION_COLORS, UNKNOWN_COLOR,
    GraphEdge, GraphNode, NetworkGraphView, VisibilityTransition
)


Position = Tuple[float, float]


def edge_thickness(value: float) -> float:
    return max(1.5, math.sqrt(max(value, 0.0)) * 1.5)


class GraphViewMapper:
    """
    Maps FactionGraph + positions + visible set to NetworkGraphView.
    """

    def map_graph(
        self,
        graph: FactionGraph,
        positions: Dict[str, Position],
        visible_ids: Optional[FrozenSet[str]] = None,
        focused_id: Optional[str] = None
    ) -> NetworkGraphView:
        visible = graph.node_ids if visible_ids is None else visible_ids
        nodes = tuple(self.map_node(n, positions.get(n.id), n.id in visible, n.id == focused_id)
                      for n in graph.nodes)
        edges = tuple(self.map_edge(e, self._edge_visible(e, visible, focused_id))
                      for e in graph.edges)
        return NetworkGraphView(
            view_id=self._view_id(graph, focused_id),
            nodes=nodes,
            edges=edges,
            focused_id=focused_id
        )

    def map_node(
        self,
        node: FactionNode,
        position: Optional[Position],
        is_visible: bool,
        is_focal_point: bool
    ) -> GraphNode:
        x, y = position if position is not None else (0.0, 0.0)
        return GraphNode(
            node_id=node.id,
            x=x,
            y=y,
            radius=node.radius,
            color=REGION_COLORS.get(node.region, UNKNOWN_COLOR),
            label=node.id,
            region=node.region,
            is_focal_point=is_focal_point,
            is_visible=is_visible
        )

    def map_edge(self, edge: RelationshipEdge, is_visible: bool) -> GraphEdge:
        relationship = edge.classification.value
        return GraphEdge(
            edge_id=edge.key,
            source_id=edge.faction_a,
            target_id=edge.faction_b,
            thickness=edge_thickness(edge.value),
            color=EDGE_COLORS[relationship],
            style="solid" if edge.classification is RelationshipType.ALLY else "dashed",
            relationship=relationship,
            is_visible=is_visible
        )

    def map_transition(self, diff: VisibilityDiff) -> VisibilityTransition:
        return VisibilityTransition(
            entered=diff.entered,
            exited=diff.exited,
            focused_id=diff.focused_id
        )

    @staticmethod
    def _edge_visible(edge: RelationshipEdge, visible: FrozenSet[str], focused_id: Optional[str]) -> bool:
        if edge.faction_a not in visible or edge.faction_b not in visible:
            return False
        return focused_id is None or edge.touches(focused_id)

    @staticmethod
    def _view_id(graph: FactionGraph, focused_id: Optional[str]) -> str:
        digest = hashlib.sha256()
        for node in graph.nodes:
            digest.update(node.id.encode("utf-8"))
        for edge in graph.edges:
            digest.update(edge.key.encode("utf-8"))
        digest.update((focused_id or "").encode("utf-8"))
        return f"graph_{digest.hexdigest()[:12]}"
