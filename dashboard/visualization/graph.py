"""
Graph Visualization Contracts

Responsibility:
Renderable faction graph views and the visibility transitions the
renderer must honor. Styling beyond color and stroke is the renderer's
business.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple


REGION_COLORS: Dict[str, str] = {
    "Africa": "#e74c3c",
    "Americas": "#9b59b6",
    "Asia": "#f39c12",
    "Europe": "#3498db",
    "Middle East": "#1abc9c",
}

TYPE_COLORS: Dict[str, str] = {
    "State-based Conflict": "#d9534f",
    "Non-state Conflict": "#f0ad4e",
    "One-sided Violence": "#0275d8",
}

EDGE_COLORS: Dict[str, str] = {
    "ally": "#22c55e",
    "enemy": "#ef4444",
}

UNKNOWN_COLOR = "#999999"


@dataclass(frozen=True)
class GraphNode:
    """Renderable faction node."""
    node_id: str
    x: float
    y: float
    radius: float
    color: str
    label: str
    region: str
    is_focal_point: bool
    is_visible: bool


@dataclass(frozen=True)
class GraphEdge:
    """Renderable relationship edge."""
    edge_id: str
    source_id: str
    target_id: str
    thickness: float
    color: str
    style: str  # solid (ally), dashed (enemy)
    relationship: str
    is_visible: bool


@dataclass(frozen=True)
class NetworkGraphView:
    """
    Positioned faction graph.
    Hidden elements stay in the view so their positions survive focus changes.
    """
    view_id: str
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    focused_id: Optional[str]

    @property
    def visible_node_ids(self) -> FrozenSet[str]:
        return frozenset(n.node_id for n in self.nodes if n.is_visible)


@dataclass(frozen=True)
class VisibilityTransition:
    """Ids to fade in / fade out since the previous view."""
    entered: FrozenSet[str]
    exited: FrozenSet[str]
    focused_id: Optional[str]

    @property
    def is_empty(self) -> bool:
        return not self.entered and not self.exited


class Renderer(ABC):
    """Drawing collaborator."""

    @abstractmethod
    def render(self, view: NetworkGraphView) -> None:
        """Draw a full view (after a rebuild)."""
        pass

    @abstractmethod
    def apply_transition(self, transition: VisibilityTransition) -> None:
        """Show/hide nodes without rebuilding."""
        pass
