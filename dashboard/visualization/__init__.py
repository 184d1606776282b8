from .graph import (
    REGION_COLORS, TYPE_COLORS, EDGE_COLORS, UNKNOWN_COLOR,
    GraphNode, GraphEdge, NetworkGraphView, VisibilityTransition, Renderer
)

__all__ = [
    'REGION_COLORS', 'TYPE_COLORS', 'EDGE_COLORS', 'UNKNOWN_COLOR',
    'GraphNode', 'GraphEdge', 'NetworkGraphView', 'VisibilityTransition', 'Renderer',
]
