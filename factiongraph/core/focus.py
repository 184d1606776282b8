"""
Focus Controller
================

Computes the reduced visible subgraph around a focused faction and the
visibility transitions between successive graphs.

DECLARATIVE VISIBILITY:
=======================
Visibility is a pure set of node ids. Each refresh computes the new set
and diffs it against the previous one; the renderer receives the
entered/exited ids and hides nodes rather than removing them, so the
layout keeps its positions while the time slider moves.

INVARIANTS:
- compute_focus_set returns the focused id plus direct neighbors only
- The focused id stays visible even when absent from the current graph
- A click on an unknown node is a logged no-op
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple
import logging

from ..config import DOUBLE_CLICK_MS
from ..contracts.base import Error, ErrorCode
from ..contracts.graph import FactionGraph, RelationshipEdge, RelationshipType
from .topology import FactionTopology


logger = logging.getLogger(__name__)


def compute_focus_set(edges: Iterable[RelationshipEdge], focused_id: str) -> FrozenSet[str]:
    """{focused_id} plus every id sharing an edge with it."""
    return FactionTopology.from_edges(edges).closed_neighborhood(focused_id)


# =============================================================================
# VALUE TYPES
# =============================================================================

@dataclass(frozen=True)
class VisibilityDiff:
    """Result of one visibility recomputation."""
    visible: FrozenSet[str]
    entered: FrozenSet[str]
    exited: FrozenSet[str]
    focused_id: Optional[str]

    @property
    def is_noop(self) -> bool:
        return not self.entered and not self.exited

    @staticmethod
    def between(
        previous: FrozenSet[str],
        current: FrozenSet[str],
        focused_id: Optional[str]
    ) -> VisibilityDiff:
        return VisibilityDiff(
            visible=current,
            entered=current - previous,
            exited=previous - current,
            focused_id=focused_id
        )


@dataclass(frozen=True)
class FocusState:
    """Focus and double-click bookkeeping."""
    focused_id: Optional[str] = None
    visible_ids: FrozenSet[str] = frozenset()
    last_clicked_id: Optional[str] = None
    last_click_ms: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.focused_id is not None


class ClickKind(Enum):
    """What a click on the graph resolved to."""
    FOCUSED = "focused"
    OPEN_DETAIL = "open_detail"
    CLEARED = "cleared"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ClickOutcome:
    kind: ClickKind
    faction_id: Optional[str] = None
    diff: Optional[VisibilityDiff] = None
    error: Optional[Error] = None


@dataclass(frozen=True)
class ConnectedFaction:
    """A direct neighbor of a focused faction, for the side panel."""
    faction_id: str
    relationship: RelationshipType
    allied_count: int
    opposed_count: int
    casualties: int


def connected_factions(graph: FactionGraph, faction_id: str) -> Tuple[ConnectedFaction, ...]:
    """Neighbors of `faction_id`, deadliest relationship first."""
    connections = []
    for edge in graph.edges:
        other = edge.other(faction_id)
        if other is None:
            continue
        connections.append(ConnectedFaction(
            faction_id=other,
            relationship=edge.classification,
            allied_count=edge.allied_count,
            opposed_count=edge.opposed_count,
            casualties=edge.casualties
        ))
    connections.sort(key=lambda c: (-c.casualties, c.faction_id))
    return tuple(connections)


# =============================================================================
# CONTROLLER
# =============================================================================

class FocusController:
    """
    Two-state focus toggle per node plus double-click detection.

    - click on a node: focus it (replacing any prior focus)
    - click the same node again within double_click_ms: OPEN_DETAIL
    - click on empty canvas: clear focus, everything visible again
    - refresh(graph): recompute against a freshly built graph
    """

    def __init__(self, double_click_ms: float = DOUBLE_CLICK_MS):
        self._double_click_ms = double_click_ms
        self._state = FocusState()

    @property
    def state(self) -> FocusState:
        return self._state

    @property
    def focused_id(self) -> Optional[str]:
        return self._state.focused_id

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    def click_node(self, graph: FactionGraph, node_id: str, now_ms: float) -> ClickOutcome:
        if node_id not in graph:
            logger.warning("Click on unknown faction %r ignored", node_id)
            return ClickOutcome(
                kind=ClickKind.IGNORED,
                faction_id=node_id,
                error=Error.of(ErrorCode.FACTION_NOT_FOUND, "Faction not in current graph", faction=node_id)
            )

        last_id = self._state.last_clicked_id
        last_ms = self._state.last_click_ms
        if last_id == node_id and last_ms is not None and now_ms - last_ms <= self._double_click_ms:
            # Reset so a third click starts a new single/double sequence.
            self._state = replace(self._state, last_clicked_id=None, last_click_ms=None)
            return ClickOutcome(kind=ClickKind.OPEN_DETAIL, faction_id=node_id)

        diff = self._apply(compute_focus_set(graph.edges, node_id), node_id)
        self._state = replace(self._state, last_clicked_id=node_id, last_click_ms=now_ms)
        logger.info("Focus on %r (%d visible)", node_id, len(diff.visible))
        return ClickOutcome(kind=ClickKind.FOCUSED, faction_id=node_id, diff=diff)

    def focus(self, graph: FactionGraph, node_id: str) -> ClickOutcome:
        """Focus without double-click bookkeeping (ranking list, API)."""
        if node_id not in graph:
            logger.warning("Focus requested on unknown faction %r", node_id)
            return ClickOutcome(
                kind=ClickKind.IGNORED,
                faction_id=node_id,
                error=Error.of(ErrorCode.FACTION_NOT_FOUND, "Faction not in current graph", faction=node_id)
            )
        diff = self._apply(compute_focus_set(graph.edges, node_id), node_id)
        return ClickOutcome(kind=ClickKind.FOCUSED, faction_id=node_id, diff=diff)

    def click_canvas(self, graph: FactionGraph) -> ClickOutcome:
        if not self.is_active:
            return ClickOutcome(kind=ClickKind.IGNORED)
        previous = self._state.focused_id
        diff = self._apply(graph.node_ids, None)
        logger.info("Focus on %r cleared", previous)
        return ClickOutcome(kind=ClickKind.CLEARED, faction_id=previous, diff=diff)

    def refresh(self, graph: FactionGraph) -> VisibilityDiff:
        """Recompute visibility against a freshly built graph."""
        focused = self._state.focused_id
        if focused is None:
            return self._apply(graph.node_ids, None)
        return self._apply(compute_focus_set(graph.edges, focused), focused)

    def visible_edges(self, graph: FactionGraph) -> Tuple[RelationshipEdge, ...]:
        visible = self._state.visible_ids
        focused = self._state.focused_id
        return tuple(
            e for e in graph.edges
            if e.faction_a in visible and e.faction_b in visible
            and (focused is None or e.touches(focused))
        )

    def reset(self):
        self._state = FocusState()

    def _apply(self, visible: FrozenSet[str], focused_id: Optional[str]) -> VisibilityDiff:
        diff = VisibilityDiff.between(self._state.visible_ids, frozenset(visible), focused_id)
        self._state = replace(self._state, focused_id=focused_id, visible_ids=diff.visible)
        return diff
