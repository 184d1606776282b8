"""
Graph Contracts
===============

Immutable node/edge lists handed to layout and rendering.

IDENTITY:
=========
- A faction is identified by its extracted name string.
- A relationship is identified by its ordered endpoint pair;
  pair_key joins the two names for display ids.
- Nothing here survives a rebuild; a new build creates new objects
  with the same ids.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


PAIR_SEPARATOR = "|"


def ordered_pair(name_a: str, name_b: str) -> Tuple[str, str]:
    """Endpoints of an unordered faction pair in canonical order."""
    if name_a <= name_b:
        return name_a, name_b
    return name_b, name_a


def pair_key(name_a: str, name_b: str) -> str:
    """Display key for an unordered faction pair. Not parsed back into names."""
    return PAIR_SEPARATOR.join(ordered_pair(name_a, name_b))


class RelationshipType(Enum):
    """Edge classification."""
    ALLY = "ally"
    ENEMY = "enemy"

    @staticmethod
    def classify(allied_count: int, opposed_count: int) -> RelationshipType:
        # Ties resolve to ENEMY.
        return RelationshipType.ALLY if allied_count > opposed_count else RelationshipType.ENEMY


class RelationshipFilter(Enum):
    """Which edge classifications a build emits."""
    ALL = "all"
    ALLIES = "allies"
    OPPONENTS = "opponents"

    def admits(self, relationship: RelationshipType) -> bool:
        if self is RelationshipFilter.ALL:
            return True
        if self is RelationshipFilter.ALLIES:
            return relationship is RelationshipType.ALLY
        return relationship is RelationshipType.ENEMY


@dataclass(frozen=True)
class FactionNode:
    """A faction surviving the participation threshold."""
    id: str
    country: str
    region: str
    participation: int
    casualties: int
    radius: float

    def __post_init__(self):
        if self.participation < 0:
            raise ValueError("participation must be non-negative")
        if self.casualties < 0:
            raise ValueError("casualties must be non-negative")


@dataclass(frozen=True)
class RelationshipEdge:
    """Aggregated relationship between two factions."""
    faction_a: str
    faction_b: str
    allied_count: int
    opposed_count: int
    casualties: int
    classification: RelationshipType
    value: float

    def __post_init__(self):
        if self.faction_a > self.faction_b:
            raise ValueError("edge endpoints must be in canonical order")

    @property
    def key(self) -> str:
        return pair_key(self.faction_a, self.faction_b)

    def touches(self, faction_id: str) -> bool:
        return faction_id == self.faction_a or faction_id == self.faction_b

    def other(self, faction_id: str) -> Optional[str]:
        """The endpoint opposite `faction_id`, or None if not an endpoint."""
        if faction_id == self.faction_a:
            return self.faction_b
        if faction_id == self.faction_b:
            return self.faction_a
        return None


@dataclass(frozen=True)
class FactionGraph:
    """
    Output of a graph build.

    Nodes are ordered by id, edges by (faction_a, faction_b), so two builds over the
    same inputs compare equal.
    """
    nodes: Tuple[FactionNode, ...]
    edges: Tuple[RelationshipEdge, ...]

    @staticmethod
    def empty() -> FactionGraph:
        return FactionGraph(nodes=(), edges=())

    @property
    def node_ids(self) -> FrozenSet[str]:
        return frozenset(n.id for n in self.nodes)

    def node(self, faction_id: str) -> Optional[FactionNode]:
        for n in self.nodes:
            if n.id == faction_id:
                return n
        return None

    def node_index(self) -> Dict[str, FactionNode]:
        return {n.id: n for n in self.nodes}

    def __contains__(self, faction_id: object) -> bool:
        return any(n.id == faction_id for n in self.nodes)
