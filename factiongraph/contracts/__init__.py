"""
Contracts Layer

Immutable data types shared by every layer. No behavior beyond
construction-time validation and trivial accessors.
"""

from .base import Error, ErrorCode, Result
from .events import ConflictEvent, EventFilter, ViolenceType, REGIONS
from .graph import (
    FactionNode, RelationshipEdge, FactionGraph, RelationshipType,
    RelationshipFilter, ordered_pair, pair_key, PAIR_SEPARATOR
)

__all__ = [
    'Error', 'ErrorCode', 'Result',
    'ConflictEvent', 'EventFilter', 'ViolenceType', 'REGIONS',
    'FactionNode', 'RelationshipEdge', 'FactionGraph', 'RelationshipType',
    'RelationshipFilter', 'ordered_pair', 'pair_key', 'PAIR_SEPARATOR',
]
