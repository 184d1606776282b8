"""
Relationship Aggregation
========================

Single pass over events producing per-faction and per-pair running tallies.

INVARIANT: aggregate(events) is a PURE FUNCTION.
Same events in the same order -> identical tallies.

Per event:
1. Extract side A / side B names.
2. Every distinct name gets +1 participation and the event's casualties.
3. Every distinct pair within a side gets +1 allied.
4. Every A x B pair of distinct names gets +1 opposed.

Participant lists are short (single digits), so the quadratic pair
enumeration per event is bounded.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, Tuple

from ..contracts.events import ConflictEvent
from ..contracts.graph import ordered_pair, pair_key
from ..normalization import event_sides


# =============================================================================
# ACCUMULATORS (mutable during a single pass only)
# =============================================================================

@dataclass
class FactionAccumulator:
    """Running totals for one faction."""
    name: str
    country: str
    region: str
    participation: int = 0
    casualties: int = 0

    def add_event(self, event: ConflictEvent):
        self.participation += 1
        self.casualties += event.best or 0


@dataclass
class PairAccumulator:
    """Running totals for one unordered faction pair."""
    names: Tuple[str, str]
    allied_count: int = 0
    opposed_count: int = 0
    casualties: int = 0

    @property
    def key(self) -> str:
        return pair_key(*self.names)

    @property
    def is_empty(self) -> bool:
        return self.allied_count == 0 and self.opposed_count == 0


@dataclass
class AggregationResult:
    """Tallies keyed by faction name and by ordered name pair."""
    factions: Dict[str, FactionAccumulator] = field(default_factory=dict)
    pairs: Dict[Tuple[str, str], PairAccumulator] = field(default_factory=dict)
    event_count: int = 0


# =============================================================================
# AGGREGATOR
# =============================================================================

class RelationshipAggregator:
    """
    Accumulate faction participation and pairwise interactions.

    GUARANTEES:
    ===========
    1. No faction is counted twice for the same event
    2. (A, B) and (B, A) accumulate into one record
    3. No side effects on the input events
    """

    def aggregate(self, events: Iterable[ConflictEvent]) -> AggregationResult:
        result = AggregationResult()
        for event in events:
            self._process_event(event, result)
        return result

    def _process_event(self, event: ConflictEvent, result: AggregationResult):
        side_a, side_b = event_sides(event)
        casualties = event.best or 0
        result.event_count += 1

        # Sorted so first-seen attribution is deterministic.
        for name in sorted(side_a | side_b):
            accumulator = result.factions.get(name)
            if accumulator is None:
                accumulator = FactionAccumulator(
                    name=name,
                    country=event.country,
                    region=event.region
                )
                result.factions[name] = accumulator
            accumulator.add_event(event)

        for side in (side_a, side_b):
            for first, second in combinations(sorted(side), 2):
                pair = self._pair(result, first, second)
                pair.allied_count += 1
                pair.casualties += casualties

        for first in side_a:
            for second in side_b:
                if first == second:
                    continue
                pair = self._pair(result, first, second)
                pair.opposed_count += 1
                pair.casualties += casualties

    @staticmethod
    def _pair(result: AggregationResult, first: str, second: str) -> PairAccumulator:
        names = ordered_pair(first, second)
        pair = result.pairs.get(names)
        if pair is None:
            pair = PairAccumulator(names=names)
            result.pairs[names] = pair
        return pair


def aggregate(events: Iterable[ConflictEvent]) -> AggregationResult:
    """Module-level shortcut for RelationshipAggregator().aggregate."""
    return RelationshipAggregator().aggregate(events)
