"""
Country Aggregation
===================

Per-country rollups for the map, the country detail panel and the
"top countries" ranking.

INVARIANT: aggregate_by_country(events) is a PURE FUNCTION.
Countries appear in first-seen order; events keep input order.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
import logging

import numpy as np

from ..contracts.events import ConflictEvent, ViolenceType


logger = logging.getLogger(__name__)

TOP_COUNTRIES_LIMIT = 15


@dataclass(frozen=True)
class TypeBreakdown:
    """Event count and casualties for one violence type."""
    count: int
    casualties: int


@dataclass(frozen=True)
class CountryAggregate:
    """
    All events of one country inside the current window.

    `coordinates` is the (lon, lat) mean over events that carry
    coordinates, None when none do.
    """
    name: str
    region: str
    total_casualties: int
    total_events: int
    events: Tuple[ConflictEvent, ...]
    coordinates: Optional[Tuple[float, float]]
    type_composition: Dict[ViolenceType, TypeBreakdown]
    deadliest_event: Optional[ConflictEvent]

    @property
    def average_casualties(self) -> float:
        if self.total_events == 0:
            return 0.0
        return self.total_casualties / self.total_events

    @property
    def events_with_coordinates(self) -> Tuple[ConflictEvent, ...]:
        return tuple(e for e in self.events if e.has_coordinates)


class CountrySortMode(Enum):
    """Ranking criteria for the top-countries list."""
    CASUALTIES = "casualties"
    COUNT = "count"
    AVERAGE = "average"

    @staticmethod
    def parse(raw: Optional[str]) -> CountrySortMode:
        for member in CountrySortMode:
            if raw == member.value:
                return member
        return CountrySortMode.CASUALTIES


def summarize_country(name: str, events: List[ConflictEvent], region: str = "") -> CountryAggregate:
    """
    Roll up one country's events. With no events the aggregate is empty
    and `region` is used as given.
    """
    composition: Dict[ViolenceType, List[int]] = {}
    for event in events:
        bucket = composition.setdefault(event.violence_type, [0, 0])
        bucket[0] += 1
        bucket[1] += event.best

    located = [e.coordinates for e in events if e.coordinates is not None]
    coordinates = None
    if located:
        lon, lat = np.asarray(located, dtype=float).mean(axis=0)
        coordinates = (float(lon), float(lat))

    # Ties keep the earliest event.
    deadliest = events[0] if events else None
    for event in events[1:]:
        if event.best > deadliest.best:
            deadliest = event

    return CountryAggregate(
        name=name,
        region=events[0].region if events else region,
        total_casualties=sum(e.best for e in events),
        total_events=len(events),
        events=tuple(events),
        coordinates=coordinates,
        type_composition={vt: TypeBreakdown(c, cas) for vt, (c, cas) in composition.items()},
        deadliest_event=deadliest
    )


def aggregate_by_country(events: Iterable[ConflictEvent]) -> Dict[str, CountryAggregate]:
    """Group events by country and summarize each group."""
    grouped: Dict[str, List[ConflictEvent]] = {}
    for event in events:
        grouped.setdefault(event.country, []).append(event)
    return {name: summarize_country(name, group) for name, group in grouped.items()}


def top_countries(
    aggregates: Iterable[CountryAggregate],
    sort_mode: CountrySortMode = CountrySortMode.CASUALTIES,
    limit: int = TOP_COUNTRIES_LIMIT
) -> List[CountryAggregate]:
    """Countries ranked by the given criterion, name breaking ties."""
    if sort_mode is CountrySortMode.COUNT:
        def key(c):
            return (-c.total_events, c.name)
    elif sort_mode is CountrySortMode.AVERAGE:
        def key(c):
            return (-c.average_casualties, c.name)
    else:
        def key(c):
            return (-c.total_casualties, c.name)

    ranked = sorted(aggregates, key=key)
    return ranked[:max(limit, 0)]
