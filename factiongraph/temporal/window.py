"""
Time / Filter Window
====================

Pure selection of the event subset feeding the graph builder.

INVARIANTS:
- filter_events(events, f) never mutates `events`
- Idempotent: filtering a filtered result with the same filter is a no-op
- Monotonic in year: raising `year` only ever adds events
- Panel lists (country_view_events, faction_view_events) apply the same
  year and violence-type rules as the graph window
"""

from __future__ import annotations
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from ..contracts.events import ConflictEvent, EventFilter, ViolenceType
from ..normalization import event_sides, involves


logger = logging.getLogger(__name__)


def matches(event: ConflictEvent, window: EventFilter) -> bool:
    """Whether a single event falls inside the window."""
    if event.year > window.year:
        return False
    if window.violence_type is not None and event.violence_type != window.violence_type:
        return False
    if window.region is not None and event.region != window.region:
        return False
    return True


def filter_events(
    events: Sequence[ConflictEvent],
    window: EventFilter
) -> List[ConflictEvent]:
    """Events inside the window, in input order."""
    return [e for e in events if matches(e, window)]


def faction_events(
    events: Sequence[ConflictEvent],
    faction_name: str,
    year: Optional[int] = None,
    violence_type: Optional[ViolenceType] = None,
    country: Optional[str] = None
) -> List[ConflictEvent]:
    """
    Every event naming `faction_name` on either side, in input order.

    Scans the raw events rather than a built graph, so factions below the
    participation threshold still have an event list.
    """
    return [
        e for e in events
        if involves(e, faction_name)
        and (year is None or e.year <= year)
        and (violence_type is None or e.violence_type == violence_type)
        and (country is None or e.country == country)
    ]



def _narrowed(
    events: Sequence[ConflictEvent],
    year: Optional[int],
    violence_type: Optional[ViolenceType],
    faction_name: Optional[str]
) -> List[ConflictEvent]:
    return [
        e for e in events
        if (year is None or e.year <= year)
        and (violence_type is None or e.violence_type == violence_type)
        and (faction_name is None or involves(e, faction_name))
    ]


def country_view_events(
    events: Sequence[ConflictEvent],
    year: Optional[int],
    violence_type: Optional[ViolenceType] = None,
    faction_filter: Optional[str] = None
) -> List[ConflictEvent]:
    """
    Events listed by the country panel: up to `year`, then the violence
    type, then the faction filter picked from the active-factions list.
    """
    return _narrowed(events, year, violence_type, faction_filter)


def faction_view_events(
    events: Sequence[ConflictEvent],
    year: Optional[int],
    violence_type: Optional[ViolenceType] = None,
    connected_faction: Optional[str] = None
) -> List[ConflictEvent]:
    """Events listed by the faction panel, narrowed to a connected faction if one is picked."""
    return _narrowed(events, year, violence_type, connected_faction)

# =============================================================================
# INDEXED WINDOW (same results as filter_events, cached)
# =============================================================================

class EventIndex:
    """
    One-pass indices over an immutable event list.

    `filter()` returns exactly what `filter_events()` returns for the
    same window, in the same order. Results are cached with LRU eviction;
    the underlying events never change so entries never go stale.
    """

    def __init__(self, events: Sequence[ConflictEvent], max_cache_size: int = 100):
        self._events: Tuple[ConflictEvent, ...] = tuple(events)
        self._max_cache_size = max_cache_size
        self._cache: "OrderedDict[str, Tuple[ConflictEvent, ...]]" = OrderedDict()
        self._hits = 0
        self._misses = 0

        self._by_year: Dict[int, List[int]] = {}
        self._by_region: Dict[str, List[int]] = {}
        self._by_country: Dict[str, List[int]] = {}
        self._by_violence_type: Dict[ViolenceType, List[int]] = {}
        self._by_faction: Dict[str, List[int]] = {}
        self._build_indices()

    def _build_indices(self):
        for idx, event in enumerate(self._events):
            self._by_year.setdefault(event.year, []).append(idx)
            self._by_region.setdefault(event.region, []).append(idx)
            self._by_country.setdefault(event.country, []).append(idx)
            self._by_violence_type.setdefault(event.violence_type, []).append(idx)
            side_a, side_b = event_sides(event)
            for name in side_a | side_b:
                self._by_faction.setdefault(name, []).append(idx)

        logger.debug(
            "EventIndex built: %d events, %d years, %d regions, %d countries, %d factions",
            len(self._events), len(self._by_year), len(self._by_region), len(self._by_country),
            len(self._by_faction)
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def events(self) -> Tuple[ConflictEvent, ...]:
        return self._events

    @property
    def years(self) -> List[int]:
        return sorted(self._by_year)

    @property
    def year_range(self) -> Optional[Tuple[int, int]]:
        if not self._by_year:
            return None
        years = self.years
        return years[0], years[-1]

    @property
    def regions(self) -> List[str]:
        return sorted(self._by_region)

    @property
    def countries(self) -> List[str]:
        return sorted(self._by_country)

    def country_events(self, country: str) -> List[ConflictEvent]:
        return [self._events[i] for i in self._by_country.get(country, [])]

    def faction_events(
        self,
        faction_name: str,
        year: Optional[int] = None,
        violence_type: Optional[ViolenceType] = None,
        country: Optional[str] = None
    ) -> List[ConflictEvent]:
        """Indexed equivalent of the module-level faction_events()."""
        candidates = [self._events[i] for i in self._by_faction.get(faction_name, [])]
        return faction_events(candidates, faction_name, year, violence_type, country)

    def has_faction(self, faction_name: str) -> bool:
        return faction_name in self._by_faction

    # -------------------------------------------------------------------------
    # Filtering
    # -------------------------------------------------------------------------

    def filter(self, window: EventFilter) -> Tuple[ConflictEvent, ...]:
        key = window.cache_key()
        cached = self._cache.get(key)
        if cached is not None:
            self._hits += 1
            self._cache.move_to_end(key)
            return cached

        self._misses += 1
        result = tuple(self._events[i] for i in self._candidate_indices(window)
                       if matches(self._events[i], window))
        self._store(key, result)
        return result

    def _candidate_indices(self, window: EventFilter) -> List[int]:
        """Smallest index list that can contain the answer, in input order."""
        if window.region is not None:
            return self._by_region.get(window.region, [])
        if window.violence_type is not None:
            return self._by_violence_type.get(window.violence_type, [])
        return list(range(len(self._events)))

    def _store(self, key: str, value: Tuple[ConflictEvent, ...]):
        if len(self._cache) >= self._max_cache_size:
            self._cache.popitem(last=False)
        self._cache[key] = value

    def cache_stats(self) -> Dict[str, int]:
        return {
            "size": len(self._cache),
            "max_size": self._max_cache_size,
            "hits": self._hits,
            "misses": self._misses,
        }

    def clear_cache(self):
        self._cache.clear()
