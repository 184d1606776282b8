"""
Time / Filter Window Tests
==========================

INVARIANTS TESTED:
1. Monotonic in year (set containment on event identity)
2. Idempotent
3. EventIndex.filter returns exactly filter_events, in order
4. LRU cache bounded
5. Panel lists agree with the graph window on year and violence type
"""

import pytest
from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from factiongraph.contracts.events import REGIONS, ConflictEvent, EventFilter, ViolenceType
from factiongraph.temporal.window import (
    EventIndex, country_view_events, faction_events, faction_view_events, filter_events
)


VIOLENCE_TYPES = [ViolenceType.STATE_BASED, ViolenceType.NON_STATE, ViolenceType.ONE_SIDED]


@composite
def event_lists(draw):
    size = draw(st.integers(min_value=0, max_value=30))
    return [
        ConflictEvent(
            event_id=f"e{i}",
            year=draw(st.integers(min_value=1989, max_value=2000)),
            country=draw(st.sampled_from(["Mali", "Peru", "Iraq"])),
            region=draw(st.sampled_from(REGIONS)),
            side_a=draw(st.sampled_from(["Alpha", "Beta", "Alpha, Beta"])),
            side_b=draw(st.sampled_from(["Gamma", "Civilians"])),
            violence_type=draw(st.sampled_from(VIOLENCE_TYPES)),
        )
        for i in range(size)
    ]


@composite
def windows(draw):
    return EventFilter(
        year=draw(st.integers(min_value=1988, max_value=2001)),
        violence_type=draw(st.none() | st.sampled_from(VIOLENCE_TYPES)),
        region=draw(st.none() | st.sampled_from(REGIONS)),
    )


def ids(events):
    return {e.event_id for e in events}


class TestFilterProperties:

    @given(event_lists(), windows(), st.integers(min_value=0, max_value=5))
    def test_monotonic_in_year(self, events, window, step):
        later = EventFilter(window.year + step, window.violence_type, window.region)
        assert ids(filter_events(events, window)) <= ids(filter_events(events, later))

    @given(event_lists(), windows())
    def test_idempotent(self, events, window):
        once = filter_events(events, window)
        assert filter_events(once, window) == once

    @given(event_lists(), st.lists(windows(), min_size=1, max_size=5))
    @settings(max_examples=50)
    def test_index_matches_linear_scan(self, events, window_list):
        index = EventIndex(events, max_cache_size=3)
        for window in window_list + window_list:
            assert list(index.filter(window)) == filter_events(events, window)


class TestFilterEvents:

    def make(self, event_id, year, region="Africa", violence_type=ViolenceType.STATE_BASED):
        return ConflictEvent(event_id=event_id, year=year, country="Mali", region=region,
                             violence_type=violence_type, side_a="Alpha", side_b="Beta")

    def test_year_is_inclusive_upper_bound(self):
        events = [self.make("1", 2000), self.make("2", 2001), self.make("3", 2002)]
        assert ids(filter_events(events, EventFilter(year=2001))) == {"1", "2"}

    def test_violence_type_and_region(self):
        events = [
            self.make("1", 2000),
            self.make("2", 2000, region="Asia"),
            self.make("3", 2000, violence_type=ViolenceType.ONE_SIDED),
        ]
        window = EventFilter(year=2000, violence_type=ViolenceType.STATE_BASED, region="Africa")
        assert ids(filter_events(events, window)) == {"1"}

    def test_input_not_mutated(self):
        events = [self.make("1", 2005), self.make("2", 2000)]
        snapshot = list(events)
        filter_events(events, EventFilter(year=2001))
        assert events == snapshot


class TestEventIndex:

    @pytest.fixture
    def events(self):
        return [
            ConflictEvent(event_id="1", year=1990, country="Mali", region="Africa",
                          side_a="Alpha", side_b="Beta"),
            ConflictEvent(event_id="2", year=1995, country="Peru", region="Americas",
                          side_a="Shining Path", side_b="Civilians",
                          violence_type=ViolenceType.ONE_SIDED),
            ConflictEvent(event_id="3", year=1999, country="Mali", region="Africa",
                          side_a="Alpha, Gamma", side_b="Beta"),
        ]

    def test_accessors(self, events):
        index = EventIndex(events)
        assert index.year_range == (1990, 1999)
        assert index.years == [1990, 1995, 1999]
        assert index.regions == ["Africa", "Americas"]
        assert index.countries == ["Mali", "Peru"]
        assert ids(index.country_events("Mali")) == {"1", "3"}

    def test_empty_index(self):
        index = EventIndex([])
        assert index.year_range is None
        assert index.filter(EventFilter(year=2000)) == ()

    def test_lru_eviction(self, events):
        index = EventIndex(events, max_cache_size=2)
        index.filter(EventFilter(year=1990))
        index.filter(EventFilter(year=1995))
        index.filter(EventFilter(year=1990))  # hit, now most recent
        index.filter(EventFilter(year=1999))  # evicts 1995

        stats = index.cache_stats()
        assert stats["size"] == 2
        assert stats["hits"] == 1
        assert stats["misses"] == 3

        index.filter(EventFilter(year=1990))
        assert index.cache_stats()["hits"] == 2
        index.filter(EventFilter(year=1995))
        assert index.cache_stats()["misses"] == 4

    def test_clear_cache(self, events):
        index = EventIndex(events)
        index.filter(EventFilter(year=1999))
        index.clear_cache()
        assert index.cache_stats()["size"] == 0

    def test_faction_events(self, events):
        index = EventIndex(events)
        assert ids(index.faction_events("Alpha")) == {"1", "3"}
        assert ids(index.faction_events("Alpha", year=1995)) == {"1"}
        assert ids(index.faction_events("Gamma")) == {"3"}
        assert index.faction_events("Civilians") == []
        assert index.has_faction("Shining Path")
        assert not index.has_faction("Civilians")

    def test_faction_events_match_module_scan(self, events):
        index = EventIndex(events)
        for name in ("Alpha", "Beta", "Gamma", "Shining Path", "Nobody"):
            assert index.faction_events(name, country="Mali") == faction_events(events, name, country="Mali")


class TestPanelEvents:

    @given(event_lists(), st.integers(min_value=1989, max_value=2000), st.sampled_from(VIOLENCE_TYPES + [None]))
    @settings(max_examples=50)
    def test_country_panel_matches_window(self, events, year, violence_type):
        mali = [e for e in events if e.country == "Mali"]
        window = EventFilter(year=year, violence_type=violence_type)
        assert country_view_events(mali, year, violence_type) == filter_events(mali, window)

    def test_faction_filter_uses_extracted_names(self):
        events = [
            ConflictEvent(event_id="1", year=1995, country="Mali", region="Africa",
                          side_a="Alpha", side_b="Gamma"),
            ConflictEvent(event_id="2", year=1996, country="Mali", region="Africa",
                          side_a="Alpha Front", side_b="Beta"),
        ]
        assert [e.event_id for e in country_view_events(events, 2000, faction_filter="Alpha")] == ["1"]
        assert [e.event_id for e in country_view_events(events, 1995)] == ["1"]

    def test_connected_faction(self):
        events = [
            ConflictEvent(event_id="1", year=1995, country="Mali", region="Africa",
                          side_a="Alpha", side_b="Gamma"),
            ConflictEvent(event_id="2", year=1996, country="Peru", region="Americas",
                          side_a="Alpha", side_b="Beta"),
        ]
        assert [e.event_id for e in faction_view_events(events, 2000, connected_faction="Beta")] == ["2"]
        assert faction_view_events(events, 2000, ViolenceType.ONE_SIDED) == []
