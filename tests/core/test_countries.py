"""
Country Aggregation Tests
"""

import pytest

from factiongraph.contracts.events import ConflictEvent, ViolenceType
from factiongraph.core.countries import (
    CountrySortMode, TypeBreakdown, aggregate_by_country, summarize_country, top_countries
)


def make_event(event_id, country, best, violence_type=ViolenceType.STATE_BASED,
               coordinates=None, region="Africa"):
    return ConflictEvent(
        event_id=event_id, year=2001, country=country, region=region, best=best,
        violence_type=violence_type, coordinates=coordinates
    )


class TestSummarizeCountry:

    def test_totals_and_composition(self):
        events = [
            make_event("1", "Mali", 10, coordinates=(-4.0, 17.0)),
            make_event("2", "Mali", 30, ViolenceType.ONE_SIDED, coordinates=(-2.0, 13.0)),
            make_event("3", "Mali", 5, ViolenceType.ONE_SIDED),
        ]
        country = summarize_country("Mali", events)

        assert country.total_casualties == 45
        assert country.total_events == 3
        assert country.average_casualties == pytest.approx(15.0)
        assert country.coordinates == pytest.approx((-3.0, 15.0))
        assert country.type_composition == {
            ViolenceType.STATE_BASED: TypeBreakdown(1, 10),
            ViolenceType.ONE_SIDED: TypeBreakdown(2, 35),
        }
        assert country.deadliest_event.event_id == "2"
        assert len(country.events_with_coordinates) == 2

    def test_no_coordinates(self):
        country = summarize_country("Mali", [make_event("1", "Mali", 1)])
        assert country.coordinates is None

    def test_deadliest_tie_keeps_first(self):
        country = summarize_country("Mali", [make_event("a", "Mali", 7), make_event("b", "Mali", 7)])
        assert country.deadliest_event.event_id == "a"

    def test_empty_country(self):
        country = summarize_country("Mali", [], region="Africa")
        assert country.region == "Africa"
        assert country.total_events == 0
        assert country.average_casualties == 0.0
        assert country.deadliest_event is None
        assert country.coordinates is None


class TestRanking:

    @pytest.fixture
    def aggregates(self):
        events = [
            make_event("1", "Mali", 100),
            make_event("2", "Niger", 10),
            make_event("3", "Niger", 10),
            make_event("4", "Niger", 10),
            make_event("5", "Chad", 60),
            make_event("6", "Chad", 0),
        ]
        return aggregate_by_country(events)

    def test_first_seen_order(self, aggregates):
        assert list(aggregates) == ["Mali", "Niger", "Chad"]

    def test_by_casualties(self, aggregates):
        ranked = top_countries(aggregates.values(), CountrySortMode.CASUALTIES)
        assert [c.name for c in ranked] == ["Mali", "Chad", "Niger"]

    def test_by_count(self, aggregates):
        ranked = top_countries(aggregates.values(), CountrySortMode.COUNT)
        assert [c.name for c in ranked] == ["Niger", "Chad", "Mali"]

    def test_by_average(self, aggregates):
        ranked = top_countries(aggregates.values(), CountrySortMode.AVERAGE)
        assert [c.name for c in ranked] == ["Mali", "Chad", "Niger"]

    def test_limit(self, aggregates):
        assert len(top_countries(aggregates.values(), limit=2)) == 2
        assert top_countries(aggregates.values(), limit=0) == []

    def test_name_breaks_ties(self):
        aggregates = aggregate_by_country([make_event("1", "Togo", 5), make_event("2", "Benin", 5)])
        assert [c.name for c in top_countries(aggregates.values())] == ["Benin", "Togo"]

    @pytest.mark.parametrize("raw,expected", [
        ("count", CountrySortMode.COUNT),
        ("average", CountrySortMode.AVERAGE),
        ("casualties", CountrySortMode.CASUALTIES),
        (None, CountrySortMode.CASUALTIES),
        ("bogus", CountrySortMode.CASUALTIES),
    ])
    def test_parse(self, raw, expected):
        assert CountrySortMode.parse(raw) is expected
