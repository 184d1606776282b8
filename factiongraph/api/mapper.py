"""
API Mapper
==========

Transforms engine contracts into JSON-ready dicts.
Values are passed through unchanged; no rounding beyond what the
builder already computed.
"""
from typing import Any, Dict, Iterable, List, Optional

from ..contracts.events import ConflictEvent, EventFilter
from ..contracts.graph import FactionGraph, FactionNode, RelationshipEdge
from ..core.countries import CountryAggregate
from ..core.focus import ConnectedFaction
from ..core.topology import GraphMetrics
from ..geo.country_names import CountryMatch


def map_window(window: EventFilter) -> Dict[str, Any]:
    return {
        "year": window.year,
        "violence_type": window.violence_type.value if window.violence_type else None,
        "region": window.region,
    }


def map_node(node: FactionNode) -> Dict[str, Any]:
    return {
        "id": node.id,
        "country": node.country,
        "region": node.region,
        "participation": node.participation,
        "casualties": node.casualties,
        "radius": node.radius,
    }


def map_edge(edge: RelationshipEdge) -> Dict[str, Any]:
    return {
        "key": edge.key,
        "source": edge.faction_a,
        "target": edge.faction_b,
        "allied_count": edge.allied_count,
        "opposed_count": edge.opposed_count,
        "casualties": edge.casualties,
        "type": edge.classification.value,
        "value": edge.value,
    }


def map_metrics(metrics: GraphMetrics) -> Dict[str, Any]:
    return {
        "node_count": metrics.node_count,
        "edge_count": metrics.edge_count,
        "ally_edge_count": metrics.ally_edge_count,
        "enemy_edge_count": metrics.enemy_edge_count,
        "density": metrics.density,
        "connected_components": metrics.connected_components_count,
        "isolated": metrics.isolated_count,
    }


def map_graph(
    graph: FactionGraph,
    window: EventFilter,
    metrics: Optional[GraphMetrics] = None
) -> Dict[str, Any]:
    dto = {
        "filter": map_window(window),
        "nodes": [map_node(n) for n in graph.nodes],
        "edges": [map_edge(e) for e in graph.edges],
    }
    if metrics is not None:
        dto["metrics"] = map_metrics(metrics)
    return dto


def map_connected(connection: ConnectedFaction) -> Dict[str, Any]:
    return {
        "id": connection.faction_id,
        "type": connection.relationship.value,
        "allied_count": connection.allied_count,
        "opposed_count": connection.opposed_count,
        "casualties": connection.casualties,
    }


def map_event(event: ConflictEvent) -> Dict[str, Any]:
    return {
        "id": event.event_id,
        "year": event.year,
        "month": event.month,
        "country": event.country,
        "region": event.region,
        "side_a": event.side_a,
        "side_b": event.side_b,
        "best": event.best,
        "deaths_side_a": event.deaths_side_a,
        "deaths_side_b": event.deaths_side_b,
        "deaths_civilians": event.deaths_civilians,
        "deaths_unknown": event.deaths_unknown,
        "violence_type": event.violence_type.value,
        "coordinates": list(event.coordinates) if event.coordinates else None,
        "conflict_name": event.conflict_name,
        "dyad_name": event.dyad_name,
        "date_start": event.date_start,
        "date_end": event.date_end,
        "where_description": event.where_description,
        "source_headline": event.source_headline,
    }


def map_events(events: Iterable[ConflictEvent]) -> List[Dict[str, Any]]:
    return [map_event(e) for e in events]


def map_country(country: CountryAggregate) -> Dict[str, Any]:
    return {
        "name": country.name,
        "region": country.region,
        "total_casualties": country.total_casualties,
        "total_events": country.total_events,
        "average_casualties": country.average_casualties,
        "coordinates": list(country.coordinates) if country.coordinates else None,
        "type_composition": {
            vt.value: {"count": b.count, "casualties": b.casualties}
            for vt, b in country.type_composition.items()
        },
        "deadliest_event_id": country.deadliest_event.event_id if country.deadliest_event else None,
    }


def map_country_match(match: CountryMatch) -> Dict[str, Any]:
    return {
        "query": match.query,
        "feature_name": match.feature_name,
        "method": match.method.value,
    }
