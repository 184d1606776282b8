"""
Faction Graph Engine: Read-Only API Server
==========================================

Serves graph builds, focus sets, faction event lists and country
rankings over the loaded event set. GET only; nothing here changes the
engine.

Endpoints:
- GET /health
- GET /api/v1/graph                           -> nodes, edges, metrics
- GET /api/v1/graph/focus/{faction_id}        -> focus set + connected factions
- GET /api/v1/factions/{faction_id}/events    -> full event list of a faction
- GET /api/v1/countries/top                   -> ranked country aggregates
- GET /api/v1/countries/resolve?name=...      -> map feature name

Usage:
    uvicorn factiongraph.api.server:app --reload
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..config import EngineConfig
from ..contracts.events import REGIONS, EventFilter, ViolenceType
from ..contracts.graph import RelationshipFilter
from ..core.countries import TOP_COUNTRIES_LIMIT, CountrySortMode
from ..engine import FactionGraphEngine
from ..observability import configure_logging
from .mapper import (
    map_connected, map_country, map_country_match, map_edge, map_events,
    map_graph, map_window
)


logger = logging.getLogger(__name__)


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    events: int
    year_range: Optional[List[int]] = None


class GraphResponse(BaseModel):
    filter: Dict[str, Any]
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]
    metrics: Dict[str, Any]


class FocusResponse(BaseModel):
    filter: Dict[str, Any]
    focused_id: str
    visible_ids: List[str]
    edges: List[Dict[str, Any]]
    connected: List[Dict[str, Any]]


class FactionEventsResponse(BaseModel):
    faction: str
    count: int
    events: List[Dict[str, Any]]


class TopCountriesResponse(BaseModel):
    filter: Dict[str, Any]
    sort: str
    countries: List[Dict[str, Any]]


class CountryMatchResponse(BaseModel):
    query: str
    feature_name: str
    method: str


# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

def get_engine(request: Request) -> FactionGraphEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def parse_window(
    engine: FactionGraphEngine,
    year: Optional[int],
    violence_type: Optional[str],
    region: Optional[str]
) -> EventFilter:
    """Query parameters -> EventFilter; bad values are a 400."""
    parsed_type = None
    if violence_type:
        parsed_type = ViolenceType.from_label(violence_type)
        if parsed_type is None:
            raise HTTPException(status_code=400, detail=f"Unknown violence type: {violence_type}")
    if region and region not in REGIONS:
        raise HTTPException(status_code=400, detail=f"Unknown region: {region}")
    if year is None:
        year = engine.default_filter().year
    return EventFilter(year=year, violence_type=parsed_type, region=region or None)


def create_app(engine: Optional[FactionGraphEngine] = None) -> FastAPI:
    """
    Build the API app. With no engine given, one is loaded on startup
    from FACTIONGRAPH_* environment configuration.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "engine", None) is None:
            config = EngineConfig.from_env()
            configure_logging(config.log_level)
            logger.info("Initializing engine from %s", config.data_path or "<no data path>")
            app.state.engine = FactionGraphEngine.from_config(config)
            logger.info("Engine ready with %d events", app.state.engine.event_count)
        yield
        logger.info("Shutting down engine")
        app.state.engine = None

    app = FastAPI(
        title="Faction Graph Engine API",
        version="0.1.0",
        description="Read-only faction relationship graph over conflict events",
        lifespan=lifespan
    )
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    @app.get("/health", response_model=HealthResponse)
    async def health_check(engine: FactionGraphEngine = Depends(get_engine)):
        year_range = engine.index.year_range
        return {
            "status": "online",
            "events": engine.event_count,
            "year_range": list(year_range) if year_range else None,
        }

    @app.get("/api/v1/graph", response_model=GraphResponse)
    async def get_graph(
        year: Optional[int] = None,
        violence_type: Optional[str] = None,
        region: Optional[str] = None,
        relationship: RelationshipFilter = RelationshipFilter.ALL,
        engine: FactionGraphEngine = Depends(get_engine)
    ):
        window = parse_window(engine, year, violence_type, region)
        graph = engine.build_graph(window, relationship)
        return map_graph(graph, window, engine.graph_metrics(graph))

    @app.get("/api/v1/graph/focus/{faction_id:path}", response_model=FocusResponse)
    async def get_focus(
        faction_id: str,
        year: Optional[int] = None,
        violence_type: Optional[str] = None,
        region: Optional[str] = None,
        engine: FactionGraphEngine = Depends(get_engine)
    ):
        window = parse_window(engine, year, violence_type, region)
        graph = engine.build_graph(window)
        result = engine.focus(graph, faction_id)
        if result.is_failure:
            raise HTTPException(status_code=404, detail=result.error.message)

        visible = result.value
        edges = [e for e in graph.edges if e.touches(faction_id)]
        return {
            "filter": map_window(window),
            "focused_id": faction_id,
            "visible_ids": sorted(visible),
            "edges": [map_edge(e) for e in edges],
            "connected": [map_connected(c) for c in engine.connected_factions(graph, faction_id)],
        }

    @app.get("/api/v1/factions/{faction_id:path}/events", response_model=FactionEventsResponse)
    async def get_faction_events(
        faction_id: str,
        year: Optional[int] = None,
        violence_type: Optional[str] = None,
        country: Optional[str] = None,
        engine: FactionGraphEngine = Depends(get_engine)
    ):
        parsed_type = None
        if violence_type:
            parsed_type = ViolenceType.from_label(violence_type)
            if parsed_type is None:
                raise HTTPException(status_code=400, detail=f"Unknown violence type: {violence_type}")

        result = engine.faction_events(faction_id, year, parsed_type, country)
        if result.is_failure:
            raise HTTPException(status_code=404, detail=result.error.message)
        return {"faction": faction_id, "count": len(result.value), "events": map_events(result.value)}

    @app.get("/api/v1/countries/top", response_model=TopCountriesResponse)
    async def get_top_countries(
        year: Optional[int] = None,
        violence_type: Optional[str] = None,
        region: Optional[str] = None,
        sort: CountrySortMode = CountrySortMode.CASUALTIES,
        limit: int = Query(TOP_COUNTRIES_LIMIT, ge=1, le=500),
        engine: FactionGraphEngine = Depends(get_engine)
    ):
        window = parse_window(engine, year, violence_type, region)
        countries = engine.top_countries(window, sort, limit)
        return {
            "filter": map_window(window),
            "sort": sort.value,
            "countries": [map_country(c) for c in countries],
        }

    @app.get("/api/v1/countries/resolve", response_model=CountryMatchResponse)
    async def resolve_country(
        name: str = Query(..., min_length=1),
        engine: FactionGraphEngine = Depends(get_engine)
    ):
        match = engine.resolver().match(name)
        if match is None:
            raise HTTPException(status_code=404, detail=f"No match for country: {name}")
        return map_country_match(match)

    return app


app = create_app()
