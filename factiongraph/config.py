"""
Engine Configuration
====================

Nested dataclass configuration, one block per concern, aggregated by
EngineConfig. Every value has a default; `EngineConfig.from_env()`
applies FACTIONGRAPH_* overrides.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
import os

from .contracts.events import REGIONS


MIN_PARTICIPATION = 5
DOUBLE_CLICK_MS = 500

ENV_PREFIX = "FACTIONGRAPH_"


@dataclass
class GraphConfig:
    """Graph builder parameters."""
    min_participation: int = MIN_PARTICIPATION
    min_radius: float = 8.0
    max_radius: float = 35.0
    radius_divisor: float = 3.0
    edge_value_divisor: float = 5.0

    def __post_init__(self):
        if self.min_participation < 0:
            raise ValueError("min_participation must be non-negative")
        if self.min_radius <= 0 or self.max_radius < self.min_radius:
            raise ValueError("radius bounds must satisfy 0 < min_radius <= max_radius")


@dataclass
class RateLimitConfig:
    """Interaction timing, in milliseconds."""
    rebuild_debounce_ms: int = 150
    focus_throttle_ms: int = 100
    selection_guard_ms: int = 50
    double_click_ms: int = DOUBLE_CLICK_MS
    playback_interval_ms: int = 500


@dataclass
class LayoutConfig:
    """Force layout parameters handed to the layout collaborator."""
    regions: Tuple[str, ...] = REGIONS
    padding: float = 80.0
    link_distance: float = 120.0
    link_strength: float = 0.2
    charge_strength: float = -200.0
    collision_padding: float = 25.0
    zone_strength: float = 0.1
    center_strength: float = 0.05
    initial_alpha: float = 0.8
    alpha_decay: float = 0.02
    warmup_ticks: int = 300
    ticks_per_frame: int = 15


@dataclass
class EngineConfig:
    """Unified configuration for engine and dashboard."""
    graph: GraphConfig = None
    rate_limits: RateLimitConfig = None
    layout: LayoutConfig = None
    data_path: Optional[str] = None
    log_level: str = "INFO"
    filter_cache_size: int = 100

    def __post_init__(self):
        self.graph = self.graph or GraphConfig()
        self.rate_limits = self.rate_limits or RateLimitConfig()
        self.layout = self.layout or LayoutConfig()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        """Build a config from FACTIONGRAPH_* environment variables."""
        env = os.environ if environ is None else environ

        def _int(name: str, default: int) -> int:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw.strip() == "":
                return default
            return int(raw)

        graph = GraphConfig(
            min_participation=_int("MIN_PARTICIPATION", MIN_PARTICIPATION)
        )
        defaults = RateLimitConfig()
        rate_limits = RateLimitConfig(
            rebuild_debounce_ms=_int("DEBOUNCE_MS", defaults.rebuild_debounce_ms),
            focus_throttle_ms=_int("THROTTLE_MS", defaults.focus_throttle_ms),
            selection_guard_ms=_int("SELECTION_GUARD_MS", defaults.selection_guard_ms),
            double_click_ms=_int("DOUBLE_CLICK_MS", defaults.double_click_ms),
        )
        return cls(
            graph=graph,
            rate_limits=rate_limits,
            data_path=env.get(ENV_PREFIX + "DATA_PATH") or None,
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", "INFO"),
        )
