"""
Force Layout Contracts
======================

What the core hands to the physics collaborator: force parameters,
region-zone targets (one horizontal band per region), seeded initial
positions, and a cooperative warm-up schedule.

The integrator itself lives behind LayoutEngine. ZoneLayout is the
minimal in-repo engine: it applies only the positional forces (region
x-bands and the vertical centre line), which is enough for headless
use and tests.

INVARIANTS:
- Zone targets depend only on (regions, width, padding)
- initial_positions(nodes, cfg, seed) is deterministic for a given seed
- A warm-up tick batch never exceeds ticks_per_frame
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple
import logging

import numpy as np

from ..config import LayoutConfig
from ..contracts.graph import FactionNode, RelationshipEdge


logger = logging.getLogger(__name__)

Position = Tuple[float, float]


@dataclass(frozen=True)
class ForceConfig:
    """Force parameters for one canvas size."""
    width: float
    height: float
    regions: Tuple[str, ...]
    padding: float
    link_distance: float
    link_strength: float
    charge_strength: float
    collision_padding: float
    zone_strength: float
    center_strength: float
    initial_alpha: float
    alpha_decay: float

    def __post_init__(self):
        if self.width <= 2 * self.padding or self.height <= 2 * self.padding:
            raise ValueError("canvas must be larger than twice the padding")

    @staticmethod
    def from_layout_config(config: LayoutConfig, width: float, height: float) -> ForceConfig:
        return ForceConfig(
            width=width,
            height=height,
            regions=tuple(config.regions),
            padding=config.padding,
            link_distance=config.link_distance,
            link_strength=config.link_strength,
            charge_strength=config.charge_strength,
            collision_padding=config.collision_padding,
            zone_strength=config.zone_strength,
            center_strength=config.center_strength,
            initial_alpha=config.initial_alpha,
            alpha_decay=config.alpha_decay
        )

    def collision_radius(self, node: FactionNode) -> float:
        return node.radius + self.collision_padding


# =============================================================================
# REGION ZONES
# =============================================================================

@dataclass(frozen=True)
class RegionZone:
    region: str
    x_start: float
    x_end: float

    @property
    def center(self) -> float:
        return (self.x_start + self.x_end) / 2


def region_zones(config: ForceConfig) -> Dict[str, RegionZone]:
    """Split the usable width into equal bands, in region order."""
    if not config.regions:
        return {}
    edges = np.linspace(config.padding, config.width - config.padding, len(config.regions) + 1)
    return {
        region: RegionZone(region, float(edges[i]), float(edges[i + 1]))
        for i, region in enumerate(config.regions)
    }


def zone_target_x(region: str, zones: Dict[str, RegionZone], config: ForceConfig) -> float:
    """Band centre for the region; unknown regions are pulled to the middle."""
    zone = zones.get(region)
    if zone is None:
        return config.width / 2
    return zone.center


def initial_positions(
    nodes: Sequence[FactionNode],
    config: ForceConfig,
    seed: Optional[int] = None
) -> Dict[str, Position]:
    """Random start inside each node's region band, inside the vertical padding."""
    rng = np.random.default_rng(seed)
    zones = region_zones(config)
    positions = {}
    for node in nodes:
        zone = zones.get(node.region)
        if zone is None:
            x_lo, x_hi = config.padding, config.width - config.padding
        else:
            x_lo, x_hi = zone.x_start, zone.x_end
        x = x_lo + rng.random() * (x_hi - x_lo)
        y = config.padding + rng.random() * (config.height - 2 * config.padding)
        positions[node.id] = (float(x), float(y))
    return positions


# =============================================================================
# ENGINE CONTRACT
# =============================================================================

class LayoutEngine(ABC):
    """
    Physics collaborator.

    The core calls start() after every full rebuild and tick() from the
    host frame loop. Skipping or delaying ticks only delays convergence.
    """

    @abstractmethod
    def start(
        self,
        nodes: Sequence[FactionNode],
        edges: Sequence[RelationshipEdge],
        config: ForceConfig,
        positions: Optional[Dict[str, Position]] = None
    ) -> None:
        """Load a new graph, keeping positions for ids present in `positions`."""
        pass

    @abstractmethod
    def tick(self) -> None:
        """Advance the simulation one step."""
        pass

    @property
    @abstractmethod
    def alpha(self) -> float:
        pass

    @abstractmethod
    def positions(self) -> Dict[str, Position]:
        pass


class ZoneLayout(LayoutEngine):
    """Positional forces only: region x-bands and the vertical centre."""

    def __init__(self, seed: Optional[int] = 0):
        self._seed = seed
        self._ids: Tuple[str, ...] = ()
        self._xy = np.zeros((0, 2))
        self._targets = np.zeros((0, 2))
        self._strength = np.zeros(2)
        self._alpha = 0.0
        self._alpha_decay = 0.0

    def start(self, nodes, edges, config, positions=None):
        seeded = initial_positions(nodes, config, self._seed)
        if positions:
            seeded.update({k: v for k, v in positions.items() if k in seeded})

        zones = region_zones(config)
        self._ids = tuple(n.id for n in nodes)
        self._xy = np.array([seeded[i] for i in self._ids], dtype=float).reshape(-1, 2)
        self._targets = np.array(
            [(zone_target_x(n.region, zones, config), config.height / 2) for n in nodes],
            dtype=float
        ).reshape(-1, 2)
        self._strength = np.array([config.zone_strength, config.center_strength])
        self._alpha = config.initial_alpha
        self._alpha_decay = config.alpha_decay

    def tick(self):
        if not self._ids:
            return
        self._xy += (self._targets - self._xy) * self._strength * self._alpha
        self._alpha *= (1 - self._alpha_decay)

    @property
    def alpha(self) -> float:
        return self._alpha

    def positions(self) -> Dict[str, Position]:
        return {i: (float(x), float(y)) for i, (x, y) in zip(self._ids, self._xy)}


# =============================================================================
# WARM-UP
# =============================================================================

class WarmupSchedule:
    """
    Runs `total_ticks` engine ticks spread over frames, at most
    `ticks_per_frame` per step(). Cancelling leaves positions as they are.
    """

    def __init__(self, total_ticks: int = 300, ticks_per_frame: int = 15):
        if total_ticks < 0 or ticks_per_frame <= 0:
            raise ValueError("total_ticks must be >= 0 and ticks_per_frame > 0")
        self._total = total_ticks
        self._per_frame = ticks_per_frame
        self._done = 0
        self._cancelled = False

    @classmethod
    def from_layout_config(cls, config: LayoutConfig) -> WarmupSchedule:
        return cls(config.warmup_ticks, config.ticks_per_frame)

    @property
    def ticks_done(self) -> int:
        return self._done

    @property
    def progress(self) -> int:
        """Percent complete, 0-100."""
        if self._total == 0:
            return 100
        return round(self._done * 100 / self._total)

    @property
    def is_complete(self) -> bool:
        return self._done >= self._total

    @property
    def is_running(self) -> bool:
        return not self._cancelled and not self.is_complete

    def step(self, engine: LayoutEngine) -> int:
        """Run one frame's batch of ticks; returns ticks run."""
        if not self.is_running:
            return 0
        batch = min(self._per_frame, self._total - self._done)
        for _ in range(batch):
            engine.tick()
        self._done += batch
        if self.is_complete:
            logger.debug("Layout warm-up complete after %d ticks", self._done)
        return batch

    def cancel(self):
        self._cancelled = True


def settle(engine: LayoutEngine, schedule: WarmupSchedule) -> Dict[str, Position]:
    """Run a schedule to completion synchronously."""
    while schedule.is_running:
        schedule.step(engine)
    return engine.positions()
