"""
Layout Layer

RESPONSIBILITY: Force parameters, region-zone targets and warm-up
scheduling for the physics collaborator
OUTPUTS: ForceConfig, per-node (x, y) positions

WHAT THIS LAYER MUST NOT DO:
============================
- Decide which nodes exist or are visible (core layer's job)
- Draw anything
"""

from .forces import (
    ForceConfig, LayoutEngine, Position, RegionZone, WarmupSchedule, ZoneLayout,
    initial_positions, region_zones, settle, zone_target_x
)

__all__ = [
    'ForceConfig', 'LayoutEngine', 'Position', 'RegionZone', 'WarmupSchedule',
    'ZoneLayout', 'initial_positions', 'region_zones', 'settle', 'zone_target_x',
]
