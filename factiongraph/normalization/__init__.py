"""
Normalization Layer

RESPONSIBILITY: Turn free-text participant fields into canonical faction names
ALLOWED INPUTS: ConflictEvent side fields
OUTPUTS: Sets of faction name strings

WHAT THIS LAYER MUST NOT DO:
============================
- Count, aggregate or classify relationships (core layer's job)
- Merge names that differ in text (two strings are two factions)
"""

from .entities import extract, event_sides, involves, CIVILIAN_PATTERN

__all__ = ['extract', 'event_sides', 'involves', 'CIVILIAN_PATTERN']
