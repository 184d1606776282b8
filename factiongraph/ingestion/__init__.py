"""
Ingestion Layer

RESPONSIBILITY: Read event files and coerce rows into ConflictEvent
ALLOWED INPUTS: CSV / JSON exports of the conflict event dataset
OUTPUTS: Lists of ConflictEvent (immutable)

WHAT THIS LAYER MUST NOT DO:
============================
- Extract factions or aggregate anything
- Raise on partial rows (missing values default to 0 / "" / None)
"""

from .loader import (
    CsvEventSource, EventSource, JsonEventSource, event_from_row,
    load_events, source_for
)

__all__ = [
    'CsvEventSource', 'EventSource', 'JsonEventSource', 'event_from_row',
    'load_events', 'source_for',
]
