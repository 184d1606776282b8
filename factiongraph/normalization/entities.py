"""
Participant Entity Extraction
=============================

Responsibility: split a free-text side field into discrete faction names.
Constraint: NO INFERENCE. A name is whatever sits between commas.
"""

from __future__ import annotations
import re
from typing import FrozenSet, Optional, Tuple

from ..contracts.events import ConflictEvent


CIVILIAN_PATTERN = re.compile(r"civilian", re.IGNORECASE)


def extract(raw_field: Optional[str]) -> FrozenSet[str]:
    """
    Extract the set of faction names from a side_a/side_b field.

    Tokens are comma-separated and whitespace-trimmed. Empty tokens and
    any token mentioning civilians are dropped.
    """
    if not raw_field:
        return frozenset()

    names = set()
    for token in raw_field.split(","):
        name = token.strip()
        if not name or CIVILIAN_PATTERN.search(name):
            continue
        names.add(name)
    return frozenset(names)


def event_sides(event: ConflictEvent) -> Tuple[FrozenSet[str], FrozenSet[str]]:
    """(side A names, side B names) of an event."""
    return extract(event.side_a), extract(event.side_b)


def involves(event: ConflictEvent, faction_name: str) -> bool:
    """True if the faction is a named participant on either side."""
    side_a, side_b = event_sides(event)
    return faction_name in side_a or faction_name in side_b
