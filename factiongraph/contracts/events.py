"""
Event Contracts
===============

Immutable conflict event records and the filter that windows them.

A ConflictEvent is produced once by the loader and never modified.
Numeric fields are already coerced; missing values arrive as 0 / "" / None.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ViolenceType(Enum):
    """Violence categories, keyed by the dataset's numeric code."""
    STATE_BASED = "State-based Conflict"
    NON_STATE = "Non-state Conflict"
    ONE_SIDED = "One-sided Violence"
    UNKNOWN = "Unknown"

    @staticmethod
    def from_code(code: object) -> ViolenceType:
        return _CODE_MAP.get(str(code).strip(), ViolenceType.UNKNOWN)

    @staticmethod
    def from_label(label: Optional[str]) -> Optional[ViolenceType]:
        if not label:
            return None
        for member in ViolenceType:
            if member.value == label or member.name == label:
                return member
        return None


_CODE_MAP = {
    "1": ViolenceType.STATE_BASED,
    "2": ViolenceType.NON_STATE,
    "3": ViolenceType.ONE_SIDED,
}


# Fixed region order; also the left-to-right order of layout zones.
REGIONS: Tuple[str, ...] = ("Africa", "Americas", "Asia", "Europe", "Middle East")


@dataclass(frozen=True)
class ConflictEvent:
    """
    A single violent event.

    Casualty fields follow the source dataset: `best` is the best estimate
    of total deaths, the `deaths_*` fields break it down by side.
    """
    event_id: str
    year: int
    country: str
    region: str
    side_a: str = ""
    side_b: str = ""
    best: int = 0
    month: Optional[int] = None
    deaths_side_a: int = 0
    deaths_side_b: int = 0
    deaths_civilians: int = 0
    deaths_unknown: int = 0
    violence_type: ViolenceType = ViolenceType.UNKNOWN
    coordinates: Optional[Tuple[float, float]] = None  # (longitude, latitude)

    # Descriptive fields, display only
    conflict_name: str = ""
    dyad_name: str = ""
    date_start: str = ""
    date_end: str = ""
    where_description: str = ""
    source_headline: str = ""

    def __post_init__(self):
        if self.best < 0:
            raise ValueError("best casualty estimate must be non-negative")

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None


@dataclass(frozen=True)
class EventFilter:
    """
    Time/filter window parameters.

    year is inclusive upper bound; None for violence_type/region means
    "no restriction".
    """
    year: int
    violence_type: Optional[ViolenceType] = None
    region: Optional[str] = None

    def cache_key(self) -> str:
        vt = self.violence_type.name if self.violence_type else "*"
        return f"{self.year}|{vt}|{self.region or '*'}"
