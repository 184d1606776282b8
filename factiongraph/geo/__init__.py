"""
Geo Layer

RESPONSIBILITY: Match event country names to map feature names
OUTPUTS: Feature names or None

WHAT THIS LAYER MUST NOT DO:
============================
- Project coordinates or draw shapes (renderer's job)
- Raise on an unmatched name
"""

from .country_names import (
    COUNTRY_ALIASES, CountryMatch, CountryNameResolver, MatchMethod,
    normalize_country_name
)

__all__ = [
    'COUNTRY_ALIASES', 'CountryMatch', 'CountryNameResolver', 'MatchMethod',
    'normalize_country_name',
]
