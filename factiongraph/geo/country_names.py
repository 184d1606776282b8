"""
Country Name Resolution
=======================

Aligns free-text country names from events with the names of a
geographic feature set (map shapes).

Resolution chain, first hit wins:
1. exact        - name is a feature name
2. normalized   - equal after normalize_country_name()
3. alias        - manual alias table, then exact/normalized on the target
4. substring    - one normalized name contains the other

A miss is logged and returns None; nothing here raises on bad input.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional
import logging
import re


logger = logging.getLogger(__name__)


# Event-dataset name -> map feature name
COUNTRY_ALIASES: Dict[str, str] = {
    # Historical / political name changes
    "Cambodia (Kampuchea)": "Cambodia",
    "Kampuchea": "Cambodia",
    "DR Congo (Zaire)": "Dem. Rep. Congo",
    "DR Congo": "Dem. Rep. Congo",
    "Democratic Republic of the Congo": "Dem. Rep. Congo",
    "Congo, DR": "Dem. Rep. Congo",
    "Zaire": "Dem. Rep. Congo",
    "Myanmar (Burma)": "Myanmar",
    "Burma": "Myanmar",
    "Zimbabwe (Rhodesia)": "Zimbabwe",
    "Rhodesia": "Zimbabwe",
    "Yemen (North Yemen)": "Yemen",
    "Russia (Soviet Union)": "Russia",
    "Soviet Union": "Russia",
    "USSR": "Russia",
    "Serbia (Yugoslavia)": "Serbia",
    "Yugoslavia": "Serbia",
    "Serbia and Montenegro": "Serbia",
    "Federal Republic of Yugoslavia": "Serbia",
    "Bosnia-Herzegovina": "Bosnia and Herz.",
    "Bosnia and Herzegovina": "Bosnia and Herz.",
    "Bosnia": "Bosnia and Herz.",
    "Macedonia": "North Macedonia",
    "FYROM": "North Macedonia",
    "Former Yugoslav Republic of Macedonia": "North Macedonia",

    # Asia
    "Laos": "Lao PDR",
    "Viet Nam": "Vietnam",
    "Timor-Leste (East Timor)": "Timor-Leste",
    "East Timor": "Timor-Leste",
    "North Korea": "Dem. Rep. Korea",
    "South Korea": "Korea",
    "Republic of Korea": "Korea",

    # Africa
    "Central African Republic": "Central African Rep.",
    "CAR": "Central African Rep.",
    "South Sudan": "S. Sudan",
    "Ivory Coast": "Côte d'Ivoire",
    "Cote d'Ivoire": "Côte d'Ivoire",
    "Equatorial Guinea": "Eq. Guinea",
    "Western Sahara": "W. Sahara",
    "Eswatini": "eSwatini",
    "Swaziland": "eSwatini",
    "Kingdom of eSwatini (Swaziland)": "eSwatini",
    "Madagascar (Malagasy)": "Madagascar",
    "Malagasy": "Madagascar",

    # Europe
    "Czech Republic": "Czechia",
    "Byelarus": "Belarus",
    "Belorussia": "Belarus",
    "Moldavia": "Moldova",

    # Americas
    "United States": "United States of America",
    "USA": "United States of America",
    "US": "United States of America",
    "U.S.A.": "United States of America",
    "Dominican Republic": "Dominican Rep.",

    # Oceania
    "Solomon Islands": "Solomon Is.",
}

# Shorter normalized names are too ambiguous for containment matching.
MIN_SUBSTRING_LENGTH = 4

_NOISE_PATTERNS = (
    re.compile(r"\bthe\b"),
    re.compile(r"\brepublic of\b"),
    re.compile(r"\bkingdom of\b"),
)
_WHITESPACE = re.compile(r"\s+")


def normalize_country_name(name: Optional[str]) -> str:
    """Lowercase, drop filler words and periods, collapse whitespace."""
    if not name:
        return ""
    text = name.lower()
    for pattern in _NOISE_PATTERNS:
        text = pattern.sub("", text)
    text = text.replace(".", "")
    return _WHITESPACE.sub(" ", text).strip()


class MatchMethod(Enum):
    EXACT = "exact"
    NORMALIZED = "normalized"
    ALIAS = "alias"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class CountryMatch:
    query: str
    feature_name: str
    method: MatchMethod


class CountryNameResolver:
    """
    Resolve event country names against a fixed set of feature names.

    Results (hits and misses) are memoized per query string.
    """

    def __init__(self, feature_names: Iterable[str], aliases: Optional[Mapping[str, str]] = None):
        self._features: List[str] = sorted(set(feature_names))
        self._feature_set = frozenset(self._features)
        self._aliases = dict(COUNTRY_ALIASES if aliases is None else aliases)
        self._normalized: Dict[str, str] = {}
        for feature in self._features:
            self._normalized.setdefault(normalize_country_name(feature), feature)
        self._memo: Dict[str, Optional[CountryMatch]] = {}

    @property
    def feature_names(self) -> List[str]:
        return list(self._features)

    def resolve(self, name: Optional[str]) -> Optional[str]:
        match = self.match(name)
        return match.feature_name if match else None

    def match(self, name: Optional[str]) -> Optional[CountryMatch]:
        if not name:
            return None
        if name in self._memo:
            return self._memo[name]

        match = self._resolve_uncached(name)
        if match is None:
            logger.warning("No map feature for country %r", name)
        self._memo[name] = match
        return match

    def _resolve_uncached(self, name: str) -> Optional[CountryMatch]:
        if name in self._feature_set:
            return CountryMatch(name, name, MatchMethod.EXACT)

        normalized = normalize_country_name(name)
        feature = self._normalized.get(normalized)
        if feature is not None:
            return CountryMatch(name, feature, MatchMethod.NORMALIZED)

        target = self._aliases.get(name)
        if target is not None:
            if target in self._feature_set:
                return CountryMatch(name, target, MatchMethod.ALIAS)
            feature = self._normalized.get(normalize_country_name(target))
            if feature is not None:
                return CountryMatch(name, feature, MatchMethod.ALIAS)

        feature = self._substring(normalized)
        if feature is not None:
            return CountryMatch(name, feature, MatchMethod.SUBSTRING)
        return None

    def _substring(self, normalized: str) -> Optional[str]:
        if len(normalized) < MIN_SUBSTRING_LENGTH:
            return None
        candidates = [
            feature for norm, feature in self._normalized.items()
            if len(norm) >= MIN_SUBSTRING_LENGTH and (normalized in norm or norm in normalized)
        ]
        if not candidates:
            return None
        # Closest length first, then alphabetical.
        candidates.sort(key=lambda f: (abs(len(normalize_country_name(f)) - len(normalized)), f))
        return candidates[0]
