"""
Event Loading
=============

Row -> ConflictEvent coercion and the file sources that feed it.

Data-shape problems never raise: unparseable numbers become 0, missing
text becomes "", missing coordinates become None. Only a row with no
usable year is rejected (MALFORMED_ROW), because windowing needs it.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Tuple, Union
import csv
import json
import logging
import os

from ..contracts.base import Error, ErrorCode, Result
from ..contracts.events import ConflictEvent, ViolenceType


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# COERCION
# =============================================================================

def _to_int(raw: Any, default: int = 0) -> int:
    if raw is None:
        return default
    try:
        return int(float(str(raw).strip()))
    except (ValueError, OverflowError):
        return default


def _to_float(raw: Any) -> Optional[float]:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return float(str(raw).strip())
    except ValueError:
        return None


def _text(row: Mapping[str, Any], *keys: str) -> str:
    """First non-empty value among `keys`."""
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _month(row: Mapping[str, Any]) -> Optional[int]:
    month = _to_int(row.get("month"), 0)
    if 1 <= month <= 12:
        return month
    # date_start is YYYY-MM-DD[...]
    date_start = _text(row, "date_start")
    if len(date_start) >= 7:
        month = _to_int(date_start[5:7], 0)
        if 1 <= month <= 12:
            return month
    return None


def _coordinates(row: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    lon = _to_float(row.get("longitude"))
    lat = _to_float(row.get("latitude"))
    if lon is None or lat is None:
        return None
    return lon, lat


def event_from_row(row: Mapping[str, Any], fallback_id: str = "") -> Result:
    """
    Coerce one source row into a ConflictEvent.

    Column names follow the conflict dataset export: year,
    type_of_violence (1/2/3), side_a, side_b, best, deaths_a, deaths_b,
    deaths_civilians, deaths_unknown, latitude, longitude, ...
    """
    year = _to_int(row.get("year"), -1)
    if year < 0:
        return Result.failure(Error.of(
            ErrorCode.MALFORMED_ROW, "Row has no usable year", row_id=_text(row, "id") or fallback_id
        ))

    event = ConflictEvent(
        event_id=_text(row, "id") or fallback_id,
        year=year,
        month=_month(row),
        country=_text(row, "country"),
        region=_text(row, "region"),
        side_a=_text(row, "side_a"),
        side_b=_text(row, "side_b"),
        best=max(_to_int(row.get("best")), 0),
        deaths_side_a=max(_to_int(row.get("deaths_a")), 0),
        deaths_side_b=max(_to_int(row.get("deaths_b")), 0),
        deaths_civilians=max(_to_int(row.get("deaths_civilians")), 0),
        deaths_unknown=max(_to_int(row.get("deaths_unknown")), 0),
        violence_type=ViolenceType.from_code(row.get("type_of_violence")),
        coordinates=_coordinates(row),
        conflict_name=_text(row, "conflict_name"),
        dyad_name=_text(row, "dyad_name"),
        date_start=_text(row, "date_start"),
        date_end=_text(row, "date_end"),
        where_description=_text(row, "where_prec_description", "where_description"),
        source_headline=_text(row, "source_headline"),
    )
    return Result.success(event)


# =============================================================================
# SOURCES (Strategy pattern per file format)
# =============================================================================

class EventSource(ABC):
    """
    Reads raw rows from one kind of file.

    Sources yield mappings only; coercion is event_from_row's job.
    """

    @property
    @abstractmethod
    def source_type(self) -> str:
        pass

    @abstractmethod
    def rows(self, path: Path) -> Iterator[Mapping[str, Any]]:
        pass

    def validate_source(self, path: Path) -> Result:
        if not os.path.exists(path):
            return Result.failure(Error.of(ErrorCode.EMPTY_DATASET, "File not found", path=str(path)))
        if not os.path.isfile(path):
            return Result.failure(Error.of(ErrorCode.EMPTY_DATASET, "Path is not a file", path=str(path)))
        return Result.success(True)


class CsvEventSource(EventSource):

    @property
    def source_type(self) -> str:
        return "csv_file"

    def rows(self, path: Path) -> Iterator[Mapping[str, Any]]:
        with open(path, "r", encoding="utf-8", newline="") as f:
            for row in csv.DictReader(f):
                yield row


class JsonEventSource(EventSource):
    """A JSON array of row objects (or a single object)."""

    @property
    def source_type(self) -> str:
        return "json_file"

    def rows(self, path: Path) -> Iterator[Mapping[str, Any]]:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            data = [data]
        for item in data:
            if isinstance(item, dict):
                yield item


_SOURCES = {
    ".csv": CsvEventSource,
    ".json": JsonEventSource,
}


def source_for(path: PathLike) -> EventSource:
    suffix = Path(path).suffix.lower()
    return _SOURCES.get(suffix, CsvEventSource)()


def load_events(path: PathLike, source: Optional[EventSource] = None) -> Result:
    """
    Load every coercible row of a file.

    Returns Result(List[ConflictEvent]); malformed rows are skipped and
    counted in a warning, a missing file is a failure.
    """
    path = Path(path)
    source = source or source_for(path)
    validation = source.validate_source(path)
    if validation.is_failure:
        logger.error("Cannot load events: %s (%s)", validation.error.message, path)
        return validation

    events: List[ConflictEvent] = []
    skipped = 0
    for index, row in enumerate(source.rows(path)):
        result = event_from_row(row, fallback_id=str(index))
        if result.is_failure:
            skipped += 1
            continue
        events.append(result.value)

    if skipped:
        logger.warning("Skipped %d malformed rows in %s", skipped, path)
    logger.info("Loaded %d events from %s (%s)", len(events), path, source.source_type)
    return Result.success(events)
