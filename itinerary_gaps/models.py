"""Data models for itinerary gap analysis."""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union


class ItemKind(str, Enum):
    FLIGHT = "flight"
    TRANSPORT = "transport"
    LODGING = "lodging"


TRANSIT_KINDS = frozenset({ItemKind.FLIGHT, ItemKind.TRANSPORT})


class GapKind(str, Enum):
    TIME = "time"
    LOCATION = "location"
    MISSING_LODGING = "missing_lodging"


class Severity(str, Enum):
    """How urgently a gap should be addressed. Ordered INFO < WARNING < ERROR."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    # compare by rank, not by string value; plain strings are coerced
    def _other_rank(self, other):
        if isinstance(other, str):
            return Severity(other).rank  # unknown names raise ValueError
        return None

    def __lt__(self, other):
        rank = self._other_rank(other)
        return NotImplemented if rank is None else self.rank < rank

    def __le__(self, other):
        rank = self._other_rank(other)
        return NotImplemented if rank is None else self.rank <= rank

    def __gt__(self, other):
        rank = self._other_rank(other)
        return NotImplemented if rank is None else self.rank > rank

    def __ge__(self, other):
        rank = self._other_rank(other)
        return NotImplemented if rank is None else self.rank >= rank


_SEVERITY_RANK = {"info": 0, "warning": 1, "error": 2}


@dataclass(frozen=True)
class GeoPoint:
    address: str
    formatted_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    city: Optional[str] = None
    country: Optional[str] = None
    place_id: Optional[str] = None  # geocoder reference, informational only


@dataclass(frozen=True)
class TransitDetail:
    """Departure/arrival pair attached to a flight or transport record."""
    record_id: str
    departure_location: GeoPoint
    arrival_location: GeoPoint


@dataclass(frozen=True)
class LodgingDetail:
    record_id: str
    location: GeoPoint  # covers the entire stay


Detail = Union[TransitDetail, LodgingDetail]


@dataclass(frozen=True)
class ItineraryRecord:
    id: str
    trip_id: str
    kind: ItemKind
    title: str
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None
    sequence_index: int = 0  # display order only; analysis sorts by start_time
    detail: Optional[Detail] = None


@dataclass(frozen=True)
class ResolvedLocations:
    """The locations of one record that matter for gap analysis."""
    departure_location: Optional[GeoPoint] = None
    arrival_location: Optional[GeoPoint] = None
    location: Optional[GeoPoint] = None


@dataclass(frozen=True)
class Gap:
    id: str
    kind: GapKind
    from_record: ItineraryRecord
    to_record: ItineraryRecord
    duration_minutes: int
    severity: Severity
    message: str
    suggestions: Tuple[str, ...] = ()
