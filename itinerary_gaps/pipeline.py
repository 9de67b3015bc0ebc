"""Normalize serialized itinerary items and run gap detection over them.

This is the glue a presentation layer (an HTTP handler, a job) calls when it
holds items as plain mappings, e.g. rows with their flight / transport /
accommodation relation already loaded:

    {"id": "a1", "tripId": "t1", "type": "flight", "title": "BCN → CDG",
     "startDate": "2024-06-01T10:00:00Z", "endDate": "2024-06-01T12:00:00Z",
     "flight": {"departureLocation": {...}, "arrivalLocation": {...}}}
"""

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from itinerary_gaps.models import (
    Gap,
    GeoPoint,
    ItemKind,
    ItineraryRecord,
    LodgingDetail,
    TransitDetail,
)
from itinerary_gaps.normalize.date_parser import parse_timestamp
from itinerary_gaps.assemble.gap_detector import detect_gaps

logger = logging.getLogger(__name__)

# Raw "type" values → kind. Storage calls lodging "accommodation".
_KIND_ALIASES = {
    "flight": ItemKind.FLIGHT,
    "transport": ItemKind.TRANSPORT,
    "lodging": ItemKind.LODGING,
    "accommodation": ItemKind.LODGING,
}

# Relation key(s) holding the detail payload for each kind
_RELATION_KEYS = {
    ItemKind.FLIGHT: ("flight",),
    ItemKind.TRANSPORT: ("transport",),
    ItemKind.LODGING: ("accommodation", "lodging"),
}


def _pick(raw: Mapping[str, Any], *keys: str, default=None):
    """First present, non-None value among camelCase/snake_case spellings."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _normalize_location(raw) -> Optional[GeoPoint]:
    """Build a GeoPoint from a mapping or its JSON text form."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return None
    if not isinstance(raw, Mapping):
        return None

    address = _pick(raw, "address")
    if not address:
        return None

    return GeoPoint(
        address=str(address),
        formatted_address=_pick(raw, "formattedAddress", "formatted_address"),
        latitude=_to_float(_pick(raw, "latitude", "lat")),
        longitude=_to_float(_pick(raw, "longitude", "lng", "lon")),
        city=_pick(raw, "city") or None,
        country=_pick(raw, "country") or None,
        place_id=_pick(raw, "placeId", "place_id"),
    )


def _normalize_detail(kind: ItemKind, record_id: str, raw: Mapping[str, Any]):
    relation = None
    for key in _RELATION_KEYS[kind]:
        if isinstance(raw.get(key), Mapping):
            relation = raw[key]
            break
    if relation is None:
        return None

    if kind == ItemKind.LODGING:
        location = _normalize_location(_pick(relation, "location", "locationJson"))
        if location is None:
            return None
        return LodgingDetail(record_id=record_id, location=location)

    departure = _normalize_location(
        _pick(relation, "departureLocation", "departure_location", "departureLocationJson")
    )
    arrival = _normalize_location(
        _pick(relation, "arrivalLocation", "arrival_location", "arrivalLocationJson")
    )
    if departure is None or arrival is None:
        return None
    return TransitDetail(record_id=record_id, departure_location=departure, arrival_location=arrival)


def normalize_item(raw: Mapping[str, Any]) -> Optional[ItineraryRecord]:
    """Convert one serialized item into an ItineraryRecord, or None if unusable."""
    if not isinstance(raw, Mapping):
        return None

    record_id = _pick(raw, "id")
    kind = _KIND_ALIASES.get(str(_pick(raw, "type", "kind", default="")).lower())
    if record_id is None or kind is None:
        return None

    start_time = parse_timestamp(_pick(raw, "startDate", "start_time", "startTime"))
    end_time = parse_timestamp(_pick(raw, "endDate", "end_time", "endTime"))
    if start_time is None or end_time is None:
        return None

    record_id = str(record_id)
    return ItineraryRecord(
        id=record_id,
        trip_id=str(_pick(raw, "tripId", "trip_id", default="")),
        kind=kind,
        title=str(_pick(raw, "title", default="")),
        start_time=start_time,
        end_time=end_time,
        notes=_pick(raw, "notes"),
        sequence_index=_to_int(_pick(raw, "orderIndex", "sequence_index")),
        detail=_normalize_detail(kind, record_id, raw),
    )


def split_details(
    records: Iterable[ItineraryRecord],
) -> Tuple[List[TransitDetail], List[TransitDetail], List[LodgingDetail]]:
    """Group attached detail payloads into (flights, transports, lodgings)."""
    flights: List[TransitDetail] = []
    transports: List[TransitDetail] = []
    lodgings: List[LodgingDetail] = []
    for r in records:
        if r.detail is None:
            continue
        if r.kind == ItemKind.FLIGHT:
            flights.append(r.detail)
        elif r.kind == ItemKind.TRANSPORT:
            transports.append(r.detail)
        elif r.kind == ItemKind.LODGING:
            lodgings.append(r.detail)
    return flights, transports, lodgings


def analyze_itinerary(items: Optional[Iterable[Mapping[str, Any]]]) -> List[Gap]:
    """Normalize raw items and detect gaps. No items is a valid, empty result."""
    if not items:
        return []

    records: List[ItineraryRecord] = []
    skipped: List[str] = []
    for raw in items:
        record = normalize_item(raw)
        if record is None:
            skipped.append(str(raw.get("id", "?")) if isinstance(raw, Mapping) else "?")
            continue
        records.append(record)

    if skipped:
        logger.warning(
            "Skipped %d unusable itinerary item(s) (not a mapping, unknown type or bad dates): %s",
            len(skipped),
            ", ".join(skipped),
        )

    flights, transports, lodgings = split_details(records)
    gaps = detect_gaps(records, flights, transports, lodgings)
    logger.info("Analyzed %d itinerary items: %d gaps", len(records), len(gaps))
    return gaps
