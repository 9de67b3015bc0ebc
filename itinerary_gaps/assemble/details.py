"""Resolve each record's gap-relevant locations from its detail payload."""

from typing import Dict, Iterable, List, Optional, TypeVar

from itinerary_gaps.models import (
    ItemKind,
    ItineraryRecord,
    LodgingDetail,
    ResolvedLocations,
    TransitDetail,
)

_D = TypeVar("_D", TransitDetail, LodgingDetail)


def _index_by_record(details: Optional[Iterable[_D]]) -> Dict[str, _D]:
    """First detail per record id wins."""
    index: Dict[str, _D] = {}
    for d in details or ():
        index.setdefault(d.record_id, d)
    return index


def _from_transit(detail) -> ResolvedLocations:
    if isinstance(detail, TransitDetail):
        return ResolvedLocations(
            departure_location=detail.departure_location,
            arrival_location=detail.arrival_location,
        )
    return ResolvedLocations()


def _from_lodging(detail) -> ResolvedLocations:
    if isinstance(detail, LodgingDetail):
        return ResolvedLocations(location=detail.location)
    return ResolvedLocations()


def resolve_details(
    records: List[ItineraryRecord],
    flights: Optional[Iterable[TransitDetail]] = None,
    transports: Optional[Iterable[TransitDetail]] = None,
    lodgings: Optional[Iterable[LodgingDetail]] = None,
) -> Dict[str, ResolvedLocations]:
    """Map every record id to the locations gap detection needs.

    A matching entry in the kind's detail collection takes precedence over a
    detail carried on the record itself. Records with neither get an empty
    ResolvedLocations, which simply disables location checks for them.
    """
    by_kind = {
        ItemKind.FLIGHT: _index_by_record(flights),
        ItemKind.TRANSPORT: _index_by_record(transports),
        ItemKind.LODGING: _index_by_record(lodgings),
    }

    resolved: Dict[str, ResolvedLocations] = {}
    for record in records:
        detail = by_kind[record.kind].get(record.id) or record.detail
        if record.kind == ItemKind.LODGING:
            resolved[record.id] = _from_lodging(detail)
        else:
            resolved[record.id] = _from_transit(detail)
    return resolved
