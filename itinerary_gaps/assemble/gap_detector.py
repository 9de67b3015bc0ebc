"""Detect time gaps, location mismatches and missing lodging in an itinerary."""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from itinerary_gaps.config import (
    GAP_ERROR_MINUTES,
    LODGING_GAP_THRESHOLD_MINUTES,
    TIME_GAP_THRESHOLD_MINUTES,
    TIME_GAP_WARNING_MINUTES,
)
from itinerary_gaps.models import (
    TRANSIT_KINDS,
    Gap,
    GapKind,
    ItemKind,
    ItineraryRecord,
    LodgingDetail,
    ResolvedLocations,
    Severity,
    TransitDetail,
)
from itinerary_gaps.assemble.details import resolve_details
from itinerary_gaps.assemble.durations import (
    classify_missing_lodging_severity,
    classify_time_gap_severity,
    format_duration_words,
    minutes_between,
    nights_spanned,
)
from itinerary_gaps.normalize.geo import are_same_place, place_label

logger = logging.getLogger(__name__)

_LOCATION_SUGGESTIONS = (
    "Add transportation between these locations",
    "Verify the locations are correct",
    "Update arrival or departure location to match",
)

_LODGING_SUGGESTIONS = (
    "Add lodging for this overnight period",
    "Verify your travel dates",
    "Consider if you're staying with friends/family",
)


def _time_gap_suggestions(minutes: int) -> Tuple[str, ...]:
    if minutes > GAP_ERROR_MINUTES:
        return (
            "Consider adding lodging for this period",
            "Add activities or sightseeing during this time",
        )
    if minutes > TIME_GAP_WARNING_MINUTES:
        return (
            "Add transportation details if traveling",
            "Consider if this is intentional downtime",
        )
    return (
        "This may be normal transition time",
        "Verify if additional activities are needed",
    )


def _time_gap(current: ItineraryRecord, nxt: ItineraryRecord) -> Optional[Gap]:
    gap_minutes = minutes_between(current.end_time, nxt.start_time)
    if gap_minutes <= TIME_GAP_THRESHOLD_MINUTES:
        return None

    return Gap(
        id=f"time-gap-{current.id}-{nxt.id}",
        kind=GapKind.TIME,
        from_record=current,
        to_record=nxt,
        duration_minutes=gap_minutes,
        severity=classify_time_gap_severity(gap_minutes),
        message=(
            f'{format_duration_words(gap_minutes)} gap between '
            f'"{current.title}" and "{nxt.title}"'
        ),
        suggestions=_time_gap_suggestions(gap_minutes),
    )


def _location_gap(
    current: ItineraryRecord,
    nxt: ItineraryRecord,
    current_locs: ResolvedLocations,
    next_locs: ResolvedLocations,
) -> Optional[Gap]:
    """Arrival of one transit leg must match the departure of the next."""
    if current.kind not in TRANSIT_KINDS or nxt.kind not in TRANSIT_KINDS:
        return None
    arrival = current_locs.arrival_location
    departure = next_locs.departure_location
    if arrival is None or departure is None:
        return None
    if are_same_place(arrival, departure):
        return None

    return Gap(
        id=f"location-mismatch-{current.id}-{nxt.id}",
        kind=GapKind.LOCATION,
        from_record=current,
        to_record=nxt,
        duration_minutes=minutes_between(current.end_time, nxt.start_time),
        severity=Severity.WARNING,
        message=(
            f'Location mismatch: "{current.title}" arrives in {place_label(arrival)} '
            f'but "{nxt.title}" departs from {place_label(departure)}'
        ),
        suggestions=_LOCATION_SUGGESTIONS,
    )


def _transit_gaps(
    ordered: List[ItineraryRecord],
    locations: Dict[str, ResolvedLocations],
) -> Tuple[Gap, ...]:
    gaps: List[Gap] = []
    for current, nxt in zip(ordered, ordered[1:]):
        time_gap = _time_gap(current, nxt)
        if time_gap:
            gaps.append(time_gap)

        location_gap = _location_gap(
            current, nxt, locations[current.id], locations[nxt.id]
        )
        if location_gap:
            gaps.append(location_gap)
    return tuple(gaps)


def _lodging_gaps(ordered: List[ItineraryRecord]) -> Tuple[Gap, ...]:
    """Overnight stretches between non-lodging records with no stay covering them."""
    stays = [r for r in ordered if r.kind == ItemKind.LODGING]
    gaps: List[Gap] = []

    for current, nxt in zip(ordered, ordered[1:]):
        if current.kind == ItemKind.LODGING or nxt.kind == ItemKind.LODGING:
            continue

        gap_minutes = minutes_between(current.end_time, nxt.start_time)
        if gap_minutes <= LODGING_GAP_THRESHOLD_MINUTES:
            continue

        covered = any(
            stay.start_time <= current.end_time and stay.end_time >= nxt.start_time
            for stay in stays
        )
        if covered:
            continue

        nights = nights_spanned(gap_minutes)
        gaps.append(Gap(
            id=f"missing-lodging-{current.id}-{nxt.id}",
            kind=GapKind.MISSING_LODGING,
            from_record=current,
            to_record=nxt,
            duration_minutes=gap_minutes,
            severity=classify_missing_lodging_severity(gap_minutes),
            message=(
                f'Missing lodging: {nights} night{"s" if nights > 1 else ""} '
                f'between "{current.title}" and "{nxt.title}"'
            ),
            suggestions=_LODGING_SUGGESTIONS,
        ))

    return tuple(gaps)


def detect_gaps(
    records: List[ItineraryRecord],
    flights: Optional[Iterable[TransitDetail]] = None,
    transports: Optional[Iterable[TransitDetail]] = None,
    lodgings: Optional[Iterable[LodgingDetail]] = None,
) -> List[Gap]:
    """Detect gaps between chronologically adjacent itinerary records.

    Returns time and location gaps in adjacent-pair order, followed by all
    missing-lodging gaps. Fewer than two records yields an empty list.
    The caller's sequences are never modified.
    """
    if not records or len(records) < 2:
        return []

    # sorted() is stable: records starting together keep their input order
    ordered = sorted(records, key=lambda r: r.start_time)
    locations = resolve_details(ordered, flights, transports, lodgings)

    gaps = _transit_gaps(ordered, locations) + _lodging_gaps(ordered)

    logger.debug("Detected %d gaps across %d records", len(gaps), len(ordered))
    return list(gaps)
