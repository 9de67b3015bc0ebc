from itertools import permutations

import pytest

from itinerary_gaps.assemble.gap_detector import detect_gaps
from itinerary_gaps.models import GapKind, ItemKind, Severity

from .factories import (
    BARCELONA,
    LONDON,
    PARIS,
    at,
    make_lodging,
    make_point,
    make_record,
    make_transit,
)


def _of_kind(gaps, kind):
    return [g for g in gaps if g.kind == kind]


# ---------------------------------------------------------------------------
# Trivial inputs
# ---------------------------------------------------------------------------

def test_empty_itinerary_returns_empty_list():
    assert detect_gaps([], [], [], []) == []


def test_single_item_returns_empty_list():
    assert detect_gaps([make_record("1", at(10), at(12))]) == []


def test_items_within_two_hours_have_no_gaps():
    records = [
        make_record("1", at(10), at(12)),
        make_record("2", at(13), at(15)),
    ]
    assert detect_gaps(records) == []


def test_back_to_back_items_have_no_gaps():
    records = [
        make_record("1", at(8), at(10), title="Walking tour"),
        make_record("2", at(10), at(12), title="Walking tour"),
    ]
    assert detect_gaps(records) == []


# ---------------------------------------------------------------------------
# Time gaps
# ---------------------------------------------------------------------------

def test_four_hour_gap_is_single_info_time_gap():
    first = make_record("1", at(8), at(10), title="Flight to Paris")
    second = make_record("2", at(14), at(16), title="Louvre visit")

    gaps = detect_gaps([first, second])

    assert len(gaps) == 1
    gap = gaps[0]
    assert gap.kind == GapKind.TIME
    assert gap.duration_minutes == 240
    assert gap.severity == Severity.INFO
    assert gap.id == "time-gap-1-2"
    assert gap.from_record is first
    assert gap.to_record is second
    assert gap.message == '4h 0m gap between "Flight to Paris" and "Louvre visit"'
    assert gap.suggestions == (
        "This may be normal transition time",
        "Verify if additional activities are needed",
    )


@pytest.mark.parametrize(
    "gap_minutes, expected",
    [
        (120, None),
        (121, Severity.INFO),
        (480, Severity.INFO),
        (481, Severity.WARNING),
        (1440, Severity.WARNING),
        (1441, Severity.ERROR),
    ],
)
def test_time_gap_threshold_boundaries(gap_minutes, expected):
    records = [
        make_record("1", at(0), at(1)),
        make_record("2", at(1, gap_minutes), at(2, gap_minutes)),
    ]
    time_gaps = _of_kind(detect_gaps(records), GapKind.TIME)

    if expected is None:
        assert time_gaps == []
    else:
        assert len(time_gaps) == 1
        assert time_gaps[0].severity == expected
        assert time_gaps[0].duration_minutes == gap_minutes


def test_warning_time_gap_suggests_transport_or_downtime():
    records = [make_record("1", at(10), at(12)), make_record("2", at(22), at(23))]
    (gap,) = _of_kind(detect_gaps(records), GapKind.TIME)
    assert gap.duration_minutes == 600
    assert gap.severity == Severity.WARNING
    assert gap.suggestions == (
        "Add transportation details if traveling",
        "Consider if this is intentional downtime",
    )


def test_error_time_gap_suggests_lodging_and_sightseeing():
    records = [make_record("1", at(10), at(12)), make_record("2", at(40), at(41))]
    (gap,) = _of_kind(detect_gaps(records), GapKind.TIME)
    assert gap.severity == Severity.ERROR
    assert gap.suggestions == (
        "Consider adding lodging for this period",
        "Add activities or sightseeing during this time",
    )


def test_short_gap_message_uses_minutes_wording():
    # 150 min between lodging items: only the time rule applies
    records = [
        make_record("1", at(0), at(1), ItemKind.LODGING, title="Hostel"),
        make_record("2", at(3, 30), at(4), ItemKind.LODGING, title="Hotel"),
    ]
    (gap,) = detect_gaps(records)
    assert gap.message.startswith("2h 30m gap")


# ---------------------------------------------------------------------------
# Location mismatches
# ---------------------------------------------------------------------------

def test_paris_arrival_then_london_departure_is_location_warning():
    records = [
        make_record("f1", at(8), at(10), ItemKind.FLIGHT, title="BCN to CDG"),
        make_record("f2", at(10, 30), at(12), ItemKind.FLIGHT, title="LHR to JFK"),
    ]
    flights = [
        make_transit("f1", BARCELONA, PARIS),
        make_transit("f2", LONDON, make_point("New York", "JFK Airport, New York")),
    ]

    gaps = detect_gaps(records, flights, [], [])

    assert len(gaps) == 1
    gap = gaps[0]
    assert gap.kind == GapKind.LOCATION
    assert gap.severity == Severity.WARNING
    assert gap.id == "location-mismatch-f1-f2"
    assert gap.duration_minutes == 30
    assert "Paris" in gap.message and "London" in gap.message
    assert gap.message == (
        'Location mismatch: "BCN to CDG" arrives in Paris but "LHR to JFK" departs from London'
    )
    assert len(gap.suggestions) == 3


def test_matching_transit_locations_have_no_location_gap():
    records = [
        make_record("f1", at(8), at(10), ItemKind.FLIGHT),
        make_record("t1", at(11), at(12), ItemKind.TRANSPORT),
    ]
    gaps = detect_gaps(
        records,
        flights=[make_transit("f1", BARCELONA, PARIS)],
        transports=[make_transit("t1", make_point("paris", "Gare du Nord"), LONDON)],
    )
    assert gaps == []


def test_location_message_falls_back_to_address():
    records = [
        make_record("t1", at(8), at(10), ItemKind.TRANSPORT, title="Ferry"),
        make_record("t2", at(10), at(11), ItemKind.TRANSPORT, title="Bus"),
    ]
    arrival = make_point(None, "Pier 7", 37.80, -122.40)
    departure = make_point(None, "Harbour Road", 36.60, -121.89)
    gaps = detect_gaps(
        records,
        transports=[make_transit("t1", LONDON, arrival), make_transit("t2", departure, LONDON)],
    )
    (gap,) = gaps
    assert "arrives in Pier 7" in gap.message
    assert "departs from Harbour Road" in gap.message


def test_location_check_skipped_without_details():
    records = [
        make_record("f1", at(8), at(10), ItemKind.FLIGHT),
        make_record("f2", at(10, 30), at(12), ItemKind.FLIGHT),
    ]
    # only the first flight has a detail
    assert detect_gaps(records, flights=[make_transit("f1", BARCELONA, PARIS)]) == []


def test_location_check_skipped_when_lodging_involved():
    records = [
        make_record("f1", at(8), at(10), ItemKind.FLIGHT),
        make_record("h1", at(10, 30), at(30), ItemKind.LODGING),
    ]
    gaps = detect_gaps(
        records,
        flights=[make_transit("f1", BARCELONA, PARIS)],
        lodgings=[make_lodging("h1", LONDON)],
    )
    assert gaps == []


def test_details_carried_on_records_drive_location_check():
    records = [
        make_record("f1", at(8), at(10), ItemKind.FLIGHT, detail=make_transit("f1", BARCELONA, PARIS)),
        make_record("f2", at(11), at(12), ItemKind.FLIGHT, detail=make_transit("f2", LONDON, BARCELONA)),
    ]
    gaps = detect_gaps(records)
    assert [g.kind for g in gaps] == [GapKind.LOCATION]


# ---------------------------------------------------------------------------
# Missing lodging
# ---------------------------------------------------------------------------

def test_thirty_hour_gap_without_lodging_is_error_with_two_nights():
    records = [
        make_record("1", at(8), at(10), title="Arrive Lisbon"),
        make_record("2", at(40), at(42), title="Train to Porto"),
    ]
    lodging_gaps = _of_kind(detect_gaps(records), GapKind.MISSING_LODGING)

    assert len(lodging_gaps) == 1
    gap = lodging_gaps[0]
    assert gap.severity == Severity.ERROR
    assert gap.duration_minutes == 1800
    assert gap.id == "missing-lodging-1-2"
    assert "2 nights" in gap.message
    assert gap.message == 'Missing lodging: 2 nights between "Arrive Lisbon" and "Train to Porto"'
    assert gap.suggestions == (
        "Add lodging for this overnight period",
        "Verify your travel dates",
        "Consider if you're staying with friends/family",
    )


def test_single_night_message_is_singular():
    records = [make_record("1", at(8), at(10)), make_record("2", at(20), at(21))]
    (gap,) = _of_kind(detect_gaps(records), GapKind.MISSING_LODGING)
    assert "1 night " in gap.message
    assert "nights" not in gap.message


@pytest.mark.parametrize(
    "gap_minutes, expected",
    [
        (360, None),
        (361, Severity.INFO),
        (720, Severity.INFO),
        (721, Severity.WARNING),
        (1440, Severity.WARNING),
        (1441, Severity.ERROR),
    ],
)
def test_missing_lodging_threshold_boundaries(gap_minutes, expected):
    records = [
        make_record("1", at(0), at(1)),
        make_record("2", at(1, gap_minutes), at(2, gap_minutes)),
    ]
    lodging_gaps = _of_kind(detect_gaps(records), GapKind.MISSING_LODGING)

    if expected is None:
        assert lodging_gaps == []
    else:
        assert len(lodging_gaps) == 1
        assert lodging_gaps[0].severity == expected


def test_covering_lodging_suppresses_missing_lodging_gap():
    records = [
        make_record("h1", at(8), at(40), ItemKind.LODGING, title="Hotel"),
        make_record("t1", at(9), at(10), title="Museum"),
        make_record("t2", at(30), at(31), title="Day trip"),
    ]
    gaps = detect_gaps(records)

    assert _of_kind(gaps, GapKind.MISSING_LODGING) == []
    # the time gap is still reported
    assert [g.id for g in _of_kind(gaps, GapKind.TIME)] == ["time-gap-t1-t2"]


def test_lodging_ending_before_next_item_does_not_cover():
    records = [
        make_record("h1", at(8), at(25), ItemKind.LODGING),
        make_record("t1", at(9), at(10)),
        make_record("t2", at(30), at(31)),
    ]
    lodging_gaps = _of_kind(detect_gaps(records), GapKind.MISSING_LODGING)
    assert [g.id for g in lodging_gaps] == ["missing-lodging-t1-t2"]


def test_pairs_involving_lodging_are_not_checked_for_missing_lodging():
    records = [
        make_record("t1", at(0), at(1)),
        make_record("h1", at(20), at(30), ItemKind.LODGING),
    ]
    assert _of_kind(detect_gaps(records), GapKind.MISSING_LODGING) == []


# ---------------------------------------------------------------------------
# Ordering and purity
# ---------------------------------------------------------------------------

def _mixed_itinerary():
    records = [
        make_record("f1", at(0), at(1), ItemKind.FLIGHT),
        make_record("f2", at(4), at(5), ItemKind.FLIGHT),
        make_record("f3", at(12), at(13), ItemKind.FLIGHT),
    ]
    flights = [
        make_transit("f1", BARCELONA, PARIS),
        make_transit("f2", LONDON, LONDON),
        make_transit("f3", PARIS, BARCELONA),
    ]
    return records, flights


def test_emission_order_pairs_first_then_missing_lodging():
    records, flights = _mixed_itinerary()
    gaps = detect_gaps(records, flights)

    assert [g.id for g in gaps] == [
        "time-gap-f1-f2",
        "location-mismatch-f1-f2",
        "time-gap-f2-f3",
        "location-mismatch-f2-f3",
        "missing-lodging-f2-f3",
    ]


def test_detection_is_idempotent():
    records, flights = _mixed_itinerary()
    assert detect_gaps(records, flights) == detect_gaps(records, flights)


def test_input_order_does_not_change_result():
    records, flights = _mixed_itinerary()
    expected = detect_gaps(records, flights)
    for perm in permutations(records):
        assert detect_gaps(list(perm), flights) == expected


def test_input_sequence_is_not_mutated():
    records, flights = _mixed_itinerary()
    shuffled = [records[2], records[0], records[1]]
    snapshot = list(shuffled)

    detect_gaps(shuffled, flights)

    assert shuffled == snapshot


def test_equal_start_times_keep_input_order():
    a = make_record("a", at(8), at(9))
    b = make_record("b", at(8), at(12))
    c = make_record("c", at(15), at(16))

    assert [g.id for g in detect_gaps([a, b, c])] == ["time-gap-b-c"]
    assert [g.id for g in detect_gaps([b, a, c])] == ["time-gap-a-c"]
