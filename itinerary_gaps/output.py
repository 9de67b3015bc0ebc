"""Output formatters for gap reports: JSON and a human-readable summary."""

import json
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from itinerary_gaps.models import Gap, ItineraryRecord, Severity

_SEVERITY_MARKS = {
    Severity.INFO: "·",
    Severity.WARNING: "⚠",
    Severity.ERROR: "✖",
}


def _ts_str(dt: Optional[datetime]) -> str:
    if dt is None:
        return "?"
    return dt.isoformat()


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------

def _record_to_dict(r: ItineraryRecord) -> dict:
    return {
        "id": r.id,
        "trip_id": r.trip_id,
        "kind": r.kind.value,
        "title": r.title,
        "start_time": _ts_str(r.start_time),
        "end_time": _ts_str(r.end_time),
    }


def gap_to_dict(g: Gap) -> dict:
    return {
        "id": g.id,
        "kind": g.kind.value,
        "severity": g.severity.value,
        "from_record": _record_to_dict(g.from_record),
        "to_record": _record_to_dict(g.to_record),
        "duration_minutes": g.duration_minutes,
        "message": g.message,
        "suggestions": list(g.suggestions),
    }


def _summary(gaps: List[Gap]) -> dict:
    by_severity = Counter(g.severity.value for g in gaps)
    by_kind = Counter(g.kind.value for g in gaps)
    return {
        "total_gaps": len(gaps),
        "by_severity": {s.value: by_severity.get(s.value, 0) for s in Severity},
        "by_kind": dict(sorted(by_kind.items())),
    }


def to_json(gaps: List[Gap], path: Optional[Path] = None) -> str:
    """Serialize a gap report; also write it to ``path`` when given."""
    data = {
        "gaps": [gap_to_dict(g) for g in gaps],
        "summary": _summary(gaps),
    }
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return text


# ---------------------------------------------------------------------------
# Human-readable report
# ---------------------------------------------------------------------------

def format_report(gaps: List[Gap]) -> str:
    """Produce a line-by-line report of detected gaps, in detection order."""
    lines = []
    lines.append("=" * 72)
    lines.append("  ITINERARY CHECK — Gaps & Inconsistencies")
    lines.append("=" * 72)

    if not gaps:
        lines.append("\n  No gaps detected.")

    for g in gaps:
        mark = _SEVERITY_MARKS[g.severity]
        lines.append(f"\n  {mark} [{g.severity.value.upper()}] {g.message}")
        lines.append(
            f"    {_ts_str(g.from_record.end_time)}  →  {_ts_str(g.to_record.start_time)}"
            f"  ({g.duration_minutes} min)"
        )
        for s in g.suggestions:
            lines.append(f"    - {s}")

    counts = _summary(gaps)["by_severity"]
    lines.append(f"\n{'=' * 72}")
    lines.append(
        f"  Total: {len(gaps)} gaps "
        f"({counts['error']} errors, {counts['warning']} warnings, {counts['info']} info)"
    )
    lines.append("=" * 72)

    return "\n".join(lines)
