from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from .incidents import parse_timestamp


def shift_hours(shift: Dict[str, Any]) -> float:
    start = parse_timestamp(shift.get("starts_at"))
    end = parse_timestamp(shift.get("ends_at"))
    if start is None or end is None or end <= start:
        return 0.0
    return (end - start).total_seconds() / 3600


def shift_status(shift: Dict[str, Any], now: datetime) -> str:
    start = parse_timestamp(shift.get("starts_at"))
    end = parse_timestamp(shift.get("ends_at")) or start
    if start is None:
        return "upcoming"
    if start.date() == now.date():
        return "today"
    if end is not None and end < now:
        return "completed"
    return "upcoming"


def duration_label(shift: Dict[str, Any]) -> str:
    hours = shift_hours(shift)
    if hours <= 0:
        return "Day Off"
    if hours == int(hours):
        return f"{int(hours)} hour{'s' if hours != 1 else ''}"
    return f"{hours:.1f} hours"


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    start = (now - timedelta(days=now.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=7)


def build_schedule_view(shifts: List[Dict[str, Any]], now: datetime | None = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    week_start, week_end = week_bounds(now)
    rows = []
    hours_this_week = 0.0
    shifts_this_week = 0
    next_shift = None
    for shift in shifts:
        start = parse_timestamp(shift.get("starts_at"))
        end = parse_timestamp(shift.get("ends_at"))
        status = shift_status(shift, now)
        if start is not None and week_start <= start < week_end:
            shifts_this_week += 1
            hours_this_week += shift_hours(shift)
        if start is not None and start >= now and (next_shift is None or start < next_shift["start"]):
            next_shift = {"start": start, "location": shift.get("location") or ""}
        rows.append(
            {
                **shift,
                "status": status,
                "date_label": start.strftime("%b %d") if start else "",
                "day_label": "Today" if status == "today" else (start.strftime("%a") if start else ""),
                "time_label": f"{start:%I:%M %p} - {end:%I:%M %p}" if start and end else "OFF",
                "duration_label": duration_label(shift),
            }
        )
    return {
        "rows": rows,
        "shifts_this_week": shifts_this_week,
        "hours_this_week": round(hours_this_week, 1),
        "next_shift": next_shift,
    }
