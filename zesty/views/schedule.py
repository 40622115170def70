from __future__ import annotations

from typing import Callable

from reactpy import component, html

from ..hooks import use_backend, use_live_collection, use_session
from ..schedule import build_schedule_view
from .common import back_button, placeholder

STATUS_PILLS = {"today": "pill-success", "upcoming": "pill-info", "completed": "pill-muted"}


def summary_card(label: str, value: str, detail: str = ""):
    return html.div(
        {"class": "card"},
        html.div({"class": "eyebrow"}, label),
        html.h2(value),
        html.div({"class": "meta"}, detail) if detail else None,
    )


@component
def WorkSchedulePage(on_back: Callable[[], None]):
    backend = use_backend()
    session = use_session()
    user_id = session.get("user_id")
    shifts, _ = use_live_collection(lambda: backend.list_shifts(user_id), "shifts", [user_id])

    if shifts is None:
        return html.div({"class": "page"}, back_button(on_back), placeholder("Loading schedule…"))

    schedule = build_schedule_view(shifts)
    next_shift = schedule["next_shift"]
    rows = [
        html.tr(
            {"key": str(row.get("id")), "class": "today" if row["status"] == "today" else ""},
            html.td(html.strong(row["day_label"]), html.div({"class": "meta"}, row["date_label"])),
            html.td(row["time_label"]),
            html.td(row.get("location") or "-"),
            html.td(row.get("role") or "-"),
            html.td(row["duration_label"]),
            html.td(html.span({"class": f"pill {STATUS_PILLS[row['status']]}"}, row["status"].title())),
        )
        for row in schedule["rows"]
    ]

    return html.div(
        {"class": "page"},
        back_button(on_back),
        html.div(
            {"class": "section-head"},
            html.div(
                html.div({"class": "eyebrow"}, "Shifts"),
                html.h1("My Work Schedule"),
            ),
        ),
        html.div(
            {"class": "grid-3"},
            summary_card("Shifts This Week", str(schedule["shifts_this_week"])),
            summary_card("Hours This Week", f"{schedule['hours_this_week']:g}"),
            summary_card(
                "Next Shift",
                next_shift["start"].strftime("%a %b %d") if next_shift else "None scheduled",
                next_shift["location"] if next_shift else "",
            ),
        ),
        html.div(
            {"class": "card"},
            html.table(
                {"class": "table"},
                html.thead(
                    html.tr(
                        html.th("Day"),
                        html.th("Time"),
                        html.th("Location"),
                        html.th("Role"),
                        html.th("Duration"),
                        html.th("Status"),
                    )
                ),
                html.tbody(rows),
            )
            if rows
            else placeholder("No shifts scheduled."),
        ),
    )
