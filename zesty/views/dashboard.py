from __future__ import annotations

from typing import Any, Callable, Dict

from reactpy import component, html

from .. import config
from ..hooks import use_backend, use_live_collection
from ..incidents import TERMINAL_STATUS, active_feed, site_statuses, time_ago
from .common import category_badge, incident_image, placeholder, priority_badge

PIN_LABELS = {"issue": "Requires Attention", "good": "No Issues"}


@component
def FacilityMap():
    backend = use_backend()
    incidents, _ = use_live_collection(lambda: backend.list_incidents(), "incidents", [])
    pins = site_statuses(incidents or [])

    return html.div(
        {"class": "card"},
        html.div(
            {"class": "section-head"},
            html.h2("Facility Map"),
            html.div(
                {"class": "legend"},
                html.span(html.i({"style": {"background": "var(--good)"}}), PIN_LABELS["good"]),
                html.span(html.i({"style": {"background": "var(--danger)"}}), PIN_LABELS["issue"]),
            ),
        ),
        html.div(
            {"class": "map"},
            [
                html.div(
                    {
                        "key": pin["name"],
                        "class": f"pin {pin['status']}",
                        "title": f"{pin['name']}: {PIN_LABELS[pin['status']]}",
                        "data-status": pin["status"],
                        "style": {"left": f"{pin['x']}%", "top": f"{pin['y']}%"},
                    },
                    html.span({"class": "pin-label"}, pin["name"], html.br(), PIN_LABELS[pin["status"]]),
                )
                for pin in pins
            ],
        ),
    )


def incident_row(incident: Dict[str, Any], on_select: Callable[[Dict[str, Any]], None]):
    return html.div(
        {"key": str(incident.get("id")), "class": "incident-row", "on_click": lambda e: on_select(incident)},
        incident_image(incident, "thumb"),
        html.div(
            html.div(
                {"class": "row-head"},
                html.strong(incident.get("location") or "Unknown location"),
                priority_badge(incident, " Priority"),
            ),
            html.div({"class": "clamp"}, incident.get("description") or ""),
            html.div(
                {"class": "row-meta"},
                category_badge(incident),
                html.span({"class": "meta"}, time_ago(incident.get("created_at"))),
            ),
        ),
    )


@component
def IncidentFeed(on_incident_click: Callable[[Dict[str, Any]], None], on_view_all: Callable[[], None]):
    backend = use_backend()
    incidents, _ = use_live_collection(
        lambda: active_feed(
            backend.list_incidents(exclude_status=TERMINAL_STATUS, limit=config.FEED_LIMIT), config.FEED_LIMIT
        ),
        "incidents",
        [],
    )

    if incidents is None:
        body = placeholder("Loading incidents…")
    elif not incidents:
        body = placeholder("No active incidents. Everything is running smoothly.")
    else:
        body = html.div({"class": "list"}, [incident_row(incident, on_incident_click) for incident in incidents])

    return html.div(
        {"class": "card"},
        html.div(
            {"class": "section-head"},
            html.h2("Recent Incidents"),
            html.button({"class": "btn ghost", "on_click": lambda e: on_view_all()}, "View All"),
        ),
        body,
    )


@component
def MainDashboard(
    on_report_new_issue: Callable[[], None],
    on_incident_click: Callable[[Dict[str, Any]], None],
    on_view_all_incidents: Callable[[], None],
):
    return html.div(
        {"class": "page"},
        html.div(
            {"class": "section-head"},
            html.div(
                html.div({"class": "eyebrow"}, "Operations Overview"),
                html.h1("Dashboard"),
            ),
            html.button({"class": "btn primary", "on_click": lambda e: on_report_new_issue()}, "+ Report New Issue"),
        ),
        html.div(
            {"class": "grid-2"},
            FacilityMap(),
            IncidentFeed(on_incident_click, on_view_all_incidents),
        ),
    )
