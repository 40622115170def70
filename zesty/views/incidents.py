from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List

from reactpy import component, hooks, html

from .. import config
from ..errors import BackendError
from ..hooks import use_backend, use_live_collection, use_toast
from ..incidents import is_resolved, resolve_incident, status_class, time_ago
from .common import back_button, category_badge, incident_image, placeholder, priority_badge

logger = logging.getLogger(__name__)


def status_pill(incident: Dict[str, Any]):
    status = incident.get("status") or "Unknown"
    return html.span({"class": f"pill {status_class(status)}"}, status)


def incident_card(incident: Dict[str, Any], on_select: Callable[[Dict[str, Any]], None]):
    resolved = is_resolved(incident)
    return html.div(
        {
            "key": str(incident.get("id")),
            "class": "incident-card resolved" if resolved else "incident-card",
            "data-resolved": "true" if resolved else "false",
            "on_click": lambda e: on_select(incident),
        },
        html.div({"class": "cover"}, incident_image(incident, "thumb"), status_pill(incident)),
        html.div(
            {"class": "body"},
            html.div(
                {"class": "row-head"},
                html.strong(incident.get("location") or "Unknown location"),
                priority_badge(incident),
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
def AllIncidentsPage(on_back: Callable[[], None], on_incident_click: Callable[[Dict[str, Any]], None]):
    backend = use_backend()
    incidents, _ = use_live_collection(lambda: backend.list_incidents(), "incidents", [])

    if incidents is None:
        body = placeholder("Loading incidents…")
    elif not incidents:
        body = placeholder("No incidents have been reported yet.")
    else:
        body = html.div({"class": "grid-3"}, [incident_card(incident, on_incident_click) for incident in incidents])

    open_count = sum(1 for incident in incidents or [] if not is_resolved(incident))
    return html.div(
        {"class": "page"},
        back_button(on_back),
        html.div(
            {"class": "section-head"},
            html.div(
                html.div({"class": "eyebrow"}, "Incident History"),
                html.h1("All Incidents"),
            ),
            html.span({"class": "meta"}, f"{open_count} open • {len(incidents or [])} total"),
        ),
        body,
    )


@component
def IncidentDetailPage(incident: Dict[str, Any], on_back: Callable[[], None]):
    backend = use_backend()
    notify = use_toast()
    incident_id = incident.get("id")

    def fetch_current() -> List[Dict[str, Any]]:
        row = backend.get_incident(incident_id)
        return [row] if row else []

    fetched, _ = use_live_collection(fetch_current, "incidents", [incident_id])
    resolved, set_resolved = hooks.use_state(None)
    is_resolving, set_is_resolving = hooks.use_state(False)
    current = resolved or (fetched[0] if fetched else incident)

    @hooks.use_effect(dependencies=[resolved is not None])
    def return_after_resolve():
        if resolved is None:
            return None

        async def wait_then_return() -> None:
            await asyncio.sleep(config.RESOLVE_RETURN_DELAY_SECONDS)
            on_back()

        task = asyncio.ensure_future(wait_then_return())
        return task.cancel

    async def handle_resolve(event_data: Dict[str, Any]) -> None:
        if is_resolving or is_resolved(current):
            return
        set_is_resolving(True)
        try:
            updated = await asyncio.to_thread(resolve_incident, backend, current)
        except (BackendError, LookupError, ValueError):
            logger.exception("Failed to resolve incident %s", incident_id)
            notify("error", "Could not mark this incident as resolved. Please try again.")
            set_is_resolving(False)
            return
        set_is_resolving(False)
        set_resolved(updated)
        notify("success", "Incident marked as resolved.")

    details = current.get("detailed_description") or current.get("description") or ""
    if is_resolved(current):
        action = html.div({"class": "resolved-badge"}, "✓ Resolved")
    else:
        action = html.button(
            {"class": "btn primary", "disabled": is_resolving, "on_click": handle_resolve},
            "Resolving…" if is_resolving else "Mark as Resolved",
        )

    priority = current.get("priority") or ""
    return html.div(
        {"class": "page page-narrow"},
        back_button(on_back),
        html.div(
            {"class": "card"},
            incident_image(current, "hero-image"),
            html.div(
                {"class": "section-head"},
                html.h1(current.get("location") or "Unknown location"),
                html.div(priority_badge(current, " Priority"), " ", category_badge(current), " ", status_pill(current)),
            ),
            html.div(
                {"class": "detail-meta"},
                html.div(html.div({"class": "label"}, "Location"), current.get("location") or "-"),
                html.div(html.div({"class": "label"}, "Reported"), time_ago(current.get("created_at")) or "-"),
                html.div(html.div({"class": "label"}, "Reported by"), current.get("reported_by") or "Staff member"),
            ),
            html.h3("Description"),
            html.p(details),
            html.div(
                {"class": "notice"},
                f"This issue has been flagged as {priority or 'unknown'} priority.",
            ),
            html.div({"class": "form-actions"}, action),
        ),
    )
