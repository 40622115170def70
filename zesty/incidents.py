from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from .errors import ValidationError

logger = logging.getLogger(__name__)

CATEGORIES = ["Safety", "Cleaning", "Repair"]
PRIORITIES = ["High", "Med", "Low"]
INITIAL_STATUS = "Under Review"
TERMINAL_STATUS = "Resolved"
REQUIRED_FIELDS = {
    "category": "Select a category",
    "location": "Select a location",
    "description": "Describe the issue",
}

# Site name, map pin x/y in percent of the map area.
SITES = [
    {"name": "Main Entrance - Ticketing", "x": 15, "y": 20},
    {"name": "Small Farm", "x": 25, "y": 50},
    {"name": "Giraffe Habitat", "x": 70, "y": 50},
    {"name": "Food Kiosk - Crepes", "x": 50, "y": 35},
    {"name": "African Savanna", "x": 65, "y": 65},
    {"name": "Big Aviary", "x": 30, "y": 70},
    {"name": "Bactrian Camels", "x": 45, "y": 25},
    {"name": "Arctic Area - Polar Bears", "x": 55, "y": 15},
    {"name": "Little Amazonia", "x": 40, "y": 55},
    {"name": "Felines - Panthers & Leopards", "x": 82, "y": 60},
    {"name": "Lemurs & Primates", "x": 20, "y": 82},
    {"name": "Picnic Area", "x": 80, "y": 30},
    {"name": "Restrooms", "x": 88, "y": 42},
]
LOCATIONS = [site["name"] for site in SITES]


def normalize_key(value: Any) -> str:
    return " ".join(str(value or "").strip().lower().split())


def is_resolved(incident: Dict[str, Any]) -> bool:
    return normalize_key(incident.get("status")) == normalize_key(TERMINAL_STATUS)


def priority_class(value: Any) -> str:
    key = normalize_key(value)
    if key == "high":
        return "pill-danger"
    if key in {"med", "medium"}:
        return "pill-warning"
    if key == "low":
        return "pill-info"
    return "pill-muted"


def category_class(value: Any) -> str:
    key = normalize_key(value)
    if key == "safety":
        return "tag-safety"
    if key == "cleaning":
        return "tag-cleaning"
    if key == "repair":
        return "tag-repair"
    return ""


def status_class(value: Any) -> str:
    key = normalize_key(value)
    if key == normalize_key(TERMINAL_STATUS):
        return "pill-success"
    if key in {"critical - in progress", "urgent - awaiting parts"}:
        return "pill-danger"
    if key == normalize_key(INITIAL_STATUS):
        return "pill-info"
    return "pill-muted"


def parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def time_ago(value: Any, now: datetime | None = None) -> str:
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - moment).total_seconds())
    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    weeks = days // 7
    if weeks < 5:
        return f"{weeks} week{'s' if weeks != 1 else ''} ago"
    return moment.strftime("%b %d, %Y")


def sort_recent(incidents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(incidents, key=lambda row: parse_timestamp(row.get("created_at")) or epoch, reverse=True)


def active_feed(incidents: List[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    """Most recent non-resolved incidents, capped at ``limit``."""
    active = [incident for incident in incidents if not is_resolved(incident)]
    return sort_recent(active)[: max(limit, 0)]


def same_site(site: str, location: str) -> bool:
    # "Giraffe Habitat - Viewing Platform" belongs to "Giraffe Habitat".
    return site == location or site.startswith(location + " -") or location.startswith(site + " -")


def site_statuses(incidents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    open_locations = {normalize_key(row.get("location")) for row in incidents if not is_resolved(row)}
    pins = []
    for site in SITES:
        key = normalize_key(site["name"])
        has_issue = any(same_site(key, location) for location in open_locations if location)
        pins.append({**site, "status": "issue" if has_issue else "good"})
    return pins


def clean_report(values: Dict[str, Any]) -> Dict[str, str]:
    return {
        "category": str(values.get("category") or "").strip(),
        "location": str(values.get("location") or "").strip(),
        "priority": str(values.get("priority") or "").strip() or "Med",
        "description": str(values.get("description") or "").strip(),
        "detailed_description": str(values.get("detailed_description") or "").strip(),
    }


def validate_report(values: Dict[str, Any]) -> Dict[str, str]:
    data = clean_report(values)
    errors = {name: message for name, message in REQUIRED_FIELDS.items() if not data[name]}
    if data["category"] and data["category"] not in CATEGORIES:
        errors["category"] = "Unknown category"
    if data["priority"] not in PRIORITIES:
        errors["priority"] = "Unknown priority"
    return errors


def submit_report(
    backend,
    values: Dict[str, Any],
    image: Dict[str, Any] | None = None,
    reporter: Dict[str, Any] | None = None,
    access_token: str | None = None,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Validate, upload the optional photo, then write the incident.

    Raises ``ValidationError`` before any network call when a required field
    is empty. An upload failure aborts before the incident write; a write
    failure after a successful upload leaves the stored photo behind.
    """
    errors = validate_report(values)
    if errors:
        raise ValidationError(errors)
    data = clean_report(values)

    image_url = None
    if image is not None:
        image_url = backend.upload_image(
            image.get("filename") or "photo",
            image["data"],
            image.get("content_type") or "application/octet-stream",
            access_token=access_token,
        )

    reporter = reporter or {}
    payload = {
        **data,
        "detailed_description": data["detailed_description"] or None,
        "image_url": image_url,
        "status": INITIAL_STATUS,
        "reported_by": reporter.get("display_name") or reporter.get("email") or None,
        "reporter_id": reporter.get("id"),
        "created_at": now or datetime.now(timezone.utc),
    }
    return backend.insert_incident(payload)


def resolve_incident(backend, incident: Dict[str, Any]) -> Dict[str, Any]:
    if is_resolved(incident):
        raise ValueError("Incident is already resolved")
    updated = backend.update_incident_status(incident["id"], TERMINAL_STATUS)
    if not updated:
        raise LookupError(f"Incident {incident['id']} no longer exists")
    logger.info("Incident %s resolved", incident["id"])
    return updated
