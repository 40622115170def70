from datetime import timedelta

import pytest

from conftest import NOW
from zesty.errors import BackendError, ValidationError
from zesty.incidents import (
    INITIAL_STATUS,
    LOCATIONS,
    TERMINAL_STATUS,
    active_feed,
    category_class,
    is_resolved,
    priority_class,
    resolve_incident,
    site_statuses,
    submit_report,
    time_ago,
    validate_report,
)

VALID = {
    "location": "Giraffe Habitat",
    "category": "Repair",
    "priority": "High",
    "description": "Broken fence panel",
}


def incident(id, status="Under Review", minutes_ago=0, location="Small Farm"):
    return {"id": id, "status": status, "location": location, "created_at": NOW - timedelta(minutes=minutes_ago)}


def test_feed_excludes_resolved_and_caps_most_recent():
    rows = [incident(i, minutes_ago=i) for i in range(1, 8)]
    rows.append(incident(99, status="Resolved", minutes_ago=0))

    feed = active_feed(rows, 5)

    assert [row["id"] for row in feed] == [1, 2, 3, 4, 5]
    assert all(not is_resolved(row) for row in feed)


def test_resolved_matching_ignores_case_and_spacing():
    assert is_resolved({"status": " resolved "})
    assert not is_resolved({"status": "Under Review"})
    assert not is_resolved({})


def test_badge_classes():
    assert priority_class("High") == "pill-danger"
    assert priority_class("med") == "pill-warning"
    assert priority_class("Low") == "pill-info"
    assert category_class("Safety") == "tag-safety"
    assert category_class("Unknown") == ""


def test_time_ago_labels():
    assert time_ago(NOW - timedelta(seconds=20), NOW) == "Just now"
    assert time_ago(NOW - timedelta(minutes=1), NOW) == "1 minute ago"
    assert time_ago(NOW - timedelta(hours=2), NOW) == "2 hours ago"
    assert time_ago(NOW - timedelta(days=1, hours=1), NOW) == "Yesterday"
    assert time_ago("2026-03-04T13:00:00Z", NOW) == "2 hours ago"
    assert time_ago(None, NOW) == ""


def test_map_pins_flag_sites_with_open_incidents():
    rows = [
        incident(1, location="Giraffe Habitat - Viewing Platform"),
        incident(2, location="Big Aviary", status=TERMINAL_STATUS),
    ]

    pins = {pin["name"]: pin["status"] for pin in site_statuses(rows)}

    assert pins["Giraffe Habitat"] == "issue"
    assert pins["Big Aviary"] == "good"
    assert set(pins) == set(LOCATIONS)


def test_validation_reports_missing_fields():
    errors = validate_report({"priority": "Med"})
    assert set(errors) == {"category", "location", "description"}
    assert validate_report(VALID) == {}
    assert "priority" in validate_report({**VALID, "priority": "Urgent"})


def test_submit_rejects_empty_fields_before_any_backend_call(backend):
    with pytest.raises(ValidationError) as excinfo:
        submit_report(backend, {**VALID, "description": "   "})
    assert "description" in excinfo.value.fields
    assert backend.calls == []


def test_submit_without_photo_writes_incident(backend):
    row = submit_report(backend, {**VALID, "priority": ""}, reporter={"id": "u1", "display_name": "Ana"}, now=NOW)

    assert backend.calls == ["insert_incident"]
    assert row["status"] == INITIAL_STATUS
    assert row["priority"] == "Med"
    assert row["image_url"] is None
    assert row["reported_by"] == "Ana"
    assert row["reporter_id"] == "u1"
    assert row["created_at"] == NOW


def test_submit_uploads_photo_before_insert(backend):
    image = {"filename": "fence.jpg", "data": b"jpeg", "content_type": "image/jpeg"}

    row = submit_report(backend, VALID, image=image, access_token="tok")

    assert backend.calls == ["upload_image", "insert_incident"]
    assert row["image_url"] == "https://cdn.example/fence.jpg"
    assert backend.uploads[0]["token"] == "tok"


def test_upload_failure_aborts_before_insert(backend):
    backend.fail.add("upload_image")
    image = {"filename": "fence.jpg", "data": b"jpeg", "content_type": "image/jpeg"}

    with pytest.raises(BackendError):
        submit_report(backend, VALID, image=image)

    assert backend.incidents == []
    assert "insert_incident" not in backend.calls


def test_resolve_updates_status(backend):
    backend.incidents.append(incident(5))

    updated = resolve_incident(backend, backend.incidents[0])

    assert updated["status"] == TERMINAL_STATUS
    assert backend.calls == ["update_incident_status"]


def test_resolve_is_not_offered_for_resolved_incident(backend):
    with pytest.raises(ValueError):
        resolve_incident(backend, incident(5, status="Resolved"))
    assert backend.calls == []


def test_resolve_missing_incident(backend):
    with pytest.raises(LookupError):
        resolve_incident(backend, incident(404))
