import asyncio
from datetime import timedelta

from reactpy import component, hooks, html
from reactpy.core.layout import Layout

from conftest import NOW
from zesty import app as zesty_app
from zesty import config
from zesty.conversations import group_conversations
from zesty.hooks import BackendContext, SessionContext
from zesty.incidents import CATEGORIES, LOCATIONS
from zesty.uploads import STAGING
from zesty.views import (
    AllIncidentsPage,
    IncidentDetailPage,
    IncidentFeed,
    LoginScreen,
    NewMessageDialog,
    SubmitReportForm,
    SubmitReportPage,
)
from zesty.views.account import merged_preferences, validate_password_change
from zesty.views.directory import departments, filter_directory
from zesty.views.login import validate_credentials
from zesty.views.messaging import is_send_key
from zesty.views.report import chosen_file_name


def model_text(model):
    if isinstance(model, str):
        return model
    if isinstance(model, dict):
        return " ".join(model_text(child) for child in model.get("children", []))
    if isinstance(model, list):
        return " ".join(model_text(child) for child in model)
    return ""


def find_elements(model, predicate):
    found = []
    if isinstance(model, dict):
        if predicate(model):
            found.append(model)
        for child in model.get("children", []):
            found.extend(find_elements(child, predicate))
    return found


def handler_target(model, tag, event_name, text=""):
    elements = find_elements(model, lambda m: m.get("tagName") == tag and text in model_text(m))
    for element in elements:
        for name, spec in (element.get("eventHandlers") or {}).items():
            if name.replace("_", "").lower() == "on" + event_name:
                return spec["target"]
    raise AssertionError(f"no {event_name} handler on <{tag}> {text!r}")


async def fire(layout, target, *data):
    await layout.deliver({"type": "layout-event", "target": target, "data": list(data)})


async def render_until(layout, condition, limit=10):
    for _ in range(limit):
        update = await asyncio.wait_for(layout.render(), 5)
        model = update["model"]
        if condition(model) if callable(condition) else condition in model_text(model):
            return model
    raise AssertionError("expected render never arrived")


def render_models(root, count):
    async def scenario():
        models = []
        async with Layout(root) as layout:
            for _ in range(count):
                update = await asyncio.wait_for(layout.render(), 5)
                models.append(update["model"])
        return models

    return asyncio.run(scenario())


def render_updates(root, count):
    return [model_text(model) for model in render_models(root, count)]


def make_incident(incident_id, location, status, minutes_ago=0, **extra):
    return {
        "id": incident_id,
        "location": location,
        "status": status,
        "priority": "High",
        "category": "Repair",
        "description": f"{location} needs work",
        "created_at": NOW - timedelta(minutes=minutes_ago),
        **extra,
    }


def with_backend(backend, child):
    @component
    def Root():
        return BackendContext(child, value=backend)

    return Root()


def test_login_screen_renders_sign_in_form():
    (text,) = render_updates(LoginScreen(auth=None), 1)
    assert "Sign in" in text
    assert "Zoo Staff Access Only" in text


def test_incident_feed_loads_then_shows_active_incidents(backend):
    backend.incidents = [
        {"id": 1, "location": "Big Aviary", "status": "Under Review", "priority": "High",
         "category": "Repair", "description": "Net torn", "created_at": NOW - timedelta(hours=1)},
        {"id": 2, "location": "Picnic Area", "status": "Resolved", "priority": "Low",
         "category": "Cleaning", "description": "Litter", "created_at": NOW},
    ]

    @component
    def Root():
        return BackendContext(IncidentFeed(lambda incident: None, lambda: None), value=backend)

    first, second = render_updates(Root(), 2)

    assert "Loading incidents" in first
    assert "Big Aviary" in second
    assert "Picnic Area" not in second
    assert "subscribe" in backend.calls


def test_incident_feed_hides_resolved_whatever_the_case(backend):
    backend.incidents = [
        make_incident(1, "Big Aviary", "Under Review", minutes_ago=30),
        make_incident(2, "Picnic Area", "resolved", minutes_ago=5),
        make_incident(3, "Restrooms", " RESOLVED ", minutes_ago=1),
    ]

    _, text = render_updates(with_backend(backend, IncidentFeed(lambda incident: None, lambda: None)), 2)

    assert "Big Aviary" in text
    assert "Picnic Area" not in text
    assert "Restrooms" not in text


def test_incident_feed_is_capped(backend, monkeypatch):
    monkeypatch.setattr(config, "FEED_LIMIT", 2)
    backend.incidents = [make_incident(i, f"Site {i}", "Under Review", minutes_ago=i) for i in range(1, 5)]

    _, text = render_updates(with_backend(backend, IncidentFeed(lambda incident: None, lambda: None)), 2)

    assert "Site 1" in text and "Site 2" in text
    assert "Site 3" not in text


def test_all_incidents_marks_resolved_cards(backend):
    backend.incidents = [
        make_incident(1, "Big Aviary", "Under Review", minutes_ago=30),
        make_incident(2, "Picnic Area", "resolved", minutes_ago=5),
    ]

    _, model = render_models(with_backend(backend, AllIncidentsPage(lambda: None, lambda incident: None)), 2)

    cards = find_elements(model, lambda m: "data-resolved" in (m.get("attributes") or {}))
    marks = {card["attributes"]["data-resolved"]: model_text(card) for card in cards}
    assert len(cards) == 2
    assert "Picnic Area" in marks["true"]
    assert "Big Aviary" in marks["false"]
    assert "1 open • 2 total" in model_text(model)


def test_resolved_incident_shows_indicator_instead_of_button(backend):
    row = make_incident(7, "Picnic Area", "Resolved")
    backend.incidents = [row]

    (text,) = render_updates(with_backend(backend, IncidentDetailPage(row, lambda: None)), 1)

    assert "✓ Resolved" in text
    assert "Mark as Resolved" not in text


def detail_page_root(backend, row, backs):
    hide = []

    @component
    def Root():
        shown, set_shown = hooks.use_state(True)
        hide[:] = [lambda: set_shown(False)]
        page = IncidentDetailPage(row, lambda: backs.append("back")) if shown else html.p("Closed")
        return BackendContext(page, value=backend)

    return Root(), hide


def test_resolving_returns_after_the_delay(backend, monkeypatch):
    monkeypatch.setattr(config, "RESOLVE_RETURN_DELAY_SECONDS", 0.1)
    row = make_incident(7, "Big Aviary", "Under Review")
    backend.incidents = [dict(row)]
    backs = []
    root, _ = detail_page_root(backend, row, backs)

    async def scenario():
        async with Layout(root) as layout:
            model = await render_until(layout, "Mark as Resolved")
            await fire(layout, handler_target(model, "button", "click", "Mark as Resolved"), {})
            await render_until(layout, "✓ Resolved")
            await asyncio.sleep(0.3)

    asyncio.run(scenario())

    assert backend.incidents[0]["status"] == "Resolved"
    assert "get_incident" in backend.calls
    assert backs == ["back"]


def test_leaving_during_the_resolve_delay_cancels_the_return(backend, monkeypatch):
    monkeypatch.setattr(config, "RESOLVE_RETURN_DELAY_SECONDS", 0.1)
    row = make_incident(7, "Big Aviary", "Under Review")
    backend.incidents = [dict(row)]
    backs = []
    root, hide = detail_page_root(backend, row, backs)

    async def scenario():
        async with Layout(root) as layout:
            model = await render_until(layout, "Mark as Resolved")
            await fire(layout, handler_target(model, "button", "click", "Mark as Resolved"), {})
            await render_until(layout, "✓ Resolved")
            await asyncio.sleep(0.05)
            hide[0]()
            await render_until(layout, "Closed")
            await asyncio.sleep(0.3)

    asyncio.run(scenario())

    assert backend.incidents[0]["status"] == "Resolved"
    assert backs == []


def send_enabled(model):
    buttons = find_elements(model, lambda m: m.get("tagName") == "button" and model_text(m).strip() == "Send")
    return bool(buttons) and not buttons[0].get("attributes", {}).get("disabled")


def test_new_message_writes_one_row_grouped_under_the_colleague(backend):
    backend.profiles = {
        "me": {"id": "me", "display_name": "Sam Keeper"},
        "ana": {"id": "ana", "display_name": "Ana Diaz", "role": "Vet"},
    }
    closed = []

    @component
    def Root():
        return BackendContext(
            SessionContext(NewMessageDialog(lambda: closed.append(True), "ana"), value={"user_id": "me"}),
            value=backend,
        )

    async def scenario():
        async with Layout(Root()) as layout:
            model = await render_until(layout, "Ana Diaz")
            typed = {"target": {"value": "  Fence panel loose by the otters.  "}}
            await fire(layout, handler_target(model, "textarea", "change"), typed)
            model = await render_until(layout, send_enabled)
            await fire(layout, handler_target(model, "form", "submit"), {})

    asyncio.run(scenario())

    assert closed == [True]
    assert len(backend.messages) == 1
    message = backend.messages[0]
    assert (message["sender_id"], message["receiver_id"]) == ("me", "ana")
    assert message["content"] == "Fence panel loose by the otters."
    (conversation,) = group_conversations(backend.messages, "me", backend.profiles)
    assert conversation["counterpart_id"] == "ana"
    assert conversation["name"] == "Ana Diaz"


def test_choosing_another_photo_drops_the_earlier_staged_one(backend):
    @component
    def Root():
        return BackendContext(SubmitReportForm(lambda row: None, lambda: None), value=backend)

    def is_photo_input(m):
        return m.get("tagName") == "input" and (m.get("attributes") or {}).get("type") == "file"

    async def scenario():
        async with Layout(Root()) as layout:
            model = await render_until(layout, "Submit Report")
            (photo,) = find_elements(model, is_photo_input)
            upload_key = photo["attributes"]["data-upload-key"]
            STAGING.put(upload_key, "old.jpg", "image/jpeg", b"old")
            target = next(iter(photo["eventHandlers"].values()))["target"]
            await fire(layout, target, {"target": {"value": "C:\\fakepath\\new.jpg"}})
            await render_until(layout, "new.jpg")
            return upload_key

    upload_key = asyncio.run(scenario())

    assert STAGING.peek(upload_key) is None


def element_by_id(model, element_id):
    (element,) = find_elements(model, lambda m: (m.get("attributes") or {}).get("id") == element_id)
    return element


def change_target(element):
    (target,) = [spec["target"] for name, spec in element["eventHandlers"].items() if "change" in name.lower()]
    return target


def test_submitted_report_returns_after_the_configured_delay(backend, monkeypatch):
    monkeypatch.setattr(config, "REPORT_RETURN_DELAY_SECONDS", 0.1)
    backs = []

    @component
    def Root():
        return BackendContext(SubmitReportPage(lambda: backs.append("back")), value=backend)

    def filled_in(model):
        selects = find_elements(model, lambda m: (m.get("attributes") or {}).get("id") == "category")
        return any(select["attributes"].get("value") == CATEGORIES[0] for select in selects)

    async def scenario():
        async with Layout(Root()) as layout:
            model = await render_until(layout, "Submit Report")
            await fire(layout, change_target(element_by_id(model, "location")), {"target": {"value": LOCATIONS[0]}})
            await fire(layout, change_target(element_by_id(model, "category")), {"target": {"value": CATEGORIES[0]}})
            await fire(layout, change_target(element_by_id(model, "description")), {"target": {"value": "Gate latch broken"}})
            model = await render_until(layout, filled_in)
            await fire(layout, handler_target(model, "form", "submit"), {})
            await render_until(layout, "Report Submitted")
            assert backs == []
            await asyncio.sleep(0.3)

    asyncio.run(scenario())

    (row,) = backend.incidents
    assert row["location"] == LOCATIONS[0]
    assert row["status"] == "Under Review"
    assert backs == ["back"]


def test_signed_out_app_renders_only_the_login_screen(backend, monkeypatch):
    monkeypatch.setattr(zesty_app, "get_backend", lambda: backend)

    (text,) = render_updates(zesty_app.App(), 1)

    assert "Sign in" in text
    assert "Recent Incidents" not in text
    assert "Facility Map" not in text
    assert "list_incidents" not in backend.calls


def test_validate_credentials():
    assert validate_credentials({"email": "sam", "password": "x"}, "signin") == "Enter your staff email address."
    assert validate_credentials({"email": "sam@zoo.org", "password": ""}, "signin") == "Enter your password."
    assert validate_credentials({"email": "sam@zoo.org", "password": "x"}, "signin") == ""
    assert "Enter your name." == validate_credentials(
        {"email": "sam@zoo.org", "password": "longenough", "display_name": " "}, "signup"
    )
    assert "8 characters" in validate_credentials(
        {"email": "sam@zoo.org", "password": "short", "display_name": "Sam"}, "signup"
    )


def test_password_change_rules():
    assert validate_password_change("longenough", "longenough") == {}
    assert set(validate_password_change("short", "other")) == {"new_password", "confirm_password"}


def test_preferences_merge_with_defaults():
    prefs = merged_preferences({"preferences": {"push_notifications": True, "incident_alerts": False}})
    assert prefs == {
        "email_notifications": True,
        "push_notifications": True,
        "incident_alerts": False,
        "schedule_reminders": True,
    }
    assert merged_preferences(None)["email_notifications"] is True


def test_directory_filters():
    profiles = [
        {"id": "me", "display_name": "Sam", "department": "Mammals"},
        {"id": "a", "display_name": "Ana", "role": "Vet", "department": "Animal Health"},
        {"id": "b", "display_name": "Bo", "role": "Technician", "department": "Maintenance"},
    ]
    assert departments(profiles) == ["Animal Health", "Mammals", "Maintenance"]
    assert [p["id"] for p in filter_directory(profiles, "", "All Departments", exclude="me")] == ["a", "b"]
    assert [p["id"] for p in filter_directory(profiles, "", "Maintenance")] == ["b"]
    assert [p["id"] for p in filter_directory(profiles, "vet", "All Departments")] == ["a"]


def test_enter_sends_but_shift_enter_does_not():
    assert is_send_key({"key": "Enter"})
    assert not is_send_key({"key": "Enter", "shiftKey": True})
    assert not is_send_key({"key": "a"})


def test_chosen_file_name_strips_fake_path():
    assert chosen_file_name("C:\\fakepath\\fence.jpg") == "fence.jpg"
    assert chosen_file_name("fence.jpg") == "fence.jpg"
