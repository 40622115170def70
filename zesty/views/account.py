from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

from reactpy import component, event, hooks, html

from ..errors import BackendError
from ..hooks import use_backend, use_session, use_toast
from .common import back_button, event_checked, event_value, field_error

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
PROFILE_FORM_FIELDS = ("display_name", "phone", "role", "department")
DEFAULT_PREFERENCES = {
    "email_notifications": True,
    "push_notifications": False,
    "incident_alerts": True,
    "schedule_reminders": True,
}
PREFERENCE_LABELS = {
    "email_notifications": ("Email notifications", "Receive updates by email"),
    "push_notifications": ("Push notifications", "Browser notifications while signed in"),
    "incident_alerts": ("Incident alerts", "New high-priority incidents"),
    "schedule_reminders": ("Schedule reminders", "A reminder before each shift"),
}


def profile_form_values(profile: Dict[str, Any] | None) -> Dict[str, str]:
    profile = profile or {}
    return {field: str(profile.get(field) or "") for field in PROFILE_FORM_FIELDS}


def merged_preferences(profile: Dict[str, Any] | None) -> Dict[str, bool]:
    stored = (profile or {}).get("preferences") or {}
    return {name: bool(stored.get(name, default)) for name, default in DEFAULT_PREFERENCES.items()}


def validate_password_change(new_password: str, confirm_password: str) -> Dict[str, str]:
    errors = {}
    if len(new_password) < MIN_PASSWORD_LENGTH:
        errors["new_password"] = f"Use at least {MIN_PASSWORD_LENGTH} characters"
    if new_password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"
    return errors


def text_field(name: str, label: str, value: str, on_change, disabled: bool = False, input_type: str = "text"):
    attributes = {"id": name, "type": input_type, "class": "input", "default_value": value, "disabled": disabled}
    if on_change is not None:
        attributes["on_change"] = on_change
    return html.div(
        {"class": "field"},
        html.label({"class": "label", "html_for": name}, label),
        html.input(attributes),
    )


@component
def AccountSettingsPage(on_back: Callable[[], None]):
    backend = use_backend()
    session = use_session()
    notify = use_toast()
    user_id = session.get("user_id")
    profile = session.get("profile")
    set_profile = session.get("set_profile") or (lambda row: None)

    values, set_values = hooks.use_state(lambda: profile_form_values(profile))
    preferences, set_preferences = hooks.use_state(lambda: merged_preferences(profile))
    passwords, set_passwords = hooks.use_state({"new_password": "", "confirm_password": ""})
    password_errors, set_password_errors = hooks.use_state({})
    password_form_key, set_password_form_key = hooks.use_state(0)
    busy, set_busy = hooks.use_state("")

    def set_field(name: str, value: str) -> None:
        set_values(lambda prev: {**prev, name: value})

    async def save_profile(payload: Dict[str, Any], success_text: str) -> bool:
        set_busy("profile")
        try:
            row = await asyncio.to_thread(backend.upsert_profile, user_id, payload)
        except BackendError:
            logger.exception("Failed to save profile for %s", user_id)
            notify("error", "Your changes could not be saved.")
            return False
        finally:
            set_busy("")
        set_profile(row)
        notify("success", success_text)
        return True

    @event(prevent_default=True)
    async def handle_profile_submit(event_data: Dict[str, Any]) -> None:
        if busy:
            return
        payload = {field: values[field].strip() for field in PROFILE_FORM_FIELDS}
        payload["email"] = session.get("email") or ""
        await save_profile(payload, "Profile updated.")

    async def toggle_preference(name: str, checked: bool) -> None:
        updated = {**preferences, name: checked}
        set_preferences(updated)
        if not await save_profile({"preferences": updated}, "Preferences saved."):
            set_preferences(preferences)

    def preference_handler(name: str):
        async def handle_change(event_data: Dict[str, Any]) -> None:
            await toggle_preference(name, event_checked(event_data))

        return handle_change

    @event(prevent_default=True)
    async def handle_password_submit(event_data: Dict[str, Any]) -> None:
        if busy:
            return
        errors = validate_password_change(passwords["new_password"], passwords["confirm_password"])
        set_password_errors(errors)
        if errors:
            return
        auth = session.get("auth")
        set_busy("password")
        try:
            await asyncio.to_thread(auth.update_password, passwords["new_password"])
        except BackendError as exc:
            logger.exception("Failed to update password for %s", user_id)
            notify("error", exc.message)
            return
        finally:
            set_busy("")
        set_passwords({"new_password": "", "confirm_password": ""})
        set_password_form_key(password_form_key + 1)
        notify("success", "Password updated.")

    def set_password_field(name: str, value: str) -> None:
        set_passwords(lambda prev: {**prev, name: value})

    return html.div(
        {"class": "page page-narrow"},
        back_button(on_back),
        html.div(
            {"class": "section-head"},
            html.div(
                html.div({"class": "eyebrow"}, "Account"),
                html.h1("Account Settings"),
            ),
        ),
        html.div(
            {"class": "card"},
            html.h2("Profile"),
            html.form(
                {"class": "form", "on_submit": handle_profile_submit},
                html.div(
                    {"class": "grid-2"},
                    text_field("display_name", "Full Name", values["display_name"], lambda e: set_field("display_name", event_value(e))),
                    text_field("email", "Email", session.get("email") or "", None, disabled=True),
                    text_field("phone", "Phone", values["phone"], lambda e: set_field("phone", event_value(e)), input_type="tel"),
                    text_field("role", "Role", values["role"], lambda e: set_field("role", event_value(e))),
                    text_field("department", "Department", values["department"], lambda e: set_field("department", event_value(e))),
                ),
                html.div(
                    {"class": "form-actions"},
                    html.button(
                        {"class": "btn primary", "type": "submit", "disabled": bool(busy)},
                        "Saving…" if busy == "profile" else "Save Changes",
                    ),
                ),
            ),
        ),
        html.div(
            {"class": "card"},
            html.h2("Change Password"),
            html.form(
                {"key": str(password_form_key), "class": "form", "on_submit": handle_password_submit},
                text_field(
                    "new_password",
                    "New Password",
                    "",
                    lambda e: set_password_field("new_password", event_value(e)),
                    input_type="password",
                ),
                field_error(password_errors, "new_password"),
                text_field(
                    "confirm_password",
                    "Confirm Password",
                    "",
                    lambda e: set_password_field("confirm_password", event_value(e)),
                    input_type="password",
                ),
                field_error(password_errors, "confirm_password"),
                html.div(
                    {"class": "form-actions"},
                    html.button(
                        {"class": "btn primary", "type": "submit", "disabled": bool(busy)},
                        "Updating…" if busy == "password" else "Update Password",
                    ),
                ),
            ),
        ),
        html.div(
            {"class": "card"},
            html.h2("Notifications"),
            [
                html.label(
                    {"key": name, "class": "toggle-row"},
                    html.div(html.strong(title), html.div({"class": "meta"}, hint)),
                    html.input(
                        {
                            "type": "checkbox",
                            "checked": preferences[name],
                            "disabled": bool(busy),
                            "on_change": preference_handler(name),
                        }
                    ),
                )
                for name, (title, hint) in PREFERENCE_LABELS.items()
            ],
        ),
    )
