from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict

from reactpy import component, event, hooks, html

from .. import config
from ..errors import BackendError, ValidationError
from ..hooks import use_backend, use_session, use_toast
from ..incidents import CATEGORIES, LOCATIONS, PRIORITIES, submit_report, validate_report
from ..uploads import STAGING, wait_for_upload
from .common import back_button, event_value, field_error

logger = logging.getLogger(__name__)

EMPTY_FORM = {
    "location": "",
    "category": "",
    "priority": "Med",
    "description": "",
    "detailed_description": "",
}


def chosen_file_name(value: str) -> str:
    # Browsers report "C:\fakepath\<name>" for file inputs.
    return value.replace("\\", "/").rsplit("/", 1)[-1]


def select_field(name: str, label: str, options, value: str, on_change, disabled: bool, prompt: str):
    return html.div(
        {"class": "field"},
        html.label({"class": "label", "html_for": name}, label),
        html.select(
            {"id": name, "class": "select", "value": value, "disabled": disabled, "on_change": on_change},
            html.option({"value": ""}, prompt) if prompt else None,
            [html.option({"key": option, "value": option}, option) for option in options],
        ),
    )


@component
def SubmitReportForm(on_submitted: Callable[[Dict[str, Any]], None], on_cancel: Callable[[], None]):
    backend = use_backend()
    session = use_session()
    notify = use_toast()
    values, set_values = hooks.use_state(EMPTY_FORM)
    errors, set_errors = hooks.use_state({})
    file_name, set_file_name = hooks.use_state("")
    upload_key, set_upload_key = hooks.use_state(lambda: uuid.uuid4().hex)
    is_submitting, set_is_submitting = hooks.use_state(False)

    def set_field(name: str, value: str) -> None:
        set_values(lambda prev: {**prev, name: value})

    def reset() -> None:
        STAGING.discard(upload_key)
        set_values(EMPTY_FORM)
        set_errors({})
        set_file_name("")
        set_upload_key(uuid.uuid4().hex)

    def handle_file_change(event_data: Dict[str, Any]) -> None:
        name = chosen_file_name(event_value(event_data))
        # The browser posts the new pick under the same key; drop an older one.
        STAGING.discard(upload_key, keep_filename=name)
        set_file_name(name)

    @event(prevent_default=True)
    async def handle_submit(event_data: Dict[str, Any]) -> None:
        if is_submitting:
            return
        problems = validate_report(values)
        if problems:
            set_errors(problems)
            return
        set_errors({})
        set_is_submitting(True)
        image = None
        try:
            if file_name:
                image = await wait_for_upload(STAGING, upload_key, file_name)
                if image is None:
                    notify("error", "The photo did not finish uploading. Choose it again and resubmit.")
                    return
            auth = session.get("auth")
            access_token = await asyncio.to_thread(auth.access_token) if auth is not None else None
            reporter = {
                "id": session.get("user_id"),
                "email": session.get("email"),
                "display_name": (session.get("profile") or {}).get("display_name"),
            }
            incident = await asyncio.to_thread(
                submit_report, backend, values, image, reporter, access_token
            )
        except ValidationError as exc:
            set_errors(exc.fields)
            return
        except BackendError:
            logger.exception("Failed to submit incident report")
            if image is not None:
                STAGING.put(upload_key, image["filename"], image["content_type"], image["data"])
            notify("error", "The report could not be submitted. Please try again.")
            return
        finally:
            set_is_submitting(False)
        notify("success", "Report submitted. Thank you!")
        reset()
        on_submitted(incident)

    return html.form(
        {"key": upload_key, "class": "form", "on_submit": handle_submit},
        select_field(
            "location",
            "Location",
            LOCATIONS,
            values["location"],
            lambda e: set_field("location", event_value(e)),
            is_submitting,
            "Select a location",
        ),
        field_error(errors, "location"),
        html.div(
            {"class": "grid-2"},
            html.div(
                select_field(
                    "category",
                    "Category",
                    CATEGORIES,
                    values["category"],
                    lambda e: set_field("category", event_value(e)),
                    is_submitting,
                    "Select a category",
                ),
                field_error(errors, "category"),
            ),
            html.div(
                select_field(
                    "priority",
                    "Priority",
                    PRIORITIES,
                    values["priority"],
                    lambda e: set_field("priority", event_value(e)),
                    is_submitting,
                    "",
                ),
                field_error(errors, "priority"),
            ),
        ),
        html.div(
            {"class": "field"},
            html.label({"class": "label", "html_for": "description"}, "Description"),
            html.input(
                {
                    "id": "description",
                    "class": "input",
                    "placeholder": "Brief summary of the issue",
                    "default_value": values["description"],
                    "disabled": is_submitting,
                    "on_change": lambda e: set_field("description", event_value(e)),
                }
            ),
            field_error(errors, "description"),
        ),
        html.div(
            {"class": "field"},
            html.label({"class": "label", "html_for": "detailed_description"}, "Detailed Description (optional)"),
            html.textarea(
                {
                    "id": "detailed_description",
                    "class": "textarea",
                    "placeholder": "Anything the maintenance team should know",
                    "default_value": values["detailed_description"],
                    "disabled": is_submitting,
                    "on_change": lambda e: set_field("detailed_description", event_value(e)),
                }
            ),
        ),
        html.div(
            {"class": "field"},
            html.label({"class": "label", "html_for": "photo"}, "Photo (optional)"),
            html.div(
                {"class": "dropzone"},
                html.input(
                    {
                        "id": "photo",
                        "type": "file",
                        "accept": "image/*",
                        "data-upload-key": upload_key,
                        "disabled": is_submitting,
                        "on_change": handle_file_change,
                    }
                ),
                html.div({"class": "meta"}, file_name or "PNG or JPG, up to 5 MB"),
            ),
        ),
        html.div(
            {"class": "form-actions"},
            html.button({"class": "btn ghost", "type": "button", "on_click": lambda e: on_cancel()}, "Cancel"),
            html.button(
                {"class": "btn primary", "type": "submit", "disabled": is_submitting},
                "Submitting…" if is_submitting else "Submit Report",
            ),
        ),
    )


@component
def SubmitReportPage(on_back: Callable[[], None]):
    submitted, set_submitted = hooks.use_state(None)

    @hooks.use_effect(dependencies=[submitted is not None])
    def return_after_success():
        if submitted is None:
            return None

        async def wait_then_return() -> None:
            await asyncio.sleep(config.REPORT_RETURN_DELAY_SECONDS)
            on_back()

        task = asyncio.ensure_future(wait_then_return())
        return task.cancel

    if submitted is not None:
        body = html.div(
            {"class": "success-panel"},
            html.h2("Report Submitted"),
            html.p(f"Your report for {submitted.get('location') or 'the facility'} is now under review."),
            html.p({"class": "meta"}, "Returning to the dashboard…"),
            html.button({"class": "btn primary", "on_click": lambda e: on_back()}, "Back to Dashboard"),
        )
    else:
        body = SubmitReportForm(set_submitted, on_back)

    return html.div(
        {"class": "page page-narrow"},
        back_button(on_back),
        html.div(
            {"class": "card"},
            html.div({"class": "eyebrow"}, "Maintenance & Safety"),
            html.h1("Report New Issue"),
            body,
        ),
    )
