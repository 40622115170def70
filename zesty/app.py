from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

from flask import Flask, jsonify, request
from reactpy import component, hooks, html
from reactpy.backend.flask import Options, configure

from . import config, navigation
from .auth import SIGNED_IN, SIGNED_OUT
from .backend import get_backend
from .db import maybe_init_db_on_startup, ping
from .errors import BackendError
from .hooks import BackendContext, SessionContext, ToastContext
from .navigation import View
from .styles import UPLOAD_SCRIPT, ZOO_CSS
from .uploads import STAGING
from .views import (
    AccountSettingsPage,
    AllIncidentsPage,
    ColleagueDirectoryPage,
    DashboardNav,
    IncidentDetailPage,
    LoginScreen,
    MainDashboard,
    MessagingInbox,
    NewMessageDialog,
    SubmitReportPage,
    WorkSchedulePage,
    toast_stack,
    use_toasts,
)

app = Flask("zesty")
app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES + 64 * 1024
app.logger.setLevel(config.LOG_LEVEL)

logger = logging.getLogger(__name__)


@app.route("/api/health")
def api_health():
    try:
        ok = ping()
    except RuntimeError:
        app.logger.exception("Health check failed")
        ok = False
    return jsonify({"ok": ok}), 200 if ok else 503


@app.route("/api/uploads/<key>", methods=["POST"])
def api_stage_upload(key: str):
    if not STAGING.valid_key(key):
        return jsonify({"error": "Invalid upload key"}), 400
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return jsonify({"error": "No file provided"}), 400
    content_type = upload.mimetype or "application/octet-stream"
    if not content_type.startswith("image/"):
        return jsonify({"error": "Only image uploads are accepted"}), 415
    data = upload.read(config.MAX_UPLOAD_BYTES + 1)
    if len(data) > config.MAX_UPLOAD_BYTES:
        return jsonify({"error": "File is too large"}), 413
    STAGING.put(key, upload.filename, content_type, data)
    return jsonify({"ok": True, "size": len(data)})


@app.errorhandler(413)
def upload_too_large(exc):
    return jsonify({"error": "File is too large"}), 413


def default_display_name(session: Dict[str, Any]) -> str:
    user = session.get("user") or {}
    name = (user.get("metadata") or {}).get("display_name")
    if name:
        return str(name).strip()
    return (user.get("email") or "").split("@", 1)[0]


def ensure_profile(backend, session: Dict[str, Any]) -> Dict[str, Any]:
    """Load the signed-in user's profile, creating it on first sign-in."""
    user = session["user"]
    profile = backend.get_profile(user["id"])
    if profile:
        return profile
    logger.info("Creating profile for %s", user["id"])
    return backend.upsert_profile(
        user["id"],
        {"display_name": default_display_name(session), "email": user.get("email") or ""},
    )


def session_context_value(session, profile, set_profile, auth) -> Dict[str, Any]:
    user = (session or {}).get("user") or {}
    return {
        "user_id": user.get("id"),
        "email": user.get("email"),
        "profile": profile,
        "set_profile": set_profile,
        "auth": auth,
    }


@component
def App():
    backend = get_backend()
    auth = hooks.use_memo(lambda: backend.auth_session(), [])
    session, set_session = hooks.use_state(None)
    profile, set_profile = hooks.use_state(None)
    nav, set_nav = hooks.use_state(navigation.INITIAL)
    toasts, notify, dismiss = use_toasts()

    @hooks.use_effect(dependencies=[])
    def follow_auth_changes():
        loop = asyncio.get_running_loop()

        def apply(event: str, current: Dict[str, Any] | None) -> None:
            set_session(current)
            if event == SIGNED_OUT:
                set_profile(None)
                set_nav(navigation.INITIAL)
            elif event == SIGNED_IN:
                set_nav(navigation.login())

        def listener(event: str, current: Dict[str, Any] | None) -> None:
            # Auth calls run in worker threads; state changes belong on the loop.
            if not loop.is_closed():
                loop.call_soon_threadsafe(apply, event, current)

        return auth.on_change(listener)

    user_id = ((session or {}).get("user") or {}).get("id")

    @hooks.use_effect(dependencies=[user_id])
    def load_profile():
        if session is None:
            return None

        async def load() -> None:
            try:
                row = await asyncio.to_thread(ensure_profile, backend, session)
            except BackendError:
                logger.exception("Failed to load profile for %s", user_id)
                notify("error", "Your profile could not be loaded.")
                return
            set_profile(row)

        task = asyncio.ensure_future(load())
        return task.cancel

    def go(transition: Callable[..., navigation.NavState], *args) -> Callable[[], None]:
        return lambda: set_nav(lambda state: transition(state, *args))

    async def handle_sign_out() -> None:
        try:
            await asyncio.to_thread(auth.sign_out)
        except BackendError:
            logger.exception("Sign-out failed")
            notify("error", "Sign-out failed. Please try again.")

    def sign_out() -> None:
        asyncio.ensure_future(handle_sign_out())

    def select_incident(incident: Dict[str, Any]) -> None:
        set_nav(lambda state: navigation.incident_selected(state, incident))

    def compose_to(recipient_id: str) -> None:
        set_nav(lambda state: navigation.compose_new(state, recipient_id))

    if session is None:
        content = LoginScreen(auth)
    else:
        screens: Dict[View, Callable[[], Any]] = {
            View.dashboard: lambda: MainDashboard(
                go(navigation.report_new_issue), select_incident, go(navigation.view_all_incidents)
            ),
            View.submit_report: lambda: SubmitReportPage(go(navigation.back)),
            View.incident_detail: lambda: IncidentDetailPage(
                nav.selected_incident, go(navigation.back), key=str(nav.selected_incident.get("id"))
            ),
            View.all_incidents: lambda: AllIncidentsPage(go(navigation.back), select_incident),
            View.work_schedule: lambda: WorkSchedulePage(go(navigation.back)),
            View.colleague_directory: lambda: ColleagueDirectoryPage(go(navigation.back), compose_to),
            View.account_settings: lambda: AccountSettingsPage(go(navigation.back), key=f"{user_id}:{profile is not None}"),
        }
        content = html.div(
            DashboardNav(
                go(navigation.open_messaging),
                go(navigation.back),
                go(navigation.work_schedule),
                go(navigation.colleague_directory),
                go(navigation.account_settings),
                sign_out,
            ),
            screens[nav.screen](),
            MessagingInbox(go(navigation.close_messaging), go(navigation.compose_new)) if nav.show_messaging else None,
            NewMessageDialog(go(navigation.close_compose), nav.compose_recipient, key=str(nav.compose_recipient))
            if nav.show_compose
            else None,
        )

    return BackendContext(
        SessionContext(
            ToastContext(
                html.div(
                    html.style(ZOO_CSS),
                    content,
                    toast_stack(toasts, dismiss),
                ),
                value=notify,
            ),
            value=session_context_value(session, profile, set_profile, auth),
        ),
        value=backend,
    )


# One-time optional schema initialization at process startup (not per request)
maybe_init_db_on_startup()

configure(
    app,
    App,
    Options(
        head=(
            {"tagName": "title", "children": ["Zoo Management | Staff Portal"]},
            {
                "tagName": "meta",
                "attributes": {"name": "viewport", "content": "width=device-width, initial-scale=1"},
            },
            {"tagName": "script", "children": [UPLOAD_SCRIPT]},
        )
    ),
)


def main() -> None:
    app.run(host="0.0.0.0", port=config.PORT, debug=config.FLASK_DEBUG)


if __name__ == "__main__":
    main()
