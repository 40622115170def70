from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from reactpy import component, event, hooks, html

from ..errors import BackendError
from .common import event_value

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def validate_credentials(values: Dict[str, str], mode: str) -> str:
    email = values.get("email", "").strip()
    password = values.get("password", "")
    if not email or "@" not in email:
        return "Enter your staff email address."
    if not password:
        return "Enter your password."
    if mode == "signup":
        if not values.get("display_name", "").strip():
            return "Enter your name."
        if len(password) < MIN_PASSWORD_LENGTH:
            return f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters."
    return ""


@component
def LoginScreen(auth):
    """Sign-in and sign-up form; a successful call signs the session in."""
    mode, set_mode = hooks.use_state("signin")
    values, set_values = hooks.use_state({"email": "", "password": "", "display_name": ""})
    error, set_error = hooks.use_state("")
    notice, set_notice = hooks.use_state("")
    is_busy, set_is_busy = hooks.use_state(False)

    def set_field(name: str, value: str) -> None:
        set_values(lambda prev: {**prev, name: value})

    @event(prevent_default=True)
    async def handle_submit(event_data: Dict[str, Any]) -> None:
        if is_busy:
            return
        problem = validate_credentials(values, mode)
        if problem:
            set_error(problem)
            return
        set_error("")
        set_notice("")
        set_is_busy(True)
        try:
            if mode == "signup":
                session = await asyncio.to_thread(
                    auth.sign_up, values["email"], values["password"], values["display_name"]
                )
                if session is None:
                    set_mode("signin")
                    set_notice("Account created. Check your inbox to confirm your email, then sign in.")
            else:
                await asyncio.to_thread(auth.sign_in, values["email"], values["password"])
        except BackendError as exc:
            logger.warning("Authentication failed for %s: %s", values["email"], exc.message)
            set_error(exc.message)
        finally:
            set_is_busy(False)

    def switch_mode(event_data: Dict[str, Any]) -> None:
        set_error("")
        set_notice("")
        set_mode("signup" if mode == "signin" else "signin")

    name_field = (
        html.div(
            {"class": "field"},
            html.label({"class": "label", "html_for": "display_name"}, "Full Name"),
            html.input(
                {
                    "id": "display_name",
                    "class": "input",
                    "placeholder": "Jane Doe",
                    "default_value": values["display_name"],
                    "disabled": is_busy,
                    "on_change": lambda e: set_field("display_name", event_value(e)),
                }
            ),
        )
        if mode == "signup"
        else None
    )

    return html.div(
        html.div(
            {"class": "login-shell"},
            html.div(
                html.div(
                    {"class": "login-card"},
                    html.div(
                        {"class": "login-brand"},
                        html.div({"class": "brand-mark"}, "Z"),
                        html.h1({"style": {"color": "var(--brand)"}}, "Zoo Management"),
                        html.div({"class": "meta"}, "Staff Portal"),
                    ),
                    html.form(
                        {"class": "form", "on_submit": handle_submit},
                        name_field,
                        html.div(
                            {"class": "field"},
                            html.label({"class": "label", "html_for": "email"}, "Email Address"),
                            html.input(
                                {
                                    "id": "email",
                                    "type": "email",
                                    "class": "input",
                                    "placeholder": "staff@zoo.org",
                                    "default_value": values["email"],
                                    "disabled": is_busy,
                                    "on_change": lambda e: set_field("email", event_value(e)),
                                }
                            ),
                        ),
                        html.div(
                            {"class": "field"},
                            html.label({"class": "label", "html_for": "password"}, "Password"),
                            html.input(
                                {
                                    "id": "password",
                                    "type": "password",
                                    "class": "input",
                                    "placeholder": "••••••••",
                                    "default_value": values["password"],
                                    "disabled": is_busy,
                                    "on_change": lambda e: set_field("password", event_value(e)),
                                }
                            ),
                        ),
                        html.div({"class": "error-text"}, error) if error else None,
                        html.div({"class": "meta"}, notice) if notice else None,
                        html.button(
                            {"class": "btn primary block", "type": "submit", "disabled": is_busy},
                            "Create account" if mode == "signup" else "Sign in",
                        ),
                    ),
                    html.div(
                        {"style": {"textAlign": "center"}},
                        html.button(
                            {"class": "btn ghost", "type": "button", "on_click": switch_mode},
                            "Already have an account? Sign in" if mode == "signup" else "New staff member? Create an account",
                        ),
                    ),
                ),
                html.p({"class": "login-foot"}, "Zoo Staff Access Only • Authorized Personnel"),
            ),
        ),
    )
