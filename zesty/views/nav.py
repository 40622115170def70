from __future__ import annotations

from typing import Callable

from reactpy import component, hooks, html

from ..conversations import display_name, initials
from ..hooks import use_backend, use_live_collection, use_session


@component
def DashboardNav(
    on_messages_click: Callable[[], None],
    on_home: Callable[[], None],
    on_work_schedule_click: Callable[[], None],
    on_colleague_directory_click: Callable[[], None],
    on_account_settings_click: Callable[[], None],
    on_sign_out: Callable[[], None],
):
    backend = use_backend()
    session = use_session()
    user_id = session.get("user_id")
    menu_open, set_menu_open = hooks.use_state(False)

    messages, _ = use_live_collection(lambda: backend.list_messages(user_id), "messages", [user_id])
    has_incoming = any(str(msg.get("receiver_id")) == str(user_id) for msg in messages or [])

    name = display_name(session.get("profile"), fallback=session.get("email") or "Staff member")

    def choose(action: Callable[[], None]) -> None:
        set_menu_open(False)
        action()

    menu = (
        html.div(
            {"class": "menu"},
            html.button({"class": "menu-item", "on_click": lambda e: choose(on_work_schedule_click)}, "My Work Schedule"),
            html.button(
                {"class": "menu-item", "on_click": lambda e: choose(on_colleague_directory_click)},
                "Colleague Directory (Mails)",
            ),
            html.div({"class": "menu-sep"}),
            html.button({"class": "menu-item", "on_click": lambda e: choose(on_account_settings_click)}, "Account Settings"),
            html.button({"class": "menu-item", "on_click": lambda e: choose(on_sign_out)}, "Sign out"),
        )
        if menu_open
        else None
    )

    return html.nav(
        {"class": "navbar"},
        html.div(
            {"class": "brand", "on_click": lambda e: on_home()},
            html.div({"class": "brand-mark"}, "Z"),
            html.div(
                html.div({"class": "brand-title"}, "Zoo Management"),
                html.div({"class": "meta"}, "Maintenance & Operations"),
            ),
        ),
        html.div(
            {"class": "nav-actions"},
            html.button(
                {"class": "icon-btn", "title": "Messages", "on_click": lambda e: on_messages_click()},
                "Messages",
                html.span({"class": "dot"}) if has_incoming else None,
            ),
            html.button(
                {"class": "icon-btn", "on_click": lambda e: set_menu_open(not menu_open)},
                html.span({"class": "avatar"}, initials(name)),
                html.span({"style": {"marginLeft": "8px"}}, name),
            ),
            menu,
        ),
    )
