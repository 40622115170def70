from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

from reactpy import component, event, hooks, html

from .. import config
from ..conversations import (
    display_name,
    filter_conversations,
    find_conversation,
    group_conversations,
    initials,
    message_time,
    search_profiles,
)
from ..errors import BackendError
from ..hooks import use_backend, use_live_collection, use_session, use_toast
from .common import event_value, placeholder

logger = logging.getLogger(__name__)


def is_send_key(event_data: Dict[str, Any]) -> bool:
    return event_data.get("key") == "Enter" and not event_data.get("shiftKey")


def conversation_item(conv: Dict[str, Any], active: bool, on_select: Callable[[str], None]):
    last = conv["last_message"]
    return html.div(
        {
            "key": conv["counterpart_id"],
            "class": "conv active" if active else "conv",
            "on_click": lambda e: on_select(conv["counterpart_id"]),
        },
        html.span({"class": "avatar"}, conv["initials"]),
        html.div(
            {"style": {"minWidth": "0", "flex": "1"}},
            html.div(
                {"class": "row-head"},
                html.span({"class": "conv-name"}, conv["name"]),
                html.span({"class": "meta"}, message_time(conv["last_at"])),
            ),
            html.div({"class": "conv-preview"}, last.get("content") or ""),
        ),
    )


def message_bubble(message: Dict[str, Any], me: str):
    mine = str(message.get("sender_id")) == str(me)
    return html.div(
        {"key": str(message.get("id")), "class": "bubble-row mine" if mine else "bubble-row"},
        html.div(
            {"class": "bubble"},
            message.get("content") or "",
            html.div({"class": "bubble-time"}, message_time(message.get("created_at"))),
        ),
    )


@component
def MessagingInbox(on_close: Callable[[], None], on_compose: Callable[[], None]):
    backend = use_backend()
    session = use_session()
    notify = use_toast()
    me = session.get("user_id")

    messages, reload_messages = use_live_collection(
        lambda: backend.list_messages(me),
        "messages",
        [me],
        interval=config.POLL_INTERVAL_SECONDS,
    )
    profiles, _ = use_live_collection(lambda: backend.list_profiles(), "profiles", [])

    query, set_query = hooks.use_state("")
    selected_id, set_selected_id = hooks.use_state(None)
    reply, set_reply = hooks.use_state("")
    is_sending, set_is_sending = hooks.use_state(False)

    by_id = {str(profile.get("id")): profile for profile in profiles or []}
    conversations = group_conversations(messages or [], me, by_id)
    visible = filter_conversations(conversations, query)
    selected = find_conversation(conversations, selected_id)

    async def send_reply() -> None:
        content = reply.strip()
        if not content or selected is None or is_sending:
            return
        set_is_sending(True)
        try:
            await asyncio.to_thread(backend.insert_message, me, selected["counterpart_id"], content)
        except BackendError:
            logger.exception("Failed to send message to %s", selected["counterpart_id"])
            notify("error", "Message could not be sent.")
            return
        finally:
            set_is_sending(False)
        set_reply("")
        reload_messages()

    async def handle_key_down(event_data: Dict[str, Any]) -> None:
        if is_send_key(event_data):
            await send_reply()

    @event(prevent_default=True)
    async def handle_submit(event_data: Dict[str, Any]) -> None:
        await send_reply()

    if messages is None:
        items = placeholder("Loading conversations…")
    elif not visible:
        items = html.div({"class": "empty"}, "No conversations match." if query else "No messages yet.")
    else:
        items = [conversation_item(conv, conv["counterpart_id"] == selected_id, set_selected_id) for conv in visible]

    if selected is None:
        thread = html.div({"class": "thread"}, html.div({"class": "empty"}, "Select a conversation to read it."))
    else:
        thread = html.div(
            {"class": "thread"},
            html.div(
                {"class": "thread-head"},
                html.button({"class": "btn ghost", "on_click": lambda e: set_selected_id(None)}, "←"),
                html.span({"class": "avatar"}, selected["initials"]),
                html.strong(selected["name"]),
            ),
            html.div({"class": "thread-body"}, [message_bubble(msg, me) for msg in selected["messages"]]),
            html.form(
                {"class": "reply", "on_submit": handle_submit},
                html.textarea(
                    {
                        "class": "textarea",
                        "rows": 2,
                        "placeholder": "Type a message…",
                        "value": reply,
                        "disabled": is_sending,
                        "on_change": lambda e: set_reply(event_value(e)),
                        "on_key_down": handle_key_down,
                    }
                ),
                html.button(
                    {"class": "btn primary", "type": "submit", "disabled": is_sending or not reply.strip()},
                    "Send",
                ),
            ),
        )

    return html.div(
        {"class": "modal"},
        html.div(
            {"class": "modal-card"},
            html.div(
                {"class": "modal-head"},
                html.h2("Messages"),
                html.div(
                    html.button({"class": "btn primary", "on_click": lambda e: on_compose()}, "New Message"),
                    " ",
                    html.button({"class": "btn ghost", "on_click": lambda e: on_close()}, "Close"),
                ),
            ),
            html.div(
                {"class": "inbox has-thread" if selected is not None else "inbox"},
                html.div(
                    {"class": "inbox-list"},
                    html.div(
                        {"class": "inbox-tools"},
                        html.input(
                            {
                                "class": "input",
                                "placeholder": "Search conversations",
                                "default_value": query,
                                "on_change": lambda e: set_query(event_value(e)),
                            }
                        ),
                    ),
                    html.div({"class": "inbox-items"}, items),
                ),
                thread,
            ),
        ),
    )


@component
def NewMessageDialog(on_close: Callable[[], None], recipient_id: str | None = None):
    backend = use_backend()
    session = use_session()
    notify = use_toast()
    me = session.get("user_id")

    profiles, _ = use_live_collection(lambda: backend.list_profiles(), "profiles", [])
    query, set_query = hooks.use_state("")
    chosen_id, set_chosen_id = hooks.use_state(recipient_id)
    content, set_content = hooks.use_state("")
    is_sending, set_is_sending = hooks.use_state(False)

    by_id = {str(profile.get("id")): profile for profile in profiles or []}
    recipient = by_id.get(str(chosen_id)) if chosen_id else None
    can_send = recipient is not None and bool(content.strip()) and not is_sending

    @event(prevent_default=True)
    async def handle_send(event_data: Dict[str, Any]) -> None:
        if not can_send:
            return
        set_is_sending(True)
        try:
            await asyncio.to_thread(backend.insert_message, me, str(recipient["id"]), content.strip())
        except BackendError:
            logger.exception("Failed to send message to %s", recipient.get("id"))
            notify("error", "Message could not be sent.")
            set_is_sending(False)
            return
        set_is_sending(False)
        notify("success", f"Message sent to {display_name(recipient)}.")
        on_close()

    if recipient is not None:
        picker = html.div(
            {"class": "field"},
            html.div({"class": "label"}, "To"),
            html.span(
                {"class": "chip"},
                display_name(recipient),
                html.button(
                    {"class": "btn ghost", "type": "button", "on_click": lambda e: set_chosen_id(None)},
                    "×",
                ),
            ),
        )
    else:
        matches = search_profiles(profiles or [], query, exclude=me)
        picker = html.div(
            {"class": "field"},
            html.label({"class": "label", "html_for": "recipient"}, "To"),
            html.input(
                {
                    "id": "recipient",
                    "class": "input",
                    "placeholder": "Search by name, role, or department",
                    "default_value": query,
                    "on_change": lambda e: set_query(event_value(e)),
                }
            ),
            html.div(
                {"class": "results"},
                [
                    html.div(
                        {
                            "key": str(profile.get("id")),
                            "class": "result",
                            "on_click": lambda e, pid=profile.get("id"): set_chosen_id(str(pid)),
                        },
                        html.span({"class": "avatar"}, initials(display_name(profile))),
                        html.div(
                            html.strong(display_name(profile)),
                            html.div({"class": "meta"}, " • ".join(
                                part for part in (profile.get("role"), profile.get("department")) if part
                            )),
                        ),
                    )
                    for profile in matches[:8]
                ]
                if profiles is not None
                else placeholder("Loading colleagues…"),
            ),
        )

    return html.div(
        {"class": "modal"},
        html.form(
            {"class": "modal-card small", "on_submit": handle_send},
            html.div(
                {"class": "modal-head"},
                html.h2("New Message"),
                html.button({"class": "btn ghost", "type": "button", "on_click": lambda e: on_close()}, "Close"),
            ),
            html.div(
                {"class": "modal-body"},
                picker,
                html.div(
                    {"class": "field"},
                    html.label({"class": "label", "html_for": "message"}, "Message"),
                    html.textarea(
                        {
                            "id": "message",
                            "class": "textarea",
                            "placeholder": "Write your message…",
                            "default_value": content,
                            "disabled": is_sending,
                            "on_change": lambda e: set_content(event_value(e)),
                        }
                    ),
                ),
            ),
            html.div(
                {"class": "modal-foot"},
                html.button({"class": "btn ghost", "type": "button", "on_click": lambda e: on_close()}, "Cancel"),
                html.button(
                    {"class": "btn primary", "type": "submit", "disabled": not can_send},
                    "Sending…" if is_sending else "Send",
                ),
            ),
        ),
    )
