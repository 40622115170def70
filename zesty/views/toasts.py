from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Dict, List

from reactpy import hooks, html

from .. import config

MAX_TOASTS = 4

_ids = itertools.count(1)


def use_toasts() -> tuple[List[Dict[str, Any]], Callable[[str, str], None], Callable[[int], None]]:
    """Transient notifications, auto-dismissed after ``TOAST_SECONDS``."""
    toasts, set_toasts = hooks.use_state([])

    def dismiss(toast_id: int) -> None:
        set_toasts(lambda prev: [toast for toast in prev if toast["id"] != toast_id])

    def notify(kind: str, text: str) -> None:
        toast = {"id": next(_ids), "kind": kind, "text": text}
        set_toasts(lambda prev: [*prev, toast][-MAX_TOASTS:])
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        loop.call_later(config.TOAST_SECONDS, dismiss, toast["id"])

    return toasts, notify, dismiss


def toast_stack(toasts: List[Dict[str, Any]], on_dismiss: Callable[[int], None]):
    if not toasts:
        return None
    return html.div(
        {"class": "toasts"},
        [
            html.div(
                {
                    "key": str(toast["id"]),
                    "class": f"toast {toast['kind']}",
                    "role": "status",
                    "on_click": lambda e, toast_id=toast["id"]: on_dismiss(toast_id),
                },
                toast["text"],
            )
            for toast in toasts
        ],
    )
