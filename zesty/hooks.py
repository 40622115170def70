from __future__ import annotations

import asyncio
import functools
from typing import Any, Callable, Dict, Hashable, List, Sequence

from reactpy import create_context, hooks

from .live import LiveCollection, Rows, row_id

BackendContext = create_context(None)
SessionContext = create_context(None)
ToastContext = create_context(None)


def use_backend():
    backend = hooks.use_context(BackendContext)
    if backend is None:
        raise RuntimeError("BackendContext is not provided")
    return backend


def use_session() -> Dict[str, Any]:
    return hooks.use_context(SessionContext) or {}


def use_toast() -> Callable[[str, str], None]:
    notify = hooks.use_context(ToastContext)
    if notify is None:
        return lambda kind, text: None
    return notify


def use_live_collection(
    fetch: Callable[[], Rows],
    table: str | None,
    dependencies: Sequence[Any],
    interval: float | None = None,
    key: Callable[[Dict[str, Any]], Hashable] = row_id,
) -> tuple[List[Dict[str, Any]] | None, Callable[[], None]]:
    """Rows for a component, refetched whenever ``table`` changes.

    Returns ``(rows, reload)``; rows stay ``None`` until the first fetch
    resolves. The subscription is released when the component unmounts or
    the dependencies change.
    """
    backend = use_backend()
    notify = use_toast()
    rows, set_rows = hooks.use_state(None)
    collection_ref = hooks.use_ref(None)

    @hooks.use_effect(dependencies=[table, interval, *dependencies])
    def sync():
        subscribe = functools.partial(backend.subscribe, table) if table else None
        collection = LiveCollection(
            fetch,
            set_rows,
            subscribe=subscribe,
            key=key,
            interval=interval,
            on_error=lambda exc: notify("error", "Could not refresh data. Showing the last update."),
        )
        collection_ref.current = collection
        task = asyncio.ensure_future(collection.run())

        def release() -> None:
            collection_ref.current = None
            task.cancel()
            collection.close()

        return release

    def reload() -> None:
        if collection_ref.current is not None:
            collection_ref.current.notify()

    return rows, reload
