from __future__ import annotations

import json
import logging
import select
import threading
from typing import Any, Callable, Dict, List

import psycopg2
import psycopg2.extensions

from . import config
from .db import CHANGE_CHANNEL

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Dict[str, Any]], None]

LISTEN_POLL_SECONDS = 5.0
MAX_RECONNECT_SECONDS = 30.0


def parse_notification(payload: str) -> Dict[str, Any] | None:
    try:
        data = json.loads(payload)
    except ValueError:
        logger.warning("Ignoring malformed change notification: %r", payload)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("table"), str):
        logger.warning("Ignoring change notification without a table: %r", payload)
        return None
    return {
        "table": data["table"],
        "type": str(data.get("type") or "").upper(),
        "id": data.get("id"),
    }


class ChangeFeed:
    """Table-level change events fanned out from one LISTEN connection.

    The listener thread starts with the first subscription. Callbacks run on
    that thread and must hand work back to their own event loop.
    """

    def __init__(self, dsn: str | None = None, channel: str = CHANGE_CHANNEL) -> None:
        self._dsn = dsn
        self._channel = channel
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[ChangeCallback]] = {}
        self._thread: threading.Thread | None = None
        self._stopping = threading.Event()

    def subscribe(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        with self._lock:
            self._subscribers.setdefault(table, []).append(callback)
        self._ensure_listener()

        released = False

        def unsubscribe() -> None:
            nonlocal released
            if released:
                return
            released = True
            with self._lock:
                callbacks = self._subscribers.get(table, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(table, None)

        return unsubscribe

    def subscriber_count(self, table: str | None = None) -> int:
        with self._lock:
            if table is not None:
                return len(self._subscribers.get(table, []))
            return sum(len(callbacks) for callbacks in self._subscribers.values())

    def dispatch(self, change: Dict[str, Any]) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(change["table"], []))
        for callback in callbacks:
            try:
                callback(change)
            except Exception:
                logger.exception("Change subscriber for %s failed", change["table"])

    def stop(self) -> None:
        self._stopping.set()

    def _ensure_listener(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stopping.clear()
            self._thread = threading.Thread(target=self._listen_forever, name="zesty-change-feed", daemon=True)
            self._thread.start()

    def _listen_forever(self) -> None:
        backoff = 1.0
        while not self._stopping.is_set():
            try:
                self._listen_once()
                backoff = 1.0
            except (psycopg2.Error, OSError, RuntimeError):
                logger.exception("Change feed connection lost; retrying in %.0fs", backoff)
                if self._stopping.wait(backoff):
                    break
                backoff = min(backoff * 2, MAX_RECONNECT_SECONDS)

    def _listen_once(self) -> None:
        conn = psycopg2.connect(self._dsn or config.database_url())
        try:
            conn.set_isolation_level(psycopg2.extensions.ISOLATION_LEVEL_AUTOCOMMIT)
            with conn.cursor() as cursor:
                cursor.execute(f"LISTEN {self._channel}")
            logger.info("Listening for table changes on %s", self._channel)
            while not self._stopping.is_set():
                readable, _, _ = select.select([conn], [], [], LISTEN_POLL_SECONDS)
                if not readable:
                    continue
                conn.poll()
                while conn.notifies:
                    notify = conn.notifies.pop(0)
                    change = parse_notification(notify.payload)
                    if change is not None:
                        self.dispatch(change)
        finally:
            conn.close()
