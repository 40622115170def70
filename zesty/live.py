from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Hashable, List

from . import config

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]
Unsubscribe = Callable[[], None]
Subscribe = Callable[[Callable[[Dict[str, Any]], None]], Unsubscribe]


def row_id(row: Dict[str, Any]) -> Hashable:
    return row.get("id")


def dedupe(rows: Rows, key: Callable[[Dict[str, Any]], Hashable]) -> Rows:
    seen = set()
    unique: Rows = []
    for row in rows:
        marker = key(row)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(row)
    return unique


class LiveCollection:
    """A list kept fresh by fetch, then subscribe-and-refetch.

    Every change notification (or poll tick, when ``interval`` is set)
    triggers a full refetch that replaces the list; nothing is patched
    incrementally. A failed fetch keeps the previous list, and a failed
    subscription leaves the last snapshot (plus polling, if any) in place.
    """

    def __init__(
        self,
        fetch: Callable[[], Rows],
        on_update: Callable[[Rows], None],
        subscribe: Subscribe | None = None,
        key: Callable[[Dict[str, Any]], Hashable] = row_id,
        interval: float | None = None,
        timeout: float | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._fetch = fetch
        self._on_update = on_update
        self._subscribe = subscribe
        self._key = key
        self._interval = interval
        self._timeout = config.BACKEND_TIMEOUT_SECONDS if timeout is None else timeout
        self._on_error = on_error
        self._loop: asyncio.AbstractEventLoop | None = None
        self._changed: asyncio.Event | None = None
        self._unsubscribe: Unsubscribe | None = None
        self.rows: Rows | None = None
        self.live = False
        self.fetch_count = 0

    async def refresh(self) -> bool:
        self.fetch_count += 1
        try:
            rows = await asyncio.wait_for(asyncio.to_thread(self._fetch), self._timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Live collection fetch timed out after %.1fs", self._timeout)
            self._report(exc)
            return False
        except Exception as exc:
            logger.exception("Live collection fetch failed; keeping previous rows")
            self._report(exc)
            return False

        rows = dedupe(list(rows or []), self._key)
        if rows != self.rows:
            self.rows = rows
            self._on_update(rows)
        return True

    def notify(self, change: Dict[str, Any] | None = None) -> None:
        """Request a refetch; safe to call from any thread."""
        loop, changed = self._loop, self._changed
        if loop is None or changed is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(changed.set)

    async def run(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._changed = asyncio.Event()
        if self._subscribe is not None:
            try:
                self._unsubscribe = self._subscribe(self.notify)
                self.live = True
            except Exception as exc:
                logger.exception("Change subscription failed; showing last snapshot without live updates")
                self._report(exc)

        try:
            await self.refresh()
            if self._unsubscribe is None and self._interval is None:
                return
            while True:
                try:
                    await asyncio.wait_for(self._changed.wait(), self._interval)
                except asyncio.TimeoutError:
                    pass
                self._changed.clear()
                await self.refresh()
        finally:
            self.close()

    def close(self) -> None:
        """Release the subscription; idempotent."""
        self.live = False
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def _report(self, exc: Exception) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(exc)
        except Exception:
            logger.exception("Live collection error handler failed")
