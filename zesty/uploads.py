from __future__ import annotations

import asyncio
import re
import threading
import time
from typing import Any, Dict

from . import config

STAGING_KEY = re.compile(r"^[0-9a-f]{32}$")
MAX_STAGED_FILES = 200


class UploadStaging:
    """Photos posted by the browser, held until their form submits.

    Entries expire after a TTL and the total is bounded so abandoned forms
    cannot grow the process without limit.
    """

    def __init__(self, ttl_seconds: float | None = None, max_files: int = MAX_STAGED_FILES) -> None:
        self._ttl = config.UPLOAD_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._max_files = max_files
        self._lock = threading.Lock()
        self._files: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def valid_key(key: str) -> bool:
        return bool(STAGING_KEY.match(key or ""))

    def put(self, key: str, filename: str, content_type: str, data: bytes) -> None:
        if not self.valid_key(key):
            raise ValueError("Invalid upload key")
        now = time.monotonic()
        with self._lock:
            self._expire(now)
            if key not in self._files and len(self._files) >= self._max_files:
                oldest = min(self._files, key=lambda k: self._files[k]["staged_at"])
                self._files.pop(oldest)
            self._files[key] = {
                "filename": filename or "photo",
                "content_type": content_type or "application/octet-stream",
                "data": data,
                "size": len(data),
                "staged_at": now,
            }

    def peek(self, key: str) -> Dict[str, Any] | None:
        with self._lock:
            self._expire(time.monotonic())
            entry = self._files.get(key)
            return dict(entry) if entry else None

    def pop(self, key: str, filename: str | None = None) -> Dict[str, Any] | None:
        """Take the staged file; with ``filename``, only if it is that file."""
        with self._lock:
            self._expire(time.monotonic())
            entry = self._files.get(key)
            if entry is None or (filename is not None and entry["filename"] != filename):
                return None
            return self._files.pop(key)

    def discard(self, key: str, keep_filename: str | None = None) -> None:
        with self._lock:
            entry = self._files.get(key)
            if entry is not None and (keep_filename is None or entry["filename"] != keep_filename):
                self._files.pop(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)

    def _expire(self, now: float) -> None:
        stale = [key for key, entry in self._files.items() if now - entry["staged_at"] > self._ttl]
        for key in stale:
            self._files.pop(key, None)


async def wait_for_upload(
    staging: UploadStaging,
    key: str,
    filename: str | None = None,
    timeout: float | None = None,
    poll_seconds: float = 0.2,
) -> Dict[str, Any] | None:
    """Take the staged file for ``key``, waiting for an in-flight upload.

    With ``filename``, an earlier pick still staged under the key is left
    alone until the named file arrives.
    """
    timeout = config.UPLOAD_WAIT_SECONDS if timeout is None else timeout
    deadline = time.monotonic() + timeout
    while True:
        entry = staging.pop(key, filename)
        if entry is not None or time.monotonic() >= deadline:
            return entry
        await asyncio.sleep(poll_seconds)


STAGING = UploadStaging()
