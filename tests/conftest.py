from __future__ import annotations

import itertools
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

import pytest

from zesty.errors import BackendError

NOW = datetime(2026, 3, 4, 15, 0, tzinfo=timezone.utc)


class FakeBackend:
    """In-memory stand-in for ``zesty.backend.Backend``."""

    def __init__(self) -> None:
        self.incidents: List[Dict[str, Any]] = []
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.messages: List[Dict[str, Any]] = []
        self.shifts: List[Dict[str, Any]] = []
        self.uploads: List[Dict[str, Any]] = []
        self.subscribers: Dict[str, List[Callable]] = {}
        self.calls: List[str] = []
        self.fail: set[str] = set()
        self._ids = itertools.count(1)

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise BackendError(f"{name} failed", status=500)

    def list_incidents(self, exclude_status=None, limit=None):
        self._call("list_incidents")
        rows = [
            row for row in self.incidents
            if exclude_status is None or (row.get("status") or "").strip().lower() != exclude_status.strip().lower()
        ]
        rows = sorted(rows, key=lambda row: row["created_at"], reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [dict(row) for row in rows]

    def get_incident(self, incident_id):
        self._call("get_incident")
        return next((dict(row) for row in self.incidents if row["id"] == incident_id), None)

    def insert_incident(self, payload):
        self._call("insert_incident")
        row = {"id": next(self._ids), **payload}
        self.incidents.append(row)
        return dict(row)

    def update_incident_status(self, incident_id, status):
        self._call("update_incident_status")
        for row in self.incidents:
            if row["id"] == incident_id:
                row["status"] = status
                return dict(row)
        return None

    def get_profile(self, user_id):
        self._call("get_profile")
        profile = self.profiles.get(user_id)
        return dict(profile) if profile else None

    def list_profiles(self):
        self._call("list_profiles")
        return [dict(profile) for profile in self.profiles.values()]

    def upsert_profile(self, user_id, payload):
        self._call("upsert_profile")
        profile = {**self.profiles.get(user_id, {"id": user_id}), **payload}
        self.profiles[user_id] = profile
        return dict(profile)

    def list_messages(self, user_id):
        self._call("list_messages")
        return [dict(msg) for msg in self.messages if user_id in (msg["sender_id"], msg["receiver_id"])]

    def insert_message(self, sender_id, receiver_id, content):
        self._call("insert_message")
        row = {
            "id": next(self._ids),
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "content": content,
            "created_at": NOW,
        }
        self.messages.append(row)
        return dict(row)

    def list_shifts(self, user_id):
        self._call("list_shifts")
        return [dict(shift) for shift in self.shifts if shift["profile_id"] == user_id]

    def upload_image(self, filename, data, content_type="application/octet-stream", access_token=None):
        self._call("upload_image")
        self.uploads.append({"filename": filename, "data": data, "content_type": content_type, "token": access_token})
        return f"https://cdn.example/{filename}"

    def auth_session(self):
        self._call("auth_session")
        return FakeAuth()

    def subscribe(self, table, callback):
        self._call("subscribe")
        self.subscribers.setdefault(table, []).append(callback)

        def unsubscribe():
            if callback in self.subscribers.get(table, []):
                self.subscribers[table].remove(callback)

        return unsubscribe


class FakeAuth:
    """Signed-out auth session that only tracks listeners."""

    def __init__(self) -> None:
        self.listeners: List[Callable] = []

    def on_change(self, listener):
        self.listeners.append(listener)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def supabase_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://zoo.supabase.test/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else str(body))
        self.content = self.text.encode()

    def json(self):
        if self._body is None:
            raise ValueError("no json body")
        return self._body


@pytest.fixture
def http(monkeypatch):
    """Record ``requests.request`` calls and answer from a queue."""
    import requests

    calls: List[Dict[str, Any]] = []
    responses: List[FakeResponse] = []

    def fake_request(method, url, **kwargs):
        calls.append({"method": method, "url": url, **kwargs})
        if not responses:
            return FakeResponse(200, {})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests, "request", fake_request)
    return {"calls": calls, "responses": responses}
