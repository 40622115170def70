from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List

from . import storage
from .auth import AuthSession
from .changes import ChangeCallback, ChangeFeed
from .db import fetch_all_rows, fetch_one

logger = logging.getLogger(__name__)

INCIDENT_COLUMNS = (
    "id, location, category, priority, description, detailed_description, image_url, "
    "status, reported_by, reporter_id, created_at"
)
PROFILE_COLUMNS = "id, display_name, role, department, phone, email, preferences, updated_at"
PROFILE_FIELDS = ("display_name", "role", "department", "phone", "email", "preferences")


class Backend:
    """Request/response and change-feed access to the hosted backend.

    Rows live in the backend's Postgres, auth and object storage behind its
    REST API. Every read is a single-table, single round-trip query.
    """

    def __init__(self, changes: ChangeFeed | None = None) -> None:
        self.changes = changes or ChangeFeed()

    # reads

    def list_incidents(
        self,
        exclude_status: str | None = None,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        query = f"SELECT {INCIDENT_COLUMNS} FROM incidents"
        params: List[Any] = []
        if exclude_status is not None:
            query += " WHERE lower(btrim(coalesce(status, ''))) <> lower(btrim(?))"
            params.append(exclude_status)
        query += " ORDER BY created_at DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        return fetch_all_rows(query, params)

    def get_incident(self, incident_id: Any) -> Dict[str, Any] | None:
        return fetch_one(f"SELECT {INCIDENT_COLUMNS} FROM incidents WHERE id = ?", (incident_id,))

    def get_profile(self, user_id: str) -> Dict[str, Any] | None:
        return fetch_one(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = ?", (user_id,))

    def list_profiles(self) -> List[Dict[str, Any]]:
        return fetch_all_rows(f"SELECT {PROFILE_COLUMNS} FROM profiles ORDER BY display_name, id")

    def list_messages(self, user_id: str) -> List[Dict[str, Any]]:
        return fetch_all_rows(
            "SELECT id, sender_id, receiver_id, content, created_at FROM messages "
            "WHERE sender_id = ? OR receiver_id = ? ORDER BY created_at, id",
            (user_id, user_id),
        )

    def list_shifts(self, user_id: str) -> List[Dict[str, Any]]:
        return fetch_all_rows(
            "SELECT id, profile_id, starts_at, ends_at, location, role FROM shifts "
            "WHERE profile_id = ? ORDER BY starts_at",
            (user_id,),
        )

    # writes

    def insert_incident(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        columns = [
            "location",
            "category",
            "priority",
            "description",
            "detailed_description",
            "image_url",
            "status",
            "reported_by",
            "reporter_id",
            "created_at",
        ]
        data = {column: payload.get(column) for column in columns if column in payload}
        placeholders = ", ".join("?" for _ in data)
        row = fetch_one(
            f"INSERT INTO incidents ({', '.join(data)}) VALUES ({placeholders}) RETURNING {INCIDENT_COLUMNS}",
            list(data.values()),
        )
        logger.info("Incident %s reported at %s", row and row.get("id"), data.get("location"))
        return row or {}

    def update_incident_status(self, incident_id: Any, status: str) -> Dict[str, Any] | None:
        return fetch_one(
            f"UPDATE incidents SET status = ? WHERE id = ? RETURNING {INCIDENT_COLUMNS}",
            (status, incident_id),
        )

    def upsert_profile(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = {field: payload[field] for field in PROFILE_FIELDS if field in payload}
        if "preferences" in data:
            data["preferences"] = json.dumps(data["preferences"] or {})
        columns = ["id", *data]
        placeholders = ", ".join("?" for _ in columns)
        assignments = ", ".join(f"{column} = EXCLUDED.{column}" for column in data)
        assignments = f"{assignments}, updated_at = now()" if assignments else "updated_at = now()"
        row = fetch_one(
            f"INSERT INTO profiles ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT (id) DO UPDATE SET {assignments} RETURNING {PROFILE_COLUMNS}",
            [user_id, *data.values()],
        )
        return row or {}

    def insert_message(self, sender_id: str, receiver_id: str, content: str) -> Dict[str, Any]:
        row = fetch_one(
            "INSERT INTO messages (sender_id, receiver_id, content) VALUES (?, ?, ?) "
            "RETURNING id, sender_id, receiver_id, content, created_at",
            (sender_id, receiver_id, content),
        )
        return row or {}

    def upload_image(
        self,
        filename: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        access_token: str | None = None,
    ) -> str:
        return storage.upload_object(filename, data, content_type, access_token=access_token)

    # auth

    def auth_session(self) -> AuthSession:
        return AuthSession()

    # change notifications

    def subscribe(self, table: str, callback: ChangeCallback) -> Callable[[], None]:
        return self.changes.subscribe(table, callback)


_BACKEND: Backend | None = None


def get_backend() -> Backend:
    global _BACKEND
    if _BACKEND is None:
        _BACKEND = Backend()
    return _BACKEND
