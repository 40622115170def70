from __future__ import annotations

from typing import Dict


class BackendError(RuntimeError):
    """A backend call failed: transport, HTTP status, database or timeout."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class AuthError(BackendError):
    pass


class ValidationError(ValueError):
    def __init__(self, fields: Dict[str, str]) -> None:
        super().__init__("; ".join(f"{name}: {msg}" for name, msg in fields.items()))
        self.fields = dict(fields)
