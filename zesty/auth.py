from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List

from .errors import AuthError, BackendError
from .rest import supabase_request

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"

REFRESH_MARGIN_SECONDS = 60

AuthListener = Callable[[str, Dict[str, Any] | None], None]


def session_from_token_response(body: Dict[str, Any], now: float | None = None) -> Dict[str, Any]:
    if not body.get("access_token") or not isinstance(body.get("user"), dict):
        raise AuthError("Sign-in response did not include a session")
    issued = time.time() if now is None else now
    expires_at = body.get("expires_at")
    if expires_at is None:
        expires_at = issued + float(body.get("expires_in") or 3600)
    user = body["user"]
    return {
        "access_token": body["access_token"],
        "refresh_token": body.get("refresh_token") or "",
        "expires_at": float(expires_at),
        "user": {
            "id": user.get("id"),
            "email": user.get("email") or "",
            "metadata": user.get("user_metadata") or {},
        },
    }


class AuthSession:
    """One browser connection's authentication state.

    Mirrors the backend's auth client: password sign-in/sign-up, sign-out,
    current session with transparent refresh, and session-change listeners.
    """

    def __init__(self) -> None:
        self._session: Dict[str, Any] | None = None
        self._listeners: List[AuthListener] = []
        self._lock = threading.Lock()

    def on_change(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
            session = self._session
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth listener failed for %s", event)

    def _set_session(self, session: Dict[str, Any] | None, event: str) -> None:
        with self._lock:
            self._session = session
        self._emit(event)

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        body = supabase_request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            payload={"email": email.strip(), "password": password},
            error_cls=AuthError,
        )
        session = session_from_token_response(body)
        self._set_session(session, SIGNED_IN)
        logger.info("User %s signed in", session["user"]["id"])
        return session

    def sign_up(self, email: str, password: str, display_name: str = "") -> Dict[str, Any] | None:
        body = supabase_request(
            "POST",
            "/auth/v1/signup",
            payload={
                "email": email.strip(),
                "password": password,
                "data": {"display_name": display_name.strip()},
            },
            error_cls=AuthError,
        )
        # Projects requiring email confirmation return the user without a session.
        if not body.get("access_token"):
            return None
        session = session_from_token_response(body)
        self._set_session(session, SIGNED_IN)
        return session

    def sign_out(self) -> None:
        session = self._session
        if session is None:
            return
        try:
            supabase_request(
                "POST",
                "/auth/v1/logout",
                access_token=session["access_token"],
                error_cls=AuthError,
            )
        except BackendError:
            logger.warning("Remote sign-out failed; clearing local session anyway", exc_info=True)
        self._set_session(None, SIGNED_OUT)

    def get_session(self) -> Dict[str, Any] | None:
        session = self._session
        if session is None:
            return None
        if session["expires_at"] - time.time() > REFRESH_MARGIN_SECONDS:
            return session
        return self.refresh()

    def refresh(self) -> Dict[str, Any] | None:
        session = self._session
        if session is None or not session.get("refresh_token"):
            return None
        try:
            body = supabase_request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "refresh_token"},
                payload={"refresh_token": session["refresh_token"]},
                error_cls=AuthError,
            )
        except AuthError:
            logger.warning("Session refresh failed; signing out", exc_info=True)
            self._set_session(None, SIGNED_OUT)
            return None
        refreshed = session_from_token_response(body)
        self._set_session(refreshed, TOKEN_REFRESHED)
        return refreshed

    def access_token(self) -> str | None:
        session = self.get_session()
        return session["access_token"] if session else None

    def update_password(self, new_password: str) -> None:
        token = self.access_token()
        if token is None:
            raise AuthError("Not signed in")
        supabase_request(
            "PUT",
            "/auth/v1/user",
            access_token=token,
            payload={"password": new_password},
            error_cls=AuthError,
        )
        self._emit(USER_UPDATED)
