from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from . import config
from .errors import BackendError

logger = logging.getLogger(__name__)


def service_headers(access_token: str | None = None) -> Dict[str, str]:
    anon_key = config.supabase_anon_key()
    return {
        "apikey": anon_key,
        "Authorization": f"Bearer {access_token or anon_key}",
    }


def error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


def supabase_request(
    method: str,
    path: str,
    *,
    access_token: str | None = None,
    payload: Dict[str, Any] | None = None,
    params: Dict[str, str] | None = None,
    data: bytes | None = None,
    headers: Dict[str, str] | None = None,
    error_cls: type[BackendError] = BackendError,
) -> Any:
    url = f"{config.supabase_url()}{path}"
    request_headers = service_headers(access_token)
    if headers:
        request_headers.update(headers)

    try:
        response = requests.request(
            method,
            url,
            json=payload,
            params=params,
            data=data,
            headers=request_headers,
            timeout=config.BACKEND_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.exception("Backend request %s %s failed", method, path)
        raise error_cls("Backend is unavailable") from exc

    try:
        body: Any = response.json()
    except ValueError:
        body = {"raw": response.text}

    if response.status_code >= 400:
        message = error_message(body, f"Backend returned an error ({response.status_code})")
        logger.warning("Backend %s %s returned %s: %s", method, path, response.status_code, message)
        raise error_cls(message, status=response.status_code)

    return body
