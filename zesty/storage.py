from __future__ import annotations

import os
import re
import uuid

from . import config
from .rest import supabase_request

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def object_path(filename: str, folder: str = "incidents") -> str:
    base = os.path.basename(filename.replace("\\", "/")) or "photo"
    stem, ext = os.path.splitext(base)
    stem = _UNSAFE_CHARS.sub("-", stem).strip("-.")[:40] or "photo"
    ext = _UNSAFE_CHARS.sub("", ext).lower()[:10]
    return f"{folder}/{uuid.uuid4().hex}-{stem}{ext}"


def public_url(path: str, bucket: str | None = None) -> str:
    return f"{config.supabase_url()}/storage/v1/object/public/{bucket or config.STORAGE_BUCKET}/{path}"


def upload_object(
    filename: str,
    data: bytes,
    content_type: str = "application/octet-stream",
    access_token: str | None = None,
    bucket: str | None = None,
) -> str:
    bucket = bucket or config.STORAGE_BUCKET
    path = object_path(filename)
    supabase_request(
        "POST",
        f"/storage/v1/object/{bucket}/{path}",
        access_token=access_token,
        data=data,
        headers={"Content-Type": content_type or "application/octet-stream", "x-upsert": "false"},
    )
    return public_url(path, bucket)
