from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from .incidents import parse_timestamp

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def initials(name: Any) -> str:
    parts = [part for part in str(name or "").replace(".", " ").split() if part]
    if not parts:
        return "?"
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def display_name(profile: Dict[str, Any] | None, fallback: str = "Unknown colleague") -> str:
    if not profile:
        return fallback
    return profile.get("display_name") or profile.get("email") or fallback


def counterpart_of(message: Dict[str, Any], me: str) -> str:
    sender = str(message.get("sender_id"))
    receiver = str(message.get("receiver_id"))
    return receiver if sender == str(me) else sender


def _message_sort_key(message: Dict[str, Any]):
    return (parse_timestamp(message.get("created_at")) or _EPOCH, str(message.get("id") or ""))


def group_conversations(
    messages: List[Dict[str, Any]],
    me: str,
    profiles: Dict[str, Dict[str, Any]] | None = None,
) -> List[Dict[str, Any]]:
    """Group a flat message list by counterpart.

    Each thread is oldest-first; threads are ordered by their latest
    message, most recent first.
    """
    profiles = profiles or {}
    threads: Dict[str, List[Dict[str, Any]]] = {}
    for message in messages:
        threads.setdefault(counterpart_of(message, me), []).append(message)

    conversations = []
    for counterpart, thread in threads.items():
        thread = sorted(thread, key=_message_sort_key)
        last = thread[-1]
        name = display_name(profiles.get(counterpart))
        conversations.append(
            {
                "counterpart_id": counterpart,
                "name": name,
                "initials": initials(name),
                "messages": thread,
                "last_message": last,
                "last_at": last.get("created_at"),
                "incoming": sum(1 for msg in thread if str(msg.get("sender_id")) == counterpart),
            }
        )
    conversations.sort(key=lambda conv: _message_sort_key(conv["last_message"]), reverse=True)
    return conversations


def filter_conversations(conversations: List[Dict[str, Any]], query: str) -> List[Dict[str, Any]]:
    needle = query.strip().lower()
    if not needle:
        return conversations
    return [conv for conv in conversations if needle in conv["name"].lower()]


def find_conversation(conversations: List[Dict[str, Any]], counterpart_id: str | None) -> Dict[str, Any] | None:
    for conv in conversations:
        if conv["counterpart_id"] == counterpart_id:
            return conv
    return None


def search_profiles(profiles: List[Dict[str, Any]], query: str, exclude: str | None = None) -> List[Dict[str, Any]]:
    needle = query.strip().lower()
    matches = []
    for profile in profiles:
        if exclude is not None and str(profile.get("id")) == str(exclude):
            continue
        haystack = " ".join(str(profile.get(field) or "") for field in ("display_name", "role", "department")).lower()
        if not needle or needle in haystack:
            matches.append(profile)
    return matches


def message_time(value: Any, now: datetime | None = None) -> str:
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if moment.date() == now.date():
        return moment.strftime("%I:%M %p").lstrip("0")
    if (now.date() - moment.date()).days == 1:
        return "Yesterday"
    if (now.date() - moment.date()).days < 7:
        return moment.strftime("%A")
    return moment.strftime("%b %d")
