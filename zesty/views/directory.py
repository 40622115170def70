from __future__ import annotations

from typing import Any, Callable, Dict, List

from reactpy import component, hooks, html

from ..conversations import display_name, initials, search_profiles
from ..hooks import use_backend, use_live_collection, use_session
from .common import back_button, event_value, placeholder

ALL_DEPARTMENTS = "All Departments"


def departments(profiles: List[Dict[str, Any]]) -> List[str]:
    return sorted({profile["department"] for profile in profiles if profile.get("department")})


def filter_directory(
    profiles: List[Dict[str, Any]],
    query: str,
    department: str,
    exclude: str | None = None,
) -> List[Dict[str, Any]]:
    matches = search_profiles(profiles, query, exclude=exclude)
    if department and department != ALL_DEPARTMENTS:
        matches = [profile for profile in matches if profile.get("department") == department]
    return matches


def person_card(profile: Dict[str, Any], on_message: Callable[[str], None]):
    name = display_name(profile)
    email = profile.get("email")
    phone = profile.get("phone")
    return html.div(
        {"key": str(profile.get("id")), "class": "person"},
        html.div(
            {"class": "person-head"},
            html.span({"class": "avatar"}, initials(name)),
            html.div(
                html.strong(name),
                html.div({"class": "meta"}, profile.get("role") or "Staff"),
            ),
        ),
        html.div({"class": "meta"}, profile.get("department") or "No department"),
        html.div(html.a({"class": "link", "href": f"mailto:{email}"}, email)) if email else None,
        html.div(html.a({"class": "link", "href": f"tel:{phone}"}, phone)) if phone else None,
        html.button(
            {"class": "btn primary block", "on_click": lambda e: on_message(str(profile.get("id")))},
            "Message",
        ),
    )


@component
def ColleagueDirectoryPage(on_back: Callable[[], None], on_message: Callable[[str], None]):
    backend = use_backend()
    session = use_session()
    profiles, _ = use_live_collection(lambda: backend.list_profiles(), "profiles", [])
    query, set_query = hooks.use_state("")
    department, set_department = hooks.use_state(ALL_DEPARTMENTS)

    if profiles is None:
        body = placeholder("Loading colleagues…")
    else:
        people = filter_directory(profiles, query, department, exclude=session.get("user_id"))
        if people:
            body = html.div({"class": "people"}, [person_card(profile, on_message) for profile in people])
        else:
            body = placeholder("No colleagues match your search.")

    return html.div(
        {"class": "page"},
        back_button(on_back),
        html.div(
            {"class": "section-head"},
            html.div(
                html.div({"class": "eyebrow"}, "Team"),
                html.h1("Colleague Directory"),
            ),
        ),
        html.div(
            {"class": "card grid-2"},
            html.input(
                {
                    "class": "input",
                    "placeholder": "Search by name, role, or department",
                    "default_value": query,
                    "on_change": lambda e: set_query(event_value(e)),
                }
            ),
            html.select(
                {"class": "select", "value": department, "on_change": lambda e: set_department(event_value(e))},
                [
                    html.option({"key": option, "value": option}, option)
                    for option in [ALL_DEPARTMENTS, *departments(profiles or [])]
                ],
            ),
        ),
        body,
    )
