from __future__ import annotations

from typing import Any, Callable, Dict

from reactpy import html

from ..incidents import category_class, priority_class


def back_button(on_back: Callable[[], None], label: str = "Back to Dashboard"):
    return html.div(
        html.button({"class": "btn ghost", "type": "button", "on_click": lambda e: on_back()}, f"← {label}"),
    )


def placeholder(text: str):
    return html.div({"class": "placeholder"}, text)


def priority_badge(incident: Dict[str, Any], suffix: str = ""):
    priority = incident.get("priority") or ""
    return html.span({"class": f"pill {priority_class(priority)}"}, f"{priority}{suffix}")


def category_badge(incident: Dict[str, Any]):
    category = incident.get("category") or ""
    return html.span({"class": f"tag {category_class(category)}"}, category)


def incident_image(incident: Dict[str, Any], css_class: str):
    url = incident.get("image_url")
    if url:
        return html.img({"class": css_class, "src": url, "alt": incident.get("location") or "Incident photo"})
    return html.div({"class": f"{css_class} thumb-empty"}, "No photo")


def field_error(errors: Dict[str, str], name: str):
    message = errors.get(name)
    if not message:
        return None
    return html.div({"class": "error-text"}, message)


def event_value(event: Dict[str, Any]) -> str:
    target = event.get("target") or {}
    value = target.get("value", "")
    return "" if value is None else str(value)


def event_checked(event: Dict[str, Any]) -> bool:
    target = event.get("target") or {}
    return bool(target.get("checked"))
