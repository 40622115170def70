"""Root view state: one active screen plus the two messaging overlays.

Every transition is a pure function from one ``NavState`` to the next, so
the root component only ever swaps whole states and the render step can
match exhaustively on ``View``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class View(str, Enum):
    dashboard = "dashboard"
    submit_report = "submitReport"
    incident_detail = "incidentDetail"
    all_incidents = "allIncidents"
    work_schedule = "workSchedule"
    colleague_directory = "colleagueDirectory"
    account_settings = "accountSettings"


@dataclass(frozen=True)
class NavState:
    view: View = View.dashboard
    selected_incident: Optional[Dict[str, Any]] = None
    show_messaging: bool = False
    show_compose: bool = False
    compose_recipient: Optional[str] = None

    @property
    def screen(self) -> View:
        """The screen to render, falling back to the dashboard when the
        detail view has lost its incident."""
        if self.view is View.incident_detail and self.selected_incident is None:
            return View.dashboard
        return self.view


INITIAL = NavState()


def login() -> NavState:
    return INITIAL


def report_new_issue(state: NavState) -> NavState:
    return replace(state, view=View.submit_report)


def incident_selected(state: NavState, incident: Dict[str, Any]) -> NavState:
    return replace(state, view=View.incident_detail, selected_incident=incident)


def view_all_incidents(state: NavState) -> NavState:
    return replace(state, view=View.all_incidents)


def back(state: NavState) -> NavState:
    return replace(state, view=View.dashboard, selected_incident=None)


def open_messaging(state: NavState) -> NavState:
    return replace(state, show_messaging=True, show_compose=False)


def close_messaging(state: NavState) -> NavState:
    return replace(state, show_messaging=False)


def compose_new(state: NavState, recipient_id: str | None = None) -> NavState:
    return replace(state, show_messaging=False, show_compose=True, compose_recipient=recipient_id)


def close_compose(state: NavState) -> NavState:
    return replace(state, show_compose=False, compose_recipient=None)


def work_schedule(state: NavState) -> NavState:
    return replace(state, view=View.work_schedule)


def colleague_directory(state: NavState) -> NavState:
    return replace(state, view=View.colleague_directory)


def account_settings(state: NavState) -> NavState:
    return replace(state, view=View.account_settings)
