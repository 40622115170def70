import random

from zesty import navigation
from zesty.navigation import INITIAL, NavState, View

INCIDENT = {"id": 7, "location": "Giraffe Habitat", "status": "Under Review"}


def test_initial_state_is_dashboard_without_overlays():
    assert INITIAL.view is View.dashboard
    assert INITIAL.selected_incident is None
    assert not INITIAL.show_messaging
    assert not INITIAL.show_compose


def test_login_resets_to_initial_state():
    state = navigation.open_messaging(navigation.work_schedule(INITIAL))
    assert state != INITIAL
    assert navigation.login() == INITIAL


def test_incident_selected_then_back_clears_selection():
    state = navigation.incident_selected(INITIAL, INCIDENT)
    assert state.view is View.incident_detail
    assert state.screen is View.incident_detail
    assert state.selected_incident == INCIDENT

    state = navigation.back(state)
    assert state.view is View.dashboard
    assert state.selected_incident is None


def test_detail_without_incident_falls_back_to_dashboard():
    state = NavState(view=View.incident_detail, selected_incident=None)
    assert state.screen is View.dashboard


def test_messaging_and_compose_are_mutually_exclusive():
    state = navigation.open_messaging(INITIAL)
    assert state.show_messaging and not state.show_compose

    state = navigation.compose_new(state, "user-2")
    assert state.show_compose and not state.show_messaging
    assert state.compose_recipient == "user-2"

    state = navigation.open_messaging(state)
    assert state.show_messaging and not state.show_compose

    state = navigation.close_compose(navigation.compose_new(state))
    assert not state.show_compose
    assert state.compose_recipient is None


def test_overlays_do_not_change_the_current_screen():
    state = navigation.view_all_incidents(INITIAL)
    state = navigation.open_messaging(state)
    assert state.view is View.all_incidents
    state = navigation.close_messaging(state)
    assert state.view is View.all_incidents


def test_profile_menu_destinations():
    assert navigation.work_schedule(INITIAL).view is View.work_schedule
    assert navigation.colleague_directory(INITIAL).view is View.colleague_directory
    assert navigation.account_settings(INITIAL).view is View.account_settings
    assert navigation.report_new_issue(INITIAL).view is View.submit_report


def test_view_tags_match_route_names():
    assert [view.value for view in View] == [
        "dashboard",
        "submitReport",
        "incidentDetail",
        "allIncidents",
        "workSchedule",
        "colleagueDirectory",
        "accountSettings",
    ]


def test_random_navigation_sequences_keep_state_valid():
    transitions = [
        navigation.report_new_issue,
        lambda state: navigation.incident_selected(state, INCIDENT),
        navigation.view_all_incidents,
        navigation.back,
        navigation.open_messaging,
        navigation.close_messaging,
        navigation.compose_new,
        navigation.close_compose,
        navigation.work_schedule,
        navigation.colleague_directory,
        navigation.account_settings,
    ]
    rng = random.Random(1234)
    for _ in range(200):
        state = INITIAL
        for transition in (rng.choice(transitions) for _ in range(25)):
            state = transition(state)
            assert state.screen in set(View)
            assert not (state.show_messaging and state.show_compose)
            if state.screen is View.incident_detail:
                assert state.selected_incident is not None


def test_transitions_never_mutate_their_input():
    state = navigation.incident_selected(INITIAL, INCIDENT)
    for transition in (navigation.back, navigation.open_messaging, navigation.compose_new, navigation.work_schedule):
        transition(state)
    assert state.view is View.incident_detail
    assert state.selected_incident == INCIDENT
