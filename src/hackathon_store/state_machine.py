"""
Event phase transition table.
"""
from typing import Dict, List

from .models import EventState

VALID_TRANSITIONS: Dict[EventState, List[EventState]] = {
    EventState.DRAFT: [EventState.REGISTRATION_OPEN],
    EventState.REGISTRATION_OPEN: [EventState.SUBMISSION_OPEN, EventState.DRAFT],
    EventState.SUBMISSION_OPEN: [EventState.JUDGING_OPEN, EventState.REGISTRATION_OPEN],
    EventState.JUDGING_OPEN: [EventState.RESULTS_PUBLISHED, EventState.SUBMISSION_OPEN],
    # back to DRAFT starts a new event cycle
    EventState.RESULTS_PUBLISHED: [EventState.DRAFT],
}

REGISTRATION_STATES = (EventState.DRAFT, EventState.REGISTRATION_OPEN)
TEAM_CHANGE_CLOSED_STATES = (EventState.JUDGING_OPEN, EventState.RESULTS_PUBLISHED)


def allowed_transitions(current: EventState) -> List[EventState]:
    """Return the states reachable from ``current`` in one step."""
    return list(VALID_TRANSITIONS[current])


def is_valid_transition(current: EventState, new_state: EventState) -> bool:
    return new_state in VALID_TRANSITIONS[current]


def locks_submissions(current: EventState, new_state: EventState) -> bool:
    """Whether moving from ``current`` to ``new_state`` freezes every submission."""
    return current == EventState.SUBMISSION_OPEN and new_state == EventState.JUDGING_OPEN
