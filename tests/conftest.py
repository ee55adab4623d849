import itertools
from datetime import datetime, timedelta, timezone

import pytest

from hackathon_store.config import EventDefaults
from hackathon_store.models import EventState, RegistrationData, SubmissionData, UserRole
from hackathon_store.storage import InMemoryStorage
from hackathon_store.store import EventStore


class FakeClock:
    """Advances one second per call so timestamps are strictly increasing."""

    def __init__(self, start=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def defaults():
    return EventDefaults(name="Test Hack", max_team_size=4, max_teams=100)


@pytest.fixture
def store(storage, defaults, clock):
    return EventStore(storage=storage, event_defaults=defaults, seed_demo=False, clock=clock)


@pytest.fixture
def advance(store):
    def _advance(*states):
        for state in states:
            store.transition(state, "admin").unwrap()
    return _advance


@pytest.fixture
def make_user(store):
    counter = itertools.count(1)

    def _make(name=None, role=UserRole.PARTICIPANT, email=None):
        n = next(counter)
        data = RegistrationData(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            role=role
        )
        return store.register(data).unwrap()
    return _make


@pytest.fixture
def make_team(store, make_user):
    def _make(name="Team", size=1):
        leader = make_user()
        team = store.create_team(name, leader.id).unwrap()
        for _ in range(size - 1):
            store.join_team(team.invite_code, make_user().id).unwrap()
        return store.get_team_by_id(team.id)
    return _make


@pytest.fixture
def submission_data():
    return SubmissionData(
        title="Smart Parking",
        problem_statement="Urban mobility",
        description="Finds free parking spots from camera feeds",
        github_url="https://github.com/example/smart-parking",
        demo_url="https://example.com/demo",
        tech_stack=["Python", "React"],
        file_name="deck.pdf",
        file_size="2.1 MB"
    )


@pytest.fixture
def judging_event(store, advance, make_user, make_team, submission_data):
    """Two teams with submissions, three judges, all assigned, judging open."""
    judges = [make_user(name=f"Judge {i}", role=UserRole.JUDGE) for i in range(1, 4)]
    teams = [make_team("Alpha", size=2), make_team("Beta", size=1)]
    advance(EventState.REGISTRATION_OPEN, EventState.SUBMISSION_OPEN)
    submissions = [
        store.create_or_update_submission(team.id, submission_data).unwrap()
        for team in teams
    ]
    advance(EventState.JUDGING_OPEN)
    store.auto_assign_judges().unwrap()
    return {"judges": judges, "teams": teams, "submissions": submissions}
