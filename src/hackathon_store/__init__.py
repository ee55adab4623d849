"""
Hackathon event store: registration, team formation, submissions, judging and
leaderboard, gated by an event-wide phase state machine.
"""

from .models import (
    EventConfig, EventState, EventStats, JudgeAssignment, JudgeProgress,
    LeaderboardEntry, RegistrationData, Score, ScoreUpdate, ScoreValues,
    StateChange, Submission, SubmissionData, Team, User, UserRole
)
from .results import ErrorCode, Result, ResultError
from .storage import InMemoryStorage, JSONFileStorage, KeyValueStorage, StorageError
from .store import EventStore

__version__ = "0.1.0"

__all__ = [
    "EventConfig", "EventState", "EventStats", "JudgeAssignment", "JudgeProgress",
    "LeaderboardEntry", "RegistrationData", "Score", "ScoreUpdate", "ScoreValues",
    "StateChange", "Submission", "SubmissionData", "Team", "User", "UserRole",
    "ErrorCode", "Result", "ResultError",
    "InMemoryStorage", "JSONFileStorage", "KeyValueStorage", "StorageError",
    "EventStore",
]
