"""
Result values returned by store operations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Kinds of expected domain failures."""
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_INPUT = "INVALID_INPUT"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ALREADY_IN_TEAM = "ALREADY_IN_TEAM"
    TEAM_PHASE_CLOSED = "TEAM_PHASE_CLOSED"
    CAPACITY = "CAPACITY"
    INVALID_CODE = "INVALID_CODE"
    TEAM_LOCKED = "TEAM_LOCKED"
    TEAM_FULL = "TEAM_FULL"
    PHASE_CLOSED = "PHASE_CLOSED"
    NOT_IN_TEAM = "NOT_IN_TEAM"
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    LEADER_CANNOT_LEAVE = "LEADER_CANNOT_LEAVE"
    SUBMISSIONS_CLOSED = "SUBMISSIONS_CLOSED"
    TEAM_DISQUALIFIED = "TEAM_DISQUALIFIED"
    SUBMISSION_LOCKED = "SUBMISSION_LOCKED"
    SUBMISSION_NOT_FOUND = "SUBMISSION_NOT_FOUND"
    NOT_SUBMISSION_PHASE = "NOT_SUBMISSION_PHASE"
    INVALID_JUDGE = "INVALID_JUDGE"
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    NO_JUDGES = "NO_JUDGES"
    NO_SUBMISSIONS = "NO_SUBMISSIONS"
    SCORING_CLOSED = "SCORING_CLOSED"
    NOT_ASSIGNED = "NOT_ASSIGNED"
    DUPLICATE_SCORE = "DUPLICATE_SCORE"
    OUT_OF_RANGE = "OUT_OF_RANGE"


class ResultError(Exception):
    """Raised by Result.unwrap() on a failed result."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a success carrying data or a failure carrying a message."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: ErrorCode, message: str) -> "Result[T]":
        return cls(success=False, error=message, code=code)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        if not self.success:
            raise ResultError(self.code, self.error)
        return self.data
