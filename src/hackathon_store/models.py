"""
Data models for the hackathon event store.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


class EventState(str, Enum):
    """Event-wide phases gating which operations are legal."""
    DRAFT = "DRAFT"
    REGISTRATION_OPEN = "REGISTRATION_OPEN"
    SUBMISSION_OPEN = "SUBMISSION_OPEN"
    JUDGING_OPEN = "JUDGING_OPEN"
    RESULTS_PUBLISHED = "RESULTS_PUBLISHED"


class UserRole(str, Enum):
    """Role tag attached to a user at creation."""
    PARTICIPANT = "participant"
    JUDGE = "judge"
    ADMIN = "admin"


class StateChange(BaseModel):
    """History record for a state the event has left."""
    state: EventState
    changed_at: datetime
    changed_by: str


class EventConfig(BaseModel):
    """Singleton event configuration and state machine position."""
    id: str
    name: str
    current_state: EventState = EventState.DRAFT
    max_team_size: int = 4
    max_teams: int = 100
    state_history: List[StateChange] = Field(default_factory=list)
    created_at: datetime


class RegistrationData(BaseModel):
    """Fields supplied by a registering user."""
    model_config = ConfigDict(extra="forbid")

    email: str
    name: str
    phone: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    role: UserRole = UserRole.PARTICIPANT

    @field_validator('skills')
    @classmethod
    def dedupe_skills(cls, v):
        # skills are set-like; keep first occurrence order
        return list(dict.fromkeys(v))


class User(RegistrationData):
    """A registered participant, judge or admin."""
    id: str
    team_id: Optional[str] = None
    created_at: datetime


class Team(BaseModel):
    """A hackathon team."""
    id: str
    name: str
    invite_code: str
    leader_id: str
    member_ids: List[str]
    submission_id: Optional[str] = None
    is_locked: bool = False
    is_disqualified: bool = False
    created_at: datetime


class SubmissionData(BaseModel):
    """Editable content of a team's project submission."""
    model_config = ConfigDict(extra="forbid")

    title: str
    problem_statement: str = ""
    description: str = ""
    github_url: str = ""
    demo_url: str = ""
    tech_stack: List[str] = Field(default_factory=list)
    file_name: str = ""
    file_size: str = ""


class Submission(SubmissionData):
    """A team's submission record."""
    id: str
    team_id: str
    submitted_at: datetime
    last_edited_at: datetime
    is_locked: bool = False


class JudgeAssignment(BaseModel):
    """Authorization for one judge to score one submission."""
    judge_id: str
    submission_id: str
    assigned_at: datetime


class ScoreValues(BaseModel):
    """Criteria and remarks entered by a judge.

    Ranges are checked by the store, not here, so that an out-of-range
    criterion comes back as a failed result instead of a validation error.
    """
    model_config = ConfigDict(extra="forbid")

    innovation: int
    execution: int
    presentation: int
    impact: int
    code_quality: int
    comments: str = ""
    flagged: bool = False


class ScoreUpdate(BaseModel):
    """Partial update of a score; unset fields are left alone."""
    model_config = ConfigDict(extra="forbid")

    innovation: Optional[int] = None
    execution: Optional[int] = None
    presentation: Optional[int] = None
    impact: Optional[int] = None
    code_quality: Optional[int] = None
    comments: Optional[str] = None
    flagged: Optional[bool] = None


class Score(ScoreValues):
    """A judge's score for a submission."""
    id: str
    judge_id: str
    submission_id: str
    submitted_at: datetime


class LeaderboardEntry(BaseModel):
    """Ranked row of the leaderboard."""
    rank: int
    team: Team
    submission: Submission
    average_score: float
    score_count: int


class JudgeProgress(BaseModel):
    """Scoring progress of a single judge."""
    judge_id: str
    judge_name: str
    done: int
    pending: int


class EventStats(BaseModel):
    """Organizer dashboard figures."""
    total_teams: int
    max_teams: int
    submitted_teams: int
    scored_submissions: int
    total_possible_scores: int
    completed_scores: int
    judging_progress: int
    judge_count: int
    judge_progress: List[JudgeProgress]
