"""
Hackathon event store: state-machine-gated registration, teams, submissions,
judging and leaderboard.

All mutations validate first, then write, then persist every collection.
Expected domain failures come back as failed ``Result`` values.
"""
import logging
import re
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from .config import EventDefaults, config
from .demo import build_demo_dataset
from .exporter import CSVExporter
from .models import (
    EventConfig, EventState, EventStats, JudgeAssignment, JudgeProgress,
    LeaderboardEntry, RegistrationData, Score, ScoreUpdate, ScoreValues,
    StateChange, Submission, SubmissionData, Team, User, UserRole
)
from .results import ErrorCode, Result
from .scoring import calculate_average, calculate_total_score, rank_leaderboard, validate_criteria
from .state_machine import (
    REGISTRATION_STATES, TEAM_CHANGE_CLOSED_STATES, allowed_transitions,
    is_valid_transition, locks_submissions
)
from .storage import KeyValueStorage, StorageKeys, build_storage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits

_USERS = TypeAdapter(List[User])
_TEAMS = TypeAdapter(List[Team])
_SUBMISSIONS = TypeAdapter(List[Submission])
_ASSIGNMENTS = TypeAdapter(List[JudgeAssignment])
_SCORES = TypeAdapter(List[Score])
_USER_ID = TypeAdapter(Optional[str])


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def generate_id() -> str:
    """Millisecond timestamp in base 36 followed by 9 random characters."""
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return _to_base36(int(time.time() * 1000)) + suffix


def generate_invite_code(team_name: str) -> str:
    """'Code Ninjas' -> 'CODEN-7QX2'"""
    prefix = re.sub(r"\s+", "", team_name.upper())[:5]
    suffix = "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(4))
    return f"{prefix}-{suffix}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce(model_cls: Type[M], data: Union[BaseModel, Mapping[str, Any]]) -> M:
    # unset fields stay unset so partial edits only touch what was given;
    # unknown mapping keys are rejected by the payload models
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True, include=set(model_cls.model_fields))
    return model_cls.model_validate(data)


def _copy(model: Optional[M]) -> Optional[M]:
    return model.model_copy(deep=True) if model is not None else None


def _invalid_input(what: str, error: ValidationError) -> Result:
    fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in error.errors())
    return Result.fail(ErrorCode.INVALID_INPUT, f"Invalid {what}: {fields}")


class EventStore:
    """Owns all event state and exposes its operations.

    Construct one per process or per test and pass it to callers. Not thread
    safe: every call is expected to run to completion before the next.
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None,
                 event_defaults: Optional[EventDefaults] = None,
                 seed_demo: Optional[bool] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage if storage is not None else build_storage(config.storage)
        self.event_defaults = event_defaults or config.event
        self.seed_demo = config.storage.seed_demo_data if seed_demo is None else seed_demo
        self.clock = clock or utc_now

        self._load()

        if not self._users and self.seed_demo:
            self._seed_demo_data()

    # ----- persistence -----

    def _default_config(self) -> EventConfig:
        return EventConfig(
            id=generate_id(),
            name=self.event_defaults.name,
            current_state=EventState.DRAFT,
            max_team_size=self.event_defaults.max_team_size,
            max_teams=self.event_defaults.max_teams,
            created_at=self.clock()
        )

    def _load(self) -> None:
        """Load every collection, falling back to defaults per key."""
        load = self.storage.load_json
        self._config: EventConfig = load(StorageKeys.CONFIG, self._default_config, EventConfig.model_validate)
        self._users: Dict[str, User] = {
            u.id: u for u in load(StorageKeys.USERS, list, _USERS.validate_python)
        }
        self._teams: Dict[str, Team] = {
            t.id: t for t in load(StorageKeys.TEAMS, list, _TEAMS.validate_python)
        }
        self._submissions: Dict[str, Submission] = {
            s.id: s for s in load(StorageKeys.SUBMISSIONS, list, _SUBMISSIONS.validate_python)
        }
        self._judge_assignments: List[JudgeAssignment] = load(
            StorageKeys.JUDGE_ASSIGNMENTS, list, _ASSIGNMENTS.validate_python
        )
        self._scores: Dict[str, Score] = {
            s.id: s for s in load(StorageKeys.SCORES, list, _SCORES.validate_python)
        }
        self._current_user_id: Optional[str] = load(
            StorageKeys.CURRENT_USER, lambda: None, _USER_ID.validate_python
        )

        logger.debug(
            f"Loaded {len(self._users)} users, {len(self._teams)} teams, "
            f"{len(self._submissions)} submissions, {len(self._scores)} scores"
        )

    def _persist(self) -> None:
        """Write every collection back to storage."""
        save = self.storage.save_json
        save(StorageKeys.CONFIG, self._config.model_dump(mode="json"))
        save(StorageKeys.USERS, [u.model_dump(mode="json") for u in self._users.values()])
        save(StorageKeys.TEAMS, [t.model_dump(mode="json") for t in self._teams.values()])
        save(StorageKeys.SUBMISSIONS, [s.model_dump(mode="json") for s in self._submissions.values()])
        save(StorageKeys.JUDGE_ASSIGNMENTS, [a.model_dump(mode="json") for a in self._judge_assignments])
        save(StorageKeys.SCORES, [s.model_dump(mode="json") for s in self._scores.values()])
        save(StorageKeys.CURRENT_USER, self._current_user_id)

    def _seed_demo_data(self) -> None:
        dataset = build_demo_dataset(self.clock(), self._allocate_invite_code)
        for user in dataset.users:
            self._users[user.id] = user
        for team in dataset.teams:
            self._teams[team.id] = team
        self._persist()
        logger.info(f"Seeded demo data: {len(dataset.users)} users, {len(dataset.teams)} teams")

    def reset_all_data(self, seed_demo: bool = True) -> None:
        """Clear every persisted key and start over from a fresh DRAFT event."""
        for key in StorageKeys.ALL:
            self.storage.remove(key)

        self._config = self._default_config()
        self._users = {}
        self._teams = {}
        self._submissions = {}
        self._judge_assignments = []
        self._scores = {}
        self._current_user_id = None

        if seed_demo:
            self._seed_demo_data()
        else:
            self._persist()
        logger.info("All event data reset")

    # ----- config & state -----

    def get_config(self) -> EventConfig:
        return _copy(self._config)

    def get_current_state(self) -> EventState:
        return self._config.current_state

    def get_allowed_transitions(self) -> List[EventState]:
        return allowed_transitions(self._config.current_state)

    def transition(self, new_state: Union[EventState, str], actor_id: str) -> Result[EventState]:
        """Move the event to ``new_state`` if the transition table allows it."""
        current = self._config.current_state
        allowed = ", ".join(s.value for s in allowed_transitions(current))

        try:
            target = EventState(new_state)
        except ValueError:
            return Result.fail(
                ErrorCode.INVALID_TRANSITION,
                f"Unknown state {new_state}. Valid transitions: {allowed}"
            )

        if not is_valid_transition(current, target):
            return Result.fail(
                ErrorCode.INVALID_TRANSITION,
                f"Cannot transition from {current.value} to {target.value}. Valid transitions: {allowed}"
            )

        if locks_submissions(current, target):
            for submission in self._submissions.values():
                submission.is_locked = True
            logger.info(f"Locked {len(self._submissions)} submissions for judging")

        self._config.state_history.append(StateChange(
            state=current,
            changed_at=self.clock(),
            changed_by=actor_id
        ))
        self._config.current_state = target
        self._persist()

        logger.info(f"Event state {current.value} -> {target.value} by {actor_id}")
        return Result.ok(target)

    # ----- users & session -----

    def _find_user_by_email(self, email: str) -> Optional[User]:
        # exact, case-sensitive match
        return next((u for u in self._users.values() if u.email == email), None)

    def get_current_user(self) -> Optional[User]:
        if not self._current_user_id:
            return None
        return _copy(self._users.get(self._current_user_id))

    def set_current_user(self, user_id: Optional[str]) -> None:
        """Switch the active session user without a lookup."""
        self._current_user_id = user_id
        self._persist()

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return _copy(self._users.get(user_id))

    def get_user_by_email(self, email: str) -> Optional[User]:
        return _copy(self._find_user_by_email(email))

    def get_all_users(self) -> List[User]:
        return [_copy(u) for u in self._users.values()]

    def get_participants(self) -> List[User]:
        return [_copy(u) for u in self._users.values() if u.role == UserRole.PARTICIPANT]

    def get_judges(self) -> List[User]:
        return [_copy(u) for u in self._users.values() if u.role == UserRole.JUDGE]

    def register(self, data: Union[RegistrationData, Mapping[str, Any]]) -> Result[User]:
        """Create a user and make it the active session user."""
        if self._config.current_state not in REGISTRATION_STATES:
            return Result.fail(ErrorCode.REGISTRATION_CLOSED, "Registration is closed")

        try:
            payload = _coerce(RegistrationData, data)
        except ValidationError as e:
            return _invalid_input("registration", e)

        if self._find_user_by_email(payload.email):
            return Result.fail(ErrorCode.DUPLICATE_EMAIL, "Email already registered")

        user = User(
            **payload.model_dump(),
            id=generate_id(),
            team_id=None,
            created_at=self.clock()
        )
        self._users[user.id] = user
        self._current_user_id = user.id
        self._persist()

        logger.info(f"Registered {user.role.value} {user.email} ({user.id})")
        return Result.ok(_copy(user))

    def login(self, email: str) -> Result[User]:
        """Identity lookup by email; no credential check."""
        user = self._find_user_by_email(email)
        if not user:
            return Result.fail(ErrorCode.NOT_FOUND, "User not found")

        self._current_user_id = user.id
        self._persist()
        return Result.ok(_copy(user))

    def logout(self) -> None:
        """Clear the active session user."""
        self._current_user_id = None
        self._persist()

    # ----- teams -----

    def get_team_by_id(self, team_id: str) -> Optional[Team]:
        return _copy(self._teams.get(team_id))

    def _find_team_by_invite_code(self, code: str) -> Optional[Team]:
        return next((t for t in self._teams.values() if t.invite_code == code), None)

    def get_team_by_invite_code(self, code: str) -> Optional[Team]:
        """Exact match on the invite code."""
        return _copy(self._find_team_by_invite_code(code))

    def get_all_teams(self) -> List[Team]:
        return [_copy(t) for t in self._teams.values()]

    def get_team_members(self, team_id: str) -> List[User]:
        """Members in join order; ids without a user are skipped."""
        team = self._teams.get(team_id)
        if not team:
            return []
        return [_copy(self._users[uid]) for uid in team.member_ids if uid in self._users]

    def _allocate_invite_code(self, team_name: str) -> str:
        existing = {t.invite_code for t in self._teams.values()}
        code = generate_invite_code(team_name)
        while code in existing:
            code = generate_invite_code(team_name)
        return code

    def create_team(self, name: str, leader_id: str) -> Result[Team]:
        """Create a team with ``leader_id`` as its only member."""
        leader = self._users.get(leader_id)
        if not leader:
            return Result.fail(ErrorCode.USER_NOT_FOUND, "User not found")

        if leader.team_id:
            return Result.fail(ErrorCode.ALREADY_IN_TEAM, "You are already in a team")

        if self._config.current_state not in REGISTRATION_STATES:
            return Result.fail(ErrorCode.TEAM_PHASE_CLOSED, "Team creation is closed")

        if len(self._teams) >= self._config.max_teams:
            return Result.fail(ErrorCode.CAPACITY, "Maximum number of teams reached")

        if not name or not name.strip():
            return Result.fail(ErrorCode.INVALID_INPUT, "Team name is required")

        team = Team(
            id=generate_id(),
            name=name.strip(),
            invite_code=self._allocate_invite_code(name),
            leader_id=leader_id,
            member_ids=[leader_id],
            created_at=self.clock()
        )
        self._teams[team.id] = team
        leader.team_id = team.id
        self._persist()

        logger.info(f"Team '{team.name}' created by {leader_id} with code {team.invite_code}")
        return Result.ok(_copy(team))

    def join_team(self, invite_code: str, user_id: str) -> Result[Team]:
        """Add a user to the team holding ``invite_code``."""
        user = self._users.get(user_id)
        if not user:
            return Result.fail(ErrorCode.USER_NOT_FOUND, "User not found")

        if user.team_id:
            return Result.fail(
                ErrorCode.ALREADY_IN_TEAM,
                "You are already in a team. Leave your current team first."
            )

        team = self._find_team_by_invite_code(invite_code)
        if not team:
            return Result.fail(ErrorCode.INVALID_CODE, "Invalid invite code")

        if team.is_locked:
            return Result.fail(ErrorCode.TEAM_LOCKED, "This team is locked and cannot accept new members")

        if len(team.member_ids) >= self._config.max_team_size:
            return Result.fail(ErrorCode.TEAM_FULL, f"Team is full (max {self._config.max_team_size} members)")

        if self._config.current_state in TEAM_CHANGE_CLOSED_STATES:
            return Result.fail(ErrorCode.PHASE_CLOSED, "Team changes are no longer allowed")

        team.member_ids.append(user_id)
        user.team_id = team.id
        self._persist()

        logger.info(f"User {user_id} joined team '{team.name}'")
        return Result.ok(_copy(team))

    def leave_team(self, user_id: str) -> Result[None]:
        """Remove a user from their team; an emptied team is deleted."""
        user = self._users.get(user_id)
        if not user or not user.team_id:
            return Result.fail(ErrorCode.NOT_IN_TEAM, "You are not in a team")

        team = self._teams.get(user.team_id)
        if not team:
            return Result.fail(ErrorCode.TEAM_NOT_FOUND, "Team not found")

        if team.is_locked:
            return Result.fail(ErrorCode.TEAM_LOCKED, "Cannot leave team after submission")

        if team.leader_id == user_id and len(team.member_ids) > 1:
            return Result.fail(
                ErrorCode.LEADER_CANNOT_LEAVE,
                "Team leader cannot leave while team has other members. Transfer leadership first."
            )

        team.member_ids = [uid for uid in team.member_ids if uid != user_id]
        user.team_id = None

        if not team.member_ids:
            del self._teams[team.id]
            logger.info(f"Team '{team.name}' deleted after last member left")

        self._persist()
        return Result.ok(None)

    def _set_disqualified(self, team_id: str, disqualified: bool) -> Result[Team]:
        team = self._teams.get(team_id)
        if not team:
            return Result.fail(ErrorCode.TEAM_NOT_FOUND, "Team not found")

        team.is_disqualified = disqualified
        self._persist()

        logger.info(f"Team '{team.name}' {'disqualified' if disqualified else 'reinstated'}")
        return Result.ok(_copy(team))

    def disqualify_team(self, team_id: str) -> Result[Team]:
        """Exclude a team from judging and the leaderboard."""
        return self._set_disqualified(team_id, True)

    def reinstate_team(self, team_id: str) -> Result[Team]:
        """Undo a disqualification."""
        return self._set_disqualified(team_id, False)

    # ----- submissions -----

    def get_submission_by_id(self, submission_id: str) -> Optional[Submission]:
        return _copy(self._submissions.get(submission_id))

    def _find_submission_by_team(self, team_id: str) -> Optional[Submission]:
        return next((s for s in self._submissions.values() if s.team_id == team_id), None)

    def get_submission_by_team(self, team_id: str) -> Optional[Submission]:
        """A team has at most one submission."""
        return _copy(self._find_submission_by_team(team_id))

    def get_all_submissions(self) -> List[Submission]:
        return [_copy(s) for s in self._submissions.values()]

    def create_or_update_submission(self, team_id: str,
                                    data: Union[SubmissionData, Mapping[str, Any]]) -> Result[Submission]:
        """Create the team's submission, or edit it if one exists.

        Creating locks the team's membership. Editing only touches the fields
        that were supplied and ``last_edited_at``.
        """
        if self._config.current_state != EventState.SUBMISSION_OPEN:
            return Result.fail(ErrorCode.SUBMISSIONS_CLOSED, "Submissions are not currently open")

        team = self._teams.get(team_id)
        if not team:
            return Result.fail(ErrorCode.TEAM_NOT_FOUND, "Team not found")

        if team.is_disqualified:
            return Result.fail(ErrorCode.TEAM_DISQUALIFIED, "Your team has been disqualified")

        try:
            payload = _coerce(SubmissionData, data)
        except ValidationError as e:
            return _invalid_input("submission", e)

        now = self.clock()
        existing = self._find_submission_by_team(team_id)

        if existing:
            if existing.is_locked:
                return Result.fail(ErrorCode.SUBMISSION_LOCKED, "Submission is locked and cannot be edited")

            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(existing, field, value)
            existing.last_edited_at = now
            self._persist()

            logger.info(f"Submission {existing.id} updated by team '{team.name}'")
            return Result.ok(_copy(existing))

        submission = Submission(
            **payload.model_dump(),
            id=generate_id(),
            team_id=team_id,
            submitted_at=now,
            last_edited_at=now,
            is_locked=False
        )
        self._submissions[submission.id] = submission
        team.submission_id = submission.id
        team.is_locked = True
        self._persist()

        logger.info(f"Submission {submission.id} created by team '{team.name}'; team locked")
        return Result.ok(_copy(submission))

    def lock_submission(self, submission_id: str) -> Result[Submission]:
        """Freeze a submission against further edits."""
        submission = self._submissions.get(submission_id)
        if not submission:
            return Result.fail(ErrorCode.SUBMISSION_NOT_FOUND, "Submission not found")

        submission.is_locked = True
        self._persist()
        return Result.ok(_copy(submission))

    def unlock_submission(self, submission_id: str) -> Result[Submission]:
        """Reopen a submission for edits; only while submissions are open."""
        submission = self._submissions.get(submission_id)
        if not submission:
            return Result.fail(ErrorCode.SUBMISSION_NOT_FOUND, "Submission not found")

        if self._config.current_state != EventState.SUBMISSION_OPEN:
            return Result.fail(
                ErrorCode.NOT_SUBMISSION_PHASE,
                "Can only unlock submissions during submission phase"
            )

        submission.is_locked = False
        self._persist()
        return Result.ok(_copy(submission))

    # ----- judge assignments -----

    def get_judge_assignments(self, judge_id: str) -> List[JudgeAssignment]:
        """Assignments held by a judge, in creation order."""
        return [_copy(a) for a in self._judge_assignments if a.judge_id == judge_id]

    def get_submission_assignments(self, submission_id: str) -> List[JudgeAssignment]:
        return [_copy(a) for a in self._judge_assignments if a.submission_id == submission_id]

    def is_judge_assigned_to_submission(self, judge_id: str, submission_id: str) -> bool:
        return any(
            a.judge_id == judge_id and a.submission_id == submission_id
            for a in self._judge_assignments
        )

    def _is_judge(self, user_id: str) -> bool:
        user = self._users.get(user_id)
        return user is not None and user.role == UserRole.JUDGE

    def assign_judge_to_submission(self, judge_id: str, submission_id: str) -> Result[JudgeAssignment]:
        """Authorize one judge to score one submission."""
        if not self._is_judge(judge_id):
            return Result.fail(ErrorCode.INVALID_JUDGE, "Invalid judge")

        if submission_id not in self._submissions:
            return Result.fail(ErrorCode.SUBMISSION_NOT_FOUND, "Submission not found")

        if self.is_judge_assigned_to_submission(judge_id, submission_id):
            return Result.fail(ErrorCode.ALREADY_ASSIGNED, "Judge is already assigned to this submission")

        assignment = JudgeAssignment(
            judge_id=judge_id,
            submission_id=submission_id,
            assigned_at=self.clock()
        )
        self._judge_assignments.append(assignment)
        self._persist()
        return Result.ok(_copy(assignment))

    def remove_judge_assignment(self, judge_id: str, submission_id: str) -> Result[None]:
        """Withdraw a judge assignment; existing scores are kept."""
        for index, a in enumerate(self._judge_assignments):
            if a.judge_id == judge_id and a.submission_id == submission_id:
                del self._judge_assignments[index]
                self._persist()
                return Result.ok(None)

        return Result.fail(ErrorCode.NOT_FOUND, "Assignment not found")

    def auto_assign_judges(self) -> Result[int]:
        """Assign every judge to every eligible submission.

        Eligible means the owning team exists and is not disqualified. Existing
        pairs are kept; the result is the number of pairs added.
        """
        judges = [u for u in self._users.values() if u.role == UserRole.JUDGE]
        submissions = [
            s for s in self._submissions.values()
            if s.team_id in self._teams and not self._teams[s.team_id].is_disqualified
        ]

        if not judges:
            return Result.fail(ErrorCode.NO_JUDGES, "No judges available")

        if not submissions:
            return Result.fail(ErrorCode.NO_SUBMISSIONS, "No submissions to assign")

        now = self.clock()
        created = 0
        for submission in submissions:
            for judge in judges:
                if not self.is_judge_assigned_to_submission(judge.id, submission.id):
                    self._judge_assignments.append(JudgeAssignment(
                        judge_id=judge.id,
                        submission_id=submission.id,
                        assigned_at=now
                    ))
                    created += 1

        self._persist()
        logger.info(f"Auto-assigned {created} judge/submission pairs")
        return Result.ok(created)

    # ----- scores -----

    def get_score_by_id(self, score_id: str) -> Optional[Score]:
        return _copy(self._scores.get(score_id))

    def _find_score(self, judge_id: str, submission_id: str) -> Optional[Score]:
        return next(
            (s for s in self._scores.values()
             if s.judge_id == judge_id and s.submission_id == submission_id),
            None
        )

    def get_score_by_judge_and_submission(self, judge_id: str, submission_id: str) -> Optional[Score]:
        return _copy(self._find_score(judge_id, submission_id))

    def get_scores_for_submission(self, submission_id: str) -> List[Score]:
        return [_copy(s) for s in self._scores.values() if s.submission_id == submission_id]

    def get_scores_by_judge(self, judge_id: str) -> List[Score]:
        return [_copy(s) for s in self._scores.values() if s.judge_id == judge_id]

    def get_all_scores(self) -> List[Score]:
        return [_copy(s) for s in self._scores.values()]

    def submit_score(self, judge_id: str, submission_id: str,
                     scores: Union[ScoreValues, Mapping[str, Any]]) -> Result[Score]:
        """Record a judge's first score for an assigned submission."""
        if self._config.current_state != EventState.JUDGING_OPEN:
            return Result.fail(ErrorCode.SCORING_CLOSED, "Scoring is not currently open")

        if not self._is_judge(judge_id):
            return Result.fail(ErrorCode.INVALID_JUDGE, "Invalid judge")

        if submission_id not in self._submissions:
            return Result.fail(ErrorCode.SUBMISSION_NOT_FOUND, "Submission not found")

        if not self.is_judge_assigned_to_submission(judge_id, submission_id):
            return Result.fail(ErrorCode.NOT_ASSIGNED, "You are not assigned to score this submission")

        if self._find_score(judge_id, submission_id):
            return Result.fail(
                ErrorCode.DUPLICATE_SCORE,
                "You have already scored this submission. Use update_score to modify."
            )

        try:
            values = _coerce(ScoreValues, scores)
        except ValidationError as e:
            return _invalid_input("score", e)

        error = validate_criteria(values.model_dump())
        if error:
            return Result.fail(ErrorCode.OUT_OF_RANGE, error)

        score = Score(
            **values.model_dump(),
            id=generate_id(),
            judge_id=judge_id,
            submission_id=submission_id,
            submitted_at=self.clock()
        )
        self._scores[score.id] = score
        self._persist()

        logger.info(
            f"Judge {judge_id} scored submission {submission_id}: "
            f"{calculate_total_score(score):.1f}"
        )
        return Result.ok(_copy(score))

    def update_score(self, score_id: str, updates: Union[ScoreUpdate, Mapping[str, Any]]) -> Result[Score]:
        """Merge ``updates`` into a score and refresh its ``submitted_at``."""
        if self._config.current_state != EventState.JUDGING_OPEN:
            return Result.fail(ErrorCode.SCORING_CLOSED, "Scoring modifications are not currently allowed")

        score = self._scores.get(score_id)
        if not score:
            return Result.fail(ErrorCode.NOT_FOUND, "Score not found")

        try:
            changes = _coerce(ScoreUpdate, updates).model_dump(exclude_unset=True, exclude_none=True)
        except ValidationError as e:
            return _invalid_input("score update", e)

        error = validate_criteria(changes)
        if error:
            return Result.fail(ErrorCode.OUT_OF_RANGE, error)

        changes["submitted_at"] = self.clock()
        updated = score.model_copy(update=changes)
        self._scores[score_id] = updated
        self._persist()

        logger.info(f"Score {score_id} updated: {calculate_total_score(updated):.1f}")
        return Result.ok(_copy(updated))

    def calculate_total_score(self, score: ScoreValues) -> float:
        return calculate_total_score(score)

    def calculate_average_score(self, submission_id: str) -> Optional[float]:
        """Mean total across the submission's scores; None if it has none."""
        return calculate_average(s for s in self._scores.values() if s.submission_id == submission_id)

    # ----- leaderboard & reporting -----

    def get_leaderboard(self) -> List[LeaderboardEntry]:
        """Rank non-disqualified submissions by average score."""
        rows = []
        for submission in self._submissions.values():
            team = self._teams.get(submission.team_id)
            if not team or team.is_disqualified:
                continue
            scores = [s for s in self._scores.values() if s.submission_id == submission.id]
            rows.append((_copy(team), _copy(submission), scores))
        return rank_leaderboard(rows)

    def get_event_stats(self) -> EventStats:
        """Organizer dashboard figures; progress is a rounded percentage."""
        judges = [u for u in self._users.values() if u.role == UserRole.JUDGE]
        submitted = len(self._submissions)
        scored_ids = {s.submission_id for s in self._scores.values()}
        scored = sum(1 for sid in self._submissions if sid in scored_ids)
        possible = submitted * len(judges)
        completed = len(self._scores)
        # round half up
        progress = int(completed * 100 / possible + 0.5) if possible else 0

        judge_progress = []
        for judge in judges:
            done = sum(1 for s in self._scores.values() if s.judge_id == judge.id)
            judge_progress.append(JudgeProgress(
                judge_id=judge.id,
                judge_name=judge.name,
                done=done,
                pending=submitted - done
            ))

        return EventStats(
            total_teams=len(self._teams),
            max_teams=self._config.max_teams,
            submitted_teams=submitted,
            scored_submissions=scored,
            total_possible_scores=possible,
            completed_scores=completed,
            judging_progress=progress,
            judge_count=len(judges),
            judge_progress=judge_progress
        )

    def export_teams_csv(self) -> str:
        return CSVExporter(self).export_teams()

    def export_submissions_csv(self) -> str:
        return CSVExporter(self).export_submissions()

    def export_scores_csv(self) -> str:
        return CSVExporter(self).export_scores()
