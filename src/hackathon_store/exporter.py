"""
CSV exports of teams, submissions and scores.
"""
import csv
import io
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, List, Sequence

from .scoring import calculate_total_score

if TYPE_CHECKING:
    from .store import EventStore

TEAM_HEADERS = [
    "Team ID", "Team Name", "Invite Code", "Leader", "Members", "Member Count",
    "Has Submission", "Is Locked", "Is Disqualified", "Created At",
]
SUBMISSION_HEADERS = [
    "Submission ID", "Team ID", "Team Name", "Title", "Problem Statement", "Tech Stack",
    "GitHub URL", "Demo URL", "Is Locked", "Submitted At", "Last Edited At",
]
SCORE_HEADERS = [
    "Score ID", "Judge ID", "Judge Name", "Submission ID", "Team Name", "Innovation",
    "Execution", "Presentation", "Impact", "Code Quality", "Total Score", "Comments",
    "Flagged", "Submitted At",
]

UNKNOWN = "Unknown"


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2026-01-01T09:00:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render rows with every field quoted; embedded quotes are doubled."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    text = buffer.getvalue()
    return text[:-1] if text.endswith("\n") else text


class CSVExporter:
    """Renders store collections as CSV text, joined with display names."""

    def __init__(self, store: "EventStore"):
        self.store = store

    def export_teams(self) -> str:
        rows: List[List[str]] = []
        for team in self.store.get_all_teams():
            leader = self.store.get_user_by_id(team.leader_id)
            members = self.store.get_team_members(team.id)
            rows.append([
                team.id,
                team.name,
                team.invite_code,
                leader.name if leader else UNKNOWN,
                "; ".join(m.name for m in members),
                str(len(team.member_ids)),
                yes_no(bool(team.submission_id)),
                yes_no(team.is_locked),
                yes_no(team.is_disqualified),
                format_timestamp(team.created_at),
            ])
        return render_csv(TEAM_HEADERS, rows)

    def export_submissions(self) -> str:
        rows: List[List[str]] = []
        for sub in self.store.get_all_submissions():
            team = self.store.get_team_by_id(sub.team_id)
            rows.append([
                sub.id,
                sub.team_id,
                team.name if team else UNKNOWN,
                sub.title,
                sub.problem_statement,
                "; ".join(sub.tech_stack),
                sub.github_url,
                sub.demo_url,
                yes_no(sub.is_locked),
                format_timestamp(sub.submitted_at),
                format_timestamp(sub.last_edited_at),
            ])
        return render_csv(SUBMISSION_HEADERS, rows)

    def export_scores(self) -> str:
        rows: List[List[str]] = []
        for score in self.store.get_all_scores():
            judge = self.store.get_user_by_id(score.judge_id)
            submission = self.store.get_submission_by_id(score.submission_id)
            team = self.store.get_team_by_id(submission.team_id) if submission else None
            rows.append([
                score.id,
                score.judge_id,
                judge.name if judge else UNKNOWN,
                score.submission_id,
                team.name if team else UNKNOWN,
                str(score.innovation),
                str(score.execution),
                str(score.presentation),
                str(score.impact),
                str(score.code_quality),
                f"{calculate_total_score(score):.1f}",
                score.comments,
                yes_no(score.flagged),
                format_timestamp(score.submitted_at),
            ])
        return render_csv(SCORE_HEADERS, rows)
