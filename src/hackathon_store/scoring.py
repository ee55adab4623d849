"""
Score aggregation and leaderboard ranking.
"""
from typing import Iterable, List, Mapping, Optional, Tuple

from .models import LeaderboardEntry, Score, ScoreValues, Submission, Team

MIN_CRITERION = 1
MAX_CRITERION = 10

# Criterion -> multiplier. A 1-10 criterion times its multiplier gives its
# share of a 0-100 total (25/25/20/20/10 percent).
SCORE_WEIGHTS = {
    "innovation": 2.5,
    "execution": 2.5,
    "presentation": 2.0,
    "impact": 2.0,
    "code_quality": 1.0,
}

SCORE_FIELDS = tuple(SCORE_WEIGHTS)


def validate_criteria(values: Mapping[str, Optional[int]]) -> Optional[str]:
    """Return an error message for the first out-of-range criterion, else None.

    Criteria missing from ``values`` or set to None are skipped, so the same
    check serves full scores and partial updates.
    """
    for field in SCORE_FIELDS:
        value = values.get(field)
        if value is None:
            continue
        if value < MIN_CRITERION or value > MAX_CRITERION:
            return f"{field} must be between {MIN_CRITERION} and {MAX_CRITERION}"
    return None


def calculate_total_score(score: ScoreValues) -> float:
    """Weighted 0-100 composite of the five criteria."""
    return sum(getattr(score, field) * weight for field, weight in SCORE_WEIGHTS.items())


def calculate_average(scores: Iterable[ScoreValues]) -> Optional[float]:
    """Mean composite, or None when there are no scores."""
    totals = [calculate_total_score(s) for s in scores]
    if not totals:
        return None
    return sum(totals) / len(totals)


def rank_leaderboard(rows: Iterable[Tuple[Team, Submission, List[Score]]]) -> List[LeaderboardEntry]:
    """Rank submissions by mean composite score, highest first.

    Unscored submissions count as 0. Equal averages go to the earlier
    submission, then to the lower submission id.
    """
    scored = []
    for team, submission, scores in rows:
        average = calculate_average(scores)
        scored.append((team, submission, average or 0.0, len(scores)))

    scored.sort(key=lambda row: (-row[2], row[1].submitted_at, row[1].id))

    return [
        LeaderboardEntry(
            rank=index + 1,
            team=team,
            submission=submission,
            average_score=average,
            score_count=count
        )
        for index, (team, submission, average, count) in enumerate(scored)
    ]
