"""
Deterministic demo dataset: one admin, five judges, six teams.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

from .models import Team, User, UserRole

ADMIN_EMAIL = "admin@glhackathon.com"

JUDGE_NAMES = ["Dr. Sharma", "Prof. Patel", "Ms. Gupta", "Mr. Kumar", "Dr. Singh"]

DEMO_TEAMS = [
    ("Code Ninjas", ["Anish K.", "Priya M.", "Rahul S."]),
    ("Data Hawks", ["Amit P.", "Sneha R.", "Vikram T.", "Neha K."]),
    ("Tech Titans", ["Ravi S.", "Deepa M."]),
    ("Binary Brains", ["Kiran L.", "Pooja D.", "Suresh M."]),
    ("Algo Wizards", ["Arjun K.", "Meera S.", "Anil R.", "Divya P."]),
    ("Cloud Crew", ["Sanjay M.", "Lakshmi V.", "Prasad K."]),
]

DEMO_SKILLS = ["React", "Python", "Node.js"]
DEMO_PHONE = "9876543210"


@dataclass
class DemoDataset:
    users: List[User] = field(default_factory=list)
    teams: List[Team] = field(default_factory=list)


def email_local_part(name: str) -> str:
    """'Dr. Sharma' -> 'drsharma'"""
    return re.sub(r"[.\s]", "", name.lower())


def build_demo_dataset(now: datetime, make_invite_code: Callable[[str], str]) -> DemoDataset:
    dataset = DemoDataset()

    dataset.users.append(User(
        id="admin-1",
        email=ADMIN_EMAIL,
        name="Admin User",
        role=UserRole.ADMIN,
        created_at=now
    ))

    for i, name in enumerate(JUDGE_NAMES):
        dataset.users.append(User(
            id=f"judge-{i + 1}",
            email=f"{email_local_part(name)}@glhackathon.com",
            name=name,
            role=UserRole.JUDGE,
            created_at=now
        ))

    for team_index, (team_name, member_names) in enumerate(DEMO_TEAMS):
        team_id = f"team-{team_index + 1}"
        member_ids = []

        for member_index, member_name in enumerate(member_names):
            user_id = f"user-{team_index}-{member_index}"
            dataset.users.append(User(
                id=user_id,
                email=f"{email_local_part(member_name)}@example.com",
                name=member_name,
                phone=DEMO_PHONE,
                skills=DEMO_SKILLS[:member_index % len(DEMO_SKILLS) + 1],
                role=UserRole.PARTICIPANT,
                team_id=team_id,
                created_at=now
            ))
            member_ids.append(user_id)

        dataset.teams.append(Team(
            id=team_id,
            name=team_name,
            invite_code=make_invite_code(team_name),
            leader_id=member_ids[0],
            member_ids=member_ids,
            created_at=now
        ))

    return dataset
