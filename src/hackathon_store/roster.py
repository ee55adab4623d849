"""
Team roster import from CSV files.
"""
import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from .models import RegistrationData
from .store import EventStore

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("team_name", "member_name", "email")


@dataclass
class RosterTeam:
    """Team and members loaded from CSV, in file order."""
    team_name: str
    members: List[RegistrationData] = field(default_factory=list)


@dataclass
class ImportSummary:
    teams_created: int = 0
    members_added: int = 0
    errors: List[str] = field(default_factory=list)


class CSVRosterLoader:
    """Load team rosters from a CSV file.

    Expected columns: team_name, member_name, email and optionally phone and
    skills (semicolon separated). One row per member.
    """

    def __init__(self, csv_file: str):
        self.csv_file = csv_file

    def load_roster(self) -> List[RosterTeam]:
        """Load teams from CSV file."""
        if not Path(self.csv_file).exists():
            raise FileNotFoundError(f"Roster CSV file not found: {self.csv_file}")

        teams: Dict[str, RosterTeam] = {}

        with open(self.csv_file, 'r', newline='', encoding='utf-8') as f:
            reader = csv.DictReader(f)

            missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(f"Roster CSV is missing columns: {', '.join(missing)}")

            for row in reader:
                values = {col: (row.get(col) or '').strip() for col in (*REQUIRED_COLUMNS, 'phone', 'skills')}

                blank = [c for c in REQUIRED_COLUMNS if not values[c]]
                if blank:
                    raise ValueError(f"Roster CSV line {reader.line_num}: missing {', '.join(blank)}")

                team_name = values['team_name']
                roster_team = teams.setdefault(team_name, RosterTeam(team_name=team_name))

                skills = [s.strip() for s in values['skills'].split(';') if s.strip()]
                roster_team.members.append(RegistrationData(
                    email=values['email'],
                    name=values['member_name'],
                    phone=values['phone'] or None,
                    skills=skills
                ))

        logger.info(f"Loaded {len(teams)} teams from roster CSV")
        return list(teams.values())


def import_roster(store: EventStore, teams: List[RosterTeam]) -> ImportSummary:
    """Register members and form teams through the store's own operations.

    The first member of each team creates it; the rest join by invite code.
    A failing member is recorded and skipped; a team whose creator fails is
    skipped entirely.
    """
    summary = ImportSummary()

    for roster_team in teams:
        invite_code: Optional[str] = None

        for member in roster_team.members:
            registered = store.register(member)
            if not registered:
                summary.errors.append(f"{roster_team.team_name}: {member.email}: {registered.error}")
                if invite_code is None:
                    break
                continue

            user_id = registered.data.id
            if invite_code is None:
                created = store.create_team(roster_team.team_name, user_id)
                if not created:
                    summary.errors.append(f"{roster_team.team_name}: {created.error}")
                    break
                invite_code = created.data.invite_code
                summary.teams_created += 1
                summary.members_added += 1
                continue

            joined = store.join_team(invite_code, user_id)
            if not joined:
                summary.errors.append(f"{roster_team.team_name}: {member.email}: {joined.error}")
                continue
            summary.members_added += 1

    store.logout()
    logger.info(
        f"Roster import: {summary.teams_created} teams, {summary.members_added} members, "
        f"{len(summary.errors)} errors"
    )
    return summary
