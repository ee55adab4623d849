import pytest

from hackathon_store.models import EventState
from hackathon_store.roster import CSVRosterLoader, import_roster

ROSTER = """team_name,member_name,email,phone,skills
Code Ninjas,Anish K.,anish@example.com,9876543210,React; Python
Code Ninjas,Priya M.,priya@example.com,,
Data Hawks,Amit P.,amit@example.com,,Go
Code Ninjas,Rahul S.,rahul@example.com,,Rust;Rust
"""


@pytest.fixture
def roster_file(tmp_path):
    path = tmp_path / "roster.csv"
    path.write_text(ROSTER, encoding="utf-8")
    return str(path)


def test_load_roster_groups_rows_by_team(roster_file):
    teams = CSVRosterLoader(roster_file).load_roster()

    assert [t.team_name for t in teams] == ["Code Ninjas", "Data Hawks"]
    ninjas = teams[0]
    assert [m.name for m in ninjas.members] == ["Anish K.", "Priya M.", "Rahul S."]
    assert ninjas.members[0].phone == "9876543210"
    assert ninjas.members[0].skills == ["React", "Python"]
    assert ninjas.members[1].phone is None
    assert ninjas.members[1].skills == []
    assert ninjas.members[2].skills == ["Rust"]


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CSVRosterLoader(str(tmp_path / "nope.csv")).load_roster()


def test_missing_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("team_name,name\nFoo,Bar\n", encoding="utf-8")
    with pytest.raises(ValueError, match="member_name, email"):
        CSVRosterLoader(str(path)).load_roster()


def test_import_forms_teams(store, roster_file):
    summary = import_roster(store, CSVRosterLoader(roster_file).load_roster())

    assert summary.teams_created == 2
    assert summary.members_added == 4
    assert summary.errors == []
    assert store.get_current_user() is None

    ninjas = next(t for t in store.get_all_teams() if t.name == "Code Ninjas")
    assert store.get_user_by_id(ninjas.leader_id).email == "anish@example.com"
    assert [m.email for m in store.get_team_members(ninjas.id)] == [
        "anish@example.com", "priya@example.com", "rahul@example.com",
    ]


def test_import_records_member_errors(store, make_user, roster_file):
    make_user(email="priya@example.com")

    summary = import_roster(store, CSVRosterLoader(roster_file).load_roster())

    assert summary.teams_created == 2
    assert summary.members_added == 3
    assert summary.errors == ["Code Ninjas: priya@example.com: Email already registered"]


def test_import_skips_team_when_creator_fails(store, make_user, roster_file):
    make_user(email="anish@example.com")

    summary = import_roster(store, CSVRosterLoader(roster_file).load_roster())

    assert [t.name for t in store.get_all_teams()] == ["Data Hawks"]
    assert summary.teams_created == 1
    assert len(summary.errors) == 1
    assert store.get_user_by_email("priya@example.com") is None


def test_import_after_registration_closes(store, advance, roster_file):
    advance(EventState.REGISTRATION_OPEN, EventState.SUBMISSION_OPEN)

    summary = import_roster(store, CSVRosterLoader(roster_file).load_roster())

    assert summary.teams_created == 0
    assert all("Registration is closed" in e for e in summary.errors)
    assert store.get_all_users() == []


@pytest.mark.parametrize("body,missing", [
    ("Foo,Alice\n", "email"),
    ("Foo,,alice@example.com\n", "member_name"),
    (" ,Alice,alice@example.com\n", "team_name"),
])
def test_incomplete_row_names_line(tmp_path, body, missing):
    path = tmp_path / "short.csv"
    path.write_text("team_name,member_name,email\nBar,Bob,bob@example.com\n" + body, encoding="utf-8")

    with pytest.raises(ValueError, match=f"line 3: missing {missing}"):
        CSVRosterLoader(str(path)).load_roster()
