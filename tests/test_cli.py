import pytest

from hackathon_store.cli import main
from hackathon_store.config import config
from hackathon_store.exporter import TEAM_HEADERS


@pytest.fixture
def run(tmp_path, monkeypatch):
    monkeypatch.setattr(config.storage, "seed_demo_data", True)
    data_dir = str(tmp_path / "data")

    def _run(*argv):
        return main(["--data-dir", data_dir, *argv])
    return _run


def test_status_on_fresh_directory_seeds_demo(run, capsys):
    assert run("status") == 0
    out = capsys.readouterr().out
    assert ": DRAFT (next: REGISTRATION_OPEN)" in out
    assert "Teams: 6/" in out
    assert "Dr. Sharma: 0 done, 0 pending" in out


def test_transition_persists(run, capsys):
    assert run("transition", "REGISTRATION_OPEN") == 0
    assert "Event is now REGISTRATION_OPEN" in capsys.readouterr().out

    run("status")
    assert "REGISTRATION_OPEN (next: SUBMISSION_OPEN)" in capsys.readouterr().out


def test_illegal_transition_fails(run, capsys):
    assert run("transition", "JUDGING_OPEN") == 1
    err = capsys.readouterr().err
    assert "Cannot transition from DRAFT to JUDGING_OPEN" in err


def test_unknown_state_rejected_by_parser(run):
    with pytest.raises(SystemExit):
        run("transition", "PARTY")


def test_export_teams_to_stdout(run, capsys):
    assert run("export", "teams") == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == ",".join(f'"{h}"' for h in TEAM_HEADERS)
    assert len(lines) == 7


def test_export_to_file(run, tmp_path):
    target = tmp_path / "scores.csv"
    assert run("export", "scores", "-o", str(target)) == 0
    assert target.read_text(encoding="utf-8").startswith('"Score ID","Judge ID"')


def test_reset_without_seed_stays_empty(run, capsys):
    run("transition", "REGISTRATION_OPEN")
    assert run("--no-seed", "reset") == 0
    capsys.readouterr()

    run("--no-seed", "status")
    out = capsys.readouterr().out
    assert ": DRAFT" in out
    assert "Teams: 0/" in out

    run("--no-seed", "export", "teams")
    assert capsys.readouterr().out.strip() == ",".join(f'"{h}"' for h in TEAM_HEADERS)


def test_reset_reseeds_by_default(run, capsys):
    run("transition", "REGISTRATION_OPEN")
    assert run("reset") == 0
    capsys.readouterr()

    run("status")
    out = capsys.readouterr().out
    assert ": DRAFT" in out
    assert "Teams: 6/" in out


def test_log_level_is_case_insensitive(run):
    assert run("--log-level", "debug", "status") == 0


def test_unknown_log_level_rejected_by_parser(run, capsys):
    with pytest.raises(SystemExit) as exc:
        run("--log-level", "LOUD", "status")
    assert exc.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_unknown_log_level_from_environment(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(config.logging, "level", "LOUD")
    assert main(["--data-dir", str(tmp_path), "--log-level", "INFO", "status"]) == 1
    assert "Unknown log level: LOUD" in capsys.readouterr().err


def test_auto_assign_without_submissions(run, capsys):
    assert run("auto-assign") == 1
    assert "No submissions to assign" in capsys.readouterr().err


def test_empty_leaderboard(run, capsys):
    assert run("leaderboard") == 0
    assert "No submissions yet" in capsys.readouterr().out


def test_import_roster(run, tmp_path, capsys):
    roster = tmp_path / "roster.csv"
    roster.write_text(
        "team_name,member_name,email\nRookies,Ann,ann@example.com\nRookies,Ben,ben@example.com\n",
        encoding="utf-8"
    )
    assert run("import-roster", str(roster)) == 0
    assert "Created 1 teams with 2 members" in capsys.readouterr().out


def test_import_roster_missing_file(run, tmp_path, capsys):
    assert run("import-roster", str(tmp_path / "missing.csv")) == 1
    assert "not found" in capsys.readouterr().err


def test_import_roster_incomplete_row(run, tmp_path, capsys):
    roster = tmp_path / "roster.csv"
    roster.write_text("team_name,member_name,email\nRookies,Ann\n", encoding="utf-8")

    assert run("import-roster", str(roster)) == 1
    assert "line 2: missing email" in capsys.readouterr().err
