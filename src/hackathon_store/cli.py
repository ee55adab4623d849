"""
Command line interface for organizer tasks against a file-backed event store.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import config
from .models import EventState
from .results import Result
from .roster import CSVRosterLoader, import_roster
from .storage import JSONFileStorage
from .store import EventStore

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "hackathon_data"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
EXPORT_KINDS = ("teams", "submissions", "scores")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hackathon-store", description="Hackathon event store")
    parser.add_argument('--data-dir',
                        default=config.storage.data_dir or DEFAULT_DATA_DIR,
                        help='Directory holding the persisted event data')
    parser.add_argument('--log-level',
                        type=str.upper,
                        choices=LOG_LEVELS,
                        default=config.logging.level,
                        help='Log level')
    parser.add_argument('--no-seed',
                        action='store_true',
                        help='Never seed demo data into an empty store (also SEED_DEMO_DATA=false)')

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show event state and dashboard figures")

    transition = sub.add_parser("transition", help="Move the event to another phase")
    transition.add_argument("state", choices=[s.value for s in EventState])
    transition.add_argument("--actor", default="cli", help="Id recorded in the state history")

    sub.add_parser("leaderboard", help="Print the current ranking")
    sub.add_parser("auto-assign", help="Assign every judge to every eligible submission")

    export = sub.add_parser("export", help="Write a CSV export")
    export.add_argument("kind", choices=EXPORT_KINDS)
    export.add_argument("-o", "--output", help="Output file (default: stdout)")

    roster = sub.add_parser("import-roster", help="Register teams from a roster CSV")
    roster.add_argument("csv_file")

    sub.add_parser("reset", help="Delete all data and start a fresh DRAFT event")

    return parser


def _fail(result: Result) -> int:
    print(f"Error: {result.error}", file=sys.stderr)
    return 1


def cmd_status(store: EventStore, args) -> int:
    cfg = store.get_config()
    stats = store.get_event_stats()
    allowed = ", ".join(s.value for s in store.get_allowed_transitions())

    print(f"{cfg.name}: {cfg.current_state.value} (next: {allowed})")
    print(f"Teams: {stats.total_teams}/{stats.max_teams}")
    print(f"Submissions: {stats.submitted_teams} ({stats.scored_submissions} scored)")
    print(f"Judging: {stats.completed_scores}/{stats.total_possible_scores} ({stats.judging_progress}%)")
    for progress in stats.judge_progress:
        print(f"  {progress.judge_name}: {progress.done} done, {progress.pending} pending")
    return 0


def cmd_transition(store: EventStore, args) -> int:
    result = store.transition(args.state, args.actor)
    if not result:
        return _fail(result)
    print(f"Event is now {result.data.value}")
    return 0


def cmd_leaderboard(store: EventStore, args) -> int:
    entries = store.get_leaderboard()
    if not entries:
        print("No submissions yet")
        return 0
    for entry in entries:
        print(f"{entry.rank:>3}. {entry.team.name:<30} {entry.average_score:6.1f}  ({entry.score_count} scores)")
    return 0


def cmd_auto_assign(store: EventStore, args) -> int:
    result = store.auto_assign_judges()
    if not result:
        return _fail(result)
    print(f"Created {result.data} new assignments")
    return 0


def cmd_export(store: EventStore, args) -> int:
    exporters = {
        "teams": store.export_teams_csv,
        "submissions": store.export_submissions_csv,
        "scores": store.export_scores_csv,
    }
    text = exporters[args.kind]()

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {args.kind} export to {args.output}")
    else:
        print(text)
    return 0


def cmd_import_roster(store: EventStore, args) -> int:
    try:
        teams = CSVRosterLoader(args.csv_file).load_roster()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    summary = import_roster(store, teams)
    print(f"Created {summary.teams_created} teams with {summary.members_added} members")
    for error in summary.errors:
        print(f"  skipped: {error}", file=sys.stderr)
    return 1 if summary.errors else 0


def cmd_reset(store: EventStore, args) -> int:
    store.reset_all_data(seed_demo=store.seed_demo)
    print("Event data reset")
    return 0


COMMANDS = {
    "status": cmd_status,
    "transition": cmd_transition,
    "leaderboard": cmd_leaderboard,
    "auto-assign": cmd_auto_assign,
    "export": cmd_export,
    "import-roster": cmd_import_roster,
    "reset": cmd_reset,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # before basicConfig, which raises on an unknown level
    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Config error: {error}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    seed_demo = config.storage.seed_demo_data and not args.no_seed
    store = EventStore(storage=JSONFileStorage(args.data_dir), seed_demo=seed_demo)
    return COMMANDS[args.command](store, args)


if __name__ == "__main__":
    sys.exit(main())
