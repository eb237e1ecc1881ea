#!/usr/bin/env python3
"""
manage_progress.py - Inspect and update learner progress in progress.db.

Reads the curriculum YAML and database location from STITCHWISE_* settings
(or a .env file); both can be overridden on the command line.

Usage:
  python scripts/manage_progress.py init alice
  python scripts/manage_progress.py record alice --path addition --item add-01 \
      --correct 9 --total 10 --time-ms 42000
  python scripts/manage_progress.py show alice
  python scripts/manage_progress.py due alice
  python scripts/manage_progress.py reset alice
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from stitchwise.errors import MasteryError, StorageError
from stitchwise.schemas import SessionResult
from stitchwise.tracker import MasteryTracker, SQLiteProgressStore
from stitchwise.utils import load_path_config, load_settings

logger = logging.getLogger(__name__)


def build_tracker(args) -> MasteryTracker:
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)

    db_path = args.db or settings.db_path
    curriculum = args.curriculum or settings.curriculum

    logger.info(f"Curriculum: {curriculum}")
    logger.info(f"Database:   {db_path}")

    return MasteryTracker(
        SQLiteProgressStore(db_path),
        load_path_config(curriculum),
        jitter=settings.jitter_source(),
    )


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

def cmd_init(tracker: MasteryTracker, args):
    tracker.register_user(args.user)
    progress = tracker.initialize(args.user)
    print(progress.model_dump_json(indent=2))


def cmd_record(tracker: MasteryTracker, args):
    result = SessionResult(
        path_id=args.path,
        content_id=args.item,
        correct_count=args.correct,
        total_count=args.total,
        completion_time_ms=args.time_ms,
    )
    progress = tracker.record_session(args.user, result)
    mastery = tracker.get_content_mastery(args.user, args.item)

    logger.info(
        f"{args.item}: mastery {mastery.mastery_level:.2f}, "
        f"next review {mastery.next_review_time:%Y-%m-%d}"
    )
    print(progress.model_dump_json(indent=2))


def cmd_show(tracker: MasteryTracker, args):
    stats = tracker.get_completion_stats(args.user)

    print(f"\n{args.user}: {stats['completion_percent']}% complete")
    print(f"  Mastered:  {stats['mastered']}/{stats['total_items']}")
    print(f"  Attempted: {stats['attempted']}")
    print(f"  Unseen:    {stats['unseen']}")
    for path_id, percent in stats["paths"].items():
        print(f"  {path_id}: {percent}%")


def cmd_due(tracker: MasteryTracker, args):
    due = tracker.get_due_items(args.user)
    if not due:
        print("Nothing due for review.")
        return
    print(json.dumps([row.model_dump(mode="json") for row in due], indent=2))


def cmd_reset(tracker: MasteryTracker, args):
    tracker.reset_progress(args.user)
    print(f"Progress of {args.user} reset.")


COMMANDS = {
    "init": cmd_init,
    "record": cmd_record,
    "show": cmd_show,
    "due": cmd_due,
    "reset": cmd_reset,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage learner progress")
    parser.add_argument("--db", type=Path, default=None, help="Progress database (default: settings)")
    parser.add_argument("--curriculum", type=Path, default=None, help="Curriculum YAML (default: settings)")

    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("init", "Create zeroed progress for a user"),
        ("show", "Print completion statistics"),
        ("due", "List items due for review"),
        ("reset", "Delete all progress of a user"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("user", help="User id")

    record = sub.add_parser("record", help="Record one practice session")
    record.add_argument("user", help="User id")
    record.add_argument("--path", required=True, help="Learning path id")
    record.add_argument("--item", required=True, help="Content item id")
    record.add_argument("--correct", type=int, required=True, help="Correct answers")
    record.add_argument("--total", type=int, required=True, help="Questions asked")
    record.add_argument("--time-ms", type=float, required=True, help="Completion time in ms")

    return parser


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )
    args = build_parser().parse_args(argv)

    try:
        tracker = build_tracker(args)
        COMMANDS[args.command](tracker, args)
    except FileNotFoundError as exc:
        logger.error(str(exc))
        return 1
    except MasteryError as exc:
        logger.error(f"{exc.code}: {exc.message}")
        return 1
    except (StorageError, ValueError) as exc:
        logger.error(f"Failed: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
