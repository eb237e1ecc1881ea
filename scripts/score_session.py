#!/usr/bin/env python3
"""
score_session.py - Score one completed session and print the result as JSON.

The session comes either from a JSON file (SessionData fields, or an
"answers" list of AnswerRecord objects plus "duration_ms") or from flags.

Usage:
  python scripts/score_session.py --duration-ms 240000 --questions 20 --ftc 16 --ec 3 --incorrect 1
  python scripts/score_session.py --file session.json
  python scripts/score_session.py --file session.json --legacy
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from stitchwise.errors import ScoringError
from stitchwise.schemas import AnswerRecord, SessionData
from stitchwise.scoring import additive_bonus_multiplier, score
from stitchwise.utils import load_settings

logger = logging.getLogger(__name__)


def load_session(file_path: Path) -> SessionData:
    """Read a session from JSON, accepting either tallies or raw answers."""
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if "answers" in data:
        answers = [AnswerRecord(**a) for a in data["answers"]]
        return SessionData.from_answers(
            answers,
            duration_ms=data["duration_ms"],
            streak_days=data.get("streak_days", 0),
        )
    return SessionData(**data)


def session_from_args(args) -> SessionData:
    missing = [
        flag for flag, value in (
            ("--duration-ms", args.duration_ms),
            ("--questions", args.questions),
            ("--ftc", args.ftc),
            ("--ec", args.ec),
            ("--incorrect", args.incorrect),
        )
        if value is None
    ]
    if missing:
        raise ValueError(f"Missing arguments: {', '.join(missing)}")

    return SessionData(
        duration_ms=args.duration_ms,
        question_count=args.questions,
        ftc_count=args.ftc,
        ec_count=args.ec,
        incorrect_count=args.incorrect,
        streak_days=args.streak_days,
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Score a practice session")
    parser.add_argument("--file", type=Path, default=None, help="Session JSON file")
    parser.add_argument("--duration-ms", type=float, default=None)
    parser.add_argument("--questions", type=int, default=None)
    parser.add_argument("--ftc", type=int, default=None, help="First-time-correct answers")
    parser.add_argument("--ec", type=int, default=None, help="Eventually-correct answers")
    parser.add_argument("--incorrect", type=int, default=None)
    parser.add_argument("--streak-days", type=int, default=0)
    parser.add_argument("--legacy", action="store_true",
                        help="Also print the superseded additive bonus for comparison")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=load_settings().log_level,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        session = load_session(args.file) if args.file else session_from_args(args)
        result = score(session)
    except FileNotFoundError as exc:
        logger.error(str(exc))
        return 1
    except ScoringError as exc:
        logger.error(f"{exc.code}: {exc}")
        return 1
    except ValueError as exc:
        logger.error(f"Invalid session: {exc}")
        return 1

    output = result.model_dump(mode="json")
    if args.legacy:
        output["legacy_bonus_multiplier"] = additive_bonus_multiplier(
            result.consistency, result.accuracy, result.speed
        )

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
