"""
main.py — command-line entry point.

    recording JSON → Recording → AssessmentEngine → result JSON on stdout

Each input file is an independent session. Several files are scored in
parallel through joblib (--jobs).
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from handrom.config import AssessmentConfig, default_config
from handrom.core.batch import Recording, score_sessions
from handrom.domain.enums import AssessmentType, HandType
from handrom.logging_setup import configure_logging
from handrom.metrics.interpretation import interpret

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="handrom",
        description="Score hand/wrist range-of-motion recordings.",
    )
    parser.add_argument("recordings", nargs="+", help="recording JSON file(s)")
    parser.add_argument("--config", help="JSON file with AssessmentConfig overrides")
    parser.add_argument("--type", dest="assessment_type",
                        choices=[t.value for t in AssessmentType],
                        help="override the file's assessmentType")
    parser.add_argument("--hand", choices=[h.value for h in (HandType.LEFT, HandType.RIGHT)],
                        help="force the tracked hand instead of resolving it")
    parser.add_argument("--jobs", type=int, default=1, help="parallel workers (-1 = all cores)")
    parser.add_argument("--interpret", action="store_true",
                        help="add clinical interpretation bands to the output")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for INFO, -vv for DEBUG logging")
    return parser


def _read_json(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc})") from exc


def load_config(path: Optional[str]) -> AssessmentConfig:
    if path is None:
        return default_config
    overrides = _read_json(path)
    if not isinstance(overrides, dict):
        raise ValueError(f"{path}: config must be a JSON object")
    return AssessmentConfig.from_dict(overrides)


def load_recording(path: str, assessment_type: Optional[str] = None,
                   hand: Optional[str] = None) -> Recording:
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: recording must be a JSON object")
    data = dict(data)
    if assessment_type:
        data["assessmentType"] = assessment_type
    if hand:
        data["handType"] = hand
    return Recording.from_dict(data)


def run(argv: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = load_config(args.config)
    if args.config:
        logger.info("[CLI] config overrides from %s", args.config)
    recordings = [load_recording(p, args.assessment_type, args.hand) for p in args.recordings]
    results = score_sessions(recordings, n_jobs=args.jobs, config=config)

    output: List[Dict[str, Any]] = []
    for path, recording, result in zip(args.recordings, recordings, results):
        entry: Dict[str, Any] = {
            "source": path,
            "assessmentType": recording.assessment_type.value,
            "result": result.to_dict(),
        }
        if args.interpret:
            entry["interpretation"] = interpret(result).to_dict()
        output.append(entry)
    return output


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        output = run(argv)
    except (ValueError, OSError) as exc:
        print(f"handrom: error: {exc}", file=sys.stderr)
        return 2
    json.dump(output if len(output) > 1 else output[0], sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
