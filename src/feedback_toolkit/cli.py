"""
Command-line front end.

Usage:
    feedback-toolkit evaluate questions.json --max-duration 60 --algorithm dynamic_programming
    feedback-toolkit group questions.json --max-group-size 3
    feedback-toolkit optimal questions.json --max-call-duration 90
    feedback-toolkit strategies [questions.json --preference speed]
    feedback-toolkit perf-check

Results are printed to stdout as JSON. Exit code 2 means invalid input.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from feedback_toolkit.core.schemas.validator import ValidationError
from feedback_toolkit.core.utils.serialization import (
    evaluation_result_to_dict,
    grouping_result_to_dict,
    load_existing_groups_json,
    load_questions_json,
    optimal_grouping_to_dict,
)
from feedback_toolkit.engine.controller import QuestionEvaluationService
from feedback_toolkit.engine.grouping import GroupingOptions
from feedback_toolkit.engine.selection import AlgorithmPreference, Constraints, SelectionAlgorithm

logger = logging.getLogger("feedback_toolkit.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedback-toolkit",
        description="Select and group feedback call questions",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="Select questions for one call")
    evaluate.add_argument("questions", type=Path, help="JSON or JSONL question file")
    evaluate.add_argument("--max-duration", type=float, default=90.0, help="Call budget in seconds")
    evaluate.add_argument("--priority-threshold", type=int, default=2, help="Minimum priority (1-5)")
    evaluate.add_argument(
        "--algorithm",
        default=SelectionAlgorithm.GREEDY_PRIORITY.value,
        choices=[a.value for a in SelectionAlgorithm],
        help="Selection strategy",
    )

    group = sub.add_parser("group", help="Group questions by topic")
    group.add_argument("questions", type=Path, help="JSON or JSONL question file")
    group.add_argument("--existing-groups", type=Path, help="JSON file of existing groups")
    group.add_argument("--max-group-size", type=int, default=4)
    group.add_argument("--min-compatibility", type=float, default=0.6)
    group.add_argument("--no-semantic", action="store_true", help="Group by topic only")

    optimal = sub.add_parser("optimal", help="Search grouping profiles for one call")
    optimal.add_argument("questions", type=Path, help="JSON or JSONL question file")
    optimal.add_argument("--max-call-duration", type=float, default=90.0)

    strategies = sub.add_parser("strategies", help="List selection strategies")
    strategies.add_argument(
        "questions", type=Path, nargs="?", help="Also recommend a strategy for this file"
    )
    strategies.add_argument(
        "--preference",
        default=AlgorithmPreference.BALANCED.value,
        choices=[p.value for p in AlgorithmPreference],
    )

    perf = sub.add_parser("perf-check", help="Run the synthetic latency check")
    perf.add_argument("--sample-size", type=int, default=40)

    return parser


def _run(args: argparse.Namespace, service: QuestionEvaluationService) -> dict | list:
    if args.command == "evaluate":
        constraints = Constraints(
            max_duration_seconds=args.max_duration,
            priority_threshold=args.priority_threshold,
            algorithm=args.algorithm,
        )
        questions = load_questions_json(args.questions)
        return evaluation_result_to_dict(service.evaluate(questions, constraints))

    if args.command == "group":
        options = GroupingOptions(
            max_group_size=args.max_group_size,
            min_compatibility_score=args.min_compatibility,
            use_semantic_similarity=not args.no_semantic,
        )
        existing = []
        if args.existing_groups:
            existing = load_existing_groups_json(args.existing_groups)
        questions = load_questions_json(args.questions)
        return grouping_result_to_dict(service.group(questions, options, existing))

    if args.command == "optimal":
        questions = load_questions_json(args.questions)
        return optimal_grouping_to_dict(
            service.find_optimal_grouping(questions, args.max_call_duration)
        )

    if args.command == "strategies":
        listed = service.available_strategies()
        if args.questions is None:
            return listed
        questions = load_questions_json(args.questions)
        recommended = service.recommend_algorithm(questions, args.preference)
        return {
            "recommended": recommended.value,
            "preference": args.preference,
            "candidate_count": len(questions),
            "strategies": listed,
        }

    check = service.validate_performance_requirement(sample_size=args.sample_size)
    return {
        "passed": check.passed,
        "processing_time_ms": check.processing_time_ms,
        "sla_ms": check.sla_ms,
        "sample_size": check.sample_size,
        "selected_count": check.selected_count,
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )

    try:
        output = _run(args, QuestionEvaluationService())
    except ValidationError as e:
        logger.error(f"Invalid input: {e}")
        for detail in e.errors[1:]:
            logger.error(f"  - {detail}")
        return 2
    except OSError as e:
        logger.error(f"Could not read input: {e}")
        return 1

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
