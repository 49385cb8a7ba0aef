"""Command-line interface for rehearsalplan."""

import argparse
import json
import logging
import sys
from pathlib import Path

from rehearsalplan.config import OptimizerOptions, load_options_yaml
from rehearsalplan.conflicts import analyze_conflicts
from rehearsalplan.errors import SchedulerError
from rehearsalplan.optimizer import optimize
from rehearsalplan.output import (
    format_assignment_csv,
    format_conflict_report,
    format_results,
    result_to_dict,
)
from rehearsalplan.parser import create_event_template, parse_event_yaml, parse_responses_csv


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rehearsalplan",
        description="Pick rehearsal dates for performances whose members overlap.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  rehearsalplan event.yaml
  rehearsalplan event.yaml --responses answers.csv --sessions 2 --seed 7
  rehearsalplan event.yaml --analyze-conflicts --dates 1 3
  rehearsalplan --output-template event.yaml
""",
    )
    parser.add_argument(
        "event_file",
        type=Path,
        nargs="?",
        help="Path to the event YAML/JSON file",
    )
    parser.add_argument(
        "--responses",
        type=Path,
        help="CSV export of participant responses (replaces responses in the event file)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with an 'optimizer' section",
    )
    parser.add_argument("--sessions", type=int, help="Rehearsal sessions per performance (default: 1)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible schedules")
    parser.add_argument("--max-iter", type=int, help="Maximum annealing iterations (default: 10000)")
    parser.add_argument("--time-limit-ms", type=float, help="Stop the search after this many milliseconds")
    parser.add_argument(
        "--format",
        choices=["text", "json", "csv"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--analyze-conflicts",
        action="store_true",
        help="List participants who could be double-booked on each date instead of optimizing",
    )
    parser.add_argument(
        "--dates",
        type=int,
        nargs="+",
        help="Restrict --analyze-conflicts to these date ids",
    )
    parser.add_argument(
        "--output-template",
        type=Path,
        help="Write an example event file to this path and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for rehearsalplan CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.output_template:
        create_event_template(args.output_template)
        print(f"Created event template at: {args.output_template}")
        return 0

    if args.event_file is None:
        parser.error("event_file is required")

    if not args.event_file.exists():
        print(f"Error: Event file not found: {args.event_file}", file=sys.stderr)
        return 1

    try:
        event = parse_event_yaml(args.event_file)
        if args.responses:
            event = parse_responses_csv(args.responses, event)

        if args.analyze_conflicts:
            print(format_conflict_report(analyze_conflicts(event, args.dates)))
            return 0

        options = load_options_yaml(args.config) if args.config else OptimizerOptions()
        options = options.with_overrides(
            sessions=args.sessions,
            seed=args.seed,
            max_iter=args.max_iter,
            time_limit_ms=args.time_limit_ms,
        )
        result = optimize(event, options)
    except (SchedulerError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "json":
        print(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))
    elif args.format == "csv":
        print(format_assignment_csv(result))
    else:
        print(format_results(result))

    return 0


if __name__ == "__main__":
    sys.exit(main())
