#!/usr/bin/env python3
"""CLI for grade-spy."""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, List

import pandas as pd

from .distinguish import DistinguishConfig, distinguish
from .errors import GradeSpyError
from .events import Scenario
from .generator import build_source, generate_grades, ground_truth_scenario
from .report import compute_disclosure_report, print_disclosure_report
from .source import GRADE_COLUMNS, Category, InMemorySource


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='grade-spy: reconstruct individual grades from published class averages',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Random class of 3 over 3 periods with 4 subjects
  grade-spy --group-size 3 --timeline-end 2 --categories 4 --seed 7

  # Known grade table (columns: member,category_id,period,value)
  grade-spy grades.csv --save-report report.json --save-scenarios scenarios.json

  # Engine options from a JSON file
  grade-spy grades.csv --config engine.json -v
        """
    )

    # Input
    parser.add_argument(
        'input_file',
        nargs='?',
        help='Grade table CSV (omit to generate a random class)'
    )
    parser.add_argument(
        '--group-size',
        type=int,
        default=None,
        help='Members in the group (default: 3 for generated classes, the CSV members otherwise)'
    )
    parser.add_argument(
        '--timeline-end',
        type=int,
        default=None,
        help='Last period to process (default: 2 for generated classes, last CSV period otherwise)'
    )
    parser.add_argument(
        '--categories',
        type=int,
        default=4,
        help='Number of categories in a generated class (default: 4)'
    )
    parser.add_argument(
        '--max-categories-per-period',
        type=int,
        default=2,
        help='Categories graded per period in a generated class (default: 2)'
    )
    parser.add_argument(
        '--participation',
        type=float,
        default=1.0,
        help='Chance a member is graded in an active category (default: 1.0)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for generated classes (default: 42)'
    )

    # Engine
    parser.add_argument(
        '--config',
        help='JSON configuration file for the engine'
    )
    parser.add_argument(
        '--slots-per-category',
        type=int,
        default=1,
        help='Grades a member can get per category per period (default: 1)'
    )
    parser.add_argument(
        '--max-concurrency',
        type=int,
        default=1,
        help='Concurrent per-category queries within a period (default: 1, sequential)'
    )
    parser.add_argument(
        '--prune-to-fixed-point',
        action='store_true',
        help='Keep pruning until no stale leaf is left'
    )
    parser.add_argument(
        '--no-cache',
        dest='cache_queries',
        action='store_false',
        help='Send every query to the source, even repeated ones'
    )
    parser.add_argument(
        '--max-scenarios',
        type=int,
        default=None,
        help='Stop after this many matching scenarios'
    )

    # Output
    parser.add_argument(
        '--save-report',
        dest='report_file',
        help='Save disclosure report to JSON file'
    )
    parser.add_argument(
        '--save-scenarios',
        dest='scenarios_file',
        help='Save matching scenarios to JSON file'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    return parser.parse_args(argv)


def load_config(config_file: str) -> dict:
    """Load configuration from JSON file."""
    with open(config_file, 'r') as f:
        return json.load(f)


def load_grades(input_file: str) -> pd.DataFrame:
    """Load a grade table, keeping only the known columns."""
    grades = pd.read_csv(input_file)
    missing = set(GRADE_COLUMNS) - set(grades.columns)
    if missing:
        raise ValueError(f"missing columns: {', '.join(sorted(missing))}")
    grades = grades[GRADE_COLUMNS].copy()
    for col in ('category_id', 'period', 'value'):
        grades[col] = grades[col].astype(int)
    return grades


def scenarios_to_json(scenarios: List[Scenario]) -> List[List[List[Dict[str, Any]]]]:
    """Scenarios as nested lists: scenario -> member history -> day events.

    Every day event is kept, empty ones included, as
    ``{'period': p, 'items': [{'category_id': c, 'value': v}, ...]}``.
    """
    out = []
    for scenario in scenarios:
        members = []
        for trajectory in scenario:
            members.append([
                {
                    'period': event.period,
                    'items': [
                        {'category_id': item.category_id, 'value': item.value}
                        for item in event.items
                    ],
                }
                for event in trajectory
            ])
        out.append(members)
    return out


def main(argv=None):
    """Main CLI entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    # Config file values override command-line args
    config = {}
    if args.config:
        try:
            config = load_config(args.config)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error loading config: {e}", file=sys.stderr)
            sys.exit(1)
        if args.verbose:
            print(f"Loaded configuration from {args.config}")

    engine_kwargs = {
        'slots_per_category': args.slots_per_category,
        'max_concurrency': args.max_concurrency,
        'prune_to_fixed_point': args.prune_to_fixed_point,
        'cache_queries': args.cache_queries,
        'max_scenarios': args.max_scenarios,
    }
    engine_kwargs.update(config)
    try:
        engine_config = DistinguishConfig.from_dict(engine_kwargs)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.input_file:
        if not os.path.exists(args.input_file):
            print(f"Error: Input file not found: {args.input_file}", file=sys.stderr)
            sys.exit(1)
        try:
            grades = load_grades(args.input_file)
        except (ValueError, OSError) as e:
            print(f"Error loading grades: {e}", file=sys.stderr)
            sys.exit(1)
        members = sorted(grades['member'].unique().tolist(), key=str)
        if args.group_size is not None and len(members) < args.group_size:
            # members who never got a grade still count towards the group
            members += [f"silent-{i}" for i in range(args.group_size - len(members))]
        categories = [Category(id=c, name=str(c)) for c in sorted(grades['category_id'].unique().tolist())]
        timeline_end = args.timeline_end
        if timeline_end is None:
            timeline_end = int(grades['period'].max()) if not grades.empty else 0
        source = InMemorySource(members, categories, timeline_end, grades=grades)
        truth = ground_truth_scenario(grades, members)
        if args.verbose:
            print(f"Loaded {len(grades)} grades for {len(members)} members from {args.input_file}")
    else:
        group_size = args.group_size if args.group_size is not None else 3
        timeline_end = args.timeline_end if args.timeline_end is not None else 2
        try:
            grades = generate_grades(
                group_size,
                timeline_end,
                args.categories,
                seed=args.seed,
                max_categories_per_period=args.max_categories_per_period,
                participation=args.participation,
            )
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        source = build_source(grades, group_size, args.categories, timeline_end)
        truth = ground_truth_scenario(grades, source.members)
        if args.verbose:
            print(f"Generated {len(grades)} grades for {group_size} members")

    try:
        result = asyncio.run(distinguish(source, engine_config))
    except GradeSpyError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    metrics = compute_disclosure_report(result)
    metrics['ground_truth_found'] = truth in result.scenarios
    print_disclosure_report(metrics)
    if not result.scenarios or args.verbose:
        print(f"Ground truth among matches: {metrics['ground_truth_found']}")

    if args.report_file:
        metrics['config'] = engine_config.to_dict()
        with open(args.report_file, 'w') as f:
            json.dump(metrics, f, indent=2, default=str)
        print(f"Disclosure report saved to {args.report_file}")

    if args.scenarios_file:
        with open(args.scenarios_file, 'w') as f:
            json.dump(scenarios_to_json(result.scenarios), f, indent=2)
        print(f"Scenarios saved to {args.scenarios_file}")


if __name__ == '__main__':
    main()
