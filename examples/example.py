#!/usr/bin/env python3
"""Basic example showing how much a class's averages give away."""

import asyncio

from grade_spy import DistinguishConfig, distinguish
from grade_spy.generator import build_source, generate_grades, ground_truth_scenario
from grade_spy.report import compute_disclosure_report, print_disclosure_report


def main():
    print("=" * 80)
    print("grade-spy example")
    print("=" * 80)
    print()

    # A small random class
    print("Creating sample class...")
    grades = generate_grades(group_size=3, timeline_end=2, n_categories=3, seed=42,
                             max_categories_per_period=2)
    print(f"{len(grades)} grades over periods 0..2")
    print(grades.to_string(index=False))
    print()

    source = build_source(grades, group_size=3, n_categories=3, timeline_end=2)

    # Default run: strictly sequential queries, no cascading prune
    print("Running distinguish...")
    result = asyncio.run(distinguish(source))
    metrics = compute_disclosure_report(result)
    print_disclosure_report(metrics)

    truth = ground_truth_scenario(grades, source.members)
    print(f"\nTrue history among the matches: {truth in result.scenarios}")
    print()

    # Same run, pruning dangling histories to a fixed point
    config = DistinguishConfig(prune_to_fixed_point=True)
    cascaded = asyncio.run(distinguish(source, config))
    print(f"With fixed-point pruning: {len(cascaded.scenarios)} matching scenarios")


if __name__ == "__main__":
    main()
