"""How much a distinguish run gave away."""

from collections import Counter
from typing import Any, Dict, List

from .distinguish import DistinguishResult
from .events import trajectory_items


def compute_disclosure_report(result: DistinguishResult) -> Dict[str, Any]:
    """Summarize what every surviving scenario agrees on.

    A history present in all scenarios belongs to some member for sure;
    an item present in all scenarios (with multiplicity) was certainly
    handed out, even if its owner is unknown.
    """
    metrics: Dict[str, Any] = {
        'n_scenarios': len(result.scenarios),
        'n_trajectories': result.n_trajectories,
        'n_candidate_scenarios': result.n_candidates,
        'group_size': result.group_size,
        'timeline_end': result.timeline_end,
        'fully_disclosed': result.fully_disclosed,
        'periods_processed': [s.period for s in result.expansions],
        'nodes_added': sum(s.nodes_added for s in result.expansions),
        'leaves_pruned': sum(s.leaves_pruned for s in result.expansions),
    }

    if not result.scenarios:
        metrics['disclosed_histories'] = 0
        metrics['certain_items'] = []
        return metrics

    shared_histories = Counter(result.scenarios[0])
    shared_items = Counter(
        item for trajectory in result.scenarios[0] for item in trajectory_items(trajectory)
    )
    for scenario in result.scenarios[1:]:
        shared_histories &= Counter(scenario)
        shared_items &= Counter(
            item for trajectory in scenario for item in trajectory_items(trajectory)
        )

    certain: List[Dict[str, int]] = []
    for item, times in sorted(shared_items.items()):
        certain.append({
            'period': item.period,
            'category_id': item.category_id,
            'value': item.value,
            'count': times,
        })
    metrics['disclosed_histories'] = sum(shared_histories.values())
    metrics['certain_items'] = certain
    return metrics


def print_disclosure_report(metrics: Dict[str, Any]) -> None:
    """Print a formatted disclosure report."""
    print("=" * 80)
    print("Disclosure Report")
    print("=" * 80)

    print(f"\nGroup size: {metrics.get('group_size', 0)}")
    print(f"Timeline end: {metrics.get('timeline_end', 0)}")
    print(f"Active periods: {len(metrics.get('periods_processed', []))}")

    print(f"\nMatching scenarios: {metrics.get('n_scenarios', 0)}")
    print(f"  Candidate scenarios checked: {metrics.get('n_candidate_scenarios', 0)}")
    print(f"  Distinct member histories: {metrics.get('n_trajectories', 0)}")
    if metrics.get('fully_disclosed'):
        print("  (Every member's history is fully determined by the averages)")

    print(f"\nHistories present in every scenario: {metrics.get('disclosed_histories', 0)}")
    certain = metrics.get('certain_items', [])
    print(f"Grades present in every scenario: {sum(i['count'] for i in certain)}")
    for item in certain:
        print(
            f"  period {item['period']}, category {item['category_id']}: "
            f"{item['value']} x{item['count']}"
        )

    print("\n" + "=" * 80)
