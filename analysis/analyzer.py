"""
Comparison Analysis for the OS Concepts Simulator.

Ranks page replacement strategies by fault count and scheduling policies
by average waiting time. Pure post-processing over computed results.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass
import statistics

from algorithms.paging import simulate_paging
from algorithms.scheduling import simulate_scheduling
from analysis.metrics import SchedulingMetrics
from models.paging import PagingResult, PagingStrategy
from models.process import Process, SchedulingPolicy, SchedulingResult


@dataclass
class PagingComparisonResult:
    """Summary of one strategy in a paging comparison."""
    strategy: PagingStrategy
    page_faults: int
    hits: int
    hit_rate: float  # hits / references
    fault_rate: float  # faults / references
    efficiency: float  # % fewer faults than the worst strategy
    rank: int = 0

    def display(self) -> str:
        """Format results for display."""
        return (
            f"  {self.strategy.value:<8} faults={self.page_faults:3}  hits={self.hits:3}  "
            f"hit rate={self.hit_rate:.2%}  efficiency={self.efficiency:.2f}%  rank={self.rank}"
        )


@dataclass
class PolicyComparisonResult:
    """Summary of one policy in a scheduling comparison."""
    policy: SchedulingPolicy
    avg_waiting_time: float
    avg_turnaround_time: float
    avg_response_time: float
    cpu_utilization: float
    throughput: float
    rank: int = 0

    def display(self) -> str:
        """Format results for display."""
        return (
            f"  {self.policy.value:<12} wait={self.avg_waiting_time:6.2f}  "
            f"turnaround={self.avg_turnaround_time:6.2f}  response={self.avg_response_time:6.2f}  "
            f"rank={self.rank}"
        )


def _assign_ranks(items: list, key_func: Callable) -> None:
    """Dense-rank items in place (equal keys share a rank); stable order."""
    ordered = sorted(items, key=key_func)
    rank = 0
    previous = None
    for item in ordered:
        value = key_func(item)
        if value != previous:
            rank += 1
            previous = value
        item.rank = rank


def compare_paging_strategies(
    reference_string: Sequence[int],
    num_frames: int,
    strategies: Optional[Sequence[PagingStrategy]] = None
) -> Tuple[List[PagingComparisonResult], Dict[PagingStrategy, PagingResult]]:
    """
    Run several strategies on the same input and rank them by fault count.

    Args:
        reference_string: Page ids in reference order
        num_frames: Number of frames
        strategies: Strategies to compare (default: FIFO, LRU, Optimal)

    Returns:
        Tuple of (comparison rows sorted by rank, raw results by strategy).
        Strategies that rejected the input are left out of the rows.
    """
    if strategies is None:
        strategies = list(PagingStrategy)

    raw_results = {
        strategy: simulate_paging(reference_string, num_frames, strategy)
        for strategy in strategies
    }
    valid = [r for r in raw_results.values() if r.ok]
    if not valid:
        return [], raw_results

    max_faults = max(r.total_faults for r in valid)
    comparison = []
    for result in valid:
        references = len(result.steps)
        efficiency = (
            (max_faults - result.total_faults) / max_faults * 100 if max_faults > 0 else 100.0
        )
        comparison.append(PagingComparisonResult(
            strategy=result.strategy,
            page_faults=result.total_faults,
            hits=result.total_hits,
            hit_rate=result.total_hits / references if references else 0.0,
            fault_rate=result.fault_rate,
            efficiency=efficiency
        ))

    _assign_ranks(comparison, lambda r: r.page_faults)
    comparison.sort(key=lambda r: r.rank)
    return comparison, raw_results


def compare_scheduling_policies(
    processes: Sequence[Process],
    policies: Optional[Sequence[SchedulingPolicy]] = None,
    time_quantum: Optional[int] = None
) -> Tuple[List[PolicyComparisonResult], Dict[SchedulingPolicy, SchedulingResult]]:
    """
    Run several policies on the same processes and rank them by average
    waiting time.

    Args:
        processes: Process descriptors
        policies: Policies to compare (default: all four)
        time_quantum: Quantum for Round Robin

    Returns:
        Tuple of (comparison rows sorted by rank, raw results by policy).
        Policies whose result carries a validation error are skipped.
    """
    if policies is None:
        policies = list(SchedulingPolicy)

    raw_results = {
        policy: simulate_scheduling(processes, policy, time_quantum)
        for policy in policies
    }

    comparison = []
    for policy, result in raw_results.items():
        if not result.ok:
            continue
        metrics = SchedulingMetrics.from_result(result)
        comparison.append(PolicyComparisonResult(
            policy=policy,
            avg_waiting_time=result.avg_waiting,
            avg_turnaround_time=result.avg_turnaround,
            avg_response_time=metrics.avg_response_time,
            cpu_utilization=metrics.get_cpu_utilization(),
            throughput=metrics.get_throughput()
        ))

    _assign_ranks(comparison, lambda r: r.avg_waiting_time)
    comparison.sort(key=lambda r: r.rank)
    return comparison, raw_results


def paging_recommendations(comparison: List[PagingComparisonResult]) -> List[str]:
    """
    Generate textual insights for a paging comparison.

    Args:
        comparison: Rows from compare_paging_strategies (sorted by rank)

    Returns:
        List of recommendation strings
    """
    if not comparison:
        return []

    recommendations = []
    best = comparison[0]
    worst = comparison[-1]

    if best.strategy == PagingStrategy.OPTIMAL:
        recommendations.append(
            "Optimal algorithm achieved the best performance (theoretical minimum page faults)."
        )
    else:
        recommendations.append(
            f"{best.strategy.value} performed best with {best.page_faults} page faults."
        )

    if best.page_faults < worst.page_faults:
        improvement = (worst.page_faults - best.page_faults) / worst.page_faults * 100
        recommendations.append(
            f"Using {best.strategy.value} instead of {worst.strategy.value} would reduce "
            f"page faults by {improvement:.1f}%."
        )

    by_strategy = {r.strategy: r for r in comparison}
    fifo = by_strategy.get(PagingStrategy.FIFO)
    lru = by_strategy.get(PagingStrategy.LRU)
    if fifo and lru:
        if fifo.page_faults > lru.page_faults:
            recommendations.append(
                "LRU outperformed FIFO, indicating temporal locality in the reference string."
            )
        elif fifo.page_faults < lru.page_faults:
            recommendations.append(
                "FIFO outperformed LRU, which is unusual but can occur with specific access patterns."
            )

    if PagingStrategy.OPTIMAL in by_strategy:
        recommendations.append(
            "Optimal algorithm provides the theoretical lower bound for page faults "
            "(not practical in real systems)."
        )

    avg_fault_rate = statistics.mean(r.fault_rate for r in comparison) * 100
    if avg_fault_rate < 30:
        recommendations.append("Overall performance is excellent with low page fault rates.")
    elif avg_fault_rate < 60:
        recommendations.append(
            "Performance is moderate. Consider increasing number of frames to reduce page faults."
        )
    else:
        recommendations.append(
            "Performance is poor with high page fault rates. "
            "Increase frames or optimize reference pattern."
        )

    return recommendations


def _format_best(
    metric_name: str,
    results_list: list,
    key_func: Callable,
    name_func: Callable,
    format_func: Callable,
    higher_is_better: bool = True
) -> str:
    """Format best metric, handling ties. Returns empty string if all tied."""
    if higher_is_better:
        target_value = max(key_func(r) for r in results_list)
    else:
        target_value = min(key_func(r) for r in results_list)

    winners = [r for r in results_list if key_func(r) == target_value]

    # Skip if all entries are tied (meaningless comparison)
    if len(winners) == len(results_list):
        return ""

    if len(winners) == 1:
        return f"  {metric_name}: {name_func(winners[0])} ({format_func(target_value)})\n"
    names = ", ".join(name_func(w) for w in winners)
    return f"  {metric_name}: {names} (tie at {format_func(target_value)})\n"


def generate_paging_report(
    comparison: List[PagingComparisonResult],
    reference_string: Sequence[int],
    num_frames: int
) -> str:
    """
    Generate formatted comparison report for page replacement.

    Args:
        comparison: Rows from compare_paging_strategies
        reference_string: Input reference string
        num_frames: Number of frames

    Returns:
        Formatted string report
    """
    report = "\n" + "="*70 + "\n"
    report += "PAGE REPLACEMENT COMPARISON\n"
    report += "="*70 + "\n"
    report += f"Reference String: {','.join(str(p) for p in reference_string)}\n"
    report += f"Number of Frames: {num_frames}\n"
    report += "-"*70 + "\n"

    for row in comparison:
        report += row.display() + "\n"

    if len(comparison) > 1:
        report += "\nKEY INSIGHTS:\n"
        report += "-"*70 + "\n"
        insight = _format_best(
            "Fewest Page Faults",
            comparison,
            lambda r: r.page_faults,
            lambda r: r.strategy.value,
            lambda v: f"{v} faults",
            higher_is_better=False
        )
        report += insight or "  All strategies produced the same number of page faults.\n"

    recommendations = paging_recommendations(comparison)
    if recommendations:
        report += "\nRECOMMENDATIONS:\n"
        report += "-"*70 + "\n"
        for rec in recommendations:
            report += f"  - {rec}\n"

    report += "="*70 + "\n"
    return report


def generate_scheduling_report(
    comparison: List[PolicyComparisonResult],
    skipped: Optional[Dict[SchedulingPolicy, str]] = None
) -> str:
    """
    Generate formatted comparison report for scheduling policies.

    Args:
        comparison: Rows from compare_scheduling_policies
        skipped: Policies left out, mapped to the reason

    Returns:
        Formatted string report
    """
    report = "\n" + "="*70 + "\n"
    report += "SCHEDULING POLICY COMPARISON\n"
    report += "="*70 + "\n"

    for row in comparison:
        report += row.display() + "\n"

    if skipped:
        report += "\nSkipped:\n"
        for policy, reason in skipped.items():
            report += f"  {policy.value}: {reason}\n"

    if len(comparison) > 1:
        insights = [
            _format_best(
                "Lowest Waiting Time",
                comparison,
                lambda r: r.avg_waiting_time,
                lambda r: r.policy.value,
                lambda v: f"{v:.2f}",
                higher_is_better=False
            ),
            _format_best(
                "Lowest Turnaround Time",
                comparison,
                lambda r: r.avg_turnaround_time,
                lambda r: r.policy.value,
                lambda v: f"{v:.2f}",
                higher_is_better=False
            ),
            _format_best(
                "Lowest Response Time",
                comparison,
                lambda r: r.avg_response_time,
                lambda r: r.policy.value,
                lambda v: f"{v:.2f}",
                higher_is_better=False
            ),
        ]
        insights = [i for i in insights if i]

        report += "\nKEY INSIGHTS:\n"
        report += "-"*70 + "\n"
        if insights:
            for insight in insights:
                report += insight
        else:
            report += "  All policies showed identical performance (complete tie across all metrics).\n"

    report += "="*70 + "\n"
    return report
