#!/usr/bin/env python3
"""
OS Concepts Simulator
Main entry point for the simulation system.

Educational tool for stepping through textbook operating-system
algorithms: Banker's Algorithm, page replacement and CPU scheduling.
"""

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from models.paging import PagingResult, PagingStrategy
from models.process import SchedulingPolicy, SchedulingResult
from models.resource_state import RequestResult, SafetyResult
from utils.scenario_loader import (
    POLICY_NAMES,
    BankersScenario,
    PagingScenario,
    Scenario,
    ScenarioLoadError,
    SchedulingScenario,
    load_scenario,
)
from utils.logger import SimulatorLogger
from algorithms.avoidance import check_request, check_safety
from algorithms.paging import simulate_paging
from algorithms.scheduling import simulate_scheduling
from analysis.analyzer import (
    compare_paging_strategies,
    compare_scheduling_policies,
    generate_paging_report,
    generate_scheduling_report,
)
from analysis.metrics import (
    format_paging_report,
    format_safety_report,
    format_scheduling_report,
)


STRATEGY_NAMES = {
    'fifo': PagingStrategy.FIFO,
    'lru': PagingStrategy.LRU,
    'optimal': PagingStrategy.OPTIMAL,
}


def run_bankers(
    scenario: BankersScenario,
    logger: SimulatorLogger
) -> Tuple[SafetyResult, List[RequestResult]]:
    """
    Run the Banker's safety check, then evaluate scenario requests in order.

    Granted requests are applied before the next request is evaluated;
    denied requests leave the state unchanged.

    Args:
        scenario: Loaded Banker's scenario
        logger: Logger instance

    Returns:
        Tuple of (safety result for the initial state, request results)
    """
    state = scenario.state
    safety = check_safety(state)

    logger.log(format_safety_report(state, safety))
    if safety.error:
        return safety, []
    logger.log_safety(safety.safe, safety.sequence_str())

    request_results = []
    if scenario.requests:
        logger.log("\nResource Requests:")
    for req in scenario.requests:
        result = check_request(state, req.pid, req.request)
        logger.log_request(req.pid, req.request, result.granted, result.reason)
        if result.error:
            logger.log(str(result.error), "warning")
        if result.granted:
            state = result.new_state
            logger.log(f"  Available now: {[int(x) for x in state.available_vector]}", "debug")
        request_results.append(result)

    return safety, request_results


def run_paging(
    scenario: PagingScenario,
    logger: SimulatorLogger,
    strategies: Optional[Sequence[PagingStrategy]] = None
) -> List[PagingResult]:
    """
    Run page replacement strategies over the scenario's reference string.

    With more than one strategy a comparison report follows the traces.

    Args:
        scenario: Loaded paging scenario
        logger: Logger instance
        strategies: Strategies to run (default: all three)

    Returns:
        List of results in strategy order
    """
    if strategies is None:
        strategies = list(PagingStrategy)

    results = []
    for strategy in strategies:
        result = simulate_paging(scenario.reference_string, scenario.num_frames, strategy)
        for step in result.steps:
            logger.log_page_reference(strategy.value, step.step, step.page, step.fault, step.action)
        logger.log(format_paging_report(result, scenario.num_frames, logger.verbose))
        results.append(result)

    if len(strategies) > 1:
        comparison, _ = compare_paging_strategies(
            scenario.reference_string, scenario.num_frames, strategies
        )
        logger.log(generate_paging_report(
            comparison, scenario.reference_string, scenario.num_frames
        ))

    return results


def run_scheduling(
    scenario: SchedulingScenario,
    logger: SimulatorLogger,
    policy: Optional[SchedulingPolicy] = None,
    time_quantum: Optional[int] = None,
    compare: bool = False
) -> List[SchedulingResult]:
    """
    Run CPU scheduling on the scenario's processes.

    Args:
        scenario: Loaded scheduling scenario
        logger: Logger instance
        policy: Policy override (default: scenario policy, then FCFS)
        time_quantum: Quantum override for Round Robin
        compare: Run every policy and print a comparison report

    Returns:
        List of results, one per policy run
    """
    quantum = time_quantum if time_quantum is not None else scenario.time_quantum

    if compare:
        policies = list(SchedulingPolicy)
    else:
        policies = [policy or scenario.policy or SchedulingPolicy.FCFS]

    results = []
    for current in policies:
        result = simulate_scheduling(scenario.processes, current, quantum)
        for entry in result.gantt:
            logger.log_dispatch(current.value, entry.pid, entry.start, entry.end)
        logger.log(format_scheduling_report(result, logger.verbose))
        results.append(result)

    if compare:
        comparison, raw_results = compare_scheduling_policies(scenario.processes, policies, quantum)
        skipped = {p: str(r.error) for p, r in raw_results.items() if not r.ok}
        logger.log(generate_scheduling_report(comparison, skipped))

    return results


def run_simulation(
    scenario_path: str,
    verbose: bool = False,
    compare: bool = False,
    policy: Optional[SchedulingPolicy] = None,
    strategy: Optional[PagingStrategy] = None,
    time_quantum: Optional[int] = None,
    log_file: Optional[str] = None
) -> Tuple[Optional[Scenario], list]:
    """
    Load a scenario and run the matching simulator.

    Args:
        scenario_path: Path to scenario JSON file
        verbose: Enable verbose logging
        compare: Compare all scheduling policies (scheduling scenarios)
        policy: Scheduling policy override
        strategy: Run only this paging strategy (default: all three)
        time_quantum: Round Robin quantum override
        log_file: Optional file to mirror the output to

    Returns:
        Tuple of (scenario or None if loading failed, list of results).
        For Banker's scenarios the list is [SafetyResult, *RequestResults].
    """
    logger = SimulatorLogger(verbose=verbose, log_file=log_file)

    try:
        scenario = load_scenario(scenario_path)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load scenario: {e}", "error")
        logger.close()
        return None, []

    logger.log(f"\n{'='*60}")
    logger.log(f"Scenario: {scenario_path}")
    if scenario.description:
        logger.log(f"Description: {scenario.description}")
    logger.log(f"{'='*60}")

    if isinstance(scenario, BankersScenario):
        safety, request_results = run_bankers(scenario, logger)
        results = [safety] + request_results
    elif isinstance(scenario, PagingScenario):
        results = run_paging(scenario, logger, [strategy] if strategy else None)
    else:
        results = run_scheduling(scenario, logger, policy, time_quantum, compare)

    logger.close()
    return scenario, results


def _primary_ok(results: list) -> bool:
    """True if every simulator result (request decisions aside) is valid."""
    return all(r.ok for r in results if not isinstance(r, RequestResult))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description='OS Concepts Simulator: Banker\'s Algorithm, page replacement and CPU scheduling'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    parser.add_argument(
        '--policy',
        choices=sorted(POLICY_NAMES),
        help='Scheduling policy (overrides the scenario policy; default: fcfs)'
    )
    parser.add_argument(
        '--quantum',
        type=int,
        help='Round Robin time quantum (overrides the scenario value)'
    )
    parser.add_argument(
        '--strategy',
        choices=sorted(STRATEGY_NAMES),
        help='Run a single page replacement strategy (default: all three)'
    )
    parser.add_argument(
        '--compare',
        action='store_true',
        help='Compare all scheduling policies on the scenario'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write output to this file'
    )

    args = parser.parse_args(argv)

    if args.compare and args.policy:
        parser.error('--compare runs every policy; do not combine it with --policy')

    scenario, results = run_simulation(
        args.scenario,
        verbose=args.verbose,
        compare=args.compare,
        policy=POLICY_NAMES[args.policy] if args.policy else None,
        strategy=STRATEGY_NAMES[args.strategy] if args.strategy else None,
        time_quantum=args.quantum,
        log_file=args.log_file
    )

    if scenario is None:
        return 1
    if args.compare:
        # Skipped policies are reported, not fatal
        return 0 if any(r.ok for r in results) else 1
    return 0 if _primary_ok(results) else 1


if __name__ == '__main__':
    sys.exit(main())
