"""
Verify sanity checks on the bundled scenarios:
1. Resource conservation after every granted request
2. Denied requests leave the state untouched
3. Every resident page was loaded, every evicted page was resident
4. Scheduling never double-books the CPU and runs each burst exactly
"""
import sys
import io
sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')

import numpy as np

from utils.scenario_loader import load_scenario
from algorithms.avoidance import check_request, check_safety
from algorithms.paging import simulate_all_strategies
from algorithms.scheduling import simulate_scheduling
from models.process import SchedulingPolicy

print("="*60)
print("SANITY CHECK VERIFICATION")
print("="*60)

# Banker's: totals are conserved across grants
print("\n1. Resource conservation across requests...")
scenario = load_scenario("scenarios/demo_banker.json")
state = scenario.state
totals = state.total_instances()

safety = check_safety(state)
print(f"   Initial state safe: {safety.safe}, sequence: {safety.sequence_str()}")

for req in scenario.requests:
    before = state.copy()
    result = check_request(state, req.pid, req.request)
    print(f"   P{req.pid} {req.request}: {'GRANTED' if result.granted else 'DENIED'}")

    if result.granted:
        state = result.new_state
        if not np.array_equal(state.total_instances(), totals):
            print(f"   ✗ FAILED: totals changed to {state.total_instances()}")
            sys.exit(1)
        if np.any(state.available_vector < 0):
            print(f"   ✗ FAILED: negative available {state.available_vector}")
            sys.exit(1)
    elif result.new_state is not None or state != before:
        print("   ✗ FAILED: denied request modified the state")
        sys.exit(1)

print(f"   ✓ Totals conserved: {[int(x) for x in totals]}")

# Paging: trace consistency
print("\n2. Page replacement trace consistency...")
for path in ["scenarios/paging_classic.json",
             "scenarios/paging_extended.json",
             "scenarios/paging_complex.json"]:
    scenario = load_scenario(path)
    results = simulate_all_strategies(scenario.reference_string, scenario.num_frames)

    for result in results:
        resident = ()
        for step in result.steps:
            if step.evicted is not None and step.evicted not in resident:
                print(f"   ✗ FAILED: {result.strategy.value} evicted non-resident page {step.evicted}")
                sys.exit(1)
            if len(step.frames) > scenario.num_frames:
                print(f"   ✗ FAILED: {result.strategy.value} exceeded {scenario.num_frames} frames")
                sys.exit(1)
            resident = step.frames

    faults = ", ".join(f"{r.strategy.value}={r.total_faults}" for r in results)
    print(f"   ✓ {path}: {faults}")

# Scheduling: CPU time accounting
print("\n3. Scheduling time accounting...")
scenario = load_scenario("scenarios/scheduling_demo.json")
for policy in SchedulingPolicy:
    result = simulate_scheduling(scenario.processes, policy, scenario.time_quantum)

    for earlier, later in zip(result.gantt, result.gantt[1:]):
        if earlier.end > later.start:
            print(f"   ✗ FAILED: {policy.value} overlaps P{earlier.pid} and P{later.pid}")
            sys.exit(1)

    for process in scenario.processes:
        ran = sum(g.duration for g in result.gantt if g.pid == process.pid)
        if ran != process.burst_time:
            print(f"   ✗ FAILED: {policy.value} ran P{process.pid} for {ran}, burst {process.burst_time}")
            sys.exit(1)

    print(f"   ✓ {policy.value}: avg waiting {result.avg_waiting:.2f}")

print("\n" + "="*60)
print("ALL SANITY CHECKS PASSED ✓")
print("="*60)
