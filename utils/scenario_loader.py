"""
Scenario Loader for the OS Concepts Simulator.

Loads and validates JSON scenario files for the three simulators. A
scenario's "type" field selects "bankers", "paging" or "scheduling".
"""

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Union

from models.paging import MAX_FRAMES
from models.process import MAX_PROCESSES, Process, ProcessTable, SchedulingPolicy
from models.resource_state import MAX_RESOURCES, ResourceState, validate_shapes


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


POLICY_NAMES = {
    'fcfs': SchedulingPolicy.FCFS,
    'sjf': SchedulingPolicy.SJF,
    'priority': SchedulingPolicy.PRIORITY,
    'rr': SchedulingPolicy.ROUND_ROBIN,
    'round_robin': SchedulingPolicy.ROUND_ROBIN,
}


@dataclass
class ResourceRequest:
    """A resource request to evaluate against a Banker's scenario."""
    pid: int
    request: List[int]


@dataclass
class BankersScenario:
    state: ResourceState
    requests: List[ResourceRequest] = field(default_factory=list)
    description: str = ""


@dataclass
class PagingScenario:
    reference_string: List[int]
    num_frames: int
    description: str = ""


@dataclass
class SchedulingScenario:
    processes: List[Process]
    policy: Optional[SchedulingPolicy] = None
    time_quantum: Optional[int] = None
    description: str = ""


Scenario = Union[BankersScenario, PagingScenario, SchedulingScenario]


def load_scenario(file_path: str) -> Scenario:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        BankersScenario, PagingScenario or SchedulingScenario

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    return parse_scenario(data)


def parse_scenario(data: Dict[str, Any]) -> Scenario:
    """
    Build a scenario from already-decoded JSON data.

    Raises:
        ScenarioLoadError: If the data is invalid
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")
    if 'type' not in data:
        raise ScenarioLoadError("Scenario missing 'type' field")

    scenario_type = data['type']
    if scenario_type == 'bankers':
        return _load_bankers(data)
    elif scenario_type == 'paging':
        return _load_paging(data)
    elif scenario_type == 'scheduling':
        return _load_scheduling(data)

    raise ScenarioLoadError(
        f"Unknown scenario type '{scenario_type}' (expected bankers, paging or scheduling)"
    )


def _require(data: Dict, name: str, context: str) -> Any:
    if not isinstance(data, dict):
        raise ScenarioLoadError(f"{context} must be a JSON object")
    if name not in data:
        raise ScenarioLoadError(f"{context} missing '{name}' field")
    return data[name]


def _as_int(value: Any, name: str, minimum: int = 0) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ScenarioLoadError(f"'{name}' must be an integer (got {value!r})")
    if value < minimum:
        raise ScenarioLoadError(f"'{name}' must be >= {minimum} (got {value})")
    return value


def _int_list(values: Any, name: str) -> List[int]:
    if not isinstance(values, list):
        raise ScenarioLoadError(f"'{name}' must be a list")
    return [_as_int(v, f"{name}[{i}]") for i, v in enumerate(values)]


def _load_bankers(data: Dict) -> BankersScenario:
    """
    Load a Banker's Algorithm scenario.

    Counts are limited to 1..MAX_PROCESSES processes and 1..MAX_RESOURCES
    resource types. A negative need is NOT rejected here: it is reported by
    the safety check itself.
    """
    allocation = [
        _int_list(row, f"allocation[{i}]")
        for i, row in enumerate(_require(data, 'allocation', "Bankers scenario"))
    ]
    max_demand = [
        _int_list(row, f"max[{i}]")
        for i, row in enumerate(_require(data, 'max', "Bankers scenario"))
    ]
    available = _int_list(_require(data, 'available', "Bankers scenario"), 'available')

    if not 1 <= len(allocation) <= MAX_PROCESSES:
        raise ScenarioLoadError(f"Number of processes must be between 1 and {MAX_PROCESSES}")
    if not 1 <= len(available) <= MAX_RESOURCES:
        raise ScenarioLoadError(f"Number of resources must be between 1 and {MAX_RESOURCES}")

    error = validate_shapes(allocation, max_demand, available)
    if error:
        raise ScenarioLoadError(error.message)

    state = ResourceState.from_lists(allocation, max_demand, available)

    requests = []
    for i, req in enumerate(data.get('requests', [])):
        pid = _as_int(_require(req, 'pid', f"Request {i}"), f"requests[{i}].pid")
        if pid >= state.num_processes:
            raise ScenarioLoadError(f"Request {i}: unknown process P{pid}")
        amounts = _int_list(_require(req, 'request', f"Request {i}"), f"requests[{i}].request")
        if len(amounts) != state.num_resources:
            raise ScenarioLoadError(
                f"Request {i}: length ({len(amounts)}) does not match resource count "
                f"({state.num_resources})"
            )
        requests.append(ResourceRequest(pid=pid, request=amounts))

    return BankersScenario(
        state=state,
        requests=requests,
        description=data.get('description', '')
    )


def parse_reference_string(value: Union[str, List[int]]) -> List[int]:
    """
    Parse a reference string given as a list or as text.

    Text may separate page ids with commas and/or whitespace, e.g.
    "7,0,1 2, 0". Tokens that are not non-negative integers are rejected.

    Raises:
        ScenarioLoadError: If a token is not a non-negative integer
    """
    if isinstance(value, list):
        return _int_list(value, 'reference_string')

    if not isinstance(value, str):
        raise ScenarioLoadError("'reference_string' must be a list or a string")

    pages = []
    for token in re.split(r"[,\s]+", value.strip()):
        if not token:
            continue
        if not token.isdigit():
            raise ScenarioLoadError(
                f"Invalid page '{token}' in reference string. "
                f"Please use comma-separated numbers (e.g., 7,0,1,2,0,3)."
            )
        pages.append(int(token))
    return pages


def _load_paging(data: Dict) -> PagingScenario:
    """Load a page replacement scenario."""
    reference_string = parse_reference_string(
        _require(data, 'reference_string', "Paging scenario")
    )
    if not reference_string:
        raise ScenarioLoadError("Please enter a reference string")

    num_frames = _as_int(_require(data, 'num_frames', "Paging scenario"), 'num_frames', minimum=1)
    if num_frames > MAX_FRAMES:
        raise ScenarioLoadError(f"Number of frames cannot exceed {MAX_FRAMES}.")
    if num_frames > len(reference_string):
        raise ScenarioLoadError(
            "Number of frames cannot exceed the length of the reference string."
        )

    return PagingScenario(
        reference_string=reference_string,
        num_frames=num_frames,
        description=data.get('description', '')
    )


def _load_process(proc_data: Dict) -> Process:
    """
    Load a single process from scenario data.

    Raises:
        ScenarioLoadError: If a field is missing or out of range
    """
    if not isinstance(proc_data, dict):
        raise ScenarioLoadError("Process entry must be a JSON object")
    for name in ['pid', 'arrival_time', 'burst_time']:
        if name not in proc_data:
            raise ScenarioLoadError(f"Process missing required field: {name}")

    pid = _as_int(proc_data['pid'], 'pid')
    priority = proc_data.get('priority')

    return Process(
        pid=pid,
        arrival_time=_as_int(proc_data['arrival_time'], f"P{pid}.arrival_time"),
        burst_time=_as_int(proc_data['burst_time'], f"P{pid}.burst_time", minimum=1),
        priority=None if priority is None else _as_int(priority, f"P{pid}.priority")
    )


def _load_scheduling(data: Dict) -> SchedulingScenario:
    """Load a CPU scheduling scenario; duplicate pids are rejected."""
    proc_list = _require(data, 'processes', "Scheduling scenario")
    if not isinstance(proc_list, list):
        raise ScenarioLoadError("'processes' must be a list")
    if len(proc_list) > MAX_PROCESSES:
        raise ScenarioLoadError(f"At most {MAX_PROCESSES} processes are supported")

    table = ProcessTable()
    for proc_data in proc_list:
        error = table.add(_load_process(proc_data))
        if error:
            raise ScenarioLoadError(str(error))

    policy = None
    if 'policy' in data:
        policy_name = str(data['policy']).lower()
        if policy_name not in POLICY_NAMES:
            raise ScenarioLoadError(
                f"Unknown policy '{data['policy']}' (expected one of {', '.join(sorted(POLICY_NAMES))})"
            )
        policy = POLICY_NAMES[policy_name]

    time_quantum = None
    if data.get('time_quantum') is not None:
        time_quantum = _as_int(data['time_quantum'], 'time_quantum', minimum=1)

    return SchedulingScenario(
        processes=list(table),
        policy=policy,
        time_quantum=time_quantum,
        description=data.get('description', '')
    )


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present or unreadable
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')
