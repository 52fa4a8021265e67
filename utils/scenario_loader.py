"""
Scenario Loader for the Banker's Oracle.

Loads and validates JSON scenario files holding an initial state and a list
of operations to replay against it.
"""

import json
from typing import Dict, List, Any, Tuple

from models.system_state import SystemState, InvalidStateError


OPERATION_TYPES = ('request', 'release', 'check')


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


def load_scenario(file_path: str) -> Tuple[SystemState, List[Dict]]:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Tuple of (SystemState, operations)
        - SystemState: Populated state with Need derived
        - operations: List of operation dictionaries in file order

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


def parse_scenario(data: Dict[str, Any]) -> Tuple[SystemState, List[Dict]]:
    """
    Build a state and operation list from already-decoded scenario data.

    Raises:
        ScenarioLoadError: If the scenario is invalid
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")

    # Validate required fields
    if 'available' not in data:
        raise ScenarioLoadError("Scenario missing 'available' field")
    if 'maximum' not in data:
        raise ScenarioLoadError("Scenario missing 'maximum' field")

    available = data['available']
    maximum = data['maximum']
    if not isinstance(available, list) or not isinstance(maximum, list):
        raise ScenarioLoadError("'available' and 'maximum' must be lists")

    num_threads = len(maximum)
    num_resources = len(available)

    # Get initial allocation (defaults to all zeros)
    allocation = data.get('allocation', [[0] * num_resources for _ in range(num_threads)])
    if not isinstance(allocation, list):
        raise ScenarioLoadError("'allocation' must be a list")

    try:
        state = SystemState(num_threads=num_threads, num_resources=num_resources)
        state = state.populate(available, maximum, allocation)
    except InvalidStateError as e:
        raise ScenarioLoadError(f"Invalid initial state: {e}")

    operations = _load_operations(data.get('operations', []), state)

    return state, operations


def _load_operations(operation_data: List[Dict], state: SystemState) -> List[Dict]:
    """
    Validate the operation list against the state dimensions.

    Args:
        operation_data: List of operation dictionaries
        state: Initial state (for thread and vector validation)

    Returns:
        List of validated operation dictionaries
    """
    if not isinstance(operation_data, list):
        raise ScenarioLoadError("'operations' must be a list")

    operations = []
    for index, operation in enumerate(operation_data):
        validate_operation(index, operation, state)
        operations.append(dict(operation))

    return operations


def validate_operation(index: int, operation: Dict, state: SystemState) -> None:
    """
    Validate a single operation.

    Raises:
        ScenarioLoadError: If operation is invalid
    """
    if not isinstance(operation, dict) or 'type' not in operation:
        raise ScenarioLoadError(f"Operation {index}: missing 'type' field")

    op_type = operation['type']

    if op_type == 'check':
        return

    if op_type not in OPERATION_TYPES:
        raise ScenarioLoadError(f"Operation {index}: unknown operation type '{op_type}'")

    if 'thread' not in operation:
        raise ScenarioLoadError(f"Operation {index}: {op_type} missing 'thread'")
    if 'vector' not in operation:
        raise ScenarioLoadError(f"Operation {index}: {op_type} missing 'vector'")

    thread = operation['thread']
    if isinstance(thread, bool) or not isinstance(thread, int) or not 0 <= thread < state.num_threads:
        raise ScenarioLoadError(f"Operation {index}: invalid thread {thread!r}")

    vector = operation['vector']
    if not isinstance(vector, list) or len(vector) != state.num_resources:
        raise ScenarioLoadError(
            f"Operation {index}: {op_type} vector must have {state.num_resources} entries"
        )
    if any(isinstance(v, bool) or not isinstance(v, int) or v < 0 for v in vector):
        raise ScenarioLoadError(
            f"Operation {index}: {op_type} vector entries must be non-negative integers"
        )


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')
