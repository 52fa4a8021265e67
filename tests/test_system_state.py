"""
System State Tests

Tests SystemState construction, Need derivation, invariant checks and display.
"""

import dataclasses
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.system_state import SystemState, InvalidStateError


AVAILABLE = [3, 3, 2]
MAXIMUM = [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]]
ALLOCATION = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]


def _classic_state() -> SystemState:
    return SystemState(num_threads=5, num_resources=3).populate(AVAILABLE, MAXIMUM, ALLOCATION)


def test_empty_state_is_all_zeros():
    """A freshly constructed state has fixed shapes and zero entries."""
    state = SystemState(num_threads=2, num_resources=3)

    assert state.available.shape == (3,)
    assert state.maximum.shape == (2, 3)
    assert state.allocation.shape == (2, 3)
    assert state.need.shape == (2, 3)
    assert not state.available.any()
    assert not state.need.any()


def test_need_is_derived():
    """Need = Max - Allocation."""
    state = _classic_state()

    assert state.need.tolist() == [[7, 4, 3], [1, 2, 2], [6, 0, 0], [0, 1, 1], [4, 3, 1]]


def test_populate_keeps_dimensions():
    empty = SystemState(num_threads=5, num_resources=3)
    state = empty.populate(AVAILABLE, MAXIMUM, ALLOCATION)

    assert state.num_threads == 5
    assert state.num_resources == 3
    # The empty state is not modified
    assert not empty.allocation.any()


def test_total_instances():
    state = _classic_state()
    assert state.total_instances.tolist() == [10, 5, 7]


def test_negative_need_rejected():
    """Allocation above the declared maximum is malformed input."""
    with pytest.raises(InvalidStateError, match="exceeds declared maximum"):
        SystemState(num_threads=1, num_resources=2).populate([1, 1], [[2, 2]], [[3, 0]])


def test_negative_entries_rejected():
    with pytest.raises(InvalidStateError):
        SystemState(num_threads=1, num_resources=2).populate([-1, 1], [[2, 2]], [[0, 0]])
    with pytest.raises(InvalidStateError):
        SystemState(num_threads=1, num_resources=2).populate([1, 1], [[2, -2]], [[0, 0]])
    with pytest.raises(InvalidStateError):
        SystemState(num_threads=1, num_resources=2).populate([1, 1], [[2, 2]], [[0, -1]])


def test_shape_mismatch_rejected():
    state = SystemState(num_threads=2, num_resources=2)

    # Wrong number of rows
    with pytest.raises(InvalidStateError, match="maximum"):
        state.populate([1, 1], [[2, 2]], [[0, 0], [0, 0]])
    # Ragged matrix
    with pytest.raises(InvalidStateError):
        state.populate([1, 1], [[2, 2], [2]], [[0, 0], [0, 0]])
    # Wrong available length
    with pytest.raises(InvalidStateError, match="available"):
        state.populate([1, 1, 1], [[2, 2], [2, 2]], [[0, 0], [0, 0]])


def test_non_integer_entries_rejected():
    with pytest.raises(InvalidStateError, match="integers"):
        SystemState(num_threads=1, num_resources=1).populate([1.5], [[2]], [[0]])


def test_inconsistent_need_rejected():
    with pytest.raises(InvalidStateError, match="Need matrix"):
        SystemState(
            num_threads=1, num_resources=1,
            available=[1], maximum=[[3]], allocation=[[1]], need=[[1]]
        )


def test_negative_dimensions_rejected():
    with pytest.raises(InvalidStateError):
        SystemState(num_threads=-1, num_resources=2)


def test_zero_threads():
    state = SystemState(num_threads=0, num_resources=2).populate([4, 1], [], [])
    assert state.maximum.shape == (0, 2)
    assert state.total_instances.tolist() == [4, 1]


def test_arrays_are_read_only():
    """Committed arrays cannot be modified in place."""
    state = _classic_state()

    with pytest.raises(ValueError):
        state.available[0] = 99
    with pytest.raises(ValueError):
        state.allocation[1][1] = 99


def test_input_lists_are_copied():
    available = list(AVAILABLE)
    state = SystemState(num_threads=5, num_resources=3).populate(available, MAXIMUM, ALLOCATION)

    available[0] = 100
    assert state.available[0] == 3


def test_check_thread():
    state = _classic_state()
    state.check_thread(0)
    state.check_thread(4)

    for bad in (-1, 5, True, "1", 1.0):
        with pytest.raises(InvalidStateError):
            state.check_thread(bad)


def test_resource_conservation_assertion():
    state = _classic_state()
    state.assert_resource_conservation([10, 5, 7], "classic")

    with pytest.raises(AssertionError, match="conservation violated for R0"):
        state.assert_resource_conservation([11, 5, 7], "wrong total")


def test_to_dict():
    snapshot = _classic_state().to_dict()

    assert snapshot['available'] == AVAILABLE
    assert snapshot['maximum'] == MAXIMUM
    assert snapshot['allocation'] == ALLOCATION
    assert snapshot['need'][1] == [1, 2, 2]


def test_display():
    output = _classic_state().display()
    print(output)

    assert "SYSTEM STATE" in output
    assert "Available Resources:" in output
    assert "R0: 3, R1: 3, R2: 2" in output
    assert "Need Matrix (Max - Allocation):" in output
    assert "P4:" in output


def test_replace_keeps_maximum():
    state = _classic_state()
    allocation = state.allocation.copy()
    allocation[0][0] += 1
    need = state.need.copy()
    need[0][0] -= 1

    new_state = state.replace(
        available=state.available - np.array([1, 0, 0]),
        allocation=allocation,
        need=need
    )

    assert np.array_equal(new_state.maximum, state.maximum)
    assert new_state.available.tolist() == [2, 3, 2]
    assert state.available.tolist() == AVAILABLE


def test_fields_cannot_be_reassigned():
    """Dimensions and arrays are fixed once the state is built."""
    state = _classic_state()

    with pytest.raises(dataclasses.FrozenInstanceError):
        state.num_threads = 6
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.available = np.array([9, 9, 9])

    assert state.num_threads == 5
    assert state.available.tolist() == AVAILABLE


def test_populate_rejects_missing_matrices():
    empty = SystemState(num_threads=1, num_resources=1)

    with pytest.raises(InvalidStateError, match="allocation: missing"):
        empty.populate([1], [[3]], None)
    with pytest.raises(InvalidStateError, match="available: missing"):
        empty.populate(None, [[3]], [[0]])


def test_oversized_integers_rejected():
    with pytest.raises(InvalidStateError, match="out of range"):
        SystemState(num_threads=1, num_resources=1).populate([10**30], [[2]], [[0]])
