"""
Safety Algorithm for the Banker's Oracle.

Decides whether an allocation state is safe, i.e. whether some completion
order lets every thread obtain its remaining need.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple

from models.system_state import SystemState, InvalidStateError


def lte(vec1: Sequence[int], vec2: Sequence[int]) -> bool:
    """
    Check if one vector is element-wise less than or equal to another.

    Args:
        vec1: Left-hand side vector
        vec2: Right-hand side vector

    Returns:
        True if vec1[k] <= vec2[k] for every k

    Raises:
        InvalidStateError: If the vectors differ in length
    """
    vec1 = np.asarray(vec1)
    vec2 = np.asarray(vec2)
    if vec1.shape != vec2.shape:
        raise InvalidStateError(
            f"Vector length mismatch: {vec1.shape} vs {vec2.shape}"
        )
    return bool(np.all(vec1 <= vec2))


def find_safe_sequence(
    allocation: np.ndarray,
    available: np.ndarray,
    need: np.ndarray
) -> Optional[List[int]]:
    """
    Run the safety algorithm on a proposed state.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_threads
    2. Find the lowest-index thread i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], append i, rescan from 0
    4. Stop when all threads finish (SAFE) or a full scan finds none (UNSAFE)

    Time Complexity: O(P²×R)

    Args:
        allocation: [P][R] allocation matrix
        available: [R] available vector
        need: [P][R] need matrix

    Returns:
        Safe sequence of thread indices, or None if the state is unsafe

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    allocation = np.asarray(allocation)
    need = np.asarray(need)
    if allocation.shape != need.shape:
        raise InvalidStateError(
            f"Allocation shape {allocation.shape} does not match Need shape {need.shape}"
        )

    # Work is a private copy; the caller's arrays are never written
    work = np.array(available, dtype=int)
    num_threads = len(need)
    finish = np.zeros(num_threads, dtype=bool)
    safe_sequence = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(num_threads):
            if finish[i]:
                continue

            if lte(need[i], work):
                # Thread can finish: its allocation returns to the pool
                work += allocation[i]
                finish[i] = True
                safe_sequence.append(i)
                made_progress = True
                break  # Restart search from beginning for determinism

    if finish.all():
        return safe_sequence
    return None


def is_safe(state: SystemState) -> Optional[List[int]]:
    """Safe sequence for a state, or None if no such sequence exists."""
    return find_safe_sequence(state.allocation, state.available, state.need)


def is_safe_state(state: SystemState) -> Tuple[bool, Optional[List[int]]]:
    """
    Check if a state is safe.

    Args:
        state: State to check (not modified)

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)
    """
    safe_sequence = is_safe(state)
    return safe_sequence is not None, safe_sequence


def safe_sequence_labels(safe_sequence: Sequence[int]) -> List[str]:
    """Thread labels for a safe sequence, e.g. ['P1', 'P3']."""
    return [f"P{i}" for i in safe_sequence]


def format_safe_sequence(safe_sequence: Optional[Sequence[int]]) -> str:
    """
    Render a safe sequence for display.

    Returns:
        '<P1, P3, P0>' for a sequence, 'not safe' for None
    """
    if safe_sequence is None:
        return "not safe"
    return "<" + ", ".join(safe_sequence_labels(safe_sequence)) + ">"
