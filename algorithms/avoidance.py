"""
Deadlock Avoidance (Banker's Algorithm) request and release evaluation.

Both functions are pure: they take a committed state and return the state
that should be committed next. Nothing is written to the input state.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from models.decision import Decision
from models.system_state import SystemState, InvalidStateError
from algorithms.safety import lte, find_safe_sequence, format_safe_sequence


@dataclass
class RequestOutcome:
    """
    Result of evaluating a resource request.

    Attributes:
        decision: GRANTED, MUST_WAIT or EXCEEDS_CLAIM
        state: State to commit (tentative state if granted, input state otherwise)
        safe_sequence: Safe sequence of the granted state (None unless granted)
        reason: Human-readable explanation of the decision
    """
    decision: Decision
    state: SystemState
    safe_sequence: Optional[List[int]] = None
    reason: str = ""

    @property
    def granted(self) -> bool:
        return self.decision.granted


def _validate_vector(state: SystemState, thread: int, vector: Sequence[int], operation: str) -> np.ndarray:
    """
    Check thread index and vector shape/sign for a request or release.

    Returns:
        The vector as an int array

    Raises:
        InvalidStateError: On bad thread index, wrong length or negative entries
    """
    state.check_thread(thread)

    try:
        raw = np.array(vector)
    except ValueError as e:
        raise InvalidStateError(f"P{thread}: malformed {operation} vector ({e})")
    if raw.size and not np.issubdtype(raw.dtype, np.integer):
        raise InvalidStateError(f"P{thread}: {operation} entries must be integers")

    array = raw.astype(int)
    if array.shape != (state.num_resources,):
        raise InvalidStateError(
            f"P{thread}: {operation} vector has shape {array.shape}, "
            f"expected ({state.num_resources},)"
        )
    if np.any(array < 0):
        raise InvalidStateError(
            f"P{thread}: {operation} vector has negative entries {array.tolist()}"
        )
    return array


def evaluate_request(state: SystemState, thread: int, request: Sequence[int]) -> RequestOutcome:
    """
    Evaluate a resource request using Banker's Algorithm.

    Steps:
    1. Validate: request <= need (otherwise EXCEEDS_CLAIM)
    2. Check: request <= available (otherwise MUST_WAIT)
    3. Tentatively allocate on copies of Available, Allocation and Need
    4. Run safety algorithm on the tentative state
    5. If safe: return the tentative state for commit (GRANTED)
       If unsafe: discard it (MUST_WAIT)

    Args:
        state: Current committed state
        thread: Requesting thread index
        request: [R] units requested per resource type

    Returns:
        RequestOutcome holding the decision and the state to commit

    Raises:
        InvalidStateError: If thread or request violate preconditions
    """
    request = _validate_vector(state, thread, request, "request")

    # Step 1: Claim-bound check
    if not lte(request, state.need[thread]):
        return RequestOutcome(
            Decision.EXCEEDS_CLAIM,
            state,
            reason=f"Request exceeds need (requested: {request.tolist()}, "
                   f"need: {state.need[thread].tolist()})"
        )

    # Step 2: Availability check
    if not lte(request, state.available):
        return RequestOutcome(
            Decision.MUST_WAIT,
            state,
            reason=f"Insufficient resources (requested: {request.tolist()}, "
                   f"available: {state.available.tolist()})"
        )

    # Step 3: Tentative allocation on copies
    available = state.available - request
    allocation = state.allocation.copy()
    allocation[thread] += request
    need = state.need.copy()
    need[thread] -= request

    # Step 4: Safety re-check
    safe_sequence = find_safe_sequence(allocation, available, need)

    # Step 5: Commit or discard
    if safe_sequence is None:
        return RequestOutcome(
            Decision.MUST_WAIT,
            state,
            reason="Unsafe state detected - tentative allocation rolled back"
        )

    tentative = state.replace(available=available, allocation=allocation, need=need)

    # SANITY CHECK: Verify resource conservation after grant
    tentative.assert_resource_conservation(
        state.total_instances, f"after granting {request.tolist()} to P{thread}"
    )

    return RequestOutcome(
        Decision.GRANTED,
        tentative,
        safe_sequence=safe_sequence,
        reason=f"Safe state maintained, sequence: {format_safe_sequence(safe_sequence)}"
    )


def evaluate_release(state: SystemState, thread: int, release: Sequence[int]) -> SystemState:
    """
    Release resources held by a thread.

    Releasing only grows Available and shrinks Allocation, so the result is
    never less safe than the input and no safety re-check is run.

    Args:
        state: Current committed state
        thread: Releasing thread index
        release: [R] units returned per resource type

    Returns:
        The state to commit

    Raises:
        InvalidStateError: If release exceeds the thread's allocation or is malformed
    """
    release = _validate_vector(state, thread, release, "release")

    if not lte(release, state.allocation[thread]):
        raise InvalidStateError(
            f"P{thread}: Cannot release {release.tolist()} - "
            f"only holding {state.allocation[thread].tolist()}"
        )

    allocation = state.allocation.copy()
    allocation[thread] -= release
    need = state.need.copy()
    need[thread] += release

    released = state.replace(
        available=state.available + release,
        allocation=allocation,
        need=need
    )

    # SANITY CHECK: Verify resource conservation after release
    released.assert_resource_conservation(
        state.total_instances, f"after P{thread} released {release.tolist()}"
    )
    return released
