"""
Resource State Oracle.

Owns the committed allocation state and answers safety queries, resource
requests and releases. The oracle is not synchronized: an embedding system
must serialize calls to request() and release().
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple

from models.decision import Decision
from models.system_state import SystemState
from algorithms.safety import is_safe_state
from algorithms.avoidance import evaluate_request, evaluate_release
from analysis.events import EventLog, OracleEvent, EventType
from utils.logger import OracleLogger


_DECISION_EVENTS = {
    Decision.GRANTED: EventType.GRANTED,
    Decision.MUST_WAIT: EventType.MUST_WAIT,
    Decision.EXCEEDS_CLAIM: EventType.EXCEEDS_CLAIM,
}


class ResourceOracle:
    """
    Decision oracle for deadlock avoidance.

    Every accepted mutation swaps in a complete new SystemState, so
    Available, Allocation and Need are always observed consistent.
    """

    def __init__(
        self,
        state: SystemState,
        logger: Optional[OracleLogger] = None,
        event_log: Optional[EventLog] = None
    ):
        """
        Args:
            state: Initial committed state
            logger: Optional logger for decisions
            event_log: Optional event log to append to (a new one by default)
        """
        self._state = state
        self.logger = logger
        self.event_log = event_log if event_log is not None else EventLog()

    @classmethod
    def from_matrices(
        cls,
        available: Sequence[int],
        maximum: Sequence[Sequence[int]],
        allocation: Sequence[Sequence[int]],
        logger: Optional[OracleLogger] = None
    ) -> "ResourceOracle":
        """Build an oracle from raw vectors; n and m are taken from their shapes."""
        state = SystemState(num_threads=len(maximum), num_resources=len(available))
        return cls(state.populate(available, maximum, allocation), logger=logger)

    @property
    def state(self) -> SystemState:
        """Current committed state (read-only arrays)."""
        return self._state

    def is_safe_state(self) -> Tuple[bool, Optional[List[int]]]:
        """
        Run the safety algorithm on the committed state.

        Returns:
            Tuple of (is_safe, safe_sequence if exists else None)
        """
        safe, safe_sequence = is_safe_state(self._state)

        self.event_log.add(OracleEvent(
            event_type=EventType.SAFETY_CHECK,
            safe_sequence=safe_sequence,
            reason="committed state"
        ))
        if self.logger:
            self.logger.log_safety(safe, safe_sequence)

        return safe, safe_sequence

    def request(self, thread: int, request: Sequence[int]) -> Decision:
        """
        Evaluate a resource request and commit it if granted.

        Args:
            thread: Requesting thread index
            request: [R] units requested

        Returns:
            GRANTED, MUST_WAIT or EXCEEDS_CLAIM

        Raises:
            InvalidStateError: If thread or request violate preconditions
        """
        outcome = evaluate_request(self._state, thread, request)

        if outcome.granted:
            self._state = outcome.state

        vector = np.asarray(request).tolist()
        self.event_log.add(OracleEvent(
            event_type=_DECISION_EVENTS[outcome.decision],
            thread=thread,
            vector=vector,
            safe_sequence=outcome.safe_sequence,
            reason=outcome.reason
        ))
        if self.logger:
            self.logger.log_request(thread, vector, outcome.decision, outcome.reason)
            self.logger.log_system_state(self._state.display())

        return outcome.decision

    def release(self, thread: int, release: Sequence[int]) -> None:
        """
        Return resources held by a thread to the pool.

        Args:
            thread: Releasing thread index
            release: [R] units to release

        Raises:
            InvalidStateError: If release exceeds the thread's allocation
        """
        self._state = evaluate_release(self._state, thread, release)

        vector = np.asarray(release).tolist()
        self.event_log.add(OracleEvent(
            event_type=EventType.RELEASE,
            thread=thread,
            vector=vector
        ))
        if self.logger:
            self.logger.log_release(thread, vector)
            self.logger.log_system_state(self._state.display())

    def release_all(self, thread: int) -> List[int]:
        """
        Release everything a thread holds.

        Returns:
            List of released amounts by resource type
        """
        self._state.check_thread(thread)
        held = self._state.allocation[thread].tolist()
        self.release(thread, held)
        return held
