"""
Event Model for the Banker's Oracle.

Records every decision the oracle makes, in order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EventType(Enum):
    """Types of oracle events."""
    GRANTED = "granted"
    MUST_WAIT = "must_wait"
    EXCEEDS_CLAIM = "exceeds_claim"
    RELEASE = "release"
    SAFETY_CHECK = "safety_check"


@dataclass
class OracleEvent:
    """
    Represents a single oracle decision.

    Attributes:
        seq: Position of the event in the log (assigned by EventLog.add)
        event_type: Type of event
        thread: Thread index involved (None for safety checks)
        vector: Request or release vector (if applicable)
        safe_sequence: Safe sequence witnessed (if any)
        reason: Explanation of the decision
    """
    event_type: EventType
    thread: Optional[int] = None
    vector: Optional[List[int]] = None
    safe_sequence: Optional[List[int]] = None
    reason: str = ""
    seq: int = -1

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"#{self.seq}"

        if self.event_type == EventType.GRANTED:
            return f"{base}: P{self.thread} requests {self.vector} - GRANTED ({self.reason})"
        elif self.event_type == EventType.MUST_WAIT:
            return f"{base}: P{self.thread} requests {self.vector} - MUST WAIT ({self.reason})"
        elif self.event_type == EventType.EXCEEDS_CLAIM:
            return f"{base}: P{self.thread} requests {self.vector} - EXCEEDS CLAIM ({self.reason})"
        elif self.event_type == EventType.RELEASE:
            return f"{base}: P{self.thread} releases {self.vector}"
        else:
            verdict = "SAFE" if self.safe_sequence is not None else "NOT SAFE"
            return f"{base}: safety check - {verdict} ({self.reason})"


@dataclass
class EventLog:
    """Collection of oracle events."""
    events: List[OracleEvent] = field(default_factory=list)

    def add(self, event: OracleEvent) -> OracleEvent:
        """Number an event and append it to the log."""
        event.seq = len(self.events)
        self.events.append(event)
        return event

    def get_events_by_type(self, event_type: EventType) -> List[OracleEvent]:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_thread(self, thread: int) -> List[OracleEvent]:
        """Get all events involving a thread."""
        return [e for e in self.events if e.thread == thread]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
