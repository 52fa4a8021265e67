"""
Decision model for the Banker's Oracle.

Outcomes of a resource request. These are normal results callers branch on,
not errors.
"""

from enum import Enum


class Decision(Enum):
    """Outcome of evaluating a resource request."""
    GRANTED = "GRANTED"
    MUST_WAIT = "MUST_WAIT"
    EXCEEDS_CLAIM = "EXCEEDS_CLAIM"

    @property
    def granted(self) -> bool:
        """True only for GRANTED."""
        return self is Decision.GRANTED

    def __str__(self) -> str:
        return self.value
