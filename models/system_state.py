"""
System State model for the Banker's Oracle.

Holds the Available vector and the Maximum, Allocation and Need matrices
required by the safety algorithm, plus the invariant checks and text
rendering used by the surrounding tooling.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass


class InvalidStateError(ValueError):
    """Raised when a state or an operation on it violates a precondition."""
    pass


def _to_int_array(values, shape: Tuple[int, ...], name: str) -> np.ndarray:
    """
    Convert a nested sequence into a read-only integer array of a fixed shape.

    Args:
        values: Sequence (or array) of integers
        shape: Required array shape
        name: Field name used in error messages

    Returns:
        Read-only copy of values as an int array

    Raises:
        InvalidStateError: If values are ragged, non-integer or mis-shaped
    """
    try:
        raw = np.array(values)
    except ValueError as e:
        raise InvalidStateError(f"{name}: not a rectangular array ({e})")

    # Python ints beyond int64 come back as an object array
    if raw.dtype == object and raw.size and all(
        isinstance(v, int) and not isinstance(v, bool) for v in raw.flat
    ):
        raise InvalidStateError(f"{name}: entries out of range for a 64-bit integer")

    # Empty input comes back as float64; anything else must be integral
    if raw.size and not np.issubdtype(raw.dtype, np.integer):
        raise InvalidStateError(f"{name}: entries must be integers, got {raw.dtype}")

    array = raw.astype(int)
    # A matrix with no rows arrives as a flat empty list
    if array.shape == (0,) and len(shape) == 2 and shape[0] == 0:
        array = array.reshape(shape)
    if array.shape != shape:
        raise InvalidStateError(f"{name}: expected shape {shape}, got {array.shape}")

    array.setflags(write=False)
    return array


@dataclass(eq=False, frozen=True)
class SystemState:
    """
    Allocation state of n threads over m resource types.

    The shape (num_threads, num_resources) is fixed at construction. Arrays
    and fields are read-only; every change produces a new SystemState so that a
    commit is a single reference swap.

    Attributes:
        num_threads: Number of threads (n)
        num_resources: Number of resource types (m)
        available: [R] Units of each resource type not held by any thread
        maximum: [P][R] Declared upper bound each thread may hold
        allocation: [P][R] Units currently held by each thread
        need: [P][R] Maximum - Allocation (remaining claim)

    Invariants:
        need == maximum - allocation
        available >= 0, allocation >= 0, need >= 0
    """
    num_threads: int
    num_resources: int
    available: Optional[np.ndarray] = None
    maximum: Optional[np.ndarray] = None
    allocation: Optional[np.ndarray] = None
    need: Optional[np.ndarray] = None

    def __post_init__(self):
        """Fill unset arrays with zeros, then validate shapes and invariants."""
        if self.num_threads < 0 or self.num_resources < 0:
            raise InvalidStateError(
                f"Invalid dimensions: threads={self.num_threads}, resources={self.num_resources}"
            )

        n, m = self.num_threads, self.num_resources
        zeros_matrix = np.zeros((n, m), dtype=int)

        # Frozen dataclass: fields are set once, here
        available = _to_int_array(
            np.zeros(m, dtype=int) if self.available is None else self.available, (m,), "available"
        )
        maximum = _to_int_array(
            zeros_matrix if self.maximum is None else self.maximum, (n, m), "maximum"
        )
        allocation = _to_int_array(
            zeros_matrix if self.allocation is None else self.allocation, (n, m), "allocation"
        )
        need = _to_int_array(
            maximum - allocation if self.need is None else self.need, (n, m), "need"
        )
        object.__setattr__(self, "available", available)
        object.__setattr__(self, "maximum", maximum)
        object.__setattr__(self, "allocation", allocation)
        object.__setattr__(self, "need", need)

        self._validate()

    def _validate(self) -> None:
        """Check the non-negativity and Need invariants."""
        if np.any(self.available < 0):
            raise InvalidStateError(f"Negative available resources: {self.available.tolist()}")
        if np.any(self.maximum < 0):
            raise InvalidStateError("Maximum matrix contains negative entries")
        if np.any(self.allocation < 0):
            raise InvalidStateError("Allocation matrix contains negative entries")

        # Need[i][j] >= 0: a thread never holds more than its declared maximum
        over_claim = np.argwhere(self.need < 0)
        if len(over_claim):
            i, j = over_claim[0]
            raise InvalidStateError(
                f"P{i}: allocation of R{j} ({self.allocation[i][j]}) "
                f"exceeds declared maximum ({self.maximum[i][j]})"
            )

        if not np.array_equal(self.need, self.maximum - self.allocation):
            raise InvalidStateError("Need matrix does not equal Maximum - Allocation")

    def populate(
        self,
        available: Sequence[int],
        maximum: Sequence[Sequence[int]],
        allocation: Sequence[Sequence[int]]
    ) -> "SystemState":
        """
        Build a populated state with the same dimensions.

        Need is derived as Maximum - Allocation.

        Args:
            available: [R] free units per resource type
            maximum: [P][R] declared maxima
            allocation: [P][R] units currently held

        Returns:
            New SystemState holding the given vectors

        Raises:
            InvalidStateError: On shape mismatch, negative entries or negative Need
        """
        for name, values in (('available', available), ('maximum', maximum), ('allocation', allocation)):
            if values is None:
                raise InvalidStateError(f"{name}: missing")

        return SystemState(
            num_threads=self.num_threads,
            num_resources=self.num_resources,
            available=available,
            maximum=maximum,
            allocation=allocation
        )

    def replace(
        self,
        available: np.ndarray,
        allocation: np.ndarray,
        need: np.ndarray
    ) -> "SystemState":
        """Return a state with new Available/Allocation/Need and the same Maximum."""
        return SystemState(
            num_threads=self.num_threads,
            num_resources=self.num_resources,
            available=available,
            maximum=self.maximum,
            allocation=allocation,
            need=need
        )

    @property
    def total_instances(self) -> np.ndarray:
        """Installed units per resource type: Available + sum of Allocation columns."""
        return self.available + self.allocation.sum(axis=0)

    def check_thread(self, thread: int) -> None:
        """
        Validate a thread index.

        Raises:
            InvalidStateError: If thread is outside 0..n-1
        """
        if isinstance(thread, bool) or not isinstance(thread, (int, np.integer)):
            raise InvalidStateError(f"Thread index must be an integer, got {thread!r}")
        if not 0 <= thread < self.num_threads:
            raise InvalidStateError(
                f"Thread index {thread} out of range (0..{self.num_threads - 1})"
            )

    def to_dict(self) -> Dict[str, List]:
        """
        Plain-list snapshot of the state for display or serialization.

        Returns:
            Dictionary with available, maximum, allocation and need lists
        """
        return {
            'available': self.available.tolist(),
            'maximum': self.maximum.tolist(),
            'allocation': self.allocation.tolist(),
            'need': self.need.tolist()
        }

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        header = "     " + " ".join([f"R{j:<3}" for j in range(self.num_resources)])

        output = []
        output.append("\n" + "="*60)
        output.append("SYSTEM STATE")
        output.append("="*60)

        output.append("\nAvailable Resources:")
        output.append("  [" + ", ".join(
            f"R{j}:{self.available[j]:2}" for j in range(self.num_resources)
        ) + "]")

        for title, matrix in (
            ("Maximum Matrix", self.maximum),
            ("Allocation Matrix", self.allocation),
            ("Need Matrix (Max - Allocation)", self.need),
        ):
            output.append(f"\n{title}:")
            output.append(header)
            for i in range(self.num_threads):
                row = f"  P{i}: "
                row += " ".join([f"{matrix[i][j]:3} " for j in range(self.num_resources)])
                output.append(row.rstrip())

        output.append("\n" + "="*60)
        return "\n".join(output)

    def assert_resource_conservation(self, expected_total: Sequence[int], context: str = "") -> None:
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            expected_total: Installed units per resource type before the change
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        expected_total = np.asarray(expected_total)

        for r_idx in range(self.num_resources):
            allocated = self.allocation[:, r_idx].sum()
            available = self.available[r_idx]
            total = expected_total[r_idx]

            assert allocated + available == total, (
                f"Resource conservation violated for R{r_idx} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total}\n"
                f"  Allocated + Available = {allocated + available} != {total}"
            )

            assert available >= 0, (
                f"Negative available resources for R{r_idx} {context}\n"
                f"  Available: {available}"
            )
