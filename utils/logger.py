"""
Logger utility for the Banker's Oracle.

Provides decision logging with verbosity levels.
"""

from typing import Optional, Sequence
from datetime import datetime

from algorithms.safety import format_safe_sequence


class OracleLogger:
    """
    Logger for oracle decisions.

    Format: "P1 requests [1, 0, 2] - GRANTED (reason)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Oracle Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_request(self, thread: int, request: Sequence[int], decision, reason: str) -> None:
        """
        Log a resource request decision.

        Args:
            thread: Thread index
            request: Requested vector
            decision: Decision returned by the oracle
            reason: Reason for decision
        """
        self.log(f"P{thread} requests {list(request)} - {decision} ({reason})")

    def log_release(self, thread: int, release: Sequence[int]) -> None:
        """Log a resource release."""
        self.log(f"P{thread} releases {list(release)}")

    def log_safety(self, safe: bool, safe_sequence: Optional[Sequence[int]]) -> None:
        """Log the result of a safe-state query."""
        if safe:
            self.log(f"System is in a SAFE state: {format_safe_sequence(safe_sequence)}")
        else:
            self.log("System is NOT in a safe state", "warning")

    def log_system_state(self, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            state_str: Formatted system state
        """
        if self.verbose:
            self.log(f"System State:\n{state_str}")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
