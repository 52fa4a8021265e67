#!/usr/bin/env python3
"""
Banker's Oracle
Command-line entry point: load a scenario and replay its operations
against the resource state oracle.
"""

import argparse
import sys
from typing import Dict, List, Optional, Tuple

from models.decision import Decision
from models.system_state import InvalidStateError
from utils.scenario_loader import (
    load_scenario,
    validate_operation,
    get_scenario_description,
    ScenarioLoadError,
)
from utils.logger import OracleLogger
from algorithms.oracle import ResourceOracle
from analysis.events import EventLog, EventType


def parse_operation(text: str) -> Tuple[int, List[int]]:
    """
    Parse a command-line operation of the form 'THREAD:V1,V2,...'.

    Args:
        text: Operation string, e.g. '1:1,0,2'

    Returns:
        Tuple of (thread, vector)

    Raises:
        ValueError: If the string is malformed
    """
    thread_part, sep, vector_part = text.partition(':')
    if not sep:
        raise ValueError(f"expected THREAD:V1,V2,... but got '{text}'")

    thread = int(thread_part.strip())
    vector = [int(v.strip()) for v in vector_part.split(',')] if vector_part.strip() else []
    return thread, vector


def run_scenario(
    scenario_path: str,
    verbose: bool = False,
    log_file: Optional[str] = None,
    extra_operations: Optional[List[Dict]] = None
) -> Tuple[EventLog, int]:
    """
    Run a scenario through the oracle.

    Order:
    1. Load state and display it with its safety verdict
    2. Replay scenario operations in file order
    3. Replay extra (command-line) operations in order
    4. Display final state and summary

    Args:
        scenario_path: Path to scenario JSON file
        verbose: Enable verbose logging
        log_file: Optional log file path
        extra_operations: Operations appended after the scenario's own

    Returns:
        Tuple of (EventLog, number of failed operations)

    Raises:
        ScenarioLoadError: If the scenario cannot be loaded
    """
    logger = OracleLogger(verbose=verbose, log_file=log_file)

    try:
        try:
            state, operations = load_scenario(scenario_path)
        except ScenarioLoadError as e:
            logger.log(f"Failed to load scenario: {e}", "error")
            raise

        operations = operations + list(extra_operations or [])
        oracle = ResourceOracle(state, logger=logger)

        logger.log(f"\n{'='*60}")
        logger.log(f"SCENARIO: {scenario_path}")
        description = get_scenario_description(scenario_path)
        if description:
            logger.log(description)
        logger.log(f"Threads: {state.num_threads}, Resource types: {state.num_resources}")
        logger.log(f"{'='*60}")

        logger.log(state.display())
        oracle.is_safe_state()

        failed = 0
        for index, operation in enumerate(operations):
            # Extra operations have not been through the loader yet
            try:
                validate_operation(index, operation, state)
            except ScenarioLoadError as e:
                logger.log(f"Operation {index} rejected: {e}", "error")
                failed += 1
                continue

            logger.log(f"\n{'-'*60}")
            logger.log(f"Operation {index}: {operation['type']}")
            logger.log(f"{'-'*60}")

            try:
                _apply_operation(oracle, operation)
            except InvalidStateError as e:
                logger.log(f"Operation {index} rejected: {e}", "error")
                failed += 1

        logger.log(f"\n{'='*60}")
        logger.log("FINAL STATE")
        logger.log(f"{'='*60}")
        logger.log(oracle.state.display())

        _display_statistics(oracle.event_log, failed, logger)

        return oracle.event_log, failed
    finally:
        logger.close()


def _apply_operation(oracle: ResourceOracle, operation: Dict) -> Optional[Decision]:
    """Dispatch one operation to the oracle."""
    op_type = operation['type']

    if op_type == 'request':
        return oracle.request(operation['thread'], operation['vector'])
    elif op_type == 'release':
        oracle.release(operation['thread'], operation['vector'])
    elif op_type == 'check':
        oracle.is_safe_state()
    else:
        raise InvalidStateError(f"Unknown operation type '{op_type}'")
    return None


def _display_statistics(event_log: EventLog, failed: int, logger: OracleLogger) -> None:
    """Display final decision statistics."""
    logger.log("\nDecision Statistics:")
    logger.log(f"  Granted:       {len(event_log.get_events_by_type(EventType.GRANTED))}")
    logger.log(f"  Must wait:     {len(event_log.get_events_by_type(EventType.MUST_WAIT))}")
    logger.log(f"  Exceeds claim: {len(event_log.get_events_by_type(EventType.EXCEEDS_CLAIM))}")
    logger.log(f"  Releases:      {len(event_log.get_events_by_type(EventType.RELEASE))}")
    logger.log(f"  Failed:        {failed}")

    logger.log("\nDecision History:", "debug")
    logger.log(event_log.display(), "debug")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the oracle."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm resource state oracle"
    )
    parser.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    parser.add_argument(
        '--request',
        action='append',
        default=[],
        metavar='T:V1,V2,...',
        help='Resource request for thread T (repeatable, applied after scenario operations)'
    )
    parser.add_argument(
        '--release',
        action='append',
        default=[],
        metavar='T:V1,V2,...',
        help='Resource release for thread T (repeatable, applied after requests)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )

    args = parser.parse_args(argv)

    extra_operations = []
    try:
        for text in args.request:
            thread, vector = parse_operation(text)
            extra_operations.append({'type': 'request', 'thread': thread, 'vector': vector})
        for text in args.release:
            thread, vector = parse_operation(text)
            extra_operations.append({'type': 'release', 'thread': thread, 'vector': vector})
    except ValueError as e:
        print(f"[ERROR] Invalid operation: {e}")
        return 1

    try:
        run_scenario(args.scenario, args.verbose, args.log_file, extra_operations)
    except ScenarioLoadError:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
