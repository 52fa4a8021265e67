"""
Algorithms package for the Banker's Oracle.
Contains the safety algorithm, request/release evaluation and the oracle that owns the committed state.
"""
