"""Models package for the Banker's Oracle."""
