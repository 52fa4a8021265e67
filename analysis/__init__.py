"""Analysis package for the Banker's Oracle."""
