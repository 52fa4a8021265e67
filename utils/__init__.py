"""Utils package for the Banker's Oracle."""
