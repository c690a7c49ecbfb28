"""Family trip planner: import, merge and sync of shared trip data."""
