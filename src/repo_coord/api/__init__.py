"""HTTP API for the coordination planner."""
