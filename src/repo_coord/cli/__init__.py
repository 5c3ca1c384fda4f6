"""Command-line interface for the coordination planner."""
