"""Shared infrastructure: configuration, ecosystem loading and errors."""
