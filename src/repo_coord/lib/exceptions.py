"""
Error taxonomy for the coordination planner.

Every planner failure is reported as a structured error carrying a kind,
a human-readable message and the offending identifiers.
"""

from typing import Any, Dict, Iterable, List, Optional


class CoordinationError(Exception):
    """Base exception for coordination planning failures."""

    kind = "coordination_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured error reporting."""
        return {
            "error": self.kind,
            "message": self.message,
            "details": dict(self.details),
        }


class ConfigurationError(CoordinationError):
    """Raised for unknown categories, unknown repositories or an invalid ecosystem."""

    kind = "configuration_error"

    def __init__(
        self,
        message: str,
        category: Optional[str] = None,
        repository: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        merged = dict(details or {})
        if category is not None:
            merged["category"] = category
        if repository is not None:
            merged["repository"] = repository
        super().__init__(message, merged)
        self.category = category
        self.repository = repository


class CyclicDependencyError(CoordinationError):
    """Raised when the induced dependency graph contains a cycle."""

    kind = "cyclic_dependency"

    def __init__(self, unresolved: Iterable[str]):
        self.unresolved: List[str] = list(unresolved)
        super().__init__(
            f"Dependency cycle among repositories: {', '.join(self.unresolved)}",
            {"unresolved": list(self.unresolved)},
        )


class EmptyImpactError(CoordinationError):
    """Raised when impact classification produces no records."""

    kind = "empty_impact"

    def __init__(self, repository: str, category: Optional[str] = None):
        super().__init__(
            f"Impact classification produced no records for {repository}",
            {"repository": repository, "category": category},
        )
        self.repository = repository
        self.category = category
