"""
Cross-Repository Change Coordination Planner

Plan the order, parallelism and risk of changes that span many repositories.
"""

__version__ = "1.0.0"

from repo_coord.models.change_request import ChangeRequest, ChangeCategory
from repo_coord.models.coordination_plan import CoordinationAnalysis, CoordinationPlan, Intelligence
from repo_coord.models.change_impact import ChangeImpact
from repo_coord.lib.exceptions import (
    CoordinationError,
    ConfigurationError,
    CyclicDependencyError,
    EmptyImpactError,
)
from repo_coord.services.coordination_planner import (
    CoordinationPlanner,
    analyze_change_impact,
    analyze_coordination,
)

__all__ = [
    "ChangeRequest",
    "ChangeCategory",
    "CoordinationAnalysis",
    "CoordinationPlan",
    "Intelligence",
    "ChangeImpact",
    "CoordinationPlanner",
    "analyze_coordination",
    "analyze_change_impact",
    "CoordinationError",
    "ConfigurationError",
    "CyclicDependencyError",
    "EmptyImpactError",
]
