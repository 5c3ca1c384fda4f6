"""Data models for the cross-repository coordination planner."""

from repo_coord.models.repository import Repository, RepositoryType
from repo_coord.models.change_request import ChangeRequest, ChangeCategory
from repo_coord.models.impact import EffortEstimate, EffortUnit, ImpactLevel, ImpactRecord
from repo_coord.models.coordination_plan import (
    CommunicationPlan,
    CoordinationAnalysis,
    CoordinationPlan,
    DependencyOrderEntry,
    Intelligence,
    PhaseEstimate,
    RiskAssessment,
    RiskLevel,
    TimelineEstimate,
)
from repo_coord.models.ecosystem import EcosystemConfig
from repo_coord.models.change_impact import (
    ActionPriority,
    ActionType,
    ChangeImpact,
    ChangeImpactType,
    CoordinationComplexity,
    RequiredAction,
)

__all__ = [
    # Core models
    "Repository",
    "ChangeRequest",
    "ImpactRecord",
    "EffortEstimate",
    "CoordinationPlan",
    "CoordinationAnalysis",
    "Intelligence",
    "RiskAssessment",
    "TimelineEstimate",
    "PhaseEstimate",
    "CommunicationPlan",
    "DependencyOrderEntry",
    "EcosystemConfig",
    "ChangeImpact",
    "RequiredAction",

    # Enums
    "RepositoryType",
    "ChangeCategory",
    "ImpactLevel",
    "EffortUnit",
    "RiskLevel",
    "ChangeImpactType",
    "ActionType",
    "ActionPriority",
    "CoordinationComplexity",
]
