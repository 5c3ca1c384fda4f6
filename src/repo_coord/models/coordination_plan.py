"""
Coordination plan models returned by the planner.

All of these are output value objects with no lifecycle beyond the call
that produced them.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.impact import ImpactRecord


class RiskLevel(str, Enum):
    """Overall coordination risk."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


RISK_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]


class RiskAssessment(BaseModel):
    level: RiskLevel = Field(..., description="Qualitative risk rating")
    score: int = Field(default=0, ge=0, description="Additive risk score behind the rating")
    factors: List[str] = Field(default_factory=list, description="Risk factors that applied")
    mitigations: List[str] = Field(default_factory=list, description="Suggested mitigations")

    model_config = ConfigDict(frozen=True)

    @property
    def rank(self) -> int:
        """Position of the level in ascending severity order."""
        return RISK_ORDER.index(RiskLevel(self.level))


class PhaseEstimate(BaseModel):
    min_days: int = Field(..., ge=0)
    max_days: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        if self.min_days == self.max_days:
            return f"{self.max_days} day" if self.max_days == 1 else f"{self.max_days} days"
        return f"{self.min_days}-{self.max_days} days"


class TimelineEstimate(BaseModel):
    """Phase-based timeline; the total is the sum of each phase's upper bound."""

    total_days: int = Field(..., ge=0, description="Sum of phase upper bounds")
    by_phase: Dict[str, PhaseEstimate] = Field(default_factory=dict, description="Phase name to day range")

    model_config = ConfigDict(frozen=True)


class CommunicationPlan(BaseModel):
    stakeholders: List[str] = Field(default_factory=list)
    checkpoints: List[str] = Field(default_factory=list)
    documentation: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CoordinationPlan(BaseModel):
    """The public plan: who is affected, in what order, at what risk."""

    affected_repositories: List[ImpactRecord] = Field(default_factory=list)
    execution_order: List[str] = Field(default_factory=list)
    risk_assessment: RiskAssessment
    timeline_estimate: TimelineEstimate
    communication_plan: CommunicationPlan

    model_config = ConfigDict(frozen=True)

    def get_record(self, repository: str) -> ImpactRecord:
        for record in self.affected_repositories:
            if record.repository == repository:
                return record
        raise KeyError(repository)

    @property
    def affected_names(self) -> List[str]:
        return [record.repository for record in self.affected_repositories]


class Intelligence(BaseModel):
    """Diagnostic view of the induced dependency graph."""

    dependency_graph: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Affected repository to its affected predecessors"
    )
    critical_path: List[str] = Field(default_factory=list)
    parallelizable: List[List[str]] = Field(default_factory=list)
    sequential_steps: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CoordinationAnalysis(BaseModel):
    """Result of one planning call."""

    change_request: ChangeRequest
    coordination_plan: CoordinationPlan
    intelligence: Intelligence

    model_config = ConfigDict(frozen=True)

    @property
    def summary(self) -> str:
        plan = self.coordination_plan
        count = len(plan.affected_repositories)
        noun = "repository" if count == 1 else "repositories"
        return (
            f"{self.change_request.change_category.upper()} change in "
            f"{self.change_request.target_repository} affects {count} {noun} "
            f"with {RiskLevel(plan.risk_assessment.level).value} coordination risk"
        )

    def to_dict(self) -> Dict:
        """Convert to the public ``{coordination_plan, intelligence}`` shape."""
        return {
            "coordination_plan": self.coordination_plan.model_dump(mode="json"),
            "intelligence": self.intelligence.model_dump(mode="json"),
            "summary": self.summary,
        }


class DependencyOrderEntry(BaseModel):
    """One position in a category's dependency order."""

    order: int = Field(..., ge=1, description="1-based position in the order")
    repository: str
    repository_type: str = ""
    dependencies: List[str] = Field(default_factory=list)
    dependents: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
