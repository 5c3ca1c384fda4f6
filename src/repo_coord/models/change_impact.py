"""
Change impact models for a concrete set of changed files.

Where a coordination plan works from a change category, a change impact
starts from what was actually touched: the files and the description of
the change. It lists the follow-up actions dependent repositories need.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from repo_coord.models.impact import EffortEstimate


class ChangeImpactType(str, Enum):
    """Kind of change inferred from files and description."""
    BREAKING = "breaking"
    FEATURE = "feature"
    BUGFIX = "bugfix"
    INTERNAL = "internal"


class ActionType(str, Enum):
    """Follow-up work a dependent repository may need."""
    REGENERATE_BINDINGS = "regenerate-bindings"
    UPDATE_API_CALLS = "update-api-calls"
    UPDATE_TESTS = "update-tests"


class ActionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CoordinationComplexity(str, Enum):
    """How much hand-coordination the follow-up work needs."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class RequiredAction(BaseModel):
    """One piece of follow-up work in an affected repository."""

    repository: str = Field(..., description="Repository the action applies to")
    action_type: ActionType = Field(..., description="Kind of action")
    description: str = Field(..., description="What has to be done")
    priority: ActionPriority = Field(default=ActionPriority.MEDIUM, description="Action priority")
    automatable: bool = Field(default=False, description="Whether tooling can perform the action")
    estimated_effort: EffortEstimate = Field(..., description="Bounded effort estimate")

    model_config = ConfigDict(frozen=True)


class ChangeImpact(BaseModel):
    """
    Impact of one change on the rest of the ecosystem.

    ``affected_repositories`` never includes the changed repository itself,
    and ``required_actions`` lists actions grouped by affected repository in
    that same order.
    """

    changed_repository: str = Field(..., description="Repository where the change was made")
    impact_type: ChangeImpactType = Field(..., description="Inferred kind of change")
    affected_repositories: List[str] = Field(default_factory=list, description="Dependents needing follow-up")
    required_actions: List[RequiredAction] = Field(default_factory=list, description="Follow-up actions")
    coordination_complexity: CoordinationComplexity = Field(..., description="Coordination complexity")
    estimated_effort: EffortEstimate = Field(..., description="Overall coordination effort")
    automation_recommendations: List[str] = Field(default_factory=list, description="Automation suggestions")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "changed_repository": "loqa-hub",
                "impact_type": "feature",
                "affected_repositories": ["loqa-commander"],
                "required_actions": [
                    {
                        "repository": "loqa-commander",
                        "action_type": "update-api-calls",
                        "description": "Update API client calls to match hub service changes",
                        "priority": "medium",
                        "automatable": False,
                        "estimated_effort": "30 minutes"
                    }
                ],
                "coordination_complexity": "moderate",
                "estimated_effort": "1-2 hours",
                "automation_recommendations": []
            }
        }
    )

    @property
    def manual_actions(self) -> List[RequiredAction]:
        return [action for action in self.required_actions if not action.automatable]

    @property
    def automatable_actions(self) -> List[RequiredAction]:
        return [action for action in self.required_actions if action.automatable]

    @property
    def summary(self) -> str:
        count = len(self.affected_repositories)
        noun = "repository" if count == 1 else "repositories"
        return (
            f"{ChangeImpactType(self.impact_type).value.upper()} change in "
            f"{self.changed_repository} needs follow-up in {count} {noun} "
            f"({CoordinationComplexity(self.coordination_complexity).value}, "
            f"{self.estimated_effort.label})"
        )

    def to_dict(self) -> Dict:
        data = self.model_dump(mode="json")
        data["summary"] = self.summary
        return data
