"""API models for coordination analysis requests and responses."""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from repo_coord.models.change_impact import ChangeImpactType, CoordinationComplexity, RequiredAction
from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.coordination_plan import CoordinationPlan, DependencyOrderEntry, Intelligence
from repo_coord.models.impact import EffortEstimate


class AnalyzeRequest(BaseModel):
    """Request model for planning a change; accepts snake_case or camelCase keys."""

    change_category: str = Field(
        ...,
        validation_alias=AliasChoices("change_category", "changeCategory"),
        description="Change category"
    )
    target_repository: str = Field(
        ...,
        validation_alias=AliasChoices("target_repository", "targetRepository"),
        description="Repository where the change originates"
    )
    changed_files: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("changed_files", "changedFiles"),
        description="Changed file paths, if known"
    )
    description: Optional[str] = Field(default=None, description="Description of the change")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "change_category": "protocol",
                "target_repository": "loqa-proto",
                "changed_files": ["proto/audio.proto"],
                "description": "Add sample rate to audio stream message"
            }
        }
    )

    def to_change_request(self) -> dict:
        return {
            "change_category": self.change_category,
            "target_repository": self.target_repository,
            "changed_files": list(self.changed_files),
            "description": self.description,
        }


class AnalyzeResponse(BaseModel):
    """Response model for a coordination analysis."""

    change_request: ChangeRequest
    coordination_plan: CoordinationPlan
    intelligence: Intelligence
    summary: str


class ChangeImpactResponse(BaseModel):
    """Response model for a change impact analysis."""

    changed_repository: str
    impact_type: ChangeImpactType
    affected_repositories: List[str]
    required_actions: List[RequiredAction]
    coordination_complexity: CoordinationComplexity
    estimated_effort: EffortEstimate
    automation_recommendations: List[str]
    summary: str


class DependencyOrderResponse(BaseModel):
    category: str
    execution_order: List[str]
    details: List[DependencyOrderEntry]
