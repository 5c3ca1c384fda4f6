"""
Ecosystem configuration model.

Describes the fixed repository set together with everything the planner
looks up per change category: the "must change before" topology, the
impact matrix, change templates and the effort table. Adding a repository
or a category is a data change here, never a change to planner logic.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict

from repo_coord.models.change_request import ChangeCategory
from repo_coord.models.impact import EffortEstimate, ImpactLevel
from repo_coord.models.repository import Repository


DEFAULT_TOPOLOGY = "default"
GENERIC_REQUIRED_CHANGES = ["Review and update as needed"]


class EcosystemConfig(BaseModel):
    """
    Immutable description of a multi-repository ecosystem.

    ``topologies`` maps a category to an adjacency mapping of repository to
    its direct predecessors. Categories without their own entry use the
    ``default`` topology. Mapping order is significant: it fixes the order
    in which repositories are classified and every tie-break after that.
    """

    name: str = Field(default="ecosystem", description="Ecosystem name")
    repositories: List[Repository] = Field(..., min_length=1, description="Complete repository set")
    categories: List[str] = Field(
        default_factory=lambda: [c.value for c in ChangeCategory],
        description="Known change categories"
    )

    topologies: Dict[str, Dict[str, List[str]]] = Field(..., description="Category to adjacency mapping")
    impact_matrix: Dict[str, Dict[str, ImpactLevel]] = Field(
        default_factory=dict,
        description="Category to repository impact level"
    )
    change_templates: Dict[str, Dict[str, List[str]]] = Field(
        default_factory=dict,
        description="Category to repository required changes"
    )
    effort_table: Dict[ImpactLevel, Dict[str, EffortEstimate]] = Field(
        default_factory=dict,
        description="Impact level to category effort range"
    )

    # Fallbacks for unlisted pairs
    default_impact: ImpactLevel = Field(default=ImpactLevel.LOW)
    default_required_changes: List[str] = Field(default_factory=lambda: list(GENERIC_REQUIRED_CHANGES))
    default_effort: EffortEstimate = Field(default_factory=lambda: EffortEstimate.parse("2-4 hours"))

    model_config = ConfigDict(frozen=True)

    @field_validator("categories")
    @classmethod
    def normalize_categories(cls, v: List[str]) -> List[str]:
        normalized = [c.strip().lower() for c in v]
        if len(set(normalized)) != len(normalized):
            raise ValueError("Duplicate change categories")
        return normalized

    @model_validator(mode="after")
    def validate_references(self) -> "EcosystemConfig":
        """Validate every name used in the lookup tables is declared."""
        names = [repo.name for repo in self.repositories]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate repository names: {duplicates}")

        known = set(names)
        categories = set(self.categories)

        if DEFAULT_TOPOLOGY not in self.topologies:
            raise ValueError("Ecosystem must declare a 'default' topology")

        for key, adjacency in self.topologies.items():
            if key != DEFAULT_TOPOLOGY and key not in categories:
                raise ValueError(f"Topology for unknown category: {key}")
            for repo, predecessors in adjacency.items():
                unknown = [r for r in [repo, *predecessors] if r not in known]
                if unknown:
                    raise ValueError(f"Topology '{key}' references unknown repositories: {unknown}")

        for table_name, table in [
            ("impact_matrix", self.impact_matrix),
            ("change_templates", self.change_templates),
        ]:
            for category, by_repo in table.items():
                if category not in categories:
                    raise ValueError(f"{table_name} uses unknown category: {category}")
                unknown = [r for r in by_repo if r not in known]
                if unknown:
                    raise ValueError(f"{table_name} '{category}' references unknown repositories: {unknown}")

        for level, by_category in self.effort_table.items():
            if level == ImpactLevel.NONE:
                raise ValueError("effort_table cannot define effort for impact level 'none'")
            unknown = [c for c in by_category if c not in categories]
            if unknown:
                raise ValueError(f"effort_table '{level.value}' uses unknown categories: {unknown}")

        return self

    @property
    def repository_names(self) -> List[str]:
        return [repo.name for repo in self.repositories]

    def get_repository(self, name: str) -> Optional[Repository]:
        for repo in self.repositories:
            if repo.name == name:
                return repo
        return None

    def has_category(self, category: str) -> bool:
        return category in self.categories

    def topology_for(self, category: str) -> Dict[str, List[str]]:
        return self.topologies.get(category, self.topologies[DEFAULT_TOPOLOGY])

    def impact_for(self, category: str, repository: str) -> ImpactLevel:
        return self.impact_matrix.get(category, {}).get(repository, self.default_impact)

    def required_changes_for(self, category: str, repository: str) -> List[str]:
        changes = self.change_templates.get(category, {}).get(repository)
        return list(changes) if changes else list(self.default_required_changes)

    def effort_for(self, level: ImpactLevel, category: str) -> EffortEstimate:
        return self.effort_table.get(level, {}).get(category, self.default_effort)
