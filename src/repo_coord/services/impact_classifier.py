"""
Impact classification service.

Assigns each repository an impact level, its required changes and an
effort estimate for a change request, keeping only affected repositories.
"""

import logging
from typing import List, Optional

from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.ecosystem import EcosystemConfig
from repo_coord.models.impact import ImpactLevel, ImpactRecord
from repo_coord.services.topology import Adjacency, TopologyProvider


logger = logging.getLogger(__name__)


class ImpactClassifier:
    """
    Classifies repositories by the impact a change has on them.

    All lookups go through the ecosystem tables; the target repository is
    always reported at high impact regardless of those tables.
    """

    def __init__(self, ecosystem: EcosystemConfig):
        self.ecosystem = ecosystem

    def impact_level(self, change_request: ChangeRequest, repository: str) -> ImpactLevel:
        if repository == change_request.target_repository:
            return ImpactLevel.HIGH
        return self.ecosystem.impact_for(change_request.change_category, repository)

    def classify(
        self,
        change_request: ChangeRequest,
        topology: Optional[Adjacency] = None
    ) -> List[ImpactRecord]:
        """
        Classify every repository for a change request.

        Args:
            change_request: The proposed change
            topology: Adjacency mapping for the request's category; derived
                from the ecosystem when omitted

        Returns:
            Impact records for every repository whose impact is not "none",
            in topology order
        """
        category = change_request.change_category
        if topology is None:
            topology = TopologyProvider(self.ecosystem).edges_for(category)

        levels = {}
        for repo in topology:
            level = self.impact_level(change_request, repo)
            if level != ImpactLevel.NONE:
                levels[repo] = level

        records = []
        for repo, level in levels.items():
            blocked_by = [dep for dep in topology[repo] if dep in levels]
            blocks = [
                other for other, predecessors in topology.items()
                if other in levels and repo in predecessors
            ]
            records.append(ImpactRecord(
                repository=repo,
                impact_level=level,
                required_changes=self.ecosystem.required_changes_for(category, repo),
                estimated_effort=self.ecosystem.effort_for(level, category),
                blocked_by=_in_order(blocked_by, levels),
                blocks=blocks,
            ))

        logger.info(
            f"Classified {category} change in {change_request.target_repository}: "
            f"{len(records)} of {len(topology)} repositories affected"
        )
        return records


def _in_order(names: List[str], ordering) -> List[str]:
    """Sort ``names`` by their position in ``ordering``."""
    positions = {name: i for i, name in enumerate(ordering)}
    return sorted(names, key=lambda n: positions[n])
