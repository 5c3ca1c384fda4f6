"""
Topology provider for per-category "must change before" relationships.

Supplies the repository set and, for a change category, the adjacency
mapping of every known repository to its direct predecessors.
"""

import logging
from typing import Dict, List, Tuple

from repo_coord.lib.exceptions import ConfigurationError
from repo_coord.models.ecosystem import DEFAULT_TOPOLOGY, EcosystemConfig
from repo_coord.models.repository import Repository


logger = logging.getLogger(__name__)


Adjacency = Dict[str, Tuple[str, ...]]


class TopologyProvider:
    """
    Read-only view over an ecosystem's topologies.

    Every call returns a fresh mapping, so callers can never alter the
    ecosystem they were given.
    """

    def __init__(self, ecosystem: EcosystemConfig):
        self.ecosystem = ecosystem

    @property
    def repository_names(self) -> List[str]:
        return self.ecosystem.repository_names

    def get_repository(self, name: str) -> Repository:
        """
        Get a repository by name.

        Raises:
            ConfigurationError: If the repository is not part of the ecosystem
        """
        repository = self.ecosystem.get_repository(name)
        if repository is None:
            raise ConfigurationError(f"Unknown repository: {name}", repository=name)
        return repository

    def require_category(self, category: str) -> str:
        """
        Validate a change category against the ecosystem.

        Raises:
            ConfigurationError: If the category is unknown
        """
        if not self.ecosystem.has_category(category):
            raise ConfigurationError(
                f"Unknown change category: {category} "
                f"(expected one of {', '.join(self.ecosystem.categories)})",
                category=category,
            )
        return category

    def edges_for(self, category: str) -> Adjacency:
        """
        Get the complete adjacency mapping for a change category.

        Args:
            category: Change category

        Returns:
            Mapping of every known repository to its direct predecessors,
            in the category topology's declared order followed by any
            repositories the topology leaves out

        Raises:
            ConfigurationError: If the category is unknown
        """
        self.require_category(category)
        adjacency = self._complete(self.ecosystem.topology_for(category))
        logger.debug(f"Topology for '{category}': {sum(len(p) for p in adjacency.values())} edges")
        return adjacency

    def default_edges(self) -> Adjacency:
        """Adjacency of the category-independent ``default`` topology."""
        return self._complete(self.ecosystem.topologies[DEFAULT_TOPOLOGY])

    def _complete(self, topology: Dict[str, List[str]]) -> Adjacency:
        adjacency: Adjacency = {}
        for repo, predecessors in topology.items():
            adjacency[repo] = tuple(predecessors)
        for repo in self.repository_names:
            if repo not in adjacency:
                adjacency[repo] = ()
        return adjacency


def dependents_of(repository: str, adjacency: Adjacency) -> List[str]:
    """Repositories that list ``repository`` as a direct predecessor."""
    return [repo for repo, predecessors in adjacency.items() if repository in predecessors]
