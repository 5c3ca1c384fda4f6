"""
Execution planning over the induced dependency graph.

Computes a deterministic topological execution order, the critical path
and groups of repositories that can be worked on in parallel.
"""

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from repo_coord.lib.exceptions import CyclicDependencyError
from repo_coord.services.graph_assembler import DependencyGraph


logger = logging.getLogger(__name__)


@dataclass
class ExecutionPlan:
    """Schedule derived from a dependency graph."""
    execution_order: List[str]
    critical_path: List[str]
    parallelizable: List[List[str]] = field(default_factory=list)


class ExecutionPlanner:
    """
    Service for scheduling changes across affected repositories.

    Ready repositories are always taken in affected-list order, so the
    same graph yields the same plan on every call.
    """

    def plan(self, graph: DependencyGraph) -> ExecutionPlan:
        """
        Plan execution for a dependency graph.

        Args:
            graph: Induced graph of affected repositories

        Returns:
            ExecutionPlan with order, critical path and parallel groups

        Raises:
            CyclicDependencyError: If the graph contains a cycle
        """
        execution_order = self.topological_order(graph)
        critical_path = self.critical_path(graph)
        parallelizable = self.parallel_groups(graph)

        logger.debug(
            f"Planned {len(execution_order)} repositories: critical path of "
            f"{len(critical_path)}, {len(parallelizable)} parallel group(s)"
        )
        return ExecutionPlan(
            execution_order=execution_order,
            critical_path=critical_path,
            parallelizable=parallelizable,
        )

    def topological_order(self, graph: DependencyGraph) -> List[str]:
        """
        Kahn's algorithm with affected-list order as the tie-break.

        Raises:
            CyclicDependencyError: Naming every repository left unresolved
        """
        in_degree: Dict[str, int] = {node: len(graph.predecessors(node)) for node in graph.nodes}
        ready = [(graph.position(node), node) for node in graph.nodes if in_degree[node] == 0]
        heapq.heapify(ready)

        order: List[str] = []
        while ready:
            _, node = heapq.heappop(ready)
            order.append(node)

            for dependent in graph.successors(node):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(ready, (graph.position(dependent), dependent))

        if len(order) < len(graph):
            placed = set(order)
            self._raise_cycle([node for node in graph.nodes if node not in placed])

        return order

    def critical_path(self, graph: DependencyGraph) -> List[str]:
        """
        Longest chain along "blocks" edges, by node count.

        Roots are tried in affected-list order and successors likewise; a
        later path only wins if it is strictly longer.

        Raises:
            CyclicDependencyError: If a cycle is reached from a root, or some
                repository is reachable from no root at all
        """
        longest_from: Dict[str, List[str]] = {}
        in_progress: List[str] = []

        def dfs(node: str) -> List[str]:
            if node in longest_from:
                return longest_from[node]
            if node in in_progress:
                cycle = set(in_progress[in_progress.index(node):])
                self._raise_cycle([n for n in graph.nodes if n in cycle])

            in_progress.append(node)
            best = [node]
            for dependent in graph.successors(node):
                candidate = [node] + dfs(dependent)
                if len(candidate) > len(best):
                    best = candidate
            in_progress.pop()

            longest_from[node] = best
            return best

        longest: List[str] = []
        for root in graph.roots:
            path = dfs(root)
            if len(path) > len(longest):
                longest = path

        # Every node of an acyclic graph hangs off some root
        if len(longest_from) < len(graph):
            self._raise_cycle([n for n in graph.nodes if n not in longest_from])

        return list(longest)

    def _raise_cycle(self, unresolved: List[str]) -> None:
        logger.error(f"Dependency cycle detected among: {unresolved}")
        raise CyclicDependencyError(unresolved)

    def parallel_groups(self, graph: DependencyGraph) -> List[List[str]]:
        """
        Greedy single-pass grouping of mutually independent repositories.

        Each unplaced repository opens a group, and every later unplaced
        repository with no direct edge to any member joins it. The result
        depends on iteration order and is not a minimum partition.
        Singleton groups are left out.
        """
        placed = set()
        groups: List[List[str]] = []

        for i, repo in enumerate(graph.nodes):
            if repo in placed:
                continue

            group = [repo]
            placed.add(repo)

            for other in graph.nodes[i + 1:]:
                if other in placed:
                    continue
                if not any(graph.has_edge(member, other) for member in group):
                    group.append(other)
                    placed.add(other)

            if len(group) > 1:
                groups.append(group)

        return groups
