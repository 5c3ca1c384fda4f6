"""
Coordination planner service.

Runs the planning pipeline for a change request and assembles the
resulting CoordinationPlan and Intelligence value objects.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from repo_coord.lib.ecosystem import default_ecosystem
from repo_coord.lib.exceptions import ConfigurationError, EmptyImpactError
from repo_coord.models.change_impact import ChangeImpact
from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.coordination_plan import (
    CoordinationAnalysis,
    CoordinationPlan,
    DependencyOrderEntry,
    Intelligence,
)
from repo_coord.models.ecosystem import EcosystemConfig
from repo_coord.services.change_impact import ChangeImpactAnalyzer
from repo_coord.services.execution_planner import ExecutionPlanner
from repo_coord.services.graph_assembler import assemble_graph
from repo_coord.services.impact_classifier import ImpactClassifier
from repo_coord.services.risk_estimator import (
    assess_risk,
    build_communication_plan,
    estimate_timeline,
)
from repo_coord.services.topology import TopologyProvider, dependents_of


logger = logging.getLogger(__name__)


# camelCase request keys accepted alongside the snake_case field names
_REQUEST_ALIASES = {
    "changeCategory": "change_category",
    "changeType": "change_category",
    "targetRepository": "target_repository",
    "changedFiles": "changed_files",
}


class CoordinationPlanner:
    """
    Service for planning a change across the repositories of an ecosystem.

    The ecosystem is injected once and never modified; each ``analyze`` call
    works on its own freshly derived data.
    """

    def __init__(self, ecosystem: Optional[EcosystemConfig] = None):
        """
        Initialize the planner.

        Args:
            ecosystem: Ecosystem to plan against (built-in Loqa ecosystem if omitted)
        """
        self.ecosystem = ecosystem or default_ecosystem()
        self.topology = TopologyProvider(self.ecosystem)
        self.classifier = ImpactClassifier(self.ecosystem)
        self.execution_planner = ExecutionPlanner()
        self.change_impact = ChangeImpactAnalyzer(self.ecosystem)

    def analyze(self, change_request: Union[ChangeRequest, Mapping[str, Any]]) -> CoordinationAnalysis:
        """
        Produce a coordination plan for a change request.

        Args:
            change_request: The change, as a ChangeRequest or a plain mapping

        Returns:
            CoordinationAnalysis holding the plan and its intelligence

        Raises:
            ConfigurationError: Unknown category or target repository
            CyclicDependencyError: The affected repositories form a cycle
            EmptyImpactError: Classification produced no records
        """
        request = coerce_change_request(change_request)
        category = self.topology.require_category(request.change_category)
        self.topology.get_repository(request.target_repository)

        adjacency = self.topology.edges_for(category)
        records = self.classifier.classify(request, adjacency)
        if not records:
            raise EmptyImpactError(request.target_repository, category)

        graph = assemble_graph(adjacency, [record.repository for record in records])
        schedule = self.execution_planner.plan(graph)

        plan = CoordinationPlan(
            affected_repositories=records,
            execution_order=schedule.execution_order,
            risk_assessment=assess_risk(records, category),
            timeline_estimate=estimate_timeline(records, category),
            communication_plan=build_communication_plan(records, category),
        )
        intelligence = Intelligence(
            dependency_graph=graph.to_adjacency(),
            critical_path=schedule.critical_path,
            parallelizable=schedule.parallelizable,
            sequential_steps=list(schedule.critical_path),
        )

        analysis = CoordinationAnalysis(
            change_request=request,
            coordination_plan=plan,
            intelligence=intelligence,
        )
        logger.info(analysis.summary)
        return analysis

    def analyze_change_impact(self, change_request: Union[ChangeRequest, Mapping[str, Any]]) -> ChangeImpact:
        """
        Work out the follow-up a change's files and description call for.

        Args:
            change_request: The change, as a ChangeRequest or a plain mapping

        Returns:
            ChangeImpact naming affected dependents and required actions

        Raises:
            ConfigurationError: Unknown category or target repository
        """
        request = coerce_change_request(change_request)
        self.topology.require_category(request.change_category)

        impact = self.change_impact.analyze(request)
        logger.info(impact.summary)
        return impact

    def dependency_order(
        self,
        category: str,
        repositories: Optional[Iterable[str]] = None
    ) -> List[DependencyOrderEntry]:
        """
        Get the order in which repositories must be handled for a category.

        Args:
            category: Change category whose topology applies
            repositories: Subset to order (all repositories if omitted)

        Returns:
            One entry per repository, in execution order

        Raises:
            ConfigurationError: Unknown category or repository
            CyclicDependencyError: The selected repositories form a cycle
        """
        category = self.topology.require_category(category.strip().lower())
        adjacency = self.topology.edges_for(category)

        if repositories is None:
            selected = list(adjacency)
        else:
            wanted = list(dict.fromkeys(repositories))
            for name in wanted:
                self.topology.get_repository(name)
            selected = [repo for repo in adjacency if repo in wanted]

        graph = assemble_graph(adjacency, selected)
        order = self.execution_planner.topological_order(graph)

        return [
            DependencyOrderEntry(
                order=i,
                repository=repo,
                repository_type=self.topology.get_repository(repo).repository_type.value,
                dependencies=list(adjacency[repo]),
                dependents=dependents_of(repo, adjacency),
            )
            for i, repo in enumerate(order, start=1)
        ]


def coerce_change_request(value: Union[ChangeRequest, Mapping[str, Any]]) -> ChangeRequest:
    """
    Build a ChangeRequest from a request object or a plain mapping.

    Raises:
        ConfigurationError: If the mapping does not describe a valid request
    """
    if isinstance(value, ChangeRequest):
        return value

    if not isinstance(value, Mapping):
        raise ConfigurationError(
            f"Invalid change request: expected a mapping, got {type(value).__name__}",
            details={"fields": []},
        )

    data: Dict[str, Any] = {}
    for key, item in dict(value).items():
        data[_REQUEST_ALIASES.get(key, key)] = item

    try:
        return ChangeRequest.model_validate(data)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ConfigurationError(
            f"Invalid change request: {', '.join(fields) or 'malformed input'}",
            category=data.get("change_category") if isinstance(data.get("change_category"), str) else None,
            repository=data.get("target_repository") if isinstance(data.get("target_repository"), str) else None,
            details={"fields": fields},
        ) from e


def analyze_coordination(
    request: Union[ChangeRequest, Mapping[str, Any]],
    ecosystem: Optional[EcosystemConfig] = None
) -> CoordinationAnalysis:
    """Plan a change against ``ecosystem`` (the built-in one if omitted)."""
    return CoordinationPlanner(ecosystem).analyze(request)


def analyze_change_impact(
    request: Union[ChangeRequest, Mapping[str, Any]],
    ecosystem: Optional[EcosystemConfig] = None
) -> ChangeImpact:
    """Analyze a change's follow-up work against ``ecosystem`` (the built-in one if omitted)."""
    return CoordinationPlanner(ecosystem).analyze_change_impact(request)
