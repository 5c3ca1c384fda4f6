"""
Change impact analysis.

Infers the kind of a change from its changed files and description, then
works out which dependents need follow-up, what they have to do and how
much coordination that takes. Dependents come from the ecosystem's
``default`` topology.
"""

import logging
from typing import Dict, List, Optional, Sequence

from repo_coord.models.change_impact import (
    ActionPriority,
    ActionType,
    ChangeImpact,
    ChangeImpactType,
    CoordinationComplexity,
    RequiredAction,
)
from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.ecosystem import EcosystemConfig
from repo_coord.models.impact import EffortEstimate
from repo_coord.models.repository import Repository, RepositoryType
from repo_coord.services.topology import TopologyProvider, dependents_of


logger = logging.getLogger(__name__)


# Description markers, matched as lowercase substrings
BREAKING_MARKERS = ("breaking", "major:")
API_FEATURE_MARKERS = ("feat", "add")
FEATURE_MARKERS = ("feat", "add", "new")
BUGFIX_MARKERS = ("fix", "bug", "patch")

API_PATH_MARKERS = ("api/", "internal/api")
PROTOCOL_FILE_MARKER = ".proto"

# Languages whose bindings are generated from protocol definitions
BINDING_LANGUAGES = frozenset({"go"})

# Used when neither the files nor the description say anything
CATEGORY_IMPACT_TYPES: Dict[str, ChangeImpactType] = {
    "breaking": ChangeImpactType.BREAKING,
    "protocol": ChangeImpactType.BREAKING,
    "feature": ChangeImpactType.FEATURE,
    "bugfix": ChangeImpactType.BUGFIX,
}


class ChangeImpactAnalyzer:
    """
    Service for analyzing the follow-up work a concrete change causes.

    Stateless apart from the injected ecosystem; every call derives its
    data afresh.
    """

    def __init__(self, ecosystem: EcosystemConfig):
        self.ecosystem = ecosystem
        self.topology = TopologyProvider(ecosystem)

    def analyze(self, request: ChangeRequest) -> ChangeImpact:
        """
        Analyze the impact of a change request's files and description.

        Args:
            request: Change request; its category is only a fallback hint

        Returns:
            ChangeImpact with affected dependents and required actions

        Raises:
            ConfigurationError: If the target repository is unknown
        """
        changed = self.topology.get_repository(request.target_repository)
        adjacency = self.topology.default_edges()
        dependents = dependents_of(changed.name, adjacency)

        impact_type = self.determine_impact_type(
            changed, request.changed_files, request.description, dependents, request.change_category
        )
        affected = self.find_affected_repositories(impact_type, dependents)
        actions = self.required_actions(changed, affected, impact_type)

        impact = ChangeImpact(
            changed_repository=changed.name,
            impact_type=impact_type,
            affected_repositories=affected,
            required_actions=actions,
            coordination_complexity=assess_complexity(affected, actions),
            estimated_effort=estimate_effort(affected, actions),
            automation_recommendations=automation_recommendations(actions, impact_type),
        )
        logger.debug(f"Change impact for {changed.name}: {impact.impact_type.value}, {len(actions)} action(s)")
        return impact

    def determine_impact_type(
        self,
        changed: Repository,
        changed_files: Sequence[str],
        description: Optional[str],
        dependents: List[str],
        category: Optional[str] = None
    ) -> ChangeImpactType:
        """
        Classify a change, first matching rule wins.

        Explicit breaking markers come first, then protocol definition
        files, then API paths of repositories that a UI consumes, then
        feature and fix markers. The request category decides when nothing
        else matched.
        """
        message = (description or "").lower()
        files = " ".join(changed_files).lower()

        if any(marker in message for marker in BREAKING_MARKERS):
            return ChangeImpactType.BREAKING

        if changed.repository_type == RepositoryType.PROTOCOL and PROTOCOL_FILE_MARKER in files:
            return ChangeImpactType.BREAKING

        if self._serves_ui(dependents) and any(marker in files for marker in API_PATH_MARKERS):
            if any(marker in message for marker in API_FEATURE_MARKERS):
                return ChangeImpactType.FEATURE
            return ChangeImpactType.BREAKING

        if any(marker in message for marker in FEATURE_MARKERS):
            return ChangeImpactType.FEATURE
        if any(marker in message for marker in BUGFIX_MARKERS):
            return ChangeImpactType.BUGFIX

        return CATEGORY_IMPACT_TYPES.get(category or "", ChangeImpactType.INTERNAL)

    def find_affected_repositories(self, impact_type: ChangeImpactType, dependents: List[str]) -> List[str]:
        """Breaking changes and features reach every dependent, fixes only the first."""
        if impact_type in (ChangeImpactType.BREAKING, ChangeImpactType.FEATURE):
            affected = dependents
        elif impact_type == ChangeImpactType.BUGFIX:
            affected = dependents[:1]
        else:
            affected = []
        return list(dict.fromkeys(affected))

    def required_actions(
        self,
        changed: Repository,
        affected: List[str],
        impact_type: ChangeImpactType
    ) -> List[RequiredAction]:
        breaking = impact_type == ChangeImpactType.BREAKING
        actions: List[RequiredAction] = []

        for name in affected:
            repository = self.topology.get_repository(name)
            language = repository.language.lower()

            if changed.repository_type == RepositoryType.PROTOCOL and language in BINDING_LANGUAGES:
                actions.append(RequiredAction(
                    repository=name,
                    action_type=ActionType.REGENERATE_BINDINGS,
                    description=f"Regenerate {language.title()} bindings from updated protocol definitions",
                    priority=ActionPriority.HIGH,
                    automatable=True,
                    estimated_effort=EffortEstimate.parse("15 minutes"),
                ))

            if repository.repository_type == RepositoryType.UI:
                actions.append(RequiredAction(
                    repository=name,
                    action_type=ActionType.UPDATE_API_CALLS,
                    description=f"Update API client calls to match {changed.name} changes",
                    priority=ActionPriority.HIGH if breaking else ActionPriority.MEDIUM,
                    automatable=False,
                    estimated_effort=EffortEstimate.parse("2-4 hours" if breaking else "30 minutes"),
                ))

            actions.append(RequiredAction(
                repository=name,
                action_type=ActionType.UPDATE_TESTS,
                description="Update tests to reflect changes in dependencies",
                priority=ActionPriority.MEDIUM,
                automatable=False,
                estimated_effort=EffortEstimate.parse("1-2 hours"),
            ))

        return actions

    def _serves_ui(self, dependents: List[str]) -> bool:
        return any(
            self.topology.get_repository(name).repository_type == RepositoryType.UI
            for name in dependents
        )


def assess_complexity(affected: List[str], actions: List[RequiredAction]) -> CoordinationComplexity:
    if not affected:
        return CoordinationComplexity.SIMPLE
    manual = sum(1 for action in actions if not action.automatable)
    if len(affected) <= 2 and manual <= 2:
        return CoordinationComplexity.MODERATE
    return CoordinationComplexity.COMPLEX


def estimate_effort(affected: List[str], actions: List[RequiredAction]) -> EffortEstimate:
    manual = sum(1 for action in actions if not action.automatable)
    if not affected:
        return EffortEstimate.parse("0 minutes")
    if len(affected) <= 2 and manual <= 2:
        return EffortEstimate.parse("1-2 hours")
    if len(affected) <= 4 and manual <= 4:
        return EffortEstimate.parse("0.5-1 day")
    return EffortEstimate.parse("1-3 days")


def automation_recommendations(actions: List[RequiredAction], impact_type: ChangeImpactType) -> List[str]:
    recommendations = []

    automatable = [action for action in actions if action.automatable]
    if automatable:
        kinds = ", ".join(ActionType(action.action_type).value for action in automatable)
        recommendations.append(f"Automate {len(automatable)} actions: {kinds}")

    if impact_type == ChangeImpactType.BREAKING:
        recommendations.append("Create coordinated feature branches for breaking changes")
        recommendations.append("Run quality gates in dependency order before merging")

    if any(action.action_type == ActionType.REGENERATE_BINDINGS for action in actions):
        recommendations.append("Set up automated protocol binding generation in CI/CD")

    return recommendations
