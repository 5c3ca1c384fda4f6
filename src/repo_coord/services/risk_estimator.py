"""
Risk, timeline and communication estimates for a coordinated change.

Risk is a fixed additive score over three conditions; the timeline is a
four-phase table that widens for larger or breaking changes.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from repo_coord.models.change_request import ChangeCategory
from repo_coord.models.coordination_plan import (
    CommunicationPlan,
    PhaseEstimate,
    RiskAssessment,
    RiskLevel,
    TimelineEstimate,
)
from repo_coord.models.impact import ImpactLevel, ImpactRecord


logger = logging.getLogger(__name__)


# Risk policy
HIGH_IMPACT_THRESHOLD = 3        # more than this many high-impact repos
HIGH_IMPACT_POINTS = 2
BREAKING_POINTS = 3
EFFORT_DAYS_THRESHOLD = 10       # more than this many minimum effort days
EFFORT_POINTS = 2

BREAKING_CATEGORIES = frozenset({ChangeCategory.PROTOCOL.value, ChangeCategory.BREAKING.value})

# Timeline policy
PLANNING_PHASE = "Planning & Design"
IMPLEMENTATION_PHASE = "Implementation"
INTEGRATION_PHASE = "Integration & Testing"
DEPLOYMENT_PHASE = "Deployment"

DEFAULT_PHASES: Dict[str, Tuple[int, int]] = {
    PLANNING_PHASE: (1, 2),
    IMPLEMENTATION_PHASE: (3, 8),
    INTEGRATION_PHASE: (2, 3),
    DEPLOYMENT_PHASE: (1, 1),
}

EXPANDED_PHASES: Dict[str, Tuple[int, int]] = {
    IMPLEMENTATION_PHASE: (5, 12),
    INTEGRATION_PHASE: (3, 5),
}

TIMELINE_HIGH_IMPACT_THRESHOLD = 2


def _high_impact_count(records: Sequence[ImpactRecord]) -> int:
    return sum(1 for record in records if record.impact_level == ImpactLevel.HIGH)


def total_minimum_effort_days(records: Sequence[ImpactRecord]) -> float:
    """Sum of the lower effort bound of every record, in working days."""
    return sum(record.estimated_effort.min_days for record in records)


def risk_level_for(score: int) -> RiskLevel:
    if score >= 6:
        return RiskLevel.CRITICAL
    elif score >= 4:
        return RiskLevel.HIGH
    elif score >= 2:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def assess_risk(records: Sequence[ImpactRecord], category: str) -> RiskAssessment:
    """
    Assess coordination risk.

    Args:
        records: Impact records of the affected repositories
        category: Change category

    Returns:
        RiskAssessment whose level depends only on the three risk conditions
    """
    factors: List[str] = []
    mitigations: List[str] = []
    score = 0

    high_count = _high_impact_count(records)
    if high_count > HIGH_IMPACT_THRESHOLD:
        factors.append(f"{high_count} repositories with high impact")
        mitigations.append("Implement feature flags for gradual rollout")
        score += HIGH_IMPACT_POINTS

    if category in BREAKING_CATEGORIES:
        factors.append("Breaking changes require careful coordination")
        mitigations.append("Create compatibility layer during transition")
        score += BREAKING_POINTS

    if total_minimum_effort_days(records) > EFFORT_DAYS_THRESHOLD:
        factors.append("Large time commitment across multiple repositories")
        mitigations.append("Break down into smaller phases")
        score += EFFORT_POINTS

    level = risk_level_for(score)
    logger.debug(f"Risk score {score} ({level.value}) for {category} change")
    return RiskAssessment(level=level, score=score, factors=factors, mitigations=mitigations)


def estimate_timeline(records: Sequence[ImpactRecord], category: str) -> TimelineEstimate:
    """Estimate the phase-based timeline of a coordinated change."""
    phases = dict(DEFAULT_PHASES)
    if _high_impact_count(records) > TIMELINE_HIGH_IMPACT_THRESHOLD or category == ChangeCategory.BREAKING.value:
        phases.update(EXPANDED_PHASES)

    by_phase = {
        name: PhaseEstimate(min_days=low, max_days=high)
        for name, (low, high) in phases.items()
    }
    total_days = sum(estimate.max_days for estimate in by_phase.values())

    return TimelineEstimate(total_days=total_days, by_phase=by_phase)


def build_communication_plan(records: Sequence[ImpactRecord], category: str) -> CommunicationPlan:
    stakeholders = ["Development Team"]
    checkpoints = ["Planning Complete", "Implementation Phase 1 Complete"]
    documentation = ["Change Impact Analysis", "Implementation Guide"]

    if category in BREAKING_CATEGORIES:
        stakeholders.extend(["Architecture Team", "QA Team"])
        checkpoints.extend(["Protocol Review Complete", "Backward Compatibility Verified"])
        documentation.extend(["Protocol Migration Guide", "Breaking Changes Changelog"])

    if _high_impact_count(records) > 0:
        checkpoints.extend(["Integration Testing Complete", "Pre-deployment Review"])

    return CommunicationPlan(
        stakeholders=stakeholders,
        checkpoints=checkpoints,
        documentation=documentation,
    )
