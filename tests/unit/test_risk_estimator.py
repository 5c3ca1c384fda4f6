"""Unit tests for risk, timeline and communication estimates."""

import pytest

from repo_coord.models.coordination_plan import RiskLevel
from repo_coord.services.risk_estimator import (
    EXPANDED_PHASES,
    assess_risk,
    build_communication_plan,
    estimate_timeline,
    risk_level_for,
    total_minimum_effort_days,
)


def _records(record_factory, count, level="high", effort="2-3 days"):
    return [record_factory(f"repo-{i}", level, effort) for i in range(count)]


@pytest.mark.unit
class TestRiskAssessment:

    @pytest.mark.parametrize("score,level", [
        (0, RiskLevel.LOW),
        (1, RiskLevel.LOW),
        (2, RiskLevel.MEDIUM),
        (3, RiskLevel.MEDIUM),
        (4, RiskLevel.HIGH),
        (5, RiskLevel.HIGH),
        (6, RiskLevel.CRITICAL),
        (7, RiskLevel.CRITICAL),
    ])
    def test_level_thresholds(self, score, level):
        assert risk_level_for(score) == level

    def test_minimum_effort_mixes_units(self, record_factory):
        records = [
            record_factory("a", "high", "2-3 days"),
            record_factory("b", "low", "4-8 hours"),
        ]
        assert total_minimum_effort_days(records) == 2.5

    def test_no_factors(self, record_factory):
        risk = assess_risk(_records(record_factory, 3), "feature")
        assert risk.level == RiskLevel.LOW
        assert risk.score == 0
        assert risk.factors == [] and risk.mitigations == []

    def test_high_impact_factor(self, record_factory):
        risk = assess_risk(_records(record_factory, 4, effort="1-2 days"), "feature")
        assert risk.score == 2
        assert risk.level == RiskLevel.MEDIUM
        assert risk.factors == ["4 repositories with high impact"]
        assert risk.mitigations == ["Implement feature flags for gradual rollout"]

    @pytest.mark.parametrize("category", ["protocol", "breaking"])
    def test_breaking_factor(self, record_factory, category):
        risk = assess_risk(_records(record_factory, 1), category)
        assert risk.score == 3
        assert risk.factors == ["Breaking changes require careful coordination"]
        assert risk.mitigations == ["Create compatibility layer during transition"]

    def test_effort_factor_needs_more_than_ten_days(self, record_factory):
        exactly_ten = _records(record_factory, 2, level="medium", effort="5 days")
        assert assess_risk(exactly_ten, "feature").score == 0

        over_ten = exactly_ten + [record_factory("extra", "low", "1 hour")]
        risk = assess_risk(over_ten, "feature")
        assert risk.score == 2
        assert risk.factors == ["Large time commitment across multiple repositories"]
        assert risk.mitigations == ["Break down into smaller phases"]

    def test_all_factors(self, record_factory):
        risk = assess_risk(_records(record_factory, 6, effort="3-5 days"), "breaking")
        assert risk.score == 7
        assert risk.level == RiskLevel.CRITICAL
        assert len(risk.factors) == 3

    def test_more_high_impact_never_lowers_risk(self, record_factory):
        previous = -1
        for count in range(8):
            records = _records(record_factory, count) + [record_factory("low", "low", "1-2 hours")]
            rank = assess_risk(records, "protocol").rank
            assert rank >= previous
            previous = rank


@pytest.mark.unit
class TestTimeline:

    def test_default_phases(self, record_factory):
        timeline = estimate_timeline(_records(record_factory, 2), "feature")
        assert list(timeline.by_phase) == [
            "Planning & Design", "Implementation", "Integration & Testing", "Deployment"
        ]
        assert timeline.by_phase["Implementation"].label == "3-8 days"
        assert timeline.total_days == 14

    def test_expands_with_many_high_impact(self, record_factory):
        timeline = estimate_timeline(_records(record_factory, 3), "feature")
        for name, (low, high) in EXPANDED_PHASES.items():
            assert timeline.by_phase[name].min_days == low
            assert timeline.by_phase[name].max_days == high
        assert timeline.total_days == 20

    def test_expands_for_breaking(self, record_factory):
        assert estimate_timeline(_records(record_factory, 1, "low"), "breaking").total_days == 20

    def test_protocol_alone_does_not_expand(self, record_factory):
        assert estimate_timeline(_records(record_factory, 1), "protocol").total_days == 14


@pytest.mark.unit
class TestCommunicationPlan:

    def test_minimal_plan(self, record_factory):
        plan = build_communication_plan(_records(record_factory, 1, "medium"), "feature")
        assert plan.stakeholders == ["Development Team"]
        assert plan.checkpoints == ["Planning Complete", "Implementation Phase 1 Complete"]
        assert plan.documentation == ["Change Impact Analysis", "Implementation Guide"]

    def test_breaking_change_plan(self, record_factory):
        plan = build_communication_plan(_records(record_factory, 1), "protocol")
        assert plan.stakeholders == ["Development Team", "Architecture Team", "QA Team"]
        assert "Backward Compatibility Verified" in plan.checkpoints
        assert "Pre-deployment Review" in plan.checkpoints
        assert "Breaking Changes Changelog" in plan.documentation
