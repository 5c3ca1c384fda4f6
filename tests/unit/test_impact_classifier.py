"""Unit tests for impact classification."""

import pytest

from repo_coord.lib.ecosystem import DEFAULT_ECOSYSTEM, build_ecosystem
from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.impact import ImpactLevel
from repo_coord.services.impact_classifier import ImpactClassifier


@pytest.fixture
def classifier(ecosystem):
    return ImpactClassifier(ecosystem)


def _request(category, target):
    return ChangeRequest(change_category=category, target_repository=target)


@pytest.mark.unit
class TestImpactClassifier:

    def test_protocol_change_records(self, classifier, protocol_request):
        records = classifier.classify(protocol_request)
        assert [r.repository for r in records] == [
            "loqa-proto", "loqa-skills", "loqa-hub", "loqa-relay", "loqa-commander", "loqa"
        ]
        levels = {r.repository: r.impact_level for r in records}
        assert levels["loqa-skills"] == ImpactLevel.MEDIUM
        assert levels["loqa-commander"] == ImpactLevel.LOW

    def test_blocked_by_and_blocks_are_restricted_to_affected(self, classifier, protocol_request):
        records = {r.repository: r for r in classifier.classify(protocol_request)}
        hub = records["loqa-hub"]
        assert hub.blocked_by == ["loqa-proto", "loqa-skills"]
        assert hub.blocks == ["loqa-commander", "loqa"]
        assert records["loqa"].blocked_by == ["loqa-hub", "loqa-relay"]
        assert records["loqa-commander"].blocks == []

    def test_unaffected_neighbours_are_dropped(self, classifier):
        records = {r.repository: r for r in classifier.classify(_request("infrastructure", "loqa"))}
        assert "loqa-proto" not in records
        assert records["loqa-hub"].blocked_by == ["loqa"]

    def test_target_is_always_high(self, classifier):
        records = classifier.classify(_request("protocol", "www-loqalabs-com"))
        www = [r for r in records if r.repository == "www-loqalabs-com"]
        assert www and www[0].impact_level == ImpactLevel.HIGH

    def test_feature_affects_only_target(self, classifier):
        records = classifier.classify(_request("feature", "loqa-hub"))
        assert len(records) == 1
        record = records[0]
        assert record.impact_level == ImpactLevel.HIGH
        assert record.estimated_effort.label == "2-4 days"
        assert record.required_changes == ["Review and update as needed"]
        assert record.blocked_by == [] and record.blocks == []

    def test_templates_and_effort(self, classifier, protocol_request):
        records = {r.repository: r for r in classifier.classify(protocol_request)}
        assert records["loqa-relay"].required_changes == [
            "Update gRPC client code", "Update audio streaming", "Test integration"
        ]
        assert records["loqa-relay"].estimated_effort.label == "2-3 days"
        assert records["loqa-skills"].estimated_effort.label == "4-8 hours"

    def test_missing_effort_uses_default(self):
        data = dict(DEFAULT_ECOSYSTEM, effort_table={})
        classifier = ImpactClassifier(build_ecosystem(data))
        records = classifier.classify(_request("bugfix", "loqa"))
        assert records[0].estimated_effort.label == "2-4 hours"

    def test_default_impact_applies_to_unlisted(self):
        data = dict(DEFAULT_ECOSYSTEM, impact_matrix={})
        classifier = ImpactClassifier(build_ecosystem(data))
        records = classifier.classify(_request("bugfix", "loqa"))
        levels = {r.repository: r.impact_level for r in records}
        assert len(records) == 7
        assert levels["loqa"] == ImpactLevel.HIGH
        assert levels["loqa-hub"] == ImpactLevel.LOW
