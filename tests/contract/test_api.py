"""Contract tests for the coordination planner HTTP API."""

import pytest
from fastapi.testclient import TestClient

from repo_coord import __version__
from repo_coord.api.main import create_app
from repo_coord.services.coordination_planner import CoordinationPlanner


@pytest.fixture
def client(planner):
    return TestClient(create_app(planner, cors_origins=["*"]))


@pytest.fixture
def cyclic_client(cyclic_ecosystem):
    return TestClient(create_app(CoordinationPlanner(cyclic_ecosystem), cors_origins=["*"]))


@pytest.mark.contract
def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["version"] == __version__


@pytest.mark.contract
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert data["repository_count"] == 7


@pytest.mark.contract
def test_health_builds_planner_from_configuration(cyclic_ecosystem_file, monkeypatch):
    monkeypatch.setenv("REPO_COORD_ECOSYSTEM_FILE", str(cyclic_ecosystem_file))
    client = TestClient(create_app())

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["ecosystem"] == "cyclic"


@pytest.mark.contract
def test_repositories(client):
    response = client.get("/repositories")
    assert response.status_code == 200

    data = response.json()
    names = [repo["name"] for repo in data["repositories"]]
    assert names[:2] == ["loqa", "loqa-proto"]
    assert data["repositories"][2]["repository_type"] == "service"


@pytest.mark.contract
class TestAnalyzeEndpoint:

    def test_protocol_change(self, client):
        response = client.post("/coordination/analyze", json={
            "change_category": "protocol",
            "target_repository": "loqa-proto",
            "changed_files": ["proto/audio.proto"],
        })
        assert response.status_code == 200

        data = response.json()
        plan = data["coordination_plan"]
        assert plan["execution_order"] == [
            "loqa-proto", "loqa-skills", "loqa-hub", "loqa-relay", "loqa-commander", "loqa"
        ]
        assert plan["risk_assessment"]["level"] == "medium"
        assert plan["timeline_estimate"]["total_days"] == 20
        assert data["intelligence"]["parallelizable"] == [
            ["loqa-proto", "loqa-commander", "loqa"],
            ["loqa-skills", "loqa-relay"],
        ]
        assert data["change_request"]["changed_files"] == ["proto/audio.proto"]
        assert "6 repositories" in data["summary"]

    def test_camel_case_body(self, client):
        response = client.post("/coordination/analyze", json={
            "changeCategory": "bugfix",
            "targetRepository": "www-loqalabs-com",
        })
        assert response.status_code == 200
        assert response.json()["coordination_plan"]["execution_order"] == ["www-loqalabs-com"]

    def test_unknown_category(self, client):
        response = client.post("/coordination/analyze", json={
            "change_category": "refactor",
            "target_repository": "loqa-hub",
        })
        assert response.status_code == 400

        data = response.json()
        assert data["error"] == "configuration_error"
        assert data["details"]["category"] == "refactor"

    def test_unknown_repository(self, client):
        response = client.post("/coordination/analyze", json={
            "change_category": "feature",
            "target_repository": "loqa-ghost",
        })
        assert response.status_code == 400
        assert response.json()["details"]["repository"] == "loqa-ghost"

    def test_missing_field(self, client):
        response = client.post("/coordination/analyze", json={"change_category": "feature"})
        assert response.status_code == 400

        data = response.json()
        assert data["error"] == "configuration_error"
        assert "target_repository" in data["details"]["fields"]

    def test_cycle(self, cyclic_client):
        response = cyclic_client.post("/coordination/analyze", json={
            "change_category": "feature",
            "target_repository": "A",
        })
        assert response.status_code == 409

        data = response.json()
        assert data["error"] == "cyclic_dependency"
        assert data["details"]["unresolved"] == ["A", "B"]

    def test_empty_impact(self, client, planner, monkeypatch):
        monkeypatch.setattr(planner.classifier, "classify", lambda *args, **kwargs: [])
        response = client.post("/coordination/analyze", json={
            "change_category": "feature",
            "target_repository": "loqa-hub",
        })
        assert response.status_code == 500
        assert response.json()["error"] == "empty_impact"


@pytest.mark.contract
class TestImpactEndpoint:

    def test_protocol_change(self, client):
        response = client.post("/coordination/impact", json={
            "change_category": "protocol",
            "target_repository": "loqa-proto",
            "changed_files": ["proto/audio.proto"],
            "description": "Add sample rate",
        })
        assert response.status_code == 200

        data = response.json()
        assert data["changed_repository"] == "loqa-proto"
        assert data["impact_type"] == "breaking"
        assert data["affected_repositories"] == ["loqa-skills", "loqa-hub", "loqa-relay"]
        assert data["coordination_complexity"] == "complex"
        assert data["required_actions"][0]["automatable"] is True
        assert data["required_actions"][0]["estimated_effort"]["unit"] == "minutes"
        assert "Set up automated protocol binding generation in CI/CD" in data["automation_recommendations"]
        assert data["summary"].startswith("BREAKING change in loqa-proto")

    def test_camel_case_body(self, client):
        response = client.post("/coordination/impact", json={
            "changeCategory": "feature",
            "targetRepository": "loqa-hub",
            "changedFiles": ["internal/api/sessions.go"],
            "description": "feat: add sessions endpoint",
        })
        assert response.status_code == 200

        data = response.json()
        assert data["affected_repositories"] == ["loqa-commander"]
        assert data["required_actions"][0]["action_type"] == "update-api-calls"

    def test_unknown_repository(self, client):
        response = client.post("/coordination/impact", json={
            "change_category": "feature",
            "target_repository": "loqa-ghost",
        })
        assert response.status_code == 400
        assert response.json()["details"]["repository"] == "loqa-ghost"

    def test_missing_field(self, client):
        response = client.post("/coordination/impact", json={"target_repository": "loqa-hub"})
        assert response.status_code == 400
        assert "change_category" in response.json()["details"]["fields"]


@pytest.mark.contract
class TestOrderEndpoint:

    def test_full_order(self, client):
        response = client.get("/coordination/order/infrastructure")
        assert response.status_code == 200

        data = response.json()
        assert data["execution_order"][0] == "loqa"
        assert data["details"][0]["dependents"] == [
            "loqa-hub", "loqa-commander", "loqa-relay", "loqa-skills", "www-loqalabs-com"
        ]

    def test_selected_repositories(self, client):
        response = client.get(
            "/coordination/order/protocol",
            params={"repository": ["loqa", "loqa-relay"]},
        )
        assert response.status_code == 200
        assert response.json()["execution_order"] == ["loqa-relay", "loqa"]

    def test_unknown_category(self, client):
        response = client.get("/coordination/order/refactor")
        assert response.status_code == 400
        assert response.json()["error"] == "configuration_error"

    def test_cycle(self, cyclic_client):
        response = cyclic_client.get("/coordination/order/feature")
        assert response.status_code == 409
