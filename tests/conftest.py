"""
Pytest configuration and shared fixtures for repo-coord tests.
"""

import os
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from repo_coord.lib import config as config_module
from repo_coord.lib.ecosystem import build_ecosystem, default_ecosystem
from repo_coord.models.change_request import ChangeRequest
from repo_coord.models.ecosystem import EcosystemConfig
from repo_coord.models.impact import EffortEstimate, ImpactLevel, ImpactRecord
from repo_coord.services.coordination_planner import CoordinationPlanner


CONFIG_ENV_VARS = [
    "CONFIG_FILE",
    "ENV_FILE",
    "REPO_COORD_ECOSYSTEM_FILE",
    "REPO_COORD_OUTPUT_FORMAT",
    "LOG_LEVEL",
    "LOG_DIR",
    "LOG_TO_FILE",
    "API_HOST",
    "API_PORT",
    "API_DEBUG",
]


@pytest.fixture
def ecosystem() -> EcosystemConfig:
    """The built-in Loqa ecosystem."""
    return default_ecosystem()


@pytest.fixture
def planner(ecosystem: EcosystemConfig) -> CoordinationPlanner:
    return CoordinationPlanner(ecosystem)


@pytest.fixture
def cyclic_ecosystem_data() -> Dict[str, Any]:
    """Two repositories that each must change before the other."""
    return {
        "name": "cyclic",
        "repositories": [
            {"name": "A", "repository_type": "service"},
            {"name": "B", "repository_type": "service"},
        ],
        "topologies": {
            "default": {"A": ["B"], "B": ["A"]},
        },
    }


@pytest.fixture
def cyclic_ecosystem(cyclic_ecosystem_data: Dict[str, Any]) -> EcosystemConfig:
    return build_ecosystem(cyclic_ecosystem_data, source="cyclic fixture")


@pytest.fixture
def cyclic_ecosystem_file(tmp_path: Path, cyclic_ecosystem_data: Dict[str, Any]) -> Path:
    path = tmp_path / "cyclic.yaml"
    path.write_text(yaml.safe_dump(cyclic_ecosystem_data))
    return path


@pytest.fixture
def protocol_request() -> ChangeRequest:
    return ChangeRequest(
        change_category="protocol",
        target_repository="loqa-proto",
        changed_files=["proto/audio.proto"],
        description="Add sample rate to audio stream message",
    )


def make_record(repository: str, level: str = "high", effort: str = "2-3 days") -> ImpactRecord:
    """Build a standalone impact record for estimator tests."""
    return ImpactRecord(
        repository=repository,
        impact_level=ImpactLevel(level),
        required_changes=["Review and update as needed"],
        estimated_effort=EffortEstimate.parse(effort),
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Isolate every test from the caller's environment, .env and cached config."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config_manager", None)

    yield

    # load_dotenv writes straight into os.environ
    for name in CONFIG_ENV_VARS:
        os.environ.pop(name, None)
