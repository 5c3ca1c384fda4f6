"""
Ecosystem loading and the built-in Loqa ecosystem.

The ecosystem is plain data: it can be loaded from YAML, validated into an
immutable ``EcosystemConfig`` and passed explicitly to each planner.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from repo_coord.lib.exceptions import ConfigurationError
from repo_coord.models.ecosystem import EcosystemConfig


logger = logging.getLogger(__name__)


DEFAULT_ECOSYSTEM: Dict[str, Any] = {
    "name": "loqa",
    "repositories": [
        {
            "name": "loqa",
            "display_name": "Loqa Core",
            "description": "Main documentation and orchestration",
            "repository_type": "core",
            "testable": False,
            "priority": 2,
            "language": "docker",
        },
        {
            "name": "loqa-proto",
            "display_name": "Loqa Protocol",
            "description": "gRPC protocol definitions and generated bindings",
            "repository_type": "protocol",
            "testable": False,
            "priority": 1,
            "language": "protobuf",
        },
        {
            "name": "loqa-hub",
            "display_name": "Loqa Hub",
            "description": "Central service with STT/TTS/LLM pipeline",
            "repository_type": "service",
            "testable": True,
            "priority": 3,
            "language": "go",
        },
        {
            "name": "loqa-skills",
            "display_name": "Loqa Skills",
            "description": "Modular skill plugin system",
            "repository_type": "service",
            "testable": False,
            "priority": 4,
            "language": "go",
        },
        {
            "name": "loqa-relay",
            "display_name": "Loqa Relay",
            "description": "Audio capture client and embedded firmware",
            "repository_type": "client",
            "testable": True,
            "priority": 5,
            "language": "go",
        },
        {
            "name": "loqa-commander",
            "display_name": "Loqa Commander",
            "description": "Vue.js administrative dashboard",
            "repository_type": "ui",
            "testable": True,
            "priority": 6,
            "language": "typescript",
        },
        {
            "name": "www-loqalabs-com",
            "display_name": "Loqa Labs Website",
            "description": "Company website and documentation",
            "repository_type": "website",
            "testable": False,
            "priority": 7,
            "language": "typescript",
        },
    ],
    "categories": ["protocol", "feature", "bugfix", "infrastructure", "breaking"],
    "topologies": {
        "default": {
            "loqa-proto": [],
            "loqa-skills": ["loqa-proto"],
            "loqa-hub": ["loqa-proto", "loqa-skills"],
            "loqa-relay": ["loqa-proto"],
            "loqa-commander": ["loqa-hub"],
            "www-loqalabs-com": [],
            "loqa": [],
        },
        # gRPC consumers chain off the protocol; orchestration waits on the services
        "protocol": {
            "loqa-proto": [],
            "loqa-skills": ["loqa-proto"],
            "loqa-hub": ["loqa-proto", "loqa-skills"],
            "loqa-relay": ["loqa-proto"],
            "loqa-commander": ["loqa-hub"],
            "www-loqalabs-com": [],
            "loqa": ["loqa-hub", "loqa-relay"],
        },
        # Orchestration becomes the root
        "infrastructure": {
            "loqa": [],
            "loqa-hub": ["loqa"],
            "loqa-commander": ["loqa"],
            "loqa-relay": ["loqa"],
            "loqa-skills": ["loqa"],
            "www-loqalabs-com": ["loqa"],
            "loqa-proto": [],
        },
    },
    "impact_matrix": {
        "protocol": {
            "loqa-proto": "high",
            "loqa-hub": "high",
            "loqa-relay": "high",
            "loqa-skills": "medium",
            "loqa-commander": "low",
            "www-loqalabs-com": "none",
            "loqa": "medium",
        },
        "infrastructure": {
            "loqa": "high",
            "loqa-hub": "high",
            "loqa-commander": "medium",
            "loqa-relay": "medium",
            "loqa-skills": "low",
            "www-loqalabs-com": "medium",
            "loqa-proto": "none",
        },
        "breaking": {
            "loqa-proto": "high",
            "loqa-hub": "high",
            "loqa-relay": "high",
            "loqa-commander": "high",
            "loqa-skills": "high",
            "www-loqalabs-com": "low",
            "loqa": "high",
        },
        # Features and fixes stay inside the target repository
        "feature": {
            "loqa": "none",
            "loqa-proto": "none",
            "loqa-hub": "none",
            "loqa-skills": "none",
            "loqa-relay": "none",
            "loqa-commander": "none",
            "www-loqalabs-com": "none",
        },
        "bugfix": {
            "loqa": "none",
            "loqa-proto": "none",
            "loqa-hub": "none",
            "loqa-skills": "none",
            "loqa-relay": "none",
            "loqa-commander": "none",
            "www-loqalabs-com": "none",
        },
    },
    "change_templates": {
        "protocol": {
            "loqa-proto": ["Update .proto files", "Regenerate bindings", "Update documentation"],
            "loqa-hub": ["Update gRPC client/server code", "Update tests", "Validate compatibility"],
            "loqa-relay": ["Update gRPC client code", "Update audio streaming", "Test integration"],
            "loqa-skills": ["Update plugin interface", "Update skill implementations", "Test skill loading"],
            "loqa-commander": ["Update API calls if needed", "Update UI if protocol affects exposed APIs"],
            "loqa": ["Update docker-compose", "Update documentation", "Test end-to-end"],
        },
        "infrastructure": {
            "loqa": ["Update docker-compose.yml", "Update deployment scripts", "Update documentation"],
            "loqa-hub": ["Update Dockerfile", "Update configuration", "Test deployment"],
            "loqa-commander": ["Update build process", "Update Dockerfile", "Test deployment"],
            "loqa-relay": ["Update build process", "Update configuration", "Test deployment"],
        },
    },
    "effort_table": {
        "high": {
            "protocol": "2-3 days",
            "infrastructure": "1-2 days",
            "breaking": "3-5 days",
            "feature": "2-4 days",
            "bugfix": "4-8 hours",
        },
        "medium": {
            "protocol": "4-8 hours",
            "infrastructure": "2-4 hours",
            "breaking": "1-2 days",
            "feature": "1-2 days",
            "bugfix": "2-4 hours",
        },
        "low": {
            "protocol": "1-2 hours",
            "infrastructure": "1-2 hours",
            "breaking": "2-4 hours",
            "feature": "2-6 hours",
            "bugfix": "1-2 hours",
        },
    },
    "default_impact": "low",
    "default_required_changes": ["Review and update as needed"],
    "default_effort": "2-4 hours",
}


def build_ecosystem(data: Dict[str, Any], source: str = "<memory>") -> EcosystemConfig:
    """
    Validate raw ecosystem data.

    Args:
        data: Mapping in the ``DEFAULT_ECOSYSTEM`` shape
        source: Where the data came from, for error messages

    Returns:
        Validated, immutable ecosystem

    Raises:
        ConfigurationError: If the data does not describe a valid ecosystem
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Ecosystem definition in {source} must be a mapping")
    try:
        return EcosystemConfig.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid ecosystem definition in {source}: {e}")
        raise ConfigurationError(
            f"Invalid ecosystem definition in {source}",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


def default_ecosystem() -> EcosystemConfig:
    """Get the built-in Loqa ecosystem."""
    return build_ecosystem(copy.deepcopy(DEFAULT_ECOSYSTEM), source="built-in ecosystem")


def load_ecosystem(path: Union[str, Path]) -> EcosystemConfig:
    """
    Load an ecosystem from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated ecosystem

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read ecosystem file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed YAML in ecosystem file {path}: {e}") from e

    ecosystem = build_ecosystem(data, source=str(path))
    logger.info(f"Loaded ecosystem '{ecosystem.name}' with {len(ecosystem.repositories)} repositories from {path}")
    return ecosystem


def resolve_ecosystem(path: Optional[Union[str, Path]] = None) -> EcosystemConfig:
    """Load the ecosystem at ``path``, or the built-in one when no path is given."""
    if path:
        return load_ecosystem(path)
    return default_ecosystem()


def save_ecosystem(ecosystem: EcosystemConfig, path: Union[str, Path]) -> None:
    """Save an ecosystem to a YAML file."""
    data = ecosystem.model_dump(mode="json")
    # Effort ranges round-trip through their text form
    data["effort_table"] = {
        level: {category: effort["label"] for category, effort in by_category.items()}
        for level, by_category in data["effort_table"].items()
    }
    data["default_effort"] = data["default_effort"]["label"]

    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)

    logger.info(f"Ecosystem saved to {path}")
