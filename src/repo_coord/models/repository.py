"""
Repository entity model for the coordination planner.

Represents one repository of the multi-repository ecosystem. The repository
set is fixed configuration data and is never created or destroyed at runtime.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class RepositoryType(str, Enum):
    """Role a repository plays in the ecosystem."""
    CORE = "core"
    SERVICE = "service"
    CLIENT = "client"
    PROTOCOL = "protocol"
    UI = "ui"
    WEBSITE = "website"
    CONFIG = "config"


class Repository(BaseModel):
    """
    Repository entity identified by its unique name.

    Coordination planning keys everything on ``name``. Change impact
    analysis also reads ``repository_type`` and ``language``.
    """

    # Core identification
    name: str = Field(..., description="Unique repository name")

    # Catalogue metadata
    display_name: str = Field(default="", description="Human-readable repository name")
    description: str = Field(default="", description="Short description of the repository")
    repository_type: RepositoryType = Field(default=RepositoryType.SERVICE, description="Role in the ecosystem")
    testable: bool = Field(default=False, description="Whether the repository carries a test suite")
    priority: int = Field(default=100, ge=0, description="Static priority, lower values come first")
    language: str = Field(default="", description="Primary language or build technology, e.g. go")

    # Pydantic configuration
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "loqa-hub",
                "display_name": "Loqa Hub",
                "description": "Central service with STT/TTS/LLM pipeline",
                "repository_type": "service",
                "testable": True,
                "priority": 3,
                "language": "go"
            }
        }
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate repository name is a non-empty identifier."""
        v = v.strip()
        if not v:
            raise ValueError("Repository name must be a non-empty string")
        if any(c.isspace() for c in v):
            raise ValueError(f"Repository name must not contain whitespace: {v!r}")
        return v

    @property
    def label(self) -> str:
        """Display name, falling back to the identifier."""
        return self.display_name or self.name

    def __str__(self) -> str:
        return self.name
