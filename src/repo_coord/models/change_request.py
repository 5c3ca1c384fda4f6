"""ChangeRequest model describing a proposed cross-repository change."""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class ChangeCategory(str, Enum):
    """Standard categories of change."""
    PROTOCOL = "protocol"
    FEATURE = "feature"
    BUGFIX = "bugfix"
    INFRASTRUCTURE = "infrastructure"
    BREAKING = "breaking"


class ChangeRequest(BaseModel):
    """
    Proposed change originating in a single repository.

    Created by the caller and consumed once per planning call. The category is
    kept as a plain string so an ecosystem may declare categories beyond the
    standard ones; it is checked against the ecosystem when planning.
    """

    change_category: str = Field(..., description="Category of change")
    target_repository: str = Field(..., description="Repository where the change originates")
    changed_files: Tuple[str, ...] = Field(default=(), description="Changed file paths, if known")
    description: Optional[str] = Field(None, description="Free-form description of the change")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "change_category": "protocol",
                "target_repository": "loqa-proto",
                "changed_files": ["proto/audio.proto"],
                "description": "Add sample rate to audio stream message"
            }
        }
    )

    @field_validator("change_category", mode="before")
    @classmethod
    def normalize_category(cls, v) -> str:
        """Accept enum members and normalize case."""
        if isinstance(v, ChangeCategory):
            return v.value
        if not isinstance(v, str) or not v.strip():
            raise ValueError("change_category must be a non-empty string")
        return v.strip().lower()

    @field_validator("target_repository")
    @classmethod
    def validate_target(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("target_repository must be a non-empty string")
        return v

    @field_validator("changed_files", mode="before")
    @classmethod
    def coerce_changed_files(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        return tuple(v)
