"""
Impact models for repositories affected by a change.

Covers the qualitative impact level, the bounded effort range and the
per-repository impact record produced by classification.
"""

import re
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from pydantic.config import ConfigDict


HOURS_PER_DAY = 8
MINUTES_PER_HOUR = 60

_EFFORT_PATTERN = re.compile(
    r"^\s*(?P<low>\d+(?:\.\d+)?)\s*(?:-\s*(?P<high>\d+(?:\.\d+)?))?\s*(?P<unit>minutes?|hours?|days?)\s*$",
    re.IGNORECASE,
)


class ImpactLevel(str, Enum):
    """Severity of the work required in a repository."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EffortUnit(str, Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


class EffortEstimate(BaseModel):
    """
    Bounded effort range such as "2-3 days", "4-8 hours" or "15 minutes".

    Accepts either the structured form or the human-readable string when
    validated, so effort tables can be written as plain text.
    """

    min_value: float = Field(..., ge=0, description="Lower bound in the given unit")
    max_value: float = Field(..., ge=0, description="Upper bound in the given unit")
    unit: EffortUnit = Field(default=EffortUnit.DAYS, description="Unit of both bounds")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def parse_text(cls, data: Any) -> Any:
        """Parse the "<min>-<max> <unit>" text form."""
        if not isinstance(data, str):
            return data
        match = _EFFORT_PATTERN.match(data)
        if not match:
            raise ValueError(f"Invalid effort range: {data!r}")
        low = float(match.group("low"))
        high = float(match.group("high")) if match.group("high") else low
        unit = match.group("unit").lower()
        if not unit.endswith("s"):
            unit += "s"
        return {"min_value": low, "max_value": high, "unit": unit}

    @model_validator(mode="after")
    def validate_bounds(self) -> "EffortEstimate":
        if self.max_value < self.min_value:
            raise ValueError("Effort upper bound cannot be below lower bound")
        return self

    @classmethod
    def parse(cls, text: str) -> "EffortEstimate":
        return cls.model_validate(text)

    def _to_days(self, value: float) -> float:
        if self.unit == EffortUnit.MINUTES:
            return value / (MINUTES_PER_HOUR * HOURS_PER_DAY)
        if self.unit == EffortUnit.HOURS:
            return value / HOURS_PER_DAY
        return value

    @computed_field
    @property
    def min_days(self) -> float:
        """Lower bound expressed in working days."""
        return self._to_days(self.min_value)

    @computed_field
    @property
    def max_days(self) -> float:
        """Upper bound expressed in working days."""
        return self._to_days(self.max_value)

    @computed_field
    @property
    def label(self) -> str:
        low, high = f"{self.min_value:g}", f"{self.max_value:g}"
        unit = self.unit.value
        if low == high:
            if self.min_value == 1:
                unit = unit[:-1]
            return f"{low} {unit}"
        return f"{low}-{high} {unit}"

    def __str__(self) -> str:
        return self.label


class ImpactRecord(BaseModel):
    """
    Impact of a change on one affected repository.

    ``blocked_by`` and ``blocks`` only name repositories that are themselves
    affected, in affected-list order.
    """

    repository: str = Field(..., description="Affected repository name")
    impact_level: ImpactLevel = Field(..., description="Impact severity")
    required_changes: List[str] = Field(default_factory=list, description="Concrete changes required")
    estimated_effort: EffortEstimate = Field(..., description="Bounded effort estimate")
    blocked_by: List[str] = Field(default_factory=list, description="Affected repositories that must change first")
    blocks: List[str] = Field(default_factory=list, description="Affected repositories waiting on this one")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "repository": "loqa-hub",
                "impact_level": "high",
                "required_changes": ["Update gRPC client/server code", "Update tests"],
                "estimated_effort": {"min_value": 2, "max_value": 3, "unit": "days"},
                "blocked_by": ["loqa-proto", "loqa-skills"],
                "blocks": ["loqa-commander"]
            }
        }
    )

    @field_validator("impact_level")
    @classmethod
    def validate_not_none(cls, v: ImpactLevel) -> ImpactLevel:
        """Unaffected repositories never get a record."""
        if v == ImpactLevel.NONE:
            raise ValueError("Impact records cannot have impact level 'none'")
        return v

    @property
    def is_high_impact(self) -> bool:
        return self.impact_level == ImpactLevel.HIGH
