"""Move screening request/result models."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

ALLOWED_INITIATORS = {"business", "self"}


class MoveRequest(BaseModel):
    """An international assignment request awaiting screening."""

    home_country: str
    host_country: str
    monthly_salary: float = Field(default=0.0, ge=0.0)
    assignment_months: int = Field(default=1, ge=1)
    job_title: str
    business_case: bool = False
    short_trip: bool = False
    initiator: str = "business"
    justification: str = ""
    local_search: bool = False
    existing_project: bool = False
    employee_name: str | None = None
    working_days: int = Field(default=22, ge=0)

    @field_validator("initiator")
    @classmethod
    def initiator_allowed(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ALLOWED_INITIATORS:
            msg = f"initiator must be one of {sorted(ALLOWED_INITIATORS)}, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("justification")
    @classmethod
    def justification_stripped(cls, v: str) -> str:
        return v.strip()

    @property
    def self_initiated(self) -> bool:
        return self.initiator == "self"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "MoveRequest":
        """Load a request from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Move request file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


class ScreeningResult(BaseModel):
    decision: Literal["approved", "rejected"]
    confidence: int = Field(ge=0, le=100)
    reasoning: str
    flags: list[str] = Field(default_factory=list)
    source: str = "rules"

    @property
    def approved(self) -> bool:
        return self.decision == "approved"
