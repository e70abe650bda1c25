"""Configuration models and YAML loader for the deployment engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mobility.core.schemas import ScoringWeights


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/mobility.db"


class ScoringConfig(BaseModel):
    """Heuristic constants for candidate scoring.

    Cost anchors scale with duration: min = cost_min_monthly * months +
    cost_min_buffer, max = cost_max_monthly * months + cost_max_buffer.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    speed_decay_per_day: float = Field(default=1.6, gt=0.0)
    cost_min_monthly: float = Field(default=4000.0, ge=0.0)
    cost_max_monthly: float = Field(default=12000.0, ge=0.0)
    cost_min_buffer: float = 500.0
    cost_max_buffer: float = 2000.0
    default_flight_cost: float = Field(default=1000.0, ge=0.0)
    skill_bonus_max: float = Field(default=15.0, ge=0.0, le=100.0)
    default_visa_wait_days: int = Field(default=30, ge=0)
    default_visa_type: str = "Standard Application (API Default)"
    lookup_timeout_s: float = Field(default=5.0, gt=0.0)

    @model_validator(mode="after")
    def max_anchor_above_min(self) -> "ScoringConfig":
        # high - low > 0 for every months >= 1
        if self.cost_max_monthly <= self.cost_min_monthly:
            msg = "cost_max_monthly must be greater than cost_min_monthly"
            raise ValueError(msg)
        if self.cost_max_buffer < self.cost_min_buffer:
            msg = "cost_max_buffer must not be less than cost_min_buffer"
            raise ValueError(msg)
        return self


class AdminFeesConfig(BaseModel):
    """Administrative fees. Recurring amounts are annual and prorate by months/12."""

    monthly_recurring: float = Field(default=200.0, ge=0.0)
    annual_recurring: float = Field(default=300.0, ge=0.0)
    service_fee: float = Field(default=1000.0, ge=0.0)
    one_time_fees: dict[str, float] = Field(
        default_factory=lambda: {
            "work_permit": 1000.0,
            "visa": 200.0,
            "tax_social_security_registration": 500.0,
        },
    )

    @field_validator("one_time_fees")
    @classmethod
    def fees_non_negative(cls, v: dict[str, float]) -> dict[str, float]:
        for name, amount in v.items():
            if amount < 0:
                msg = f"one-time fee '{name}' must not be negative"
                raise ValueError(msg)
        return v


class ExchangeConfig(BaseModel):
    """Exchange-rate cache policy."""

    refresh_hours: float = Field(default=24.0, gt=0.0)
    source: str = "Static fallback rates"


class ScreeningConfig(BaseModel):
    """Move screening: rule-based by default, LLM-assisted when enabled."""

    llm_enabled: bool = False
    llm_provider: str = "openai"
    llm_model: str | None = None


def _default_presets() -> dict[str, ScoringWeights]:
    return {
        "cost": ScoringWeights(cost=70, speed=15, compliance=15),
        "speed": ScoringWeights(cost=15, speed=70, compliance=15),
        "compliance": ScoringWeights(cost=15, speed=15, compliance=70),
    }


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    admin_fees: AdminFeesConfig = Field(default_factory=AdminFeesConfig)
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    screening: ScreeningConfig = Field(default_factory=ScreeningConfig)
    presets: dict[str, ScoringWeights] = Field(default_factory=_default_presets)
    jurisdictions_path: str | None = None

    @field_validator("presets")
    @classmethod
    def at_least_one_preset(cls, v: dict[str, ScoringWeights]) -> dict[str, ScoringWeights]:
        if not v:
            msg = "at least one scoring preset must be configured"
            raise ValueError(msg)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
