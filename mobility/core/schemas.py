"""Core data models for the deployment cost and staffing engine.

Inputs (Assignment, ProjectDemand, Candidate) coerce invalid numbers to safe
defaults instead of failing validation. Jurisdiction rule data is validated
strictly: a malformed bracket set is a configuration error.
"""

import logging
import math
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

CALENDAR_DAYS_PER_MONTH = 30


def _coerce_amount(value: Any, field: str) -> float:
    """Return a finite, non-negative float; anything else becomes 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r - treating as 0", field, value)
        return 0.0
    if not math.isfinite(number) or number < 0:
        logger.warning("Invalid %s %r - treating as 0", field, value)
        return 0.0
    return number


def _coerce_count(value: Any, field: str, minimum: int) -> int:
    """Return an integer >= minimum; non-numeric input becomes minimum."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r - using %d", field, value, minimum)
        return minimum
    if not math.isfinite(number) or number < minimum:
        logger.warning("Invalid %s %r - using %d", field, value, minimum)
        return minimum
    return int(number)


# ---------------------------------------------------------------------------
# Jurisdiction rule data
# ---------------------------------------------------------------------------


class TaxBracket(BaseModel):
    """One band of a progressive tax schedule. ``max=None`` is unbounded."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0.0)
    max: float | None = None
    rate: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def max_above_min(self) -> "TaxBracket":
        if self.max is not None and self.max <= self.min:
            msg = f"bracket max ({self.max}) must be greater than min ({self.min})"
            raise ValueError(msg)
        return self


def _validate_bracket_set(brackets: list[TaxBracket], label: str) -> None:
    if not brackets:
        msg = f"{label} must not be empty when provided"
        raise ValueError(msg)
    open_ended = [b for b in brackets if b.max is None]
    if len(open_ended) != 1 or brackets[-1].max is not None:
        msg = f"{label} must end with exactly one open-ended bracket"
        raise ValueError(msg)
    for lower, upper in zip(brackets, brackets[1:]):
        if upper.min < lower.min:
            msg = f"{label} must be sorted ascending by min"
            raise ValueError(msg)
        if lower.max is not None and lower.max > upper.min:
            msg = f"{label} has overlapping brackets at {upper.min}"
            raise ValueError(msg)
        if upper.rate < lower.rate:
            msg = f"{label} rates must not decrease as income rises"
            raise ValueError(msg)


class JurisdictionConfig(BaseModel):
    """Static tax, social-security and allowance data for one host country."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str = ""
    currency: str = "EUR"
    currency_symbol: str = ""
    exchange_rate: float = Field(default=1.0, gt=0.0)

    resident_brackets: list[TaxBracket] | None = None
    non_resident_brackets: list[TaxBracket] | None = None
    non_resident_uses_resident_brackets: bool = False
    non_resident_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    flat_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    deduction: float = Field(default=0.0, ge=0.0)
    tax_source: str = ""

    employer_ss_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    employee_ss_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    employee_ss_monthly_cap: float | None = Field(default=None, ge=0.0)
    combined_ss_rate: float | None = Field(default=None, ge=0.0, le=1.0)

    treaty_exists: bool = False
    treaty_partners: list[str] = Field(default_factory=list)
    per_diem_rate: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def bracket_sets_well_formed(self) -> "JurisdictionConfig":
        if self.resident_brackets is not None:
            _validate_bracket_set(self.resident_brackets, f"{self.code} resident_brackets")
        if self.non_resident_brackets is not None:
            _validate_bracket_set(
                self.non_resident_brackets, f"{self.code} non_resident_brackets",
            )
        return self

    @property
    def display_name(self) -> str:
        return self.name or self.code

    def treaty_with(self, home_country: str) -> bool:
        """Return True if a social-security treaty covers workers from home_country."""
        if self.treaty_partners:
            return home_country in self.treaty_partners
        return self.treaty_exists


# ---------------------------------------------------------------------------
# Cost path inputs
# ---------------------------------------------------------------------------


class Assignment(BaseModel):
    """A single worker relocation from a home to a host jurisdiction."""

    model_config = ConfigDict(frozen=True)

    home_country: str
    host_country: str
    monthly_salary: float = 0.0
    duration_months: int = 1
    working_days_per_month: int = 22
    daily_allowance: float | None = None
    city: str | None = None

    @field_validator("monthly_salary", mode="before")
    @classmethod
    def salary_non_negative(cls, v: Any) -> float:
        return _coerce_amount(v, "monthly_salary")

    @field_validator("duration_months", mode="before")
    @classmethod
    def duration_at_least_one(cls, v: Any) -> int:
        return _coerce_count(v, "duration_months", minimum=1)

    @field_validator("working_days_per_month", mode="before")
    @classmethod
    def working_days_non_negative(cls, v: Any) -> int:
        return _coerce_count(v, "working_days_per_month", minimum=0)

    @field_validator("daily_allowance", mode="before")
    @classmethod
    def allowance_non_negative(cls, v: Any) -> float | None:
        if v is None:
            return None
        return _coerce_amount(v, "daily_allowance")

    @property
    def total_working_days(self) -> int:
        return self.working_days_per_month * self.duration_months

    @property
    def total_calendar_days(self) -> int:
        return self.duration_months * CALENDAR_DAYS_PER_MONTH


class SocialSecuritySettings(BaseModel):
    """User preference: include host social security with/without a treaty."""

    include_when_treaty: bool = False
    include_when_no_treaty: bool = True


# ---------------------------------------------------------------------------
# Cost path results
# ---------------------------------------------------------------------------


class BracketBreakdown(BaseModel):
    """Tax contribution of a single bracket actually touched by the income."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float | None
    rate: float
    taxable_amount: float
    tax_amount: float


class TaxResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_resident: bool
    method: str
    currency: str
    exchange_rate: float
    taxable_base_eur: float
    taxable_base_local: float
    tax_local: float
    tax_eur: float
    effective_rate: float
    brackets: list[BracketBreakdown] = Field(default_factory=list)
    fallback_reason: str | None = None


class SocialSecurityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    included: bool
    employer: float = 0.0
    employee: float = 0.0
    total: float = 0.0
    employee_capped: bool = False
    method: str = ""
    exclusion_reason: str | None = None


class AdminFeeBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    recurring: float
    one_time: float
    total: float
    items: dict[str, float] = Field(default_factory=dict)


class DisplayAmounts(BaseModel):
    """EUR figures re-expressed in a display currency at an explicit rate."""

    model_config = ConfigDict(frozen=True)

    currency: str
    rate: float
    gross_salary: float
    per_diem: float
    admin_fees: float
    tax: float
    social_security: float
    additional_cost: float
    grand_total: float
    cost_per_day: float


class CostResult(BaseModel):
    """Full cost picture of one assignment. All amounts in EUR unless noted."""

    model_config = ConfigDict(frozen=True)

    home_country: str
    host_country: str
    host_name: str
    duration_months: int
    total_working_days: int
    total_calendar_days: int
    is_resident: bool

    gross_salary: float
    daily_allowance: float
    per_diem_source: str
    per_diem: float
    admin_fees: AdminFeeBreakdown
    tax: TaxResult
    social_security: SocialSecurityResult
    treaty: bool

    additional_cost: float
    grand_total: float
    cost_per_day: float
    tax_per_day_eur: float
    tax_per_day_local: float

    exchange_rate: float
    currency: str
    rules_version: str = ""
    display: DisplayAmounts | None = None


# ---------------------------------------------------------------------------
# Staffing path
# ---------------------------------------------------------------------------


class Candidate(BaseModel):
    """A worker who could be deployed. Immutable for an optimization run."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    nationality: str
    current_location: str
    role: str
    base_salary_eur: float = 0.0
    skills: frozenset[str] = frozenset()
    available: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> str:
        return str(v)

    @field_validator("base_salary_eur", mode="before")
    @classmethod
    def salary_non_negative(cls, v: Any) -> float:
        return _coerce_amount(v, "base_salary_eur")

    @field_serializer("skills")
    def skills_sorted(self, v: frozenset[str]) -> list[str]:
        return sorted(v)


class ProjectDemand(BaseModel):
    """Staffing requirement at a destination."""

    model_config = ConfigDict(frozen=True)

    destination: str
    role: str
    duration_months: int = 1
    positions: int = 1
    required_skills: list[str] = Field(default_factory=list)

    @field_validator("duration_months", mode="before")
    @classmethod
    def duration_at_least_one(cls, v: Any) -> int:
        return _coerce_count(v, "duration_months", minimum=1)

    @field_validator("positions", mode="before")
    @classmethod
    def positions_non_negative(cls, v: Any) -> int:
        return _coerce_count(v, "positions", minimum=0)

    @field_validator("required_skills")
    @classmethod
    def strip_skills(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s.strip()]


class VisaRule(BaseModel):
    """Known visa requirement for an (origin, destination) pair."""

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    wait_days: int = Field(default=30, ge=0)
    visa_type: str = "Standard Application (API Default)"
    notes: str = ""


class VisaRequirement(BaseModel):
    """Result of a visa lookup; ``is_default`` marks a fallback value."""

    model_config = ConfigDict(frozen=True)

    wait_days: int = Field(ge=0)
    visa_type: str
    is_default: bool = False


class ScoringWeights(BaseModel):
    """Relative importance of cost, speed and compliance. Need not sum to 1."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    cost: float = Field(default=1.0, ge=0.0)
    speed: float = Field(default=1.0, ge=0.0)
    compliance: float = Field(default=1.0, ge=0.0)

    def normalized(self) -> tuple[float, float, float]:
        """Return (cost, speed, compliance) scaled to sum to 1."""
        total = self.cost + self.speed + self.compliance
        if total <= 0:
            third = 1.0 / 3.0
            return (third, third, third)
        return (self.cost / total, self.speed / total, self.compliance / total)


class ComplianceAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=100.0)
    risks: list[str] = Field(default_factory=list)


class SkillsMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    percentage: int = Field(default=0, ge=0, le=100)
    matched: list[str] = Field(default_factory=list)
    total: int = 0


class ScoredCandidate(BaseModel):
    """A candidate with its sub-scores and final weighted score for one demand."""

    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    speed_score: float = Field(ge=0.0, le=100.0)
    cost_score: float = Field(ge=0.0, le=100.0)
    compliance_score: float = Field(ge=0.0, le=100.0)
    final_score: float = Field(ge=0.0, le=100.0)
    risks: list[str] = Field(default_factory=list)
    skills_match: SkillsMatch = Field(default_factory=SkillsMatch)
    visa_days: int = 0
    visa_type: str = ""
    total_cost: float = 0.0
    flight_cost: float = 0.0
    carbon_kg: float = 0.0

    @property
    def candidate_id(self) -> str:
        return self.candidate.id


class TeamAggregates(BaseModel):
    model_config = ConfigDict(frozen=True)

    headcount: int = 0
    total_cost: float = 0.0
    max_visa_days: int = 0
    mean_compliance: float = 0.0
    mean_overall: float = 0.0


class TeamSnapshot(BaseModel):
    """Serializable view of the current team/alternates partition."""

    model_config = ConfigDict(frozen=True)

    selected_team: list[ScoredCandidate]
    available_alternatives: list[ScoredCandidate]
    aggregates: TeamAggregates
