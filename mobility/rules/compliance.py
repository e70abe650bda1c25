"""Destination-specific immigration compliance rules.

Rules are grouped by destination group and evaluated in order. Every
triggered rule caps the score and appends its flag; the final score is the
lowest cap triggered (100 when nothing fires). The general rule only runs
when no destination rule fired.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from mobility.core.schemas import CALENDAR_DAYS_PER_MONTH, ComplianceAssessment

logger = logging.getLogger(__name__)

US_DESTINATIONS = frozenset({"USA", "NewEngland", "California", "Texas", "Florida", "NewYork"})
UK_DESTINATIONS = frozenset({"UK", "London", "Manchester", "Edinburgh", "Birmingham"})

ESTA_MAX_DAYS = 90
SINGAPORE_SHORT_TERM_DAYS = 30
GENERAL_VISITOR_MAX_DAYS = 30


@dataclass(frozen=True)
class ComplianceContext:
    destination: str
    visa_type: str
    duration_months: int

    @property
    def days(self) -> int:
        return self.duration_months * CALENDAR_DAYS_PER_MONTH

    def visa_mentions(self, *markers: str) -> bool:
        return any(marker in self.visa_type for marker in markers)


@dataclass(frozen=True)
class ComplianceRule:
    name: str
    applies: Callable[[ComplianceContext], bool]
    score_cap: float
    flag: str


def _is_waiver(ctx: ComplianceContext) -> bool:
    return ctx.visa_mentions("ESTA", "VWP", "Waiver")


def _is_visitor(ctx: ComplianceContext) -> bool:
    return ctx.visa_mentions("Tourist", "Visitor")


def _singapore_without_pass(ctx: ComplianceContext) -> bool:
    return not ctx.visa_mentions("Employment Pass")


US_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        name="esta_over_90_days",
        applies=lambda ctx: _is_waiver(ctx) and ctx.days > ESTA_MAX_DAYS,
        score_cap=20,
        flag="CRITICAL: ESTA/VWP limited to 90 days",
    ),
    ComplianceRule(
        name="esta_paid_work",
        applies=lambda ctx: _is_waiver(ctx) and ctx.days <= ESTA_MAX_DAYS,
        score_cap=40,
        flag="WARNING: ESTA/VWP cannot be used for paid work",
    ),
    ComplianceRule(
        name="b1_b2_employment",
        applies=lambda ctx: ctx.visa_mentions("B1", "B2"),
        score_cap=30,
        flag="WARNING: B1/B2 visa prohibits paid employment",
    ),
)

SINGAPORE_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        name="tourist_visa_work",
        applies=lambda ctx: _singapore_without_pass(ctx) and _is_visitor(ctx),
        score_cap=20,
        flag="CRITICAL: Tourist visa cannot work - Employment Pass required",
    ),
    ComplianceRule(
        name="employment_pass_over_30_days",
        applies=lambda ctx: (
            _singapore_without_pass(ctx)
            and not _is_visitor(ctx)
            and ctx.days > SINGAPORE_SHORT_TERM_DAYS
        ),
        score_cap=40,
        flag="WARNING: Employment Pass likely required for work >30 days",
    ),
    ComplianceRule(
        name="short_term_work_permit",
        applies=lambda ctx: (
            _singapore_without_pass(ctx)
            and not _is_visitor(ctx)
            and ctx.days <= SINGAPORE_SHORT_TERM_DAYS
        ),
        score_cap=60,
        flag="NOTE: Short-term work may require Work Permit",
    ),
)

BRAZIL_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        name="waiver_requires_vitem_v",
        applies=lambda ctx: ctx.visa_mentions("Tourist", "Waiver") and ctx.duration_months > 1,
        score_cap=50,
        flag="Risk: Working over 1 month on Waiver requires VITEM V",
    ),
)

GENERAL_RULES: tuple[ComplianceRule, ...] = (
    ComplianceRule(
        name="visitor_long_term_work",
        applies=lambda ctx: _is_visitor(ctx) and ctx.days > GENERAL_VISITOR_MAX_DAYS,
        score_cap=60,
        flag="NOTE: Long-term work may require work authorisation",
    ),
)

# Keyed by destination group. UK has no destination-specific rules yet.
RULES_BY_GROUP: dict[str, tuple[ComplianceRule, ...]] = {
    "US": US_RULES,
    "UK": (),
    "Singapore": SINGAPORE_RULES,
    "Brazil": BRAZIL_RULES,
}


def destination_group(destination: str) -> str:
    """Map a destination (country, state or city) to its rule group."""
    if destination in US_DESTINATIONS:
        return "US"
    if destination in UK_DESTINATIONS:
        return "UK"
    return destination


def rules_for(destination: str) -> tuple[ComplianceRule, ...]:
    """Destination-specific rules in evaluation order (empty when none)."""
    return RULES_BY_GROUP.get(destination_group(destination), ())


def _apply(
    rules: tuple[ComplianceRule, ...],
    ctx: ComplianceContext,
    score: float,
    risks: list[str],
) -> float:
    for rule in rules:
        if rule.applies(ctx):
            logger.debug("Compliance rule '%s' fired for %s", rule.name, ctx.destination)
            score = min(score, rule.score_cap)
            risks.append(rule.flag)
    return score


def evaluate_compliance(
    destination: str,
    visa_type: str,
    duration_months: int,
) -> ComplianceAssessment:
    """Score the immigration risk of working at destination on visa_type."""
    ctx = ComplianceContext(
        destination=destination,
        visa_type=visa_type or "",
        duration_months=max(1, duration_months),
    )
    risks: list[str] = []
    score = _apply(rules_for(destination), ctx, 100.0, risks)
    if not risks:
        score = _apply(GENERAL_RULES, ctx, score, risks)
    return ComplianceAssessment(score=score, risks=risks)
