"""Multi-criteria candidate scoring: speed, cost and compliance.

Score range: 0-100 for every sub-score and the final score. Visa lookups run
concurrently (one per candidate); a slow or failing lookup falls back to the
default visa rule without failing the batch.
"""

import asyncio
import logging
import math

from mobility.core.config import ScoringConfig
from mobility.core.schemas import (
    Candidate,
    ProjectDemand,
    ScoredCandidate,
    ScoringWeights,
    SkillsMatch,
    VisaRequirement,
)
from mobility.rules.compliance import evaluate_compliance
from mobility.staffing.providers import RouteTable, VisaProvider

logger = logging.getLogger(__name__)

IN_COUNTRY_VISA_TYPE = "Already in Country"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def speed_score(wait_days: float, decay_per_day: float = 1.6) -> int:
    """100 at zero wait, linear decay, floored at 0."""
    return round_half_up(_clamp(100.0 - max(0.0, wait_days) * decay_per_day))


def cost_anchors(duration_months: int, config: ScoringConfig) -> tuple[float, float]:
    """(best, worst) total assignment cost for the duration."""
    months = max(1, duration_months)
    low = config.cost_min_monthly * months + config.cost_min_buffer
    high = config.cost_max_monthly * months + config.cost_max_buffer
    return low, high


def cost_score(total_cost: float, duration_months: int, config: ScoringConfig) -> int:
    """100 at the low anchor, 0 at the high anchor, linear in between."""
    low, high = cost_anchors(duration_months, config)
    return round_half_up(_clamp((high - total_cost) / (high - low) * 100.0))


def skills_match(required: list[str], skills: frozenset[str]) -> SkillsMatch:
    """Case-insensitive exact match of required skills against a candidate's skills."""
    if not required:
        return SkillsMatch()
    have = {s.strip().lower() for s in skills}
    matched = [s for s in required if s.strip().lower() in have]
    return SkillsMatch(
        percentage=round_half_up(len(matched) / len(required) * 100.0),
        matched=matched,
        total=len(required),
    )


def weighted_score(
    speed: float,
    cost: float,
    compliance: float,
    weights: ScoringWeights,
    skills: SkillsMatch | None = None,
    skill_bonus_max: float = 15.0,
) -> int:
    """Weighted blend of sub-scores plus an optional skill bonus, clamped and rounded."""
    w_cost, w_speed, w_compliance = weights.normalized()
    score = cost * w_cost + speed * w_speed + compliance * w_compliance
    if skills is not None and skills.total > 0:
        score += skills.percentage / 100.0 * skill_bonus_max
    return round_half_up(_clamp(score))


async def lookup_visa(
    provider: VisaProvider,
    nationality: str,
    destination: str,
    config: ScoringConfig,
) -> VisaRequirement:
    """Visa lookup with a timeout; any failure yields the default rule."""
    try:
        return await asyncio.wait_for(
            provider.lookup(nationality, destination), timeout=config.lookup_timeout_s,
        )
    except TimeoutError:
        logger.warning(
            "Visa lookup timed out for %s -> %s - using default", nationality, destination,
        )
    except Exception:
        logger.warning(
            "Visa lookup failed for %s -> %s - using default",
            nationality,
            destination,
            exc_info=True,
        )
    return VisaRequirement(
        wait_days=config.default_visa_wait_days,
        visa_type=config.default_visa_type,
        is_default=True,
    )


async def score_candidate(
    candidate: Candidate,
    demand: ProjectDemand,
    weights: ScoringWeights,
    visa_provider: VisaProvider,
    routes: RouteTable,
    config: ScoringConfig,
) -> ScoredCandidate:
    """Score one candidate against a demand.

    Args:
        candidate: The worker being considered.
        demand: Destination, role, duration and required skills.
        weights: Relative importance of cost, speed and compliance.
        visa_provider: Async visa requirement source.
        routes: Flight cost and carbon lookup.
        config: Scoring constants.

    Returns:
        ScoredCandidate with sub-scores, risks and a final score 0-100.
    """
    destination = demand.destination
    if candidate.current_location == destination:
        visa = VisaRequirement(wait_days=0, visa_type=IN_COUNTRY_VISA_TYPE)
        speed = 100
    else:
        visa = await lookup_visa(visa_provider, candidate.nationality, destination, config)
        speed = speed_score(visa.wait_days, config.speed_decay_per_day)

    flight = routes.flight_cost(candidate.current_location, destination)
    total_cost = candidate.base_salary_eur * demand.duration_months + flight
    cost = cost_score(total_cost, demand.duration_months, config)

    compliance = evaluate_compliance(destination, visa.visa_type, demand.duration_months)
    skills = skills_match(demand.required_skills, candidate.skills)
    final = weighted_score(
        speed, cost, compliance.score, weights, skills, config.skill_bonus_max,
    )

    return ScoredCandidate(
        candidate=candidate,
        speed_score=speed,
        cost_score=cost,
        compliance_score=compliance.score,
        final_score=final,
        risks=compliance.risks,
        skills_match=skills,
        visa_days=visa.wait_days,
        visa_type=visa.visa_type,
        total_cost=total_cost,
        flight_cost=flight,
        carbon_kg=routes.carbon_kg(candidate.current_location, destination),
    )


async def score_candidates(
    candidates: list[Candidate],
    demand: ProjectDemand,
    weights: ScoringWeights,
    visa_provider: VisaProvider,
    routes: RouteTable,
    config: ScoringConfig,
) -> list[ScoredCandidate]:
    """Score candidates concurrently and rank by final score descending.

    The sort is stable, so tied candidates keep their input order.
    """
    scored = await asyncio.gather(
        *(
            score_candidate(c, demand, weights, visa_provider, routes, config)
            for c in candidates
        ),
    )
    ranked = sorted(scored, key=lambda s: s.final_score, reverse=True)
    logger.info("Scored %d candidates for %s (%s)", len(ranked), demand.role, demand.destination)
    return ranked
