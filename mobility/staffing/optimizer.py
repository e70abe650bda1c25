"""Optimizer: wires the filter chain, concurrent scoring and team selection.

Data flow:
  1. Filter chain -> qualified candidates
  2. Scorer (one visa lookup per candidate, joined) -> ranked candidates
  3. TeamSelection -> selected team / alternates partition
"""

import json
import logging
from collections.abc import Mapping

from mobility.core.config import ScoringConfig
from mobility.core.schemas import Candidate, ProjectDemand, ScoredCandidate, ScoringWeights
from mobility.staffing.matcher import build_filters, run_filter_chain
from mobility.staffing.providers import RouteTable, StaticVisaProvider, VisaProvider
from mobility.staffing.scorer import score_candidates
from mobility.staffing.team import TeamSelection

logger = logging.getLogger(__name__)


class OptimizationResult:
    """Outcome of a single staffing optimization run."""

    def __init__(
        self,
        demand: ProjectDemand,
        weights: ScoringWeights,
        qualified_count: int,
        ranked: list[ScoredCandidate],
        selection: TeamSelection,
    ) -> None:
        self.demand = demand
        self.weights = weights
        self.qualified_count = qualified_count
        self.ranked = ranked
        self.selection = selection


def resolve_weights(
    preset: str | None,
    weights: ScoringWeights | None,
    presets: Mapping[str, ScoringWeights],
) -> ScoringWeights:
    """Explicit weights win over a named preset; neither gives equal weights.

    Raises ValueError for an unknown preset name.
    """
    if weights is not None:
        return weights
    if preset is None:
        return ScoringWeights()
    if preset not in presets:
        msg = f"Unknown scoring preset '{preset}'. Available: {', '.join(sorted(presets))}"
        raise ValueError(msg)
    return presets[preset]


async def optimize_team(
    demand: ProjectDemand,
    candidates: list[Candidate],
    weights: ScoringWeights,
    visa_provider: VisaProvider | None = None,
    routes: RouteTable | None = None,
    config: ScoringConfig | None = None,
) -> OptimizationResult:
    """Rank candidates for a demand and pick the top ``positions`` as the team."""
    config = config or ScoringConfig()
    visa_provider = visa_provider or StaticVisaProvider(
        default_wait_days=config.default_visa_wait_days,
        default_visa_type=config.default_visa_type,
    )
    routes = routes or RouteTable(default_flight_cost=config.default_flight_cost)

    qualified = run_filter_chain(candidates, build_filters(demand.role))
    logger.info(
        "Optimizing %s x%d at %s: %d of %d candidates qualify",
        demand.role,
        demand.positions,
        demand.destination,
        len(qualified),
        len(candidates),
    )

    ranked = await score_candidates(qualified, demand, weights, visa_provider, routes, config)
    selection = TeamSelection(ranked, demand.positions)
    if selection.aggregates.headcount < demand.positions:
        logger.warning(
            "Only %d of %d positions filled for %s",
            selection.aggregates.headcount,
            demand.positions,
            demand.role,
        )

    return OptimizationResult(
        demand=demand,
        weights=weights,
        qualified_count=len(qualified),
        ranked=ranked,
        selection=selection,
    )


def _candidate_row(s: ScoredCandidate) -> dict[str, object]:
    c = s.candidate
    return {
        "id": c.id,
        "name": c.name,
        "nationality": c.nationality,
        "current_location": c.current_location,
        "role": c.role,
        "final_score": s.final_score,
        "speed_score": s.speed_score,
        "cost_score": s.cost_score,
        "compliance_score": s.compliance_score,
        "skills_match": s.skills_match.percentage,
        "visa_type": s.visa_type,
        "visa_days": s.visa_days,
        "total_cost": s.total_cost,
        "flight_cost": s.flight_cost,
        "carbon_kg": s.carbon_kg,
        "risks": list(s.risks),
    }


def export_results_json(result: OptimizationResult) -> str:
    """Export the ranking and current team partition as a JSON string."""
    selection = result.selection
    data = {
        "demand": result.demand.model_dump(),
        "weights": result.weights.model_dump(),
        "ranked": [_candidate_row(s) for s in result.ranked],
        "selected_team": [s.candidate_id for s in selection.selected_team],
        "available_alternatives": [s.candidate_id for s in selection.available_alternatives],
        "aggregates": selection.aggregates.model_dump(),
    }
    return json.dumps(data, indent=2)
