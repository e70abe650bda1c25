"""Move screening: decide whether an assignment request proceeds to cost analysis.

Rule-based by default. When LLM screening is enabled the request goes to the
configured provider; any provider error falls back to the rule-based decision.
Deterministic risk flags are always attached.
"""

import logging
import math
from typing import Any

from mobility.core.config import ScreeningConfig
from mobility.screening.llm import get_provider, parse_json_object
from mobility.screening.llm.base import SYSTEM_PROMPT, LLMProvider
from mobility.screening.schema import MoveRequest, ScreeningResult

logger = logging.getLogger(__name__)

TAX_RESIDENCY_MONTHS = 6
SOCIAL_SECURITY_REVIEW_MONTHS = 12
DEFAULT_CONFIDENCE = 50

FLAG_TAX_RESIDENCY = "Tax residency risk: assignment may trigger tax residency in host country"
FLAG_SOCIAL_SECURITY = "Social security implications: bilateral agreement review required"
FLAG_NO_TREATY = "No tax treaty: potential double taxation risk"
FLAG_SELF_INITIATED = "Self-initiated move: ensure business alignment"


def risk_flags(request: MoveRequest, treaty: bool) -> list[str]:
    """Flags raised for every request regardless of the decision."""
    flags: list[str] = []
    if request.assignment_months >= TAX_RESIDENCY_MONTHS:
        flags.append(FLAG_TAX_RESIDENCY)
    if request.assignment_months >= SOCIAL_SECURITY_REVIEW_MONTHS:
        flags.append(FLAG_SOCIAL_SECURITY)
    if not treaty:
        flags.append(FLAG_NO_TREATY)
    if request.self_initiated:
        flags.append(FLAG_SELF_INITIATED)
    return flags


def rule_based_decision(request: MoveRequest) -> ScreeningResult:
    """Apply the screening rubric without an LLM."""
    if request.short_trip and request.justification:
        return ScreeningResult(
            decision="approved",
            confidence=90,
            reasoning="Short-term business trip with a stated business justification.",
        )

    if (
        not request.self_initiated
        and request.business_case
        and request.local_search
        and request.existing_project
    ):
        return ScreeningResult(
            decision="approved",
            confidence=85,
            reasoning=(
                "Business-requested move with a documented business case, "
                "a local market search and an existing project at the destination."
            ),
        )

    missing = []
    if not request.business_case:
        missing.append("a documented business case")
    if not request.local_search:
        missing.append("a local market search")
    if not request.existing_project:
        missing.append("an existing project at the destination")
    if request.self_initiated:
        missing.append("a business-initiated request")
    if missing:
        reason = "Missing " + ", ".join(missing) + "."
    else:
        reason = "Request does not meet the rubric."
    return ScreeningResult(
        decision="rejected",
        confidence=80 if len(missing) > 1 else 70,
        reasoning=reason,
    )


def _build_user_prompt(request: MoveRequest, treaty: bool) -> str:
    return (
        "Please screen this international assignment request.\n\n"
        "ASSIGNMENT\n"
        f"Home country: {request.home_country}\n"
        f"Host country: {request.host_country}\n"
        f"Monthly salary: EUR {request.monthly_salary:,.0f}\n"
        f"Duration: {request.assignment_months} months\n"
        f"Working days/month: {request.working_days}\n"
        f"Employee: {request.employee_name or 'Not specified'}\n"
        f"Role: {request.job_title}\n"
        f"Bilateral treaty: {'yes' if treaty else 'no'}\n\n"
        "BUSINESS JUSTIFICATION\n"
        f"Documented business case: {'yes' if request.business_case else 'no'}\n"
        f"Short-term trip (< 30 days): {'yes' if request.short_trip else 'no'}\n"
        f"Move initiated by: {request.initiator}\n"
        f"Justification: {request.justification or 'none given'}\n"
        f"Local market searched: {'yes' if request.local_search else 'no'}\n"
        f"Existing project at destination: {'yes' if request.existing_project else 'no'}\n"
    )


def _normalize_confidence(value: Any) -> int:
    if value is None:
        return DEFAULT_CONFIDENCE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if not math.isfinite(number):
        return DEFAULT_CONFIDENCE
    return int(max(0.0, min(100.0, round(number))))


def _parse_screening_response(raw_text: str, source: str) -> ScreeningResult:
    """Normalize an LLM JSON reply. Raises ValueError if it is not a JSON object."""
    data = parse_json_object(raw_text)
    flags = data.get("flags")
    return ScreeningResult(
        decision="approved" if data.get("decision") == "approved" else "rejected",
        confidence=_normalize_confidence(data.get("confidence")),
        reasoning=str(data.get("reasoning") or "No reasoning provided."),
        flags=[str(f) for f in flags] if isinstance(flags, list) else [],
        source=source,
    )


def _merge_flags(fixed: list[str], extra: list[str]) -> list[str]:
    merged = list(fixed)
    for flag in extra:
        if flag not in merged:
            merged.append(flag)
    return merged


def screen_move(
    request: MoveRequest,
    config: ScreeningConfig,
    *,
    treaty: bool,
    provider: LLMProvider | None = None,
) -> ScreeningResult:
    """Screen one request.

    Args:
        request: The assignment request.
        config: Screening settings (LLM toggle, provider name, model).
        treaty: Whether a bilateral treaty covers the home/host pair.
        provider: Explicit provider; resolved from config.llm_provider otherwise.

    Returns:
        ScreeningResult with deterministic risk flags merged in.
    """
    flags = risk_flags(request, treaty)
    logger.info(
        "Screening %s -> %s, %dm, %s",
        request.home_country,
        request.host_country,
        request.assignment_months,
        request.job_title,
    )

    if config.llm_enabled:
        try:
            llm = provider or get_provider(config.llm_provider)
            raw = llm.complete(
                _build_user_prompt(request, treaty),
                model=config.llm_model,
                system=SYSTEM_PROMPT,
            )
            result = _parse_screening_response(raw, source=f"llm:{llm.provider_id}")
        except Exception:
            logger.warning(
                "LLM screening failed for %s -> %s - using rule-based decision",
                request.home_country,
                request.host_country,
                exc_info=True,
            )
        else:
            logger.info("Decision: %s (%d%%)", result.decision, result.confidence)
            return result.model_copy(update={"flags": _merge_flags(flags, result.flags)})

    result = rule_based_decision(request)
    logger.info("Decision: %s (%d%%)", result.decision, result.confidence)
    return result.model_copy(update={"flags": flags})
