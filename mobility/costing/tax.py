"""Host-country income tax on the assignment salary.

Residency follows the 183-day rule on calendar days (months x 30). The tax
method is picked by walking TAX_RESOLVERS in order; the first resolver that
applies wins:

  1. resident progressive brackets          (residents only)
  2. non-resident progressive brackets      (non-residents only)
  3. resident brackets reused for non-residents
  4. non-resident flat rate                 (non-residents only)
  5. generic flat rate with deduction       (always applies)
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from mobility.core.schemas import (
    CALENDAR_DAYS_PER_MONTH,
    BracketBreakdown,
    JurisdictionConfig,
    TaxBracket,
    TaxResult,
)

logger = logging.getLogger(__name__)

RESIDENCY_THRESHOLD_DAYS = 183
NO_JURISDICTION_METHOD = "No jurisdiction data (flat 0%)"


@dataclass(frozen=True)
class TaxMethod:
    """How tax is computed. Either ``brackets`` or ``flat_rate`` is used."""

    label: str
    brackets: list[TaxBracket] | None = None
    flat_rate: float = 0.0
    deduction: float = 0.0


TaxResolver = Callable[[JurisdictionConfig, bool], TaxMethod | None]


def is_tax_resident(duration_months: int) -> bool:
    """True when the stay reaches the 183-day threshold."""
    return duration_months * CALENDAR_DAYS_PER_MONTH >= RESIDENCY_THRESHOLD_DAYS


def _resident_brackets(config: JurisdictionConfig, is_resident: bool) -> TaxMethod | None:
    if is_resident and config.resident_brackets:
        return TaxMethod(label="Resident progressive brackets", brackets=config.resident_brackets)
    return None


def _non_resident_brackets(config: JurisdictionConfig, is_resident: bool) -> TaxMethod | None:
    if not is_resident and config.non_resident_brackets:
        return TaxMethod(
            label="Non-resident progressive brackets", brackets=config.non_resident_brackets,
        )
    return None


def _resident_brackets_for_non_resident(
    config: JurisdictionConfig, is_resident: bool,
) -> TaxMethod | None:
    if not is_resident and config.non_resident_uses_resident_brackets and config.resident_brackets:
        return TaxMethod(
            label="Resident brackets applied to non-resident",
            brackets=config.resident_brackets,
        )
    return None


def _non_resident_flat(config: JurisdictionConfig, is_resident: bool) -> TaxMethod | None:
    if not is_resident and config.non_resident_rate is not None:
        return TaxMethod(label="Non-resident flat rate", flat_rate=config.non_resident_rate)
    return None


def _flat_with_deduction(config: JurisdictionConfig) -> TaxMethod:
    return TaxMethod(
        label="Flat rate with standard deduction",
        flat_rate=config.flat_rate,
        deduction=config.deduction,
    )


def _generic_flat(config: JurisdictionConfig, is_resident: bool) -> TaxMethod | None:
    return _flat_with_deduction(config)


TAX_RESOLVERS: tuple[TaxResolver, ...] = (
    _resident_brackets,
    _non_resident_brackets,
    _resident_brackets_for_non_resident,
    _non_resident_flat,
    _generic_flat,
)


def resolve_tax_method(config: JurisdictionConfig, is_resident: bool) -> TaxMethod:
    """Return the first applicable tax method for this jurisdiction and status."""
    for resolver in TAX_RESOLVERS:
        method = resolver(config, is_resident)
        if method is not None:
            logger.debug("%s: using '%s'", config.code, method.label)
            return method
    return _flat_with_deduction(config)


def progressive_tax(
    income: float,
    brackets: list[TaxBracket],
) -> tuple[float, list[BracketBreakdown]]:
    """Sum tax over each bracket's slice of income. Only touched brackets are reported."""
    total = 0.0
    breakdown: list[BracketBreakdown] = []
    for bracket in brackets:
        upper = bracket.max if bracket.max is not None else math.inf
        taxable = max(0.0, min(income, upper) - bracket.min)
        if taxable <= 0:
            continue
        tax = taxable * bracket.rate
        total += tax
        breakdown.append(
            BracketBreakdown(
                min=bracket.min,
                max=bracket.max,
                rate=bracket.rate,
                taxable_amount=taxable,
                tax_amount=tax,
            ),
        )
    return total, breakdown


def _flat_tax(income: float, rate: float, deduction: float) -> tuple[float, list[BracketBreakdown]]:
    taxable = max(0.0, income - deduction)
    tax = taxable * rate
    row = BracketBreakdown(
        min=deduction or 0.0, max=None, rate=rate, taxable_amount=taxable, tax_amount=tax,
    )
    return tax, [row]


def _safe_base(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid taxable base %r - treating as 0", value)
        return 0.0
    if not math.isfinite(number) or number < 0:
        logger.warning("Invalid taxable base %r - treating as 0", value)
        return 0.0
    return number


def _safe_rate(rate: float | None, config: JurisdictionConfig | None) -> float:
    if rate is None and config is not None:
        rate = config.exchange_rate
    if rate is None or not math.isfinite(rate) or rate <= 0:
        logger.warning("Invalid exchange rate %r - using 1.0", rate)
        return 1.0
    return rate


def calculate_tax(
    taxable_base_eur: Any,
    jurisdiction: JurisdictionConfig | None,
    duration_months: int,
    exchange_rate: float | None = None,
) -> TaxResult:
    """Compute host-country income tax on a EUR base.

    The base is converted to local currency with ``exchange_rate`` (or the
    jurisdiction's static rate), taxed, and the tax converted back to EUR
    with the same rate.
    """
    base_eur = _safe_base(taxable_base_eur)
    is_resident = is_tax_resident(duration_months)
    rate = _safe_rate(exchange_rate, jurisdiction)

    if jurisdiction is None:
        logger.warning("No jurisdiction data - tax set to 0")
        return TaxResult(
            is_resident=is_resident,
            method=NO_JURISDICTION_METHOD,
            currency="EUR",
            exchange_rate=rate,
            taxable_base_eur=base_eur,
            taxable_base_local=base_eur * rate,
            tax_local=0.0,
            tax_eur=0.0,
            effective_rate=0.0,
            fallback_reason="Host jurisdiction is not configured",
        )

    base_local = base_eur * rate
    method = resolve_tax_method(jurisdiction, is_resident)
    if method.brackets is not None:
        tax_local, breakdown = progressive_tax(base_local, method.brackets)
    else:
        tax_local, breakdown = _flat_tax(base_local, method.flat_rate, method.deduction)

    return TaxResult(
        is_resident=is_resident,
        method=method.label,
        currency=jurisdiction.currency,
        exchange_rate=rate,
        taxable_base_eur=base_eur,
        taxable_base_local=base_local,
        tax_local=tax_local,
        tax_eur=tax_local / rate,
        effective_rate=tax_local / base_local if base_local > 0 else 0.0,
        brackets=breakdown,
    )
