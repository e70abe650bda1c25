"""Full deployment cost of an assignment, in EUR.

Pure transform: assignment + rule data in, CostResult out. Per diem and
admin fees are tax-exempt, so tax is computed on the gross salary only.
"""

import logging

from mobility.core.config import AdminFeesConfig
from mobility.core.schemas import (
    AdminFeeBreakdown,
    Assignment,
    CostResult,
    DisplayAmounts,
    SocialSecuritySettings,
)
from mobility.costing.social_security import calculate_social_security
from mobility.costing.tax import calculate_tax
from mobility.rules.jurisdictions import JurisdictionTable
from mobility.rules.per_diem import PerDiemTable

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


def calculate_admin_fees(duration_months: int, fees: AdminFeesConfig) -> AdminFeeBreakdown:
    """Recurring fees prorate by months/12; one-time fees are charged in full."""
    factor = max(1, duration_months) / MONTHS_PER_YEAR
    items = {
        "monthly_recurring": fees.monthly_recurring * factor,
        "annual_recurring": fees.annual_recurring * factor,
        "service_fee": fees.service_fee * factor,
    }
    recurring = sum(items.values())
    one_time = sum(fees.one_time_fees.values())
    items.update(fees.one_time_fees)
    return AdminFeeBreakdown(
        recurring=recurring, one_time=one_time, total=recurring + one_time, items=items,
    )


def _display(result_eur: dict[str, float], currency: str, rate: float | None) -> DisplayAmounts:
    if rate is None or rate <= 0:
        logger.warning("Invalid display rate %r for %s - using 1.0", rate, currency)
        rate = 1.0
    return DisplayAmounts(
        currency=currency,
        rate=rate,
        **{name: amount * rate for name, amount in result_eur.items()},
    )


def calculate_deployment_cost(
    assignment: Assignment,
    table: JurisdictionTable,
    *,
    ss_settings: SocialSecuritySettings | None = None,
    admin_fees: AdminFeesConfig | None = None,
    per_diem_table: PerDiemTable | None = None,
    exchange_rate: float | None = None,
    display_currency: str | None = None,
    display_rate: float | None = None,
) -> CostResult:
    """Compute the cost breakdown of one assignment.

    Args:
        assignment: Home/host pair, salary and duration.
        table: Jurisdiction rules. An unknown host yields zero tax and zero
            social security, each with a reason.
        ss_settings: Social security inclusion preference (defaults apply).
        admin_fees: Fee schedule (defaults apply).
        per_diem_table: Used when the assignment has no explicit allowance.
        exchange_rate: Live EUR->host rate; the host's static rate otherwise.
        display_currency: Optional currency to re-express EUR totals in.
        display_rate: Rate for display_currency (units per 1 EUR).

    Returns:
        CostResult with all amounts in EUR.
    """
    ss_settings = ss_settings or SocialSecuritySettings()
    admin_fees = admin_fees or AdminFeesConfig()
    per_diem_table = per_diem_table or PerDiemTable(table)

    host = table.get(assignment.host_country)
    if host is None:
        logger.warning("Unknown host jurisdiction '%s'", assignment.host_country)

    months = assignment.duration_months
    gross_salary = assignment.monthly_salary * months

    if assignment.daily_allowance is not None:
        allowance, allowance_source = assignment.daily_allowance, "Provided"
    else:
        resolved = per_diem_table.daily_rate(
            assignment.home_country, assignment.host_country, assignment.city,
        )
        allowance, allowance_source = resolved.rate, resolved.source
    per_diem = allowance * assignment.total_working_days

    fees = calculate_admin_fees(months, admin_fees)
    tax = calculate_tax(gross_salary, host, months, exchange_rate=exchange_rate)
    treaty = host.treaty_with(assignment.home_country) if host is not None else False
    ss = calculate_social_security(gross_salary, host, ss_settings, treaty, months)

    additional_cost = per_diem + fees.total + tax.tax_eur + ss.total
    grand_total = gross_salary + additional_cost
    days = assignment.total_calendar_days

    display = None
    if display_currency:
        display = _display(
            {
                "gross_salary": gross_salary,
                "per_diem": per_diem,
                "admin_fees": fees.total,
                "tax": tax.tax_eur,
                "social_security": ss.total,
                "additional_cost": additional_cost,
                "grand_total": grand_total,
                "cost_per_day": additional_cost / days,
            },
            display_currency,
            display_rate,
        )

    logger.info(
        "%s -> %s (%d months): additional %.2f EUR, total %.2f EUR",
        assignment.home_country,
        assignment.host_country,
        months,
        additional_cost,
        grand_total,
    )

    return CostResult(
        home_country=assignment.home_country,
        host_country=assignment.host_country,
        host_name=host.display_name if host is not None else assignment.host_country,
        duration_months=months,
        total_working_days=assignment.total_working_days,
        total_calendar_days=days,
        is_resident=tax.is_resident,
        gross_salary=gross_salary,
        daily_allowance=allowance,
        per_diem_source=allowance_source,
        per_diem=per_diem,
        admin_fees=fees,
        tax=tax,
        social_security=ss,
        treaty=treaty,
        additional_cost=additional_cost,
        grand_total=grand_total,
        cost_per_day=additional_cost / days,
        tax_per_day_eur=tax.tax_eur / days,
        tax_per_day_local=tax.tax_local / days,
        exchange_rate=tax.exchange_rate,
        currency=tax.currency,
        rules_version=table.version,
        display=display,
    )
