"""Host-country social security contributions for an assignment."""

import logging

from mobility.core.schemas import (
    JurisdictionConfig,
    SocialSecurityResult,
    SocialSecuritySettings,
)

logger = logging.getLogger(__name__)

# Display split of a legacy combined rate.
LEGACY_EMPLOYER_SHARE = 0.7
LEGACY_EMPLOYEE_SHARE = 0.3


def exclusion_reason(treaty: bool, settings: SocialSecuritySettings) -> str | None:
    """Why host social security is left out, or None when it is included."""
    if treaty and not settings.include_when_treaty:
        return "Treaty in place - home-country coverage continues (A1/CoC)"
    if not treaty and not settings.include_when_no_treaty:
        return "Excluded by settings when no treaty applies"
    return None


def _excluded(reason: str) -> SocialSecurityResult:
    return SocialSecurityResult(
        included=False, employer=0.0, employee=0.0, total=0.0, exclusion_reason=reason,
    )


def calculate_social_security(
    gross_salary: float,
    jurisdiction: JurisdictionConfig | None,
    settings: SocialSecuritySettings,
    treaty: bool,
    duration_months: int,
) -> SocialSecurityResult:
    """Employer and employee contributions on the assignment's gross salary.

    The employee share is capped per month when the jurisdiction defines a
    cap (cap is in EUR). A jurisdiction with only a combined legacy rate is
    split 70/30 between employer and employee.
    """
    if jurisdiction is None:
        logger.warning("No jurisdiction data - social security set to 0")
        return _excluded("No social security data for host jurisdiction")

    reason = exclusion_reason(treaty, settings)
    if reason is not None:
        logger.debug("%s social security excluded: %s", jurisdiction.code, reason)
        return _excluded(reason)

    gross = max(0.0, gross_salary)
    months = max(1, duration_months)

    if jurisdiction.employer_ss_rate is None and jurisdiction.employee_ss_rate is None:
        if jurisdiction.combined_ss_rate is None:
            return SocialSecurityResult(
                included=True, method="No contribution rates configured",
            )
        combined = gross * jurisdiction.combined_ss_rate
        employer = combined * LEGACY_EMPLOYER_SHARE
        employee = combined - employer
        return SocialSecurityResult(
            included=True,
            employer=employer,
            employee=employee,
            total=employer + employee,
            method=f"Combined rate {jurisdiction.combined_ss_rate:.2%} (70/30 split)",
        )

    employer = gross * (jurisdiction.employer_ss_rate or 0.0)
    employee_rate = jurisdiction.employee_ss_rate or 0.0
    cap = jurisdiction.employee_ss_monthly_cap
    capped = False
    if cap is not None:
        monthly = (gross / months) * employee_rate
        capped = monthly > cap
        employee = min(monthly, cap) * months
    else:
        employee = gross * employee_rate

    return SocialSecurityResult(
        included=True,
        employer=employer,
        employee=employee,
        total=employer + employee,
        employee_capped=capped,
        method="Employer/employee rates" + (" (employee capped)" if capped else ""),
    )
