"""Tests for host social security contributions."""

import pytest

from mobility.core.schemas import JurisdictionConfig, SocialSecuritySettings
from mobility.costing.social_security import calculate_social_security, exclusion_reason
from mobility.rules.jurisdictions import JurisdictionTable


def _make_jurisdiction(**overrides: object) -> JurisdictionConfig:
    defaults: dict[str, object] = {
        "code": "Testland",
        "employer_ss_rate": 0.2,
        "employee_ss_rate": 0.1,
    }
    defaults.update(overrides)
    return JurisdictionConfig(**defaults)  # type: ignore[arg-type]


_INCLUDE_ALL = SocialSecuritySettings(include_when_treaty=True, include_when_no_treaty=True)


# ---------------------------------------------------------------------------
# Inclusion matrix
# ---------------------------------------------------------------------------


class TestExclusion:
    @pytest.mark.parametrize(
        ("treaty", "when_treaty", "when_no_treaty", "included"),
        [
            (True, False, True, False),
            (True, True, True, True),
            (False, False, True, True),
            (False, False, False, False),
            (True, True, False, True),
            (False, True, False, False),
        ],
    )
    def test_matrix(
        self, treaty: bool, when_treaty: bool, when_no_treaty: bool, included: bool,
    ) -> None:
        settings = SocialSecuritySettings(
            include_when_treaty=when_treaty, include_when_no_treaty=when_no_treaty,
        )
        result = calculate_social_security(10000, _make_jurisdiction(), settings, treaty, 1)
        assert result.included is included
        if not included:
            assert result.total == 0
            assert result.exclusion_reason

    def test_treaty_reason_mentions_home_coverage(self) -> None:
        reason = exclusion_reason(True, SocialSecuritySettings())
        assert reason is not None
        assert "Treaty" in reason

    def test_default_settings_include_without_treaty(self) -> None:
        assert exclusion_reason(False, SocialSecuritySettings()) is None


# ---------------------------------------------------------------------------
# Contributions
# ---------------------------------------------------------------------------


class TestContributions:
    def test_total_is_employer_plus_employee(self) -> None:
        result = calculate_social_security(10000, _make_jurisdiction(), _INCLUDE_ALL, False, 2)
        assert result.employer == pytest.approx(2000)
        assert result.employee == pytest.approx(1000)
        assert result.total == pytest.approx(result.employer + result.employee)
        assert result.employee_capped is False

    def test_cap_applies_per_month(self) -> None:
        j = _make_jurisdiction(employee_ss_monthly_cap=100)
        # 3000/month * 10% = 300/month, capped to 100
        result = calculate_social_security(9000, j, _INCLUDE_ALL, False, 3)
        assert result.employee == pytest.approx(300)
        assert result.employee_capped is True
        assert "capped" in result.method

    def test_cap_not_reached(self) -> None:
        j = _make_jurisdiction(employee_ss_monthly_cap=1000)
        result = calculate_social_security(9000, j, _INCLUDE_ALL, False, 3)
        assert result.employee == pytest.approx(900)
        assert result.employee_capped is False

    def test_legacy_combined_rate_split(self) -> None:
        j = JurisdictionConfig(code="Legacy", combined_ss_rate=0.2)
        result = calculate_social_security(10000, j, _INCLUDE_ALL, False, 1)
        assert result.total == pytest.approx(2000)
        assert result.employer == pytest.approx(1400)
        assert result.employee == pytest.approx(600)

    def test_no_rates_configured(self) -> None:
        result = calculate_social_security(
            10000, JurisdictionConfig(code="UAE-like"), _INCLUDE_ALL, False, 1,
        )
        assert result.included is True
        assert result.total == 0

    def test_missing_jurisdiction(self) -> None:
        result = calculate_social_security(10000, None, _INCLUDE_ALL, False, 1)
        assert result.included is False
        assert result.total == 0
        assert result.exclusion_reason == "No social security data for host jurisdiction"

    def test_negative_salary_is_zero(self) -> None:
        result = calculate_social_security(-5000, _make_jurisdiction(), _INCLUDE_ALL, False, 1)
        assert result.total == 0

    def test_brazil_employee_cap(self) -> None:
        brazil = JurisdictionTable.default().get("Brazil")
        result = calculate_social_security(42000, brazil, SocialSecuritySettings(), False, 6)
        assert result.employer == pytest.approx(15456)
        assert result.employee == pytest.approx(1110)
        assert result.total == pytest.approx(16566)

    def test_brazil_treaty_partner_excluded_by_default(self) -> None:
        brazil = JurisdictionTable.default().get("Brazil")
        assert brazil is not None
        treaty = brazil.treaty_with("Portugal")
        result = calculate_social_security(42000, brazil, SocialSecuritySettings(), treaty, 6)
        assert treaty is True
        assert result.included is False
