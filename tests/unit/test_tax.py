"""Tests for the tax calculator: residency, resolver chain, brackets, fallbacks."""

import pytest

from mobility.core.schemas import JurisdictionConfig, TaxBracket
from mobility.costing.tax import (
    NO_JURISDICTION_METHOD,
    TAX_RESOLVERS,
    calculate_tax,
    is_tax_resident,
    progressive_tax,
    resolve_tax_method,
)
from mobility.rules.jurisdictions import JurisdictionTable

_BRACKETS = [
    TaxBracket(min=0, max=10000, rate=0.0),
    TaxBracket(min=10000, max=50000, rate=0.2),
    TaxBracket(min=50000, max=None, rate=0.4),
]


def _make_jurisdiction(**overrides: object) -> JurisdictionConfig:
    defaults: dict[str, object] = {
        "code": "Testland",
        "currency": "TST",
        "exchange_rate": 2.0,
        "flat_rate": 0.1,
        "deduction": 1000,
    }
    defaults.update(overrides)
    return JurisdictionConfig(**defaults)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Residency
# ---------------------------------------------------------------------------


class TestResidency:
    def test_six_months_non_resident(self) -> None:
        assert is_tax_resident(6) is False

    def test_seven_months_resident(self) -> None:
        assert is_tax_resident(7) is True

    def test_threshold_is_183_days(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # 182 vs 183 calendar days, using one-day "months"
        monkeypatch.setattr("mobility.costing.tax.CALENDAR_DAYS_PER_MONTH", 1)
        assert is_tax_resident(182) is False
        assert is_tax_resident(183) is True


# ---------------------------------------------------------------------------
# Resolver chain
# ---------------------------------------------------------------------------


class TestResolveTaxMethod:
    def test_chain_length(self) -> None:
        assert len(TAX_RESOLVERS) == 5

    def test_resident_brackets(self) -> None:
        j = _make_jurisdiction(resident_brackets=_BRACKETS)
        m = resolve_tax_method(j, is_resident=True)
        assert m.label == "Resident progressive brackets"
        assert m.brackets == _BRACKETS

    def test_non_resident_brackets(self) -> None:
        j = _make_jurisdiction(resident_brackets=_BRACKETS, non_resident_brackets=_BRACKETS[1:])
        m = resolve_tax_method(j, is_resident=False)
        assert m.label == "Non-resident progressive brackets"

    def test_resident_brackets_reused(self) -> None:
        j = _make_jurisdiction(
            resident_brackets=_BRACKETS, non_resident_uses_resident_brackets=True,
        )
        m = resolve_tax_method(j, is_resident=False)
        assert m.label == "Resident brackets applied to non-resident"

    def test_non_resident_flat(self) -> None:
        j = _make_jurisdiction(resident_brackets=_BRACKETS, non_resident_rate=0.25)
        m = resolve_tax_method(j, is_resident=False)
        assert m.label == "Non-resident flat rate"
        assert m.flat_rate == 0.25
        assert m.deduction == 0.0

    def test_generic_flat_when_nothing_else(self) -> None:
        m = resolve_tax_method(_make_jurisdiction(), is_resident=True)
        assert m.label == "Flat rate with standard deduction"
        assert m.flat_rate == 0.1
        assert m.deduction == 1000

    def test_resident_without_brackets_skips_non_resident_paths(self) -> None:
        j = _make_jurisdiction(non_resident_rate=0.25, non_resident_brackets=_BRACKETS)
        m = resolve_tax_method(j, is_resident=True)
        assert m.label == "Flat rate with standard deduction"

    def test_each_resolver_not_applicable_returns_none(self) -> None:
        j = _make_jurisdiction()
        assert [r(j, False) is None for r in TAX_RESOLVERS] == [True, True, True, True, False]


# ---------------------------------------------------------------------------
# progressive_tax
# ---------------------------------------------------------------------------


class TestProgressiveTax:
    def test_sum_of_brackets(self) -> None:
        tax, rows = progressive_tax(60000, _BRACKETS)
        assert tax == pytest.approx(0 + 40000 * 0.2 + 10000 * 0.4)
        assert tax == pytest.approx(sum(r.tax_amount for r in rows))

    def test_only_touched_brackets_reported(self) -> None:
        _, rows = progressive_tax(20000, _BRACKETS)
        assert [r.min for r in rows] == [0, 10000]
        assert rows[-1].taxable_amount == pytest.approx(10000)

    def test_zero_income(self) -> None:
        tax, rows = progressive_tax(0, _BRACKETS)
        assert tax == 0
        assert rows == []

    def test_gapped_brackets(self) -> None:
        brackets = [TaxBracket(min=0, max=100, rate=0.1), TaxBracket(min=200, rate=0.2)]
        tax, rows = progressive_tax(150, brackets)
        assert tax == pytest.approx(10)
        assert len(rows) == 1

    def test_monotonic(self) -> None:
        incomes = [0, 5000, 9999.99, 10000, 10000.01, 25000, 49999, 50000, 50001, 1e6]
        taxes = [progressive_tax(i, _BRACKETS)[0] for i in incomes]
        assert taxes == sorted(taxes)

    def test_monotonic_on_real_tables(self) -> None:
        for config in JurisdictionTable.default():
            if not config.resident_brackets:
                continue
            previous = -1.0
            for income in range(0, 3_000_000, 25_000):
                tax, _ = progressive_tax(income, config.resident_brackets)
                assert tax >= previous
                previous = tax


# ---------------------------------------------------------------------------
# calculate_tax
# ---------------------------------------------------------------------------


class TestCalculateTax:
    def test_currency_round_trip(self) -> None:
        j = _make_jurisdiction(non_resident_rate=0.25)
        result = calculate_tax(10000, j, duration_months=3)
        assert result.taxable_base_local == pytest.approx(20000)
        assert result.tax_local == pytest.approx(5000)
        assert result.tax_eur == pytest.approx(2500)
        assert result.effective_rate == pytest.approx(0.25)
        assert result.currency == "TST"
        assert result.is_resident is False

    def test_explicit_exchange_rate_wins(self) -> None:
        j = _make_jurisdiction(non_resident_rate=0.25)
        result = calculate_tax(10000, j, duration_months=3, exchange_rate=4.0)
        assert result.exchange_rate == 4.0
        assert result.taxable_base_local == pytest.approx(40000)
        assert result.tax_eur == pytest.approx(2500)

    @pytest.mark.parametrize("rate", [0.0, -1.0, float("nan")])
    def test_invalid_exchange_rate_uses_one(self, rate: float) -> None:
        j = _make_jurisdiction(non_resident_rate=0.25)
        result = calculate_tax(10000, j, duration_months=3, exchange_rate=rate)
        assert result.exchange_rate == 1.0
        assert result.tax_eur == pytest.approx(2500)

    def test_flat_rate_synthetic_bracket(self) -> None:
        result = calculate_tax(1000, _make_jurisdiction(), duration_months=12)
        # base 2000 local, deduction 1000, 10% on remaining 1000
        assert result.tax_local == pytest.approx(100)
        assert len(result.brackets) == 1
        assert result.brackets[0].min == 1000
        assert result.brackets[0].max is None

    def test_flat_rate_deduction_exceeds_base(self) -> None:
        result = calculate_tax(100, _make_jurisdiction(), duration_months=12)
        assert result.tax_local == 0
        assert result.effective_rate == 0

    def test_missing_jurisdiction(self) -> None:
        result = calculate_tax(50000, None, duration_months=6)
        assert result.method == NO_JURISDICTION_METHOD
        assert result.tax_eur == 0
        assert result.fallback_reason

    @pytest.mark.parametrize("base", [-500, None, "abc", float("inf")])
    def test_invalid_base_is_zero(self, base: object) -> None:
        result = calculate_tax(base, _make_jurisdiction(), duration_months=6)
        assert result.taxable_base_eur == 0
        assert result.tax_eur == 0
        assert result.effective_rate == 0

    def test_brazil_non_resident_flat_25(self) -> None:
        brazil = JurisdictionTable.default().get("Brazil")
        result = calculate_tax(42000, brazil, duration_months=6)
        assert result.method == "Non-resident flat rate"
        assert result.tax_eur == pytest.approx(10500)

    def test_brazil_resident_uses_brackets(self) -> None:
        brazil = JurisdictionTable.default().get("Brazil")
        result = calculate_tax(49000, brazil, duration_months=7)
        assert result.is_resident is True
        assert result.method == "Resident progressive brackets"
        assert result.tax_local == pytest.approx(sum(b.tax_amount for b in result.brackets))

    def test_uae_zero_tax(self) -> None:
        uae = JurisdictionTable.default().get("UAE")
        result = calculate_tax(100000, uae, duration_months=12)
        assert result.tax_eur == 0
