"""Tests for the jurisdiction rule table and per diem resolution."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from mobility.rules.jurisdictions import RULES_VERSION, JurisdictionTable
from mobility.rules.per_diem import PerDiemScheme, PerDiemTable

EXPECTED_CODES = {
    "Brazil", "USA", "Germany", "UK", "UAE", "Singapore",
    "Australia", "Mexico", "India", "SouthAfrica", "Finland", "Portugal",
}


# ---------------------------------------------------------------------------
# JurisdictionTable
# ---------------------------------------------------------------------------


class TestDefaultTable:
    def test_all_countries_present(self) -> None:
        table = JurisdictionTable.default()
        assert set(table.codes()) == EXPECTED_CODES
        assert table.version == RULES_VERSION

    def test_get_known(self) -> None:
        brazil = JurisdictionTable.default().get("Brazil")
        assert brazil is not None
        assert brazil.currency == "BRL"
        assert brazil.non_resident_rate == 0.25
        assert brazil.employer_ss_rate == 0.368
        assert brazil.employee_ss_rate == 0.14

    def test_get_unknown_returns_none(self) -> None:
        assert JurisdictionTable.default().get("Atlantis") is None

    def test_contains(self) -> None:
        table = JurisdictionTable.default()
        assert "UK" in table
        assert "Atlantis" not in table

    def test_every_bracket_set_ends_open(self) -> None:
        for config in JurisdictionTable.default():
            for brackets in (config.resident_brackets, config.non_resident_brackets):
                if brackets:
                    assert brackets[-1].max is None

    def test_fallback_rates(self) -> None:
        rates = JurisdictionTable.default().fallback_rates()
        assert rates["EUR"] == 1.0
        assert rates["BRL"] == pytest.approx(6.187)


class TestWithExchangeRates:
    def test_returns_new_table(self) -> None:
        table = JurisdictionTable.default()
        updated = table.with_exchange_rates({"BRL": 6.5})
        assert updated.get("Brazil").exchange_rate == 6.5  # type: ignore[union-attr]
        assert table.get("Brazil").exchange_rate == pytest.approx(6.187)  # type: ignore[union-attr]

    def test_other_currencies_unchanged(self) -> None:
        updated = JurisdictionTable.default().with_exchange_rates({"BRL": 6.5})
        assert updated.get("USA").exchange_rate == pytest.approx(1.08)  # type: ignore[union-attr]

    def test_non_positive_rate_ignored(self) -> None:
        updated = JurisdictionTable.default().with_exchange_rates({"BRL": 0})
        brazil = updated.get("Brazil")
        assert brazil is not None
        assert brazil.exchange_rate == pytest.approx(6.187)


class TestFromYaml:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "j.yaml"
        path.write_text(dedent("""\
            version: "test-1"
            jurisdictions:
              Atlantis:
                currency: ATL
                exchange_rate: 2.0
                resident_brackets:
                  - {min: 0, max: 10000, rate: 0.0}
                  - {min: 10000, max: null, rate: 0.3}
                non_resident_rate: 0.2
        """))
        table = JurisdictionTable.from_yaml(path)
        assert table.version == "test-1"
        atlantis = table.get("Atlantis")
        assert atlantis is not None
        assert atlantis.code == "Atlantis"
        assert atlantis.exchange_rate == 2.0

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            JurisdictionTable.from_yaml("/nonexistent/j.yaml")

    def test_invalid_brackets_raise(self, tmp_path: Path) -> None:
        path = tmp_path / "j.yaml"
        path.write_text(dedent("""\
            jurisdictions:
              Atlantis:
                resident_brackets:
                  - {min: 0, max: 10000, rate: 0.1}
                  - {min: 5000, max: null, rate: 0.3}
        """))
        with pytest.raises(ValidationError):
            JurisdictionTable.from_yaml(path)

    def test_jurisdictions_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "j.yaml"
        path.write_text("jurisdictions: [1, 2]\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            JurisdictionTable.from_yaml(path)


# ---------------------------------------------------------------------------
# PerDiemTable
# ---------------------------------------------------------------------------


class TestPerDiemTable:
    @pytest.fixture()
    def table(self) -> PerDiemTable:
        return PerDiemTable(JurisdictionTable.default())

    def test_finland_to_brazil(self, table: PerDiemTable) -> None:
        rate = table.daily_rate("Finland", "Brazil")
        assert rate.rate == 72.0
        assert "Finnish" in rate.source

    def test_finland_city_override(self, table: PerDiemTable) -> None:
        assert table.daily_rate("Finland", "USA", "New York").rate == 122.0
        assert table.daily_rate("Finland", "UK", "London").rate == 89.0

    def test_city_case_insensitive(self, table: PerDiemTable) -> None:
        assert table.daily_rate("Finland", "UK", "  edinburgh ").rate == 89.0

    def test_unknown_city_uses_country_rate(self, table: PerDiemTable) -> None:
        assert table.daily_rate("Finland", "USA", "Houston").rate == 86.0

    def test_finland_unknown_host_uses_default(self, table: PerDiemTable) -> None:
        assert table.daily_rate("Finland", "Atlantis").rate == 54.0

    def test_portugal_flat(self, table: PerDiemTable) -> None:
        assert table.daily_rate("Portugal", "Brazil").rate == pytest.approx(148.91)
        assert table.daily_rate("Portugal", "India").rate == pytest.approx(148.91)

    def test_no_scheme_uses_host_rate(self, table: PerDiemTable) -> None:
        rate = table.daily_rate("UK", "Germany")
        assert rate.rate == 78.0
        assert "host rate" in rate.source

    def test_nothing_known(self, table: PerDiemTable) -> None:
        rate = table.daily_rate("Atlantis", "Lemuria")
        assert rate.rate == 0.0
        assert rate.source == "No per diem data"

    def test_custom_schemes(self) -> None:
        table = PerDiemTable(
            JurisdictionTable.default(),
            schemes={"UK": PerDiemScheme(source="Custom", default_rate=10.0)},
        )
        assert table.daily_rate("UK", "Brazil").rate == 10.0
        # Finland no longer has a scheme: falls back to host rate
        assert table.daily_rate("Finland", "Brazil").source == "Brazil host rate"
