"""Static jurisdiction rule table: tax regimes, social security, currency, per diem.

Amounts inside bracket sets are annual and in the local currency. Social
security monthly caps are in EUR. Exchange rates are local units per 1 EUR
and act as the static fallback when no live rate is supplied.
"""

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from mobility.core.schemas import JurisdictionConfig

logger = logging.getLogger(__name__)

RULES_VERSION = "2026.1"

_DEFAULT_TABLE: dict[str, dict[str, Any]] = {
    "Brazil": {
        "name": "Brazil",
        "currency": "BRL",
        "currency_symbol": "R$",
        "exchange_rate": 6.187,
        "resident_brackets": [
            {"min": 0, "max": 28467.20, "rate": 0.0},
            {"min": 28467.20, "max": 33919.80, "rate": 0.075},
            {"min": 33919.80, "max": 45012.60, "rate": 0.15},
            {"min": 45012.60, "max": 55976.16, "rate": 0.225},
            {"min": 55976.16, "max": None, "rate": 0.275},
        ],
        "non_resident_rate": 0.25,
        "flat_rate": 0.275,
        "deduction": 16754.34,
        "tax_source": "Receita Federal IRPF annual table",
        "employer_ss_rate": 0.368,
        "employee_ss_rate": 0.14,
        "employee_ss_monthly_cap": 185.0,
        "treaty_exists": True,
        "treaty_partners": ["Portugal", "Germany"],
        "per_diem_rate": 72.0,
    },
    "USA": {
        "name": "United States",
        "currency": "USD",
        "currency_symbol": "$",
        "exchange_rate": 1.08,
        "resident_brackets": [
            {"min": 0, "max": 11925, "rate": 0.10},
            {"min": 11925, "max": 48475, "rate": 0.12},
            {"min": 48475, "max": 103350, "rate": 0.22},
            {"min": 103350, "max": 197300, "rate": 0.24},
            {"min": 197300, "max": 250525, "rate": 0.32},
            {"min": 250525, "max": 626350, "rate": 0.35},
            {"min": 626350, "max": None, "rate": 0.37},
        ],
        "non_resident_uses_resident_brackets": True,
        "flat_rate": 0.37,
        "deduction": 13850,
        "tax_source": "IRS Rev. Proc. 2024-40",
        "employer_ss_rate": 0.0765,
        "employee_ss_rate": 0.0765,
        "treaty_exists": True,
        "treaty_partners": ["Finland", "Portugal", "Germany", "UK"],
        "per_diem_rate": 86.0,
    },
    "Germany": {
        "name": "Germany",
        "currency": "EUR",
        "currency_symbol": "€",
        "exchange_rate": 1.0,
        "resident_brackets": [
            {"min": 0, "max": 12096, "rate": 0.0},
            {"min": 12096, "max": 17443, "rate": 0.14},
            {"min": 17443, "max": 68480, "rate": 0.24},
            {"min": 68480, "max": 277825, "rate": 0.42},
            {"min": 277825, "max": None, "rate": 0.45},
        ],
        "non_resident_uses_resident_brackets": True,
        "flat_rate": 0.45,
        "deduction": 10908,
        "tax_source": "EStG para. 32a",
        "employer_ss_rate": 0.205,
        "employee_ss_rate": 0.205,
        "employee_ss_monthly_cap": 1650.0,
        "treaty_exists": True,
        "per_diem_rate": 78.0,
    },
    "UK": {
        "name": "United Kingdom",
        "currency": "GBP",
        "currency_symbol": "£",
        "exchange_rate": 0.86,
        "resident_brackets": [
            {"min": 0, "max": 12570, "rate": 0.0},
            {"min": 12570, "max": 50270, "rate": 0.20},
            {"min": 50270, "max": 125140, "rate": 0.40},
            {"min": 125140, "max": None, "rate": 0.45},
        ],
        "non_resident_uses_resident_brackets": True,
        "flat_rate": 0.45,
        "deduction": 12570,
        "tax_source": "HMRC income tax rates 2025/26",
        "employer_ss_rate": 0.138,
        "employee_ss_rate": 0.08,
        "treaty_exists": True,
        "per_diem_rate": 84.0,
    },
    "UAE": {
        "name": "United Arab Emirates",
        "currency": "AED",
        "currency_symbol": "AED ",
        "exchange_rate": 3.96,
        "flat_rate": 0.0,
        "tax_source": "No personal income tax",
        "per_diem_rate": 69.0,
    },
    "Singapore": {
        "name": "Singapore",
        "currency": "SGD",
        "currency_symbol": "S$",
        "exchange_rate": 1.45,
        "resident_brackets": [
            {"min": 0, "max": 20000, "rate": 0.0},
            {"min": 20000, "max": 30000, "rate": 0.02},
            {"min": 30000, "max": 40000, "rate": 0.035},
            {"min": 40000, "max": 80000, "rate": 0.07},
            {"min": 80000, "max": 120000, "rate": 0.115},
            {"min": 120000, "max": 160000, "rate": 0.15},
            {"min": 160000, "max": 200000, "rate": 0.18},
            {"min": 200000, "max": 240000, "rate": 0.19},
            {"min": 240000, "max": 280000, "rate": 0.195},
            {"min": 280000, "max": 320000, "rate": 0.20},
            {"min": 320000, "max": 500000, "rate": 0.22},
            {"min": 500000, "max": 1000000, "rate": 0.23},
            {"min": 1000000, "max": None, "rate": 0.24},
        ],
        "non_resident_rate": 0.24,
        "flat_rate": 0.22,
        "tax_source": "IRAS resident tax rates YA2025",
        "combined_ss_rate": 0.17,
        "per_diem_rate": 79.0,
    },
    "Australia": {
        "name": "Australia",
        "currency": "AUD",
        "currency_symbol": "A$",
        "exchange_rate": 1.65,
        "resident_brackets": [
            {"min": 0, "max": 18200, "rate": 0.0},
            {"min": 18200, "max": 45000, "rate": 0.16},
            {"min": 45000, "max": 135000, "rate": 0.30},
            {"min": 135000, "max": 190000, "rate": 0.37},
            {"min": 190000, "max": None, "rate": 0.45},
        ],
        "non_resident_brackets": [
            {"min": 0, "max": 135000, "rate": 0.30},
            {"min": 135000, "max": 190000, "rate": 0.37},
            {"min": 190000, "max": None, "rate": 0.45},
        ],
        "flat_rate": 0.45,
        "deduction": 18200,
        "tax_source": "ATO individual income tax rates 2025-26",
        "employer_ss_rate": 0.115,
        "employee_ss_rate": 0.0,
        "treaty_exists": True,
        "per_diem_rate": 72.0,
    },
    "Mexico": {
        "name": "Mexico",
        "currency": "MXN",
        "currency_symbol": "MX$",
        "exchange_rate": 18.5,
        "non_resident_rate": 0.25,
        "flat_rate": 0.35,
        "tax_source": "SAT ISR flat approximation",
        "combined_ss_rate": 0.0625,
        "per_diem_rate": 74.0,
    },
    "India": {
        "name": "India",
        "currency": "INR",
        "currency_symbol": "₹",
        "exchange_rate": 90.5,
        "resident_brackets": [
            {"min": 0, "max": 400000, "rate": 0.0},
            {"min": 400000, "max": 800000, "rate": 0.05},
            {"min": 800000, "max": 1200000, "rate": 0.10},
            {"min": 1200000, "max": 1600000, "rate": 0.15},
            {"min": 1600000, "max": 2000000, "rate": 0.20},
            {"min": 2000000, "max": 2400000, "rate": 0.25},
            {"min": 2400000, "max": None, "rate": 0.30},
        ],
        "non_resident_uses_resident_brackets": True,
        "flat_rate": 0.30,
        "deduction": 250000,
        "tax_source": "Income-tax new regime FY2025-26",
        "employer_ss_rate": 0.12,
        "employee_ss_rate": 0.12,
        "employee_ss_monthly_cap": 20.0,
        "treaty_partners": ["UK"],
        "per_diem_rate": 57.0,
    },
    "SouthAfrica": {
        "name": "South Africa",
        "currency": "ZAR",
        "currency_symbol": "R",
        "exchange_rate": 20.2,
        "flat_rate": 0.45,
        "deduction": 87300,
        "tax_source": "SARS flat approximation",
        "employer_ss_rate": 0.01,
        "employee_ss_rate": 0.01,
        "employee_ss_monthly_cap": 8.77,
        "per_diem_rate": 53.0,
    },
    "Finland": {
        "name": "Finland",
        "currency": "EUR",
        "currency_symbol": "€",
        "exchange_rate": 1.0,
        "resident_brackets": [
            {"min": 0, "max": 21200, "rate": 0.0},
            {"min": 21200, "max": 31500, "rate": 0.1264},
            {"min": 31500, "max": 52100, "rate": 0.19},
            {"min": 52100, "max": 88200, "rate": 0.3025},
            {"min": 88200, "max": None, "rate": 0.34},
        ],
        "non_resident_rate": 0.35,
        "flat_rate": 0.34,
        "tax_source": "Vero state income tax scale 2025",
        "employer_ss_rate": 0.2,
        "employee_ss_rate": 0.1,
        "treaty_exists": True,
        "per_diem_rate": 54.0,
    },
    "Portugal": {
        "name": "Portugal",
        "currency": "EUR",
        "currency_symbol": "€",
        "exchange_rate": 1.0,
        "resident_brackets": [
            {"min": 0, "max": 8059, "rate": 0.13},
            {"min": 8059, "max": 12160, "rate": 0.165},
            {"min": 12160, "max": 17233, "rate": 0.22},
            {"min": 17233, "max": 22306, "rate": 0.25},
            {"min": 22306, "max": 28400, "rate": 0.3275},
            {"min": 28400, "max": 41629, "rate": 0.37},
            {"min": 41629, "max": 44987, "rate": 0.435},
            {"min": 44987, "max": 83696, "rate": 0.45},
            {"min": 83696, "max": None, "rate": 0.48},
        ],
        "non_resident_rate": 0.25,
        "flat_rate": 0.48,
        "tax_source": "CIRS art. 68 (2025)",
        "employer_ss_rate": 0.2375,
        "employee_ss_rate": 0.11,
        "treaty_exists": True,
        "per_diem_rate": 60.0,
    },
}


class JurisdictionTable:
    """Read-only lookup of JurisdictionConfig by country code.

    Usage::

        table = JurisdictionTable.default()
        brazil = table.get("Brazil")   # None when unknown
    """

    def __init__(
        self,
        jurisdictions: Mapping[str, JurisdictionConfig],
        version: str = RULES_VERSION,
    ) -> None:
        self._jurisdictions = dict(jurisdictions)
        self.version = version

    @classmethod
    def from_dict(
        cls, raw: Mapping[str, Mapping[str, Any]], version: str = "",
    ) -> "JurisdictionTable":
        """Validate raw per-country dicts. The mapping key is the country code."""
        configs = {
            code: JurisdictionConfig.model_validate({"code": code, **data})
            for code, data in raw.items()
        }
        return cls(configs, version=version or RULES_VERSION)

    @classmethod
    def default(cls) -> "JurisdictionTable":
        """Built-in rule table."""
        return cls.from_dict(_DEFAULT_TABLE, version=RULES_VERSION)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "JurisdictionTable":
        """Load a rule table from YAML: ``{version, jurisdictions: {code: {...}}}``."""
        path = Path(path)
        if not path.exists():
            msg = f"Jurisdiction file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        jurisdictions = raw.get("jurisdictions") or {}
        if not isinstance(jurisdictions, dict):
            msg = f"'jurisdictions' must be a mapping in {path}"
            raise ValueError(msg)
        table = cls.from_dict(jurisdictions, version=str(raw.get("version", "")))
        logger.info("Loaded %d jurisdictions from %s (version %s)", len(table), path, table.version)
        return table

    def get(self, code: str) -> JurisdictionConfig | None:
        config = self._jurisdictions.get(code)
        if config is None:
            logger.debug("No jurisdiction config for '%s'", code)
        return config

    def codes(self) -> list[str]:
        return sorted(self._jurisdictions)

    def fallback_rates(self) -> dict[str, float]:
        """Static exchange rate per currency (first jurisdiction wins)."""
        rates: dict[str, float] = {}
        for config in self._jurisdictions.values():
            rates.setdefault(config.currency, config.exchange_rate)
        return rates

    def with_exchange_rates(self, rates: Mapping[str, float]) -> "JurisdictionTable":
        """Return a new table with exchange rates replaced for the given currencies."""
        updated = {
            code: (
                config.model_copy(update={"exchange_rate": rates[config.currency]})
                if rates.get(config.currency, 0) > 0
                else config
            )
            for code, config in self._jurisdictions.items()
        }
        return JurisdictionTable(updated, version=self.version)

    def __contains__(self, code: object) -> bool:
        return code in self._jurisdictions

    def __len__(self) -> int:
        return len(self._jurisdictions)

    def __iter__(self) -> Iterator[JurisdictionConfig]:
        return iter(self._jurisdictions.values())
