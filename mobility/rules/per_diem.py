"""Daily allowance (per diem) reference data by home-country scheme.

A home country with a scheme pays its own rates for work abroad (Finland pays
by host country with a few city overrides, Portugal pays a flat public-sector
rate). Otherwise the host jurisdiction's configured rate applies.
"""

import logging
from dataclasses import dataclass, field

from mobility.rules.jurisdictions import JurisdictionTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerDiemRate:
    rate: float
    source: str


@dataclass(frozen=True)
class PerDiemScheme:
    """One home country's allowance rules."""

    source: str
    default_rate: float
    by_host: dict[str, float] = field(default_factory=dict)
    by_city: dict[tuple[str, str], float] = field(default_factory=dict)

    def rate_for(self, host: str, city: str | None = None) -> float:
        if city:
            city_rate = self.by_city.get((host, city.strip().lower()))
            if city_rate is not None:
                return city_rate
        return self.by_host.get(host, self.default_rate)


FINLAND_SCHEME = PerDiemScheme(
    source="Finnish Tax Administration 2026",
    default_rate=54.0,
    by_host={
        "Brazil": 72.0,
        "USA": 86.0,
        "Germany": 78.0,
        "UK": 84.0,
        "UAE": 69.0,
        "Singapore": 79.0,
        "Australia": 72.0,
        "Mexico": 74.0,
        "India": 57.0,
        "SouthAfrica": 53.0,
    },
    by_city={
        ("USA", "new york"): 122.0,
        ("USA", "los angeles"): 122.0,
        ("USA", "washington d.c."): 122.0,
        ("UK", "london"): 89.0,
        ("UK", "edinburgh"): 89.0,
    },
)

PORTUGAL_SCHEME = PerDiemScheme(
    source="DGAEP (Portugal)",
    default_rate=148.91,
)

DEFAULT_SCHEMES: dict[str, PerDiemScheme] = {
    "Finland": FINLAND_SCHEME,
    "Portugal": PORTUGAL_SCHEME,
}


class PerDiemTable:
    """Resolves a daily allowance for a (home, host, city) triple."""

    def __init__(
        self,
        jurisdictions: JurisdictionTable,
        schemes: dict[str, PerDiemScheme] | None = None,
    ) -> None:
        self._jurisdictions = jurisdictions
        self._schemes = DEFAULT_SCHEMES if schemes is None else schemes

    def daily_rate(self, home: str, host: str, city: str | None = None) -> PerDiemRate:
        scheme = self._schemes.get(home)
        if scheme is not None:
            return PerDiemRate(rate=scheme.rate_for(host, city), source=scheme.source)

        host_config = self._jurisdictions.get(host)
        if host_config is not None and host_config.per_diem_rate > 0:
            return PerDiemRate(
                rate=host_config.per_diem_rate,
                source=f"{host_config.display_name} host rate",
            )

        logger.warning("No per diem data for %s -> %s - using 0", home, host)
        return PerDiemRate(rate=0.0, source="No per diem data")
