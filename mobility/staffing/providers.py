"""Lookup collaborators for candidate scoring: visa requirements and travel routes."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

from mobility.core.schemas import VisaRequirement, VisaRule
from mobility.rules.routes import CARBON_FOOTPRINT, FLIGHT_COSTS, VISA_RULES

logger = logging.getLogger(__name__)

DEFAULT_VISA_WAIT_DAYS = 30
DEFAULT_VISA_TYPE = "Standard Application (API Default)"
DEFAULT_FLIGHT_COST = 1000.0
DEFAULT_CARBON_KG = 0.0


class VisaProvider(ABC):
    """Base class every visa data source must implement."""

    @abstractmethod
    async def lookup(self, nationality: str, destination: str) -> VisaRequirement:
        """Return the visa requirement for a nationality travelling to destination."""


class StaticVisaProvider(VisaProvider):
    """Visa requirements from a fixed rule list; unknown pairs get the default rule."""

    def __init__(
        self,
        rules: Iterable[VisaRule] = VISA_RULES,
        default_wait_days: int = DEFAULT_VISA_WAIT_DAYS,
        default_visa_type: str = DEFAULT_VISA_TYPE,
    ) -> None:
        self._rules = {(r.origin, r.destination): r for r in rules}
        self._default = VisaRequirement(
            wait_days=default_wait_days, visa_type=default_visa_type, is_default=True,
        )

    async def lookup(self, nationality: str, destination: str) -> VisaRequirement:
        rule = self._rules.get((nationality, destination))
        if rule is None:
            logger.debug("No visa rule for %s -> %s - using default", nationality, destination)
            return self._default
        return VisaRequirement(wait_days=rule.wait_days, visa_type=rule.visa_type)


class RouteTable:
    """Flight cost (EUR) and carbon footprint (kg CO2) by (origin, destination)."""

    def __init__(
        self,
        flight_costs: Mapping[tuple[str, str], float] | None = None,
        carbon: Mapping[tuple[str, str], float] | None = None,
        default_flight_cost: float = DEFAULT_FLIGHT_COST,
    ) -> None:
        self._flight_costs = dict(FLIGHT_COSTS if flight_costs is None else flight_costs)
        self._carbon = dict(CARBON_FOOTPRINT if carbon is None else carbon)
        self._default_flight_cost = default_flight_cost

    def flight_cost(self, origin: str, destination: str) -> float:
        return self._flight_costs.get((origin, destination), self._default_flight_cost)

    def carbon_kg(self, origin: str, destination: str) -> float:
        return self._carbon.get((origin, destination), DEFAULT_CARBON_KG)
