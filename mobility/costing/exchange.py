"""Exchange rates: provider interface, static fallback and a time-based cache.

Rates are local currency units per 1 EUR. The engine never fetches rates over
the network itself; a live provider is plugged in by the caller.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class ExchangeRates(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: str = "EUR"
    rates: dict[str, float] = Field(default_factory=dict)
    as_of: datetime
    source: str = ""


class ExchangeRateProvider(ABC):
    """Base class every rate source must implement."""

    @abstractmethod
    def fetch(self, base: str, targets: list[str]) -> ExchangeRates:
        """Return current rates for targets relative to base. May raise."""


class StaticExchangeRateProvider(ExchangeRateProvider):
    """Serves a fixed rate table (typically the jurisdiction table's fallback rates)."""

    def __init__(
        self,
        rates: Mapping[str, float],
        source: str = "Static fallback rates",
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._rates = {code: rate for code, rate in rates.items() if rate > 0}
        self._source = source
        self._now = now

    def fetch(self, base: str, targets: list[str]) -> ExchangeRates:
        wanted = targets or list(self._rates)
        return ExchangeRates(
            base=base,
            rates={code: self._rates[code] for code in wanted if code in self._rates},
            as_of=self._now(),
            source=self._source,
        )


class ExchangeRateCache:
    """Caches provider rates for ``refresh_hours``; falls back on provider failure.

    Usage::

        cache = ExchangeRateCache(provider, fallback=table.fallback_rates())
        rate = cache.rate_for("BRL")   # never raises
    """

    def __init__(
        self,
        provider: ExchangeRateProvider,
        fallback: Mapping[str, float] | None = None,
        refresh_hours: float = 24.0,
        base: str = "EUR",
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._provider = provider
        self._fallback = dict(fallback or {})
        self._ttl = timedelta(hours=refresh_hours)
        self._base = base
        self._now = now
        self._cached: ExchangeRates | None = None
        self._failed_at: datetime | None = None

    @property
    def last_updated(self) -> datetime | None:
        return self._cached.as_of if self._cached else None

    @property
    def source(self) -> str:
        return self._cached.source if self._cached else "Static fallback rates"

    def is_stale(self) -> bool:
        if self._cached is None:
            return True
        return self._now() - self._cached.as_of >= self._ttl

    def in_backoff(self) -> bool:
        """True for one TTL after a failed fetch."""
        if self._failed_at is None:
            return False
        return self._now() - self._failed_at < self._ttl

    def refresh(self, force: bool = False) -> bool:
        """Fetch fresh rates if stale (or forced). Returns True when rates were updated.

        After a failed fetch, unforced refreshes are skipped for one TTL.
        """
        if not force and (not self.is_stale() or self.in_backoff()):
            return False
        try:
            fetched = self._provider.fetch(self._base, sorted(self._fallback))
        except Exception:
            self._failed_at = self._now()
            logger.warning("Exchange rate refresh failed - keeping previous rates", exc_info=True)
            return False
        self._failed_at = None
        valid = {code: rate for code, rate in fetched.rates.items() if rate > 0}
        self._cached = fetched.model_copy(update={"rates": valid, "as_of": self._now()})
        logger.info("Exchange rates refreshed from %s (%d currencies)", fetched.source, len(valid))
        return True

    def rates(self) -> dict[str, float]:
        """Current rate table: cached rates layered over the fallback rates."""
        self.refresh()
        merged = dict(self._fallback)
        if self._cached is not None:
            merged.update(self._cached.rates)
        merged[self._base] = 1.0
        return merged

    def rate_for(self, currency: str) -> float:
        rate = self.rates().get(currency)
        if rate is None:
            logger.warning("No exchange rate for %s - using 1.0", currency)
            return 1.0
        return rate
