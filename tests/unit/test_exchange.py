"""Tests for exchange rate providers and the refresh cache."""

from datetime import datetime, timedelta

import pytest

from mobility.costing.exchange import (
    ExchangeRateCache,
    ExchangeRateProvider,
    ExchangeRates,
    StaticExchangeRateProvider,
)


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 9, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, hours: float) -> None:
        self.now += timedelta(hours=hours)


class _CountingProvider(ExchangeRateProvider):
    def __init__(self, rates: dict[str, float]) -> None:
        self.rates = rates
        self.calls = 0

    def fetch(self, base: str, targets: list[str]) -> ExchangeRates:
        self.calls += 1
        return ExchangeRates(base=base, rates=dict(self.rates), as_of=datetime(2000, 1, 1))


class _FailingProvider(ExchangeRateProvider):
    def __init__(self) -> None:
        self.calls = 0

    def fetch(self, base: str, targets: list[str]) -> ExchangeRates:
        self.calls += 1
        msg = "rate service down"
        raise ConnectionError(msg)


_FALLBACK = {"BRL": 6.0, "USD": 1.1}


# ---------------------------------------------------------------------------
# StaticExchangeRateProvider
# ---------------------------------------------------------------------------


class TestStaticProvider:
    def test_filters_to_targets(self) -> None:
        provider = StaticExchangeRateProvider({"BRL": 6.0, "USD": 1.1, "INR": 90.0})
        rates = provider.fetch("EUR", ["BRL", "XXX"])
        assert rates.rates == {"BRL": 6.0}

    def test_empty_targets_returns_all(self) -> None:
        provider = StaticExchangeRateProvider(_FALLBACK)
        assert provider.fetch("EUR", []).rates == _FALLBACK

    def test_non_positive_rates_dropped(self) -> None:
        provider = StaticExchangeRateProvider({"BRL": 0.0, "USD": -1.0, "GBP": 0.85})
        assert provider.fetch("EUR", []).rates == {"GBP": 0.85}


# ---------------------------------------------------------------------------
# ExchangeRateCache
# ---------------------------------------------------------------------------


class TestExchangeRateCache:
    def test_first_use_fetches(self) -> None:
        clock = _Clock()
        provider = _CountingProvider({"BRL": 6.2})
        cache = ExchangeRateCache(provider, fallback=_FALLBACK, now=clock)
        assert cache.is_stale() is True
        assert cache.rate_for("BRL") == 6.2
        assert provider.calls == 1
        assert cache.last_updated == clock.now

    def test_fresh_cache_not_refetched(self) -> None:
        clock = _Clock()
        provider = _CountingProvider({"BRL": 6.2})
        cache = ExchangeRateCache(provider, fallback=_FALLBACK, refresh_hours=24, now=clock)
        cache.rates()
        clock.advance(23)
        cache.rates()
        assert provider.calls == 1

    def test_stale_cache_refetched(self) -> None:
        clock = _Clock()
        provider = _CountingProvider({"BRL": 6.2})
        cache = ExchangeRateCache(provider, fallback=_FALLBACK, refresh_hours=24, now=clock)
        cache.rates()
        clock.advance(24)
        provider.rates = {"BRL": 6.5}
        assert cache.rate_for("BRL") == 6.5
        assert provider.calls == 2

    def test_forced_refresh(self) -> None:
        provider = _CountingProvider({"BRL": 6.2})
        cache = ExchangeRateCache(provider, now=_Clock())
        assert cache.refresh() is True
        assert cache.refresh() is False
        assert cache.refresh(force=True) is True
        assert provider.calls == 2

    def test_failure_uses_fallback(self) -> None:
        cache = ExchangeRateCache(_FailingProvider(), fallback=_FALLBACK, now=_Clock())
        assert cache.refresh() is False
        assert cache.rate_for("BRL") == 6.0
        assert cache.last_updated is None
        assert cache.source == "Static fallback rates"

    def test_failure_keeps_previous_rates(self) -> None:
        clock = _Clock()
        provider = _CountingProvider({"BRL": 6.2})
        cache = ExchangeRateCache(provider, fallback=_FALLBACK, refresh_hours=1, now=clock)
        cache.rates()
        cache._provider = _FailingProvider()
        clock.advance(2)
        assert cache.rate_for("BRL") == 6.2

    def test_fetched_rates_layer_over_fallback(self) -> None:
        cache = ExchangeRateCache(
            _CountingProvider({"BRL": 6.2}), fallback=_FALLBACK, now=_Clock(),
        )
        rates = cache.rates()
        assert rates["BRL"] == 6.2
        assert rates["USD"] == 1.1
        assert rates["EUR"] == 1.0

    def test_invalid_fetched_rate_ignored(self) -> None:
        cache = ExchangeRateCache(
            _CountingProvider({"BRL": 0.0}), fallback=_FALLBACK, now=_Clock(),
        )
        assert cache.rate_for("BRL") == 6.0

    def test_unknown_currency_is_one(self) -> None:
        cache = ExchangeRateCache(_CountingProvider({}), now=_Clock())
        assert cache.rate_for("XYZ") == pytest.approx(1.0)

    def test_failure_backs_off_for_one_ttl(self) -> None:
        clock = _Clock()
        provider = _FailingProvider()
        cache = ExchangeRateCache(provider, fallback=_FALLBACK, refresh_hours=24, now=clock)
        for _ in range(5):
            assert cache.rate_for("BRL") == 6.0
        assert provider.calls == 1
        assert cache.in_backoff() is True
        clock.advance(23)
        cache.rates()
        assert provider.calls == 1
        clock.advance(1)
        cache.rates()
        assert provider.calls == 2

    def test_forced_refresh_ignores_backoff(self) -> None:
        provider = _FailingProvider()
        cache = ExchangeRateCache(provider, now=_Clock())
        cache.refresh()
        assert cache.refresh() is False
        assert provider.calls == 1
        cache.refresh(force=True)
        assert provider.calls == 2

    def test_success_clears_backoff(self) -> None:
        clock = _Clock()
        cache = ExchangeRateCache(
            _FailingProvider(), fallback=_FALLBACK, refresh_hours=1, now=clock,
        )
        cache.refresh()
        cache._provider = _CountingProvider({"BRL": 6.4})
        clock.advance(1)
        assert cache.rate_for("BRL") == 6.4
        assert cache.in_backoff() is False
