"""
Tests for ARS/USD conversion and the cached dolar blue rate.
"""
import httpx
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from app.core.config import settings
from app.models.exchange_rate import Currency, RateSource
from app.services import fx_service

T0 = datetime(2026, 10, 1, 12, 0, 0)


def stub_quote(monkeypatch, payload=None, status_code=200):
    """Make httpx.get answer with a fixed quote and count the calls."""
    calls = []

    def fake_get(url, *args, **kwargs):
        calls.append(url)
        return httpx.Response(
            status_code,
            json=payload if payload is not None else {"compra": 1230, "venta": 1250},
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(httpx, "get", fake_get)
    return calls


class TestNormalize:
    def test_ars_to_usd_rounds_to_cents(self):
        assert fx_service.ars_to_usd(5000, 1000) == Decimal("5.00")
        assert fx_service.ars_to_usd(1000, 3) == Decimal("333.33")
        assert fx_service.ars_to_usd(2, 3) == Decimal("0.67")

    def test_result_has_exactly_two_decimals(self):
        result = fx_service.ars_to_usd(12345, 1000)
        assert result.as_tuple().exponent == -2

    def test_half_up_rounding(self):
        assert fx_service.normalize(Decimal("0.125"), 1, Currency.USD, Currency.USD) == Decimal("0.13")
        assert fx_service.ars_to_usd(5, 1000) == Decimal("0.01")  # 0.005

    def test_non_positive_rate_yields_zero(self):
        assert fx_service.ars_to_usd(5000, 0) == Decimal("0.00")
        assert fx_service.ars_to_usd(5000, -10) == Decimal("0.00")
        assert fx_service.usd_to_ars(10, 0) == Decimal("0")

    def test_usd_to_ars_rounds_to_whole_pesos(self):
        assert fx_service.usd_to_ars(Decimal("1.2345"), 1000) == Decimal("1235")
        assert fx_service.usd_to_ars(10, 1200) == Decimal("12000")

    def test_convert_to_base_keeps_usd(self):
        assert fx_service.convert_to_base(Decimal("42.5"), Currency.USD, 0) == Decimal("42.50")
        assert fx_service.convert_to_base(Decimal("5000"), Currency.ARS, 1000) == Decimal("5.00")


class TestRateCache:
    def test_manual_rate_never_expires(self, db):
        fx_service.cache_rate(db, 1000, RateSource.MANUAL, now=T0)

        years_later = T0 + timedelta(days=3650)
        rate = fx_service.get_dolar_blue_rate(db, now=years_later)

        assert rate == Decimal("1000")
        assert fx_service.ars_to_usd(5000, rate) == Decimal("5.00")

    def test_fallback_when_cache_empty_and_fetch_fails(self, db):
        assert fx_service.get_dolar_blue_rate(db, fallback_rate=1200) == Decimal("1200")

    def test_default_fallback_from_settings(self, db):
        assert fx_service.get_dolar_blue_rate(db) == Decimal(str(settings.FX_FALLBACK_RATE))

    def test_fetched_rate_is_cached(self, db, monkeypatch):
        calls = stub_quote(monkeypatch)

        assert fx_service.get_dolar_blue_rate(db, now=T0) == Decimal("1250")
        assert fx_service.get_dolar_blue_rate(db, now=T0 + timedelta(minutes=30)) == Decimal("1250")

        assert len(calls) == 1
        entry = fx_service.get_cached_rate(db, now=T0)
        assert entry.source == RateSource.API

    def test_api_rate_expires_after_ttl(self, db, monkeypatch):
        fx_service.cache_rate(db, 900, RateSource.API, now=T0)
        calls = stub_quote(monkeypatch)

        later = T0 + timedelta(seconds=settings.FX_CACHE_TTL_SECONDS + 1)
        assert fx_service.get_cached_rate(db, now=later) is None
        assert fx_service.get_dolar_blue_rate(db, now=later) == Decimal("1250")
        assert len(calls) == 1

    def test_api_rate_valid_within_ttl(self, db):
        fx_service.cache_rate(db, 900, RateSource.API, now=T0)
        assert fx_service.get_dolar_blue_rate(db, now=T0 + timedelta(minutes=59)) == Decimal("900")

    def test_set_manual_rate(self, db):
        entry = fx_service.set_manual_rate(db, Decimal("1100"))
        assert entry.source == RateSource.MANUAL
        assert fx_service.get_dolar_blue_rate(db) == Decimal("1100")

    def test_set_manual_rate_rejects_non_positive(self, db):
        assert fx_service.set_manual_rate(db, 0) is None
        assert fx_service.describe_rate(db) is None

    def test_clear_cached_rate(self, db):
        fx_service.set_manual_rate(db, 1100)
        assert fx_service.clear_cached_rate(db) is True
        assert fx_service.get_cached_rate(db) is None
        assert fx_service.get_dolar_blue_rate(db, fallback_rate=1300) == Decimal("1300")

    def test_describe_rate_reports_expiry(self, db):
        fx_service.cache_rate(db, 900, RateSource.API, now=T0)

        info = fx_service.describe_rate(db, now=T0 + timedelta(hours=2))
        assert info["rate"] == Decimal("900")
        assert info["source"] == RateSource.API
        assert info["expired"] is True


class TestFetchQuote:
    def test_returns_sell_price(self, monkeypatch):
        stub_quote(monkeypatch, {"compra": 1180, "venta": 1200, "fechaActualizacion": "2026-10-01T12:00:00Z"})
        quote = fx_service.fetch_quote()
        assert quote.sell == Decimal("1200")
        assert quote.buy == Decimal("1180")
        assert quote.as_of == "2026-10-01T12:00:00Z"

    def test_http_error(self, monkeypatch):
        stub_quote(monkeypatch, {"error": "down"}, status_code=500)
        assert fx_service.fetch_quote() is None

    def test_network_error(self):
        assert fx_service.fetch_quote() is None

    @pytest.mark.parametrize("payload", [{"compra": 1180}, {"venta": "n/a"}, {"venta": 0}])
    def test_bad_payload(self, monkeypatch, payload):
        stub_quote(monkeypatch, payload)
        assert fx_service.fetch_quote() is None

    def test_failed_fetch_does_not_touch_cache(self, db, monkeypatch):
        stub_quote(monkeypatch, {"error": "down"}, status_code=503)
        assert fx_service.fetch_dolar_blue_rate(db) is None
        assert fx_service.describe_rate(db) is None


class TestTripRate:
    def test_trip_fallback_used_when_no_rate(self, db, trip):
        assert fx_service.get_trip_rate(trip.id, db) == Decimal("1200")
        assert fx_service.amount_in_base(trip.id, 12000, Currency.ARS, db) == Decimal("10.00")

    def test_explicit_rate_wins(self, db, trip):
        fx_service.set_manual_rate(db, 1100)
        assert fx_service.amount_in_base(trip.id, 5000, Currency.ARS, db, rate=1000) == Decimal("5.00")

    def test_usd_needs_no_rate(self, db, trip):
        assert fx_service.amount_in_base(trip.id, Decimal("19.999"), Currency.USD, db) == Decimal("20.00")
