"""
Foreign exchange service for ARS/USD conversion.

The rate is the number of ARS needed to buy one USD (the "dolar blue" sell
price). It is kept in a single cache row with two expiry policies:
rates fetched from the quote API expire after FX_CACHE_TTL_SECONDS, manual
overrides never expire.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
import httpx
import logging
from app.core.config import settings
from app.core.utils import Number, round_money, to_decimal
from app.db.base import utcnow
from app.models.exchange_rate import Currency, ExchangeRateCache, RateSource
from app.models.trip import Trip

logger = logging.getLogger(__name__)

BASE_CURRENCY = Currency.USD

# USD is tracked to the cent, ARS to the whole peso
CURRENCY_PLACES = {
    Currency.USD: 2,
    Currency.ARS: 0,
}


@dataclass
class RateQuote:
    """A quote from the external source."""
    buy: Decimal
    sell: Decimal
    as_of: Optional[str] = None


def normalize(
    amount: Number,
    rate: Number,
    from_currency: Currency = Currency.ARS,
    to_currency: Currency = Currency.USD
) -> Decimal:
    """
    Convert an amount between the two supported currencies.

    Args:
        amount: Amount in from_currency
        rate: ARS needed to buy 1 USD
        from_currency: Currency of amount
        to_currency: Target currency

    Returns:
        Converted amount, rounded to the target currency's precision.
        A rate <= 0 yields 0.
    """
    from_currency = Currency(from_currency)
    to_currency = Currency(to_currency)
    places = CURRENCY_PLACES[to_currency]
    amount = to_decimal(amount)

    if from_currency == to_currency:
        return round_money(amount, places)

    rate = to_decimal(rate)
    if rate <= 0:
        return round_money(0, places)

    if to_currency == Currency.USD:
        return round_money(amount / rate, places)
    return round_money(amount * rate, places)


def ars_to_usd(amount: Number, rate: Number) -> Decimal:
    """Convert ARS to USD (2 decimals)."""
    return normalize(amount, rate, Currency.ARS, Currency.USD)


def usd_to_ars(amount: Number, rate: Number) -> Decimal:
    """Convert USD to ARS (whole pesos)."""
    return normalize(amount, rate, Currency.USD, Currency.ARS)


def convert_to_base(amount: Number, currency: Currency, rate: Number) -> Decimal:
    """Convert an amount in any supported currency to the reporting currency."""
    return normalize(amount, rate, currency, BASE_CURRENCY)


def is_expired(entry: ExchangeRateCache, now: Optional[datetime] = None) -> bool:
    """Manual rates never expire; API rates expire after the configured TTL."""
    if entry.source == RateSource.MANUAL:
        return False
    now = now or utcnow()
    return (now - entry.fetched_at).total_seconds() > settings.FX_CACHE_TTL_SECONDS


def _get_cache_entry(db: Session) -> Optional[ExchangeRateCache]:
    return db.query(ExchangeRateCache).filter(
        ExchangeRateCache.cache_key == settings.FX_CACHE_KEY
    ).first()


def get_cached_rate(db: Session, now: Optional[datetime] = None) -> Optional[ExchangeRateCache]:
    """Return the cache entry if it is still valid, otherwise None."""
    try:
        entry = _get_cache_entry(db)
    except SQLAlchemyError as e:
        logger.error(f"Error reading cached exchange rate: {e}")
        return None

    if entry is None or is_expired(entry, now):
        return None
    return entry


def cache_rate(
    db: Session,
    rate: Number,
    source: RateSource,
    now: Optional[datetime] = None
) -> Optional[ExchangeRateCache]:
    """Store a rate under the fixed cache key, replacing any previous value."""
    try:
        entry = _get_cache_entry(db)
        if entry is None:
            entry = ExchangeRateCache(cache_key=settings.FX_CACHE_KEY)
            db.add(entry)
        entry.rate = to_decimal(rate)
        entry.source = source
        entry.fetched_at = now or utcnow()
        db.commit()
        db.refresh(entry)
        return entry
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error caching exchange rate: {e}")
        return None


def fetch_quote() -> Optional[RateQuote]:
    """
    Fetch the dolar blue quote from the external source.

    Response format: {"compra": 1180, "venta": 1200, "fechaActualizacion": "..."}
    Returns None on any network, HTTP or parse failure.
    """
    try:
        response = httpx.get(settings.FX_QUOTE_URL, timeout=settings.FX_QUOTE_TIMEOUT)
        response.raise_for_status()
        data = response.json()

        if settings.DEBUG:
            logger.debug(f"Quote response: {data}")

        sell = Decimal(str(data["venta"]))
        buy = Decimal(str(data.get("compra", data["venta"])))
    except httpx.HTTPStatusError as e:
        logger.error(f"HTTP error fetching dolar blue quote: {e.response.status_code}")
        return None
    except httpx.HTTPError as e:
        logger.error(f"Network error fetching dolar blue quote: {e}")
        return None
    except (ValueError, KeyError, TypeError, InvalidOperation) as e:
        logger.error(f"Malformed dolar blue quote: {e}")
        return None

    if sell <= 0:
        logger.error(f"Invalid dolar blue sell price: {sell}")
        return None

    return RateQuote(buy=buy, sell=sell, as_of=data.get("fechaActualizacion"))


def fetch_dolar_blue_rate(db: Session, now: Optional[datetime] = None) -> Optional[Decimal]:
    """Return the cached rate, or fetch (and cache) the sell price. None if unavailable."""
    cached = get_cached_rate(db, now)
    if cached:
        return to_decimal(cached.rate)

    quote = fetch_quote()
    if quote is None:
        return None

    cache_rate(db, quote.sell, RateSource.API, now)
    logger.info(f"Fetched dolar blue rate: {quote.sell} ARS/USD")
    return quote.sell


def get_dolar_blue_rate(
    db: Session,
    fallback_rate: Optional[Number] = None,
    now: Optional[datetime] = None
) -> Decimal:
    """Current rate: cached, freshly fetched, or the fallback."""
    rate = fetch_dolar_blue_rate(db, now)
    if rate is not None:
        return rate

    if fallback_rate is None:
        fallback_rate = settings.FX_FALLBACK_RATE
    logger.warning(f"No dolar blue rate available, using fallback {fallback_rate}")
    return to_decimal(fallback_rate)


def set_manual_rate(db: Session, rate: Number) -> Optional[ExchangeRateCache]:
    """Override the rate manually. Manual rates never expire."""
    if to_decimal(rate) <= 0:
        logger.warning(f"Rejected manual exchange rate {rate}")
        return None
    return cache_rate(db, rate, RateSource.MANUAL)


def clear_cached_rate(db: Session) -> bool:
    """Drop the cached rate so the next read refetches."""
    try:
        db.query(ExchangeRateCache).filter(
            ExchangeRateCache.cache_key == settings.FX_CACHE_KEY
        ).delete()
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error clearing cached exchange rate: {e}")
        return False


def describe_rate(db: Session, now: Optional[datetime] = None) -> Optional[dict]:
    """Cache entry details for display, including expired entries."""
    try:
        entry = _get_cache_entry(db)
    except SQLAlchemyError as e:
        logger.error(f"Error reading cached exchange rate: {e}")
        return None

    if entry is None:
        return None

    return {
        "rate": to_decimal(entry.rate),
        "source": entry.source,
        "fetched_at": entry.fetched_at,
        "expired": is_expired(entry, now),
    }


def get_trip_rate(trip_id: int, db: Session, rate: Optional[Number] = None) -> Decimal:
    """Rate to lock in for a new entry: explicit, current, or the trip's fallback."""
    if rate is not None:
        return to_decimal(rate)

    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    fallback_rate = trip.fallback_rate if trip else None
    return get_dolar_blue_rate(db, fallback_rate=fallback_rate)


def amount_in_base(
    trip_id: int,
    amount: Number,
    currency: Currency,
    db: Session,
    rate: Optional[Number] = None
) -> Decimal:
    """USD value of an amount, looking up the rate only when conversion is needed."""
    if Currency(currency) == BASE_CURRENCY:
        return round_money(amount, CURRENCY_PLACES[BASE_CURRENCY])
    return convert_to_base(amount, currency, get_trip_rate(trip_id, db, rate))
