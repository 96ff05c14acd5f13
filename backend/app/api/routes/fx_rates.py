"""
Foreign exchange rates routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional
from app.core.utils import format_currency
from app.db.session import get_db
from app.models.exchange_rate import Currency
from app.schemas.exchange_rate import ConversionResponse, ExchangeRateResponse, ManualRateRequest
from app.services import fx_service
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/fx-rates", tags=["fx-rates"])


def _current_rate_response(db: Session, fallback_rate: Optional[Decimal] = None) -> ExchangeRateResponse:
    rate = fx_service.get_dolar_blue_rate(db, fallback_rate=fallback_rate)
    info = fx_service.describe_rate(db)
    if info and not info["expired"] and info["rate"] == rate:
        return ExchangeRateResponse(**info)
    # Nothing cached or fetched: the fallback is in use
    return ExchangeRateResponse(rate=rate)


@router.get("/latest", response_model=ExchangeRateResponse)
async def get_latest_exchange_rate(
    trip_id: Optional[int] = None,
    force_refresh: bool = False,
    db: Session = Depends(get_db)
):
    """Get the current ARS per USD rate.

    Args:
        trip_id: When given, the trip's fallback rate is used if no rate is available.
        force_refresh: If True, drop the cached rate and fetch a fresh one.
    """
    fallback_rate = get_trip_or_404(trip_id, db).fallback_rate if trip_id else None

    if force_refresh and not fx_service.clear_cached_rate(db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not clear cached exchange rate"
        )

    return _current_rate_response(db, fallback_rate)


@router.put("/manual", response_model=ExchangeRateResponse)
async def set_manual_rate(
    rate_data: ManualRateRequest,
    db: Session = Depends(get_db)
):
    """Override the rate. Manual rates stay until cleared."""
    entry = fx_service.set_manual_rate(db, rate_data.rate)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not store exchange rate"
        )
    return ExchangeRateResponse(**fx_service.describe_rate(db))


@router.delete("/cache")
async def clear_cached_rate(db: Session = Depends(get_db)):
    """Forget the cached rate so the next read fetches a new one."""
    if not fx_service.clear_cached_rate(db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not clear cached exchange rate"
        )
    return {"message": "Exchange rate cache cleared"}


@router.get("/convert", response_model=ConversionResponse)
async def convert(
    amount: Decimal,
    from_currency: Currency = Currency.ARS,
    to_currency: Currency = Currency.USD,
    rate: Optional[Decimal] = None,
    trip_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """Convert an amount with the given rate, or the current one."""
    if rate is None:
        fallback_rate = get_trip_or_404(trip_id, db).fallback_rate if trip_id else None
        rate = fx_service.get_dolar_blue_rate(db, fallback_rate=fallback_rate)

    converted = fx_service.normalize(amount, rate, from_currency, to_currency)
    return ConversionResponse(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        rate=rate,
        converted=converted,
        display=format_currency(converted, to_currency)
    )
