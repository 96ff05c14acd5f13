"""
Pydantic schemas for exchange rates.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.models.exchange_rate import Currency, RateSource


class ExchangeRateResponse(BaseModel):
    """Schema for the current ARS per USD rate."""
    rate: Decimal  # ARS needed to buy 1 USD
    source: Optional[RateSource] = None  # None when the fallback rate is in use
    fetched_at: Optional[datetime] = None
    expired: bool = False


class ManualRateRequest(BaseModel):
    """Schema for a manual rate override."""
    rate: Decimal = Field(gt=0)


class ConversionResponse(BaseModel):
    """Schema for a currency conversion."""
    amount: Decimal
    from_currency: Currency
    to_currency: Currency
    rate: Decimal
    converted: Decimal
    display: str  # e.g. US$8.33 or $10,000
