"""
Currency and exchange rate cache models.
"""
from sqlalchemy import Column, String, DateTime, Numeric, Enum as SQLEnum
from app.db.base import BaseModel
import enum


class Currency(str, enum.Enum):
    """Supported currencies. USD is the reporting currency."""
    USD = "USD"
    ARS = "ARS"


class RateSource(str, enum.Enum):
    """Where a cached rate came from."""
    API = "api"
    MANUAL = "manual"


class ExchangeRateCache(BaseModel):
    """Key-value cache entry for the ARS per USD rate."""
    __tablename__ = "exchange_rate_cache"
    
    cache_key = Column(String(100), unique=True, nullable=False, index=True)
    rate = Column(Numeric(15, 6), nullable=False)  # ARS needed to buy 1 USD
    source = Column(SQLEnum(RateSource), nullable=False)
    fetched_at = Column(DateTime, nullable=False)
