"""
Pydantic schemas for balances.
"""
from pydantic import BaseModel
from typing import Dict, List, Optional
from decimal import Decimal
from app.models.exchange_rate import Currency


class Transfer(BaseModel):
    """Schema for a single transfer in settlement."""
    from_participant_id: int
    from_name: str
    to_participant_id: int
    to_name: str
    amount: Decimal


class SettlementResponse(BaseModel):
    """Who paid what in one pool of money, and who owes whom."""
    total: Decimal
    paid_by: Dict[str, Decimal]  # participant name -> amount paid
    difference: Decimal
    debtor: Optional[str] = None
    debtor_id: Optional[int] = None
    transfers: List[Transfer] = []


class SpendingBreakdown(BaseModel):
    total: Decimal
    paid_by: Dict[str, Decimal]


class GrandTotalResponse(SettlementResponse):
    """Everything in USD: expenses and plan payments together."""
    expenses: SpendingBreakdown
    plans: SpendingBreakdown
    plans_committed: Decimal
    plans_paid: Decimal
    plans_remaining: Decimal
    plans_progress: int


class BalanceResponse(BaseModel):
    """Schema for the trip balance."""
    trip_id: int
    by_currency: Dict[Currency, SettlementResponse]
    grand_total: GrandTotalResponse
