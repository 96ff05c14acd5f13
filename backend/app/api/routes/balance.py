"""
Balance routes: who paid what and who owes whom.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict
from app.db.session import get_db
from app.schemas.balance import (
    BalanceResponse, GrandTotalResponse, SettlementResponse, SpendingBreakdown, Transfer
)
from app.services.balance_service import Settlement, build_trip_balance
from app.services.trip_service import get_roster
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/balance", tags=["balance"])


def _by_name(paid_by: Dict[int, object], names: Dict[int, str]) -> dict:
    return {names.get(pid, str(pid)): amount for pid, amount in paid_by.items()}


def build_settlement_response(settlement: Settlement, names: Dict[int, str]) -> dict:
    return {
        "total": settlement.total,
        "paid_by": _by_name(settlement.paid_by, names),
        "difference": settlement.difference,
        "debtor": names.get(settlement.debtor_id) if settlement.debtor_id else None,
        "debtor_id": settlement.debtor_id,
        "transfers": [
            Transfer(
                from_participant_id=t.from_id,
                from_name=names.get(t.from_id, str(t.from_id)),
                to_participant_id=t.to_id,
                to_name=names.get(t.to_id, str(t.to_id)),
                amount=t.amount
            )
            for t in settlement.transfers
        ],
    }


@router.get("/{trip_id}", response_model=BalanceResponse)
async def get_balance(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """
    Balance of a trip.

    One settlement per currency plus a grand total with everything
    converted to USD at the rate locked when each payment was entered.
    """
    get_trip_or_404(trip_id, db)
    names = {p.id: p.name for p in get_roster(trip_id, db)}
    balance = build_trip_balance(trip_id, db)
    grand = balance.grand_total

    return BalanceResponse(
        trip_id=trip_id,
        by_currency={
            currency: SettlementResponse(**build_settlement_response(settlement, names))
            for currency, settlement in balance.by_currency.items()
        },
        grand_total=GrandTotalResponse(
            **build_settlement_response(grand.settlement, names),
            expenses=SpendingBreakdown(
                total=grand.expenses_total,
                paid_by=_by_name(grand.expenses_paid_by, names)
            ),
            plans=SpendingBreakdown(
                total=grand.plans_total,
                paid_by=_by_name(grand.plans_paid_by, names)
            ),
            plans_committed=grand.plans_committed,
            plans_paid=grand.plans_total,
            plans_remaining=grand.plans_remaining,
            plans_progress=grand.plans_progress
        )
    )
