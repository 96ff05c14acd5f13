"""
Balance service: who owes whom.

compute_balance is a pure function of ledger snapshots. Each participant
should have paid an equal share; anyone below their share owes the
difference. With two participants this is |a - b| / 2 owed by whoever paid
less.
"""
from sqlalchemy.orm import Session
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from app.core.utils import round_money
from app.models.exchange_rate import Currency
from app.services.expense_service import (
    ExpenseContributions, collect_expense_contributions, list_expenses
)
from app.services.fx_service import BASE_CURRENCY
from app.services.payment_plan_service import PlanSummary, list_plans_with_progress, summarize_plans
from app.services.trip_service import get_roster

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Transfer:
    """Represents a single transfer between participants."""
    from_id: int
    to_id: int
    amount: Decimal


@dataclass
class Settlement:
    """Totals and the transfers that square them."""
    total: Decimal
    paid_by: Dict[int, Decimal]
    difference: Decimal  # Largest amount a single participant owes
    debtor_id: Optional[int]  # Who owes it; None when everyone is square
    transfers: List[Transfer] = field(default_factory=list)


@dataclass
class GrandTotal:
    """All money normalized to USD, expenses and plans added together."""
    settlement: Settlement
    expenses_total: Decimal
    expenses_paid_by: Dict[int, Decimal]
    plans_total: Decimal
    plans_paid_by: Dict[int, Decimal]
    plans_committed: Decimal
    plans_remaining: Decimal
    plans_progress: int


@dataclass
class TripBalance:
    """Per-currency settlements plus the flattened USD view."""
    by_currency: Dict[Currency, Settlement]
    grand_total: GrandTotal


def minimize_transfers(balances: Sequence[Tuple[int, Decimal]]) -> List[Transfer]:
    """
    Minimize the number of transfers needed to settle debts.
    Uses a greedy algorithm.
    """
    # Separate creditors (positive balance) and debtors (negative balance)
    creditors = [[pid, bal] for pid, bal in balances if bal >= CENT]
    debtors = [[pid, -bal] for pid, bal in balances if bal <= -CENT]

    # Largest first; sort is stable so roster order breaks ties
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor = creditors[cred_idx]
        debtor = debtors[debt_idx]

        # Transfer the minimum of what's owed and what's needed
        amount = min(creditor[1], debtor[1])
        if amount >= CENT:
            transfers.append(Transfer(debtor[0], creditor[0], round_money(amount, 2)))

        creditor[1] -= amount
        debtor[1] -= amount

        if creditor[1] < CENT:
            cred_idx += 1
        if debtor[1] < CENT:
            debt_idx += 1

    return transfers


def settle(participant_ids: Sequence[int], paid_by: Dict[int, Decimal]) -> Settlement:
    """
    Settle one pool of money between the roster.

    Each participant's fair share is total / N. The debtor is the participant
    furthest below their share; for a two-person roster that is whoever paid
    less, and the difference is half the gap between them.
    """
    ids = list(participant_ids)
    ids.extend(pid for pid in paid_by if pid not in ids)

    paid = {pid: round_money(paid_by.get(pid, Decimal(0)), 2) for pid in ids}
    total = sum(paid.values(), Decimal(0))

    if not ids:
        return Settlement(total=total, paid_by=paid, difference=Decimal("0.00"), debtor_id=None)

    share = total / len(ids)
    net = [(pid, round_money(paid[pid] - share, 2)) for pid in ids]

    debtor_id = None
    difference = Decimal("0.00")
    for pid, balance in net:
        if -balance > difference:
            debtor_id = pid
            difference = -balance

    return Settlement(
        total=total,
        paid_by=paid,
        difference=difference,
        debtor_id=debtor_id,
        transfers=minimize_transfers(net),
    )


def compute_balance(
    participant_ids: Sequence[int],
    contributions: ExpenseContributions,
    plan_summary: PlanSummary
) -> TripBalance:
    """
    Combine the expense ledger and the payment plan ledger into one balance.

    Per currency, expense payments count in the currency they were made in and
    plan payments count only toward USD. The grand total adds everything in
    USD regardless of original currency.
    """
    by_currency = {}
    for currency in Currency:
        pool = dict(contributions.by_currency.get(currency, {}))
        if currency == BASE_CURRENCY:
            for pid, amount in plan_summary.paid_by.items():
                pool[pid] = pool.get(pid, Decimal(0)) + amount
        by_currency[currency] = settle(participant_ids, pool)

    combined = dict(contributions.by_participant_base)
    for pid, amount in plan_summary.paid_by.items():
        combined[pid] = combined.get(pid, Decimal(0)) + amount

    grand_total = GrandTotal(
        settlement=settle(participant_ids, combined),
        expenses_total=round_money(contributions.total_base, 2),
        expenses_paid_by={pid: round_money(v, 2) for pid, v in contributions.by_participant_base.items()},
        plans_total=round_money(plan_summary.total_paid, 2),
        plans_paid_by={pid: round_money(v, 2) for pid, v in plan_summary.paid_by.items()},
        plans_committed=round_money(plan_summary.total_committed, 2),
        plans_remaining=round_money(plan_summary.total_remaining, 2),
        plans_progress=plan_summary.progress,
    )

    return TripBalance(by_currency=by_currency, grand_total=grand_total)


def build_trip_balance(trip_id: int, db: Session) -> TripBalance:
    """Load the current ledgers of a trip and compute its balance."""
    participant_ids = [p.id for p in get_roster(trip_id, db)]
    contributions = collect_expense_contributions(list_expenses(trip_id, db))
    plan_summary = summarize_plans(list_plans_with_progress(trip_id, db))
    return compute_balance(participant_ids, contributions, plan_summary)
