"""
Installment accounting shared by expenses and payment plans.

An obligation is a total amount paid off by any number of payments, each
attributed to exactly one participant.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Optional
from app.core.utils import Number, round_money, round_percent, to_decimal


@dataclass
class InstallmentPayment:
    """A payment toward an obligation."""
    payer_id: int
    amount: Decimal  # In the obligation's currency
    amount_base: Decimal  # Normalized when the payment was registered


@dataclass
class ObligationProgress:
    """Computed paid/remaining/progress for one obligation."""
    total: Decimal
    total_paid: Decimal
    installments_paid: int
    remaining: Decimal
    progress: int  # 0-100 when capped
    paid_by: Dict[int, Decimal] = field(default_factory=dict)
    paid_by_base: Dict[int, Decimal] = field(default_factory=dict)


def percent(part: Number, whole: Number, cap: Optional[int] = None) -> int:
    """part / whole as a rounded percentage; 0 when whole <= 0."""
    whole = to_decimal(whole)
    if whole <= 0:
        return 0
    value = round_percent(to_decimal(part) * 100 / whole)
    if cap is not None:
        value = min(cap, value)
    return value


def summarize_obligation(
    total: Number,
    payments: Iterable[InstallmentPayment],
    cap_progress: bool = True
) -> ObligationProgress:
    """
    Sum payments against a total.

    Overpayment is absorbed: remaining never goes below zero and, when
    cap_progress is set, progress never exceeds 100.
    """
    total = to_decimal(total)
    total_paid = Decimal(0)
    count = 0
    paid_by: Dict[int, Decimal] = {}
    paid_by_base: Dict[int, Decimal] = {}

    for payment in payments:
        amount = to_decimal(payment.amount)
        total_paid += amount
        count += 1
        paid_by[payment.payer_id] = paid_by.get(payment.payer_id, Decimal(0)) + amount
        paid_by_base[payment.payer_id] = (
            paid_by_base.get(payment.payer_id, Decimal(0)) + to_decimal(payment.amount_base)
        )

    return ObligationProgress(
        total=total,
        total_paid=total_paid,
        installments_paid=count,
        remaining=max(Decimal(0), total - total_paid),
        progress=percent(total_paid, total, cap=100 if cap_progress else None),
        paid_by=paid_by,
        paid_by_base=paid_by_base,
    )


def suggest_next_installment(total: Number, installments_total: int, installments_paid: int) -> dict:
    """Next installment number and an even share of the total."""
    amount = Decimal(0)
    if installments_total and installments_total > 0:
        amount = round_money(to_decimal(total) / installments_total, 2)
    return {
        "installment_number": installments_paid + 1,
        "amount": amount,
    }
