"""
Expense service: the expense ledger and its installment payments.

Every function takes the trip id and session explicitly. Store failures are
logged and reported as None/False, never raised to the caller.
"""
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
import logging
from app.core.utils import Number
from app.models.expense import Expense, ExpenseInstallment
from app.models.exchange_rate import Currency
from app.schemas.expense import ExpenseCreate, ExpenseUpdate, InstallmentCreate
from app.services.fx_service import amount_in_base
from app.services.installments import (
    InstallmentPayment, ObligationProgress, summarize_obligation, suggest_next_installment
)
from app.services.trip_service import is_participant

logger = logging.getLogger(__name__)


@dataclass
class ExpenseWithProgress:
    """An expense joined with its computed installment figures."""
    expense: Expense
    progress: ObligationProgress


@dataclass
class ExpenseContributions:
    """
    What each participant paid through the expense ledger.

    by_currency keeps one independent total per currency, never mixed.
    by_participant_base is the same money normalized to USD.
    """
    by_currency: Dict[Currency, Dict[int, Decimal]] = field(
        default_factory=lambda: {currency: {} for currency in Currency}
    )
    by_participant_base: Dict[int, Decimal] = field(default_factory=dict)

    @property
    def total_base(self) -> Decimal:
        return sum(self.by_participant_base.values(), Decimal(0))


def is_valid_expense(description: Optional[str], amount: Optional[Number]) -> bool:
    """Description must be non-blank and amount > 0."""
    if not description or not description.strip():
        return False
    return amount is not None and Decimal(str(amount)) > 0


def expense_payments(expense: Expense) -> List[InstallmentPayment]:
    """
    Payments that count toward an expense.

    A single-payment expense is one payment of the whole amount by its payer.
    An installment expense counts only its registered installments; the
    expense-level payer is ignored.
    """
    if expense.installments_total <= 1:
        if expense.payer_id is None:
            return []
        return [InstallmentPayment(
            payer_id=expense.payer_id,
            amount=expense.amount,
            amount_base=expense.amount_base,
        )]

    return [
        InstallmentPayment(payer_id=i.payer_id, amount=i.amount, amount_base=i.amount_base)
        for i in expense.installments
    ]


def with_progress(expense: Expense) -> ExpenseWithProgress:
    return ExpenseWithProgress(
        expense=expense,
        progress=summarize_obligation(expense.amount, expense_payments(expense)),
    )


def _trip_expense_query(trip_id: int, db: Session):
    return db.query(Expense).options(selectinload(Expense.installments)).filter(
        Expense.trip_id == trip_id
    )


def get_expense(expense_id: int, trip_id: int, db: Session) -> Optional[Expense]:
    return _trip_expense_query(trip_id, db).filter(Expense.id == expense_id).first()


def list_expenses(trip_id: int, db: Session) -> List[Expense]:
    """Expenses of a trip, newest first."""
    try:
        return _trip_expense_query(trip_id, db).order_by(
            Expense.date.desc(), Expense.id.desc()
        ).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching expenses for trip {trip_id}: {e}")
        return []


def list_expenses_with_progress(trip_id: int, db: Session) -> List[ExpenseWithProgress]:
    """Expenses with paid / remaining / progress computed from their installments."""
    return [with_progress(expense) for expense in list_expenses(trip_id, db)]


def create_expense(
    trip_id: int,
    data: ExpenseCreate,
    db: Session,
    rate: Optional[Number] = None
) -> Optional[Expense]:
    """
    Create an expense.

    The USD amount is computed with the rate current at submission and is not
    recomputed if the rate later changes. Expenses with more than one
    installment never store a payer; single payments must name one.
    """
    if not is_valid_expense(data.description, data.amount):
        logger.warning(f"Rejected invalid expense for trip {trip_id}")
        return None

    payer_id = data.payer_id if data.installments_total == 1 else None
    if data.installments_total == 1 and not is_participant(trip_id, payer_id, db):
        logger.warning(f"Rejected single-payment expense without a valid payer for trip {trip_id}")
        return None

    try:
        expense = Expense(
            trip_id=trip_id,
            date=data.date,
            description=data.description.strip(),
            category=data.category,
            amount=data.amount,
            currency=data.currency,
            amount_base=amount_in_base(trip_id, data.amount, data.currency, db, rate),
            installments_total=data.installments_total,
            payer_id=payer_id,
            notes=data.notes,
        )
        db.add(expense)
        db.commit()
        db.refresh(expense)
        return expense
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating expense for trip {trip_id}: {e}")
        return None


def update_expense(
    expense_id: int,
    trip_id: int,
    data: ExpenseUpdate,
    db: Session,
    rate: Optional[Number] = None
) -> Optional[Expense]:
    """Edit an expense. The USD amount is recomputed only when amount or currency change."""
    expense = get_expense(expense_id, trip_id, db)
    if not expense:
        return None

    updates = data.model_dump(exclude_unset=True)
    description = updates.get("description", expense.description)
    amount = updates.get("amount", expense.amount)
    if not is_valid_expense(description, amount):
        logger.warning(f"Rejected invalid update for expense {expense_id}")
        return None

    installments_total = updates.get("installments_total") or expense.installments_total
    if installments_total > 1:
        updates["payer_id"] = None
    elif not is_participant(trip_id, updates.get("payer_id", expense.payer_id), db):
        logger.warning(f"Rejected single-payment expense {expense_id} without a valid payer")
        return None

    try:
        if "amount" in updates or "currency" in updates:
            currency = updates.get("currency") or expense.currency
            expense.amount_base = amount_in_base(trip_id, amount, currency, db, rate)

        for key, value in updates.items():
            if key == "description":
                value = value.strip()
            if value is None and key in ("date", "category", "amount", "currency", "installments_total"):
                continue
            setattr(expense, key, value)

        db.commit()
        db.refresh(expense)
        return expense
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating expense {expense_id}: {e}")
        return None


def delete_expense(expense_id: int, trip_id: int, db: Session) -> bool:
    """Delete an expense and its installments. A missing expense counts as deleted."""
    try:
        expense = db.query(Expense).filter(
            Expense.id == expense_id,
            Expense.trip_id == trip_id
        ).first()
        if not expense:
            return True
        db.delete(expense)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting expense {expense_id}: {e}")
        return False


def add_installment(
    expense_id: int,
    trip_id: int,
    data: InstallmentCreate,
    db: Session,
    rate: Optional[Number] = None
) -> Optional[ExpenseInstallment]:
    """
    Register one payment toward an installment expense.

    Cumulative payments may exceed the expense total; the surplus is absorbed
    by the progress computation.
    """
    if data.amount is None or data.amount <= 0:
        logger.warning(f"Rejected non-positive installment for expense {expense_id}")
        return None

    expense = get_expense(expense_id, trip_id, db)
    if not expense:
        return None
    if expense.installments_total <= 1:
        logger.warning(f"Expense {expense_id} is a single payment, installment rejected")
        return None
    if not is_participant(trip_id, data.payer_id, db):
        logger.warning(f"Rejected installment with unknown payer {data.payer_id}")
        return None

    try:
        installment = ExpenseInstallment(
            expense_id=expense.id,
            installment_number=data.installment_number,
            amount=data.amount,
            amount_base=amount_in_base(trip_id, data.amount, expense.currency, db, rate),
            payer_id=data.payer_id,
            paid_on=data.paid_on or date.today(),
            notes=data.notes,
        )
        db.add(installment)
        db.commit()
        db.refresh(installment)
        return installment
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding installment to expense {expense_id}: {e}")
        return None


def delete_installment(installment_id: int, trip_id: int, db: Session) -> bool:
    """Delete one installment payment. The parent expense is kept."""
    try:
        installment = db.query(ExpenseInstallment).join(
            Expense, ExpenseInstallment.expense_id == Expense.id
        ).filter(
            ExpenseInstallment.id == installment_id,
            Expense.trip_id == trip_id
        ).first()
        if not installment:
            return True
        db.delete(installment)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting installment {installment_id}: {e}")
        return False


def next_installment(expense: Expense) -> dict:
    """Suggested number and amount for the next installment."""
    return suggest_next_installment(
        expense.amount, expense.installments_total, len(expense.installments)
    )


def collect_expense_contributions(expenses: Iterable[Expense]) -> ExpenseContributions:
    """
    Attribute every paid amount to the participant who paid it.

    Single payments attribute the whole amount to the payer; installment
    expenses attribute each installment to its own payer. Amounts stay in the
    expense's currency, so a participant can be ahead in one currency and
    behind in the other.
    """
    contributions = ExpenseContributions()

    for expense in expenses:
        per_currency = contributions.by_currency[Currency(expense.currency)]
        for payment in expense_payments(expense):
            per_currency[payment.payer_id] = (
                per_currency.get(payment.payer_id, Decimal(0)) + Decimal(payment.amount)
            )
            contributions.by_participant_base[payment.payer_id] = (
                contributions.by_participant_base.get(payment.payer_id, Decimal(0))
                + Decimal(payment.amount_base)
            )

    return contributions


def summarize_by_category(expenses: Iterable[Expense]) -> dict:
    """USD totals per category, largest first."""
    totals: Dict = {}
    counts: Dict = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal(0)) + Decimal(expense.amount_base)
        counts[expense.category] = counts.get(expense.category, 0) + 1

    grand_total = sum(totals.values(), Decimal(0))
    categories = [
        {
            "category": category,
            "total_amount_base": total,
            "expense_count": counts[category],
            "percentage": float(total / grand_total * 100) if grand_total > 0 else 0.0,
        }
        for category, total in totals.items()
    ]
    categories.sort(key=lambda item: item["total_amount_base"], reverse=True)

    return {
        "total_expenses_base": grand_total,
        "categories": categories,
    }
