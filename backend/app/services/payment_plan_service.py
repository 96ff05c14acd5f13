"""
Payment plan service: prepaid obligations and their payments.
"""
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
import logging
from app.core.utils import Number
from app.models.payment_plan import PaymentPlan, PlanPayment
from app.schemas.payment_plan import PaymentPlanCreate, PaymentPlanUpdate, PlanPaymentCreate
from app.services.fx_service import amount_in_base
from app.services.installments import (
    InstallmentPayment, ObligationProgress, percent, summarize_obligation, suggest_next_installment
)
from app.services.trip_service import is_participant

logger = logging.getLogger(__name__)


@dataclass
class PlanWithProgress:
    """A plan joined with its computed payment figures."""
    plan: PaymentPlan
    progress: ObligationProgress  # In the plan's currency
    remaining_base: Decimal  # In USD


@dataclass
class PlanSummary:
    """Totals across all plans of a trip, in USD."""
    plan_count: int = 0
    total_committed: Decimal = Decimal(0)
    total_paid: Decimal = Decimal(0)
    total_remaining: Decimal = Decimal(0)
    progress: int = 0
    paid_by: Dict[int, Decimal] = field(default_factory=dict)


def plan_payments(plan: PaymentPlan) -> List[InstallmentPayment]:
    """A plan never has a single payer; only its registered payments count."""
    return [
        InstallmentPayment(payer_id=p.payer_id, amount=p.amount, amount_base=p.amount_base)
        for p in plan.payments
    ]


def with_progress(plan: PaymentPlan) -> PlanWithProgress:
    progress = summarize_obligation(plan.total_amount, plan_payments(plan))
    paid_base = sum(progress.paid_by_base.values(), Decimal(0))
    return PlanWithProgress(
        plan=plan,
        progress=progress,
        remaining_base=max(Decimal(0), Decimal(plan.total_amount_base) - paid_base),
    )


def _trip_plan_query(trip_id: int, db: Session):
    return db.query(PaymentPlan).options(selectinload(PaymentPlan.payments)).filter(
        PaymentPlan.trip_id == trip_id
    )


def get_plan(plan_id: int, trip_id: int, db: Session) -> Optional[PaymentPlan]:
    return _trip_plan_query(trip_id, db).filter(PaymentPlan.id == plan_id).first()


def list_plans(trip_id: int, db: Session) -> List[PaymentPlan]:
    """Plans of a trip, newest first."""
    try:
        return _trip_plan_query(trip_id, db).order_by(
            PaymentPlan.created_at.desc(), PaymentPlan.id.desc()
        ).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching payment plans for trip {trip_id}: {e}")
        return []


def list_plans_with_progress(trip_id: int, db: Session) -> List[PlanWithProgress]:
    return [with_progress(plan) for plan in list_plans(trip_id, db)]


def summarize_plans(plans: Iterable[PlanWithProgress]) -> PlanSummary:
    """
    Aggregate plans in USD.

    Overall progress is rounded but not capped at 100, unlike the per-plan
    progress.
    """
    summary = PlanSummary()
    for item in plans:
        summary.plan_count += 1
        summary.total_committed += Decimal(item.plan.total_amount_base)
        summary.total_remaining += item.remaining_base
        for payer_id, amount in item.progress.paid_by_base.items():
            summary.paid_by[payer_id] = summary.paid_by.get(payer_id, Decimal(0)) + amount
            summary.total_paid += amount

    summary.progress = percent(summary.total_paid, summary.total_committed)
    return summary


def create_plan(
    trip_id: int,
    data: PaymentPlanCreate,
    db: Session,
    rate: Optional[Number] = None
) -> Optional[PaymentPlan]:
    if not data.name or not data.name.strip() or data.total_amount <= 0:
        logger.warning(f"Rejected invalid payment plan for trip {trip_id}")
        return None

    try:
        plan = PaymentPlan(
            trip_id=trip_id,
            name=data.name.strip(),
            description=data.description,
            category=data.category,
            currency=data.currency,
            total_amount=data.total_amount,
            total_amount_base=amount_in_base(trip_id, data.total_amount, data.currency, db, rate),
            installments_total=data.installments_total,
            start_date=data.start_date,
            notes=data.notes,
        )
        db.add(plan)
        db.commit()
        db.refresh(plan)
        return plan
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating payment plan for trip {trip_id}: {e}")
        return None


def update_plan(
    plan_id: int,
    trip_id: int,
    data: PaymentPlanUpdate,
    db: Session,
    rate: Optional[Number] = None
) -> Optional[PaymentPlan]:
    plan = get_plan(plan_id, trip_id, db)
    if not plan:
        return None

    updates = {key: value for key, value in data.model_dump(exclude_unset=True).items()
               if value is not None or key in ("description", "start_date", "notes")}

    try:
        if "total_amount" in updates or "currency" in updates:
            plan.total_amount_base = amount_in_base(
                trip_id,
                updates.get("total_amount", plan.total_amount),
                updates.get("currency", plan.currency),
                db,
                rate,
            )
        for key, value in updates.items():
            setattr(plan, key, value.strip() if key == "name" else value)
        db.commit()
        db.refresh(plan)
        return plan
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating payment plan {plan_id}: {e}")
        return None


def delete_plan(plan_id: int, trip_id: int, db: Session) -> bool:
    """Delete a plan and all its payments. A missing plan counts as deleted."""
    try:
        plan = db.query(PaymentPlan).filter(
            PaymentPlan.id == plan_id,
            PaymentPlan.trip_id == trip_id
        ).first()
        if not plan:
            return True
        db.delete(plan)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting payment plan {plan_id}: {e}")
        return False


def add_plan_payment(
    plan_id: int,
    trip_id: int,
    data: PlanPaymentCreate,
    db: Session,
    rate: Optional[Number] = None
) -> Optional[PlanPayment]:
    """Register a payment toward a plan. Overpayment is allowed."""
    if data.amount is None or data.amount <= 0:
        logger.warning(f"Rejected non-positive payment for plan {plan_id}")
        return None

    plan = get_plan(plan_id, trip_id, db)
    if not plan:
        return None
    if not is_participant(trip_id, data.payer_id, db):
        logger.warning(f"Rejected plan payment with unknown payer {data.payer_id}")
        return None

    try:
        payment = PlanPayment(
            plan_id=plan.id,
            installment_number=data.installment_number,
            amount=data.amount,
            amount_base=amount_in_base(trip_id, data.amount, plan.currency, db, rate),
            payer_id=data.payer_id,
            paid_on=data.paid_on or date.today(),
            notes=data.notes,
        )
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding payment to plan {plan_id}: {e}")
        return None


def delete_plan_payment(payment_id: int, trip_id: int, db: Session) -> bool:
    try:
        payment = db.query(PlanPayment).join(
            PaymentPlan, PlanPayment.plan_id == PaymentPlan.id
        ).filter(
            PlanPayment.id == payment_id,
            PaymentPlan.trip_id == trip_id
        ).first()
        if not payment:
            return True
        db.delete(payment)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting plan payment {payment_id}: {e}")
        return False


def next_payment(plan: PaymentPlan) -> dict:
    """Suggested number and amount for the next plan payment."""
    return suggest_next_installment(plan.total_amount, plan.installments_total, len(plan.payments))
