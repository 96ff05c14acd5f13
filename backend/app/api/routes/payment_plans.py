"""
Payment plan routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.schemas.expense import NextInstallmentResponse
from app.schemas.payment_plan import (
    PaymentPlanCreate, PaymentPlanUpdate, PaymentPlanResponse,
    PlanPaymentCreate, PlanPaymentResponse, PlanSummaryResponse
)
from app.services import payment_plan_service
from app.services.payment_plan_service import PlanWithProgress
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/payment-plans", tags=["payment-plans"])


def build_plan_response(item: PlanWithProgress) -> PaymentPlanResponse:
    plan, progress = item.plan, item.progress
    return PaymentPlanResponse(
        id=plan.id,
        trip_id=plan.trip_id,
        name=plan.name,
        description=plan.description,
        category=plan.category,
        currency=plan.currency,
        total_amount=plan.total_amount,
        total_amount_base=plan.total_amount_base,
        installments_total=plan.installments_total,
        start_date=plan.start_date,
        notes=plan.notes,
        payments=[PlanPaymentResponse.model_validate(p) for p in plan.payments],
        total_paid=progress.total_paid,
        installments_paid=progress.installments_paid,
        remaining=progress.remaining,
        progress=progress.progress,
        paid_by=progress.paid_by,
        paid_by_base=progress.paid_by_base,
        created_at=plan.created_at,
        updated_at=plan.updated_at
    )


def get_plan_or_404(plan_id: int, trip_id: int, db: Session):
    plan = payment_plan_service.get_plan(plan_id, trip_id, db)
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment plan not found"
        )
    return plan


@router.get("/{trip_id}", response_model=List[PaymentPlanResponse])
async def get_plans(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get all payment plans of a trip with their progress."""
    get_trip_or_404(trip_id, db)
    return [build_plan_response(item) for item in payment_plan_service.list_plans_with_progress(trip_id, db)]


@router.post("/{trip_id}", response_model=PaymentPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    trip_id: int,
    plan_data: PaymentPlanCreate,
    db: Session = Depends(get_db)
):
    """Create a new payment plan."""
    get_trip_or_404(trip_id, db)

    plan = payment_plan_service.create_plan(trip_id, plan_data, db)
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not create payment plan"
        )
    return build_plan_response(payment_plan_service.with_progress(plan))


@router.get("/{trip_id}/summary", response_model=PlanSummaryResponse)
async def get_plans_summary(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Totals across all plans, in USD."""
    get_trip_or_404(trip_id, db)
    summary = payment_plan_service.summarize_plans(payment_plan_service.list_plans_with_progress(trip_id, db))
    return PlanSummaryResponse(
        plan_count=summary.plan_count,
        total_committed=summary.total_committed,
        total_paid=summary.total_paid,
        total_remaining=summary.total_remaining,
        progress=summary.progress,
        paid_by=summary.paid_by
    )


@router.delete("/{trip_id}/payments/{payment_id}")
async def delete_plan_payment(
    trip_id: int,
    payment_id: int,
    db: Session = Depends(get_db)
):
    """Delete one plan payment."""
    get_trip_or_404(trip_id, db)
    if not payment_plan_service.delete_plan_payment(payment_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete payment"
        )
    return {"message": "Payment deleted successfully"}


@router.get("/{trip_id}/{plan_id}", response_model=PaymentPlanResponse)
async def get_plan(
    trip_id: int,
    plan_id: int,
    db: Session = Depends(get_db)
):
    """Get a single payment plan."""
    get_trip_or_404(trip_id, db)
    plan = get_plan_or_404(plan_id, trip_id, db)
    return build_plan_response(payment_plan_service.with_progress(plan))


@router.put("/{trip_id}/{plan_id}", response_model=PaymentPlanResponse)
async def update_plan(
    trip_id: int,
    plan_id: int,
    plan_data: PaymentPlanUpdate,
    db: Session = Depends(get_db)
):
    """Update a payment plan."""
    get_trip_or_404(trip_id, db)
    get_plan_or_404(plan_id, trip_id, db)

    plan = payment_plan_service.update_plan(plan_id, trip_id, plan_data, db)
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update payment plan"
        )
    return build_plan_response(payment_plan_service.with_progress(plan))


@router.delete("/{trip_id}/{plan_id}")
async def delete_plan(
    trip_id: int,
    plan_id: int,
    db: Session = Depends(get_db)
):
    """Delete a payment plan and its payments."""
    get_trip_or_404(trip_id, db)
    if not payment_plan_service.delete_plan(plan_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete payment plan"
        )
    return {"message": "Payment plan deleted successfully"}


@router.post("/{trip_id}/{plan_id}/payments", response_model=PlanPaymentResponse, status_code=status.HTTP_201_CREATED)
async def add_plan_payment(
    trip_id: int,
    plan_id: int,
    payment_data: PlanPaymentCreate,
    db: Session = Depends(get_db)
):
    """Register a payment toward a plan."""
    get_trip_or_404(trip_id, db)
    get_plan_or_404(plan_id, trip_id, db)

    payment = payment_plan_service.add_plan_payment(plan_id, trip_id, payment_data, db)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payment rejected: the payer must be a trip participant"
        )
    return payment


@router.get("/{trip_id}/{plan_id}/next-payment", response_model=NextInstallmentResponse)
async def get_next_payment(
    trip_id: int,
    plan_id: int,
    db: Session = Depends(get_db)
):
    """Suggested number and amount for the next plan payment."""
    get_trip_or_404(trip_id, db)
    plan = get_plan_or_404(plan_id, trip_id, db)
    return payment_plan_service.next_payment(plan)
