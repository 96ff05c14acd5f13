"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.schemas.expense import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseInstallmentResponse,
    InstallmentCreate, NextInstallmentResponse, CategorySummaryResponse
)
from app.services import expense_service
from app.services.expense_service import ExpenseWithProgress
from app.api.routes.trips import get_trip_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def build_expense_response(item: ExpenseWithProgress) -> ExpenseResponse:
    expense, progress = item.expense, item.progress
    return ExpenseResponse(
        id=expense.id,
        trip_id=expense.trip_id,
        date=expense.date,
        description=expense.description,
        category=expense.category,
        amount=expense.amount,
        currency=expense.currency,
        amount_base=expense.amount_base,
        installments_total=expense.installments_total,
        payer_id=expense.payer_id,
        notes=expense.notes,
        installments=[ExpenseInstallmentResponse.model_validate(i) for i in expense.installments],
        total_paid=progress.total_paid,
        installments_paid=progress.installments_paid,
        remaining=progress.remaining,
        progress=progress.progress,
        paid_by=progress.paid_by,
        paid_by_base=progress.paid_by_base,
        created_at=expense.created_at,
        updated_at=expense.updated_at
    )


def get_expense_or_404(expense_id: int, trip_id: int, db: Session):
    expense = expense_service.get_expense(expense_id, trip_id, db)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return expense


@router.get("/{trip_id}", response_model=List[ExpenseResponse])
async def get_expenses(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get all expenses of a trip with their payment progress, newest first."""
    get_trip_or_404(trip_id, db)
    return [build_expense_response(item) for item in expense_service.list_expenses_with_progress(trip_id, db)]


@router.post("/{trip_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: int,
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db)
):
    """Create a new expense. Its USD amount is locked with the current rate."""
    get_trip_or_404(trip_id, db)

    expense = expense_service.create_expense(trip_id, expense_data, db)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid expense: single payments need a payer from the trip"
        )
    logger.info(f"Created expense {expense.id} for trip {trip_id}")
    return build_expense_response(expense_service.with_progress(expense))


@router.get("/{trip_id}/category-summary", response_model=CategorySummaryResponse)
async def get_category_summary(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get expense summary by category, in USD."""
    get_trip_or_404(trip_id, db)
    summary = expense_service.summarize_by_category(expense_service.list_expenses(trip_id, db))
    return CategorySummaryResponse(trip_id=trip_id, **summary)


@router.delete("/{trip_id}/installments/{installment_id}")
async def delete_installment(
    trip_id: int,
    installment_id: int,
    db: Session = Depends(get_db)
):
    """Delete one installment payment."""
    get_trip_or_404(trip_id, db)
    if not expense_service.delete_installment(installment_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete installment"
        )
    return {"message": "Installment deleted successfully"}


@router.get("/{trip_id}/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    trip_id: int,
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Get a single expense."""
    get_trip_or_404(trip_id, db)
    expense = get_expense_or_404(expense_id, trip_id, db)
    return build_expense_response(expense_service.with_progress(expense))


@router.put("/{trip_id}/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    trip_id: int,
    expense_id: int,
    expense_data: ExpenseUpdate,
    db: Session = Depends(get_db)
):
    """Update an expense."""
    get_trip_or_404(trip_id, db)
    get_expense_or_404(expense_id, trip_id, db)

    expense = expense_service.update_expense(expense_id, trip_id, expense_data, db)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid expense: single payments need a payer from the trip"
        )
    return build_expense_response(expense_service.with_progress(expense))


@router.delete("/{trip_id}/{expense_id}")
async def delete_expense(
    trip_id: int,
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Delete an expense and its installments."""
    get_trip_or_404(trip_id, db)
    if not expense_service.delete_expense(expense_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete expense"
        )
    return {"message": "Expense deleted successfully"}


@router.post(
    "/{trip_id}/{expense_id}/installments",
    response_model=ExpenseInstallmentResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_installment(
    trip_id: int,
    expense_id: int,
    installment_data: InstallmentCreate,
    db: Session = Depends(get_db)
):
    """Register an installment payment toward an expense."""
    get_trip_or_404(trip_id, db)
    get_expense_or_404(expense_id, trip_id, db)

    installment = expense_service.add_installment(expense_id, trip_id, installment_data, db)
    if not installment:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Installment rejected: the expense must be paid in installments by a trip participant"
        )
    return installment


@router.get("/{trip_id}/{expense_id}/next-installment", response_model=NextInstallmentResponse)
async def get_next_installment(
    trip_id: int,
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Suggested number and amount for the next installment."""
    get_trip_or_404(trip_id, db)
    expense = get_expense_or_404(expense_id, trip_id, db)
    return expense_service.next_installment(expense)
