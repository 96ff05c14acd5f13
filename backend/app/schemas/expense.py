"""
Pydantic schemas for Expense and installment entities.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime, date as dt_date
from decimal import Decimal
from app.models.expense import ExpenseCategory
from app.models.exchange_rate import Currency
from app.schemas.common import NonBlankStr, PositiveAmount


class ExpenseBase(BaseModel):
    """Base expense schema."""
    date: date
    description: NonBlankStr
    category: ExpenseCategory = ExpenseCategory.OTHER
    amount: PositiveAmount
    currency: Currency = Currency.USD
    installments_total: int = Field(default=1, ge=1)  # 1 = single payment
    payer_id: Optional[int] = None  # Required only for single payments
    notes: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    """Schema for expense creation."""
    pass


class ExpenseUpdate(BaseModel):
    """Schema for expense update."""
    date: Optional[dt_date] = None
    description: Optional[NonBlankStr] = None
    category: Optional[ExpenseCategory] = None
    amount: Optional[PositiveAmount] = None
    currency: Optional[Currency] = None
    installments_total: Optional[int] = Field(default=None, ge=1)
    payer_id: Optional[int] = None
    notes: Optional[str] = None


class InstallmentCreate(BaseModel):
    """Schema for registering an installment payment."""
    installment_number: int = Field(ge=1)
    amount: PositiveAmount  # In the expense's currency
    payer_id: int
    paid_on: Optional[date] = None  # Defaults to today
    notes: Optional[str] = None


class InstallmentResponse(BaseModel):
    """Schema for installment payment response."""
    id: int
    installment_number: int
    amount: Decimal
    amount_base: Decimal  # Amount in USD when registered
    payer_id: int
    paid_on: date
    notes: Optional[str] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class ExpenseInstallmentResponse(InstallmentResponse):
    """Installment payment as returned under an expense."""
    expense_id: int


class ExpenseResponse(ExpenseBase):
    """Schema for expense response with installment progress."""
    id: int
    trip_id: int
    amount_base: Decimal  # Amount in USD, locked at entry
    installments: List[ExpenseInstallmentResponse] = []
    total_paid: Decimal
    installments_paid: int
    remaining: Decimal
    progress: int  # 0-100
    paid_by: Dict[int, Decimal]  # participant id -> paid, expense currency
    paid_by_base: Dict[int, Decimal]  # participant id -> paid, USD
    created_at: datetime
    updated_at: datetime


class NextInstallmentResponse(BaseModel):
    """Schema for the suggested next installment."""
    installment_number: int
    amount: Decimal


class CategoryExpenseItem(BaseModel):
    """Schema for category expense item in summary."""
    category: ExpenseCategory
    total_amount_base: Decimal  # Total in USD
    expense_count: int
    percentage: float  # Percentage of total expenses (0-100)


class CategorySummaryResponse(BaseModel):
    """Schema for category summary response."""
    trip_id: int
    total_expenses_base: Decimal
    categories: List[CategoryExpenseItem]
