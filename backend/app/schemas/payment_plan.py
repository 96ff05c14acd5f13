"""
Pydantic schemas for PaymentPlan and PlanPayment entities.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.payment_plan import PlanCategory
from app.models.exchange_rate import Currency
from app.schemas.common import NonBlankStr, PositiveAmount
from app.schemas.expense import InstallmentCreate, InstallmentResponse


class PaymentPlanBase(BaseModel):
    """Base payment plan schema."""
    name: NonBlankStr
    description: Optional[str] = None
    category: PlanCategory = PlanCategory.OTHER
    currency: Currency = Currency.USD
    total_amount: PositiveAmount
    installments_total: int = Field(default=1, ge=1)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class PaymentPlanCreate(PaymentPlanBase):
    """Schema for payment plan creation."""
    pass


class PaymentPlanUpdate(BaseModel):
    """Schema for payment plan update."""
    name: Optional[NonBlankStr] = None
    description: Optional[str] = None
    category: Optional[PlanCategory] = None
    currency: Optional[Currency] = None
    total_amount: Optional[PositiveAmount] = None
    installments_total: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[date] = None
    notes: Optional[str] = None


class PlanPaymentCreate(InstallmentCreate):
    """Schema for registering a plan payment."""
    pass


class PlanPaymentResponse(InstallmentResponse):
    """Schema for plan payment response."""
    plan_id: int


class PaymentPlanResponse(PaymentPlanBase):
    """Schema for payment plan response with progress."""
    id: int
    trip_id: int
    total_amount_base: Decimal
    payments: List[PlanPaymentResponse] = []
    total_paid: Decimal
    installments_paid: int
    remaining: Decimal
    progress: int  # 0-100
    paid_by: Dict[int, Decimal]
    paid_by_base: Dict[int, Decimal]
    created_at: datetime
    updated_at: datetime


class PlanSummaryResponse(BaseModel):
    """Schema for the summary across all plans, in USD."""
    plan_count: int
    total_committed: Decimal
    total_paid: Decimal
    total_remaining: Decimal
    progress: int  # Not capped
    paid_by: Dict[int, Decimal]
