"""
Payment plan models for prepaid, committed obligations.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.exchange_rate import Currency
import enum


class PlanCategory(str, enum.Enum):
    """Payment plan category enumeration."""
    HOTEL = "hotel"
    FLIGHTS = "flights"
    PARKS = "parks"
    TRANSPORT = "transport"
    INSURANCE = "insurance"
    OTHER = "other"


class PaymentPlan(BaseModel):
    """A pre-committed obligation paid off in installments."""
    __tablename__ = "payment_plans"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(SQLEnum(PlanCategory), nullable=False, default=PlanCategory.OTHER)
    currency = Column(SQLEnum(Currency), nullable=False, default=Currency.USD)
    total_amount = Column(Numeric(15, 2), nullable=False)
    total_amount_base = Column(Numeric(15, 2), nullable=False)  # Normalized to USD at entry time
    installments_total = Column(Integer, nullable=False, default=1)
    start_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="payment_plans")
    payments = relationship(
        "PlanPayment", back_populates="plan", cascade="all, delete-orphan",
        order_by="PlanPayment.installment_number"
    )


class PlanPayment(BaseModel):
    """One payment toward a payment plan."""
    __tablename__ = "plan_payments"
    
    plan_id = Column(Integer, ForeignKey("payment_plans.id"), nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)  # In the plan's currency
    amount_base = Column(Numeric(15, 2), nullable=False)  # Normalized to USD when registered
    payer_id = Column(Integer, ForeignKey("participants.id"), nullable=False, index=True)
    paid_on = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    
    # Relationships
    plan = relationship("PaymentPlan", back_populates="payments")
    payer = relationship("Participant", foreign_keys=[payer_id])
