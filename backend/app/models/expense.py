"""
Expense models for tracking spending.
"""
from sqlalchemy import Column, Numeric, Date, ForeignKey, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.exchange_rate import Currency
import enum


class ExpenseCategory(str, enum.Enum):
    """Expense category enumeration."""
    FLIGHTS = "flights"
    LODGING = "lodging"
    PARKS = "parks"
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    OTHER = "other"


class Expense(BaseModel):
    """Expense model representing a single cost item, paid at once or in installments."""
    __tablename__ = "expenses"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(ExpenseCategory), nullable=False, default=ExpenseCategory.OTHER)
    amount = Column(Numeric(15, 2), nullable=False)  # Total, in its own currency
    currency = Column(SQLEnum(Currency), nullable=False, default=Currency.USD)
    amount_base = Column(Numeric(15, 2), nullable=False)  # Normalized to USD at entry time
    installments_total = Column(Integer, nullable=False, default=1)  # 1 = single payment
    payer_id = Column(Integer, ForeignKey("participants.id"), nullable=True, index=True)  # Only for single payments
    notes = Column(Text, nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer = relationship("Participant", foreign_keys=[payer_id])
    installments = relationship(
        "ExpenseInstallment", back_populates="expense", cascade="all, delete-orphan",
        order_by="ExpenseInstallment.installment_number"
    )


class ExpenseInstallment(BaseModel):
    """One concrete payment toward an expense split in installments."""
    __tablename__ = "expense_installments"
    
    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)  # In the parent expense's currency
    amount_base = Column(Numeric(15, 2), nullable=False)  # Normalized to USD when registered
    payer_id = Column(Integer, ForeignKey("participants.id"), nullable=False, index=True)
    paid_on = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    
    # Relationships
    expense = relationship("Expense", back_populates="installments")
    payer = relationship("Participant", foreign_keys=[payer_id])
