"""Models package - Import all models for SQLAlchemy registration."""
from app.models.trip import Trip, Participant, TripStatus
from app.models.exchange_rate import ExchangeRateCache, Currency, RateSource
from app.models.expense import Expense, ExpenseInstallment, ExpenseCategory
from app.models.payment_plan import PaymentPlan, PlanPayment, PlanCategory
from app.models.trip_content import (
    ItineraryItem, Place, Note, Document, PlaceKind, NoteKind, DocumentCategory
)

__all__ = [
    "Trip",
    "Participant",
    "TripStatus",
    "ExchangeRateCache",
    "Currency",
    "RateSource",
    "Expense",
    "ExpenseInstallment",
    "ExpenseCategory",
    "PaymentPlan",
    "PlanPayment",
    "PlanCategory",
    "ItineraryItem",
    "Place",
    "Note",
    "Document",
    "PlaceKind",
    "NoteKind",
    "DocumentCategory",
]
