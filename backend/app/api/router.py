"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import (
    trips, expenses, payment_plans, balance, fx_rates,
    itinerary, places, notes, documents
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(trips.router)
api_router.include_router(expenses.router)
api_router.include_router(payment_plans.router)
api_router.include_router(balance.router)
api_router.include_router(fx_rates.router)
api_router.include_router(itinerary.router)
api_router.include_router(places.router)
api_router.include_router(notes.router)
api_router.include_router(documents.router)
