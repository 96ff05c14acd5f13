"""
Quick stats for the trip home screen.
"""
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from app.models.trip import Trip
from app.services.balance_service import build_trip_balance
from app.services.trip_content_service import (
    count_visited, list_documents, list_itinerary, list_notes, list_places
)
from app.services.trip_service import get_countdown, get_roster


def quick_stats(trip: Trip, db: Session, today: Optional[date] = None) -> dict:
    """Countdown, USD grand total and content counts in one call."""
    names = {p.id: p.name for p in get_roster(trip.id, db)}
    grand_total = build_trip_balance(trip.id, db).grand_total
    settlement = grand_total.settlement
    places = count_visited(list_places(trip.id, db))

    return {
        "trip_id": trip.id,
        "countdown": get_countdown(trip, today),
        "total_spent_base": settlement.total,
        "paid_by": {names.get(pid, str(pid)): amount for pid, amount in settlement.paid_by.items()},
        "difference": settlement.difference,
        "debtor": names.get(settlement.debtor_id) if settlement.debtor_id else None,
        "plans_progress": grand_total.plans_progress,
        "itinerary_count": len(list_itinerary(trip.id, db)),
        "places_visited": places["visited"],
        "places_pending": places["pending"],
        "notes_count": len(list_notes(trip.id, db)),
        "documents_count": len(list_documents(trip.id, db)),
    }
