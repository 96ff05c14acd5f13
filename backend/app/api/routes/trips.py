"""
Trip management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.trip import Trip
from app.schemas.trip import (
    TripCreate, TripUpdate, TripResponse, TripDetailResponse,
    ParticipantCreate, ParticipantUpdate, ParticipantResponse,
    CountdownResponse, QuickStatsResponse
)
from app.services import trip_service
from app.services.stats_service import quick_stats

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_or_404(trip_id: int, db: Session) -> Trip:
    """Load a trip or fail the request."""
    trip = trip_service.get_trip(trip_id, db)
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


def _check_dates(start_date, end_date):
    if start_date and end_date and end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Trip cannot end before it starts"
        )


@router.post("", response_model=TripDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    db: Session = Depends(get_db)
):
    """Create a new trip with its initial roster."""
    _check_dates(trip_data.start_date, trip_data.end_date)

    trip = trip_service.create_trip(trip_data, db)
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not create trip (participant names must be unique)"
        )
    return trip


@router.get("", response_model=List[TripResponse])
async def list_trips(db: Session = Depends(get_db)):
    """List all trips, latest first."""
    return trip_service.list_trips(db)


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get trip details with its roster."""
    return get_trip_or_404(trip_id, db)


@router.put("/{trip_id}", response_model=TripDetailResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    db: Session = Depends(get_db)
):
    """Update a trip. Status is recomputed from the dates."""
    trip = get_trip_or_404(trip_id, db)
    _check_dates(trip_data.start_date or trip.start_date, trip_data.end_date or trip.end_date)

    updated = trip_service.update_trip(trip, trip_data, db)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update trip"
        )
    return updated


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Delete a trip and everything recorded under it."""
    if not trip_service.delete_trip(trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete trip"
        )
    return {"message": "Trip deleted successfully"}


@router.get("/{trip_id}/participants", response_model=List[ParticipantResponse])
async def get_participants(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get the roster of a trip."""
    get_trip_or_404(trip_id, db)
    return trip_service.get_roster(trip_id, db)


@router.post("/{trip_id}/participants", response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED)
async def add_participant(
    trip_id: int,
    participant_data: ParticipantCreate,
    db: Session = Depends(get_db)
):
    """Add a participant to the trip."""
    get_trip_or_404(trip_id, db)

    participant = trip_service.add_participant(trip_id, participant_data.name, db)
    if not participant:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Participant already in trip"
        )
    return participant


@router.put("/{trip_id}/participants/{participant_id}", response_model=ParticipantResponse)
async def rename_participant(
    trip_id: int,
    participant_id: int,
    participant_data: ParticipantUpdate,
    db: Session = Depends(get_db)
):
    """Rename a participant."""
    get_trip_or_404(trip_id, db)
    if not trip_service.is_participant(trip_id, participant_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Participant not found"
        )

    participant = trip_service.rename_participant(trip_id, participant_id, participant_data.name, db)
    if not participant:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Participant name already in use"
        )
    return participant


@router.delete("/{trip_id}/participants/{participant_id}")
async def remove_participant(
    trip_id: int,
    participant_id: int,
    db: Session = Depends(get_db)
):
    """Remove a participant from the trip."""
    get_trip_or_404(trip_id, db)
    if trip_service.is_participant(trip_id, participant_id, db) and trip_service.has_payments(participant_id, db):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Participant has payments and cannot be removed"
        )

    if not trip_service.remove_participant(trip_id, participant_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not remove participant"
        )
    return {"message": "Participant removed successfully"}


@router.get("/{trip_id}/countdown", response_model=CountdownResponse)
async def get_countdown(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Days to go, or whether the trip is on or over."""
    trip = get_trip_or_404(trip_id, db)
    return trip_service.get_countdown(trip)


@router.get("/{trip_id}/stats", response_model=QuickStatsResponse)
async def get_quick_stats(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Summary for the trip home screen."""
    trip = get_trip_or_404(trip_id, db)
    return quick_stats(trip, db)
