"""
Pydantic schemas for Trip and Participant entities.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.trip import TripStatus
from app.schemas.common import NonBlankStr


class ParticipantCreate(BaseModel):
    """Schema for adding a participant to a trip's roster."""
    name: NonBlankStr


class ParticipantUpdate(ParticipantCreate):
    """Schema for renaming a participant."""
    pass


class ParticipantResponse(BaseModel):
    """Schema for participant response."""
    id: int
    trip_id: int
    name: str
    display_order: int
    
    class Config:
        from_attributes = True


class TripBase(BaseModel):
    """Base trip schema."""
    name: NonBlankStr
    destination: Optional[str] = None
    emoji: Optional[str] = None
    start_date: date
    end_date: date
    fallback_rate: Decimal = Field(default=Decimal("1200"), gt=0)  # ARS per USD


class TripCreate(TripBase):
    """Schema for trip creation, with the initial roster."""
    participants: List[NonBlankStr] = []


class TripUpdate(BaseModel):
    """Schema for trip update."""
    name: Optional[NonBlankStr] = None
    destination: Optional[str] = None
    emoji: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    fallback_rate: Optional[Decimal] = Field(default=None, gt=0)


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    status: TripStatus
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class TripDetailResponse(TripResponse):
    """Schema for detailed trip response with its roster."""
    participants: List[ParticipantResponse] = []


class CountdownResponse(BaseModel):
    """Schema for the trip countdown."""
    days_until: int
    on_trip: bool
    trip_over: bool
    message: str


class QuickStatsResponse(BaseModel):
    """Schema for the home screen summary."""
    trip_id: int
    countdown: CountdownResponse
    total_spent_base: Decimal
    paid_by: Dict[str, Decimal]  # participant name -> amount in USD
    difference: Decimal
    debtor: Optional[str] = None
    plans_progress: int
    itinerary_count: int
    places_visited: int
    places_pending: int
    notes_count: int
    documents_count: int
