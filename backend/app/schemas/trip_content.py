"""
Pydantic schemas for itinerary, places, notes and documents.
"""
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date, datetime, date as dt_date, time as dt_time
from app.models.trip_content import PlaceKind, NoteKind, DocumentCategory
from app.schemas.common import NonBlankStr


# ============ ITINERARY ============

class ItineraryItemCreate(BaseModel):
    """Schema for itinerary item creation."""
    date: date
    title: NonBlankStr
    description: Optional[str] = None
    time: Optional[dt_time] = None
    location_url: Optional[str] = None


class ItineraryItemUpdate(BaseModel):
    """Schema for itinerary item update."""
    date: Optional[dt_date] = None  # Moving to another day puts the item last on that day
    title: Optional[NonBlankStr] = None
    description: Optional[str] = None
    time: Optional[dt_time] = None
    location_url: Optional[str] = None


class ItineraryItemResponse(ItineraryItemCreate):
    id: int
    trip_id: int
    display_order: int
    created_at: datetime
    
    class Config:
        from_attributes = True


class ItineraryDay(BaseModel):
    date: date
    items: List[ItineraryItemResponse]


class ItineraryResponse(BaseModel):
    """All items plus the same items grouped by day."""
    items: List[ItineraryItemResponse]
    days: List[ItineraryDay]


# ============ PLACES ============

class PlaceCreate(BaseModel):
    """Schema for place creation."""
    name: NonBlankStr
    kind: PlaceKind
    maps_url: Optional[str] = None
    notes: Optional[str] = None


class PlaceUpdate(BaseModel):
    """Schema for place update."""
    name: Optional[NonBlankStr] = None
    kind: Optional[PlaceKind] = None
    maps_url: Optional[str] = None
    notes: Optional[str] = None
    visited: Optional[bool] = None


class PlaceResponse(PlaceCreate):
    id: int
    trip_id: int
    visited: bool
    created_at: datetime
    
    class Config:
        from_attributes = True


class PlaceListResponse(BaseModel):
    places: List[PlaceResponse]
    by_kind: Dict[PlaceKind, List[PlaceResponse]]
    visited: int
    pending: int


# ============ NOTES ============

class NoteCreate(BaseModel):
    """Schema for note creation."""
    title: NonBlankStr
    content: Optional[str] = None
    kind: NoteKind = NoteKind.GENERAL


class NoteUpdate(BaseModel):
    """Schema for note update."""
    title: Optional[NonBlankStr] = None
    content: Optional[str] = None
    kind: Optional[NoteKind] = None


class NoteResponse(NoteCreate):
    id: int
    trip_id: int
    updated_at: datetime
    
    class Config:
        from_attributes = True


class NoteListResponse(BaseModel):
    notes: List[NoteResponse]
    by_kind: Dict[NoteKind, List[NoteResponse]]


# ============ DOCUMENTS ============

class DocumentCreate(BaseModel):
    """Schema for document metadata. The file is uploaded elsewhere."""
    name: NonBlankStr
    category: DocumentCategory = DocumentCategory.OTHER
    file_url: NonBlankStr
    file_name: Optional[str] = None
    uploaded_by: Optional[str] = None


class DocumentResponse(DocumentCreate):
    id: int
    trip_id: int
    created_at: datetime
    
    class Config:
        from_attributes = True
