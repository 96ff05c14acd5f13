"""
Itinerary, places, notes and document models.
"""
from sqlalchemy import Column, String, Date, Time, Text, Boolean, ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class PlaceKind(str, enum.Enum):
    RESTAURANT = "restaurant"
    SHOP = "shop"
    ATTRACTION = "attraction"
    TIP = "tip"


class NoteKind(str, enum.Enum):
    GENERAL = "general"
    PACK = "pack"
    BUY = "buy"


class DocumentCategory(str, enum.Enum):
    BOOKINGS = "bookings"
    TICKETS = "tickets"
    FLIGHTS = "flights"
    INSURANCE = "insurance"
    OTHER = "other"


class ItineraryItem(BaseModel):
    """A planned activity on a given day of the trip."""
    __tablename__ = "itinerary_items"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    time = Column(Time, nullable=True)
    location_url = Column(String(500), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)  # Position within the same date (0, 1, 2...)
    
    trip = relationship("Trip", back_populates="itinerary_items")


class Place(BaseModel):
    """A point of interest worth visiting."""
    __tablename__ = "places"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    kind = Column(SQLEnum(PlaceKind), nullable=False)
    maps_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    visited = Column(Boolean, default=False, nullable=False)
    
    trip = relationship("Trip", back_populates="places")


class Note(BaseModel):
    """Free-form note, e.g. packing or shopping lists."""
    __tablename__ = "notes"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=True)
    kind = Column(SQLEnum(NoteKind), nullable=False, default=NoteKind.GENERAL)
    
    trip = relationship("Trip", back_populates="notes")


class Document(BaseModel):
    """Metadata for a stored travel document. The file itself lives elsewhere."""
    __tablename__ = "documents"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    category = Column(SQLEnum(DocumentCategory), nullable=False, default=DocumentCategory.OTHER)
    file_url = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=True)
    uploaded_by = Column(String(50), nullable=True)
    
    trip = relationship("Trip", back_populates="documents")
