"""
Trip and roster models.
"""
from sqlalchemy import Column, String, Date, Enum as SQLEnum, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    UPCOMING = "Upcoming"
    ONGOING = "Ongoing"
    FINISHED = "Finished"


class Trip(BaseModel):
    """Trip model representing a shared journey."""
    __tablename__ = "trips"
    
    name = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=True)
    emoji = Column(String(10), nullable=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    status = Column(SQLEnum(TripStatus), default=TripStatus.UPCOMING, nullable=False)
    fallback_rate = Column(Numeric(15, 6), nullable=False, default=1200)  # ARS per USD when no quote is available
    
    # Relationships
    participants = relationship(
        "Participant", back_populates="trip", cascade="all, delete-orphan",
        order_by="Participant.display_order"
    )
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")
    payment_plans = relationship("PaymentPlan", back_populates="trip", cascade="all, delete-orphan")
    itinerary_items = relationship("ItineraryItem", back_populates="trip", cascade="all, delete-orphan")
    places = relationship("Place", back_populates="trip", cascade="all, delete-orphan")
    notes = relationship("Note", back_populates="trip", cascade="all, delete-orphan")
    documents = relationship("Document", back_populates="trip", cascade="all, delete-orphan")


class Participant(BaseModel):
    """A member of a trip's roster who can pay for things."""
    __tablename__ = "participants"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    
    # Relationships
    trip = relationship("Trip", back_populates="participants")
