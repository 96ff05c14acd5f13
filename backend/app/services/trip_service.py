"""
Trip service: trips, rosters and trip dates.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import date
from typing import List, Optional
import logging
from app.db.base import update_values
from app.models.trip import Trip, Participant, TripStatus
from app.models.expense import Expense, ExpenseInstallment
from app.models.payment_plan import PlanPayment
from app.schemas.trip import TripCreate, TripUpdate

logger = logging.getLogger(__name__)


def compute_trip_status(start_date: date, end_date: date, today: Optional[date] = None) -> TripStatus:
    """Derive the trip status from its dates."""
    today = today or date.today()
    if start_date > today:
        return TripStatus.UPCOMING
    if end_date < today:
        return TripStatus.FINISHED
    return TripStatus.ONGOING


def days_until_trip(start_date: date, today: Optional[date] = None) -> int:
    """Days from today to the first day of the trip (negative once started)."""
    today = today or date.today()
    return (start_date - today).days


def is_on_trip(start_date: date, end_date: date, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return start_date <= today <= end_date


def is_trip_over(end_date: date, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return today > end_date


def countdown_message(trip: Trip, today: Optional[date] = None) -> str:
    """Short human message for the home screen."""
    today = today or date.today()
    if is_on_trip(trip.start_date, trip.end_date, today):
        destination = trip.destination or trip.name
        return f"We are in {destination}!"
    if is_trip_over(trip.end_date, today):
        return "The trip is over"

    days = days_until_trip(trip.start_date, today)
    if days == 1:
        return "The trip starts tomorrow!"
    return f"{days} days to go"


def get_countdown(trip: Trip, today: Optional[date] = None) -> dict:
    today = today or date.today()
    return {
        "days_until": days_until_trip(trip.start_date, today),
        "on_trip": is_on_trip(trip.start_date, trip.end_date, today),
        "trip_over": is_trip_over(trip.end_date, today),
        "message": countdown_message(trip, today),
    }


def get_trip(trip_id: int, db: Session) -> Optional[Trip]:
    return db.query(Trip).filter(Trip.id == trip_id).first()


def list_trips(db: Session) -> List[Trip]:
    try:
        return db.query(Trip).order_by(Trip.start_date.desc(), Trip.id.desc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching trips: {e}")
        return []


def create_trip(data: TripCreate, db: Session) -> Optional[Trip]:
    """Create a trip together with its initial roster."""
    names = list(data.participants)
    if len(set(names)) != len(names):
        logger.warning("Rejected trip with duplicate participant names")
        return None

    try:
        trip = Trip(
            name=data.name,
            destination=data.destination,
            emoji=data.emoji,
            start_date=data.start_date,
            end_date=data.end_date,
            status=compute_trip_status(data.start_date, data.end_date),
            fallback_rate=data.fallback_rate,
        )
        db.add(trip)
        db.flush()

        for index, name in enumerate(names):
            db.add(Participant(trip_id=trip.id, name=name, display_order=index))

        db.commit()
        db.refresh(trip)
        return trip
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating trip: {e}")
        return None


def update_trip(trip: Trip, data: TripUpdate, db: Session) -> Optional[Trip]:
    updates = update_values(Trip, data)
    try:
        for key, value in updates.items():
            setattr(trip, key, value)
        trip.status = compute_trip_status(trip.start_date, trip.end_date)
        db.commit()
        db.refresh(trip)
        return trip
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating trip {trip.id}: {e}")
        return None


def delete_trip(trip_id: int, db: Session) -> bool:
    try:
        trip = get_trip(trip_id, db)
        if not trip:
            return True
        db.delete(trip)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting trip {trip_id}: {e}")
        return False


def get_roster(trip_id: int, db: Session) -> List[Participant]:
    """Participants of a trip in display order."""
    return db.query(Participant).filter(
        Participant.trip_id == trip_id
    ).order_by(Participant.display_order, Participant.id).all()


def is_participant(trip_id: int, participant_id: Optional[int], db: Session) -> bool:
    """Check that a participant belongs to the trip's roster."""
    if participant_id is None:
        return False
    return db.query(Participant).filter(
        Participant.id == participant_id,
        Participant.trip_id == trip_id
    ).first() is not None


def add_participant(trip_id: int, name: str, db: Session) -> Optional[Participant]:
    """Append a participant to the roster. Names are unique within a trip."""
    roster = get_roster(trip_id, db)
    if any(p.name == name for p in roster):
        logger.warning(f"Participant {name!r} already in trip {trip_id}")
        return None

    next_order = max((p.display_order for p in roster), default=-1) + 1
    try:
        participant = Participant(trip_id=trip_id, name=name, display_order=next_order)
        db.add(participant)
        db.commit()
        db.refresh(participant)
        return participant
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding participant to trip {trip_id}: {e}")
        return None


def rename_participant(trip_id: int, participant_id: int, name: str, db: Session) -> Optional[Participant]:
    participant = db.query(Participant).filter(
        Participant.id == participant_id,
        Participant.trip_id == trip_id
    ).first()
    if not participant:
        return None

    clash = db.query(Participant).filter(
        Participant.trip_id == trip_id,
        Participant.name == name,
        Participant.id != participant_id
    ).first()
    if clash:
        logger.warning(f"Participant {name!r} already in trip {trip_id}")
        return None

    try:
        participant.name = name
        db.commit()
        db.refresh(participant)
        return participant
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error renaming participant {participant_id}: {e}")
        return None


def has_payments(participant_id: int, db: Session) -> bool:
    """Whether any money in the ledgers is attributed to this participant."""
    return any((
        db.query(Expense.id).filter(Expense.payer_id == participant_id).first(),
        db.query(ExpenseInstallment.id).filter(ExpenseInstallment.payer_id == participant_id).first(),
        db.query(PlanPayment.id).filter(PlanPayment.payer_id == participant_id).first(),
    ))


def remove_participant(trip_id: int, participant_id: int, db: Session) -> bool:
    """
    Remove a participant from the roster.

    Refused (False) while the participant still has payments attributed.
    """
    try:
        participant = db.query(Participant).filter(
            Participant.id == participant_id,
            Participant.trip_id == trip_id
        ).first()
        if not participant:
            return True
        if has_payments(participant_id, db):
            logger.warning(f"Participant {participant_id} still has payments, not removed")
            return False
        db.delete(participant)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error removing participant {participant_id}: {e}")
        return False
