"""
Itinerary, places, notes and documents of a trip.

Plain per-trip collections with no settlement logic. Same failure contract as
the ledgers: None/False on store errors, deleting a missing record succeeds.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional, Type
import logging
from pydantic import BaseModel as Schema
from app.db.base import BaseModel, update_values
from app.models.trip_content import ItineraryItem, Place, Note, Document

logger = logging.getLogger(__name__)


def _create(model: Type[BaseModel], trip_id: int, values: dict, db: Session):
    try:
        record = model(trip_id=trip_id, **values)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating {model.__tablename__} record for trip {trip_id}: {e}")
        return None


def _get(model: Type[BaseModel], record_id: int, trip_id: int, db: Session):
    return db.query(model).filter(model.id == record_id, model.trip_id == trip_id).first()


def _save(record, values: dict, db: Session):
    try:
        for key, value in values.items():
            setattr(record, key, value)
        db.commit()
        db.refresh(record)
        return record
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating {record.__tablename__} record {record.id}: {e}")
        return None


def _update(model: Type[BaseModel], record_id: int, trip_id: int, data: Schema, db: Session):
    record = _get(model, record_id, trip_id, db)
    if not record:
        return None
    return _save(record, update_values(model, data), db)


def _delete(model: Type[BaseModel], record_id: int, trip_id: int, db: Session) -> bool:
    try:
        record = _get(model, record_id, trip_id, db)
        if not record:
            return True
        db.delete(record)
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting {model.__tablename__} record {record_id}: {e}")
        return False


def _list(query, label: str) -> list:
    try:
        return query.all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching {label}: {e}")
        return []


def group_by_kind(items: Iterable, attribute: str) -> Dict:
    """Group records by an enum attribute, keeping their order."""
    grouped: Dict = {}
    for item in items:
        grouped.setdefault(getattr(item, attribute), []).append(item)
    return grouped


# ============ ITINERARY ============

def list_itinerary(trip_id: int, db: Session) -> List[ItineraryItem]:
    query = db.query(ItineraryItem).filter(ItineraryItem.trip_id == trip_id).order_by(
        ItineraryItem.date, ItineraryItem.display_order, ItineraryItem.id
    )
    return _list(query, f"itinerary for trip {trip_id}")


def group_by_date(items: Iterable[ItineraryItem]) -> "OrderedDict[date, List[ItineraryItem]]":
    """Group itinerary items by day, keeping the incoming order."""
    grouped: "OrderedDict[date, List[ItineraryItem]]" = OrderedDict()
    for item in items:
        grouped.setdefault(item.date, []).append(item)
    return grouped


def next_display_order(trip_id: int, day: date, db: Session) -> int:
    last_order = db.query(func.max(ItineraryItem.display_order)).filter(
        ItineraryItem.trip_id == trip_id,
        ItineraryItem.date == day
    ).scalar()
    return 0 if last_order is None else last_order + 1


def get_itinerary_item(item_id: int, trip_id: int, db: Session) -> Optional[ItineraryItem]:
    return _get(ItineraryItem, item_id, trip_id, db)


def create_itinerary_item(trip_id: int, data: Schema, db: Session) -> Optional[ItineraryItem]:
    """Add an item at the end of its day."""
    values = data.model_dump()
    values["display_order"] = next_display_order(trip_id, values["date"], db)
    return _create(ItineraryItem, trip_id, values, db)


def update_itinerary_item(item_id: int, trip_id: int, data: Schema, db: Session) -> Optional[ItineraryItem]:
    """Edit an item. Moving it to another day puts it last on that day."""
    item = get_itinerary_item(item_id, trip_id, db)
    if not item:
        return None

    values = update_values(ItineraryItem, data)
    if "date" in values and values["date"] != item.date:
        values["display_order"] = next_display_order(trip_id, values["date"], db)
    return _save(item, values, db)


def delete_itinerary_item(item_id: int, trip_id: int, db: Session) -> bool:
    return _delete(ItineraryItem, item_id, trip_id, db)


# ============ PLACES ============

def list_places(trip_id: int, db: Session) -> List[Place]:
    query = db.query(Place).filter(Place.trip_id == trip_id).order_by(
        Place.created_at.desc(), Place.id.desc()
    )
    return _list(query, f"places for trip {trip_id}")


def get_place(place_id: int, trip_id: int, db: Session) -> Optional[Place]:
    return _get(Place, place_id, trip_id, db)


def create_place(trip_id: int, data: Schema, db: Session) -> Optional[Place]:
    return _create(Place, trip_id, {**data.model_dump(), "visited": False}, db)


def update_place(place_id: int, trip_id: int, data: Schema, db: Session) -> Optional[Place]:
    return _update(Place, place_id, trip_id, data, db)


def toggle_visited(place_id: int, trip_id: int, db: Session) -> Optional[Place]:
    place = get_place(place_id, trip_id, db)
    if not place:
        return None
    try:
        place.visited = not place.visited
        db.commit()
        db.refresh(place)
        return place
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error toggling place {place_id}: {e}")
        return None


def delete_place(place_id: int, trip_id: int, db: Session) -> bool:
    return _delete(Place, place_id, trip_id, db)


def count_visited(places: Iterable[Place]) -> dict:
    places = list(places)
    visited = sum(1 for p in places if p.visited)
    return {"visited": visited, "pending": len(places) - visited}


# ============ NOTES ============

def list_notes(trip_id: int, db: Session) -> List[Note]:
    query = db.query(Note).filter(Note.trip_id == trip_id).order_by(
        Note.updated_at.desc(), Note.id.desc()
    )
    return _list(query, f"notes for trip {trip_id}")


def get_note(note_id: int, trip_id: int, db: Session) -> Optional[Note]:
    return _get(Note, note_id, trip_id, db)


def create_note(trip_id: int, data: Schema, db: Session) -> Optional[Note]:
    return _create(Note, trip_id, data.model_dump(), db)


def update_note(note_id: int, trip_id: int, data: Schema, db: Session) -> Optional[Note]:
    return _update(Note, note_id, trip_id, data, db)


def delete_note(note_id: int, trip_id: int, db: Session) -> bool:
    return _delete(Note, note_id, trip_id, db)


# ============ DOCUMENTS ============

def list_documents(trip_id: int, db: Session) -> List[Document]:
    query = db.query(Document).filter(Document.trip_id == trip_id).order_by(
        Document.created_at.desc(), Document.id.desc()
    )
    return _list(query, f"documents for trip {trip_id}")


def create_document(trip_id: int, data: Schema, db: Session) -> Optional[Document]:
    return _create(Document, trip_id, data.model_dump(), db)


def delete_document(document_id: int, trip_id: int, db: Session) -> bool:
    return _delete(Document, document_id, trip_id, db)
