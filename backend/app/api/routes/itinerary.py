"""
Itinerary routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.trip_content import (
    ItineraryDay, ItineraryItemCreate, ItineraryItemResponse, ItineraryItemUpdate, ItineraryResponse
)
from app.services import trip_content_service
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/itinerary", tags=["itinerary"])


@router.get("/{trip_id}", response_model=ItineraryResponse)
async def get_itinerary(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get the itinerary, flat and grouped by day."""
    get_trip_or_404(trip_id, db)
    items = [
        ItineraryItemResponse.model_validate(item)
        for item in trip_content_service.list_itinerary(trip_id, db)
    ]
    days = [
        ItineraryDay(date=day, items=day_items)
        for day, day_items in trip_content_service.group_by_date(items).items()
    ]
    return ItineraryResponse(items=items, days=days)


@router.post("/{trip_id}", response_model=ItineraryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_itinerary_item(
    trip_id: int,
    item_data: ItineraryItemCreate,
    db: Session = Depends(get_db)
):
    """Add an item at the end of its day."""
    get_trip_or_404(trip_id, db)
    item = trip_content_service.create_itinerary_item(trip_id, item_data, db)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not create itinerary item"
        )
    return item


@router.put("/{trip_id}/{item_id}", response_model=ItineraryItemResponse)
async def update_itinerary_item(
    trip_id: int,
    item_id: int,
    item_data: ItineraryItemUpdate,
    db: Session = Depends(get_db)
):
    """Update an itinerary item."""
    get_trip_or_404(trip_id, db)
    if not trip_content_service.get_itinerary_item(item_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Itinerary item not found"
        )

    item = trip_content_service.update_itinerary_item(item_id, trip_id, item_data, db)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update itinerary item"
        )
    return item


@router.delete("/{trip_id}/{item_id}")
async def delete_itinerary_item(
    trip_id: int,
    item_id: int,
    db: Session = Depends(get_db)
):
    """Delete an itinerary item."""
    get_trip_or_404(trip_id, db)
    if not trip_content_service.delete_itinerary_item(item_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete itinerary item"
        )
    return {"message": "Itinerary item deleted successfully"}
