"""
Places routes: restaurants, shops, attractions and tips.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.trip_content import PlaceCreate, PlaceListResponse, PlaceResponse, PlaceUpdate
from app.services import trip_content_service
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/places", tags=["places"])


@router.get("/{trip_id}", response_model=PlaceListResponse)
async def get_places(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get places, newest first, also grouped by kind."""
    get_trip_or_404(trip_id, db)
    places = [PlaceResponse.model_validate(p) for p in trip_content_service.list_places(trip_id, db)]
    return PlaceListResponse(
        places=places,
        by_kind=trip_content_service.group_by_kind(places, "kind"),
        **trip_content_service.count_visited(places)
    )


@router.post("/{trip_id}", response_model=PlaceResponse, status_code=status.HTTP_201_CREATED)
async def create_place(
    trip_id: int,
    place_data: PlaceCreate,
    db: Session = Depends(get_db)
):
    """Save a place to visit."""
    get_trip_or_404(trip_id, db)
    place = trip_content_service.create_place(trip_id, place_data, db)
    if not place:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not create place"
        )
    return place


@router.put("/{trip_id}/{place_id}", response_model=PlaceResponse)
async def update_place(
    trip_id: int,
    place_id: int,
    place_data: PlaceUpdate,
    db: Session = Depends(get_db)
):
    """Update a place."""
    get_trip_or_404(trip_id, db)
    if not trip_content_service.get_place(place_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Place not found"
        )

    place = trip_content_service.update_place(place_id, trip_id, place_data, db)
    if not place:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update place"
        )
    return place


@router.post("/{trip_id}/{place_id}/toggle-visited", response_model=PlaceResponse)
async def toggle_visited(
    trip_id: int,
    place_id: int,
    db: Session = Depends(get_db)
):
    """Mark a place as visited, or back to pending."""
    get_trip_or_404(trip_id, db)
    if not trip_content_service.get_place(place_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Place not found"
        )

    place = trip_content_service.toggle_visited(place_id, trip_id, db)
    if not place:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update place"
        )
    return place


@router.delete("/{trip_id}/{place_id}")
async def delete_place(
    trip_id: int,
    place_id: int,
    db: Session = Depends(get_db)
):
    """Delete a place."""
    get_trip_or_404(trip_id, db)
    if not trip_content_service.delete_place(place_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete place"
        )
    return {"message": "Place deleted successfully"}
