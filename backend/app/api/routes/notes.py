"""
Notes routes: general notes, packing and shopping lists.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.trip_content import NoteCreate, NoteListResponse, NoteResponse, NoteUpdate
from app.services import trip_content_service
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("/{trip_id}", response_model=NoteListResponse)
async def get_notes(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get notes, most recently edited first."""
    get_trip_or_404(trip_id, db)
    notes = [NoteResponse.model_validate(n) for n in trip_content_service.list_notes(trip_id, db)]
    return NoteListResponse(notes=notes, by_kind=trip_content_service.group_by_kind(notes, "kind"))


@router.post("/{trip_id}", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    trip_id: int,
    note_data: NoteCreate,
    db: Session = Depends(get_db)
):
    get_trip_or_404(trip_id, db)
    note = trip_content_service.create_note(trip_id, note_data, db)
    if not note:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not create note"
        )
    return note


@router.put("/{trip_id}/{note_id}", response_model=NoteResponse)
async def update_note(
    trip_id: int,
    note_id: int,
    note_data: NoteUpdate,
    db: Session = Depends(get_db)
):
    get_trip_or_404(trip_id, db)
    if not trip_content_service.get_note(note_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Note not found"
        )

    note = trip_content_service.update_note(note_id, trip_id, note_data, db)
    if not note:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update note"
        )
    return note


@router.delete("/{trip_id}/{note_id}")
async def delete_note(
    trip_id: int,
    note_id: int,
    db: Session = Depends(get_db)
):
    get_trip_or_404(trip_id, db)
    if not trip_content_service.delete_note(note_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete note"
        )
    return {"message": "Note deleted successfully"}
