"""
Document routes. Only metadata is stored; files live wherever file_url points.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.schemas.trip_content import DocumentCreate, DocumentResponse
from app.services import trip_content_service
from app.api.routes.trips import get_trip_or_404

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/{trip_id}", response_model=List[DocumentResponse])
async def get_documents(
    trip_id: int,
    db: Session = Depends(get_db)
):
    """Get documents, newest first."""
    get_trip_or_404(trip_id, db)
    return trip_content_service.list_documents(trip_id, db)


@router.post("/{trip_id}", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    trip_id: int,
    document_data: DocumentCreate,
    db: Session = Depends(get_db)
):
    """Register an uploaded document."""
    get_trip_or_404(trip_id, db)
    document = trip_content_service.create_document(trip_id, document_data, db)
    if not document:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not create document"
        )
    return document


@router.delete("/{trip_id}/{document_id}")
async def delete_document(
    trip_id: int,
    document_id: int,
    db: Session = Depends(get_db)
):
    get_trip_or_404(trip_id, db)
    if not trip_content_service.delete_document(document_id, trip_id, db):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not delete document"
        )
    return {"message": "Document deleted successfully"}
