"""API endpoints for recurring transaction management."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import FetchError
from app.models.recurring import RecurringTransaction
from app.schemas.recurring import (
    RecurringTransactionResponse,
    RecurringTransactionList,
    RecurringStatusUpdate,
    DetectionRequest,
    DetectedCandidate,
    DetectionResponse,
)
from app.services import recurring_service

router = APIRouter(prefix="/recurring", tags=["recurring"])


@router.get("", response_model=RecurringTransactionList)
def get_recurring_transactions(
    user_id: str = Query(..., min_length=1),
    include_ignored: bool = Query(False),
    db: Session = Depends(get_db)
):
    """Get a user's recurring transactions ordered by next due date."""
    records = recurring_service.get_recurring_transactions(db, user_id, include_ignored)
    return RecurringTransactionList(
        items=[RecurringTransactionResponse.model_validate(r) for r in records],
        total=len(records)
    )


@router.post("/detect", response_model=DetectionResponse)
def detect_recurring(
    request: DetectionRequest,
    db: Session = Depends(get_db)
):
    """
    Force a detection run for a user.
    Candidates are returned even when saving them failed.
    """
    outcome = recurring_service.detect(db, request.user_id)

    if isinstance(outcome.error, FetchError):
        raise HTTPException(status_code=503, detail=str(outcome.error))

    detected = [
        DetectedCandidate(
            id=c.id,
            user_id=c.user_id,
            merchant_name=c.merchant_name,
            description=c.description,
            amount=c.amount,
            frequency=c.frequency,
            status=c.status,
            last_date=c.last_date,
            next_date=c.next_date,
            confidence=c.to_record()["confidence"],
            icon_url=c.icon_url,
            category_id=c.category_id,
        )
        for c in outcome.candidates
    ]

    return DetectionResponse(
        detected=detected,
        total_found=len(detected),
        persisted=outcome.persisted,
        error=str(outcome.error) if outcome.error else None,
    )


@router.patch("/{recurring_id}", response_model=RecurringTransactionResponse)
def update_recurring_status(
    recurring_id: str,
    update: RecurringStatusUpdate,
    db: Session = Depends(get_db)
):
    """Mark a recurring transaction active or ignored."""
    try:
        record = recurring_service.set_status(db, recurring_id, update.status)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RecurringTransactionResponse.model_validate(record)


@router.delete("/{recurring_id}")
def delete_recurring_transaction(
    recurring_id: str,
    db: Session = Depends(get_db)
):
    """Delete a stored recurring transaction. The next run may detect it again."""
    record = db.query(RecurringTransaction).filter(RecurringTransaction.id == recurring_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Recurring transaction not found")

    db.delete(record)
    db.commit()

    return {"deleted": True}
