"""Pydantic schemas for recurring transactions."""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from app.models.recurring import Frequency, RecurringStatus


class RecurringTransactionBase(BaseModel):
    merchant_name: str
    description: Optional[str] = None
    amount: Decimal
    frequency: Frequency
    status: RecurringStatus = RecurringStatus.active
    last_date: date
    next_date: date
    confidence: Decimal
    icon_url: Optional[str] = None
    category_id: Optional[str] = None


class RecurringTransactionResponse(RecurringTransactionBase):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RecurringTransactionList(BaseModel):
    items: List[RecurringTransactionResponse]
    total: int


class RecurringStatusUpdate(BaseModel):
    """User override of a detected charge."""
    status: RecurringStatus


class DetectionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class DetectedCandidate(RecurringTransactionBase):
    """A freshly detected candidate, whether or not it was persisted."""
    id: Optional[str] = None
    user_id: str


class DetectionResponse(BaseModel):
    """Response from a forced detection run."""
    detected: List[DetectedCandidate]
    total_found: int
    persisted: bool
    error: Optional[str] = None
