"""
Pydantic schemas package.
"""

from app.schemas.recurring import (
    RecurringTransactionBase,
    RecurringTransactionResponse,
    RecurringTransactionList,
    RecurringStatusUpdate,
    DetectionRequest,
    DetectedCandidate,
    DetectionResponse,
)

__all__ = [
    "RecurringTransactionBase",
    "RecurringTransactionResponse",
    "RecurringTransactionList",
    "RecurringStatusUpdate",
    "DetectionRequest",
    "DetectedCandidate",
    "DetectionResponse",
]
