"""Value types passed between the recurring detection stages."""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from app.models.recurring import Frequency, RecurringStatus


WHOLE_GROUP = "whole_group"
CLUSTERED = "clustered"


@dataclass(frozen=True)
class TransactionRecord:
    """Immutable snapshot of a posted transaction as seen by the detector."""

    id: str
    amount: Decimal
    date: date
    merchant_name: Optional[str]
    description: str
    account_id: str
    category_id: Optional[str] = None
    icon_url: Optional[str] = None

    @classmethod
    def from_model(cls, txn: Any) -> "TransactionRecord":
        """
        Build a record from an ORM row.
        Raises ValueError when the amount or date is unusable.
        """
        try:
            amount = Decimal(str(txn.amount))
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Transaction {txn.id} has a non-numeric amount: {txn.amount!r}")
        if not amount.is_finite():
            raise ValueError(f"Transaction {txn.id} has a non-numeric amount: {txn.amount!r}")
        if not isinstance(txn.date, date):
            raise ValueError(f"Transaction {txn.id} has no usable date")

        return cls(
            id=str(txn.id),
            amount=amount,
            date=txn.date,
            merchant_name=txn.merchant_name,
            description=txn.description or "",
            account_id=str(txn.account_id),
            category_id=str(txn.category_id) if txn.category_id else None,
            icon_url=txn.icon_url,
        )


@dataclass(frozen=True)
class PatternCandidate:
    """One detected recurrence, ready to be matched against stored records."""

    user_id: str
    merchant_name: str
    description: str
    amount: Decimal
    frequency: Frequency
    last_date: date
    next_date: date
    confidence: float
    icon_url: Optional[str] = None
    category_id: Optional[str] = None
    status: str = RecurringStatus.active.value
    id: Optional[str] = None
    source: str = WHOLE_GROUP

    def with_identity(self, record_id: str, status: str) -> "PatternCandidate":
        return replace(self, id=record_id, status=status)

    def with_source(self, source: str) -> "PatternCandidate":
        return replace(self, source=source)

    def to_record(self) -> Dict[str, Any]:
        """Row shape written to the recurring_transactions table."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "merchant_name": self.merchant_name,
            "description": self.description,
            "amount": self.amount,
            "frequency": self.frequency.value,
            "status": self.status,
            "last_date": self.last_date,
            "next_date": self.next_date,
            "confidence": Decimal(str(round(self.confidence, 2))),
            "icon_url": self.icon_url,
            "category_id": self.category_id,
        }
