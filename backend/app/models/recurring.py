"""
Recurring transaction database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Numeric, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class Frequency(str, enum.Enum):
    """Recurring frequency enumeration."""
    weekly = "weekly"
    biweekly = "bi-weekly"
    monthly = "monthly"
    yearly = "yearly"


class RecurringStatus(str, enum.Enum):
    """User-settable status of a detected recurring charge."""
    active = "active"
    ignored = "ignored"


class RecurringTransaction(Base):
    """A detected subscription or bill, upserted by every detection run."""

    __tablename__ = "recurring_transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    merchant_name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    frequency = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=RecurringStatus.active.value)
    last_date = Column(Date, nullable=False)
    next_date = Column(Date, nullable=False, index=True)
    confidence = Column(Numeric(3, 2), nullable=False, default=1.0)
    icon_url = Column(Text, nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="recurring_transactions")

    __table_args__ = (
        CheckConstraint(
            "frequency in ('weekly', 'bi-weekly', 'monthly', 'yearly')",
            name="ck_recurring_frequency",
        ),
        CheckConstraint("status in ('active', 'ignored')", name="ck_recurring_status"),
    )
