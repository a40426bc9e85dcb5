"""
Database models package.
"""

from app.models.account import Account, AccountType
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.recurring import RecurringTransaction, Frequency, RecurringStatus

__all__ = [
    "Account",
    "AccountType",
    "Category",
    "Transaction",
    "RecurringTransaction",
    "Frequency",
    "RecurringStatus",
]
