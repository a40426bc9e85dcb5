"""
Database collaborators consumed by the recurring detector.

Every read failure is re-raised as FetchError and every write failure as
WriteError, so the detection run can report which side of the batch broke.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import FetchError, WriteError
from app.models.account import Account
from app.models.category import Category
from app.models.recurring import RecurringTransaction
from app.models.transaction import Transaction

logger = logging.getLogger(__name__)


class TransactionRepository:
    """Posted transactions for a set of accounts."""

    def __init__(self, db: Session):
        self.db = db

    def list_posted(self, account_ids: Iterable[str], since: date) -> List[Transaction]:
        account_ids = list(account_ids)
        if not account_ids:
            return []
        try:
            return self.db.query(Transaction).filter(
                Transaction.account_id.in_(account_ids),
                Transaction.pending == False,  # noqa: E712
                Transaction.date >= since,
            ).order_by(Transaction.date.desc()).all()
        except SQLAlchemyError as e:
            raise FetchError(f"Failed to fetch transactions: {e}") from e


class AccountRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_by_user(self, user_id: str) -> List[Account]:
        try:
            return self.db.query(Account).filter(Account.user_id == user_id).all()
        except SQLAlchemyError as e:
            raise FetchError(f"Failed to fetch accounts for user {user_id}: {e}") from e


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def ids_for_labels(self, labels: Iterable[str]) -> Set[str]:
        """Ids of the categories carrying any of the given labels."""
        try:
            rows = self.db.query(Category.id).filter(Category.label.in_(list(labels))).all()
        except SQLAlchemyError as e:
            raise FetchError(f"Failed to resolve category labels: {e}") from e
        return {str(row.id) for row in rows}

    def labels_by_id(self) -> Dict[str, str]:
        try:
            rows = self.db.query(Category.id, Category.label).all()
        except SQLAlchemyError as e:
            raise FetchError(f"Failed to fetch category labels: {e}") from e
        return {str(row.id): row.label for row in rows}


class RecurringRepository:
    """Stored recurring charges for a user."""

    def __init__(self, db: Session):
        self.db = db

    def list_by_user(self, user_id: str) -> List[RecurringTransaction]:
        try:
            return self.db.query(RecurringTransaction).filter(
                RecurringTransaction.user_id == user_id
            ).order_by(RecurringTransaction.created_at, RecurringTransaction.id).all()
        except SQLAlchemyError as e:
            raise FetchError(f"Failed to fetch recurring records for user {user_id}: {e}") from e

    def upsert_batch(self, records: List[Dict[str, Any]]) -> None:
        """Insert or update every record by primary key in one commit."""
        try:
            for record in records:
                self.db.merge(RecurringTransaction(**record))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise WriteError(f"Failed to upsert recurring records: {e}") from e
