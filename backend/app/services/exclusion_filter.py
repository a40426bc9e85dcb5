"""
Filtering of the raw transaction feed down to candidate spending.
"""

import logging
from typing import Iterable, List, Set

from app.services.detection_types import TransactionRecord

logger = logging.getLogger(__name__)

# Money moving between the user's own accounts, never a bill
EXCLUDED_CATEGORY_LABELS = [
    "Credit Card Payment",
    "Investment and Retirement Funds",
    "Transfer",
    "Account Transfer",
]


def filter_spending(
    transactions: Iterable[TransactionRecord],
    account_ids: Set[str],
    excluded_category_ids: Set[str],
) -> List[TransactionRecord]:
    """
    Keep outflows on the user's own accounts that are not in an excluded category.
    Income and refunds (positive amounts) are dropped.
    """
    kept = []
    for txn in transactions:
        if txn.account_id not in account_ids:
            continue
        if txn.category_id and txn.category_id in excluded_category_ids:
            continue
        if txn.amount >= 0:
            continue
        kept.append(txn)
    return kept
