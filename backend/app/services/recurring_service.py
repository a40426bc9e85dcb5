"""Service for recurring transaction detection and management."""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import FetchError, RecurringDetectionError, WriteError
from app.models.recurring import RecurringTransaction, RecurringStatus
from app.repositories import (
    AccountRepository,
    CategoryRepository,
    RecurringRepository,
    TransactionRepository,
)
from app.services.deduplication_service import deduplicate_candidates, is_cluster_duplicate
from app.services.detection_types import CLUSTERED, PatternCandidate, TransactionRecord
from app.services.exclusion_filter import EXCLUDED_CATEGORY_LABELS, filter_spending
from app.services.merchant_grouping import cluster_by_day_of_month, group_by_merchant
from app.services.pattern_analyzer import analyze_set
from app.services.recurring_store import match_existing, save_candidates

logger = logging.getLogger(__name__)


@dataclass
class DetectionOutcome:
    """Result of one detection run. ``error`` is None on success."""
    candidates: List[PatternCandidate] = field(default_factory=list)
    error: Optional[RecurringDetectionError] = None
    persisted: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def _to_records(transactions) -> List[TransactionRecord]:
    records = []
    for txn in transactions:
        try:
            records.append(TransactionRecord.from_model(txn))
        except ValueError as e:
            logger.debug("Skipping malformed transaction: %s", e)
    return records


def detect_for_merchant(
    merchant_name: str,
    transactions: Sequence[TransactionRecord],
    user_id: str,
    category_labels: Mapping[str, str],
    today: date,
    min_confidence: Optional[float] = None,
) -> List[PatternCandidate]:
    """
    Run the whole-group pass and the day-of-month pass for one merchant.

    The whole-group result needs more than ``min_confidence`` to count;
    clustered results only need to not repeat an accepted one.
    """
    if min_confidence is None:
        min_confidence = settings.whole_group_min_confidence

    accepted: List[PatternCandidate] = []

    main_result = analyze_set(transactions, merchant_name, user_id, category_labels, today)
    if main_result and main_result.confidence > min_confidence:
        accepted.append(main_result)

    for cluster in cluster_by_day_of_month(transactions):
        cluster_result = analyze_set(cluster, merchant_name, user_id, category_labels, today)
        if cluster_result and not is_cluster_duplicate(cluster_result, accepted):
            accepted.append(cluster_result.with_source(CLUSTERED))

    return accepted


def find_candidates(
    transactions: Sequence[TransactionRecord],
    user_id: str,
    category_labels: Mapping[str, str],
    today: date,
) -> List[PatternCandidate]:
    """Classify every merchant group and deduplicate across both passes."""
    groups = group_by_merchant(transactions)

    candidates: List[PatternCandidate] = []
    for merchant_name, merchant_txns in groups.items():
        candidates.extend(
            detect_for_merchant(merchant_name, merchant_txns, user_id, category_labels, today)
        )

    return deduplicate_candidates(candidates)


def detect(db: Session, user_id: str, today: Optional[date] = None) -> DetectionOutcome:
    """
    Detect recurring charges for a user and upsert them.

    A failed read aborts the run before anything is written. A failed write
    still returns the computed candidates, with ``persisted`` left False.
    """
    today = today or date.today()
    logger.info("Starting recurring transaction detection for user %s", user_id)

    accounts = AccountRepository(db)
    categories = CategoryRepository(db)
    recurring = RecurringRepository(db)
    feed = TransactionRepository(db)

    try:
        account_ids = {str(a.id) for a in accounts.list_by_user(user_id)}
        excluded_ids = categories.ids_for_labels(EXCLUDED_CATEGORY_LABELS)
        existing = recurring.list_by_user(user_id)
        since = today - timedelta(days=settings.detection_lookback_days)
        raw = feed.list_posted(account_ids, since)
        category_labels = categories.labels_by_id()
    except FetchError as e:
        logger.error("Recurring detection aborted for user %s: %s", user_id, e)
        return DetectionOutcome(error=e)

    spending = filter_spending(_to_records(raw), account_ids, excluded_ids)
    if not spending:
        logger.info("No transactions found for user %s (after filtering)", user_id)
        return DetectionOutcome(persisted=True)

    logger.info("Analyzing %d of %d transactions for user %s", len(spending), len(raw), user_id)

    candidates = find_candidates(spending, user_id, category_labels, today)
    if not candidates:
        logger.info("No recurring patterns detected for user %s", user_id)
        return DetectionOutcome(persisted=True)

    logger.info("Detected %d recurring patterns for user %s", len(candidates), user_id)
    candidates = match_existing(candidates, existing)

    try:
        save_candidates(recurring, candidates)
    except WriteError as e:
        logger.error("Failed to save recurring transactions for user %s: %s", user_id, e)
        return DetectionOutcome(candidates=candidates, error=e)

    return DetectionOutcome(candidates=candidates, persisted=True)


def get_recurring_transactions(
    db: Session,
    user_id: str,
    include_ignored: bool = False
) -> List[RecurringTransaction]:
    """Get a user's stored recurring transactions, soonest due first."""
    query = db.query(RecurringTransaction).filter(RecurringTransaction.user_id == user_id)

    if not include_ignored:
        query = query.filter(RecurringTransaction.status == RecurringStatus.active.value)

    return query.order_by(RecurringTransaction.next_date.asc()).all()


def set_status(db: Session, recurring_id: str, status: RecurringStatus) -> RecurringTransaction:
    """Record the user's override; it survives later detection runs."""
    record = db.query(RecurringTransaction).filter(RecurringTransaction.id == recurring_id).first()
    if not record:
        raise ValueError(f"Recurring transaction {recurring_id} not found")

    record.status = RecurringStatus(status).value
    db.commit()
    db.refresh(record)
    return record
