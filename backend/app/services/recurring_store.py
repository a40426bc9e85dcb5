"""
Identity and status continuity between detection runs.

Candidates are recomputed from scratch every run; the stored id and the
user-set status are the only things carried over, by matching each candidate
to a not-yet-claimed stored record of the same merchant with a close amount.

Known limitation: two genuinely different subscriptions from one merchant
whose prices are within the tolerance can trade stored identities between
runs. Matching is intentionally left merchant+amount based.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from app.config import settings
from app.repositories import RecurringRepository
from app.services.detection_types import PatternCandidate

logger = logging.getLogger(__name__)


def match_existing(
    candidates: Sequence[PatternCandidate],
    existing: Sequence[Any],
    amount_tolerance: Optional[Decimal] = None,
) -> List[PatternCandidate]:
    """
    Attach stored ids and statuses to candidates; fresh UUIDs for the rest.
    Each stored record can be claimed by at most one candidate.
    """
    if amount_tolerance is None:
        amount_tolerance = settings.existing_match_amount_tolerance

    claimed = set()
    matched = []
    for candidate in candidates:
        match = None
        for record in existing:
            if record.id in claimed or record.merchant_name != candidate.merchant_name:
                continue
            if abs(Decimal(str(record.amount)) - candidate.amount) <= amount_tolerance:
                match = record
                break

        if match is not None:
            claimed.add(match.id)
            matched.append(candidate.with_identity(str(match.id), match.status))
        else:
            matched.append(candidate.with_identity(str(uuid.uuid4()), candidate.status))

    return matched


def save_candidates(repository: RecurringRepository, candidates: Sequence[PatternCandidate]) -> None:
    """Write all candidates as one batch. Raises WriteError on failure."""
    repository.upsert_batch([c.to_record() for c in candidates])
    logger.info("Saved %d recurring transactions", len(candidates))
