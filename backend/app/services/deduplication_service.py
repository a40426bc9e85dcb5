"""
Deduplication of recurring candidates produced by the two detection passes.
"""

from decimal import Decimal
from typing import List, Sequence

from app.services.detection_types import PatternCandidate, WHOLE_GROUP

SAME_AMOUNT_TOLERANCE = Decimal("1.00")
SAME_NEXT_DATE_DAYS = 3


def _next_dates_close(a: PatternCandidate, b: PatternCandidate) -> bool:
    return abs((a.next_date - b.next_date).days) < SAME_NEXT_DATE_DAYS


def is_cluster_duplicate(candidate: PatternCandidate, accepted: Sequence[PatternCandidate]) -> bool:
    """
    True when an accepted candidate for the same merchant already has this
    frequency and a next date within three days.
    """
    return any(
        other.merchant_name == candidate.merchant_name
        and other.frequency == candidate.frequency
        and _next_dates_close(other, candidate)
        for other in accepted
    )


def is_same_subscription(a: PatternCandidate, b: PatternCandidate) -> bool:
    """Same merchant, amounts within a dollar, next dates within three days."""
    return (
        a.merchant_name == b.merchant_name
        and abs(a.amount - b.amount) < SAME_AMOUNT_TOLERANCE
        and _next_dates_close(a, b)
    )


def _preference(candidate: PatternCandidate) -> tuple:
    # Higher confidence first; whole-group pass wins ties
    return (-candidate.confidence, 0 if candidate.source == WHOLE_GROUP else 1)


def deduplicate_candidates(candidates: Sequence[PatternCandidate]) -> List[PatternCandidate]:
    """
    Collapse candidates describing the same real-world subscription.

    The preferred candidate of each colliding set survives: highest confidence,
    then whole-group over clustered, then earliest collected. Survivors keep
    their collection order.
    """
    ranked = sorted(range(len(candidates)), key=lambda i: (_preference(candidates[i]), i))

    kept_indexes: List[int] = []
    for index in ranked:
        candidate = candidates[index]
        if any(is_same_subscription(candidate, candidates[k]) for k in kept_indexes):
            continue
        kept_indexes.append(index)

    return [candidates[i] for i in sorted(kept_indexes)]
