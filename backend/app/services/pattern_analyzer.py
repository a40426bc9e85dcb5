"""
Heuristic recurrence classifier for one merchant's transaction history.

Given the outflows of a single merchant (or a day-of-month cluster of one),
decides whether they repeat on a schedule and, if so, how often, when the next
charge is due and how confident the classification is.
"""

import calendar
import logging
import statistics
from datetime import date, timedelta
from typing import List, Mapping, Optional, Sequence, Tuple

from app.models.recurring import Frequency
from app.services.detection_types import PatternCandidate, TransactionRecord

logger = logging.getLogger(__name__)

# Never a subscription, however regular
HARD_EXCLUDED_LABELS = frozenset({
    "Fast Food",
    "Convenience Stores",
    "Restaurants",
})

# Bills on naturally irregular cycles
UTILITY_LABELS = frozenset({
    "Gas and Electricity",
    "Water",
    "Internet",
    "Insurance",
    "Home Phone",
    "Mobile Phone",
    "Cable",
})

# Habitual small purchases that look periodic by accident
VARIABLE_LABELS = frozenset({
    "Coffee",
    "Gas",
    "Taxis and Ride Shares",
    "Discount Stores",
    "Food and Drink",
})

MIN_GAP_DAYS = 4
HABIT_AMOUNT_CEILING = 50.0
HABIT_MAX_AMOUNT_VARIANCE = 1.0
HABIT_MAX_DAY_STDDEV = 3.0
VOLATILE_AMOUNT_VARIANCE = 2000.0
VOLATILE_PENALTY = 0.1
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0

TWO_POINT_CONFIDENCE = 0.85

# (frequency, expected mean interval, mean tolerance, max stddev, confidence)
FREQUENCY_RULES: List[Tuple[Frequency, float, float, Optional[float], float]] = [
    (Frequency.weekly, 7, 2, 2, 0.90),
    (Frequency.biweekly, 14, 3, 3, 0.85),
    (Frequency.monthly, 30.5, 5, 5, 0.95),
    (Frequency.monthly, 61, 10, 10, 0.85),    # one skipped month
    (Frequency.monthly, 91.5, 10, 10, 0.80),  # two skipped months
    (Frequency.yearly, 365, 10, None, 0.80),
]

UTILITY_INTERVAL_RANGE = (25, 100)
UTILITY_CONFIDENCE = 0.80

CYCLE_DAYS = {
    Frequency.weekly: 7,
    Frequency.biweekly: 14,
    Frequency.monthly: 30,
    Frequency.yearly: 365,
}

ALLOWED_MISSED_CYCLES = {
    Frequency.weekly: 2,
    Frequency.biweekly: 1,
    Frequency.monthly: 1,
    Frequency.yearly: 0.2,
}
UTILITY_ALLOWED_MISSED_CYCLES = 2


def calculate_next_expected(last_date: date, frequency: Frequency) -> date:
    """Calculate the next expected date based on frequency."""
    if frequency == Frequency.weekly:
        return last_date + timedelta(days=7)
    elif frequency == Frequency.biweekly:
        return last_date + timedelta(days=14)
    elif frequency == Frequency.monthly:
        if last_date.month == 12:
            year, month = last_date.year + 1, 1
        else:
            year, month = last_date.year, last_date.month + 1
        # Clamp to the end of shorter months
        day = min(last_date.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)
    elif frequency == Frequency.yearly:
        try:
            return date(last_date.year + 1, last_date.month, last_date.day)
        except ValueError:
            # Feb 29 in a non-leap year
            return date(last_date.year + 1, last_date.month, 28)
    raise ValueError(f"Unsupported frequency: {frequency}")


def collapse_noise(transactions: Sequence[TransactionRecord]) -> List[TransactionRecord]:
    """
    Drop charges landing within four days of the previously kept one.
    Authorization/settlement pairs and split charges otherwise show up as
    bogus short intervals.
    """
    if not transactions:
        return []

    unique = [transactions[0]]
    for txn in transactions[1:]:
        if (txn.date - unique[-1].date).days >= MIN_GAP_DAYS:
            unique.append(txn)
    return unique


def classify_interval(
    mean_interval: float,
    stddev: float,
    is_utility: bool = False,
) -> Optional[Tuple[Frequency, float]]:
    """Map interval statistics to (frequency, base confidence), or None."""
    for frequency, expected, tolerance, max_stddev, confidence in FREQUENCY_RULES:
        if abs(mean_interval - expected) >= tolerance:
            continue
        if max_stddev is not None and stddev >= max_stddev:
            continue
        return frequency, confidence

    low, high = UTILITY_INTERVAL_RANGE
    if is_utility and low <= mean_interval <= high:
        return Frequency.monthly, UTILITY_CONFIDENCE

    return None


def _is_two_point_subscription(first: TransactionRecord, second: TransactionRecord) -> bool:
    interval = (second.date - first.date).days
    if not 28 <= interval <= 31:
        return False
    if abs(abs(first.amount) - abs(second.amount)) >= 0.01:
        return False
    return abs(first.date.day - second.date.day) <= 1


def _build_candidate(
    latest: TransactionRecord,
    merchant_name: str,
    user_id: str,
    frequency: Frequency,
    next_date: date,
    confidence: float,
) -> PatternCandidate:
    return PatternCandidate(
        user_id=user_id,
        merchant_name=merchant_name,
        description=latest.description,
        amount=abs(latest.amount),  # Latest, not average, so price changes show immediately
        frequency=frequency,
        last_date=latest.date,
        next_date=next_date,
        confidence=round(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence)), 2),
        icon_url=latest.icon_url,
        category_id=latest.category_id,
    )


def analyze_set(
    transactions: Sequence[TransactionRecord],
    merchant_name: str,
    user_id: str,
    category_labels: Optional[Mapping[str, str]] = None,
    today: Optional[date] = None,
) -> Optional[PatternCandidate]:
    """
    Classify one merchant's transactions as a recurring charge.

    Returns None when there is no pattern, when the merchant's category rules
    it out, or when the pattern has gone quiet for too long.
    """
    if len(transactions) < 2:
        return None

    category_labels = category_labels or {}
    today = today or date.today()

    ordered = sorted(transactions, key=lambda t: t.date)
    unique = collapse_noise(ordered)
    if len(unique) < 2:
        return None

    latest = unique[-1]
    label = category_labels.get(latest.category_id) if latest.category_id else None
    if label in HARD_EXCLUDED_LABELS:
        return None
    is_utility = label in UTILITY_LABELS
    is_variable = label in VARIABLE_LABELS

    if len(unique) == 2:
        if not _is_two_point_subscription(unique[0], latest):
            return None
        return _build_candidate(
            latest,
            merchant_name,
            user_id,
            Frequency.monthly,
            calculate_next_expected(latest.date, Frequency.monthly),
            TWO_POINT_CONFIDENCE,
        )

    intervals = [(b.date - a.date).days for a, b in zip(unique, unique[1:])]
    mean_interval = statistics.mean(intervals)
    stddev = statistics.pstdev(intervals)

    classified = classify_interval(mean_interval, stddev, is_utility)
    if classified is None:
        return None
    frequency, confidence = classified

    amounts = [float(abs(t.amount)) for t in unique]
    amount_variance = statistics.pvariance(amounts)

    if is_variable and statistics.mean(amounts) < HABIT_AMOUNT_CEILING:
        day_stddev = statistics.pstdev([t.date.day for t in unique])
        if amount_variance > HABIT_MAX_AMOUNT_VARIANCE or day_stddev > HABIT_MAX_DAY_STDDEV:
            return None

    if amount_variance > VOLATILE_AMOUNT_VARIANCE and not is_utility:
        confidence -= VOLATILE_PENALTY

    next_date = calculate_next_expected(latest.date, frequency)

    days_past_due = (today - next_date).days
    cycle_days = CYCLE_DAYS[frequency]
    allowed = UTILITY_ALLOWED_MISSED_CYCLES if is_utility else ALLOWED_MISSED_CYCLES[frequency]
    if days_past_due > cycle_days * allowed:
        logger.info(
            "Discarding %s (%s): missed %.1f cycles",
            merchant_name, frequency.value, days_past_due / cycle_days,
        )
        return None

    return _build_candidate(latest, merchant_name, user_id, frequency, next_date, confidence)
