"""
Partitioning of transactions by merchant, and by day of month within a merchant.
"""

from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from app.services.detection_types import TransactionRecord

MerchantGroups = Mapping[str, Tuple[TransactionRecord, ...]]

# Days after an anchor day merged into its cluster (weekend/processing drift)
DAY_DRIFT = 2
MIN_CLUSTER_SIZE = 3


def merchant_key(txn: TransactionRecord) -> Optional[str]:
    """Merchant name if present, else description, trimmed. None when blank."""
    key = (txn.merchant_name or txn.description or "").strip()
    return key or None


def group_by_merchant(transactions: Iterable[TransactionRecord]) -> MerchantGroups:
    """Read-only mapping of merchant key to date-ascending transactions."""
    groups: Dict[str, List[TransactionRecord]] = defaultdict(list)
    for txn in transactions:
        key = merchant_key(txn)
        if key is None:
            continue
        groups[key].append(txn)

    return MappingProxyType({
        key: tuple(sorted(txns, key=lambda t: t.date))
        for key, txns in groups.items()
    })


def cluster_by_day_of_month(
    transactions: Iterable[TransactionRecord],
) -> List[Tuple[TransactionRecord, ...]]:
    """
    Split one merchant's history into day-of-month clusters.

    Days are walked 1..31; each unconsumed day absorbs the following two days.
    Clusters with fewer than three transactions are dropped.
    """
    by_day: Dict[int, List[TransactionRecord]] = defaultdict(list)
    for txn in transactions:
        by_day[txn.date.day].append(txn)

    clusters = []
    consumed = set()
    for day in range(1, 32):
        if day in consumed or day not in by_day:
            continue

        cluster = list(by_day[day])
        consumed.add(day)
        for offset in range(1, DAY_DRIFT + 1):
            next_day = day + offset
            if next_day in by_day:
                cluster.extend(by_day[next_day])
                consumed.add(next_day)

        if len(cluster) >= MIN_CLUSTER_SIZE:
            clusters.append(tuple(sorted(cluster, key=lambda t: t.date)))

    return clusters
