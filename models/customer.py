"""
Per-customer aggregates derived from a transaction batch.
Rebuilt on every analysis run and never persisted.
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class PurchaseBucket:
    """Running count and spend for one category or product."""

    count: int = 0
    spent: Decimal = Decimal("0")

    def add(self, amount: Decimal) -> None:
        self.count += 1
        self.spent += amount


def _top_bucket(buckets: dict[str, PurchaseBucket]) -> str | None:
    # max() keeps the first maximal key, so ties resolve to insertion order
    if not buckets:
        return None
    return max(buckets, key=lambda name: buckets[name].count)


@dataclass
class CustomerProfile:
    """
    Aggregated purchase summary for one customer.

    ``avg_spent``, ``most_used_category`` and ``favorite_product`` are computed
    on access so they always reflect the current totals.
    """

    customer_id: int
    total_spent: Decimal = Decimal("0")
    frequency: int = 0
    category_breakdown: dict[str, PurchaseBucket] = field(default_factory=dict)
    product_breakdown: dict[str, PurchaseBucket] = field(default_factory=dict)

    def add_purchase(self, amount: Decimal, category: str, product_name: str) -> None:
        self.total_spent += amount
        self.frequency += 1
        self.category_breakdown.setdefault(category, PurchaseBucket()).add(amount)
        self.product_breakdown.setdefault(product_name, PurchaseBucket()).add(amount)

    @property
    def avg_spent(self) -> Decimal:
        if self.frequency == 0:
            return Decimal("0")
        return self.total_spent / self.frequency

    @property
    def most_used_category(self) -> str | None:
        return _top_bucket(self.category_breakdown)

    @property
    def favorite_product(self) -> str | None:
        return _top_bucket(self.product_breakdown)

    @property
    def category_count(self) -> int:
        return len(self.category_breakdown)


@dataclass(frozen=True)
class SegmentAssignment:
    """Segment label and headline stats for one customer."""

    customer_id: int
    segment: str
    cluster: int
    most_used_category: str | None
    favorite_product: str | None
    avg_spent: Decimal
