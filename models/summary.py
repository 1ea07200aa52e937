"""
Aggregate statistics reported alongside segments and recommendations.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from .enums import SpendTier
from .product import Recommendation
from .transaction import Transaction


@dataclass
class CategorySales:
    sales: float = 0.0
    transactions: int = 0


@dataclass
class GroupStats:
    """Member count and average spend for a spend tier or a segment."""

    count: int = 0
    avg_spent: float = 0.0


@dataclass
class SummaryReport:
    total_customers: int = 0
    total_products: int = 0
    total_sales: float = 0.0
    category_sales: dict[str, CategorySales] = field(default_factory=dict)
    spend_tiers: dict[SpendTier, GroupStats] = field(
        default_factory=lambda: {tier: GroupStats() for tier in SpendTier}
    )
    segments: dict[str, GroupStats] = field(default_factory=dict)


@dataclass
class CustomerInsight:
    """One customer's purchase history next to the products recommended to them."""

    customer_id: int
    history: list[Transaction] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def total_spent(self) -> Decimal:
        return sum((tx.purchase_amount for tx in self.history), Decimal("0"))
