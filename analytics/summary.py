"""
Aggregate statistics over a transaction batch: totals, category sales,
rule-based spend tiers and per-segment counts.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from config.config import SummaryConfig
from models.customer import CustomerProfile, SegmentAssignment
from models.enums import SpendTier
from models.summary import CategorySales, GroupStats, SummaryReport
from models.transaction import Transaction
from utils.logger import get_logger

from .aggregation import TransactionLike, aggregate, parse_transactions

logger = get_logger(__name__)

FRAME_COLUMNS = [
    "customer_id",
    "product_id",
    "product_name",
    "product_category",
    "purchase_amount",
    "purchase_date",
]
CATEGORY_TABLE_COLUMNS = [
    "category",
    "total_sales",
    "transactions",
    "average_order",
    "top_product",
    "top_product_sales",
]


def transactions_to_frame(transactions: Iterable[TransactionLike]) -> pd.DataFrame:
    """Tabular view of the batch with amounts as floats."""
    records = parse_transactions(transactions)
    frame = pd.DataFrame([tx.model_dump() for tx in records], columns=FRAME_COLUMNS)
    frame["purchase_amount"] = frame["purchase_amount"].astype(float)
    return frame


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def spend_tier(profile: CustomerProfile, config: SummaryConfig | None = None) -> SpendTier:
    config = config or SummaryConfig()
    if (
        profile.total_spent > Decimal(str(config.premium_min_spent))
        and profile.category_count >= config.premium_min_categories
    ):
        return SpendTier.PREMIUM
    if (
        profile.total_spent > Decimal(str(config.regular_min_spent))
        or profile.frequency > config.regular_min_purchases
    ):
        return SpendTier.REGULAR
    return SpendTier.OCCASIONAL


def _tier_stats(profiles: Iterable[CustomerProfile], config: SummaryConfig) -> dict[SpendTier, GroupStats]:
    totals: dict[SpendTier, list[Decimal]] = {tier: [] for tier in SpendTier}
    for profile in profiles:
        totals[spend_tier(profile, config)].append(profile.total_spent)
    return {
        tier: GroupStats(
            count=len(spent),
            avg_spent=float(_round_half_up(sum(spent, Decimal("0")) / len(spent))) if spent else 0.0,
        )
        for tier, spent in totals.items()
    }


def _segment_stats(assignments: Sequence[SegmentAssignment]) -> dict[str, GroupStats]:
    members: dict[str, list[Decimal]] = {}
    for assignment in assignments:
        members.setdefault(assignment.segment, []).append(assignment.avg_spent)
    return {
        label: GroupStats(count=len(values), avg_spent=round(float(sum(values) / len(values)), 2))
        for label, values in members.items()
    }


def summarize(
    transactions: Iterable[TransactionLike],
    assignments: Sequence[SegmentAssignment] | None = None,
    config: SummaryConfig | None = None,
) -> SummaryReport:
    """
    Compute headline statistics for the batch.

    Segment statistics are included when ``assignments`` (from
    ``segment_customers``) are given. An empty batch gives a zeroed report.
    """
    config = config or SummaryConfig()
    records = parse_transactions(transactions)
    if not records:
        return SummaryReport()

    frame = transactions_to_frame(records)
    by_category = frame.groupby("product_category", sort=False)["purchase_amount"].agg(["sum", "count"])
    report = SummaryReport(
        total_customers=int(frame["customer_id"].nunique()),
        total_products=int(frame["product_id"].nunique()),
        total_sales=round(float(sum(tx.purchase_amount for tx in records)), 2),
        category_sales={
            str(category): CategorySales(sales=round(float(row["sum"]), 2), transactions=int(row["count"]))
            for category, row in by_category.iterrows()
        },
        spend_tiers=_tier_stats(aggregate(records).values(), config),
        segments=_segment_stats(assignments or []),
    )
    logger.info(
        f"Summary: {report.total_customers} customers, {report.total_products} products, "
        f"sales {report.total_sales:.2f}"
    )
    return report


def customer_history(transactions: Iterable[TransactionLike], customer_id: int) -> list[Transaction]:
    """A customer's purchases in batch order; ``[]`` when they never bought anything."""
    return [tx for tx in parse_transactions(transactions) if tx.customer_id == customer_id]


def category_sales_table(transactions: Iterable[TransactionLike]) -> pd.DataFrame:
    """
    Per-category sales with the best-selling product of each category.

    Sorted by total sales, highest first; equal totals keep first-seen order.
    """
    frame = transactions_to_frame(transactions)
    if frame.empty:
        return pd.DataFrame(columns=CATEGORY_TABLE_COLUMNS)

    totals = frame.groupby("product_category", sort=False)["purchase_amount"].agg(
        total_sales="sum", transactions="count"
    )
    totals["average_order"] = totals["total_sales"] / totals["transactions"]

    product_sales = (
        frame.groupby(["product_category", "product_id"], sort=False)
        .agg(product_name=("product_name", "first"), sales=("purchase_amount", "sum"))
        .reset_index()
    )
    top_rows = product_sales.loc[product_sales.groupby("product_category", sort=False)["sales"].idxmax()]
    top_rows = top_rows.set_index("product_category")

    table = totals.join(top_rows[["product_name", "sales"]]).rename(
        columns={"product_name": "top_product", "sales": "top_product_sales"}
    )
    table = table.reset_index().rename(columns={"product_category": "category"})
    table = table.sort_values("total_sales", ascending=False, kind="mergesort").reset_index(drop=True)
    return table[CATEGORY_TABLE_COLUMNS].round({"total_sales": 2, "average_order": 2, "top_product_sales": 2})
