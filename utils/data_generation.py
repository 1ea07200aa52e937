import math
from datetime import date, timedelta

import numpy as np
import pandas as pd

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES = (
    "Electronics",
    "Clothing",
    "Books",
    "Home & Kitchen",
    "Sports",
    "Toys",
)
PURCHASE_COLUMNS = [
    "customerId",
    "productId",
    "productName",
    "productCategory",
    "purchaseAmount",
    "purchaseDate",
]


def generate_synthetic_purchases(
    num_customers: int = 500,
    num_purchases: int = 5000,
    num_products: int = 50,
    categories: tuple[str, ...] = DEFAULT_CATEGORIES,
    seed: int = 42,
    min_base_price: float = 20.0,
    max_base_price: float = 400.0,
    price_jitter: float = 0.1,
    history_days: int = 730,
    end_date_str: str = "2024-12-31",
    first_customer_id: int = 1,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Generates a synthetic customer purchase log.

    Args:
        num_customers: Number of distinct customer ids to draw from.
        num_purchases: Number of purchase rows.
        num_products: Total products, spread evenly over categories (the last
            category absorbs the remainder).
        categories: Product category names.
        seed: Random seed for reproducibility.
        min_base_price: Lower bound of a product's base price.
        max_base_price: Upper bound of a product's base price.
        price_jitter: Each purchase pays base price times U(1 - jitter, 1 + jitter).
        history_days: Purchases fall within this many days before ``end_date_str``.
        end_date_str: Last possible purchase date (YYYY-MM-DD).
        first_customer_id: Smallest customer id; 1 matches the historical log format.

    Returns:
        A tuple containing:
        - purchases_df: One row per purchase with the six log columns
          (``purchaseDate`` in long form, e.g. "05 March 2024").
        - product_df: Product catalog with ``productId``, ``productName``,
          ``productCategory`` and ``basePrice``.
    """
    if not categories:
        raise ValueError("At least one product category is required.")
    rng = np.random.default_rng(seed)
    per_category = math.ceil(num_products / len(categories))

    products = []
    for cat_index, category in enumerate(categories):
        is_last = cat_index == len(categories) - 1
        count = num_products - cat_index * per_category if is_last else per_category
        for i in range(max(0, count)):
            product_id = cat_index * per_category + i + 1
            products.append(
                {
                    "productId": product_id,
                    "productName": f"{category} Item {product_id}",
                    "productCategory": category,
                    "basePrice": round(float(rng.uniform(min_base_price, max_base_price)), 2),
                }
            )
    product_df = pd.DataFrame(products, columns=["productId", "productName", "productCategory", "basePrice"])
    if product_df.empty:
        raise ValueError("Product catalog is empty; increase num_products.")

    end_date = date.fromisoformat(end_date_str)
    customer_ids = rng.integers(first_customer_id, first_customer_id + num_customers, size=num_purchases)
    product_rows = rng.integers(0, len(product_df), size=num_purchases)
    jitters = rng.uniform(1 - price_jitter, 1 + price_jitter, size=num_purchases)
    day_offsets = rng.integers(0, history_days + 1, size=num_purchases)

    data = []
    for customer_id, row, jitter, offset in zip(customer_ids, product_rows, jitters, day_offsets):
        product = product_df.iloc[int(row)]
        data.append(
            {
                "customerId": int(customer_id),
                "productId": int(product["productId"]),
                "productName": product["productName"],
                "productCategory": product["productCategory"],
                "purchaseAmount": round(float(product["basePrice"]) * float(jitter), 2),
                "purchaseDate": (end_date - timedelta(days=int(offset))).strftime("%d %B %Y"),
            }
        )
    purchases_df = pd.DataFrame(data, columns=PURCHASE_COLUMNS)
    logger.info(
        f"Generated {len(purchases_df)} purchases for up to {num_customers} customers "
        f"over {len(product_df)} products"
    )
    return purchases_df, product_df
