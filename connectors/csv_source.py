"""
Module: connectors.csv_source

Reads a customer purchase log from CSV into validated transactions.
"""

from os import PathLike

import pandas as pd

from analytics.aggregation import parse_transactions
from analytics.exceptions import DataQualityError
from models.product import ProductInfo
from models.transaction import Transaction
from utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = (
    "customerId",
    "productId",
    "productName",
    "productCategory",
    "purchaseAmount",
    "purchaseDate",
)


def read_purchase_log(path: str | PathLike) -> pd.DataFrame:
    """
    Load the raw log as strings so that pydantic, not pandas, decides what parses.

    Raises:
        DataQualityError: If a required column is missing.
    """
    frame = pd.read_csv(path, dtype=str, skip_blank_lines=True)
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise DataQualityError(f"Purchase log {path} is missing columns {missing}", fields=missing)
    return frame[list(REQUIRED_COLUMNS)]


def load_transactions_csv(path: str | PathLike) -> list[Transaction]:
    """Read and validate every row; the first malformed row rejects the file."""
    frame = read_purchase_log(path)
    # Missing cells arrive as NaN floats and fail validation as missing values
    rows = frame.astype(object).where(frame.notna(), None).to_dict(orient="records")
    transactions = parse_transactions(rows)
    logger.info(f"Loaded {len(transactions)} transactions from {path}")
    return transactions


def load_product_catalog(path: str | PathLike) -> dict[int, ProductInfo]:
    """Product catalog CSV with ``productId``, ``productName`` and ``productCategory`` columns."""
    frame = pd.read_csv(path, dtype={"productName": str, "productCategory": str})
    missing = [c for c in ("productId", "productName", "productCategory") if c not in frame.columns]
    if missing:
        raise DataQualityError(f"Product catalog {path} is missing columns {missing}", fields=missing)
    return {
        int(row.productId): ProductInfo(name=row.productName, category=row.productCategory)
        for row in frame.itertuples(index=False)
    }
