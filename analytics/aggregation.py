"""
Transaction aggregation: folds a raw transaction batch into per-customer profiles.

Data-quality policy is *reject*: the first malformed row aborts the whole
batch with a ``DataQualityError``. No partially aggregated result is returned.
"""

from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from models.customer import CustomerProfile
from models.product import ProductInfo
from models.transaction import Transaction
from utils.logger import get_logger

from .exceptions import DataQualityError

logger = get_logger(__name__)

TransactionLike = Transaction | Mapping


def parse_transactions(rows: Iterable[TransactionLike]) -> list[Transaction]:
    """
    Validate a batch of rows into ``Transaction`` records.

    Args:
        rows: ``Transaction`` objects or mappings keyed by the source column
            names (``customerId`` ...) or the snake_case field names.

    Returns:
        list[Transaction]: The validated batch, in input order.

    Raises:
        DataQualityError: On the first row with a missing or malformed field.
    """
    transactions: list[Transaction] = []
    for index, row in enumerate(rows):
        if isinstance(row, Transaction):
            transactions.append(row)
            continue
        if not isinstance(row, Mapping):
            raise DataQualityError(
                f"Row {index} is a {type(row).__name__}, expected a mapping or Transaction",
                row_index=index,
            )
        try:
            transactions.append(Transaction.model_validate(dict(row)))
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            logger.error(f"Rejecting batch: row {index} failed validation on {fields}")
            raise DataQualityError(
                f"Row {index} has missing or malformed fields {fields}: {e.error_count()} error(s)",
                row_index=index,
                fields=fields,
            ) from e
    return transactions


def aggregate(transactions: Iterable[TransactionLike]) -> dict[int, CustomerProfile]:
    """
    Build one ``CustomerProfile`` per customer, in first-seen customer order.

    An empty batch yields an empty mapping.
    """
    records = parse_transactions(transactions)
    profiles: dict[int, CustomerProfile] = {}
    for tx in records:
        profile = profiles.get(tx.customer_id)
        if profile is None:
            profile = profiles[tx.customer_id] = CustomerProfile(customer_id=tx.customer_id)
        profile.add_purchase(tx.purchase_amount, tx.product_category, tx.product_name)
    logger.info(f"Aggregated {len(records)} transactions into {len(profiles)} customer profiles")
    return profiles


def build_category_vocabulary(transactions: Iterable[TransactionLike]) -> list[str]:
    """All categories in the batch, in first-seen order."""
    vocabulary: dict[str, None] = {}
    for tx in parse_transactions(transactions):
        vocabulary.setdefault(tx.product_category, None)
    return list(vocabulary)


def build_product_catalog(transactions: Iterable[TransactionLike]) -> dict[int, ProductInfo]:
    """Map product id to name/category. Later rows overwrite earlier ones."""
    catalog: dict[int, ProductInfo] = {}
    for tx in parse_transactions(transactions):
        catalog[tx.product_id] = ProductInfo(name=tx.product_name, category=tx.product_category)
    return catalog


def purchase_pairs(transactions: Iterable[TransactionLike]) -> list[tuple[int, int]]:
    """(customer_id, product_id) pairs used to train the recommendation model."""
    return [(tx.customer_id, tx.product_id) for tx in parse_transactions(transactions)]
