"""Sample purchase rows shared by the analytics tests."""

from datetime import date
from decimal import Decimal

from models.transaction import Transaction


def make_transaction(
    customer_id: int,
    product_id: int,
    amount: str | float = "10.00",
    category: str = "Books",
    name: str | None = None,
    purchase_date: date = date(2024, 3, 5),
) -> Transaction:
    return Transaction(
        customer_id=customer_id,
        product_id=product_id,
        product_name=name or f"Item {product_id}",
        product_category=category,
        purchase_amount=Decimal(str(amount)),
        purchase_date=purchase_date,
    )


def raw_row(**overrides) -> dict:
    """A CSV-shaped row with camelCase keys and string values."""
    row = {
        "customerId": "1",
        "productId": "3",
        "productName": "Desk Lamp",
        "productCategory": "Home & Kitchen",
        "purchaseAmount": "42.50",
        "purchaseDate": "05 March 2024",
    }
    row.update(overrides)
    return row


def mixed_batch() -> list[Transaction]:
    """Eight customers with clearly separated spending behaviour."""
    txs = []
    # Big spenders on electronics
    for cid in (0, 1):
        txs += [make_transaction(cid, 1, 900, "Electronics", "Laptop") for _ in range(3)]
    # Small, frequent book buyers
    for cid in (2, 3):
        txs += [make_transaction(cid, 2, 12, "Books", "Novel") for _ in range(8)]
    # Occasional clothing buyers
    for cid in (4, 5):
        txs.append(make_transaction(cid, 3, 40, "Clothing", "T-Shirt"))
    # Mixed basket
    for cid in (6, 7):
        txs += [
            make_transaction(cid, 1, 850, "Electronics", "Laptop"),
            make_transaction(cid, 2, 15, "Books", "Novel"),
            make_transaction(cid, 3, 35, "Clothing", "T-Shirt"),
        ]
    return txs
