"""
Transaction record model: the immutable source of truth for every analysis run.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Long-form dates as written by the purchase log generator, e.g. "05 March 2024".
LONG_DATE_FORMATS = ("%d %B %Y", "%d %b %Y", "%B %d, %Y")
# Amounts are converted to float64 for clustering; this bound keeps them and their sums finite.
MAX_PURCHASE_AMOUNT = Decimal("1e12")


class Transaction(BaseModel):
    """A single purchase. Accepts the camelCase column names of the source log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    customer_id: int = Field(alias="customerId")
    product_id: int = Field(alias="productId")
    product_name: str = Field(alias="productName", min_length=1)
    product_category: str = Field(alias="productCategory", min_length=1)
    purchase_amount: Decimal = Field(alias="purchaseAmount", ge=0, le=MAX_PURCHASE_AMOUNT)
    purchase_date: date = Field(alias="purchaseDate")

    @field_validator("customer_id", "product_id", mode="before")
    @classmethod
    def _reject_bool_ids(cls, value):
        if isinstance(value, bool):
            raise ValueError("ids must be integers, not booleans")
        return value

    @field_validator("purchase_date", mode="before")
    @classmethod
    def _parse_purchase_date(cls, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            text = value.strip()
            for fmt in LONG_DATE_FORMATS:
                try:
                    return datetime.strptime(text, fmt).date()
                except ValueError:
                    continue
        # Anything else (ISO strings, date objects) is left to pydantic
        return value
