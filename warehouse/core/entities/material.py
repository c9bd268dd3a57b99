"""
Material domain entity.

Represents a stocked item whose quantity is derived from the movements ledger.
"""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class Material(BaseModel):
    """
    A material kept in the warehouse.

    ``current_stock`` is a cache of the ledger; the Stock Reconciler owns it.
    ``stock_version`` is bumped by every ledger write touching the material
    and guards FIFO exits against concurrent writers.
    """

    id: int | None = None
    name: str
    category_id: int | None = None
    unit: str = "un"
    description: str | None = None
    current_stock: int = Field(default=0, ge=0)
    minimum_stock: int = Field(default=0, ge=0)
    unit_price: Decimal | None = None  # last supplier price, display only
    last_supplier_id: int | None = None
    owner_id: int = 1
    stock_version: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_low_stock(self) -> bool:
        """At or below the configured minimum."""
        return self.current_stock <= self.minimum_stock
