"""
Схемы корзины покупателя.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.schemas.catalog import Money


class CartLine(BaseModel):
    """Строка корзины. Одна строка на пару (товар, вариант)."""

    product_id: int
    name: str
    price: Money
    quantity: int = Field(ge=1)
    seller_id: Optional[int] = None
    image: str
    variant: Optional[str] = None


class CartItemIn(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)
    variant: Optional[str] = None


class CartQuantityIn(BaseModel):
    quantity: int
    variant: Optional[str] = None


class CartOut(BaseModel):
    items: List[CartLine]
    item_count: int
    total: Money
