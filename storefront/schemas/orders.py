# storefront/schemas/orders.py
import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr

from storefront.schemas.catalog import Money


class ShippingIn(BaseModel):
    """Данные доставки из формы оформления заказа."""

    first_name: str
    last_name: str
    email: EmailStr
    address: str
    city: str
    postal_code: str
    country: str


class LastOrderItem(BaseModel):
    product_id: int
    name: str
    price: Money
    quantity: int
    image: str
    variant: Optional[str] = None


class LastOrder(BaseModel):
    """Снимок только что оформленного заказа для страницы подтверждения."""

    order_id: int
    placed_at: datetime.datetime
    shipping: ShippingIn
    items: List[LastOrderItem]
    total: Money


class TrackingStepOut(BaseModel):
    id: int
    title: str
    description: str
    completed: bool
    date: Optional[datetime.date] = None


class OrderSuccessOut(BaseModel):
    order: LastOrder
    tracking: List[TrackingStepOut]


class OrderHistoryItem(BaseModel):
    product_id: int
    name: str
    price: Money
    quantity: int
    image: str


class ShippingAddressOut(BaseModel):
    name: str
    address: str
    city: str
    postal_code: str
    country: str


class OrderHistoryOut(BaseModel):
    id: int
    date: datetime.datetime
    total: Money
    items: List[OrderHistoryItem]
    shipping_address: ShippingAddressOut
