"""
Оформление заказа и история заказов.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import BackendError, ValidationError
from storefront.db.models import Order, OrderItem
from storefront.schemas.orders import (
    LastOrder,
    LastOrderItem,
    OrderHistoryItem,
    OrderHistoryOut,
    ShippingAddressOut,
    ShippingIn,
)
from storefront.services.session_state import ShopperState

logger = logging.getLogger(__name__)


def place_order(
    db: Session,
    state: ShopperState,
    shipping: ShippingIn,
    customer_id: Optional[int] = None,
) -> LastOrder:
    """
    Оформить заказ из корзины покупателя.

    Заказ и все его позиции пишутся одной транзакцией: при ошибке
    откатывается все, корзина остается нетронутой. Цены берутся
    из корзины на момент оформления.

    Args:
        db: Сессия базы данных
        state: Состояние покупателя (корзина)
        shipping: Данные доставки
        customer_id: ID авторизованного покупателя

    Returns:
        LastOrder: Снимок оформленного заказа

    Raises:
        ValidationError: Если корзина пуста
        BackendError: Если заказ не удалось сохранить
    """
    cart = state.cart
    if cart.is_empty:
        raise ValidationError("Your cart is empty")

    lines = cart.lines
    total = cart.total

    order = Order(
        customer_id=customer_id,
        total_amount=total,
        first_name=shipping.first_name,
        last_name=shipping.last_name,
        email=shipping.email,
        address=shipping.address,
        city=shipping.city,
        postal_code=shipping.postal_code,
        country=shipping.country,
    )
    try:
        db.add(order)
        db.flush()
        for line in lines:
            db.add(
                OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price_at_moment=line.price,
                )
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Checkout failed: {e}")
        raise BackendError(str(getattr(e, "orig", None) or e))

    logger.info(f"Order {order.id} placed: {len(lines)} line(s), total {total}")

    receipt = LastOrder(
        order_id=order.id,
        placed_at=datetime.now(timezone.utc),
        shipping=shipping,
        items=[
            LastOrderItem(
                product_id=line.product_id,
                name=line.name,
                price=line.price,
                quantity=line.quantity,
                image=line.image,
                variant=line.variant,
            )
            for line in lines
        ],
        total=total,
    )
    state.last_order = receipt
    cart.clear()
    return receipt


def list_customer_orders(db: Session, customer_id: int) -> List[OrderHistoryOut]:
    """История заказов покупателя, новые сверху."""
    orders = db.scalars(
        select(Order)
        .where(Order.customer_id == customer_id)
        .order_by(desc(Order.date_created), desc(Order.id))
    ).all()

    result: List[OrderHistoryOut] = []
    for order in orders:
        items = [
            OrderHistoryItem(
                product_id=item.product_id,
                name=item.product.name if item.product else "",
                price=item.price_at_moment,
                quantity=item.quantity,
                image=settings.PLACEHOLDER_IMAGE,
            )
            for item in sorted(order.items, key=lambda i: i.id)
        ]
        result.append(
            OrderHistoryOut(
                id=order.id,
                date=order.date_created,
                total=order.total_amount,
                items=items,
                shipping_address=ShippingAddressOut(
                    name=f"{order.first_name or ''} {order.last_name or ''}".strip(),
                    address=order.address or "",
                    city=order.city or "",
                    postal_code=order.postal_code or "",
                    country=order.country or "",
                ),
            )
        )
    return result
