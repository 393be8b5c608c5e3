"""
API endpoints оформления заказа и страницы подтверждения.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.core.auth import get_optional_user
from storefront.db.database import get_db
from storefront.db.models import User
from storefront.schemas.orders import LastOrder, OrderSuccessOut, ShippingIn
from storefront.services.checkout import place_order
from storefront.services.session_state import (
    ShopperState,
    peek_shopper_state,
)
from storefront.services.tracking import timeline_at

router = APIRouter()


def get_clock() -> Callable[[], datetime]:
    """Dependency: источник текущего времени (подменяется в тестах)."""
    return lambda: datetime.now(timezone.utc)


@router.post("", response_model=LastOrder, status_code=201)
def checkout(
    shipping: ShippingIn,
    state: ShopperState = Depends(peek_shopper_state),
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """
    Оформить заказ из корзины.

    При успехе корзина очищается, а снимок заказа сохраняется
    для страницы подтверждения.

    Raises:
        ValidationError: Корзина пуста (422)
        BackendError: Заказ не удалось сохранить (400)
    """
    with state.lock:
        return place_order(db, state, shipping, customer_id=user.id if user else None)


@router.get("/last-order", response_model=OrderSuccessOut)
def get_last_order(
    state: ShopperState = Depends(peek_shopper_state),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Страница подтверждения: снимок заказа и этапы отслеживания.

    Доступна только после оформления заказа.
    """
    last_order = state.last_order
    if last_order is None:
        raise HTTPException(404, detail="Order not found")
    timeline = timeline_at(last_order.placed_at, clock())
    return OrderSuccessOut(order=last_order, tracking=timeline.steps())


@router.delete("/last-order", status_code=204)
def clear_last_order(state: ShopperState = Depends(peek_shopper_state)):
    """Покупатель ушел со страницы подтверждения."""
    state.clear_last_order()
