"""
API endpoints корзины покупателя.

Корзина адресуется заголовком X-Session-Id и хранится в памяти.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.db.database import get_db
from storefront.schemas.cart import CartItemIn, CartOut, CartQuantityIn
from storefront.services.cart import add_product_to_cart, set_cart_quantity
from storefront.services.session_state import (
    ShopperState,
    get_shopper_state,
    peek_shopper_state,
)

router = APIRouter()


@router.get("", response_model=CartOut)
def get_cart(state: ShopperState = Depends(peek_shopper_state)):
    """Содержимое корзины с общей суммой."""
    with state.lock:
        return state.cart.to_out()


@router.post("/items", response_model=CartOut, status_code=201)
def add_item(
    payload: CartItemIn,
    state: ShopperState = Depends(get_shopper_state),
    db: Session = Depends(get_db),
):
    """
    Добавить товар в корзину.

    Повторное добавление того же товара с тем же вариантом
    увеличивает количество в существующей строке.

    Raises:
        NotFoundError: Товар не найден (404)
        ValidationError: Товара нет в наличии или не хватает остатка (422)
    """
    with state.lock:
        add_product_to_cart(
            db, state.cart, payload.product_id, quantity=payload.quantity, variant=payload.variant
        )
        return state.cart.to_out()


@router.patch("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: int,
    payload: CartQuantityIn,
    state: ShopperState = Depends(peek_shopper_state),
    db: Session = Depends(get_db),
):
    """Изменить количество (не больше остатка); 0 удаляет строку."""
    with state.lock:
        set_cart_quantity(db, state.cart, product_id, payload.quantity, variant=payload.variant)
        return state.cart.to_out()


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    variant: Optional[str] = Query(None),
    state: ShopperState = Depends(peek_shopper_state),
):
    with state.lock:
        state.cart.remove_item(product_id, variant=variant)
        return state.cart.to_out()


@router.delete("", response_model=CartOut)
def clear_cart(state: ShopperState = Depends(peek_shopper_state)):
    with state.lock:
        state.cart.clear()
        return state.cart.to_out()
