"""
API endpoints истории заказов покупателя.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core.auth import get_current_user
from storefront.db.database import get_db
from storefront.db.models import User
from storefront.schemas.orders import OrderHistoryOut
from storefront.services.checkout import list_customer_orders

router = APIRouter()


@router.get("", response_model=List[OrderHistoryOut])
def list_my_orders(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Получить заказы текущего пользователя.

    Заказы отсортированы от новых к старым, каждая позиция
    содержит цену на момент покупки.
    """
    return list_customer_orders(db, current_user.id)
