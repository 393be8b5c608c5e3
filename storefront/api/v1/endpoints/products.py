"""
API endpoints для работы с товарами.

Каталог с фильтрацией, страница товара и похожие товары.
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.db.database import get_db
from storefront.schemas.catalog import ProductCard, ProductDetailOut
from storefront.services import catalog

router = APIRouter()


@router.get("", response_model=List[ProductCard])
def list_products(
    db: Session = Depends(get_db),
    q: str = Query("", description="Поиск по названию (без учета регистра)"),
    category: str = Query(catalog.ALL_CATEGORIES, description="Название категории или all"),
    price_min: Decimal = Query(Decimal(0), ge=0, description="Минимальная цена"),
    price_max: Optional[Decimal] = Query(None, ge=0, description="Максимальная цена"),
):
    """
    Получить каталог товаров с фильтрацией.

    Поддерживает:
    - Поиск по подстроке в названии
    - Фильтр по корневой категории или подкатегории
    - Диапазон цен (границы включительно)

    Returns:
        List[ProductCard]: Карточки товаров со списком категорий
    """
    product_filter = catalog.ProductFilter(
        search=q,
        category=category,
        min_price=price_min,
        max_price=(
            price_max if price_max is not None else Decimal(str(settings.DEFAULT_MAX_PRICE))
        ),
    )
    return catalog.filter_products(catalog.build_product_listing(db), product_filter)


@router.get("/{product_id}", response_model=ProductDetailOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    """
    Получить товар по ID.

    Возвращает товар с продавцом, атрибутами, корневыми категориями
    и вариантами цвета.

    Raises:
        NotFoundError: Если товар не найден (404)
    """
    return catalog.get_product_detail(db, product_id)


@router.get("/{product_id}/related", response_model=List[ProductCard])
def get_related_products(
    product_id: int,
    db: Session = Depends(get_db),
    category_id: Optional[int] = Query(None, description="ID корневой категории"),
    limit: int = Query(settings.RELATED_PRODUCTS_LIMIT, ge=1, le=20),
):
    """
    Похожие товары из той же категории.

    Если category_id не передан, берется корневая категория товара.
    """
    if category_id is None:
        category_id = catalog.get_product_detail(db, product_id).parent_category_id
    return catalog.related_products(db, product_id, category_id, limit=limit)
