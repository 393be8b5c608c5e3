"""
API endpoints для работы с категориями товаров.

Содержит операции для получения списка категорий
и страницы категории с товарами подкатегорий.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.db.database import get_db
from storefront.schemas.catalog import CategoryOut, CategoryProductsOut
from storefront.services import catalog

router = APIRouter()


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    """
    Получить список всех категорий.

    Example:
        [
            {"id": 1, "name": "Electronics", "parent_id": null},
            {"id": 2, "name": "Phones", "parent_id": 1}
        ]
    """
    return catalog.list_categories(db)


@router.get("/top-level", response_model=List[CategoryOut])
def list_top_level_categories(db: Session = Depends(get_db)):
    """Корневые категории для меню и витрины на главной."""
    return catalog.list_top_level_categories(db)


@router.get("/{name}/products", response_model=CategoryProductsOut)
def category_products(
    name: str,
    db: Session = Depends(get_db),
    q: str = Query("", description="Поиск по названию товара"),
):
    """
    Страница категории.

    Возвращает категорию, ее подкатегории и товары, привязанные
    к категории или к любой подкатегории (без дублей).

    Args:
        name: Название категории (URL-encoded в пути)
        db: Сессия базы данных
        q: Поисковый запрос по названию (регистронезависимый)

    Raises:
        NotFoundError: Если категория не найдена (404)
    """
    return catalog.resolve_category(db, name, search=q)
