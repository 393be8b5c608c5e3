"""
Сервис витрины.

Собирает карточки товаров с учетом дерева категорий:
страница категории (категория + подкатегории), общий каталог
с фильтрами, страница товара и блок похожих товаров.
"""

import logging
import random
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import NotFoundError
from storefront.db.models import Category, Product, ProductCategory
from storefront.schemas.catalog import (
    AttributeValueOut,
    CategoryOut,
    CategoryProductsOut,
    ParentCategoryOut,
    ProductCard,
    ProductDetailOut,
    SellerOut,
)

logger = logging.getLogger(__name__)

# Значение фильтра категории "без фильтра"
ALL_CATEGORIES = "all"


@dataclass
class ProductFilter:
    """
    Фильтр каталога. Все условия объединяются через AND.

    Attributes:
        search: Подстрока в названии (без учета регистра), пустая - без фильтра
        category: Название категории или "all"
        min_price: Нижняя граница цены включительно
        max_price: Верхняя граница цены включительно
    """

    search: str = ""
    category: str = ALL_CATEGORIES
    min_price: Decimal = Decimal(0)
    max_price: Decimal = Decimal(str(settings.DEFAULT_MAX_PRICE))

    def matches(self, card: ProductCard) -> bool:
        if self.search and self.search.lower() not in card.name.lower():
            return False
        if self.category != ALL_CATEGORIES and self.category not in card.categories:
            return False
        return self.min_price <= card.price <= self.max_price


def _card(product: Product, **extra) -> ProductCard:
    return ProductCard(
        id=product.id,
        name=product.name,
        price=product.price,
        quantity=product.quantity,
        status=product.status,
        seller_id=product.seller_id,
        mini_description=product.mini_description or "",
        image=settings.PLACEHOLDER_IMAGE,
        in_stock=product.in_stock,
        **extra,
    )


def _children(db: Session, category_id: int) -> List[Category]:
    stmt = select(Category).where(Category.parent_id == category_id).order_by(Category.id)
    return list(db.scalars(stmt).all())


def _unique(values: Iterable[int]) -> List[int]:
    return list(dict.fromkeys(values))


# ==================== КАТЕГОРИИ ====================


def list_categories(db: Session) -> List[Category]:
    return list(db.scalars(select(Category).order_by(Category.id)).all())


def list_top_level_categories(db: Session) -> List[Category]:
    """Корневые категории для навигации и витрины на главной."""
    stmt = select(Category).where(Category.parent_id.is_(None)).order_by(Category.id)
    return list(db.scalars(stmt).all())


def resolve_category(db: Session, name: str, search: str = "") -> CategoryProductsOut:
    """
    Получить товары категории и всех ее подкатегорий.

    Args:
        db: Сессия базы данных
        name: Точное название категории
        search: Подстрока для поиска по названию товара

    Returns:
        CategoryProductsOut: Категория, подкатегории и товары без дублей

    Raises:
        NotFoundError: Если категории с таким названием нет
    """
    category = db.scalar(select(Category).where(Category.name == name))
    if category is None:
        raise NotFoundError(f"Category '{name}' not found")

    children = _children(db, category.id)
    category_ids = [category.id] + [c.id for c in children]

    links = db.execute(
        select(ProductCategory.product_id, ProductCategory.category_id)
        .where(ProductCategory.category_id.in_(category_ids))
        .order_by(ProductCategory.id)
    ).all()
    product_ids = _unique(link.product_id for link in links)

    products: List[ProductCard] = []
    if product_ids:
        linked = {(link.product_id, link.category_id) for link in links}
        rows = db.scalars(
            select(Product).where(Product.id.in_(product_ids)).order_by(Product.id)
        ).all()
        for product in rows:
            # Подпись - первая подкатегория товара, иначе сама категория
            label = next(
                (c.name for c in children if (product.id, c.id) in linked),
                category.name,
            )
            products.append(_card(product, category=label))

    if search:
        products = [p for p in products if search.lower() in p.name.lower()]

    return CategoryProductsOut(
        category=CategoryOut.model_validate(category),
        subcategories=[CategoryOut.model_validate(c) for c in children],
        products=products,
    )


# ==================== КАТАЛОГ ====================


def category_labels(
    category_ids: Iterable[int], category_map: Dict[int, Category]
) -> List[str]:
    """
    Названия категорий товара: сначала корневые, затем подкатегории.

    Подкатегория тянет за собой свою корневую категорию, даже если
    товар к ней напрямую не привязан.
    """
    parents: List[str] = []
    children: List[str] = []
    for category_id in category_ids:
        category = category_map.get(category_id)
        if category is None:
            continue
        if category.parent_id is None:
            if category.name not in parents:
                parents.append(category.name)
            continue
        if category.name not in children:
            children.append(category.name)
        parent = category_map.get(category.parent_id)
        if parent is not None and parent.name not in parents:
            parents.append(parent.name)
    return parents + [name for name in children if name not in parents]


def build_product_listing(db: Session) -> List[ProductCard]:
    """Все товары каталога с их категориями."""
    category_map = {c.id: c for c in list_categories(db)}

    links_by_product: Dict[int, List[int]] = {}
    for link in db.scalars(select(ProductCategory).order_by(ProductCategory.id)).all():
        links_by_product.setdefault(link.product_id, []).append(link.category_id)

    products = db.scalars(select(Product).order_by(Product.id)).all()
    return [
        _card(
            product,
            categories=category_labels(links_by_product.get(product.id, []), category_map),
        )
        for product in products
    ]


def filter_products(
    cards: Iterable[ProductCard], product_filter: ProductFilter
) -> List[ProductCard]:
    return [card for card in cards if product_filter.matches(card)]


# ==================== СТРАНИЦА ТОВАРА ====================


def get_product_detail(db: Session, product_id: int) -> ProductDetailOut:
    """
    Получить товар с продавцом, атрибутами и корневыми категориями.

    Raises:
        NotFoundError: Если товар не найден
    """
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    attributes = [
        AttributeValueOut(name=pa.attribute.name, value=pa.value)
        for pa in sorted(product.attributes, key=lambda pa: pa.id)
        if pa.attribute is not None
    ]

    category_ids = db.scalars(
        select(ProductCategory.category_id)
        .where(ProductCategory.product_id == product_id)
        .order_by(ProductCategory.id)
    ).all()

    parent_categories: List[ParentCategoryOut] = []
    parent_category_id = 0
    for category_id in category_ids:
        category = db.get(Category, category_id)
        if category is None:
            continue
        if category.parent_id is not None:
            category = db.get(Category, category.parent_id)
            if category is None:
                continue
        parent_categories.append(ParentCategoryOut(id=category.id, name=category.name))
        parent_category_id = category.id

    seller = SellerOut.model_validate(product.seller) if product.seller else None

    return ProductDetailOut(
        id=product.id,
        name=product.name,
        price=product.price,
        description=product.description or "",
        mini_description=product.mini_description or "",
        images=[settings.PLACEHOLDER_IMAGE],
        in_stock=product.in_stock,
        stock_count=product.quantity,
        status=product.status,
        brand=seller.full_name if seller else "Unknown seller",
        seller=seller,
        attributes=attributes,
        parent_categories=parent_categories,
        parent_category_id=parent_category_id,
        color_options=[a.value for a in attributes if a.name.lower() == "color"],
    )


def related_products(
    db: Session,
    product_id: int,
    category_id: Optional[int],
    limit: int = settings.RELATED_PRODUCTS_LIMIT,
    rng: Optional[random.Random] = None,
) -> List[ProductCard]:
    """
    Случайные товары из той же категории (включая подкатегории).

    Текущий товар в выборку не попадает.
    """
    if not category_id:
        return []

    category_ids = [category_id] + [c.id for c in _children(db, category_id)]
    product_ids = _unique(
        db.scalars(
            select(ProductCategory.product_id)
            .where(
                ProductCategory.category_id.in_(category_ids),
                ProductCategory.product_id != product_id,
            )
            .order_by(ProductCategory.id)
        ).all()
    )
    if not product_ids:
        return []

    cards = [
        _card(product)
        for product in db.scalars(
            select(Product).where(Product.id.in_(product_ids)).order_by(Product.id)
        ).all()
    ]
    (rng or random.Random()).shuffle(cards)
    logger.debug(f"Related products for {product_id}: {len(cards)} candidates")
    return cards[:limit]
