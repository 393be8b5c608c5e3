"""
Схемы витрины: категории, карточки и страница товара.
"""

from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer

# Деньги храним в Decimal, в JSON отдаем числом
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    parent_id: Optional[int] = None


class ProductCard(BaseModel):
    """Карточка товара в списках (каталог, категория, похожие товары)."""

    id: int
    name: str
    price: Money
    quantity: int
    status: str
    seller_id: Optional[int] = None
    mini_description: str = ""
    image: str
    in_stock: bool
    category: Optional[str] = None
    categories: List[str] = []


class CategoryProductsOut(BaseModel):
    """Страница категории: сама категория, подкатегории и товары."""

    category: CategoryOut
    subcategories: List[CategoryOut]
    products: List[ProductCard]


class SellerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    full_name: str
    phone: str
    address: str


class AttributeValueOut(BaseModel):
    name: str
    value: str


class ParentCategoryOut(BaseModel):
    id: int
    name: str


class ProductDetailOut(BaseModel):
    """Страница товара."""

    id: int
    name: str
    price: Money
    description: str
    mini_description: str
    images: List[str]
    in_stock: bool
    stock_count: int
    status: str
    brand: str
    seller: Optional[SellerOut] = None
    attributes: List[AttributeValueOut]
    parent_categories: List[ParentCategoryOut]
    parent_category_id: int
    color_options: List[str]
