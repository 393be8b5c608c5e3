"""
Pydantic схемы для административной панели и аутентификации.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storefront.schemas.catalog import Money

# ==================== ЗАПИСИ ТАБЛИЦ ====================


class _Record(BaseModel):
    """Общая часть записей: необязательный id, лишние поля отбрасываются."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None


class ProductRecord(_Record):
    name: str = ""
    price: Money = Decimal(0)
    quantity: int = 0
    status: Literal["free", "reserved", "sold"] = "free"
    seller_id: Optional[int] = None
    description: str = ""
    mini_description: str = ""


class CategoryRecord(_Record):
    name: str = ""
    parent_id: Optional[int] = None


class SellerRecord(_Record):
    full_name: str = ""
    address: str = ""
    phone: str = ""


class AttributeRecord(_Record):
    name: str = ""


class ProductCategoryRecord(_Record):
    product_id: int = 0
    category_id: int = 0


class ProductAttributeRecord(_Record):
    product_id: int = 0
    attribute_id: int = 0
    value: str = ""


# Запись одной из редактируемых таблиц
AdminRecord = Union[
    ProductRecord,
    CategoryRecord,
    SellerRecord,
    AttributeRecord,
    ProductCategoryRecord,
    ProductAttributeRecord,
]


# ==================== ДАШБОРД ====================


class DashboardStats(BaseModel):
    """Общая статистика дашборда."""

    total_revenue: float
    total_orders: int
    total_products: int
    total_users: int


class DashboardOut(BaseModel):
    """
    Все таблицы админки одним ответом.

    Таблицы, которые не удалось загрузить, остаются пустыми,
    а причина попадает в errors.
    """

    tables: Dict[str, List[dict]]
    stats: Optional[DashboardStats] = None
    errors: Dict[str, str] = {}


# ==================== АУТЕНТИФИКАЦИЯ ====================


class RegisterRequest(BaseModel):
    """Схема регистрации покупателя."""

    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseModel):
    """Схема для входа в систему."""

    email: EmailStr
    password: str = Field(..., description="Пароль")


class UserOut(BaseModel):
    """Схема для вывода пользователя."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    created_at: datetime


class LoginResponse(BaseModel):
    """Схема ответа при входе в систему."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut
