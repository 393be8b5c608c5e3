"""
Универсальный CRUD для таблиц административной панели.

Каждая таблица описана записью TableConfig: модель SQLAlchemy,
схема записи, пустое значение и проверка обязательных полей.
После любого успешного изменения таблица перечитывается целиком.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import ValidationError as SchemaError
from sqlalchemy import asc, delete, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from storefront.core.exceptions import (
    BackendError,
    ConfirmationRequiredError,
    NotFoundError,
    ValidationError,
)
from storefront.db.models import (
    Attribute,
    Base,
    Category,
    Order,
    OrderItem,
    Product,
    ProductAttribute,
    ProductCategory,
    Seller,
    User,
)
from storefront.schemas.admin import (
    AdminRecord,
    AttributeRecord,
    CategoryRecord,
    DashboardOut,
    DashboardStats,
    ProductAttributeRecord,
    ProductCategoryRecord,
    ProductRecord,
    SellerRecord,
)

logger = logging.getLogger(__name__)


class TableName(str, Enum):
    """Таблицы, доступные в админке."""

    PRODUCTS = "products"
    CATEGORIES = "categories"
    SELLERS = "sellers"
    ATTRIBUTES = "attributes"
    PRODUCT_CATEGORIES = "product_categories"
    PRODUCT_ATTRIBUTES = "product_attributes"
    ORDERS = "orders"
    ORDER_ITEMS = "order_items"


class EditMode(str, Enum):
    ADD = "add"
    EDIT = "edit"


# ==================== ПРОВЕРКИ ЗАПИСЕЙ ====================


def _valid_product(r: ProductRecord) -> bool:
    return bool(r.name) and r.price >= 0 and r.quantity >= 0


def _valid_category(r: CategoryRecord) -> bool:
    return bool(r.name) and (r.id is None or r.parent_id != r.id)


def _valid_seller(r: SellerRecord) -> bool:
    return bool(r.full_name and r.address and r.phone)


def _valid_attribute(r: AttributeRecord) -> bool:
    return bool(r.name)


def _valid_product_category(r: ProductCategoryRecord) -> bool:
    return r.product_id > 0 and r.category_id > 0


def _valid_product_attribute(r: ProductAttributeRecord) -> bool:
    return r.product_id > 0 and r.attribute_id > 0 and bool(r.value)


# ==================== СЕРИАЛИЗАЦИЯ СТРОК ====================


def _column_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(row: Base) -> Dict[str, Any]:
    """Строка таблицы в виде словаря колонок."""
    return {
        column.key: _column_value(getattr(row, column.key))
        for column in row.__table__.columns
    }


def _order_item_row(item: OrderItem) -> Dict[str, Any]:
    data = row_to_dict(item)
    data["product_name"] = item.product.name if item.product else None
    return data


def _order_row(order: Order, customer_emails: Dict[int, str]) -> Dict[str, Any]:
    data = row_to_dict(order)
    data["customer_email"] = customer_emails.get(order.customer_id)
    return data


# ==================== РЕЕСТР ТАБЛИЦ ====================


@dataclass(frozen=True)
class TableConfig:
    """
    Описание таблицы для админки.

    Attributes:
        model: Модель SQLAlchemy
        record: Схема записи (None - таблица только для чтения)
        validator: Проверка обязательных полей записи
        descending: Сортировка по id по убыванию
    """

    model: Type[Base]
    record: Optional[Type[AdminRecord]] = None
    validator: Optional[Callable[[Any], bool]] = None
    descending: bool = False

    @property
    def editable(self) -> bool:
        return self.record is not None

    @property
    def fields(self) -> List[str]:
        """Поля формы редактирования (без id)."""
        if self.record is None:
            return []
        return [name for name in self.record.model_fields if name != "id"]


TABLES: Dict[TableName, TableConfig] = {
    TableName.PRODUCTS: TableConfig(Product, ProductRecord, _valid_product),
    TableName.CATEGORIES: TableConfig(Category, CategoryRecord, _valid_category),
    TableName.SELLERS: TableConfig(Seller, SellerRecord, _valid_seller),
    TableName.ATTRIBUTES: TableConfig(Attribute, AttributeRecord, _valid_attribute),
    TableName.PRODUCT_CATEGORIES: TableConfig(
        ProductCategory, ProductCategoryRecord, _valid_product_category
    ),
    TableName.PRODUCT_ATTRIBUTES: TableConfig(
        ProductAttribute, ProductAttributeRecord, _valid_product_attribute
    ),
    TableName.ORDERS: TableConfig(Order, descending=True),
    TableName.ORDER_ITEMS: TableConfig(OrderItem, descending=True),
}

# Каждая таблица должна быть описана
assert set(TABLES) == set(TableName), "TABLES must cover every TableName"


def _editable_config(table: TableName) -> TableConfig:
    config = TABLES[table]
    if not config.editable:
        raise ValidationError(f"Table {table.value} is read-only")
    return config


# ==================== ОПЕРАЦИИ ====================


def new_blank(table: TableName) -> AdminRecord:
    """Пустая запись для формы добавления."""
    return _editable_config(table).record()


def parse_record(table: TableName, record: Dict[str, Any]) -> Optional[AdminRecord]:
    """Привести словарь к схеме записи таблицы; None - если не удалось."""
    config = TABLES[table]
    if not config.editable:
        return None
    try:
        return config.record.model_validate(record)
    except SchemaError:
        return None


def validate(table: TableName, record: Dict[str, Any]) -> bool:
    """Проверить обязательные поля и диапазоны значений."""
    parsed = parse_record(table, record)
    if parsed is None:
        return False
    return TABLES[table].validator(parsed)


def fetch_table(db: Session, table: TableName) -> List[Dict[str, Any]]:
    """Все строки таблицы, отсортированные по id."""
    config = TABLES[table]
    order = desc if config.descending else asc
    rows = db.scalars(select(config.model).order_by(order(config.model.id))).all()

    if table is TableName.ORDER_ITEMS:
        return [_order_item_row(item) for item in rows]
    if table is TableName.ORDERS:
        customer_ids = {o.customer_id for o in rows if o.customer_id is not None}
        emails: Dict[int, str] = {}
        if customer_ids:
            emails = dict(
                db.execute(
                    select(User.id, User.email).where(User.id.in_(customer_ids))
                ).all()
            )
        return [_order_row(order_row, emails) for order_row in rows]
    return [row_to_dict(row) for row in rows]


def _backend_error(db: Session, action: str, table: TableName, error: SQLAlchemyError):
    db.rollback()
    message = str(getattr(error, "orig", None) or error)
    logger.error(f"Error {action} {table.value}: {message}")
    return BackendError(message)


def save(
    db: Session,
    mode: EditMode,
    table: TableName,
    record: Dict[str, Any],
    original_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Добавить или обновить запись и перечитать таблицу.

    При редактировании обновляются только переданные поля, но
    проверяется запись целиком (переданные поля поверх сохраненных).

    Args:
        db: Сессия базы данных
        mode: Добавление или редактирование
        table: Таблица
        record: Данные записи из формы
        original_id: ID редактируемой записи

    Returns:
        List[dict]: Перечитанная таблица

    Raises:
        ValidationError: Запись не прошла проверку (в БД ничего не отправлено)
        NotFoundError: Редактируемая запись не найдена
        BackendError: Ошибка базы данных
    """
    config = _editable_config(table)
    model = config.model

    if mode is EditMode.EDIT:
        row_id = original_id if original_id is not None else record.get("id")
        if row_id is None:
            raise ValidationError("Record id is required for editing")
        current = db.get(model, row_id)
        if current is None:
            raise NotFoundError(f"Row {row_id} not found in {table.value}")
        # Переданные поля проверяются вместе с сохраненными
        submitted = set(record) & set(config.fields)
        if not submitted:
            raise ValidationError("Nothing to update")
        stored = {k: v for k, v in row_to_dict(current).items() if v is not None}
        record = {**stored, **record, "id": row_id}

    if not validate(table, record):
        raise ValidationError("Please fill in all required fields")

    parsed = parse_record(table, record)

    try:
        if mode is EditMode.ADD:
            # id назначает база данных
            payload = parsed.model_dump(exclude={"id"})
            db.add(model(**payload))
        else:
            payload = parsed.model_dump(include=submitted)
            result = db.execute(update(model).where(model.id == row_id).values(**payload))
            if result.rowcount == 0:
                db.rollback()
                raise NotFoundError(f"Row {row_id} not found in {table.value}")
        db.commit()
    except SQLAlchemyError as e:
        raise _backend_error(db, "saving", table, e)

    logger.info(f"{table.value}: {mode.value} succeeded")
    return fetch_table(db, table)


def delete_row(
    db: Session, table: TableName, row_id: int, confirmed: bool = False
) -> List[Dict[str, Any]]:
    """
    Удалить строку по id и перечитать таблицу.

    Raises:
        ConfirmationRequiredError: Удаление не подтверждено
        NotFoundError: Строка не найдена
        BackendError: Ошибка базы данных
    """
    if not confirmed:
        raise ConfirmationRequiredError("Are you sure you want to delete this item?")

    model = TABLES[table].model
    try:
        result = db.execute(delete(model).where(model.id == row_id))
        if result.rowcount == 0:
            db.rollback()
            raise NotFoundError(f"Row {row_id} not found in {table.value}")
        db.commit()
    except SQLAlchemyError as e:
        raise _backend_error(db, "deleting from", table, e)

    logger.info(f"{table.value}: row {row_id} deleted")
    return fetch_table(db, table)


# ==================== ДАШБОРД ====================


def dashboard_stats(db: Session) -> DashboardStats:
    """Выручка, количество заказов, товаров и пользователей."""
    revenue = db.scalar(select(func.sum(Order.total_amount))) or 0
    return DashboardStats(
        total_revenue=float(revenue),
        total_orders=db.scalar(select(func.count()).select_from(Order)) or 0,
        total_products=db.scalar(select(func.count()).select_from(Product)) or 0,
        total_users=db.scalar(select(func.count()).select_from(User)) or 0,
    )


def load_dashboard(session_factory: sessionmaker, max_workers: int = 4) -> DashboardOut:
    """
    Загрузить все таблицы и статистику параллельно.

    Каждая выборка идет в своей сессии. Ошибка одной выборки
    не мешает остальным: таблица остается пустой, а ошибка
    попадает в errors.
    """

    def run(fn: Callable[[Session], Any]) -> Any:
        db = session_factory()
        try:
            return fn(db)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        table_futures = {
            table: executor.submit(run, lambda db, t=table: fetch_table(db, t))
            for table in TableName
        }
        stats_future = executor.submit(run, dashboard_stats)

    tables: Dict[str, List[Dict[str, Any]]] = {}
    errors: Dict[str, str] = {}
    for table, future in table_futures.items():
        try:
            tables[table.value] = future.result()
        except Exception as e:
            logger.error(f"Error fetching {table.value}: {e}")
            tables[table.value] = []
            errors[table.value] = str(e)

    stats = None
    try:
        stats = stats_future.result()
    except Exception as e:
        logger.error(f"Error fetching stats: {e}")
        errors["stats"] = str(e)

    return DashboardOut(tables=tables, stats=stats, errors=errors)
