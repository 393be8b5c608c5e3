"""
Модели заказа и позиций заказа.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base


class Order(Base):
    """
    Модель заказа.

    Поля доставки денормализованы: заказ хранит их снимок
    на момент оформления.

    Attributes:
        id: Уникальный идентификатор заказа
        customer_id: ID покупателя (если оформлял авторизованный пользователь)
        date_created: Дата создания
        total_amount: Общая сумма заказа
        first_name: Имя получателя
        last_name: Фамилия получателя
        email: Email получателя
        address: Адрес доставки
        city: Город доставки
        postal_code: Почтовый индекс
        country: Страна
        items: Позиции заказа
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    # Данные доставки
    first_name: Mapped[str] = mapped_column(Text)
    last_name: Mapped[str] = mapped_column(Text)
    email: Mapped[str] = mapped_column(Text)
    address: Mapped[str] = mapped_column(Text)
    city: Mapped[str] = mapped_column(Text)
    postal_code: Mapped[str] = mapped_column(Text)
    country: Mapped[str] = mapped_column(Text)

    # Связь с позициями заказа
    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order", lazy="selectin", passive_deletes=True
    )


class OrderItem(Base):
    """
    Модель позиции заказа.

    Attributes:
        id: Уникальный идентификатор позиции
        order_id: ID заказа
        product_id: ID товара
        quantity: Количество товара
        price_at_moment: Цена товара на момент покупки (снимок)
        order: Связь с заказом
        product: Связь с товаром
    """

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT")
    )
    quantity: Mapped[int] = mapped_column(Integer)
    price_at_moment: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship(lazy="joined")
