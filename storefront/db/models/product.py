"""
Модель товара.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

# Допустимые статусы товара
PRODUCT_STATUSES = ("free", "reserved", "sold")


class Product(Base):
    """
    Модель товара.

    Attributes:
        id: Уникальный идентификатор товара
        name: Название товара
        price: Цена товара
        quantity: Остаток на складе
        status: Статус товара (free/reserved/sold)
        seller_id: ID продавца
        description: Полное описание
        mini_description: Короткое описание для карточки
        seller: Связь с продавцом
        attributes: Значения атрибутов товара
    """

    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint(
            "status in ('free','reserved','sold')", name="ck_products_status"
        ),
        CheckConstraint("quantity >= 0", name="ck_products_quantity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer, server_default=text("0"))
    status: Mapped[str] = mapped_column(String(16), server_default=text("'free'"))
    seller_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("sellers.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[str] = mapped_column(Text, server_default=text("''"))
    mini_description: Mapped[str] = mapped_column(Text, server_default=text("''"))

    # Связи с другими моделями
    seller: Mapped[Optional["Seller"]] = relationship(lazy="joined")
    attributes: Mapped[List["ProductAttribute"]] = relationship(
        back_populates="product", lazy="selectin", passive_deletes=True
    )

    @property
    def in_stock(self) -> bool:
        """Товар доступен к покупке только если он есть на складе и свободен."""
        return (self.quantity or 0) > 0 and self.status == "free"

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
