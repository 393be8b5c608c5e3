"""
Модель значения атрибута товара.
"""

from sqlalchemy import ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ProductAttribute(Base):
    """
    Связь товара с атрибутом (many-to-many со значением).

    Attributes:
        id: Уникальный идентификатор записи
        product_id: ID товара
        attribute_id: ID вида атрибута
        value: Значение атрибута для этого товара
        product: Связь с товаром
        attribute: Связь с видом атрибута
    """

    __tablename__ = "product_attributes"

    __table_args__ = (
        Index("ix_product_attributes_product_id", "product_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE")
    )
    attribute_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("attributes.id", ondelete="CASCADE")
    )
    value: Mapped[str] = mapped_column(Text)

    product: Mapped["Product"] = relationship(back_populates="attributes")
    attribute: Mapped["Attribute"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<ProductAttribute(id={self.id}, product_id={self.product_id}, "
            f"attribute_id={self.attribute_id})>"
        )
