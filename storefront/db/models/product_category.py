"""
Модель связи товара с категорией.
"""

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ProductCategory(Base):
    """Связь товара с категорией (many-to-many)."""

    __tablename__ = "product_categories"

    __table_args__ = (
        UniqueConstraint("product_id", "category_id", name="uq_product_category"),
        Index("ix_product_categories_category_id", "category_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE")
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE")
    )
