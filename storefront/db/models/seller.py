"""
Модель продавца.
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Seller(Base):
    """
    Модель продавца товаров.

    Attributes:
        id: Уникальный идентификатор продавца
        full_name: Полное имя
        address: Адрес
        phone: Телефон
    """

    __tablename__ = "sellers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(Text)
    address: Mapped[str] = mapped_column(Text)
    phone: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Seller(id={self.id}, full_name='{self.full_name}')>"
