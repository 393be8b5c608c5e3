"""
Корзина покупателя.

Корзина живет только в памяти приложения и не сохраняется в БД.
Строки объединяются по паре (товар, вариант).
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.db.models import Product
from storefront.schemas.cart import CartLine, CartOut


class Cart:
    """Упорядоченный список строк корзины."""

    def __init__(self):
        self._lines: List[CartLine] = []

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def total(self) -> Decimal:
        return sum((line.price * line.quantity for line in self._lines), Decimal(0))

    def _find(self, product_id: int, variant: Optional[str]) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id and line.variant == variant:
                return line
        return None

    def line_quantity(self, product_id: int, variant: Optional[str] = None) -> int:
        line = self._find(product_id, variant)
        return line.quantity if line else 0

    def quantity_of(self, product_id: int) -> int:
        """Сколько единиц товара в корзине по всем вариантам."""
        return sum(line.quantity for line in self._lines if line.product_id == product_id)

    def add_item(self, line: CartLine) -> CartLine:
        """Добавить строку; повторное добавление увеличивает количество."""
        existing = self._find(line.product_id, line.variant)
        if existing is None:
            self._lines.append(line.model_copy())
            return self._lines[-1]
        existing.quantity += line.quantity
        return existing

    def update_quantity(
        self, product_id: int, quantity: int, variant: Optional[str] = None
    ) -> None:
        """Изменить количество; ноль и меньше удаляют строку."""
        line = self._find(product_id, variant)
        if line is None:
            raise NotFoundError(f"Product {product_id} is not in the cart")
        if quantity <= 0:
            self._lines.remove(line)
        else:
            line.quantity = quantity

    def remove_item(self, product_id: int, variant: Optional[str] = None) -> None:
        line = self._find(product_id, variant)
        if line is None:
            raise NotFoundError(f"Product {product_id} is not in the cart")
        self._lines.remove(line)

    def clear(self) -> None:
        self._lines.clear()

    def to_out(self) -> CartOut:
        return CartOut(items=self.lines, item_count=self.item_count, total=self.total)


def _stocked_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    if not product.in_stock:
        raise ValidationError(f"{product.name} is not available.")
    return product


def _check_stock(product: Product, quantity: int) -> None:
    if quantity > product.quantity:
        raise ValidationError(f"Only {product.quantity} of {product.name} left in stock")


def add_product_to_cart(
    db: Session, cart: Cart, product_id: int, quantity: int = 1, variant: Optional[str] = None
) -> CartLine:
    """
    Добавить товар из каталога в корзину.

    Количество товара в корзине (по всем вариантам) не может
    превышать остаток на складе.

    Raises:
        NotFoundError: Если товар не найден
        ValidationError: Если товара нет в наличии или не хватает остатка
    """
    product = _stocked_product(db, product_id)
    _check_stock(product, cart.quantity_of(product_id) + quantity)

    return cart.add_item(
        CartLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            seller_id=product.seller_id,
            image=settings.PLACEHOLDER_IMAGE,
            variant=variant,
        )
    )


def set_cart_quantity(
    db: Session, cart: Cart, product_id: int, quantity: int, variant: Optional[str] = None
) -> None:
    """Изменить количество в строке с проверкой остатка; 0 и меньше удаляют строку."""
    if quantity > 0:
        others = cart.quantity_of(product_id) - cart.line_quantity(product_id, variant)
        _check_stock(_stocked_product(db, product_id), others + quantity)
    cart.update_quantity(product_id, quantity, variant=variant)
