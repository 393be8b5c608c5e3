"""
Общие фикстуры тестов.

Каждый тест получает чистую SQLite базу в отдельном файле,
зависимости get_db и get_session_factory подменяются на нее.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.core.auth import auth_service
from storefront.db.database import get_db, get_session_factory
from storefront.db.models import (
    Attribute,
    Base,
    Category,
    Product,
    ProductAttribute,
    ProductCategory,
    Seller,
    User,
)
from storefront.db.models.user import ROLE_ADMIN, ROLE_USER
from storefront.main import create_app


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def shopper():
    return {"X-Session-Id": "shopper-1"}


@pytest.fixture
def catalog_data(db):
    """
    Небольшой каталог:

    Electronics -> Phones, Laptops; Clothing (без подкатегорий); Toys (пустая).
    Cable привязан и к Electronics, и к Phones.
    """
    seller = Seller(full_name="Jane Seller", address="1 Market St", phone="555-0100")
    db.add(seller)
    db.flush()

    electronics = Category(name="Electronics")
    clothing = Category(name="Clothing")
    toys = Category(name="Toys")
    db.add_all([electronics, clothing, toys])
    db.flush()
    phones = Category(name="Phones", parent_id=electronics.id)
    laptops = Category(name="Laptops", parent_id=electronics.id)
    db.add_all([phones, laptops])
    db.flush()

    def product(name, price, quantity=5, status="free", seller_id=seller.id):
        p = Product(
            name=name,
            price=Decimal(price),
            quantity=quantity,
            status=status,
            seller_id=seller_id,
            description=f"{name} description",
            mini_description=f"{name} short",
        )
        db.add(p)
        return p

    phone = product("Phone X", "499.00")
    laptop = product("Laptop Pro", "1299.99")
    cable = product("USB Cable", "9.50")
    shirt = product("Cotton Shirt", "25.00", seller_id=None)
    sold = product("Old Radio", "40.00", status="sold")
    empty = product("Smart Watch", "199.00", quantity=0)
    db.flush()

    links = [
        (phone, phones),
        (laptop, laptops),
        (cable, electronics),
        (cable, phones),
        (shirt, clothing),
        (sold, electronics),
        (empty, phones),
    ]
    db.add_all(ProductCategory(product_id=p.id, category_id=c.id) for p, c in links)

    color = Attribute(name="Color")
    weight = Attribute(name="Weight")
    db.add_all([color, weight])
    db.flush()
    db.add_all(
        [
            ProductAttribute(product_id=phone.id, attribute_id=color.id, value="Red"),
            ProductAttribute(product_id=phone.id, attribute_id=color.id, value="Blue"),
            ProductAttribute(product_id=phone.id, attribute_id=weight.id, value="180g"),
        ]
    )
    db.commit()

    return {
        "seller": seller.id,
        "electronics": electronics.id,
        "clothing": clothing.id,
        "toys": toys.id,
        "phones": phones.id,
        "laptops": laptops.id,
        "phone": phone.id,
        "laptop": laptop.id,
        "cable": cable.id,
        "shirt": shirt.id,
        "sold": sold.id,
        "empty": empty.id,
        "color": color.id,
    }


def _make_user(db, email, role):
    user = User(
        email=email,
        hashed_password=auth_service.get_password_hash("secret123"),
        full_name=email.split("@")[0],
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin@example.com", ROLE_ADMIN)


@pytest.fixture
def customer(db):
    return _make_user(db, "buyer@example.com", ROLE_USER)


def _auth(user):
    token = auth_service.create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return _auth(admin_user)


@pytest.fixture
def customer_headers(customer):
    return _auth(customer)
