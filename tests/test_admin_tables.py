from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from storefront.core.exceptions import (
    BackendError,
    ConfirmationRequiredError,
    NotFoundError,
    ValidationError,
)
from storefront.db.models import Order, OrderItem, Product, Seller
from storefront.services import admin_tables
from storefront.services.admin_tables import EditMode, TableName


# ==================== ПРОВЕРКА ЗАПИСЕЙ ====================


@pytest.mark.parametrize(
    "table,record,expected",
    [
        (TableName.PRODUCTS, {"name": "", "price": 5, "quantity": 1}, False),
        (TableName.PRODUCTS, {"name": "Lamp", "price": 5, "quantity": 1}, True),
        (TableName.PRODUCTS, {"name": "Lamp", "price": -1, "quantity": 1}, False),
        (TableName.PRODUCTS, {"name": "Lamp", "price": 5, "quantity": -3}, False),
        (TableName.PRODUCTS, {"name": "Lamp", "price": 5, "quantity": 1, "status": "lost"}, False),
        (TableName.PRODUCTS, {"name": "Lamp", "price": "abc", "quantity": 1}, False),
        (TableName.SELLERS, {"full_name": "A", "address": "B", "phone": "C"}, True),
        (TableName.SELLERS, {"full_name": "A", "address": "", "phone": "C"}, False),
        (TableName.CATEGORIES, {"name": "Garden"}, True),
        (TableName.CATEGORIES, {"id": 3, "name": "Garden", "parent_id": 3}, False),
        (TableName.ATTRIBUTES, {"name": ""}, False),
        (TableName.PRODUCT_CATEGORIES, {"product_id": 1, "category_id": 2}, True),
        (TableName.PRODUCT_CATEGORIES, {"product_id": 1, "category_id": 0}, False),
        (TableName.PRODUCT_ATTRIBUTES, {"product_id": 0, "attribute_id": 1, "value": "x"}, False),
        (TableName.PRODUCT_ATTRIBUTES, {"product_id": 1, "attribute_id": 1, "value": ""}, False),
        (TableName.PRODUCT_ATTRIBUTES, {"product_id": 1, "attribute_id": 1, "value": "x"}, True),
        (TableName.ORDERS, {"id": 1}, False),
    ],
)
def test_validate(table, record, expected):
    assert admin_tables.validate(table, record) is expected


def test_every_table_is_registered():
    assert set(admin_tables.TABLES) == set(TableName)
    assert not admin_tables.TABLES[TableName.ORDERS].editable
    assert not admin_tables.TABLES[TableName.ORDER_ITEMS].editable


def test_new_blank_product():
    blank = admin_tables.new_blank(TableName.PRODUCTS)
    assert blank.name == ""
    assert blank.price == 0
    assert blank.quantity == 0
    assert blank.status == "free"
    assert blank.seller_id is None


def test_new_blank_relation():
    blank = admin_tables.new_blank(TableName.PRODUCT_ATTRIBUTES)
    assert (blank.product_id, blank.attribute_id, blank.value) == (0, 0, "")


def test_new_blank_read_only_table():
    with pytest.raises(ValidationError):
        admin_tables.new_blank(TableName.ORDERS)


# ==================== СОХРАНЕНИЕ ====================


def test_add_ignores_client_id_and_refetches(db):
    rows = admin_tables.save(
        db, EditMode.ADD, TableName.SELLERS,
        {"id": 777, "full_name": "Ann", "address": "Main 1", "phone": "123"},
    )
    assert len(rows) == 1
    assert rows[0]["id"] != 777
    assert rows[0]["full_name"] == "Ann"


def test_invalid_record_never_reaches_database(db, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("database must not be touched")

    monkeypatch.setattr(db, "add", fail)
    monkeypatch.setattr(db, "execute", fail)

    with pytest.raises(ValidationError):
        admin_tables.save(
            db, EditMode.ADD, TableName.PRODUCTS, {"name": "", "price": 5, "quantity": 1}
        )


def test_edit_updates_by_original_id(db, catalog_data):
    rows = admin_tables.save(
        db, EditMode.EDIT, TableName.SELLERS,
        {"id": 999, "full_name": "Jane Renamed", "address": "2 Market St", "phone": "555"},
        original_id=catalog_data["seller"],
    )
    assert [r["full_name"] for r in rows] == ["Jane Renamed"]
    assert rows[0]["id"] == catalog_data["seller"]


def test_edit_category_cannot_become_its_own_parent(db, catalog_data):
    with pytest.raises(ValidationError):
        admin_tables.save(
            db, EditMode.EDIT, TableName.CATEGORIES,
            {"name": "Toys", "parent_id": catalog_data["toys"]},
            original_id=catalog_data["toys"],
        )


def test_edit_missing_row(db):
    with pytest.raises(NotFoundError):
        admin_tables.save(
            db, EditMode.EDIT, TableName.ATTRIBUTES, {"name": "Size"}, original_id=42
        )


def test_backend_error_keeps_message(db, catalog_data):
    duplicate = {"product_id": catalog_data["phone"], "category_id": catalog_data["phones"]}
    with pytest.raises(BackendError) as exc_info:
        admin_tables.save(db, EditMode.ADD, TableName.PRODUCT_CATEGORIES, duplicate)
    assert "UNIQUE" in exc_info.value.message

    # Сессия после отката пригодна для работы
    assert admin_tables.fetch_table(db, TableName.PRODUCT_CATEGORIES)


def test_save_read_only_table(db):
    with pytest.raises(ValidationError):
        admin_tables.save(db, EditMode.ADD, TableName.ORDER_ITEMS, {"quantity": 1})


# ==================== УДАЛЕНИЕ ====================


def test_delete_requires_confirmation(db, catalog_data):
    with pytest.raises(ConfirmationRequiredError):
        admin_tables.delete_row(db, TableName.SELLERS, catalog_data["seller"])
    assert db.scalar(select(func.count()).select_from(Seller)) == 1


def test_delete_removes_exactly_one_row(db, catalog_data):
    before = admin_tables.fetch_table(db, TableName.PRODUCTS)
    rows = admin_tables.delete_row(
        db, TableName.PRODUCTS, catalog_data["shirt"], confirmed=True
    )
    assert [r["id"] for r in rows] == [
        r["id"] for r in before if r["id"] != catalog_data["shirt"]
    ]


def test_delete_missing_row(db):
    with pytest.raises(NotFoundError):
        admin_tables.delete_row(db, TableName.ATTRIBUTES, 5, confirmed=True)


# ==================== ДАШБОРД ====================


def test_dashboard_loads_every_table(session_factory, catalog_data):
    dashboard = admin_tables.load_dashboard(session_factory)

    assert set(dashboard.tables) == {t.value for t in TableName}
    assert len(dashboard.tables["products"]) == 6
    assert dashboard.errors == {}
    assert dashboard.stats.total_products == 6


def test_dashboard_survives_failing_fetch(session_factory, catalog_data, monkeypatch):
    original = admin_tables.fetch_table

    def flaky(db, table):
        if table is TableName.SELLERS:
            raise RuntimeError("sellers unavailable")
        return original(db, table)

    monkeypatch.setattr(admin_tables, "fetch_table", flaky)
    dashboard = admin_tables.load_dashboard(session_factory)

    assert dashboard.tables["sellers"] == []
    assert dashboard.errors == {"sellers": "sellers unavailable"}
    assert len(dashboard.tables["categories"]) == 5


# ==================== API ====================


def test_admin_api_requires_admin_role(client, customer_headers):
    response = client.get("/api/v1/admin/tables/products", headers=customer_headers)
    assert response.status_code == 403


def test_admin_api_requires_token(client):
    response = client.get("/api/v1/admin/tables/products")
    assert response.status_code in (401, 403)


def test_admin_api_crud_cycle(client, admin_headers, db):
    base = "/api/v1/admin/tables/products"

    blank = client.get(f"{base}/blank", headers=admin_headers).json()
    assert blank["record"]["status"] == "free"
    assert "name" in blank["fields"]

    record = dict(blank["record"], name="Desk Lamp", price=35.5, quantity=3)
    rows = client.post(base, json=record, headers=admin_headers).json()
    assert [r["name"] for r in rows] == ["Desk Lamp"]
    row_id = rows[0]["id"]
    assert rows[0]["price"] == 35.5

    edited = dict(rows[0], quantity=0, status="sold")
    rows = client.put(f"{base}/{row_id}", json=edited, headers=admin_headers).json()
    assert rows[0]["quantity"] == 0
    assert rows[0]["status"] == "sold"

    response = client.delete(f"{base}/{row_id}", headers=admin_headers)
    assert response.status_code == 409

    response = client.delete(f"{base}/{row_id}?confirm=true", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == []
    assert db.scalar(select(func.count()).select_from(Product)) == 0


def test_admin_api_validation_error(client, admin_headers):
    response = client.post(
        "/api/v1/admin/tables/sellers",
        json={"full_name": "A", "address": "", "phone": "C"},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "Please fill in all required fields"


def test_admin_api_unknown_table(client, admin_headers):
    response = client.get("/api/v1/admin/tables/users", headers=admin_headers)
    assert response.status_code == 422


def test_admin_dashboard_endpoint(client, admin_headers, catalog_data):
    body = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()
    assert len(body["tables"]["categories"]) == 5
    assert body["stats"]["total_users"] == 1


# ==================== ЧАСТИЧНОЕ РЕДАКТИРОВАНИЕ ====================


def test_edit_partial_record_keeps_other_fields(db, catalog_data):
    rows = admin_tables.save(
        db, EditMode.EDIT, TableName.PRODUCTS, {"price": 10},
        original_id=catalog_data["phone"],
    )
    phone = next(r for r in rows if r["id"] == catalog_data["phone"])
    assert phone["price"] == 10.0
    assert phone["name"] == "Phone X"
    assert phone["quantity"] == 5
    assert phone["description"] == "Phone X description"


def test_edit_partial_record_is_validated_against_stored_row(db, catalog_data):
    with pytest.raises(ValidationError):
        admin_tables.save(
            db, EditMode.EDIT, TableName.PRODUCTS, {"name": ""},
            original_id=catalog_data["phone"],
        )
    assert db.get(Product, catalog_data["phone"]).name == "Phone X"


def test_edit_with_no_known_fields(db, catalog_data):
    with pytest.raises(ValidationError):
        admin_tables.save(
            db, EditMode.EDIT, TableName.SELLERS, {"nickname": "x"},
            original_id=catalog_data["seller"],
        )


def test_admin_api_partial_put(client, admin_headers, catalog_data):
    response = client.put(
        f"/api/v1/admin/tables/products/{catalog_data['laptop']}",
        json={"price": 10},
        headers=admin_headers,
    )
    assert response.status_code == 200
    laptop = next(r for r in response.json() if r["id"] == catalog_data["laptop"])
    assert laptop["price"] == 10.0
    assert laptop["name"] == "Laptop Pro"


# ==================== ЗАКАЗЫ В АДМИНКЕ ====================


SHIPPING = dict(
    last_name="Lovelace",
    email="ada@example.com",
    address="12 Analytical Rd",
    city="London",
    postal_code="N1 9GU",
    country="UK",
)


@pytest.fixture
def orders_data(db, catalog_data, customer):
    first = Order(
        customer_id=customer.id, total_amount=Decimal("499.00"), first_name="Ada", **SHIPPING
    )
    second = Order(
        customer_id=None, total_amount=Decimal("19.00"), first_name="Guest", **SHIPPING
    )
    db.add_all([first, second])
    db.flush()
    db.add_all(
        [
            OrderItem(
                order_id=first.id, product_id=catalog_data["phone"],
                quantity=1, price_at_moment=Decimal("499.00"),
            ),
            OrderItem(
                order_id=second.id, product_id=catalog_data["cable"],
                quantity=2, price_at_moment=Decimal("9.50"),
            ),
        ]
    )
    db.commit()
    return {"first": first.id, "second": second.id}


def test_fetch_orders_newest_first_with_customer_email(db, orders_data):
    rows = admin_tables.fetch_table(db, TableName.ORDERS)

    assert [r["id"] for r in rows] == [orders_data["second"], orders_data["first"]]
    assert rows[0]["customer_email"] is None
    assert rows[1]["customer_email"] == "buyer@example.com"
    assert rows[1]["total_amount"] == 499.0


def test_fetch_order_items_with_product_name(db, orders_data):
    rows = admin_tables.fetch_table(db, TableName.ORDER_ITEMS)

    assert [r["product_name"] for r in rows] == ["USB Cable", "Phone X"]
    assert rows[0]["id"] > rows[1]["id"]
    assert rows[0]["price_at_moment"] == 9.5


def test_read_only_tables_accept_confirmed_delete(db, orders_data):
    items = admin_tables.fetch_table(db, TableName.ORDER_ITEMS)
    rows = admin_tables.delete_row(
        db, TableName.ORDER_ITEMS, items[0]["id"], confirmed=True
    )
    assert [r["id"] for r in rows] == [items[1]["id"]]

    rows = admin_tables.delete_row(
        db, TableName.ORDERS, orders_data["second"], confirmed=True
    )
    assert [r["id"] for r in rows] == [orders_data["first"]]


def test_admin_api_delete_order(client, admin_headers, orders_data):
    response = client.delete(
        f"/api/v1/admin/tables/orders/{orders_data['first']}?confirm=true",
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [orders_data["second"]]


def test_failed_delete_rolls_back(db, catalog_data, monkeypatch):
    before = admin_tables.fetch_table(db, TableName.SELLERS)

    def broken_commit():
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(BackendError) as exc_info:
        admin_tables.delete_row(db, TableName.SELLERS, catalog_data["seller"], confirmed=True)
    assert exc_info.value.message == "database is locked"

    monkeypatch.undo()
    assert admin_tables.fetch_table(db, TableName.SELLERS) == before
