"""Tests for the catalog, ledger and report services used directly."""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from shopledger.schemas.order import OrderCreate, OrderUpdate
from shopledger.schemas.product import ProductCreate, ProductUpdate
from shopledger.services.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from shopledger.services.order_service import OrderService
from shopledger.services.product_service import SAMPLE_PRODUCTS, ProductService
from shopledger.services.report_service import ReportService, to_money


def _product(db, name="Widget", price=10.00):
    return ProductService(db).create_product(ProductCreate(name=name, price=price))


def test_create_then_get_product(db_session):
    """Test a created product reads back unchanged."""
    created = _product(db_session, "Lamp", 29.95)

    fetched = ProductService(db_session).get_product(created.id)

    assert fetched.name == "Lamp"
    assert fetched.price == 29.95
    assert fetched.created_at is not None


def test_create_product_rejects_unvalidated_price(db_session):
    """Test the service refuses a non-positive price that skipped the schema."""
    service = ProductService(db_session)

    with pytest.raises(ValidationError):
        service.create_product(ProductCreate.model_construct(name="Free", price=0))

    assert service.list_products() == []


def test_update_product_not_found(db_session):
    """Test updating a missing product raises NotFoundError."""
    with pytest.raises(NotFoundError, match="Product not found"):
        ProductService(db_session).update_product(
            42, ProductUpdate(name="Ghost", price=1.00)
        )


def test_delete_product_with_orders(db_session):
    """Test the delete policy for products that have orders."""
    product = _product(db_session)
    OrderService(db_session).create_order(OrderCreate(product_id=product.id, quantity=1))
    service = ProductService(db_session)

    with pytest.raises(ConflictError):
        service.delete_product(product.id)
    assert service.get_product(product.id).id == product.id

    assert service.delete_product(product.id, cascade=True) == 1
    with pytest.raises(NotFoundError):
        service.get_product(product.id)


def test_seed_sample_products(db_session):
    """Test seeding fills an empty catalog exactly once."""
    service = ProductService(db_session)

    assert service.seed_sample_products() == len(SAMPLE_PRODUCTS)
    assert service.seed_sample_products() == 0
    names = {p.name for p in service.list_products()}
    assert names == {name for name, _ in SAMPLE_PRODUCTS}


def test_create_order_total(db_session):
    """Test the order total is unit price times quantity."""
    product = _product(db_session, price=19.99)

    order = OrderService(db_session).create_order(
        OrderCreate(product_id=product.id, quantity=3)
    )

    assert order["total_price"] == pytest.approx(59.97)
    assert order["product_name"] == "Widget"


def test_create_order_product_not_found(db_session):
    """Test ordering a missing product raises NotFoundError."""
    with pytest.raises(NotFoundError, match="Product not found"):
        OrderService(db_session).create_order(OrderCreate(product_id=7, quantity=1))


def test_order_services_reject_unvalidated_quantity(db_session):
    """Test the ledger refuses non-positive quantities that skipped the schema."""
    product = _product(db_session)
    service = OrderService(db_session)

    with pytest.raises(ValidationError, match="greater than 0"):
        service.create_order(OrderCreate.model_construct(product_id=product.id, quantity=0))

    order = service.create_order(OrderCreate(product_id=product.id, quantity=1))
    with pytest.raises(ValidationError):
        service.update_order(order["order_id"], OrderUpdate.model_construct(quantity=-3))


def test_update_order_ignores_original_quantity(db_session):
    """Test the new total depends only on the new quantity and current price."""
    product = _product(db_session, price=4.00)
    service = OrderService(db_session)
    order = service.create_order(OrderCreate(product_id=product.id, quantity=9))

    updated = service.update_order(order["order_id"], OrderUpdate(quantity=2))

    assert updated["quantity"] == 2
    assert updated["total_price"] == 8.00
    assert service.get_order(order["order_id"])["total_price"] == 8.00


def test_delete_order_then_get(db_session):
    """Test a deleted order can no longer be read."""
    product = _product(db_session)
    service = OrderService(db_session)
    order = service.create_order(OrderCreate(product_id=product.id, quantity=1))

    service.delete_order(order["order_id"])

    with pytest.raises(NotFoundError, match="Order not found"):
        service.get_order(order["order_id"])
    with pytest.raises(NotFoundError):
        service.delete_order(order["order_id"])


def test_delete_all_orders_count(db_session):
    """Test bulk delete returns the number of rows removed."""
    product = _product(db_session)
    service = OrderService(db_session)
    for quantity in (1, 2):
        service.create_order(OrderCreate(product_id=product.id, quantity=quantity))

    assert service.delete_all_orders() == 2
    assert service.delete_all_orders() == 0


def test_top_sellers_respects_limit(db_session):
    """Test the limit argument caps the ranking."""
    orders = OrderService(db_session)
    for quantity in (1, 2, 3):
        product = _product(db_session, f"P{quantity}")
        orders.create_order(OrderCreate(product_id=product.id, quantity=quantity))

    rows = ReportService(db_session).top_sellers(limit=2)

    assert [row.total_quantity_sold for row in rows] == [3, 2]


def test_top_sellers_breaks_ties_by_id(db_session):
    """Test products with equal quantities keep ID order."""
    orders = OrderService(db_session)
    ids = []
    for name in ("First", "Second"):
        product = _product(db_session, name)
        ids.append(product.id)
        orders.create_order(OrderCreate(product_id=product.id, quantity=2))

    rows = ReportService(db_session).top_sellers()

    assert [row.id for row in rows] == ids


def test_top_sellers_rejects_bad_limit(db_session):
    """Test a non-positive limit is a validation error."""
    with pytest.raises(ValidationError):
        ReportService(db_session).top_sellers(limit=0)


def test_sales_summary_empty(db_session):
    """Test an empty ledger summary is all zeros."""
    summary = ReportService(db_session).sales_summary()

    assert summary.total_orders == 0
    assert summary.total_items_sold == 0
    assert summary.total_revenue == 0
    assert summary.average_order_value == 0
    assert summary.first_order_date is None


@pytest.mark.parametrize("value, expected", [
    (None, 0.0),
    (0, 0.0),
    (10, 10.0),
    (16.666666, 16.67),
])
def test_to_money(value, expected):
    """Test monetary rounding of aggregate values."""
    assert to_money(value) == expected


def test_create_product_storage_error_rolls_back(db_session):
    """Test a failed commit is rolled back and wrapped in StorageError."""
    service = ProductService(db_session)
    failure = OperationalError("INSERT INTO products", {}, Exception("disk I/O error"))

    with patch.object(db_session, "commit", side_effect=failure), \
            patch.object(db_session, "rollback", wraps=db_session.rollback) as rollback:
        with pytest.raises(StorageError, match="disk I/O error"):
            service.create_product(ProductCreate(name="Lost", price=1.00))

    rollback.assert_called_once()
    assert service.list_products() == []


def test_update_order_storage_error_keeps_old_total(db_session):
    """Test a failed order update leaves the stored order unchanged."""
    product = _product(db_session, price=5.00)
    service = OrderService(db_session)
    order = service.create_order(OrderCreate(product_id=product.id, quantity=2))
    failure = OperationalError("UPDATE orders", {}, Exception("database is locked"))

    with patch.object(db_session, "commit", side_effect=failure):
        with pytest.raises(StorageError):
            service.update_order(order["order_id"], OrderUpdate(quantity=7))

    stored = service.get_order(order["order_id"])
    assert stored["quantity"] == 2
    assert stored["total_price"] == 10.00


def test_order_quantity_upper_bound(db_session):
    """Test quantities past the integer column range are refused."""
    product = _product(db_session)
    service = OrderService(db_session)

    with pytest.raises(ValidationError, match="at most"):
        service.create_order(
            OrderCreate.model_construct(product_id=product.id, quantity=10**20)
        )


def test_order_total_must_be_finite(db_session):
    """Test both order writes refuse a total that overflows to infinity."""
    product = _product(db_session, price=1e308)
    service = OrderService(db_session)

    with pytest.raises(ValidationError, match="Total price is too large"):
        service.create_order(OrderCreate(product_id=product.id, quantity=10))
    assert service.list_orders() == []

    order = service.create_order(OrderCreate(product_id=product.id, quantity=1))
    with pytest.raises(ValidationError, match="Total price is too large"):
        service.update_order(order["order_id"], OrderUpdate(quantity=10))
    assert service.get_order(order["order_id"])["quantity"] == 1
