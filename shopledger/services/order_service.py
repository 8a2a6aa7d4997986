from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging
import math

from shopledger.models.order import Order
from shopledger.models.product import Product
from shopledger.schemas.order import MAX_QUANTITY, OrderCreate, OrderUpdate
from shopledger.services.errors import NotFoundError, StorageError, ValidationError
from shopledger.services.product_service import ProductService

logger = logging.getLogger(__name__)


class OrderService:
    """
    Service class for the order ledger.

    TOTAL PRICE INVARIANT:
    ======================
    An order's ``total_price`` is always the unit price of its product at the
    time of the order's most recent write, multiplied by its quantity.

    1. On create, the product row is read (and locked where the engine
       supports it) in the same transaction that inserts the order
    2. On update, the order is re-read joined with its product's *current*
       price and the total is recomputed from that price
    3. Changing a product's price never touches existing orders

    Every write either commits once or rolls back, so a failure never leaves
    an order whose total came from a different product than the one stored.
    """

    def __init__(self, db: Session, catalog: Optional[ProductService] = None):
        self.db = db
        self.catalog = catalog or ProductService(db)

    def create_order(self, order_data: OrderCreate) -> dict:
        """
        Record a sale of a catalog product.

        Args:
            order_data: Validated product ID and quantity

        Returns:
            The created order joined with the product name

        Raises:
            NotFoundError: If the product doesn't exist
            ValidationError: If the quantity or the resulting total is out of range
        """
        product_id = order_data.product_id
        quantity = order_data.quantity
        self._check_quantity(quantity)

        try:
            product = self.catalog.get_product(product_id, for_update=True)
            total_price = self._total_price(product.price, quantity)
        except (NotFoundError, ValidationError):
            self.db.rollback()
            raise

        product_name = product.name
        order = Order(
            product_id=product.id,
            quantity=quantity,
            total_price=total_price,
        )

        try:
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
        except SQLAlchemyError as e:
            raise self._storage_error(f"creating order for product #{product_id}", e)

        logger.info(f"Order #{order.order_id} created for product #{product_id} (total {order.total_price})")

        return self._to_record(order, product_name)

    def list_orders(self) -> List[dict]:
        """Get every order with its product's current name, newest first."""
        try:
            rows = (
                self._joined_query()
                .order_by(Order.order_id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("listing orders", e)

        return [self._to_record(order, name) for order, name, _ in rows]

    def get_order(self, order_id: int) -> dict:
        """
        Get an order joined with its product's name and current unit price.

        Raises:
            NotFoundError: If the order doesn't exist
        """
        order, name, unit_price = self._get_joined(order_id)
        return self._to_record(order, name, unit_price=unit_price)

    def update_order(self, order_id: int, order_data: OrderUpdate) -> dict:
        """
        Change an order's quantity and recompute its total.

        The total uses the product's price as it is now, not the price the
        order was originally placed at.

        Raises:
            NotFoundError: If the order or its product doesn't exist
        """
        self._check_quantity(order_data.quantity)
        order, name, unit_price = self._get_joined(order_id)

        if unit_price is None:
            self.db.rollback()
            raise NotFoundError("Product not found")

        try:
            total_price = self._total_price(unit_price, order_data.quantity)
        except ValidationError:
            self.db.rollback()
            raise

        order.quantity = order_data.quantity
        order.total_price = total_price

        try:
            self.db.commit()
            self.db.refresh(order)
        except SQLAlchemyError as e:
            raise self._storage_error(f"updating order #{order_id}", e)

        logger.info(f"Order #{order_id} updated (quantity {order.quantity}, total {order.total_price})")

        return self._to_record(order, name)

    def delete_order(self, order_id: int) -> None:
        """
        Delete a single order.

        Raises:
            NotFoundError: If the order doesn't exist
        """
        try:
            removed = (
                self.db.query(Order)
                .filter(Order.order_id == order_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error(f"deleting order #{order_id}", e)

        if not removed:
            raise NotFoundError("Order not found")

        logger.info(f"Order #{order_id} deleted")

    def delete_all_orders(self) -> int:
        """
        Delete every order in one statement.

        Orders committed by other sessions after the statement runs survive.

        Returns:
            Number of orders removed
        """
        try:
            removed = self.db.query(Order).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("deleting all orders", e)

        logger.info(f"All orders deleted ({removed} records removed)")
        return removed

    def _joined_query(self):
        return (
            self.db.query(Order, Product.name, Product.price)
            .outerjoin(Product, Order.product_id == Product.id)
        )

    def _get_joined(self, order_id: int):
        try:
            row = self._joined_query().filter(Order.order_id == order_id).first()
        except SQLAlchemyError as e:
            raise self._storage_error(f"reading order #{order_id}", e)

        if row is None:
            raise NotFoundError("Order not found")
        return row

    @staticmethod
    def _check_quantity(quantity) -> None:
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if quantity > MAX_QUANTITY:
            raise ValidationError(f"Quantity must be at most {MAX_QUANTITY}")

    @staticmethod
    def _total_price(unit_price: float, quantity: int) -> float:
        total_price = unit_price * quantity
        if not math.isfinite(total_price):
            raise ValidationError("Total price is too large")
        return total_price

    @staticmethod
    def _to_record(order: Order, product_name: Optional[str], **extra) -> dict:
        record = {
            "order_id": order.order_id,
            "product_id": order.product_id,
            "product_name": product_name,
            "quantity": order.quantity,
            "total_price": order.total_price,
            "order_date": order.order_date,
        }
        record.update(extra)
        return record

    def _storage_error(self, action: str, error: SQLAlchemyError) -> StorageError:
        """Roll back the session and wrap a database failure."""
        self.db.rollback()
        logger.error(f"Database error while {action}: {error}")
        return StorageError(str(error))
