from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable, List, Tuple
import logging

from shopledger.models.order import Order
from shopledger.models.product import Product
from shopledger.schemas.product import ProductCreate, ProductUpdate
from shopledger.services.errors import ConflictError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)


SAMPLE_PRODUCTS: List[Tuple[str, float]] = [
    ("Laptop", 74699.00),
    ("Wireless Mouse", 2490.00),
    ("Keyboard", 4980.00),
    ("Monitor 24", 16599.00),
    ("USB Cable", 830.00),
    ("Headphones", 6640.00),
    ("Webcam", 4150.00),
    ("Desk Lamp", 2900.00),
]


class ProductService:
    """
    Service class for the product catalog.

    The catalog is the authoritative source of product identity and unit
    price. The order ledger reads prices from it before every order write.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_products(self) -> List[Product]:
        """Get every product, newest first."""
        try:
            return self.db.query(Product).order_by(Product.id.desc()).all()
        except SQLAlchemyError as e:
            raise self._storage_error("listing products", e)

    def get_product(self, product_id: int, for_update: bool = False) -> Product:
        """
        Get a product by ID.

        With ``for_update`` the row is locked until the session commits so
        its price can't change under a dependent write.

        Raises:
            NotFoundError: If no product has this ID
        """
        try:
            query = self.db.query(Product).filter(Product.id == product_id)
            if for_update:
                query = query.with_for_update()
            product = query.first()
        except SQLAlchemyError as e:
            raise self._storage_error(f"reading product #{product_id}", e)

        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Validated name and price

        Returns:
            Created product instance with its assigned ID
        """
        self._check_price(product_data.price)
        product = Product(name=product_data.name, price=product_data.price)
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as e:
            raise self._storage_error("creating product", e)

        logger.info(f"Product #{product.id} created ({product.name} @ {product.price})")
        return product

    def update_product(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Replace the name and price of an existing product.

        Orders already recorded keep their stored total price.

        Raises:
            NotFoundError: If no product has this ID
        """
        self._check_price(product_data.price)
        product = self.get_product(product_id)
        product.name = product_data.name
        product.price = product_data.price

        try:
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as e:
            raise self._storage_error(f"updating product #{product_id}", e)

        logger.info(f"Product #{product_id} updated ({product.name} @ {product.price})")
        return product

    def delete_product(self, product_id: int, cascade: bool = False) -> int:
        """
        Delete a product.

        A product that still has orders is only deleted when ``cascade`` is
        set, in which case its orders are removed in the same transaction.

        Returns:
            Number of orders removed along with the product

        Raises:
            NotFoundError: If no product has this ID
            ConflictError: If orders reference the product and cascade is off
        """
        product = self.get_product(product_id)

        try:
            orders = self.db.query(Order).filter(Order.product_id == product_id)
            order_count = orders.count()

            if order_count and not cascade:
                raise ConflictError("Product has existing orders")

            removed = orders.delete(synchronize_session=False) if order_count else 0
            self.db.delete(product)
            self.db.commit()
        except ConflictError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            raise self._storage_error(f"deleting product #{product_id}", e)

        logger.info(f"Product #{product_id} deleted ({removed} orders removed)")
        return removed

    def seed_sample_products(self, samples: Iterable[Tuple[str, float]] = SAMPLE_PRODUCTS) -> int:
        """
        Fill an empty catalog with sample products.

        Returns:
            Number of products inserted, 0 if the catalog already had rows
        """
        try:
            if self.db.query(Product).count():
                return 0

            products = [Product(name=name, price=price) for name, price in samples]
            self.db.add_all(products)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("seeding sample products", e)

        logger.info(f"Seeded {len(products)} sample products")
        return len(products)

    @staticmethod
    def _check_price(price) -> None:
        if price is None or price <= 0:
            raise ValidationError("Price must be a positive number")

    def _storage_error(self, action: str, error: SQLAlchemyError) -> StorageError:
        """Roll back the session and wrap a database failure."""
        self.db.rollback()
        logger.error(f"Database error while {action}: {error}")
        return StorageError(str(error))
