from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List
import logging

from shopledger.models.order import Order
from shopledger.models.product import Product
from shopledger.schemas.report import ProductPerformance, SalesSummary, TopSeller
from shopledger.services.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


def to_money(value) -> float:
    """Round a monetary aggregate to 2 decimal places, treating NULL as 0."""
    if value is None:
        return 0.0
    return round(float(value), 2)


class ReportService:
    """
    Read-only aggregation over the catalog and the ledger.

    Per-product reports left join products against orders and group by
    product, so a product that never sold still yields one row of zeros.
    Nothing here writes to the session.
    """

    def __init__(self, db: Session):
        self.db = db

    def top_sellers(self, limit: int = 5) -> List[TopSeller]:
        """
        Products ranked by quantity sold.

        Products with nothing sold are left out. Ties on quantity are broken
        by product ID.
        """
        if limit < 1:
            raise ValidationError("Limit must be greater than 0")

        quantity_sold = func.coalesce(func.sum(Order.quantity), 0)

        try:
            rows = (
                self._per_product_query()
                .having(quantity_sold > 0)
                .order_by(quantity_sold.desc(), Product.id.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("building top sellers report", e)

        return [
            TopSeller(
                id=row.id,
                name=row.name,
                price=to_money(row.price),
                total_quantity_sold=int(row.quantity_sold),
                number_of_orders=int(row.order_count),
                total_revenue=to_money(row.revenue),
            )
            for row in rows
        ]

    def sales_summary(self) -> SalesSummary:
        """Totals across every order. An empty ledger reports zeros."""
        try:
            row = self.db.query(
                func.count(func.distinct(Order.order_id)).label("total_orders"),
                func.sum(Order.quantity).label("total_items_sold"),
                func.sum(Order.total_price).label("total_revenue"),
                func.avg(Order.total_price).label("average_order_value"),
                func.min(Order.order_date).label("first_order_date"),
                func.max(Order.order_date).label("last_order_date"),
            ).one()
        except SQLAlchemyError as e:
            raise self._storage_error("building sales summary", e)

        return SalesSummary(
            total_orders=row.total_orders or 0,
            total_items_sold=int(row.total_items_sold or 0),
            total_revenue=to_money(row.total_revenue),
            average_order_value=to_money(row.average_order_value),
            first_order_date=row.first_order_date,
            last_order_date=row.last_order_date,
        )

    def product_performance(self) -> List[ProductPerformance]:
        """Sales metrics for every product, best sellers first."""
        quantity_sold = func.coalesce(func.sum(Order.quantity), 0)

        try:
            rows = (
                self._per_product_query()
                .order_by(quantity_sold.desc(), Product.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("building product performance report", e)

        return [
            ProductPerformance(
                id=row.id,
                name=row.name,
                price=to_money(row.price),
                total_sold=int(row.quantity_sold),
                order_count=int(row.order_count),
                revenue=to_money(row.revenue),
            )
            for row in rows
        ]

    def _per_product_query(self):
        return (
            self.db.query(
                Product.id,
                Product.name,
                Product.price,
                func.coalesce(func.sum(Order.quantity), 0).label("quantity_sold"),
                func.count(Order.order_id).label("order_count"),
                func.coalesce(func.sum(Order.total_price), 0).label("revenue"),
            )
            .outerjoin(Order, Order.product_id == Product.id)
            .group_by(Product.id, Product.name, Product.price)
        )

    def _storage_error(self, action: str, error: SQLAlchemyError) -> StorageError:
        self.db.rollback()
        logger.error(f"Database error while {action}: {error}")
        return StorageError(str(error))
