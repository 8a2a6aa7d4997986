from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func

from shopledger.database import Base


class Order(Base):
    """
    Order model representing a sale recorded against a catalog product.

    Attributes:
        order_id: Unique identifier for the order
        product_id: Reference to the sold product
        quantity: Number of items sold
        total_price: Unit price at the last write multiplied by quantity
        order_date: Timestamp when order was created
    """
    __tablename__ = "orders"

    order_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    quantity = Column(Integer, nullable=False)
    total_price = Column(Float, nullable=False)
    order_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    product = relationship("Product", backref=backref("orders", passive_deletes="all"))

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Order(order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
