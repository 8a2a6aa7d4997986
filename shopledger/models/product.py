from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func

from shopledger.database import Base


class Product(Base):
    """
    Product model representing an item in the catalog.

    Attributes:
        id: Unique identifier for the product, never reused
        name: Product name
        price: Current unit price (must be positive)
        created_at: Timestamp when product was created
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint('price > 0', name='check_price_positive'),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
