from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TopSeller(BaseModel):
    """A product ranked by quantity sold."""
    id: int
    name: str
    price: float
    total_quantity_sold: int
    number_of_orders: int
    total_revenue: float


class SalesSummary(BaseModel):
    """Totals across every order in the ledger."""
    total_orders: int = 0
    total_items_sold: int = 0
    total_revenue: float = 0
    average_order_value: float = 0
    first_order_date: Optional[datetime] = None
    last_order_date: Optional[datetime] = None


class ProductPerformance(BaseModel):
    """Sales metrics for one product, zero when it has never sold."""
    id: int
    name: str
    price: float
    total_sold: int
    order_count: int
    revenue: float
