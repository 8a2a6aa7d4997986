from pydantic import BaseModel, Field, ConfigDict, model_validator
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Any, Optional

from shopledger.schemas.common import is_missing, to_number

# Largest quantity an INTEGER column holds on every supported engine
MAX_QUANTITY = 2**31 - 1


def _check_quantity(data: dict) -> None:
    quantity = to_number(data.get("quantity"))
    if quantity is None or quantity <= 0:
        raise PydanticCustomError("invalid_quantity", "Quantity must be greater than 0")
    if quantity > MAX_QUANTITY:
        raise PydanticCustomError("quantity_too_large", f"Quantity must be at most {MAX_QUANTITY}")


class OrderCreate(BaseModel):
    """Schema for recording a new sale."""
    product_id: int = Field(..., description="ID of the product sold")
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, description="Number of items sold")

    @model_validator(mode="before")
    @classmethod
    def check_product_and_quantity(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise PydanticCustomError("invalid_body", "Request body must be a JSON object")
        product_id = data.get("product_id")
        # Zero counts as absent
        if is_missing(product_id) or to_number(product_id) == 0 or is_missing(data.get("quantity")):
            raise PydanticCustomError("missing_fields", "Product ID and quantity are required")
        _check_quantity(data)
        return data


class OrderUpdate(BaseModel):
    """Schema for changing the quantity of an existing order."""
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY, description="New number of items")

    @model_validator(mode="before")
    @classmethod
    def check_quantity(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise PydanticCustomError("invalid_body", "Request body must be a JSON object")
        if is_missing(data.get("quantity")):
            raise PydanticCustomError("missing_fields", "Quantity is required")
        _check_quantity(data)
        return data


class OrderResponse(BaseModel):
    """Schema for order response joined with the product name."""
    order_id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    total_price: float
    order_date: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetail(OrderResponse):
    """Schema for a single order including the product's current unit price."""
    unit_price: Optional[float] = None
