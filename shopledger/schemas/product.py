from pydantic import BaseModel, Field, ConfigDict, model_validator
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Any

from shopledger.schemas.common import is_missing, to_number


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    price: float = Field(..., gt=0, description="Unit price (must be positive)")


class ProductCreate(ProductBase):
    """
    Schema for creating or replacing a product.

    Presence and price range are checked on the raw body so clients get a
    single readable message instead of per-field coercion errors.
    """

    @model_validator(mode="before")
    @classmethod
    def check_name_and_price(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise PydanticCustomError("invalid_body", "Request body must be a JSON object")

        if is_missing(data.get("name")) or is_missing(data.get("price")):
            raise PydanticCustomError("missing_fields", "Name and price are required")

        price = to_number(data.get("price"))
        if price is None or price <= 0:
            raise PydanticCustomError("invalid_price", "Price must be a positive number")

        return {**data, "price": price}


class ProductUpdate(ProductCreate):
    """Schema for updating an existing product. Both fields are required."""
    pass


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
