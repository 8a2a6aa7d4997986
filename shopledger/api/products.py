from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shopledger.database import get_db
from shopledger.services.product_service import ProductService
from shopledger.schemas.common import (
    DataResponse,
    ErrorResponse,
    ListResponse,
    MessageResponse,
)
from shopledger.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


@router.get(
    "",
    response_model=ListResponse[ProductResponse],
    summary="List all products",
    description="Get every product in the catalog, newest first."
)
def list_products(service: ProductService = Depends(get_product_service)):
    """Get all products ordered by ID descending."""
    products = service.list_products()

    return ListResponse[ProductResponse](
        message="Products retrieved successfully",
        data=[ProductResponse.model_validate(p) for p in products],
        count=len(products),
    )


@router.get(
    "/{product_id}",
    response_model=DataResponse[ProductResponse],
    responses={404: {"model": ErrorResponse}},
    summary="Get product by ID",
)
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """Get a single product."""
    product = service.get_product(product_id)

    return DataResponse[ProductResponse](
        message="Product retrieved successfully",
        data=ProductResponse.model_validate(product),
    )


@router.post(
    "",
    response_model=DataResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create a new product",
    description="Add a product to the catalog with a name and a positive unit price."
)
def create_product(
    product_data: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **price**: Unit price, must be a positive number (required)
    """
    product = service.create_product(product_data)

    return DataResponse[ProductResponse](
        message="Product created successfully",
        data=ProductResponse.model_validate(product),
    )


@router.put(
    "/{product_id}",
    response_model=DataResponse[ProductResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update a product",
    description="Replace a product's name and price. Existing orders keep their totals."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    """Update a product's name and price."""
    product = service.update_product(product_id, product_data)

    return DataResponse[ProductResponse](
        message="Product updated successfully",
        data=ProductResponse.model_validate(product),
    )


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Delete a product",
    description="Delete a product. Products with orders are kept unless cascade is requested."
)
def delete_product(
    product_id: int,
    cascade: bool = Query(False, description="Also delete the product's orders"),
    service: ProductService = Depends(get_product_service)
):
    """Delete a product, optionally with its orders."""
    removed = service.delete_product(product_id, cascade=cascade)

    message = "Product deleted successfully"
    if removed:
        message = f"{message} ({removed} orders removed)"
    return MessageResponse(message=message)
