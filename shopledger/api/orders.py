from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shopledger.database import get_db
from shopledger.services.order_service import OrderService
from shopledger.schemas.common import (
    DataResponse,
    ErrorResponse,
    ListResponse,
    MessageResponse,
)
from shopledger.schemas.order import (
    OrderCreate,
    OrderDetail,
    OrderResponse,
    OrderUpdate,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


@router.post(
    "",
    response_model=DataResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create a new order",
    description="""
    Record a sale of a catalog product.

    The total price is the product's current unit price multiplied by the
    quantity. It is stored with the order and is not changed by later
    product price updates.
    """
)
def create_order(
    order_data: OrderCreate,
    service: OrderService = Depends(get_order_service)
):
    """
    Create an order.

    - **product_id**: ID of the product sold (required)
    - **quantity**: Number of items, must be greater than 0 (required)
    """
    order = service.create_order(order_data)

    return DataResponse[OrderResponse](
        message="Order created successfully",
        data=OrderResponse.model_validate(order),
    )


@router.get(
    "",
    response_model=ListResponse[OrderResponse],
    summary="List all orders",
    description="Get every order with its product name, newest first."
)
def list_orders(service: OrderService = Depends(get_order_service)):
    """Get all orders ordered by order ID descending."""
    orders = service.list_orders()

    return ListResponse[OrderResponse](
        message="Orders retrieved successfully",
        data=[OrderResponse.model_validate(o) for o in orders],
        count=len(orders),
    )


@router.get(
    "/{order_id}",
    response_model=DataResponse[OrderDetail],
    responses={404: {"model": ErrorResponse}},
    summary="Get order by ID",
    description="Get an order with its product name and the product's current unit price."
)
def get_order(
    order_id: int,
    service: OrderService = Depends(get_order_service)
):
    """Get a single order."""
    order = service.get_order(order_id)

    return DataResponse[OrderDetail](
        message="Order retrieved successfully",
        data=OrderDetail.model_validate(order),
    )


@router.put(
    "/{order_id}",
    response_model=DataResponse[OrderResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update an order",
    description="Change an order's quantity. The total is recomputed from the product's current price."
)
def update_order(
    order_id: int,
    order_data: OrderUpdate,
    service: OrderService = Depends(get_order_service)
):
    """Update an order's quantity."""
    order = service.update_order(order_id, order_data)

    return DataResponse[OrderResponse](
        message="Order updated successfully",
        data=OrderResponse.model_validate(order),
    )


@router.delete(
    "/{order_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete an order",
)
def delete_order(
    order_id: int,
    service: OrderService = Depends(get_order_service)
):
    """Delete a single order."""
    service.delete_order(order_id)
    return MessageResponse(message="Order deleted successfully")


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Delete all orders",
    description="Remove every order from the ledger. An empty ledger is not an error."
)
def delete_all_orders(service: OrderService = Depends(get_order_service)):
    """Delete every order."""
    removed = service.delete_all_orders()
    return MessageResponse(
        message=f"All orders deleted successfully ({removed} records removed)"
    )
