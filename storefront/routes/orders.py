"""Order API routes for the storefront"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..core.config import settings
from ..core.errors import PaymentVerificationError
from ..database.products import ProductDatabase
from ..models.order import (
    CheckoutRequest,
    OrderListResponse,
    OrderResponse,
    OrderStatus,
    PaymentConfirmation,
    UpdateOrderRequest,
    UpdateOrderStatusRequest,
)
from ..payments.gateway import PaymentGateway, payment_gateway
from ..security.auth import Caller, require_admin, require_user
from ..services.checkout import CheckoutService, checkout_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def get_checkout_service() -> CheckoutService:
    return checkout_service


def get_payment_gateway() -> PaymentGateway:
    return payment_gateway


def _listing(orders, total: int, page: int, limit: int) -> OrderListResponse:
    return OrderListResponse(
        orders=orders,
        page=page,
        limit=limit,
        total_pages=ProductDatabase.total_pages(total, limit),
        total_orders=total,
    )


@router.post("", response_model=OrderResponse, status_code=201)
async def place_order(
    request: CheckoutRequest,
    caller: Caller = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Place an order from the caller's cart"""
    order = service.place_order(
        user_id=caller.user_id,
        shipping_address=request.shipping_address,
        payment_method=request.payment_method,
    )
    return OrderResponse(order=order, message="Order created successfully")


@router.get("", response_model=OrderListResponse)
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """List the caller's orders, newest first"""
    orders, total = service.list_orders(caller, page=page, limit=limit)
    return _listing(orders, total, page, limit)


@router.get("/all", response_model=OrderListResponse)
async def list_all_orders(
    status: Optional[OrderStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller = Depends(require_admin),
    service: CheckoutService = Depends(get_checkout_service),
):
    """List every order, optionally by status (admin only)"""
    orders, total = service.list_orders(caller, all_users=True, status=status, page=page, limit=limit)
    return _listing(orders, total, page, limit)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    caller: Caller = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Get order details (owner or admin)"""
    return OrderResponse(order=service.get_order(order_id, caller))


@router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    caller: Caller = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Cancel an order and return its items to stock"""
    order = service.cancel_order(order_id, caller)
    return OrderResponse(order=order, message="Order cancelled successfully")


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    request: UpdateOrderStatusRequest,
    caller: Caller = Depends(require_admin),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Update order status (admin only)"""
    order = service.update_status(order_id, request.status, tracking_number=request.tracking_number)
    return OrderResponse(order=order, message="Order status updated successfully")


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    request: UpdateOrderRequest,
    caller: Caller = Depends(require_admin),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Correct shipping details or tracking number (admin only)"""
    order = service.update_order(
        order_id,
        shipping_address=request.shipping_address,
        tracking_number=request.tracking_number,
    )
    return OrderResponse(order=order, message="Order updated successfully")


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    caller: Caller = Depends(require_admin),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Delete an order (admin only)"""
    service.delete_order(order_id)
    return {"message": "Order deleted successfully"}


@router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    order_id: str,
    request: PaymentConfirmation,
    caller: Caller = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Mark an order as paid once the gateway callback checks out.

    The callback must carry a valid signature for an intent this gateway
    created for this very order, for the order's full total.
    """
    order = service.get_order(order_id, caller)

    intent = gateway.get_intent(request.gateway_order_id)
    if intent is None:
        logger.warning(f"Payment {request.payment_id} refers to unknown intent {request.gateway_order_id}")
        raise PaymentVerificationError("Unknown payment intent")
    if intent.receipt != order_id:
        logger.warning(f"Payment {request.payment_id} was made against {intent.receipt}, not {order_id}")
        raise PaymentVerificationError("Payment does not belong to this order")
    if intent.amount_minor != gateway.to_minor_units(order.total_price) or intent.currency != order.currency:
        logger.warning(f"Payment {request.payment_id} amount does not match order {order_id}")
        raise PaymentVerificationError("Payment amount does not match the order total")

    result = gateway.verify_payment(request.gateway_order_id, request.payment_id, request.signature)
    if not result.is_paid:
        raise PaymentVerificationError(result.error_message or "Payment verification failed")

    order = service.mark_paid(
        order_id,
        caller,
        payment_id=request.payment_id,
        gateway_order_id=request.gateway_order_id,
    )
    return OrderResponse(order=order, message="Payment recorded")
