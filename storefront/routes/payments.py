"""Payment API routes for the storefront"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, Field

from ..core.errors import InvalidStatusTransitionError, PaymentVerificationError, RefundError
from ..models.order import OrderStatus
from ..payments.gateway import PaymentGateway
from ..security.auth import Caller, require_admin, require_user
from ..services.checkout import CheckoutService
from .orders import get_checkout_service, get_payment_gateway

router = APIRouter(prefix="/api/payments", tags=["Payments"])


class CreateIntentRequest(BaseModel):
    """Request to start paying for an order"""
    order_id: str


class CreateIntentResponse(BaseModel):
    intent: dict
    key_id: str


@router.post("/intents", response_model=CreateIntentResponse)
async def create_payment_intent(
    request: CreateIntentRequest,
    caller: Caller = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a gateway payment intent for the order's total"""
    order = service.get_order(request.order_id, caller)
    if order.status != OrderStatus.PENDING or order.is_paid:
        raise InvalidStatusTransitionError(order.order_id, order.status.value, OrderStatus.PROCESSING.value)

    intent = gateway.create_intent(order.total_price, order.currency, receipt=order.order_id)
    return CreateIntentResponse(intent=intent.to_dict(), key_id=gateway.key_id)


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    x_gateway_signature: Optional[str] = Header(None),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Receive gateway events"""
    body = await request.body()
    try:
        event = gateway.handle_webhook(body, x_gateway_signature)
    except ValueError as e:
        raise PaymentVerificationError(str(e))

    if event is None:
        raise PaymentVerificationError("Invalid webhook signature")

    return {"success": True, "event": event, "message": "Webhook processed"}


class RefundRequest(BaseModel):
    """Refund a captured payment; the full remaining amount when no amount is given"""
    payment_id: str = Field(min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0)


@router.post("/refunds")
async def create_refund(
    request: RefundRequest,
    caller: Caller = Depends(require_admin),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Issue a refund against a captured payment (admin only)"""
    try:
        refund = gateway.create_refund(request.payment_id, request.amount)
    except ValueError as e:
        raise RefundError(str(e))

    return {"success": True, "message": "Refund initiated successfully", "refund": refund.to_dict()}
