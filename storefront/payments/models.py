"""Payment Gateway Data Models"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class IntentStatus(str, Enum):
    """Lifecycle of a gateway payment intent"""
    CREATED = "created"
    PAID = "paid"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"


class WebhookEvent(str, Enum):
    PAYMENT_AUTHORIZED = "payment.authorized"
    PAYMENT_CAPTURED = "payment.captured"
    PAYMENT_FAILED = "payment.failed"
    REFUND_CREATED = "refund.created"


@dataclass
class PaymentIntent:
    """Gateway-side order the client pays against"""
    gateway_order_id: str
    amount_minor: int
    currency: str
    receipt: str
    created_at: datetime
    status: IntentStatus = IntentStatus.CREATED
    payment_id: Optional[str] = None
    refunded_minor: int = 0

    @property
    def refundable_minor(self) -> int:
        if self.payment_id is None:
            return 0
        return self.amount_minor - self.refunded_minor

    def to_dict(self) -> dict:
        return {
            "id": self.gateway_order_id,
            "amount": self.amount_minor,
            "currency": self.currency,
            "receipt": self.receipt,
            "status": self.status.value,
        }


@dataclass
class Refund:
    """Money returned against a captured payment"""
    refund_id: str
    payment_id: str
    amount_minor: int
    currency: str
    created_at: datetime
    status: str = "processed"

    def to_dict(self) -> dict:
        return {
            "id": self.refund_id,
            "payment_id": self.payment_id,
            "amount": self.amount_minor / 100,
            "currency": self.currency,
            "status": self.status,
        }


@dataclass
class PaymentVerification:
    """Result of checking a signed payment callback"""
    verified: bool
    payment_id: Optional[str] = None
    gateway_order_id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.verified
