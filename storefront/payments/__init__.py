# Payment gateway adapter

from .gateway import PaymentGateway, payment_gateway
from .models import IntentStatus, PaymentIntent, PaymentVerification, Refund, WebhookEvent

__all__ = [
    "PaymentGateway",
    "payment_gateway",
    "IntentStatus",
    "PaymentIntent",
    "PaymentVerification",
    "Refund",
    "WebhookEvent",
]
