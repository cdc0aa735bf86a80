"""
Payment Gateway Adapter

Creates payment intents and checks the HMAC-SHA256 signatures the gateway
attaches to payment callbacks and webhooks. No network calls are made;
intents are kept in memory so the checkout flow can be exercised end to end.
"""

import json
import logging
import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from ..core.config import settings
from .models import IntentStatus, PaymentIntent, PaymentVerification, Refund, WebhookEvent

logger = logging.getLogger(__name__)


def _hmac_sha256(secret: str, message: bytes) -> bytes:
    h = hmac.HMAC(secret.encode(), hashes.SHA256())
    h.update(message)
    return h.finalize()


def _hmac_matches(secret: str, message: bytes, signature_hex: str) -> bool:
    try:
        expected = bytes.fromhex(signature_hex)
    except ValueError:
        return False

    h = hmac.HMAC(secret.encode(), hashes.SHA256())
    h.update(message)
    try:
        h.verify(expected)
    except InvalidSignature:
        return False
    return True


def _dig(payload: dict, *keys: str) -> Any:
    """Walk nested objects; raises ValueError where a level is not an object"""
    node: Any = payload
    for key in keys:
        if node is None:
            return None
        if not isinstance(node, dict):
            raise ValueError("Malformed webhook body")
        node = node.get(key)
    return node


class PaymentGateway:
    """
    Payment gateway adapter.

    Usage:
        gateway = PaymentGateway(key_id="gw_test_key", key_secret="...")
        intent = gateway.create_intent(Decimal("79.50"), "INR", receipt="ORD-1234")

        # after the client pays, it forwards the signed callback
        result = gateway.verify_payment(intent.gateway_order_id, payment_id, signature)
        if result.is_paid:
            ...

        # later, money can go back against the captured payment
        refund = gateway.create_refund(payment_id, Decimal("20"))
    """

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.key_id = key_id or settings.gateway_key_id
        self._key_secret = key_secret or settings.gateway_key_secret
        self._webhook_secret = webhook_secret or settings.gateway_webhook_secret
        self.intents: dict[str, PaymentIntent] = {}
        # payment id -> gateway order id
        self.payments: dict[str, str] = {}
        self.refunds: dict[str, Refund] = {}

    def reset(self) -> None:
        self.intents = {}
        self.payments = {}
        self.refunds = {}

    @staticmethod
    def to_minor_units(amount: Decimal) -> int:
        """Convert to the smallest currency unit (paise, cents)"""
        return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def create_intent(self, amount: Decimal, currency: str, receipt: Optional[str] = None) -> PaymentIntent:
        """Create a gateway order for ``amount``"""
        if amount <= 0:
            raise ValueError("Amount must be positive")

        intent = PaymentIntent(
            gateway_order_id=f"gw_order_{uuid.uuid4().hex[:14]}",
            amount_minor=self.to_minor_units(amount),
            currency=currency,
            receipt=receipt or f"receipt_{int(datetime.utcnow().timestamp())}",
            created_at=datetime.utcnow(),
        )
        self.intents[intent.gateway_order_id] = intent
        logger.info(f"Payment intent {intent.gateway_order_id} created for {intent.receipt}")
        return intent

    def get_intent(self, gateway_order_id: str) -> Optional[PaymentIntent]:
        return self.intents.get(gateway_order_id)

    def sign_payment(self, gateway_order_id: str, payment_id: str) -> str:
        """Signature the gateway sends back with a successful payment"""
        message = f"{gateway_order_id}|{payment_id}".encode()
        return _hmac_sha256(self._key_secret, message).hex()

    def verify_payment(self, gateway_order_id: str, payment_id: str, signature: str) -> PaymentVerification:
        """
        Verify a signed payment callback.

        Returns:
            PaymentVerification indicating whether the payment is genuine
        """
        if not gateway_order_id or not payment_id or not signature:
            return PaymentVerification(
                verified=False,
                error_message="Missing payment verification parameters",
            )

        message = f"{gateway_order_id}|{payment_id}".encode()
        if not _hmac_matches(self._key_secret, message, signature):
            logger.warning(f"Invalid payment signature for {gateway_order_id}")
            return PaymentVerification(
                verified=False,
                payment_id=payment_id,
                gateway_order_id=gateway_order_id,
                error_message="Invalid payment signature",
            )

        intent = self.intents.get(gateway_order_id)
        if intent and intent.payment_id is None:
            intent.status = IntentStatus.PAID
            intent.payment_id = payment_id
            self.payments[payment_id] = gateway_order_id
        logger.info(f"Payment {payment_id} verified for {gateway_order_id}")

        return PaymentVerification(
            verified=True,
            payment_id=payment_id,
            gateway_order_id=gateway_order_id,
        )

    def create_refund(self, payment_id: str, amount: Optional[Decimal] = None) -> Refund:
        """
        Refund a captured payment, in full when ``amount`` is omitted.

        Raises:
            ValueError: for unknown payments, non-positive amounts, or more
                than is left to refund
        """
        if not payment_id:
            raise ValueError("Payment ID is required")

        intent = self.intents.get(self.payments.get(payment_id, ""))
        if intent is None:
            raise ValueError(f"Unknown payment: {payment_id}")

        amount_minor = intent.refundable_minor if amount is None else self.to_minor_units(amount)
        if amount_minor <= 0:
            raise ValueError("Refund amount must be positive")
        if amount_minor > intent.refundable_minor:
            raise ValueError(
                f"Refund of {amount_minor} exceeds refundable {intent.refundable_minor} for {payment_id}"
            )

        refund = Refund(
            refund_id=f"rfnd_{uuid.uuid4().hex[:14]}",
            payment_id=payment_id,
            amount_minor=amount_minor,
            currency=intent.currency,
            created_at=datetime.utcnow(),
        )
        self.refunds[refund.refund_id] = refund

        intent.refunded_minor += amount_minor
        intent.status = IntentStatus.REFUNDED if intent.refundable_minor == 0 else IntentStatus.PARTIALLY_REFUNDED

        logger.info(f"Refund {refund.refund_id} of {amount_minor} {intent.currency} against {payment_id}")
        return refund

    def sign_webhook(self, body: bytes) -> str:
        return _hmac_sha256(self._webhook_secret, body).hex()

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> bool:
        """Verify a webhook body against its signature header"""
        if not signature:
            return False
        return _hmac_matches(self._webhook_secret, body, signature)

    def handle_webhook(self, body: bytes, signature: Optional[str]) -> Optional[str]:
        """
        Verify and log a webhook event.

        Returns:
            The event name, or None if the signature is invalid

        Raises:
            ValueError: if a correctly signed body is not a JSON object of
                the expected shape
        """
        if not self.verify_webhook(body, signature):
            logger.warning("Rejected webhook with invalid signature")
            return None

        try:
            payload: Any = json.loads(body or b"{}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed webhook body: {e}")
        if not isinstance(payload, dict):
            raise ValueError("Malformed webhook body")

        event = payload.get("event", "")
        if not isinstance(event, str):
            raise ValueError("Malformed webhook body")

        try:
            known = WebhookEvent(event)
        except ValueError:
            logger.info(f"Unhandled webhook event: {event}")
            return event

        section = "refund" if known == WebhookEvent.REFUND_CREATED else "payment"
        entity_id = _dig(payload, "payload", section, "entity", "id")
        logger.info(f"Webhook {known.value}: {entity_id}")
        return event


# Singleton instance
payment_gateway = PaymentGateway()
