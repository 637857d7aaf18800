"""
Razorpay gateway adapter: order creation and callback signature checks.

The key secret stays on the server. Clients only ever receive the publishable
key id together with the order id.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import razorpay

from adwise.core.config import settings
from adwise.core.errors import GatewayUnavailable, VerificationFailed

logger = logging.getLogger(__name__)

# Razorpay rejects receipts longer than this
MAX_RECEIPT_LENGTH = 40


@dataclass
class GatewayOrder:
    order_id: str
    key_id: str
    amount: int  # minor units
    currency: str
    raw: Dict[str, Any] = field(default_factory=dict)


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: Optional[str], secret: str) -> bool:
    """True only when ``signature`` is the HMAC-SHA256 of ``order_id|payment_id``."""
    if not secret or not signature or not order_id or not payment_id:
        return False
    expected = compute_signature(str(order_id), str(payment_id), secret)
    return hmac.compare_digest(expected.encode(), str(signature).encode())


class PaymentGatewayAdapter:
    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        self.key_id = settings.RAZORPAY_KEY_ID if key_id is None else key_id
        self._key_secret = settings.RAZORPAY_KEY_SECRET if key_secret is None else key_secret
        self._client = client
        if self._client is None and self.configured:
            self._client = razorpay.Client(auth=(self.key_id, self._key_secret))

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self._key_secret)

    def status(self) -> Dict[str, Any]:
        return {
            "gateway": "razorpay",
            "razorpay_configured": self.configured,
            "key_id": self.key_id or None,
        }

    def create_order(
        self,
        amount_minor_units: int,
        currency: str,
        receipt_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> GatewayOrder:
        if not self.configured or self._client is None:
            raise GatewayUnavailable("Payment gateway is not configured")
        if amount_minor_units is None or int(round(amount_minor_units)) <= 0:
            raise GatewayUnavailable("Order amount must be greater than 0")

        amount = int(round(amount_minor_units))
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": str(receipt_id)[:MAX_RECEIPT_LENGTH],
            "notes": {k: str(v) for k, v in (metadata or {}).items()},
        }
        logger.info("Creating Razorpay order for amount=%s %s receipt=%s", amount, currency, payload["receipt"])
        try:
            order = self._client.order.create(payload)
        except Exception as exc:
            logger.error("Razorpay API error while creating order: %s", exc)
            raise GatewayUnavailable("Payment gateway is unavailable", details={"receipt": payload["receipt"]}) from exc

        order_id = order.get("id") if isinstance(order, dict) else None
        if not order_id:
            logger.error("Razorpay returned an order without an id: %s", order)
            raise GatewayUnavailable("Payment gateway returned an invalid order")

        logger.info("Razorpay order created: %s", order_id)
        return GatewayOrder(order_id=order_id, key_id=self.key_id, amount=amount, currency=currency, raw=order)

    def verify_payment(self, order_id: str, payment_id: str, signature: Optional[str]) -> bool:
        if not self._key_secret:
            raise GatewayUnavailable("Payment gateway is not configured", hint=VerificationFailed.hint)
        return verify_payment_signature(order_id, payment_id, signature, self._key_secret)
