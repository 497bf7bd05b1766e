"""Razorpay order creation and payment verification.

A verified payment is the only path that writes a subscription row: the
gateway signs ``"{order_id}|{payment_id}"`` with the merchant secret and the
row is inserted only when that hex HMAC-SHA256 matches exactly.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import requests

from src.errors import GatewayConfigError, GatewayRequestError, InvalidSignature
from .store import StoreClient
from .subscriptions import ACTIVE, SUBSCRIPTIONS_TABLE, SubscriptionRecord, utcnow

logger = logging.getLogger(__name__)

RAZORPAY_API_URL = "https://api.razorpay.com/v1"
SUBSCRIPTION_DAYS = 30
PLAN_NAME = "premium"


@dataclass(frozen=True)
class Order:
    order_id: str
    amount: int
    currency: str
    key_id: str


def to_subunits(amount: int) -> int:
    return int(amount) * 100


class RazorpayGateway:
    def __init__(
        self,
        key_id: Optional[str],
        key_secret: Optional[str],
        *,
        session: Optional[requests.Session] = None,
        base_url: str = RAZORPAY_API_URL,
        timeout: float = 15.0,
    ) -> None:
        self._key_id = key_id or ""
        self._key_secret = key_secret or ""
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def create_order(self, amount: int, currency: str = "INR") -> Order:
        """Create an order for ``amount`` major units of ``currency``."""
        if not self._key_id or not self._key_secret:
            logger.error("Missing Razorpay credentials")
            raise GatewayConfigError("Razorpay credentials not configured")

        logger.info("Creating Razorpay order for amount: %s %s", amount, currency)
        payload = {
            "amount": to_subunits(amount),
            "currency": currency,
            "receipt": f"receipt_{int(time.time() * 1000)}",
        }
        try:
            response = self._session.post(
                f"{self._base_url}/orders",
                json=payload,
                auth=(self._key_id, self._key_secret),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.error("Razorpay order creation failed: %s", exc)
            raise GatewayRequestError(f"Failed to create order: {exc}") from exc
        if not response.ok:
            logger.error("Razorpay order creation failed: %s", response.text)
            raise GatewayRequestError(f"Failed to create order: {response.text}")

        order = response.json()
        logger.info("Razorpay order created: %s", order["id"])
        return Order(
            order_id=order["id"],
            amount=int(order.get("amount", payload["amount"])),
            currency=order.get("currency", currency),
            key_id=self._key_id,
        )

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        if not self._key_secret:
            raise GatewayConfigError("Razorpay key secret not configured")
        return compute_signature(self._key_secret, order_id, payment_id)


def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class PaymentService:
    """Verify checkout results and record the resulting subscription."""

    def __init__(
        self,
        gateway: RazorpayGateway,
        store: StoreClient,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._clock = clock

    def create_order(self, amount: int, currency: str = "INR") -> Order:
        return self._gateway.create_order(amount, currency)

    def verify_payment(
        self,
        payment_id: str,
        order_id: str,
        signature: str,
        amount: float,
        user_id: str,
    ) -> SubscriptionRecord:
        logger.info("Verifying payment: %s for user: %s", payment_id, user_id)
        expected = self._gateway.expected_signature(order_id, payment_id)
        if not hmac.compare_digest(expected, str(signature or "")):
            logger.error("Signature verification failed for payment %s", payment_id)
            raise InvalidSignature("Invalid payment signature")
        logger.info("Signature verified successfully")

        now = self._clock()
        row = self._store.insert(
            SUBSCRIPTIONS_TABLE,
            {
                "user_id": user_id,
                "razorpay_payment_id": payment_id,
                "razorpay_order_id": order_id,
                "razorpay_signature": signature,
                "amount": amount,
                "status": ACTIVE,
                "plan_name": PLAN_NAME,
                "start_date": now.isoformat(),
                "end_date": (now + timedelta(days=SUBSCRIPTION_DAYS)).isoformat(),
            },
        )
        record = SubscriptionRecord.from_row(row)
        logger.info("Subscription created: %s", record.id)
        return record


__all__ = [
    "Order",
    "RazorpayGateway",
    "PaymentService",
    "compute_signature",
    "to_subunits",
    "SUBSCRIPTION_DAYS",
]
