"""Razorpay order and signature handling.

When no API credentials are configured, or in DEBUG, orders are
emulated locally with ``order_test_`` ids and those ids pass
verification without a signature.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

import requests
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)

TEST_ORDER_PREFIX = "order_test_"


class PaymentGatewayError(Exception):
    """The gateway could not be reached or rejected the request."""

    code = "payment_gateway_error"


class PaymentVerificationError(Exception):
    """The payment proof sent by the client does not check out."""

    code = "payment_verification_failed"


@dataclass
class GatewayOrder:
    order_id: str
    amount: int
    currency: str
    receipt: str
    test_mode: bool = False


class RazorpayGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        *,
        base_url: str = "https://api.razorpay.com/v1/",
        timeout: int = 30,
        test_mode: bool = False,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url
        self.timeout = timeout
        self.test_mode = test_mode

    @classmethod
    def from_settings(cls) -> "RazorpayGateway":
        key_id = settings.RAZORPAY_KEY_ID
        key_secret = settings.RAZORPAY_KEY_SECRET
        return cls(
            key_id,
            key_secret,
            base_url=settings.RAZORPAY_API_BASE_URL,
            timeout=settings.RAZORPAY_TIMEOUT_SECONDS,
            test_mode=settings.DEBUG or not (key_id and key_secret),
        )

    def create_order(self, amount: Decimal, receipt: str, notes: dict | None = None) -> GatewayOrder:
        """
        Create an order for ``amount`` (in rupees).

        Args:
            amount: Amount to charge, converted to paise for the gateway
            receipt: Merchant reference, at most 40 characters
            notes: Free-form key/value pairs stored on the order

        Returns:
            GatewayOrder: The order the client checkout should open
        """
        amount_paise = int(amount * 100)
        currency = settings.BOOKING_CURRENCY

        if self.test_mode:
            order_id = f"{TEST_ORDER_PREFIX}{uuid.uuid4().hex[:14]}"
            logger.warning(f"Razorpay emulation: created {order_id} for {amount_paise} paise")
            return GatewayOrder(order_id, amount_paise, currency, receipt, test_mode=True)

        payload = {
            "amount": amount_paise,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            response = requests.post(
                f"{self.base_url}orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Razorpay order creation failed for {receipt}: {e}")
            raise PaymentGatewayError(f"Could not reach the payment gateway: {e}") from e

        order_id = result.get("id")
        if not order_id:
            logger.error(f"Razorpay returned no order id for {receipt}: {result}")
            raise PaymentGatewayError("The payment gateway did not return an order.")

        logger.info(f"Razorpay order {order_id} created for {receipt}")
        return GatewayOrder(order_id, int(result.get("amount", amount_paise)), currency, receipt)

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if self.test_mode and order_id.startswith(TEST_ORDER_PREFIX):
            logger.warning(f"Razorpay emulation: accepting {order_id} without signature")
            return True
        if not (order_id and payment_id and signature and self.key_secret):
            return False
        return hmac.compare_digest(self.expected_signature(order_id, payment_id), signature)
