"""
Razorpay Client

Talks to the Razorpay Orders API over HTTPS (basic auth with key id/secret)
and verifies checkout signatures locally.

Signature rule: HMAC-SHA256 of "<order_id>|<payment_id>" keyed with the
key secret, hex encoded, compared in constant time.
"""

import hashlib
import hmac
from typing import Optional

import httpx
from loguru import logger

from jobzee.core.config import get_settings
from jobzee.core.errors import ServiceUnavailableError, UpstreamError

settings = get_settings()


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class RazorpayClient:
    """
    Thin wrapper for the two Razorpay operations the platform needs.

    Orders go out over a short-lived `httpx.AsyncClient`; `transport` lets
    callers swap the network layer (tests pass an `httpx.MockTransport`).
    """

    def __init__(self, key_id: str, key_secret: str, base_url: str = "https://api.razorpay.com/v1",
                 timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    async def create_order(self, amount_paise: int, receipt: str, notes: Optional[dict] = None,
                           currency: str = "INR") -> dict:
        """Create an order; returns Razorpay's order object (id, amount, currency, receipt...)."""
        if not self.configured:
            raise ServiceUnavailableError("Payment gateway is not configured", error_type="payment_gateway_unavailable")

        payload = {"amount": amount_paise, "currency": currency, "receipt": receipt, "notes": notes or {}}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/orders",
                    json=payload,
                    auth=(self.key_id, self.key_secret),
                )
        except httpx.HTTPError as e:
            logger.error(f"Razorpay order request failed: {e}")
            raise UpstreamError("Could not reach payment gateway", error_type="payment_gateway_error")

        if response.status_code >= 400:
            logger.error(f"Razorpay order creation rejected ({response.status_code}): {response.text}")
            raise UpstreamError("Payment gateway rejected the order", error_type="payment_gateway_error")

        return response.json()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check a checkout signature against the key secret."""
        if not self.key_secret or not signature:
            return False
        expected = compute_signature(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected, signature)


# Singleton instance
_razorpay_client: Optional[RazorpayClient] = None


def get_razorpay_client() -> RazorpayClient:
    """Get or create Razorpay client (singleton pattern)"""
    global _razorpay_client
    if _razorpay_client is None:
        _razorpay_client = RazorpayClient(
            settings.razorpay_key_id,
            settings.razorpay_key_secret,
            settings.razorpay_base_url,
            settings.http_timeout_seconds,
        )
    return _razorpay_client
