"""Square API client — payment links, order status and refunds over the REST API.

Falls back to a mock mode when no access token is configured so checkout can be
exercised end to end in development.
"""

import base64
import hashlib
import hmac
import logging
import time
import uuid

import httpx

from michels_travel.config import settings
from michels_travel.errors import ExternalAPIError

logger = logging.getLogger(__name__)

SQUARE_API_VERSION = "2024-10-17"


def verify_webhook_signature(body: bytes, signature: str | None) -> bool:
    """Check the base64 HMAC-SHA256 webhook signature.

    The signed payload is the configured notification URL followed by the raw
    body, or the raw body alone when no URL is configured. Always passes when
    no signature key is configured.
    """
    key = settings.square_webhook_signature_key
    if not key:
        return True
    if not signature:
        return False
    digest = hmac.new(key.encode(), settings.square_webhook_notification_url.encode() + body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode()
    return hmac.compare_digest(expected, signature)


class SquareClient:
    """Adapter for the Square Checkout, Orders and Refunds APIs."""

    def __init__(self):
        self._client: httpx.AsyncClient | None = None
        self._location_id: str | None = settings.square_location_id or None
        self._use_mock = not settings.square_access_token

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=settings.square_base_url,
                timeout=30.0,
                headers={
                    "Authorization": f"Bearer {settings.square_access_token}",
                    "Square-Version": SQUARE_API_VERSION,
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def _request(self, method: str, path: str, action: str, json: dict | None = None) -> dict:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.error(f"Square {action} request error: {e}")
            raise ExternalAPIError("Square", f"Failed to {action}: service unreachable")

        if resp.status_code >= 400:
            detail = None
            try:
                errors = resp.json().get("errors") or []
                detail = errors[0].get("detail") if errors else None
            except ValueError:
                pass
            logger.error(f"Square {action} failed: {resp.status_code} {detail}")
            raise ExternalAPIError("Square", f"Failed to {action}: {detail or resp.status_code}")
        return resp.json()

    async def _get_location_id(self) -> str:
        """Configured location, else the first ACTIVE location on the account."""
        if self._location_id:
            return self._location_id
        data = await self._request("GET", "/v2/locations", "list locations")
        locations = data.get("locations") or []
        if not locations:
            raise ExternalAPIError("Square", "No Square locations found")
        active = next((loc for loc in locations if loc.get("status") == "ACTIVE"), locations[0])
        self._location_id = active["id"]
        return self._location_id

    async def create_payment_link(
        self,
        booking_id: uuid.UUID,
        reference: str,
        origin: str,
        destination: str,
        description: str,
        total_amount: int,
        currency: str,
        customer_email: str,
        redirect_url: str,
        metadata: dict | None = None,
    ) -> dict:
        """Create a hosted checkout link for a booking. Returns {"url", "order_id"}."""
        if self._use_mock:
            order_id = f"mock-order-{uuid.uuid4().hex[:12]}"
            logger.info(f"Square mock payment link for booking {booking_id}")
            return {"url": f"https://sandbox.square.link/u/{order_id}", "order_id": order_id}

        location_id = await self._get_location_id()
        payload = {
            "idempotency_key": f"booking-{booking_id}-{int(time.time() * 1000)}",
            "order": {
                "location_id": location_id,
                "reference_id": reference,
                "line_items": [
                    {
                        "name": f"Flight: {origin} → {destination}",
                        "quantity": "1",
                        "note": description[:2000],
                        "base_price_money": {"amount": total_amount, "currency": currency.upper()},
                    }
                ],
                "metadata": {k: str(v) for k, v in (metadata or {}).items()},
            },
            "checkout_options": {
                "redirect_url": redirect_url,
                "ask_for_shipping_address": False,
                "merchant_support_email": settings.square_support_email,
            },
            "pre_populated_data": {"buyer_email": customer_email},
        }
        data = await self._request("POST", "/v2/online-checkout/payment-links", "create payment link", payload)
        link = data.get("payment_link") or {}
        if not link.get("url") or not link.get("order_id"):
            raise ExternalAPIError("Square", "Failed to create payment link: incomplete response")
        return {"url": link["url"], "order_id": link["order_id"]}

    async def get_order(self, order_id: str) -> dict | None:
        """Return {"state", "payment_id"} for an order, or None if Square has no such order."""
        if self._use_mock:
            return {"state": "OPEN", "payment_id": None}

        data = await self._request("GET", f"/v2/orders/{order_id}", "get order")
        order = data.get("order")
        if not order:
            return None
        tenders = order.get("tenders") or []
        return {
            "state": order.get("state", "UNKNOWN"),
            "payment_id": tenders[0].get("payment_id") if tenders else None,
        }

    async def create_refund(
        self, payment_id: str, amount: int, currency: str = "USD", reason: str | None = None
    ) -> dict:
        """Refund a payment. Returns {"refund_id", "status"}."""
        if self._use_mock:
            return {"refund_id": f"mock-refund-{uuid.uuid4().hex[:12]}", "status": "PENDING"}

        payload = {
            "idempotency_key": f"refund-{payment_id}-{int(time.time() * 1000)}",
            "payment_id": payment_id,
            "reason": reason or "Customer requested refund",
            "amount_money": {"amount": amount, "currency": currency.upper()},
        }
        data = await self._request("POST", "/v2/refunds", "create refund", payload)
        refund = data.get("refund") or {}
        if not refund.get("id"):
            raise ExternalAPIError("Square", "Failed to create refund: incomplete response")
        return {"refund_id": refund["id"], "status": refund.get("status", "PENDING")}

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


square_client = SquareClient()
