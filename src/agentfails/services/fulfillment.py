"""Merch fulfillment triggered by checkout-completion webhooks.

Handling is keyed on the checkout session id so a redelivered notification
never places a second print order or grants membership twice.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agentfails.core.errors import FulfillmentError
from agentfails.core.settings import settings
from agentfails.models import Fulfillment
from agentfails.models.fulfillment import (
    FULFILLMENT_FAILED,
    FULFILLMENT_ORDERED,
    FULFILLMENT_RECEIVED,
)
from agentfails.services.member_service import grant_shirt_membership

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
SHIRT_LABEL = "faceclaw tee"


class PrintifyClient:
    """Place orders with the print-on-demand provider."""

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self._transport = transport

    def create_order(self, order: dict[str, Any]) -> str:
        """Submit an order and return the provider's order id.

        Raises:
            FulfillmentError: If the provider is unreachable or rejects the order.
        """
        if not settings.printify_api_key:
            raise FulfillmentError("Printify not configured")

        path = f"/v1/shops/{settings.printify_shop_id}/orders.json"
        try:
            with httpx.Client(
                base_url=settings.printify_api_base,
                timeout=httpx.Timeout(settings.provider_http_timeout_seconds),
                transport=self._transport,
            ) as client:
                response = client.post(
                    path,
                    json=order,
                    headers={"Authorization": f"Bearer {settings.printify_api_key}"},
                )
        except httpx.HTTPError as exc:
            raise FulfillmentError(f"Printify request failed: {exc}") from exc

        if response.status_code >= 400:
            raise FulfillmentError(
                f"Printify order creation failed: {response.status_code} {response.text}"
            )
        try:
            return str(response.json().get("id", ""))
        except ValueError as exc:
            raise FulfillmentError("Printify returned invalid JSON") from exc


def build_print_order(session: dict[str, Any]) -> dict[str, Any] | None:
    """Translate a completed checkout session into a print order.

    Returns None when the session lacks a shipping address or product metadata.
    """
    metadata = session.get("metadata") or {}
    collected = session.get("collected_information") or {}
    shipping = collected.get("shipping_details") or session.get("shipping_details") or {}
    address = shipping.get("address")
    product_id = metadata.get("printify_product_id")
    try:
        variant_id = int(metadata.get("printify_variant_id") or 0)
    except (TypeError, ValueError):
        variant_id = 0

    if not address or not product_id or not variant_id:
        return None

    name = (shipping.get("name") or "").strip()
    first_name, _, last_name = name.partition(" ")
    customer = session.get("customer_details") or {}

    return {
        "external_id": session.get("id"),
        "label": f"{SHIRT_LABEL} - {metadata.get('size', 'M')}",
        "line_items": [
            {"product_id": product_id, "variant_id": variant_id, "quantity": 1},
        ],
        "shipping_method": 1,
        "send_shipping_notification": True,
        "address_to": {
            "first_name": first_name,
            "last_name": last_name.strip(),
            "email": customer.get("email") or "",
            "phone": "",
            "country": address.get("country") or "",
            "region": address.get("state") or "",
            "address1": address.get("line1") or "",
            "address2": address.get("line2") or "",
            "city": address.get("city") or "",
            "zip": address.get("postal_code") or "",
        },
    }


class FulfillmentService:
    """Handle checkout webhook events idempotently."""

    def __init__(self, printify: PrintifyClient | None = None) -> None:
        self.printify = printify or PrintifyClient()

    def handle_event(self, db: Session, event: dict[str, Any]) -> Fulfillment | None:
        """Process a webhook event.

        Returns the fulfillment record for a completed checkout (new or already
        processed), or None for events that need no handling.
        """
        if event.get("type") != CHECKOUT_COMPLETED:
            return None

        session = (event.get("data") or {}).get("object") or {}
        session_id = session.get("id")
        if not session_id:
            logger.error("Checkout completion event without a session id")
            return None

        existing = db.get(Fulfillment, session_id)
        if existing is not None:
            logger.info("Checkout session %s already handled", session_id)
            return existing

        wallet = ((session.get("metadata") or {}).get("wallet_address") or "").strip() or None
        record = Fulfillment(
            session_id=session_id,
            status=FULFILLMENT_RECEIVED,
            wallet_address=wallet.lower() if wallet else None,
        )
        try:
            with db.begin_nested():
                db.add(record)
        except IntegrityError:
            logger.info("Checkout session %s claimed concurrently", session_id)
            return db.get(Fulfillment, session_id)

        self._place_order(record, session)

        if wallet:
            grant_shirt_membership(db, wallet)

        db.flush()
        return record

    def _place_order(self, record: Fulfillment, session: dict[str, Any]) -> None:
        order = build_print_order(session)
        if order is None:
            logger.error("Missing shipping or product data for session %s", record.session_id)
            record.status = FULFILLMENT_FAILED
            record.error = "missing shipping or product data"
            return

        try:
            record.provider_order_id = self.printify.create_order(order)
        except FulfillmentError as exc:
            logger.error("Fulfillment failed for session %s: %s", record.session_id, exc)
            record.status = FULFILLMENT_FAILED
            record.error = str(exc)
            return

        record.status = FULFILLMENT_ORDERED
        logger.info(
            "Printify order created: %s | checkout session: %s",
            record.provider_order_id,
            record.session_id,
        )


def get_fulfillment_service() -> FulfillmentService:
    """Return a fulfillment service with the default provider client."""
    return FulfillmentService()
