"""Hosted checkout sessions for merch purchases."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from agentfails.core.errors import CheckoutError
from agentfails.core.settings import settings

logger = logging.getLogger(__name__)

CHECKOUT_SESSIONS_PATH = "/v1/checkout/sessions"


class CheckoutClient:
    """Create checkout sessions through the card-payment provider's REST API."""

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self._transport = transport

    def build_form(self, size: str, wallet: str | None = None) -> dict[str, str]:
        """Return the url-encoded form fields for a one-shirt checkout session.

        Raises:
            CheckoutError: If the size has no configured variant.
        """
        variant_id = settings.printify_variant_ids.get(size)
        if variant_id is None:
            raise CheckoutError(f"Invalid size: {size}")

        form: dict[str, str] = {
            "mode": "payment",
            "line_items[0][price]": settings.stripe_price_id,
            "line_items[0][quantity]": "1",
            "metadata[size]": size,
            "metadata[printify_product_id]": settings.printify_product_id,
            "metadata[printify_variant_id]": str(variant_id),
            "success_url": settings.checkout_success_url,
            "cancel_url": settings.checkout_cancel_url,
        }
        for index, country in enumerate(settings.shipping_countries):
            form[f"shipping_address_collection[allowed_countries][{index}]"] = country
        if wallet:
            form["metadata[wallet_address]"] = wallet.strip()
        return form

    def create_session(self, size: str, wallet: str | None = None) -> str:
        """Create a checkout session and return its hosted URL.

        Raises:
            CheckoutError: If the provider is not configured or rejects the request.
        """
        if not settings.stripe_secret_key:
            raise CheckoutError("Stripe not configured")

        form = self.build_form(size, wallet)
        try:
            with httpx.Client(
                base_url=settings.stripe_api_base,
                timeout=httpx.Timeout(settings.provider_http_timeout_seconds),
                transport=self._transport,
            ) as client:
                response = client.post(
                    CHECKOUT_SESSIONS_PATH,
                    data=form,
                    headers={"Authorization": f"Bearer {settings.stripe_secret_key}"},
                )
        except httpx.HTTPError as exc:
            logger.error("Checkout request failed: %s", exc)
            raise CheckoutError("Failed to create checkout session") from exc

        try:
            data: dict[str, Any] = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400 or not data.get("url"):
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            logger.error("Checkout provider error %s: %s", response.status_code, message or response.text)
            raise CheckoutError(message or "Failed to create checkout session")

        return str(data["url"])


def get_checkout_client() -> CheckoutClient:
    """Return a checkout client using the default transport."""
    return CheckoutClient()
