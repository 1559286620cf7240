# src/agentfails/api/v1/endpoints/merch.py
"""Merch checkout and payment-completion webhook."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException, Request, status

from agentfails.core.errors import CheckoutError
from agentfails.core.settings import settings
from agentfails.schemas.merch import CheckoutRequest, CheckoutResponse
from agentfails.services.payments import verify_webhook_signature

from ..dependencies import CheckoutClientDep, FulfillmentServiceDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/merch", tags=["merch"])


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(data: CheckoutRequest, checkout: CheckoutClientDep) -> CheckoutResponse:
    """Start a hosted checkout for one shirt."""
    if data.size not in settings.printify_variant_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid size")
    try:
        url = checkout.create_session(data.size, data.wallet)
    except CheckoutError as err:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create checkout session",
        ) from err
    return CheckoutResponse(url=url)


@router.post("/webhook")
async def checkout_webhook(
    request: Request,
    db: SessionDep,
    fulfillment: FulfillmentServiceDep,
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
) -> dict[str, bool]:
    """Receive payment-completion notifications.

    Redelivered events are acknowledged without repeating side effects.
    """
    payload = await request.body()
    verify_webhook_signature(payload, stripe_signature, settings.stripe_webhook_secret)

    try:
        event = json.loads(payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body") from err
    if not isinstance(event, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event must be a JSON object")

    fulfillment.handle_event(db, event)
    db.commit()
    return {"received": True}
