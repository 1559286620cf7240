"""Payment verification for on-chain USDC transfers and hosted checkout webhooks."""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from agentfails.core.errors import ChainRPCError, SignatureVerificationError
from agentfails.core.settings import settings
from agentfails.services.chain import (
    TRANSFER_TOPIC,
    ChainClient,
    get_chain_client,
    is_tx_hash,
    normalize_address,
    topic_to_address,
)

logger = logging.getLogger(__name__)

X402_VERSION = 1
PAYMENT_SCHEME = "exact"
PAYMENT_CURRENCY = "USDC"

_ACTION_DESCRIPTIONS = {
    "signup": "Agent Fails lifetime membership",
    "post": "Agent Fails post submission",
    "comment": "Agent Fails comment",
}


class VerificationStatus(str, Enum):
    """Outcome of a payment verification attempt."""

    VERIFIED = "verified"
    INVALID = "invalid"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class PaymentVerification:
    """Result of verifying a payment proof."""

    status: VerificationStatus
    payer: str | None = None
    amount: int | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        """Only a verified outcome may back a gated write."""
        return self.status is VerificationStatus.VERIFIED

    @classmethod
    def invalid(cls, reason: str) -> PaymentVerification:
        return cls(status=VerificationStatus.INVALID, reason=reason)

    @classmethod
    def indeterminate(cls, reason: str) -> PaymentVerification:
        return cls(status=VerificationStatus.INDETERMINATE, reason=reason)


def format_usdc(amount: int, decimals: int | None = None) -> str:
    """Render base units as a two-decimal string, e.g. ``2000000 -> "2.00"``."""
    scale = Decimal(10) ** (decimals if decimals is not None else settings.usdc_decimals)
    return f"{Decimal(amount) / scale:.2f}"


def normalize_proof(proof: str) -> str:
    """Return the canonical form of a payment proof used for replay checks."""
    return proof.strip().lower()


class PaymentVerifier:
    """Confirm that a transaction paid the collector enough USDC."""

    def __init__(
        self,
        chain: ChainClient | None = None,
        *,
        token_address: str | None = None,
        collector: str | None = None,
    ) -> None:
        self._chain = chain or get_chain_client()
        self.token_address = normalize_address(token_address or settings.usdc_address)
        self.collector = normalize_address(collector or settings.payment_collector)

    async def verify_usdc_payment(self, tx_hash: str, expected_amount: int) -> PaymentVerification:
        """Verify a USDC transfer of at least ``expected_amount`` to the collector.

        Args:
            tx_hash: Transaction hash supplied by the client.
            expected_amount: Minimum amount in USDC base units.

        Returns:
            A verified result carrying the payer address, an invalid result with a
            human-readable reason, or an indeterminate result when the RPC node
            could not be reached.
        """
        tx_hash = tx_hash.strip()
        if not is_tx_hash(tx_hash):
            return PaymentVerification.invalid("malformed transaction hash")

        try:
            receipt = await self._chain.get_transaction_receipt(tx_hash)
        except ChainRPCError as exc:
            logger.warning("Receipt lookup failed for %s: %s", tx_hash, exc)
            return PaymentVerification.indeterminate("payment could not be verified right now")

        if not receipt:
            return PaymentVerification.invalid("transaction not found or not yet mined")
        if not isinstance(receipt, dict):
            logger.warning("Unexpected receipt shape for %s: %r", tx_hash, receipt)
            return PaymentVerification.indeterminate("payment could not be verified right now")

        if str(receipt.get("status", "")).lower() not in ("0x1", "1"):
            return PaymentVerification.invalid("transaction reverted")

        logs = receipt.get("logs")
        transfer = self._find_transfer(logs if isinstance(logs, list) else [])
        if transfer is None:
            return PaymentVerification.invalid("no USDC transfer to the payment collector")

        payer, amount = transfer
        if amount < expected_amount:
            return PaymentVerification.invalid(
                f"insufficient amount: expected {format_usdc(expected_amount)} USDC, "
                f"got {format_usdc(amount)} USDC"
            )

        return PaymentVerification(
            status=VerificationStatus.VERIFIED,
            payer=payer,
            amount=amount,
        )

    def _find_transfer(self, logs: list[dict[str, Any]]) -> tuple[str, int] | None:
        """Return (payer, amount) of the largest matching Transfer log, if any."""
        best: tuple[str, int] | None = None
        for entry in logs:
            if not isinstance(entry, dict):
                continue
            if normalize_address(str(entry.get("address", ""))) != self.token_address:
                continue
            topics = entry.get("topics") or []
            if len(topics) < 3 or str(topics[0]).lower() != TRANSFER_TOPIC:
                continue
            if topic_to_address(str(topics[2])) != self.collector:
                continue
            try:
                amount = int(str(entry.get("data") or "0x0"), 16)
            except ValueError:
                continue
            if best is None or amount > best[1]:
                best = (topic_to_address(str(topics[1])), amount)
        return best


def compute_webhook_signature(payload: bytes, secret: str, timestamp: int) -> str:
    """Return the hex HMAC-SHA256 signature for a webhook payload."""
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def verify_webhook_signature(
    payload: bytes,
    header: str | None,
    secret: str | None,
    *,
    tolerance_seconds: int | None = None,
    now: float | None = None,
) -> int:
    """Authenticate a ``t=<ts>,v1=<sig>`` webhook signature header.

    Returns:
        The signed timestamp.

    Raises:
        SignatureVerificationError: If the header is missing, malformed, stale
            or does not match any ``v1`` signature.
    """
    if not secret:
        raise SignatureVerificationError("Webhook secret is not configured")
    if not header:
        raise SignatureVerificationError("Missing signature header")

    timestamp: int | None = None
    signatures: list[str] = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError as exc:
                raise SignatureVerificationError("Malformed signature timestamp") from exc
        elif key == "v1":
            signatures.append(value)

    if timestamp is None or not signatures:
        raise SignatureVerificationError("Malformed signature header")

    expected = compute_webhook_signature(payload, secret, timestamp)
    if not any(hmac.compare_digest(expected.encode(), sig.encode()) for sig in signatures):
        raise SignatureVerificationError("Signature mismatch")

    tolerance = (
        tolerance_seconds
        if tolerance_seconds is not None
        else settings.stripe_webhook_tolerance_seconds
    )
    current = time.time() if now is None else now
    if tolerance > 0 and abs(current - timestamp) > tolerance:
        raise SignatureVerificationError("Signature timestamp outside tolerance")

    return timestamp


def build_payment_challenge(action: str, amount: int, error: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Build the 402 body and the machine-readable header summary for an action."""
    requirement = {
        "scheme": PAYMENT_SCHEME,
        "network": settings.chain_network,
        "currency": PAYMENT_CURRENCY,
        "amount": str(amount),
        "payTo": settings.payment_collector,
        "tokenAddress": settings.usdc_address,
        "description": _ACTION_DESCRIPTIONS.get(action, action),
    }
    body = {
        "x402Version": X402_VERSION,
        "accepts": [requirement],
        "error": error,
    }
    header = {
        "amount": str(amount),
        "currency": PAYMENT_CURRENCY,
        "payTo": settings.payment_collector,
        "network": settings.chain_network,
        "tokenAddress": settings.usdc_address,
        "version": str(X402_VERSION),
    }
    return body, header


def get_payment_verifier() -> PaymentVerifier:
    """Return a payment verifier bound to the shared chain client."""
    return PaymentVerifier()
