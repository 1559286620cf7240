"""Domain exceptions raised by the policy and payment services.

The API layer maps each of these onto the response contract in ``main.py``.
"""

from __future__ import annotations

from typing import Any


class AgentFailsError(Exception):
    """Base class for all service-level failures."""


class PaymentRequiredError(AgentFailsError):
    """Raised when an action needs a payment proof that was not supplied."""

    def __init__(self, challenge: dict[str, Any], header: dict[str, Any]) -> None:
        super().__init__(challenge.get("error", "Payment required"))
        self.challenge = challenge
        self.header = header


class MembershipRequiredError(AgentFailsError):
    """Raised when an action is reserved for registered members."""

    def __init__(self, wallet: str | None, signup_challenge: dict[str, Any] | None = None) -> None:
        super().__init__("Membership required")
        self.wallet = wallet
        self.signup_challenge = signup_challenge


class PaymentInvalidError(AgentFailsError):
    """Raised when a supplied payment proof does not verify."""


class PaymentAlreadyUsedError(PaymentInvalidError):
    """Raised when a payment proof already backs an accepted action."""

    def __init__(self, action: str, proof: str) -> None:
        super().__init__("This payment tx has already been used")
        self.action = action
        self.proof = proof


class SignatureVerificationError(AgentFailsError):
    """Raised when a webhook signature cannot be authenticated."""


class ChainRPCError(AgentFailsError):
    """Raised when the chain JSON-RPC endpoint fails or returns an error."""

    def __init__(self, message: str, code: int | None = None, method: str | None = None) -> None:
        self.code = code
        self.method = method
        super().__init__(f"RPC error [{code}] in {method}: {message}" if code else message)


class CheckoutError(AgentFailsError):
    """Raised when a hosted checkout session cannot be created."""


class FulfillmentError(AgentFailsError):
    """Raised when the print-on-demand provider rejects an order."""
