"""Access policy for every mutating action.

Each ``decide_*`` method inspects membership and the pricing phase and returns
a :class:`Decision` saying whether the action is free or must be paid for.
Unregistered wallets are rejected by raising :class:`MembershipRequiredError`.
:meth:`AccessPolicy.settle` then turns a "pay" decision plus an optional proof
into a verified, claimed payment or a structured challenge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from sqlalchemy.orm import Session

from agentfails.core.errors import (
    MembershipRequiredError,
    PaymentAlreadyUsedError,
    PaymentInvalidError,
    PaymentRequiredError,
)
from agentfails.core.settings import settings
from agentfails.models.member import (
    MEMBERSHIP_ANONS_HOLDER,
    MEMBERSHIP_EARLY_ADOPTER,
    MEMBERSHIP_PAID,
    MEMBERSHIP_SHIRT_BUYER,
)
from agentfails.services.membership import (
    MembershipResolver,
    MembershipState,
    get_membership_resolver,
)
from agentfails.services.payments import (
    PaymentVerification,
    PaymentVerifier,
    build_payment_challenge,
    get_payment_verifier,
)
from agentfails.services.phase import Phase, current_phase
from agentfails.services.replay import (
    ACTION_COMMENT,
    ACTION_POST,
    ACTION_SIGNUP,
    ReplayGuard,
    get_replay_guard,
)

logger = logging.getLogger(__name__)

# Classes that never pay the per-post fee. NFT holders are exempt only while
# they still hold the NFT, which is checked live.
POST_FEE_EXEMPT_CLASSES: Final[frozenset[str]] = frozenset(
    {MEMBERSHIP_SHIRT_BUYER, MEMBERSHIP_EARLY_ADOPTER}
)

OUTCOME_FREE = "free"
OUTCOME_PAY = "pay"
OUTCOME_EXISTING = "existing"


@dataclass(frozen=True)
class Decision:
    """Outcome of an access-policy check."""

    action: str
    outcome: str
    reason: str
    amount: int | None = None
    grant: str | None = None
    membership: MembershipState | None = None

    @property
    def requires_payment(self) -> bool:
        return self.outcome == OUTCOME_PAY


@dataclass(frozen=True)
class SettledPayment:
    """A verified payment proof that has been claimed for one action."""

    action: str
    proof: str
    amount: int
    payer: str | None


class AccessPolicy:
    """Decide whether signup, post, comment and vote requests may proceed."""

    def __init__(
        self,
        resolver: MembershipResolver | None = None,
        verifier: PaymentVerifier | None = None,
        replay_guard: ReplayGuard | None = None,
    ) -> None:
        self.resolver = resolver or get_membership_resolver()
        self.verifier = verifier or get_payment_verifier()
        self.replay_guard = replay_guard or get_replay_guard()

    # --- decisions ------------------------------------------------------------------
    def decide_vote(self, db: Session, wallet: str) -> Decision:
        """Voting is free for members and closed to everyone else."""
        state = self.resolver.resolve(db, wallet)
        if not state.is_member:
            raise MembershipRequiredError(state.wallet, self.signup_challenge())
        return Decision(
            action="vote",
            outcome=OUTCOME_FREE,
            reason="member vote",
            membership=state,
        )

    def decide_comment(self) -> Decision:
        """Every comment pays the comment fee, members included."""
        return Decision(
            action=ACTION_COMMENT,
            outcome=OUTCOME_PAY,
            reason="comments require a payment",
            amount=settings.comment_usdc_amount,
        )

    async def decide_signup(self, db: Session, wallet: str, phase: Phase | None = None) -> Decision:
        """Decide how a wallet may join.

        Order: existing member, live NFT holder, early-access window, paid.
        """
        state = self.resolver.resolve(db, wallet)
        if state.is_member:
            return Decision(
                action=ACTION_SIGNUP,
                outcome=OUTCOME_EXISTING,
                reason="already a member",
                membership=state,
            )

        if await self.resolver.holds_exemption_nft(state.wallet):
            return Decision(
                action=ACTION_SIGNUP,
                outcome=OUTCOME_FREE,
                reason="exemption NFT holder",
                grant=MEMBERSHIP_ANONS_HOLDER,
                membership=state,
            )

        phase = phase or current_phase(db)
        if phase.is_early_access:
            return Decision(
                action=ACTION_SIGNUP,
                outcome=OUTCOME_FREE,
                reason="early access",
                grant=MEMBERSHIP_EARLY_ADOPTER,
                membership=state,
            )

        return Decision(
            action=ACTION_SIGNUP,
            outcome=OUTCOME_PAY,
            reason="signup requires a payment",
            amount=settings.signup_usdc_amount,
            grant=MEMBERSHIP_PAID,
            membership=state,
        )

    async def decide_post(
        self,
        db: Session,
        wallet: str | None,
        phase: Phase | None = None,
    ) -> Decision:
        """Decide whether a post is free or must pay the per-post fee.

        Raises:
            PaymentRequiredError: If ``wallet`` is given but is not a member; the
                challenge asks for the signup payment.
        """
        if wallet is None:
            return Decision(
                action=ACTION_POST,
                outcome=OUTCOME_PAY,
                reason="agent submissions pay per post",
                amount=settings.post_usdc_amount,
            )

        state = self.resolver.resolve(db, wallet)
        if not state.is_member:
            raise PaymentRequiredError(
                *build_payment_challenge(
                    ACTION_SIGNUP,
                    settings.signup_usdc_amount,
                    "Membership required: sign up before posting",
                )
            )

        phase = phase or current_phase(db)
        if phase.is_early_access:
            return Decision(
                action=ACTION_POST,
                outcome=OUTCOME_FREE,
                reason="early access",
                membership=state,
            )

        if state.membership_type in POST_FEE_EXEMPT_CLASSES:
            return Decision(
                action=ACTION_POST,
                outcome=OUTCOME_FREE,
                reason=f"{state.membership_type} exemption",
                membership=state,
            )

        if await self.resolver.holds_exemption_nft(state.wallet):
            return Decision(
                action=ACTION_POST,
                outcome=OUTCOME_FREE,
                reason="exemption NFT holder",
                membership=state,
            )

        return Decision(
            action=ACTION_POST,
            outcome=OUTCOME_PAY,
            reason="posting fee applies after the early-access window",
            amount=settings.post_usdc_amount,
            membership=state,
        )

    # --- payments ---------------------------------------------------------------------
    def signup_challenge(self) -> dict[str, object]:
        """Return the 402 body describing the signup payment."""
        body, _ = build_payment_challenge(
            ACTION_SIGNUP,
            settings.signup_usdc_amount,
            "Membership required",
        )
        return body

    def challenge(self, decision: Decision) -> PaymentRequiredError:
        """Build the payment-required error for a "pay" decision."""
        amount = decision.amount or 0
        return PaymentRequiredError(
            *build_payment_challenge(
                decision.action,
                amount,
                f"Payment required: {decision.reason}",
            )
        )

    async def settle(
        self,
        db: Session,
        decision: Decision,
        proof: str | None,
        wallet: str | None = None,
    ) -> SettledPayment:
        """Verify and claim a payment proof for a "pay" decision.

        The claim is inserted in the caller's transaction; committing the gated
        write commits the claim with it.

        Raises:
            PaymentRequiredError: No proof supplied.
            PaymentAlreadyUsedError: Proof already backs an action of this class.
            PaymentInvalidError: Proof failed verification or could not be verified.
        """
        if not proof or not proof.strip():
            raise self.challenge(decision)

        proof = proof.strip()
        amount = decision.amount or 0
        if self.replay_guard.is_used(db, decision.action, proof):
            raise PaymentAlreadyUsedError(decision.action, proof)

        verification: PaymentVerification = await self.verifier.verify_usdc_payment(proof, amount)
        if not verification.ok:
            logger.info(
                "Rejected %s payment %s (%s): %s",
                decision.action,
                proof,
                verification.status.value,
                verification.reason,
            )
            raise PaymentInvalidError(f"Payment verification failed: {verification.reason}")

        self.replay_guard.claim(db, decision.action, proof, wallet or verification.payer)
        return SettledPayment(
            action=decision.action,
            proof=proof,
            amount=verification.amount or amount,
            payer=verification.payer,
        )


def get_access_policy() -> AccessPolicy:
    """Return an access policy wired to the shared services."""
    return AccessPolicy()
