"""Replay protection for payment proofs."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import FlushError

from agentfails.core.errors import PaymentAlreadyUsedError
from agentfails.models import PaymentClaim
from agentfails.services.payments import normalize_proof

logger = logging.getLogger(__name__)

ACTION_SIGNUP = "signup"
ACTION_POST = "post"
ACTION_COMMENT = "comment"


class ReplayGuard:
    """Ensure a payment proof backs at most one accepted action per class.

    Each action class (signup, post, comment) has its own namespace; the same
    proof may back one signup and one post, but never two posts.
    """

    def is_used(self, db: Session, action: str, proof: str) -> bool:
        """Return True if the proof already backs an action of this class."""
        return (
            db.query(PaymentClaim)
            .filter(
                PaymentClaim.action == action,
                PaymentClaim.proof == normalize_proof(proof),
            )
            .first()
            is not None
        )

    def claim(self, db: Session, action: str, proof: str, wallet: str | None = None) -> PaymentClaim:
        """Atomically record a proof as used within the caller's transaction.

        The insert is flushed inside a savepoint so that a unique violation
        only discards the claim, not the caller's pending work.

        Raises:
            PaymentAlreadyUsedError: If the proof was claimed concurrently or earlier.
        """
        claim = PaymentClaim(action=action, proof=normalize_proof(proof), wallet=wallet)
        try:
            with db.begin_nested():
                db.add(claim)
        except (IntegrityError, FlushError) as exc:
            logger.info("Rejected replayed %s payment %s", action, claim.proof)
            raise PaymentAlreadyUsedError(action, claim.proof) from exc
        return claim


def get_replay_guard() -> ReplayGuard:
    """Return a replay guard instance."""
    return ReplayGuard()
