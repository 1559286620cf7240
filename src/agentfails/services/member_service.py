"""Service helpers for creating member records."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agentfails.models import Member
from agentfails.models.member import MEMBERSHIP_PAID, MEMBERSHIP_SHIRT_BUYER
from agentfails.services.chain import is_address, normalize_address
from agentfails.services.payments import PAYMENT_CURRENCY, format_usdc
from agentfails.services.policy import AccessPolicy

logger = logging.getLogger(__name__)


def create_member(
    db: Session,
    wallet: str,
    membership_type: str,
    *,
    payment_tx_hash: str | None = None,
    payment_amount: int | None = None,
) -> Member:
    """Insert a member row in the caller's transaction.

    Raises:
        IntegrityError: If the wallet (or payment proof) is already recorded.
    """
    member = Member(
        wallet_address=normalize_address(wallet),
        membership_type=membership_type,
        payment_tx_hash=payment_tx_hash.strip().lower() if payment_tx_hash else None,
        payment_amount=format_usdc(payment_amount) if payment_amount else "0.00",
        payment_currency=PAYMENT_CURRENCY,
    )
    with db.begin_nested():
        db.add(member)
    return member


def grant_shirt_membership(db: Session, wallet: str) -> Member | None:
    """Make a wallet a ``shirt_buyer`` member unless it already is a member.

    Existing members keep their class. Returns the member row, or None when the
    wallet is not a valid address.
    """
    if not is_address(wallet.strip()):
        logger.warning("Invalid wallet address, skipping shirt membership: %s", wallet)
        return None

    normalized = normalize_address(wallet)
    existing = db.query(Member).filter(Member.wallet_address == normalized).first()
    if existing is not None:
        return existing

    try:
        member = create_member(db, normalized, MEMBERSHIP_SHIRT_BUYER)
    except IntegrityError:
        return db.query(Member).filter(Member.wallet_address == normalized).first()
    logger.info("Shirt member registered: %s", normalized)
    return member


async def register_member(
    db: Session,
    *,
    policy: AccessPolicy,
    wallet: str,
    tx_hash: str | None,
) -> tuple[Member, bool]:
    """Sign a wallet up according to the access policy.

    Returns:
        ``(member, created)``; ``created`` is False when the wallet was already
        a member, including when a concurrent request registered it first.

    Raises:
        PaymentRequiredError: No free path applies and no proof was supplied.
        PaymentInvalidError: The proof was rejected or already used.
    """
    decision = await policy.decide_signup(db, wallet)
    if decision.membership is not None and decision.membership.member is not None:
        return decision.membership.member, False

    settled = None
    if decision.requires_payment:
        settled = await policy.settle(db, decision, tx_hash, wallet=wallet)

    try:
        member = create_member(
            db,
            wallet,
            decision.grant or MEMBERSHIP_PAID,
            payment_tx_hash=settled.proof if settled else None,
            payment_amount=settled.amount if settled else None,
        )
    except IntegrityError:
        existing = db.query(Member).filter(Member.wallet_address == normalize_address(wallet)).first()
        if existing is None:
            raise
        return existing, False

    logger.info("Member %s joined as %s", member.wallet_address, member.membership_type)
    return member, True
