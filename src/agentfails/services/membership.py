"""Membership lookups and live NFT-holder exemption checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agentfails.core.errors import ChainRPCError
from agentfails.core.settings import settings
from agentfails.models import Member
from agentfails.services.chain import ChainClient, get_chain_client, normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipState:
    """Stored membership of a wallet at decision time."""

    wallet: str
    member: Member | None

    @property
    def is_member(self) -> bool:
        return self.member is not None

    @property
    def membership_type(self) -> str | None:
        return self.member.membership_type if self.member is not None else None


class MembershipResolver:
    """Resolve wallets to membership records and current NFT custody."""

    def __init__(
        self,
        chain: ChainClient | None = None,
        *,
        nft_address: str | None = None,
    ) -> None:
        self._chain = chain or get_chain_client()
        self.nft_address = nft_address or settings.anons_nft_address

    def resolve(self, db: Session, wallet: str) -> MembershipState:
        """Return the stored membership for a wallet (case-insensitive)."""
        normalized = normalize_address(wallet)
        member = db.query(Member).filter(Member.wallet_address == normalized).first()
        return MembershipState(wallet=normalized, member=member)

    async def holds_exemption_nft(self, wallet: str) -> bool:
        """Return True if the wallet currently holds the exemption NFT.

        Any RPC failure is treated as "not a holder" so a broken node never
        grants free access.
        """
        try:
            balance = await self._chain.balance_of(self.nft_address, normalize_address(wallet))
        except ChainRPCError as exc:
            logger.warning("NFT balance check failed for %s: %s", wallet, exc)
            return False
        return balance > 0


def get_membership_resolver() -> MembershipResolver:
    """Return a membership resolver bound to the shared chain client."""
    return MembershipResolver()
