# src/agentfails/api/v1/endpoints/holders.py
"""Read-only NFT holder hint for the submit UI."""

import logging

from fastapi import APIRouter, HTTPException, Query, Response, status

from agentfails.core.errors import ChainRPCError
from agentfails.core.settings import settings
from agentfails.schemas.merch import HolderCheckResponse
from agentfails.services.chain import is_address, normalize_address

from ..dependencies import ChainClientDep, HolderCacheDep, set_cache_headers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/holders", tags=["holders"])


@router.get("/check", response_model=HolderCheckResponse)
async def check_holder(
    response: Response,
    chain: ChainClientDep,
    cache: HolderCacheDep,
    wallet: str = Query(..., description="Wallet to check"),
) -> HolderCheckResponse:
    """Report whether a wallet holds the collection NFT.

    This is a UI hint only; gating decisions never read it.
    """
    if not is_address(wallet.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="wallet query param must be a valid 0x address",
        )

    wallet = normalize_address(wallet)
    contract = settings.lobster_nft_address
    balance = cache.get(contract, wallet)
    if balance is None:
        try:
            balance = await chain.balance_of(contract, wallet)
        except ChainRPCError as exc:
            logger.error("Holder check failed for %s: %s", wallet, exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to check NFT balance",
            ) from exc
        cache.set(contract, wallet, balance)

    set_cache_headers(response, settings.holder_cache_seconds)
    return HolderCheckResponse(is_holder=balance > 0, balance=balance)
