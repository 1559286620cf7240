# src/agentfails/api/v1/endpoints/signup.py
"""Membership endpoints for the Agent Fails API."""

from fastapi import APIRouter, HTTPException, Response, status

from agentfails.models import Member
from agentfails.schemas.member import MemberResponse, SignupRequest
from agentfails.services.chain import is_address, normalize_address
from agentfails.services.member_service import register_member

from ..dependencies import AccessPolicyDep, SessionDep

router = APIRouter(tags=["members"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    response: Response,
    db: SessionDep,
    policy: AccessPolicyDep,
) -> dict[str, MemberResponse]:
    """Register a wallet as a member.

    NFT holders and early-access wallets join for free; everyone else supplies
    the transaction hash of the signup payment. An existing member is returned
    with 200.
    """
    member, created = await register_member(
        db,
        policy=policy,
        wallet=data.wallet_address,
        tx_hash=data.tx_hash,
    )
    if created:
        db.commit()
        db.refresh(member)
    else:
        response.status_code = status.HTTP_200_OK
    return {"member": MemberResponse.model_validate(member)}


@router.get("/members/{wallet}")
async def get_member(wallet: str, db: SessionDep) -> dict[str, MemberResponse]:
    """Look up the membership of a wallet."""
    if not is_address(wallet.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="wallet must be a valid 0x address",
        )
    member = db.query(Member).filter(Member.wallet_address == normalize_address(wallet)).first()
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return {"member": MemberResponse.model_validate(member)}
