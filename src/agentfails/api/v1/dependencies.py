"""Shared API dependencies for payment gating and common functionality."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Response, status
from sqlalchemy.orm import Session

from agentfails.core.settings import settings
from agentfails.db.session import get_db
from agentfails.models import Post
from agentfails.services.chain import ChainClient, get_chain_client
from agentfails.services.checkout import CheckoutClient, get_checkout_client
from agentfails.services.fulfillment import FulfillmentService, get_fulfillment_service
from agentfails.services.holder_cache import HolderCache, get_holder_cache
from agentfails.services.membership import MembershipResolver
from agentfails.services.payments import PaymentVerifier
from agentfails.services.policy import AccessPolicy
from agentfails.services.replay import get_replay_guard

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_chain_client_dep() -> ChainClient:
    """Return the shared chain JSON-RPC client."""
    return get_chain_client()


ChainClientDep = Annotated[ChainClient, Depends(get_chain_client_dep)]


def get_access_policy_dep(chain: ChainClientDep) -> AccessPolicy:
    """Return an access policy whose chain lookups go through ``chain``."""
    return AccessPolicy(
        resolver=MembershipResolver(chain),
        verifier=PaymentVerifier(chain),
        replay_guard=get_replay_guard(),
    )


def get_holder_cache_dep() -> HolderCache:
    """Return the shared holder-hint cache."""
    return get_holder_cache()


def get_checkout_client_dep() -> CheckoutClient:
    """Return the hosted checkout client."""
    return get_checkout_client()


def get_fulfillment_service_dep() -> FulfillmentService:
    """Return the merch fulfillment service."""
    return get_fulfillment_service()


AccessPolicyDep = Annotated[AccessPolicy, Depends(get_access_policy_dep)]
HolderCacheDep = Annotated[HolderCache, Depends(get_holder_cache_dep)]
CheckoutClientDep = Annotated[CheckoutClient, Depends(get_checkout_client_dep)]
FulfillmentServiceDep = Annotated[FulfillmentService, Depends(get_fulfillment_service_dep)]

# Payment proof (transaction hash) attached by x402-style clients.
PaymentProofDep = Annotated[str | None, Header(alias="X-Payment")]


def get_post_or_404(db: Session, post_id: int) -> Post:
    """Return the post or raise a 404."""
    post = db.get(Post, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def set_cache_headers(response: Response, seconds: int | None = None) -> None:
    """Mark a read response as publicly cacheable for a short time."""
    max_age = settings.feed_cache_seconds if seconds is None else seconds
    response.headers["Cache-Control"] = f"public, max-age={max_age}, s-maxage={max_age}"
