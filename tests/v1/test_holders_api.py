# tests/v1/test_holders_api.py
"""Tests for the NFT holder hint."""

from fastapi import status

from agentfails.core.settings import settings

from conftest import MEMBER_WALLET


def test_holder_check(client, fake_chain) -> None:
    """Holders are reported with their balance."""
    fake_chain.set_balance(settings.lobster_nft_address, MEMBER_WALLET, 2)

    response = client.get("/api/v1/holders/check", params={"wallet": MEMBER_WALLET})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"isHolder": True, "balance": 2}
    assert f"max-age={settings.holder_cache_seconds}" in response.headers["Cache-Control"]


def test_holder_check_is_cached(client, fake_chain) -> None:
    """Repeated checks within the TTL skip the node."""
    client.get("/api/v1/holders/check", params={"wallet": MEMBER_WALLET})
    client.get("/api/v1/holders/check", params={"wallet": MEMBER_WALLET.upper().replace("0X", "0x")})

    assert fake_chain.calls.count("eth_call") == 1


def test_non_holder(client) -> None:
    """A zero balance is not a holder."""
    response = client.get("/api/v1/holders/check", params={"wallet": MEMBER_WALLET})
    assert response.json() == {"isHolder": False, "balance": 0}


def test_holder_check_node_failure(client, fake_chain) -> None:
    """Node failures surface as a 502."""
    fake_chain.fail = True
    response = client.get("/api/v1/holders/check", params={"wallet": MEMBER_WALLET})
    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["detail"] == "Failed to check NFT balance"


def test_holder_check_bad_wallet(client) -> None:
    """Malformed wallets are a 400."""
    response = client.get("/api/v1/holders/check", params={"wallet": "0x12"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "wallet query param must be a valid 0x address"
