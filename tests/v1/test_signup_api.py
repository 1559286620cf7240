# tests/v1/test_signup_api.py
"""Tests for membership signup and lookup endpoints."""

import json

import pytest
from fastapi import status

from agentfails.core.settings import settings

from conftest import MEMBER_WALLET, OTHER_WALLET, STRANGER_WALLET

pytestmark = pytest.mark.usefixtures("free_threshold")


def _fill_early_access(make_post) -> None:
    for _ in range(3):
        make_post()


def test_signup_free_during_early_access(client) -> None:
    """Wallets join for free while the site is below the threshold."""
    response = client.post("/api/v1/signup", json={"wallet_address": STRANGER_WALLET})

    assert response.status_code == status.HTTP_201_CREATED
    member = response.json()["member"]
    assert member["wallet_address"] == STRANGER_WALLET
    assert member["membership_type"] == "early_adopter"
    assert member["payment_amount"] == "0.00"


def test_signup_requires_payment_after_threshold(client, make_post) -> None:
    """Without a proof the caller receives a structured payment challenge."""
    _fill_early_access(make_post)

    response = client.post("/api/v1/signup", json={"wallet_address": STRANGER_WALLET})

    assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED
    body = response.json()
    assert body["x402Version"] == 1
    accepts = body["accepts"][0]
    assert accepts["amount"] == str(settings.signup_usdc_amount)
    assert accepts["payTo"] == settings.payment_collector
    header = json.loads(response.headers["X-Payment-Required"])
    assert header["amount"] == str(settings.signup_usdc_amount)
    assert header["currency"] == "USDC"


def test_signup_with_payment(client, make_post, fake_chain) -> None:
    """A verified transfer of the signup price creates a paid member."""
    _fill_early_access(make_post)
    tx_hash = fake_chain.pay(settings.signup_usdc_amount, payer=STRANGER_WALLET)

    response = client.post(
        "/api/v1/signup",
        json={"wallet_address": STRANGER_WALLET, "tx_hash": tx_hash},
    )

    assert response.status_code == status.HTTP_201_CREATED
    member = response.json()["member"]
    assert member["membership_type"] == "paid"
    assert member["payment_amount"] == "2.00"
    assert member["payment_tx_hash"] == tx_hash.lower()


def test_signup_payment_cannot_be_reused(client, make_post, fake_chain) -> None:
    """One transfer backs exactly one signup."""
    _fill_early_access(make_post)
    tx_hash = fake_chain.pay(settings.signup_usdc_amount, payer=STRANGER_WALLET)

    first = client.post("/api/v1/signup", json={"wallet_address": STRANGER_WALLET, "tx_hash": tx_hash})
    second = client.post("/api/v1/signup", json={"wallet_address": OTHER_WALLET, "tx_hash": tx_hash})

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "already been used" in second.json()["detail"]


def test_signup_underpayment_rejected(client, make_post, fake_chain) -> None:
    """A transfer below the price is rejected with a reason."""
    _fill_early_access(make_post)
    tx_hash = fake_chain.pay(settings.signup_usdc_amount - 1, payer=STRANGER_WALLET)

    response = client.post("/api/v1/signup", json={"wallet_address": STRANGER_WALLET, "tx_hash": tx_hash})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert "insufficient amount" in response.json()["detail"]


def test_signup_nft_holder_after_threshold(client, make_post, fake_chain) -> None:
    """NFT holders join for free in any phase."""
    _fill_early_access(make_post)
    fake_chain.set_balance(settings.anons_nft_address, STRANGER_WALLET, 1)

    response = client.post("/api/v1/signup", json={"wallet_address": STRANGER_WALLET})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["member"]["membership_type"] == "anons_holder"


def test_signup_existing_member(client, make_member) -> None:
    """Signing up twice returns the existing record."""
    make_member(MEMBER_WALLET, "shirt_buyer")

    response = client.post("/api/v1/signup", json={"wallet_address": MEMBER_WALLET.upper().replace("0X", "0x")})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["member"]["membership_type"] == "shirt_buyer"


@pytest.mark.parametrize(
    ("payload", "detail"),
    [
        ({}, "wallet_address is required"),
        ({"wallet_address": ""}, "wallet_address is required"),
        ({"wallet_address": "0x123"}, "wallet_address must be a valid 0x address"),
    ],
)
def test_signup_validation(client, payload, detail) -> None:
    """Malformed signups are rejected with a field-level message."""
    response = client.post("/api/v1/signup", json=payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == detail


def test_get_member(client, make_member) -> None:
    """Lookup is case-insensitive."""
    make_member(MEMBER_WALLET)

    response = client.get(f"/api/v1/members/{MEMBER_WALLET.upper().replace('0X', '0x')}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["member"]["wallet_address"] == MEMBER_WALLET


def test_get_member_not_found(client) -> None:
    """Unknown wallets are a 404."""
    response = client.get(f"/api/v1/members/{STRANGER_WALLET}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_get_member_bad_address(client) -> None:
    """Malformed wallets are a 400."""
    response = client.get("/api/v1/members/not-a-wallet")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_early_access_signup_survives_malformed_node_reply(client, fake_chain) -> None:
    """A garbled NFT lookup counts as "not a holder" and early access still applies."""
    fake_chain.reply = {"jsonrpc": "2.0", "id": 1, "error": "rate limited"}

    response = client.post("/api/v1/signup", json={"wallet_address": STRANGER_WALLET})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["member"]["membership_type"] == "early_adopter"
