# tests/conftest.py
from __future__ import annotations

import json
from collections.abc import Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from agentfails.api.v1.dependencies import get_chain_client_dep, get_holder_cache_dep
from agentfails.core.settings import settings
from agentfails.db.session import Base, enable_sqlite_savepoints
from agentfails.db.session import get_db as app_get_session
from agentfails.main import app as fastapi_app
from agentfails.models import Member, Post
from agentfails.models.member import MEMBERSHIP_PAID
from agentfails.services.chain import TRANSFER_TOPIC, ChainClient, ChainConfig
from agentfails.services.holder_cache import HolderCache
from agentfails.services.phase import record_post

TEST_DB_URL = "sqlite://"

MEMBER_WALLET = "0x00000000000000000000000000000000000000ab"
OTHER_WALLET = "0x00000000000000000000000000000000000000cd"
STRANGER_WALLET = "0x0000000000000000000000000000000000000abc"

_TX_COUNTER = count(1)
_POST_COUNTER = count(1)


def make_tx_hash() -> str:
    """Return a fresh, well-formed transaction hash."""
    return "0x" + f"{next(_TX_COUNTER):064x}"


def _address_topic(address: str) -> str:
    return "0x" + address.lower().removeprefix("0x").rjust(64, "0")


class FakeChain:
    """In-memory Base node answering the JSON-RPC calls the app makes."""

    def __init__(self) -> None:
        self.receipts: dict[str, dict[str, Any]] = {}
        self.balances: dict[tuple[str, str], int] = {}
        self.calls: list[str] = []
        self.fail = False
        self.reply: Any = None

    def pay(
        self,
        amount: int,
        *,
        payer: str = MEMBER_WALLET,
        to: str | None = None,
        token: str | None = None,
        status: str = "0x1",
        tx_hash: str | None = None,
    ) -> str:
        """Record a mined USDC transfer and return its hash."""
        tx_hash = tx_hash or make_tx_hash()
        self.receipts[tx_hash.lower()] = {
            "transactionHash": tx_hash,
            "status": status,
            "logs": [
                {
                    "address": token or settings.usdc_address,
                    "topics": [
                        TRANSFER_TOPIC,
                        _address_topic(payer),
                        _address_topic(to or settings.payment_collector),
                    ],
                    "data": "0x" + f"{amount:064x}",
                }
            ],
        }
        return tx_hash

    def set_balance(self, contract: str, owner: str, balance: int) -> None:
        self.balances[(contract.lower(), owner.lower())] = balance

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        params = body["params"]
        self.calls.append(method)
        if self.fail:
            return httpx.Response(503, text="node unavailable")
        if self.reply is not None:
            return httpx.Response(200, json=self.reply)

        if method == "eth_getTransactionReceipt":
            result: Any = self.receipts.get(params[0].lower())
        elif method == "eth_call":
            call = params[0]
            owner = "0x" + call["data"][-40:]
            result = hex(self.balances.get((call["to"].lower(), owner.lower()), 0))
        else:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "method not found"}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def chain_client(fake_chain: FakeChain) -> ChainClient:
    return ChainClient(
        config=ChainConfig(rpc_url="http://rpc.test", timeout_seconds=5.0),
        transport=httpx.MockTransport(fake_chain.handler),
    )


@pytest.fixture()
def holder_cache() -> Iterator[HolderCache]:
    HolderCache.clear_local()
    yield HolderCache(client=None)
    HolderCache.clear_local()


@pytest.fixture(autouse=True)
def override_chain_dependencies(
    app: FastAPI,
    chain_client: ChainClient,
    holder_cache: HolderCache,
) -> Iterator[None]:
    """Route every chain lookup through the in-memory node."""
    app.dependency_overrides[get_chain_client_dep] = lambda: chain_client
    app.dependency_overrides[get_holder_cache_dep] = lambda: holder_cache
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_chain_client_dep, None)
        app.dependency_overrides.pop(get_holder_cache_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def free_threshold(monkeypatch: pytest.MonkeyPatch) -> int:
    """Use a small early-access window so tests can cross it."""
    monkeypatch.setattr(settings, "free_threshold", 3)
    return 3


@pytest.fixture()
def make_member(db_session: Session):
    def _make(wallet: str = MEMBER_WALLET, membership_type: str = MEMBERSHIP_PAID) -> Member:
        member = Member(
            wallet_address=wallet.lower(),
            membership_type=membership_type,
            payment_amount="0.00",
            payment_currency="USDC",
        )
        db_session.add(member)
        db_session.flush()
        return member

    return _make


@pytest.fixture()
def make_post(db_session: Session):
    base_time = datetime(2026, 1, 1, tzinfo=UTC)

    def _make(
        *,
        agent: str = "claude",
        upvotes: int = 0,
        title: str | None = None,
        minutes: int | None = None,
    ) -> Post:
        index = next(_POST_COUNTER)
        record_post(db_session)
        post = Post(
            title=title or f"Fail #{index}",
            image_url=f"https://img.test/{index}.png",
            source_link=f"https://x.test/{index}",
            agent=agent,
            fail_type="hallucination",
            submitter_wallet=MEMBER_WALLET,
            upvote_count=upvotes,
            created_at=base_time + timedelta(minutes=index if minutes is None else minutes),
        )
        db_session.add(post)
        db_session.flush()
        return post

    return _make


@pytest.fixture()
def post_payload() -> dict[str, Any]:
    return {
        "title": "Claude insisted the file existed",
        "caption": "It did not.",
        "image_url": "https://img.test/fail.png",
        "source_link": "https://x.test/status/1",
        "agent_name": "Claude",
        "fail_type": "hallucination",
    }


def make_checkout_event(
    session_id: str = "cs_test_1",
    *,
    wallet: str | None = MEMBER_WALLET,
    with_address: bool = True,
) -> dict[str, Any]:
    """Build a completed-checkout webhook event for a medium shirt."""
    metadata: dict[str, Any] = {
        "size": "M",
        "printify_product_id": settings.printify_product_id,
        "printify_variant_id": str(settings.printify_variant_ids["M"]),
    }
    if wallet:
        metadata["wallet_address"] = wallet
    session: dict[str, Any] = {
        "id": session_id,
        "metadata": metadata,
        "customer_details": {"email": "buyer@example.com"},
    }
    if with_address:
        session["collected_information"] = {
            "shipping_details": {
                "name": "Ada Lovelace",
                "address": {
                    "country": "GB",
                    "state": "London",
                    "line1": "12 St James's Sq",
                    "line2": None,
                    "city": "London",
                    "postal_code": "SW1Y 4JH",
                },
            }
        }
    return {"type": "checkout.session.completed", "data": {"object": session}}


class FakeProvider:
    """Records requests to a REST provider and answers with a fixed response."""

    def __init__(self, status_code: int = 200, body: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)
