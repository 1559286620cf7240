"""JSON-RPC client for the Base chain.

Only the handful of calls the write path needs are implemented: transaction
receipts for payment verification and ERC-20/ERC-721 ``balanceOf`` reads for
NFT-holder exemptions.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from itertools import count
from typing import Any

import httpx

from agentfails.core.errors import ChainRPCError
from agentfails.core.settings import settings

# keccak256("balanceOf(address)")[:4]
BALANCE_OF_SELECTOR = "0x70a08231"
# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_address(value: str | None) -> bool:
    """Return True if the value is a 20-byte hex address."""
    return value is not None and _ADDRESS_RE.match(value) is not None


def is_tx_hash(value: str | None) -> bool:
    """Return True if the value is a 32-byte hex transaction hash."""
    return value is not None and _TX_HASH_RE.match(value) is not None


def normalize_address(value: str) -> str:
    """Return the lower-cased form of an address."""
    return value.strip().lower()


def topic_to_address(topic: str) -> str:
    """Extract the address stored in the low 20 bytes of a log topic."""
    return "0x" + topic[-40:].lower()


def encode_address_arg(address: str) -> str:
    """ABI-encode an address as a single 32-byte word (no 0x prefix)."""
    return address.lower().removeprefix("0x").rjust(64, "0")


@dataclass(frozen=True)
class ChainConfig:
    """Immutable configuration for chain RPC access."""

    rpc_url: str
    timeout_seconds: float


def load_chain_config() -> ChainConfig:
    """Build configuration object from global settings."""
    return ChainConfig(
        rpc_url=settings.chain_rpc_url,
        timeout_seconds=float(settings.chain_rpc_timeout_seconds),
    )


class ChainClient:
    """Minimal async Ethereum JSON-RPC client."""

    def __init__(
        self,
        config: ChainConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_chain_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()
        self._request_ids = count(1)

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                    headers={"content-type": "application/json"},
                )
        return self._client

    async def call(self, method: str, params: list[Any]) -> Any:
        """Make a JSON-RPC call and return its ``result``.

        Raises:
            ChainRPCError: On network failures, non-2xx responses or RPC errors.
        """
        client = await self._ensure_client()
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._request_ids),
        }
        try:
            response = await client.post(self.config.rpc_url, json=payload)
        except httpx.HTTPError as exc:
            raise ChainRPCError(f"RPC request failed: {exc}", method=method) from exc

        if response.status_code >= 400:
            raise ChainRPCError(
                f"RPC endpoint responded with {response.status_code}",
                method=method,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ChainRPCError("RPC endpoint returned invalid JSON", method=method) from exc
        if not isinstance(body, dict):
            raise ChainRPCError("RPC endpoint returned a non-object response", method=method)

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise ChainRPCError(
                    str(error.get("message", "unknown error")),
                    code=error.get("code"),
                    method=method,
                )
            raise ChainRPCError(str(error), method=method)
        return body.get("result")

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        """Return the receipt for a mined transaction, or None if unknown/pending."""
        result = await self.call("eth_getTransactionReceipt", [tx_hash])
        if result is not None and not isinstance(result, dict):
            raise ChainRPCError(
                f"Unexpected receipt result: {result!r}",
                method="eth_getTransactionReceipt",
            )
        return result

    async def balance_of(self, contract: str, owner: str) -> int:
        """Return ``balanceOf(owner)`` for an ERC-20 or ERC-721 contract."""
        data = BALANCE_OF_SELECTOR + encode_address_arg(owner)
        result = await self.call("eth_call", [{"to": contract, "data": data}, "latest"])
        if not result or result == "0x":
            return 0
        try:
            return int(result, 16)
        except (TypeError, ValueError) as exc:
            raise ChainRPCError(f"Unexpected balanceOf result: {result!r}", method="eth_call") from exc

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _ChainClientSingleton:
    """Singleton wrapper for ChainClient."""

    _instance: ChainClient | None = None

    @classmethod
    def get_instance(cls) -> ChainClient:
        """Get or create the singleton ChainClient instance."""
        if cls._instance is None:
            cls._instance = ChainClient()
        return cls._instance


def get_chain_client() -> ChainClient:
    """Return a singleton chain client instance."""
    return _ChainClientSingleton.get_instance()
