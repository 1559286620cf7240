"""Short-lived cache for the read-only NFT-holder hint endpoint."""

from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Any

import redis

from agentfails.core.settings import settings

logger = logging.getLogger(__name__)

_CACHE_LOCK = Lock()
_BALANCE_CACHE: dict[str, tuple[int, float]] = {}


def _prune_expired(now: float) -> None:
    # Caller holds _CACHE_LOCK.
    expired = [key for key, (_, expiry) in _BALANCE_CACHE.items() if expiry < now]
    for key in expired:
        del _BALANCE_CACHE[key]


class HolderCache:
    """Cache NFT balances per (contract, wallet).

    Backed by Redis when a client is available; falls back to an in-process
    cache once Redis fails.
    """

    def __init__(self, client: Any | None = None, ttl_seconds: int | None = None) -> None:
        self._redis = client
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.holder_cache_seconds

    @staticmethod
    def _key(contract: str, wallet: str) -> str:
        return f"holder:{contract.lower()}:{wallet.lower()}"

    def get(self, contract: str, wallet: str) -> int | None:
        """Return a cached balance, or None on a miss."""
        key = self._key(contract, wallet)
        if self._redis is not None:
            try:
                value = self._redis.get(key)
                return int(value) if value is not None else None
            except redis.RedisError as exc:
                logger.warning("Redis unavailable for holder cache, using memory: %s", exc)
                self._redis = None

        now = time.time()
        with _CACHE_LOCK:
            entry = _BALANCE_CACHE.get(key)
            if entry is None:
                return None
            balance, expiry = entry
            if expiry < now:
                _BALANCE_CACHE.pop(key, None)
                return None
            return balance

    def set(self, contract: str, wallet: str, balance: int) -> None:
        """Store a balance for ``ttl_seconds``."""
        if self.ttl_seconds <= 0:
            return
        key = self._key(contract, wallet)
        if self._redis is not None:
            try:
                self._redis.set(key, int(balance), ex=int(self.ttl_seconds))
                return
            except redis.RedisError as exc:
                logger.warning("Redis unavailable for holder cache, using memory: %s", exc)
                self._redis = None

        now = time.time()
        with _CACHE_LOCK:
            _prune_expired(now)
            _BALANCE_CACHE[key] = (int(balance), now + self.ttl_seconds)

    @staticmethod
    def clear_local() -> None:
        """Drop every in-process entry."""
        with _CACHE_LOCK:
            _BALANCE_CACHE.clear()


class _HolderCacheSingleton:
    """Singleton wrapper for HolderCache."""

    _instance: HolderCache | None = None

    @classmethod
    def get_instance(cls) -> HolderCache:
        if cls._instance is None:
            client = redis.from_url(settings.redis_url) if settings.redis_url else None
            cls._instance = HolderCache(client=client)
        return cls._instance


def get_holder_cache() -> HolderCache:
    """Return the shared holder cache."""
    return _HolderCacheSingleton.get_instance()
