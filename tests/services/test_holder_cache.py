# tests/services/test_holder_cache.py
from unittest.mock import MagicMock, patch

import redis

from agentfails.services.holder_cache import _BALANCE_CACHE, HolderCache

CONTRACT = "0xC9CDED1749AE3A46BD4870115816037B82B24143"
WALLET = "0x00000000000000000000000000000000000000AB"


def test_memory_cache_roundtrip(holder_cache: HolderCache) -> None:
    assert holder_cache.get(CONTRACT, WALLET) is None
    holder_cache.set(CONTRACT, WALLET, 2)
    assert holder_cache.get(CONTRACT.lower(), WALLET.lower()) == 2


def test_memory_entries_expire(holder_cache: HolderCache) -> None:
    with patch("agentfails.services.holder_cache.time.time", return_value=1000.0):
        holder_cache.set(CONTRACT, WALLET, 1)
    with patch("agentfails.services.holder_cache.time.time", return_value=1000.0 + holder_cache.ttl_seconds + 1):
        assert holder_cache.get(CONTRACT, WALLET) is None


def test_zero_ttl_disables_caching(holder_cache: HolderCache) -> None:
    cache = HolderCache(client=None, ttl_seconds=0)
    cache.set(CONTRACT, WALLET, 1)
    assert cache.get(CONTRACT, WALLET) is None


def test_uses_redis_with_ttl(holder_cache: HolderCache) -> None:
    client = MagicMock()
    client.get.return_value = b"3"
    cache = HolderCache(client=client, ttl_seconds=60)

    cache.set(CONTRACT, WALLET, 3)
    assert cache.get(CONTRACT, WALLET) == 3

    key = f"holder:{CONTRACT.lower()}:{WALLET.lower()}"
    client.set.assert_called_once_with(key, 3, ex=60)
    client.get.assert_called_once_with(key)


def test_falls_back_to_memory_when_redis_fails(holder_cache: HolderCache) -> None:
    client = MagicMock()
    client.set.side_effect = redis.ConnectionError("down")
    cache = HolderCache(client=client, ttl_seconds=60)

    cache.set(CONTRACT, WALLET, 4)

    assert cache.get(CONTRACT, WALLET) == 4
    client.get.assert_not_called()


def test_expired_entries_are_pruned_on_write(holder_cache: HolderCache) -> None:
    with patch("agentfails.services.holder_cache.time.time", return_value=1000.0):
        for index in range(5):
            holder_cache.set(CONTRACT, f"0x{index:040x}", index)
    assert len(_BALANCE_CACHE) == 5

    with patch("agentfails.services.holder_cache.time.time", return_value=1000.0 + holder_cache.ttl_seconds + 1):
        holder_cache.set(CONTRACT, WALLET, 1)

    assert list(_BALANCE_CACHE) == [f"holder:{CONTRACT.lower()}:{WALLET.lower()}"]
