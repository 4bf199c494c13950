"""
Coin store implementations.

- RedisCoinStore: shared store for any number of processes (sorted set + SET NX)
- MemoryCoinStore: single-process store with an in-memory expiring lock table
"""

from paypurse.store.base import CoinStore
from paypurse.store.memory import MemoryCoinStore
from paypurse.store.redis_store import RedisCoinStore

__all__ = [
    "CoinStore",
    "MemoryCoinStore",
    "RedisCoinStore",
]
