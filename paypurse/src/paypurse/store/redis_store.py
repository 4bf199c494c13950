"""
Redis-backed coin store.

Key schema, per owner address A:
- ``u:A``            sorted set, members ``<txid>.<vout>`` scored by value
- ``lock:<outpoint>`` reservation, value = acquisition unix time, SET NX EX
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from paypurse.constants import UTXO_KEY_PREFIX
from paypurse.errors import StoreError
from paypurse.store.base import CoinStore
from paypurse.wallet.models import Coin, Outpoint


def _decode(member: Any) -> str:
    return member.decode() if isinstance(member, bytes) else str(member)


class RedisCoinStore(CoinStore):
    def __init__(self, client: Redis, address: str):
        self.client = client
        self.address = address
        self.utxo_key = UTXO_KEY_PREFIX + address

    @classmethod
    def from_url(cls, url: str, address: str) -> RedisCoinStore:
        """Create a store from a redis:// connection URL"""
        try:
            client = Redis.from_url(url, decode_responses=True)
        except ValueError as e:
            raise StoreError(f"Invalid redis URL: {e}") from e
        return cls(client, address)

    async def insert(self, outpoint: Outpoint, value: int) -> None:
        try:
            await self.client.zadd(self.utxo_key, {str(outpoint): value})
        except RedisError as e:
            logger.error(f"Failed to insert {outpoint}: {e}")
            raise StoreError(f"Failed to insert {outpoint}: {e}") from e

    async def remove(self, outpoint: Outpoint) -> None:
        try:
            await self.client.zrem(self.utxo_key, str(outpoint))
        except RedisError as e:
            logger.error(f"Failed to remove {outpoint}: {e}")
            raise StoreError(f"Failed to remove {outpoint}: {e}") from e

    async def top_by_value(self, limit: int) -> list[Coin]:
        if limit <= 0:
            return []
        try:
            results = await self.client.zrange(
                self.utxo_key, 0, limit - 1, desc=True, withscores=True
            )
        except RedisError as e:
            logger.error(f"Failed to read coins for {self.address}: {e}")
            raise StoreError(f"Failed to read coins: {e}") from e

        coins = []
        for member, score in results:
            try:
                outpoint = Outpoint.from_string(_decode(member))
            except ValueError as e:
                raise StoreError(f"Corrupt store member in {self.utxo_key}: {e}") from e
            coins.append(Coin(outpoint=outpoint, value=int(score)))
        return coins

    async def clear(self) -> None:
        try:
            await self.client.delete(self.utxo_key)
        except RedisError as e:
            logger.error(f"Failed to clear {self.utxo_key}: {e}")
            raise StoreError(f"Failed to clear coins: {e}") from e

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        try:
            created = await self.client.set(key, value, nx=True, ex=ttl_seconds)
        except RedisError as e:
            logger.error(f"Failed to set {key}: {e}")
            raise StoreError(f"Failed to set {key}: {e}") from e
        return bool(created)

    async def close(self) -> None:
        await self.client.aclose()
