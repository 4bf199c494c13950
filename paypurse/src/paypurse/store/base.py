"""
Base coin store interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from paypurse.wallet.models import Coin, Outpoint


class CoinStore(ABC):
    """
    Persistent outpoint -> value inventory for one owner, plus the
    create-if-absent primitive reservations are built on.

    Every operation is atomic on its own and immediately visible to all
    callers. There are no multi-key transactions.
    """

    @abstractmethod
    async def insert(self, outpoint: Outpoint, value: int) -> None:
        """Add or overwrite a coin"""

    @abstractmethod
    async def remove(self, outpoint: Outpoint) -> None:
        """Remove a coin; removing an absent coin is a no-op"""

    @abstractmethod
    async def top_by_value(self, limit: int) -> list[Coin]:
        """Up to ``limit`` coins, highest value first"""

    @abstractmethod
    async def clear(self) -> None:
        """Drop the whole inventory"""

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Create ``key`` with an expiry unless it exists. True if created."""

    async def total_value(self, limit: int) -> tuple[int, int]:
        """(sum, count) over the same top-N window used for selection"""
        coins = await self.top_by_value(limit)
        return sum(coin.value for coin in coins), len(coins)

    async def close(self) -> None:
        """Close store connection"""
        pass
